import logging
from pathlib import Path

CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> logging.Logger:
    """Route the ``core`` loggers to the console and, optionally, a file.

    Safe to call more than once: the level is updated, but a handler is only
    added for a destination that has none yet.
    """
    logger = logging.getLogger("core")
    level = getattr(logging, level.upper())
    logger.setLevel(level)

    console = next((h for h in logger.handlers if type(h) is logging.StreamHandler), None)
    if console is None:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        logger.addHandler(console)
    console.setLevel(level)

    if log_file is not None:
        log_file = Path(log_file).resolve()
        known = {h.baseFilename for h in logger.handlers if isinstance(h, logging.FileHandler)}
        if str(log_file) not in known:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            logger.addHandler(file_handler)

    return logger
