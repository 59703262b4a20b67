import asyncio
import logging
import threading

logger = logging.getLogger(__name__)


class AsyncRunner:
    """An asyncio loop running in a daemon thread.

    The Qt main thread owns the window; the car and its timers live on
    this loop. Work is handed over with ``submit``.
    """

    def __init__(self):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, daemon=True)

    def start(self):
        self._thread.start()

    def _run(self):
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def submit(self, coro, on_done=None):
        """Schedule ``coro`` on the loop; ``on_done`` gets its result."""
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)

        def _finished(fut):
            if fut.cancelled():
                return
            error = fut.exception()
            if error is not None:
                logger.error("Task failed: %s", error)
            elif on_done is not None:
                on_done(fut.result())

        future.add_done_callback(_finished)
        return future

    def call(self, coro, timeout=None):
        """Run ``coro`` on the loop and block until it returns."""
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result(timeout)

    def stop(self):
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join(timeout=2)
