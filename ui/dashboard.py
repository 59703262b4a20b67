import math

from PyQt6.QtWidgets import (QMainWindow, QLabel, QVBoxLayout, QWidget, QLineEdit,
                             QHBoxLayout, QFrame, QProgressBar, QPushButton)
from PyQt6.QtCore import Qt, pyqtSignal, QTimer, QPointF
from PyQt6.QtGui import QPainter, QColor, QPen

from core import car_state
from core.config import CAR_SETTINGS


class RpmGaugeWidget(QWidget):
    """Analogue rev counter with an overtake glow."""

    def __init__(self, state, settings=CAR_SETTINGS):
        super().__init__()
        self.state = state
        self.settings = settings
        self.needle = 0.0
        self.timer = QTimer(self)
        self.timer.timeout.connect(self.animate)
        self.timer.start(50)
        self.setMinimumSize(280, 280)

    def animate(self):
        # ease the needle towards the real rpm
        self.needle += (self.state.rpm - self.needle) * 0.3
        self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        w, h = self.width(), self.height()
        cx, cy = w / 2, h / 2
        radius = min(w, h) / 2 - 20
        top = self.settings.rpm_max + self.settings.rpm_overtake_boost

        # Dial: 240 degree sweep starting bottom-left
        def point(value, r):
            angle = math.radians(210 - 240 * min(value, top) / top)
            return QPointF(cx + r * math.cos(angle), cy - r * math.sin(angle))

        ring = QColor(255, 80, 0) if self.state.overtake_active else QColor(0, 212, 255)
        painter.setPen(QPen(ring, 4))
        painter.drawEllipse(QPointF(cx, cy), radius, radius)

        for i in range(0, int(top) + 1, 1000):
            color = QColor(255, 60, 60) if i >= self.settings.rpm_max else QColor(200, 200, 200)
            painter.setPen(QPen(color, 3))
            painter.drawLine(point(i, radius - 5), point(i, radius - 20))
            painter.drawText(point(i, radius - 38) - QPointF(6, -5), str(i // 1000))

        painter.setPen(QPen(QColor(255, 255, 255), 4))
        painter.drawLine(QPointF(cx, cy), point(self.needle, radius - 30))

        painter.setPen(QColor(0, 212, 255))
        painter.drawText(int(cx - 40), int(cy + radius / 2), 80, 20,
                         Qt.AlignmentFlag.AlignCenter, f"{int(self.state.rpm)} RPM")


class Dashboard(QMainWindow):
    # Define signals
    command_entered = pyqtSignal(str)
    action_requested = pyqtSignal(str)
    listen_requested = pyqtSignal()

    def __init__(self, state: car_state.CarState, settings=CAR_SETTINGS):
        super().__init__()
        self.state = state
        self.settings = settings
        self.setWindowTitle("Pit Wall")
        self.setMinimumSize(1000, 600)

        self.init_ui()

        # update timer
        self.timer = QTimer()
        self.timer.timeout.connect(self.update_ui)
        self.timer.start(200)

    def init_ui(self):
        central = QWidget()
        self.setCentralWidget(central)

        self.setStyleSheet("""
            QMainWindow {
                background-color: #0f0f1a;
            }
            QLabel {
                color: #00d4ff;
                font-family: 'Segoe UI', sans-serif;
            }
        """)

        top_layout = QVBoxLayout(central)
        top_layout.setContentsMargins(20, 20, 20, 20)
        content_layout = QHBoxLayout()
        top_layout.addLayout(content_layout, 1)

        # Left Panel (Controls)
        left_panel = QFrame()
        left_layout = QVBoxLayout(left_panel)
        left_panel.setStyleSheet("""
            QFrame {
                background-color: rgba(20, 30, 50, 150);
                border: 1px solid #00d4ff;
                border-radius: 15px;
            }
        """)
        label_style = "font-size: 18px; font-weight: bold; color: white; margin-bottom: 10px;"
        left_layout.addWidget(QLabel("CONTROLS", styleSheet=label_style))

        self.engine_btn = self._action_button("ENGINE", "toggle_engine", checkable=True)
        self.drs_btn = self._action_button("DRS", "toggle_drs", checkable=True)
        self.overtake_btn = self._action_button("OVERTAKE", "activate_overtake")
        self.pit_btn = self._action_button("PIT STOP", "perform_pit_stop")
        for btn in (self.engine_btn, self.drs_btn, self.overtake_btn, self.pit_btn):
            left_layout.addWidget(btn)

        left_layout.addSpacing(20)
        left_layout.addWidget(QLabel("FUEL MIX", styleSheet="color: #00ffaa; font-size: 14px; font-weight: bold;"))
        mix_row = QHBoxLayout()
        self.mix_buttons = {}
        for mix in car_state.FuelMix:
            btn = QPushButton(mix.value.upper())
            btn.setCheckable(True)
            btn.setStyleSheet(self.get_btn_style())
            btn.clicked.connect(lambda _, m=mix: self.command_entered.emit(f"{m.value} mix"))
            mix_row.addWidget(btn)
            self.mix_buttons[mix] = btn
        left_layout.addLayout(mix_row)

        left_layout.addStretch()

        self.listen_btn = QPushButton("ACTIVATE RADIO")
        self.listen_btn.setCheckable(True)
        self.listen_btn.setStyleSheet("""
            QPushButton {
                background-color: qlineargradient(x1:0, y1:0, x2:1, y2:0, stop:0 #00d4ff, stop:1 #0055ff);
                color: white;
                font-weight: bold;
                font-size: 16px;
                padding: 15px;
                border: none;
                border-radius: 25px;
            }
            QPushButton:checked {
                background-color: #0044aa;
            }
        """)
        self.listen_btn.clicked.connect(self.manual_listen)
        left_layout.addWidget(self.listen_btn)
        content_layout.addWidget(left_panel, 1)

        # Center Panel (Gauges)
        center_panel = QFrame()
        center_layout = QVBoxLayout(center_panel)
        center_panel.setStyleSheet("background: transparent;")

        self.rpm_gauge = RpmGaugeWidget(self.state, self.settings)
        center_layout.addWidget(self.rpm_gauge, 1, Qt.AlignmentFlag.AlignCenter)

        self.fuel_bar = self._level_bar("#ffaa00")
        self.battery_bar = self._level_bar("#00ffaa")
        center_layout.addWidget(QLabel("FUEL"))
        center_layout.addWidget(self.fuel_bar)
        center_layout.addWidget(QLabel("BATTERY"))
        center_layout.addWidget(self.battery_bar)

        self.tire_label = QLabel()
        self.tire_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.tire_label.setStyleSheet("font-size: 20px; padding: 8px;")
        center_layout.addWidget(self.tire_label)
        content_layout.addWidget(center_panel, 2)

        # Right Panel (Radio Log)
        right_panel = QFrame()
        right_layout = QVBoxLayout(right_panel)
        right_panel.setStyleSheet("background-color: #2a2a2a; border-radius: 10px; padding: 10px;")

        self.status_label = QLabel("Initializing...")
        self.status_label.setStyleSheet("font-size: 14px; color: #ddd; font-family: Consolas;")
        self.status_label.setWordWrap(True)
        self.status_label.setAlignment(Qt.AlignmentFlag.AlignTop | Qt.AlignmentFlag.AlignLeft)
        self.log_lines = []

        right_layout.addWidget(QLabel("Team Radio:"))
        right_layout.addWidget(self.status_label, 1)
        content_layout.addWidget(right_panel, 1)

        # Input Field
        self.text_input = QLineEdit()
        self.text_input.setPlaceholderText("Type a command (e.g., 'start engine', 'box box')...")
        self.text_input.setStyleSheet("padding: 10px; font-size: 16px; background: #333; color: white; border: 1px solid #555; border-radius: 5px; margin-top: 10px;")
        self.text_input.returnPressed.connect(self.handle_text_input)
        top_layout.addWidget(self.text_input)

    def _action_button(self, text, action, checkable=False):
        btn = QPushButton(text)
        btn.setCheckable(checkable)
        btn.setStyleSheet(self.get_btn_style())
        btn.clicked.connect(lambda: self.action_requested.emit(self._resolve(action)))
        return btn

    def _resolve(self, action):
        if action == "toggle_engine":
            return "stop_engine" if self.state.engine_on else "start_engine"
        if action == "toggle_drs":
            return "deactivate_drs" if self.state.drs_on else "activate_drs"
        return action

    def _level_bar(self, color):
        bar = QProgressBar()
        bar.setRange(0, 100)
        bar.setTextVisible(True)
        bar.setStyleSheet(f"""
            QProgressBar {{
                background-color: #111;
                border: 1px solid {color};
                border-radius: 5px;
                text-align: center;
                color: white;
                height: 25px;
            }}
            QProgressBar::chunk {{
                background-color: {color};
            }}
        """)
        return bar

    def get_btn_style(self):
        return """
            QPushButton {
                background-color: rgba(255, 255, 255, 10);
                color: #00d4ff;
                padding: 15px;
                border: 1px solid #0055ff;
                border-radius: 10px;
                font-size: 14px;
                font-weight: bold;
            }
            QPushButton:checked {
                background-color: rgba(0, 212, 255, 50);
                border: 1px solid #00d4ff;
                color: white;
            }
            QPushButton:hover {
                background-color: rgba(0, 212, 255, 20);
            }
        """

    def handle_text_input(self):
        text = self.text_input.text()
        if text:
            self.text_input.clear()
            self.update_voice_status(f"You (Type): {text}")
            self.command_entered.emit(text)

    def manual_listen(self):
        self.listen_requested.emit()

    def update_voice_status(self, text):
        self.log_lines = (self.log_lines + [text])[-12:]
        self.status_label.setText("\n".join(self.log_lines))

    def update_ui(self):
        """Updates UI elements based on car_state."""
        self.engine_btn.setChecked(self.state.engine_on)
        self.engine_btn.setText(f"ENGINE: {'ON' if self.state.engine_on else 'OFF'}")
        self.drs_btn.setChecked(self.state.drs_on)
        self.drs_btn.setText(f"DRS: {'OPEN' if self.state.drs_on else 'CLOSED'}")
        self.overtake_btn.setText("OVERTAKE: ACTIVE" if self.state.overtake_active else "OVERTAKE")
        for mix, btn in self.mix_buttons.items():
            btn.setChecked(self.state.fuel_mix == mix)
        self.listen_btn.setChecked(self.state.is_listening)

        self.fuel_bar.setValue(int(self.state.fuel_level))
        self.fuel_bar.setFormat(f"{self.state.fuel_level:.1f}%" + (" LOW" if self.state.is_low_fuel else ""))
        self.battery_bar.setValue(int(self.state.battery_level))
        self.battery_bar.setFormat(f"{self.state.battery_level:.1f}%" + (" LOW" if self.state.is_low_battery else ""))

        tire = self.state.tire_status
        color = {"Cold": "#3399ff", "Optimal": "#00ffaa", "New": "#ffffff"}[tire.value]
        self.tire_label.setText(f"TIRES: {tire.value.upper()}")
        self.tire_label.setStyleSheet(f"font-size: 20px; padding: 8px; color: {color};")
