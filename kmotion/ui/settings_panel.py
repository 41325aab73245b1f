# kmotion/ui/settings_panel.py
from __future__ import annotations

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QColorDialog, QComboBox, QDoubleSpinBox, QFormLayout, QHBoxLayout, QLabel,
    QLineEdit, QPushButton, QTabWidget, QVBoxLayout, QWidget
)

from kmotion.data.models import ChartConfig, Direction, Timeframe

TIMEFRAME_LABELS = {
    Timeframe.M1: "1 minute", Timeframe.M5: "5 minutes", Timeframe.M15: "15 minutes",
    Timeframe.M30: "30 minutes", Timeframe.H1: "1 heure", Timeframe.H4: "4 heures",
    Timeframe.D1: "Jour (1D)", Timeframe.W1: "Semaine (1W)", Timeframe.MN1: "Mois (1M)",
}


class ColorButton(QPushButton):
    """Pastille de couleur ; clic -> QColorDialog."""
    colorPicked = pyqtSignal(str)

    def __init__(self, color: str, parent=None):
        super().__init__(parent)
        self.setFixedHeight(28)
        self.set_color(color)
        self.clicked.connect(self._pick)

    def set_color(self, color: str):
        self._color = color
        self.setText(color)
        self.setStyleSheet(f"QPushButton {{ background:{color}; color:#0f172a; font-weight:600; }}")

    def _pick(self):
        c = QColorDialog.getColor(QColor(self._color), self, "Couleur")
        if c.isValid():
            self.set_color(c.name())
            self.colorPicked.emit(c.name())


class SettingsPanel(QWidget):
    """Panneau à onglets : Graphique (style) + Données (série) + Actions (ajout / exports)."""
    configEdited = pyqtSignal(dict)
    addRequested = pyqtSignal(str)          # "bull" | "bear"
    volatilityChanged = pyqtSignal(float)
    clearRequested = pyqtSignal()
    exportVideoRequested = pyqtSignal()
    exportSnapshotRequested = pyqtSignal()
    exportJsonRequested = pyqtSignal()
    importJsonRequested = pyqtSignal()

    def __init__(self, cfg: ChartConfig, volatility: float, parent=None):
        super().__init__(parent)
        self._updating = False
        self._recording = False

        self.tabs = QTabWidget(self)
        self.tabs.setDocumentMode(True)
        self.tabs.setStyleSheet("""
            QTabWidget::pane { border: 1px solid #1f2937; }
            QTabBar::tab {
                background: #0b1220; color: #e5e7eb;
                padding: 6px 12px; border-top-left-radius: 6px; border-top-right-radius: 6px;
            }
            QTabBar::tab:selected { background: #111827; }
        """)

        # ---------- Onglet Graphique ----------
        style = QWidget(); form = QFormLayout(style); form.setContentsMargins(8, 8, 8, 8)
        self.symbol = QLineEdit(cfg.symbol)
        self.title = QLineEdit(cfg.title)
        self.x_label = QLineEdit(cfg.x_axis_label)
        self.y_label = QLineEdit(cfg.y_axis_label)
        self.bull_color = ColorButton(cfg.bull_color)
        self.bear_color = ColorButton(cfg.bear_color)
        form.addRow("Symbole", self.symbol)
        form.addRow("Titre", self.title)
        form.addRow("Couleur hausse", self.bull_color)
        form.addRow("Couleur baisse", self.bear_color)
        form.addRow("Axe X", self.x_label)
        form.addRow("Axe Y", self.y_label)

        # ---------- Onglet Données ----------
        data = QWidget(); dform = QFormLayout(data); dform.setContentsMargins(8, 8, 8, 8)
        self.timeframe = QComboBox()
        for tf, label in TIMEFRAME_LABELS.items():
            self.timeframe.addItem(label, tf.value)
        self.initial_price = QLineEdit(); self.initial_price.setPlaceholderText("100")
        self.start_date = QLineEdit(); self.start_date.setPlaceholderText("YYYY-MM-DD [HH:MM]")
        self.y_min = QLineEdit(); self.y_min.setPlaceholderText("Auto")
        self.y_max = QLineEdit(); self.y_max.setPlaceholderText("Auto")
        self.lock_hint = QLabel("Effacer la série pour modifier ces champs.")
        self.lock_hint.setStyleSheet("QLabel{ color:#9aa4b2; font-size:11px; }")
        dform.addRow("Timeframe", self.timeframe)
        dform.addRow("Prix initial", self.initial_price)
        dform.addRow("Début", self.start_date)
        dform.addRow(self.lock_hint)
        dform.addRow("Y min", self.y_min)
        dform.addRow("Y max", self.y_max)

        # ---------- Onglet Actions ----------
        actions = QWidget(); alay = QVBoxLayout(actions); alay.setContentsMargins(8, 8, 8, 8)
        row = QHBoxLayout()
        self.bull_btn = QPushButton("▲ Hausse")
        self.bear_btn = QPushButton("▼ Baisse")
        self.bull_btn.setToolTip("Flèche haut")
        self.bear_btn.setToolTip("Flèche bas")
        row.addWidget(self.bull_btn); row.addWidget(self.bear_btn)
        alay.addLayout(row)

        vrow = QHBoxLayout()
        vrow.addWidget(QLabel("Amplitude (%)"))
        self.volatility = QDoubleSpinBox()
        self.volatility.setRange(0.1, 10.0); self.volatility.setSingleStep(0.1); self.volatility.setDecimals(1)
        self.volatility.setValue(volatility)
        vrow.addWidget(self.volatility)
        alay.addLayout(vrow)

        self.count_lbl = QLabel("0 bougie")
        self.count_lbl.setStyleSheet("QLabel{ color:#9aa4b2; }")
        alay.addWidget(self.count_lbl)

        self.clear_btn = QPushButton("Effacer")
        self.video_btn = QPushButton("🎬 Exporter la vidéo")
        self.snap_btn = QPushButton("📸 Snapshot PNG")
        self.json_btn = QPushButton("💾 Exporter JSON")
        self.import_btn = QPushButton("📂 Importer JSON")
        for b in (self.clear_btn, self.video_btn, self.snap_btn, self.json_btn, self.import_btn):
            alay.addWidget(b)
        alay.addStretch(1)

        self.tabs.addTab(actions, "Actions")
        self.tabs.addTab(style, "Graphique")
        self.tabs.addTab(data, "Données")

        wrap = QVBoxLayout(self)
        wrap.setContentsMargins(0, 0, 0, 0)
        wrap.addWidget(self.tabs)

        # ---------- Connexions ----------
        for edit in (self.symbol, self.title, self.x_label, self.y_label,
                     self.initial_price, self.start_date, self.y_min, self.y_max):
            edit.editingFinished.connect(self._emit_config)
        self.timeframe.currentIndexChanged.connect(lambda *_: self._emit_config())
        self.bull_color.colorPicked.connect(lambda *_: self._emit_config())
        self.bear_color.colorPicked.connect(lambda *_: self._emit_config())

        self.bull_btn.clicked.connect(lambda: self.addRequested.emit(Direction.BULL.value))
        self.bear_btn.clicked.connect(lambda: self.addRequested.emit(Direction.BEAR.value))
        self.volatility.valueChanged.connect(self.volatilityChanged.emit)
        self.clear_btn.clicked.connect(self.clearRequested.emit)
        self.video_btn.clicked.connect(self.exportVideoRequested.emit)
        self.snap_btn.clicked.connect(self.exportSnapshotRequested.emit)
        self.json_btn.clicked.connect(self.exportJsonRequested.emit)
        self.import_btn.clicked.connect(self.importJsonRequested.emit)

        self.set_config(cfg, locked=False)

    # ---------- API utilisée par MainWindow ----------
    def set_config(self, cfg: ChartConfig, locked: bool):
        self._updating = True
        try:
            for edit, value in ((self.symbol, cfg.symbol), (self.title, cfg.title),
                                (self.x_label, cfg.x_axis_label), (self.y_label, cfg.y_axis_label),
                                (self.initial_price, cfg.initial_price), (self.start_date, cfg.start_date),
                                (self.y_min, cfg.y_min), (self.y_max, cfg.y_max)):
                text = "" if value is None else str(value)
                if edit.text() != text:
                    edit.setText(text)
            self.bull_color.set_color(cfg.bull_color)
            self.bear_color.set_color(cfg.bear_color)
            idx = self.timeframe.findData(cfg.timeframe.value)
            if idx >= 0:
                self.timeframe.setCurrentIndex(idx)
        finally:
            self._updating = False
        self.set_locked(locked)

    def set_locked(self, locked: bool):
        for w in (self.timeframe, self.initial_price, self.start_date):
            w.setEnabled(not locked)
        self.lock_hint.setVisible(locked)

    def set_bar_count(self, n: int):
        self.count_lbl.setText(f"{n} bougie" + ("s" if n > 1 else ""))
        has_data = n > 0
        for b in (self.video_btn, self.snap_btn, self.json_btn):
            b.setEnabled(has_data and not self._recording)

    def set_recording(self, recording: bool):
        self._recording = recording
        for b in (self.video_btn, self.bull_btn, self.bear_btn, self.clear_btn, self.import_btn):
            b.setEnabled(not recording)

    def config_values(self) -> dict:
        return {
            "symbol": self.symbol.text(),
            "title": self.title.text(),
            "x_axis_label": self.x_label.text(),
            "y_axis_label": self.y_label.text(),
            "bull_color": self.bull_color.text(),
            "bear_color": self.bear_color.text(),
            "timeframe": self.timeframe.currentData(),
            "initial_price": self.initial_price.text().strip() or None,
            "start_date": self.start_date.text().strip() or None,
            "y_min": self.y_min.text().strip() or None,
            "y_max": self.y_max.text().strip() or None,
        }

    # ---------- interne ----------
    def _emit_config(self):
        if self._updating:
            return
        self.configEdited.emit(self.config_values())
