# kmotion/ui/player_bar.py
from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QComboBox, QHBoxLayout, QLabel, QSlider, QToolButton, QVBoxLayout, QWidget

from kmotion import config


class PlayerBar(QWidget):
    """Barre de lecture : scrubber, boutons (début / précédent / lecture / suivant / fin), compteur, fps."""
    seekRequested = pyqtSignal(int)
    stepRequested = pyqtSignal(int)
    toggleRequested = pyqtSignal()
    endRequested = pyqtSignal()
    fpsChanged = pyqtSignal(int)

    def __init__(self, fps: int = config.DEFAULT_FPS, parent=None):
        super().__init__(parent)
        self._syncing = False

        self.slider = QSlider(Qt.Orientation.Horizontal)
        self.slider.setRange(0, 0)

        self.reset_btn = QToolButton(); self.reset_btn.setText("⏮"); self.reset_btn.setToolTip("Revenir au début")
        self.prev_btn = QToolButton(); self.prev_btn.setText("◀"); self.prev_btn.setToolTip("Frame précédente")
        self.play_btn = QToolButton(); self.play_btn.setText("▶"); self.play_btn.setToolTip("Lecture / pause (Espace)")
        self.next_btn = QToolButton(); self.next_btn.setText("▶|"); self.next_btn.setToolTip("Frame suivante")
        self.end_btn = QToolButton(); self.end_btn.setText("⏭"); self.end_btn.setToolTip("Dernière frame")
        self.play_btn.setFixedWidth(48)

        self.counter = QLabel("000 / 000")
        self.counter.setStyleSheet("QLabel{ color:#9aa4b2; font-family:'JetBrains Mono', monospace; }")

        self.fps = QComboBox()
        for value in config.FPS_CHOICES:
            self.fps.addItem(f"{value} fps", value)
        self.fps.setCurrentIndex(max(0, self.fps.findData(fps)))

        row = QHBoxLayout()
        for b in (self.reset_btn, self.prev_btn, self.play_btn, self.next_btn, self.end_btn):
            row.addWidget(b)
        row.addStretch(1)
        row.addWidget(self.counter)
        row.addWidget(self.fps)

        lay = QVBoxLayout(self)
        lay.setContentsMargins(12, 8, 12, 8)
        lay.addWidget(self.slider)
        lay.addLayout(row)

        self.slider.valueChanged.connect(self._on_slider)
        self.reset_btn.clicked.connect(lambda: self.seekRequested.emit(0))
        self.prev_btn.clicked.connect(lambda: self.stepRequested.emit(-1))
        self.next_btn.clicked.connect(lambda: self.stepRequested.emit(1))
        self.play_btn.clicked.connect(self.toggleRequested.emit)
        self.end_btn.clicked.connect(self.endRequested.emit)
        self.fps.currentIndexChanged.connect(lambda *_: self.fpsChanged.emit(int(self.fps.currentData())))

    # ---------- API utilisée par MainWindow ----------
    def set_position(self, frame: int, total: int):
        self._syncing = True
        try:
            self.slider.setRange(0, total)
            self.slider.setValue(frame)
        finally:
            self._syncing = False
        self.counter.setText(f"{frame:03d} / {total:03d}")
        self.prev_btn.setEnabled(frame > 0)
        self.next_btn.setEnabled(frame < total)

    def set_playing(self, playing: bool):
        self.play_btn.setText("⏸" if playing else "▶")

    def set_recording(self, recording: bool):
        for w in (self.slider, self.reset_btn, self.prev_btn, self.play_btn, self.next_btn, self.end_btn, self.fps):
            w.setEnabled(not recording)

    def _on_slider(self, value: int):
        if not self._syncing:
            self.seekRequested.emit(value)
