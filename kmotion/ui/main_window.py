# kmotion/ui/main_window.py
from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import (
    QAbstractSpinBox, QApplication, QComboBox, QFileDialog, QLabel, QLineEdit, QMainWindow,
    QSizePolicy, QSplitter, QStatusBar, QToolBar, QVBoxLayout, QWidget
)

from kmotion.chart.chart_view import ChartView
from kmotion.data.models import Direction
from kmotion.session import StudioSession
from kmotion.ui.player_bar import PlayerBar
from kmotion.ui.settings_panel import SettingsPanel

DARK_QSS = """
    /* --------- Global --------- */
    QMainWindow, QWidget { background-color:#0e1116; color:#cfd3dc; }
    * { font-family: "Inter", "Segoe UI", system-ui; font-size:13px; }

    /* --------- Toolbar --------- */
    QToolBar { background:#0b1220; border-bottom:1px solid #1f2937; spacing:10px; padding:6px; }
    QComboBox {
    background:#0f172a; color:#e5e7eb; border:1px solid #334155;
    padding:6px 10px; border-radius:999px; /* pill */
    }
    QComboBox::drop-down { border:none; width:0; }
    QComboBox QAbstractItemView { background:#0b1220; color:#e5e7eb; border:1px solid #1f2937; }

    /* Boutons (panneau, lecture, exports) */
    QToolButton, QPushButton {
    background:#111827; color:#e5e7eb; border:1px solid #334155;
    padding:6px 12px; border-radius:10px;
    }
    QToolButton:hover, QPushButton:hover { background:#0b1220; }
    QToolButton:checked { background:#0b1220; border-color:#475569; }
    QToolButton:disabled, QPushButton:disabled { color:#475569; border-color:#1f2937; }

    /* --------- Champs --------- */
    QLineEdit, QDoubleSpinBox {
    background:#0f172a; color:#e5e7eb; border:1px solid #334155; border-radius:6px; padding:4px 6px;
    }
    QLineEdit:disabled { color:#475569; }

    /* --------- Splitter --------- */
    QSplitter::handle { background:#0e1116; width:5px; }
    QSplitter::handle:hover { background:#1f2937; }

    /* --------- Scrubber --------- */
    QSlider::groove:horizontal { height:6px; background:#334155; border-radius:3px; }
    QSlider::sub-page:horizontal { background:#6366f1; border-radius:3px; }
    QSlider::handle:horizontal { background:#ffffff; width:4px; margin:-6px 0; border-radius:2px; }

    /* --------- Badge enregistrement --------- */
    QLabel#RecBadge {
    background:#1f0a0a; border:1px solid #7a1f1f; color:#ff9a9a;
    padding:2px 8px; border-radius:999px;
    }
"""


class MainWindow(QMainWindow):
    def __init__(self, session: StudioSession | None = None):
        super().__init__()
        self.setWindowTitle("K-Motion Studio")
        self.resize(1400, 900)
        self.setStyleSheet(DARK_QSS)

        self.session = session or StudioSession(parent=self)

        # Graphique + barre de lecture
        self.chart = ChartView(self.session)
        self.chart.setFocusPolicy(Qt.FocusPolicy.ClickFocus)
        self.player = PlayerBar(self.session.playback.fps)
        for w in self.player.findChildren(QWidget):
            w.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        left = QWidget(); lv = QVBoxLayout(left); lv.setContentsMargins(0, 0, 0, 0); lv.setSpacing(0)
        lv.addWidget(self.chart, 1)
        lv.addWidget(self.player, 0)

        self.side = SettingsPanel(self.session.config, self.session.volatility)
        self.side.setMinimumWidth(320)
        for b in (self.side.bull_btn, self.side.bear_btn):
            b.setFocusPolicy(Qt.FocusPolicy.NoFocus)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(left)
        splitter.addWidget(self.side)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 1)
        self.setCentralWidget(splitter)
        self._splitter = splitter
        self._saved_sizes_px: list[int] | None = None
        QTimer.singleShot(0, self._apply_initial_splitter_sizes)

        # Toolbar
        tb = QToolBar(); tb.setMovable(False); self.addToolBar(tb)
        logo = QLabel("<b>K-Motion</b> <span style='color:#64748b'>Studio</span>")
        logo.setContentsMargins(4, 0, 10, 0)
        tb.addWidget(logo)

        spacer = QWidget(); spacer.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred); tb.addWidget(spacer)

        self.rec_badge = QLabel("● Enregistrement…")
        self.rec_badge.setObjectName("RecBadge")
        self._rec_action = tb.addWidget(self.rec_badge)
        self._rec_action.setVisible(False)

        self.toggle_side_act = QAction("🎛 Panneau", self, checkable=True)
        self.toggle_side_act.setChecked(True)
        self.toggle_side_act.toggled.connect(self._toggle_side_panel)
        tb.addAction(self.toggle_side_act)

        self.setStatusBar(QStatusBar())

        # ---------- Connexions ----------
        s = self.session
        s.changed.connect(self._sync_player)
        s.configChanged.connect(self._on_config_changed)
        s.playback.playingChanged.connect(self.player.set_playing)
        s.exporter.recordingChanged.connect(self._on_recording)
        s.exporter.exportFinished.connect(lambda path: self._notify(f"🎬 Vidéo exportée : {path}"))
        s.exporter.exportFailed.connect(lambda msg: self._notify(f"❌ Export vidéo impossible : {msg}"))

        self.player.seekRequested.connect(s.playback.seek)
        self.player.stepRequested.connect(s.playback.step)
        self.player.toggleRequested.connect(s.playback.toggle)
        self.player.endRequested.connect(s.playback.seek_end)
        self.player.fpsChanged.connect(s.playback.set_fps)

        self.side.configEdited.connect(self._on_config_edited)
        self.side.addRequested.connect(self.add_bar)
        self.side.volatilityChanged.connect(self._on_volatility)
        self.side.clearRequested.connect(s.clear)
        self.side.exportVideoRequested.connect(self.export_video)
        self.side.exportSnapshotRequested.connect(self.export_snapshot)
        self.side.exportJsonRequested.connect(self.export_json)
        self.side.importJsonRequested.connect(self.import_json)

        self._sync_player()
        self.chart.setFocus()

        app = QApplication.instance()
        if app:
            app.aboutToQuit.connect(self.session.shutdown)

    # ---------- actions ----------
    def add_bar(self, direction: str):
        self.session.add_bar(direction)

    def export_video(self):
        if not self.session.export_video():
            if len(self.session.series) == 0:
                self._notify("Aucune bougie à exporter")

    def export_snapshot(self):
        path = self.session.export_snapshot()
        if path:
            self._notify(f"📸 Snapshot : {path}")

    def export_json(self):
        path = self.session.export_json()
        if path:
            self._notify(f"💾 JSON : {path}")

    def import_json(self):
        path, _ = QFileDialog.getOpenFileName(self, "Importer une série", str(self.session.export_dir), "JSON (*.json)")
        if not path:
            return
        try:
            n = self.session.import_json(path)
        except (OSError, ValueError) as e:
            self._notify(f"❌ Import impossible : {e}")
            return
        self._notify(f"📂 {n} bougies importées")

    # ---------- clavier ----------
    def keyPressEvent(self, e):
        # Raccourcis inactifs pendant la saisie dans un champ
        if isinstance(self.focusWidget(), (QLineEdit, QAbstractSpinBox, QComboBox)):
            super().keyPressEvent(e)
            return
        if e.isAutoRepeat() and e.key() == Qt.Key.Key_Space:
            return
        if e.key() == Qt.Key.Key_Up:
            self.add_bar(Direction.BULL.value)
        elif e.key() == Qt.Key.Key_Down:
            self.add_bar(Direction.BEAR.value)
        elif e.key() == Qt.Key.Key_Space:
            if not self.session.is_recording:
                self.session.playback.toggle()
        else:
            super().keyPressEvent(e)

    # ---------- sync UI ----------
    def _sync_player(self):
        pb = self.session.playback
        self.player.set_position(pb.current_frame, pb.total_frames)
        self.side.set_bar_count(pb.total_frames)
        self.side.set_locked(self.session.locked)

    def _on_config_changed(self, cfg):
        self.side.set_config(cfg, self.session.locked)

    def _on_config_edited(self, values: dict):
        try:
            self.session.update_config(**values)
        except ValueError as e:
            self._notify(f"Réglage invalide : {e}")
            self.side.set_config(self.session.config, self.session.locked)

    def _on_volatility(self, value: float):
        self.session.volatility = value

    def _on_recording(self, recording: bool):
        self._rec_action.setVisible(recording)
        self.player.set_recording(recording)
        self.side.set_recording(recording)
        if recording:
            self._notify("Enregistrement en cours…")
        self._sync_player()

    def _notify(self, msg: str):
        print(msg)
        self.statusBar().showMessage(msg, 6000)

    # ---------- layout ----------
    def _apply_initial_splitter_sizes(self):
        total = max(800, self._splitter.width() or self.width())
        left = int(total * 0.76); right = max(320, total - left)
        self._splitter.setSizes([left, right])

    def _toggle_side_panel(self, checked: bool):
        sizes = self._splitter.sizes()
        if checked:
            if self._saved_sizes_px and sum(self._saved_sizes_px) > 0:
                self._splitter.setSizes(self._saved_sizes_px)
            else:
                self._apply_initial_splitter_sizes()
            self.side.show()
        else:
            self._saved_sizes_px = sizes[:]
            self._splitter.setSizes([sizes[0] + sizes[1], 0])
            self.side.hide()

    # ---------- shutdown ----------
    def closeEvent(self, e):
        self.session.shutdown()
        super().closeEvent(e)
