from PyQt6.QtCore import QEvent, QPointF, Qt
from PyQt6.QtGui import QMouseEvent
from PyQt6.QtWidgets import QApplication

from conftest import FakeSink
from kmotion.session import StudioSession
from kmotion.ui.main_window import MainWindow


def _window(qtbot, tmp_path):
    sink = FakeSink()
    session = StudioSession(sink=sink, export_dir=tmp_path, settle_ms=10)
    sink.playback = session.playback
    win = MainWindow(session)
    qtbot.addWidget(win)
    win.show()
    win.chart.setFocus()
    return win


def test_keyboard_adds_bars_and_locks_fields(qtbot, tmp_path):
    win = _window(qtbot, tmp_path)
    assert win.side.timeframe.isEnabled()

    qtbot.keyClick(win, Qt.Key.Key_Up)
    qtbot.keyClick(win, Qt.Key.Key_Down)

    assert len(win.session.series) == 2
    assert win.player.counter.text() == "002 / 002"
    assert win.side.count_lbl.text() == "2 bougies"
    assert not win.side.timeframe.isEnabled()

    win.side.clear_btn.click()
    assert win.player.counter.text() == "000 / 000"
    assert win.side.timeframe.isEnabled()


def test_arrows_typed_in_a_field_do_not_add_bars(qtbot, tmp_path):
    win = _window(qtbot, tmp_path)
    win.side.tabs.setCurrentIndex(1)   # Graphique
    win.side.symbol.setFocus()
    qtbot.keyClick(win.side.symbol, Qt.Key.Key_Up)
    qtbot.keyClick(win.side.symbol, Qt.Key.Key_Down)
    assert len(win.session.series) == 0

    win.chart.setFocus()
    qtbot.keyClick(win, Qt.Key.Key_Up)
    assert len(win.session.series) == 1

def test_space_toggles_playback(qtbot, tmp_path):
    win = _window(qtbot, tmp_path)
    win.add_bar("bull")
    win.add_bar("bull")
    qtbot.keyClick(win, Qt.Key.Key_Space)
    assert win.session.playback.is_playing
    assert win.session.current_frame == 0
    qtbot.keyClick(win, Qt.Key.Key_Space)
    assert not win.session.playback.is_playing


def test_player_bar_seeks(qtbot, tmp_path):
    win = _window(qtbot, tmp_path)
    for _ in range(5):
        win.add_bar("bear")
    win.player.reset_btn.click()
    assert win.session.current_frame == 0
    win.player.next_btn.click()
    assert win.session.current_frame == 1
    win.player.end_btn.click()
    assert win.session.current_frame == 5
    win.player.slider.setValue(2)
    assert win.session.current_frame == 2


def test_config_edit_redraws_chart(qtbot, tmp_path):
    win = _window(qtbot, tmp_path)
    win.side.symbol.setText("ETH/USD")
    win.side.symbol.editingFinished.emit()
    assert win.session.config.symbol == "ETH/USD"
    win.resize(800, 600)
    assert not win.chart.grab().isNull()


def test_recording_disables_controls(qtbot, tmp_path):
    win = _window(qtbot, tmp_path)
    win.add_bar("bull")
    win.export_video()
    assert not win.side.video_btn.isEnabled()
    assert not win.player.play_btn.isEnabled()
    with qtbot.waitSignal(win.session.exporter.recordingChanged, timeout=5000):
        pass
    assert win.side.video_btn.isEnabled()


def _move(widget, x, y):
    ev = QMouseEvent(QEvent.Type.MouseMove, QPointF(x, y), widget.mapToGlobal(QPointF(x, y)),
                     Qt.MouseButton.NoButton, Qt.MouseButton.NoButton, Qt.KeyboardModifier.NoModifier)
    QApplication.sendEvent(widget, ev)


def test_hover_tooltip_tracks_visible_bars(qtbot, tmp_path):
    win = _window(qtbot, tmp_path)
    win.add_bar("bull")
    win.add_bar("bear")
    chart = win.chart
    first, second = win.session.series.bars

    _move(chart, 12, chart.height() / 2)
    assert chart.hovered_bar is first
    _move(chart, chart.width() - 62, chart.height() / 2)
    assert chart.hovered_bar is second
    assert not chart.grab().isNull()

    # la bougie survolée disparaît quand le curseur recule
    win.session.playback.seek(1)
    assert chart.hovered_bar is None

    _move(chart, chart.width() - 5, chart.height() / 2)
    assert chart.hovered_bar is None


def test_unreadable_start_date_is_reverted(qtbot, tmp_path):
    win = _window(qtbot, tmp_path)
    before = win.session.config.start_date
    win.side.start_date.setText("abc")
    win.side.start_date.editingFinished.emit()
    assert win.session.config.start_date == before
    assert win.side.start_date.text() == before
    win.add_bar("bull")
    assert len(win.session.series) == 1
