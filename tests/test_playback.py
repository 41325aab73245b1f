import pytest

from conftest import make_bars
from kmotion.data.series import BarSeries
from kmotion.player.playback import PlaybackController


@pytest.fixture
def player(series_of):
    series = series_of(10)
    return PlaybackController(series, fps=5)


class TestSeek:

    @pytest.mark.parametrize("n", [0, 1, 10])
    def test_clamps_to_bounds(self, series_of, n):
        pb = PlaybackController(series_of(n))
        pb.seek(-5)
        assert pb.current_frame == 0
        pb.seek(n + 5)
        assert pb.current_frame == n

    def test_step_and_end(self, player):
        player.step(3)
        assert player.current_frame == 3
        player.step(-10)
        assert player.current_frame == 0
        player.seek_end()
        assert player.current_frame == 10

    def test_frame_changed_only_on_change(self, player):
        seen = []
        player.frameChanged.connect(seen.append)
        player.seek(4)
        player.seek(4)
        player.seek(40)
        assert seen == [4, 10]


class TestPlay:

    def test_empty_series_is_noop(self):
        pb = PlaybackController(BarSeries())
        pb.toggle()
        pb.play()
        assert not pb.is_playing

    def test_play_at_end_rewinds(self, player):
        player.seek_end()
        player.play()
        assert player.current_frame == 0
        assert player.is_playing
        player.pause()

    def test_toggle(self, player):
        player.seek(3)
        player.toggle()
        assert player.is_playing and player.current_frame == 3
        player.toggle()
        assert not player.is_playing and player.current_frame == 3

    def test_ticks_stop_exactly_at_end(self, player):
        assert player.interval_ms == 200
        player.play()
        for i in range(1, 10):
            player.tick()
            assert player.current_frame == i
            assert player.is_playing
        player.tick()
        assert player.current_frame == 10
        assert not player.is_playing
        player.tick()
        assert player.current_frame == 10

    def test_pause_is_idempotent(self, player):
        states = []
        player.playingChanged.connect(states.append)
        player.play()
        player.pause()
        player.pause()
        assert states == [True, False]
        assert not player._timer.isActive()

    def test_timer_drives_playback(self, qtbot, player):
        player.set_fps(30)
        player.play()
        qtbot.waitUntil(lambda: not player.is_playing, timeout=3000)
        assert player.current_frame == 10

    def test_fps_choices(self, player):
        player.set_fps(20)
        assert player.interval_ms == 50
        with pytest.raises(ValueError):
            player.set_fps(7)
        with pytest.raises(ValueError):
            PlaybackController(BarSeries(), fps=60)


class TestSeriesCoupling:

    def test_append_at_end_follows_new_bar(self, player):
        extra = make_bars(11)[-1]
        player.seek_end()
        player._series.append(extra)
        assert player.current_frame == 11

    def test_append_elsewhere_keeps_cursor(self, player):
        extra = make_bars(11)[-1]
        player.seek(4)
        player._series.append(extra)
        assert player.current_frame == 4

    def test_no_follow_while_playing(self, player):
        extra = make_bars(11)[-1]
        player.seek_end()
        player.play()  # rembobine -> 0
        player.seek(10)
        player._series.append(extra)
        assert player.current_frame == 10
        player.pause()

    def test_clear_clamps_to_zero(self, player):
        player.seek(7)
        player._series.clear()
        assert player.current_frame == 0

    def test_bulk_load_does_not_auto_advance(self):
        series = BarSeries()
        pb = PlaybackController(series)
        series.load(make_bars(5))
        assert pb.current_frame == 0
