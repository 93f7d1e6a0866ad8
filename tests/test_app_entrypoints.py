from types import SimpleNamespace

import numpy as np

import app
from audio_wave import main as app_main
from audio_wave.config import AppConfig, PlayerSettings
from audio_wave.domain.pcm import PcmBuffer
from audio_wave.loading.loader import LoadResult
from audio_wave.loading.sources import resolve_source


class _Root:
    def __init__(self):
        self.titles = []
        self.protocols = {}
        self.after_calls = []
        self.mainloop_calls = 0
        self.destroyed = False

    def title(self, value):
        self.titles.append(value)

    def protocol(self, name, func):
        self.protocols[name] = func

    def after(self, ms, func):
        self.after_calls.append((ms, func))
        return f"after#{len(self.after_calls)}"

    def after_cancel(self, _job_id):
        return None

    def mainloop(self):
        self.mainloop_calls += 1

    def destroy(self):
        self.destroyed = True


class _Player:
    def __init__(self, master, controller):
        self.master = master
        self.controller = controller
        self.packed = None
        self.destroyed = False
        self.canvas = SimpleNamespace(focus_set=lambda: None)

    def pack(self, **kwargs):
        self.packed = kwargs

    def destroy(self):
        self.destroyed = True


class _Loader:
    instances = []

    def __init__(self, logger, *, target_samples, timeout_seconds):
        self.target_samples = target_samples
        self.timeout_seconds = timeout_seconds
        self.loads = []
        _Loader.instances.append(self)

    def load(self, source, *, on_success, on_error, dispatch=None):
        self.loads.append((source, dispatch))
        return None


def _config(tmp_path):
    return AppConfig(
        log_level="INFO",
        file_log_level="DEBUG",
        log_dir=str(tmp_path),
        log_file=str(tmp_path / "test.log"),
        player=PlayerSettings(samples=12, fetch_timeout_seconds=7.0),
    )


def test_main_parses_source_and_launches(monkeypatch):
    launched = []
    monkeypatch.setattr(app, "launch", lambda source: launched.append(source))

    assert app.main(["https://example.com/a.mp3"]) == 0
    assert launched == ["https://example.com/a.mp3"]


def test_package_main_delegates_to_app(monkeypatch):
    monkeypatch.setattr(app, "main", lambda: 3)

    assert app_main.main() == 3


def test_launch_wires_view_loader_and_close_handler(monkeypatch, tmp_path, logger):
    root = _Root()
    players = []
    _Loader.instances = []
    monkeypatch.setattr(app.tk, "Tk", lambda: root)
    monkeypatch.setattr(app, "setup_logging", lambda _config: logger)
    def make_player(master, controller):
        players.append(_Player(master, controller))
        return players[-1]

    monkeypatch.setattr(app, "WaveformPlayer", make_player)
    monkeypatch.setattr(app, "AudioLoader", _Loader)

    app.launch("/tmp/clip.wav", config=_config(tmp_path))

    player = players[0]
    loader = _Loader.instances[0]
    controller = player.controller
    assert root.titles == [app.APP_TITLE]
    assert root.mainloop_calls == 1
    assert player.packed == {"fill": "both", "expand": True}
    assert loader.target_samples == 12
    assert loader.timeout_seconds == 7.0
    assert controller.polling is True
    ((source, dispatch),) = loader.loads
    assert source == "/tmp/clip.wav"

    dispatch(lambda: None)
    assert root.after_calls[-1][0] == 0

    root.protocols["WM_DELETE_WINDOW"]()
    assert controller.torn_down is True
    assert player.destroyed is True
    assert root.destroyed is True


def test_build_controller_creates_clock_from_load_result(monkeypatch, tmp_path, logger):
    created = []

    def fake_create(location, pcm, _logger):
        created.append((location, pcm))
        return None

    monkeypatch.setattr(app, "create_media_clock", fake_create)
    controller = app.build_controller(_Root(), _config(tmp_path), logger)
    pcm = PcmBuffer(np.float32([0.0, 1.0]), 2)
    result = LoadResult(resolve_source("/tmp/clip.wav"), pcm, np.float32([1.0]))
    loader = SimpleNamespace(
        load=lambda source, *, on_success, on_error, dispatch=None: on_success(result)
    )

    controller.load("/tmp/clip.wav", loader)

    ((location, created_pcm),) = created
    assert location == result.source.location
    assert created_pcm is pcm
    assert controller.state.duration == 1.0
    assert controller.clock is None
