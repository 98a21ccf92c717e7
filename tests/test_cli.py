import json
import logging
from datetime import timedelta

from video_feeds import cli
from video_feeds.config import LoggingConfig, WidgetConfig
from video_feeds.errors import UpdateCancelledError
from video_feeds.widget import initial_state


class FakeWidget:
    instances = []

    def __init__(self, config, session=None):
        self.config = config
        self.state = initial_state()
        self.updates = []
        FakeWidget.instances.append(self)

    @property
    def refresh_interval(self):
        return timedelta(minutes=30)

    def update(self, cancel=None, timeout=None):
        self.updates.append(timeout)
        return self.state

    def render(self):
        return "<div>rendered</div>"


def _restore_root_handlers(original_handlers):
    for handler in logging.getLogger().handlers[:]:
        logging.getLogger().removeHandler(handler)
        handler.close()
    for handler in original_handlers:
        logging.getLogger().addHandler(handler)


def test_configure_logging_defaults_to_console_only():
    original_handlers = list(logging.getLogger().handlers)
    try:
        cli.configure_logging("INFO")

        handlers = logging.getLogger().handlers
        assert any(isinstance(handler, logging.StreamHandler) for handler in handlers)
        assert not any(isinstance(handler, logging.FileHandler) for handler in handlers)
    finally:
        _restore_root_handlers(original_handlers)


def test_configure_logging_with_log_file_creates_file_handler(tmp_path):
    original_handlers = list(logging.getLogger().handlers)
    try:
        log_path = tmp_path / "logs" / "custom.log"
        cli.configure_logging("INFO", str(log_path))

        assert log_path.exists()
        handlers = logging.getLogger().handlers
        assert any(isinstance(handler, logging.FileHandler) for handler in handlers)
    finally:
        _restore_root_handlers(original_handlers)


def _install_fakes(monkeypatch, widget_config=None, captured_logging=None):
    FakeWidget.instances = []

    def fake_configure(level, log_file=None):
        if captured_logging is not None:
            captured_logging["level"] = level
            captured_logging["file"] = log_file

    monkeypatch.setattr(cli, "configure_logging", fake_configure)
    monkeypatch.setattr(
        cli, "parse_widget_config", lambda path: widget_config or WidgetConfig()
    )
    monkeypatch.setattr(cli, "VideosWidget", FakeWidget)


def test_main_runs_one_cycle_and_prints_html(monkeypatch, capsys):
    _install_fakes(monkeypatch, WidgetConfig(channels=["UCa"]))

    exit_code = cli.main(["--config", "configs/test.xml", "--timeout", "2"])

    assert exit_code == 0
    widget = FakeWidget.instances[0]
    assert widget.config.channels == ["UCa"]
    assert widget.updates == [2.0]
    assert "<div>rendered</div>" in capsys.readouterr().out


def test_main_prints_json(monkeypatch, capsys):
    _install_fakes(monkeypatch)

    exit_code = cli.main(["--format", "json"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["content_available"] is False
    assert payload["videos"] == []


def test_main_cli_overrides_logging(monkeypatch):
    captured = {}
    _install_fakes(
        monkeypatch,
        WidgetConfig(logging=LoggingConfig(level="INFO", file="config.log")),
        captured_logging=captured,
    )

    cli.main(["--log-level", "DEBUG", "--log-file", "cli.log"])

    assert captured == {"level": "DEBUG", "file": "cli.log"}


def test_main_uses_config_logging_by_default(monkeypatch):
    captured = {}
    _install_fakes(
        monkeypatch,
        WidgetConfig(logging=LoggingConfig(level="WARNING", file="config.log")),
        captured_logging=captured,
    )

    cli.main([])

    assert captured == {"level": "WARNING", "file": "config.log"}


def test_main_returns_error_when_cycle_times_out(monkeypatch):
    _install_fakes(monkeypatch)

    class TimingOutWidget(FakeWidget):
        def update(self, cancel=None, timeout=None):
            raise UpdateCancelledError("cancelled")

    monkeypatch.setattr(cli, "VideosWidget", TimingOutWidget)

    assert cli.main(["--timeout", "0.1"]) == 1


def test_main_returns_error_for_missing_config(monkeypatch, tmp_path):
    monkeypatch.setattr(cli, "configure_logging", lambda level, log_file=None: None)

    assert cli.main(["--config", str(tmp_path / "missing.xml")]) == 1
