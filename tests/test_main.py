import builtins

import pytest

import main
from errors import ConnectError
from models import BrokerConfig


@pytest.fixture(autouse=True)
def keep_print(monkeypatch):
    # main() installs the timestamped print; restore it after each test.
    monkeypatch.setattr(builtins, "print", builtins.print)


class DummyAnnouncer:
    instances = []

    def __init__(self, cfg):
        self.cfg = cfg
        self.events = []
        self.closed = False
        self.error = None
        DummyAnnouncer.instances.append(self)

    def announce(self, event):
        self.events.append(event)
        if self.error:
            raise self.error

    def close(self):
        self.closed = True


def test_main_sends_test_notification(mocker, capsys):
    DummyAnnouncer.instances = []
    mocker.patch.object(main, "HomeAssistantAnnouncer", DummyAnnouncer)
    mocker.patch.object(main.config, "BROKER", BrokerConfig(host="broker.local"))

    assert main.main([]) == 0

    ann = DummyAnnouncer.instances[0]
    assert ann.cfg.host == "broker.local"
    assert ann.events[0].image_reference == main.TEST_IMAGE
    assert ann.events[0].previous_digest == ""
    assert ann.closed
    assert "mqtt://broker.local:1883" in capsys.readouterr().out


def test_main_custom_event(mocker):
    DummyAnnouncer.instances = []
    mocker.patch.object(main, "HomeAssistantAnnouncer", DummyAnnouncer)

    rc = main.main(["--image", "ghcr.io/org/app:2", "--digest", "sha256:aaaa", "--previous-digest", "sha256:bbbb"])

    assert rc == 0
    event = DummyAnnouncer.instances[0].events[0]
    assert event.image_reference == "ghcr.io/org/app:2"
    assert event.new_digest == "sha256:aaaa"
    assert event.previous_digest == "sha256:bbbb"


def test_main_failure_exit_code(mocker, capsys):
    class Failing(DummyAnnouncer):
        def announce(self, event):
            raise ConnectError("broker down")

    mocker.patch.object(main, "HomeAssistantAnnouncer", Failing)

    assert main.main([]) == 1
    out = capsys.readouterr().out
    assert "Announce failed: broker down" in out
    assert Failing.instances[-1].closed


def test_check_dependencies_missing_paho(mocker):
    mocker.patch.object(main.importlib.util, "find_spec", return_value=None)
    with pytest.raises(SystemExit):
        main.check_dependencies()


def test_missing_paho_stops_before_project_imports(mocker):
    """The dependency check runs at import time, ahead of the paho-backed modules."""
    import pathlib
    import runpy

    mocker.patch("importlib.util.find_spec", return_value=None)
    main_path = pathlib.Path(__file__).resolve().parents[1] / "main.py"

    with pytest.raises(SystemExit) as exc:
        runpy.run_path(str(main_path))
    assert exc.value.code == 1
