# tests/conftest.py
import os
import sys

import pytest

# Ensure we can import project modules from repo root
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from models import BrokerConfig  # noqa: E402


class FakeTransport:
    """Records connect/publish calls instead of talking to a broker."""

    instances = []

    def __init__(self, cfg, username="", password="", will_topic=None):
        self.cfg = cfg
        self.username = username
        self.password = password
        self.will_topic = will_topic
        self.connected = False
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.published = []
        self.fail_connect = None
        self.fail_publish_on = None
        FakeTransport.instances.append(self)

    def connect(self):
        self.connect_calls += 1
        if self.fail_connect:
            raise self.fail_connect
        self.connected = True

    def publish(self, topic, retained, qos, payload):
        if self.fail_publish_on and self.fail_publish_on in topic:
            from errors import PublishError
            raise PublishError(topic, "boom")
        self.published.append((topic, retained, qos, payload))

    def is_connected(self):
        return self.connected

    def disconnect(self):
        self.disconnect_calls += 1
        self.connected = False


@pytest.fixture
def fake_transport():
    """Returns the FakeTransport class with a clean instance registry."""
    FakeTransport.instances = []
    yield FakeTransport
    FakeTransport.instances = []


@pytest.fixture
def broker_cfg():
    return BrokerConfig(
        host="broker.local",
        port=1883,
        client_id="diun-test",
        qos=1,
        discovery_prefix="homeassistant",
        component="update",
        node_name="diun",
    )
