# mqtt_handler.py
"""
FILE: mqtt_handler.py
DESCRIPTION:
  Manages the connection to the MQTT Broker.
  - MQTTTransport wraps paho-mqtt behind the small surface the announcer
    needs: connect / publish / is_connected / disconnect.
  - connect() and publish() block until the broker acknowledges (or the
    configured timeout expires) and raise ConnectError / PublishError.
"""
import threading
from typing import Protocol

import paho.mqtt.client as mqtt
from paho.mqtt.enums import CallbackAPIVersion

from errors import ConnectError, PublishError
from models import BrokerConfig

TCP_SCHEMES = {"mqtt", "tcp"}
TLS_SCHEMES = {"ssl", "tls", "mqtts"}
WS_SCHEMES = {"ws"}
WSS_SCHEMES = {"wss"}


class Transport(Protocol):
    def connect(self) -> None: ...

    def publish(self, topic: str, retained: bool, qos: int, payload: str) -> None: ...

    def is_connected(self) -> bool: ...

    def disconnect(self) -> None: ...


class MQTTTransport:
    def __init__(self, cfg: BrokerConfig, username="", password="", will_topic=None):
        self.cfg = cfg
        scheme = cfg.scheme.lower()
        if scheme not in TCP_SCHEMES | TLS_SCHEMES | WS_SCHEMES | WSS_SCHEMES:
            raise ConnectError(f"unsupported broker scheme '{cfg.scheme}' ({cfg.broker_url})")

        self.use_tls = scheme in TLS_SCHEMES or scheme in WSS_SCHEMES
        transport = "websockets" if scheme in WS_SCHEMES | WSS_SCHEMES else "tcp"

        self.client = mqtt.Client(
            callback_api_version=CallbackAPIVersion.VERSION2,
            client_id=cfg.client_id,
            transport=transport,
        )
        if username:
            self.client.username_pw_set(username, password or None)
        if will_topic:
            self.client.will_set(will_topic, "offline", qos=cfg.qos, retain=True)

        # Callbacks
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect

        self.will_topic = will_topic
        self._connack = threading.Event()
        self._connect_rc = None
        self._tls_configured = False
        self._was_connected = False

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        self._connect_rc = reason_code
        self._connack.set()
        if reason_code == 0:
            print(f"[MQTT] Connected Successfully to {self.cfg.broker_url}.")
            # paho reconnects on its own after a drop; the broker has already
            # sent our last will, so flip availability back.
            if self._was_connected and self.will_topic:
                client.publish(self.will_topic, "online", qos=self.cfg.qos, retain=True)
            self._was_connected = True
        else:
            print(f"[MQTT] Connection Failed! Code: {reason_code}")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code != 0:
            print(f"[MQTT] WARNING: Lost connection to {self.cfg.broker_url} (code {reason_code}).")

    def connect(self):
        print(f"[MQTT] Connecting to MQTT Broker at {self.cfg.broker_url}...")
        self._connack.clear()
        self._connect_rc = None
        try:
            if self.use_tls and not self._tls_configured:
                self.client.tls_set()
                self._tls_configured = True
            self.client.connect(self.cfg.host, self.cfg.port, keepalive=self.cfg.keepalive)
        except (OSError, ValueError) as e:
            raise ConnectError(f"cannot connect to {self.cfg.broker_url}: {e}") from e

        self.client.loop_start()
        if not self._connack.wait(self.cfg.connect_timeout):
            self._abort()
            raise ConnectError(
                f"no answer from {self.cfg.broker_url} after {self.cfg.connect_timeout}s"
            )
        if self._connect_rc != 0:
            self._abort()
            raise ConnectError(f"{self.cfg.broker_url} refused the connection: {self._connect_rc}")

    def _abort(self):
        # Close the half-open socket left by client.connect().
        self.client.loop_stop()
        self.client.disconnect()

    def publish(self, topic, retained, qos, payload):
        info = self.client.publish(topic, payload, qos=qos, retain=retained)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise PublishError(topic, mqtt.error_string(info.rc))
        try:
            info.wait_for_publish(timeout=self.cfg.publish_timeout)
        except (RuntimeError, ValueError) as e:
            raise PublishError(topic, str(e)) from e
        if not info.is_published():
            raise PublishError(topic, f"not acknowledged within {self.cfg.publish_timeout}s")

    def is_connected(self):
        return self.client.is_connected()

    def disconnect(self):
        self.client.loop_stop()
        self.client.disconnect()
