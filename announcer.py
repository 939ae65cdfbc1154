# announcer.py
"""
FILE: announcer.py
DESCRIPTION:
  Home Assistant notifier for detected image updates.
  - Lazily opens one broker connection per announcer and reuses it.
  - Publishes availability ("online", first connect only), discovery config
    and state, all retained, in that order.
  - The first failure is raised to the caller; nothing is retried here.
"""
import threading

import config
from discovery import (
    availability_topic,
    build_topics,
    describe_image,
    discovery_payload,
    encode_payload,
    state_payload,
)
from mqtt_handler import MQTTTransport
from utils import resolve_secret


class HomeAssistantAnnouncer:
    def __init__(self, cfg, transport_factory=MQTTTransport, secret_resolver=resolve_secret):
        self.cfg = cfg
        self._transport_factory = transport_factory
        self._resolve_secret = secret_resolver
        self.transport = None

        # Guards the "connect if absent" check and keeps announcements from interleaving.
        self._lock = threading.Lock()

    def name(self):
        return "homeassistant"

    @property
    def is_connected(self):
        return self.transport is not None and self.transport.is_connected()

    def announce(self, event):
        """Publishes discovery + state for one UpdateEvent. Raises AnnounceError."""
        username = self._resolve_secret(self.cfg.username, self.cfg.username_file)
        password = self._resolve_secret(self.cfg.password, self.cfg.password_file)

        identity = describe_image(event.image_reference)
        topics = build_topics(identity, self.cfg)
        discovery = encode_payload(discovery_payload(event, identity, topics, self.cfg))
        state = encode_payload(state_payload(event))

        with self._lock:
            self._ensure_connected(username, password, topics.availability)
            self._publish(topics.discovery, discovery)
            self._publish(topics.state, state)

        print(f"[HA] Announced {event.image_reference} as '{identity.unique_id}'.")

    def _ensure_connected(self, username, password, will_topic):
        if self.transport is not None:
            if self.transport.is_connected():
                return
            print("[HA] WARNING: Broker connection lost, reconnecting...")
            self._drop_transport()

        transport = self._transport_factory(self.cfg, username, password, will_topic)
        transport.connect()
        try:
            self._publish(will_topic, "online", transport)
        except Exception:
            transport.disconnect()
            raise
        self.transport = transport

    def _publish(self, topic, payload, transport=None):
        transport = transport or self.transport
        transport.publish(topic, True, self.cfg.qos, payload)
        if config.VERBOSE_TRANSMISSIONS:
            print(f"-> TX [{topic}]: {payload}")

    def _drop_transport(self):
        transport, self.transport = self.transport, None
        try:
            transport.disconnect()
        except OSError as e:
            print(f"[HA] WARNING: Error closing stale connection: {e}")

    def close(self):
        """Marks the node offline and disconnects. Safe to call more than once."""
        with self._lock:
            if self.transport is None:
                return
            try:
                if self.transport.is_connected():
                    self._publish(availability_topic(self.cfg), "offline")
            finally:
                self._drop_transport()
