# discovery.py
"""
FILE: discovery.py
DESCRIPTION:
  Builds the Home Assistant MQTT discovery topics and payloads for an image.
  Everything here is a pure function of the image reference and BrokerConfig,
  so re-announcing the same image always lands on the same retained topics.
"""
from __future__ import annotations

import json
from typing import NamedTuple

from errors import EncodingError
from models import BrokerConfig, UpdateEvent
from utils import display_name, repository_name, sanitize_id, short_digest

ICON = "mdi:docker"
MANUFACTURER = "DIUN - Docker Image Update Notifier"


class ImageIdentity(NamedTuple):
    repository: str
    name: str
    unique_id: str


class Topics(NamedTuple):
    availability: str
    discovery: str
    state: str


def describe_image(image_reference: str) -> ImageIdentity:
    repo = repository_name(image_reference)
    return ImageIdentity(repo, display_name(repo), sanitize_id(repo))


def node_topic(cfg: BrokerConfig) -> str:
    return f"{cfg.discovery_prefix}/{cfg.component}/{cfg.node_name}"


def availability_topic(cfg: BrokerConfig) -> str:
    return f"{node_topic(cfg)}/availability"


def build_topics(identity: ImageIdentity, cfg: BrokerConfig) -> Topics:
    base = node_topic(cfg)
    return Topics(
        availability=f"{base}/availability",
        discovery=f"{base}/{identity.unique_id}/config",
        state=f"{base}/{identity.unique_id}/state",
    )


def discovery_payload(event: UpdateEvent, identity: ImageIdentity, topics: Topics, cfg: BrokerConfig) -> dict:
    """Entity config published (retained) to the discovery topic."""
    return {
        "state_topic": topics.state,
        "name": identity.name,
        "title": event.image_reference,
        "unique_id": identity.unique_id,
        "availability_topic": topics.availability,
        "icon": ICON,
        "device": {
            "identifiers": cfg.node_name,
            "name": cfg.node_name,
            "manufacturer": MANUFACTURER,
        },
    }


def state_payload(event: UpdateEvent) -> dict:
    """
    Installed vs latest version as short digests. A first-seen image (no
    previous digest) reports itself as already installed at the latest version.
    """
    latest = short_digest(event.new_digest)
    installed = short_digest(event.previous_digest) if event.previous_digest else latest
    return {
        "installed_version": installed,
        "latest_version": latest,
    }


def encode_payload(payload: dict) -> str:
    # Compact + sorted keys: stable bytes for identical announcements.
    try:
        return json.dumps(payload, separators=(",", ":"), sort_keys=True)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"cannot encode payload: {e}") from e
