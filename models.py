# models.py
"""
FILE: models.py
DESCRIPTION:
  Value types passed between the dispatch system and the announcer.
  - UpdateEvent: one detected image update (reference + digests).
  - BrokerConfig: static broker / discovery settings for one announcer.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UpdateEvent(BaseModel):
    """A detected image update, supplied once per announce call."""

    model_config = ConfigDict(frozen=True)

    image_reference: str = Field(min_length=1)
    new_digest: str
    previous_digest: str = ""


class BrokerConfig(BaseModel):
    """Broker connection and Home Assistant discovery settings."""

    model_config = ConfigDict(frozen=True)

    scheme: str = "mqtt"
    host: str = "localhost"
    port: int = 1883
    client_id: str = "diun"

    # Credentials: inline value wins, *_file is read when the value is blank.
    username: str = ""
    username_file: str = ""
    password: str = ""
    password_file: str = ""

    qos: int = Field(default=0, ge=0, le=2)
    keepalive: int = 60
    connect_timeout: float = 10.0
    publish_timeout: float = 10.0

    discovery_prefix: str = "homeassistant"
    component: str = "update"
    node_name: str = "diun"

    @property
    def broker_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"
