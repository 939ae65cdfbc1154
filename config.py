# config.py
"""Project configuration.

This module supports two deployment modes:

1) Home Assistant Add-on
   - Reads /data/options.json
   - Mirrors keys into environment variables

2) Standalone / Docker / venv
   - Reads a .env file, then the process environment

Credentials can be given inline (MQTT_USER / MQTT_PASS) or as secret files
(MQTT_USER_FILE / MQTT_PASS_FILE); files are read on every announce.
"""

from __future__ import annotations

import json
import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from models import BrokerConfig


OPTIONS_PATH = "/data/options.json"


def _load_ha_options_into_env() -> None:
    """If running as a HA add-on, load options.json into env vars."""
    if not os.path.exists(OPTIONS_PATH):
        return

    try:
        with open(OPTIONS_PATH, "r", encoding="utf-8") as f:
            options = json.load(f)

        for key, value in options.items():
            env_key = key.upper()
            if isinstance(value, (list, dict)):
                os.environ[env_key] = json.dumps(value)
            elif value is not None and str(value).strip():
                os.environ[env_key] = str(value)
            elif key == "mqtt_host":
                # Blank mqtt_host in the add-on UI means the Mosquitto add-on.
                os.environ.setdefault("MQTT_HOST", "core-mosquitto")

        print("[CONFIG] Success! Loaded settings from Home Assistant.")
    except (OSError, ValueError) as e:  # pragma: no cover
        print(f"[CONFIG] Error loading options: {e}")


_load_ha_options_into_env()


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- MQTT ---
    mqtt_scheme: str = Field(default="mqtt")
    mqtt_host: str = Field(default="localhost")
    mqtt_port: int = Field(default=1883)
    mqtt_client_id: str = Field(default="diun")
    mqtt_user: str = Field(default="")
    mqtt_user_file: str = Field(default="")
    mqtt_pass: str = Field(default="")
    mqtt_pass_file: str = Field(default="")
    mqtt_qos: int = Field(default=0, ge=0, le=2)
    mqtt_keepalive: int = Field(default=60)
    mqtt_connect_timeout: float = Field(default=10.0)
    mqtt_publish_timeout: float = Field(default=10.0)

    # --- Home Assistant discovery ---
    ha_discovery_prefix: str = Field(default="homeassistant")
    ha_component: str = Field(default="update")
    ha_node_name: str = Field(default="diun")

    verbose_transmissions: bool = Field(
        default=False,
        description="If True, logs every MQTT publish. If False, only logs summaries.",
    )

    def broker_config(self) -> BrokerConfig:
        return BrokerConfig(
            scheme=self.mqtt_scheme,
            host=self.mqtt_host,
            port=self.mqtt_port,
            client_id=self.mqtt_client_id,
            username=self.mqtt_user,
            username_file=self.mqtt_user_file,
            password=self.mqtt_pass,
            password_file=self.mqtt_pass_file,
            qos=self.mqtt_qos,
            keepalive=self.mqtt_keepalive,
            connect_timeout=self.mqtt_connect_timeout,
            publish_timeout=self.mqtt_publish_timeout,
            discovery_prefix=self.ha_discovery_prefix,
            component=self.ha_component,
            node_name=self.ha_node_name,
        )


settings = Settings()

# --- Export convenience constants ---
BROKER = settings.broker_config()

VERBOSE_TRANSMISSIONS = settings.verbose_transmissions
