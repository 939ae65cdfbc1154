# errors.py
"""
FILE: errors.py
DESCRIPTION:
  Errors raised by an announce call. Every failure aborts the remaining
  steps and is handed to the caller unchanged; retry policy lives there.
"""


class AnnounceError(Exception):
    """Base class for everything HomeAssistantAnnouncer.announce() raises."""


class SecretResolutionError(AnnounceError):
    """A username/password could not be read from its secret file."""


class ConnectError(AnnounceError):
    """The broker could not be reached or refused the connection."""


class PublishError(AnnounceError):
    def __init__(self, topic, reason):
        super().__init__(f"publish to '{topic}' failed: {reason}")
        self.topic = topic
        self.reason = reason


class EncodingError(AnnounceError):
    """A payload could not be serialized to JSON."""
