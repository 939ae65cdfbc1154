# utils.py
"""
FILE: utils.py
DESCRIPTION:
  Shared helper functions used across the project.
  - repository_name(): Strips the tag / digest pin from an image reference.
  - display_name(): Short repo name shown in Home Assistant.
  - sanitize_id(): Makes a repository path safe for MQTT topics / unique IDs.
  - short_digest(): Last 8 characters of a content digest.
  - resolve_secret(): Reads a credential inline or from a secret file.
"""
import re

from errors import SecretResolutionError

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def repository_name(image_reference):
    """Returns 'registry/namespace/repo' without ':tag' or '@digest'.

    The tag split happens first, so a registry port ('host:5000/repo')
    also cuts the reference at the host.
    """
    return image_reference.split(":", 1)[0].split("@", 1)[0]


def display_name(repository):
    return repository.rsplit("/", 1)[-1]


def sanitize_id(repository):
    """Replaces every character outside [A-Za-z0-9_-] with '-' (same length)."""
    return _UNSAFE_ID_CHARS.sub("-", repository)


def short_digest(digest):
    """Last 8 characters of a digest, or the whole digest when shorter."""
    if len(digest) >= 8:
        return digest[-8:]
    return digest


def resolve_secret(value, file_path):
    """
    Returns the inline value if set, otherwise the stripped contents of
    file_path, otherwise "". Unreadable files raise SecretResolutionError.
    """
    if value:
        return value
    if not file_path:
        return ""
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return f.read().strip()
    except OSError as e:
        raise SecretResolutionError(f"cannot read secret file '{file_path}': {e}") from e
