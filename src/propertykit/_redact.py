"""Helpers for safe debug logging.

Stored values can be large encoded blobs, or secrets kept as settings.
This module renders them compactly before they reach a DEBUG log line.
"""

from __future__ import annotations

_SENSITIVE_KEY_MARKERS: tuple[str, ...] = (
    "password",
    "secret",
    "token",
    "authorization",
    "cookie",
    "apikey",
    "api_key",
)


def is_sensitive_key(key: str) -> bool:
    """Return ``True`` when a storage key looks like it holds a secret."""
    lowered = key.lower()
    return any(marker in lowered for marker in _SENSITIVE_KEY_MARKERS)


def describe_payload(data: bytes, *, key: str = "", preview: int = 32) -> str:
    """Return a log-safe summary of the bytes stored under *key*."""
    if key and is_sensitive_key(key):
        return "<redacted>"
    head = bytes(data[:preview]).decode("utf-8", errors="replace")
    return f"<bytes:{len(data)}b {head!r}>"
