"""Key derivation and request helpers for healing records."""

import hashlib
from typing import Mapping, Optional

SESSION_KEY_V1 = "sessionkey"
SESSION_KEY_V2 = "hlm-sessionkey"
HOST_PROJECT = "host-project"


def build_healing_key(selector_id: str, page_content: str) -> str:
    """Derive the healing identifier for a selector and page snapshot.

    Args:
        selector_id: Identifier of the selector being healed
        page_content: Raw page content captured at healing time

    Returns:
        str: SHA-256 hex digest, stable across processes
    """
    digest = hashlib.sha256()
    digest.update(selector_id.encode("utf-8"))
    digest.update((page_content or "").encode("utf-8"))
    return digest.hexdigest()


def get_session_key(headers: Mapping[str, str]) -> Optional[str]:
    """Resolve the report session key from request headers.

    The primary header wins whenever it is present and non-empty.
    """
    primary = _header(headers, SESSION_KEY_V1)
    if primary:
        return primary
    return _header(headers, SESSION_KEY_V2)


def resolve_project(headers: Mapping[str, str], default_project: str) -> str:
    """Return the requesting project id, or the configured default."""
    return _header(headers, HOST_PROJECT) or default_project


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    # header names are case-insensitive on the wire
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None
