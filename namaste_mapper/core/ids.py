"""Identifier and timestamp helpers shared by the store and the FHIR builders."""
from __future__ import annotations

import secrets
import string
import time
from datetime import datetime, timezone

_ALPHABET = string.digits + string.ascii_lowercase


def epoch_ms() -> int:
    return time.time_ns() // 1_000_000


def random_suffix(length: int = 9) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def generate_id(prefix: str) -> str:
    """Time-based id with a random base36 suffix, e.g. ``PAT-1718000000000-k3j9x0a1b``.

    Collisions are improbable, not impossible.
    """
    return f"{prefix}-{epoch_ms()}-{random_suffix()}"


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
