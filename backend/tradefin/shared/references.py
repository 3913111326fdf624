from __future__ import annotations

import secrets
import time


LC_PREFIX = "LC"
BG_PREFIX = "BG"
DOC_PREFIX = "DOC"


def new_reference(prefix: str) -> str:
    """Return ``{prefix}{epoch millis}{6 hex chars}``.

    The random tail keeps references distinct for requests landing in the
    same millisecond; the unique column on each table is the final arbiter.
    """
    millis = int(time.time() * 1000)
    return f"{prefix}{millis}{secrets.token_hex(3).upper()}"


def prefix_of(reference: str | None) -> str | None:
    if not reference:
        return None
    ref = reference.strip().upper()
    for prefix in (DOC_PREFIX, LC_PREFIX, BG_PREFIX):
        if ref.startswith(prefix):
            return prefix
    return None
