"""
Hashing utilities.

Provides the canonical JSON projection and SHA-256 digest used for
analysis cache keys, so equal requests always map to the same key.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any


def canonical_json(payload: Any) -> str:
    """
    Serialize a JSON-compatible value deterministically.

    Keys are sorted and separators are compact, so the output only depends
    on the value itself, never on dict insertion order.
    """
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def stable_digest(payload: Any) -> str:
    """Return the SHA-256 hex digest of the canonical JSON of ``payload``."""
    return hashlib.sha256(
        canonical_json(payload).encode("utf-8")
    ).hexdigest()
