"""Identifier generation for memory nodes and reasoning sessions.

Ids combine the creation time with a random base36 suffix so that many
ids minted within the same millisecond still never collide.
"""

from __future__ import annotations

import secrets
import string

from advanced_reason.foundation.clock import epoch_ms

_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 9


def new_id(prefix: str) -> str:
    """Return ``<prefix>_<epoch-ms>_<random suffix>``."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"{prefix}_{epoch_ms()}_{suffix}"
