"""
Hash chain builder — SHA-256 over the canonical receipt bytes and the
predecessor's hash.
"""
from __future__ import annotations

import hashlib
from typing import Any, Mapping, Optional

from fiscal_ledger.ledger.encoder import encode_receipt

HASH_ALGORITHM = "SHA-256"
SENTINEL_HASH = "GENESIS"
_SEPARATOR = b"\x1f"


def link_of(previous_hash: Optional[str]) -> str:
    return previous_hash or SENTINEL_HASH


def compute_hash(structured_data: Mapping[str, Any], previous_hash: Optional[str]) -> str:
    """Content hash binding ``structured_data`` to its chain predecessor.

    ``previous_hash`` is ``None`` (or the sentinel) for the first record of a
    merchant's chain.
    """
    digest = hashlib.sha256()
    digest.update(encode_receipt(structured_data))
    digest.update(_SEPARATOR)
    digest.update(link_of(previous_hash).encode("utf-8"))
    return digest.hexdigest()
