"""
Display signature for archived receipts.

An HMAC over the content hash, merchant and the record's creation time. The
hash chain is the integrity primitive; this code is only for human
confirmation on printed receipts.
"""
from __future__ import annotations

import hashlib
import hmac
from datetime import datetime

from fiscal_ledger.ledger.retention import as_utc

SIGNATURE_LENGTH = 32


def _message(content_hash: str, merchant_id: str, timestamp: datetime) -> bytes:
    return f"{content_hash}:{merchant_id}:{as_utc(timestamp).isoformat()}".encode("utf-8")


def sign(content_hash: str, merchant_id: str, timestamp: datetime, secret: str) -> str:
    mac = hmac.new(secret.encode("utf-8"), _message(content_hash, merchant_id, timestamp), hashlib.sha256)
    return mac.hexdigest()[:SIGNATURE_LENGTH]


def verify_signature(
    signature: str,
    content_hash: str,
    merchant_id: str,
    timestamp: datetime,
    secret: str,
) -> bool:
    expected = sign(content_hash, merchant_id, timestamp, secret)
    return hmac.compare_digest(expected, signature or "")
