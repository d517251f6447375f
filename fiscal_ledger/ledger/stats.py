"""
Archive statistics for a merchant's ledger.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from fiscal_ledger.ledger.retention import is_expired, utcnow
from fiscal_ledger.schemas import ArchiveStats
from fiscal_ledger.store import LedgerStore


def archive_stats(store: LedgerStore, merchant_id: str, now: Optional[datetime] = None) -> ArchiveStats:
    now = now or utcnow()
    rows = store.list_records(merchant_id)
    expired = sum(1 for row in rows if is_expired(row.expires_at, now))
    total_size = sum(row.document_size_bytes or 0 for row in rows)
    latest = rows[-1] if rows else None
    return ArchiveStats(
        merchant_id=merchant_id,
        total_records=len(rows),
        active_records=len(rows) - expired,
        expired_records=expired,
        total_size_bytes=total_size,
        total_size_mb=round(total_size / 1024 / 1024, 2),
        latest_chain_position=latest.chain_position if latest else 0,
        latest_hash=latest.content_hash if latest else None,
    )
