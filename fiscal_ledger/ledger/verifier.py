"""
Integrity verification for archived receipts.

Tampering is reported as an issue, never raised; exceptions only signal a
missing record or an unreachable store.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional

from fiscal_ledger.config import settings
from fiscal_ledger.errors import EncodingError, RecordNotFoundError
from fiscal_ledger.ledger.chain import SENTINEL_HASH, compute_hash
from fiscal_ledger.ledger.retention import as_utc, is_expired, utcnow
from fiscal_ledger.ledger.signer import verify_signature
from fiscal_ledger.models import AuditLogModel, ReceiptRecordModel
from fiscal_ledger.schemas import ChainVerificationResult, VerificationResult
from fiscal_ledger.store import LedgerStore

logger = logging.getLogger(__name__)

MIN_DOCUMENT_BYTES = 100

ISSUE_HASH_MISMATCH = "hash mismatch"
ISSUE_DOCUMENT = "document missing or incomplete"
ISSUE_EXPIRED = "archive expired"


def _hash_matches(row: ReceiptRecordModel) -> bool:
    if not row.content_hash:
        return False
    try:
        return compute_hash(row.structured_data, row.previous_hash) == row.content_hash
    except EncodingError as exc:
        # Stored payload no longer encodes: it was altered after archival
        logger.warning("Record %s no longer encodes: %s", row.id, exc)
        return False


def _document_ok(row: ReceiptRecordModel) -> bool:
    document = row.rendered_document or ""
    return len(document.encode("utf-8")) >= MIN_DOCUMENT_BYTES


def verify(
    store: LedgerStore,
    record_id: str,
    *,
    signing_secret: Optional[str] = None,
    now: Optional[datetime] = None,
) -> VerificationResult:
    """Recompute and compare a record's hash, check its document and expiry.

    Every call leaves a ``verify`` audit entry; the record is never touched.
    """
    signing_secret = signing_secret if signing_secret is not None else settings.LEDGER_SIGNING_SECRET
    now = now or utcnow()

    row = store.get_record(record_id)
    if row is None:
        raise RecordNotFoundError(record_id)

    issues: list[str] = []
    if not _hash_matches(row):
        issues.append(ISSUE_HASH_MISMATCH)
    if not _document_ok(row):
        issues.append(ISSUE_DOCUMENT)
    if is_expired(row.expires_at, now):
        issues.append(ISSUE_EXPIRED)

    signature_valid = verify_signature(
        row.signature,
        row.content_hash,
        row.merchant_id,
        as_utc(row.created_at),
        signing_secret,
    )

    store.append_audit_log(
        AuditLogModel(
            id=str(uuid.uuid4()),
            record_id=row.id,
            transaction_id=row.transaction_id,
            merchant_id=row.merchant_id,
            action="verify",
            status="success" if not issues else "warning",
            details={
                "issues": issues,
                "signature_valid": signature_valid,
                "verified_at": now.isoformat(),
            },
            created_at=now,
        )
    )
    store.commit()

    if issues:
        logger.warning("Record %s failed verification: %s", record_id, ", ".join(issues))
    else:
        logger.info("Record %s verified", record_id)

    return VerificationResult(
        record_id=record_id,
        is_valid=not issues,
        issues=issues,
        signature_valid=signature_valid,
    )


def verify_chain(store: LedgerStore, merchant_id: str) -> ChainVerificationResult:
    """Walk a merchant's whole chain checking positions, links and hashes."""
    rows = store.list_records(merchant_id)
    issues: list[str] = []

    expected_position = 1
    expected_previous = SENTINEL_HASH
    for row in rows:
        position = row.chain_position
        if position != expected_position:
            issues.append(f"position gap: expected {expected_position}, found {position}")
        if row.previous_hash != expected_previous:
            issues.append(f"broken link at position {position}")
        if not _hash_matches(row):
            issues.append(f"hash mismatch at position {position}")
        expected_position = position + 1
        expected_previous = row.content_hash

    logger.info(
        "Chain of merchant %s: %d records, %d issues", merchant_id, len(rows), len(issues)
    )
    return ChainVerificationResult(
        merchant_id=merchant_id,
        is_valid=not issues,
        records_checked=len(rows),
        issues=issues,
    )
