"""
Ledger writer — encode → hash → sign → render → persist → audit.

Appends to one merchant's chain are serialized: a per-merchant lock covers
the read of the chain head and the commit of the new record, and the
``(merchant_id, chain_position)`` unique constraint catches writers in other
processes, which are retried a bounded number of times.
"""
from __future__ import annotations

import copy
import logging
import threading
import uuid
import weakref
from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel

from fiscal_ledger.config import settings
from fiscal_ledger.errors import ChainConflictError, PersistenceError
from fiscal_ledger.ledger.chain import SENTINEL_HASH, compute_hash
from fiscal_ledger.ledger.documents import render_receipt_document
from fiscal_ledger.ledger.encoder import encode_receipt
from fiscal_ledger.ledger.retention import as_utc, compute_expiry, utcnow
from fiscal_ledger.ledger.signer import sign
from fiscal_ledger.models import AuditLogModel, ReceiptRecordModel
from fiscal_ledger.schemas import ReceiptRecord
from fiscal_ledger.store import LedgerStore

logger = logging.getLogger(__name__)

_locks_guard = threading.Lock()
# Entries vanish once no writer holds the merchant's lock
_merchant_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()


def merchant_lock(merchant_id: str) -> threading.Lock:
    """The append lock owning ``merchant_id``'s position counter.

    Callers must keep a reference for as long as they hold it.
    """
    with _locks_guard:
        lock = _merchant_locks.get(merchant_id)
        if lock is None:
            lock = threading.Lock()
            _merchant_locks[merchant_id] = lock
        return lock


def _payload(structured_data: BaseModel | Mapping[str, Any]) -> dict:
    if isinstance(structured_data, BaseModel):
        return structured_data.model_dump()
    return copy.deepcopy(dict(structured_data))


def archive(
    store: LedgerStore,
    transaction_id: str,
    merchant_id: str,
    structured_data: BaseModel | Mapping[str, Any],
    *,
    retention_years: Optional[int] = None,
    signing_secret: Optional[str] = None,
    max_retries: Optional[int] = None,
    now: Optional[datetime] = None,
) -> ReceiptRecord:
    """Append one receipt to ``merchant_id``'s chain.

    The record and its ``create`` audit entry are committed together; if
    either write fails nothing is left behind.

    Raises ``EncodingError`` for a malformed payload and ``PersistenceError``
    when the store fails or chain conflicts outlast ``max_retries`` retries
    after the first attempt.
    """
    retention_years = retention_years if retention_years is not None else settings.LEDGER_RETENTION_YEARS
    signing_secret = signing_secret if signing_secret is not None else settings.LEDGER_SIGNING_SECRET
    max_retries = max_retries if max_retries is not None else settings.LEDGER_APPEND_MAX_RETRIES

    payload = _payload(structured_data)
    # Reject bad input before touching the store
    encode_receipt(payload)

    lock = merchant_lock(merchant_id)
    attempts = max(max_retries, 0) + 1
    with lock:
        for attempt in range(1, attempts + 1):
            latest = store.get_latest_record(merchant_id)
            previous_hash = latest.content_hash if latest else SENTINEL_HASH
            chain_position = latest.chain_position + 1 if latest else 1

            content_hash = compute_hash(payload, previous_hash)
            created_at = as_utc(now) if now else utcnow()
            expires_at = compute_expiry(created_at, retention_years)
            signature = sign(content_hash, merchant_id, created_at, signing_secret)
            document = render_receipt_document(
                payload,
                content_hash,
                chain_position,
                archived_at=created_at,
                retention_years=retention_years,
            )
            document_size = len(document.encode("utf-8"))

            record = ReceiptRecord(
                id=str(uuid.uuid4()),
                transaction_id=transaction_id,
                merchant_id=merchant_id,
                structured_data=payload,
                rendered_document=document,
                document_size_bytes=document_size,
                content_hash=content_hash,
                previous_hash=previous_hash,
                chain_position=chain_position,
                signature=signature,
                retention_years=retention_years,
                created_at=created_at,
                expires_at=expires_at,
            )

            try:
                store.insert_receipt_record(ReceiptRecordModel(**record.model_dump()))
                store.append_audit_log(
                    AuditLogModel(
                        id=str(uuid.uuid4()),
                        record_id=record.id,
                        transaction_id=transaction_id,
                        merchant_id=merchant_id,
                        action="create",
                        status="success",
                        details={
                            "hash": content_hash,
                            "chain_position": chain_position,
                            "previous_hash": previous_hash,
                            "signature": signature,
                            "document_size_bytes": document_size,
                        },
                        created_at=created_at,
                    )
                )
                store.commit()
            except ChainConflictError:
                logger.warning(
                    "Chain position %d for merchant %s already taken (attempt %d/%d)",
                    chain_position, merchant_id, attempt, attempts,
                )
                continue
            except PersistenceError:
                store.rollback()
                logger.warning("Archive of transaction %s rolled back", transaction_id)
                raise

            logger.info(
                "Archived transaction %s for merchant %s at position %d (%s)",
                transaction_id, merchant_id, chain_position, content_hash[:12],
            )
            return record

    raise PersistenceError(
        f"Could not append to chain of merchant {merchant_id} after {attempts} attempts"
    )
