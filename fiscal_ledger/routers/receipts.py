"""
Receipt ledger endpoints.

POST /api/receipts                    — archive a completed transaction
GET  /api/receipts?merchant_id=…      — list a merchant's chain
GET  /api/receipts/{id}               — get one archived record
GET  /api/receipts/{id}/document      — archival HTML document
POST /api/receipts/{id}/verify        — integrity verification
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from fiscal_ledger.database import get_db
from fiscal_ledger.errors import EncodingError, PersistenceError, RecordNotFoundError
from fiscal_ledger.ledger.archiver import archive
from fiscal_ledger.ledger.verifier import verify
from fiscal_ledger.schemas import ArchiveRequest, ReceiptRecord, VerificationResult
from fiscal_ledger.store import LedgerStore, to_record

logger = logging.getLogger(__name__)
router = APIRouter()


def get_store(db: Session = Depends(get_db)) -> LedgerStore:
    return LedgerStore(db)


def _load(store: LedgerStore, record_id: str):
    try:
        row = store.get_record(record_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    if not row:
        logger.warning("Receipt record not found: %s", record_id)
        raise HTTPException(status_code=404, detail="Receipt record not found")
    return row


# ── POST /api/receipts ───────────────────────────────────────────────────
@router.post("/receipts", response_model=ReceiptRecord)
def archive_receipt(req: ArchiveRequest, store: LedgerStore = Depends(get_store)):
    logger.info("Archive: merchant=%s  transaction=%s", req.merchant_id, req.transaction_id)
    try:
        return archive(store, req.transaction_id, req.merchant_id, req.receipt)
    except EncodingError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc))


# ── GET /api/receipts ────────────────────────────────────────────────────
@router.get("/receipts", response_model=list[ReceiptRecord])
def list_receipts(merchant_id: str, store: LedgerStore = Depends(get_store)):
    try:
        rows = store.list_records(merchant_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    logger.info("Found %d receipts for merchant %s", len(rows), merchant_id)
    return [to_record(r) for r in rows]


# ── GET /api/receipts/{record_id} ────────────────────────────────────────
@router.get("/receipts/{record_id}", response_model=ReceiptRecord)
def get_receipt(record_id: str, store: LedgerStore = Depends(get_store)):
    return to_record(_load(store, record_id))


# ── GET /api/receipts/{record_id}/document ───────────────────────────────
@router.get("/receipts/{record_id}/document", response_class=HTMLResponse)
def get_receipt_document(record_id: str, store: LedgerStore = Depends(get_store)):
    row = _load(store, record_id)
    return HTMLResponse(content=row.rendered_document)


# ── POST /api/receipts/{record_id}/verify ────────────────────────────────
@router.post("/receipts/{record_id}/verify", response_model=VerificationResult)
def verify_receipt(record_id: str, store: LedgerStore = Depends(get_store)):
    try:
        return verify(store, record_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Receipt record not found")
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
