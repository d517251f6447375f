"""
Merchant-level ledger endpoints.

GET /api/merchants/{id}/chain/verify        — walk and check the whole chain
GET /api/merchants/{id}/stats               — archive statistics
GET /api/merchants/{id}/audit-logs          — audit trail
GET /api/merchants/{id}/compliance          — compliance checklist + score
GET /api/merchants/{id}/compliance/report   — shareable HTML report
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse

from fiscal_ledger.errors import PersistenceError
from fiscal_ledger.ledger.compliance import check_compliance
from fiscal_ledger.ledger.documents import render_report
from fiscal_ledger.ledger.retention import utcnow
from fiscal_ledger.ledger.stats import archive_stats
from fiscal_ledger.ledger.verifier import verify_chain
from fiscal_ledger.routers.receipts import get_store
from fiscal_ledger.schemas import (
    ArchiveStats,
    AuditLogEntry,
    ChainVerificationResult,
    ComplianceResult,
)
from fiscal_ledger.store import LedgerStore, to_audit_entry

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/merchants/{merchant_id}/chain/verify", response_model=ChainVerificationResult)
def verify_merchant_chain(merchant_id: str, store: LedgerStore = Depends(get_store)):
    try:
        return verify_chain(store, merchant_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc))


@router.get("/merchants/{merchant_id}/stats", response_model=ArchiveStats)
def merchant_stats(merchant_id: str, store: LedgerStore = Depends(get_store)):
    try:
        return archive_stats(store, merchant_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc))


@router.get("/merchants/{merchant_id}/audit-logs", response_model=list[AuditLogEntry])
def merchant_audit_logs(merchant_id: str, store: LedgerStore = Depends(get_store)):
    try:
        rows = store.list_audit_logs(merchant_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return [to_audit_entry(r) for r in rows]


@router.get("/merchants/{merchant_id}/compliance", response_model=ComplianceResult)
def merchant_compliance(merchant_id: str, store: LedgerStore = Depends(get_store)):
    return check_compliance(store, merchant_id)


@router.get("/merchants/{merchant_id}/compliance/report", response_class=HTMLResponse)
def merchant_compliance_report(merchant_id: str, store: LedgerStore = Depends(get_store)):
    result = check_compliance(store, merchant_id)
    html = render_report(
        result.checks,
        result.score,
        result.status,
        merchant_id=merchant_id,
        generated_at=utcnow(),
    )
    return HTMLResponse(content=html)
