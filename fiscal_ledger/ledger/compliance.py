"""
Weighted compliance checklist over a merchant's ledger and audit log.

Each check is a plain function returning ``(status, details)``; the checklist
itself is data, so adding a check never touches the scoring.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional

from fiscal_ledger.config import settings
from fiscal_ledger.errors import PersistenceError
from fiscal_ledger.ledger import chain
from fiscal_ledger.schemas import ComplianceCheck, ComplianceResult
from fiscal_ledger.store import LedgerStore

logger = logging.getLogger(__name__)

MINIMUM_RETENTION_YEARS = 10

COMPLIANT_THRESHOLD = 90
PARTIAL_THRESHOLD = 60


@dataclass(frozen=True)
class ComplianceContext:
    store: LedgerStore
    merchant_id: str
    retention_years: int
    sample_size: int


CheckOutcome = tuple[str, str]


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------

def check_ledger_not_empty(ctx: ComplianceContext) -> CheckOutcome:
    count = ctx.store.count_records(ctx.merchant_id)
    if count > 0:
        return "pass", f"{count} receipts archived"
    return "warning", "No receipts archived yet"


def check_chaining(ctx: ComplianceContext) -> CheckOutcome:
    if callable(chain.compute_hash):
        return "pass", f"{chain.HASH_ALGORITHM} chaining implemented"
    return "fail", "No hash chain builder wired in"


def check_retention(ctx: ComplianceContext) -> CheckOutcome:
    years = ctx.retention_years
    if years >= MINIMUM_RETENTION_YEARS:
        return "pass", f"Retention configured: {years} years"
    return "fail", f"Retention configured: {years} years (minimum {MINIMUM_RETENTION_YEARS})"


def check_recent_hashes(ctx: ComplianceContext) -> CheckOutcome:
    rows = ctx.store.list_records(ctx.merchant_id, limit=ctx.sample_size, newest_first=True)
    if not rows:
        return "warning", "No receipts to sample"
    hashed = sum(1 for row in rows if row.content_hash)
    if hashed == len(rows):
        return "pass", f"All {len(rows)} sampled receipts carry a hash"
    return "fail", f"{len(rows) - hashed} of {len(rows)} sampled receipts lack a hash"


def check_audit_logs(ctx: ComplianceContext) -> CheckOutcome:
    count = ctx.store.count_audit_logs(ctx.merchant_id)
    if count > 0:
        return "pass", f"{count} audit log entries"
    return "warning", "No audit log entries"


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChecklistItem:
    id: str
    name: str
    description: str
    weight: int
    evaluate: Callable[[ComplianceContext], CheckOutcome]


CHECKLIST: tuple[ChecklistItem, ...] = (
    ChecklistItem(
        "auto-archive", "Automatic archiving",
        "Every receipt is archived in the ledger", 25, check_ledger_not_empty,
    ),
    ChecklistItem(
        "crypto-chain", "Cryptographic chaining",
        "Receipts are linked by SHA-256 hashes", 25, check_chaining,
    ),
    ChecklistItem(
        "retention", "Retention period",
        "Archives are kept for the legal retention period", 20, check_retention,
    ),
    ChecklistItem(
        "integrity", "Data integrity",
        "Recent receipts carry an integrity hash", 20, check_recent_hashes,
    ),
    ChecklistItem(
        "audit-logs", "Audit logs",
        "Archive access and changes are traceable", 10, check_audit_logs,
    ),
)


def score_checks(checks: list[ComplianceCheck]) -> int:
    raw = sum(
        check.weight if check.status == "pass" else check.weight * 0.5
        for check in checks
        if check.status in ("pass", "warning")
    )
    # Half-up, so 72.5 scores 73
    return int(math.floor(raw + 0.5))


def status_for(score: int) -> str:
    if score >= COMPLIANT_THRESHOLD:
        return "compliant"
    if score >= PARTIAL_THRESHOLD:
        return "partial"
    return "non-compliant"


def run_check(item: ChecklistItem, ctx: ComplianceContext) -> ComplianceCheck:
    try:
        status, details = item.evaluate(ctx)
    except PersistenceError as exc:
        logger.warning("Compliance check %s has no data for %s: %s", item.id, ctx.merchant_id, exc)
        status, details = "warning", "Data unavailable"
    return ComplianceCheck(
        id=item.id,
        name=item.name,
        description=item.description,
        status=status,
        details=details,
        weight=item.weight,
    )


def check_compliance(
    store: LedgerStore,
    merchant_id: str,
    *,
    retention_years: Optional[int] = None,
    sample_size: Optional[int] = None,
    checklist: tuple[ChecklistItem, ...] = CHECKLIST,
) -> ComplianceResult:
    """Score ``merchant_id`` against the checklist. Read-only."""
    ctx = ComplianceContext(
        store=store,
        merchant_id=merchant_id,
        retention_years=retention_years if retention_years is not None else settings.LEDGER_RETENTION_YEARS,
        sample_size=sample_size if sample_size is not None else settings.COMPLIANCE_SAMPLE_SIZE,
    )
    checks = [run_check(item, ctx) for item in checklist]
    score = score_checks(checks)
    status = status_for(score)
    logger.info("Compliance run for merchant %s: score=%d status=%s", merchant_id, score, status)
    return ComplianceResult(merchant_id=merchant_id, checks=checks, score=score, status=status)
