"""
Ledger contracts — Pydantic v2 models shared by the ledger core and the API.
"""
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


AuditAction = Literal["create", "verify"]
AuditStatus = Literal["success", "warning", "fail"]
CheckStatus = Literal["pass", "warning", "fail"]
ComplianceStatus = Literal["compliant", "partial", "non-compliant"]


# ---------------------------------------------------------------------------
# Receipt payload
# ---------------------------------------------------------------------------

class LineItem(BaseModel):
    """One sold article on the receipt."""
    name: str = ""
    sku: str
    quantity: float
    unit_price: float
    total: Optional[float] = None
    vat_rate: Optional[float] = Field(default=None, description="percent, e.g. 20")


class ReceiptData(BaseModel):
    """Structured receipt handed over by the POS checkout."""
    transaction_number: str
    date: str = Field(..., description="YYYY-MM-DD")
    time: str = Field(..., description="HH:MM:SS")
    cashier: str = ""
    session_number: str = ""
    items: list[LineItem] = Field(default_factory=list)
    subtotal: float
    tax: float
    tax_rate: Optional[float] = Field(default=None, description="percent, e.g. 20")
    total: float
    payment_method: str = Field(..., description="cash | card | card_terminal | check | transfer | ...")


# ---------------------------------------------------------------------------
# Archived record + audit trail
# ---------------------------------------------------------------------------

class ReceiptRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    transaction_id: str
    merchant_id: str
    structured_data: dict
    rendered_document: str
    document_size_bytes: int
    content_hash: str
    previous_hash: str
    chain_position: int
    signature: str
    retention_years: int
    created_at: datetime
    expires_at: datetime


class AuditLogEntry(BaseModel):
    id: str
    record_id: str
    transaction_id: Optional[str] = None
    merchant_id: str
    action: AuditAction
    status: AuditStatus
    details: dict = Field(default_factory=dict)
    created_at: datetime


# ---------------------------------------------------------------------------
# Verification / compliance results
# ---------------------------------------------------------------------------

class VerificationResult(BaseModel):
    record_id: str
    is_valid: bool
    issues: list[str] = Field(default_factory=list)
    signature_valid: Optional[bool] = None


class ChainVerificationResult(BaseModel):
    merchant_id: str
    is_valid: bool
    records_checked: int = 0
    issues: list[str] = Field(default_factory=list)


class ComplianceCheck(BaseModel):
    id: str
    name: str
    description: str
    status: CheckStatus
    details: str
    weight: int


class ComplianceResult(BaseModel):
    merchant_id: str
    checks: list[ComplianceCheck] = Field(default_factory=list)
    score: int
    status: ComplianceStatus


class ArchiveStats(BaseModel):
    merchant_id: str
    total_records: int = 0
    active_records: int = 0
    expired_records: int = 0
    total_size_bytes: int = 0
    total_size_mb: float = 0.0
    latest_chain_position: int = 0
    latest_hash: Optional[str] = None


# ---------------------------------------------------------------------------
# API request envelopes
# ---------------------------------------------------------------------------

class ArchiveRequest(BaseModel):
    transaction_id: str
    merchant_id: str
    receipt: ReceiptData
