from fiscal_ledger.schemas.base import (
    ArchiveRequest,
    ArchiveStats,
    AuditLogEntry,
    ChainVerificationResult,
    ComplianceCheck,
    ComplianceResult,
    LineItem,
    ReceiptData,
    ReceiptRecord,
    VerificationResult,
)

__all__ = [
    "ArchiveRequest",
    "ArchiveStats",
    "AuditLogEntry",
    "ChainVerificationResult",
    "ComplianceCheck",
    "ComplianceResult",
    "LineItem",
    "ReceiptData",
    "ReceiptRecord",
    "VerificationResult",
]
