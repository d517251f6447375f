from fiscal_ledger.models.receipt_record import AuditLogModel, ReceiptRecordModel

__all__ = ["AuditLogModel", "ReceiptRecordModel"]
