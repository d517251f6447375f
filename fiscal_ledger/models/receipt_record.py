"""
SQLAlchemy models for the archived receipt chain and its audit log.
"""
from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from fiscal_ledger.database import Base


class ReceiptRecordModel(Base):
    """One archived receipt; append-only, never updated."""
    __tablename__ = "receipt_records"
    __table_args__ = (
        UniqueConstraint("merchant_id", "chain_position", name="uq_receipt_chain_position"),
    )

    id = Column(String, primary_key=True)
    transaction_id = Column(String, nullable=False, index=True)
    merchant_id = Column(String, nullable=False, index=True)

    structured_data = Column(JSON, nullable=False)
    rendered_document = Column(Text, nullable=False)
    document_size_bytes = Column(Integer, nullable=False, default=0)

    content_hash = Column(String(64), nullable=False)
    previous_hash = Column(String(64), nullable=False)
    chain_position = Column(Integer, nullable=False)

    signature = Column(String(64), nullable=False)
    retention_years = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)


class AuditLogModel(Base):
    """Audit trail entry (create | verify)"""
    __tablename__ = "receipt_audit_logs"

    id = Column(String, primary_key=True)
    record_id = Column(String, nullable=False, index=True)
    transaction_id = Column(String)
    merchant_id = Column(String, nullable=False, index=True)
    action = Column(String, nullable=False)  # create, verify
    status = Column(String, nullable=False)  # success, warning, fail
    details = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False)
