"""
Ledger persistence over a SQLAlchemy session.

The ledger core only talks to the store through these operations; the
``(merchant_id, chain_position)`` unique constraint surfaces as
``ChainConflictError`` so the archiver can retry the append.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from fiscal_ledger.errors import ChainConflictError, PersistenceError
from fiscal_ledger.ledger.retention import as_utc
from fiscal_ledger.models import AuditLogModel, ReceiptRecordModel
from fiscal_ledger.schemas import AuditLogEntry, ReceiptRecord

logger = logging.getLogger(__name__)


def to_record(row: ReceiptRecordModel) -> ReceiptRecord:
    return ReceiptRecord(
        id=row.id,
        transaction_id=row.transaction_id,
        merchant_id=row.merchant_id,
        structured_data=row.structured_data,
        rendered_document=row.rendered_document,
        document_size_bytes=row.document_size_bytes,
        content_hash=row.content_hash,
        previous_hash=row.previous_hash,
        chain_position=row.chain_position,
        signature=row.signature,
        retention_years=row.retention_years,
        created_at=as_utc(row.created_at),
        expires_at=as_utc(row.expires_at),
    )


def to_audit_entry(row: AuditLogModel) -> AuditLogEntry:
    return AuditLogEntry(
        id=row.id,
        record_id=row.record_id,
        transaction_id=row.transaction_id,
        merchant_id=row.merchant_id,
        action=row.action,
        status=row.status,
        details=row.details or {},
        created_at=as_utc(row.created_at),
    )


class LedgerStore:
    """Query/insert interface for receipt records and their audit log."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, operation: str, conflict: bool = False):
        try:
            yield
        except IntegrityError as exc:
            self.db.rollback()
            if conflict:
                raise ChainConflictError(f"{operation}: chain position already taken") from exc
            logger.warning("Store %s rejected: %s", operation, exc)
            raise PersistenceError(f"{operation} rejected by store") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning("Store %s failed: %s", operation, exc)
            raise PersistenceError(f"{operation} failed") from exc

    # ── writes ───────────────────────────────────────────────────────────
    def insert_receipt_record(self, record: ReceiptRecordModel) -> None:
        with self._guard("insert_receipt_record", conflict=True):
            self.db.add(record)
            self.db.flush()

    def append_audit_log(self, entry: AuditLogModel) -> None:
        with self._guard("append_audit_log"):
            self.db.add(entry)
            self.db.flush()

    def commit(self) -> None:
        with self._guard("commit", conflict=True):
            self.db.commit()

    def rollback(self) -> None:
        with self._guard("rollback"):
            self.db.rollback()

    # ── reads ────────────────────────────────────────────────────────────
    def get_record(self, record_id: str) -> Optional[ReceiptRecordModel]:
        with self._guard("get_record"):
            return (
                self.db.query(ReceiptRecordModel)
                .filter(ReceiptRecordModel.id == record_id)
                .first()
            )

    def get_latest_record(self, merchant_id: str) -> Optional[ReceiptRecordModel]:
        with self._guard("get_latest_record"):
            return (
                self.db.query(ReceiptRecordModel)
                .filter(ReceiptRecordModel.merchant_id == merchant_id)
                .order_by(ReceiptRecordModel.chain_position.desc())
                .first()
            )

    def list_records(
        self,
        merchant_id: str,
        limit: Optional[int] = None,
        newest_first: bool = False,
    ) -> list[ReceiptRecordModel]:
        with self._guard("list_records"):
            order = ReceiptRecordModel.chain_position
            query = (
                self.db.query(ReceiptRecordModel)
                .filter(ReceiptRecordModel.merchant_id == merchant_id)
                .order_by(order.desc() if newest_first else order.asc())
            )
            if limit is not None:
                query = query.limit(limit)
            return query.all()

    def count_records(self, merchant_id: str) -> int:
        with self._guard("count_records"):
            return (
                self.db.query(ReceiptRecordModel)
                .filter(ReceiptRecordModel.merchant_id == merchant_id)
                .count()
            )

    def list_audit_logs(self, merchant_id: str) -> list[AuditLogModel]:
        with self._guard("list_audit_logs"):
            return (
                self.db.query(AuditLogModel)
                .filter(AuditLogModel.merchant_id == merchant_id)
                .order_by(AuditLogModel.created_at.asc())
                .all()
            )

    def count_audit_logs(self, merchant_id: str) -> int:
        with self._guard("count_audit_logs"):
            return (
                self.db.query(AuditLogModel)
                .filter(AuditLogModel.merchant_id == merchant_id)
                .count()
            )
