"""
Ledger error taxonomy.

Verification and compliance report bad data as issues; these exceptions are
reserved for bad input and infrastructure failure.
"""


class LedgerError(Exception):
    """Base class for every ledger failure."""


class EncodingError(LedgerError):
    """Receipt payload is missing a required field or holds a non-finite number."""


class PersistenceError(LedgerError):
    """The store rejected a read or write, or timed out."""


class ChainConflictError(PersistenceError):
    """Another writer already claimed this (merchant_id, chain_position)."""


class RecordNotFoundError(LedgerError):
    """No archived record exists for the requested id."""

    def __init__(self, record_id: str):
        super().__init__(f"Receipt record not found: {record_id}")
        self.record_id = record_id
