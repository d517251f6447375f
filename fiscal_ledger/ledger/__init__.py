"""
Fiscal ledger core.

encode → hash → sign → render are pure; the archiver, verifier and
compliance checker work against a ``LedgerStore``.
"""
from fiscal_ledger.ledger.chain import SENTINEL_HASH, compute_hash
from fiscal_ledger.ledger.encoder import encode_receipt
from fiscal_ledger.ledger.signer import sign, verify_signature

__all__ = [
    "SENTINEL_HASH",
    "compute_hash",
    "encode_receipt",
    "sign",
    "verify_signature",
]
