"""
Fiscal receipt ledger — tamper-evident archival of point-of-sale receipts.
"""
__version__ = "0.1.0"
