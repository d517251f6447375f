"""
Canonical receipt encoder.

The byte form is built from an explicit, versioned field list so the same
logical receipt always encodes identically, whatever order its keys arrive
in. Amounts are normalised to floats before encoding. Bump
``ENCODING_VERSION`` whenever a field list or a normalisation rule changes.
"""
from __future__ import annotations

import json
import math
from typing import Any, Mapping

from fiscal_ledger.errors import EncodingError

ENCODING_VERSION = "receipt-v2"

# (field, kind, required)
RECEIPT_FIELDS: tuple[tuple[str, str, bool], ...] = (
    ("transaction_number", "str", True),
    ("date", "str", True),
    ("time", "str", True),
    ("cashier", "str", False),
    ("session_number", "str", False),
    ("subtotal", "num", True),
    ("tax", "num", True),
    ("tax_rate", "num", False),
    ("total", "num", True),
    ("payment_method", "str", True),
)

ITEM_FIELDS: tuple[tuple[str, str, bool], ...] = (
    ("sku", "str", True),
    ("name", "str", False),
    ("quantity", "num", True),
    ("unit_price", "num", True),
    ("total", "num", False),
    ("vat_rate", "num", False),
)


def _number(value: Any, path: str) -> float:
    # bool is an int subclass; a flag is never a fiscal amount
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise EncodingError(f"{path} must be a number, got {type(value).__name__}")
    try:
        number = float(value)
    except OverflowError:
        raise EncodingError(f"{path} is out of range") from None
    if not math.isfinite(number):
        raise EncodingError(f"{path} must be finite, got {value!r}")
    # 10 and 10.0 are the same amount; so are 0.0 and -0.0
    return number + 0.0


def _value(source: Mapping[str, Any], field: str, kind: str, required: bool, path: str):
    value = source.get(field)
    if value is None:
        if required:
            raise EncodingError(f"missing required field: {path}")
        return None
    if kind == "num":
        return _number(value, path)
    if not isinstance(value, str):
        raise EncodingError(f"{path} must be a string, got {type(value).__name__}")
    return value


def _ordered(source: Mapping[str, Any], fields, prefix: str = "") -> list:
    return [_value(source, name, kind, required, prefix + name) for name, kind, required in fields]


def canonical_fields(structured_data: Mapping[str, Any]) -> list:
    """Return ``[version, header values, item rows]`` in canonical order."""
    if not isinstance(structured_data, Mapping):
        raise EncodingError("receipt payload must be a mapping")

    items = structured_data.get("items")
    if items is None:
        raise EncodingError("missing required field: items")
    if not isinstance(items, list):
        raise EncodingError("items must be a list")

    rows = []
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise EncodingError(f"items[{index}] must be a mapping")
        rows.append(_ordered(item, ITEM_FIELDS, prefix=f"items[{index}]."))

    return [ENCODING_VERSION, _ordered(structured_data, RECEIPT_FIELDS), rows]


def encode_receipt(structured_data: Mapping[str, Any]) -> bytes:
    """Deterministic UTF-8 bytes for a receipt payload.

    Raises ``EncodingError`` when a required field is absent or a numeric
    field is not a finite number.
    """
    return json.dumps(
        canonical_fields(structured_data),
        ensure_ascii=False,
        separators=(",", ":"),
        allow_nan=False,
    ).encode("utf-8")
