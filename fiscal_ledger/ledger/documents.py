"""
Archival documents — the printable receipt kept for the retention period and
the shareable compliance report.

Both renderers are pure: everything they embed comes from their arguments.
"""
from __future__ import annotations

from datetime import datetime
from html import escape
from typing import Any, Iterable, Mapping, Optional

from fiscal_ledger.schemas import ComplianceCheck

PAYMENT_METHOD_LABELS = {
    "cash": "Cash",
    "card": "Bank card",
    "card_terminal": "Card terminal",
    "apple_pay": "Apple Pay",
    "google_pay": "Google Pay",
    "check": "Cheque",
    "transfer": "Bank transfer",
}

STATUS_LABELS = {
    "compliant": ("COMPLIANT", "#22c55e"),
    "partial": ("PARTIALLY COMPLIANT", "#f59e0b"),
    "non-compliant": ("NON-COMPLIANT", "#ef4444"),
}

CHECK_BADGES = {"pass": "OK", "warning": "Attention", "fail": "Failed"}


def payment_method_label(method: str) -> str:
    return PAYMENT_METHOD_LABELS.get(method, method)


def _money(value: Optional[float]) -> str:
    return f"{(value or 0):.2f}"


def _rate(value: float) -> str:
    return f"{value:g}%"


def _item_total(item: Mapping[str, Any]) -> float:
    if item.get("total") is not None:
        return item["total"]
    return item["quantity"] * item["unit_price"]


def _vat_breakdown(items: Iterable[Mapping[str, Any]]) -> list[tuple[float, float]]:
    totals: dict[float, float] = {}
    for item in items:
        rate = item.get("vat_rate")
        if rate is None:
            continue
        totals[rate] = totals.get(rate, 0.0) + _item_total(item)
    return sorted(totals.items())


# ---------------------------------------------------------------------------
# Receipt document
# ---------------------------------------------------------------------------

_RECEIPT_STYLE = """
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body { font-family: 'Courier New', monospace; font-size: 12px; }
    .receipt { max-width: 300px; margin: 0 auto; padding: 15px; }
    .header { text-align: center; border-bottom: 2px dashed #000; padding-bottom: 10px; margin-bottom: 10px; }
    .info p { margin: 3px 0; }
    .items { border-top: 1px dashed #000; border-bottom: 1px dashed #000; padding: 10px 0; margin: 10px 0; }
    .item { margin-bottom: 8px; }
    .item-details, .totals div { display: flex; justify-content: space-between; }
    .total-line { font-weight: bold; border-top: 1px solid #000; padding-top: 5px; }
    .ledger-footer { margin-top: 15px; padding-top: 10px; border-top: 2px dashed #000; text-align: center; font-size: 10px; }
    .hash-display { word-break: break-all; background: #f3f4f6; padding: 5px; margin-top: 5px; }
"""


def _render_item(item: Mapping[str, Any]) -> str:
    return (
        '<div class="item">'
        f'<div class="item-name">{escape(item.get("name") or item["sku"])}</div>'
        f'<div class="item-sku">SKU: {escape(item["sku"])}</div>'
        '<div class="item-details">'
        f'<span>{item["quantity"]:g} x {_money(item["unit_price"])}</span>'
        f'<span>{_money(_item_total(item))}</span>'
        "</div></div>"
    )


def render_receipt_document(
    structured_data: Mapping[str, Any],
    content_hash: str,
    chain_position: int,
    *,
    archived_at: datetime,
    retention_years: int,
) -> str:
    """Self-contained HTML receipt embedding the hash and chain position.

    ``structured_data`` must already have passed canonical encoding.
    """
    items = structured_data.get("items", [])
    tax_label = "Tax"
    if structured_data.get("tax_rate") is not None:
        tax_label = f"Tax ({_rate(structured_data['tax_rate'])})"

    vat_rows = "".join(
        f"<div><span>VAT {_rate(rate)} lines</span><span>{_money(lines)}</span></div>"
        for rate, lines in _vat_breakdown(items)
    )
    transaction = escape(structured_data["transaction_number"])

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>Receipt {transaction}</title>
  <style>{_RECEIPT_STYLE}</style>
</head>
<body>
  <div class="receipt">
    <div class="header">
      <h1>SALES RECEIPT</h1>
      <span class="badge">Archived fiscal receipt</span>
    </div>
    <div class="info">
      <p><strong>No.:</strong> {transaction}</p>
      <p><strong>Date:</strong> {escape(structured_data["date"])}</p>
      <p><strong>Time:</strong> {escape(structured_data["time"])}</p>
      <p><strong>Cashier:</strong> {escape(structured_data.get("cashier") or "-")}</p>
      <p><strong>Session:</strong> {escape(structured_data.get("session_number") or "-")}</p>
    </div>
    <div class="items">
      {"".join(_render_item(item) for item in items)}
    </div>
    <div class="totals">
      <div><span>Subtotal excl. tax:</span><span>{_money(structured_data["subtotal"])}</span></div>
      {vat_rows}
      <div><span>{escape(tax_label)}:</span><span>{_money(structured_data["tax"])}</span></div>
      <div class="total-line"><span>TOTAL:</span><span>{_money(structured_data["total"])}</span></div>
    </div>
    <div class="payment">
      <strong>Payment method:</strong> {escape(payment_method_label(structured_data["payment_method"]))}
    </div>
    <div class="ledger-footer">
      <p>Receipt archived in the tamper-evident fiscal ledger</p>
      <p>Retention: {retention_years} years</p>
      <div class="hash-display">Hash: {escape(content_hash)}</div>
      <div class="chain-info">Chain position: #{chain_position} | {archived_at.isoformat()}</div>
    </div>
  </div>
</body>
</html>"""


# ---------------------------------------------------------------------------
# Compliance report
# ---------------------------------------------------------------------------

def _render_check(check: ComplianceCheck) -> str:
    return (
        '<div class="check">'
        "<div>"
        f"<strong>{escape(check.name)}</strong> <small>(weight {check.weight})</small>"
        f'<p class="description">{escape(check.description)}</p>'
        f"<small>{escape(check.details)}</small>"
        "</div>"
        f'<span class="check-status {check.status}">{CHECK_BADGES[check.status]}</span>'
        "</div>"
    )


def render_report(
    checks: list[ComplianceCheck],
    score: int,
    status: str,
    *,
    merchant_id: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """HTML compliance report for a finished checklist run."""
    label, color = STATUS_LABELS[status]
    subtitle = ""
    if merchant_id is not None:
        subtitle += f"<p>Merchant: {escape(merchant_id)}</p>"
    if generated_at is not None:
        subtitle += f"<p>Generated {generated_at.isoformat()}</p>"

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>Fiscal ledger compliance report</title>
  <style>
    body {{ font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; padding: 20px; }}
    .header {{ text-align: center; margin-bottom: 30px; }}
    .status-badge {{ display: inline-block; padding: 10px 20px; border-radius: 8px; color: white; font-weight: bold; background: {color}; }}
    .score {{ font-size: 48px; font-weight: bold; color: {color}; }}
    .check {{ display: flex; justify-content: space-between; align-items: center; padding: 15px; border-bottom: 1px solid #e5e7eb; }}
    .check-status {{ padding: 5px 10px; border-radius: 4px; font-size: 12px; font-weight: bold; }}
    .pass {{ background: #dcfce7; color: #166534; }}
    .warning {{ background: #fef3c7; color: #92400e; }}
    .fail {{ background: #fee2e2; color: #991b1b; }}
  </style>
</head>
<body>
  <div class="header">
    <h1>Fiscal ledger compliance report</h1>
    {subtitle}
    <div class="score">{score}%</div>
    <span class="status-badge">{label}</span>
  </div>
  <div class="checks">
    <h2>Checks</h2>
    {"".join(_render_check(check) for check in checks)}
  </div>
</body>
</html>"""
