"""
Display helpers for the presentation layer.

Formats engine figures for display, gates quote submission on the email
format and exports a quote as a DataFrame for CSV download. The engine
itself returns exact floats; rounding to whole currency units happens only
here.
"""
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

import pandas as pd

from ..config.settings import get_settings
from ..engine.models import QuoteTotals

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
EMAIL_ERROR = "Please enter a valid email address"


def format_price(amount: float, symbol: Optional[str] = None) -> str:
    """
    Format an amount as whole currency units with '.' thousands separators.

    The symbol defaults to the configured currency_symbol.

    Examples:
        1050 -> "$ 1.050"
        4165.5 -> "$ 4.166"
    """
    if symbol is None:
        symbol = get_settings().currency_symbol
    rounded = int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    digits = f"{abs(rounded):,}".replace(",", ".")
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol} {digits}"


def is_valid_email(email: Optional[str]) -> bool:
    """True for a local-part@domain.tld address."""
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def email_error(email: Optional[str]) -> Optional[str]:
    """Message to show under the email field, None when there is nothing to flag."""
    if not email:
        return None
    if not is_valid_email(email):
        return EMAIL_ERROR
    return None


def can_submit(email: Optional[str]) -> bool:
    """Quote actions stay disabled until a well-formed email is entered."""
    return is_valid_email(email)


def quote_display(totals: QuoteTotals) -> dict:
    """Formatted strings for every figure the quote summary shows."""
    lines = []
    for line in totals.lines:
        lines.append({
            "item_id": line.item_id,
            "name": line.name,
            "licenses": line.quantity,
            "unit_price": format_price(line.unit_price),
            "line_total": format_price(line.line_total),
            "combo_rule_id": line.combo_rule_id,
            "sub_lines": [
                {
                    "sub_option_id": sub.sub_option_id,
                    "name": sub.name,
                    "licenses": sub.quantity,
                    "unit_price": format_price(sub.unit_price),
                    "line_total": format_price(sub.line_total),
                }
                for sub in line.sub_lines
            ],
        })

    return {
        "lines": lines,
        "total_licenses": totals.total_licenses,
        "subtotal": format_price(totals.subtotal),
        "tax_label": f"IVA ({totals.tax_rate:.0%})",
        "tax": format_price(totals.tax),
        "total": format_price(totals.total),
    }


def quote_to_frame(totals: QuoteTotals) -> pd.DataFrame:
    """One row per priced line; sub-options get their own rows."""
    rows = []
    for line in totals.lines:
        if line.sub_lines:
            for sub in line.sub_lines:
                rows.append({
                    'Item': line.name,
                    'Option': sub.name,
                    'Licenses': sub.quantity,
                    'Unit Price': sub.unit_price,
                    'Line Total': sub.line_total,
                })
        else:
            rows.append({
                'Item': line.name,
                'Option': line.combo_rule_id or '',
                'Licenses': line.quantity,
                'Unit Price': line.unit_price,
                'Line Total': line.line_total,
            })

    return pd.DataFrame(rows, columns=['Item', 'Option', 'Licenses', 'Unit Price', 'Line Total'])
