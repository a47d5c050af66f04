"""
Display helpers.

Amounts are shown the Vietnamese way: dot as thousands separator, comma
as decimal separator, symbol after the number ("1.234.567 ₫").
"""

import html
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

Number = Union[Decimal, int, float]

_SYMBOLS = {
    "VND": "₫",
    "USD": "US$",
    "EUR": "€",
    "JPY": "¥",
}

# Currencies without minor units
_ZERO_DECIMAL = {"VND", "JPY", "KRW"}

SUGGESTION_CEILING = Decimal("100000000")
DEFAULT_SUGGESTIONS = (Decimal("50000"), Decimal("100000"), Decimal("500000"))


def _group_thousands(integer_part: str) -> str:
    groups = []
    while len(integer_part) > 3:
        groups.insert(0, integer_part[-3:])
        integer_part = integer_part[:-3]
    groups.insert(0, integer_part)
    return ".".join(groups)


def format_amount(amount: Number, decimals: int = 0) -> str:
    """'1234567.5' -> '1.234.568' (decimals=0) or '1.234.567,50' (decimals=2)."""
    exponent = Decimal(1).scaleb(-decimals)
    value = Decimal(str(amount)).quantize(exponent, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    integer_part, _, fraction = f"{abs(value):f}".partition(".")
    text = _group_thousands(integer_part)
    if decimals:
        text = f"{text},{fraction}"
    return f"{sign}{text}"


def format_currency(amount: Number, currency: str = "VND") -> str:
    code = currency.upper()
    decimals = 0 if code in _ZERO_DECIMAL else 2
    symbol = _SYMBOLS.get(code, code)
    return f"{format_amount(amount, decimals)} {symbol}"


def amount_suggestions(amount: Number) -> list[Decimal]:
    """
    Quick-pick amounts offered under the amount field.

    Typing "5" suggests 50, 500 and 5.000 (x10, x100, x1000) so short
    inputs can be expanded with one tap; anything at or above 100 million
    is dropped. With no amount typed, common round values are offered.
    """
    value = Decimal(str(amount)) if amount else Decimal("0")
    if value <= 0:
        return list(DEFAULT_SUGGESTIONS)
    candidates = (value * 10, value * 100, value * 1000)
    return [c for c in candidates if c < SUGGESTION_CEILING]


# =============================================================================
# HTML SNIPPETS
# =============================================================================
# User notes, category names and model replies are all escaped before they
# are placed in markup rendered with unsafe_allow_html.

def swatch_line_html(color: str, label: str, detail: str = "", note: Optional[str] = None) -> str:
    """One list row: colour dot, bold label, plain detail, optional note below."""
    line = (
        f'<span class="swatch" style="background-color:{html.escape(color)}"></span>'
        f"<strong>{html.escape(label)}</strong> {html.escape(detail)}"
    )
    if note:
        line += f"<br/><small>{html.escape(note)}</small>"
    return line


def insight_html(css_class: str, icon: str, title: str, message: str, action_item: str) -> str:
    return (
        f'<div class="{html.escape(css_class)}">'
        f"<h4>{icon} {html.escape(title)}</h4>"
        f"<p>{html.escape(message)}</p>"
        f"<p><strong>👉 {html.escape(action_item)}</strong></p>"
        f"</div>"
    )
