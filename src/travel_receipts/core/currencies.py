from __future__ import annotations

import re

_SYMBOLS: dict[str, str] = {
    "$": "USD",
    "US$": "USD",
    "€": "EUR",
    "£": "GBP",
    "¥": "JPY",
    "₹": "INR",
    "S$": "SGD",
    "A$": "AUD",
    "C$": "CAD",
    "CHF": "CHF",
}

_CODE_RE = re.compile(r"^[A-Z]{3}$")


def normalize_currency(value: str | None) -> str | None:
    """Return an upper-case 3-letter code, or None when the value is not one."""
    if not value:
        return None
    raw = value.strip()
    if not raw:
        return None
    if raw in _SYMBOLS:
        return _SYMBOLS[raw]
    code = raw.upper()
    if _CODE_RE.match(code):
        return code
    return None
