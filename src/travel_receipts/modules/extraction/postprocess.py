from __future__ import annotations

import re
import string
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from travel_receipts.core.currencies import normalize_currency

ONE_WAY = "one_way"
ROUND_TRIP = "round_trip"

# A mention of the destination this close after an origin mention means the
# outbound leg is being restated (itinerary summary, fare rules, footer).
REPETITION_WINDOW = 400
PLAUSIBILITY_BEFORE = 50
PLAUSIBILITY_AFTER = 100

_HONORIFIC_RE = re.compile(r"\b(MR|MRS|MS|MISS|DR|PROF)\b\.?", re.I)
_WS_RE = re.compile(r"\s+")
_DIGIT_RE = re.compile(r"\d")


def clean_name(name: Any) -> str | None:
    if not name or not isinstance(name, str):
        return None
    stripped = _HONORIFIC_RE.sub(" ", name)
    stripped = "".join(
        ch if ch.isalpha() or ch in "'-" or ch.isspace() else " " for ch in stripped
    )
    stripped = _WS_RE.sub(" ", stripped).strip()
    if not stripped:
        return None
    return stripped.upper()


def clean_ticket_number(ticket: Any) -> str | None:
    if not ticket or not isinstance(ticket, str):
        return None
    digits = re.sub(r"[^\d\s]", " ", ticket)
    digits = _WS_RE.sub(" ", digits).strip()
    return digits or None


def clean_city(city: Any) -> str | None:
    if not city or not isinstance(city, str):
        return None
    out = _WS_RE.sub(" ", city).strip()
    return out.upper() or None


def title_case(value: Any) -> str | None:
    if not value or not isinstance(value, str):
        return None
    out = string.capwords(_WS_RE.sub(" ", value).strip())
    return out or None


def normalize_date(value: Any) -> str | None:
    if not value or not isinstance(value, str):
        return None
    raw = value.strip()
    if re.match(r"^\d{4}-\d{2}-\d{2}", raw):
        try:
            return date.fromisoformat(raw[:10]).isoformat()
        except ValueError:
            return None
    for fmt in ("%d %b %Y", "%d %B %Y", "%b %d, %Y", "%B %d, %Y", "%d.%m.%Y"):
        try:
            return datetime.strptime(raw, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def normalize_price(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if value >= 0 else None
    if not isinstance(value, str):
        return None
    s = value.replace("\u202f", " ").replace("\xa0", " ").strip()
    if s.startswith("-"):
        return None
    amount = _parse_decimal_amount(s)
    return float(amount) if amount is not None else None


def _parse_decimal_amount(raw: str) -> Decimal | None:
    s = re.sub(r"[^0-9,.' ]", "", raw)
    s = s.replace(" ", "").replace("'", "")
    if not s or not any(ch.isdigit() for ch in s):
        return None

    if "," in s and "." in s:
        decimal_sep = "," if s.rfind(",") > s.rfind(".") else "."
        thousands_sep = "." if decimal_sep == "," else ","
        normalized = s.replace(thousands_sep, "").replace(decimal_sep, ".")
    elif "," in s:
        idx = s.rfind(",")
        digits_after = len(s) - idx - 1
        if s.count(",") == 1 and digits_after in {1, 2}:
            normalized = s.replace(",", ".")
        else:
            normalized = s.replace(",", "")
    elif s.count(".") > 1:
        normalized = s.replace(".", "")
    else:
        normalized = s

    try:
        return Decimal(normalized).quantize(Decimal("0.01"))
    except InvalidOperation:
        return None


def classify_trip(text: str, origin: str | None, destination: str | None) -> str:
    """
    Decide one_way vs round_trip from where the origin and destination cities
    appear in the source text.

    A round trip needs an origin mention after the outbound destination that is
    not followed by the destination again within REPETITION_WINDOW characters
    and that has a digit (date, time, flight number) nearby.
    """
    t = (text or "").lower()
    a = (origin or "").lower()
    b = (destination or "").lower()
    if not a or not b:
        return ONE_WAY

    idx_a = t.find(a)
    if idx_a == -1:
        return ONE_WAY
    idx_b = t.find(b, idx_a)
    if idx_b == -1:
        return ONE_WAY

    cursor = t.find(a, idx_b + len(b))
    while cursor != -1:
        next_b = t.find(b, cursor + len(a))
        is_repetition = next_b != -1 and (next_b - cursor) < REPETITION_WINDOW

        snippet = t[max(0, cursor - PLAUSIBILITY_BEFORE) : cursor + PLAUSIBILITY_AFTER]
        has_digit = bool(_DIGIT_RE.search(snippet))

        if not is_repetition and has_digit:
            return ROUND_TRIP
        cursor = t.find(a, cursor + len(a))

    return ONE_WAY


def _clean_common(record: dict[str, Any]) -> None:
    if "currency" in record:
        cur = record["currency"]
        record["currency"] = normalize_currency(cur) if isinstance(cur, str) else None
    if "totalPrice" in record:
        record["totalPrice"] = normalize_price(record["totalPrice"])


def post_process_flight(record: dict[str, Any], text: str) -> dict[str, Any]:
    out = dict(record)
    _clean_common(out)

    out["passengerName"] = clean_name(out.get("passengerName"))
    out["ticketNumber"] = clean_ticket_number(out.get("ticketNumber"))
    out["overallFrom"] = clean_city(out.get("overallFrom"))
    out["overallTo"] = clean_city(out.get("overallTo"))
    out["departureDate"] = normalize_date(out.get("departureDate"))
    out["returnDate"] = normalize_date(out.get("returnDate"))

    # The text heuristic always overrides the model's own guess.
    out["tripType"] = classify_trip(text, out["overallFrom"], out["overallTo"])
    if out["tripType"] == ONE_WAY:
        out["returnDate"] = None
    return out


def post_process_hotel(record: dict[str, Any]) -> dict[str, Any]:
    out = dict(record)
    _clean_common(out)

    out["guestName"] = clean_name(out.get("guestName"))
    out["hotelName"] = title_case(out.get("hotelName"))
    out["hotelCity"] = clean_city(out.get("hotelCity"))
    out["checkInDate"] = normalize_date(out.get("checkInDate"))
    out["checkOutDate"] = normalize_date(out.get("checkOutDate"))
    return out


def post_process(record: dict[str, Any], text: str) -> dict[str, Any]:
    record_type = record.get("type")
    if record_type == "flight":
        return post_process_flight(record, text)
    if record_type == "hotel":
        return post_process_hotel(record)
    return record
