from __future__ import annotations

import json
from typing import Any

from travel_receipts.core.errors import SchemaError

FLIGHT_KEYS: tuple[str, ...] = (
    "passengerName",
    "bookingReference",
    "ticketNumber",
    "tripType",
    "overallFrom",
    "overallTo",
    "departureDate",
    "returnDate",
    "currency",
    "totalPrice",
)

HOTEL_KEYS: tuple[str, ...] = (
    "guestName",
    "hotelName",
    "receiptNumber",
    "hotelCity",
    "checkInDate",
    "checkOutDate",
    "currency",
    "totalPrice",
)

REQUIRED_KEYS: dict[str, tuple[str, ...]] = {
    "flight": FLIGHT_KEYS,
    "hotel": HOTEL_KEYS,
}


def ensure_required_keys(obj: Any) -> Any:
    """Insert every missing required key for the record's tag as null, in place."""
    if not isinstance(obj, dict):
        return obj
    record_type = obj.get("type")
    keys = REQUIRED_KEYS.get(record_type) if isinstance(record_type, str) else None
    if keys is None:
        return obj
    for key in keys:
        if key not in obj:
            obj[key] = None
    return obj


def validate_record(obj: Any) -> None:
    if not isinstance(obj, dict):
        raise SchemaError(f"Model output is not a JSON object: {str(obj)[:200]}")

    record_type = obj.get("type")
    keys = REQUIRED_KEYS.get(record_type) if isinstance(record_type, str) else None
    if keys is None:
        raise SchemaError(
            f'Model output missing/invalid "type": {json.dumps(obj, default=str)[:200]}'
        )

    for key in keys:
        if key not in obj:
            raise SchemaError(f'{record_type.capitalize()} output missing key "{key}"')
