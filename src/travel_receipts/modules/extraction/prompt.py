from __future__ import annotations

import re

DEFAULT_MAX_CHARS = 12000

_FLIGHT_SCHEMA = """FLIGHT:
{
  "type": "flight",
  "passengerName": string | null,
  "bookingReference": string | null,
  "ticketNumber": string | null,
  "tripType": "one_way" | "round_trip" | null,
  "overallFrom": string | null,
  "overallTo": string | null,
  "departureDate": string | null,
  "returnDate": string | null,
  "currency": string | null,
  "totalPrice": number | null
}"""

_HOTEL_SCHEMA = """HOTEL:
{
  "type": "hotel",
  "guestName": string | null,
  "hotelName": string | null,
  "receiptNumber": string | null,
  "hotelCity": string | null,
  "checkInDate": string | null,
  "checkOutDate": string | null,
  "currency": string | null,
  "totalPrice": number | null
}"""

RULEBOOK = """Rules:
1) Choose exactly ONE: "type" must be either "flight" or "hotel".
2) Dates must be "YYYY-MM-DD" (date only). If unknown, null.
3) City fields must be only city names (NOT airport codes and no country names) in ALL CAPS. If only a code is shown, infer the city if obvious.
4) Names: FIRSTNAME LASTNAME in ALL CAPS; remove titles MR/MS/MRS/DR; remove extra tokens.
5) Flight simplification: do NOT output segments/connections.
   overallFrom = city of the first departure (the trip origin, never a connecting or layover airport).
   overallTo = final destination city of the outbound journey (never a connecting or layover airport).
   departureDate = date of the first departure.
   returnDate = departure date of the return flight, for round_trip only; otherwise null.
   A flight is round_trip ONLY if there are two opposite directions (A->B and B->A) with their own flight dates. Connections are allowed on either direction (A->C->B and B->C->A).
   Otherwise it is one_way and returnDate MUST be null. A one_way ticket may still connect (A->C->B).
6) Price: currency must be a 3-letter international code. totalPrice must be the final sum of all costs, base fare/rate plus all taxes, fees and surcharges.
7) totalPrice must be a non-negative NUMBER with no currency symbols; if several prices are shown, use the TOTAL amount.
8) bookingReference (flight) and receiptNumber (hotel) are the same concept. If several references are shown, use the most prominently displayed one.
9) hotelName must use Capitalized Words (first letter of each word upper-case).
10) Output ONLY valid JSON. No markdown, no extra keys.
11) Always respond in English and use English characters."""


def normalize_text(text: str, max_chars: int | None = DEFAULT_MAX_CHARS) -> str:
    t = (text or "").replace("\xa0", " ")
    t = re.sub(r"[ \t]+", " ", t)
    t = re.sub(r"\n{3,}", "\n\n", t)
    t = t.strip()
    if max_chars and max_chars > 0:
        t = t[:max_chars]
    return t


def build_prompt(text: str, *, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    return (
        "You are an information extraction system. You read travel-related documents\n"
        "(flight tickets / itineraries / boarding passes / flight receipts OR hotel booking "
        "confirmations / hotel invoices)\n"
        "and you MUST return a single JSON object that matches EXACTLY one of these schemas:\n\n"
        f"{_FLIGHT_SCHEMA}\n\n"
        f"{_HOTEL_SCHEMA}\n\n"
        f"{RULEBOOK}\n\n"
        "Now extract from this document:\n\n"
        f"{normalize_text(text, max_chars)}"
    )
