from __future__ import annotations

import json
import os

import pytest

# Set env before any travel_receipts imports (settings/engine are created at import time).
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///./.travel_receipts_test.db")
os.environ.setdefault("LLM_PROVIDER", "openai")
os.environ.setdefault("OPENAI_API_KEY", "test-key")


class StubProvider:
    """Returns canned completions in order and remembers every prompt."""

    name = "stub"
    model = "stub-model"

    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.prompts: list[str] = []
        self.closed = False

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, dict):
            return json.dumps(item)
        return item

    def close(self) -> None:
        self.closed = True


def flight_record(**overrides) -> dict:
    record = {
        "type": "flight",
        "passengerName": "MR JOHN SMITH",
        "bookingReference": "ABC123",
        "ticketNumber": "125-2345678901",
        "tripType": "round_trip",
        "overallFrom": "London",
        "overallTo": "Paris",
        "departureDate": "2024-04-20",
        "returnDate": "2024-05-01",
        "currency": "gbp",
        "totalPrice": "1,234.50",
    }
    record.update(overrides)
    return record


@pytest.fixture
def stub_provider():
    return StubProvider


@pytest.fixture
def make_flight():
    return flight_record


@pytest.fixture(autouse=True)
def _reset_db() -> None:
    import travel_receipts.models  # noqa: F401
    from travel_receipts.core.db import engine
    from travel_receipts.core.models import Base

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)

    yield
