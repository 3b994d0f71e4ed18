from __future__ import annotations

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client_with(stub_provider):
    from travel_receipts.api.deps import get_extraction_service
    from travel_receipts.main import create_app
    from travel_receipts.modules.evaluation.service import EvalRecorder
    from travel_receipts.modules.extraction.service import ExtractionService

    clients: list[TestClient] = []

    def _make(*responses):
        app = create_app()
        provider = stub_provider(*responses)
        service = ExtractionService(
            provider, recorder=EvalRecorder(provider="openai", model="gpt-4o-mini")
        )
        app.dependency_overrides[get_extraction_service] = lambda: service
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client, provider

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


def test_ping_reports_provider_and_model(client_with):
    client, _ = client_with({"type": "hotel"})

    r = client.get("/api/ping")
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["provider"] == "openai"
    assert body["model"]
    assert body["db"].startswith("sqlite")

    assert client.get("/healthz").json() == {"status": "ok"}


def test_extract_text_end_to_end_one_way(client_with, make_flight):
    client, provider = client_with(make_flight(tripType="round_trip", returnDate="2024-05-01"))

    r = client.post(
        "/api/extract",
        json={
            "text": "Booking ABC123. LONDON to PARIS on 20 Apr 2024. Passenger MR JOHN SMITH.",
            "source_file": "ticket.txt",
            "ground_truth_type": "flight",
        },
    )
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["data"]["tripType"] == "one_way"
    assert body["data"]["returnDate"] is None
    assert set(body) == {"ok", "data"}
    assert "returnDate" in body["data"]
    assert len(provider.prompts) == 1
    assert r.headers.get("x-request-id")

    runs = client.get("/api/eval-runs").json()
    assert len(runs) == 1
    assert runs[0]["source_file"] == "ticket.txt"
    assert runs[0]["success"] is True

    [summary] = client.get("/api/eval-runs/summary").json()
    assert summary["total_runs"] == 1
    assert summary["type_accuracy"] == 1.0


def test_extract_text_missing_text(client_with):
    client, provider = client_with({"type": "hotel"})

    r = client.post("/api/extract", json={})
    assert r.status_code == 400
    assert r.json() == {"ok": False, "error": "Missing text"}
    assert provider.prompts == []


def test_extract_text_decode_failure_envelope(client_with):
    client, _ = client_with("Sorry, I cannot help with that.")

    r = client.post("/api/extract", json={"text": "Hotel Ritz receipt"})
    assert r.status_code == 422
    body = r.json()
    assert body["ok"] is False
    assert body["error"].startswith("Invalid JSON from model")
    assert "data" not in body

    runs = client.get("/api/eval-runs", params={"success": "false"}).json()
    assert runs[0]["parse_error"] == body["error"]


def test_extract_text_upstream_failure(client_with):
    from travel_receipts.core.errors import UpstreamError

    client, _ = client_with(UpstreamError("Incorrect API key provided"))

    r = client.post("/api/extract", json={"text": "Hotel Ritz receipt"})
    assert r.status_code == 502
    assert r.json() == {"ok": False, "error": "Incorrect API key provided"}


def test_invalid_ground_truth_is_rejected(client_with):
    client, _ = client_with({"type": "hotel"})

    r = client.post("/api/extract", json={"text": "x", "ground_truth_type": "train"})
    assert r.status_code == 400
    assert r.json()["ok"] is False


def test_extract_file_image(monkeypatch, client_with):
    from travel_receipts.modules.intake import service as intake

    monkeypatch.setattr(intake, "ocr_image_bytes", lambda body: "Hotel Ritz Paris, guest Jane Doe")
    client, provider = client_with({"type": "hotel", "hotelName": "HOTEL RITZ"})

    r = client.post(
        "/api/extract-file",
        files={"file": ("receipt.png", b"\x89PNG\r\n\x1a\n...", "image/png")},
        data={"ground_truth_type": "hotel"},
    )
    assert r.status_code == 200
    assert r.json()["data"]["hotelName"] == "Hotel Ritz"
    assert "error" not in r.json()
    assert r.json()["data"]["checkOutDate"] is None
    assert "guest Jane Doe" in provider.prompts[0]

    [run] = client.get("/api/eval-runs").json()
    assert run["ocr_used"] is True
    assert run["input_type"] == "image"
    assert run["source_file"] == "receipt.png"
    assert run["ground_truth_doc_type"] == "hotel"


def test_extract_file_rejects_unsupported_type(client_with):
    client, provider = client_with({"type": "hotel"})

    r = client.post(
        "/api/extract-file",
        files={"file": ("notes.txt", b"plain text", "text/plain")},
    )
    assert r.status_code == 400
    assert r.json() == {"ok": False, "error": "Please upload a PDF or image."}
    assert provider.prompts == []


def test_extract_file_missing_file(client_with):
    client, _ = client_with({"type": "hotel"})

    r = client.post("/api/extract-file", data={"ground_truth_type": "hotel"})
    assert r.status_code == 400
    assert r.json() == {"ok": False, "error": "Missing file"}
