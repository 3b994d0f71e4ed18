from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from travel_receipts.core.config import settings
from travel_receipts.core.errors import ExtractionError, InputError
from travel_receipts.core.logging import document_context, get_logger, log_event, monotonic_ms
from travel_receipts.modules.evaluation.service import Attempt
from travel_receipts.modules.extraction.service import ExtractionService
from travel_receipts.modules.intake.ocr import ocr_image_bytes
from travel_receipts.modules.intake.pdf import (
    extract_pdf_text,
    open_pdf_document,
    render_page_png,
)

logger = get_logger(__name__)

PDF_MEDIA_TYPE = "application/pdf"


@dataclass
class IntakeResult:
    record: dict[str, Any]
    input_type: str
    ocr_used: bool
    page_count: int | None = None
    pages_attempted: int = 0


def resolve_media_kind(content_type: str | None, body: bytes) -> str:
    ctype = (content_type or "").split(";")[0].strip().lower()
    if ctype == PDF_MEDIA_TYPE:
        return "pdf"
    if ctype.startswith("image/"):
        return "image"
    if ctype in {"", "application/octet-stream"}:
        if _looks_like_pdf_bytes(body):
            return "pdf"
        if _looks_like_image_bytes(body):
            return "image"
    raise InputError("Please upload a PDF or image.")


def _looks_like_pdf_bytes(body: bytes) -> bool:
    if not body:
        return False
    b = body.lstrip()
    if b.startswith(b"\xef\xbb\xbf"):
        b = b[3:].lstrip()
    return b.startswith(b"%PDF")


def _looks_like_image_bytes(body: bytes) -> bool:
    if not body:
        return False
    b = body.lstrip()
    return (
        b.startswith(b"\x89PNG\r\n\x1a\n")
        or b.startswith(b"\xff\xd8\xff")
        or b.startswith(b"II*\x00")
        or b.startswith(b"MM\x00*")
        or b.startswith(b"BM")
        or b.startswith((b"GIF87a", b"GIF89a"))
        or (len(b) >= 12 and b.startswith(b"RIFF") and b[8:12] == b"WEBP")
    )


def process_document(
    body: bytes,
    content_type: str | None,
    *,
    service: ExtractionService,
    filename: str | None = None,
    ground_truth_doc_type: str | None = None,
) -> IntakeResult:
    """
    Turn an uploaded document into a validated record.

    PDFs with enough embedded text go straight to the model. Scanned PDFs fall
    back to OCR of their first pages, one page at a time, stopping at the first
    page whose extraction succeeds. Images are always OCR'd.
    """
    with document_context(filename):
        log_event(
            logger,
            "intake.received",
            content_type=content_type,
            byte_size=len(body or b""),
        )
        try:
            kind = resolve_media_kind(content_type, body)
        except InputError as e:
            service.record_failure(
                Attempt(
                    input_type="unknown",
                    source_file=filename,
                    ground_truth_doc_type=ground_truth_doc_type,
                ),
                str(e),
                latency_ms=0,
            )
            raise

        process = _process_image if kind == "image" else _process_pdf
        return process(
            body, service=service, filename=filename, ground_truth_doc_type=ground_truth_doc_type
        )


def _process_image(
    body: bytes,
    *,
    service: ExtractionService,
    filename: str | None,
    ground_truth_doc_type: str | None,
) -> IntakeResult:
    attempt = Attempt(
        input_type="image",
        ocr_used=True,
        source_file=filename,
        ground_truth_doc_type=ground_truth_doc_type,
    )
    text = _ocr_or_record(lambda: body, attempt=attempt, service=service, label="image")
    record = service.run(text, attempt)
    return IntakeResult(record=record, input_type="image", ocr_used=True, pages_attempted=1)


def _process_pdf(
    body: bytes,
    *,
    service: ExtractionService,
    filename: str | None,
    ground_truth_doc_type: str | None,
) -> IntakeResult:
    text_attempt = Attempt(
        input_type="text",
        source_file=filename,
        ground_truth_doc_type=ground_truth_doc_type,
    )
    try:
        text = extract_pdf_text(body)
    except InputError as e:
        service.record_failure(text_attempt, str(e), latency_ms=0)
        raise

    if len(text) >= settings.min_text_chars:
        record = service.run(text, text_attempt)
        return IntakeResult(record=record, input_type="text", ocr_used=False)

    log_event(
        logger,
        "intake.ocr_fallback",
        text_chars=len(text),
        min_text_chars=settings.min_text_chars,
    )
    return _ocr_pdf_pages(
        body, service=service, filename=filename, ground_truth_doc_type=ground_truth_doc_type
    )


def _ocr_pdf_pages(
    body: bytes,
    *,
    service: ExtractionService,
    filename: str | None,
    ground_truth_doc_type: str | None,
) -> IntakeResult:
    setup_attempt = Attempt(
        input_type="image",
        ocr_used=True,
        source_file=filename,
        ground_truth_doc_type=ground_truth_doc_type,
    )
    try:
        doc = open_pdf_document(body)
    except InputError as e:
        service.record_failure(setup_attempt, str(e), latency_ms=0)
        raise

    errors: list[ExtractionError] = []
    with doc:
        page_count = doc.page_count
        limit = min(settings.ocr_max_pages, page_count)
        if limit <= 0:
            service.record_failure(setup_attempt, "PDF has no pages", latency_ms=0)
            raise InputError("PDF has no pages")

        for idx in range(limit):
            page_no = idx + 1
            attempt = Attempt(
                input_type="image",
                ocr_used=True,
                source_file=filename,
                ground_truth_doc_type=ground_truth_doc_type,
                notes=f"pdf page {page_no}/{page_count}",
            )
            try:
                text = _ocr_or_record(
                    lambda: render_page_png(doc, idx, scale=settings.ocr_render_scale),
                    attempt=attempt,
                    service=service,
                    label=f"page {page_no}",
                )
                record = service.run(text, attempt)
            except ExtractionError as e:
                errors.append(e)
                log_event(
                    logger,
                    "intake.page.failed",
                    page=page_no,
                    error=str(e),
                )
                continue

            return IntakeResult(
                record=record,
                input_type="image",
                ocr_used=True,
                page_count=page_count,
                pages_attempted=page_no,
            )

    # every attempted page failed; report the first
    raise errors[0]


def _ocr_or_record(
    load_image: Callable[[], bytes],
    *,
    attempt: Attempt,
    service: ExtractionService,
    label: str,
) -> str:
    start = time.monotonic()
    try:
        text = ocr_image_bytes(load_image())
        if not text.strip():
            raise InputError(f"No text recognized in {label}")
    except ExtractionError as e:
        service.record_failure(attempt, str(e), latency_ms=monotonic_ms(start))
        raise
    return text
