from __future__ import annotations

import time
from typing import Any

from travel_receipts.core.errors import InputError
from travel_receipts.core.logging import document_context, get_logger, log_event, monotonic_ms
from travel_receipts.modules.evaluation.service import Attempt, EvalRecorder
from travel_receipts.modules.extraction.decoder import decode_model_output
from travel_receipts.modules.extraction.postprocess import post_process
from travel_receipts.modules.extraction.prompt import DEFAULT_MAX_CHARS, build_prompt
from travel_receipts.modules.extraction.providers import CompletionProvider
from travel_receipts.modules.extraction.schema import ensure_required_keys, validate_record

logger = get_logger(__name__)


class ExtractionService:
    """Prompt -> provider -> decode -> complete/validate -> post-process -> validate."""

    def __init__(
        self,
        provider: CompletionProvider,
        *,
        recorder: EvalRecorder | None = None,
        max_input_chars: int = DEFAULT_MAX_CHARS,
    ) -> None:
        self.provider = provider
        self.recorder = recorder
        self.max_input_chars = max_input_chars

    def extract(self, text: str) -> dict[str, Any]:
        prompt = build_prompt(text, max_chars=self.max_input_chars)
        raw = self.provider.complete(prompt)

        data = decode_model_output(raw)
        ensure_required_keys(data)
        validate_record(data)

        data = post_process(data, text)

        # post-processing may have dropped a key
        ensure_required_keys(data)
        validate_record(data)
        return data

    def run(self, text: str, attempt: Attempt) -> dict[str, Any]:
        start = time.monotonic()
        log_event(
            logger,
            "extract.start",
            source_file=attempt.source_file,
            input_type=attempt.input_type,
            input_chars=len(text or ""),
        )
        try:
            data = self.extract(text)
        except Exception as e:
            self.record_failure(
                attempt, str(e), latency_ms=monotonic_ms(start), input_chars=len(text or "")
            )
            raise

        latency = monotonic_ms(start)
        log_event(
            logger,
            "extract.success",
            source_file=attempt.source_file,
            doc_type=data.get("type"),
            duration_ms=latency,
        )
        if self.recorder is not None:
            self.recorder.record(
                attempt,
                success=True,
                latency_ms=latency,
                input_chars=len(text or ""),
                record=data,
            )
        return data

    def record_failure(
        self, attempt: Attempt, error: str, *, latency_ms: int, input_chars: int = 0
    ) -> None:
        log_event(
            logger,
            "extract.failed",
            source_file=attempt.source_file,
            input_type=attempt.input_type,
            error=error,
            duration_ms=latency_ms,
        )
        if self.recorder is not None:
            self.recorder.record(
                attempt,
                success=False,
                latency_ms=latency_ms,
                input_chars=input_chars,
                error=error,
            )

    def extract_text(
        self,
        text: str,
        *,
        source_file: str | None = None,
        ground_truth_doc_type: str | None = None,
    ) -> dict[str, Any]:
        attempt = Attempt(
            input_type="text",
            ocr_used=False,
            source_file=source_file,
            ground_truth_doc_type=ground_truth_doc_type,
        )
        with document_context(source_file):
            if not text or not text.strip():
                self.record_failure(attempt, "Missing text", latency_ms=0)
                raise InputError("Missing text")
            return self.run(text, attempt)
