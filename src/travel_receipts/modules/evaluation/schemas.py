from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class EvalRunOut(BaseModel):
    id: int
    source_file: str | None
    timestamp: datetime
    provider: str
    model: str
    doc_type_pred: str | None
    ground_truth_doc_type: str | None
    json_output: str | None
    success: bool
    parse_error: str | None
    latency_ms: int
    ocr_used: bool
    input_type: str
    input_chars: int
    notes: str | None


class EvalSummaryOut(BaseModel):
    provider: str
    model: str
    total_runs: int
    successful_runs: int
    success_rate: float
    avg_latency_ms: float
    ocr_runs: int
    labeled_runs: int
    type_accuracy: float | None
