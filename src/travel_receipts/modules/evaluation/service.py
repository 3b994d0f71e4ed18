from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from travel_receipts.core.db import SessionLocal
from travel_receipts.core.logging import get_logger, log_exception
from travel_receipts.modules.evaluation.models import EvalRun

logger = get_logger(__name__)


@dataclass(frozen=True)
class Attempt:
    """What the caller knows about one extraction attempt before it runs."""

    input_type: str
    ocr_used: bool = False
    source_file: str | None = None
    ground_truth_doc_type: str | None = None
    notes: str | None = None


class EvalRecorder:
    """Appends one EvalRun per attempt; never lets a storage failure escape."""

    def __init__(
        self,
        *,
        provider: str,
        model: str,
        session_factory: Callable[[], Session] = SessionLocal,
    ) -> None:
        self.provider = provider
        self.model = model
        self._session_factory = session_factory

    def record(
        self,
        attempt: Attempt,
        *,
        success: bool,
        latency_ms: int,
        input_chars: int,
        record: dict[str, Any] | None = None,
        error: str | None = None,
    ) -> int | None:
        try:
            with self._session_factory() as session:
                run = EvalRun(
                    source_file=attempt.source_file,
                    timestamp=datetime.now(UTC),
                    provider=self.provider,
                    model=self.model,
                    doc_type_pred=record.get("type") if record else None,
                    ground_truth_doc_type=attempt.ground_truth_doc_type,
                    json_output=json.dumps(record, ensure_ascii=False) if record else None,
                    success=success,
                    parse_error=error,
                    latency_ms=latency_ms,
                    ocr_used=attempt.ocr_used,
                    input_type=attempt.input_type,
                    input_chars=input_chars,
                    notes=attempt.notes,
                )
                session.add(run)
                session.commit()
                return run.id
        except Exception:
            log_exception(
                logger,
                "eval.record.failed",
                source_file=attempt.source_file,
                success=success,
            )
            return None


def list_eval_runs(
    session: Session,
    *,
    limit: int = 50,
    offset: int = 0,
    success: bool | None = None,
    source_file: str | None = None,
) -> list[EvalRun]:
    stmt = select(EvalRun)
    if success is not None:
        stmt = stmt.where(EvalRun.success.is_(success))
    if source_file:
        stmt = stmt.where(EvalRun.source_file == source_file)
    stmt = stmt.order_by(EvalRun.id.desc()).limit(limit).offset(offset)
    return list(session.scalars(stmt))


def summarize_eval_runs(session: Session) -> list[dict[str, Any]]:
    succeeded = func.sum(case((EvalRun.success.is_(True), 1), else_=0))
    ocr_runs = func.sum(case((EvalRun.ocr_used.is_(True), 1), else_=0))
    labeled = func.sum(case((EvalRun.ground_truth_doc_type.is_not(None), 1), else_=0))
    correct = func.sum(
        case((EvalRun.ground_truth_doc_type == EvalRun.doc_type_pred, 1), else_=0)
    )
    stmt = (
        select(
            EvalRun.provider,
            EvalRun.model,
            func.count(EvalRun.id),
            succeeded,
            func.avg(EvalRun.latency_ms),
            ocr_runs,
            labeled,
            correct,
        )
        .group_by(EvalRun.provider, EvalRun.model)
        .order_by(EvalRun.provider, EvalRun.model)
    )

    out: list[dict[str, Any]] = []
    for provider, model, total, ok, avg_latency, ocr, n_labeled, n_correct in session.execute(
        stmt
    ):
        total = int(total or 0)
        ok = int(ok or 0)
        n_labeled = int(n_labeled or 0)
        n_correct = int(n_correct or 0)
        out.append(
            {
                "provider": provider,
                "model": model,
                "total_runs": total,
                "successful_runs": ok,
                "success_rate": round(ok / total, 4) if total else 0.0,
                "avg_latency_ms": round(float(avg_latency or 0.0), 1),
                "ocr_runs": int(ocr or 0),
                "labeled_runs": n_labeled,
                "type_accuracy": round(n_correct / n_labeled, 4) if n_labeled else None,
            }
        )
    return out
