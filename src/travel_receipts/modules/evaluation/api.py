from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from travel_receipts.core.db import db_session
from travel_receipts.modules.evaluation.schemas import EvalRunOut, EvalSummaryOut
from travel_receipts.modules.evaluation.service import list_eval_runs, summarize_eval_runs

router = APIRouter(prefix="/eval-runs", tags=["evaluation"])


@router.get("", response_model=list[EvalRunOut])
def list_runs(
    *,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    success: bool | None = None,
    source_file: str | None = None,
    session: Session = Depends(db_session),
) -> list[EvalRunOut]:
    runs = list_eval_runs(
        session, limit=limit, offset=offset, success=success, source_file=source_file
    )
    return [EvalRunOut.model_validate(r, from_attributes=True) for r in runs]


@router.get("/summary", response_model=list[EvalSummaryOut])
def summary(session: Session = Depends(db_session)) -> list[EvalSummaryOut]:
    return [EvalSummaryOut(**row) for row in summarize_eval_runs(session)]
