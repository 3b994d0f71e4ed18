from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from travel_receipts.core.models import Base, IntegerPrimaryKey


class EvalRun(IntegerPrimaryKey, Base):
    __tablename__ = "eval_runs"

    source_file: Mapped[str | None] = mapped_column(String(512), nullable=True, index=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    provider: Mapped[str] = mapped_column(String(50))
    model: Mapped[str] = mapped_column(String(200))

    doc_type_pred: Mapped[str | None] = mapped_column(String(20), nullable=True)
    ground_truth_doc_type: Mapped[str | None] = mapped_column(String(20), nullable=True)

    json_output: Mapped[str | None] = mapped_column(Text, nullable=True)
    success: Mapped[bool] = mapped_column(Boolean, index=True)
    parse_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    latency_ms: Mapped[int] = mapped_column(Integer, default=0)
    ocr_used: Mapped[bool] = mapped_column(Boolean, default=False)

    input_type: Mapped[str] = mapped_column(String(20))
    input_chars: Mapped[int] = mapped_column(Integer, default=0)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
