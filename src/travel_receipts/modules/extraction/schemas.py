from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel

RecordType = Literal["flight", "hotel"]


class ExtractTextRequest(BaseModel):
    text: str = ""
    source_file: str | None = None
    ground_truth_type: RecordType | None = None


class ExtractResponse(BaseModel):
    ok: bool
    data: dict[str, Any] | None = None
    error: str | None = None
