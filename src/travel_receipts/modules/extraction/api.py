from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile
from starlette.concurrency import run_in_threadpool

from travel_receipts.api.deps import get_extraction_service
from travel_receipts.core.errors import InputError
from travel_receipts.core.logging import get_logger, log_event
from travel_receipts.modules.extraction.schemas import (
    ExtractResponse,
    ExtractTextRequest,
    RecordType,
)
from travel_receipts.modules.extraction.service import ExtractionService
from travel_receipts.modules.intake.service import process_document

router = APIRouter(tags=["extraction"])
logger = get_logger(__name__)


@router.post("/extract", response_model=ExtractResponse, response_model_exclude_unset=True)
async def extract_text(
    payload: ExtractTextRequest,
    service: ExtractionService = Depends(get_extraction_service),
) -> ExtractResponse:
    data = await run_in_threadpool(
        service.extract_text,
        payload.text,
        source_file=payload.source_file,
        ground_truth_doc_type=payload.ground_truth_type,
    )
    return ExtractResponse(ok=True, data=data)


@router.post(
    "/extract-file", response_model=ExtractResponse, response_model_exclude_unset=True
)
async def extract_file(
    file: UploadFile | None = File(None),
    ground_truth_type: RecordType | None = Form(None),
    service: ExtractionService = Depends(get_extraction_service),
) -> ExtractResponse:
    if file is None:
        raise InputError("Missing file")

    try:
        body = await file.read()
        log_event(
            logger,
            "upload.received",
            filename=file.filename,
            content_type=file.content_type,
            byte_size=len(body),
        )
        result = await run_in_threadpool(
            process_document,
            body,
            file.content_type,
            service=service,
            filename=file.filename,
            ground_truth_doc_type=ground_truth_type,
        )
    finally:
        await file.close()

    return ExtractResponse(ok=True, data=result.record)
