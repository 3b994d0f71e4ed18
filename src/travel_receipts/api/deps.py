from __future__ import annotations

from fastapi import Request

from travel_receipts.modules.extraction.providers import ProviderConfig
from travel_receipts.modules.extraction.service import ExtractionService


def get_extraction_service(request: Request) -> ExtractionService:
    return request.app.state.extraction_service


def get_provider_config(request: Request) -> ProviderConfig:
    return request.app.state.provider_config
