from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.engine.url import make_url

from travel_receipts.api.deps import get_provider_config
from travel_receipts.core.config import settings
from travel_receipts.modules.evaluation.api import router as evaluation_router
from travel_receipts.modules.extraction.api import router as extraction_router
from travel_receipts.modules.extraction.providers import ProviderConfig

router = APIRouter()

router.include_router(extraction_router, prefix="/api")
router.include_router(evaluation_router, prefix="/api")


@router.get("/api/ping")
def ping(config: ProviderConfig = Depends(get_provider_config)) -> dict[str, Any]:
    return {
        "ok": True,
        "provider": config.kind,
        "model": config.model,
        "db": make_url(settings.database_url).render_as_string(hide_password=True),
    }


@router.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}
