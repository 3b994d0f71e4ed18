from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from travel_receipts.api.router import router as api_router
from travel_receipts.bootstrap import bootstrap
from travel_receipts.core.config import settings
from travel_receipts.core.errors import ExtractionError
from travel_receipts.core.logging import (
    RequestContextMiddleware,
    get_logger,
    log_event,
    log_exception,
)
from travel_receipts.modules.evaluation.service import EvalRecorder
from travel_receipts.modules.extraction.providers import build_provider_config, make_provider
from travel_receipts.modules.extraction.service import ExtractionService

logger = get_logger(__name__)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        bootstrap()
        config = build_provider_config(settings)
        provider = make_provider(config)
        app.state.provider_config = config
        app.state.extraction_service = ExtractionService(
            provider,
            recorder=EvalRecorder(provider=config.kind, model=config.model),
            max_input_chars=settings.input_max_chars,
        )
        log_event(logger, "app.started", provider=config.kind, model=config.model)
        try:
            yield
        finally:
            provider.close()

    app = FastAPI(title="Travel Receipts", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    @app.exception_handler(ExtractionError)
    async def extraction_error_handler(request: Request, exc: ExtractionError) -> JSONResponse:
        log_event(
            logger,
            "http.request.error",
            path=request.url.path,
            status_code=exc.status_code,
            error=str(exc),
        )
        return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{where}: {first.get('msg', 'invalid request')}" if where else "Invalid request"
        return JSONResponse(status_code=400, content={"ok": False, "error": message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        log_exception(logger, "http.request.error", path=request.url.path, status_code=500)
        return JSONResponse(status_code=500, content={"ok": False, "error": str(exc) or "Server error"})

    app.include_router(api_router)
    return app


app = create_app()
