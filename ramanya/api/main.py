"""
HTTP surface for the translation relay.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Depends, Header, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .schemas import (
    TranslateRequest,
    TranslateResponse,
    SuggestionRequest,
    SuggestionCreatedResponse,
    CorrectionResponse,
    CorrectionListResponse,
    ReindexResponse,
    HealthResponse
)
from ..core.config import VERSION, RelayConfig
from ..core.db import health_check
from ..core.errors import AllModelsExhausted, InputValidationError, NotFoundError, StoreError
from ..core.pipeline import TranslationPipeline, build_pipeline
from ..core.schema import CorrectionRecord, STATUS_APPROVED, STATUS_PENDING
from util.logging import logger


def _to_response(record: CorrectionRecord) -> CorrectionResponse:
    return CorrectionResponse(
        id=record.id,
        original=record.original,
        suggestion=record.suggestion,
        context=record.context,
        status=record.status,
        created_at=record.created_at,
        approved_at=record.approved_at,
        has_embedding=bool(record.embedding)
    )


def get_pipeline(request: Request) -> TranslationPipeline:
    return request.app.state.pipeline


def require_admin(request: Request, authorization: Optional[str] = Header(None)) -> None:
    """Bearer token check for admin endpoints; open when no ADMIN_TOKEN is configured."""
    expected = request.app.state.pipeline.config.admin_token
    if not expected:
        return
    if authorization != f"Bearer {expected}":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or missing admin token")


def create_app(pipeline: TranslationPipeline = None, config: RelayConfig = None) -> FastAPI:
    """Create the API application. The pipeline is built at startup unless one is supplied."""
    if pipeline is not None:
        config = pipeline.config
    config = config or RelayConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "pipeline", None) is None:
            app.state.pipeline = build_pipeline(config)
        logger.log_operation("api.startup", "success", {
            "models": app.state.pipeline.config.model_ids,
            "rag_enabled": app.state.pipeline.config.rag_enabled
        })
        yield

    app = FastAPI(
        title="Ramanya Translation Relay",
        version=VERSION,
        description="Retrieval-augmented English/Mon translation relay",
        docs_url="/docs" if config.debug else None,
        redoc_url="/redoc" if config.debug else None,
        lifespan=lifespan
    )
    app.state.pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.log_operation("api.store", "error", {"path": request.url.path, "error": str(exc)})
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                            content={"detail": "Correction store unavailable"})

    @app.get("/health", response_model=HealthResponse)
    def health_check_endpoint(pipeline: TranslationPipeline = Depends(get_pipeline)):
        """Check system health."""
        if pipeline.config.store_backend == "sqlite":
            db_health = health_check(pipeline.config.db_path)
        else:
            db_health = True

        approved_count = pending_count = 0
        if db_health:
            try:
                approved_count = pipeline.store.count(STATUS_APPROVED)
                pending_count = pipeline.store.count(STATUS_PENDING)
            except StoreError:
                db_health = False

        return HealthResponse(
            status="healthy" if db_health else "unhealthy",
            version=VERSION,
            db_health=db_health,
            approved_count=approved_count,
            pending_count=pending_count,
            rag_enabled=pipeline.config.rag_enabled,
            models=pipeline.config.model_ids,
            generator=pipeline.generator.get_status()
        )

    @app.post("/translate", response_model=TranslateResponse, response_model_exclude_none=True)
    def translate_endpoint(req: TranslateRequest, pipeline: TranslationPipeline = Depends(get_pipeline)):
        try:
            result = pipeline.translate(req.message, [v.model_dump() for v in req.vocabulary])
        except InputValidationError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except AllModelsExhausted as e:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
        return result.to_response()

    @app.post("/suggestions", response_model=SuggestionCreatedResponse, status_code=status.HTTP_201_CREATED)
    def submit_suggestion(req: SuggestionRequest, pipeline: TranslationPipeline = Depends(get_pipeline)):
        try:
            record_id = pipeline.suggestions.submit(req.original, req.suggestion, req.context)
        except InputValidationError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        return SuggestionCreatedResponse(id=record_id, status=STATUS_PENDING)

    @app.get("/suggestions", response_model=CorrectionListResponse)
    def list_suggestions(status_filter: str = Query(STATUS_PENDING, alias="status"), pipeline: TranslationPipeline = Depends(get_pipeline)):
        if status_filter == STATUS_PENDING:
            records = pipeline.suggestions.list_pending()
        elif status_filter == STATUS_APPROVED:
            records = pipeline.suggestions.list_approved()
        else:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="status must be 'pending' or 'approved'")
        return CorrectionListResponse(items=[_to_response(r) for r in records])

    @app.post("/suggestions/{record_id}/approve", response_model=CorrectionResponse, dependencies=[Depends(require_admin)])
    def approve_suggestion(record_id: str, pipeline: TranslationPipeline = Depends(get_pipeline)):
        try:
            approved = pipeline.suggestions.approve(record_id)
        except NotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        return _to_response(approved)

    @app.delete("/suggestions/{record_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_admin)])
    def reject_suggestion(record_id: str, pipeline: TranslationPipeline = Depends(get_pipeline)):
        try:
            pipeline.suggestions.reject(record_id)
        except NotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    @app.post("/admin/reindex", response_model=ReindexResponse, dependencies=[Depends(require_admin)])
    def reindex_endpoint(force: bool = False, pipeline: TranslationPipeline = Depends(get_pipeline)):
        stats = pipeline.embedding_cache.reindex(status=STATUS_APPROVED, force=force)
        return ReindexResponse(**stats)

    return app


app = create_app()
