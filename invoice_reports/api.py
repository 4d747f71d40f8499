"""FastAPI application exposing report endpoints."""
from __future__ import annotations

import logging
import traceback
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .aggregator import InvoiceAggregator
from .config import Settings, configure_logging
from .errors import NotFoundError, ReportError
from .listing import get_report, list_accounts, list_reports
from .schemas import AccountOption, ErrorResponse, GenerateReportResponse, ReportListEntry, ReportRequest
from .store import Stores
from .summarizer import ReportGenerator

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_stores(request: Request) -> Stores:
    return request.app.state.stores


def get_generator(stores: Stores = Depends(get_stores)) -> ReportGenerator:
    return ReportGenerator(InvoiceAggregator(stores.invoices), stores.reports)


def _error_response(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _describe_validation(exc: RequestValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )


def _stack_for(request: Request, exc: Exception) -> Optional[str]:
    if request.app.state.settings.is_production:
        return None
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def create_app(settings: Optional[Settings] = None, stores: Optional[Stores] = None) -> FastAPI:
    settings = settings or Settings.load()
    owns_stores = stores is None
    if stores is None:
        stores = Stores.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_stores:
            stores.close()

    app = FastAPI(title="Invoice Reports Service", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.stores = stores

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        detail = _describe_validation(exc)
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, detail)
        return _error_response(status.HTTP_400_BAD_REQUEST, ErrorResponse(message="Missing required fields", error=detail))

    @app.exception_handler(ReportError)
    async def handle_report_error(request: Request, exc: ReportError) -> JSONResponse:
        if isinstance(exc, NotFoundError):
            logger.info("%s %s: %s", request.method, request.url.path, exc.detail)
            return _error_response(exc.status_code, ErrorResponse(message=exc.message))

        body = ErrorResponse(message=exc.message, error=exc.detail)
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail, exc_info=exc)
            body.stack = _stack_for(request, exc)
        else:
            logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.detail)
        return _error_response(exc.status_code, body)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error("%s %s failed unexpectedly: %s", request.method, request.url.path, exc, exc_info=exc)
        message = "Error generating report" if request.method == "POST" else "Internal Server Error"
        body = ErrorResponse(message=message, error=str(exc), stack=_stack_for(request, exc))
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, body)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/reports", response_model=List[ReportListEntry])
    def reports_index(stores: Stores = Depends(get_stores)):
        return list_reports(stores.reports)

    @app.post("/reports", response_model=GenerateReportResponse, status_code=status.HTTP_201_CREATED)
    def create_report(
        payload: ReportRequest,
        generator: ReportGenerator = Depends(get_generator),
        settings: Settings = Depends(get_settings),
        x_user_id: Optional[str] = Header(default=None),
    ):
        generated_by = payload.generated_by or x_user_id or settings.default_user
        generated = generator.generate(payload, generated_by)
        return GenerateReportResponse(report_id=generated.report_id, report=generated.payload)

    @app.get("/reports/{report_id}")
    def report_detail(report_id: str, stores: Stores = Depends(get_stores)):
        return get_report(stores.reports, stores.accounts, report_id)

    @app.get("/accounts", response_model=List[AccountOption])
    def accounts_index(
        account_type: Optional[str] = Query(default=None, alias="type"),
        stores: Stores = Depends(get_stores),
    ):
        return list_accounts(stores.accounts, account_type)

    return app


def build_default_app() -> FastAPI:
    settings = Settings.load()
    configure_logging(settings.log_level)
    return create_app(settings)
