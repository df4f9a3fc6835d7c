from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import FastAPI, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from transaction_dashboard.config import load_config
from transaction_dashboard.core.models import TransactionFilter
from transaction_dashboard.core.months import parse_month
from transaction_dashboard.errors import DashboardError, InvalidQueryError
from transaction_dashboard.queries import DEFAULT_PER_PAGE, QueryService, SQLiteQueryService
from transaction_dashboard.seed import initialize_store

logger = logging.getLogger(__name__)

# Largest LIMIT / OFFSET SQLite accepts.
MAX_SQL_INT = 2**63 - 1


def _parse_positive_int(value: str | None, name: str, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except ValueError:
        raise InvalidQueryError(f"{name} must be an integer") from None
    if number < 1:
        raise InvalidQueryError(f"{name} must be at least 1")
    return number


def _build_filter(month: str | None, search: str | None = None) -> TransactionFilter:
    return TransactionFilter(month=parse_month(month), search=search or "")


def create_app(
    config: Dict[str, Any] | None = None,
    query_service: QueryService | None = None,
) -> FastAPI:
    """Build the API over the configured store."""
    cfg = config or load_config()
    db_path = str(cfg["db_path"])
    service = query_service or SQLiteQueryService(db_path)

    app = FastAPI(title="Transaction Dashboard API")

    origins = cfg.get("cors_origins") or []
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(origins),
            allow_methods=["GET"],
            allow_headers=["*"],
            expose_headers=["X-Total-Count"],
        )

    @app.exception_handler(InvalidQueryError)
    async def invalid_query(request: Request, exc: InvalidQueryError):
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(DashboardError)
    async def dashboard_error(request: Request, exc: DashboardError):
        logger.error("%s %s failed", request.method, request.url.path, exc_info=exc)
        return JSONResponse({"error": str(exc)}, status_code=500)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        message = "not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse({"error": message}, status_code=exc.status_code)

    @app.get("/initialize")
    def initialize():
        return initialize_store(
            db_path,
            str(cfg["seed_url"]),
            timeout=float(cfg["request_timeout"]),
        )

    @app.get("/transactions")
    def list_transactions(
        response: Response,
        month: str | None = None,
        search: str = "",
        page: str | None = None,
        per_page: str | None = Query(None, alias="perPage"),
    ):
        filt = _build_filter(month, search)
        page_number = _parse_positive_int(page, "page", 1)
        page_size = _parse_positive_int(per_page, "perPage", DEFAULT_PER_PAGE)
        if page_size > MAX_SQL_INT or (page_number - 1) * page_size > MAX_SQL_INT:
            raise InvalidQueryError("page and perPage are out of range")
        response.headers["X-Total-Count"] = str(service.count_transactions(filt))
        return service.list_transactions(filt, page=page_number, per_page=page_size)

    @app.get("/statistics")
    def statistics(month: str | None = None):
        return service.statistics(_build_filter(month))

    @app.get("/bar-chart")
    def bar_chart(month: str | None = None):
        return service.bar_chart(_build_filter(month))

    @app.get("/pie-chart")
    def pie_chart(month: str | None = None):
        return service.pie_chart(_build_filter(month))

    return app
