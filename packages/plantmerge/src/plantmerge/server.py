"""FastAPI boundary for the retirement tracker."""

import secrets
from typing import Any

import structlog
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from plantmerge.config import MergeConfig
from plantmerge.filters import validate_filters
from plantmerge.pagination import empty_page
from plantmerge.service import RetirementService

log = structlog.get_logger()


class AuthRequest(BaseModel):
    """Request body for the passphrase gate."""

    passphrase: str


class AuthResponse(BaseModel):
    authenticated: bool


class PaginationResponse(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class RetirementPageResponse(BaseModel):
    """Page of merged records; every record carries every key."""

    data: list[dict[str, Any]]
    pagination: PaginationResponse


def create_app(service: RetirementService, config: MergeConfig | None = None) -> FastAPI:
    """Create the FastAPI application around a ready service.

    Data handlers are plain functions: every query rebuilds the merge, so
    they must run in the threadpool, off the event loop.
    """
    config = config or service.config
    app = FastAPI(title="Plant Retirement Tracker")
    passphrase = config.server.passphrase
    header_name = config.server.header_name

    def _check_passphrase(request: Request) -> None:
        if not passphrase:
            return
        supplied = request.headers.get(header_name, "")
        if not secrets.compare_digest(supplied.encode(), passphrase.encode()):
            raise HTTPException(status_code=401, detail="Passphrase required")

    @app.post("/api/auth")
    async def authenticate(req: AuthRequest) -> AuthResponse:
        """Check the shared passphrase."""
        if passphrase and not secrets.compare_digest(req.passphrase.encode(), passphrase.encode()):
            log.info("auth_rejected")
            raise HTTPException(status_code=401, detail="Incorrect passphrase")
        return AuthResponse(authenticated=True)

    @app.get("/api/retirements")
    def get_retirements(
        request: Request,
        state: str = "",
        fuel_type: str = Query("", alias="fuelType"),
        page: str = "1",
    ) -> Any:
        """Merged retirement records, one page at a time."""
        _check_passphrase(request)
        filters = validate_filters(state, fuel_type, page, config.filters)
        try:
            result = service.query(filters)
        except Exception:
            log.exception("retirements_query_failed", state=filters.state, fuel_type=filters.fuel_type)
            body = empty_page(filters.page, config.pagination).to_dict()
            body["error"] = "Internal server error"
            return JSONResponse(status_code=500, content=body)
        return RetirementPageResponse(**result.to_dict())

    @app.get("/api/retirements/summary")
    def get_summary(
        request: Request,
        state: str = "",
        fuel_type: str = Query("", alias="fuelType"),
    ) -> Any:
        """Aggregate counts over the full filtered record set."""
        _check_passphrase(request)
        filters = validate_filters(state, fuel_type, None, config.filters)
        try:
            summary = service.summary(filters)
        except Exception:
            log.exception("retirements_summary_failed", state=filters.state, fuel_type=filters.fuel_type)
            return JSONResponse(status_code=500, content={"error": "Internal server error"})
        return summary.to_dict()

    return app
