"""REST API for collecting and querying top 20 player rankings."""

from __future__ import annotations

import logging
from datetime import timezone
from http import HTTPStatus
from typing import Any, List

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from top20 import __version__
from top20.api.addressing import resolve_client_address
from top20.api.schemas import (
    ErrorResponse,
    HealthResponse,
    PlayerStatsResponse,
    PositionCountResponse,
    SubmissionRequest,
    SubmissionResponse,
)
from top20.config import Settings, load_settings
from top20.persistence import DuplicateSubmissionError, SubmissionRecord, SubmissionStore, connect
from top20.stats import compute_player_stats


logger = logging.getLogger("uvicorn.error")
logger.setLevel(logging.INFO)

REQUIRED_PLAYERS = 20

API_DESCRIPTION = (
    "Collects one ranked list of 20 players per client address and reports "
    "how often each player lands at each position."
)

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _api_error(status_code: int, error: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"error": error, "message": message})


def _duplicate_error() -> HTTPException:
    return _api_error(
        409,
        "IP address already submitted",
        "Only one submission per IP address is allowed",
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Request body could not be parsed"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}" if location else message


def _format_timestamp(record: SubmissionRecord) -> str:
    return record.created_at.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _record_to_response(record: SubmissionRecord) -> SubmissionResponse:
    return SubmissionResponse(
        id=record.submission_id,
        players=record.players,
        submitted_by=record.submitted_by,
        ip_address=record.ip_address,
        created_at=_format_timestamp(record),
    )


def _client_address(request: Request) -> str:
    peer = f"{request.client.host}:{request.client.port}" if request.client else None
    return resolve_client_address(request.headers, peer)


def create_app(store: SubmissionStore | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the API around ``store``, connecting from the environment when omitted."""
    if store is None:
        store = connect(settings or load_settings())

    app = FastAPI(
        title="Top20 API",
        description=API_DESCRIPTION,
        version=__version__,
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
        redoc_url=None,
    )
    app.state.submission_store = store

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict):
            content = exc.detail
        else:
            content = {"error": HTTPStatus(exc.status_code).phrase, "message": str(exc.detail)}
        return JSONResponse(content, status_code=exc.status_code, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            {"error": "Invalid JSON", "message": _describe_validation_error(exc)},
            status_code=400,
        )

    @app.get(
        "/api/health",
        response_model=HealthResponse,
        response_model_exclude_none=True,
        responses={503: {"model": HealthResponse}},
        tags=["health"],
    )
    def health():
        try:
            store.ping()
        except SQLAlchemyError as exc:
            logger.warning("Health check failed: %s", exc)
            return JSONResponse({"status": "unhealthy", "error": str(exc)}, status_code=503)
        return HealthResponse(status="healthy")

    @app.post(
        "/api/submissions",
        status_code=201,
        response_class=Response,
        responses={**_ERROR_RESPONSES, 409: {"model": ErrorResponse}},
        tags=["submissions"],
    )
    def create_submission(payload: SubmissionRequest, request: Request) -> Response:
        if len(payload.players) != REQUIRED_PLAYERS:
            raise _api_error(
                400,
                "Invalid number of players",
                f"Exactly {REQUIRED_PLAYERS} players are required, got {len(payload.players)}",
            )
        if not payload.submitted_by:
            raise _api_error(400, "Missing required field", "submittedBy is required")

        ip_address = _client_address(request)

        try:
            already_submitted = store.has_submission_from(ip_address)
        except SQLAlchemyError as exc:
            logger.exception("Error checking submission for %s", ip_address)
            raise _api_error(500, "Internal server error", "Error checking submission") from exc
        if already_submitted:
            raise _duplicate_error()

        try:
            submission_id = store.add_submission(
                players=payload.players,
                submitted_by=payload.submitted_by,
                ip_address=ip_address,
            )
        except DuplicateSubmissionError as exc:
            logger.info("Concurrent submission from %s rejected by unique constraint", ip_address)
            raise _duplicate_error() from exc
        except SQLAlchemyError as exc:
            logger.exception("Error inserting submission for %s", ip_address)
            raise _api_error(500, "Internal server error", "Error saving submission") from exc

        logger.info("Stored submission %s from %s", submission_id, ip_address)
        return Response(status_code=201)

    @app.get(
        "/api/submissions",
        response_model=List[SubmissionResponse],
        responses={500: {"model": ErrorResponse}},
        tags=["submissions"],
    )
    def list_submissions(submitted_by: str | None = Query(None, alias="submittedBy")):
        try:
            records = store.list_submissions(submitted_by or None)
        except SQLAlchemyError as exc:
            logger.exception("Error querying submissions")
            raise _api_error(500, "Internal server error", "Error fetching submissions") from exc
        return [_record_to_response(record) for record in records]

    @app.get(
        "/api/players/stats",
        response_model=PlayerStatsResponse,
        responses={**_ERROR_RESPONSES, 404: {"model": ErrorResponse}},
        tags=["players"],
    )
    def player_stats(name: str | None = Query(None)):
        if not name:
            raise _api_error(400, "Missing required parameter", "Player name is required")

        try:
            stats = compute_player_stats(name, store.iter_player_lists())
        except SQLAlchemyError as exc:
            logger.exception("Error querying submissions")
            raise _api_error(500, "Internal server error", "Error fetching submissions") from exc

        if stats is None:
            raise _api_error(404, "Player not found", f"Player '{name}' was not found in any submission")

        return PlayerStatsResponse(
            player_name=stats.player_name,
            total_submissions=stats.total_submissions,
            position_breakdown=[
                PositionCountResponse(position=position, count=count)
                for position, count in stats.position_breakdown
            ],
        )

    return app
