from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import config
from .cache import ResponseCache
from .errors import InvalidRequest, ScrimError
from .models import (
    AttendanceCreate,
    AttendanceDelete,
    MatchResultPayload,
    MatchResultUpdate,
    ScheduleRef,
    ScheduleUpdate,
    ScrimForm,
    first_error_message,
)
from .repository import ScrimRepository
from .sheets_manager import SheetsManager

logger = logging.getLogger(__name__)


def ok(data: Any = None, status_code: int = 200, headers: Optional[Dict[str, str]] = None, **extra: Any) -> JSONResponse:
    body: Dict[str, Any] = {"ok": True}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return JSONResponse(body, status_code=status_code, headers=headers)


def error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"ok": False, "error": message}, status_code=status_code)


def _dump(records) -> List[Dict[str, Any]]:
    return [record.model_dump(by_alias=True) for record in records]


def _optional_int(value: Optional[str], name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise InvalidRequest(f"{name} must be a number") from None


def _cache_key(fraksi: str) -> str:
    return f"sheets-{fraksi}"


def get_repository(request: Request) -> ScrimRepository:
    repository = request.app.state.repository
    if repository is None:
        repository = ScrimRepository(SheetsManager())
        request.app.state.repository = repository
    return repository


def get_cache(request: Request) -> ResponseCache:
    return request.app.state.cache


def create_app(repository: Optional[ScrimRepository] = None, cache: Optional[ResponseCache] = None) -> FastAPI:
    app = FastAPI(title="Scrim Scheduler API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.repository = repository
    app.state.cache = cache or ResponseCache()

    @app.exception_handler(ScrimError)
    def handle_scrim_error(request: Request, exc: ScrimError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.exception("Error in %s %s: %s", request.method, request.url.path, exc.message)
        else:
            logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.message)
        return error(exc.message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = first_error_message(exc)
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, message)
        return error(message, 400)

    @app.exception_handler(Exception)
    def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Error in %s %s", request.method, request.url.path)
        return error(str(exc) or "Internal server error", 500)

    @app.get("/health")
    def health() -> JSONResponse:
        return ok()

    # Schedules

    @app.get("/sheets/fetch")
    def fetch_schedules(
        fraksi: Optional[str] = Query(default=None),
        cache_buster: Optional[str] = Query(default=None, alias="_t"),
        repository: ScrimRepository = Depends(get_repository),
        cache: ResponseCache = Depends(get_cache),
    ) -> JSONResponse:
        if fraksi not in config.FACTIONS:
            raise InvalidRequest("Invalid or missing fraksi parameter")
        headers = {"Cache-Control": config.SCHEDULE_CACHE_CONTROL}

        key = _cache_key(fraksi)
        if cache_buster is None:
            cached = cache.get(key)
            if cached is not None:
                return ok(cached, headers=headers, fraksi=fraksi, cached=True)

        data = _dump(repository.get_schedules(fraksi))
        cache.set(key, data)
        return ok(data, headers=headers, fraksi=fraksi)

    @app.post("/sheets/append")
    def append_schedule(
        payload: ScrimForm,
        repository: ScrimRepository = Depends(get_repository),
        cache: ResponseCache = Depends(get_cache),
    ) -> JSONResponse:
        repository.append_schedule(payload)
        cache.invalidate(_cache_key(payload.fraksi))
        return ok()

    @app.put("/sheets/update")
    def update_schedule(
        payload: ScheduleUpdate,
        repository: ScrimRepository = Depends(get_repository),
        cache: ResponseCache = Depends(get_cache),
    ) -> JSONResponse:
        item = repository.update_schedule(payload)
        cache.invalidate(_cache_key(payload.fraksi))
        return ok(item.model_dump(by_alias=True))

    @app.delete("/sheets/delete")
    def delete_schedule(
        payload: ScheduleRef,
        repository: ScrimRepository = Depends(get_repository),
        cache: ResponseCache = Depends(get_cache),
    ) -> JSONResponse:
        repository.delete_schedule(payload.fraksi, payload.id)
        cache.invalidate(_cache_key(payload.fraksi))
        return ok()

    # Attendance

    @app.get("/attendance")
    def list_attendance(
        schedule_id: Optional[str] = Query(default=None, alias="scheduleId"),
        fraksi: Optional[str] = Query(default=None),
        repository: ScrimRepository = Depends(get_repository),
    ) -> JSONResponse:
        records = repository.get_attendance(_optional_int(schedule_id, "scheduleId"), fraksi)
        return ok(_dump(records), headers={"Cache-Control": config.ATTENDANCE_CACHE_CONTROL})

    @app.post("/attendance")
    def mark_unavailable(payload: AttendanceCreate, repository: ScrimRepository = Depends(get_repository)) -> JSONResponse:
        record = repository.mark_unavailable(payload)
        return ok(record.model_dump(by_alias=True))

    @app.delete("/attendance")
    def mark_available(payload: AttendanceDelete, repository: ScrimRepository = Depends(get_repository)) -> JSONResponse:
        repository.mark_available(payload)
        return ok()

    # Match results

    @app.get("/match-results")
    def list_match_results(
        schedule_id: Optional[str] = Query(default=None, alias="scheduleId"),
        fraksi: Optional[str] = Query(default=None),
        repository: ScrimRepository = Depends(get_repository),
    ) -> JSONResponse:
        records = repository.get_match_results(_optional_int(schedule_id, "scheduleId"), fraksi)
        return ok(_dump(records), headers={"Cache-Control": config.RESULTS_CACHE_CONTROL})

    @app.post("/match-results")
    def create_match_result(payload: MatchResultPayload, repository: ScrimRepository = Depends(get_repository)) -> JSONResponse:
        record = repository.create_match_result(payload)
        return ok(record.model_dump(by_alias=True))

    @app.put("/match-results")
    def update_match_result(payload: MatchResultUpdate, repository: ScrimRepository = Depends(get_repository)) -> JSONResponse:
        record = repository.update_match_result(payload)
        return ok(record.model_dump(by_alias=True))

    @app.delete("/match-results")
    def delete_match_result(
        result_id: Optional[str] = Query(default=None, alias="id"),
        repository: ScrimRepository = Depends(get_repository),
    ) -> JSONResponse:
        if not result_id or not result_id.isdigit() or int(result_id) <= 0:
            raise InvalidRequest("Valid ID is required")
        parsed = int(result_id)
        repository.delete_match_result(parsed)
        return ok()

    return app


app = create_app()
