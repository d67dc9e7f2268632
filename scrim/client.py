from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from . import config

logger = logging.getLogger(__name__)


class ScrimClientError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def cache_buster() -> Dict[str, str]:
    return {"_t": str(int(time.time() * 1000))}


class ScrimClient:
    """Thin client for the scrim API.

    Every call answers with the ``data`` part of the ``{ok, data}`` envelope or
    raises :class:`ScrimClientError`. Reads pass ``fresh=True`` to add a
    cache-busting parameter.
    """

    def __init__(self, base_url: str = config.API_URL, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._client = httpx.Client(base_url=base_url, transport=transport)

    def __enter__(self) -> "ScrimClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, timeout: float, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self._client.request(method, path, timeout=timeout, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out after %ss", method, path, timeout)
            raise ScrimClientError(f"Request timed out after {timeout}s") from exc
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed (%s)", method, path, exc)
            raise ScrimClientError(f"Request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if response.is_error or not payload.get("ok"):
            message = payload.get("error") or f"Request failed with status {response.status_code}"
            logger.warning("%s %s rejected (%s): %s", method, path, response.status_code, message)
            raise ScrimClientError(message, response.status_code)
        return payload

    def _read(self, path: str, params: Dict[str, Any], fresh: bool) -> List[Dict[str, Any]]:
        params = {key: value for key, value in params.items() if value is not None}
        if fresh:
            params.update(cache_buster())
        payload = self._request("GET", path, config.READ_TIMEOUT, params=params)
        return payload.get("data") or []

    def _write(self, method: str, path: str, **kwargs: Any) -> Any:
        return self._request(method, path, config.WRITE_TIMEOUT, **kwargs).get("data")

    # Schedules

    def fetch_schedules(self, fraksi: str, fresh: bool = False) -> List[Dict[str, Any]]:
        return self._read("/sheets/fetch", {"fraksi": fraksi}, fresh)

    def append_schedule(self, form: Dict[str, Any]) -> None:
        self._write("POST", "/sheets/append", json=form)

    def update_schedule(self, schedule_id: int, form: Dict[str, Any]) -> Dict[str, Any]:
        return self._write("PUT", "/sheets/update", json={"id": schedule_id, **form})

    def delete_schedule(self, schedule_id: int, fraksi: str) -> None:
        self._write("DELETE", "/sheets/delete", json={"id": schedule_id, "fraksi": fraksi})

    # Attendance

    def list_attendance(self, schedule_id: Optional[int] = None, fraksi: Optional[str] = None, fresh: bool = False) -> List[Dict[str, Any]]:
        return self._read("/attendance", {"scheduleId": schedule_id, "fraksi": fraksi}, fresh)

    def mark_unavailable(self, schedule_id: int, fraksi: str, player_name: str, reason: Optional[str] = None) -> Dict[str, Any]:
        body = {"scheduleId": schedule_id, "fraksi": fraksi, "playerName": player_name}
        if reason:
            body["reason"] = reason
        return self._write("POST", "/attendance", json=body)

    def mark_available(self, schedule_id: int, fraksi: str, player_name: str) -> None:
        self._write("DELETE", "/attendance", json={"scheduleId": schedule_id, "fraksi": fraksi, "playerName": player_name})

    # Match results

    def list_match_results(self, schedule_id: Optional[int] = None, fraksi: Optional[str] = None, fresh: bool = False) -> List[Dict[str, Any]]:
        return self._read("/match-results", {"scheduleId": schedule_id, "fraksi": fraksi}, fresh)

    def create_match_result(self, result: Dict[str, Any]) -> Dict[str, Any]:
        return self._write("POST", "/match-results", json=result)

    def update_match_result(self, result_id: int, result: Dict[str, Any]) -> Dict[str, Any]:
        return self._write("PUT", "/match-results", json={"id": result_id, **result})

    def delete_match_result(self, result_id: int) -> None:
        self._write("DELETE", "/match-results", params={"id": result_id})
