import json

import httpx
import pytest

from scrim import config
from scrim.client import ScrimClient, ScrimClientError


def make_client(handler):
    return ScrimClient(base_url="http://api.test", transport=httpx.MockTransport(handler))


def test_fetch_schedules_returns_data():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"ok": True, "data": [{"id": 1001}], "fraksi": config.FRAKSI_1})

    with make_client(handler) as client:
        assert client.fetch_schedules(config.FRAKSI_1) == [{"id": 1001}]

    assert seen[0].url.path == "/sheets/fetch"
    assert seen[0].url.params["fraksi"] == config.FRAKSI_1
    assert "_t" not in seen[0].url.params
    assert seen[0].extensions["timeout"]["read"] == config.READ_TIMEOUT


def test_fresh_read_adds_cache_buster():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"ok": True, "data": []})

    with make_client(handler) as client:
        client.list_match_results(fresh=True)

    assert seen[0].url.params["_t"].isdigit()
    assert "scheduleId" not in seen[0].url.params


def test_missing_data_reads_as_empty_list():
    with make_client(lambda request: httpx.Response(200, json={"ok": True})) as client:
        assert client.list_attendance(1001, config.FRAKSI_1) == []


def test_error_envelope_raises():
    def handler(request):
        return httpx.Response(400, json={"ok": False, "error": "Lawan must be at least 2 characters"})

    with make_client(handler) as client:
        with pytest.raises(ScrimClientError) as exc_info:
            client.append_schedule({"lawan": "A"})

    assert exc_info.value.message == "Lawan must be at least 2 characters"
    assert exc_info.value.status_code == 400


def test_non_json_error():
    with make_client(lambda request: httpx.Response(502, text="Bad gateway")) as client:
        with pytest.raises(ScrimClientError) as exc_info:
            client.fetch_schedules(config.FRAKSI_2)
    assert exc_info.value.message == "Request failed with status 502"


def test_ok_false_with_success_status_still_raises():
    with make_client(lambda request: httpx.Response(200, json={"ok": False, "error": "nope"})) as client:
        with pytest.raises(ScrimClientError, match="nope"):
            client.fetch_schedules(config.FRAKSI_1)


def test_timeout():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with make_client(handler) as client:
        with pytest.raises(ScrimClientError) as exc_info:
            client.create_match_result({"scheduleId": 1001})
    assert exc_info.value.message == f"Request timed out after {config.WRITE_TIMEOUT}s"
    assert exc_info.value.status_code is None


def test_connection_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with make_client(handler) as client:
        with pytest.raises(ScrimClientError, match="Request failed"):
            client.fetch_schedules(config.FRAKSI_1)


def test_delete_schedule_sends_json_body():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    with make_client(handler) as client:
        client.delete_schedule(1002, config.FRAKSI_1)

    assert seen[0].method == "DELETE"
    assert json.loads(seen[0].content) == {"id": 1002, "fraksi": config.FRAKSI_1}
    assert seen[0].extensions["timeout"]["read"] == config.WRITE_TIMEOUT


def test_attendance_writes():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"ok": True, "data": {"id": 1}})

    with make_client(handler) as client:
        assert client.mark_unavailable(1001, config.FRAKSI_1, "Budi") == {"id": 1}
        client.mark_available(1001, config.FRAKSI_1, "Budi")

    assert json.loads(seen[0].content) == {"scheduleId": 1001, "fraksi": config.FRAKSI_1, "playerName": "Budi"}
    assert seen[1].method == "DELETE"


def test_update_and_delete_match_result():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"ok": True, "data": {"id": 3, "status": "win"}})

    with make_client(handler) as client:
        assert client.update_match_result(3, {"revScore": 2})["status"] == "win"
        client.delete_match_result(3)

    assert json.loads(seen[0].content) == {"id": 3, "revScore": 2}
    assert seen[1].method == "DELETE"
    assert seen[1].url.params["id"] == "3"
