"""Tests for the task / service / data-loading panels."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest
import respx

from bawharness.errors import ApiCallError, Failure, HarnessInputError, Success
from bawharness.harness import (
    DEFAULT_SERVICE_PAYLOAD,
    DEFAULT_TASK_PAYLOAD,
    call_service,
    complete_task,
    load_client_data,
    parse_payload,
    task_endpoint,
)
from bawharness.tracker import CallStateTracker

from tests.conftest import SERVICE_BASE, TASK_BASE


class TestParsePayload:
    def test_json(self):
        assert parse_payload('{"idSolicitud": "SOL-1"}') == {"idSolicitud": "SOL-1"}

    @pytest.mark.parametrize("text", [None, "", "  \n"])
    def test_blank_uses_default(self, text):
        assert parse_payload(text, default={"d": 1}) == {"d": 1}

    def test_invalid(self):
        with pytest.raises(HarnessInputError) as exc_info:
            parse_payload("{not json")
        assert exc_info.value.code == "INVALID_PAYLOAD"


class TestCompleteTask:
    def test_endpoint(self):
        assert task_endpoint("12345") == "/bpm/user-tasks/12345/complete"

    @respx.mock
    def test_default_payload(self, tracker: CallStateTracker):
        route = respx.post(TASK_BASE + "/bpm/user-tasks/12345/complete").mock(
            return_value=httpx.Response(200, json={"status": "ok"})
        )

        asyncio.run(complete_task(tracker, "12345"))

        assert json.loads(route.calls[0].request.content) == DEFAULT_TASK_PAYLOAD
        assert tracker.data == {"status": "ok"}

    def test_blank_task_id(self, tracker: CallStateTracker):
        with pytest.raises(HarnessInputError) as exc_info:
            asyncio.run(complete_task(tracker, "  "))
        assert exc_info.value.code == "TASK_ID_REQUIRED"
        assert tracker.snapshot() == {"data": None, "loading": False, "error": None}

    @respx.mock
    def test_failure_propagates(self, tracker: CallStateTracker):
        respx.post(TASK_BASE + "/bpm/user-tasks/9/complete").mock(
            return_value=httpx.Response(409, json={"errorMessage": "already closed"})
        )

        with pytest.raises(ApiCallError):
            asyncio.run(complete_task(tracker, "9", {"output": []}))

        assert "409" in tracker.error


class TestCallService:
    @respx.mock
    def test_defaults(self, tracker: CallStateTracker):
        route = respx.route(method="POST", host="baw.test").mock(
            return_value=httpx.Response(200, json={"cliente": "ACME"})
        )

        asyncio.run(call_service(tracker))

        request = route.calls[0].request
        assert request.url.raw_path == b"/automationservices/rest/PR/REST%20Service/get-client-data"
        assert json.loads(request.content) == DEFAULT_SERVICE_PAYLOAD

    @respx.mock
    def test_get(self, tracker: CallStateTracker):
        route = respx.get(SERVICE_BASE + "/ping").mock(return_value=httpx.Response(200, json={}))

        asyncio.run(call_service(tracker, "/ping", "get"))

        assert route.calls[0].request.content == b""

    def test_bad_method(self, tracker: CallStateTracker):
        with pytest.raises(HarnessInputError, match="GET or POST"):
            asyncio.run(call_service(tracker, "/x", "PUT"))


class TestLoadClientData:
    @respx.mock
    def test_success(self, tracker: CallStateTracker):
        route = respx.route(method="POST", host="baw.test").mock(
            return_value=httpx.Response(200, json={"nombre": "Cliente"})
        )

        outcome = asyncio.run(load_client_data(tracker, "SOL-1", "RETAIL"))

        assert isinstance(outcome, Success)
        assert outcome.response.body == {"nombre": "Cliente"}
        assert json.loads(route.calls[0].request.content) == {
            "idSolicitud": "SOL-1",
            "sectorOrigen": "RETAIL",
        }

    @respx.mock
    def test_failure_returned(self, tracker: CallStateTracker):
        respx.route(method="POST", host="baw.test").mock(
            side_effect=httpx.ConnectError("refused")
        )

        outcome = asyncio.run(load_client_data(tracker, "SOL-1", "RETAIL"))

        assert isinstance(outcome, Failure)
        assert tracker.error == outcome.message
        assert tracker.data is None
