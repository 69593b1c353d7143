"""The three manual test panels: task completion, service call, data loading."""

from __future__ import annotations

import json
import logging
from typing import Any

from .client import ApiResponse, CallOptions
from .config import BaseUrlSelector
from .errors import CallOutcome, Failure, HarnessInputError
from .tracker import CallStateTracker

logger = logging.getLogger(__name__)


DEFAULT_SERVICE_ENDPOINT = "/REST%20Service/get-client-data"
DEFAULT_SERVICE_PAYLOAD: dict[str, Any] = {"idSolicitud": "SOL-TEST-001"}
DEFAULT_TASK_PAYLOAD: dict[str, Any] = {
    "output": [
        {"name": "tareaAprobada", "data": True},
        {"name": "comentario", "data": "Prueba manual desde Test Harness"},
    ],
}


def parse_payload(text: str | None, default: Any = None) -> Any:
    """Parse a JSON payload typed by the operator; None/blank means ``default``."""
    if text is None or not text.strip():
        return default
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise HarnessInputError("INVALID_PAYLOAD", f"Payload is not valid JSON: {e}") from e


def task_endpoint(task_id: str) -> str:
    return f"/bpm/user-tasks/{task_id}/complete"


async def complete_task(
    tracker: CallStateTracker,
    task_id: str,
    payload: Any = None,
) -> ApiResponse:
    """POST the task output to /bpm/user-tasks/<id>/complete on the task base."""
    task_id = (task_id or "").strip()
    if not task_id:
        raise HarnessInputError("TASK_ID_REQUIRED", "A task ID is required.")

    response = await tracker.run(CallOptions(
        method="POST",
        endpoint=task_endpoint(task_id),
        payload=DEFAULT_TASK_PAYLOAD if payload is None else payload,
        base_url_type=BaseUrlSelector.TASK,
    ))
    logger.info("Task %s completed", task_id)
    return response


async def call_service(
    tracker: CallStateTracker,
    endpoint: str = DEFAULT_SERVICE_ENDPOINT,
    method: str = "POST",
    payload: Any = None,
) -> ApiResponse:
    """Call an automation service REST endpoint on the service base."""
    method = method.upper()
    if method not in ("GET", "POST"):
        raise HarnessInputError("INVALID_METHOD", f"Method must be GET or POST, got {method}.")

    response = await tracker.run(CallOptions(
        method=method,  # type: ignore[arg-type]
        endpoint=endpoint or DEFAULT_SERVICE_ENDPOINT,
        payload=DEFAULT_SERVICE_PAYLOAD if payload is None else payload,
        base_url_type=BaseUrlSelector.SERVICE,
    ))
    logger.info("Service call %s %s executed", method, endpoint)
    return response


async def load_client_data(
    tracker: CallStateTracker,
    id_solicitud: str,
    sector_origen: str,
    endpoint: str = DEFAULT_SERVICE_ENDPOINT,
) -> CallOutcome:
    """Fetch the client data for a request from the data service.

    Never raises for call failures: a Failure is returned and the message is
    also left on ``tracker.error``.
    """
    outcome = await tracker.attempt(CallOptions(
        method="POST",
        endpoint=endpoint,
        payload={"idSolicitud": id_solicitud, "sectorOrigen": sector_origen},
        base_url_type=BaseUrlSelector.SERVICE,
    ))
    if isinstance(outcome, Failure):
        logger.error("Client data service call failed: %s", outcome.message)
    return outcome
