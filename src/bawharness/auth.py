"""Static auth header set and interactive credential setup."""

from __future__ import annotations

import base64
from types import MappingProxyType
from typing import Mapping

from .config import HarnessConfig


CSRF_HEADER = "BPMCSRFToken"


def basic_token(user: str, password: str) -> str:
    encoded = base64.b64encode(f"{user}:{password}".encode()).decode()
    return f"Basic {encoded}"


def build_auth_headers(user: str, password: str, csrf_token: str) -> Mapping[str, str]:
    """Compute the headers attached to every BAW call.

    The result is read-only; build a new one when credentials change.
    """
    return MappingProxyType({
        "Authorization": basic_token(user, password),
        "Content-Type": "application/json",
        "Accept": "application/json",
        CSRF_HEADER: csrf_token,
    })


def auth_headers_for(config: HarnessConfig) -> Mapping[str, str]:
    return build_auth_headers(config.user, config.password, config.csrf_token)


# ---------------------------------------------------------------------------
# Interactive setup (used by `bawharness configure`)
# ---------------------------------------------------------------------------

def prompt_for_settings(current: dict[str, str]) -> dict[str, str]:
    """Prompt for every profile value, offering the stored one as default.

    Stored keys that are not prompted for (e.g. TIMEOUT) are kept.
    """
    fields = [
        ("TASK_BASE", "Task API base URL"),
        ("SERVICE_BASE", "Automation services base URL"),
        ("USER", "BAW user"),
        ("PASSWORD", "BAW password"),
        ("CSRF_TOKEN", "BPM CSRF token"),
    ]
    values: dict[str, str] = dict(current)
    for key, label in fields:
        default = current.get(key, "")
        suffix = f" [{default}]" if default and key != "PASSWORD" else ""
        answer = input(f"{label}{suffix}: ").strip()
        values[key] = answer or default
    return values
