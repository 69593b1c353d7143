"""Header merging and the curl reconstruction logged before every call."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

logger = logging.getLogger(__name__)

BANNER = "================ BAW API CALL ==================="
RULE = "================================================="

DEFAULT_HEADERS = {"Content-Type": "application/json"}


def merge_headers(auth_headers: Mapping[str, Any]) -> dict[str, str]:
    """Overlay the auth headers on the JSON default, dropping None values."""
    merged = dict(DEFAULT_HEADERS)
    for key, value in auth_headers.items():
        if value is not None:
            merged[key] = str(value)
    return merged


def shell_quote_body(payload: Any) -> str:
    """JSON-encode a payload for use inside a single-quoted shell argument."""
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str).replace("'", "'\\''")


def render_curl(
    method: str,
    url: str,
    headers: Mapping[str, str],
    payload: Any = None,
) -> str:
    """Build a curl command equivalent to the request.

    One ``-H`` flag per header in the mapping's order. The ``-d`` body flag is
    only added for POST requests that carry a payload.
    """
    command = f'curl -X {method} "{url}"'

    header_lines = " \\\n".join(f' -H "{key}: {value}"' for key, value in headers.items())
    if header_lines:
        command += f" \\\n{header_lines}"

    if method == "POST" and payload is not None:
        command += f" \\\n  -d '{shell_quote_body(payload)}'"

    return command


def log_curl(command: str) -> None:
    logger.info("\n%s\n[BAW API] CURL COMMAND:\n%s\n%s\n", BANNER, command, RULE)
