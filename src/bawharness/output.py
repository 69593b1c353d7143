"""Response / error formatting and exit-code mapping."""

from __future__ import annotations

import json
import sys

from .client import ApiResponse
from .errors import ApiCallError, ErrorKind


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS = 0
EXIT_CLI_ERROR = 1
EXIT_4XX = 3
EXIT_5XX = 4
EXIT_NETWORK = 5
EXIT_UNKNOWN = 6


def exit_code_for_status(status: int | None) -> int:
    if status is None:
        return EXIT_NETWORK
    if 200 <= status < 300:
        return EXIT_SUCCESS
    if 400 <= status < 500:
        return EXIT_4XX
    if 500 <= status < 600:
        return EXIT_5XX
    return EXIT_UNKNOWN


def exit_code_for_error(error: ApiCallError) -> int:
    if error.kind is ErrorKind.HTTP:
        return exit_code_for_status(error.status)
    if error.kind is ErrorKind.NETWORK:
        return EXIT_NETWORK
    return EXIT_UNKNOWN


# ---------------------------------------------------------------------------
# Encoders
# ---------------------------------------------------------------------------

def encode_json(response: ApiResponse) -> str:
    """Encode an API response as a JSON envelope."""
    envelope = {
        "status": response.status,
        "status_text": response.status_text,
        "headers": response.headers,
        "body": response.body,
        "elapsed_ms": response.elapsed_ms,
    }
    return json.dumps(envelope, indent=2, default=str, ensure_ascii=False)


def encode_pretty(response: ApiResponse) -> str:
    """Status line followed by the pretty-printed body."""
    lines = [f"{response.status} {response.status_text} ({response.elapsed_ms} ms)"]
    body = response.body
    if isinstance(body, (dict, list)):
        lines.append(json.dumps(body, indent=2, ensure_ascii=False))
    elif body not in (None, ""):
        lines.append(str(body))
    return "\n".join(lines)


def format_error(code: str, message: str, status: int | None = None) -> str:
    return json.dumps({
        "error": code,
        "message": message,
        "status": status,
    }, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------

def print_response(response: ApiResponse, use_json: bool = False) -> int:
    """Print the formatted response and return the appropriate exit code."""
    print(encode_json(response) if use_json else encode_pretty(response))
    return exit_code_for_status(response.status)


def print_error(code: str, message: str, status: int | None = None) -> None:
    print(format_error(code, message, status), file=sys.stderr)


def print_api_error(error: ApiCallError) -> int:
    code = f"{error.kind.value.upper()}_ERROR"
    print_error(code, error.message, error.status)
    return exit_code_for_error(error)
