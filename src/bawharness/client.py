"""BAW request execution via httpx."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Literal, Mapping

import httpx

from .auth import auth_headers_for
from .config import BaseUrlSelector, BaseUrlTable, HarnessConfig
from .diagnostics import log_curl, merge_headers, render_curl
from .errors import classify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallOptions:
    endpoint: str
    method: Literal["GET", "POST"] = "GET"
    payload: Any = None  # only sent with POST
    base_url_type: BaseUrlSelector = BaseUrlSelector.TASK


@dataclass
class ApiResponse:
    status: int
    status_text: str
    headers: dict[str, str]
    body: Any
    elapsed_ms: int


def _parse_body(resp: httpx.Response) -> Any:
    content_type = resp.headers.get("content-type", "")
    if "json" in content_type:
        try:
            return resp.json()
        except ValueError:
            return resp.text
    return resp.text


class RequestExecutor:
    """Sends one BAW call per ``execute`` with the configured URLs and headers."""

    def __init__(
        self,
        base_urls: BaseUrlTable,
        auth_headers: Mapping[str, Any],
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_urls = base_urls
        self.auth_headers = auth_headers
        self.timeout = timeout
        self._transport = transport

    def url_for(self, options: CallOptions) -> str:
        selector = options.base_url_type or BaseUrlSelector.TASK
        return self.base_urls[selector] + options.endpoint

    async def execute(self, options: CallOptions) -> ApiResponse:
        """Execute the call and return the response, or raise ApiCallError."""
        method = options.method.upper()
        if method not in ("GET", "POST"):
            raise ValueError(f"Unsupported method: {options.method}")

        url = self.url_for(options)
        headers = merge_headers(self.auth_headers)
        log_curl(render_curl(method, url, headers, options.payload))

        kwargs: dict[str, Any] = {"headers": headers}
        if method == "POST" and options.payload is not None:
            kwargs["json"] = options.payload

        start = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.request(method, url, **kwargs)
                resp.raise_for_status()
        except (httpx.HTTPError, TypeError, ValueError) as e:
            # TypeError / ValueError: payload is not JSON-serializable (objects, NaN)
            error = classify(e)
            logger.warning("%s %s failed (%s): %s", method, url, error.kind.value, e)
            raise error from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug("%s %s -> %d in %dms", method, url, resp.status_code, elapsed_ms)

        return ApiResponse(
            status=resp.status_code,
            status_text=resp.reason_phrase,
            headers=dict(resp.headers),
            body=_parse_body(resp),
            elapsed_ms=elapsed_ms,
        )


def build_executor(
    config: HarnessConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RequestExecutor:
    """Wire an executor from a resolved config."""
    return RequestExecutor(
        base_urls=config.base_urls(),
        auth_headers=auth_headers_for(config),
        timeout=config.timeout,
        transport=transport,
    )
