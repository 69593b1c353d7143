"""Observable data / loading / error state around a RequestExecutor."""

from __future__ import annotations

import itertools
import logging
from typing import Any

from .client import ApiResponse, CallOptions, RequestExecutor
from .errors import CallOutcome, Failure, Success, classify

logger = logging.getLogger(__name__)


class CallStateTracker:
    """State for one call site.

    Every ``run`` clears ``data`` and ``error`` and sets ``loading``. On
    completion exactly one of ``data`` / ``error`` is set and the failure,
    if any, is re-raised to the caller.

    A 2xx response with an empty or JSON ``null`` body leaves ``data`` as
    None too; ``response`` tells that case apart from a call that has not
    completed.

    Concurrent runs on one tracker race: the last one to finish wins. With
    ``guarded=True`` only the most recently started run may write its result.
    """

    def __init__(self, executor: RequestExecutor, guarded: bool = False):
        self._executor = executor
        self._guarded = guarded
        self._seq = itertools.count(1)
        self._latest = 0
        self._data: Any = None
        self._response: ApiResponse | None = None
        self._loading = False
        self._error: str | None = None

    @property
    def data(self) -> Any:
        return self._data

    @property
    def response(self) -> ApiResponse | None:
        """The last successful response, None until a call succeeds."""
        return self._response

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> str | None:
        return self._error

    def snapshot(self) -> dict[str, Any]:
        return {"data": self._data, "loading": self._loading, "error": self._error}

    def _accepts(self, ticket: int) -> bool:
        return not self._guarded or ticket == self._latest

    async def run(self, options: CallOptions) -> ApiResponse:
        ticket = next(self._seq)
        self._latest = ticket
        self._loading = True
        self._error = None
        self._data = None
        self._response = None

        try:
            response = await self._executor.execute(options)
        except Exception as e:
            if self._accepts(ticket):
                self._loading = False
                self._error = classify(e).message
            else:
                logger.debug("Discarding failure of superseded call #%d", ticket)
            raise

        if self._accepts(ticket):
            self._data = response.body
            self._response = response
            self._loading = False
        else:
            logger.debug("Discarding result of superseded call #%d", ticket)
        return response

    execute = run

    async def attempt(self, options: CallOptions) -> CallOutcome:
        """Like ``run`` but returns Success / Failure instead of raising."""
        try:
            response = await self.run(options)
        except Exception as e:
            error = classify(e)
            return Failure(kind=error.kind, message=error.message, cause=e)
        return Success(response)
