# src/taskhub/core/result.py

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ParamSpec

from .errors import TaskHubError

logger = logging.getLogger(__name__)

P = ParamSpec("P")


@dataclass(frozen=True, slots=True)
class Result:
    """
    Uniform envelope returned by every orchestrator call.

    Callers branch on `success` first; `data`/`message`/`count`/`query` are only
    meaningful on success, `error` only on failure.
    """

    success: bool
    data: Any = None
    message: str | None = None
    count: int | None = None
    error: str | None = None
    query: str | None = None

    @classmethod
    def ok(
        cls,
        data: Any = None,
        *,
        message: str | None = None,
        count: int | None = None,
        query: str | None = None,
    ) -> Result:
        return cls(success=True, data=data, message=message, count=count, query=query)

    @classmethod
    def fail(cls, error: str) -> Result:
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success}
        if not self.success:
            out["error"] = self.error
            return out
        if self.data is not None:
            out["data"] = self.data
        if self.message is not None:
            out["message"] = self.message
        if self.count is not None:
            out["count"] = self.count
        if self.query is not None:
            out["query"] = self.query
        return out


def folds_errors(fn: Callable[P, Result]) -> Callable[P, Result]:
    """
    Orchestrator boundary: nothing raises past it.

    Domain errors become Result.fail(message); anything else is logged with its
    traceback and reported as an internal error.
    """

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> Result:
        try:
            return fn(*args, **kwargs)
        except TaskHubError as e:
            return Result.fail(str(e))
        except Exception as e:
            logger.exception("Unexpected error in %s", fn.__qualname__)
            return Result.fail(f"Internal error: {e}")

    return wrapper
