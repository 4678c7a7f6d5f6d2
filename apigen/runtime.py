"""Support types imported by generated handler modules."""

from __future__ import annotations

import dataclasses
import time
from dataclasses import dataclass
from typing import Any

AUTH_HEADER = "X-Auth"
AUTH_TOKEN = "100500"


class ApiError(Exception):
    """Error carrying the HTTP status the handler should answer with.

    Business methods raise it to choose their own status; anything else
    they raise becomes a 500.
    """

    def __init__(self, http_status: int, message: str):
        super().__init__(message)
        self.http_status = int(http_status)

    def __repr__(self) -> str:
        return f"ApiError({self.http_status}, {self.args[0]!r})"


@dataclass(frozen=True)
class Context:
    """Execution context handed to business methods."""

    deadline: float | None = None

    @classmethod
    def background(cls) -> Context:
        """Context without a deadline."""
        return cls()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, None if there is none."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())


def json_default(value: Any) -> Any:
    """``json.dumps`` hook for handler results."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (set, frozenset)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
