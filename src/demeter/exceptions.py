from __future__ import annotations

"""Error kinds raised by the graph store and the controllers."""

from typing import Optional


class DemeterError(Exception):
    """
    Base exception for demeter failures.

    `code` is a stable diagnostic code made of a component prefix and a
    sub-code (e.g. ``TAGCxADDU1``).
    """

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class NotFoundError(DemeterError):
    """A referenced identifier or root does not resolve to any node."""
    pass


class BadRequestError(DemeterError):
    """A structural precondition of the request is violated."""
    pass


class QueryError(DemeterError):
    """The underlying store operation failed."""
    pass


class MalformedNodeError(DemeterError):
    """A node read back from the store does not have the expected shape."""
    pass


__all__ = [
    "DemeterError",
    "NotFoundError",
    "BadRequestError",
    "QueryError",
    "MalformedNodeError",
]
