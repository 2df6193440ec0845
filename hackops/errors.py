"""
HackOps – error taxonomy.

Every failure the coordination core reports is a ``CoordinationError``
subclass carrying a stable ``reason`` string callers can branch on.
The FastAPI app renders them as ``{"message", "kind", "reason"}``.
"""

from fastapi import status


class CoordinationError(Exception):
    kind: str = "error"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message

    def to_dict(self) -> dict:
        return {"message": self.message, "kind": self.kind, "reason": self.reason}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(reason={self.reason!r}, message={self.message!r})"


class ValidationFailed(CoordinationError):
    """Malformed input, rejected before touching storage."""
    kind = "validation"
    status_code = 422


class Unauthenticated(CoordinationError):
    """The ``(email, authToken)`` pair did not resolve to a principal."""
    kind = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDenied(CoordinationError):
    """The caller lacks the required role or relationship."""
    kind = "permission_denied"
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(CoordinationError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(CoordinationError):
    """The operation would break a uniqueness or exact-once invariant."""
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class PreconditionFailed(CoordinationError):
    kind = "precondition"
    status_code = status.HTTP_412_PRECONDITION_FAILED


class Exhausted(CoordinationError):
    """No stock left for the requested item."""
    kind = "exhausted"
    status_code = status.HTTP_410_GONE
