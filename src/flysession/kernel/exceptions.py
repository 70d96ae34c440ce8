"""Exception hierarchy for flysession.

All library exceptions inherit from FlySessionException so callers can catch
one type at the pipeline boundary, or a specific subclass for targeted handling.

Categories:
- ConfigurationException: invalid store settings, fatal at construction time
- SessionException: misuse of the session API inside a request path
- InfrastructureException: storage backend failures
"""

from __future__ import annotations


class FlySessionException(Exception):
    """Base exception for all flysession errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "SESSION_CONTEXT_MISSING").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


class ConfigurationException(FlySessionException):
    """Store or property configuration is invalid."""


class SessionException(FlySessionException):
    """Errors raised by the session API inside a request path."""


class MissingSessionContextException(SessionException):
    """No session is attached to the request context.

    Raised when a handler asks for the session before ``load_session`` ran,
    which means the session filter is missing or ordered after the caller.
    """

    def __init__(self, message: str | None = None, context: dict | None = None) -> None:
        super().__init__(
            message
            or "Session not found in request context. Is the session filter installed ahead of this handler?",
            code="SESSION_CONTEXT_MISSING",
            context=context,
        )


class InfrastructureException(FlySessionException):
    """Infrastructure failures: cache, database, network."""


class SessionStorageException(InfrastructureException):
    """The session backend could not be reached or rejected the operation."""

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, code="SESSION_STORAGE_FAILURE", context=context)
