"""Error taxonomy for the editing core.

Every editor operation catches :class:`CmsError` at its boundary and turns it
into one notification, so these never reach the rendering layer.

- :class:`ValidationError`: user-correctable input (``ConflictError`` for
  duplicates)
- :class:`TransientNetworkError`: the request never reached the server;
  retrying is safe
- :class:`ServerRejection`: the server answered with an error status
- :class:`InvariantViolationError`: a local state transition was refused
"""


class CmsError(Exception):
    """Base class for editor errors."""

    pass


class ValidationError(CmsError):
    """Input the user can correct, e.g. an empty category name.

    Attributes:
        errors: Per-item details from the server, if any.
    """

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []


class ConflictError(ValidationError):
    """The name or key already exists."""

    pass


class TransientNetworkError(CmsError):
    """The request failed before reaching the server."""

    pass


class ServerRejection(CmsError):
    """The server was reachable but refused the request.

    Attributes:
        status_code: HTTP status returned by the server.
        message: Server-provided explanation, shown to the user as is.
    """

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{message} (HTTP {status_code})")
        self.status_code = status_code
        self.message = message


class InvariantViolationError(CmsError):
    """A local state transition would break a collection or asset invariant."""

    pass
