"""API error classes.

Each error carries a machine-readable code, a human-readable message and the
HTTP status the exception handlers in ``jobtrail.main`` respond with.
Services raise these without importing FastAPI.
"""


class APIError(Exception):
    """Base class for API errors.

    All API errors have a code, message, and HTTP status.
    Subclasses set default status_code.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of additional error details.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Field validation failed (400).

    Missing required fields, malformed request bodies, inconsistent stage
    state (completed without a date), unknown multipart actions.
    """

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
        )


class UnsupportedFileTypeError(APIError):
    """Uploaded file extension is not in the allow-list (400).

    Raised before anything is written to disk.
    """

    def __init__(self, message: str, extension: str | None = None) -> None:
        super().__init__(
            code="UNSUPPORTED_FILE_TYPE",
            message=message,
            status_code=400,
            details=[{"field": "file", "extension": extension or "unknown"}],
        )


class NotFoundError(APIError):
    """Resource not found (404)."""

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=404,
        )


class StoreFailureError(APIError):
    """Persistence layer failed for infrastructure reasons (500).

    The message is always generic; the underlying database error is logged
    server-side and never returned to the caller.
    """

    def __init__(self, message: str = "A storage error occurred") -> None:
        super().__init__(
            code="STORE_FAILURE",
            message=message,
            status_code=500,
        )


class InternalError(APIError):
    """Unexpected server error (500).

    Use for unhandled exceptions. Never expose stack traces to clients.
    """

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(
            code="INTERNAL_ERROR",
            message=message,
            status_code=500,
        )
