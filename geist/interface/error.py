"""Interface layer error mapping.

Domain errors become JSON responses carrying an RPC-style status code.
Infrastructure and consistency failures are reported opaquely; their
details only go to the logs.
"""

import logfire
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from geist.domain.error import (
    DomainError,
    IdentityConflictError,
    LastIdentityError,
    NotAuthorizedError,
    NotFoundError,
    PrimaryIdentityConflictError,
    UnimplementedError,
    ValidationError,
)

# Checked in order; the first matching class wins
ERROR_STATUSES: list[tuple[type[DomainError], int, str]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST, "INVALID_ARGUMENT"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "NOT_FOUND"),
    (NotAuthorizedError, status.HTTP_403_FORBIDDEN, "PERMISSION_DENIED"),
    (LastIdentityError, status.HTTP_412_PRECONDITION_FAILED, "FAILED_PRECONDITION"),
    (UnimplementedError, status.HTTP_501_NOT_IMPLEMENTED, "UNIMPLEMENTED"),
    (IdentityConflictError, status.HTTP_409_CONFLICT, "ALREADY_EXISTS"),
    (PrimaryIdentityConflictError, status.HTTP_409_CONFLICT, "ABORTED"),
]


class ErrorResponse(JSONResponse):
    """JSON error body: ``{"code": ..., "detail": ...}``."""

    def __init__(self, status_code: int, code: str, detail: str) -> None:
        super().__init__(
            status_code=status_code, content={"code": code, "detail": detail}
        )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render a domain error for the client."""
    for error_type, status_code, code in ERROR_STATUSES:
        if isinstance(exc, error_type):
            logfire.warn(
                "Request rejected",
                path=request.url.path,
                code=code,
                error=str(exc),
            )
            return ErrorResponse(status_code, code, str(exc))

    logfire.error(
        "Internal failure",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
        _exc_info=exc,
    )
    return ErrorResponse(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL", "Internal error"
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the domain error handler on an application."""
    app.add_exception_handler(DomainError, domain_error_handler)
