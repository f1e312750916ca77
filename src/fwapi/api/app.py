"""FastAPI application factory and error rendering.

Every failure leaves the API as an error envelope:

    {"error": {"kind": "NotFound", "message": "...", "hint": "...", "details": []}}

with 4xx for client-side kinds (NotFound, OutOfRange, BadRequest) and
5xx for SubsystemFailure. Routing errors and unexpected exceptions are
rendered the same way.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fwapi import __version__
from fwapi.api.routes import router
from fwapi.core.context import ExecutionContext
from fwapi.core.exceptions import (
    BadRequestError,
    FwapiError,
    NotFoundError,
    SubsystemError,
)
from fwapi.core.executor import CommandExecutor
from fwapi.services.chains import ChainService
from fwapi.services.iptables import IptablesService


def _error_response(
    request: Request,
    error: FwapiError,
    status_code: Optional[int] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    status_code = status_code or error.status_code
    console = request.app.state.ctx.console
    line = f"{request.method} {request.url.path} -> {status_code} {error.kind}: {error.message}"
    if status_code >= 500:
        console.error(line)
        for detail in error.details:
            console.verbose(f"  {detail}")
    else:
        console.warn(line)
    return JSONResponse(
        status_code=status_code,
        content={"error": error.to_dict()},
        headers=headers,
    )


async def handle_fwapi_error(request: Request, exc: FwapiError) -> JSONResponse:
    """Render any FwapiError as an error envelope."""
    return _error_response(request, exc)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed request bodies and parameters as BadRequest."""
    details = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        details.append(f"{location}: {err.get('msg', 'invalid')}")
    error = BadRequestError(
        "Malformed request",
        hint='Rule and chain bodies look like {"data": "..."}',
        details=details,
    )
    return _error_response(request, error)


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors (unknown path, wrong method) as an error envelope.

    The original status code and headers (e.g. Allow on 405) are kept.
    """
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404:
        error = NotFoundError(message, hint="List tables with GET /")
    elif exc.status_code < 500:
        error = BadRequestError(message)
    else:
        error = SubsystemError(message)
    return _error_response(request, error, status_code=exc.status_code, headers=exc.headers)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Render any other exception as a SubsystemFailure envelope."""
    error = SubsystemError(
        f"Unexpected error: {exc}",
        details=[type(exc).__name__],
    )
    return _error_response(request, error)


def create_app(
    ctx: Optional[ExecutionContext] = None,
    chains: Optional[ChainService] = None,
) -> FastAPI:
    """Create the API application.

    Args:
        ctx: Execution context (default: fresh context with default config)
        chains: Chain service (default: built on iptables from ctx)

    Returns:
        Configured FastAPI application
    """
    ctx = ctx or ExecutionContext()
    if chains is None:
        chains = ChainService(IptablesService(ctx, CommandExecutor(ctx)))

    app = FastAPI(
        title="fwapi",
        description="REST API over iptables tables, chains, rules and host interfaces.",
        version=__version__,
    )
    app.state.ctx = ctx
    app.state.chains = chains

    app.add_exception_handler(FwapiError, handle_fwapi_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.include_router(router)

    return app
