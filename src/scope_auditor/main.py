"""scope-auditor HTTP service entry point.

Serves the audit core over HTTP as a replacement for a browser front end:
each request fetches the integration log with the caller's (or the
configured) Slack token and returns reconstructed results as JSON.

Run with: uvicorn scope_auditor.main:app
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from scope_auditor import __version__
from scope_auditor.api.router import get_settings, router
from scope_auditor.api.schemas import ErrorResponse
from scope_auditor.errors import ConfigurationError, SlackApiError
from scope_auditor.observability import configure_logging, get_logger

logger = get_logger(__name__)

# Slack error codes that mean the caller lacks rights rather than that Slack failed.
_AUTH_ERROR_CODES = frozenset({"invalid_auth", "not_authed", "token_revoked", "account_inactive"})
_FORBIDDEN_ERROR_CODES = frozenset({"not_admin", "paid_only", "missing_scope", "not_allowed_token_type"})


def _slack_error_status(code: str) -> int:
    if code in _AUTH_ERROR_CODES:
        return status.HTTP_401_UNAUTHORIZED
    if code in _FORBIDDEN_ERROR_CODES:
        return status.HTTP_403_FORBIDDEN
    return status.HTTP_502_BAD_GATEWAY


async def slack_error_handler(request: Request, exc: SlackApiError) -> JSONResponse:
    """Translate a SlackApiError into a JSON error response."""
    status_code = _slack_error_status(exc.code)
    logger.warning("Slack API error", path=request.url.path, code=exc.code, status_code=status_code)
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(code=exc.code, message=exc.message).model_dump(),
    )


async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    """Translate a ConfigurationError into a 500 JSON error response."""
    logger.error("Configuration error", path=request.url.path, error=exc.message)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(code="configuration_error", message=exc.message).model_dump(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging on startup.

    Args:
        app: The FastAPI application instance.

    Yields:
        None
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    logger.info("scope-auditor startup complete", service=settings.service_name, version=__version__)

    yield

    logger.info("scope-auditor shutdown complete")


def create_app() -> FastAPI:
    """Build the FastAPI application with routes and error handlers."""
    application = FastAPI(title="scope-auditor", version=__version__, lifespan=lifespan)
    application.add_exception_handler(SlackApiError, slack_error_handler)  # type: ignore[arg-type]
    application.add_exception_handler(ConfigurationError, configuration_error_handler)  # type: ignore[arg-type]
    application.include_router(router, prefix="/api/v1")
    return application


app: FastAPI = create_app()
