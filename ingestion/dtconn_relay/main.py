"""
dtconn relay - Ingestion API

FastAPI application for receiving signed event notifications from the
monitoring platform, validating their signatures, and appending them to
BigQuery.
"""

import logging
import signal
import threading
from contextlib import asynccontextmanager, contextmanager

import uvicorn
from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .errors import BadRequestError, ConfigurationError, RelayError
from .warehouse import get_warehouse, shutdown_warehouse
from .webhooks import dtconn_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle.

    - Startup: Initialize the BigQuery client
    - Shutdown: Close the client once in-flight requests have finished
    """
    settings = get_settings()

    # Startup
    logger.info(f"Starting {settings.service_name}...")
    logger.info(f"Destination table: {settings.table_ref}")

    try:
        await get_warehouse()
        logger.info("BigQuery client initialized")
    except Exception as e:
        logger.error(f"Failed to initialize BigQuery client: {e}")
        raise

    yield

    # Shutdown
    logger.info("Shutting down...")
    await shutdown_warehouse()
    logger.info("Shutting down, thanks for now! :)")


# Create FastAPI app; /dtconn is the only route served
app = FastAPI(
    title="dtconn relay - Ingestion API",
    description="Relays signed monitoring events into a BigQuery table.",
    version="0.1.0",
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

app.include_router(dtconn_router)


def _level_for_status(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every completed request with a severity derived from its status."""
    try:
        response = await call_next(request)
    except Exception:
        logger.error(
            f"{request.method} -> {request.url.path} = "
            f"{status.HTTP_500_INTERNAL_SERVER_ERROR}"
        )
        raise

    logger.log(
        _level_for_status(response.status_code),
        f"{request.method} -> {request.url.path} = {response.status_code}",
    )
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Answer malformed bodies and missing headers with an empty 400."""
    # Only field locations are logged, never the submitted values
    locations = [".".join(str(part) for part in err["loc"]) for err in exc.errors()]
    logger.warning(f"Bad request on {request.url.path}: {locations}")
    return Response(status_code=BadRequestError.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Answer routing and body-parsing failures with their status and no body."""
    logger.warning(f"HTTP error on {request.url.path}: {exc.status_code}")
    return Response(status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(RelayError)
async def relay_exception_handler(request: Request, exc: RelayError):
    """Answer per-request failures with their status and no body."""
    return Response(status_code=exc.status_code)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


class RelayServer(uvicorn.Server):
    """
    uvicorn server that drains on SIGINT and handles no other signal.

    On the first SIGINT the server stops accepting connections, waits for
    in-flight requests, then runs the lifespan shutdown.
    """

    @contextmanager
    def capture_signals(self):
        # Signal handlers can only be installed from the main thread
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        previous = signal.signal(signal.SIGINT, self.handle_exit)
        try:
            yield
        finally:
            signal.signal(signal.SIGINT, previous)


def run() -> None:
    """
    Start the relay.

    Configuration is loaded before anything binds; a missing or malformed
    setting terminates the process.
    """
    try:
        settings = get_settings()
    except ConfigurationError as e:
        logger.critical(str(e))
        raise SystemExit(1) from e

    logging.getLogger().setLevel(settings.log_level)

    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
        access_log=False,
        timeout_graceful_shutdown=None,
    )

    logger.info("Starting dtconn relay")
    RelayServer(config).run()


if __name__ == "__main__":
    run()
