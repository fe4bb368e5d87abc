"""
callcenter.main
===============
Entrypoint that stitches everything together:

• config / CORS
• shared objects on `app.state`  (status register, relay, external stores, credential)
• route registration (api router)

Configuration Loading Order:
    1. .env.local (local development overrides) - loaded by config.settings
    2. Environment variables (container/cloud deployments)
"""

from __future__ import annotations

import sys
import time
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from src.agent import StatusRegister
from src.enums.monitoring import PeerService, SpanAttr
from src.relay import DirectoryCallSource, NotificationRelay, SampleCallSource
from src.stores import CallDirectory, RequestLogStore, create_store_client
from utils.azure_auth import IdentityConfigurationError, get_credential
from utils.ml_logging import get_logger
from utils.telemetry_config import setup_azure_monitor

from apps.callcenter.backend.api.router import api_router
from apps.callcenter.backend.config import (
    ALLOWED_ORIGINS,
    DEBUG_MODE,
    ENVIRONMENT,
    PORT,
    AppConfig,
    validate_settings,
)

# Setup monitoring (configures loggers and Azure Monitor export)
setup_azure_monitor(logger_name="")

logger = get_logger("main")

StepCallable = Callable[[], Awaitable[None]]
LifecycleStep = tuple[str, StepCallable, StepCallable | None]


def build_event_source(app_config: AppConfig, directory: CallDirectory | None):
    """Pick the relay's event source from configuration."""
    relay_config = app_config.relay
    if relay_config.event_source == "directory":
        if directory is not None:
            return DirectoryCallSource(directory, caller=relay_config.sample_caller)
        logger.warning("RELAY_EVENT_SOURCE=directory but call directory is unavailable; using sample")
    return SampleCallSource(caller=relay_config.sample_caller, name=relay_config.sample_name)


# --------------------------------------------------------------------------- #
#  Lifecycle Management
# --------------------------------------------------------------------------- #
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown.

    Startup runs named steps in order (identity, core, stores, relay), each
    inside its own span; shutdown runs the matching teardown callbacks in
    reverse order.

    :param app: The FastAPI application instance requiring lifecycle management.
    :return: AsyncGenerator yielding control to the application runtime.
    :raises IdentityConfigurationError: If the identity credential is missing.
    """
    tracer = trace.get_tracer(__name__)

    startup_steps: list[LifecycleStep] = []
    executed_steps: list[LifecycleStep] = []
    startup_results: list[tuple[str, float]] = []

    def add_step(name: str, start: StepCallable, shutdown: StepCallable | None = None) -> None:
        startup_steps.append((name, start, shutdown))

    async def run_steps(steps: list[LifecycleStep], phase: str) -> None:
        for name, start_fn, shutdown_fn in steps:
            with tracer.start_as_current_span(f"{phase}.{name}") as step_span:
                step_start = time.perf_counter()
                logger.debug(f"{phase} stage started", extra={"stage": name})
                try:
                    await start_fn()
                except Exception as exc:
                    step_span.record_exception(exc)
                    step_span.set_status(Status(StatusCode.ERROR, str(exc)))
                    logger.error(f"{phase} stage failed", extra={"stage": name, "error": str(exc)})
                    raise
                step_duration = time.perf_counter() - step_start
                step_span.set_attribute("duration_sec", step_duration)
                rounded = round(step_duration, 2)
                logger.debug(
                    f"{phase} stage completed", extra={"stage": name, "duration_sec": rounded}
                )
                executed_steps.append((name, start_fn, shutdown_fn))
                startup_results.append((name, rounded))

    async def run_shutdown(steps: list[LifecycleStep]) -> None:
        for name, _, shutdown_fn in reversed(steps):
            if shutdown_fn is None:
                continue
            with tracer.start_as_current_span(f"shutdown.{name}") as step_span:
                step_start = time.perf_counter()
                try:
                    await shutdown_fn()
                except Exception as exc:
                    step_span.record_exception(exc)
                    step_span.set_status(Status(StatusCode.ERROR, str(exc)))
                    logger.error("shutdown stage failed", extra={"stage": name, "error": str(exc)})
                    continue
                step_span.set_attribute("duration_sec", time.perf_counter() - step_start)

    app_config = AppConfig()

    async def start_identity() -> None:
        # Fatal when missing: the service must not run half-configured.
        trace.get_current_span().set_attribute(SpanAttr.PEER_SERVICE.value, PeerService.IDENTITY)
        app.state.credential = get_credential()
        logger.debug(f"identity credential loaded from {app_config.identity.to_dict()['source']}")

    add_step("identity", start_identity)

    async def start_core_state() -> None:
        app.state.config = app_config
        app.state.started_at = time.time()
        app.state.status_register = StatusRegister()
        logger.debug(f"configuration loaded: {app_config.to_dict()}")

        validation = validate_settings()
        for warning in validation["warnings"]:
            logger.warning(warning)
        for issue in validation["issues"]:
            logger.error(issue)

    add_step("core", start_core_state)

    async def start_stores() -> None:
        directory_cfg = app_config.stores.call_directory
        log_cfg = app_config.stores.log_store

        directory_client = create_store_client(
            directory_cfg.url, directory_cfg.anon_key, label="call directory"
        )
        log_client = create_store_client(log_cfg.url, log_cfg.anon_key, label="logging store")

        app.state.call_directory = (
            CallDirectory(directory_client, url=directory_cfg.url) if directory_client else None
        )
        app.state.log_store = RequestLogStore(log_client, url=log_cfg.url) if log_client else None
        logger.debug(
            "stores ready",
            extra={
                "call_directory": app.state.call_directory is not None,
                "log_store": app.state.log_store is not None,
            },
        )

    add_step("stores", start_stores)

    async def start_relay() -> None:
        source = build_event_source(app_config, app.state.call_directory)
        app.state.relay = NotificationRelay(source, app_config.relay.interval_seconds)

    async def stop_relay() -> None:
        relay = getattr(app.state, "relay", None)
        if relay is not None:
            await relay.shutdown()

    add_step("relay", start_relay, stop_relay)

    with tracer.start_as_current_span("startup.lifespan") as startup_span:
        startup_span.set_attributes(
            {
                SpanAttr.SERVICE_NAME.value: "callcenter-api",
                "service.version": "1.0.0",
                "startup.stage": "lifecycle",
            }
        )
        startup_begin = time.perf_counter()
        await run_steps(startup_steps, "startup")
        startup_duration = time.perf_counter() - startup_begin
        startup_span.set_attributes(
            {
                "startup.duration_sec": startup_duration,
                "startup.stage": "complete",
                "startup.success": True,
            }
        )
        steps_summary = ", ".join(f"{name} {secs:.2f}s" for name, secs in startup_results)
        logger.keyinfo(f"✅ Startup complete ({round(startup_duration, 2)}s): {steps_summary}")

    # ---- Run app ----
    yield

    with tracer.start_as_current_span("shutdown.lifespan") as shutdown_span:
        logger.info("🛑 shutdown…")
        shutdown_begin = time.perf_counter()
        await run_shutdown(executed_steps)
        shutdown_span.set_attribute("shutdown.duration_sec", time.perf_counter() - shutdown_begin)
        shutdown_span.set_attribute("shutdown.success", True)


# --------------------------------------------------------------------------- #
#  Error responses
# --------------------------------------------------------------------------- #
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors, reported in the API's own envelope."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid request: {location} {first.get('msg', '')}".strip() if first else "Invalid request"
    logger.warning(f"Rejected malformed request to {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"success": False, "message": message})


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500, content={"success": False, "message": "Internal Server Error"}
    )


# --------------------------------------------------------------------------- #
#  App factory
# --------------------------------------------------------------------------- #
def create_app() -> FastAPI:
    """Create the FastAPI app."""
    app = FastAPI(
        title="Call Center Agent API",
        description="Agent status, call routing, WebRTC tokens, request logs and the call relay",
        version="1.0.0",
        lifespan=lifespan,
    )
    logger.debug(f"App created for environment: {ENVIRONMENT} (debug={DEBUG_MODE})")
    return app


def setup_app_middleware_and_routes(app: FastAPI):
    """
    Configure CORS, error handlers and route registration.

    :param app: The FastAPI application instance to configure with middleware and routes.
    :return: None (modifies the application instance in place).
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials="*" not in ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=86400,
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api_router)


# Create the app
app = None


def initialize_app():
    """Initialize app with middleware and routes."""
    global app
    app = create_app()
    setup_app_middleware_and_routes(app)

    return app


# Initialize the app
app = initialize_app()


# --------------------------------------------------------------------------- #
#  Main entry point
# --------------------------------------------------------------------------- #
def main():
    """Entry point for the callcenter-server script."""
    # Refuse to bind a port without the identity credential.
    try:
        get_credential()
    except IdentityConfigurationError as exc:
        logger.critical(f"❌ Startup aborted: {exc}")
        sys.exit(1)

    uvicorn.run(
        app,  # Use app object directly
        host="0.0.0.0",  # nosec: B104
        port=PORT,
        reload=False,
    )


if __name__ == "__main__":
    main()
