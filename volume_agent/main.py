import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from pydantic import ValidationError

from .api import volume_driver
from .config import Settings
from .dependencies import (
    close_share_client,
    configure_settings,
    get_metadata_store,
    get_mount_config,
    get_plugin_spec_writer,
    get_settings,
    get_volume_driver,
)
from .logging_config import setup_logging

WILDCARD_HOSTS = ("0.0.0.0", "::", "")


def plugin_address(settings: Settings) -> str:
    """Address the docker daemon should dial, written to the plugin spec file."""
    host = "127.0.0.1" if settings.host in WILDCARD_HOSTS else settings.host
    return f"{host}:{settings.port}"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    settings = get_settings()
    setup_logging(settings)

    logging.info("Azure File volume agent starting up...")
    logging.info(f"Mount configuration: {get_mount_config().get_platform_config()}")
    logging.info(f"Metadata directory: {get_metadata_store().root}")
    logging.info(f"Remove shares on volume removal: {settings.remove_shares}")

    # Fail before serving if the platform cannot mount
    get_volume_driver()

    spec_writer = get_plugin_spec_writer()
    if settings.write_plugin_spec:
        spec_writer.write(plugin_address(settings))

    yield

    # Shutdown
    logging.info("Azure File volume agent shutting down...")
    spec_writer.remove()
    await close_share_client()


app = FastAPI(
    title="Azure File Volume Agent",
    description="Docker volume plugin that mounts Azure File shares on the host",
    version="0.1.0",
    lifespan=lifespan,
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logging.debug(
        f"Incoming request: {request.method} {request.url.path}",
        extra={
            "operation": "http_request",
            "method": request.method,
            "path": request.url.path,
        },
    )

    response = await call_next(request)

    logging.debug(
        f"Response: {response.status_code}",
        extra={
            "operation": "http_response",
            "status_code": response.status_code,
            "path": request.url.path,
        },
    )
    return response


app.include_router(volume_driver.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "service": "azurefile-volume-agent"}


def run() -> None:
    """Console entrypoint: parse flags/env, then serve the plugin API."""
    try:
        settings = Settings(_cli_parse_args=True)
    except ValidationError as e:
        raise SystemExit(f"invalid configuration: {e}")

    configure_settings(settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.effective_log_level.lower(),
    )


if __name__ == "__main__":
    run()
