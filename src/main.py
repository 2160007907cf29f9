import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src import __version__
from src.api.endpoints import health_router
from src.api.endpoints import router as api_router
from src.api.services.error_handling import ErrorResponseBuilder
from src.core.config import config, mask_secret
from src.core.credentials import credential_store
from src.core.exceptions import RelayError
from src.core.logging import log_level
from src.core.model_registry import ModelRegistry
from src.core.upstream_client import UpstreamClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    credential_store.initialize(
        config.credentials_raw, override_mode=config.custom_header_key_enabled
    )
    app.state.model_registry = ModelRegistry.from_json(config.model_registry_json)
    app.state.upstream_client = UpstreamClient.from_config(config)
    logger.info(
        f"Rovo Relay {__version__} ready: upstream={config.upstream_base_url}, "
        f"models={len(app.state.model_registry)}"
    )
    try:
        yield
    finally:
        await app.state.upstream_client.aclose()
        logger.info("Upstream client closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Rovo Relay",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{exc.__class__.__name__}: {exc.message}")
        else:
            logger.info(f"Rejected request: {exc.message}")
        return ErrorResponseBuilder.from_relay_error(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return ErrorResponseBuilder.invalid_request(
            "Invalid request parameters", details=jsonable_errors(exc)
        )

    app.include_router(api_router, prefix=config.route_prefix)
    app.include_router(health_router)
    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, object]]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


app = create_app()


def main() -> None:
    if len(sys.argv) > 1 and sys.argv[1] == "--help":
        print(f"Rovo Relay v{__version__}")
        print("")
        print("Usage: python -m src.main")
        print("       or: rovo-relay start")
        print("")
        print("Required environment variables:")
        print("  RELAY_CREDENTIALS - Comma-separated upstream credentials")
        print("                      (not needed when CUSTOM_HEADER_KEY_ENABLED=true)")
        print("")
        print("Optional environment variables:")
        print("  API_SECRET - Comma-separated client API secrets")
        print("  HOST - Server host (default: 0.0.0.0)")
        print("  PORT - Server port (default: 10111)")
        print("  LOG_LEVEL - Logging level (default: INFO)")
        print("  RATE_LIMIT_LOCK_SECONDS - Quarantine duration (default: 600)")
        print("  REQUEST_TIMEOUT - Request timeout in seconds (default: 600)")
        print("")
        print("For more options, use the rovo-relay CLI:")
        print("  rovo-relay config show  - Show current configuration")
        print("  rovo-relay config check - Validate configuration")
        sys.exit(0)

    print(f"Rovo Relay v{__version__}")
    print("Configuration loaded successfully")
    print(f"   Upstream        : {config.upstream_base_url}")
    print(f"   Credentials     : {len([c for c in config.credentials_raw.split(',') if c.strip()])}")
    print(f"   Override Mode   : {'Enabled' if config.custom_header_key_enabled else 'Disabled'}")
    print(f"   API Secret      : {mask_secret(','.join(config.api_secrets))}")
    print(f"   Request Timeout : {config.request_timeout}s")
    print(f"   Server: {config.host}:{config.port}")
    print("")

    uvicorn.run(
        "src.main:app",
        host=config.host,
        port=config.port,
        log_level=log_level.lower(),
        access_log=log_level == "DEBUG",
        reload=False,
    )


if __name__ == "__main__":
    main()
