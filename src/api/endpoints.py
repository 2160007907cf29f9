import uuid
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse, StreamingResponse

from src.api.orchestrator.failover import FailoverOrchestrator
from src.api.orchestrator.request_orchestrator import RequestOrchestrator
from src.api.services.chat_completions_handlers import get_chat_completions_handler
from src.api.services.key_rotation import extract_bearer_token
from src.core.config import Config, config
from src.core.credentials import CredentialStore, credential_store
from src.core.exceptions import ConfigurationError, InvalidClientKeyError
from src.core.logging import ConversationLogger, conversation_logger, logger
from src.core.model_registry import ModelRegistry
from src.core.tokens import TokenCounter, count_tokens
from src.core.upstream_client import UpstreamClient
from src.models.openai import ChatCompletionRequest

router = APIRouter()
health_router = APIRouter()


def get_config() -> Config:
    return config


def get_credential_store() -> CredentialStore:
    return credential_store


def get_model_registry(request: Request) -> ModelRegistry:
    registry = getattr(request.app.state, "model_registry", None)
    if registry is None:
        registry = ModelRegistry.from_json(config.model_registry_json)
        request.app.state.model_registry = registry
    return registry


def get_upstream_client(request: Request) -> UpstreamClient:
    client = getattr(request.app.state, "upstream_client", None)
    if client is None:
        raise ConfigurationError("Upstream client is not initialized")
    return client


def get_token_counter() -> TokenCounter:
    return count_tokens


async def validate_api_key(
    x_api_key: str | None = Header(None),
    authorization: str | None = Header(None),
    cfg: Config = Depends(get_config),
) -> None:
    """Validate the client's API key from either x-api-key or Authorization.

    Skipped in override mode, where Authorization carries upstream credentials.
    """
    if cfg.custom_header_key_enabled or not cfg.api_secrets:
        return

    client_api_key = x_api_key or extract_bearer_token(authorization)
    if not cfg.validate_client_api_key(client_api_key):
        logger.warning("Invalid API key provided by client")
        raise InvalidClientKeyError()


@router.post("/v1/chat/completions", response_model=None)
async def chat_completions(
    request: ChatCompletionRequest,
    http_request: Request,
    authorization: str | None = Header(None),
    cfg: Config = Depends(get_config),
    store: CredentialStore = Depends(get_credential_store),
    registry: ModelRegistry = Depends(get_model_registry),
    upstream: UpstreamClient = Depends(get_upstream_client),
    token_counter: TokenCounter = Depends(get_token_counter),
    _: None = Depends(validate_api_key),
) -> JSONResponse | StreamingResponse:
    request_id = str(uuid.uuid4())

    with ConversationLogger.correlation_context(request_id):
        conversation_logger.info(
            f"START | Model: {request.model} | Stream: {request.stream} | "
            f"Messages: {len(request.messages)} | Max Tokens: {request.max_tokens}"
        )

        context = RequestOrchestrator(
            config=cfg, store=store, registry=registry
        ).prepare_chat_context(
            request,
            authorization=authorization,
            http_request=http_request,
            request_id=request_id,
        )

        orchestrator = FailoverOrchestrator(upstream, lock_seconds=cfg.rate_limit_lock_seconds)
        handler = get_chat_completions_handler(bool(request.stream), token_counter)
        return await handler.handle(context, orchestrator)


@router.get("/v1/models")
async def list_models(
    registry: ModelRegistry = Depends(get_model_registry),
    _: None = Depends(validate_api_key),
) -> dict[str, Any]:
    return {
        "object": "list",
        "data": [{"id": model, "object": "model"} for model in registry.list_models()],
    }


@health_router.get("/health")
async def health_check(
    cfg: Config = Depends(get_config),
    store: CredentialStore = Depends(get_credential_store),
) -> dict[str, Any]:
    """Health check endpoint"""
    stats = store.stats()
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "override_mode": cfg.custom_header_key_enabled,
        "credentials": {
            "configured": stats["configured"],
            "quarantined": stats["quarantined"],
            "available": len(store.build_selectable()),
        },
        "client_api_key_validation": bool(cfg.api_secrets),
    }
