"""Request orchestrator for preparing chat request contexts.

Everything that can reject a request happens here, before the first upstream
attempt: model and token validation, body conversion and credential view
construction.
"""

import logging
import uuid
from typing import Any

from src.api.context.request_context import ChatRequestContext
from src.api.services.key_rotation import build_pool_view
from src.conversion.request_converter import convert_chat_to_upstream, validate_chat_request
from src.core.credentials import CredentialStore
from src.core.model_registry import ModelRegistry
from src.models.openai import ChatCompletionRequest

logger = logging.getLogger(__name__)


class RequestOrchestrator:
    """Orchestrates the setup for chat completion request processing.

    Responsibilities:
    1. Validate model and max_tokens against the registry
    2. Convert the request to the upstream body
    3. Build the request's credential pool view
    """

    def __init__(self, *, config: Any, store: CredentialStore, registry: ModelRegistry) -> None:
        self.config = config
        self.store = store
        self.registry = registry
        self.logger = logging.getLogger(f"{__name__}.RequestOrchestrator")

    def prepare_chat_context(
        self,
        request: ChatCompletionRequest,
        *,
        authorization: str | None = None,
        http_request: Any = None,
        request_id: str | None = None,
    ) -> ChatRequestContext:
        """Prepare a ChatRequestContext ready for the failover relay.

        Raises:
            UnsupportedModelError: If the model is not registered.
            TokenLimitExceededError: If max_tokens exceeds the model ceiling.
            ConfigurationError: If PRE_MESSAGES_JSON is invalid.
            MissingOverrideCredentialError: If override mode lacks a credential.
        """
        model_info = validate_chat_request(request, self.registry)

        upstream_body = convert_chat_to_upstream(
            request,
            pre_messages_json=self.config.pre_messages_json,
            default_max_tokens=self.config.default_max_tokens,
        )

        pool = build_pool_view(
            config=self.config,
            store=self.store,
            authorization=authorization,
        )

        context = ChatRequestContext(
            request=request,
            request_id=request_id or str(uuid.uuid4()),
            model_info=model_info,
            pool=pool,
            upstream_body=upstream_body,
            http_request=http_request,
        )
        self.logger.debug(
            f"Prepared request: model={request.model}, stream={request.stream}, "
            f"credentials={len(pool)}, override={pool.is_override}"
        )
        return context
