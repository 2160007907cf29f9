"""Base infrastructure for request conversion pipeline.

This module defines the core components of the pipeline:
- ConversionContext: Immutable context passed through transformers
- RequestTransformer: Abstract base for all transformation steps
- RequestPipeline: Orchestrator that executes transformers in sequence
"""

import dataclasses
import logging
from abc import ABC, abstractmethod
from typing import Any

from src.models.openai import ChatCompletionRequest

REQUEST_PAYLOAD = "request_payload"
PLATFORM_ATTRIBUTES = "platform_attributes"


def empty_upstream_request() -> dict[str, Any]:
    return {REQUEST_PAYLOAD: {}, PLATFORM_ATTRIBUTES: {}}


@dataclasses.dataclass(frozen=True)
class ConversionContext:
    """Immutable context passed through the conversion pipeline.

    Attributes:
        chat_request: The validated client request.
        messages: OpenAI-style message dicts still to be converted.
        upstream_request: The upstream body being built.
        pre_messages_json: JSON list of messages to prepend (empty to skip).
        default_max_tokens: Substitute for a null or non-positive max_tokens.
    """

    chat_request: ChatCompletionRequest
    messages: list[dict[str, Any]]
    upstream_request: dict[str, Any] = dataclasses.field(default_factory=empty_upstream_request)
    pre_messages_json: str = ""
    default_max_tokens: int = 8192

    def with_payload(self, **fields: Any) -> "ConversionContext":
        """Return a new context with ``fields`` merged into request_payload."""
        payload = {**self.upstream_request.get(REQUEST_PAYLOAD, {}), **fields}
        return dataclasses.replace(
            self, upstream_request={**self.upstream_request, REQUEST_PAYLOAD: payload}
        )

    def with_platform_attributes(self, **fields: Any) -> "ConversionContext":
        attributes = {**self.upstream_request.get(PLATFORM_ATTRIBUTES, {}), **fields}
        return dataclasses.replace(
            self, upstream_request={**self.upstream_request, PLATFORM_ATTRIBUTES: attributes}
        )


class RequestTransformer(ABC):
    """Base class for all request transformation steps.

    Transformers must be pure functions - they should not mutate the input
    context but rather return a new ConversionContext with changes applied.
    """

    @abstractmethod
    def transform(self, context: ConversionContext) -> ConversionContext:
        """Transform the context and return a new instance.

        Args:
            context: The input context.

        Returns:
            A new ConversionContext with transformations applied.
        """

    @property
    def name(self) -> str:
        """Human-readable name for logging and debugging."""
        return self.__class__.__name__


class RequestPipeline:
    """Orchestrates the execution of transformers in sequence.

    Each transformer receives the output of the previous transformer as its
    input; the first failure is logged and propagated.
    """

    def __init__(self, transformers: list[RequestTransformer]) -> None:
        self.transformers = transformers
        self.logger = logging.getLogger(f"{__name__}.RequestPipeline")

    def execute(self, initial_context: ConversionContext) -> dict[str, Any]:
        """Execute all transformers and return the final upstream body.

        Raises:
            Exception: If any transformer fails.
        """
        context = initial_context

        for i, transformer in enumerate(self.transformers):
            self.logger.debug(
                f"Running transformer [{i + 1}/{len(self.transformers)}]: {transformer.name}"
            )
            try:
                context = transformer.transform(context)
            except Exception as e:
                self.logger.error(f"Transformer {transformer.name} failed: {e}")
                raise

        self.logger.debug(f"Pipeline completed: {len(self.transformers)} transformers executed")
        return context.upstream_request
