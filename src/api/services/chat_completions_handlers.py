"""Chat completions handlers using strategy pattern.

Both handlers drive the same ``FailoverOrchestrator.relay`` generator; they
differ only in how relayed text reaches the client. The streaming handler
forwards each delta as an OpenAI chunk, the non-streaming handler aggregates
the text into one completion.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from contextlib import aclosing

from fastapi.responses import JSONResponse, StreamingResponse

from src.api.context.request_context import ChatRequestContext
from src.api.orchestrator.failover import (
    FailoverOrchestrator,
    RelayDelta,
    RelayItem,
    RelayOutcome,
    RelayRetry,
)
from src.api.services.error_handling import ErrorResponseBuilder
from src.api.services.streaming import (
    SSE_DONE_FRAME,
    sse_frame,
    sse_headers,
    streaming_response,
)
from src.conversion.response_converter import (
    build_chat_completion,
    build_final_chunk,
    build_stream_chunk,
    build_usage,
    compute_usage,
    new_response_id,
)
from src.core.exceptions import ClientDisconnectedError
from src.core.tokens import TokenCounter, count_tokens

logger = logging.getLogger(__name__)


class ChatCompletionsHandler(ABC):
    """Abstract base for the two response modes of /v1/chat/completions."""

    def __init__(self, token_counter: TokenCounter = count_tokens) -> None:
        self.token_counter = token_counter

    @abstractmethod
    async def handle(
        self,
        context: ChatRequestContext,
        orchestrator: FailoverOrchestrator,
    ) -> JSONResponse | StreamingResponse:
        """Relay the request and build the client response.

        Raises:
            RelayError: If the relay fails before any output was produced.
        """

    def _start_relay(
        self, context: ChatRequestContext, orchestrator: FailoverOrchestrator
    ) -> AsyncGenerator[RelayItem, None]:
        return orchestrator.relay(context.pool, context.build_body, context.is_disconnected)


class StreamingChatHandler(ChatCompletionsHandler):
    """Streams OpenAI chunks as deltas arrive.

    The response does not start until the relay yields its first item, so a
    request that fails before any text is produced still gets a plain JSON
    error with the proper status code. Text already sent cannot be
    recalled, so retry markers after output began are only skipped.
    """

    async def handle(
        self,
        context: ChatRequestContext,
        orchestrator: FailoverOrchestrator,
    ) -> JSONResponse | StreamingResponse:
        relay = self._start_relay(context, orchestrator)
        try:
            first = await anext(relay)
            while isinstance(first, RelayRetry):
                first = await anext(relay)
        except BaseException:
            await relay.aclose()
            raise

        if isinstance(first, RelayOutcome) and first.error is not None:
            await relay.aclose()
            raise first.error

        return streaming_response(
            stream=self._frames(context, first, relay),
            headers=sse_headers(),
        )

    async def _frames(
        self,
        context: ChatRequestContext,
        first: RelayItem,
        relay: AsyncGenerator[RelayItem, None],
    ) -> AsyncGenerator[str, None]:
        response_id = new_response_id()
        model = context.model
        prompt_tokens = self.token_counter(context.prompt_text, model)
        completion_parts: list[str] = []

        async def items() -> AsyncGenerator[RelayItem, None]:
            yield first
            async for item in relay:
                yield item

        try:
            async with aclosing(relay), aclosing(items()) as stream:
                async for item in stream:
                    if isinstance(item, RelayDelta):
                        completion_parts.append(item.text)
                        usage = build_usage(prompt_tokens, self.token_counter(item.text, model))
                        yield sse_frame(build_stream_chunk(response_id, model, item.text, usage))
                        continue
                    if isinstance(item, RelayRetry):
                        continue

                    if item.error is None:
                        completion_tokens = self.token_counter("".join(completion_parts), model)
                        usage = build_usage(prompt_tokens, completion_tokens)
                        yield sse_frame(build_final_chunk(response_id, model, usage))
                        yield SSE_DONE_FRAME
                        logger.info(
                            f"Stream completed after {item.attempts} attempt(s): "
                            f"{usage['total_tokens']} tokens"
                        )
                    else:
                        logger.error(f"Stream failed after output began: {item.error.message}")
                        yield sse_frame(ErrorResponseBuilder.stream_error_payload(item.error))
                    return
        except ClientDisconnectedError:
            logger.info(f"Client disconnected from stream {response_id}")


class NonStreamingChatHandler(ChatCompletionsHandler):
    """Aggregates all relayed text into a single chat.completion."""

    async def handle(
        self,
        context: ChatRequestContext,
        orchestrator: FailoverOrchestrator,
    ) -> JSONResponse | StreamingResponse:
        completion_parts: list[str] = []
        outcome: RelayOutcome | None = None

        async with aclosing(self._start_relay(context, orchestrator)) as relay:
            async for item in relay:
                if isinstance(item, RelayDelta):
                    completion_parts.append(item.text)
                elif isinstance(item, RelayRetry):
                    completion_parts.clear()
                else:
                    outcome = item

        if outcome is None:
            return ErrorResponseBuilder.internal_error("Relay ended without an outcome")
        if outcome.error is not None:
            raise outcome.error

        content = "".join(completion_parts)
        usage = compute_usage(context.prompt_text, content, context.model, self.token_counter)
        logger.info(
            f"Completion relayed after {outcome.attempts} attempt(s): "
            f"{usage['total_tokens']} tokens"
        )
        return JSONResponse(
            status_code=200,
            content=build_chat_completion(new_response_id(), context.model, content, usage),
        )


def get_chat_completions_handler(
    stream: bool, token_counter: TokenCounter = count_tokens
) -> ChatCompletionsHandler:
    """Factory function to get the handler for the requested response mode.

    Args:
        stream: Whether the client asked for a streaming response
        token_counter: Token counter used for usage accounting

    Returns:
        The appropriate ChatCompletionsHandler instance
    """
    if stream:
        return StreamingChatHandler(token_counter)
    return NonStreamingChatHandler(token_counter)
