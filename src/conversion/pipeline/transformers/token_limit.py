"""Token limit transformer.

Substitutes the configured default for a missing, null or non-positive max_tokens.
"""

from src.conversion.pipeline.base import ConversionContext, RequestTransformer


class TokenLimitTransformer(RequestTransformer):
    """Ensures the upstream always receives a positive max_tokens.

    Ceilings are enforced earlier by ``validate_chat_request``; this step
    only fills in the default.
    """

    def transform(self, context: ConversionContext) -> ConversionContext:
        requested = context.chat_request.max_tokens or 0
        max_tokens = requested if requested > 0 else context.default_max_tokens
        return context.with_payload(max_tokens=max_tokens)
