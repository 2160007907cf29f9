"""Optional fields transformer.

Adds the stream flag and the sampling parameters the client supplied.
"""

from typing import Any

from src.conversion.pipeline.base import ConversionContext, RequestTransformer

# Upstream expects the string form
UPSTREAM_STREAM_FLAG = "true"

PASSTHROUGH_FIELDS = ("temperature", "frequency_penalty", "presence_penalty", "top_p")


class OptionalFieldsTransformer(RequestTransformer):
    """Adds optional fields to the upstream payload.

    - stream: Always the string ``"true"``; the relay reads SSE either way
    - temperature, frequency_penalty, presence_penalty, top_p: Passed
      through when the client set them, omitted otherwise
    """

    def transform(self, context: ConversionContext) -> ConversionContext:
        request = context.chat_request
        fields: dict[str, Any] = {"stream": UPSTREAM_STREAM_FLAG}
        for name in PASSTHROUGH_FIELDS:
            value = getattr(request, name)
            if value is not None:
                fields[name] = value
        return context.with_payload(**fields)
