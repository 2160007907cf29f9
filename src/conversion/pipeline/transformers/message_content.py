"""Message content transformer.

Converts OpenAI message content into the upstream's item-tagged arrays.
"""

from src.conversion.pipeline.base import ConversionContext, RequestTransformer


class MessageContentTransformer(RequestTransformer):
    """Converts every message's content to upstream content items.

    - Plain text becomes a single text item
    - ``text`` parts stay text items, ``image_url`` parts become image items
    - Any other content value is serialized to a text item
    """

    def transform(self, context: ConversionContext) -> ConversionContext:
        # Import lazily to avoid circular imports
        from src.conversion.request_converter import convert_message

        return context.with_payload(messages=[convert_message(m) for m in context.messages])
