"""Platform attributes transformer.

Sets the bare upstream model id.
"""

from src.conversion.pipeline.base import ConversionContext, RequestTransformer


class PlatformAttributesTransformer(RequestTransformer):
    """Maps ``provider:model`` to the upstream's bare model id."""

    def transform(self, context: ConversionContext) -> ConversionContext:
        from src.conversion.request_converter import transform_model_id

        return context.with_platform_attributes(
            model=transform_model_id(context.chat_request.model)
        )
