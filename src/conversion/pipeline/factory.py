"""Request pipeline factory.

Builds the default request conversion pipeline with all transformers.
"""

from src.conversion.pipeline.base import RequestPipeline, RequestTransformer
from src.conversion.pipeline.transformers.message_content import MessageContentTransformer
from src.conversion.pipeline.transformers.optional_fields import OptionalFieldsTransformer
from src.conversion.pipeline.transformers.platform_attributes import (
    PlatformAttributesTransformer,
)
from src.conversion.pipeline.transformers.prepend_messages import PrependMessagesTransformer
from src.conversion.pipeline.transformers.token_limit import TokenLimitTransformer


class RequestPipelineFactory:
    """Factory for creating request conversion pipelines."""

    @staticmethod
    def create_default() -> RequestPipeline:
        """Create the default request conversion pipeline.

        Transformers are executed in the following order:
        1. PrependMessagesTransformer - Insert configured boilerplate messages
        2. MessageContentTransformer - Convert message content to upstream items
        3. TokenLimitTransformer - Substitute the default max_tokens
        4. OptionalFieldsTransformer - Stream flag and sampling parameters
        5. PlatformAttributesTransformer - Bare upstream model id

        Returns:
            A configured RequestPipeline ready for execution.
        """
        transformers: list[RequestTransformer] = [
            PrependMessagesTransformer(),
            MessageContentTransformer(),
            TokenLimitTransformer(),
            OptionalFieldsTransformer(),
            PlatformAttributesTransformer(),
        ]
        return RequestPipeline(transformers)
