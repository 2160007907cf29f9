"""Request conversion transformers.

Each transformer handles a single, focused transformation of the request.
Transformers are executed in sequence by the RequestPipeline.
"""

from src.conversion.pipeline.transformers.message_content import MessageContentTransformer
from src.conversion.pipeline.transformers.optional_fields import OptionalFieldsTransformer
from src.conversion.pipeline.transformers.platform_attributes import (
    PlatformAttributesTransformer,
)
from src.conversion.pipeline.transformers.prepend_messages import PrependMessagesTransformer
from src.conversion.pipeline.transformers.token_limit import TokenLimitTransformer

__all__ = [
    "PrependMessagesTransformer",
    "MessageContentTransformer",
    "TokenLimitTransformer",
    "OptionalFieldsTransformer",
    "PlatformAttributesTransformer",
]
