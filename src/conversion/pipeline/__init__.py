"""Request conversion pipeline.

This package provides a composable pipeline for converting OpenAI chat
completion requests to the upstream chat body. Each transformer in the
pipeline handles a single responsibility, and the whole pipeline is pure:
running it twice on the same request yields the same body.
"""

from src.conversion.pipeline.base import ConversionContext, RequestPipeline, RequestTransformer
from src.conversion.pipeline.factory import RequestPipelineFactory

__all__ = ["ConversionContext", "RequestPipeline", "RequestTransformer", "RequestPipelineFactory"]
