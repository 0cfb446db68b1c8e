"""Text generation services."""

from media_pipeline.infrastructure.llm.base import (
    LLMResponse,
    LLMServiceBase,
    LLMUsage,
    Message,
    MessageRole,
)
from media_pipeline.infrastructure.llm.openai_llm import OpenAILLMService

__all__ = [
    "LLMResponse",
    "LLMServiceBase",
    "LLMUsage",
    "Message",
    "MessageRole",
    "OpenAILLMService",
]
