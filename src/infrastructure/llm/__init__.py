"""LLM service implementations."""

from src.infrastructure.llm.anthropic_llm import AnthropicLLMService
from src.infrastructure.llm.base import (
    ImageContent,
    LLMResponse,
    LLMServiceBase,
    LLMUsage,
    Message,
    MessageRole,
)
from src.infrastructure.llm.openai_llm import OpenAILLMService

__all__ = [
    "LLMServiceBase",
    "LLMResponse",
    "LLMUsage",
    "Message",
    "MessageRole",
    "ImageContent",
    "OpenAILLMService",
    "AnthropicLLMService",
]
