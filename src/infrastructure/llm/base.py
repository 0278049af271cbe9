"""Abstract base class for vision-capable LLM services."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class MessageRole(str, Enum):
    """Role of a message in the conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ImageContent:
    """Raw image bytes attached to a user message."""

    data: bytes
    media_type: str = "image/jpeg"


@dataclass
class Message:
    """A message in the conversation."""

    role: MessageRole
    content: str
    images: list[ImageContent] | None = None


@dataclass
class LLMUsage:
    """Token usage statistics."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    def as_dict(self) -> dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass
class LLMResponse:
    """Response from LLM generation."""

    content: str
    finish_reason: str
    usage: LLMUsage
    model: str


class LLMServiceBase(ABC):
    """Abstract base class for LLM services used to describe frames.

    Implementations:
    - OpenAI (GPT-4o family)
    - Anthropic (Claude 3+)
    """

    @abstractmethod
    async def generate(
        self,
        messages: list[Message],
        temperature: float = 0.2,
        max_tokens: int = 1024,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate a completion.

        Args:
            messages: List of conversation messages, images attached to user turns.
            temperature: Sampling temperature (0.0-2.0).
            max_tokens: Maximum tokens to generate.
            json_mode: Whether to ask for a JSON object.

        Returns:
            LLM response with content and usage.
        """

    @property
    @abstractmethod
    def supports_vision(self) -> bool:
        """Whether the configured model accepts image input."""

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Model used for generation."""
