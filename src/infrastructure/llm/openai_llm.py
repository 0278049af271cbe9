"""OpenAI implementation of LLM service."""

import base64
from typing import Any, ClassVar

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletionMessageParam

from src.commons.telemetry import create_llm_generation, end_llm_generation
from src.infrastructure.llm.base import (
    LLMResponse,
    LLMServiceBase,
    LLMUsage,
    Message,
    MessageRole,
)


class OpenAILLMService(LLMServiceBase):
    """OpenAI implementation of LLM service.

    Images are sent inline as base64 data URLs.
    """

    _VISION_MODELS: ClassVar[set[str]] = {
        "gpt-4o",
        "gpt-4o-mini",
        "gpt-4.1",
        "gpt-4.1-mini",
        "gpt-4-turbo",
    }

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: str | None = None,
        timeout_seconds: float = 60.0,
        client: AsyncOpenAI | None = None,
    ) -> None:
        """Initialize OpenAI LLM client.

        Args:
            api_key: OpenAI API key.
            model: Model to use.
            base_url: Optional custom API endpoint.
            timeout_seconds: Request timeout.
            client: Pre-built client, mainly for tests.
        """
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
        )
        self._model = model

    async def generate(
        self,
        messages: list[Message],
        temperature: float = 0.2,
        max_tokens: int = 1024,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate a completion."""
        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": self._convert_messages(messages),
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        generation = create_llm_generation(
            name="openai_chat_completion",
            model=self._model,
            input_messages=[
                {
                    "role": m.role.value,
                    "content": m.content,
                    "images": len(m.images or []),
                }
                for m in messages
            ],
            model_parameters={
                "temperature": temperature,
                "max_tokens": max_tokens,
                "json_mode": json_mode,
            },
            metadata={"provider": "openai"},
        )

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except Exception as e:
            end_llm_generation(generation, None, level="ERROR", status_message=str(e))
            raise

        choice = response.choices[0]
        usage = response.usage
        result = LLMResponse(
            content=choice.message.content or "",
            finish_reason=choice.finish_reason or "stop",
            usage=LLMUsage(
                prompt_tokens=usage.prompt_tokens if usage else 0,
                completion_tokens=usage.completion_tokens if usage else 0,
                total_tokens=usage.total_tokens if usage else 0,
            ),
            model=response.model,
        )
        end_llm_generation(generation, result.content, usage=result.usage.as_dict())
        return result

    def _convert_messages(
        self,
        messages: list[Message],
    ) -> list[ChatCompletionMessageParam]:
        """Convert our Message format to OpenAI format."""
        result: list[ChatCompletionMessageParam] = []

        for msg in messages:
            if msg.role == MessageRole.SYSTEM:
                result.append({"role": "system", "content": msg.content})
            elif msg.role == MessageRole.ASSISTANT:
                result.append({"role": "assistant", "content": msg.content})
            elif msg.images and self.supports_vision:
                content: list[dict[str, Any]] = [{"type": "text", "text": msg.content}]
                for image in msg.images:
                    b64 = base64.b64encode(image.data).decode()
                    content.append(
                        {
                            "type": "image_url",
                            "image_url": {
                                "url": f"data:{image.media_type};base64,{b64}",
                                "detail": "low",
                            },
                        }
                    )
                result.append({"role": "user", "content": content})  # type: ignore[misc, list-item]
            else:
                result.append({"role": "user", "content": msg.content})

        return result

    @property
    def supports_vision(self) -> bool:
        """Whether the configured model accepts image input."""
        return self._model in self._VISION_MODELS

    @property
    def default_model(self) -> str:
        """Model used for generation."""
        return self._model
