"""Anthropic implementation of LLM service."""

import base64
from typing import Any

from anthropic import AsyncAnthropic

from src.commons.telemetry import create_llm_generation, end_llm_generation
from src.infrastructure.llm.base import (
    LLMResponse,
    LLMServiceBase,
    LLMUsage,
    Message,
    MessageRole,
)


class AnthropicLLMService(LLMServiceBase):
    """Anthropic implementation of LLM service.

    All Claude 3+ models accept images. JSON output is requested through
    the prompt since the Messages API has no JSON mode.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        base_url: str | None = None,
        max_retries: int = 2,
        client: AsyncAnthropic | None = None,
    ) -> None:
        """Initialize Anthropic LLM client.

        Args:
            api_key: Anthropic API key.
            model: Model to use.
            base_url: Optional custom API endpoint.
            max_retries: Maximum number of SDK-level retries for failed requests.
            client: Pre-built client, mainly for tests.
        """
        self._client = client or AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
            max_retries=max_retries,
        )
        self._model = model

    async def generate(
        self,
        messages: list[Message],
        temperature: float = 0.2,
        max_tokens: int = 1024,
        json_mode: bool = False,  # noqa: ARG002 - handled by the prompt
    ) -> LLMResponse:
        """Generate a completion."""
        anthropic_messages, system_prompt = self._convert_messages(messages)

        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": anthropic_messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        generation = create_llm_generation(
            name="anthropic_messages",
            model=self._model,
            input_messages=[
                {
                    "role": m.role.value,
                    "content": m.content,
                    "images": len(m.images or []),
                }
                for m in messages
            ],
            model_parameters={"temperature": temperature, "max_tokens": max_tokens},
            metadata={"provider": "anthropic"},
        )

        try:
            response = await self._client.messages.create(**kwargs)
        except Exception as e:
            end_llm_generation(generation, None, level="ERROR", status_message=str(e))
            raise

        content = next(
            (block.text for block in response.content if block.type == "text"),
            "",
        )
        result = LLMResponse(
            content=content,
            finish_reason=response.stop_reason or "end_turn",
            usage=LLMUsage(
                prompt_tokens=response.usage.input_tokens,
                completion_tokens=response.usage.output_tokens,
                total_tokens=response.usage.input_tokens + response.usage.output_tokens,
            ),
            model=response.model,
        )
        end_llm_generation(generation, result.content, usage=result.usage.as_dict())
        return result

    def _convert_messages(
        self,
        messages: list[Message],
    ) -> tuple[list[dict[str, Any]], str | None]:
        """Convert our Message format to Anthropic format.

        Returns:
            Tuple of (messages list, system prompt or None).
        """
        result: list[dict[str, Any]] = []
        system_prompt: str | None = None

        for msg in messages:
            if msg.role == MessageRole.SYSTEM:
                system_prompt = msg.content
            elif msg.role == MessageRole.ASSISTANT:
                result.append({"role": "assistant", "content": msg.content})
            elif msg.images:
                content: list[dict[str, Any]] = [
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": image.media_type,
                            "data": base64.standard_b64encode(image.data).decode(),
                        },
                    }
                    for image in msg.images
                ]
                content.append({"type": "text", "text": msg.content})
                result.append({"role": "user", "content": content})
            else:
                result.append({"role": "user", "content": msg.content})

        return result, system_prompt

    @property
    def supports_vision(self) -> bool:
        """Whether the configured model accepts image input."""
        return self._model.startswith("claude-")

    @property
    def default_model(self) -> str:
        """Model used for generation."""
        return self._model
