"""Infrastructure layer - external service implementations."""

from src.infrastructure.embeddings import (
    EmbeddingResult,
    EmbeddingServiceBase,
    OpenAIEmbeddingService,
)
from src.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)
from src.infrastructure.llm import (
    AnthropicLLMService,
    ImageContent,
    LLMResponse,
    LLMServiceBase,
    LLMUsage,
    Message,
    MessageRole,
    OpenAILLMService,
)
from src.infrastructure.ocr import OCRServiceBase, TesseractOCRService
from src.infrastructure.video import (
    ExtractedFrame,
    FFmpegFrameExtractor,
    FrameExtractorBase,
    VideoDecodeError,
)

__all__ = [
    # Factory
    "InfrastructureFactory",
    "get_factory",
    "reset_factory",
    # Embeddings
    "EmbeddingServiceBase",
    "EmbeddingResult",
    "OpenAIEmbeddingService",
    # LLM
    "LLMServiceBase",
    "LLMResponse",
    "LLMUsage",
    "Message",
    "MessageRole",
    "ImageContent",
    "OpenAILLMService",
    "AnthropicLLMService",
    # OCR
    "OCRServiceBase",
    "TesseractOCRService",
    # Video
    "FrameExtractorBase",
    "ExtractedFrame",
    "VideoDecodeError",
    "FFmpegFrameExtractor",
]
