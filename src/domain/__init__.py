"""Domain layer - business models and errors."""

from src.domain.exceptions import (
    DomainException,
    EmbeddingGenerationError,
    FrameExtractionError,
    FrameIngestionError,
    PerFrameStageError,
    SearchBackendError,
    UnknownJobTypeError,
    ValidationError,
)
from src.domain.models import (
    ChunkResult,
    CombinedResult,
    DualEmbedding,
    EmbeddingResolution,
    ExtractFramesPayload,
    Frame,
    FrameDescription,
    FrameDescriptor,
    FrameMetadata,
    FrameOutcome,
    Job,
    JobStatus,
    JobType,
    Modality,
    MultimodalSearchMetadata,
    MultimodalSearchResponse,
    OCRBlock,
    OCRResult,
    Recording,
    RecordingSummary,
    SceneType,
    TranscriptSearchResult,
    VisualIndexingStatus,
    VisualSearchResult,
    clamp_similarity,
    cosine_similarity,
)

__all__ = [
    # Exceptions
    "DomainException",
    "ValidationError",
    "EmbeddingGenerationError",
    "FrameExtractionError",
    "PerFrameStageError",
    "SearchBackendError",
    "FrameIngestionError",
    "UnknownJobTypeError",
    # Models
    "Recording",
    "RecordingSummary",
    "VisualIndexingStatus",
    "Frame",
    "FrameDescription",
    "FrameDescriptor",
    "FrameMetadata",
    "FrameOutcome",
    "OCRBlock",
    "OCRResult",
    "SceneType",
    "Job",
    "JobStatus",
    "JobType",
    "ExtractFramesPayload",
    "DualEmbedding",
    "EmbeddingResolution",
    "cosine_similarity",
    "clamp_similarity",
    "ChunkResult",
    "CombinedResult",
    "Modality",
    "MultimodalSearchMetadata",
    "MultimodalSearchResponse",
    "TranscriptSearchResult",
    "VisualSearchResult",
]
