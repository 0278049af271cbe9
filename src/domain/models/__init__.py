"""Domain models."""

from src.domain.models.embedding import (
    DualEmbedding,
    EmbeddingResolution,
    clamp_similarity,
    cosine_similarity,
)
from src.domain.models.frame import (
    Frame,
    FrameDescription,
    FrameDescriptor,
    FrameMetadata,
    FrameOutcome,
    OCRBlock,
    OCRResult,
    SceneType,
)
from src.domain.models.job import ExtractFramesPayload, Job, JobStatus, JobType
from src.domain.models.recording import (
    Recording,
    RecordingSummary,
    VisualIndexingStatus,
)
from src.domain.models.search import (
    ChunkResult,
    CombinedResult,
    Modality,
    MultimodalSearchMetadata,
    MultimodalSearchResponse,
    TranscriptSearchResult,
    VisualSearchResult,
)

__all__ = [
    # Recording
    "Recording",
    "RecordingSummary",
    "VisualIndexingStatus",
    # Frames
    "Frame",
    "FrameDescription",
    "FrameDescriptor",
    "FrameMetadata",
    "FrameOutcome",
    "OCRBlock",
    "OCRResult",
    "SceneType",
    # Jobs
    "Job",
    "JobStatus",
    "JobType",
    "ExtractFramesPayload",
    # Embedding
    "DualEmbedding",
    "EmbeddingResolution",
    "cosine_similarity",
    "clamp_similarity",
    # Search
    "ChunkResult",
    "CombinedResult",
    "Modality",
    "MultimodalSearchMetadata",
    "MultimodalSearchResponse",
    "TranscriptSearchResult",
    "VisualSearchResult",
]
