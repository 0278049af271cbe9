"""Application layer - use cases and orchestration.

This layer contains:
- Services: frame ingestion stages, job dispatch and search
- DTOs: options and results passed across service boundaries
"""

from src.application.dtos import (
    FrameIngestionResult,
    HierarchicalSearchOptions,
    IngestionStage,
    MultimodalSearchOptions,
    VideoSource,
    VisualIndexingReport,
)
from src.application.services import (
    EmbeddingGenerator,
    ExponentialBackoffRetryPolicy,
    FrameExtractionStage,
    FrameIngestionJobHandler,
    HierarchicalSearchService,
    JobDispatcher,
    MultimodalSearchService,
    OCRStage,
    RetryPolicy,
    VisualIndexingStage,
)

__all__ = [
    # DTOs
    "FrameIngestionResult",
    "HierarchicalSearchOptions",
    "IngestionStage",
    "MultimodalSearchOptions",
    "VideoSource",
    "VisualIndexingReport",
    # Services
    "EmbeddingGenerator",
    "ExponentialBackoffRetryPolicy",
    "FrameExtractionStage",
    "FrameIngestionJobHandler",
    "HierarchicalSearchService",
    "JobDispatcher",
    "MultimodalSearchService",
    "OCRStage",
    "RetryPolicy",
    "VisualIndexingStage",
]
