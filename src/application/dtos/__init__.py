"""Data Transfer Objects for application layer."""

from src.application.dtos.ingestion import (
    FrameIngestionResult,
    IngestionStage,
    VideoSource,
    VisualIndexingReport,
)
from src.application.dtos.search import (
    HierarchicalSearchOptions,
    HierarchicalSearchRow,
    MultimodalSearchOptions,
)

__all__ = [
    # Ingestion DTOs
    "FrameIngestionResult",
    "IngestionStage",
    "VideoSource",
    "VisualIndexingReport",
    # Search DTOs
    "HierarchicalSearchOptions",
    "HierarchicalSearchRow",
    "MultimodalSearchOptions",
]
