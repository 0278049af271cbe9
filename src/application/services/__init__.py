"""Application services for frame ingestion and recording search."""

from src.application.services.embedding import EmbeddingGenerator
from src.application.services.frame_extraction import (
    FrameExtractionStage,
    frame_storage_path,
)
from src.application.services.frame_ingestion import FrameIngestionJobHandler
from src.application.services.hierarchical_search import HierarchicalSearchService
from src.application.services.job_dispatcher import JobDispatcher, JobHandler
from src.application.services.multimodal_search import MultimodalSearchService
from src.application.services.ocr import OCRStage
from src.application.services.retry import (
    ExponentialBackoffRetryPolicy,
    RetryPolicy,
)
from src.application.services.visual_indexing import (
    VisualIndexingStage,
    parse_frame_description,
)

__all__ = [
    # Embeddings
    "EmbeddingGenerator",
    # Frame pipeline
    "FrameExtractionStage",
    "FrameIngestionJobHandler",
    "OCRStage",
    "VisualIndexingStage",
    "frame_storage_path",
    "parse_frame_description",
    # Jobs
    "ExponentialBackoffRetryPolicy",
    "JobDispatcher",
    "JobHandler",
    "RetryPolicy",
    # Search
    "HierarchicalSearchService",
    "MultimodalSearchService",
]
