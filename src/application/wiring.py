"""Service construction from the infrastructure factory."""

from src.application.services.embedding import EmbeddingGenerator
from src.application.services.frame_extraction import FrameExtractionStage
from src.application.services.frame_ingestion import FrameIngestionJobHandler
from src.application.services.hierarchical_search import HierarchicalSearchService
from src.application.services.job_dispatcher import JobDispatcher
from src.application.services.multimodal_search import MultimodalSearchService
from src.application.services.ocr import OCRStage
from src.application.services.retry import (
    ExponentialBackoffRetryPolicy,
    RetryPolicy,
)
from src.application.services.visual_indexing import VisualIndexingStage
from src.commons.settings import FeatureFlags
from src.commons.settings.models import Settings
from src.commons.telemetry import (
    configure_logging,
    get_logger,
    init_langfuse,
    shutdown_langfuse,
)
from src.domain.models import JobType
from src.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)

logger = get_logger(__name__)


def build_retry_policy(settings: Settings) -> RetryPolicy:
    """Exponential backoff configured from job settings."""
    return ExponentialBackoffRetryPolicy(
        base_seconds=settings.jobs.backoff_base_seconds,
        max_seconds=settings.jobs.backoff_max_seconds,
    )


def build_embedding_generator(factory: InfrastructureFactory) -> EmbeddingGenerator:
    """Embedding generator over the configured provider."""
    return EmbeddingGenerator(factory.get_embedding_service())


def build_frame_ingestion_handler(
    factory: InfrastructureFactory,
    feature_flags: FeatureFlags | None = None,
) -> FrameIngestionJobHandler:
    """Job handler with all frame pipeline stages.

    Args:
        factory: Infrastructure factory.
        feature_flags: Flag source. Defaults to a fresh-loading reader.

    Returns:
        Configured frame ingestion handler.
    """
    settings = factory.settings
    blob_storage = factory.get_blob_storage()
    document_db = factory.get_document_db()

    return FrameIngestionJobHandler(
        extraction_stage=FrameExtractionStage(
            frame_extractor=factory.get_frame_extractor(),
            blob_storage=blob_storage,
            settings=settings,
        ),
        ocr_stage=OCRStage(
            ocr_service=factory.get_ocr_service(),
            blob_storage=blob_storage,
            frames_bucket=settings.blob_storage.buckets.frames,
            batch_size=settings.ocr.batch_size,
        ),
        visual_indexing_stage=VisualIndexingStage(
            llm_service=factory.get_llm_service(),
            embedding_generator=build_embedding_generator(factory),
            document_db=document_db,
            blob_storage=blob_storage,
            settings=settings,
        ),
        document_db=document_db,
        retry_policy=build_retry_policy(settings),
        settings=settings,
        feature_flags=feature_flags,
    )


def build_job_dispatcher(
    factory: InfrastructureFactory,
    feature_flags: FeatureFlags | None = None,
) -> JobDispatcher:
    """Dispatcher with the extract-frames handler registered."""
    settings = factory.settings
    handler = build_frame_ingestion_handler(factory, feature_flags)
    return JobDispatcher(
        retry_policy=build_retry_policy(settings),
        handlers={JobType.EXTRACT_FRAMES.value: handler.handle_extract_frames},
        document_db=factory.get_document_db(),
        jobs_collection=settings.document_db.collections.jobs,
    )


def build_hierarchical_search_service(
    factory: InfrastructureFactory,
) -> HierarchicalSearchService:
    """Hierarchical search over the configured backends."""
    return HierarchicalSearchService(
        embedding_generator=build_embedding_generator(factory),
        vector_db=factory.get_vector_db(),
        document_db=factory.get_document_db(),
        settings=factory.settings,
    )


def build_multimodal_search_service(
    factory: InfrastructureFactory,
    feature_flags: FeatureFlags | None = None,
) -> MultimodalSearchService:
    """Multimodal search over the configured backends."""
    return MultimodalSearchService(
        embedding_generator=build_embedding_generator(factory),
        vector_db=factory.get_vector_db(),
        document_db=factory.get_document_db(),
        settings=factory.settings,
        feature_flags=feature_flags,
        blob_storage=factory.get_blob_storage(),
    )


async def init_services(settings: Settings) -> InfrastructureFactory:
    """Initialize logging, tracing and storage on startup.

    Args:
        settings: Application settings.

    Returns:
        The infrastructure factory singleton.
    """
    configure_logging(
        level=settings.telemetry.log_level,
        format_type=settings.telemetry.log_format,
    )
    init_langfuse(settings.langfuse)

    factory = get_factory(settings)

    # Pre-initialize critical services to fail fast
    blob_storage = factory.get_blob_storage()
    factory.get_vector_db()
    document_db = factory.get_document_db()

    await blob_storage.ensure_bucket(settings.blob_storage.buckets.frames)
    await document_db.create_index(
        settings.document_db.collections.video_frames,
        [("recording_id", 1), ("frame_number", 1)],
        unique=True,
    )

    logger.info(
        "Services initialized",
        extra={"app": settings.app.name, "environment": settings.app.environment},
    )
    return factory


async def shutdown_services() -> None:
    """Close provider connections and flush traces."""
    try:
        factory = get_factory()
        await factory.close_all()
    except ValueError:
        pass  # Factory not initialized
    finally:
        reset_factory()
        shutdown_langfuse()
