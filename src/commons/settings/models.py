"""Pydantic settings models for application configuration."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "recording-search-core"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class BucketSettings(BaseModel):
    """Bucket name configuration."""

    recordings: str = "recordings"
    frames: str = "video-frames"


class BlobStorageSettings(BaseModel):
    """Blob storage settings (MinIO/S3)."""

    provider: Literal["minio", "s3"] = "minio"
    endpoint: str = "localhost:9000"
    access_key: str = ""
    secret_key: str = ""
    use_ssl: bool = False
    region: str = "us-east-1"
    buckets: BucketSettings = Field(default_factory=BucketSettings)
    presigned_url_expiry_seconds: int = 3600


class CollectionSettings(BaseModel):
    """Vector DB collection names."""

    transcripts: str = "transcript_embeddings"
    summaries: str = "recording_summaries"
    chunks: str = "recording_chunks"


class VectorDBSettings(BaseModel):
    """Vector database settings (Qdrant)."""

    provider: Literal["qdrant"] = "qdrant"
    host: str = "localhost"
    port: int = 6333
    grpc_port: int = 6334
    api_key: str | None = None
    use_ssl: bool = False
    collections: CollectionSettings = Field(default_factory=CollectionSettings)
    default_limit: int = 10


class DocumentCollectionSettings(BaseModel):
    """Document DB collection names."""

    recordings: str = "recordings"
    video_frames: str = "video_frames"
    recording_summaries: str = "recording_summaries"
    jobs: str = "jobs"


class DocumentDBSettings(BaseModel):
    """Document database settings (MongoDB)."""

    provider: Literal["mongodb"] = "mongodb"
    host: str = "localhost"
    port: int = 27017
    username: str = ""
    password: str = ""
    database: str = "recording_search"
    auth_source: str = "admin"
    collections: DocumentCollectionSettings = Field(
        default_factory=DocumentCollectionSettings
    )


class EmbeddingsSettings(BaseModel):
    """Text embedding settings.

    A single model serves both resolutions through its ``dimensions``
    parameter.
    """

    provider: Literal["openai", "azure_openai"] = "openai"
    api_key: str = ""
    endpoint: str | None = None
    model: str = "text-embedding-3-large"
    low_dimensions: int = 1536
    high_dimensions: int = 3072


class LLMSettings(BaseModel):
    """Vision-capable LLM settings."""

    provider: Literal["openai", "anthropic"] = "openai"
    api_key: str = ""
    endpoint: str | None = None
    model: str = "gpt-4o"
    temperature: float = Field(default=0.2, ge=0, le=2)
    max_tokens: int = 1024
    timeout_seconds: int = 60


class FrameExtractionSettings(BaseModel):
    """Frame sampling configuration."""

    interval_seconds: float = Field(default=2.0, gt=0)
    max_frames: int = Field(default=300, ge=1)
    quality: int = Field(default=85, ge=1, le=100)
    width: int | None = None
    upload_batch_size: int = Field(default=10, ge=1)


class OCRSettings(BaseModel):
    """OCR stage configuration."""

    enabled: bool = False
    batch_size: int = Field(default=5, ge=1)
    language: str = "eng"
    min_confidence: float = Field(default=60.0, ge=0, le=100)
    tesseract_cmd: str | None = None


class VisualIndexingSettings(BaseModel):
    """Visual indexing stage configuration."""

    enabled: bool = True
    batch_size: int = Field(default=10, ge=1)


class SearchSettings(BaseModel):
    """Search defaults."""

    visual_search_enabled: bool = False
    top_documents: int = 5
    chunks_per_document: int = 3
    recording_chunks_per_document: int = 10
    match_threshold: float = 0.7
    audio_weight: float = 0.6
    visual_weight: float = 0.4
    result_limit: int = 20
    visual_scan_page_size: int = Field(default=500, ge=1)


class JobSettings(BaseModel):
    """Job retry configuration."""

    max_attempts: int = Field(default=3, ge=1)
    backoff_base_seconds: float = 1.0
    backoff_max_seconds: float = 60.0


class TelemetrySettings(BaseModel):
    """Telemetry and observability settings."""

    enabled: bool = True
    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"


class LangfuseSettings(BaseModel):
    """Langfuse tracing settings."""

    enabled: bool = False
    public_key: str = ""
    secret_key: str = ""
    host: str = "https://cloud.langfuse.com"


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    blob_storage: BlobStorageSettings = Field(default_factory=BlobStorageSettings)
    vector_db: VectorDBSettings = Field(default_factory=VectorDBSettings)
    document_db: DocumentDBSettings = Field(default_factory=DocumentDBSettings)
    embeddings: EmbeddingsSettings = Field(default_factory=EmbeddingsSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    frame_extraction: FrameExtractionSettings = Field(
        default_factory=FrameExtractionSettings
    )
    ocr: OCRSettings = Field(default_factory=OCRSettings)
    visual_indexing: VisualIndexingSettings = Field(
        default_factory=VisualIndexingSettings
    )
    search: SearchSettings = Field(default_factory=SearchSettings)
    jobs: JobSettings = Field(default_factory=JobSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)
    langfuse: LangfuseSettings = Field(default_factory=LangfuseSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RECORDING_SEARCH__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
