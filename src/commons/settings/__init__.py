"""Settings management module."""

from src.commons.settings.loader import (
    FeatureFlags,
    FeatureFlagSnapshot,
    SettingsLoader,
    get_settings,
    reset_settings,
)
from src.commons.settings.models import (
    AppSettings,
    BlobStorageSettings,
    BucketSettings,
    CollectionSettings,
    DocumentCollectionSettings,
    DocumentDBSettings,
    EmbeddingsSettings,
    FrameExtractionSettings,
    JobSettings,
    LangfuseSettings,
    LLMSettings,
    OCRSettings,
    SearchSettings,
    Settings,
    TelemetrySettings,
    VectorDBSettings,
    VisualIndexingSettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "get_settings",
    "reset_settings",
    "FeatureFlags",
    "FeatureFlagSnapshot",
    # Main settings
    "Settings",
    "AppSettings",
    # Storage
    "BlobStorageSettings",
    "BucketSettings",
    "VectorDBSettings",
    "CollectionSettings",
    "DocumentDBSettings",
    "DocumentCollectionSettings",
    # AI Services
    "EmbeddingsSettings",
    "LLMSettings",
    # Pipeline
    "FrameExtractionSettings",
    "OCRSettings",
    "VisualIndexingSettings",
    "JobSettings",
    "SearchSettings",
    # Telemetry
    "TelemetrySettings",
    "LangfuseSettings",
]
