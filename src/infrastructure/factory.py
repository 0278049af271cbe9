"""Infrastructure factory for creating provider instances from configuration."""

import inspect
from typing import Any, cast

from src.commons.infrastructure.blob import BlobStorageBase, MinioBlobStorage
from src.commons.infrastructure.documentdb import DocumentDBBase, MongoDBDocumentDB
from src.commons.infrastructure.vectordb import QdrantVectorDB, VectorDBBase
from src.commons.settings.models import Settings
from src.commons.telemetry import get_logger
from src.infrastructure.embeddings import EmbeddingServiceBase, OpenAIEmbeddingService
from src.infrastructure.llm import AnthropicLLMService, LLMServiceBase, OpenAILLMService
from src.infrastructure.ocr import OCRServiceBase, TesseractOCRService
from src.infrastructure.video import FFmpegFrameExtractor, FrameExtractorBase


class InfrastructureFactory:
    """Factory for creating infrastructure provider instances.

    Creates concrete implementations based on configuration settings and
    caches one instance per provider.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}
        self._logger = get_logger(__name__)

    @property
    def settings(self) -> Settings:
        """Settings the providers are built from."""
        return self._settings

    def get_blob_storage(self) -> BlobStorageBase:
        """Get object storage instance.

        Returns:
            Configured blob storage provider.
        """
        if "blob_storage" not in self._instances:
            blob_settings = self._settings.blob_storage
            self._instances["blob_storage"] = MinioBlobStorage(
                endpoint=blob_settings.endpoint,
                access_key=blob_settings.access_key,
                secret_key=blob_settings.secret_key,
                secure=blob_settings.use_ssl,
                region=blob_settings.region,
            )
        return cast("BlobStorageBase", self._instances["blob_storage"])

    def get_vector_db(self) -> VectorDBBase:
        """Get vector database instance.

        Returns:
            Configured vector database provider.
        """
        if "vector_db" not in self._instances:
            vector_settings = self._settings.vector_db
            url = None
            if vector_settings.use_ssl:
                url = f"https://{vector_settings.host}:{vector_settings.port}"
            self._instances["vector_db"] = QdrantVectorDB(
                host=vector_settings.host,
                port=vector_settings.port,
                grpc_port=vector_settings.grpc_port,
                api_key=vector_settings.api_key,
                url=url,
            )
        return cast("VectorDBBase", self._instances["vector_db"])

    def get_document_db(self) -> DocumentDBBase:
        """Get document database instance.

        Returns:
            Configured document database provider.
        """
        if "document_db" not in self._instances:
            doc_settings = self._settings.document_db
            if doc_settings.username and doc_settings.password:
                connection_string = (
                    f"mongodb://{doc_settings.username}:{doc_settings.password}"
                    f"@{doc_settings.host}:{doc_settings.port}"
                    f"/?authSource={doc_settings.auth_source}"
                )
            else:
                connection_string = f"mongodb://{doc_settings.host}:{doc_settings.port}"
            self._instances["document_db"] = MongoDBDocumentDB(
                connection_string=connection_string,
                database_name=doc_settings.database,
            )
        return cast("DocumentDBBase", self._instances["document_db"])

    def get_embedding_service(self) -> EmbeddingServiceBase:
        """Get text embedding service instance.

        Returns:
            Configured embedding provider.
        """
        if "embedding" not in self._instances:
            embed_settings = self._settings.embeddings
            self._instances["embedding"] = OpenAIEmbeddingService(
                api_key=embed_settings.api_key,
                model=embed_settings.model,
                base_url=embed_settings.endpoint,
            )
        return cast("EmbeddingServiceBase", self._instances["embedding"])

    def get_llm_service(self) -> LLMServiceBase:
        """Get vision LLM service instance.

        Returns:
            Configured LLM service.

        Raises:
            ValueError: If provider is not supported.
        """
        if "llm" not in self._instances:
            llm_settings = self._settings.llm
            provider = llm_settings.provider

            if provider == "anthropic":
                self._instances["llm"] = AnthropicLLMService(
                    api_key=llm_settings.api_key,
                    model=llm_settings.model,
                    base_url=llm_settings.endpoint,
                )
            elif provider == "openai":
                self._instances["llm"] = OpenAILLMService(
                    api_key=llm_settings.api_key,
                    model=llm_settings.model,
                    base_url=llm_settings.endpoint,
                    timeout_seconds=llm_settings.timeout_seconds,
                )
            else:
                raise ValueError(f"Unsupported LLM provider: {provider}")

        return cast("LLMServiceBase", self._instances["llm"])

    def get_ocr_service(self) -> OCRServiceBase:
        """Get OCR service instance.

        Returns:
            Configured OCR provider.
        """
        if "ocr" not in self._instances:
            ocr_settings = self._settings.ocr
            self._instances["ocr"] = TesseractOCRService(
                language=ocr_settings.language,
                min_confidence=ocr_settings.min_confidence,
                tesseract_cmd=ocr_settings.tesseract_cmd,
            )
        return cast("OCRServiceBase", self._instances["ocr"])

    def get_frame_extractor(self) -> FrameExtractorBase:
        """Get frame extractor instance.

        Returns:
            Configured frame extractor.
        """
        if "frame_extractor" not in self._instances:
            self._instances["frame_extractor"] = FFmpegFrameExtractor()
        return cast("FrameExtractorBase", self._instances["frame_extractor"])

    async def close_all(self) -> None:
        """Close all provider connections."""
        for name, instance in self._instances.items():
            close = getattr(instance, "close", None)
            if close is None:
                continue
            try:
                result = close()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self._logger.warning(
                    "Error closing provider",
                    extra={"provider": name, "error": str(e)},
                )

        self._instances.clear()


class _FactoryHolder:
    """Holder for the factory singleton to avoid global statements."""

    instance: InfrastructureFactory | None = None


def get_factory(settings: Settings | None = None) -> InfrastructureFactory:
    """Get or create the infrastructure factory singleton.

    Args:
        settings: Settings to use. Required on first call.

    Returns:
        Infrastructure factory instance.

    Raises:
        ValueError: If settings not provided on first call.
    """
    if _FactoryHolder.instance is None:
        if settings is None:
            raise ValueError("Settings required to initialize factory")
        _FactoryHolder.instance = InfrastructureFactory(settings)

    return _FactoryHolder.instance


def reset_factory() -> None:
    """Reset the factory singleton (for testing)."""
    _FactoryHolder.instance = None
