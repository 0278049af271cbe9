"""DTOs for search operations."""

from pydantic import BaseModel, Field

from src.commons.infrastructure.vectordb import HierarchicalSearchRow


class HierarchicalSearchOptions(BaseModel):
    """Options for a two-tier document then chunk search.

    Values are checked by the search service so that bad input surfaces as a
    domain ``ValidationError``.
    """

    org_id: str = Field(description="Organization whose corpus is searched")
    top_documents: int = Field(
        default=5,
        description="Documents kept after coarse ranking",
    )
    chunks_per_document: int = Field(
        default=3,
        description="Chunks returned for each kept document",
    )
    threshold: float = Field(
        default=0.7,
        description="Minimum similarity on both tiers",
    )
    recording_ids: list[str] | None = Field(
        default=None,
        description="Restrict the search to these recordings",
    )


class MultimodalSearchOptions(BaseModel):
    """Options for a fused transcript and frame search."""

    org_id: str
    include_frames: bool = Field(
        default=False,
        description="Search frames even when visual search is disabled",
    )
    audio_weight: float = 0.6
    visual_weight: float = 0.4
    threshold: float = Field(
        default=0.0,
        description="Minimum clamped similarity for visual results",
    )
    limit: int = 20
    recording_ids: list[str] | None = None


__all__ = [
    "HierarchicalSearchOptions",
    "HierarchicalSearchRow",
    "MultimodalSearchOptions",
]
