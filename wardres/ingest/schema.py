from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# -----------------------------
# Text layer contract
# -----------------------------


class BBox(BaseModel):
    """Bounding box in layout pixels; y grows downwards."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    top: float
    left: float
    bottom: float
    right: float

    @property
    def mid_y(self) -> float:
        return (self.top + self.bottom) / 2.0

    def union(self, other: "BBox") -> "BBox":
        return BBox(
            top=min(self.top, other.top),
            left=min(self.left, other.left),
            bottom=max(self.bottom, other.bottom),
            right=max(self.right, other.right),
        )

    def shifted(self, dy: float) -> "BBox":
        return BBox(
            top=self.top + dy, left=self.left, bottom=self.bottom + dy, right=self.right
        )


class Fragment(BaseModel):
    """One positioned text token from a page's text layer."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    text: str
    bbox: BBox
    tag: Optional[str] = Field(default=None, description="e.g. SPAN")
    class_name: Optional[str] = None


class SpanCapture(BaseModel):
    """
    Serialized per-page fragment lists, as produced by a span provider.
    Page keys are 1-based; pages that never rendered may be absent or empty.
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field("1.0.0", description="SemVer of the capture schema")
    source: Optional[str] = Field(default=None, max_length=2000)
    page_count: int = Field(..., ge=0)
    pages: Dict[int, List[Fragment]] = Field(default_factory=dict)

    @field_validator("pages", mode="before")
    @classmethod
    def _int_keys(cls, v):
        # JSON object keys arrive as strings
        if isinstance(v, dict):
            return {int(k): val for k, val in v.items()}
        return v

    @model_validator(mode="after")
    def _pages_in_range(self) -> "SpanCapture":
        for page_no in self.pages:
            if page_no < 1 or page_no > self.page_count:
                raise ValueError(f"page {page_no} out of bounds 1..{self.page_count}")
        return self


def export_json_schema() -> dict:
    """Export the JSON Schema for the capture contract (Pydantic v2)."""
    return SpanCapture.model_json_schema()
