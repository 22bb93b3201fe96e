from __future__ import annotations

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN_NAME = "unknown"
DEFAULT_KNOWN_AS = "N/A"
DEFAULT_PARTY = "Independent"
UNRESOLVED_VOTES = -1

# -----------------------------
# Output contract
# -----------------------------


class Candidate(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    name: str = UNKNOWN_NAME
    known_as: str = Field(DEFAULT_KNOWN_AS, alias="knownAs")
    party: str = DEFAULT_PARTY
    # -1 = never resolved from the votes section
    votes: int = Field(UNRESOLVED_VOTES, ge=UNRESOLVED_VOTES)
    elected: bool = False


class Ward(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    ward_name: str = Field(..., alias="wardName")
    candidates: Tuple[Candidate, ...] = Field(..., min_length=1)


class ResultSet(BaseModel):
    """Ordered wards of one parsed document, in bloc order."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    schema_version: str = Field(
        "1.0.0", alias="schemaVersion", description="SemVer of the results schema"
    )
    source: Optional[str] = Field(default=None, max_length=2000)
    page_count: int = Field(0, ge=0, alias="pageCount")
    wards: Tuple[Ward, ...] = Field(default_factory=tuple)
    issues: Tuple[str, ...] = Field(default_factory=tuple)

    @field_validator("issues")
    @classmethod
    def _strip_issues(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(s.strip() for s in v if s and s.strip())

    def ward(self, name: str) -> Optional[Ward]:
        for w in self.wards:
            if w.ward_name == name:
                return w
        return None


# -----------------------------
# JSON Schema export
# -----------------------------
def export_json_schema() -> dict:
    """Export the JSON Schema for the results contract (Pydantic v2)."""
    return ResultSet.model_json_schema(by_alias=True)
