from __future__ import annotations

from pathlib import Path

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SOURCE_URL = (
    "https://www.lewes-eastbourne.gov.uk/_resources/assets/inline/full/0/280352.pdf"
)


class Settings(BaseSettings):
    """
    Central configuration for paths, the source document and layout constants.
    """

    model_config = SettingsConfigDict(
        env_prefix="WARDRES_",
        extra="ignore",
    )

    project_root: Path = Field(
        default_factory=lambda: Path(__file__).resolve().parents[1]
    )

    data_dir: Path = Field(default=Path("data"))
    output_dir: Path = Field(default=Path("artifacts"))

    source_url: str = DEFAULT_SOURCE_URL
    fetch_timeout_s: float = Field(default=30.0, gt=0)

    # layout constants of the results template
    document_title: str = "DECLARATION OF RESULT OF POLL"
    wrap_marker: str = "Ward"
    continuation_offset: float = Field(default=1200.0, gt=0)
    # PDF points -> layout pixels (96 dpi text layer)
    render_scale: float = Field(default=96.0 / 72.0, gt=0)

    log_level: str = "INFO"

    @field_validator("data_dir", "output_dir", mode="before")
    @classmethod
    def _coerce_path(cls, v):
        # Accept strings from env and coerce; allow Path passthrough.
        if isinstance(v, str):
            s = v.strip()
            return Path(s).expanduser() if s else Path(".")
        if isinstance(v, Path):
            return v.expanduser()
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    @computed_field(return_type=Path)
    def output_dir_spans(self) -> Path:
        dir_spans = self.output_dir / "spans"
        dir_spans.mkdir(parents=True, exist_ok=True)
        return dir_spans

    @computed_field(return_type=Path)
    def output_dir_results(self) -> Path:
        dir_results = self.output_dir / "results"
        dir_results.mkdir(parents=True, exist_ok=True)
        return dir_results

    def model_post_init(self, __context) -> None:
        # Resolve relative paths against project_root
        if not self.data_dir.is_absolute():
            self.data_dir = (self.project_root / self.data_dir).resolve()
        if not self.output_dir.is_absolute():
            self.output_dir = (self.project_root / self.output_dir).resolve()

        self.output_dir.mkdir(parents=True, exist_ok=True)


# Lazy singleton
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
