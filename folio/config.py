from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

CONFIG_FILENAME = "folio.yml"


class RecommendationWeights(BaseModel):
    """Scoring weights and defaults for related-article selection."""

    category_weight: float = Field(
        default=10.0,
        ge=0,
        description="Score added when a candidate shares the source's category.",
    )
    keyword_weight: float = Field(
        default=1.0,
        ge=0,
        description="Score added for each keyword shared with the source.",
    )
    prefer_nearby: bool = Field(
        default=False,
        description=(
            "Break score ties by closeness of the publish date to the source's date "
            "before falling back to newest-first."
        ),
    )
    limit: int = Field(
        default=3,
        ge=0,
        description="Default number of related articles for a single-article view.",
    )


def _default_palettes() -> dict[str, list[str]]:
    return {
        "Engineering": ["#0f172a", "#2563eb", "#38bdf8", "#e0f2fe"],
        "Culture": ["#3b0764", "#c026d3", "#f472b6", "#fdf2f8"],
    }


class ThumbnailSettings(BaseModel):
    """Controls for the generated decorative SVG thumbnails."""

    size: int = Field(default=256, ge=16, le=4096, description="Width and height in pixels.")
    shapes: int = Field(default=6, ge=1, le=64, description="Number of shapes drawn per thumbnail.")
    palettes: dict[str, list[str]] = Field(
        default_factory=_default_palettes,
        description="Colour palettes keyed by category (first colour is the background).",
    )
    fallback_palette: list[str] = Field(
        default_factory=lambda: ["#111827", "#f59e0b", "#10b981", "#f9fafb"],
        description="Palette used for categories without an explicit entry.",
    )

    @field_validator("fallback_palette")
    def _require_colors(cls, value: list[str]) -> list[str]:
        if len(value) < 2:
            raise ValueError("palettes need at least a background and one foreground colour")
        return value

    @field_validator("palettes")
    def _require_palette_colors(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        for category, colors in value.items():
            if len(colors) < 2:
                raise ValueError(
                    f"palette for '{category}' needs at least a background and one foreground colour"
                )
        return value

    def palette_for(self, category: str) -> list[str]:
        return self.palettes.get(category) or self.fallback_palette


class Config(BaseModel):
    project_name: str = Field(default="Folio")
    content_dir: Path = Field(default=Path("content/blog"))
    output_dir: Path = Field(default=Path("site/data/posts"))
    asset_base_url: str = Field(
        default="/blog",
        description="URL prefix under which co-located article assets are served.",
    )
    components: list[str] = Field(
        default_factory=lambda: ["note", "tip", "warning"],
        description="Names of ':::' container components available to article bodies.",
    )
    cache_enabled: bool = Field(
        default=True,
        description="Keep parsed documents in a per-repository cache.",
    )
    recommendations: RecommendationWeights = Field(default_factory=RecommendationWeights)
    thumbnails: ThumbnailSettings = Field(default_factory=ThumbnailSettings)

    @field_validator("content_dir", "output_dir", mode="before")
    def _ensure_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("asset_base_url")
    def _normalize_base_url(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("components")
    def _normalize_components(cls, value: list[str]) -> list[str]:
        names: list[str] = []
        for entry in value:
            name = entry.strip().lower()
            if not name:
                continue
            if not name.replace("-", "").isalnum():
                raise ValueError(f"component name '{entry}' must be alphanumeric")
            if name not in names:
                names.append(name)
        return names


def load_config(path: str | Path) -> Config:
    """Load configuration and resolve relative paths based on the config location.

    The ``path`` argument may point to a file (e.g., ``/site/folio.yml``) or a
    directory containing that file. All relative paths inside the configuration
    are interpreted relative to the directory holding the config file.
    """
    candidate = Path(path)
    data: Any = {}
    base_dir: Path
    if candidate.is_dir():
        # A project directory without a config file runs on defaults.
        config_file = candidate / CONFIG_FILENAME
        if config_file.exists():
            data = _read_yaml(config_file)
        base_dir = candidate.resolve()
    else:
        if not candidate.exists():
            raise FileNotFoundError(candidate)
        data = _read_yaml(candidate)
        base_dir = candidate.parent.resolve()

    if not isinstance(data, dict):
        raise ValueError(f"Configuration in {candidate} must be a mapping.")

    cfg = Config(**data)

    def _abs_required(value: Path) -> Path:
        return value if value.is_absolute() else (base_dir / value).resolve()

    cfg.content_dir = _abs_required(cfg.content_dir)
    cfg.output_dir = _abs_required(cfg.output_dir)
    return cfg


def _read_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        try:
            return yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
