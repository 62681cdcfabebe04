"""Runtime settings and the immutable panel configuration."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_COLORS: tuple[str, ...] = ("#86B22D", "#BF6730", "#1D7373", "#BFB930", "#BF3030", "#77207D")


class Settings(BaseSettings):
    """Environment-backed configuration model."""

    model_config = SettingsConfigDict(env_prefix="rawgraph_", env_file=".env", case_sensitive=False)

    environment: Literal["dev", "test", "prod"] = "dev"

    # Search engine
    elasticsearch_url: str = "http://localhost:9200"
    indices: tuple[str, ...] | str = ("_all",)
    search_timeout_seconds: float | None = None  # no timeout unless the host sets one

    # Persisted panel configuration (JSON, legacy dashboard key names accepted)
    panel_config_path: Path | None = None

    # Security
    api_key: str | None = None  # if set, required in X-API-Key header
    rate_limit_requests: int = 120  # per window per client
    rate_limit_window_seconds: int = 60

    @property
    def indices_tuple(self) -> tuple[str, ...]:
        value = self.indices
        if isinstance(value, tuple):
            return value
        if isinstance(value, str):
            return tuple(p.strip() for p in value.split(",") if p.strip())
        return ()


class QuerySpec(BaseModel):
    """One free-text query; several of them are OR-combined."""

    model_config = ConfigDict(frozen=True)

    query: str = "*"
    label: str = "Query"


class SeriesSpec(BaseModel):
    """Names the document field that supplies one plotted series."""

    model_config = ConfigDict(frozen=True)

    value_field: Optional[str] = Field(default=None, validation_alias=AliasChoices("value_field", "valueField"))
    hide: bool = Field(default=False, validation_alias=AliasChoices("hide", "hidden"))


class PanelConfig(BaseModel):
    """Panel configuration, built once through :func:`merge_panel_defaults`."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    queries: tuple[QuerySpec, ...] = Field(
        default=(QuerySpec(),),
        validation_alias=AliasChoices("queries", "query"),
    )
    max_points: int = Field(default=5000, ge=1, validation_alias=AliasChoices("max_points", "max_point"))
    time_field: str = Field(default="@timestamp", min_length=1, validation_alias=AliasChoices("time_field", "timeField"))
    series: tuple[SeriesSpec, ...] = Field(default=(SeriesSpec(),), min_length=1)
    fill: int = Field(default=0, ge=0, le=10)
    line_width: float = Field(default=1, ge=0, validation_alias=AliasChoices("line_width", "linewidth"))
    timezone: str = "browser"
    spyable: bool = True
    show_zoom_links: bool = Field(default=True, validation_alias=AliasChoices("show_zoom_links", "zoomlinks"))
    bars: bool = False
    stack: bool = False
    points: bool = False
    lines: bool = True
    legend: bool = True
    show_x_axis: bool = Field(default=True, validation_alias=AliasChoices("show_x_axis", "x-axis"))
    show_y_axis: bool = Field(default=True, validation_alias=AliasChoices("show_y_axis", "y-axis"))
    percentage: bool = False
    interactive: bool = True
    highlight_fields: tuple[str, ...] = Field(default=(), validation_alias=AliasChoices("highlight_fields", "highlight"))
    colors: tuple[str, ...] = DEFAULT_COLORS

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if value in ("browser", "utc"):
            return value
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("highlight_fields", mode="before")
    @classmethod
    def _highlight_as_tuple(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, Mapping):
            # persisted panels sometimes keep the highlight fields as a mapping
            return tuple(value.keys())
        return value

    @property
    def visible_series(self) -> tuple[tuple[int, SeriesSpec], ...]:
        """Non-hidden series paired with their position in the full list."""

        return tuple((index, spec) for index, spec in enumerate(self.series) if not spec.hide)

    def color_for(self, index: int) -> str | None:
        if not self.colors:
            return None
        return self.colors[index % len(self.colors)]

    def add_series(self) -> "PanelConfig":
        return self.model_copy(update={"series": self.series + (SeriesSpec(),)})


def merge_panel_defaults(overrides: Optional[Mapping[str, Any]] = None) -> PanelConfig:
    """Merge persisted panel values over the defaults and freeze the result."""

    return PanelConfig.model_validate(dict(overrides or {}))


def load_panel_config(path: Path) -> PanelConfig:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Panel configuration must be a JSON object: {path}")
    return merge_panel_defaults(data)


@lru_cache(maxsize=1)
def _cached_settings() -> Settings:
    return Settings()


def get_settings(override: Optional[dict[str, object]] = None) -> Settings:
    """Return settings, optionally overriding values without mutating cache."""

    if override:
        return Settings(**override)
    return _cached_settings()
