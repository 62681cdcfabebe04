"""Pydantic models for the RawGraph API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class SeriesModel(BaseModel):
    label: Optional[str] = Field(default=None, description="Value field the series is drawn from")
    color: Optional[str] = None
    hit_count: int = Field(..., ge=0, description="Documents contributing a point")
    points: List[List[float]] = Field(default_factory=list, description="[epoch_ms, value] pairs in arrival order")


class PanelStateResponse(BaseModel):
    token: Optional[int] = Field(default=None, description="Token of the refresh that produced this state")
    loading: bool = False
    hits: int = 0
    error: Optional[str] = None
    series: List[SeriesModel] = Field(default_factory=list)
    message: Optional[str] = Field(default=None, description="Inline message shown instead of the chart")


class ZoomRequest(BaseModel):
    factor: float = Field(..., gt=0, description="0.5 halves the visible span, 2 doubles it")


class SelectionRequest(BaseModel):
    from_ms: float = Field(..., description="Selection start, epoch milliseconds")
    to_ms: float = Field(..., description="Selection end, epoch milliseconds")


class TimeRangeResponse(BaseModel):
    from_: datetime = Field(..., serialization_alias="from")
    to: datetime


class InspectorResponse(BaseModel):
    title: str
    body: str


class TooltipRequest(BaseModel):
    color: str
    value: float
    epoch_ms: float


class TooltipResponse(BaseModel):
    content: str
