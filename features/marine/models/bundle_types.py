from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from features.common.models.geo_types import RegionKey
from features.sst.models.sst_types import SSTReading
from features.stages.models.stage_types import StageStrategy
from features.stations.models.station_types import Station
from features.tides.models.tide_types import TideExtreme

class TideSummary(BaseModel):
    """Today's extremes at the resolved station."""
    model_config = ConfigDict(frozen=True)

    highs: List[TideExtreme]
    lows: List[TideExtreme]
    next_high: Optional[TideExtreme] = None
    next_low: Optional[TideExtreme] = None
    range: Optional[float] = Field(None, description="max(HIGH) - min(LOW) in cm")
    flow_pct: int = Field(..., ge=0, le=100)
    phase_pct: Optional[int] = Field(None, description="Position within the current tide, slack=0, mid-tide=100")

class ForecastDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    local_date: date
    stage: str
    flow_pct: int = Field(..., ge=0, le=100)
    strategy: StageStrategy

class MarineBundle(BaseModel):
    """Fused marine conditions for one point and moment. Replaced, never mutated."""
    model_config = ConfigDict(frozen=True)

    station: Station
    station_distance_km: float
    region: RegionKey
    region_overridden: bool = False
    tides: Optional[TideSummary] = None
    sst: Optional[SSTReading] = None
    stage_label: str
    stage_strategy: StageStrategy
    amplitude: Optional[float] = Field(None, description="Normalized tidal amplitude 0..1, when known")
    flow_pct: int = Field(..., ge=0, le=100)
    seven_day_forecast: List[ForecastDay]
    updated_at: datetime
