from datetime import date, datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

class ExtremeKind(str, Enum):
    HIGH = "HIGH"
    LOW = "LOW"

class TideExtreme(BaseModel):
    """One high or low water event."""
    model_config = ConfigDict(frozen=True)

    instant: datetime = Field(..., description="Absolute time of the extreme (KST offset)")
    level_cm: float = Field(..., description="Water level in cm")
    kind: ExtremeKind

class DayExtremes(BaseModel):
    """Extremes of one KST calendar day, partitioned and time-ordered."""
    station_code: str
    local_date: date
    highs: List[TideExtreme] = Field(default_factory=list)
    lows: List[TideExtreme] = Field(default_factory=list)

    @property
    def all(self) -> List[TideExtreme]:
        return sorted(self.highs + self.lows, key=lambda e: e.instant)

class DailyRange(BaseModel):
    """Tidal range of one KST calendar day; range is None unless both kinds exist."""
    local_date: date
    range: Optional[float] = None
    sample_count: int = 0

class PrimaryExtremes(BaseModel):
    """Next high/low relative to "now" plus the day's range."""
    high: Optional[TideExtreme] = None
    low: Optional[TideExtreme] = None
    range: Optional[float] = None

class MultiDayExtremes(BaseModel):
    station_code: str
    start: date
    days: int
    extremes: List[TideExtreme]
    daily_ranges: List[DailyRange]
    failed_dates: List[date] = Field(default_factory=list)
