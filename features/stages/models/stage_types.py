from datetime import date
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

class StageStrategy(str, Enum):
    """Interchangeable ways of naming a day's tidal stage."""
    CALENDAR_ANCHOR = "calendar_anchor"
    ROLLING_MINIMUM = "rolling_minimum"
    LUNAR_AGE = "lunar_age"

class StageResult(BaseModel):
    local_date: date
    label: str = Field(..., description="1물..15물, 조금 or 무시")
    stage_number: Optional[int] = Field(None, description="1..15, 조금 counts as 15; None for 무시")
    strategy: StageStrategy = Field(..., description="Strategy that produced the label")
    requested_strategy: StageStrategy
    anchor_date: Optional[date] = Field(None, description="Neap anchor used by the rolling strategy")
    baseline_flow_pct: Optional[int] = Field(None, description="Region profile's coarse flow for the label")
    fallback: bool = Field(False, description="True when the requested strategy could not answer")
