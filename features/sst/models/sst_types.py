from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

class SSTSource(str, Enum):
    KHOA = "khoa"
    OPEN_METEO = "open_meteo"

class SSTReading(BaseModel):
    value_c: float = Field(..., description="Sea-surface temperature in °C")
    observed_at: datetime
    source: SSTSource
    station_code: Optional[str] = None
