from enum import Enum
from pydantic import BaseModel, ConfigDict, Field

class RegionKey(str, Enum):
    """Korea's four coastal tide/current regimes."""
    WEST = "WEST"
    SOUTH = "SOUTH"
    EAST = "EAST"
    JEJU = "JEJU"

    @property
    def korean_name(self) -> str:
        return REGION_NAMES[self]

REGION_NAMES = {
    RegionKey.WEST: "서해",
    RegionKey.SOUTH: "남해",
    RegionKey.EAST: "동해",
    RegionKey.JEJU: "제주",
}

class RegionMode(str, Enum):
    """Request-scoped region selection: automatic or a fixed key."""
    AUTO = "AUTO"
    WEST = "WEST"
    SOUTH = "SOUTH"
    EAST = "EAST"
    JEJU = "JEJU"

    def as_override(self) -> "RegionKey | None":
        if self is RegionMode.AUTO:
            return None
        return RegionKey(self.value)

class GeoPoint(BaseModel):
    """WGS84 coordinate."""
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., description="Latitude")
    lon: float = Field(..., description="Longitude")
