from dataclasses import dataclass, field
from typing import Tuple

from features.common.models.geo_types import RegionKey
from features.common.utils.geo import LatLon

@dataclass(frozen=True)
class RegionPolygon:
    region: RegionKey
    vertices: Tuple[LatLon, ...]

@dataclass(frozen=True)
class RegionBounds:
    """Hand-authored region boundaries. Coarse on purpose: they only need to
    separate coastal waters, not follow the shoreline."""

    # Jeju is decided before any polygon; the island group sits south of every
    # mainland coast.
    jeju_max_lat: float = 33.75
    jeju_min_lon: float = 125.0
    jeju_max_lon: float = 127.8

    # Polygons are tested in this order; the first hit wins.
    polygons: Tuple[RegionPolygon, ...] = field(default_factory=tuple)

    # Longitude bands used when no polygon contains the point.
    west_max_lon: float = 126.9
    east_min_lon: float = 129.0

    # Returned for non-finite input.
    default_region: RegionKey = RegionKey.WEST

JEJU_POLYGON = RegionPolygon(
    region=RegionKey.JEJU,
    vertices=(
        (33.75, 125.9), (34.05, 125.9), (34.05, 126.7), (33.75, 126.7),
    ),
)

WEST_POLYGON = RegionPolygon(
    region=RegionKey.WEST,
    vertices=(
        (38.8, 123.5), (38.8, 127.0), (37.0, 127.3), (35.5, 127.0),
        (34.9, 126.6), (34.3, 126.35), (34.0, 125.0), (34.6, 123.5),
    ),
)

SOUTH_POLYGON = RegionPolygon(
    region=RegionKey.SOUTH,
    vertices=(
        (34.9, 126.6), (35.5, 127.0), (35.6, 128.0), (35.5, 128.9),
        (35.35, 129.3), (34.9, 129.4), (34.0, 128.8), (33.75, 127.8),
        (34.0, 126.3), (34.3, 126.35),
    ),
)

EAST_POLYGON = RegionPolygon(
    region=RegionKey.EAST,
    vertices=(
        (38.9, 127.8), (38.9, 132.2), (36.5, 132.2), (35.0, 130.0),
        (34.9, 129.4), (35.35, 129.3), (35.5, 128.9), (35.6, 128.0),
        (37.0, 127.8),
    ),
)

KOREA_REGION_BOUNDS = RegionBounds(
    polygons=(JEJU_POLYGON, WEST_POLYGON, SOUTH_POLYGON, EAST_POLYGON),
)
