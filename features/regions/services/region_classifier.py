import logging
from typing import Optional

from features.common.models.geo_types import RegionKey
from features.common.utils.geo import GeoUtils
from features.regions.config.region_bounds import RegionBounds, KOREA_REGION_BOUNDS

logger = logging.getLogger(__name__)

class RegionClassifier:
    """Maps a WGS84 point to one of the four coastal regions.

    Total and deterministic: every input yields a RegionKey, nothing raises.
    Order of decision: Jeju latitude threshold, polygons in priority order,
    then longitude bands.
    """

    def __init__(self, bounds: RegionBounds = KOREA_REGION_BOUNDS):
        self.bounds = bounds

    def classify(self, lat: float, lon: float) -> RegionKey:
        if not GeoUtils.is_finite_point(lat, lon):
            logger.warning(f"Non-finite coordinate ({lat}, {lon}), using {self.bounds.default_region.value}")
            return self.bounds.default_region
        lat, lon = float(lat), float(lon)

        if self.is_jeju(lat, lon):
            return RegionKey.JEJU

        region = self.classify_by_polygon(lat, lon)
        if region is not None:
            return region

        region = self.classify_by_longitude_band(lon)
        logger.debug(f"({lat:.4f}, {lon:.4f}) outside all polygons, longitude band gives {region.value}")
        return region

    def is_jeju(self, lat: float, lon: float) -> bool:
        b = self.bounds
        return lat < b.jeju_max_lat and b.jeju_min_lon <= lon <= b.jeju_max_lon

    def classify_by_polygon(self, lat: float, lon: float) -> Optional[RegionKey]:
        for polygon in self.bounds.polygons:
            if GeoUtils.point_in_polygon(lat, lon, polygon.vertices):
                return polygon.region
        return None

    def classify_by_longitude_band(self, lon: float) -> RegionKey:
        if lon < self.bounds.west_max_lon:
            return RegionKey.WEST
        if lon > self.bounds.east_min_lon:
            return RegionKey.EAST
        return RegionKey.SOUTH
