import math
from typing import Sequence, Tuple

# (lat, lon) vertex
LatLon = Tuple[float, float]

class GeoUtils:
    EARTH_RADIUS_KM = 6371.0

    @staticmethod
    def to_radians(degrees: float) -> float:
        """Convert degrees to radians."""
        return degrees * math.pi / 180

    @staticmethod
    def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """
        Calculate the great circle distance between two points.

        Args:
            lat1: Latitude of first point
            lon1: Longitude of first point
            lat2: Latitude of second point
            lon2: Longitude of second point

        Returns:
            Distance in kilometers
        """
        d_lat = GeoUtils.to_radians(lat2 - lat1)
        d_lon = GeoUtils.to_radians(lon2 - lon1)

        a = (math.sin(d_lat / 2) ** 2 +
             math.cos(GeoUtils.to_radians(lat1)) *
             math.cos(GeoUtils.to_radians(lat2)) *
             math.sin(d_lon / 2) ** 2)

        return 2 * GeoUtils.EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))

    @staticmethod
    def point_in_polygon(lat: float, lon: float, polygon: Sequence[LatLon]) -> bool:
        """Ray-casting test; the ray runs toward increasing longitude."""
        inside = False
        n = len(polygon)
        if n < 3:
            return False
        j = n - 1
        for i in range(n):
            lat_i, lon_i = polygon[i]
            lat_j, lon_j = polygon[j]
            if (lat_i > lat) != (lat_j > lat):
                cross_lon = lon_i + (lat - lat_i) * (lon_j - lon_i) / (lat_j - lat_i)
                if lon < cross_lon:
                    inside = not inside
            j = i
        return inside

    @staticmethod
    def is_finite_point(lat: object, lon: object) -> bool:
        try:
            return math.isfinite(float(lat)) and math.isfinite(float(lon))
        except (TypeError, ValueError):
            return False
