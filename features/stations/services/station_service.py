import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from core.config import settings
from features.common.models.geo_types import RegionKey
from features.common.utils.geo import GeoUtils
from features.regions.services.region_classifier import RegionClassifier
from features.stations.models.station_types import (
    Station,
    NearestStation,
    GeoJSONFeature,
    GeoJSONResponse
)

logger = logging.getLogger(__name__)

DEFAULT_STATIONS_FILE = Path(__file__).parent.parent / "data" / "khoa_stations.json"

def load_station_table(
    classifier: RegionClassifier,
    stations_file: Path = DEFAULT_STATIONS_FILE
) -> List[Station]:
    """Load the static station table and label every station with its region."""
    try:
        with open(stations_file, encoding="utf-8") as f:
            stations_data = json.load(f)
    except Exception as e:
        logger.error(f"Error reading station table {stations_file}: {str(e)}")
        raise

    return [
        Station(
            code=station["code"],
            name=station["name"],
            lat=station["lat"],
            lon=station["lng"],
            region=classifier.classify(station["lat"], station["lng"])
        )
        for station in stations_data
    ]

class StationService:
    """Nearest-station resolution over an immutable station table."""

    def __init__(
        self,
        classifier: RegionClassifier,
        stations: Optional[Sequence[Station]] = None,
        warn_distance_km: float = settings.station_warn_distance_km
    ):
        self.classifier = classifier
        self._stations = tuple(stations) if stations is not None else tuple(load_station_table(classifier))
        self.warn_distance_km = warn_distance_km
        logger.info(f"Station table loaded with {len(self._stations)} stations")

    @property
    def stations(self) -> Sequence[Station]:
        return self._stations

    def get_station(self, code: str) -> Optional[Station]:
        """Get station by code."""
        return next((s for s in self._stations if s.code == code), None)

    def find_nearest(self, lat: float, lon: float) -> NearestStation:
        """Nearest station, preferring stations in the query point's region.

        Falls back to the whole table when the region has no station. Neither
        the fallback nor a far pick is an error; both are logged.
        """
        if not self._stations:
            raise ValueError("station table is empty")

        here = self.classifier.classify(lat, lon)
        candidates = [s for s in self._stations if s.region == here]
        region_fallback = False
        if not candidates:
            logger.warning(f"⚠️ No station in region {here.value}, searching the full table")
            candidates = list(self._stations)
            region_fallback = True

        nearest = candidates[0]
        best = float("inf")
        for station in candidates:
            d = GeoUtils.haversine_km(lat, lon, station.lat, station.lon)
            if d < best:
                best = d
                nearest = station

        far = best > self.warn_distance_km
        if far:
            logger.warning(
                f"⚠️ Nearest station {nearest.name} ({nearest.code}) is {best:.0f}km away "
                f"(> {self.warn_distance_km:.0f}km), station coverage should be extended"
            )

        return NearestStation(
            station=nearest,
            distance_km=round(best, 2),
            query_region=here,
            region_fallback=region_fallback,
            far=far
        )

    def stations_in_region(self, region: RegionKey) -> List[Station]:
        return [s for s in self._stations if s.region == region]

    def get_stations_geojson(self) -> GeoJSONResponse:
        """Get stations in GeoJSON format."""
        features = [
            GeoJSONFeature(
                geometry={
                    "type": "Point",
                    "coordinates": [station.lon, station.lat]
                },
                properties={
                    "id": station.code,
                    "name": station.name,
                    "region": station.region.value
                }
            )
            for station in self._stations
        ]
        return GeoJSONResponse(features=features)
