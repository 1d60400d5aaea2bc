"""
Station service tests
=====================

Region-preferred nearest-station resolution over the static table.
"""
import logging

import pytest

from features.common.models.geo_types import RegionKey
from features.stations.models.station_types import Station
from features.stations.services.station_service import StationService


def _station(code, lat, lon, region):
    return Station(code=code, name=code, lat=lat, lon=lon, region=region)


class TestStationTable:
    """Bundled KHOA station table"""

    def test_loads_all_stations(self, station_service):
        assert len(station_service.stations) == 42
        codes = [s.code for s in station_service.stations]
        assert len(set(codes)) == len(codes)

    def test_every_region_has_stations(self, station_service):
        for region in RegionKey:
            assert station_service.stations_in_region(region), region

    def test_regions_assigned_at_load(self, station_service):
        assert station_service.get_station("DT_0001").region == RegionKey.WEST
        assert station_service.get_station("DT_0062").region == RegionKey.SOUTH
        assert station_service.get_station("DT_0012").region == RegionKey.EAST
        assert station_service.get_station("DT_0004").region == RegionKey.JEJU

    def test_unknown_code(self, station_service):
        assert station_service.get_station("DT_9999") is None


class TestFindNearest:
    """find_nearest() 테스트"""

    def test_masan(self, station_service):
        result = station_service.find_nearest(35.2, 128.57)
        assert result.station.code == "DT_0062"
        assert result.query_region == RegionKey.SOUTH
        assert result.region_fallback is False
        assert result.far is False
        assert result.distance_km < 2

    def test_prefers_same_region(self, classifier):
        """다른 권역 관측소가 더 가까워도 같은 권역 관측소 선택"""
        stations = [
            _station("OTHER", 35.21, 128.58, RegionKey.EAST),
            _station("SAME", 34.80, 128.40, RegionKey.SOUTH),
        ]
        service = StationService(classifier, stations=stations)
        result = service.find_nearest(35.2, 128.57)
        assert result.station.code == "SAME"
        assert result.region_fallback is False

    def test_falls_back_to_full_table(self, classifier, caplog):
        """권역에 관측소가 없으면 전체 테이블에서 탐색"""
        stations = [
            _station("WEST", 37.45, 126.59, RegionKey.WEST),
            _station("EAST", 35.50, 129.39, RegionKey.EAST),
        ]
        service = StationService(classifier, stations=stations)
        with caplog.at_level(logging.WARNING):
            result = service.find_nearest(35.2, 128.57)
        assert result.station.code == "EAST"
        assert result.region_fallback is True
        assert "No station in region SOUTH" in caplog.text

    def test_far_station_is_flagged_not_rejected(self, classifier, caplog):
        stations = [_station("ONLY", 37.45, 126.59, RegionKey.WEST)]
        service = StationService(classifier, stations=stations, warn_distance_km=120)
        with caplog.at_level(logging.WARNING):
            result = service.find_nearest(34.0, 124.5)
        assert result.station.code == "ONLY"
        assert result.far is True
        assert result.distance_km > 120
        assert "station coverage should be extended" in caplog.text

    def test_empty_table(self, classifier):
        service = StationService(classifier, stations=[])
        with pytest.raises(ValueError):
            service.find_nearest(35.2, 128.57)


class TestGeoJSON:
    """GeoJSON export"""

    def test_feature_collection(self, station_service):
        collection = station_service.get_stations_geojson()
        assert collection.type == "FeatureCollection"
        assert len(collection.features) == len(station_service.stations)

        masan = next(f for f in collection.features if f.properties["id"] == "DT_0062")
        assert masan.geometry["coordinates"] == [128.5761, 35.1975]
        assert masan.properties["region"] == "SOUTH"
