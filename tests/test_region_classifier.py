"""
Region classifier tests
=======================

Totality, polygon/band agreement, boundary stability.
"""

import pytest

from features.common.models.geo_types import RegionKey
from features.regions.config.region_bounds import RegionBounds


class TestKnownPorts:
    """Representative coastal points"""

    @pytest.mark.parametrize("lat, lon, expected", [
        (37.45, 126.59, RegionKey.WEST),     # 인천
        (34.78, 126.38, RegionKey.WEST),     # 목포
        (35.10, 129.04, RegionKey.SOUTH),    # 부산
        (34.32, 126.76, RegionKey.SOUTH),    # 완도
        (38.21, 128.59, RegionKey.EAST),     # 속초
        (35.50, 129.39, RegionKey.EAST),     # 울산
        (37.49, 130.91, RegionKey.EAST),     # 울릉도
        (33.53, 126.54, RegionKey.JEJU),     # 제주
        (33.24, 126.56, RegionKey.JEJU),     # 서귀포
        (33.96, 126.30, RegionKey.JEJU),     # 추자도
    ])
    def test_port_region(self, classifier, lat, lon, expected):
        assert classifier.classify(lat, lon) == expected


class TestMasan:
    """(35.2, 128.57) is SOUTH whichever boundary rule decides"""

    def test_full_classifier(self, classifier):
        assert classifier.classify(35.2, 128.57) == RegionKey.SOUTH

    def test_polygon_rule(self, classifier):
        assert classifier.classify_by_polygon(35.2, 128.57) == RegionKey.SOUTH

    def test_longitude_band_rule(self, classifier):
        assert classifier.classify_by_longitude_band(128.57) == RegionKey.SOUTH

    def test_not_jeju(self, classifier):
        assert classifier.is_jeju(35.2, 128.57) is False

    @pytest.mark.parametrize("d_lat, d_lon", [
        (0.01, 0.0), (-0.01, 0.0), (0.0, 0.01), (0.0, -0.01), (0.05, 0.05), (-0.05, -0.05),
    ])
    def test_small_perturbation_keeps_region(self, classifier, d_lat, d_lon):
        """내륙 쪽 경계에서 멀리 떨어진 점은 미세 이동에도 같은 권역"""
        assert classifier.classify(35.2 + d_lat, 128.57 + d_lon) == RegionKey.SOUTH


class TestTotality:
    """Every input yields a region, nothing raises"""

    @pytest.mark.parametrize("lat, lon", [
        (float("nan"), 128.0),
        (35.0, float("inf")),
        (None, 127.0),
        ("abc", 127.0),
    ])
    def test_non_finite_input_gets_default(self, classifier, lat, lon):
        assert classifier.classify(lat, lon) == RegionKey.WEST

    def test_grid_is_total(self, classifier):
        """Points far outside every polygon still classify"""
        for lat in range(20, 50, 3):
            for lon in range(115, 140, 3):
                assert classifier.classify(float(lat), float(lon)) in set(RegionKey)

    def test_band_fallback_outside_polygons(self, classifier):
        # Open sea well south-east of Korea, below the Jeju threshold but east of its longitude range
        assert classifier.classify_by_polygon(30.0, 131.0) is None
        assert classifier.classify(30.0, 131.0) == RegionKey.EAST

    def test_deterministic(self, classifier):
        assert {classifier.classify(35.2, 128.57) for _ in range(20)} == {RegionKey.SOUTH}


class TestCustomBounds:
    """Boundary tables are injected, not hard-wired"""

    def test_band_only_bounds(self):
        from features.regions.services.region_classifier import RegionClassifier

        bare = RegionClassifier(RegionBounds(polygons=()))
        assert bare.classify(37.0, 126.0) == RegionKey.WEST
        assert bare.classify(35.0, 128.0) == RegionKey.SOUTH
        assert bare.classify(37.0, 129.5) == RegionKey.EAST
        assert bare.classify(33.4, 126.5) == RegionKey.JEJU

    def test_korean_names(self):
        assert RegionKey.WEST.korean_name == "서해"
        assert RegionKey.JEJU.korean_name == "제주"
