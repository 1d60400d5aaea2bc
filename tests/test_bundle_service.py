"""
Marine bundle tests
===================

Fan-out/fan-in orchestration with fake upstreams; no network.
"""
import asyncio
from datetime import date, datetime, timedelta

import pytest

from conftest import FakeKhoaSST, FakeMoonClient, FakeTideClient, OfflineOpenMeteo, OfflineTideClient
from core.kst_time import KST
from features.common.exceptions.marine_exceptions import MissingCoordinatesError
from features.common.models.geo_types import RegionKey
from features.flow.models.flow_types import AmplitudeInput
from features.marine.services.bundle_service import MarineBundleService
from features.sst.services.sst_service import KhoaSSTClient, SSTService
from features.stages.models.stage_types import StageStrategy

NOW = datetime(2025, 11, 5, 12, 0, tzinfo=KST)
TODAY = NOW.date()
WINDOW_START = TODAY - timedelta(days=14)

MASAN = (35.2, 128.57)


@pytest.fixture
def make_service(classifier, station_service, stage_resolver, flow_engine):
    def _make(tide_client, sst_service, moon_client=None):
        return MarineBundleService(
            station_service=station_service,
            classifier=classifier,
            tide_client=tide_client,
            sst_service=sst_service,
            stage_resolver=stage_resolver,
            flow_engine=flow_engine,
            moon_client=moon_client,
            default_strategy=StageStrategy.CALENDAR_ANCHOR
        )
    return _make


def _window(ranges):
    return {WINDOW_START + timedelta(days=i): r for i, r in enumerate(ranges)}


class TestFullBundle:
    """All upstreams answer"""

    def test_bundle(self, make_service, flow_engine):
        tide = FakeTideClient(_window([100 + 10 * i for i in range(15)]))
        service = make_service(tide, SSTService(primary=FakeKhoaSST(17.2), secondary=OfflineOpenMeteo()))
        bundle = asyncio.run(service.build_bundle(*MASAN, now=NOW))

        assert bundle.station.code == "DT_0062"
        assert bundle.region == RegionKey.SOUTH
        assert bundle.region_overridden is False
        assert bundle.sst.value_c == 17.2
        assert bundle.amplitude == pytest.approx(1.0)

        # 2025-10-29 + 7 days
        assert bundle.stage_label == "8물"
        assert bundle.stage_strategy == StageStrategy.CALENDAR_ANCHOR
        assert bundle.flow_pct == flow_engine.get_flow_rate(RegionKey.SOUTH, "8물", AmplitudeInput.tide_range(1.0))
        assert bundle.updated_at == NOW

    def test_tide_summary(self, make_service):
        tide = FakeTideClient(_window([100 + 10 * i for i in range(15)]))
        service = make_service(tide, SSTService(primary=FakeKhoaSST(17.2), secondary=OfflineOpenMeteo()))
        tides = asyncio.run(service.build_bundle(*MASAN, now=NOW)).tides

        assert len(tides.highs) == 2
        assert len(tides.lows) == 2
        assert tides.next_high.instant.hour == 21
        assert tides.next_low.instant.hour == 15
        assert tides.range == 240
        # halfway between the 09h high and the 15h low
        assert tides.phase_pct == 100

    def test_forecast_mirrors_live_values(self, make_service):
        """오늘 예보 항목은 실시간 계산 값과 동일"""
        tide = FakeTideClient(_window([100 + 10 * i for i in range(15)]))
        service = make_service(tide, SSTService(primary=FakeKhoaSST(17.2), secondary=OfflineOpenMeteo()))
        bundle = asyncio.run(service.build_bundle(*MASAN, now=NOW))

        forecast = bundle.seven_day_forecast
        assert len(forecast) == 7
        assert [f.local_date for f in forecast] == [TODAY + timedelta(days=i) for i in range(7)]
        assert forecast[0].stage == bundle.stage_label
        assert forecast[0].flow_pct == bundle.flow_pct
        assert bundle.tides.flow_pct == bundle.flow_pct
        assert forecast[1].stage == "9물"

    def test_rolling_minimum_strategy(self, make_service):
        ranges = [200] * 15
        ranges[7] = 60  # 2025-10-29
        tide = FakeTideClient(_window(ranges))
        service = make_service(
            tide,
            SSTService(primary=FakeKhoaSST(17.2), secondary=OfflineOpenMeteo()),
            moon_client=FakeMoonClient(0.5)
        )
        bundle = asyncio.run(service.build_bundle(*MASAN, now=NOW, strategy=StageStrategy.ROLLING_MINIMUM))

        assert bundle.stage_label == "7물"
        assert bundle.stage_strategy == StageStrategy.ROLLING_MINIMUM
        assert bundle.seven_day_forecast[1].stage == "8물"


class TestDegraded:
    """Failed sources only empty their own fields"""

    def test_no_network(self, make_service, flow_engine):
        """네트워크 없이도 예외 없이 번들 생성"""
        service = make_service(
            OfflineTideClient(),
            SSTService(primary=KhoaSSTClient(api_key=""), secondary=OfflineOpenMeteo())
        )
        bundle = asyncio.run(service.build_bundle(*MASAN, now=NOW))

        assert bundle.tides is None
        assert bundle.sst is None
        assert bundle.amplitude is None
        assert bundle.stage_label == "8물"
        assert bundle.flow_pct == flow_engine.get_flow_rate(RegionKey.SOUTH, "8물")
        assert len(bundle.seven_day_forecast) == 7

    def test_sst_falls_to_tier_two(self, make_service):
        class TierTwo(OfflineOpenMeteo):
            async def _get_json(self, url, params):
                return {"hourly": {"time": ["2025-11-05T12:00"], "sea_surface_temperature": [18.9]}}

        service = make_service(OfflineTideClient(), SSTService(primary=FakeKhoaSST(None), secondary=TierTwo()))
        bundle = asyncio.run(service.build_bundle(*MASAN, now=NOW))
        assert bundle.sst.value_c == 18.9

    def test_short_history_uses_range_and_lunar_age(self, make_service):
        tide = FakeTideClient({TODAY: 150})
        service = make_service(
            tide,
            SSTService(primary=FakeKhoaSST(17.2), secondary=OfflineOpenMeteo()),
            moon_client=FakeMoonClient(0.5)
        )
        bundle = asyncio.run(service.build_bundle(
            *MASAN, now=NOW, region_override=RegionKey.WEST, strategy=StageStrategy.ROLLING_MINIMUM
        ))

        assert bundle.region == RegionKey.WEST
        assert bundle.region_overridden is True
        assert bundle.station.code == "DT_0062"
        assert bundle.amplitude == pytest.approx(0.5)
        assert bundle.stage_label == "무시"
        assert bundle.stage_strategy == StageStrategy.LUNAR_AGE
        # West 무시 override 10 x (0.35 + 0.5 * 0.65)
        assert bundle.flow_pct == 7


class TestCoordinates:
    """Unusable coordinates are the only fatal input"""

    @pytest.mark.parametrize("lat, lon", [
        (None, 128.57),
        (35.2, None),
        (float("nan"), 128.57),
        (35.2, float("inf")),
    ])
    def test_missing(self, make_service, lat, lon):
        service = make_service(OfflineTideClient(), SSTService(primary=FakeKhoaSST(None), secondary=OfflineOpenMeteo()))
        with pytest.raises(MissingCoordinatesError):
            asyncio.run(service.build_bundle(lat, lon, now=NOW))
