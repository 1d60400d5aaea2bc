"""Shared fixtures. Caching is switched off before any app module is imported."""
import os

os.environ["marine_cache"] = '{"enabled": false, "backend": "memory", "prefix": "marine"}'
os.environ["marine_khoa_api_key"] = ""

import asyncio
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

import pytest

from core.kst_time import KST, date_range
from features.common.exceptions.marine_exceptions import UpstreamUnavailableError
from features.flow.services.flow_engine import FlowEngine
from features.regions.services.region_classifier import RegionClassifier
from features.sst.models.sst_types import SSTReading, SSTSource
from features.sst.services.sst_service import OpenMeteoSSTClient
from features.stages.services.stage_resolver import StageResolver
from features.stations.services.station_service import StationService
from features.tides.models.tide_types import (
    DailyRange,
    DayExtremes,
    ExtremeKind,
    MultiDayExtremes,
    TideExtreme
)
from features.tides.services.tide_grouping import group_daily_ranges

def daily_series(start: date, ranges: List[Optional[float]]) -> List[DailyRange]:
    """Consecutive DailyRange entries starting at ``start``."""
    return [
        DailyRange(local_date=start + timedelta(days=i), range=r, sample_count=4 if r is not None else 0)
        for i, r in enumerate(ranges)
    ]

def extreme(day: date, hour: int, level: float, kind: ExtremeKind) -> TideExtreme:
    return TideExtreme(instant=datetime(day.year, day.month, day.day, hour, tzinfo=KST), level_cm=level, kind=kind)

class FakeTideClient:
    """Serves a semidiurnal day (L 03h, H 09h, L 15h, H 21h) whose range is ranges[day]."""

    def __init__(self, ranges: Dict[date, float]):
        self.ranges = ranges
        self.calls: List[date] = []

    async def fetch_day(self, station_code: str, day: date) -> DayExtremes:
        self.calls.append(day)
        r = self.ranges.get(day)
        if r is None:
            raise UpstreamUnavailableError("fake tide", f"no data for {day}")
        return DayExtremes(
            station_code=station_code,
            local_date=day,
            highs=[extreme(day, 9, r, ExtremeKind.HIGH), extreme(day, 21, r - 10, ExtremeKind.HIGH)],
            lows=[extreme(day, 3, 0, ExtremeKind.LOW), extreme(day, 15, 10, ExtremeKind.LOW)]
        )

    async def fetch_days(self, station_code: str, start: date, days: int) -> MultiDayExtremes:
        dates = date_range(start, days)
        results = await asyncio.gather(*(self.fetch_day(station_code, d) for d in dates), return_exceptions=True)
        extremes = sorted(
            (e for r in results if not isinstance(r, Exception) for e in r.all),
            key=lambda e: e.instant
        )
        return MultiDayExtremes(
            station_code=station_code,
            start=start,
            days=days,
            extremes=extremes,
            daily_ranges=group_daily_ranges(extremes),
            failed_dates=[d for d, r in zip(dates, results) if isinstance(r, Exception)]
        )

class OfflineTideClient:
    async def fetch_day(self, station_code: str, day: date):
        raise UpstreamUnavailableError("KHOA tide", "Cannot connect to host")

    async def fetch_days(self, station_code: str, start: date, days: int):
        raise UpstreamUnavailableError("KHOA tide", "Cannot connect to host")

class FakeKhoaSST:
    def __init__(self, value: Optional[float] = None):
        self.value = value

    async def fetch_nearest(self, station_code: str, now: datetime) -> Optional[SSTReading]:
        if self.value is None:
            raise UpstreamUnavailableError("KHOA water temperature", "Cannot connect to host")
        return SSTReading(value_c=self.value, observed_at=now, source=SSTSource.KHOA, station_code=station_code)

class OfflineOpenMeteo(OpenMeteoSSTClient):
    """Real client whose transport always fails."""

    async def _get_json(self, url, params):
        raise UpstreamUnavailableError(self.source, "Cannot connect to host")

class FakeMoonClient:
    def __init__(self, phase: float):
        self.phase = phase

    async def fetch_daily_phases(self, lat: float, lon: float, start: date, days: int) -> Dict[date, float]:
        return {d: self.phase for d in date_range(start, days)}

@pytest.fixture
def classifier() -> RegionClassifier:
    return RegionClassifier()

@pytest.fixture
def station_service(classifier) -> StationService:
    return StationService(classifier)

@pytest.fixture
def stage_resolver() -> StageResolver:
    return StageResolver(anchor=date(2025, 10, 29), station_offsets={})

@pytest.fixture
def flow_engine() -> FlowEngine:
    return FlowEngine()
