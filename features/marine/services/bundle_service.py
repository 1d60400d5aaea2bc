import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from core.config import settings
from core.kst_time import date_range, now_kst, to_kst
from features.common.exceptions.marine_exceptions import MissingCoordinatesError
from features.common.models.geo_types import RegionKey
from features.common.utils.geo import GeoUtils
from features.flow.models.flow_types import AmplitudeInput
from features.flow.services.flow_engine import FlowEngine
from features.marine.models.bundle_types import ForecastDay, MarineBundle, TideSummary
from features.regions.services.region_classifier import RegionClassifier
from features.sst.services.sst_service import SSTService
from features.stages.models.stage_types import StageStrategy
from features.stages.services.amplitude_normalizer import AmplitudeNormalizer
from features.stages.services.moon_phase_client import MoonPhaseClient
from features.stages.services.stage_resolver import StageResolver
from features.stations.services.station_service import StationService
from features.tides.models.tide_types import DailyRange, DayExtremes, ExtremeKind, MultiDayExtremes, TideExtreme
from features.tides.services.khoa_tide_client import KhoaTideClient
from features.tides.services.tide_grouping import eased_phase_pct, extremes_for_day, pick_primary

logger = logging.getLogger(__name__)

def _settled(result: Any, what: str) -> Any:
    """Value of one settled call, or None when it failed."""
    if isinstance(result, BaseException):
        if not isinstance(result, Exception):
            raise result
        logger.warning(f"⚠️ {what} unavailable: {str(result)}")
        return None
    return result

class MarineBundleService:
    """Builds a MarineBundle for a point.

    Upstream calls run together and are settled individually; a failed source
    only empties its own field. The bundle is produced whenever the point is a
    usable coordinate.
    """

    def __init__(
        self,
        station_service: StationService,
        classifier: RegionClassifier,
        tide_client: KhoaTideClient,
        sst_service: SSTService,
        stage_resolver: StageResolver,
        flow_engine: FlowEngine,
        normalizer: Optional[AmplitudeNormalizer] = None,
        moon_client: Optional[MoonPhaseClient] = None,
        rolling_window_days: int = settings.rolling_window_days,
        forecast_days: int = settings.forecast_days,
        default_strategy: StageStrategy = StageStrategy(settings.default_stage_strategy)
    ):
        self.station_service = station_service
        self.classifier = classifier
        self.tide_client = tide_client
        self.sst_service = sst_service
        self.stage_resolver = stage_resolver
        self.flow_engine = flow_engine
        self.normalizer = normalizer or AmplitudeNormalizer(rolling_window_days)
        self.moon_client = moon_client
        self.rolling_window_days = rolling_window_days
        self.forecast_days = forecast_days
        self.default_strategy = default_strategy

    async def build_bundle(
        self,
        lat: Optional[float],
        lon: Optional[float],
        now: Optional[datetime] = None,
        region_override: Optional[RegionKey] = None,
        strategy: Optional[StageStrategy] = None
    ) -> MarineBundle:
        if lat is None or lon is None or not GeoUtils.is_finite_point(lat, lon):
            raise MissingCoordinatesError("a finite latitude and longitude are required")
        lat, lon = float(lat), float(lon)
        now = to_kst(now) if now else now_kst()
        today = now.date()
        strategy = strategy or self.default_strategy

        nearest = self.station_service.find_nearest(lat, lon)
        station = nearest.station
        region = region_override or self.classifier.classify(lat, lon)
        if region_override:
            logger.info(f"Region fixed to {region.value} for this request")

        window_start = today - timedelta(days=self.rolling_window_days - 1)
        calls = [
            self.tide_client.fetch_day(station.code, today),
            self.tide_client.fetch_days(station.code, window_start, self.rolling_window_days),
            self.sst_service.primary_reading(station.code, now),
        ]
        wants_moon = strategy != StageStrategy.CALENDAR_ANCHOR and self.moon_client is not None
        if wants_moon:
            calls.append(self.moon_client.fetch_daily_phases(lat, lon, today, self.forecast_days))

        results = await asyncio.gather(*calls, return_exceptions=True)
        today_extremes: Optional[DayExtremes] = _settled(results[0], f"Tide extremes {station.code} {today}")
        rolling: Optional[MultiDayExtremes] = _settled(results[1], f"Rolling tide window {station.code}")
        sst = _settled(results[2], f"SST tier 1 {station.code}")
        moon_phases: Dict[date, float] = (_settled(results[3], "Moon phases") or {}) if wants_moon else {}

        if sst is None:
            logger.info("SST tier 1 empty, trying tier 2")
            sst = await self.sst_service.secondary_reading(lat, lon, now)

        daily: List[DailyRange] = rolling.daily_ranges if rolling else []
        highs, lows = self._today_extremes(today, today_extremes, rolling)

        primary = pick_primary(highs, lows, now) if (highs or lows) else None
        amplitude = self.normalizer.normalize(daily, today)
        if amplitude is None and primary is not None:
            amplitude = self.normalizer.from_range(primary.range)
            if amplitude is not None:
                logger.info(f"Amplitude from today's range only: {amplitude:.2f}")
        amp_input = AmplitudeInput.tide_range(amplitude) if amplitude is not None else None

        forecast: List[ForecastDay] = []
        for day in date_range(today, self.forecast_days):
            stage = self.stage_resolver.resolve(
                day,
                region=region,
                strategy=strategy,
                daily_ranges=daily,
                moon_phase=moon_phases.get(day),
                station_code=station.code
            )
            forecast.append(ForecastDay(
                local_date=day,
                stage=stage.label,
                flow_pct=self.flow_engine.get_flow_rate(region, stage.label, amp_input),
                strategy=stage.strategy
            ))
        live = forecast[0]

        tides = None
        if primary is not None:
            instants = [e.instant for e in (rolling.extremes if rolling and rolling.extremes else highs + lows)]
            tides = TideSummary(
                highs=highs,
                lows=lows,
                next_high=primary.high,
                next_low=primary.low,
                range=primary.range,
                flow_pct=live.flow_pct,
                phase_pct=eased_phase_pct(instants, now)
            )

        bundle = MarineBundle(
            station=station,
            station_distance_km=nearest.distance_km,
            region=region,
            region_overridden=region_override is not None,
            tides=tides,
            sst=sst,
            stage_label=live.stage,
            stage_strategy=live.strategy,
            amplitude=amplitude,
            flow_pct=live.flow_pct,
            seven_day_forecast=forecast,
            updated_at=now
        )
        logger.info(
            f"📦 Bundle {station.name}({station.code}) {region.value}: stage={live.stage} "
            f"flow={live.flow_pct}% tides={'yes' if tides else 'no'} "
            f"sst={sst.value_c if sst else None}"
        )
        return bundle

    @staticmethod
    def _today_extremes(today: date, day: Optional[DayExtremes], rolling: Optional[MultiDayExtremes]):
        if day is not None and (day.highs or day.lows):
            return list(day.highs), list(day.lows)
        if rolling is not None:
            todays: List[TideExtreme] = extremes_for_day(rolling.extremes, today)
            highs = [e for e in todays if e.kind == ExtremeKind.HIGH]
            lows = [e for e in todays if e.kind == ExtremeKind.LOW]
            return highs, lows
        return [], []
