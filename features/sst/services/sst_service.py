import logging
import math
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Tuple

from core.config import settings
from core.kst_time import kst_date, now_kst, parse_kst_local, yyyymmdd
from features.common.exceptions.marine_exceptions import UpstreamUnavailableError
from features.common.services.http_client import JsonHttpClient
from features.sst.models.sst_types import SSTReading, SSTSource
from features.tides.services.khoa_tide_client import extract_rows

logger = logging.getLogger(__name__)

def pick_nearest_time(samples: Iterable[Tuple[Optional[datetime], Any]], now: datetime) -> Optional[Tuple[datetime, float]]:
    """Sample closest to now by absolute time difference; unreadable samples are skipped."""
    best = None
    best_diff = math.inf
    for instant, raw in samples:
        if instant is None:
            continue
        try:
            value = float(raw)
        except (TypeError, ValueError):
            continue
        if not math.isfinite(value):
            continue
        diff = abs((instant - now).total_seconds())
        if diff < best_diff:
            best = (instant, value)
            best_diff = diff
    return best

class KhoaSSTClient(JsonHttpClient):
    """Tier 1: the station's own daily water-temperature observations."""

    source = "KHOA water temperature"

    def __init__(
        self,
        api_key: str = settings.khoa_api_key,
        base_url: str = settings.khoa_base_url,
        timeout: float = settings.khoa_timeout
    ):
        super().__init__(timeout=timeout)
        self.api_key = api_key
        self.url = f"{base_url}{settings.khoa_water_temp_path}"

    async def fetch_nearest(self, station_code: str, now: datetime) -> Optional[SSTReading]:
        if not self.api_key:
            raise UpstreamUnavailableError(self.source, "KHOA API key is not configured")

        day: date = kst_date(now)
        payload = await self._get_json(self.url, {
            "ServiceKey": self.api_key,
            "ObsCode": station_code,
            "Date": yyyymmdd(day),
            "ResultType": "json"
        })
        rows = extract_rows(payload)
        picked = pick_nearest_time(
            ((parse_kst_local(r.get("record_time", "")), r.get("water_temp")) for r in rows),
            now
        )
        if picked is None:
            logger.info(f"No water temperature rows for {station_code} on {day}")
            return None
        return SSTReading(value_c=picked[1], observed_at=picked[0], source=SSTSource.KHOA, station_code=station_code)

class OpenMeteoSSTClient(JsonHttpClient):
    """Tier 2: modelled hourly SST at the raw coordinate."""

    source = "Open-Meteo marine"

    def __init__(
        self,
        url: str = settings.open_meteo_marine_url,
        timeout: float = settings.open_meteo_timeout
    ):
        super().__init__(timeout=timeout)
        self.url = url

    async def fetch_nearest(self, lat: float, lon: float, now: datetime) -> Optional[SSTReading]:
        day = kst_date(now).isoformat()
        payload = await self._get_json(self.url, {
            "latitude": lat,
            "longitude": lon,
            "hourly": "sea_surface_temperature",
            "timezone": "Asia/Seoul",
            "start_date": day,
            "end_date": day
        })
        hourly = payload.get("hourly") if isinstance(payload, dict) else None
        if not isinstance(hourly, dict):
            raise UpstreamUnavailableError(self.source, "response has no hourly block")

        times: List[str] = hourly.get("time") or []
        temps: List[Any] = hourly.get("sea_surface_temperature") or []
        picked = pick_nearest_time(((parse_kst_local(t), v) for t, v in zip(times, temps)), now)
        if picked is None:
            return None
        return SSTReading(value_c=picked[1], observed_at=picked[0], source=SSTSource.OPEN_METEO)

class SSTService:
    """Two-tier sea-surface temperature: station observation, then model grid."""

    def __init__(self, primary: KhoaSSTClient, secondary: OpenMeteoSSTClient):
        self.primary = primary
        self.secondary = secondary

    async def primary_reading(self, station_code: str, now: datetime) -> Optional[SSTReading]:
        """Tier 1 with failures folded into None."""
        try:
            return await self.primary.fetch_nearest(station_code, now)
        except UpstreamUnavailableError as e:
            logger.warning(f"⚠️ SST tier 1 unavailable for {station_code}: {e.detail}")
            return None

    async def secondary_reading(self, lat: float, lon: float, now: datetime) -> Optional[SSTReading]:
        """Tier 2 with failures folded into None."""
        try:
            return await self.secondary.fetch_nearest(lat, lon, now)
        except UpstreamUnavailableError as e:
            logger.warning(f"⚠️ SST tier 2 unavailable for ({lat:.3f}, {lon:.3f}): {e.detail}")
            return None

    async def resolve(self, station_code: str, lat: float, lon: float, now: Optional[datetime] = None) -> Optional[SSTReading]:
        now = now or now_kst()
        reading = await self.primary_reading(station_code, now)
        if reading is not None:
            return reading
        return await self.secondary_reading(lat, lon, now)
