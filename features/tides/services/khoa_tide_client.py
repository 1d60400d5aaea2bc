import asyncio
import logging
import math
from datetime import date
from typing import Any, Dict, List, Optional

from core.cache import cached
from core.config import settings
from core.kst_time import date_range, parse_kst_local, yyyymmdd
from features.common.exceptions.marine_exceptions import UpstreamUnavailableError
from features.common.services.cache_config import TIDE_PREDICTION_EXPIRE, station_day_key_builder
from features.common.services.http_client import JsonHttpClient
from features.tides.models.tide_types import (
    DayExtremes,
    ExtremeKind,
    MultiDayExtremes,
    TideExtreme
)
from features.tides.services.tide_grouping import group_daily_ranges

logger = logging.getLogger(__name__)

HIGH_TOKENS = ("고", "HIGH", "H")
LOW_TOKENS = ("저", "LOW", "L")

def parse_kind(raw: Any) -> Optional[ExtremeKind]:
    """Accepts the Korean token ("고조"/"저조") or a Latin code (H/L, HIGH/LOW)."""
    text = str(raw or "").strip()
    if not text:
        return None
    upper = text.upper()
    if "고" in text or upper in HIGH_TOKENS:
        return ExtremeKind.HIGH
    if "저" in text or upper in LOW_TOKENS:
        return ExtremeKind.LOW
    return None

def extract_rows(payload: Any) -> List[Dict[str, Any]]:
    """KHOA wraps rows either as {"result": {"data": [...]}} or {"data": [...]}."""
    if not isinstance(payload, dict):
        return []
    result = payload.get("result")
    if isinstance(result, dict):
        if "error" in result and not result.get("data"):
            raise UpstreamUnavailableError("KHOA", str(result.get("error")))
        data = result.get("data")
        if isinstance(data, list):
            return data
    data = payload.get("data")
    if isinstance(data, list):
        return data
    return []

def parse_extreme_rows(rows: List[Dict[str, Any]], station_code: str, day: date) -> DayExtremes:
    """Normalize raw rows into a day's HIGH/LOW lists.

    Rows with an unreadable kind, time or level, or whose KST date is not the
    requested day, are dropped.
    """
    highs: List[TideExtreme] = []
    lows: List[TideExtreme] = []
    for row in rows:
        kind = parse_kind(row.get("hl_code"))
        instant = parse_kst_local(row.get("tph_time", ""))
        try:
            level = float(row.get("tph_level"))
        except (TypeError, ValueError):
            continue
        if kind is None or instant is None or not math.isfinite(level):
            continue
        if instant.date() != day:
            continue

        extreme = TideExtreme(instant=instant, level_cm=level, kind=kind)
        (highs if kind == ExtremeKind.HIGH else lows).append(extreme)

    return DayExtremes(
        station_code=station_code,
        local_date=day,
        highs=sorted(highs, key=lambda e: e.instant),
        lows=sorted(lows, key=lambda e: e.instant)
    )

class KhoaTideClient(JsonHttpClient):
    """High/low water tables from the KHOA open API."""

    source = "KHOA tide"

    def __init__(
        self,
        api_key: str = settings.khoa_api_key,
        base_url: str = settings.khoa_base_url,
        timeout: float = settings.khoa_timeout
    ):
        super().__init__(timeout=timeout)
        self.api_key = api_key
        self.url = f"{base_url}{settings.khoa_tide_extremes_path}"

    @cached(ttl=TIDE_PREDICTION_EXPIRE, namespace="tide_extremes", key_builder=station_day_key_builder)
    async def fetch_day(self, station_code: str, day: date) -> DayExtremes:
        """Extremes for one KST calendar day."""
        if not self.api_key:
            raise UpstreamUnavailableError(self.source, "KHOA API key is not configured")

        payload = await self._get_json(self.url, {
            "ServiceKey": self.api_key,
            "ObsCode": station_code,
            "Date": yyyymmdd(day),
            "ResultType": "json"
        })
        extremes = parse_extreme_rows(extract_rows(payload), station_code, day)
        logger.info(
            f"Tide extremes {station_code} {day}: "
            f"{len(extremes.highs)} highs, {len(extremes.lows)} lows"
        )
        return extremes

    async def fetch_days(self, station_code: str, start: date, days: int) -> MultiDayExtremes:
        """One request per day, issued together. A failed day is logged and left out."""
        if not self.api_key:
            raise UpstreamUnavailableError(self.source, "KHOA API key is not configured")

        dates = date_range(start, days)
        results = await asyncio.gather(
            *(self.fetch_day(station_code, d) for d in dates),
            return_exceptions=True
        )

        extremes: List[TideExtreme] = []
        failed: List[date] = []
        for d, result in zip(dates, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning(f"⚠️ Tide extremes for {station_code} {d} skipped: {str(result)}")
                failed.append(d)
                continue
            extremes.extend(result.all)

        extremes.sort(key=lambda e: e.instant)
        return MultiDayExtremes(
            station_code=station_code,
            start=start,
            days=days,
            extremes=extremes,
            daily_ranges=group_daily_ranges(extremes),
            failed_dates=failed
        )
