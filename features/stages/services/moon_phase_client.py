import logging
import math
from datetime import date, timedelta
from typing import Dict

from core.config import settings
from features.common.exceptions.marine_exceptions import UpstreamUnavailableError
from features.common.services.http_client import JsonHttpClient

logger = logging.getLogger(__name__)

class MoonPhaseClient(JsonHttpClient):
    """Daily moon-phase fractions (0 = new moon, 0.5 = full) from Open-Meteo."""

    source = "Open-Meteo astronomy"

    def __init__(
        self,
        url: str = settings.open_meteo_forecast_url,
        timeout: float = settings.open_meteo_timeout
    ):
        super().__init__(timeout=timeout)
        self.url = url

    async def fetch_daily_phases(self, lat: float, lon: float, start: date, days: int) -> Dict[date, float]:
        payload = await self._get_json(self.url, {
            "latitude": lat,
            "longitude": lon,
            "daily": "moon_phase",
            "timezone": "Asia/Seoul",
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=days - 1)).isoformat()
        })
        daily = payload.get("daily") if isinstance(payload, dict) else None
        if not isinstance(daily, dict):
            raise UpstreamUnavailableError(self.source, "response has no daily block")

        phases: Dict[date, float] = {}
        for t, phase in zip(daily.get("time") or [], daily.get("moon_phase") or []):
            try:
                value = float(phase)
                day = date.fromisoformat(str(t)[:10])
            except (TypeError, ValueError):
                continue
            if math.isfinite(value):
                phases[day] = value

        logger.info(f"Moon phases for ({lat:.3f}, {lon:.3f}): {len(phases)} days")
        return phases
