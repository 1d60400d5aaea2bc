import logging
import math
from datetime import date, timedelta
from typing import Optional, Sequence

from features.tides.models.tide_types import DailyRange

logger = logging.getLogger(__name__)

class AmplitudeNormalizer:
    """Scores a day's tidal range 0..1 against the rolling window that ends on it.

    Raw cm ranges differ widely between stations (Incheon vs. Sokcho); only the
    position within the local window is carried forward to the flow engine.
    """

    # Range at which the no-history fallback saturates, cm.
    FALLBACK_FULL_RANGE_CM = 300.0

    def __init__(self, window_days: int = 15):
        self.window_days = window_days

    def normalize(self, daily: Sequence[DailyRange], target: date) -> Optional[float]:
        today = next((d for d in daily if d.local_date == target), None)
        if today is None or not _is_valid(today.range):
            return None

        start = target - timedelta(days=self.window_days - 1)
        values = [
            d.range for d in daily
            if start <= d.local_date <= target and _is_valid(d.range)
        ]
        if len(values) < self.window_days:
            logger.debug(f"Amplitude window for {target} has {len(values)}/{self.window_days} valid days")
            return None

        low, high = min(values), max(values)
        span = high - low
        if span <= 0:
            # Flat window: no spread to measure against.
            return 0.0
        return max(0.0, min(1.0, (today.range - low) / span))

    def from_range(self, range_cm: Optional[float]) -> Optional[float]:
        """Coarse amplitude from a single day's range when no window is available."""
        if not _is_valid(range_cm):
            return None
        return max(0.0, min(range_cm / self.FALLBACK_FULL_RANGE_CM, 1.0))

def _is_valid(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)
