import math
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence

from core.kst_time import kst_date, to_kst
from features.tides.models.tide_types import (
    DailyRange,
    ExtremeKind,
    PrimaryExtremes,
    TideExtreme
)

def day_range(extremes: Iterable[TideExtreme]) -> Optional[float]:
    """max(HIGH) - min(LOW), or None when either kind is missing."""
    items = list(extremes)
    highs = [e.level_cm for e in items if e.kind == ExtremeKind.HIGH]
    lows = [e.level_cm for e in items if e.kind == ExtremeKind.LOW]
    if not highs or not lows:
        return None
    return max(highs) - min(lows)

def group_daily_ranges(extremes: Iterable[TideExtreme]) -> List[DailyRange]:
    """Bucket extremes by KST calendar date and compute each day's range.

    Output is sorted by date; days with no extremes do not appear.
    """
    by_day: Dict[date, List[TideExtreme]] = defaultdict(list)
    for extreme in extremes:
        by_day[kst_date(extreme.instant)].append(extreme)

    return [
        DailyRange(
            local_date=day,
            range=day_range(items),
            sample_count=len(items)
        )
        for day, items in sorted(by_day.items())
    ]

def pick_primary(
    highs: Sequence[TideExtreme],
    lows: Sequence[TideExtreme],
    now: datetime
) -> PrimaryExtremes:
    """First high/low at or after now; wraps to the day's first entry when all are past."""
    def next_or_first(items: Sequence[TideExtreme]) -> Optional[TideExtreme]:
        ordered = sorted(items, key=lambda e: e.instant)
        return next((e for e in ordered if e.instant >= now), ordered[0] if ordered else None)

    return PrimaryExtremes(
        high=next_or_first(highs),
        low=next_or_first(lows),
        range=day_range(list(highs) + list(lows))
    )

def _bracket(instants: Sequence[datetime], now: datetime):
    points = sorted(instants)
    if len(points) < 2:
        return None
    prev, nxt = points[0], points[-1]
    for a, b in zip(points, points[1:]):
        if a <= now < b:
            prev, nxt = a, b
            break
    if nxt <= prev:
        return None
    frac = (now - prev).total_seconds() / (nxt - prev).total_seconds()
    return max(0.0, min(1.0, frac))

def linear_phase_pct(instants: Sequence[datetime], now: datetime) -> Optional[int]:
    """Linear progress of now between the bracketing extremes, 0-100."""
    frac = _bracket(instants, now)
    if frac is None:
        return None
    return int(round(frac * 100))

def eased_phase_pct(instants: Sequence[datetime], now: datetime) -> Optional[int]:
    """Current strength proxy within one tide: slack at each extreme, peak halfway."""
    frac = _bracket(instants, now)
    if frac is None:
        return None
    return int(round(math.sin(math.pi * frac) * 100))

def extremes_for_day(extremes: Iterable[TideExtreme], day: date) -> List[TideExtreme]:
    return sorted(
        (e for e in extremes if to_kst(e.instant).date() == day),
        key=lambda e: e.instant
    )
