import logging
import math
from datetime import date, datetime, timedelta
from typing import Mapping, Optional, Sequence, Tuple, Union

from core.config import settings
from core.kst_time import diff_days_kst, kst_date
from features.common.exceptions.marine_exceptions import InsufficientHistoryError
from features.common.models.geo_types import RegionKey
from features.stages.config.stage_tables import (
    CYCLE_STEPS,
    JOGEUM,
    JOGEUM_AGE_BANDS,
    LUNAR_MONTH_DAYS,
    MUSI,
    MUSI_AGE_BAND,
    NATIONAL_LABEL_SEQUENCE,
    NATIONAL_PROFILE,
    PROFILE_BY_REGION,
    RegionStageProfile,
    mul_label
)
from features.stages.models.stage_types import StageResult, StageStrategy
from features.tides.models.tide_types import DailyRange

logger = logging.getLogger(__name__)

def calendar_anchor_label(
    target: Union[date, datetime],
    anchor: date,
    sequence: Sequence[str] = NATIONAL_LABEL_SEQUENCE
) -> str:
    """Label from whole KST calendar days since the anchor; periodic in len(sequence)."""
    idx = diff_days_kst(target, anchor) % len(sequence)
    return sequence[max(0, min(len(sequence) - 1, idx))]

def local_minima(values: Sequence[float], window: int = 2) -> list:
    """Indices whose value is strictly below every neighbour within +-window."""
    minima = []
    for i, value in enumerate(values):
        lo = max(0, i - window)
        hi = min(len(values) - 1, i + window)
        if all(values[j] > value for j in range(lo, hi + 1) if j != i):
            minima.append(i)
    return minima

def rolling_minimum_stage(
    daily: Sequence[DailyRange],
    target: date,
    cycle: int = CYCLE_STEPS,
    window: int = 2
) -> Tuple[str, int, date]:
    """Stage counted from the most recent neap (local range minimum) at or before target.

    Returns (label, stage_number, anchor_date); the anchor day itself is 조금 (15).
    Raises InsufficientHistoryError with fewer than ``cycle`` valid days or no minimum.
    """
    valid = sorted(
        (d for d in daily if d.range is not None and math.isfinite(d.range)),
        key=lambda d: d.local_date
    )
    if len(valid) < cycle:
        raise InsufficientHistoryError(cycle, len(valid))

    minima = local_minima([d.range for d in valid], window)
    if not minima:
        raise InsufficientHistoryError(cycle, len(valid))

    anchor_dates = [valid[i].local_date for i in minima]
    past = [d for d in anchor_dates if d <= target]
    anchor = past[-1] if past else anchor_dates[0]

    offset = (target - anchor).days % cycle
    if offset == 0:
        return JOGEUM, cycle, anchor
    return mul_label(offset), offset, anchor

def lunar_age_label(phase01: float) -> Tuple[str, Optional[int]]:
    """Approximate stage from the moon-phase fraction (0 = new moon)."""
    age = (phase01 % 1.0) * LUNAR_MONTH_DAYS
    for lo, hi in JOGEUM_AGE_BANDS:
        if lo <= age <= hi:
            return JOGEUM, CYCLE_STEPS
    if MUSI_AGE_BAND[0] <= age <= MUSI_AGE_BAND[1]:
        return MUSI, None
    idx = min(CYCLE_STEPS, max(1, math.floor(age / (LUNAR_MONTH_DAYS / 2) * CYCLE_STEPS) + 1))
    return mul_label(idx), idx

def stage_number_of(label: str) -> Optional[int]:
    if label == JOGEUM:
        return CYCLE_STEPS
    if label.endswith("물") and label[:-1].isdigit():
        return int(label[:-1])
    return None

class StageResolver:
    """Names a calendar date's tidal stage with one selectable strategy.

    Requested strategy first; when it cannot answer, the lunar-age
    approximation (if a moon phase is known) and finally the calendar anchor,
    which always answers. Region profiles then fold 무시 into the local neap
    label and shift the cycle by the profile/station day offset.
    """

    def __init__(
        self,
        anchor: date = settings.national_label_anchor,
        sequence: Sequence[str] = NATIONAL_LABEL_SEQUENCE,
        profiles: Mapping[RegionKey, RegionStageProfile] = PROFILE_BY_REGION,
        station_offsets: Optional[Mapping[str, int]] = None,
        local_min_window: int = 2
    ):
        self.anchor = anchor
        self.sequence = tuple(sequence)
        self.profiles = profiles
        self.station_offsets = dict(settings.station_stage_offsets if station_offsets is None else station_offsets)
        self.local_min_window = local_min_window

    def profile_for(self, region: Optional[RegionKey]) -> RegionStageProfile:
        if region is None:
            return NATIONAL_PROFILE
        return self.profiles.get(region, NATIONAL_PROFILE)

    def offset_days(self, region: Optional[RegionKey], station_code: Optional[str] = None) -> int:
        offset = self.profile_for(region).anchor_offset_days
        if station_code:
            offset += self.station_offsets.get(station_code, 0)
        return offset

    def resolve(
        self,
        target: Union[date, datetime],
        region: Optional[RegionKey] = None,
        strategy: StageStrategy = StageStrategy.CALENDAR_ANCHOR,
        daily_ranges: Optional[Sequence[DailyRange]] = None,
        moon_phase: Optional[float] = None,
        station_code: Optional[str] = None
    ) -> StageResult:
        local_date = kst_date(target)
        profile = self.profile_for(region)
        effective = local_date + timedelta(days=self.offset_days(region, station_code))

        label: Optional[str] = None
        number: Optional[int] = None
        anchor_date: Optional[date] = None
        used = strategy

        if strategy == StageStrategy.ROLLING_MINIMUM:
            try:
                label, number, anchor_date = rolling_minimum_stage(
                    daily_ranges or [], effective, window=self.local_min_window
                )
            except InsufficientHistoryError as e:
                logger.info(f"Rolling-minimum stage unavailable for {local_date}: {str(e)}")

        if label is None and strategy != StageStrategy.CALENDAR_ANCHOR and moon_phase is not None:
            label, number = lunar_age_label(moon_phase)
            used = StageStrategy.LUNAR_AGE

        if label is None:
            if strategy != StageStrategy.CALENDAR_ANCHOR:
                logger.info(f"Stage for {local_date} falls back to the calendar anchor")
            label = calendar_anchor_label(effective, self.anchor, self.sequence)
            number = stage_number_of(label)
            used = StageStrategy.CALENDAR_ANCHOR

        if label == MUSI and not profile.has_musi:
            label = profile.neap_label
            number = stage_number_of(label)

        return StageResult(
            local_date=local_date,
            label=label,
            stage_number=number,
            strategy=used,
            requested_strategy=strategy,
            anchor_date=anchor_date,
            baseline_flow_pct=profile.baseline_flow.get(label),
            fallback=used != strategy
        )
