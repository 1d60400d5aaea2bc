import logging
import math
import re
from typing import Mapping, Sequence, Tuple, Union

import numpy as np

from features.common.exceptions.marine_exceptions import UnsupportedNotationError
from features.common.models.geo_types import GeoPoint, RegionKey
from features.common.utils.geo import GeoUtils
from features.flow.config.flow_tables import (
    AMPLITUDE_PRESETS,
    DEFAULT_AMPLITUDE,
    ENGINE_KEY_BY_REGION,
    FLOW_TABLE,
    MODEL_WEIGHT,
    NATIONAL_KEY,
    PEAK_ALIGN_INDEX,
    REGION_ALIAS,
    REGION_ANCHOR,
    REGION_PARAMS,
    SPECIAL_FLOW,
    TABLE_WEIGHT,
    TIDE_RANGE_AMPLITUDE_BAND,
    FlowModelParams
)
from features.flow.models.flow_types import AmplitudeInput, AmplitudeKind, FlowEstimate
from features.stages.config.stage_tables import CYCLE_STEPS, JOGEUM, MUSI

logger = logging.getLogger(__name__)

RegionArg = Union[RegionKey, str, GeoPoint, Tuple[float, float], None]
StageArg = Union[str, int]
AmplitudeArg = Union[AmplitudeInput, float, str, None]

_MUL_PATTERN = re.compile(r"^(\d+)\s*물?$")

def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))

def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))

def build_base_curve(tables: Sequence[Sequence[float]], align_index: int = PEAK_ALIGN_INDEX) -> np.ndarray:
    """Shared 0..1 stage curve: each table min-max normalized, rotated so its
    peak sits on ``align_index``, then averaged across tables."""
    aligned = []
    for values in tables:
        arr = np.asarray(values, dtype=float)
        span = (arr.max() - arr.min()) or 1.0
        norm = (arr - arr.min()) / span
        aligned.append(np.roll(norm, align_index - int(np.argmax(norm))))
    return np.mean(np.vstack(aligned), axis=0)

def national_table(tables: Sequence[Sequence[float]]) -> Tuple[int, ...]:
    acc = np.mean(np.vstack([np.asarray(t, dtype=float) for t in tables]), axis=0)
    return tuple(_round_half_up(v) for v in acc)

class FlowEngine:
    """Predicted tidal current strength (0-100 %) from region, stage and amplitude.

    The estimate blends a per-region parametric curve with that region's
    empirical table, then scales by amplitude:

        model   = alpha + beta * base[(n - 1 + phase_shift) mod 15] ** gamma
        flow    = round(clamp((0.6 * model + 0.4 * table[n - 1]) * amplitude, 0, 100))

    Regions are resolved by exact key, station-name keyword, or nearest
    anchor; anything else uses the national average profile.
    """

    def __init__(
        self,
        flow_table: Mapping[str, Sequence[int]] = FLOW_TABLE,
        params: Mapping[str, FlowModelParams] = REGION_PARAMS,
        special: Mapping[str, Mapping[str, int]] = SPECIAL_FLOW,
        anchors: Mapping[str, Tuple[float, float]] = REGION_ANCHOR,
        aliases: Mapping[str, str] = REGION_ALIAS
    ):
        regional = [tuple(v) for v in flow_table.values()]
        self.base_curve = build_base_curve(regional)
        self.flow_table = {key: tuple(v) for key, v in flow_table.items()}
        self.flow_table.setdefault(NATIONAL_KEY, national_table(regional))
        self.params = params
        self.special = special
        self.anchors = anchors
        self.aliases = aliases

    def resolve_region_key(self, region: RegionArg) -> str:
        if isinstance(region, RegionKey):
            return ENGINE_KEY_BY_REGION[region]

        if isinstance(region, str):
            text = region.strip()
            if text in self.flow_table:
                return text
            if text.upper() in RegionKey.__members__:
                return ENGINE_KEY_BY_REGION[RegionKey(text.upper())]
            for keyword, key in self.aliases.items():
                if keyword in text:
                    return key
            return NATIONAL_KEY

        point = None
        if isinstance(region, GeoPoint):
            point = (region.lat, region.lon)
        elif isinstance(region, tuple) and len(region) == 2:
            point = region
        if point is not None and GeoUtils.is_finite_point(*point):
            return min(
                self.anchors,
                key=lambda k: GeoUtils.haversine_km(point[0], point[1], *self.anchors[k])
            )

        return NATIONAL_KEY

    def resolve_amplitude(self, amplitude: AmplitudeArg) -> float:
        if amplitude is None:
            return DEFAULT_AMPLITUDE
        if isinstance(amplitude, (int, float)) and not isinstance(amplitude, bool):
            return _clamp01(float(amplitude)) if math.isfinite(amplitude) else DEFAULT_AMPLITUDE
        if isinstance(amplitude, str):
            return AMPLITUDE_PRESETS.get(amplitude.strip(), DEFAULT_AMPLITUDE)

        if amplitude.kind == AmplitudeKind.LABEL:
            return AMPLITUDE_PRESETS.get((amplitude.label or "").strip(), DEFAULT_AMPLITUDE)
        if amplitude.value is None or not math.isfinite(amplitude.value):
            return DEFAULT_AMPLITUDE
        if amplitude.kind == AmplitudeKind.TIDE_RANGE:
            lo, hi = TIDE_RANGE_AMPLITUDE_BAND
            return lo + _clamp01(amplitude.value) * (hi - lo)
        return _clamp01(amplitude.value)

    def parse_stage(self, stage: StageArg) -> int:
        """Stage number 1..15 (조금 and 무시 count as 15); out-of-range numbers are clamped."""
        if isinstance(stage, bool):
            raise UnsupportedNotationError(stage)
        if isinstance(stage, int):
            return max(1, min(CYCLE_STEPS, stage))
        if isinstance(stage, str):
            text = stage.strip()
            if text in (JOGEUM, MUSI):
                return CYCLE_STEPS
            match = _MUL_PATTERN.match(text)
            if match:
                return max(1, min(CYCLE_STEPS, int(match.group(1))))
        raise UnsupportedNotationError(stage)

    def model_predict(self, region_key: str, stage_number: int) -> float:
        p = self.params.get(region_key) or self.params[NATIONAL_KEY]
        idx = (stage_number - 1 + p.phase_shift) % CYCLE_STEPS
        b = max(float(self.base_curve[idx]), 0.0)
        return p.alpha + p.beta * b ** p.gamma

    def estimate(self, region: RegionArg, stage: StageArg, amplitude: AmplitudeArg = None) -> FlowEstimate:
        region_key = self.resolve_region_key(region)
        amp = self.resolve_amplitude(amplitude)

        if isinstance(stage, str):
            override = self.special.get(region_key, {}).get(stage.strip())
            if override is not None:
                pct = max(0, min(100, _round_half_up(override * amp)))
                logger.debug(f"[{region_key}] '{stage.strip()}' override flow {pct}% (amp={amp:.2f})")
                return FlowEstimate(
                    region_key=region_key, stage=stage.strip(), amplitude=amp,
                    flow_pct=pct, special=True
                )

        n = self.parse_stage(stage)
        table = self.flow_table.get(region_key) or self.flow_table[NATIONAL_KEY]
        blended = MODEL_WEIGHT * self.model_predict(region_key, n) + TABLE_WEIGHT * table[n - 1]
        pct = max(0, min(100, _round_half_up(blended * amp)))
        logger.debug(f"[{region_key}] {n}물 flow {pct}% (amp={amp:.2f})")

        return FlowEstimate(
            region_key=region_key,
            stage=stage.strip() if isinstance(stage, str) else f"{n}물",
            stage_number=n,
            amplitude=amp,
            flow_pct=pct
        )

    def get_flow_rate(self, region: RegionArg, stage: StageArg, amplitude: AmplitudeArg = None) -> int:
        return self.estimate(region, stage, amplitude).flow_pct
