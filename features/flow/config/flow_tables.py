from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

from features.common.models.geo_types import RegionKey

WEST_KEY = "서해/인천"
SOUTH_KEY = "남해/마산"
EAST_KEY = "동해/속초"
JEJU_KEY = "제주/제주"
NATIONAL_KEY = "전국"

# Representative flow % per stage (index 0 = 1물 ... index 14 = 15물/조금),
# averaged over two observed cycles where two were available.
FLOW_TABLE: Mapping[str, Tuple[int, ...]] = MappingProxyType({
    WEST_KEY: (4, 6, 16, 34, 54, 68, 79, 84, 82, 77, 68, 56, 40, 30, 21),
    SOUTH_KEY: (3, 6, 12, 28, 44, 51, 65, 77, 82, 81, 74, 60, 42, 24, 6),
    EAST_KEY: (19, 8, 7, 7, 13, 22, 34, 50, 64, 76, 80, 74, 64, 52, 43),
    JEJU_KEY: (3, 1, 4, 10, 22, 32, 48, 63, 73, 76, 71, 59, 44, 28, 16),
})

# Stages with a direct regional value, applied before the model.
SPECIAL_FLOW: Mapping[str, Mapping[str, int]] = MappingProxyType({
    WEST_KEY: MappingProxyType({"무시": 10}),
})

# Rough centroids for nearest-by-coordinate resolution.
REGION_ANCHOR: Mapping[str, Tuple[float, float]] = MappingProxyType({
    WEST_KEY: (37.45, 126.70),
    SOUTH_KEY: (35.20, 128.57),
    EAST_KEY: (38.21, 128.59),
    JEJU_KEY: (33.50, 126.50),
})

# Place-name keywords found in station names; checked in insertion order.
REGION_ALIAS: Mapping[str, str] = MappingProxyType({
    "인천": WEST_KEY, "태안": WEST_KEY, "안면도": WEST_KEY,
    "보령": WEST_KEY, "군산": WEST_KEY, "목포": WEST_KEY,
    "마산": SOUTH_KEY, "창원": SOUTH_KEY, "부산": SOUTH_KEY,
    "통영": SOUTH_KEY, "거제": SOUTH_KEY, "여수": SOUTH_KEY,
    "속초": EAST_KEY, "강릉": EAST_KEY, "동해시": EAST_KEY,
    "울진": EAST_KEY, "포항": EAST_KEY,
    "서귀포": JEJU_KEY, "제주": JEJU_KEY,
})

ENGINE_KEY_BY_REGION: Mapping[RegionKey, str] = MappingProxyType({
    RegionKey.WEST: WEST_KEY,
    RegionKey.SOUTH: SOUTH_KEY,
    RegionKey.EAST: EAST_KEY,
    RegionKey.JEJU: JEJU_KEY,
})

@dataclass(frozen=True)
class FlowModelParams:
    alpha: float        # floor
    beta: float         # scale
    gamma: float        # curvature
    phase_shift: int    # in stage steps

REGION_PARAMS: Mapping[str, FlowModelParams] = MappingProxyType({
    WEST_KEY: FlowModelParams(alpha=2, beta=80, gamma=0.85, phase_shift=-1),
    SOUTH_KEY: FlowModelParams(alpha=4, beta=80, gamma=1.20, phase_shift=-2),
    EAST_KEY: FlowModelParams(alpha=3, beta=78, gamma=1.00, phase_shift=-1),
    JEJU_KEY: FlowModelParams(alpha=2, beta=85, gamma=1.10, phase_shift=-2),
    NATIONAL_KEY: FlowModelParams(alpha=3, beta=80, gamma=1.00, phase_shift=-1),
})

# Model vs. table weighting of the final estimate.
MODEL_WEIGHT = 0.6
TABLE_WEIGHT = 0.4

# Index every region's normalized curve is rotated to before averaging (7물).
PEAK_ALIGN_INDEX = 6

# Amplitude presets by named label, and the default when nothing is known.
AMPLITUDE_PRESETS: Mapping[str, float] = MappingProxyType({
    "무시": 0.35,
    "조금": 0.50,
    "일반": 0.85,
    "최대": 1.00,
})
DEFAULT_AMPLITUDE = AMPLITUDE_PRESETS["일반"]

# Normalized tide range 0..1 is mapped onto this amplitude band.
TIDE_RANGE_AMPLITUDE_BAND: Tuple[float, float] = (0.35, 1.00)
