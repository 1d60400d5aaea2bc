from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Tuple

from features.common.models.geo_types import RegionKey

JOGEUM = "조금"
MUSI = "무시"
NEAP_LABELS = (JOGEUM, MUSI)

CYCLE_STEPS = 15
LUNAR_MONTH_DAYS = 29.530588

def mul_label(n: int) -> str:
    return f"{n}물"

ALL_STAGE_LABELS: Tuple[str, ...] = tuple(mul_label(n) for n in range(1, 16)) + NEAP_LABELS

# One lunar cycle of daily labels, index 0 on the national anchor date.
# Identical for every region so neighbouring regions never disagree about a date.
NATIONAL_LABEL_SEQUENCE: Tuple[str, ...] = (
    tuple(mul_label(n) for n in range(1, 15)) + (JOGEUM,)
    + tuple(mul_label(n) for n in range(1, 14)) + (JOGEUM,)
)

def _baseline(musi: int) -> Mapping[str, int]:
    table = {
        MUSI: musi, JOGEUM: 30,
        "1물": 5, "2물": 8, "3물": 5, "4물": 2, "5물": 10, "6물": 18, "7물": 25, "8물": 35,
        "9물": 45, "10물": 55, "11물": 65, "12물": 75, "13물": 85, "14물": 95, "15물": 100,
    }
    return MappingProxyType(table)

@dataclass(frozen=True)
class RegionStageProfile:
    neap_label: str               # label shown on the neap day
    has_musi: bool                # region distinguishes 무시 from 조금
    anchor_offset_days: int       # shifts the label cycle for the whole region
    baseline_flow: Mapping[str, int] = field(default_factory=lambda: _baseline(30))

# West coast names both neap days; elsewhere 무시 is folded into 조금.
WEST_PROFILE = RegionStageProfile(neap_label=MUSI, has_musi=True, anchor_offset_days=0,
                                  baseline_flow=_baseline(14))
SOUTH_PROFILE = RegionStageProfile(neap_label=JOGEUM, has_musi=False, anchor_offset_days=0)
EAST_PROFILE = RegionStageProfile(neap_label=JOGEUM, has_musi=False, anchor_offset_days=0)
JEJU_PROFILE = RegionStageProfile(neap_label=JOGEUM, has_musi=False, anchor_offset_days=0)

# Used when a stage is resolved without a region.
NATIONAL_PROFILE = RegionStageProfile(neap_label=JOGEUM, has_musi=True, anchor_offset_days=0)

PROFILE_BY_REGION: Mapping[RegionKey, RegionStageProfile] = MappingProxyType({
    RegionKey.WEST: WEST_PROFILE,
    RegionKey.SOUTH: SOUTH_PROFILE,
    RegionKey.EAST: EAST_PROFILE,
    RegionKey.JEJU: JEJU_PROFILE,
})

# Lunar-age bands (days since new moon) for the degraded fallback.
JOGEUM_AGE_BANDS: Tuple[Tuple[float, float], ...] = ((6.5, 8.5), (21.0, 23.0))
MUSI_AGE_BAND: Tuple[float, float] = (14.0, 16.0)
