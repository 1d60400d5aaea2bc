from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

class AmplitudeKind(str, Enum):
    EXPLICIT = "explicit"       # already an amplitude factor, 0..1
    TIDE_RANGE = "tide_range"   # normalized tide range, 0..1
    LABEL = "label"             # named preset

class AmplitudeInput(BaseModel):
    kind: AmplitudeKind
    value: Optional[float] = None
    label: Optional[str] = Field(None, description="무시, 조금, 일반 or 최대")

    @classmethod
    def explicit(cls, value: float) -> "AmplitudeInput":
        return cls(kind=AmplitudeKind.EXPLICIT, value=value)

    @classmethod
    def tide_range(cls, value: float) -> "AmplitudeInput":
        return cls(kind=AmplitudeKind.TIDE_RANGE, value=value)

    @classmethod
    def preset(cls, label: str) -> "AmplitudeInput":
        return cls(kind=AmplitudeKind.LABEL, label=label)

class FlowEstimate(BaseModel):
    region_key: str = Field(..., description="Flow table key the request resolved to")
    stage: str
    stage_number: Optional[int] = None
    amplitude: float
    flow_pct: int = Field(..., ge=0, le=100)
    special: bool = Field(False, description="Regional override used instead of the model")
