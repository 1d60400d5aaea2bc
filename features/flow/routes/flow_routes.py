from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from features.common.exceptions.marine_exceptions import UnsupportedNotationError
from features.flow.models.flow_types import AmplitudeInput, FlowEstimate
from features.flow.services.flow_engine import FlowEngine

router = APIRouter(
    prefix="/flow",
    tags=["Flow"]
)

def get_engine(request: Request) -> FlowEngine:
    """Dependency to get the FlowEngine instance."""
    return request.app.state.flow_engine

@router.get(
    "",
    response_model=FlowEstimate,
    summary="Predict current flow percentage",
    description="Returns the 0-100 flow estimate for a region, stage label and amplitude"
)
async def get_flow(
    stage: str = Query(..., description="1물..15물, 조금 or 무시"),
    region: str = Query("전국", description="Region key, RegionKey name, or station name"),
    amp: Optional[float] = Query(None, ge=0, le=1, description="Explicit amplitude factor 0..1"),
    tide_range: Optional[float] = Query(None, ge=0, le=1, description="Normalized tide range 0..1"),
    label: Optional[str] = Query(None, description="Amplitude preset: 무시, 조금, 일반, 최대"),
    engine: FlowEngine = Depends(get_engine)
) -> FlowEstimate:
    """Get a flow estimate."""
    amplitude = None
    if label is not None:
        amplitude = AmplitudeInput.preset(label)
    elif tide_range is not None:
        amplitude = AmplitudeInput.tide_range(tide_range)
    elif amp is not None:
        amplitude = AmplitudeInput.explicit(amp)

    try:
        return engine.estimate(region, stage, amplitude)
    except UnsupportedNotationError as e:
        raise HTTPException(status_code=400, detail=str(e))
