from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request

from core.kst_time import now_kst
from features.common.models.geo_types import RegionKey
from features.stages.models.stage_types import StageResult, StageStrategy
from features.stages.services.stage_resolver import StageResolver

router = APIRouter(
    prefix="/stages",
    tags=["Stages"]
)

def get_resolver(request: Request) -> StageResolver:
    """Dependency to get the StageResolver instance."""
    return request.app.state.stage_resolver

@router.get(
    "",
    response_model=StageResult,
    summary="Get the tidal stage for a date",
    description="Calendar-anchor stage label (물때) for a KST date; other strategies "
                "need tide history and are served through the marine bundle"
)
async def get_stage(
    day: Optional[date] = Query(None, alias="date", description="KST calendar date, defaults to today"),
    region: Optional[RegionKey] = Query(None, description="Region profile to apply"),
    station: Optional[str] = Query(None, description="Station code for per-station day offset"),
    resolver: StageResolver = Depends(get_resolver)
) -> StageResult:
    """Get the stage label for a date."""
    return resolver.resolve(
        day or now_kst().date(),
        region=region,
        strategy=StageStrategy.CALENDAR_ANCHOR,
        station_code=station
    )
