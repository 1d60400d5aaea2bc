from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from features.common.exceptions.marine_exceptions import MissingCoordinatesError
from features.common.models.geo_types import RegionMode
from features.marine.models.bundle_types import MarineBundle
from features.marine.services.bundle_service import MarineBundleService
from features.stages.models.stage_types import StageStrategy

router = APIRouter(
    prefix="/marine",
    tags=["Marine"]
)

def get_service(request: Request) -> MarineBundleService:
    """Dependency to get the MarineBundleService instance."""
    return request.app.state.bundle_service

@router.get(
    "/bundle",
    response_model=MarineBundle,
    summary="Get marine conditions for a point",
    description="Returns nearest station, today's tide extremes, tidal stage, predicted flow, "
                "sea-surface temperature and a 7-day stage/flow forecast"
)
async def get_marine_bundle(
    lat: Optional[float] = Query(None, description="Latitude (WGS84)"),
    lon: Optional[float] = Query(None, description="Longitude (WGS84)"),
    region: RegionMode = Query(RegionMode.AUTO, description="AUTO or a fixed region for this request"),
    strategy: Optional[StageStrategy] = Query(None, description="Stage strategy"),
    service: MarineBundleService = Depends(get_service)
) -> MarineBundle:
    """Get the marine bundle for a coordinate."""
    try:
        return await service.build_bundle(
            lat,
            lon,
            region_override=region.as_override(),
            strategy=strategy
        )
    except MissingCoordinatesError as e:
        raise HTTPException(status_code=422, detail=str(e))
