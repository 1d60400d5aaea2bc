from fastapi import APIRouter, Depends, Query, Request

from features.regions.services.region_classifier import RegionClassifier
from features.stations.models.station_types import RegionClassification

router = APIRouter(
    prefix="/regions",
    tags=["Regions"]
)

def get_classifier(request: Request) -> RegionClassifier:
    """Dependency to get the RegionClassifier instance."""
    return request.app.state.region_classifier

@router.get(
    "/classify",
    response_model=RegionClassification,
    summary="Classify a coordinate",
    description="Returns the coastal region (WEST, SOUTH, EAST, JEJU) for a coordinate"
)
async def classify_point(
    lat: float = Query(..., description="Latitude (WGS84)"),
    lon: float = Query(..., description="Longitude (WGS84)"),
    classifier: RegionClassifier = Depends(get_classifier)
) -> RegionClassification:
    """Classify a coordinate into a region."""
    region = classifier.classify(lat, lon)
    return RegionClassification(lat=lat, lon=lon, region=region, name=region.korean_name)
