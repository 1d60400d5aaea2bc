from typing import List
from fastapi import APIRouter, Depends, Query, Request

from features.stations.models.station_types import GeoJSONResponse, NearestStation, Station
from features.stations.services.station_service import StationService

router = APIRouter(
    prefix="/stations",
    tags=["Stations"]
)

def get_service(request: Request) -> StationService:
    """Dependency to get the StationService instance."""
    return request.app.state.station_service

@router.get(
    "",
    response_model=List[Station],
    summary="Get all tide stations",
    description="Returns the static tide station table with each station's region"
)
async def get_all_stations(
    service: StationService = Depends(get_service)
) -> List[Station]:
    """Get all tide stations."""
    return list(service.stations)

@router.get(
    "/geojson",
    response_model=GeoJSONResponse,
    summary="Get all stations in GeoJSON format",
    description="Returns all tide stations in GeoJSON format for mapping"
)
async def get_stations_geojson(
    service: StationService = Depends(get_service)
) -> GeoJSONResponse:
    """Get all stations in GeoJSON format."""
    return service.get_stations_geojson()

@router.get(
    "/nearest",
    response_model=NearestStation,
    summary="Get the nearest tide station",
    description="Returns the nearest station, preferring stations in the coordinate's own region"
)
async def get_nearest_station(
    lat: float = Query(..., description="Latitude (WGS84)"),
    lon: float = Query(..., description="Longitude (WGS84)"),
    service: StationService = Depends(get_service)
) -> NearestStation:
    """Get the nearest station to a coordinate."""
    return service.find_nearest(lat, lon)
