from datetime import date
from typing import Optional, Union
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from core.kst_time import now_kst, parse_yyyymmdd
from features.common.exceptions.marine_exceptions import UpstreamUnavailableError
from features.stations.services.station_service import StationService
from features.tides.models.tide_types import DayExtremes, MultiDayExtremes
from features.tides.services.khoa_tide_client import KhoaTideClient

router = APIRouter(
    prefix="/tides",
    tags=["Tides"]
)

def get_client(request: Request) -> KhoaTideClient:
    """Dependency to get the KhoaTideClient instance."""
    return request.app.state.tide_client

def get_station_service(request: Request) -> StationService:
    """Dependency to get the StationService instance."""
    return request.app.state.station_service

@router.get(
    "/stations/{station_code}/extremes",
    response_model=Union[DayExtremes, MultiDayExtremes],
    summary="Get high/low tides for a station",
    description="Returns one day's extremes, or with days > 1 the multi-day series with daily ranges"
)
async def get_station_extremes(
    station_code: str,
    day: Optional[str] = Query(None, alias="date", pattern=r"^\d{8}$", description="KST date YYYYMMDD"),
    days: int = Query(1, ge=1, le=31, description="Number of consecutive days"),
    client: KhoaTideClient = Depends(get_client),
    stations: StationService = Depends(get_station_service)
) -> Union[DayExtremes, MultiDayExtremes]:
    """Get tide extremes for a station."""
    if stations.get_station(station_code) is None:
        raise HTTPException(status_code=404, detail=f"Station {station_code} not found")

    try:
        start: date = parse_yyyymmdd(day) if day else now_kst().date()
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid date {day}")

    try:
        if days == 1:
            return await client.fetch_day(station_code, start)
        return await client.fetch_days(station_code, start, days)
    except UpstreamUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
