from typing import List, Literal
from pydantic import BaseModel, ConfigDict, Field

from features.common.models.geo_types import RegionKey

class Station(BaseModel):
    """Tide observation station, labelled with its region once at load."""
    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="KHOA observation code, e.g. DT_0062")
    name: str
    lat: float
    lon: float
    region: RegionKey

class NearestStation(BaseModel):
    """Station Resolver result."""
    station: Station
    distance_km: float
    query_region: RegionKey
    region_fallback: bool = Field(False, description="True when no station shares the query region")
    far: bool = Field(False, description="True when the station exceeds the distance warning threshold")

class GeoJSONFeature(BaseModel):
    """GeoJSON Feature"""
    type: Literal["Feature"] = "Feature"
    geometry: dict = Field(..., description="GeoJSON geometry")
    properties: dict = Field(..., description="Feature properties")

class GeoJSONResponse(BaseModel):
    """GeoJSON FeatureCollection response"""
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[GeoJSONFeature] = Field(..., description="List of GeoJSON features")

class RegionClassification(BaseModel):
    lat: float
    lon: float
    region: RegionKey
    name: str
