from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, Any
from datetime import date

class Settings(BaseSettings):
    """Application settings."""

    # KHOA (Korea Hydrographic and Oceanographic Agency) open API
    khoa_base_url: str = "https://www.khoa.go.kr"
    khoa_api_key: str = ""
    khoa_tide_extremes_path: str = "/api/oceangrid/tideObsPreTab/search.do"
    khoa_water_temp_path: str = "/api/oceangrid/waterTempObs/search.do"
    khoa_timeout: float = 10.0

    # Open-Meteo (no key required)
    open_meteo_marine_url: str = "https://marine-api.open-meteo.com/v1/marine"
    open_meteo_forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    open_meteo_timeout: float = 8.0

    # Station resolution
    station_warn_distance_km: float = 120.0

    # Stage / amplitude / forecast
    rolling_window_days: int = 15
    forecast_days: int = 7
    default_stage_strategy: str = "calendar_anchor"
    national_label_anchor: date = date(2025, 10, 29)  # index 0 of the 29-day sequence ("1물")
    station_stage_offsets: Dict[str, int] = {}  # per-station day correction for label drift

    cache: Dict[str, Any] = {
        "enabled": True,
        "backend": "memory",
        "prefix": "marine"
    }

    model_config = SettingsConfigDict(
        env_prefix="marine_",
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
