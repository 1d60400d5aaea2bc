from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime

from core.config import settings
from core.kst_time import KST
from core.logging_config import setup_logging

# Feature routes
from features.marine.routes.marine_routes import router as marine_router
from features.stations.routes.station_routes import router as station_router
from features.tides.routes.tide_routes import router as tide_router
from features.stages.routes.stage_routes import router as stage_router
from features.flow.routes.flow_routes import router as flow_router
from features.regions.routes.region_routes import router as region_router

# Services and clients
from features.regions.services.region_classifier import RegionClassifier
from features.stations.services.station_service import StationService
from features.tides.services.khoa_tide_client import KhoaTideClient
from features.sst.services.sst_service import KhoaSSTClient, OpenMeteoSSTClient, SSTService
from features.stages.services.amplitude_normalizer import AmplitudeNormalizer
from features.stages.services.moon_phase_client import MoonPhaseClient
from features.stages.services.stage_resolver import StageResolver
from features.flow.services.flow_engine import FlowEngine
from features.marine.services.bundle_service import MarineBundleService

setup_logging()
logger = logging.getLogger(__name__)

async def close_clients(app: FastAPI):
    """Close every upstream session held on app.state."""
    clients = [getattr(app.state, "tide_client", None), getattr(app.state, "moon_client", None)]
    sst_service = getattr(app.state, "sst_service", None)
    if sst_service:
        clients += [sst_service.primary, sst_service.secondary]
    for client in clients:
        if client:
            await client.close()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        logger.info("🚀 Starting Marine Conditions API...")
        if not settings.khoa_api_key:
            logger.warning("⚠️ marine_khoa_api_key is not set; KHOA tides and SST will report unavailable")

        # Read-only resolvers, shared by every request
        classifier = RegionClassifier()
        station_service = StationService(classifier)
        stage_resolver = StageResolver()
        flow_engine = FlowEngine()

        # Upstream clients
        tide_client = KhoaTideClient()
        sst_service = SSTService(primary=KhoaSSTClient(), secondary=OpenMeteoSSTClient())
        moon_client = MoonPhaseClient()

        app.state.region_classifier = classifier
        app.state.station_service = station_service
        app.state.stage_resolver = stage_resolver
        app.state.flow_engine = flow_engine
        app.state.tide_client = tide_client
        app.state.sst_service = sst_service
        app.state.moon_client = moon_client
        app.state.bundle_service = MarineBundleService(
            station_service=station_service,
            classifier=classifier,
            tide_client=tide_client,
            sst_service=sst_service,
            stage_resolver=stage_resolver,
            flow_engine=flow_engine,
            normalizer=AmplitudeNormalizer(settings.rolling_window_days),
            moon_client=moon_client
        )

        logger.info("✨ API startup complete - ready to serve requests")
        yield

    except Exception as e:
        logger.error(f"❌ Startup error: {str(e)}")
        raise
    finally:
        logger.info("🔄 Shutting down API...")
        await close_clients(app)
        logger.info("👋 API shutdown complete")

app = FastAPI(
    title="Marine Conditions API",
    description="Tide stations, tidal stage (물때), current flow and sea temperature for Korean coastal waters",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in (marine_router, station_router, tide_router, stage_router, flow_router, region_router):
    app.include_router(router)

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "time": datetime.now(KST).isoformat(),
        "khoa_configured": bool(settings.khoa_api_key)
    }

if __name__ == "__main__":
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 5010))

    uvicorn.run("main:app", host=host, port=port, reload=os.getenv("RELOAD", "0") == "1", log_level="info")
