"""
ChurchBuddy Backend - Unified Application Entry Point
Mounts the storage API and the slide sync service under a single FastAPI application
"""

from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from database import init_database
from services.slide_sync.app import app as slide_sync_app
from services.storage.app import app as storage_app
from shared.utils import config, setup_logging

logger = setup_logging("churchbuddy-backend")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_database()
    logger.info("ChurchBuddy backend ready")
    yield


app = FastAPI(
    title="ChurchBuddy Backend API",
    description="""
    Unified API for the ChurchBuddy worship presentation editor.

    Storage routes live under /api; slide generation helpers under /api/v1/slide-sync.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Health",
            "description": "Service health and status endpoints",
        },
        {
            "name": "Storage",
            "description": "Songs, sermons, asset decks, flows, slides and content - mounted at /api",
        },
        {
            "name": "Slide Sync",
            "description": "Normalise, segment and preview slides - mounted at /api/v1/slide-sync",
        },
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes to exclude (internal FastAPI docs routes)
EXCLUDED_PATHS = {"/openapi.json", "/docs", "/docs/oauth2-redirect", "/redoc"}

MOUNTED_SERVICES = [
    (storage_app, "/api", "Storage", "storage"),
    (slide_sync_app, "/api/v1/slide-sync", "Slide Sync", "slide_sync"),
]

for service_app, prefix, tag, name_prefix in MOUNTED_SERVICES:
    for route in service_app.routes:
        if hasattr(route, "path") and hasattr(route, "endpoint"):
            # Skip internal documentation routes
            if route.path in EXCLUDED_PATHS:
                continue
            route_kwargs = {
                "path": f"{prefix}{route.path}",
                "endpoint": route.endpoint,
                "methods": route.methods,
                "tags": [tag],
            }
            if hasattr(route, "name"):
                route_kwargs["name"] = f"{name_prefix}_{route.name}"
            if hasattr(route, "response_model"):
                route_kwargs["response_model"] = route.response_model
            app.add_api_route(**route_kwargs)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint with service information and API navigation"""
    return {
        "service": "ChurchBuddy Backend API",
        "version": "1.0.0",
        "services": {
            "storage": {
                "base_url": "/api",
                "health": "/api/health",
            },
            "slide_sync": {
                "base_url": "/api/v1/slide-sync",
                "health": "/api/v1/slide-sync/health",
            },
        },
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json",
        },
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for all services"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "services": {
            "api_gateway": "operational",
            "storage": "operational",
            "slide_sync": "operational",
        },
    }


if __name__ == "__main__":
    import uvicorn

    port = config.get("port", 5001)
    logger.info(f"Starting ChurchBuddy Backend on http://0.0.0.0:{port}")
    uvicorn.run("app:app", host="0.0.0.0", port=port, reload=config.get("debug", False), log_level="info")
