"""PickupForge API: FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pickup_api import config
from pickup_api.routes import analysis, coil, cores, response, transformer

logging.basicConfig(level=config.LOG_LEVEL)

app = FastAPI(
    title="PickupForge API",
    description="Magnetic pickup design calculator",
    version="0.1.0",
)

# CORS: configured frontend plus localhost
app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.FRONTEND_URL] if config.FRONTEND_URL else [],
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register route modules
app.include_router(coil.router, prefix="/api", tags=["Coil"])
app.include_router(response.router, prefix="/api", tags=["Response"])
app.include_router(transformer.router, prefix="/api", tags=["Transformer"])
app.include_router(analysis.router, prefix="/api", tags=["Analysis"])
app.include_router(cores.router, prefix="/api", tags=["Library"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "pickupforge-api"}
