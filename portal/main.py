"""
Job Portal - Main Application

FastAPI backend with:
- MongoDB for users and jobs
- JWT access/refresh tokens with refresh-token rotation
- Cloudinary for profile and cover images

Run: uvicorn portal.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from portal.api.routes import api_router
from portal.core.config import get_settings
from portal.core.errors import register_exception_handlers
from portal.core.logging import setup_logging
from portal.db.mongodb import init_mongo_indexes, test_mongo_connection

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Configure logging and MongoDB indexes on startup."""
    setup_logging()
    logger.info("Application starting up")
    try:
        init_mongo_indexes()
    except Exception:
        logger.warning("MongoDB index initialization failed", exc_info=True)
    yield
    logger.info("Application shutting down")


# Create FastAPI app
app = FastAPI(
    title="Job Portal API",
    description="""
    Backend for a job and internship portal.

    ## Features
    - **Authentication**: register, login, logout, refresh-token rotation, password change
    - **Profile**: account details, profile and cover images, qualifications
    - **Jobs**: browse postings, apply, list applied jobs
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Cookies carry the tokens, so credentials are allowed
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=settings.cors_origin_list != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include API routes
app.include_router(api_router, prefix="/api/v1")


@app.get("/health", tags=["Health"])
def health_check():
    """MongoDB connectivity check; 503 when the database is unreachable."""
    mongo_ok = test_mongo_connection()
    payload = {
        "status": "healthy" if mongo_ok else "degraded",
        "mongodb": "connected" if mongo_ok else "disconnected",
    }
    if not mongo_ok:
        return JSONResponse(status_code=503, content=payload)
    return payload
