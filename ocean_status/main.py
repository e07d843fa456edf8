"""FastAPI application setup for the ocean status service."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from utils.logging_utils import setup_logging

from .api import router as api_router
from .config import settings

setup_logging(level=settings.log_level, job_name="ocean_status")

app = FastAPI(title="Ocean Status")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["GET"],
    allow_headers=["*"],
    expose_headers=["X-Cache"],
)

# API routes
app.include_router(api_router, prefix="/v1")
