"""Stats router - handles /stats/* endpoints"""
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ... import __version__
from ...services.fetch_service import RepositoryFetcher
from ..dependencies import get_fetcher
from ..models import HealthResponse, StatusResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check():
    """Health check endpoint"""
    return HealthResponse(
        status="healthy", timestamp=datetime.now().isoformat(), version=__version__
    )


@router.get("/cache")
def get_cache_stats(fetcher: RepositoryFetcher = Depends(get_fetcher)):
    """Get memory cache statistics"""
    return JSONResponse(fetcher.cache.stats())


@router.get("/status", response_model=StatusResponse)
def get_status(fetcher: RepositoryFetcher = Depends(get_fetcher)):
    """User-visible state (loading, warning, error, current repository)"""
    return StatusResponse(**fetcher.status.snapshot())
