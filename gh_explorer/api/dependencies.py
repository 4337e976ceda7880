"""Shared router dependencies"""
from fastapi import HTTPException, Request, status

from ..services.fetch_service import RepositoryFetcher


def get_fetcher(request: Request) -> RepositoryFetcher:
    """RepositoryFetcher attached to the app at startup"""
    fetcher = getattr(request.app.state, "fetcher", None)
    if fetcher is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Fetcher not initialized"
        )
    return fetcher
