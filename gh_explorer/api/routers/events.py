"""Events router - client lifecycle notifications (/events/*)"""
from fastapi import APIRouter, Depends

from ...services.fetch_service import RepositoryFetcher
from ..dependencies import get_fetcher
from ..models import ConnectivityEvent, StatusResponse, VisibilityEvent

router = APIRouter()


@router.post("/visibility", response_model=StatusResponse)
async def visibility_changed(
    event: VisibilityEvent, fetcher: RepositoryFetcher = Depends(get_fetcher)
):
    """Client became visible: refresh quota state"""
    await fetcher.handle_visibility_change(event.visible)
    return StatusResponse(**fetcher.status.snapshot())


@router.post("/connectivity", response_model=StatusResponse)
async def connectivity_changed(
    event: ConnectivityEvent, fetcher: RepositoryFetcher = Depends(get_fetcher)
):
    """Client went online/offline"""
    fetcher.handle_connectivity_change(event.online)
    return StatusResponse(**fetcher.status.snapshot())
