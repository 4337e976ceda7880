"""Admin Cache router - handles /admin/cache/* endpoints"""
from fastapi import APIRouter, Depends

from ...services.fetch_service import RepositoryFetcher
from ..dependencies import get_fetcher
from ..models import SweepResponse

router = APIRouter()


@router.post("/sweep", response_model=SweepResponse)
async def sweep_cache(fetcher: RepositoryFetcher = Depends(get_fetcher)):
    """Remove expired cache entries (same as the client regaining focus)"""
    expired = await fetcher.check_cache_expiration()
    return SweepResponse(expired=expired, count=len(expired))
