"""Rate limit router - handles /rate-limit"""
from fastapi import APIRouter, Depends

from ...services.fetch_service import RepositoryFetcher
from ..dependencies import get_fetcher
from ..models import RateLimitResponse

router = APIRouter()


@router.get("/rate-limit", response_model=RateLimitResponse)
async def get_rate_limit(fetcher: RepositoryFetcher = Depends(get_fetcher)):
    """Current quota (queries GitHub at most once per check threshold)"""
    state = await fetcher.check_rate_limit()
    return RateLimitResponse(
        **state.to_dict(),
        exhausted=state.is_exhausted,
        fetch_enabled=fetcher.status.fetch_allowed,
    )
