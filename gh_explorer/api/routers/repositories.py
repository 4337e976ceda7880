"""Repositories router - handles /repositories/* and /languages endpoints"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from ...domain.models import Repository
from ...services.fetch_service import RepositoryFetcher
from ..dependencies import get_fetcher
from ..models import (
    LanguageRequest,
    LanguageSelectResponse,
    LanguagesResponse,
    PrefetchResponse,
    RepositoryResponse,
)

router = APIRouter()

FETCH_IN_PROGRESS = {
    "error": "FetchInProgress",
    "message": "A fetch is already in progress",
    "details": {},
}


def _repository_response(
    repository: Repository, fetcher: RepositoryFetcher
) -> RepositoryResponse:
    return RepositoryResponse(**repository.to_dict(), cached_languages=fetcher.cache.size)


@router.get("/repositories/random", response_model=RepositoryResponse)
async def random_repository(
    language: str = Query(..., min_length=1, max_length=50),
    fetcher: RepositoryFetcher = Depends(get_fetcher),
):
    """Pick a random top-starred repository for a language"""
    repository = await fetcher.fetch_random_repository(language)
    if repository is None:
        return JSONResponse(FETCH_IN_PROGRESS, status_code=status.HTTP_409_CONFLICT)
    return _repository_response(repository, fetcher)


@router.post("/repositories/refresh", response_model=RepositoryResponse)
async def refresh_repository(fetcher: RepositoryFetcher = Depends(get_fetcher)):
    """Pick another repository for the current language"""
    if not fetcher.current_language:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No language selected")
    repository = await fetcher.refresh()
    if repository is None:
        return JSONResponse(FETCH_IN_PROGRESS, status_code=status.HTTP_409_CONFLICT)
    return _repository_response(repository, fetcher)


@router.post("/repositories/prefetch", response_model=PrefetchResponse)
async def prefetch(body: LanguageRequest, fetcher: RepositoryFetcher = Depends(get_fetcher)):
    """Warm the cache for a language"""
    success = await fetcher.prefetch_repositories(body.language)
    return PrefetchResponse(language=body.language, success=success)


@router.put("/repositories/language", response_model=LanguageSelectResponse)
async def select_language(
    body: LanguageRequest, fetcher: RepositoryFetcher = Depends(get_fetcher)
):
    """Switch the current language (prefetches in the background when needed)"""
    task = await fetcher.select_language(body.language)
    return LanguageSelectResponse(language=body.language, prefetching=task is not None)


@router.get("/languages", response_model=LanguagesResponse)
def list_languages(fetcher: RepositoryFetcher = Depends(get_fetcher)):
    """Supported languages"""
    return LanguagesResponse(
        languages=fetcher.settings.languages, current=fetcher.current_language or None
    )
