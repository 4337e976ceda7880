# gh_explorer/api/models.py - Pydantic models for request/response validation
from typing import Any

from pydantic import BaseModel, Field


class LanguageRequest(BaseModel):
    """Request body naming a language"""

    language: str = Field(..., min_length=1, max_length=50, description="Language label")

    class Config:
        json_schema_extra = {"example": {"language": "Python"}}


class VisibilityEvent(BaseModel):
    """Client returned to / left the foreground"""

    visible: bool


class ConnectivityEvent(BaseModel):
    """Client went online / offline"""

    online: bool


class RepositoryResponse(BaseModel):
    """Randomly selected repository"""

    full_name: str
    description: str | None = None
    html_url: str | None = None
    stargazers_count: int
    forks_count: int = 0
    open_issues_count: int = 0
    watchers_count: int = 0
    language: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    archived: bool = False
    disabled: bool = False
    cached_languages: int = 0


class PrefetchResponse(BaseModel):
    language: str
    success: bool


class LanguageSelectResponse(BaseModel):
    language: str
    prefetching: bool


class LanguagesResponse(BaseModel):
    languages: list[str]
    current: str | None = None


class RateLimitResponse(BaseModel):
    """Quota snapshot (limit/remaining are null before the first observation)"""

    limit: int | None = None
    remaining: int | None = None
    reset: int
    exhausted: bool
    fetch_enabled: bool


class SweepResponse(BaseModel):
    expired: list[str]
    count: int


class StatusResponse(BaseModel):
    """User-visible state"""

    loading: bool
    loading_message: str | None = None
    warning: str | None = None
    error: str | None = None
    fetch_enabled: bool
    controls_enabled: bool
    online: bool
    rate_limited: bool
    repository: dict[str, Any] | None = None


class HealthResponse(BaseModel):
    """Health check response model"""

    status: str
    timestamp: str
    version: str | None = None


class ErrorResponse(BaseModel):
    """Error response model"""

    error: str
    message: str
    details: dict[str, Any] | None = None
