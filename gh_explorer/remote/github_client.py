# gh_explorer/remote/github_client.py - Async GitHub REST client
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from ..core.exceptions import InvalidResponseData, NetworkError
from ..core.logging_config import get_logger

logger = get_logger(__name__)

GITHUB_ACCEPT = "application/vnd.github.v3+json"
USER_AGENT = "gh-explorer/0.1"


@dataclass
class ApiResponse:
    """Status, lower-cased headers and decoded JSON body of one GitHub call"""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def not_modified(self) -> bool:
        return self.status == 304

    @property
    def etag(self) -> str | None:
        return self.headers.get("etag")


def build_search_params(language: str, min_stars: int, page_size: int) -> dict[str, str]:
    """Query string for the top-starred repositories of a language"""
    return {
        "q": f"language:{language} stars:>={min_stars}",
        "sort": "stars",
        "order": "desc",
        "per_page": str(page_size),
    }


class GitHubClient:
    """
    Async GitHub API client (one attempt per call).

    Timeouts, retries and rate-limit bookkeeping live in the service layer;
    this client only performs the HTTP exchange. Cancelling the awaiting
    task aborts the in-flight request.
    """

    def __init__(
        self,
        search_url: str,
        rate_limit_url: str,
        session: aiohttp.ClientSession | None = None,
        user_agent: str = USER_AGENT,
    ):
        self.search_url = search_url
        self.rate_limit_url = rate_limit_url
        self.user_agent = user_agent
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        self._get_session()
        return self

    async def __aexit__(self, *exc):
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Accept": GITHUB_ACCEPT, "User-Agent": self.user_agent}
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def get(
        self, url: str, params: dict[str, str] | None = None, headers: dict[str, str] | None = None
    ) -> ApiResponse:
        """GET url and decode a JSON body on 2xx"""
        session = self._get_session()
        request_headers = {"Accept": GITHUB_ACCEPT, **(headers or {})}
        try:
            async with session.get(url, params=params, headers=request_headers) as resp:
                response_headers = {key.lower(): value for key, value in resp.headers.items()}
                body = None
                if 200 <= resp.status < 300:
                    try:
                        body = await resp.json(content_type=None)
                    except ValueError as e:
                        raise InvalidResponseData(
                            "Response body is not valid JSON", {"url": url}
                        ) from e
                logger.debug(f"GET {url} -> {resp.status}")
                return ApiResponse(status=resp.status, headers=response_headers, body=body)
        except aiohttp.ClientError as e:
            raise NetworkError(f"Request to {url} failed: {e}", {"url": url}) from e

    async def search_repositories(
        self, params: dict[str, str], etag: str | None = None
    ) -> ApiResponse:
        """Search repositories, revalidating with If-None-Match"""
        return await self.get(self.search_url, params=params, headers={"If-None-Match": etag or ""})

    async def fetch_rate_limit(self) -> ApiResponse:
        """Query the quota endpoint ({"rate": {limit, remaining, reset}})"""
        return await self.get(self.rate_limit_url)
