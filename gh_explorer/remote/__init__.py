"""Remote GitHub API access"""

from .github_client import ApiResponse, GitHubClient, build_search_params

__all__ = [
    "ApiResponse",
    "GitHubClient",
    "build_search_params",
]
