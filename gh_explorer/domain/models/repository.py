"""
Repository Domain Models

Repository: a single search hit as consumed by the explorer.
RepositoryPage: one page of search results, items plus pass-through metadata.
"""

from dataclasses import dataclass, field
from typing import Any

from ...core.exceptions import InvalidResponseData


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def is_valid_item(item: Any, min_stars: int) -> bool:
    """
    Check whether a raw search item is displayable.

    Args:
        item: Raw repository object from the search API
        min_stars: Minimum star count

    Returns:
        True if the item has a non-empty full name, a numeric star count
        of at least min_stars, and is neither archived nor disabled
    """
    if not isinstance(item, dict):
        return False
    full_name = item.get("full_name")
    stars = item.get("stargazers_count")
    return (
        isinstance(full_name, str)
        and bool(full_name)
        and _is_number(stars)
        and stars >= min_stars
        and not item.get("archived")
        and not item.get("disabled")
    )


@dataclass
class Repository:
    """
    Repository domain model for a single search hit.

    Keeps the raw API object so the page can be re-serialised unchanged.
    """

    full_name: str
    stargazers_count: int
    forks_count: int = 0
    open_issues_count: int = 0
    watchers_count: int = 0
    archived: bool = False
    disabled: bool = False
    html_url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    language: str | None = None
    description: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "Repository":
        """
        Create Repository from a search API item.

        Args:
            item: Raw repository object

        Returns:
            New Repository instance
        """
        return cls(
            full_name=item["full_name"],
            stargazers_count=item["stargazers_count"],
            forks_count=item.get("forks_count") or 0,
            open_issues_count=item.get("open_issues_count") or 0,
            watchers_count=item.get("watchers_count") or 0,
            archived=bool(item.get("archived")),
            disabled=bool(item.get("disabled")),
            html_url=item.get("html_url"),
            created_at=item.get("created_at"),
            updated_at=item.get("updated_at"),
            language=item.get("language"),
            description=item.get("description"),
            raw=dict(item),
        )

    def display_description(self) -> str:
        return self.description or "No description available"

    def to_dict(self) -> dict[str, Any]:
        """Convert repository to dictionary format for API responses."""
        return {
            "full_name": self.full_name,
            "description": self.description,
            "html_url": self.html_url,
            "stargazers_count": self.stargazers_count,
            "forks_count": self.forks_count,
            "open_issues_count": self.open_issues_count,
            "watchers_count": self.watchers_count,
            "language": self.language,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "archived": self.archived,
            "disabled": self.disabled,
        }


@dataclass
class RepositoryPage:
    """
    One page of search results.

    items holds the raw repository objects in API order; every other
    top-level key of the response (total_count, incomplete_results, ...)
    is kept in metadata and passed through unchanged.
    """

    items: list[dict[str, Any]]
    metadata: dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.items)

    def is_empty(self) -> bool:
        return not self.items

    def repositories(self) -> list[Repository]:
        return [Repository.from_api(item) for item in self.items]

    def to_dict(self) -> dict[str, Any]:
        return {**self.metadata, "items": list(self.items)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RepositoryPage":
        metadata = {key: value for key, value in data.items() if key != "items"}
        return cls(items=list(data.get("items") or []), metadata=metadata)

    @classmethod
    def validate_and_filter(cls, data: Any, min_stars: int) -> "RepositoryPage":
        """
        Validate a search response body and drop undisplayable items.

        Args:
            data: Decoded JSON body
            min_stars: Minimum star count

        Returns:
            RepositoryPage holding only valid items

        Raises:
            InvalidResponseData: If there is no items list, or nothing survives filtering
        """
        if not isinstance(data, dict) or not isinstance(data.get("items"), list):
            raise InvalidResponseData()

        page = cls.from_dict(data)
        total = len(page.items)
        page.items = [item for item in page.items if is_valid_item(item, min_stars)]

        if not page.items:
            raise InvalidResponseData(
                "No repositories found.", {"received": total, "min_stars": min_stars}
            )
        return page
