"""Page identity and navigation interface."""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class PageNavigator(Protocol):
    """Protocol for looking up and navigating browser pages."""

    async def get_page_url(self, page_id: str) -> Optional[str]:
        """Return the URL the page currently shows, or None if the page is gone."""
        ...

    async def navigate(self, page_id: str, url: str) -> None:
        """Point the page at a new URL."""
        ...
