"""Next page resolver interface."""

from typing import Protocol, runtime_checkable

from ..entities.article import NextPageRequest, NextPageResolution


@runtime_checkable
class NextPageResolver(Protocol):

    async def resolve_next_page(self, request: NextPageRequest) -> NextPageResolution:
        """Ask the remote service which candidate link leads to the next page.

        Raises:
            ServiceUnavailable: If the service cannot be reached or answers
                with a non-success status.
        """
        ...
