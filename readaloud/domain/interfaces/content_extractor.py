"""Content extractor interface."""

from typing import Protocol, runtime_checkable

from ..entities.article import CandidateLinks, ExtractedContent


@runtime_checkable
class ContentExtractor(Protocol):
    """Protocol for extracting readable text and navigation links from a page."""

    async def extract_readable_content(self, page_id: str) -> ExtractedContent:
        """Extract the readable content of a page, split into chunks.

        Args:
            page_id: The browser page identifier.

        Raises:
            ExtractionFailed: If the page content cannot be extracted.
        """
        ...

    async def extract_candidate_links(self, page_id: str) -> CandidateLinks:
        """Extract the candidate navigation links of a page.

        Args:
            page_id: The browser page identifier.

        Raises:
            ExtractionFailed: If the links cannot be extracted.
        """
        ...
