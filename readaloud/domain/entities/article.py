"""Article and page-link entities exchanged with the extraction and next-page collaborators."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting both snake_case and camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ArticleMeta(CamelModel):
    """Descriptive fields of the article being read.

    Only ``source_page_id`` and ``source_url`` matter to the session engine;
    they gate whether a continuation onto the next page is still valid.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    title: str = ""
    source_page_id: Optional[str] = None
    source_url: Optional[str] = None
    excerpt: Optional[str] = None
    simplified_content: Optional[str] = None
    length: Optional[int] = None


class ExtractedContent(CamelModel):
    """Readable content extracted from a page, already split into chunks."""

    title: Optional[str] = None
    text_chunks: list[str] = Field(default_factory=list)
    text_content: Optional[str] = None
    excerpt: Optional[str] = None
    simplified_content: Optional[str] = None
    source_url: Optional[str] = None
    length: Optional[int] = None


class CandidateLink(CamelModel):
    """A navigation link found on the page."""

    href: str
    text: str = ""


class CandidateLinks(CamelModel):
    """Candidate navigation links for a page, with the page's own identity."""

    current_url: str
    current_title: str = ""
    links: list[CandidateLink] = Field(default_factory=list)


class NextPageRequest(CamelModel):
    """Payload sent to the remote next-page resolution service."""

    current_url: str
    current_title: str = ""
    links: list[CandidateLink] = Field(default_factory=list)


class NextPageResolution(CamelModel):
    """Decision returned by the remote next-page resolution service."""

    success: bool = True
    next_link_found: bool = False
    next_link_url: Optional[str] = None
    next_link_text: Optional[str] = None
    reasoning: Optional[str] = None
