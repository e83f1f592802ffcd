"""
Parsed-markup traversal behind a small capability interface.

The extractor only needs element selection, removal, text extraction and
attribute lookup, so any parser that offers those can stand in for
BeautifulSoup.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from bs4 import BeautifulSoup
from bs4.element import Tag


@runtime_checkable
class DocumentNode(Protocol):
    """One element of a parsed document."""

    @property
    def tag_name(self) -> str:
        ...

    def text(self) -> str:
        """Whitespace-collapsed, trimmed text content."""
        ...

    def raw_text(self) -> str:
        """Text content exactly as authored, inner whitespace included."""
        ...

    def attr(self, name: str) -> str | None:
        """Attribute value exactly as authored, or None when absent."""
        ...


@runtime_checkable
class TraversableDocument(Protocol):
    """A parsed document supporting CSS selection and pruning."""

    def select(self, selector: str) -> list[DocumentNode]:
        ...

    def select_first(self, selector: str) -> DocumentNode | None:
        ...

    def remove(self, selector: str) -> int:
        """Drop every element matching selector; returns the count removed."""
        ...

    def text(self) -> str:
        ...


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


class SoupNode:
    """DocumentNode backed by a BeautifulSoup Tag."""

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag):
        self._tag = tag

    @property
    def tag_name(self) -> str:
        return (self._tag.name or "").lower()

    def text(self) -> str:
        return collapse_whitespace(self._tag.get_text(separator=" "))

    def raw_text(self) -> str:
        return self._tag.get_text()

    def attr(self, name: str) -> str | None:
        value = self._tag.get(name)
        if value is None:
            return None
        # Multi-valued attributes (class, rel) come back as lists
        if isinstance(value, list):
            return " ".join(value)
        return str(value)


class SoupDocument:
    """TraversableDocument backed by BeautifulSoup with the lxml parser."""

    def __init__(self, markup: str, parser: str = "lxml"):
        self._soup = BeautifulSoup(markup or "", parser)

    def select(self, selector: str) -> list[DocumentNode]:
        return [SoupNode(tag) for tag in self._soup.select(selector)]

    def select_first(self, selector: str) -> DocumentNode | None:
        tag = self._soup.select_one(selector)
        return SoupNode(tag) if tag is not None else None

    def remove(self, selector: str) -> int:
        tags = self._soup.select(selector)
        for tag in tags:
            # Nested matches go away with their ancestor
            if not tag.decomposed:
                tag.decompose()
        return len(tags)

    def text(self) -> str:
        return collapse_whitespace(self._soup.get_text(separator=" "))
