"""
Content Extractor - Turns raw markup into normalized PageSignals.

Flow:
1. Strip boilerplate (script, style, noscript, nav, header, footer, aside)
2. Read title and meta fields (missing -> empty string)
3. Enumerate headings, images and links over what remains
4. Select the primary content region, first candidate wins
5. Collapse whitespace into body text

Boilerplate is never counted: a logo H1 in <header> or menu links in <nav>
do not reach the analyzers.

Extraction never raises on markup: empty, non-HTML or broken input degrades
to a record with empty fields.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable
from urllib.parse import urljoin, urlparse

import structlog

from pageaudit.core.errors import UrlResolutionFailure
from pageaudit.engines.base import Heading, ImageRef, LinkRef, PageSignals
from pageaudit.engines.extractor.document import SoupDocument, TraversableDocument

logger = structlog.get_logger(__name__)


NON_CONTENT_SELECTORS = ("script", "style", "noscript", "nav", "header", "footer", "aside")
CONTENT_CANDIDATES = ("main", "article", ".content", "#content", ".post", ".entry")
HEADING_SELECTOR = "h1, h2, h3, h4, h5, h6"


# ─────────────────────────────────────────────
# URL Utilities
# ─────────────────────────────────────────────

class URLResolver:
    """Resolves hrefs against the page address and compares hosts."""

    @classmethod
    def resolve(cls, href: str, base_url: str) -> str:
        """
        Resolve href against base_url.
        Raises UrlResolutionFailure when the result is not absolute.
        """
        try:
            resolved = urljoin(base_url, href.strip())
            parsed = urlparse(resolved)
        except ValueError as exc:
            raise UrlResolutionFailure(href, base_url) from exc

        if not parsed.scheme:
            raise UrlResolutionFailure(href, base_url)
        return resolved

    @classmethod
    def hostname(cls, url: str) -> str:
        """Lower-cased hostname without port, or empty string."""
        try:
            return urlparse(url).hostname or ""
        except ValueError:
            return ""

    @classmethod
    def is_external(cls, resolved_url: str, source_url: str) -> bool:
        return cls.hostname(resolved_url) != cls.hostname(source_url)


# ─────────────────────────────────────────────
# Extractor
# ─────────────────────────────────────────────

class ContentExtractor:
    """
    Produces PageSignals from markup and its (post-redirect) source address.
    Stateless: one instance can serve any number of concurrent analyses.
    """

    def __init__(
        self,
        document_factory: Callable[[str], TraversableDocument] = SoupDocument,
        content_candidates: tuple[str, ...] = CONTENT_CANDIDATES,
        non_content_selectors: tuple[str, ...] = NON_CONTENT_SELECTORS,
    ):
        self.document_factory = document_factory
        self.content_candidates = content_candidates
        self.non_content_selectors = non_content_selectors
        self.resolver = URLResolver()

    def extract(
        self,
        markup: str,
        source_url: str,
        *,
        scraped_at: datetime | None = None,
    ) -> PageSignals:
        scraped_at = scraped_at or datetime.now(timezone.utc)

        try:
            document = self.document_factory(markup or "")
            self._prune(document)

            title = self._read_title(document)
            meta_description = self._read_meta(document, "description")
            meta_keywords = self._read_meta(document, "keywords")
            headings = self._extract_headings(document)
            images = self._extract_images(document, source_url)
            links = self._extract_links(document, source_url)

            body_text = self._extract_body_text(document)

        except Exception as e:
            logger.warning("Markup parse error", url=source_url, error=str(e), exc_info=True)
            return PageSignals.empty(source_url, scraped_at)

        signals = PageSignals(
            source_url=source_url,
            title=title,
            meta_description=meta_description,
            meta_keywords=meta_keywords,
            body_text=body_text,
            headings=headings,
            images=images,
            links=links,
            scraped_at=scraped_at,
        )
        logger.debug(
            "Extraction complete",
            url=source_url,
            word_count=signals.word_count,
            headings=len(headings),
            images=len(images),
            links=len(links),
        )
        return signals

    def _read_title(self, document: TraversableDocument) -> str:
        node = document.select_first("title")
        return node.raw_text().strip() if node else ""

    def _read_meta(self, document: TraversableDocument, name: str) -> str:
        for node in document.select("meta[name]"):
            if (node.attr("name") or "").strip().lower() == name:
                return (node.attr("content") or "").strip()
        return ""

    def _extract_headings(self, document: TraversableDocument) -> tuple[Heading, ...]:
        return tuple(
            Heading(level=int(node.tag_name[1]), text=node.text())
            for node in document.select(HEADING_SELECTOR)
        )

    def _extract_images(self, document: TraversableDocument, source_url: str) -> tuple[ImageRef, ...]:
        images = []
        for node in document.select("img"):
            src = node.attr("src") or ""
            images.append(ImageRef(
                absolute_src=self._resolve_or_verbatim(src, source_url) if src.strip() else src,
                alt_text=node.attr("alt") or "",
            ))
        return tuple(images)

    def _extract_links(self, document: TraversableDocument, source_url: str) -> tuple[LinkRef, ...]:
        links = []
        for node in document.select("a[href]"):
            href = node.attr("href") or ""
            try:
                resolved = self.resolver.resolve(href, source_url)
            except UrlResolutionFailure:
                links.append(LinkRef(absolute_href=href, anchor_text=node.text(), is_external=False))
                continue
            links.append(LinkRef(
                absolute_href=resolved,
                anchor_text=node.text(),
                is_external=self.resolver.is_external(resolved, source_url),
            ))
        return tuple(links)

    def _resolve_or_verbatim(self, href: str, source_url: str) -> str:
        try:
            return self.resolver.resolve(href, source_url)
        except UrlResolutionFailure:
            return href

    def _prune(self, document: TraversableDocument) -> None:
        for selector in self.non_content_selectors:
            document.remove(selector)

    def _extract_body_text(self, document: TraversableDocument) -> str:
        for selector in self.content_candidates:
            node = document.select_first(selector)
            if node is not None:
                text = node.text()
                if text:
                    return text
                break

        body = document.select_first("body")
        if body is not None:
            return body.text()
        return document.text()


_default_extractor = ContentExtractor()


def extract(markup: str, source_url: str, *, scraped_at: datetime | None = None) -> PageSignals:
    """Extract PageSignals with the default BeautifulSoup-backed extractor."""
    return _default_extractor.extract(markup, source_url, scraped_at=scraped_at)
