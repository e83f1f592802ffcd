"""
Exception taxonomy for the analysis pipeline.

Only FetchFailure is a hard failure of an analysis. Every other error is
recovered where it is raised and degrades the report instead of aborting it.
"""

from __future__ import annotations


class PageAuditError(Exception):
    """Base class for all pageaudit errors."""


class FetchFailure(PageAuditError):
    """The page could not be retrieved; nothing is extracted or scored."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {reason}")


class UrlResolutionFailure(PageAuditError):
    """A relative href/src could not be resolved against the page address."""

    def __init__(self, href: str, base_url: str):
        self.href = href
        self.base_url = base_url
        super().__init__(f"Cannot resolve {href!r} against {base_url!r}")


class SubScoreComputationFailure(PageAuditError):
    """A sub-analyzer produced unusable intermediate data."""

    def __init__(self, analyzer: str, reason: str):
        self.analyzer = analyzer
        self.reason = reason
        super().__init__(f"{analyzer}: {reason}")


class NarrativeFailure(PageAuditError):
    """The narrative generator did not return usable text."""
