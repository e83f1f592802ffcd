"""
Type contracts and base class for the extraction-and-scoring pipeline.

Design principles:
- Records are immutable: PageSignals and ScoreReport are frozen once built
- Analyzers are stateless: all state comes from the PageSignals they receive
- Analyzers are independent: no analyzer imports another
- Analyzers handle their own errors and return a degraded default on failure
"""

from __future__ import annotations

import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Generic, Mapping, TypeVar

import structlog
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer, computed_field
from pydantic.alias_generators import to_camel

from pageaudit.core.config import Settings, get_settings
from pageaudit.core.errors import SubScoreComputationFailure

T = TypeVar("T")

# Read-only mappings keep frozen records immutable all the way down
FrozenCounts = Annotated[
    Mapping[str, int],
    AfterValidator(lambda value: MappingProxyType(dict(value))),
    PlainSerializer(lambda value: dict(value), return_type=dict[str, int]),
]
FrozenPercentages = Annotated[
    Mapping[str, float],
    AfterValidator(lambda value: MappingProxyType(dict(value))),
    PlainSerializer(lambda value: dict(value), return_type=dict[str, float]),
]


def empty_mapping() -> Mapping:
    return MappingProxyType({})


# ─────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────

class ElementStatus(str, Enum):
    OK = "ok"
    MISSING = "missing"
    TOO_LONG = "too_long"
    MULTIPLE = "multiple"
    MISSING_ALT = "missing_alt"
    UNKNOWN = "unknown"       # Analyzer degraded, status not computed


class OutcomeStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"     # Analyzer failed, default value substituted


# ─────────────────────────────────────────────
# Page signals
# ─────────────────────────────────────────────

class Record(BaseModel):
    """Immutable value record serialized with camelCase field names."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Heading(Record):
    level: int = Field(ge=1, le=6)
    text: str = ""


class ImageRef(Record):
    absolute_src: str = ""
    alt_text: str = ""

    @computed_field(alias="hasAlt")
    @property
    def has_alt(self) -> bool:
        return self.alt_text != ""


class LinkRef(Record):
    absolute_href: str
    anchor_text: str = ""
    is_external: bool = False


class PageSignals(Record):
    """Normalized structural facts extracted from one page's markup."""

    source_url: str
    title: str = ""
    meta_description: str = ""
    meta_keywords: str = ""
    body_text: str = ""
    headings: tuple[Heading, ...] = ()
    images: tuple[ImageRef, ...] = ()
    links: tuple[LinkRef, ...] = ()
    scraped_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @computed_field(alias="wordCount")
    @property
    def word_count(self) -> int:
        return len(self.body_text.split())

    @classmethod
    def empty(cls, source_url: str, scraped_at: datetime | None = None) -> PageSignals:
        if scraped_at is None:
            return cls(source_url=source_url)
        return cls(source_url=source_url, scraped_at=scraped_at)


# ─────────────────────────────────────────────
# Score records
# ─────────────────────────────────────────────

class BasicScore(Record):
    score: int = Field(ge=0, le=100)
    issues: tuple[str, ...] = ()
    title_status: ElementStatus = ElementStatus.UNKNOWN
    meta_status: ElementStatus = ElementStatus.UNKNOWN
    heading_status: ElementStatus = ElementStatus.UNKNOWN
    image_status: ElementStatus = ElementStatus.UNKNOWN
    title_length: int = 0
    title_optimal: bool = False
    meta_description_length: int = 0
    meta_description_optimal: bool = False
    h1_count: int = 0
    total_headings: int = 0
    heading_hierarchy: FrozenCounts = Field(default_factory=empty_mapping)
    images_missing_alt: int = 0
    recommendations: tuple[str, ...] = ()


class ImageOptimization(Record):
    total: int = 0
    with_alt: int = 0
    without_alt: int = 0
    alt_text_coverage: int = Field(ge=0, le=100, default=100)


class TechnicalScore(Record):
    score: int = Field(ge=0, le=100)
    internal_link_count: int = 0
    external_link_count: int = 0
    total_links: int = 0
    image_optimization: ImageOptimization = Field(default_factory=ImageOptimization)
    issues: tuple[str, ...] = ()


class Keyword(Record):
    term: str
    count: int = Field(ge=1)


class ContentScore(Record):
    score: int = Field(ge=0, le=100)
    keywords: tuple[Keyword, ...] = ()
    readability: int = Field(ge=0, le=10, default=0)
    quality: int = Field(ge=0, le=10, default=0)
    word_count: int = 0
    keyword_density: FrozenPercentages = Field(default_factory=empty_mapping)


class Diagnostic(Record):
    """Why a sub-score fell back to its default."""
    analyzer: str
    reason: str


class ScoreReport(Record):
    basic: BasicScore
    technical: TechnicalScore
    content: ContentScore
    overall: int = Field(ge=0, le=100)
    diagnostics: tuple[Diagnostic, ...] = ()


# ─────────────────────────────────────────────
# Scoring policy
# ─────────────────────────────────────────────

class ScoringPolicy(BaseModel):
    """
    Named thresholds, penalties and weights used by the analyzers.

    The values are empirical. Override them per engine instead of editing
    the analyzers.
    """

    model_config = ConfigDict(frozen=True)

    title_max_length: int = 60
    title_optimal_min_length: int = 30
    meta_description_max_length: int = 160
    meta_description_optimal_min_length: int = 120
    min_word_count: int = 300

    basic_issue_penalty: int = 15
    technical_issue_penalty: int = 20

    weight_basic: float = Field(40.0, ge=0.0)
    weight_content_quality: float = Field(20.0, ge=0.0)
    weight_readability: float = Field(20.0, ge=0.0)

    keyword_candidates: int = 20
    keywords_reported: int = 10
    min_keyword_length: int = 4

    @property
    def total_weight(self) -> float:
        return self.weight_basic + self.weight_content_quality + self.weight_readability

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ScoringPolicy:
        settings = settings or get_settings()
        return cls(
            title_max_length=settings.TITLE_MAX_LENGTH,
            title_optimal_min_length=settings.TITLE_OPTIMAL_MIN_LENGTH,
            meta_description_max_length=settings.META_DESCRIPTION_MAX_LENGTH,
            meta_description_optimal_min_length=settings.META_DESCRIPTION_OPTIMAL_MIN_LENGTH,
            min_word_count=settings.MIN_WORD_COUNT,
            basic_issue_penalty=settings.BASIC_ISSUE_PENALTY,
            technical_issue_penalty=settings.TECHNICAL_ISSUE_PENALTY,
            weight_basic=settings.WEIGHT_BASIC,
            weight_content_quality=settings.WEIGHT_CONTENT_QUALITY,
            weight_readability=settings.WEIGHT_READABILITY,
        )


# ─────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def calculate_grade(score: float) -> str:
    """Convert numeric score to letter grade."""
    if score >= 90:
        return "A"
    elif score >= 80:
        return "B"
    elif score >= 65:
        return "C"
    elif score >= 50:
        return "D"
    return "F"


# ─────────────────────────────────────────────
# Base analyzer
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class SubScoreOutcome(Generic[T]):
    """Ok(value) or Degraded(default, reason) for one sub-analyzer run."""
    analyzer: str
    status: OutcomeStatus
    value: T
    reason: str | None = None
    execution_time_ms: float = 0.0

    @property
    def degraded(self) -> bool:
        return self.status == OutcomeStatus.DEGRADED


class SubScoreAnalyzer(ABC, Generic[T]):
    """
    Abstract base class for the heuristic sub-analyzers.

    All analyzers MUST:
    1. Implement analyze(signals) as a pure function of PageSignals
    2. Implement default() returning the worst-case record used on failure
    3. Be stateless - store nothing on self between calls
    """

    NAME: str = "base"

    def __init__(self, policy: ScoringPolicy | None = None):
        self.policy = policy or ScoringPolicy.from_settings()
        self.logger = structlog.get_logger(self.__class__.__name__)

    @abstractmethod
    def analyze(self, signals: PageSignals) -> T:
        ...

    @abstractmethod
    def default(self) -> T:
        ...

    def execute(self, signals: PageSignals) -> SubScoreOutcome[T]:
        """
        Wrapper around analyze() that adds timing, logging, and fail-soft
        error handling. Call this instead of analyze() directly.
        """
        start = time.perf_counter()
        try:
            value = self.analyze(signals)
        except Exception as exc:
            elapsed = (time.perf_counter() - start) * 1000
            if isinstance(exc, SubScoreComputationFailure):
                failure = exc
            else:
                failure = SubScoreComputationFailure(self.NAME, f"{type(exc).__name__}: {exc}")
            self.logger.error(
                "Analyzer failed, substituting default",
                analyzer=self.NAME,
                url=signals.source_url,
                error=failure.reason,
                elapsed_ms=round(elapsed, 2),
                exc_info=True,
            )
            return SubScoreOutcome(
                analyzer=self.NAME,
                status=OutcomeStatus.DEGRADED,
                value=self.default(),
                reason=failure.reason,
                execution_time_ms=elapsed,
            )

        elapsed = (time.perf_counter() - start) * 1000
        self.logger.debug(
            "Analyzer complete",
            analyzer=self.NAME,
            url=signals.source_url,
            elapsed_ms=round(elapsed, 2),
        )
        return SubScoreOutcome(
            analyzer=self.NAME,
            status=OutcomeStatus.OK,
            value=value,
            execution_time_ms=elapsed,
        )
