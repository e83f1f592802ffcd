"""
Prioritization Engine

Turns page signals into ordered, actionable fixes:
- Recommendations, each with a priority, category and expected impact
- An action plan bucketed into immediate, short-term and long-term work

Estimated impact = min(100, 25 × immediate + 15 × short-term + 5 × long-term)

Works from PageSignals directly, so recommendations survive a degraded
sub-score.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from pageaudit.engines.base import PageSignals, Record, ScoringPolicy


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITY_RANK = {
    Priority.HIGH: 0,
    Priority.MEDIUM: 1,
    Priority.LOW: 2,
}

IMPACT_POINTS = {
    "immediate": 25,
    "short_term": 15,
    "long_term": 5,
}

MIN_INTERNAL_LINKS = 3
EXPAND_CONTENT_BELOW = 500


class Recommendation(Record):
    priority: Priority
    category: str
    issue: str
    recommendation: str
    impact: str


class ActionPlan(Record):
    immediate: tuple[str, ...] = ()
    short_term: tuple[str, ...] = ()
    long_term: tuple[str, ...] = ()
    estimated_impact: int = Field(ge=0, le=100, default=0)


class PrioritizationEngine:
    """Generates recommendations and an action plan for one page."""

    def __init__(self, policy: ScoringPolicy | None = None):
        self.policy = policy or ScoringPolicy.from_settings()

    def recommendations(self, signals: PageSignals) -> list[Recommendation]:
        policy = self.policy
        recs: list[Recommendation] = []

        if len(signals.title) < policy.title_optimal_min_length:
            recs.append(Recommendation(
                priority=Priority.HIGH,
                category="Title Optimization",
                issue="Missing page title" if not signals.title else "Title tag too short",
                recommendation=(
                    f"Create a compelling {policy.title_optimal_min_length}-{policy.title_max_length} "
                    "character title with the primary keyword"
                ),
                impact="Improved search rankings and click-through rates",
            ))

        if len(signals.meta_description) < policy.meta_description_optimal_min_length:
            recs.append(Recommendation(
                priority=Priority.HIGH,
                category="Meta Description",
                issue="Missing meta description" if not signals.meta_description else "Meta description too short",
                recommendation=(
                    f"Write a compelling {policy.meta_description_optimal_min_length}-"
                    f"{policy.meta_description_max_length} character meta description"
                ),
                impact="Better search result snippets and higher CTR",
            ))

        h1_count = len([h for h in signals.headings if h.level == 1])
        if h1_count != 1:
            recs.append(Recommendation(
                priority=Priority.MEDIUM,
                category="Header Structure",
                issue="Missing H1 tag" if h1_count == 0 else "Multiple H1 tags found",
                recommendation="Use exactly one H1 tag per page with the primary keyword",
                impact="Better content hierarchy and SEO structure",
            ))

        missing_alt = len([img for img in signals.images if not img.has_alt])
        if missing_alt:
            recs.append(Recommendation(
                priority=Priority.MEDIUM,
                category="Image Accessibility",
                issue=f"{missing_alt} images missing alt text",
                recommendation="Add descriptive alt text to all meaningful images",
                impact="Improved accessibility and image search visibility",
            ))

        if signals.word_count < policy.min_word_count:
            recs.append(Recommendation(
                priority=Priority.MEDIUM,
                category="Content Depth",
                issue=f"Only {signals.word_count} words of content",
                recommendation=f"Expand content to at least {policy.min_word_count} words",
                impact="Better coverage of target keywords",
            ))

        if not any(not link.is_external for link in signals.links):
            recs.append(Recommendation(
                priority=Priority.LOW,
                category="Internal Linking",
                issue="No internal links found",
                recommendation="Link to related pages on the same site",
                impact="Better crawlability and navigation",
            ))

        recs.sort(key=lambda rec: PRIORITY_RANK[rec.priority])
        return recs

    def action_plan(self, signals: PageSignals) -> ActionPlan:
        immediate: list[str] = []
        short_term: list[str] = []
        long_term: list[str] = []

        if not signals.title:
            immediate.append("Add page title with primary keyword")
        if not signals.meta_description:
            immediate.append("Create compelling meta description")

        missing_alt = len([img for img in signals.images if not img.has_alt])
        if missing_alt:
            short_term.append(f"Add alt text to {missing_alt} images")
        if signals.word_count < EXPAND_CONTENT_BELOW:
            short_term.append("Expand content to improve depth and value")

        internal_links = len([link for link in signals.links if not link.is_external])
        if internal_links < MIN_INTERNAL_LINKS:
            long_term.append("Add more internal links for better navigation")

        estimated = (
            IMPACT_POINTS["immediate"] * len(immediate)
            + IMPACT_POINTS["short_term"] * len(short_term)
            + IMPACT_POINTS["long_term"] * len(long_term)
        )

        return ActionPlan(
            immediate=tuple(immediate),
            short_term=tuple(short_term),
            long_term=tuple(long_term),
            estimated_impact=min(100, estimated),
        )
