"""
Technical Analyzer

Analyzes link and content structure:
- Content length (minimum word count)
- Internal vs external links
- Image alt text coverage
"""

from __future__ import annotations

from pageaudit.engines.base import (
    ImageOptimization,
    PageSignals,
    SubScoreAnalyzer,
    TechnicalScore,
    round_half_up,
)


class TechnicalAnalyzer(SubScoreAnalyzer[TechnicalScore]):
    """
    Technical audit of a single page.
    Link classification is taken from PageSignals, never re-derived from hrefs.
    """

    NAME = "technical"

    def analyze(self, signals: PageSignals) -> TechnicalScore:
        issues: list[str] = []

        # ── Content Length ─────────────────────────
        if signals.word_count < self.policy.min_word_count:
            issues.append(f"Content too short (< {self.policy.min_word_count} words)")

        # ── Internal vs External Links ─────────────
        internal_links = len([link for link in signals.links if not link.is_external])
        external_links = len(signals.links) - internal_links

        if internal_links == 0:
            issues.append("No internal links found")

        score = max(0, 100 - self.policy.technical_issue_penalty * len(issues))

        return TechnicalScore(
            score=score,
            internal_link_count=internal_links,
            external_link_count=external_links,
            total_links=len(signals.links),
            image_optimization=self._analyze_image_optimization(signals),
            issues=tuple(issues),
        )

    def _analyze_image_optimization(self, signals: PageSignals) -> ImageOptimization:
        total = len(signals.images)
        with_alt = len([img for img in signals.images if img.has_alt])
        return ImageOptimization(
            total=total,
            with_alt=with_alt,
            without_alt=total - with_alt,
            alt_text_coverage=round_half_up(with_alt / total * 100) if total else 100,
        )

    def default(self) -> TechnicalScore:
        return TechnicalScore(score=0)
