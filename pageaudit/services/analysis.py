"""
Analysis Service - Orchestrates one page analysis.

fetch → extract → score → aggregate

Only FetchFailure escapes: once markup is in hand a report is always
returned, with degraded sub-scores or without narrative if need be.
"""

from __future__ import annotations

import time

import structlog

from pageaudit.core.logging import analysis_context
from pageaudit.engines.base import PageSignals, ScoreReport
from pageaudit.engines.extractor.engine import ContentExtractor
from pageaudit.engines.fetcher.engine import PageFetcher
from pageaudit.engines.scoring.engine import ScoringEngine
from pageaudit.reporting.aggregator import AnalysisReport, ReportAggregator

logger = structlog.get_logger(__name__)


class AnalysisService:

    def __init__(
        self,
        fetcher: PageFetcher,
        aggregator: ReportAggregator,
        extractor: ContentExtractor | None = None,
        scoring_engine: ScoringEngine | None = None,
    ):
        self.fetcher = fetcher
        self.aggregator = aggregator
        self.extractor = extractor or ContentExtractor()
        self.scoring_engine = scoring_engine or ScoringEngine()

    async def analyze_url(
        self,
        url: str,
        *,
        include_narrative: bool = True,
        include_grammar: bool = True,
    ) -> AnalysisReport:
        """Fetch and analyze url. Raises FetchFailure when the page cannot be retrieved."""
        with analysis_context(url):
            start = time.perf_counter()
            logger.info("Analysis starting")

            page = await self.fetcher.fetch(url)
            report = await self.analyze_markup(
                page.markup,
                page.final_url,
                include_narrative=include_narrative,
                include_grammar=include_grammar,
            )

            logger.info(
                "Analysis complete",
                final_url=page.final_url,
                overall=report.scores.overall,
                elapsed_ms=round((time.perf_counter() - start) * 1000, 2),
            )
        return report

    async def analyze_markup(
        self,
        markup: str,
        source_url: str,
        *,
        include_narrative: bool = True,
        include_grammar: bool = True,
    ) -> AnalysisReport:
        """Analyze markup already in hand; never raises for bad markup."""
        signals, scores = self.score_markup(markup, source_url)
        return await self.aggregator.build(
            signals,
            scores,
            include_narrative=include_narrative,
            include_grammar=include_grammar,
        )

    def score_markup(self, markup: str, source_url: str) -> tuple[PageSignals, ScoreReport]:
        signals = self.extractor.extract(markup, source_url)
        return signals, self.scoring_engine.score(signals)
