"""
Report Aggregator - Packages scores, recommendations and LLM-written sections.

Runs after extraction and scoring. Grammar analysis and narrative are
optional: a missing collaborator or a failed call leaves that section empty
(grammar falls back to a neutral score) and the rest of the report intact.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

import structlog

from pageaudit.engines.base import Keyword, PageSignals, Record, ScoreReport, calculate_grade
from pageaudit.engines.prioritization.engine import ActionPlan, PrioritizationEngine, Recommendation
from pageaudit.reporting.grammar import GrammarAnalysis, GrammarChecker
from pageaudit.reporting.metrics import PerformanceMetrics, calculate_performance_metrics
from pageaudit.reporting.narrative import Narrative, NarrativeContext, NarrativeGenerator

logger = structlog.get_logger(__name__)

WORDS_PER_MINUTE = 200
SUGGESTED_KEYWORDS = 5


class AnalysisReport(Record):
    """Final report for one analyzed page."""
    url: str
    analyzed_at: datetime
    signals: PageSignals
    scores: ScoreReport
    grade: str
    assessment: str
    reading_time_minutes: int
    performance: PerformanceMetrics
    recommendations: tuple[Recommendation, ...] = ()
    action_plan: ActionPlan
    keyword_strategy: tuple[Keyword, ...] = ()
    suggested_keywords: tuple[str, ...] = ()
    grammar: GrammarAnalysis | None = None
    narrative: Narrative | None = None


def assess(score: int) -> str:
    if score >= 80:
        return "excellent"
    elif score >= 60:
        return "good"
    elif score >= 40:
        return "fair"
    return "poor"


class ReportAggregator:

    def __init__(
        self,
        narrative_generator: NarrativeGenerator | None = None,
        prioritization: PrioritizationEngine | None = None,
        grammar_checker: GrammarChecker | None = None,
    ):
        self.narrative_generator = narrative_generator
        self.grammar_checker = grammar_checker
        self.prioritization = prioritization or PrioritizationEngine()

    async def build(
        self,
        signals: PageSignals,
        scores: ScoreReport,
        *,
        include_narrative: bool = True,
        include_grammar: bool = True,
    ) -> AnalysisReport:
        grammar = None
        if include_grammar:
            grammar = await self._analyze_grammar(signals)

        narrative = None
        if include_narrative:
            narrative = await self._generate_narrative(signals, scores, grammar)

        keywords = scores.content.keywords
        return AnalysisReport(
            url=signals.source_url,
            analyzed_at=datetime.now(timezone.utc),
            signals=signals,
            scores=scores,
            grade=calculate_grade(scores.overall),
            assessment=assess(scores.overall),
            reading_time_minutes=math.ceil(signals.word_count / WORDS_PER_MINUTE),
            performance=calculate_performance_metrics(
                signals,
                scores,
                grammar_score=grammar.score if grammar else None,
                grammar_errors=len(grammar.errors) if grammar else 0,
                min_word_count=self.prioritization.policy.min_word_count,
            ),
            recommendations=tuple(self.prioritization.recommendations(signals)),
            action_plan=self.prioritization.action_plan(signals),
            keyword_strategy=keywords,
            suggested_keywords=tuple(kw.term for kw in keywords[:SUGGESTED_KEYWORDS]),
            grammar=grammar,
            narrative=narrative,
        )

    async def _analyze_grammar(self, signals: PageSignals) -> GrammarAnalysis | None:
        if self.grammar_checker is None:
            return None

        try:
            return await self.grammar_checker.analyze(signals.body_text)
        except Exception as exc:
            logger.error(
                "Grammar analysis failed, using neutral score",
                url=signals.source_url,
                error=str(exc),
                exc_info=True,
            )
            return GrammarAnalysis.fallback()

    async def _generate_narrative(
        self,
        signals: PageSignals,
        scores: ScoreReport,
        grammar: GrammarAnalysis | None,
    ) -> Narrative | None:
        if self.narrative_generator is None:
            return None

        context = NarrativeContext.from_analysis(signals, scores, grammar.score if grammar else None)
        try:
            return await self.narrative_generator.generate(context)
        except Exception as exc:
            logger.error(
                "Narrative generation failed, continuing without it",
                url=signals.source_url,
                error=str(exc),
                exc_info=True,
            )
            return None
