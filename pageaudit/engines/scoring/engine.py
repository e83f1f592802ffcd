"""
Scoring Engine - Runs the sub-analyzers and combines them into one score.

Scoring Model:
- Basic, technical and content sub-scores are computed independently
- The overall score is a weighted blend of basic score, content quality
  and readability, normalized against the declared weight sum
- A degraded sub-score contributes zero but keeps its weight in the
  denominator, so scores stay comparable across runs
- Technical score is reported but does not enter the blend
"""

from __future__ import annotations

import time

import structlog

from pageaudit.engines.base import (
    BasicScore,
    ContentScore,
    Diagnostic,
    PageSignals,
    ScoreReport,
    ScoringPolicy,
    SubScoreOutcome,
    clamp,
    round_half_up,
)
from pageaudit.engines.content.engine import ContentAnalyzer
from pageaudit.engines.onpage.engine import BasicAnalyzer
from pageaudit.engines.technical.engine import TechnicalAnalyzer


def combine_scores(
    basic: SubScoreOutcome[BasicScore],
    content: SubScoreOutcome[ContentScore],
    policy: ScoringPolicy,
) -> int:
    """
    overall = (basic/100 × W_basic + quality/10 × W_quality + readability/10 × W_readability)
              / (W_basic + W_quality + W_readability) × 100
    """
    total_weight = policy.total_weight
    if total_weight <= 0:
        return 0

    weighted = 0.0
    if not basic.degraded:
        weighted += basic.value.score / 100 * policy.weight_basic
    if not content.degraded:
        weighted += content.value.quality / 10 * policy.weight_content_quality
        weighted += content.value.readability / 10 * policy.weight_readability

    return clamp(round_half_up(weighted / total_weight * 100), 0, 100)


class ScoringEngine:
    """
    Computes a ScoreReport from one PageSignals record.
    Never raises for a failing analyzer: the affected sub-score degrades to
    its default and is listed in the report diagnostics.
    """

    def __init__(
        self,
        policy: ScoringPolicy | None = None,
        basic: BasicAnalyzer | None = None,
        technical: TechnicalAnalyzer | None = None,
        content: ContentAnalyzer | None = None,
    ):
        self.policy = policy or ScoringPolicy.from_settings()
        self.basic = basic or BasicAnalyzer(self.policy)
        self.technical = technical or TechnicalAnalyzer(self.policy)
        self.content = content or ContentAnalyzer(self.policy)
        self.logger = structlog.get_logger(self.__class__.__name__)

    def score(self, signals: PageSignals) -> ScoreReport:
        start = time.perf_counter()

        basic = self.basic.execute(signals)
        technical = self.technical.execute(signals)
        content = self.content.execute(signals)

        diagnostics = tuple(
            Diagnostic(analyzer=outcome.analyzer, reason=outcome.reason or "unknown error")
            for outcome in (basic, technical, content)
            if outcome.degraded
        )

        report = ScoreReport(
            basic=basic.value,
            technical=technical.value,
            content=content.value,
            overall=combine_scores(basic, content, self.policy),
            diagnostics=diagnostics,
        )

        self.logger.info(
            "Scoring complete",
            url=signals.source_url,
            overall=report.overall,
            basic=report.basic.score,
            technical=report.technical.score,
            content=report.content.score,
            degraded=[d.analyzer for d in diagnostics],
            elapsed_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return report


_default_engine: ScoringEngine | None = None


def score(signals: PageSignals) -> ScoreReport:
    """Score PageSignals with the settings-derived default policy."""
    global _default_engine
    if _default_engine is None:
        _default_engine = ScoringEngine()
    return _default_engine.score(signals)
