"""
Performance Metrics - A second, coarser view of page health.

Deduction-based scores that complement the weighted overall score:
- performance: starts at 100, loses points for missing essentials
- content: starts at 70, gains points for depth, structure and linking

The overall metric averages seo, performance, content and, when grammar
analysis ran, the grammar score rescaled to 0-100.
"""

from __future__ import annotations

from pydantic import Field

from pageaudit.engines.base import PageSignals, Record, ScoreReport, clamp, round_half_up

# Performance deductions
SHORT_CONTENT_PENALTY = 20
MISSING_ALT_PENALTY = 15
MISSING_TITLE_PENALTY = 25
MISSING_META_PENALTY = 20

# Content bonuses
CONTENT_BASELINE = 70
DEPTH_BONUS = 10
STRUCTURE_BONUS = 10
LINKING_BONUS = 10
DEPTH_WORD_COUNT = 500
STRUCTURE_HEADING_COUNT = 3
LINKING_LINK_COUNT = 5


class IssueBreakdown(Record):
    technical_issues: int = 0
    content_issues: int = 0
    seo_issues: int = 0
    total_issues: int = 0


class PerformanceMetrics(Record):
    overall: int = Field(ge=0, le=100)
    seo: int = Field(ge=0, le=100)
    grammar: int | None = Field(None, ge=0, le=100)
    performance: int = Field(ge=0, le=100)
    content: int = Field(ge=0, le=100)
    breakdown: IssueBreakdown


def count_technical_issues(signals: PageSignals, min_word_count: int = 300) -> int:
    return sum((
        not signals.title,
        not signals.meta_description,
        any(not img.has_alt for img in signals.images),
        signals.word_count < min_word_count,
    ))


def calculate_performance_metrics(
    signals: PageSignals,
    scores: ScoreReport,
    *,
    grammar_score: int | None = None,
    grammar_errors: int = 0,
    min_word_count: int = 300,
) -> PerformanceMetrics:
    """grammar_score is on the 1-10 scale; None when grammar analysis did not run."""
    performance = 100
    if signals.word_count < min_word_count:
        performance -= SHORT_CONTENT_PENALTY
    if any(not img.has_alt for img in signals.images):
        performance -= MISSING_ALT_PENALTY
    if not signals.title:
        performance -= MISSING_TITLE_PENALTY
    if not signals.meta_description:
        performance -= MISSING_META_PENALTY

    content = CONTENT_BASELINE
    if signals.word_count > DEPTH_WORD_COUNT:
        content += DEPTH_BONUS
    if len(signals.headings) > STRUCTURE_HEADING_COUNT:
        content += STRUCTURE_BONUS
    if len(signals.links) > LINKING_LINK_COUNT:
        content += LINKING_BONUS

    performance = clamp(performance, 0, 100)
    content = clamp(content, 0, 100)
    grammar = grammar_score * 10 if grammar_score is not None else None

    components = [scores.overall, performance, content]
    if grammar is not None:
        components.append(grammar)

    technical_issues = count_technical_issues(signals, min_word_count)
    seo_issues = len(scores.basic.issues) + len(scores.technical.issues)

    return PerformanceMetrics(
        overall=round_half_up(sum(components) / len(components)),
        seo=scores.overall,
        grammar=grammar,
        performance=performance,
        content=content,
        breakdown=IssueBreakdown(
            technical_issues=technical_issues,
            content_issues=grammar_errors,
            seo_issues=seo_issues,
            total_issues=technical_issues + grammar_errors + seo_issues,
        ),
    )
