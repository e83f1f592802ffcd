"""
Tests for performance metrics.
"""

import pytest

from pageaudit.engines.base import Heading, ImageRef, LinkRef, PageSignals
from pageaudit.engines.scoring.engine import ScoringEngine
from pageaudit.reporting.metrics import calculate_performance_metrics, count_technical_issues

from conftest import SOURCE_URL, make_words


@pytest.fixture
def scoring_engine(policy):
    return ScoringEngine(policy)


class TestTechnicalIssues:

    def test_empty_page(self):
        # no title, no meta description, short content; no images
        assert count_technical_issues(PageSignals(source_url=SOURCE_URL)) == 3

    def test_minimal_page(self, minimal_signals):
        assert count_technical_issues(minimal_signals) == 4

    def test_threshold_follows_min_word_count(self, minimal_signals):
        assert count_technical_issues(minimal_signals, min_word_count=50) == 3


class TestPerformanceMetrics:

    def test_empty_page(self, scoring_engine):
        signals = PageSignals(source_url=SOURCE_URL)
        metrics = calculate_performance_metrics(signals, scoring_engine.score(signals))

        assert metrics.performance == 35
        assert metrics.content == 70
        assert metrics.grammar is None

    def test_minimal_page(self, scoring_engine, minimal_signals):
        scores = scoring_engine.score(minimal_signals)
        metrics = calculate_performance_metrics(minimal_signals, scores)

        assert metrics.seo == scores.overall == 50
        assert metrics.performance == 20
        assert metrics.content == 70
        assert metrics.overall == 47
        assert metrics.breakdown.technical_issues == 4
        assert metrics.breakdown.seo_issues == 6
        assert metrics.breakdown.content_issues == 0
        assert metrics.breakdown.total_issues == 10

    def test_well_formed_page(self, scoring_engine, well_formed_signals):
        metrics = calculate_performance_metrics(well_formed_signals, scoring_engine.score(well_formed_signals))

        assert metrics.performance == 100
        assert metrics.content == 80
        assert metrics.overall == 93
        assert metrics.breakdown.total_issues == 0

    def test_content_bonuses(self, scoring_engine):
        signals = PageSignals(
            source_url=SOURCE_URL,
            title="Title",
            meta_description="Description",
            body_text=make_words(600),
            headings=tuple(Heading(level=2, text=f"H{i}") for i in range(4)),
            images=(ImageRef(absolute_src="https://example.com/a.png", alt_text="A"),),
            links=tuple(LinkRef(absolute_href=f"https://example.com/{i}") for i in range(6)),
        )
        metrics = calculate_performance_metrics(signals, scoring_engine.score(signals))
        assert metrics.content == 100
        assert metrics.performance == 100

    def test_grammar_rescaled_and_averaged(self, scoring_engine, minimal_signals):
        metrics = calculate_performance_metrics(
            minimal_signals,
            scoring_engine.score(minimal_signals),
            grammar_score=6,
            grammar_errors=3,
        )

        assert metrics.grammar == 60
        # (50 + 20 + 70 + 60) / 4
        assert metrics.overall == 50
        assert metrics.breakdown.content_issues == 3
        assert metrics.breakdown.total_issues == 13

    def test_serializes_with_camel_case_names(self, scoring_engine, minimal_signals):
        metrics = calculate_performance_metrics(minimal_signals, scoring_engine.score(minimal_signals))
        data = metrics.model_dump(by_alias=True, mode="json")
        assert data["breakdown"]["totalIssues"] == 10
        assert data["grammar"] is None
