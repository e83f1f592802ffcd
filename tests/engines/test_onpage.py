"""
Tests for the On-Page (basic) Analyzer.
"""

import pytest

from pageaudit.engines.base import (
    BasicScore,
    ElementStatus,
    Heading,
    ImageRef,
    OutcomeStatus,
    PageSignals,
    ScoringPolicy,
)
from pageaudit.engines.onpage.engine import BasicAnalyzer

from conftest import SOURCE_URL


def make_signals(**overrides) -> PageSignals:
    defaults = dict(
        source_url=SOURCE_URL,
        title="A reasonable page title for tests",
        meta_description="d" * 130,
        headings=(Heading(level=1, text="Main heading"),),
        images=(ImageRef(absolute_src="https://example.com/a.png", alt_text="A"),),
    )
    defaults.update(overrides)
    return PageSignals(**defaults)


class TestBasicAnalyzer:

    @pytest.fixture
    def analyzer(self, policy):
        return BasicAnalyzer(policy)

    def test_minimal_page_scenario(self, analyzer, minimal_signals):
        result = analyzer.analyze(minimal_signals)
        assert result.score == 40
        assert "Missing page title" in result.issues
        assert "Missing meta description" in result.issues
        assert "Missing H1 tag" in result.issues
        assert "1 images missing alt text" in result.issues
        assert result.images_missing_alt == 1

    def test_well_formed_page_scenario(self, analyzer, well_formed_signals):
        result = analyzer.analyze(well_formed_signals)
        assert result.score == 100
        assert result.issues == ()
        assert result.title_length == 45
        assert result.title_optimal
        assert result.meta_description_optimal
        assert result.h1_count == 1
        assert {
            result.title_status,
            result.meta_status,
            result.heading_status,
            result.image_status,
        } == {ElementStatus.OK}

    def test_title_too_long(self, analyzer):
        result = analyzer.analyze(make_signals(title="t" * 61))
        assert result.title_status == ElementStatus.TOO_LONG
        assert result.issues == ("Title too long (> 60 characters)",)
        assert result.score == 85

    def test_title_at_limit_is_ok(self, analyzer):
        result = analyzer.analyze(make_signals(title="t" * 60))
        assert result.title_status == ElementStatus.OK
        assert result.score == 100

    def test_short_title_ok_but_not_optimal(self, analyzer):
        result = analyzer.analyze(make_signals(title="Short"))
        assert result.title_status == ElementStatus.OK
        assert not result.title_optimal

    def test_meta_description_too_long(self, analyzer):
        result = analyzer.analyze(make_signals(meta_description="d" * 161))
        assert result.meta_status == ElementStatus.TOO_LONG
        assert result.issues == ("Meta description too long (> 160 characters)",)

    def test_multiple_h1(self, analyzer):
        headings = (Heading(level=1, text="One"), Heading(level=1, text="Two"), Heading(level=2, text="Sub"))
        result = analyzer.analyze(make_signals(headings=headings))
        assert result.heading_status == ElementStatus.MULTIPLE
        assert "Multiple H1 tags found" in result.issues
        assert result.heading_hierarchy == {"h1": 2, "h2": 1}
        assert result.total_headings == 3

    def test_heading_hierarchy_is_read_only(self, analyzer):
        result = analyzer.analyze(make_signals(headings=(Heading(level=2, text="Sub"),)))
        with pytest.raises(TypeError):
            result.heading_hierarchy["h1"] = 1
        assert result.model_dump(by_alias=True, mode="json")["headingHierarchy"] == {"h2": 1}

    def test_missing_alt_never_raises_score(self, analyzer):
        scores = []
        for missing in range(4):
            images = tuple(ImageRef(absolute_src=f"https://example.com/{i}.png") for i in range(missing))
            scores.append(analyzer.analyze(make_signals(images=images)).score)
        assert scores == sorted(scores, reverse=True)

    def test_score_floored_at_zero(self):
        analyzer = BasicAnalyzer(ScoringPolicy(basic_issue_penalty=40))
        result = analyzer.analyze(PageSignals(source_url=SOURCE_URL))
        assert len(result.issues) == 3
        assert result.score == 0

    def test_score_independent_of_issue_order(self, analyzer):
        a = make_signals(title="", headings=())
        b = make_signals(meta_description="", images=(ImageRef(absolute_src="x"),))
        assert analyzer.analyze(a).score == analyzer.analyze(b).score

    def test_recommendations_follow_issues(self, analyzer, minimal_signals):
        result = analyzer.analyze(minimal_signals)
        assert len(result.recommendations) == len(result.issues)

    def test_default_is_worst_case(self, analyzer):
        default = analyzer.default()
        assert isinstance(default, BasicScore)
        assert default.score == 0
        assert default.title_status == ElementStatus.UNKNOWN

    def test_execute_reports_ok(self, analyzer, minimal_signals):
        outcome = analyzer.execute(minimal_signals)
        assert outcome.status == OutcomeStatus.OK
        assert outcome.value.score == 40
        assert outcome.reason is None
