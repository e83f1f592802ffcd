"""
On-Page (basic/structural) Analyzer

Rewards presence and correct sizing of canonical SEO elements:
- Title tag (present, under the length ceiling)
- Meta description (present, under the length ceiling)
- Exactly one H1 heading
- Alt text on every image

Each issue costs a flat penalty, so the score depends only on the set of
issues found, never on the order they were discovered in.
"""

from __future__ import annotations

from collections import Counter

from pageaudit.engines.base import (
    BasicScore,
    ElementStatus,
    PageSignals,
    SubScoreAnalyzer,
)


class BasicAnalyzer(SubScoreAnalyzer[BasicScore]):

    NAME = "basic"

    def analyze(self, signals: PageSignals) -> BasicScore:
        policy = self.policy
        issues: list[str] = []
        recommendations: list[str] = []

        # ── Title ──────────────────────────────────
        title_length = len(signals.title)
        if not signals.title:
            title_status = ElementStatus.MISSING
            issues.append("Missing page title")
            recommendations.append(
                f"Add a descriptive page title ({policy.title_optimal_min_length}-{policy.title_max_length} characters)"
            )
        elif title_length > policy.title_max_length:
            title_status = ElementStatus.TOO_LONG
            issues.append(f"Title too long (> {policy.title_max_length} characters)")
            recommendations.append(f"Trim the title to under {policy.title_max_length} characters")
        else:
            title_status = ElementStatus.OK

        # ── Meta Description ───────────────────────
        desc_length = len(signals.meta_description)
        if not signals.meta_description:
            meta_status = ElementStatus.MISSING
            issues.append("Missing meta description")
            recommendations.append(
                f"Add meta description ({policy.meta_description_optimal_min_length}-"
                f"{policy.meta_description_max_length} characters)"
            )
        elif desc_length > policy.meta_description_max_length:
            meta_status = ElementStatus.TOO_LONG
            issues.append(f"Meta description too long (> {policy.meta_description_max_length} characters)")
            recommendations.append(
                f"Shorten the meta description to under {policy.meta_description_max_length} characters"
            )
        else:
            meta_status = ElementStatus.OK

        # ── Headings ──────────────────────────────
        hierarchy = Counter(f"h{h.level}" for h in signals.headings)
        h1_count = hierarchy.get("h1", 0)
        if h1_count == 0:
            heading_status = ElementStatus.MISSING
            issues.append("Missing H1 tag")
            recommendations.append("Add a single, keyword-rich H1 heading")
        elif h1_count > 1:
            heading_status = ElementStatus.MULTIPLE
            issues.append("Multiple H1 tags found")
            recommendations.append("Use only one H1 per page. Use H2-H6 for subheadings.")
        else:
            heading_status = ElementStatus.OK

        # ── Images Alt Text ───────────────────────
        missing_alt = len([img for img in signals.images if not img.has_alt])
        if missing_alt:
            image_status = ElementStatus.MISSING_ALT
            issues.append(f"{missing_alt} images missing alt text")
            recommendations.append(f"Add alt text to {missing_alt} images for better accessibility")
        else:
            image_status = ElementStatus.OK

        score = max(0, 100 - policy.basic_issue_penalty * len(issues))

        return BasicScore(
            score=score,
            issues=tuple(issues),
            title_status=title_status,
            meta_status=meta_status,
            heading_status=heading_status,
            image_status=image_status,
            title_length=title_length,
            title_optimal=policy.title_optimal_min_length <= title_length <= policy.title_max_length,
            meta_description_length=desc_length,
            meta_description_optimal=(
                policy.meta_description_optimal_min_length <= desc_length <= policy.meta_description_max_length
            ),
            h1_count=h1_count,
            total_headings=len(signals.headings),
            heading_hierarchy=dict(sorted(hierarchy.items())),
            images_missing_alt=missing_alt,
            recommendations=tuple(recommendations),
        )

    def default(self) -> BasicScore:
        return BasicScore(score=0)
