"""
Narrative generation through an OpenAI-compatible chat completion API.

The generator is an injected collaborator: it is built once per process and
handed to the ReportAggregator. Extraction and scoring never reference it,
and a report is complete without it.
"""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable

import structlog
from openai import AsyncOpenAI, OpenAIError

from pageaudit.core.config import Settings, get_settings
from pageaudit.core.errors import NarrativeFailure
from pageaudit.engines.base import PageSignals, Record, ScoreReport

logger = structlog.get_logger(__name__)

EXECUTIVE_SUMMARY_MAX_TOKENS = 800


class NarrativeContext(Record):
    """Read-only facts handed to the narrative step."""
    url: str
    title: str
    meta_description: str
    word_count: int
    heading_count: int
    image_count: int
    images_missing_alt: int
    link_count: int
    internal_link_count: int
    overall_score: int
    basic_score: int
    technical_score: int
    content_score: int
    readability: int
    quality: int
    issues: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    grammar_score: int | None = None

    @classmethod
    def from_analysis(
        cls,
        signals: PageSignals,
        scores: ScoreReport,
        grammar_score: int | None = None,
    ) -> NarrativeContext:
        return cls(
            url=signals.source_url,
            title=signals.title,
            meta_description=signals.meta_description,
            word_count=signals.word_count,
            heading_count=len(signals.headings),
            image_count=len(signals.images),
            images_missing_alt=len([img for img in signals.images if not img.has_alt]),
            link_count=len(signals.links),
            internal_link_count=scores.technical.internal_link_count,
            overall_score=scores.overall,
            basic_score=scores.basic.score,
            technical_score=scores.technical.score,
            content_score=scores.content.score,
            readability=scores.content.readability,
            quality=scores.content.quality,
            issues=scores.basic.issues + scores.technical.issues,
            keywords=tuple(kw.term for kw in scores.content.keywords),
            grammar_score=grammar_score,
        )


class Narrative(Record):
    executive_summary: str
    detailed_findings: str


@runtime_checkable
class NarrativeGenerator(Protocol):
    async def generate(self, context: NarrativeContext) -> Narrative:
        ...


def executive_summary_prompt(ctx: NarrativeContext) -> str:
    return f"""Create an executive summary for the website analysis of {ctx.url}:

Website Stats:
- Title: {ctx.title or 'Missing'}
- Word Count: {ctx.word_count}
- Images: {ctx.image_count}
- Links: {ctx.link_count}

Scores:
- Overall Score: {ctx.overall_score}/100
- On-Page Score: {ctx.basic_score}/100
- Technical Score: {ctx.technical_score}/100
- Content Score: {ctx.content_score}/10
{_grammar_line(ctx)}
Issues Found:
{_bullets(ctx.issues) or '- None'}

Write a concise 2-3 paragraph executive summary highlighting:
1. Overall website health assessment
2. Top 3 strengths
3. Top 3 areas for improvement
4. Business impact of recommended changes

Keep it professional and actionable."""


def detailed_findings_prompt(ctx: NarrativeContext) -> str:
    return f"""Generate detailed technical findings for {ctx.url}:

Technical Data:
- Page Title: {ctx.title or 'Missing'}
- Meta Description: {ctx.meta_description or 'Missing'}
- Word Count: {ctx.word_count}
- Headings: {ctx.heading_count}
- Images: {ctx.image_count} ({ctx.images_missing_alt} missing alt text)
- Links: {ctx.link_count} ({ctx.internal_link_count} internal)
- Readability: {ctx.readability}/10
- Content Quality: {ctx.quality}/10
- Top Keywords: {', '.join(ctx.keywords) or 'None'}

Provide specific, actionable findings in these areas:
1. Content optimization opportunities
2. Technical SEO improvements needed
3. User experience enhancements
4. Conversion optimization suggestions

Be specific and include examples where possible."""


def _bullets(items: tuple[str, ...]) -> str:
    return "\n".join(f"- {item}" for item in items)


def _grammar_line(ctx: NarrativeContext) -> str:
    if ctx.grammar_score is None:
        return ""
    return f"- Grammar Score: {ctx.grammar_score}/10\n"


class OpenAINarrativeGenerator:
    """NarrativeGenerator backed by openai.AsyncOpenAI."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        temperature: float = 0.6,
        max_tokens: int = 1500,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def generate(self, context: NarrativeContext) -> Narrative:
        """Both sections run concurrently; one failing cancels the other."""
        try:
            async with asyncio.TaskGroup() as group:
                summary = group.create_task(
                    self._complete(executive_summary_prompt(context), min(EXECUTIVE_SUMMARY_MAX_TOKENS, self.max_tokens))
                )
                findings = group.create_task(self._complete(detailed_findings_prompt(context), self.max_tokens))
        except ExceptionGroup as errors:
            failure = errors.exceptions[0]
            if isinstance(failure, NarrativeFailure):
                raise failure from None
            raise NarrativeFailure(f"narrative generation failed: {failure}") from failure
        return Narrative(executive_summary=summary.result(), detailed_findings=findings.result())

    async def _complete(self, prompt: str, max_tokens: int) -> str:
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_completion_tokens=max_tokens,
            )
        except OpenAIError as exc:
            raise NarrativeFailure(f"completion request failed: {exc}") from exc

        content = completion.choices[0].message.content if completion.choices else None
        if not content or not content.strip():
            raise NarrativeFailure("completion returned no text")
        return content.strip()


def build_llm_client(settings: Settings | None = None) -> AsyncOpenAI | None:
    """One client shared by every LLM-backed step, or None without an API key."""
    settings = settings or get_settings()
    if not settings.llm_configured:
        return None
    return AsyncOpenAI(api_key=settings.OPENAI_API_KEY, base_url=settings.OPENAI_BASE_URL)


def build_narrative_generator(
    settings: Settings | None = None,
    client: AsyncOpenAI | None = None,
) -> OpenAINarrativeGenerator | None:
    """Generator from settings, or None when narrative is disabled or unconfigured."""
    settings = settings or get_settings()
    if not settings.narrative_configured:
        logger.info("Narrative generation disabled")
        return None

    client = client or build_llm_client(settings)
    return OpenAINarrativeGenerator(
        client,
        model=settings.OPENAI_MODEL,
        temperature=settings.NARRATIVE_TEMPERATURE,
        max_tokens=settings.NARRATIVE_MAX_TOKENS,
    )
