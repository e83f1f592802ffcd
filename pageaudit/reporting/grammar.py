"""
Grammar analysis through an OpenAI-compatible chat completion API.

Body text is split into chunks on sentence boundaries; each chunk is scored
1-10 by the model and the chunk results are merged. Like narrative, the
checker is an injected collaborator and never blocks a report: a chunk that
fails scores 5, an unparseable reply scores 7, and a checker that fails
outright yields the neutral fallback analysis.
"""

from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

import structlog
from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, Field, ValidationError, field_validator

from pageaudit.core.config import Settings, get_settings
from pageaudit.engines.base import Record, round_half_up
from pageaudit.reporting.narrative import build_llm_client

logger = structlog.get_logger(__name__)

SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")

FAILED_CHUNK_SCORE = 5
UNPARSEABLE_CHUNK_SCORE = 7
NEUTRAL_SCORE = 5


class GrammarAnalysis(Record):
    score: int = Field(ge=1, le=10)
    errors: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()
    improvements: tuple[str, ...] = ()
    readability_level: str = "intermediate"
    summary: str = ""

    @classmethod
    def fallback(cls, summary: str = "Grammar analysis failed") -> GrammarAnalysis:
        return cls(score=NEUTRAL_SCORE, summary=summary)


class ChunkAnalysis(BaseModel):
    """One model reply. Fields are optional; models omit them freely."""
    score: float | None = None
    errors: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    readability_level: str | None = Field(None, alias="readabilityLevel")

    @field_validator("errors", "suggestions", "improvements", mode="before")
    @classmethod
    def stringify_items(cls, value):
        # Models sometimes return objects such as {"error": ..., "fix": ...}
        if isinstance(value, list):
            return [item if isinstance(item, str) else str(item) for item in value]
        return value


@runtime_checkable
class GrammarChecker(Protocol):
    async def analyze(self, text: str) -> GrammarAnalysis:
        ...


def split_content(text: str, max_length: int) -> list[str]:
    """Chunks of at most max_length characters, split after sentence terminators."""
    if len(text) <= max_length:
        return [text]

    chunks: list[str] = []
    current = ""
    for sentence in SENTENCE_SPLIT_RE.split(text):
        if not sentence.strip():
            continue
        if current and len(current + sentence) > max_length:
            chunks.append(current.strip())
            current = sentence + "."
        else:
            current += sentence + "."
    if current.strip():
        chunks.append(current.strip())
    return chunks


def combine_analyses(analyses: list[ChunkAnalysis]) -> GrammarAnalysis:
    scores = [a.score for a in analyses if a.score is not None]
    score = round_half_up(sum(scores) / len(scores)) if scores else NEUTRAL_SCORE
    levels = [a.readability_level for a in analyses if a.readability_level]

    return GrammarAnalysis(
        score=max(1, min(10, score)),
        errors=tuple(e for a in analyses for e in a.errors),
        suggestions=tuple(s for a in analyses for s in a.suggestions),
        improvements=tuple(i for a in analyses for i in a.improvements),
        readability_level=levels[0] if levels else "intermediate",
        summary=f"Analyzed {len(analyses)} chunk(s)",
    )


def grammar_prompt(chunk: str) -> str:
    return f"""Analyze this text for grammar, spelling, and readability issues:

"{chunk}"

Provide a JSON response with:
1. score (1-10, where 10 is perfect)
2. errors (array of specific grammar/spelling errors found)
3. suggestions (array of improvement suggestions)
4. readabilityLevel (beginner/intermediate/advanced)

Focus on:
- Grammar mistakes
- Spelling errors
- Sentence structure
- Clarity and readability
- Professional tone

Respond only with valid JSON."""


class OpenAIGrammarChecker:
    """GrammarChecker backed by openai.AsyncOpenAI."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        temperature: float = 0.1,
        max_tokens: int = 800,
        chunk_size: int = 2000,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.chunk_size = chunk_size

    async def analyze(self, text: str) -> GrammarAnalysis:
        if not text.strip():
            return GrammarAnalysis.fallback("No text to analyze")

        chunks = split_content(text, self.chunk_size)
        # Chunks run one at a time, in order
        analyses = [await self._analyze_chunk(chunk) for chunk in chunks]
        return combine_analyses(analyses)

    async def _analyze_chunk(self, chunk: str) -> ChunkAnalysis:
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": grammar_prompt(chunk)}],
                temperature=self.temperature,
                max_completion_tokens=self.max_tokens,
            )
        except OpenAIError as exc:
            logger.warning("Grammar chunk request failed", error=str(exc), chunk_length=len(chunk))
            return ChunkAnalysis(score=FAILED_CHUNK_SCORE)

        content = completion.choices[0].message.content if completion.choices else None
        try:
            return ChunkAnalysis.model_validate_json(CODE_FENCE_RE.sub("", (content or "").strip()))
        except ValidationError:
            logger.warning("Grammar reply was not valid JSON", chunk_length=len(chunk))
            return ChunkAnalysis(
                score=UNPARSEABLE_CHUNK_SCORE,
                suggestions=["Consider reviewing for clarity and conciseness"],
                readabilityLevel="intermediate",
            )


def build_grammar_checker(
    settings: Settings | None = None,
    client: AsyncOpenAI | None = None,
) -> OpenAIGrammarChecker | None:
    """Checker from settings, or None when grammar analysis is disabled or unconfigured."""
    settings = settings or get_settings()
    if not settings.grammar_configured:
        logger.info("Grammar analysis disabled")
        return None

    return OpenAIGrammarChecker(
        client or build_llm_client(settings),
        model=settings.GRAMMAR_MODEL or settings.OPENAI_MODEL,
        temperature=settings.GRAMMAR_TEMPERATURE,
        max_tokens=settings.GRAMMAR_MAX_TOKENS,
        chunk_size=settings.GRAMMAR_CHUNK_SIZE,
    )
