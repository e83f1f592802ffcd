"""
Content Analyzer

Rewards depth and readability:
- Keyword extraction (frequency ranking, stop words removed)
- Keyword density for the candidate keywords
- Readability proxy from mean words per sentence (1-10)
- Quality proxy from length, headings and images (1-10)
"""

from __future__ import annotations

import re
from collections import Counter

from pageaudit.engines.base import (
    ContentScore,
    Keyword,
    PageSignals,
    SubScoreAnalyzer,
    clamp,
    round_half_up,
)


STOP_WORDS = frozenset({
    "the", "and", "for", "are", "but", "not", "you", "all", "can", "had",
    "her", "was", "one", "our", "out", "day", "get", "has", "him", "his",
    "how", "man", "new", "now", "old", "see", "two", "way", "who", "boy",
    "did", "its", "let", "put", "say", "she", "too", "use",
    "about", "after", "also", "been", "before", "being", "both", "could",
    "does", "each", "from", "have", "here", "into", "just", "like", "made",
    "many", "more", "most", "much", "must", "only", "other", "over", "same",
    "should", "some", "such", "than", "that", "their", "them", "then",
    "there", "these", "they", "this", "those", "very", "were", "what",
    "when", "where", "which", "while", "will", "with", "would", "your",
})

PUNCTUATION_RE = re.compile(r"[^\w\s]")
SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")


class ContentAnalyzer(SubScoreAnalyzer[ContentScore]):

    NAME = "content"

    # Readability thresholds (mean words per sentence)
    LONG_SENTENCES = 25
    VERY_LONG_SENTENCES = 30
    CHOPPY_SENTENCES = 10

    def analyze(self, signals: PageSignals) -> ContentScore:
        candidates = self.extract_keywords(signals.body_text)
        readability = self.calculate_readability(signals.body_text)
        quality = self.assess_quality(signals)

        return ContentScore(
            score=round_half_up((readability + quality) / 2),
            keywords=tuple(candidates[: self.policy.keywords_reported]),
            readability=readability,
            quality=quality,
            word_count=signals.word_count,
            keyword_density=self.calculate_keyword_density(candidates, signals.word_count),
        )

    def extract_keywords(self, text: str) -> list[Keyword]:
        """
        Rank terms by frequency, highest first.
        Ties keep first-occurrence order: Counter preserves insertion order
        and sorted() is stable.
        """
        words = PUNCTUATION_RE.sub(" ", text.lower()).split()
        frequency = Counter(
            word for word in words
            if len(word) >= self.policy.min_keyword_length and word not in STOP_WORDS
        )
        ranked = sorted(frequency.items(), key=lambda item: item[1], reverse=True)
        return [Keyword(term=term, count=count) for term, count in ranked[: self.policy.keyword_candidates]]

    def calculate_keyword_density(self, keywords: list[Keyword], word_count: int) -> dict[str, float]:
        if word_count == 0:
            return {}
        return {kw.term: round(kw.count / word_count * 100, 2) for kw in keywords}

    def calculate_readability(self, text: str) -> int:
        """
        Score 1-10 from mean sentence length (ideal: 10-25 words).

        Every split segment counts as a sentence, including the empty one after
        a final terminator, so "One sentence." is two segments.
        """
        word_count = len(text.split())
        sentence_count = len(SENTENCE_SPLIT_RE.split(text))
        avg_words_per_sentence = word_count / sentence_count

        score = 10
        if avg_words_per_sentence > self.LONG_SENTENCES:
            score -= 3
        if avg_words_per_sentence > self.VERY_LONG_SENTENCES:
            score -= 2
        if avg_words_per_sentence < self.CHOPPY_SENTENCES:
            score -= 2

        return clamp(score, 1, 10)

    def assess_quality(self, signals: PageSignals) -> int:
        score = 5

        # Word count factor
        if signals.word_count > 500:
            score += 2
        if signals.word_count > 1000:
            score += 1
        if signals.word_count < self.policy.min_word_count:
            score -= 2

        # Heading structure
        if signals.headings:
            score += 1
        if len(signals.headings) > 3:
            score += 1

        # Image usage
        if signals.images:
            score += 1

        return clamp(score, 1, 10)

    def default(self) -> ContentScore:
        return ContentScore(score=0, readability=0, quality=0)
