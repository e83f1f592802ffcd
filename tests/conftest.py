"""
Shared fixtures: markup builders and a default scoring policy.
"""

from datetime import datetime, timezone

import pytest

from pageaudit.engines.base import ScoringPolicy
from pageaudit.engines.extractor.engine import ContentExtractor

SOURCE_URL = "https://example.com/page"
SCRAPED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)

TITLE_45 = "How to Score Page Quality: A Practical Guide!"
DESCRIPTION_140 = ("Signals " * 18)[:140]

VOCABULARY = ("search", "engine", "page", "quality", "signal", "ranking", "content", "markup")


def make_words(count: int, per_sentence: int = 12) -> str:
    """Body copy of exactly count words, split into sentences of per_sentence words."""
    words = [VOCABULARY[i % len(VOCABULARY)] for i in range(count)]
    sentences = [
        " ".join(words[i:i + per_sentence]) + "."
        for i in range(0, count, per_sentence)
    ]
    return " ".join(sentences)


def minimal_page_markup() -> str:
    """No title, no meta description, no headings, one image without alt, 50 words."""
    return f"""<html><body>
        <img src="/hero.png">
        <p>{make_words(50, per_sentence=10)}</p>
    </body></html>"""


def well_formed_page_markup() -> str:
    """One H1, 45-char title, 140-char description, alt on every image, 600 words, 4 internal links."""
    links = "".join(f'<a href="/section-{i}">Section {i}</a>' for i in range(4))
    return f"""<html>
    <head>
        <title>{TITLE_45}</title>
        <meta name="description" content="{DESCRIPTION_140}">
    </head>
    <body>
        <h1>Page quality</h1>
        <main>
            <img src="/diagram.png" alt="Scoring diagram">
            <p>{make_words(600)}</p>
        </main>
        <div class="related">{links}</div>
        <footer>Copyright notice</footer>
    </body>
    </html>"""


@pytest.fixture
def policy():
    return ScoringPolicy()


@pytest.fixture
def extractor():
    return ContentExtractor()


@pytest.fixture
def minimal_signals(extractor):
    return extractor.extract(minimal_page_markup(), SOURCE_URL, scraped_at=SCRAPED_AT)


@pytest.fixture
def well_formed_signals(extractor):
    return extractor.extract(well_formed_page_markup(), SOURCE_URL, scraped_at=SCRAPED_AT)
