"""
Tests for the Content Extractor.
Markup is parsed in-process; no network calls.
"""

import pytest

from pageaudit.core.errors import UrlResolutionFailure
from pageaudit.engines.base import PageSignals
from pageaudit.engines.extractor.document import SoupDocument
from pageaudit.engines.extractor.engine import ContentExtractor, URLResolver, extract
from pageaudit.engines.scoring.engine import score

from conftest import SCRAPED_AT, SOURCE_URL, TITLE_45


# ─────────────────────────────────────────────
# URL Resolver Tests
# ─────────────────────────────────────────────

class TestURLResolver:

    def test_resolves_relative_path(self):
        assert URLResolver.resolve("/about", SOURCE_URL) == "https://example.com/about"

    def test_resolves_sibling_path(self):
        assert URLResolver.resolve("other", "https://example.com/dir/page") == "https://example.com/dir/other"

    def test_absolute_url_unchanged(self):
        assert URLResolver.resolve("https://other.com/x", SOURCE_URL) == "https://other.com/x"

    def test_strips_surrounding_whitespace(self):
        assert URLResolver.resolve("  /about ", SOURCE_URL) == "https://example.com/about"

    def test_relative_base_raises(self):
        with pytest.raises(UrlResolutionFailure):
            URLResolver.resolve("/about", "not a url")

    def test_malformed_href_raises(self):
        with pytest.raises(UrlResolutionFailure):
            URLResolver.resolve("http://[::1", SOURCE_URL)

    def test_hostname_ignores_port_and_case(self):
        assert URLResolver.hostname("https://EXAMPLE.com:8443/x") == "example.com"

    def test_external_check(self):
        assert URLResolver.is_external("https://other.com/x", SOURCE_URL)
        assert not URLResolver.is_external("https://example.com/about", SOURCE_URL)
        assert URLResolver.is_external("https://blog.example.com/", SOURCE_URL)


# ─────────────────────────────────────────────
# Document Adapter Tests
# ─────────────────────────────────────────────

class TestSoupDocument:

    def test_remove_nested_matches(self):
        document = SoupDocument("<body><aside><aside>inner</aside></aside><p>kept</p></body>")
        assert document.remove("aside") == 2
        assert document.text() == "kept"

    def test_attr_absent_is_none(self):
        node = SoupDocument('<img src="a.png">').select_first("img")
        assert node.attr("alt") is None
        assert node.attr("src") == "a.png"

    def test_multi_valued_attr_joined(self):
        node = SoupDocument('<div class="post entry">x</div>').select_first("div")
        assert node.attr("class") == "post entry"


# ─────────────────────────────────────────────
# Extractor Tests
# ─────────────────────────────────────────────

class TestContentExtractor:

    @pytest.mark.parametrize("markup", ["", "   ", "\x00\x01", "<<<>>>", "not html at all"])
    def test_degenerate_markup_never_raises(self, extractor, markup):
        signals = extractor.extract(markup, SOURCE_URL)
        assert isinstance(signals, PageSignals)
        assert signals.title == ""
        assert signals.headings == ()
        assert signals.images == ()
        assert signals.links == ()

    def test_empty_markup_gives_empty_record(self, extractor):
        signals = extractor.extract("", SOURCE_URL, scraped_at=SCRAPED_AT)
        assert signals == PageSignals.empty(SOURCE_URL, SCRAPED_AT)
        assert signals.word_count == 0
        assert signals.body_text == ""

    def test_parser_failure_degrades_to_empty_record(self):
        def broken_factory(markup):
            raise RuntimeError("parser exploded")

        extractor = ContentExtractor(document_factory=broken_factory)
        signals = extractor.extract("<html></html>", SOURCE_URL, scraped_at=SCRAPED_AT)
        assert signals == PageSignals.empty(SOURCE_URL, SCRAPED_AT)

    def test_extraction_is_deterministic(self, extractor):
        markup = "<html><head><title>T</title></head><body><main>One two three</main></body></html>"
        first = extractor.extract(markup, SOURCE_URL, scraped_at=SCRAPED_AT)
        second = extractor.extract(markup, SOURCE_URL, scraped_at=SCRAPED_AT)
        assert first == second

    def test_title_trimmed_but_inner_whitespace_kept(self, extractor):
        signals = extractor.extract("<title>  Hello\n\n   World  </title>", SOURCE_URL)
        assert signals.title == "Hello\n\n   World"

    def test_meta_name_matched_case_insensitively(self, extractor):
        markup = """<head>
            <meta name="Description" content="  A page about things  ">
            <meta name="KEYWORDS" content="things, stuff">
        </head>"""
        signals = extractor.extract(markup, SOURCE_URL)
        assert signals.meta_description == "A page about things"
        assert signals.meta_keywords == "things, stuff"

    def test_missing_meta_is_empty_string(self, extractor):
        signals = extractor.extract("<head><meta charset='utf-8'></head>", SOURCE_URL)
        assert signals.meta_description == ""
        assert signals.meta_keywords == ""

    def test_headings_in_document_order(self, extractor):
        markup = "<body><h2>Second</h2><h1> First </h1><h6>Deep</h6></body>"
        signals = extractor.extract(markup, SOURCE_URL)
        assert [(h.level, h.text) for h in signals.headings] == [(2, "Second"), (1, "First"), (6, "Deep")]

    def test_image_sources_resolved(self, extractor):
        markup = '<body><img src="/a.png" alt="A"><img src="b.png"><img src=""></body>'
        signals = extractor.extract(markup, "https://example.com/dir/page")
        assert [img.absolute_src for img in signals.images] == [
            "https://example.com/a.png",
            "https://example.com/dir/b.png",
            "",
        ]
        assert [img.has_alt for img in signals.images] == [True, False, False]

    def test_empty_alt_means_no_alt(self, extractor):
        signals = extractor.extract('<img src="a.png" alt="">', SOURCE_URL)
        assert signals.images[0].alt_text == ""
        assert not signals.images[0].has_alt

    def test_link_classification(self, extractor):
        markup = '<body><a href="https://other.com/x">Other</a><a href="/about">About us</a></body>'
        signals = extractor.extract(markup, SOURCE_URL)
        external, internal = signals.links
        assert external.absolute_href == "https://other.com/x"
        assert external.is_external
        assert internal.absolute_href == "https://example.com/about"
        assert not internal.is_external
        assert internal.anchor_text == "About us"

    def test_anchor_without_href_ignored(self, extractor):
        signals = extractor.extract('<body><a name="top">Top</a><a href="/x">X</a></body>', SOURCE_URL)
        assert len(signals.links) == 1

    def test_unresolvable_href_kept_verbatim(self, extractor):
        signals = extractor.extract('<body><a href="http://[::1">Broken</a></body>', SOURCE_URL)
        link = signals.links[0]
        assert link.absolute_href == "http://[::1"
        assert not link.is_external

    def test_navigation_links_not_counted(self, extractor):
        markup = """<body>
            <nav><a href="/home">Home navigation</a></nav>
            <main><p>Real content here</p></main>
        </body>"""
        signals = extractor.extract(markup, SOURCE_URL)
        assert signals.links == ()
        assert signals.body_text == "Real content here"

    def test_site_header_excluded_from_structure(self, extractor):
        markup = """<body>
            <header><h1>Logo</h1><nav><a href="/a">A</a><a href="/b">B</a></nav></header>
            <main><h1>Real</h1><img src="/x.png" alt="X"></main>
            <aside><img src="/ad.png"></aside>
            <footer><h2>Contact</h2><a href="/contact">Contact</a></footer>
        </body>"""
        signals = extractor.extract(markup, SOURCE_URL)
        assert [(h.level, h.text) for h in signals.headings] == [(1, "Real")]
        assert signals.links == ()
        assert [img.absolute_src for img in signals.images] == ["https://example.com/x.png"]

        report = score(signals)
        assert "Multiple H1 tags found" not in report.basic.issues
        assert "No internal links found" in report.technical.issues

    def test_boilerplate_removed_from_body(self, extractor):
        markup = """<body>
            <header>Site header</header>
            <script>var x = 1;</script>
            <style>p { color: red; }</style>
            <p>Visible   text</p>
            <aside>Sidebar</aside>
            <footer>Footer</footer>
        </body>"""
        signals = extractor.extract(markup, SOURCE_URL)
        assert signals.body_text == "Visible text"

    def test_first_content_candidate_wins(self, extractor):
        markup = """<body>
            <article>Article text</article>
            <main>Main text</main>
            <p>Loose text</p>
        </body>"""
        signals = extractor.extract(markup, SOURCE_URL)
        assert signals.body_text == "Main text"

    def test_class_and_id_candidates(self, extractor):
        signals = extractor.extract('<body><div id="content">By id</div><p>Other</p></body>', SOURCE_URL)
        assert signals.body_text == "By id"

    def test_empty_candidate_falls_back_to_body(self, extractor):
        signals = extractor.extract("<body><main>  </main><p>Body text</p></body>", SOURCE_URL)
        assert signals.body_text == "Body text"

    def test_word_count_matches_body_text(self, extractor):
        signals = extractor.extract("<body><p>one  two\nthree</p></body>", SOURCE_URL)
        assert signals.word_count == 3
        assert signals.word_count == len(signals.body_text.split())

    def test_well_formed_page(self, well_formed_signals):
        assert well_formed_signals.title == TITLE_45
        assert len(well_formed_signals.meta_description) == 140
        assert well_formed_signals.word_count == 600
        assert len(well_formed_signals.links) == 4
        assert all(not link.is_external for link in well_formed_signals.links)

    def test_module_level_extract(self):
        signals = extract("<title>Hi</title>", SOURCE_URL, scraped_at=SCRAPED_AT)
        assert signals.title == "Hi"
        assert signals.scraped_at == SCRAPED_AT

    def test_serializes_with_camel_case_names(self, well_formed_signals):
        data = well_formed_signals.model_dump(by_alias=True, mode="json")
        assert data["sourceUrl"] == SOURCE_URL
        assert data["wordCount"] == 600
        assert data["images"][0]["hasAlt"] is True
        assert "isExternal" in data["links"][0]
