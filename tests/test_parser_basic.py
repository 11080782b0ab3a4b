"""
Basic parser tests - simplest cases

Tests empty sources, plain text, output tags and literal passthrough of
tags the parser does not own.
"""

import pytest

from pressmark.lib.errors import ParseError
from pressmark.lib.parser import Parser
from pressmark.models import TextSegment, VariableRef


class TestEmptyAndSimple:
    """Test empty source and plain text"""

    def test_empty_source(self):
        """Empty string should parse to a document without segments"""
        document = Parser("").parse()

        assert document.front_matter == {}
        assert document.segments == ()

    def test_front_matter_only(self):
        """Front matter with an empty body"""
        document = Parser("---\ntitle: X\n---\n").parse()

        assert document.front_matter["title"] == "X"
        assert document.segments == ()

    def test_plain_text(self):
        """Text without tags is one TextSegment"""
        document = Parser("<p>Hello</p>\n").parse()

        assert document.segments == (TextSegment(text="<p>Hello</p>\n", line_number=1),)

    def test_front_matter_and_body(self):
        """Body line numbers continue after the front matter"""
        document = Parser("---\ntitle: X\n---\nbody").parse()

        assert document.front_matter == {"title": "X"}
        assert document.segments[0].text == "body"
        assert document.segments[0].line_number == 4

    def test_front_matter_without_opening_line(self):
        """title: X / --- / body"""
        document = Parser("title: X\n---\nbody").parse()

        assert document.front_matter == {"title": "X"}
        assert document.segments == (TextSegment(text="body", line_number=3),)

    def test_front_matter_read_only(self):
        """Parsed front matter cannot be modified"""
        document = Parser("---\ntitle: X\n---\nbody").parse()

        with pytest.raises(TypeError):
            document.front_matter["title"] = "Y"


class TestOutputTags:
    """Test {{ page.x }} and {{ site.x }} tags"""

    def test_page_variable(self):
        """page.title becomes a VariableRef between two texts"""
        document = Parser("<h1>{{ page.title }}</h1>").parse()

        assert len(document.segments) == 3
        variable = document.segments[1]
        assert isinstance(variable, VariableRef)
        assert variable.scope == "page"
        assert variable.path == "title"
        assert variable.marker == "{{ page.title }}"

    def test_site_dotted_path(self):
        """Dotted paths below site are kept whole"""
        document = Parser("{{site.author.name}}").parse()

        assert document.segments[0] == VariableRef(
            scope="site", path="author.name", line_number=1, marker="{{site.author.name}}"
        )

    def test_variable_line_number(self):
        """Line numbers count from the start of the source"""
        document = Parser("---\nt: 1\n---\none\ntwo {{ page.t }}").parse()

        assert document.segments[1].line_number == 5


class TestLiteralTags:
    """Test tags and text the parser leaves alone"""

    def test_unknown_block_tag_is_text(self):
        """Tags other than include, capture, raw and comment stay literal"""
        source = "{% if page.draft %}Draft{% endif %}"
        document = Parser(source).parse()

        assert len(document.segments) == 1
        assert document.segments[0].text == source

    def test_other_output_tags_are_text(self):
        """{{ content }} and friends are left for layouts"""
        document = Parser("a {{ content }} b").parse()

        assert [type(s) for s in document.segments] == [TextSegment]
        assert document.segments[0].text == "a {{ content }} b"

    def test_stray_end_tag(self):
        """A closing tag without an opening one is an error"""
        with pytest.raises(ParseError) as exc:
            Parser("text\n{% endcapture %}").parse()

        assert exc.value.line_number == 2
        assert "endcapture" in str(exc.value)


class TestRawAndComment:
    """Test raw and comment blocks"""

    def test_raw_block_verbatim(self):
        """Raw content is kept uninterpreted and marked verbatim"""
        document = Parser("{% raw %}{% include foo %}{{ page.x }}{% endraw %}").parse()

        assert document.segments == (
            TextSegment(text="{% include foo %}{{ page.x }}", line_number=1, verbatim=True),
        )

    def test_comment_dropped(self):
        """Comment blocks leave no trace"""
        document = Parser("a{% comment %}{% include foo %}{% endcomment %}b").parse()

        assert "".join(s.text for s in document.segments) == "ab"

    def test_unclosed_raw(self):
        """Raw without endraw"""
        with pytest.raises(ParseError):
            Parser("{% raw %}forever").parse()


class TestLimits:
    """Test the document size budget"""

    def test_oversized_source(self, monkeypatch):
        """Sources over max_document_chars are rejected"""
        from pressmark.config import appsettings

        monkeypatch.setattr(appsettings, "max_document_chars", 10)
        with pytest.raises(ParseError) as exc:
            Parser("x" * 11).parse()

        assert "limit" in str(exc.value)
