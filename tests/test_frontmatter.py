"""
Front matter tests

Tests splitting the YAML block off a source, validation of its shape, and
serialization back to a block that splits to the same mapping.
"""

import datetime

import pytest

from pressmark.lib.errors import ParseError
from pressmark.lib.frontmatter import frontmatter_dump, frontmatter_split


class TestSplit:
    """Test separating front matter from the body"""

    def test_simple_block(self):
        """Block with one key, body after the closing delimiter"""
        split = frontmatter_split("---\ntitle: X\n---\nbody")

        assert split.front_matter == {"title": "X"}
        assert split.body == "body"
        assert split.body_line == 4

    def test_opening_delimiter_omitted(self):
        """A mapping closed by a delimiter line is front matter on its own"""
        split = frontmatter_split("title: X\n---\nbody")

        assert split.front_matter == {"title": "X"}
        assert split.body == "body"
        assert split.body_line == 3

    def test_omitted_opening_needs_flat_mapping(self):
        """Text before a rule that is not flat front matter stays body"""
        for text in (
            "- a\n- b\n---\nbody",
            "author:\n  name: Ann\n---\nbody",
            "title: [unclosed\n---\nbody",
            "\n---\nbody",
        ):
            split = frontmatter_split(text)

            assert split.front_matter == {}
            assert split.body == text

    def test_no_front_matter(self):
        """Text without an opening delimiter is all body"""
        split = frontmatter_split("Just text\n---\nmore")

        assert split.front_matter == {}
        assert split.body == "Just text\n---\nmore"
        assert split.body_line == 1

    def test_empty_source(self):
        """Empty text gives empty mapping and body"""
        split = frontmatter_split("")

        assert split.front_matter == {}
        assert split.body == ""

    def test_empty_block(self):
        """Two delimiters with nothing between them"""
        split = frontmatter_split("---\n---\nbody")

        assert split.front_matter == {}
        assert split.body == "body"

    def test_types_preserved(self):
        """Scalars keep their YAML types, lists stay lists"""
        split = frontmatter_split(
            "---\ncount: 3\ndraft: false\ntags: [a, b]\ndate: 2014-03-01\n---\n"
        )

        assert split.front_matter["count"] == 3
        assert split.front_matter["draft"] is False
        assert split.front_matter["tags"] == ["a", "b"]
        assert split.front_matter["date"] == datetime.date(2014, 3, 1)

    def test_crlf_and_bom(self):
        """Windows line endings and a byte order mark are tolerated"""
        split = frontmatter_split("\ufeff---\r\ntitle: X\r\n---\r\nbody\r\n")

        assert split.front_matter == {"title": "X"}
        assert split.body == "body\n"

    def test_unclosed_block(self):
        """Opening delimiter without a closing one"""
        with pytest.raises(ParseError) as exc:
            frontmatter_split("---\ntitle: X\nbody")

        assert "never closed" in str(exc.value)

    def test_invalid_yaml(self):
        """Malformed YAML reports a ParseError with a line number"""
        with pytest.raises(ParseError) as exc:
            frontmatter_split("---\ntitle: [unclosed\n---\nbody")

        assert exc.value.line_number is not None

    def test_not_a_mapping(self):
        """A YAML list is not front matter"""
        with pytest.raises(ParseError):
            frontmatter_split("---\n- a\n- b\n---\nbody")

    def test_nested_mapping_rejected(self):
        """Nested mappings cannot be front matter values"""
        with pytest.raises(ParseError) as exc:
            frontmatter_split("---\nauthor:\n  name: Ann\n---\nbody")

        assert "author" in str(exc.value)

    def test_custom_delimiter(self):
        """The delimiter line can be changed"""
        split = frontmatter_split("+++\ntitle: X\n+++\nbody", delimiter="+++")

        assert split.front_matter == {"title": "X"}
        assert split.body == "body"


class TestDump:
    """Test serializing front matter"""

    def test_round_trip(self):
        """Dumped front matter splits back to the same mapping and body"""
        mapping = {
            "title": "A: tricky --- title",
            "layout": "post",
            "count": 7,
            "draft": True,
            "tags": ["graphics", "c++"],
            "banner": None,
        }
        text = frontmatter_dump(mapping) + "Body\n"

        split = frontmatter_split(text)

        assert split.front_matter == mapping
        assert split.body == "Body\n"

    def test_key_order_kept(self):
        """Keys are written in mapping order"""
        text = frontmatter_dump({"zeta": 1, "alpha": 2})

        assert text.index("zeta") < text.index("alpha")

    def test_empty_mapping(self):
        """Empty mapping gives an empty block"""
        assert frontmatter_dump({}) == "---\n---\n"
        assert frontmatter_split(frontmatter_dump({}) + "x").body == "x"

    def test_nested_rejected(self):
        """Nested values cannot be dumped"""
        with pytest.raises(ParseError):
            frontmatter_dump({"author": {"name": "Ann"}})
