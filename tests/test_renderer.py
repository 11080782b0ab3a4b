"""
Renderer tests

Tests assembling resolved documents, leftover marker detection, the source
output format and layout chains.
"""

import pytest

from pressmark.lib.batch import text_render
from pressmark.lib.errors import RenderError, SiteConfigError
from pressmark.lib.frontmatter import frontmatter_split
from pressmark.lib.lexer import PressmarkLexer
from pressmark.lib.partials import lexer_get
from pressmark.lib.renderer import MARKER_PATTERN, Layout, Renderer, layouts_load
from pressmark.lib.site import SiteConfig
from pressmark.models import Document, InclusionRef, ResolvedSegment, TextSegment, VariableRef
from pygments.token import Keyword, Name


@pytest.fixture
def layouts():
    """A post layout nested in a default layout"""
    return {
        "default": Layout(
            name="default",
            template="<html><title>{{ page.title }} | {{ site.title }}</title>{{ content }}</html>",
        ),
        "post": Layout(
            name="post",
            template='<article class="{{ page.kind | default: "post" }}">{{ content }}</article>',
            front_matter={"layout": "default"},
        ),
    }


class TestBodyAssembly:
    """Test concatenation of resolved segments"""

    def test_text_and_resolved(self):
        """Segments are joined in order"""
        document = Document(segments=(
            TextSegment(text="a"),
            ResolvedSegment(text="<b>b</b>", origin="x"),
            TextSegment(text="c"),
        ))

        assert Renderer().render(document) == "a<b>b</b>c"

    def test_unresolved_inclusion(self):
        """An InclusionRef cannot be rendered"""
        document = Document(segments=(InclusionRef(name="image", line_number=3),))

        with pytest.raises(RenderError) as exc:
            Renderer().render(document)

        assert exc.value.line_number == 3
        assert "image" in str(exc.value)

    def test_unresolved_variable(self):
        """A VariableRef cannot be rendered"""
        document = Document(segments=(VariableRef(scope="page", path="title"),))

        with pytest.raises(RenderError):
            Renderer().render(document)

    def test_leftover_marker_in_text(self):
        """Marker syntax in plain text is reported with its line"""
        document = Document(segments=(TextSegment(text="ok\n{% capture x %}", line_number=10),))

        with pytest.raises(RenderError) as exc:
            Renderer().render(document)

        assert exc.value.line_number == 11

    def test_marker_in_verbatim_text(self):
        """Raw text may show marker syntax"""
        document = Document(segments=(TextSegment(text="{% include x %}", verbatim=True),))

        assert Renderer().render(document) == "{% include x %}"

    def test_resolved_text_not_scanned(self):
        """Partial output is final even when it shows markers"""
        document = Document(segments=(ResolvedSegment(text="{{ include foo }}"),))

        assert Renderer().render(document) == "{{ include foo }}"

    def test_unknown_output_format(self):
        """Only html and source are supported"""
        with pytest.raises(ValueError):
            Renderer(output_format="pdf")


class TestFullPipeline:
    """Test rendering straight from source text"""

    def test_no_leftover_markers(self):
        """Every include and capture is gone after rendering"""
        source = (
            "---\ntitle: Scene graphs\n---\n"
            "{% capture tree lang=python caption=\"A tree\" %}\n"
            "class Node:\n    pass\n"
            "{% endcapture %}\n"
            "{% include image.html url=\"/t.png\" description=\"Tree\" %}\n"
            "{% include code.html code=tree %}\n"
            "{{ include image url=/u.png }}\n"
        )
        output = text_render(source)

        assert MARKER_PATTERN.search(output) is None
        assert output.count("<figure") == 3

    def test_raw_survives(self):
        """Raw blocks come out exactly as written"""
        output = text_render("{% raw %}{% include x %}{% endraw %}")

        assert output == "{% include x %}"

    def test_source_format_round_trip(self):
        """Source output keeps the front matter and resolves the body"""
        source = "---\ntitle: X\ntags: [a, b]\n---\n<p>{{ page.title }}</p>\n"
        output = text_render(source, output_format="source")

        split = frontmatter_split(output)
        assert split.front_matter == {"title": "X", "tags": ["a", "b"]}
        assert split.body == "<p>X</p>\n"

    def test_source_format_without_front_matter(self):
        """No front matter, no block"""
        assert text_render("body", output_format="source") == "body"

    def test_pressmark_lexer(self):
        """pm code blocks use the bundled lexer"""
        lexer = lexer_get("pm")
        tokens = list(lexer.get_tokens('{% include image.html url="/a.png" %}'))

        assert isinstance(lexer, PressmarkLexer)
        assert (Keyword, "include") in tokens
        assert (Name.Function, "image.html") in tokens

    def test_unknown_language_is_plain_text(self):
        """Unknown languages fall back to plain text"""
        output = text_render('{% include code code="x" lang="no-such-language" %}')

        assert 'data-lang="no-such-language"' in output


class TestLayouts:
    """Test layout chains"""

    def test_layout_chain(self, layouts):
        """post wraps the body, default wraps post"""
        site = SiteConfig(config={"title": "Blog"})
        document = Document(
            front_matter={"title": "Hi", "layout": "post"},
            segments=(TextSegment(text="<p>body</p>"),),
        )

        output = Renderer(layouts=layouts, site=site).render(document)

        assert output == (
            '<html><title>Hi | Blog</title><article class="post"><p>body</p></article></html>'
        )

    def test_content_not_rescanned(self, layouts):
        """Body text that looks like a layout tag stays literal"""
        document = Document(
            front_matter={"layout": "post", "kind": "note"},
            segments=(TextSegment(text="{{ content }} {{ page.kind }}", verbatim=True),),
        )

        output = Renderer(layouts=layouts).render(document)

        assert '<article class="note">{{ content }} {{ page.kind }}</article>' in output

    def test_no_layout(self, layouts):
        """layout: none renders the bare body"""
        document = Document(front_matter={"layout": "none"}, segments=(TextSegment(text="x"),))

        assert Renderer(layouts=layouts).render(document) == "x"

    def test_without_layout_table(self):
        """Without layouts the layout key is ignored"""
        document = Document(front_matter={"layout": "post"}, segments=(TextSegment(text="x"),))

        assert Renderer().render(document) == "x"

    def test_unknown_layout(self, layouts):
        """A layout name missing from the table is an error"""
        document = Document(front_matter={"layout": "gallery"}, segments=())

        with pytest.raises(RenderError) as exc:
            Renderer(layouts=layouts).render(document)

        assert "gallery" in str(exc.value)

    def test_layout_cycle(self):
        """Layouts naming each other are rejected"""
        cyclic = {
            "a": Layout(name="a", template="{{ content }}", front_matter={"layout": "b"}),
            "b": Layout(name="b", template="{{ content }}", front_matter={"layout": "a"}),
        }
        document = Document(front_matter={"layout": "a"}, segments=(TextSegment(text="x"),))

        with pytest.raises(RenderError) as exc:
            Renderer(layouts=cyclic).render(document)

        assert "cycle" in str(exc.value)

    def test_source_format_ignores_layouts(self, layouts):
        """Source output is never wrapped"""
        document = Document(front_matter={"layout": "post"}, segments=(TextSegment(text="x"),))

        output = Renderer(layouts=layouts, output_format="source").render(document)

        assert output == "---\nlayout: post\n---\nx"


class TestLayoutLoading:
    """Test reading layouts from a directory"""

    def test_missing_directory(self, tmp_path):
        """No directory, no layout table"""
        assert layouts_load(tmp_path / "_layouts") is None
        assert layouts_load(None) is None

    def test_load(self, tmp_path):
        """Layouts are keyed by file stem and keep their front matter"""
        directory = tmp_path / "_layouts"
        directory.mkdir()
        (directory / "default.html").write_text("<main>{{ content }}</main>\n")
        (directory / "post.html").write_text("---\nlayout: default\n---\n<article>{{ content }}</article>")

        loaded = layouts_load(directory)

        assert sorted(loaded) == ["default", "post"]
        assert loaded["post"].front_matter == {"layout": "default"}
        assert loaded["post"].template == "<article>{{ content }}</article>"

    def test_unsupported_filter(self, tmp_path):
        """Layouts may only use the default and escape filters"""
        directory = tmp_path / "_layouts"
        directory.mkdir()
        (directory / "default.html").write_text("{{ page.title | upcase }}{{ content }}")

        with pytest.raises(SiteConfigError) as exc:
            layouts_load(directory)

        assert "upcase" in str(exc.value)

    def test_capture_in_layout_rejected(self, tmp_path):
        """Layouts cannot hold include or capture markers"""
        directory = tmp_path / "_layouts"
        directory.mkdir()
        (directory / "post.html").write_text(
            "---\nlayout: default\n---\n<main>\n{% capture x %}y{% endcapture %}{{ content }}</main>"
        )

        with pytest.raises(SiteConfigError) as exc:
            layouts_load(directory)

        assert "post" in str(exc.value)
        assert exc.value.line_number == 5

    def test_bad_front_matter(self, tmp_path):
        """Layout front matter errors are site errors"""
        directory = tmp_path / "_layouts"
        directory.mkdir()
        (directory / "broken.html").write_text("---\nlayout: [\n")

        with pytest.raises(SiteConfigError):
            layouts_load(directory)
