"""
Custom Pygments lexer for pressmark source highlighting

Provides syntax highlighting for article sources (front matter plus
Liquid-style tags) when an article shows its own markup in a code block,
e.g. {% include code.html code=example lang="pressmark" %}.

Token types:
- Comment.Preproc: Front matter delimiters
- Name.Attribute: Front matter keys and tag argument names
- Keyword.Declaration: Block tags (capture, raw, comment and their ends)
- Keyword: include
- Name.Function: Partial names
- Name.Variable: page./site./include. variables
- Literal.String: Quoted argument values
- Punctuation: Tag delimiters
"""

from pygments.lexer import RegexLexer, bygroups
from pygments.token import (
    Text,
    Punctuation,
    Name,
    String,
    Keyword,
    Comment,
    Operator,
)


# Tag rules shared by the body states
_TAG_RULES = [
    # {% comment %} ... {% endcomment %}
    (r'(\{%-?)(\s*)(comment)(\s*)(-?%\})',
     bygroups(Punctuation, Text, Keyword.Declaration, Text, Punctuation), 'comment'),

    # {% raw %} ... {% endraw %}
    (r'(\{%-?)(\s*)(raw)(\s*)(-?%\})',
     bygroups(Punctuation, Text, Keyword.Declaration, Text, Punctuation), 'raw'),

    # {% include NAME / {{ include NAME
    (r'(\{%-?|\{\{-?)(\s*)(include)(\s+)([\w.\-/]+)',
     bygroups(Punctuation, Text, Keyword, Text, Name.Function), 'arguments'),

    # {% capture NAME, then any other block tag
    (r'(\{%-?)(\s*)(capture)(\s+)(\w+)',
     bygroups(Punctuation, Text, Keyword.Declaration, Text, Name.Variable), 'arguments'),
    (r'(\{%-?)(\s*)(\w+)', bygroups(Punctuation, Text, Keyword.Declaration), 'arguments'),

    # {{ page.title }} / {{ include.code | escape }}
    (r'\{\{-?', Punctuation, 'output'),
]


class PressmarkLexer(RegexLexer):
    """
    Lexer for pressmark article sources

    Example:
        {% include image.html url="/img/scene.png" %}

    Tokens:
        {% → Punctuation
        include → Keyword
        image.html → Name.Function
        url → Name.Attribute
        = → Operator
        "/img/scene.png" → String
        %} → Punctuation
    """

    name = 'Pressmark'
    aliases = ['pressmark', 'pm']
    filenames = ['*.pm.md']

    tokens = {
        'root': [
            # Front matter block at the very start
            (r'\A---[ \t]*\n', Comment.Preproc, 'frontmatter'),
            *_TAG_RULES,
            (r'[^{]+', Text),
            (r'\{', Text),
        ],

        'frontmatter': [
            (r'^---[ \t]*\n', Comment.Preproc, '#pop'),
            (r'^(\s*)([\w\-]+)(:)', bygroups(Text, Name.Attribute, Punctuation)),
            (r'#.*?$', Comment.Single),
            (r'"[^"\n]*"|\'[^\'\n]*\'', String),
            (r'[^\n]+', String),
            (r'\n', Text),
        ],

        'arguments': [
            (r'-?%\}|-?\}\}', Punctuation, '#pop'),
            (r'([A-Za-z_][\w\-]*)(\s*)(=)', bygroups(Name.Attribute, Text, Operator)),
            (r'"[^"]*"|\'[^\']*\'', String),
            (r'[^\s"\'=%}]+', Name.Variable),
            (r'\s+', Text),
            (r'.', Text),
        ],

        'output': [
            (r'-?\}\}', Punctuation, '#pop'),
            (r'(page|site|include)(\.)([\w.\-]+)', bygroups(Name.Builtin, Punctuation, Name.Variable)),
            (r'\|', Operator),
            (r'(default|escape)(:?)', bygroups(Name.Function, Punctuation)),
            (r'"[^"]*"|\'[^\']*\'', String),
            (r'\s+', Text),
            (r'.', Text),
        ],

        'comment': [
            (r'(\{%-?)(\s*)(endcomment)(\s*)(-?%\})',
             bygroups(Punctuation, Text, Keyword.Declaration, Text, Punctuation), '#pop'),
            (r'[^{]+', Comment),
            (r'\{', Comment),
        ],

        'raw': [
            (r'(\{%-?)(\s*)(endraw)(\s*)(-?%\})',
             bygroups(Punctuation, Text, Keyword.Declaration, Text, Punctuation), '#pop'),
            (r'[^{]+', String.Other),
            (r'\{', String.Other),
        ],
    }


def get_lexer() -> PressmarkLexer:
    """
    Get the PressmarkLexer instance

    Returns:
        PressmarkLexer instance ready for use with Pygments
    """
    return PressmarkLexer()
