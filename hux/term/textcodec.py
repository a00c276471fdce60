"""
Conversion between terminal script text (with the game's `$` formatting tags) and the HTML-like markup
used for previews.

The forward direction is exact: text is wrapped like the game would (see `wrap`), escaped, and every tag is
replaced by its markup equivalent. The reverse direction (`from_markup`) is only a best effort for round-tripping
edited preview text, and keeps any line breaks inserted by wrapping.
"""

import re
from dataclasses import dataclass, field
from typing import List

from utils import match

from .model import ScreenKind
from .tags import COLOR_COUNT, FormatTag, TextToken, color_index, tag_kind, tokenize
from .wrap import LineWrapper

# Hex names of the colors the original Hux editor shows for $C0 to $C7
DEFAULT_COLORS = [
    "#00ff00",
    "#ffffff",
    "#ff0000",
    "#008000",
    "#0000ff",
    "#ffff00",
    "#800000",
    "#000080",
]

MARKUP_TAGS = {
    FormatTag.BOLD_START: "<b>",
    FormatTag.BOLD_END: "</b>",
    FormatTag.ITALIC_START: "<i>",
    FormatTag.ITALIC_END: "</i>",
    FormatTag.UNDERLINE_START: "<u>",
    FormatTag.UNDERLINE_END: "</u>",
}

COLOR_SPAN = '<span style="color:{}">'
COLOR_SPAN_END = "</span>"
PARAGRAPH_START = '<p style="white-space: pre-wrap">'
PARAGRAPH_END = "</p>"

COLOR_SPAN_RE = re.compile(r'<span style="color:(?P<color>#?\w+)">')

ESCAPES = [("&", "&amp;"), ("<", "&lt;"), (">", "&gt;"), ('"', "&quot;")]


def escape_markup(text: str) -> str:
    for raw, escaped in ESCAPES:
        text = text.replace(raw, escaped)
    return text


def unescape_markup(text: str) -> str:
    for raw, escaped in reversed(ESCAPES):
        text = text.replace(escaped, raw)
    return text


@dataclass
class TextCodec:
    wrapper: LineWrapper = field(default_factory=LineWrapper)
    colors: List[str] = field(default_factory=lambda: list(DEFAULT_COLORS))
    """
    Markup color for each of the 8 `$Cn` tags, looked up by index.
    """

    def __post_init__(self):
        if len(self.colors) != COLOR_COUNT:
            raise ValueError(f"Expected {COLOR_COUNT} text colors, got {len(self.colors)}")

    def to_markup(self, text: str, kind: ScreenKind) -> str:
        """
        Converts the script text of a screen of the given kind into preview markup.
        """
        if not text:
            return ""

        wrapped = escape_markup(self.wrapper.wrap_text(text, kind))

        out = []
        color_open = False
        for tok in tokenize(wrapped):
            out.append(
                match(
                    tok,
                    {
                        TextToken.text: lambda t: t,
                        TextToken.tag: lambda t: self._tag_markup(t, color_open),
                    },
                )
            )
            if tok in TextToken.tag and tag_kind(tok()) == FormatTag.TEXT_COLOR:
                color_open = True

        # colors don't nest: each new color closed the previous one, the last is closed here
        if color_open:
            out.append(COLOR_SPAN_END)

        return PARAGRAPH_START + "".join(out).replace("\t", " ") + PARAGRAPH_END

    def _tag_markup(self, tag: str, color_open: bool) -> str:
        kind = tag_kind(tag)
        if kind != FormatTag.TEXT_COLOR:
            return MARKUP_TAGS[kind]
        span = COLOR_SPAN.format(self.colors[color_index(tag)])
        return COLOR_SPAN_END + span if color_open else span

    def from_markup(self, markup: str) -> str:
        """
        Turns preview markup back into tagged script text.
        Colors that aren't in the color table become color 0.
        """
        text = markup.replace(PARAGRAPH_START, "").replace(PARAGRAPH_END, "")

        lookup = {c.lower(): i for i, c in reversed(list(enumerate(self.colors)))}

        def color_tag(m: re.Match) -> str:
            return f"{FormatTag.TEXT_COLOR.value}{lookup.get(m.group('color').lower(), 0)}"

        text = COLOR_SPAN_RE.sub(color_tag, text).replace(COLOR_SPAN_END, "")
        for kind, markup_tag in MARKUP_TAGS.items():
            text = text.replace(markup_tag, kind.value)
        return unescape_markup(text)
