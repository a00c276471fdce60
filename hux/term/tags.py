"""
The inline formatting tags of the Aleph One terminal text format, and a tokenizer for them.

    $B / $b   bold on / off
    $I / $i   italics on / off
    $U / $u   underline on / off
    $Cn       switch to text color n, with n in 0-7

Tags never nest or overlap (they all start with `$` followed by a letter), so scanning left to right
and skipping over every recognized tag finds exactly the tags the game engine sees.
"""

from enum import Enum
from typing import List, Tuple

from parsy import alt, regex, string

from utils import tagged_union, TU


class FormatTag(Enum):
    BOLD_START = "$B"
    BOLD_END = "$b"
    ITALIC_START = "$I"
    ITALIC_END = "$i"
    UNDERLINE_START = "$U"
    UNDERLINE_END = "$u"
    TEXT_COLOR = "$C"
    """
    Always followed by a single color digit.
    """


COLOR_COUNT = 8


@tagged_union
class TextToken:
    """
    A piece of tagged text: either a run of printable characters, or one formatting tag.
    """
    text: TU[str]
    tag: TU[str]


simple_tag = alt(*(string(t.value) for t in FormatTag if t is not FormatTag.TEXT_COLOR))
color_tag = regex(rf"\$C[0-{COLOR_COUNT - 1}]")
format_tag = simple_tag | color_tag

text_run = regex(r"[^$]+") | string("$")
token = format_tag.map(TextToken.tag) | text_run.map(TextToken.text)
tokens = token.many()


def tokenize(text: str) -> List[TextToken]:
    return tokens.parse(text)


def tag_kind(tag: str) -> FormatTag:
    return FormatTag(tag[:2])


def color_index(tag: str) -> int:
    return int(tag[2])


def split_tags(text: str) -> Tuple[str, List[Tuple[int, str]]]:
    """
    Removes every formatting tag from `text`.

    Returns the tag-free text, and the removed tags in order, each with its offset into the tag-free text
    (so several tags may share an offset, and a trailing tag has an offset equal to the text length).
    """
    parts = []
    found = []
    offset = 0
    for tok in tokenize(text):
        if tok in TextToken.tag:
            found.append((offset, tok()))
        else:
            parts.append(tok())
            offset += len(tok())
    return "".join(parts), found


def strip_tags(text: str) -> str:
    return split_tags(text)[0]
