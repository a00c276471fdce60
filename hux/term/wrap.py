"""
Re-implementation of the line wrapping the Aleph One terminal renderer applies to screen text,
so previews break lines where the game does.

Wrapping a logical line happens in three independent passes:

1. `split_tags`: remove the formatting tags, remembering their offsets in the tag-free text
   (tags don't take up space on screen, so they must not count towards the line length).
2. `break_lines`: greedily break the tag-free text into physical lines.
3. `reinsert_tags`: put every tag back in front of the character it preceded before wrapping,
   wherever that character ended up.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .model import ScreenKind
from .tags import split_tags

logger = logging.getLogger("hux.debug.term.wrap")

DEFAULT_INFORMATION_BUDGET = 70
DEFAULT_PICT_BUDGET = 43
DEFAULT_SEPARATORS = "&*+-<=>/^|"


def break_lines(text: str, budget: int, separators: str = DEFAULT_SEPARATORS) -> List[str]:
    """
    Breaks tag-free text into lines of at most `budget` printable characters.

    Looking back from the first character past the budget, the line breaks at the nearest space
    (which stays at the end of the emitted line) or in front of the nearest separator character.
    If `separators` itself contains a space, spaces are treated like any other separator: the line breaks in
    front of the space, which starts the next line. This differs from the current engine, which checks for a space
    before its separator set and so consumes a space even when the set lists one; the `legacy` preset relies on it.
    Without any break point the line is cut hard at the budget.
    """
    eat_spaces = " " not in separators
    lines = []
    start = 0
    while len(text) - start > budget:
        end = start + budget
        for idx in range(start + budget, start, -1):
            ch = text[idx]
            if ch == " " and eat_spaces:
                end = idx + 1
                break
            if ch in separators:
                end = idx
                break
        lines.append(text[start:end])
        start = end
    if start < len(text) or not lines:
        lines.append(text[start:])
    return lines


def reinsert_tags(lines: Sequence[str], tags: Sequence[Tuple[int, str]]) -> List[str]:
    """
    Puts tags (as returned by `split_tags`) back into wrapped lines.

    A tag goes right before the character at its offset, even if that is the first character
    of a new line. Tags behind the last character are appended to the last line.
    """
    if not tags:
        return list(lines)

    result = []
    pending = 0
    count = 0
    for line in lines:
        if pending == len(tags):
            result.append(line)
            continue
        out = []
        for ch in line:
            while pending < len(tags) and tags[pending][0] == count:
                out.append(tags[pending][1])
                pending += 1
            out.append(ch)
            count += 1
        result.append("".join(out))

    if pending < len(tags):
        if not result:
            result.append("")
        result[-1] += "".join(tag for _, tag in tags[pending:])
    return result


@dataclass
class LineWrapper:
    """
    Wraps screen text like the game engine does.

    The budgets and separator set differ between engine revisions (the PICT budget has been both 43 and 44,
    and one revision also breaks in front of spaces), so they are configurable; see `config.TerminalConfig`.
    """
    information_budget: int = DEFAULT_INFORMATION_BUDGET
    pict_budget: int = DEFAULT_PICT_BUDGET
    """
    Used for both PICT and CHECKPOINT screens, which only get part of the terminal width for text.
    """
    separators: str = DEFAULT_SEPARATORS

    def budget(self, kind: ScreenKind) -> Optional[int]:
        """
        The character budget per line for a screen kind, or None if the game does not wrap it.
        """
        if kind == ScreenKind.INFORMATION:
            return self.information_budget
        if kind in (ScreenKind.PICT, ScreenKind.CHECKPOINT):
            return self.pict_budget
        return None

    def wrap_line(self, line: str, budget: int) -> List[str]:
        free, tags = split_tags(line)
        return reinsert_tags(break_lines(free, budget, self.separators), tags)

    def wrap_text(self, text: str, kind: ScreenKind) -> str:
        """
        Wraps every line of `text` for a screen of the given kind. Existing line breaks are kept.
        """
        budget = self.budget(kind)
        if not text or budget is None:
            return text

        wrapped = []
        for line in text.split("\n"):
            if line:
                wrapped.extend(self.wrap_line(line, budget))
            else:
                wrapped.append(line)
        logger.debug("wrapped %d lines into %d for %s", text.count("\n") + 1, len(wrapped), kind.name)
        return "\n".join(wrapped)
