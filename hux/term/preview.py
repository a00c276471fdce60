"""
What the preview and editing layers get from this package: the rendered markup of a screen,
and how many lines (and terminal pages) it takes up.
"""

import math
from typing import Optional

from .model import BranchKind, Level, Screen, TeleportKind
from .textcodec import PARAGRAPH_END, PARAGRAPH_START, TextCodec, escape_markup

# Lines of text per terminal page in the game
SCREEN_MAX_LINES = 22


def render_text(screen: Screen, codec: Optional[TextCodec] = None) -> str:
    """
    The markup shown for a screen, or an empty string for screens the game shows no text on.
    """
    if not screen.has_text():
        return ""
    if codec is None:
        codec = TextCodec()
    return codec.to_markup(screen.script, screen.kind)


def wrapped_line_count(markup: str) -> int:
    """
    Number of physical lines in markup produced by `render_text`.
    """
    if not markup:
        return 0
    if markup.startswith(PARAGRAPH_START) and markup.endswith(PARAGRAPH_END):
        markup = markup[len(PARAGRAPH_START) : -len(PARAGRAPH_END)]
    return markup.count("\n") + 1


def page_count(line_count: int, max_lines: int = SCREEN_MAX_LINES) -> int:
    return math.ceil(line_count / max_lines)


def refresh_screen(screen: Screen, codec: Optional[TextCodec] = None):
    screen.display_text = render_text(screen, codec)


def refresh_level(level: Level, codec: Optional[TextCodec] = None):
    """
    Recomputes the cached display text of every screen in the level.
    """
    if codec is None:
        codec = TextCodec()
    for terminal in level.terminals:
        for branch in terminal.branches:
            for screen in branch.screens:
                refresh_screen(screen, codec)


PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ background: #000; color: #00ff00; font-family: monospace; }}
.screen {{ border: 2px solid #640000; margin: 1em 0; padding: 0.5em 1em; width: 72ch; }}
.header {{ color: #888; }}
</style>
</head>
<body>
{body}
</body>
</html>
"""


def preview_level(level: Level, codec: Optional[TextCodec] = None, max_lines: int = SCREEN_MAX_LINES) -> str:
    """
    Builds a standalone HTML page showing every screen of every terminal in the level.
    """
    if codec is None:
        codec = TextCodec()

    body = [f"<h1>{escape_markup(level.name or level.script_name)}</h1>"]
    for index, terminal in enumerate(level.terminals):
        title = f"Terminal {index}"
        if terminal.name:
            title += f": {escape_markup(terminal.name)}"
        body.append(f"<h2>{title}</h2>")

        for kind in BranchKind:
            branch = terminal.branch(kind)
            if not branch.is_valid():
                continue
            body.append(f"<h3>{kind.name}</h3>")
            for screen in branch.screens:
                markup = render_text(screen, codec)
                pages = page_count(wrapped_line_count(markup), max_lines)
                header = escape_markup(screen.describe())
                if pages > 1:
                    header += f" ({pages} pages)"
                body.append(f'<div class="screen"><div class="header">{header}</div>{markup}</div>')
            if branch.teleport.kind != TeleportKind.NONE:
                body.append(f"<p>{branch.teleport.kind.name} TELEPORT {branch.teleport.index}</p>")

    return PAGE_TEMPLATE.format(title=escape_markup(level.name or level.script_name), body="\n".join(body))
