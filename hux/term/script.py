"""
Provides `read_script` and `write_script` to read/write the terminals of a level from/to the Aleph One
terminal script format (`<level>.term.txt`).

The format is line based. Lines starting with one of the `Keyword` strings structure the file, everything else
is either screen text or a comment:

    ;
    #TERMINAL 0
    #UNFINISHED
    #LOGON 1600
    #INFORMATION
    Some $Btext$b.
    #PICT 10012 CENTER
    #END
    #ENDTERMINAL 0

Header parameters are positional, space separated tokens. Parsing is all or nothing: any structural error
raises a `ScriptParseError` and no terminals are returned.
"""

import logging
import os
from enum import Enum
from typing import List, Optional
from dataclasses import dataclass, field

from parsy import alt, string

from .model import (
    Alignment,
    Branch,
    BranchKind,
    Level,
    Screen,
    ScreenKind,
    Teleport,
    TeleportKind,
    Terminal,
)
from .preview import refresh_screen
from .textcodec import TextCodec

logger = logging.getLogger("hux.debug.term.script")

SCRIPT_SUFFIX = ".term.txt"
SCRIPT_ENCODING = "utf-8"
# scripts saved by other editors may start with a byte order mark
SCRIPT_READ_ENCODING = "utf-8-sig"


class Keyword(Enum):
    """
    The structural keywords, in the order lines are matched against them.
    `#ENDTERMINAL` has to come before `#END`, since each is matched as a line prefix.
    """
    TERMINAL = "#TERMINAL"
    END_TERMINAL = "#ENDTERMINAL"
    UNFINISHED = "#UNFINISHED"
    FINISHED = "#FINISHED"
    FAILED = "#FAILED"
    END = "#END"
    LOGON = "#LOGON"
    INFORMATION = "#INFORMATION"
    PICT = "#PICT"
    CHECKPOINT = "#CHECKPOINT"
    LOGOFF = "#LOGOFF"
    INTERLEVEL_TELEPORT = "#INTERLEVEL TELEPORT"
    INTRALEVEL_TELEPORT = "#INTRALEVEL TELEPORT"
    TAG = "#TAG"
    STATIC = "#STATIC"


BRANCH_KEYWORDS = {
    Keyword.UNFINISHED: BranchKind.UNFINISHED,
    Keyword.FINISHED: BranchKind.FINISHED,
    Keyword.FAILED: BranchKind.FAILED,
}

SCREEN_KEYWORDS = {
    Keyword.LOGON: ScreenKind.LOGON,
    Keyword.INFORMATION: ScreenKind.INFORMATION,
    Keyword.PICT: ScreenKind.PICT,
    Keyword.CHECKPOINT: ScreenKind.CHECKPOINT,
    Keyword.LOGOFF: ScreenKind.LOGOFF,
    Keyword.TAG: ScreenKind.TAG,
    Keyword.STATIC: ScreenKind.STATIC,
}

TELEPORT_KEYWORDS = {
    Keyword.INTERLEVEL_TELEPORT: TeleportKind.INTERLEVEL,
    Keyword.INTRALEVEL_TELEPORT: TeleportKind.INTRALEVEL,
}

# the comment line the game's own tooling expects in front of every terminal
TERMINAL_PREFIX = ";"

keyword = alt(*(string(kw.value).result(kw) for kw in Keyword))


def classify_line(line: str) -> Optional[Keyword]:
    """
    The keyword a line starts with, or None for text and comment lines.
    """
    return keyword.optional().parse_partial(line)[0]


class ScriptParseError(ValueError):
    def __init__(self, message: str, line_no: Optional[int] = None, path: Optional[str] = None):
        self.message = message
        self.line_no = line_no
        self.path = path
        location = path or "<script>"
        if line_no is not None:
            location += f":{line_no}"
        super().__init__(f"{location}: {message}")


class ParserState(Enum):
    NONE = "none"
    """
    Outside of any terminal; lines are comments.
    """
    TERMINAL = "terminal"
    """
    Inside a terminal, waiting for a branch or the terminal end.
    """
    SCREENS = "screens"
    """
    Inside a branch, reading screens.
    """
    INVALID = "invalid"


def split_script_lines(data: str) -> List[str]:
    """
    Splits script text into lines at LF or CRLF only. Other characters `str.splitlines` would break at
    (form feeds, U+2028, ...) are part of the screen text.
    """
    lines = data.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def header_int(tokens: List[str], index: int) -> Optional[int]:
    if index >= len(tokens):
        return None
    try:
        return int(tokens[index])
    except ValueError:
        return None


@dataclass(kw_only=True)
class ScriptParser:
    """
    Line by line state machine reading one terminal script.
    A parser instance is good for a single `parse` call.
    """
    codec: TextCodec = field(default_factory=TextCodec)
    path: Optional[str] = None

    state: ParserState = ParserState.NONE
    terminals: List[Terminal] = field(default_factory=list)
    error: Optional[str] = None
    line_no: int = 0

    terminal: Optional[Terminal] = None
    terminal_id: int = -1
    branch: Optional[Branch] = None
    screen: Optional[Screen] = None
    comments: List[str] = field(default_factory=list)

    def parse(self, data: str) -> List[Terminal]:
        handlers = {
            ParserState.NONE: self.parse_outside,
            ParserState.TERMINAL: self.parse_terminal,
            ParserState.SCREENS: self.parse_screens,
        }

        for line_no, line in enumerate(split_script_lines(data), start=1):
            self.line_no = line_no
            handlers[self.state](line, classify_line(line))
            if self.state == ParserState.INVALID:
                raise ScriptParseError(self.error, self.line_no, self.path)

        if self.state != ParserState.NONE:
            raise ScriptParseError(f"unexpected end of file inside a terminal ({self.state.value})", None, self.path)
        if not self.terminals:
            raise ScriptParseError("no terminals found", None, self.path)
        return self.terminals

    def fail(self, message: str):
        logger.debug("line %d: %s", self.line_no, message)
        self.error = message
        self.state = ParserState.INVALID

    def take_comments(self) -> str:
        text = "\n".join(self.comments)
        self.comments.clear()
        return text

    # === states ===

    def parse_outside(self, line: str, kw: Optional[Keyword]):
        if kw != Keyword.TERMINAL:
            # anything outside a terminal, even a stray keyword, is a comment
            self.comments.append(line)
            return

        terminal_id = header_int(line.split(" "), 1)
        if terminal_id is None:
            self.fail(f"invalid terminal header: {line!r}")
            return
        self.terminal = Terminal(comments=self.take_comments())
        self.terminal_id = terminal_id
        self.state = ParserState.TERMINAL

    def parse_terminal(self, line: str, kw: Optional[Keyword]):
        if kw in BRANCH_KEYWORDS:
            self.branch = self.terminal.branch(BRANCH_KEYWORDS[kw])
            self.screen = None
            self.state = ParserState.SCREENS
        elif kw == Keyword.END_TERMINAL:
            self.end_terminal(line)
        else:
            self.comments.append(line)

    def end_terminal(self, line: str):
        tokens = line.split(" ")
        if len(tokens) != 2:
            self.fail(f"invalid terminal end: {line!r}")
            return
        end_id = header_int(tokens, 1)
        if end_id != self.terminal_id:
            self.fail(f"terminal {self.terminal_id} closed with id {tokens[1]!r}")
            return

        self.terminals.append(self.terminal)
        self.terminal = None
        self.branch = None
        self.state = ParserState.NONE

    def parse_screens(self, line: str, kw: Optional[Keyword]):
        if kw in SCREEN_KEYWORDS:
            self.close_screen()
            self.open_screen(line, SCREEN_KEYWORDS[kw])
        elif kw in TELEPORT_KEYWORDS:
            self.close_screen()
            # the keyword is two words, so the index is the third token
            index = header_int(line.split(" "), 2)
            if index is None:
                self.fail(f"invalid teleport: {line!r}")
                return
            self.branch.teleport = Teleport(kind=TELEPORT_KEYWORDS[kw], index=index)
        elif kw in (Keyword.END, Keyword.END_TERMINAL):
            self.close_screen()
            self.branch = None
            self.state = ParserState.TERMINAL
            if kw == Keyword.END_TERMINAL:
                self.parse_terminal(line, kw)
        elif self.screen is not None:
            self.screen.script += line + "\n"
        else:
            # text before the first screen header belongs to that screen as a comment
            self.comments.append(line)

    def open_screen(self, line: str, kind: ScreenKind):
        tokens = line.split(" ")
        screen = Screen(kind=kind, comments=self.take_comments())

        if kind != ScreenKind.INFORMATION:
            resource_id = header_int(tokens, 1)
            if resource_id is None:
                self.fail(f"missing resource id: {line!r}")
                return
            screen.resource_id = resource_id

        if kind == ScreenKind.PICT and len(tokens) > 2:
            screen.alignment = Alignment.__members__.get(tokens[2], Alignment.LEFT)

        self.screen = screen

    def close_screen(self):
        if self.screen is None:
            return
        # every body line was added with a line break, the last one isn't part of the text
        if self.screen.script.endswith("\n"):
            self.screen.script = self.screen.script[:-1]
        refresh_screen(self.screen, self.codec)
        self.branch.screens.append(self.screen)
        self.screen = None


def read_script(data: str, path: Optional[str] = None, codec: Optional[TextCodec] = None) -> List[Terminal]:
    """
    Parses the terminals of a level from terminal script text.
    """
    parser = ScriptParser(codec=codec or TextCodec(), path=path)
    terminals = parser.parse(data)
    logger.debug("%s: read %d terminals", path or "<script>", len(terminals))
    return terminals


def load_level_script(
    path: str, codec: Optional[TextCodec] = None, dir_name: Optional[str] = None
) -> Level:
    """
    Reads a `.term.txt` file into a new level named after the file.
    File errors propagate as `OSError`; bad content, including text that isn't UTF-8, raises `ScriptParseError`.
    """
    with open(path, "r", encoding=SCRIPT_READ_ENCODING, newline="") as f:
        try:
            data = f.read()
        except UnicodeDecodeError as e:
            raise ScriptParseError(f"not a UTF-8 text file ({e.reason})", None, path) from e

    filename = os.path.basename(path)
    name = filename[: -len(SCRIPT_SUFFIX)] if filename.endswith(SCRIPT_SUFFIX) else filename
    if dir_name is None:
        dir_name = os.path.basename(os.path.dirname(os.path.abspath(path)))

    return Level(
        name=name,
        dir_name=dir_name,
        script_name=name,
        terminals=read_script(data, path, codec),
    )


# === WRITER ===


@dataclass(kw_only=True)
class WriterContext:
    result: str = ""

    def write(self, s: str):
        self.result += s

    def line(self, s: str):
        self.result += s + "\n"


def write_script(terminals: List[Terminal]) -> str:
    """
    Serializes terminals to terminal script text. Terminals are numbered by their position.
    """
    ctx = WriterContext()
    for index, terminal in enumerate(terminals):
        if index > 0:
            ctx.write("\n")
        write_terminal(ctx, terminal, index)
    return ctx.result


def write_terminal(ctx: WriterContext, terminal: Terminal, index: int):
    ctx.line(TERMINAL_PREFIX)
    ctx.line(f"{Keyword.TERMINAL.value} {index}")

    for kw, kind in BRANCH_KEYWORDS.items():
        branch = terminal.branch(kind)
        if not branch.is_valid():
            continue
        ctx.line(kw.value)
        for screen in branch.screens:
            write_screen(ctx, screen)
        write_teleport(ctx, branch.teleport)
        ctx.line(Keyword.END.value)

    ctx.write(f"{Keyword.END_TERMINAL.value} {index}")


SCREEN_KINDS = {kind: kw for kw, kind in SCREEN_KEYWORDS.items()}


def write_screen(ctx: WriterContext, screen: Screen):
    if screen.kind == ScreenKind.NONE:
        return

    kw = SCREEN_KINDS[screen.kind].value
    if screen.kind == ScreenKind.INFORMATION:
        ctx.line(kw)
    elif screen.kind == ScreenKind.PICT and screen.alignment != Alignment.LEFT:
        ctx.line(f"{kw} {screen.resource_id} {screen.alignment.name}")
    else:
        ctx.line(f"{kw} {screen.resource_id}")

    # the game ignores text on screens that can't show it, so it's not written either
    if screen.has_text() and screen.script:
        ctx.line(screen.script)


def write_teleport(ctx: WriterContext, teleport: Teleport):
    for kw, kind in TELEPORT_KEYWORDS.items():
        if teleport.kind == kind:
            ctx.line(f"{kw.value} {teleport.index}")


def save_level_script(path: str, level: Level):
    with open(path, "w", encoding=SCRIPT_ENCODING, newline="\n") as f:
        f.write(write_script(level.terminals))
