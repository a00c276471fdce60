"""
The in-memory document tree of a Hux scenario: levels, their terminals, and each terminal's
three outcome branches of screens.

The tree is built wholesale by the script parser (see `script`) or the structured loader
(see `hux.scenario.store`) and is edited in place afterwards.
"""

from enum import IntEnum
from typing import List, Tuple
from dataclasses import dataclass, field


class ScreenKind(IntEnum):
    """
    The kind of a terminal screen. `NONE` only exists while a screen is being parsed
    and never appears in a finished tree.
    """
    NONE = 0
    LOGON = 1
    INFORMATION = 2
    PICT = 3
    CHECKPOINT = 4
    LOGOFF = 5
    TAG = 6
    STATIC = 7


class Alignment(IntEnum):
    LEFT = 0
    CENTER = 1
    RIGHT = 2


class TeleportKind(IntEnum):
    NONE = 0
    INTERLEVEL = 1
    INTRALEVEL = 2


class BranchKind(IntEnum):
    UNFINISHED = 0
    FINISHED = 1
    FAILED = 2


@dataclass(kw_only=True)
class Screen:
    """
    One page of terminal content.
    """
    kind: ScreenKind = ScreenKind.NONE
    alignment: Alignment = Alignment.LEFT
    """
    Only meaningful for PICT (and CHECKPOINT) screens.
    """
    resource_id: int = -1
    """
    PICT id for LOGON/LOGOFF/PICT, polygon for CHECKPOINT, tag index for TAG, duration for STATIC.
    """
    script: str = ""
    """
    The raw body text, with the game's inline formatting tags.
    """
    display_text: str = field(default="", compare=False)
    """
    Cached markup rendering of `script`. Must be recomputed whenever `script` or `kind` changes.
    """
    comments: str = field(default="", compare=False)

    def has_text(self) -> bool:
        """
        Whether the game would ever render the body of this screen.
        """
        if self.kind in (ScreenKind.NONE, ScreenKind.TAG, ScreenKind.STATIC):
            return False
        if self.kind == ScreenKind.PICT and self.alignment == Alignment.CENTER:
            return False
        return True

    def describe(self) -> str:
        if self.kind in (ScreenKind.NONE, ScreenKind.INFORMATION):
            return self.kind.name
        return f"{self.kind.name} {self.resource_id}"


@dataclass(kw_only=True, eq=False)
class Teleport:
    kind: TeleportKind = TeleportKind.NONE
    index: int = 0
    """
    Level index for INTERLEVEL, polygon index for INTRALEVEL; ignored for NONE.
    """

    def __eq__(self, other):
        if not isinstance(other, Teleport):
            return NotImplemented
        if self.kind != other.kind:
            return False
        return self.kind == TeleportKind.NONE or self.index == other.index


@dataclass(kw_only=True)
class Branch:
    screens: List[Screen] = field(default_factory=list)
    teleport: Teleport = field(default_factory=Teleport)

    def is_valid(self) -> bool:
        """
        Only valid branches are written out.
        """
        return bool(self.screens) or self.teleport.kind != TeleportKind.NONE


def _branches() -> Tuple[Branch, Branch, Branch]:
    return tuple(Branch() for _ in BranchKind)


@dataclass(kw_only=True)
class Terminal:
    """
    An in-game computer terminal. Always has exactly one branch per `BranchKind`.
    """
    name: str = ""
    """
    Editor-only label; the script format does not store it.
    """
    branches: Tuple[Branch, Branch, Branch] = field(default_factory=_branches)
    comments: str = field(default="", compare=False)
    """
    Free text found before the terminal in its source file, kept but never interpreted.
    """

    def branch(self, kind: BranchKind) -> Branch:
        return self.branches[kind]


@dataclass(kw_only=True)
class Level:
    name: str = ""
    dir_name: str = ""
    script_name: str = ""
    terminals: List[Terminal] = field(default_factory=list)


@dataclass(kw_only=True)
class Scenario:
    """
    A whole scenario (the "merge folder"), i.e. every level with terminals in it.
    """
    name: str = ""
    levels: List[Level] = field(default_factory=list)

    def reset(self):
        self.name = ""
        self.levels.clear()
