"""
Reading and writing whole scenarios.

Two representations are supported:

- the editor's own scenario file, a JSON (or YAML) tree using the key names of the original Hux editor
  (`LEVELS`, `TERMINALS`, `BRANCHES`, `SCREENS`, ...). Only the raw script text of screens is stored;
  the display text is derived again on load.
- a split map folder, as produced by Atque: one subdirectory per level holding a `<name>.term.txt`
  script, next to a `Resources` directory.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import yaml

from hux.term.model import (
    Alignment,
    Branch,
    BranchKind,
    Level,
    Scenario,
    Screen,
    ScreenKind,
    Teleport,
    TeleportKind,
    Terminal,
)
from hux.term.preview import refresh_screen
from hux.term.script import SCRIPT_SUFFIX, ScriptParseError, load_level_script, save_level_script
from hux.term.textcodec import TextCodec

logger = logging.getLogger("hux.debug.scenario.store")

RESOURCES_DIR = "Resources"
YAML_ENDINGS = (".yml", ".yaml")


class ScenarioFormatError(ValueError):
    pass


@dataclass
class ImportFailure:
    """
    A level script that could not be imported, and why.
    """
    path: str
    error: Exception

    @property
    def bad_format(self) -> bool:
        """
        True if the file was read but isn't a valid script, False if it couldn't be read at all.
        """
        return isinstance(self.error, ScriptParseError)


# === DUMP ===


def dump_screen(screen: Screen) -> Dict[str, Any]:
    return {
        "TYPE": int(screen.kind),
        "ALIGNMENT": int(screen.alignment),
        "RESOURCE_ID": screen.resource_id,
        "SCRIPT": screen.script,
    }


def dump_branch(branch: Branch) -> Dict[str, Any]:
    return {
        "SCREENS": [dump_screen(s) for s in branch.screens],
        "TELEPORT": {"TYPE": int(branch.teleport.kind), "INDEX": branch.teleport.index},
    }


def dump_terminal(terminal: Terminal) -> Dict[str, Any]:
    return {
        "NAME": terminal.name,
        "BRANCHES": {
            kind.name: dump_branch(terminal.branch(kind)) for kind in BranchKind if terminal.branch(kind).is_valid()
        },
    }


def dump_level(level: Level) -> Dict[str, Any]:
    return {
        "NAME": level.name,
        "DIR_NAME": level.dir_name,
        "SCRIPT_NAME": level.script_name,
        "TERMINALS": [dump_terminal(t) for t in level.terminals],
    }


def dump_scenario(scenario: Scenario) -> Dict[str, Any]:
    return {"NAME": scenario.name, "LEVELS": [dump_level(lv) for lv in scenario.levels]}


# === PARSE ===


def _enum(cls, value):
    try:
        return cls(value)
    except ValueError as e:
        raise ScenarioFormatError(f"invalid {cls.__name__} value {value!r}") from e


def parse_screen(data: Dict[str, Any], codec: TextCodec) -> Screen:
    screen = Screen(
        kind=_enum(ScreenKind, data.get("TYPE", 0)),
        alignment=_enum(Alignment, data.get("ALIGNMENT", 0)),
        resource_id=data.get("RESOURCE_ID", -1),
        script=data.get("SCRIPT", ""),
    )
    if screen.kind == ScreenKind.NONE:
        raise ScenarioFormatError("screen without a type")
    refresh_screen(screen, codec)
    return screen


def parse_branch(data: Dict[str, Any], codec: TextCodec) -> Branch:
    teleport = data.get("TELEPORT") or {}
    return Branch(
        screens=[parse_screen(s, codec) for s in data.get("SCREENS", [])],
        teleport=Teleport(kind=_enum(TeleportKind, teleport.get("TYPE", 0)), index=teleport.get("INDEX", 0)),
    )


def parse_terminal(data: Dict[str, Any], codec: TextCodec) -> Terminal:
    terminal = Terminal(name=data.get("NAME", ""))
    for key, branch in (data.get("BRANCHES") or {}).items():
        if key not in BranchKind.__members__:
            raise ScenarioFormatError(f"unknown branch {key!r}")
        parsed = parse_branch(branch, codec)
        target = terminal.branch(BranchKind[key])
        target.screens = parsed.screens
        target.teleport = parsed.teleport
    return terminal


def parse_level(data: Dict[str, Any], codec: TextCodec) -> Level:
    return Level(
        name=data.get("NAME", ""),
        dir_name=data.get("DIR_NAME", ""),
        script_name=data.get("SCRIPT_NAME", ""),
        terminals=[parse_terminal(t, codec) for t in data.get("TERMINALS", [])],
    )


def parse_scenario(data: Any, codec: Optional[TextCodec] = None, name: Optional[str] = None) -> Scenario:
    """
    Builds a scenario from its dumped tree. `name` is used if the tree doesn't name the scenario.
    """
    if not isinstance(data, dict):
        raise ScenarioFormatError("scenario root must be an object")
    if codec is None:
        codec = TextCodec()
    try:
        levels = [parse_level(lv, codec) for lv in data.get("LEVELS", [])]
    except (AttributeError, TypeError) as e:
        raise ScenarioFormatError(f"malformed scenario: {e}") from e
    return Scenario(name=data.get("NAME") or name or "", levels=levels)


# === FILES ===


def _is_yaml(path: str) -> bool:
    return path.lower().endswith(YAML_ENDINGS)


def _basename(path: str) -> str:
    return os.path.basename(path).split(".")[0]


def save_scenario(path: str, scenario: Scenario):
    """
    Writes a scenario file; YAML if the path ends in `.yml`/`.yaml`, JSON otherwise.
    """
    data = dump_scenario(scenario)
    with open(path, "w", encoding="utf-8") as f:
        if _is_yaml(path):
            yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
        else:
            json.dump(data, f, indent=4, ensure_ascii=False)


def load_scenario(path: str, codec: Optional[TextCodec] = None) -> Scenario:
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) if _is_yaml(path) else json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ScenarioFormatError(f"{path}: invalid scenario file: {e}") from e

    scenario = parse_scenario(data, codec, _basename(path))
    if not os.path.isdir(os.path.join(os.path.dirname(os.path.abspath(path)), RESOURCES_DIR)):
        logger.warning("%s: no %s folder next to the scenario, pictures won't be available", path, RESOURCES_DIR)
    return scenario


def export_scenario(folder: str, scenario: Scenario):
    """
    Writes every level's terminal script into a split map folder.
    """
    for level in scenario.levels:
        level_dir = os.path.join(folder, level.dir_name)
        os.makedirs(level_dir, exist_ok=True)
        save_level_script(os.path.join(level_dir, level.script_name + SCRIPT_SUFFIX), level)


def level_dirs(folder: str) -> List[str]:
    """
    The level directories of a split map folder, which has to contain a `Resources` directory.
    """
    entries = sorted(e for e in os.listdir(folder) if os.path.isdir(os.path.join(folder, e)))
    if RESOURCES_DIR not in entries:
        raise ScenarioFormatError(f"{folder}: not a split map folder (no {RESOURCES_DIR} directory)")
    return [e for e in entries if e != RESOURCES_DIR]


def import_scenario(folder: str, codec: Optional[TextCodec] = None) -> Tuple[Scenario, List[ImportFailure]]:
    """
    Reads the terminal script of every level in a split map folder.

    A level that fails to load is skipped and reported in the returned failure list;
    the remaining levels are still imported.
    """
    scenario = Scenario(name=os.path.basename(os.path.normpath(folder)))
    failures = []

    for dir_name in level_dirs(folder):
        level_dir = os.path.join(folder, dir_name)
        scripts = sorted(f for f in os.listdir(level_dir) if f.endswith(SCRIPT_SUFFIX))
        if not scripts:
            continue
        path = os.path.join(level_dir, scripts[0])
        try:
            scenario.levels.append(load_level_script(path, codec, dir_name))
        except (OSError, ScriptParseError) as e:
            logger.warning("%s: could not import level: %s", path, e)
            failures.append(ImportFailure(path, e))

    return scenario, failures
