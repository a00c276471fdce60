"""
Settings for rendering terminal text, loadable from a YAML file.

The game engine changed its wrapping rules between revisions, so the budgets and separator set aren't
hardcoded: `data/config/default.yml` matches the current engine, `data/config/legacy.yml` the older one
(PICT budget of 44, spaces treated as separators).
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

import yaml
from dacite import Config, from_dict

from utils import RESOURCES

from .preview import SCREEN_MAX_LINES
from .tags import COLOR_COUNT
from .textcodec import DEFAULT_COLORS, TextCodec
from .wrap import DEFAULT_INFORMATION_BUDGET, DEFAULT_PICT_BUDGET, DEFAULT_SEPARATORS, LineWrapper

logger = logging.getLogger("hux.debug.term.config")

PRESETS = os.path.join(RESOURCES, "config")


@dataclass
class TerminalConfig:
    information_budget: int = DEFAULT_INFORMATION_BUDGET
    """Characters per line on INFORMATION screens"""
    pict_budget: int = DEFAULT_PICT_BUDGET
    """Characters per line next to a picture, on PICT and CHECKPOINT screens"""
    separators: str = DEFAULT_SEPARATORS
    """Characters a line may be broken in front of"""
    colors: List[str] = field(default_factory=lambda: list(DEFAULT_COLORS))
    """Preview color for each of the `$C0`-`$C7` tags"""
    screen_max_lines: int = SCREEN_MAX_LINES
    """Lines per terminal page"""

    def validate(self):
        if self.information_budget <= 0 or self.pict_budget <= 0:
            raise ValueError("Line budgets must be positive")
        if self.screen_max_lines <= 0:
            raise ValueError("screen_max_lines must be positive")
        if len(self.colors) != COLOR_COUNT:
            raise ValueError(f"Expected {COLOR_COUNT} colors, got {len(self.colors)}")

    def wrapper(self) -> LineWrapper:
        return LineWrapper(
            information_budget=self.information_budget,
            pict_budget=self.pict_budget,
            separators=self.separators,
        )

    def codec(self) -> TextCodec:
        return TextCodec(wrapper=self.wrapper(), colors=list(self.colors))


def load_config(path: Optional[str] = None) -> TerminalConfig:
    """
    Reads a config file; keys that are left out keep their defaults. Without a path, returns the defaults.
    A bare preset name (`default`, `legacy`) loads the matching file from the shipped presets.
    """
    if path is None:
        return TerminalConfig()

    if not os.path.exists(path) and os.path.exists(os.path.join(PRESETS, f"{path}.yml")):
        path = os.path.join(PRESETS, f"{path}.yml")

    with open(path, encoding="utf8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{path}: config must be a mapping")

    config = from_dict(data_class=TerminalConfig, data=data, config=Config(strict=True))
    config.validate()
    logger.debug("loaded config %s: %s", path, config)
    return config
