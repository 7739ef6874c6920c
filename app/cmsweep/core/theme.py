"""Console styles for cmsweep output.

Every style used in markup (``[protected]``, ``[unused]``, ...) is
defined here. Users may override individual colors in
``~/.config/cmsweep/theme.toml``::

    [colors]
    protected = "#ff79c6"
    unused = "#ffb86c"
"""

import logging
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints, ValidationError
from rich.theme import Theme

from cmsweep.core.paths import get_theme_path

logger = logging.getLogger(__name__)

HexColor = Annotated[
    str,
    StringConstraints(strip_whitespace=True, pattern=r"^#(?:[0-9a-fA-F]{3}){1,2}$"),
]


class ThemeColors(BaseModel):
    """Colors for console output, as #RGB or #RRGGBB hex codes."""

    model_config = ConfigDict(extra="forbid")

    text: HexColor = "#ffffff"
    muted: HexColor = "#b2bec3"
    header: HexColor = "#00bcd4"
    border: HexColor = "#29526d"

    success: HexColor = "#03b971"
    warning: HexColor = "#f5b332"
    error: HexColor = "#f53263"
    info: HexColor = "#3b8eea"

    namespace: HexColor = "#f5d132"
    in_use: HexColor = "#03b971"
    unused: HexColor = "#f5b332"
    protected: HexColor = "#c678dd"


def load_theme(path: Path | None = None) -> ThemeColors:
    """Read color overrides, falling back to the defaults on any problem.

    A broken theme file must never prevent the CLI from starting, so
    parse and validation errors are logged and the defaults are used.

    Args:
        path: Theme file. If None, uses the default theme path.
    """
    theme_path = path or get_theme_path()
    try:
        with open(theme_path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return ThemeColors()
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.warning("Ignoring theme file %s: %s", theme_path, e)
        return ThemeColors()

    overrides = data.get("colors", {})
    if not isinstance(overrides, dict):
        logger.warning("Ignoring theme file %s: [colors] must be a table", theme_path)
        return ThemeColors()

    try:
        colors = ThemeColors.model_validate(overrides)
    except ValidationError as e:
        logger.warning("Ignoring invalid colors in %s: %s", theme_path, e)
        return ThemeColors()

    logger.debug("Loaded theme overrides from %s", theme_path)
    return colors


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme from a set of colors."""
    colors = colors or load_theme()
    styles = colors.model_dump()
    styles.update(
        error=f"bold {colors.error}",
        bold_header=f"bold {colors.header}",
        dim=colors.muted,
    )
    return Theme(styles)


@lru_cache(maxsize=1)
def get_theme() -> Theme:
    """Return the process-wide Rich theme."""
    return get_rich_theme()
