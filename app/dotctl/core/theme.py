"""Console colours for dotctl.

The palette is a small pydantic model with built-in defaults. A user may
override any subset of it in ``~/.config/dotctl/theme.toml``::

    [colors]
    warning = "#ffaa00"

A broken or invalid override never stops a run; dotctl falls back to the
defaults and says so on stderr.
"""

import logging
import sys
import tomllib
from functools import cache
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from rich.theme import Theme

from dotctl.core.paths import get_theme_path

logger = logging.getLogger(__name__)

HexColor = Annotated[str, Field(pattern=r"^#(?:[0-9a-fA-F]{3}){1,2}$")]


class ThemeColors(BaseModel):
    """Palette used by the console helpers.

    Every value is a ``#RGB`` or ``#RRGGBB`` hex code.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    text: HexColor = "#ffffff"
    muted: HexColor = "#b2bec3"
    header: HexColor = "#69B9A1"
    success: HexColor = "#03b971"
    warning: HexColor = "#f5b332"
    error: HexColor = "#f53263"
    info: HexColor = "#0ec1c8"
    path: HexColor = "#c1ff62"
    package: HexColor = "#69B9A1"


def _read_overrides(path: Path) -> dict[str, object]:
    """Return the ``[colors]`` table of a theme file, or {} if unusable."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        print(f"Warning: Ignoring theme file {path}: {e}", file=sys.stderr)
        return {}

    colors = data.get("colors", {})
    if not isinstance(colors, dict):
        logger.warning("'colors' in %s is not a table", path)
        return {}
    return colors


def load_theme(path: Path | None = None) -> ThemeColors:
    """Build the palette from the defaults and the user's overrides.

    Args:
        path: Theme file to read. Defaults to the user theme path.

    Returns:
        ThemeColors with any valid overrides applied.
    """
    theme_path = path or get_theme_path()
    overrides = _read_overrides(theme_path)
    if not overrides:
        return ThemeColors()

    try:
        colors = ThemeColors.model_validate(overrides)
    except ValidationError as e:
        logger.warning("Invalid theme in %s, using defaults: %s", theme_path, e)
        print(f"Warning: Invalid theme configuration in {theme_path}", file=sys.stderr)
        return ThemeColors()

    logger.debug("Applied theme overrides from %s", theme_path)
    return colors


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Map the palette onto the Rich style names used in messages.

    Args:
        colors: Palette to convert. Loaded from disk when None.

    Returns:
        Rich Theme for the shared consoles.
    """
    palette = colors or load_theme()
    return Theme(
        {
            "text": palette.text,
            "muted": palette.muted,
            "header": palette.header,
            "bold_header": f"bold {palette.header}",
            "success": palette.success,
            "warning": palette.warning,
            "error": f"bold {palette.error}",
            "info": palette.info,
            "path": palette.path,
            "package": f"bold {palette.package}",
        }
    )


@cache
def get_theme() -> Theme:
    """Return the Rich theme, built once per process."""
    return get_rich_theme()
