"""Colors for the run report.

Defaults can be overridden per color in the `[colors]` table of
~/.config/dockhand/theme.toml. A broken override file is ignored.
"""

import logging
import re
import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from dockhand.core.paths import get_theme_path

logger = logging.getLogger(__name__)

HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}")


class ThemeColors(BaseModel):
    """Hex colors keyed by the style names used in report output."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"
    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"
    applied: str = "#c1ff62"
    satisfied: str = "#226666"

    @field_validator("*", mode="before")
    @classmethod
    def _hex(cls, v: object) -> object:
        if not isinstance(v, str) or not HEX_COLOR.fullmatch(v.strip()):
            raise ValueError(f"expected #RGB or #RRGGBB, got {v!r}")
        return v.strip()


def load_theme(path: Path | None = None) -> ThemeColors:
    """Read color overrides, falling back to the defaults on any problem."""
    theme_path = path or get_theme_path()
    try:
        with open(theme_path, "rb") as f:
            overrides = tomllib.load(f).get("colors", {})
    except FileNotFoundError:
        return ThemeColors()
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", theme_path, e)
        return ThemeColors()

    try:
        return ThemeColors.model_validate(overrides)
    except ValidationError as e:
        logger.warning("Ignoring theme file %s: %s", theme_path, e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme for the consoles.

    Step outcomes get their own styles so the report table can color each
    row by status.
    """
    colors = colors or load_theme()
    styles = colors.model_dump()
    styles["error"] = f"bold {colors.error}"
    styles["applied"] = f"bold {colors.applied}"
    styles["bold_header"] = f"bold {colors.header}"
    return Theme(styles)


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Rich theme, loaded once per process."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme
