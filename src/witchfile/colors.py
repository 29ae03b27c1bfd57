"""Color management for witchfile tables."""

from __future__ import annotations

import copy
from typing import Any, Dict, Optional

from rich.style import Style
from rich.errors import StyleSyntaxError

from witchfile.categories import Category
from witchfile.config import DEFAULT_CONFIG

DEFAULT_STYLES: Dict[str, Any] = DEFAULT_CONFIG["colors"]


def _valid_style(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        Style.parse(value)
    except StyleSyntaxError:
        return False
    return True


def get_styles(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Resolve the style table from `config`, keeping defaults for bad values."""
    styles = copy.deepcopy(DEFAULT_STYLES)
    if not config:
        return styles
    user = config.get("colors", {})
    if not isinstance(user, dict):
        return styles
    for key, value in user.items():
        if key == "categories" and isinstance(value, dict):
            for name, style in value.items():
                if name in styles["categories"] and _valid_style(style):
                    styles["categories"][name] = style
        elif key in styles and _valid_style(value):
            styles[key] = value
    return styles


def category_style(category: Category, styles: Optional[Dict[str, Any]] = None) -> str:
    """Get the style for a category; unclassified entries are dimmed."""
    styles = styles or DEFAULT_STYLES
    return styles["categories"].get(category.value, styles["placeholder"])


__all__ = ["DEFAULT_STYLES", "get_styles", "category_style"]
