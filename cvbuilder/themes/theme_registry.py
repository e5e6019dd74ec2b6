"""
Theme registry for managing named themes.

Works like the renderer and adjuster registries: themes are registered
under their name and looked up when a render request names one.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

from ..logging_utils import LOG
from .base import Theme

DEFAULT_THEME_NAME = "professional"

# Global theme registry
_THEME_REGISTRY: Dict[str, Theme] = {}


def register_theme(theme: Theme) -> None:
    """
    Register a theme in the global registry under its name.
    """
    _THEME_REGISTRY[theme.name] = theme


def get_theme(name: Optional[str] = None) -> Optional[Theme]:
    """
    Get a theme by name (the default theme when name is empty).

    Returns:
        The theme, or None if not found
    """
    return _THEME_REGISTRY.get((name or DEFAULT_THEME_NAME).lower())


def resolve_theme(theme: Union[Theme, str, Mapping[str, Any], None] = None) -> Theme:
    """
    Resolve a theme argument to a Theme.

    Accepts a Theme, a registered name, or a stored theme record (built on
    top of the default theme). Unknown names fall back to the default theme.
    """
    if isinstance(theme, Theme):
        return theme
    if isinstance(theme, Mapping):
        return Theme.from_dict(theme, base=_THEME_REGISTRY[DEFAULT_THEME_NAME])
    found = get_theme(theme)
    if found is None:
        LOG.warning("Unknown theme %r, using %s", theme, DEFAULT_THEME_NAME)
        found = _THEME_REGISTRY[DEFAULT_THEME_NAME]
    return found


def list_themes() -> List[Dict[str, str]]:
    """
    List all registered themes with their descriptions.

    Returns:
        List of dicts with 'name' and 'description' keys
    """
    return sorted(
        (
            {"name": name, "description": theme.description or theme.display_name}
            for name, theme in _THEME_REGISTRY.items()
        ),
        key=lambda x: x["name"],
    )


def unregister_theme(name: str) -> None:
    """
    Unregister a theme from the global registry.
    """
    _THEME_REGISTRY.pop(name, None)


__all__ = [
    "DEFAULT_THEME_NAME",
    "register_theme",
    "get_theme",
    "resolve_theme",
    "list_themes",
    "unregister_theme",
]
