"""
Renderer registry for managing named CV renderers.

Lets callers pick a render backend by name, via the CLI or the
assembly driver.
"""

from __future__ import annotations

from typing import Dict, List, Type, Optional

from .base import CVRenderer

# Global renderer registry
_RENDERER_REGISTRY: Dict[str, Type[CVRenderer]] = {}


def register_renderer(name: str, renderer_class: Type[CVRenderer]) -> None:
    """
    Register a renderer class in the global registry.

    Args:
        name: The name to register the renderer under (e.g., "playwright-pdf")
        renderer_class: The renderer class to register
    """
    _RENDERER_REGISTRY[name] = renderer_class


def get_renderer(name: str, **kwargs) -> Optional[CVRenderer]:
    """
    Get a renderer instance by name.

    Args:
        name: The renderer name (e.g., "html")
        **kwargs: Arguments to pass to the renderer constructor

    Returns:
        Renderer instance, or None if not found
    """
    renderer_class = _RENDERER_REGISTRY.get(name)
    if renderer_class:
        return renderer_class(**kwargs)
    return None


def list_renderers() -> List[Dict[str, str]]:
    """
    List all registered renderers with their descriptions.

    Returns:
        List of dicts with 'name' and 'description' keys
    """
    renderers = []
    for name, renderer_class in _RENDERER_REGISTRY.items():
        description = renderer_class.__doc__ or "No description available"
        description = description.strip().split("\n")[0]
        renderers.append({"name": name, "description": description})
    return sorted(renderers, key=lambda x: x["name"])


def unregister_renderer(name: str) -> None:
    """
    Unregister a renderer from the global registry.
    """
    _RENDERER_REGISTRY.pop(name, None)


__all__ = [
    "register_renderer",
    "get_renderer",
    "list_renderers",
    "unregister_renderer",
]
