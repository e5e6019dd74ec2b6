"""
CV adjustment interfaces and implementations.

This module provides pluggable and interchangeable CV adjusters with a registry system.
"""

from __future__ import annotations

from .base import CVAdjuster
from .adjuster_registry import get_adjuster, list_adjusters, register_adjuster, unregister_adjuster
from .openai_tailoring_adjuster import OpenAITailoringAdjuster

# Register built-in adjusters
register_adjuster(OpenAITailoringAdjuster)

__all__ = [
    "CVAdjuster",
    "OpenAITailoringAdjuster",
    "register_adjuster",
    "get_adjuster",
    "list_adjusters",
    "unregister_adjuster",
]
