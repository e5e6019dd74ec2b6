"""
CV document model: normalization of stored CV records.
"""

from .normalizer import (
    STORAGE_INTERNAL_KEYS,
    coerce_skill_values,
    normalize_cv,
    normalize_language,
    to_plain_value,
)

__all__ = [
    "STORAGE_INTERNAL_KEYS",
    "coerce_skill_values",
    "normalize_cv",
    "normalize_language",
    "to_plain_value",
]
