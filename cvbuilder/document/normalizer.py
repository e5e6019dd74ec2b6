"""
CV document normalizer.

Turns whatever the storage layer hands us (plain dicts, dataclasses,
pydantic models, ODM documents, half-filled preview payloads) into one
JSON-safe tree with every expected key present. Downstream code never
branches on the storage representation.

Each field is normalized inside its own guard: a field that cannot be
normalized is logged and replaced by its empty default, so one bad
field never aborts a render.
"""

from __future__ import annotations

import dataclasses
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..i18n import DEFAULT_LANGUAGE, is_supported_language
from ..logging_utils import LOG
from ..shared import clean_text

# Keys that storage layers add to every document and sub-document
STORAGE_INTERNAL_KEYS = frozenset({"_id", "__v"})

CONTACT_FIELDS = ("email", "phone", "location", "linkedin", "github", "portfolio")

# Field aliases accepted from snake_case producers
_ALIASES = {
    "personalInfo": ("personal_info",),
    "keyFeatures": ("key_features",),
}

# Materialization hooks tried, in order, on objects that are not plain data
_MATERIALIZERS = ("model_dump", "to_dict", "to_mongo")

_SCALARS = (str, int, float, bool)


def to_plain_value(value: Any) -> Any:
    """
    Resolve storage indirection and return plain, JSON-safe data.

    Precedence: mapping, sequence, dataclass, materializer hook
    (model_dump / to_dict / to_mongo), date, scalar, str() fallback.
    Storage-internal keys are dropped at every level.
    """
    if value is None or isinstance(value, _SCALARS):
        return value
    if isinstance(value, Mapping):
        return {
            str(k): to_plain_value(v)
            for k, v in value.items()
            if k not in STORAGE_INTERNAL_KEYS
        }
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_plain_value(v) for v in value]
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_plain_value(dataclasses.asdict(value))
    for hook in _MATERIALIZERS:
        method = getattr(value, hook, None)
        if callable(method):
            return to_plain_value(method())
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _get(source: Any, name: str) -> Any:
    """Read a field from a mapping or an attribute-bearing object."""
    for key in (name,) + _ALIASES.get(name, ()):
        if isinstance(source, Mapping):
            if key in source:
                return source[key]
        elif hasattr(source, key):
            return getattr(source, key)
    return None


def _text(value: Any) -> Optional[str]:
    """Scalar-ish value to a clean string, or None when empty."""
    value = to_plain_value(value)
    if value is None:
        return None
    if isinstance(value, Mapping):
        value = " ".join(str(v) for v in value.values() if v not in (None, ""))
    elif isinstance(value, list):
        value = ", ".join(str(v) for v in value if v not in (None, ""))
    text = clean_text(str(value))
    return text or None


def _text_list(value: Any) -> List[str]:
    """Sequence of displayable strings; a lone string becomes one item."""
    value = to_plain_value(value)
    if value is None:
        return []
    if not isinstance(value, list):
        value = [value]
    items = []
    for item in value:
        text = _text(item)
        if text:
            items.append(text)
    return items


def _records(value: Any) -> List[Dict[str, Any]]:
    """Sequence of plain dicts; non-mapping entries are skipped."""
    value = to_plain_value(value)
    if value is None:
        return []
    if isinstance(value, Mapping):
        value = [value]
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


# ------------------------- Skills -------------------------

def coerce_skill_values(value: Any) -> List[str]:
    """
    Coerce one skills category to a list of display strings.

    Precedence: array, then object, then delimited string.
    - array: strings kept, {name, level} -> "name: level" (or "name"),
      other objects -> "firstKey: value"
    - object: each entry -> "key: a, b" (lists and objects are joined)
    - string: split on commas
    """
    value = to_plain_value(value)
    if isinstance(value, list):
        skills = []
        for item in value:
            if isinstance(item, Mapping):
                if item.get("name"):
                    level = item.get("level")
                    skills.append(f"{item['name']}: {level}" if level else str(item["name"]))
                elif item:
                    key = next(iter(item))
                    skills.append(f"{key}: {item[key]}")
            elif item not in (None, ""):
                skills.append(str(item))
        return [clean_text(s) for s in skills if clean_text(s)]
    if isinstance(value, Mapping):
        skills = []
        for key, inner in value.items():
            if isinstance(inner, list):
                joined = ", ".join(str(v) for v in inner)
            elif isinstance(inner, Mapping):
                joined = ", ".join(str(v) for v in inner.values())
            else:
                joined = str(inner)
            skills.append(f"{key}: {joined}")
        return [clean_text(s) for s in skills]
    if isinstance(value, str):
        return [s.strip() for s in value.split(",") if s.strip()]
    return []


def _normalize_skills(value: Any) -> Dict[str, List[str]]:
    value = to_plain_value(value)
    if value is None:
        return {}
    if isinstance(value, (list, str)):
        # A flat list or string instead of a category map
        return {"skills": coerce_skill_values(value)}
    if not isinstance(value, Mapping):
        return {}
    return {str(category): coerce_skill_values(skills) for category, skills in value.items()}


# ------------------------- Sections -------------------------

def _normalize_personal_info(value: Any) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    info = to_plain_value(value)
    if not isinstance(info, Mapping):
        return None
    contact = info.get("contact") or {}
    if not isinstance(contact, Mapping):
        contact = {}
    return {
        "name": _text(info.get("name")),
        "title": _text(info.get("title")),
        "contact": {field: _text(contact.get(field)) for field in CONTACT_FIELDS},
    }


def _normalize_summary(value: Any) -> Optional[str]:
    return _text(value)


def _normalize_experience(value: Any) -> List[Dict[str, Any]]:
    return [
        {
            "title": _text(item.get("title")),
            "company": _text(item.get("company")),
            "period": _text(item.get("period")),
            "responsibilities": _text_list(item.get("responsibilities")),
        }
        for item in _records(value)
    ]


def _normalize_projects(value: Any) -> List[Dict[str, Any]]:
    return [
        {
            "name": _text(item.get("name")),
            "description": _text(item.get("description")),
            "technologies": _text_list(item.get("technologies")),
            "keyFeatures": _text_list(_get(item, "keyFeatures")),
        }
        for item in _records(value)
    ]


def _normalize_education(value: Any) -> List[Dict[str, Any]]:
    return [
        {
            "degree": _text(item.get("degree")),
            "institution": _text(item.get("institution")),
            "period": _text(item.get("period")),
            "details": _text(item.get("details")),
        }
        for item in _records(value)
    ]


def _normalize_certifications(value: Any) -> List[Dict[str, Any]]:
    return [
        {
            "name": _text(item.get("name")),
            "issuer": _text(item.get("issuer")),
            "type": _text(item.get("type")),
            "skills": _text(item.get("skills")),
            "date": _text(item.get("date")) or _text(item.get("year")),
        }
        for item in _records(value)
    ]


def _normalize_languages(value: Any) -> List[Dict[str, Any]]:
    value = to_plain_value(value)
    if value is None:
        return []
    if not isinstance(value, list):
        value = [value]
    languages = []
    for item in value:
        if isinstance(item, Mapping):
            entry = {"language": _text(item.get("language")), "level": _text(item.get("level"))}
        else:
            entry = {"language": _text(item), "level": None}
        if entry["language"] or entry["level"]:
            languages.append(entry)
    return languages


def normalize_language(value: Any) -> str:
    language = (_text(value) or DEFAULT_LANGUAGE).lower()
    if not is_supported_language(language):
        LOG.debug("Unsupported CV language %r, using %s", language, DEFAULT_LANGUAGE)
        return DEFAULT_LANGUAGE
    return language


# Field name -> (normalizer, empty default factory)
_FIELDS: Dict[str, tuple] = {
    "language": (normalize_language, lambda: DEFAULT_LANGUAGE),
    "personalInfo": (_normalize_personal_info, lambda: None),
    "summary": (_normalize_summary, lambda: None),
    "skills": (_normalize_skills, dict),
    "experience": (_normalize_experience, list),
    "projects": (_normalize_projects, list),
    "education": (_normalize_education, list),
    "certifications": (_normalize_certifications, list),
    "languages": (_normalize_languages, list),
    "interests": (_text_list, list),
}


def _normalize_field(source: Any, name: str, normalizer: Callable[[Any], Any], default: Callable[[], Any]) -> Any:
    try:
        return normalizer(_get(source, name))
    except Exception as e:
        LOG.warning("Could not normalize CV field %r (%s: %s); using empty value", name, type(e).__name__, e)
        return default()


def normalize_cv(source: Any) -> Dict[str, Any]:
    """
    Normalize a CV-like object into the canonical document tree.

    Args:
        source: dict, dataclass, pydantic model, ODM document, or any
            object exposing the CV fields as attributes. None yields an
            empty document.

    Returns:
        Dict with the keys language, personalInfo, summary, skills,
        experience, projects, education, certifications, languages,
        interests, all resolved to values or empty defaults.
    """
    if source is None:
        source = {}
    elif not isinstance(source, Mapping):
        try:
            plain = to_plain_value(source)
        except Exception as e:
            LOG.warning("Could not materialize CV record (%s: %s); reading attributes", type(e).__name__, e)
            plain = None
        if isinstance(plain, Mapping):
            source = plain

    return {
        name: _normalize_field(source, name, normalizer, default)
        for name, (normalizer, default) in _FIELDS.items()
    }


__all__ = [
    "STORAGE_INTERNAL_KEYS",
    "coerce_skill_values",
    "normalize_cv",
    "to_plain_value",
]
