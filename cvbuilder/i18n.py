"""
Localized labels for rendered CVs.

Lookups fall back from the requested language to English, and from there
to the raw key, so a missing translation never breaks a render.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

DEFAULT_LANGUAGE = "en"

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "en": {
        # Section headers
        "professional_summary": "Professional Summary",
        "technical_skills": "Technical Skills",
        "professional_experience": "Professional Experience",
        "projects": "Projects",
        "education": "Education",
        "certifications": "Certifications",
        "languages": "Languages",
        "interests": "Interests",
        # Contact labels
        "email": "Email",
        "phone": "Phone",
        "location": "Location",
        "linkedin": "LinkedIn",
        "github": "GitHub",
        "portfolio": "Portfolio",
        # Item labels
        "technologies": "Technologies",
        "issuer": "Issuer",
        "date": "Date",
        "skills": "Skills",
    },
    "fr": {
        "professional_summary": "Résumé Professionnel",
        "technical_skills": "Compétences Techniques",
        "professional_experience": "Expérience Professionnelle",
        "projects": "Projets",
        "education": "Formation",
        "certifications": "Certifications",
        "languages": "Langues",
        "interests": "Centres d'intérêt",
        "email": "Email",
        "phone": "Téléphone",
        "location": "Localisation",
        "linkedin": "LinkedIn",
        "github": "GitHub",
        "portfolio": "Portfolio",
        "technologies": "Technologies",
        "issuer": "Organisme",
        "date": "Date",
        "skills": "Compétences",
    },
}

SUPPORTED_LANGUAGES = tuple(TRANSLATIONS)


def is_supported_language(language: Optional[str]) -> bool:
    return bool(language) and language in TRANSLATIONS


def get_translation(key: str, language: Optional[str] = DEFAULT_LANGUAGE) -> str:
    """
    Resolve a label: requested language, then the default language, then the key.
    """
    table = TRANSLATIONS.get(language or DEFAULT_LANGUAGE, {})
    if key in table:
        return table[key]
    return TRANSLATIONS[DEFAULT_LANGUAGE].get(key, key)


def make_translator(language: Optional[str]) -> Callable[[str], str]:
    """Bind get_translation to one language."""
    return lambda key: get_translation(key, language)
