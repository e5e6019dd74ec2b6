"""
Section/item renderer.

Maps each section of a normalized CV to a Section of layout units, or to
nothing when the section has no content. Item rendering policy lives
here: detail-line caps, column splits, inline joins, and which lines are
glued to the line after them.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..document.normalizer import normalize_language
from ..i18n import make_translator
from ..logging_utils import LOG
from ..themes import Theme
from .model import (
    ColumnFill,
    ColumnGroup,
    ContactRow,
    Document,
    HeaderBlock,
    LayoutUnit,
    Line,
    LineRole,
    RenderOptions,
    Section,
    SECTION_HEADER_KEYS,
    SECTION_ORDER,
    SectionKind,
    UnitKind,
)

# Rendering caps; the stored record keeps everything
MAX_RESPONSIBILITIES = 4
MAX_KEY_FEATURES = 3

PLACEHOLDER_NAME = "CV"

Translator = Callable[[str], str]


def category_label(category: str) -> str:
    """Skills category key -> label: first character upper-cased, rest kept."""
    category = str(category).strip()
    return category[:1].upper() + category[1:]


def build_header(cv: Mapping[str, Any], t: Translator) -> HeaderBlock:
    info = cv.get("personalInfo")
    if not info:
        return HeaderBlock(name=PLACEHOLDER_NAME)

    contact = info.get("contact") or {}
    rows = tuple(
        ContactRow(key=key, label=t(key), value=contact[key])
        for key in ("email", "phone", "location", "linkedin", "github", "portfolio")
        if contact.get(key)
    )
    return HeaderBlock(name=info.get("name") or PLACEHOLDER_NAME, title=info.get("title"), contact=rows)


# ------------------------- Unit builders -------------------------

def _summary_units(cv: Mapping[str, Any], t: Translator, options: RenderOptions) -> List[LayoutUnit]:
    summary = cv.get("summary")
    if not summary:
        return []
    return [LayoutUnit(uid="summary-0", kind=UnitKind.SUMMARY, lines=(Line(LineRole.TEXT, summary),), atomic=False)]


def _skill_units(cv: Mapping[str, Any], t: Translator, options: RenderOptions) -> List[LayoutUnit]:
    units = []
    for category, skills in (cv.get("skills") or {}).items():
        if not skills:
            continue
        lines = [Line(LineRole.TITLE, category_label(category), keep_with_next=True)]
        lines.extend(Line(LineRole.CHIP, skill) for skill in skills)
        units.append(LayoutUnit(uid=f"skills-{len(units)}", kind=UnitKind.SKILL_CATEGORY, lines=tuple(lines)))
    return units


def _experience_units(cv: Mapping[str, Any], t: Translator, options: RenderOptions) -> List[LayoutUnit]:
    units = []
    for i, exp in enumerate(cv.get("experience") or []):
        lines = [
            Line(LineRole.TITLE, exp.get("title") or "", keep_with_next=True),
            Line(LineRole.SUBTITLE, exp.get("company") or "", keep_with_next=True),
            Line(LineRole.PERIOD, exp.get("period") or "", keep_with_next=True),
        ]
        lines.extend(
            Line(LineRole.BULLET, item)
            for item in (exp.get("responsibilities") or [])[:MAX_RESPONSIBILITIES]
        )
        units.append(LayoutUnit(uid=f"experience-{i}", kind=UnitKind.EXPERIENCE, lines=tuple(lines)))
    return units


def _project_units(cv: Mapping[str, Any], t: Translator, options: RenderOptions) -> List[LayoutUnit]:
    units = []
    for i, project in enumerate(cv.get("projects") or []):
        lines = [
            Line(LineRole.TITLE, project.get("name") or "", keep_with_next=True),
            Line(LineRole.TEXT, project.get("description") or ""),
            Line(LineRole.LABELED, ", ".join(project.get("technologies") or []), label=t("technologies")),
        ]
        lines.extend(
            Line(LineRole.BULLET, feature)
            for feature in (project.get("keyFeatures") or [])[:MAX_KEY_FEATURES]
        )
        units.append(LayoutUnit(uid=f"projects-{i}", kind=UnitKind.PROJECT, lines=tuple(lines)))
    return units


def _education_units(cv: Mapping[str, Any], t: Translator, options: RenderOptions) -> List[LayoutUnit]:
    units = []
    for i, edu in enumerate(cv.get("education") or []):
        lines = [
            Line(LineRole.TITLE, edu.get("degree") or "", keep_with_next=True),
            Line(LineRole.SUBTITLE, edu.get("institution") or "", keep_with_next=True),
            Line(LineRole.PERIOD, edu.get("period") or ""),
        ]
        if edu.get("details"):
            lines[-1] = Line(LineRole.PERIOD, lines[-1].text, keep_with_next=True)
            lines.append(Line(LineRole.TEXT, edu["details"]))
        units.append(LayoutUnit(uid=f"education-{i}", kind=UnitKind.EDUCATION, lines=tuple(lines)))
    return units


def _certification_unit(uid: str, cert: Mapping[str, Any], t: Translator) -> LayoutUnit:
    issuer = cert.get("issuer") or ""
    if cert.get("type"):
        issuer = f"{issuer} - {cert['type']}"
    lines = [
        Line(LineRole.TITLE, cert.get("name") or "Certification", keep_with_next=True),
        Line(LineRole.SUBTITLE, issuer),
    ]
    if cert.get("date"):
        lines.append(Line(LineRole.LABELED, cert["date"], label=t("date")))
    if cert.get("skills"):
        lines.append(Line(LineRole.LABELED, cert["skills"], label=t("skills")))
    return LayoutUnit(uid=uid, kind=UnitKind.CERTIFICATION, lines=tuple(lines))


def _certification_units(cv: Mapping[str, Any], t: Translator, options: RenderOptions) -> List[LayoutUnit]:
    units = []
    for i, cert in enumerate(cv.get("certifications") or []):
        uid = f"certifications-{i}"
        try:
            units.append(_certification_unit(uid, cert, t))
        except Exception as e:
            LOG.warning("Could not format certification %d (%s: %s)", i, type(e).__name__, e)
            units.append(LayoutUnit(
                uid=uid,
                kind=UnitKind.CERTIFICATION,
                lines=(
                    Line(LineRole.TITLE, "Certification (Error)", keep_with_next=True),
                    Line(LineRole.SUBTITLE, "Error processing certification data"),
                ),
            ))
    return units


def _language_units(cv: Mapping[str, Any], t: Translator, options: RenderOptions) -> List[LayoutUnit]:
    entries = [
        f"{lang.get('language') or ''}: {lang.get('level') or ''}"
        for lang in (cv.get("languages") or [])
    ]
    if not entries:
        return []
    return [LayoutUnit(uid="languages-0", kind=UnitKind.INLINE, lines=(Line(LineRole.TEXT, " | ".join(entries)),), atomic=False)]


def _interest_units(cv: Mapping[str, Any], t: Translator, options: RenderOptions) -> List[LayoutUnit]:
    interests = cv.get("interests") or []
    if not interests:
        return []
    return [LayoutUnit(uid="interests-0", kind=UnitKind.INLINE, lines=(Line(LineRole.TEXT, ", ".join(interests)),), atomic=False)]


_UNIT_BUILDERS: Dict[SectionKind, Callable[[Mapping[str, Any], Translator, RenderOptions], List[LayoutUnit]]] = {
    SectionKind.SUMMARY: _summary_units,
    SectionKind.SKILLS: _skill_units,
    SectionKind.EXPERIENCE: _experience_units,
    SectionKind.PROJECTS: _project_units,
    SectionKind.EDUCATION: _education_units,
    SectionKind.CERTIFICATIONS: _certification_units,
    SectionKind.LANGUAGES: _language_units,
    SectionKind.INTERESTS: _interest_units,
}


def _arrange(kind: SectionKind, header: str, units: Sequence[LayoutUnit], options: RenderOptions) -> Section:
    if kind == SectionKind.CERTIFICATIONS:
        return Section(kind=kind, header=header, column_group=ColumnGroup(tuple(units), 2, ColumnFill.SPLIT))
    if kind == SectionKind.SKILLS and options.two_column_skills:
        return Section(kind=kind, header=header, column_group=ColumnGroup(tuple(units), 2, ColumnFill.WRAP))
    return Section(kind=kind, header=header, units=tuple(units))


def build_section(kind: SectionKind, cv: Mapping[str, Any], t: Translator, options: RenderOptions) -> Optional[Section]:
    """
    Build one section, or None when it has nothing to show.
    """
    units = _UNIT_BUILDERS[kind](cv, t, options)
    if not units:
        return None
    return _arrange(kind, t(SECTION_HEADER_KEYS[kind]), units, options)


def build_document(cv: Mapping[str, Any], theme: Theme, options: Optional[RenderOptions] = None) -> Document:
    """
    Build the layout tree for a normalized CV.

    A section whose builder fails is logged and left out; the rest of the
    document still renders.
    """
    options = options or RenderOptions()
    language = normalize_language(options.language or cv.get("language"))
    t = make_translator(language)

    sections = []
    for kind in SECTION_ORDER:
        try:
            section = build_section(kind, cv, t, options)
        except Exception as e:
            LOG.warning("Skipping %s section (%s: %s)", kind.value, type(e).__name__, e)
            continue
        if section is not None:
            sections.append(section)

    return Document(language=language, header=build_header(cv, t), sections=tuple(sections), theme=theme)
