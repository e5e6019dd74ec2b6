"""Tests for the pagination constraint engine and page planner."""

import pytest

from cvbuilder.document import normalize_cv
from cvbuilder.layout.model import (
    Document,
    HeaderBlock,
    LayoutUnit,
    Line,
    LineRole,
    RenderOptions,
    Section,
    SectionKind,
    UnitKind,
)
from cvbuilder.layout.pagination import (
    BreakRule,
    ConstraintFamily,
    Metrics,
    build_constraint_set,
    estimate_unit_height,
    estimate_wrapped_lines,
    plan_pages,
)
from cvbuilder.layout.sections import build_document
from cvbuilder.themes import PROFESSIONAL_THEME

from conftest import make_experience


def text_unit(uid: str, n_lines: int, kind: UnitKind = UnitKind.EXPERIENCE) -> LayoutUnit:
    """Unit whose estimated height is exactly n_lines body lines."""
    return LayoutUnit(uid=uid, kind=kind, lines=tuple(Line(LineRole.TEXT, "x") for _ in range(n_lines)))


def make_doc(*sections: Section) -> Document:
    return Document(language="en", header=HeaderBlock(name="X"), sections=sections, theme=PROFESSIONAL_THEME)


def experience_section(*line_counts: int) -> Section:
    return Section(
        kind=SectionKind.EXPERIENCE,
        header="Professional Experience",
        units=tuple(text_unit(f"experience-{i}", n) for i, n in enumerate(line_counts)),
    )


def cv_document(cv, **options):
    opts = RenderOptions(**options)
    return build_document(normalize_cv(cv), PROFESSIONAL_THEME, opts), opts


class TestConstraintSet:
    def test_atomicity_serialised_with_modern_and_legacy_properties(self):
        css = build_constraint_set().to_css()

        assert ".experience-item" in css
        assert ".certification-item" in css
        assert ".skill-category" in css
        assert "break-inside: avoid-page !important;" in css
        assert "page-break-inside: avoid !important;" in css

    def test_section_glue_on_by_default(self):
        constraints = build_constraint_set()

        assert BreakRule.AVOID_AFTER in constraints.rules_for(".section-header")
        assert BreakRule.AVOID_BEFORE in constraints.rules_for(".section-header + *")

    def test_section_glue_can_be_switched_off_item_glue_stays(self):
        constraints = build_constraint_set(RenderOptions(title_section_connection=False))

        assert not constraints.rules_for(".section-header")
        assert BreakRule.AVOID_AFTER in constraints.rules_for(".keep-with-next")

    def test_zero_threshold_has_no_forced_break_rule(self):
        constraints = build_constraint_set(RenderOptions(page_break_threshold=0))

        assert constraints.family(ConstraintFamily.THRESHOLD) == ()
        assert constraints.family(ConstraintFamily.ATOMICITY)

    def test_forced_break_rule_present_with_threshold(self):
        css = build_constraint_set().to_css()

        assert ".forced-break" in css
        assert "break-before: page !important;" in css
        assert "page-break-before: always !important;" in css


class TestHeightEstimation:
    def test_wrapped_lines(self):
        assert estimate_wrapped_lines("", 3.5, 170) == 0
        assert estimate_wrapped_lines("short", 3.5, 170) == 1
        # 170mm / (3.5mm * 0.5) -> 97 chars per line
        assert estimate_wrapped_lines("a" * 200, 3.5, 170) == 3

    def test_unit_height_scales_with_lines(self):
        metrics = Metrics.from_theme(PROFESSIONAL_THEME)
        one = estimate_unit_height(text_unit("a", 1), metrics)
        ten = estimate_unit_height(text_unit("b", 10), metrics)

        assert ten == pytest.approx(10 * one)

    def test_empty_lines_take_no_space(self):
        metrics = Metrics.from_theme(PROFESSIONAL_THEME)
        unit = LayoutUnit("u", UnitKind.EXPERIENCE, (Line(LineRole.TITLE, ""), Line(LineRole.TEXT, "x")))

        assert estimate_unit_height(unit, metrics) == pytest.approx(estimate_unit_height(text_unit("v", 1), metrics))

    def test_spacing_options_override_theme(self):
        metrics = Metrics.from_theme(PROFESSIONAL_THEME, RenderOptions(section_spacing=10, element_spacing=0))

        assert metrics.section_gap_mm == 10
        assert metrics.element_gap_mm == 0


class TestPlanner:
    def test_threshold_pushes_unit_to_next_page(self):
        doc = make_doc(experience_section(10, 10, 10, 10, 10))

        plan = plan_pages(doc, RenderOptions(page_break_threshold=85))

        assert plan.page_of("experience-2") == 1
        assert plan.page_of("experience-3") == 2
        assert "experience-3" in plan.forced_breaks

    def test_zero_threshold_disables_early_breaks(self):
        doc = make_doc(experience_section(10, 10, 10, 10, 10))

        plan = plan_pages(doc, RenderOptions(page_break_threshold=0))

        assert plan.page_of("experience-3") == 1
        assert plan.page_of("experience-4") == 2
        assert plan.forced_breaks == frozenset()

    def test_no_unit_starts_below_threshold_line(self, large_cv):
        doc, opts = cv_document(large_cv, page_break_threshold=85)
        plan = plan_pages(doc, opts)
        limit = plan.content_height_mm - plan.threshold_mm

        for placement in plan.placements:
            if placement.top_mm > 0:
                assert placement.top_mm <= limit

    def test_atomic_units_never_straddle_pages(self, large_cv):
        # Every experience is atomic: placed whole within one page
        doc, opts = cv_document(large_cv, page_break_threshold=0)
        plan = plan_pages(doc, opts)

        assert plan.page_count > 1
        for placement in plan.placements:
            if any(uid.startswith("experience-") for uid in placement.uids):
                assert placement.top_mm + placement.height_mm <= plan.content_height_mm + 1e-6

    def test_unit_that_would_straddle_moves_whole(self):
        # 45-line unit fills most of page 1; the 12-line unit cannot fit below it
        doc = make_doc(experience_section(45, 12))

        plan = plan_pages(doc, RenderOptions(page_break_threshold=0))

        assert plan.page_of("experience-0") == 1
        assert plan.page_of("experience-1") == 2
        second = next(p for p in plan.placements if "experience-1" in p.uids)
        assert second.top_mm == 0
        assert not second.forced_break

    def test_header_moves_with_first_item(self):
        first = Section(SectionKind.EXPERIENCE, "Professional Experience", units=(text_unit("experience-0", 45),))
        second = Section(SectionKind.PROJECTS, "Projects", units=(text_unit("projects-0", 5, UnitKind.PROJECT),))
        doc = make_doc(first, second)

        plan = plan_pages(doc, RenderOptions(page_break_threshold=0))

        assert plan.page_of("section-projects") == 2
        assert plan.page_of("projects-0") == 2

    def test_header_alone_may_stay_when_connection_disabled(self):
        first = Section(SectionKind.EXPERIENCE, "Professional Experience", units=(text_unit("experience-0", 45),))
        second = Section(SectionKind.PROJECTS, "Projects", units=(text_unit("projects-0", 5, UnitKind.PROJECT),))
        doc = make_doc(first, second)

        plan = plan_pages(doc, RenderOptions(page_break_threshold=0, title_section_connection=False))

        assert plan.page_of("section-projects") == 1
        assert plan.page_of("projects-0") == 2

    def test_section_header_never_last_on_page(self, large_cv):
        doc, opts = cv_document(large_cv)
        plan = plan_pages(doc, opts)

        for section in doc.sections:
            assert plan.page_of(section.uid) == plan.page_of(section.children[0].uid)

    def test_oversized_unit_flagged_and_placed_alone(self):
        doc = make_doc(experience_section(2, 60, 2))

        plan = plan_pages(doc, RenderOptions(page_break_threshold=0))

        big = next(p for p in plan.placements if "experience-1" in p.uids)
        assert big.overflows
        assert big.top_mm == 0
        assert big.page == 2
        assert plan.overflowing == ("experience-1",)
        assert plan.page_of("experience-2") == 3

    def test_column_rows_are_planned_together(self, sample_cv):
        doc, opts = cv_document(sample_cv)
        plan = plan_pages(doc, opts)

        row = next(p for p in plan.placements if "certifications-0" in p.uids)
        # Split columns: left holds 0, 1, 2 and right holds 3, 4
        assert "certifications-3" in row.uids
        assert "section-certifications" in row.uids

    def test_plan_is_deterministic(self, large_cv):
        doc, opts = cv_document(large_cv)

        assert plan_pages(doc, opts) == plan_pages(doc, opts)

    def test_fifteen_experiences_keep_title_with_first_responsibility(self):
        cv = {
            "personalInfo": {"name": "A", "title": "B"},
            "experience": [make_experience(i, bullets=4) for i in range(15)],
        }
        doc, opts = cv_document(cv, page_break_threshold=85)
        plan = plan_pages(doc, opts)

        assert plan.page_count > 1
        experience = doc.section(SectionKind.EXPERIENCE)
        for unit in experience.units:
            # Title and bullets live in one atomic unit: one placement, one page
            placements = [p for p in plan.placements if unit.uid in p.uids]
            assert len(placements) == 1
            assert unit.lines[0].keep_with_next
            assert unit.lines_with_role(LineRole.BULLET)

    def test_pages_lists_every_element_once(self, sample_cv):
        doc, opts = cv_document(sample_cv)
        plan = plan_pages(doc, opts)

        listed = [uid for uids in plan.pages().values() for uid in uids]
        expected = ["page-header"] + [uid for s in doc.sections for uid in (s.uid,) + tuple(u.uid for u in s.children)]
        assert sorted(listed) == sorted(expected)
