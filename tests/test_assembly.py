"""Tests for document assembly and the render retry loop."""

import pytest

from cvbuilder.assembly import DocumentAssembler, RenderFailure, RetryConfig, produce, resolve_renderer
from cvbuilder.renderers import HtmlCVRenderer, PlaywrightPdfRenderer, RenderError


class TestResolveRenderer:
    def test_default_is_playwright(self):
        assert isinstance(resolve_renderer(None), PlaywrightPdfRenderer)

    def test_by_name_and_instance(self):
        renderer = HtmlCVRenderer()

        assert resolve_renderer(renderer) is renderer
        assert isinstance(resolve_renderer("html"), HtmlCVRenderer)

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown renderer: nope"):
            resolve_renderer("nope")


class TestDocumentAssembler:
    def test_success_first_attempt(self, sample_cv, fake_renderer):
        renderer = fake_renderer()
        sleeps = []

        out = DocumentAssembler(renderer, _sleep=sleeps.append).produce(sample_cv)

        assert out == b"%PDF-1.7 fake"
        assert len(renderer.calls) == 1
        assert "Jane Doe" in renderer.calls[0][0]
        assert sleeps == []

    def test_transient_failure_retried(self, sample_cv, fake_renderer):
        renderer = fake_renderer([RenderError("Target closed", transient=True), b"%PDF ok"])
        sleeps = []

        out = DocumentAssembler(renderer, _sleep=sleeps.append).produce(sample_cv)

        assert out == b"%PDF ok"
        assert len(renderer.calls) == 2
        assert sleeps == [1.0]

    def test_same_html_on_every_attempt(self, sample_cv, fake_renderer):
        renderer = fake_renderer([RenderError("crash", transient=True), b"%PDF ok"])

        DocumentAssembler(renderer, _sleep=lambda s: None).produce(sample_cv)

        assert renderer.calls[0][0] == renderer.calls[1][0]

    def test_empty_output_retried(self, sample_cv, fake_renderer):
        renderer = fake_renderer([b"", b"%PDF ok"])

        out = DocumentAssembler(renderer, _sleep=lambda s: None).produce(sample_cv)

        assert out == b"%PDF ok"

    def test_non_transient_failure_not_retried(self, sample_cv, fake_renderer):
        renderer = fake_renderer([RenderError("Executable doesn't exist")])
        sleeps = []

        with pytest.raises(RenderFailure) as exc_info:
            DocumentAssembler(renderer, _sleep=sleeps.append).produce(sample_cv)

        assert exc_info.value.attempts == 1
        assert "non-retryable" in str(exc_info.value)
        assert len(renderer.calls) == 1
        assert sleeps == []

    def test_gives_up_after_max_attempts(self, sample_cv, fake_renderer):
        cause = RenderError("Timeout 30000ms exceeded", transient=True)
        renderer = fake_renderer([cause])
        sleeps = []

        with pytest.raises(RenderFailure) as exc_info:
            DocumentAssembler(renderer, _sleep=sleeps.append).produce(sample_cv)

        assert exc_info.value.attempts == 2
        assert str(exc_info.value) == "Render failed after 2 attempts: Timeout 30000ms exceeded"
        assert exc_info.value.__cause__ is cause
        assert len(renderer.calls) == 2
        assert sleeps == [1.0]

    def test_empty_output_exhaustion(self, sample_cv, fake_renderer):
        renderer = fake_renderer([b""])

        with pytest.raises(RenderFailure, match="empty output"):
            DocumentAssembler(renderer, _sleep=lambda s: None).produce(sample_cv)

    def test_custom_retry_config(self, sample_cv, fake_renderer):
        renderer = fake_renderer([RenderError("crash", transient=True)])
        sleeps = []
        assembler = DocumentAssembler(
            renderer, retry_config=RetryConfig(max_attempts=4, delay_s=0.25), _sleep=sleeps.append
        )

        with pytest.raises(RenderFailure) as exc_info:
            assembler.produce(sample_cv)

        assert exc_info.value.attempts == 4
        assert sleeps == [0.25, 0.25, 0.25]

    def test_options_and_theme_reach_html(self, sample_cv, fake_renderer):
        renderer = fake_renderer()

        DocumentAssembler(renderer).produce(sample_cv, {"pageBreakThreshold": 0}, "modern")

        html = renderer.calls[0][0]
        assert "#3498db" in html
        assert ".forced-break" not in html

    def test_produce_html_does_not_render(self, sample_cv, fake_renderer):
        renderer = fake_renderer()

        html = DocumentAssembler(renderer).produce_html(sample_cv)

        assert html.startswith("<!DOCTYPE html>")
        assert renderer.calls == []

    def test_theme_record_with_relative_length_rejected_before_render(self, sample_cv, fake_renderer):
        renderer = fake_renderer()

        with pytest.raises(ValueError, match="fontSizes.body"):
            DocumentAssembler(renderer).produce(sample_cv, theme={"name": "custom", "fontSizes": {"body": "1em"}})

        assert renderer.calls == []


def test_module_level_produce_with_html_renderer(sample_cv):
    out = produce(sample_cv, renderer="html")

    assert out.startswith(b"<!DOCTYPE html>")
    assert "Jane Doe".encode() in out
