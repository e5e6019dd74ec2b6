"""Tests for CLI phase 2: validation and environment setup."""

import json

import pytest

from cvbuilder.cli_gather import gather_user_requirements
from cvbuilder.cli_prepare import collect_inputs, prepare_execution_environment


@pytest.fixture
def cv_file(tmp_path, sample_cv):
    path = tmp_path / "cv.json"
    path.write_text(json.dumps(sample_cv), encoding="utf-8")
    return path


def _config(*argv):
    return gather_user_requirements(list(argv))


class TestCollectInputs:
    def test_single_file(self, cv_file):
        assert collect_inputs(cv_file) == [cv_file]

    def test_folder_collected_recursively_and_sorted(self, tmp_path):
        (tmp_path / "b.json").write_text("{}", encoding="utf-8")
        (tmp_path / "team").mkdir()
        (tmp_path / "team" / "a.json").write_text("{}", encoding="utf-8")
        (tmp_path / "notes.txt").write_text("x", encoding="utf-8")

        inputs = collect_inputs(tmp_path)

        assert inputs == sorted([tmp_path / "b.json", tmp_path / "team" / "a.json"])

    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            collect_inputs(tmp_path / "missing")


class TestPrepareExecutionEnvironment:
    def test_creates_target(self, cv_file, tmp_path):
        target = tmp_path / "out" / "nested"

        config = prepare_execution_environment(_config("--input", str(cv_file), "--target", str(target)))

        assert target.is_dir()
        assert config.target_dir == target

    def test_list_needs_nothing(self):
        config = _config("--list", "renderers")

        assert prepare_execution_environment(config) is config

    def test_input_required(self, tmp_path):
        with pytest.raises(ValueError, match="--input is required"):
            prepare_execution_environment(_config("--target", str(tmp_path)))

    def test_target_required(self, cv_file):
        with pytest.raises(ValueError, match="--target is required"):
            prepare_execution_environment(_config("--input", str(cv_file)))

    def test_missing_input(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            prepare_execution_environment(_config("--input", str(tmp_path / "nope.json"), "--target", str(tmp_path)))

    def test_unknown_theme(self, cv_file, tmp_path):
        with pytest.raises(ValueError, match="Unknown theme: neon"):
            prepare_execution_environment(
                _config("--input", str(cv_file), "--target", str(tmp_path), "--theme", "neon")
            )

    def test_unsupported_language(self, cv_file, tmp_path):
        with pytest.raises(ValueError, match="Unsupported language: de"):
            prepare_execution_environment(
                _config("--input", str(cv_file), "--target", str(tmp_path), "--language", "de")
            )

    def test_output_with_folder_rejected(self, cv_file, tmp_path):
        with pytest.raises(ValueError, match="single input file"):
            prepare_execution_environment(
                _config("--input", str(tmp_path), "--target", str(tmp_path / "out"), "--output", "x.pdf")
            )

    def test_unknown_adjuster(self, cv_file, tmp_path):
        with pytest.raises(ValueError, match="Unknown adjuster: magic"):
            prepare_execution_environment(
                _config("--input", str(cv_file), "--target", str(tmp_path), "--adjust", "name=magic")
            )

    def test_adjuster_params_validated(self, cv_file, tmp_path):
        with pytest.raises(ValueError, match="job-url"):
            prepare_execution_environment(
                _config("--input", str(cv_file), "--target", str(tmp_path), "--adjust", "requirements=short")
            )

    def test_cover_letter_needs_job_offer(self, cv_file, tmp_path):
        with pytest.raises(ValueError, match="--cover-letter requires"):
            prepare_execution_environment(
                _config("--input", str(cv_file), "--target", str(tmp_path), "--cover-letter", "requirements=short")
            )

    def test_cover_letter_with_job_description(self, cv_file, tmp_path):
        config = prepare_execution_environment(
            _config("--input", str(cv_file), "--target", str(tmp_path), "--cover-letter", "job-description=Go")
        )

        assert config.cover_letter.params == {"job-description": "Go"}
