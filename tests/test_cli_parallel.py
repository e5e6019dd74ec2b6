"""Tests for folder rendering with a worker pool."""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from cvbuilder.cli_config import OutputFormat, ParallelStage, RenderStage, UserConfig
from cvbuilder.cli_execute import execute_single
from cvbuilder.cli_parallel import execute_parallel_pipeline


@pytest.fixture
def cv_folder(tmp_path: Path, sample_cv):
    src = tmp_path / "cvs"
    (src / "team").mkdir(parents=True)
    for rel in ("alice.json", "bob.json", "team/carol.json"):
        cv = dict(sample_cv, personalInfo={"name": rel.split("/")[-1][:-5].title(), "title": "Engineer"})
        (src / rel).write_text(json.dumps(cv), encoding="utf-8")
    return src


def _config(src: Path, target: Path, workers: int = 3) -> UserConfig:
    return UserConfig(
        input=src,
        target_dir=target,
        render=RenderStage(format=OutputFormat.HTML),
        parallel=ParallelStage(workers=workers),
    )


def _inputs(src: Path):
    return sorted(src.rglob("*.json"))


def test_all_files_rendered(cv_folder, tmp_path):
    target = tmp_path / "out"

    rc = execute_parallel_pipeline(_config(cv_folder, target), _inputs(cv_folder), cv_folder.resolve())

    assert rc == 0
    docs = target / "documents"
    assert "Alice" in (docs / "alice.html").read_text(encoding="utf-8")
    assert "Bob" in (docs / "bob.html").read_text(encoding="utf-8")
    assert "Carol" in (docs / "team" / "carol.html").read_text(encoding="utf-8")


def test_one_broken_file_fails_run_others_still_render(cv_folder, tmp_path):
    (cv_folder / "broken.json").write_text("{", encoding="utf-8")
    target = tmp_path / "out"

    rc = execute_parallel_pipeline(_config(cv_folder, target), _inputs(cv_folder), cv_folder.resolve())

    assert rc == 1
    assert (target / "documents" / "alice.html").exists()
    assert not (target / "documents" / "broken.html").exists()


def test_unexpected_worker_exception_recorded(cv_folder, tmp_path, caplog):
    def flaky(config, input_file, source_root):
        if input_file.name == "bob.json":
            raise RuntimeError("worker crashed")
        return execute_single(config, input_file, source_root)

    with patch("cvbuilder.cli_parallel.execute_single", side_effect=flaky), \
            caplog.at_level(logging.ERROR, logger="cvbuilder"):
        rc = execute_parallel_pipeline(_config(cv_folder, tmp_path / "out"), _inputs(cv_folder), cv_folder.resolve())

    assert rc == 1
    assert "bob.json | Unexpected error: worker crashed" in caplog.text
    assert "Failed:" in caplog.text


def test_requires_parallel_config(cv_folder, tmp_path):
    config = _config(cv_folder, tmp_path / "out")
    config.parallel = None

    with pytest.raises(ValueError):
        execute_parallel_pipeline(config, _inputs(cv_folder), cv_folder)
