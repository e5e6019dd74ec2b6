import itertools
import json
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cvbuilder.cli_config import UserConfig
from cvbuilder.renderers import CVRenderer
from cvbuilder.shared import UnitOfWork


def make_experience(i: int, bullets: int = 4) -> dict:
    return {
        "title": f"Engineer {i}",
        "company": f"Company {i}",
        "period": f"20{10 + i} - 20{11 + i}",
        "responsibilities": [f"Delivered outcome {i}.{b} for the platform team" for b in range(bullets)],
    }


@pytest.fixture
def sample_cv() -> dict:
    return {
        "language": "en",
        "personalInfo": {
            "name": "Jane Doe",
            "title": "Senior Software Engineer",
            "contact": {
                "email": "jane@example.com",
                "phone": "+33 6 00 00 00 00",
                "location": "Paris",
                "linkedin": "linkedin.com/in/janedoe",
            },
        },
        "summary": "Backend engineer with ten years of experience building data platforms.",
        "skills": {
            "languages": ["Python", "Go", "SQL"],
            "frameworks": ["Django", "FastAPI"],
            "cloud": ["AWS", "Terraform"],
        },
        "experience": [make_experience(i) for i in range(3)],
        "projects": [
            {
                "name": "Pipeline",
                "description": "Streaming ingestion pipeline",
                "technologies": ["Kafka", "Flink"],
                "keyFeatures": ["Exactly-once", "Backfills", "Schema registry", "Dashboards"],
            }
        ],
        "education": [
            {"degree": "MSc Computer Science", "institution": "Sorbonne", "period": "2008 - 2010"}
        ],
        "certifications": [
            {"name": f"Cert {i}", "issuer": "Issuer", "date": "2020"} for i in range(5)
        ],
        "languages": [
            {"language": "English", "level": "Native"},
            {"language": "French", "level": "B2"},
        ],
        "interests": ["Climbing", "Chess"],
    }


@pytest.fixture
def large_cv(sample_cv) -> dict:
    cv = dict(sample_cv)
    cv["experience"] = [make_experience(i) for i in range(12)]
    return cv


class FakeRenderer(CVRenderer):
    """In-memory renderer returning queued results."""

    extension = ".pdf"

    def __init__(self, results=None):
        self.results = list(results or [b"%PDF-1.7 fake"])
        self.calls = []

    def render(self, html, page_spec=None):
        self.calls.append((html, page_spec))
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def fake_renderer():
    return FakeRenderer


@pytest.fixture
def make_work(tmp_path: Path):
    counter = itertools.count()

    def _make(cv_data: dict, output_path: Path = None) -> UnitOfWork:
        json_path = tmp_path / f"input_{next(counter)}.json"
        json_path.write_text(json.dumps(cv_data, indent=2), encoding="utf-8")
        config = UserConfig(input=json_path, target_dir=tmp_path)
        return UnitOfWork(
            config=config,
            input=json_path,
            output=output_path or (tmp_path / "out" / json_path.name),
        )

    return _make
