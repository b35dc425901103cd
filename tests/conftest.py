"""Global test configuration for stratachunk tests."""

import pytest

from stratachunk.chunking.pieces import IdCounter
from stratachunk.core.config import Settings


@pytest.fixture(autouse=True)
def isolated_workdir(tmp_path, monkeypatch):
    """Run every test in an empty directory with no settings in the environment."""
    for name in Settings.model_fields:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def ids():
    return IdCounter()


@pytest.fixture
def sample_markdown():
    return (
        "Preface line.\n"
        "# Guide\n"
        "Intro paragraph for the guide.\n\n"
        "## Install\n"
        "Run the installer. Then restart!\n\n"
        "```bash\n"
        "pip install stratachunk\n"
        "```\n"
        "\n---\n\n"
        "## Usage\n"
        "Call chunk() with a strategy and a budget.\n"
    )


@pytest.fixture
def sample_html():
    return (
        "<html><body>"
        "<h1>Guide</h1>"
        '<p class="lead">Intro paragraph for the guide.</p>'
        "<h2>Install</h2>"
        "<p>Run the installer.<br>Then restart!</p>"
        "<h2>Usage</h2>"
        "<p>Call chunk() with a strategy and a budget.</p>"
        "</body></html>"
    )
