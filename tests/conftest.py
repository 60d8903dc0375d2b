"""Root test configuration: fixture files and link resolvers shared by all tests"""

import json
from pathlib import Path

import pytest

from cmsfrag.core.links import DocumentLinkResolver


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str):
    """Return the parsed JSON content of tests/fixtures/<name>."""
    return json.loads((FIXTURES_DIR / name).read_text(encoding="utf-8"))


@pytest.fixture(name="fixtures_dir")
def fixtures_dir_fixture():
    return FIXTURES_DIR


@pytest.fixture(name="resolver")
def resolver_fixture():
    """Resolves document links to http://localhost/<type>/<id>."""
    return DocumentLinkResolver.for_(lambda link: f"http://localhost/{link.type}/{link.id}")


class RecordingResolver:
    """LinkResolver that records every link it is asked to resolve."""

    def __init__(self):
        self.calls = []

    def resolve(self, link):
        self.calls.append(link)
        return f"/doc/{link.id}"


@pytest.fixture(name="recording_resolver")
def recording_resolver_fixture():
    return RecordingResolver()


@pytest.fixture(name="fixture_json")
def fixture_json_fixture():
    """Loader for JSON fixture files by name."""
    return load_fixture
