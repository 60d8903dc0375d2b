"""Shared fixtures for core unit tests"""

import pytest

from cmsfrag.core.models import DocumentLink, Span, SpanKind
from cmsfrag.core.parse import parse_document


@pytest.fixture(name="article")
def article_fixture(fixture_json):
    """The parsed article document from fixtures/fragments.json."""
    return parse_document(fixture_json("fragments.json"))


@pytest.fixture(name="doc_link")
def doc_link_fixture():
    return DocumentLink(id="UrDmKgEAALwMyrXA", type="doc", slug="using-meta-micro")


@pytest.fixture(name="make_span")
def make_span_fixture():
    """Build a Span from (start, end, kind) with an optional link."""
    def make(start: int, end: int, kind: str, link=None) -> Span:
        return Span(start=start, end=end, kind=SpanKind(kind), link=link)
    return make
