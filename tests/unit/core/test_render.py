"""Unit tests for core/render/ blocks, images, and fragment HTML"""

import pytest

from cmsfrag.core.models import (
    Embed,
    FileLink,
    GeoPoint,
    Heading,
    ImageBlock,
    ListItem,
    OEmbed,
    Paragraph,
    Raw,
    View,
    WebLink,
)
from cmsfrag.core.parse import parse_blocks, parse_documents
from cmsfrag.core.render.blocks import render_blocks
from cmsfrag.core.render.fragments import as_html
from cmsfrag.core.render.images import render_view


ICON_URL = "https://test-public.cdn.example.io/test-public/9f5f4e8a5d95c7259108e9cfdde953b5e60dcbb6.jpg"


# --- images ---

def test_image_view_html(article, resolver):
    """A named image view renders alt, src, width and height in that order."""
    view = article.get_image_view("article.illustration", "icon")
    assert as_html(view, resolver) == f'<img alt="some alt text" src="{ICON_URL}" width="100" height="100" />'


def test_view_without_dimensions_or_alt(resolver):
    """Missing width/height are omitted, never rendered as 0; a missing alt is empty."""
    assert render_view(View(url="https://e.io/a.png"), resolver) == '<img alt="" src="https://e.io/a.png" />'


def test_image_fragment_renders_main_view(article, resolver):
    html = as_html(article.get_image("article.illustration"), resolver)
    assert html == '<img alt="main alt" src="https://cdn.example.io/images/main.jpg" width="500" height="300" />'


def test_alt_text_escaped(resolver):
    assert render_view(View(url="u", alt='a "b" <c>'), resolver).startswith('<img alt="a &quot;b&quot; &lt;c&gt;"')


# --- blocks ---

def test_list_items_grouped_by_ordered_flag(resolver):
    """Runs of list items share one wrapper; a flag change or other block closes it."""
    blocks = [
        ListItem(text="a"), ListItem(text="b"),
        ListItem(text="1", ordered=True),
        Paragraph(text="p"),
        ListItem(text="c"),
    ]
    assert render_blocks(blocks, resolver) == (
        "<ul><li>a</li><li>b</li></ul><ol><li>1</li></ol><p>p</p><ul><li>c</li></ul>"
    )


def test_heading_levels_and_label(resolver):
    blocks = [Heading(level=1, text="T"), Heading(level=6, text="s", label="small")]
    assert render_blocks(blocks, resolver) == '<h1>T</h1><h6 class="small">s</h6>'


def test_image_block_with_link(resolver, doc_link):
    block = ImageBlock(view=View(url="https://e.io/i.png", alt="i", width=10, height=20), link=doc_link)
    assert render_blocks([block], resolver) == (
        '<p class="block-img"><a href="http://localhost/doc/UrDmKgEAALwMyrXA">'
        '<img alt="i" src="https://e.io/i.png" width="10" height="20" /></a></p>'
    )


def test_embed_block_payload_verbatim(resolver, fixture_json):
    """Embed html is emitted as-is inside the data-oembed div."""
    _, youtube = parse_blocks(fixture_json("soundcloud.json"))
    html = render_blocks([youtube], resolver)
    assert html.startswith(
        '<div data-oembed="https://www.youtube.com/watch?v=dQw4w9WgXcQ" '
        'data-oembed-type="video" data-oembed-provider="youtube">'
    )
    assert html.endswith(f"{youtube.oembed.html}</div>")


def test_structured_text_document_field(article, resolver):
    html = article.get_html("article.content", resolver)
    assert html == (
        '<p><strong>Read</strong> the <a href="http://localhost/doc/UrDejAEAAFwMyrW9">installation guide</a>'
        ' &amp; enjoy.</p>'
        '<ul><li>first</li><li>second</li></ul><ol><li>one</li></ol>'
        '<p class="block-img"><img alt="World map" src="https://cdn.example.io/images/map.png" width="640" height="480" /></p>'
        '<h2 class="aside">Notes</h2><pre>a &lt; b</pre>'
    )


def test_resolver_called_once_per_hyperlink_span(recording_resolver, doc_link):
    """Rendering k hyperlink spans calls the resolver k times, left to right."""
    raw = [
        {"type": "paragraph", "text": "one two", "spans": [
            {"start": 4, "end": 7, "type": "hyperlink",
             "data": {"type": "Link.document", "value": {"document": {"id": "B", "type": "doc"}}}},
            {"start": 0, "end": 3, "type": "hyperlink",
             "data": {"type": "Link.document", "value": {"document": {"id": "A", "type": "doc"}}}},
        ]},
        {"type": "list-item", "text": "three", "spans": [
            {"start": 0, "end": 5, "type": "hyperlink",
             "data": {"type": "Link.document", "value": {"document": {"id": "C", "type": "doc"}}}},
        ]},
    ]
    render_blocks(parse_blocks(raw), recording_resolver)
    assert [link.id for link in recording_resolver.calls] == ["A", "B", "C"]


# --- fragments ---

@pytest.mark.parametrize("field,expected", [
    ("article.author", '<span class="text">John &lt;Doe&gt;</span>'),
    ("article.category", '<span class="text">News</span>'),
    ("article.price", '<span class="number">9.5</span>'),
    ("article.background", '<span class="color">#ff00aa</span>'),
    ("article.published", "<time>2016-01-10</time>"),
    ("article.date", "<time>2016-01-11T12:00:00+00:00</time>"),
    ("article.related", '<a href="https://cdn.example.io/files/baastad.pdf">baastad.pdf</a>'),
    ("article.homepage", '<a href="https://example.com/?a=1&amp;b=2" target="_blank" rel="noopener">'
                         "https://example.com/?a=1&amp;b=2</a>"),
    ("article.poster", '<a href="https://cdn.example.io/images/poster.png">https://cdn.example.io/images/poster.png</a>'),
    ("article.next", '<a href="http://localhost/doc/UrDmKgEAALwMyrXA">using-meta-micro</a>'),
    ("article.body", ""),
])
def test_fragment_html(article, resolver, field, expected):
    assert article.get_html(field, resolver) == expected


def test_geopoint_html(resolver):
    assert as_html(GeoPoint(latitude=1.5, longitude=-2.25), resolver) == (
        '<div class="geopoint"><span class="latitude">1.5</span><span class="longitude">-2.25</span></div>'
    )


def test_embed_fragment_html(resolver):
    frag = Embed(oembed=OEmbed(type="rich", provider="SoundCloud", url="https://s.io/x", html="<iframe></iframe>"))
    assert as_html(frag, resolver) == (
        '<div data-oembed="https://s.io/x" data-oembed-type="rich" data-oembed-provider="soundcloud">'
        "<iframe></iframe></div>"
    )


def test_non_document_links_skip_resolver(recording_resolver):
    as_html(WebLink(url="https://e.io"), recording_resolver)
    as_html(FileLink(url="https://e.io/f.pdf", filename="f.pdf"), recording_resolver)
    assert recording_resolver.calls == []


def test_broken_document_link_still_resolves(recording_resolver, doc_link):
    as_html(doc_link.model_copy(update={"is_broken": True}), recording_resolver)
    assert len(recording_resolver.calls) == 1


def test_raw_renders_empty(resolver):
    assert as_html(Raw(value={"a": 1}), resolver) == ""


def test_group_html_sections(fixture_json, resolver):
    """Each group entry's fields render in field order, wrapped in data-field sections."""
    doc = parse_documents(fixture_json("docchapter.json"))[1]
    html = as_html(doc.get_group("docchapter.docs"), resolver)
    assert html == (
        '<section data-field="linktodoc"><a href="http://localhost/doc/UrDejAEAAFwMyrW9">installing-meta-micro</a></section>'
        '<section data-field="desc"><p>Just testing another field in a group section.</p></section>'
        '<section data-field="linktodoc"><a href="http://localhost/doc/UrDmKgEAALwMyrXA">using-meta-micro</a></section>'
    )


def test_as_html_rejects_unknown_objects(resolver):
    with pytest.raises(TypeError):
        as_html("not a fragment", resolver)


def test_embed_type_and_provider_lowercased(resolver):
    frag = Embed(oembed=OEmbed(type="Video", provider="YouTube", url="https://y.io/v"))
    assert as_html(frag, resolver) == (
        '<div data-oembed="https://y.io/v" data-oembed-type="video" data-oembed-provider="youtube"></div>'
    )
