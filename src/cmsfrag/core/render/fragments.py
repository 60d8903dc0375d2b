"""HTML rendering for every fragment variant, block, and view"""

from typing import Any, Callable

from pydantic import BaseModel

from cmsfrag.core.links import LinkResolver, link_url
from cmsfrag.core.models import (
    Color,
    Date,
    DocumentLink,
    Embed,
    EmbedBlock,
    FileLink,
    GeoPoint,
    Group,
    GroupDoc,
    Heading,
    Image,
    ImageBlock,
    ImageLink,
    ListItem,
    Number,
    Paragraph,
    Preformatted,
    Raw,
    Select,
    StructuredText,
    Text,
    Timestamp,
    View,
    WebLink,
)
from cmsfrag.core.render.blocks import render_block, render_blocks, render_embed
from cmsfrag.core.render.images import render_view
from cmsfrag.core.utils.markup import attrs, escape


def _link(label: str) -> Callable[[Any, LinkResolver], str]:
    def render(link, resolver: LinkResolver) -> str:
        extra = [("target", link.target), ("rel", "noopener")] if isinstance(link, WebLink) and link.target else []
        return f"<a{attrs(('href', link_url(link, resolver)), *extra)}>{escape(getattr(link, label))}</a>"
    return render


def render_group(group: Group, resolver: LinkResolver) -> str:
    """Each group entry's fields, in order, as <section data-field="name"> wrappers."""
    return "".join(render_fields(doc.fragments, resolver) for doc in group.docs)


def render_fields(fragments: dict, resolver: LinkResolver) -> str:
    return "".join(
        f'<section data-field="{escape(name)}">{as_html(frag, resolver)}</section>'
        for name, frag in fragments.items()
    )


RENDERERS: dict[type, Callable[[Any, LinkResolver], str]] = {
    Text:           lambda f, r: f'<span class="text">{escape(f.value)}</span>',
    Select:         lambda f, r: f'<span class="text">{escape(f.value)}</span>',
    Number:         lambda f, r: f'<span class="number">{f.value}</span>',
    Color:          lambda f, r: f'<span class="color">{f.value}</span>',
    Date:           lambda f, r: f'<time>{f.value.isoformat()}</time>',
    Timestamp:      lambda f, r: f'<time>{f.value.isoformat()}</time>',
    GeoPoint:       lambda f, r: (
        f'<div class="geopoint"><span class="latitude">{f.latitude}</span>'
        f'<span class="longitude">{f.longitude}</span></div>'
    ),
    Embed:          lambda f, r: render_embed(f.oembed),
    DocumentLink:   _link("slug"),
    WebLink:        _link("url"),
    FileLink:       _link("filename"),
    ImageLink:      _link("url"),
    Image:          lambda f, r: render_view(f.main, r),
    View:           render_view,
    Group:          render_group,
    GroupDoc:       lambda f, r: render_fields(f.fragments, r),
    StructuredText: lambda f, r: render_blocks(f.blocks, r),
    Raw:            lambda f, r: "",
    **{block: render_block for block in (Heading, Paragraph, Preformatted, ListItem, ImageBlock, EmbedBlock)},
}


def as_html(obj: BaseModel, resolver: LinkResolver) -> str:
    """Render any fragment, block, view, or group entry to an HTML string."""
    renderer = RENDERERS.get(type(obj))
    if renderer is None:
        raise TypeError(f"cannot render {type(obj).__name__} as HTML")
    return renderer(obj, resolver)
