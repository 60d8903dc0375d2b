"""Structured-text block rendering, with list items grouped into <ul>/<ol>"""

from cmsfrag.core.links import LinkResolver
from cmsfrag.core.models import EmbedBlock, Heading, ImageBlock, ListItem, OEmbed, Paragraph, Preformatted
from cmsfrag.core.render.images import render_linked_view
from cmsfrag.core.render.spans import render_spans
from cmsfrag.core.utils.markup import attrs


def render_embed(oembed: OEmbed, label: str = None) -> str:
    """Embed wrapper div; the provider html is trusted and emitted verbatim."""
    data = attrs(
        ("data-oembed", oembed.url),
        ("data-oembed-type", oembed.type.lower()),
        ("data-oembed-provider", oembed.provider.lower()),
        ("class", label),
    )
    return f"<div{data}>{oembed.html or ''}</div>"


def _text_block(tag: str, block, resolver: LinkResolver) -> str:
    return f"<{tag}{attrs(('class', block.label))}>{render_spans(block.text, block.spans, resolver)}</{tag}>"


def render_block(block, resolver: LinkResolver) -> str:
    """Render a single block (a lone ListItem renders as a bare <li>)."""
    if isinstance(block, Heading):
        return _text_block(f"h{block.level}", block, resolver)
    if isinstance(block, Paragraph):
        return _text_block("p", block, resolver)
    if isinstance(block, Preformatted):
        return _text_block("pre", block, resolver)
    if isinstance(block, ListItem):
        return _text_block("li", block, resolver)
    if isinstance(block, ImageBlock):
        classes = "block-img" if not block.label else f"block-img {block.label}"
        return f'<p class="{classes}">{render_linked_view(block.view, block.link, resolver)}</p>'
    if isinstance(block, EmbedBlock):
        return render_embed(block.oembed, block.label)
    raise TypeError(f"not a block: {type(block).__name__}")


def render_blocks(blocks, resolver: LinkResolver) -> str:
    """Render blocks in order, wrapping runs of list items with the same `ordered` flag."""
    out: list[str] = []
    list_tag = None

    for block in blocks:
        tag = ("ol" if block.ordered else "ul") if isinstance(block, ListItem) else None
        if tag != list_tag:
            if list_tag:
                out.append(f"</{list_tag}>")
            if tag:
                out.append(f"<{tag}>")
            list_tag = tag
        out.append(render_block(block, resolver))

    if list_tag:
        out.append(f"</{list_tag}>")
    return "".join(out)
