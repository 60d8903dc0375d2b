"""Inline span rendering: text plus overlapping style/link spans to nested HTML

The text is cut at every span boundary and swept left to right. At each cut
point the spans ending there close, then spans starting there open, outermost
first (latest end, then hyperlink > strong > em, then input order). When a span
has to close while tags opened after it are still open, those inner tags close
first and reopen right after, so the output is always stack-balanced.
"""

from cmsfrag.core.links import LinkResolver, link_url
from cmsfrag.core.models import SPAN_RANK, Span, SpanKind, WebLink
from cmsfrag.core.utils.markup import attrs, escape


TAGS: dict[SpanKind, str] = {
    SpanKind.strong:    "strong",
    SpanKind.em:        "em",
    SpanKind.hyperlink: "a",
}


def _open_tag(span: Span, resolver: LinkResolver) -> str:
    if span.kind != SpanKind.hyperlink:
        return f"<{TAGS[span.kind]}>"
    link = span.link
    href = link_url(link, resolver) if link is not None else None
    extra = []
    if isinstance(link, WebLink) and link.target:
        extra = [("target", link.target), ("rel", "noopener")]
    return f"<a{attrs(('href', href), *extra)}>"


def render_spans(text: str, spans, resolver: LinkResolver) -> str:
    """Render text with its spans as HTML; tag-stripped output equals the escaped text."""
    length = len(text)
    # (order, start, end, span) with ends clipped to the text; empty spans carry no markup
    live = []
    for order, span in enumerate(spans):
        start, end = min(span.start, length), min(span.end, length)
        if start < end:
            live.append((order, start, end, span))

    if not live:
        return escape(text)

    cuts = sorted({0, length} | {s for _, s, _, _ in live} | {e for _, _, e, _ in live})
    starting: dict[int, list] = {}
    for item in live:
        starting.setdefault(item[1], []).append(item)

    open_tags: dict[int, str] = {}      # order -> opening tag, built once per span
    stack: list = []
    out: list[str] = []

    def sort_key(item):
        order, _, end, span = item
        return -end, SPAN_RANK[span.kind], order

    for i, pos in enumerate(cuts):
        reopen = []
        ending = [depth for depth, item in enumerate(stack) if item[2] == pos]
        if ending:
            lowest = min(ending)
            while len(stack) > lowest:
                item = stack.pop()
                out.append(f"</{TAGS[item[3].kind]}>")
                if item[2] != pos:
                    reopen.append(item)

        for item in sorted(reopen + starting.get(pos, []), key=sort_key):
            order, _, _, span = item
            if order not in open_tags:
                open_tags[order] = _open_tag(span, resolver)
            out.append(open_tags[order])
            stack.append(item)

        if i + 1 < len(cuts):
            out.append(escape(text[pos:cuts[i + 1]]))

    return "".join(out)
