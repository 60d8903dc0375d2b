"""Image view rendering"""

from cmsfrag.core.links import LinkResolver, link_url
from cmsfrag.core.models import View
from cmsfrag.core.utils.markup import attrs, escape


def render_view(view: View, resolver: LinkResolver = None) -> str:
    """Render an <img /> tag; unknown width/height are omitted, a missing alt is empty."""
    return f'<img alt="{escape(view.alt or "")}"{attrs(("src", view.url), ("width", view.width), ("height", view.height))} />'


def render_linked_view(view: View, link, resolver: LinkResolver) -> str:
    """Render a view wrapped in an anchor when it carries a link with a usable href."""
    img = render_view(view, resolver)
    href = link_url(link, resolver) if link is not None else None
    return f'<a href="{escape(href)}">{img}</a>' if href else img
