"""LinkResolver contract and the URL lookup used by every renderer"""

from typing import Callable, Optional, Protocol

from cmsfrag.core.models import DocumentLink


class LinkResolver(Protocol):
    def resolve(self, link: DocumentLink) -> Optional[str]:
        ...


class DocumentLinkResolver:
    """Adapts a plain callable into a LinkResolver."""

    def __init__(self, fn: Callable[[DocumentLink], Optional[str]]):
        self._fn = fn

    @classmethod
    def for_(cls, fn: Callable[[DocumentLink], Optional[str]]) -> "DocumentLinkResolver":
        return cls(fn)

    def resolve(self, link: DocumentLink) -> Optional[str]:
        return self._fn(link)


class TemplateLinkResolver:
    """Formats a URL template with {type}, {id}, {uid} and {slug} placeholders."""

    def __init__(self, template: str):
        self.template = template

    def resolve(self, link: DocumentLink) -> Optional[str]:
        return self.template.format(type=link.type, id=link.id, uid=link.uid or link.id, slug=link.slug)


def link_url(link, resolver: LinkResolver) -> Optional[str]:
    """Return the href for any link kind; only document links consult the resolver."""
    if isinstance(link, DocumentLink):
        return resolver.resolve(link) or None
    return link.url or None
