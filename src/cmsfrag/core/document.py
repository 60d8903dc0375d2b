"""Document: a typed fragment mapping plus identity metadata"""

from typing import Optional

from pydantic import Field

from cmsfrag.core.links import LinkResolver
from cmsfrag.core.models import Fragment, FragmentMap, Frozen, FrozenMap
from cmsfrag.core.render.fragments import as_html, render_fields


class Document(FragmentMap, Frozen):
    """A parsed API document. Fragments are keyed by dotted 'type.field' names."""
    id: str
    uid: Optional[str] = None
    type: str
    href: Optional[str] = None
    tags: frozenset[str] = frozenset()
    slugs: tuple[str, ...] = ()
    fragments: FrozenMap[Fragment] = Field(default_factory=dict, validate_default=True)

    @property
    def slug(self) -> str:
        return self.slugs[0] if self.slugs else "-"

    def get_html(self, name: str, resolver: LinkResolver) -> Optional[str]:
        """Rendered HTML for one field, or None when the field is absent."""
        frag = self.fragments.get(name)
        return as_html(frag, resolver) if frag is not None else None

    def as_html(self, resolver: LinkResolver, wrap_sections: bool = True) -> str:
        """Render every fragment in field order, each in a <section data-field> unless wrap_sections is off."""
        if wrap_sections:
            return render_fields(self.fragments, resolver)
        return "".join(as_html(frag, resolver) for frag in self.fragments.values())
