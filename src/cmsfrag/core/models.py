"""Typed fragment variants, structured-text blocks, and spans"""

from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, Literal, Optional, TypeVar, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer, field_validator


HEX_COLOR_LEN = 7   # '#' + 6 hex digits

V = TypeVar("V")


def freeze(value: Any) -> Any:
    """Recursively turn mappings into read-only proxies and lists into tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [thaw(v) for v in value]
    return value


def _hashable(value: Any) -> Any:
    if isinstance(value, Mapping):
        return frozenset((k, _hashable(v)) for k, v in value.items())
    if isinstance(value, tuple):
        return tuple(_hashable(v) for v in value)
    return value


# Field types for mappings and opaque JSON that stay read-only after validation.
FrozenMap = Annotated[dict[str, V], AfterValidator(freeze), PlainSerializer(thaw)]
FrozenJson = Annotated[Any, AfterValidator(freeze), PlainSerializer(thaw)]


class Frozen(BaseModel):
    """Base for every parsed value: immutable once built, compared and hashed by value."""
    model_config = ConfigDict(frozen=True)

    def __hash__(self) -> int:
        return hash((type(self), tuple(_hashable(v) for v in self.__dict__.values())))


# --- links ---

class DocumentLink(Frozen):
    """Internal reference to another document; turned into a URL by a LinkResolver."""
    kind: Literal["link.document"] = "link.document"
    id: str
    uid: Optional[str] = None
    type: str
    tags: frozenset[str] = frozenset()
    slug: str = "-"
    is_broken: bool = False


class WebLink(Frozen):
    kind: Literal["link.web"] = "link.web"
    url: str
    content_type: Optional[str] = None     # media type when the link targets a media asset
    target: Optional[str] = None


class FileLink(Frozen):
    kind: Literal["link.file"] = "link.file"
    url: str
    file_kind: str = ""
    size: int = 0
    filename: str = ""


class ImageLink(Frozen):
    kind: Literal["link.image"] = "link.image"
    url: str
    filename: Optional[str] = None
    size: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None


Link = Annotated[Union[DocumentLink, WebLink, FileLink, ImageLink], Field(discriminator="kind")]


# --- images and embeds ---

class View(Frozen):
    """One responsive rendition of an image."""
    url: str
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)
    alt: Optional[str] = None
    copyright: Optional[str] = None
    link_to: Optional[Link] = None


class OEmbed(Frozen):
    """Provider-supplied oEmbed payload. width/height stay None when the provider omits them."""
    type: str = ""
    provider: str = ""
    url: str = ""
    width: Optional[int] = None
    height: Optional[int] = None
    html: Optional[str] = None
    json_payload: FrozenJson = Field(default_factory=dict, validate_default=True)


# --- structured text ---

class SpanKind(str, Enum):
    """Inline annotation kinds, in the order tags open when spans share both boundaries."""
    hyperlink = "hyperlink"
    strong = "strong"
    em = "em"


SPAN_RANK: dict[SpanKind, int] = {SpanKind.hyperlink: 0, SpanKind.strong: 1, SpanKind.em: 2}


class Span(Frozen):
    start: int = Field(ge=0)
    end: int = Field(ge=0)
    kind: SpanKind
    link: Optional[Link] = None     # set for hyperlink spans only


class Heading(Frozen):
    block: Literal["heading"] = "heading"
    level: int = Field(ge=1, le=6)
    text: str
    spans: tuple[Span, ...] = ()
    label: Optional[str] = None


class Paragraph(Frozen):
    block: Literal["paragraph"] = "paragraph"
    text: str
    spans: tuple[Span, ...] = ()
    label: Optional[str] = None


class Preformatted(Frozen):
    block: Literal["preformatted"] = "preformatted"
    text: str
    spans: tuple[Span, ...] = ()
    label: Optional[str] = None


class ListItem(Frozen):
    block: Literal["list-item"] = "list-item"
    text: str
    spans: tuple[Span, ...] = ()
    ordered: bool = False
    label: Optional[str] = None


class ImageBlock(Frozen):
    block: Literal["image"] = "image"
    view: View
    link: Optional[Link] = None
    label: Optional[str] = None


class EmbedBlock(Frozen):
    block: Literal["embed"] = "embed"
    oembed: OEmbed
    label: Optional[str] = None


Block = Annotated[
    Union[Heading, Paragraph, Preformatted, ListItem, ImageBlock, EmbedBlock],
    Field(discriminator="block"),
]


# --- fragments ---

class Text(Frozen):
    kind: Literal["text"] = "text"
    value: str


class Number(Frozen):
    kind: Literal["number"] = "number"
    value: Decimal


class Color(Frozen):
    kind: Literal["color"] = "color"
    value: str

    @field_validator("value")
    @classmethod
    def _hex(cls, v: str) -> str:
        if len(v) != HEX_COLOR_LEN or v[0] != "#" or any(c not in "0123456789abcdefABCDEF" for c in v[1:]):
            raise ValueError(f"expected '#rrggbb', got {v!r}")
        return v


class Select(Frozen):
    kind: Literal["select"] = "select"
    value: str


class Date(Frozen):
    kind: Literal["date"] = "date"
    value: date


class Timestamp(Frozen):
    kind: Literal["timestamp"] = "timestamp"
    value: datetime     # always UTC-aware


class GeoPoint(Frozen):
    kind: Literal["geopoint"] = "geopoint"
    latitude: float
    longitude: float


class Embed(Frozen):
    kind: Literal["embed"] = "embed"
    oembed: OEmbed


class Image(Frozen):
    kind: Literal["image"] = "image"
    main: View
    views: FrozenMap[View] = Field(default_factory=dict, validate_default=True)

    def get_view(self, name: str) -> Optional[View]:
        """Return the main view for 'main', else the named view or None."""
        if name == "main":
            return self.main
        return self.views.get(name)


class StructuredText(Frozen):
    kind: Literal["structured_text"] = "structured_text"
    blocks: tuple[Block, ...] = ()

    def first_title(self) -> Optional[Heading]:
        return next((b for b in self.blocks if isinstance(b, Heading)), None)

    def first_paragraph(self) -> Optional[Paragraph]:
        return next((b for b in self.blocks if isinstance(b, Paragraph)), None)

    def first_preformatted(self) -> Optional[Preformatted]:
        return next((b for b in self.blocks if isinstance(b, Preformatted)), None)

    def first_image(self) -> Optional[ImageBlock]:
        return next((b for b in self.blocks if isinstance(b, ImageBlock)), None)


class Raw(Frozen):
    """Opaque passthrough of a node whose type this model does not know."""
    kind: Literal["raw"] = "raw"
    value: FrozenJson = None


class Group(Frozen):
    kind: Literal["group"] = "group"
    docs: tuple["GroupDoc", ...] = ()


Fragment = Annotated[
    Union[
        Text, Number, Color, Select, Date, Timestamp, GeoPoint, Embed,
        DocumentLink, WebLink, FileLink, ImageLink,
        Image, Group, StructuredText, Raw,
    ],
    Field(discriminator="kind"),
]

LINK_TYPES = (DocumentLink, WebLink, FileLink, ImageLink)


class FragmentMap:
    """Typed lookups over a `fragments` mapping; a missing field or wrong variant gives None."""

    def get(self, name: str):
        return self.fragments.get(name)

    def _typed(self, name: str, *types):
        frag = self.fragments.get(name)
        return frag if isinstance(frag, types) else None

    def get_text(self, name: str) -> Optional[Text]:
        return self._typed(name, Text)

    def get_number(self, name: str) -> Optional[Number]:
        return self._typed(name, Number)

    def get_color(self, name: str) -> Optional[Color]:
        return self._typed(name, Color)

    def get_select(self, name: str) -> Optional[Select]:
        return self._typed(name, Select)

    def get_date(self, name: str) -> Optional[Date]:
        return self._typed(name, Date)

    def get_timestamp(self, name: str) -> Optional[Timestamp]:
        return self._typed(name, Timestamp)

    def get_geopoint(self, name: str) -> Optional[GeoPoint]:
        return self._typed(name, GeoPoint)

    def get_embed(self, name: str) -> Optional[Embed]:
        return self._typed(name, Embed)

    def get_link(self, name: str):
        return self._typed(name, *LINK_TYPES)

    def get_image(self, name: str) -> Optional[Image]:
        return self._typed(name, Image)

    def get_image_view(self, name: str, view: str) -> Optional[View]:
        image = self.get_image(name)
        return image.get_view(view) if image else None

    def get_group(self, name: str) -> Optional[Group]:
        return self._typed(name, Group)

    def get_structured_text(self, name: str) -> Optional[StructuredText]:
        return self._typed(name, StructuredText)

    def get_raw(self, name: str) -> Optional[Raw]:
        return self._typed(name, Raw)


class GroupDoc(FragmentMap, Frozen):
    """One entry of a Group: an ordered mapping of field name to fragment."""
    fragments: FrozenMap[Fragment] = Field(default_factory=dict, validate_default=True)


Group.model_rebuild()
GroupDoc.model_rebuild()
