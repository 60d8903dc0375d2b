"""Fragment parsing: JSON content trees to typed fragments and documents"""

import logging
import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from pydantic import ValidationError

from cmsfrag.core.document import Document
from cmsfrag.core.errors import MalformedFragment
from cmsfrag.core.models import (
    LINK_TYPES,
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
    OEmbed,
    Paragraph,
    Preformatted,
    Raw,
    Select,
    Span,
    SpanKind,
    StructuredText,
    Text,
    Timestamp,
    View,
    WebLink,
)


logger = logging.getLogger(__name__)

TZ_OFFSET_RE = re.compile(r'([+-]\d{2})(\d{2})$')

# Shape keys that identify a link sub-kind when the discriminator is missing or just "Link".
LINK_SHAPES: dict[str, str] = {
    'document': 'Link.document',
    'file':     'Link.file',
    'image':    'Link.image',
    'url':      'Link.web',
}

PARSE_ERRORS = (KeyError, TypeError, ValueError, AttributeError, InvalidOperation, ValidationError)


# --- scalars ---

def _opt_int(value: Any) -> Optional[int]:
    """Return value as int, or None when absent or not a plain integer (e.g. '100%')."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def _dimension(value: Any) -> Optional[int]:
    """Image dimension; zero, negative or missing means unknown."""
    n = _opt_int(value)
    return n if n is not None and n > 0 else None


def _parse_timestamp(value: str) -> Timestamp:
    text = TZ_OFFSET_RE.sub(r'\1:\2', value.replace('Z', '+00:00'))
    ts = datetime.fromisoformat(text)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return Timestamp(value=ts.astimezone(timezone.utc))


# --- links ---

def _parse_document_link(value: dict) -> DocumentLink:
    doc = value['document']
    return DocumentLink(
        id=doc['id'],
        uid=doc.get('uid'),
        type=doc['type'],
        tags=frozenset(doc.get('tags') or ()),
        slug=doc.get('slug') or '-',
        is_broken=bool(value.get('isBroken', False)),
    )


def _parse_web_link(value: dict) -> WebLink:
    return WebLink(url=value['url'], content_type=value.get('content_type'), target=value.get('target'))


def _parse_file_link(value: dict) -> FileLink:
    f = value['file']
    return FileLink(
        url=f['url'],
        file_kind=f.get('kind') or '',
        size=_opt_int(f.get('size')) or 0,
        filename=f.get('name') or '',
    )


def _parse_image_link(value: dict) -> ImageLink:
    img = value['image']
    return ImageLink(
        url=img['url'],
        filename=img.get('name'),
        size=_opt_int(img.get('size')),
        width=_dimension(img.get('width')),
        height=_dimension(img.get('height')),
    )


def parse_link(node: Any, field: str = None):
    """Parse a {type, value} link node; anything that is not a link is malformed."""
    frag = parse_fragment(node, type_hint='Link', field=field)
    if not isinstance(frag, LINK_TYPES):
        raise MalformedFragment(f"expected a link, got {frag.kind}", field)
    return frag


# --- images and embeds ---

def _parse_view(node: dict) -> View:
    dims = node.get('dimensions') or {}
    link = node.get('linkTo')
    return View(
        url=node['url'],
        width=_dimension(dims.get('width')),
        height=_dimension(dims.get('height')),
        alt=node.get('alt'),
        copyright=node.get('copyright'),
        link_to=parse_link(link) if link else None,
    )


def _parse_image(value: dict) -> Image:
    views = value.get('views') or {}
    return Image(main=_parse_view(value['main']), views={name: _parse_view(v) for name, v in views.items()})


def _parse_oembed(o: dict) -> OEmbed:
    return OEmbed(
        type=o.get('type') or '',
        provider=o.get('provider_name') or '',
        url=o.get('embed_url') or o.get('url') or '',
        width=_opt_int(o.get('width')),
        height=_opt_int(o.get('height')),
        html=o.get('html'),
        json_payload=dict(o),
    )


# --- structured text ---

def _utf16_index(text: str, offset: int) -> int:
    """Convert a UTF-16 code-unit offset into a str index (past-the-end offsets stay past the end)."""
    units = 0
    for i, ch in enumerate(text):
        if units >= offset:
            return i
        units += 2 if ord(ch) > 0xFFFF else 1
    return len(text) + max(offset - units, 0)


def _parse_spans(raw_spans: list, text: str) -> tuple[Span, ...]:
    """Parse spans, clipping offsets to [0, len(text)]; unusable spans are dropped."""
    length = len(text)
    astral = any(ord(c) > 0xFFFF for c in text)
    spans = []

    for raw in raw_spans:
        try:
            start, end = int(raw['start']), int(raw['end'])
            kind = SpanKind(raw['type'])
        except PARSE_ERRORS:
            logger.debug("Dropping unrecognized span %r", raw)
            continue

        if astral:
            start, end = _utf16_index(text, start), _utf16_index(text, end)
        clipped_start = min(max(start, 0), length)
        clipped_end = max(min(max(end, 0), length), clipped_start)
        if (clipped_start, clipped_end) != (start, end):
            logger.debug("Clipped out-of-range span [%d, %d) to [%d, %d)", start, end, clipped_start, clipped_end)

        link = None
        if kind == SpanKind.hyperlink:
            try:
                link = parse_link(raw.get('data'))
            except MalformedFragment as e:
                logger.warning("Dropping hyperlink span [%d, %d): %s", start, end, e.reason)
                continue
        spans.append(Span(start=clipped_start, end=clipped_end, kind=kind, link=link))

    return tuple(sorted(spans, key=lambda s: s.start))


def _text_fields(node: dict) -> dict:
    text = node.get('text') or ''
    return {'text': text, 'spans': _parse_spans(node.get('spans') or [], text), 'label': node.get('label')}


def _parse_image_block(node: dict) -> ImageBlock:
    view = _parse_view(node)
    return ImageBlock(view=view, link=view.link_to, label=node.get('label'))


BLOCK_PARSERS: dict[str, Callable[[dict], Any]] = {
    'paragraph':    lambda n: Paragraph(**_text_fields(n)),
    'preformatted': lambda n: Preformatted(**_text_fields(n)),
    'list-item':    lambda n: ListItem(ordered=False, **_text_fields(n)),
    'o-list-item':  lambda n: ListItem(ordered=True, **_text_fields(n)),
    'image':        _parse_image_block,
    'embed':        lambda n: EmbedBlock(oembed=_parse_oembed(n['oembed']), label=n.get('label')),
    **{f'heading{i}': (lambda lvl: lambda n: Heading(level=lvl, **_text_fields(n)))(i) for i in range(1, 7)},
}


def parse_blocks(nodes: list) -> tuple:
    """Parse structured-text block nodes in order. Unknown or broken blocks are skipped."""
    if not isinstance(nodes, list):
        raise MalformedFragment(f"structured text must be a list, got {type(nodes).__name__}")
    blocks = []
    for node in nodes:
        block_type = node.get('type') if isinstance(node, dict) else None
        parser = BLOCK_PARSERS.get(block_type)
        if parser is None:
            logger.debug("Skipping unknown block type %r", block_type)
            continue
        try:
            blocks.append(parser(node))
        except (PARSE_ERRORS + (MalformedFragment,)) as e:
            logger.warning("Skipping malformed %s block: %s", block_type, e)
    return tuple(blocks)


# --- dispatch ---

def _parse_group(value: list) -> Group:
    if not isinstance(value, list):
        raise MalformedFragment(f"group must be a list, got {type(value).__name__}")
    return Group(docs=tuple(GroupDoc(fragments=parse_fields(item)) for item in value))


FRAGMENT_PARSERS: dict[str, Callable[[Any], Any]] = {
    'Text':           lambda v: Text(value=v),
    'Select':         lambda v: Select(value=v),
    'Number':         lambda v: Number(value=Decimal(str(v))),
    'Color':          lambda v: Color(value=v),
    'Date':           lambda v: Date(value=date.fromisoformat(v)),
    'Timestamp':      _parse_timestamp,
    'GeoPoint':       lambda v: GeoPoint(latitude=float(v['latitude']), longitude=float(v['longitude'])),
    'Embed':          lambda v: Embed(oembed=_parse_oembed(v['oembed'])),
    'Image':          _parse_image,
    'Link.document':  _parse_document_link,
    'Link.web':       _parse_web_link,
    'Link.file':      _parse_file_link,
    'Link.image':     _parse_image_link,
    'StructuredText': lambda v: StructuredText(blocks=parse_blocks(v)),
    'Group':          _parse_group,
}


def _is_block_list(value: list) -> bool:
    return all(isinstance(n, dict) and 'type' in n and ('text' in n or n['type'] in ('image', 'embed')) for n in value)


def _sniff(value: Any) -> Optional[str]:
    """Guess a fragment type from the shape of its value, or None."""
    if isinstance(value, dict):
        if 'main' in value:
            return 'Image'
        if 'oembed' in value:
            return 'Embed'
        if 'latitude' in value and 'longitude' in value:
            return 'GeoPoint'
        return next((t for key, t in LINK_SHAPES.items() if key in value), None)
    if isinstance(value, list):
        if _is_block_list(value):
            return 'StructuredText'
        if all(isinstance(n, dict) for n in value):
            return 'Group'
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return 'Text'
    if isinstance(value, (int, float)):
        return 'Number'
    return None


def parse_fragment(node: Any, type_hint: str = None, field: str = None):
    """Parse one field node ({type, value} or a bare value) into a Fragment.

    The node's own `type` wins over `type_hint`. A missing type or a bare 'Link'
    is resolved by sniffing the value's shape; unknown types become Raw.
    Raises MalformedFragment when the shape does not fit the selected type.
    """
    wrapped = isinstance(node, dict) and 'value' in node
    declared = node.get('type') if isinstance(node, dict) else None
    frag_type = declared or type_hint
    value = node['value'] if wrapped else node

    if frag_type is not None and not isinstance(frag_type, str):
        return Raw(value=value)
    if frag_type == 'Link' or (frag_type and frag_type.startswith('Link') and frag_type not in FRAGMENT_PARSERS):
        sniffed = _sniff(value)
        if sniffed is None or not sniffed.startswith('Link.'):
            raise MalformedFragment("link has no document, web, file or image value", field)
        frag_type = sniffed
    elif frag_type is None:
        frag_type = _sniff(value)
        if frag_type is None:
            return Raw(value=value)

    parser = FRAGMENT_PARSERS.get(frag_type)
    if parser is None:
        logger.debug("Unknown fragment type %r at %s; keeping raw node", frag_type, field)
        return Raw(value=value)

    try:
        return parser(value)
    except MalformedFragment as e:
        if e.field is None and field is not None:
            raise MalformedFragment(e.reason, field) from e
        raise
    except PARSE_ERRORS as e:
        raise MalformedFragment(f"invalid {frag_type}: {e}", field) from e


def parse_fields(fields: dict, prefix: str = '') -> dict:
    """Parse a field-key -> node mapping; used for documents (prefix 'type.') and group entries.

    A malformed field is logged and left out so the rest of the container still parses.
    """
    if not isinstance(fields, dict):
        raise MalformedFragment(f"expected a mapping of fields, got {type(fields).__name__}")
    fragments = {}
    for key, node in fields.items():
        name = f"{prefix}{key}"
        try:
            fragments[name] = parse_fragment(node, field=name)
        except MalformedFragment as e:
            logger.warning("Skipping field %s: %s", name, e.reason)
    return fragments


def _envelope(node: dict, key: str, expected: type, default):
    value = node.get(key)
    if value is None:
        return default
    if not isinstance(value, expected):
        raise MalformedFragment(f"document {key} must be a {expected.__name__}, got {type(value).__name__}")
    return value


def parse_document(node: dict) -> Document:
    """Parse one API document node into a Document keyed by 'type.field'."""
    if not isinstance(node, dict):
        raise MalformedFragment(f"document must be a mapping, got {type(node).__name__}")
    try:
        doc_id, doc_type = node['id'], node['type']
    except KeyError as e:
        raise MalformedFragment(f"document is missing id or type: {e}") from e
    if not isinstance(doc_type, str):
        raise MalformedFragment(f"document type must be a str, got {type(doc_type).__name__}")

    data = _envelope(node, 'data', dict, {})
    fields = data.get(doc_type)
    if fields is not None and not isinstance(fields, dict):
        raise MalformedFragment(f"document data.{doc_type} must be a dict, got {type(fields).__name__}")

    try:
        return Document(
            id=doc_id,
            uid=node.get('uid'),
            type=doc_type,
            href=node.get('href'),
            tags=frozenset(_envelope(node, 'tags', list, [])),
            slugs=tuple(_envelope(node, 'slugs', list, [])),
            fragments=parse_fields(fields or {}, prefix=f"{doc_type}."),
        )
    except PARSE_ERRORS as e:
        raise MalformedFragment(f"invalid document {doc_id!r}: {e}") from e


def parse_documents(node: Any) -> list[Document]:
    """Parse a single document, a list of documents, or an API page with `results`."""
    if isinstance(node, dict) and isinstance(node.get('results'), list):
        node = node['results']
    if isinstance(node, list):
        return [parse_document(n) for n in node]
    return [parse_document(node)]
