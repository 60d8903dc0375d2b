"""Pipeline step functions: load JSON documents, render them, and write HTML output"""

import json
import logging
from pathlib import Path
from typing import Any

from cmsfrag.core.document import Document
from cmsfrag.core.errors import MalformedFragment
from cmsfrag.core.links import LinkResolver
from cmsfrag.core.parse import parse_documents


logger = logging.getLogger(__name__)

JSON_EXTENSIONS = {'.json'}


def discover_files(path: Path) -> list[Path]:
    """Return sorted .json files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in JSON_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix in JSON_EXTENSIONS)


def load_nodes(path: Path) -> Any:
    """Read one JSON content tree from disk."""
    try:
        return json.loads(path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e


def load_documents(path: Path) -> list[Document]:
    """Parse every document found in a file (single document, list, or API page)."""
    docs = parse_documents(load_nodes(path))
    logger.info("Parsed %d document(s) from %s", len(docs), path)
    return docs


def render_document(
    doc: Document,
    resolver: LinkResolver,
    field: str = None,
    wrap_sections: bool = True,
    ) -> str:
    """Render a whole document, or only `field` (empty string when the field is absent)."""
    if field:
        return doc.get_html(field, resolver) or ''
    return doc.as_html(resolver, wrap_sections=wrap_sections)


def run_render(
    path: str,
    resolver: LinkResolver,
    output_dir: Path,
    field: str = None,
    wrap_sections: bool = True,
    ) -> list[tuple[str, Path]]:
    """Render each document under path to output_dir/<id>.html. Returns (doc_id, html_path) pairs."""
    output_dir.mkdir(parents=True, exist_ok=True)
    results = []
    for p in discover_files(Path(path)):
        try:
            docs = load_documents(p)
        except (ValueError, MalformedFragment) as e:
            raise RuntimeError(f"Failed to render {p}: {e}") from e
        for doc in docs:
            out_file = output_dir / f"{doc.id}.html"
            if out_file.resolve().parent != output_dir.resolve():
                raise RuntimeError(f"Failed to render {p}: document id {doc.id!r} is not a plain file name")
            out_file.write_text(render_document(doc, resolver, field, wrap_sections), encoding='utf-8')
            results.append((doc.id, out_file))
    return results


def run_inspect(path: str) -> list[tuple[str, list[tuple[str, str]]]]:
    """Return (doc_id, [(field, kind), ...]) for each document under path."""
    results = []
    for p in discover_files(Path(path)):
        try:
            docs = load_documents(p)
        except (ValueError, MalformedFragment) as e:
            raise RuntimeError(f"Failed to inspect {p}: {e}") from e
        for doc in docs:
            results.append((doc.id, [(name, frag.kind) for name, frag in doc.fragments.items()]))
    return results
