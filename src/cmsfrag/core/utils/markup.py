"""HTML escaping and attribute helpers shared by the renderers"""

from html import escape as _escape
from typing import Any


def escape(text: str) -> str:
    """Escape &, <, > and \" (single quotes are left alone)."""
    return _escape(text, quote=False).replace('"', "&quot;")


def attrs(*pairs: tuple[str, Any]) -> str:
    """Render (name, value) pairs as ' name="value"', skipping None values."""
    return "".join(f' {name}="{escape(str(value))}"' for name, value in pairs if value is not None)
