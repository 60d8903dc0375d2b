"""Parser error types"""

from typing import Optional


class CmsFragError(Exception):
    """Base class for errors raised by cmsfrag."""


class MalformedFragment(CmsFragError):
    """A node's shape matches no known variant for its declared or sniffed type."""

    def __init__(self, reason: str, field: Optional[str] = None):
        self.reason = reason
        self.field = field
        super().__init__(f"{field}: {reason}" if field else reason)
