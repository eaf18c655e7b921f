"""Worker pool for blocking transport calls and file I/O."""

from .manager import ConcurrencyManager

__all__ = ["ConcurrencyManager"]
