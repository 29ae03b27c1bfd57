"""Public interface for witchfile."""

__version__ = "1.2.0"

from .categories import Category, classify
from .formatting import humanize_elapsed, humanize_size
from .inspector import (
    DirectoryUnreadableError,
    EntryError,
    FileKind,
    FileRecord,
    InspectionError,
    PathNotFoundError,
    TextEncoding,
    collect,
    collect_all,
)
from .render import render, render_many

__all__ = [
    "Category",
    "classify",
    "humanize_size",
    "humanize_elapsed",
    "FileKind",
    "FileRecord",
    "TextEncoding",
    "EntryError",
    "InspectionError",
    "PathNotFoundError",
    "DirectoryUnreadableError",
    "collect",
    "collect_all",
    "render",
    "render_many",
    "__version__",
]
