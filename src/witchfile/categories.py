"""Map file extensions onto coarse content categories."""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Tuple


class Category(Enum):
    EXECUTABLE = "executable"
    SPECIAL = "special"
    PROGRAMMING = "programming"
    OFFICE = "office"
    MEDIA = "media"
    ARCHIVE = "archive"
    OTHER = "other"
    UNCLASSIFIED = "unclassified"

    @property
    def label(self) -> str:
        """Text shown for the category; unclassified entries show nothing."""
        if self is Category.UNCLASSIFIED:
            return ""
        return self.value


EXECUTABLE_EXTS = frozenset({"exe", "msi", "bat"})

SPECIAL_EXTS = frozenset({
    "md", "cgf", "conf", "config", "ini", "json", "tml", "toml", "yaml", "yml",
    "csv", "markdown", "org", "rst", "xml", "log", "ron",
})

PROGRAMMING_EXTS = frozenset({
    "py", "pl", "rs", "c", "cpp", "awk", "vb", "cabal", "clj", "cs", "csx",
    "css", "h", "hpp", "dart", "ex", "exs", "elc", "elm", "erl", "fs", "go",
    "hs", "ipynb", "java", "bsh", "js", "jl", "kt", "tex", "lisp", "lua",
    "matlab", "pas", "p", "php", "ps1", "r", "rb", "scala", "sh", "bash", "zsh",
    "fish", "sql", "swift", "ts", "tsx", "vim", "cmake", "make",
})

OFFICE_EXTS = frozenset({
    "doc", "docx", "epub", "odt", "pdf", "ps", "xls", "xlsx", "ods", "xlr",
    "ppt", "pptx", "odp", "pps", "ics",
})

MEDIA_EXTS = frozenset({
    "bmp", "gif", "jpeg", "jpg", "png", "svg", "avi", "mp4", "wmv", "wma",
    "mp3", "wav", "mid", "ttf", "m4a",
})

ARCHIVE_EXTS = frozenset({
    "apk", "deb", "rpm", "xbps", "bag", "bin", "dmg", "img", "iso", "toast",
    "vcd", "7z", "arj", "gz", "zip", "pkg", "tar", "jar", "rar", "tgz", "z",
    "zst", "xz",
})

OTHER_EXTS = frozenset({"~", "git", "gitignore", "tmp", "lock", "txt"})

# First match wins, so the order here is part of the contract.
CATEGORY_TABLES: Tuple[Tuple[Category, FrozenSet[str]], ...] = (
    (Category.EXECUTABLE, EXECUTABLE_EXTS),
    (Category.SPECIAL, SPECIAL_EXTS),
    (Category.PROGRAMMING, PROGRAMMING_EXTS),
    (Category.OFFICE, OFFICE_EXTS),
    (Category.MEDIA, MEDIA_EXTS),
    (Category.ARCHIVE, ARCHIVE_EXTS),
    (Category.OTHER, OTHER_EXTS),
)


def normalize_extension(extension: str) -> str:
    """Return the lookup key for `extension` (no leading dot, lower case)."""
    key = extension.strip()
    if key.startswith("."):
        key = key[1:]
    return key.lower()


def classify(extension: str) -> Category:
    """Return the category of the first table that contains `extension` exactly."""
    key = normalize_extension(extension)
    if not key:
        return Category.UNCLASSIFIED
    for category, table in CATEGORY_TABLES:
        if key in table:
            return category
    return Category.UNCLASSIFIED


__all__ = ["Category", "CATEGORY_TABLES", "classify", "normalize_extension"]
