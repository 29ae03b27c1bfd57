"""File records and the code that collects them from the filesystem."""

from __future__ import annotations

import codecs
import logging
import os
import stat
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import FrozenSet, Iterator, List, Optional, Tuple, Union

from witchfile.attributes import Attribute, AttributeProvider, get_attribute_provider
from witchfile.categories import Category, classify
from witchfile.formatting import HumanSize, humanize_size

logger = logging.getLogger(__name__)

PROBE_CHUNK_SIZE = 64 * 1024


class InspectionError(Exception):
    """Raised when a path cannot be inspected."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(message)
        self.path = path


class PathNotFoundError(InspectionError):
    def __init__(self, path: Path) -> None:
        super().__init__(path, f"File '{path}' not found")


class EntryUnreadableError(InspectionError):
    def __init__(self, path: Path, reason: OSError) -> None:
        super().__init__(path, f"Unable to read entry '{path}': {reason.strerror or reason}")
        self.reason = reason


class DirectoryUnreadableError(InspectionError):
    def __init__(self, path: Path, reason: OSError) -> None:
        super().__init__(path, f"Unable to read directory '{path}': {reason.strerror or reason}")
        self.reason = reason


class FileKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    UNKNOWN = "unknown"


class TextEncoding(Enum):
    UNICODE = "unicode"
    ASCII = "ascii"
    BINARY = "binary"

    @property
    def is_unicode(self) -> bool:
        # ASCII is a subset of unicode
        return self is not TextEncoding.BINARY

    @property
    def is_ascii(self) -> bool:
        return self is TextEncoding.ASCII


@dataclass(frozen=True)
class FileRecord:
    path: Path
    name: str
    kind: FileKind
    extension: str = ""
    encoding: Optional[TextEncoding] = None
    size_bytes: Optional[int] = None
    created_at: Optional[datetime] = None
    accessed_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    attributes: FrozenSet[Attribute] = frozenset()
    supported_attributes: FrozenSet[Attribute] = frozenset()
    queried_at: datetime = field(default_factory=datetime.now)

    @property
    def category(self) -> Category:
        return classify(self.extension)

    @property
    def size_display(self) -> Optional[HumanSize]:
        if self.size_bytes is None:
            return None
        return humanize_size(self.size_bytes)

    def has_attribute(self, attribute: Attribute) -> Optional[bool]:
        """Return whether `attribute` is set, or None when the platform cannot tell."""
        if attribute not in self.supported_attributes:
            return None
        return attribute in self.attributes


@dataclass(frozen=True)
class EntryError:
    """A directory entry that was skipped during a bulk listing."""

    path: Path
    error: InspectionError


def probe_text(path: Path, limit: int = 0, chunk_size: int = PROBE_CHUNK_SIZE) -> TextEncoding:
    """Decide whether a file decodes as UTF-8 and whether it is plain ASCII.

    The file is streamed through an incremental decoder so memory use stays
    bounded. With a positive `limit` only that many leading bytes are read; a
    multibyte character cut off by the limit is not treated as an error, but
    invalid bytes past the limit go unnoticed.
    """
    decoder = codecs.getincrementaldecoder("utf-8")()
    ascii_only = True
    remaining = limit if limit > 0 else None
    truncated = False

    with open(path, "rb") as handle:
        try:
            while True:
                size = chunk_size if remaining is None else min(chunk_size, remaining)
                if size <= 0:
                    truncated = bool(handle.read(1))
                    break
                chunk = handle.read(size)
                if not chunk:
                    break
                decoder.decode(chunk)
                ascii_only = ascii_only and chunk.isascii()
                if remaining is not None:
                    remaining -= len(chunk)
            if not truncated:
                decoder.decode(b"", final=True)
        except UnicodeDecodeError:
            return TextEncoding.BINARY

    return TextEncoding.ASCII if ascii_only else TextEncoding.UNICODE


def _detect_kind(stat_info: os.stat_result) -> FileKind:
    mode = stat_info.st_mode
    if stat.S_ISLNK(mode):
        return FileKind.SYMLINK
    if stat.S_ISDIR(mode):
        return FileKind.DIRECTORY
    if stat.S_ISREG(mode):
        return FileKind.FILE
    return FileKind.UNKNOWN


def _display_name(path: Path) -> str:
    """Final component without extension; resolves `.` and similar to a real name."""
    if path.name and path.name not in (".", ".."):
        return path.stem
    try:
        return path.resolve().stem
    except (OSError, RuntimeError):
        return ""


def _extension(path: Path) -> str:
    suffix = path.suffix
    return suffix[1:] if suffix.startswith(".") else suffix


def _to_datetime(timestamp: Optional[float], label: str, path: Path) -> Optional[datetime]:
    if timestamp is None:
        return None
    try:
        return datetime.fromtimestamp(timestamp)
    except (OverflowError, OSError, ValueError) as err:
        logger.debug("Unusable %s time for %s: %s", label, path, err)
        return None


def _creation_timestamp(stat_info: os.stat_result) -> Optional[float]:
    birthtime = getattr(stat_info, "st_birthtime", None)
    if birthtime is not None:
        return birthtime
    # Windows reports creation time in st_ctime
    if os.name == "nt":
        return stat_info.st_ctime
    return None


def _stat_or_none(path: Path) -> Optional[os.stat_result]:
    """Return stat information following links, or None if unavailable."""
    try:
        return path.stat()
    except OSError:
        return None


def collect(
    path: Union[str, Path],
    *,
    provider: Optional[AttributeProvider] = None,
    text_probe_limit: int = 0,
    now: Optional[datetime] = None,
) -> FileRecord:
    """Build a :class:`FileRecord` for `path`.

    Raises:
        PathNotFoundError: Nothing exists at `path` (broken symlinks do exist).
        EntryUnreadableError: The entry itself cannot be examined.
    """
    path = Path(path)
    provider = provider or get_attribute_provider()
    queried_at = now or datetime.now()

    try:
        link_info = path.lstat()
    except FileNotFoundError as err:
        raise PathNotFoundError(path) from err
    except OSError as err:
        raise EntryUnreadableError(path, err) from err

    kind = _detect_kind(link_info)
    stat_info = _stat_or_none(path) if kind is FileKind.SYMLINK else link_info
    if stat_info is None:
        logger.debug("Symlink target of %s unavailable, using link metadata", path)
        stat_info = link_info

    encoding: Optional[TextEncoding] = None
    if kind is FileKind.FILE:
        try:
            encoding = probe_text(path, text_probe_limit)
        except OSError as err:
            logger.debug("Unable to probe encoding of %s: %s", path, err)

    try:
        attributes = provider.attributes(path, stat_info)
    except OSError as err:
        logger.debug("Unable to read attributes of %s: %s", path, err)
        attributes = frozenset()

    return FileRecord(
        path=path,
        name=_display_name(path),
        kind=kind,
        extension=_extension(path),
        encoding=encoding,
        size_bytes=stat_info.st_size,
        created_at=_to_datetime(_creation_timestamp(stat_info), "creation", path),
        accessed_at=_to_datetime(stat_info.st_atime, "access", path),
        modified_at=_to_datetime(stat_info.st_mtime, "modification", path),
        attributes=attributes,
        supported_attributes=provider.supported,
        queried_at=queried_at,
    )


def _sort_key(path: Path) -> Tuple[int, str]:
    """Directories come first, then files alphabetically."""
    try:
        is_dir = path.is_dir()
    except OSError:
        is_dir = False
    return (0 if is_dir else 1, path.name.lower())


def list_directory(directory: Union[str, Path], *, sort_entries: bool = True) -> List[Path]:
    """Return the immediate children of `directory`.

    Raises:
        DirectoryUnreadableError: The directory cannot be opened.
    """
    directory = Path(directory)
    try:
        with os.scandir(directory) as it:
            entries = [Path(entry.path) for entry in it]
    except OSError as err:
        raise DirectoryUnreadableError(directory, err) from err
    if sort_entries:
        entries.sort(key=_sort_key)
    return entries


def collect_all(
    directory: Union[str, Path],
    *,
    provider: Optional[AttributeProvider] = None,
    text_probe_limit: int = 0,
    sort_entries: bool = True,
    workers: int = 1,
    now: Optional[datetime] = None,
) -> Iterator[Union[FileRecord, EntryError]]:
    """Collect a record for every immediate entry of `directory`.

    The directory is listed right away, so an unreadable directory raises
    :class:`DirectoryUnreadableError` here rather than during iteration.
    Entries that fail on their own are yielded as :class:`EntryError`.
    """
    entries = list_directory(directory, sort_entries=sort_entries)
    provider = provider or get_attribute_provider()
    queried_at = now or datetime.now()

    def collect_entry(path: Path) -> Union[FileRecord, EntryError]:
        try:
            return collect(path, provider=provider, text_probe_limit=text_probe_limit, now=queried_at)
        except InspectionError as err:
            return EntryError(path=path, error=err)

    if workers <= 1:
        return (collect_entry(path) for path in entries)
    return _collect_parallel(entries, collect_entry, workers)


def _collect_parallel(entries, collect_entry, workers: int) -> Iterator[Union[FileRecord, EntryError]]:
    # Executor.map keeps the listing order
    with ThreadPoolExecutor(max_workers=workers) as executor:
        yield from executor.map(collect_entry, entries)


__all__ = [
    "FileKind",
    "TextEncoding",
    "FileRecord",
    "EntryError",
    "InspectionError",
    "PathNotFoundError",
    "EntryUnreadableError",
    "DirectoryUnreadableError",
    "probe_text",
    "collect",
    "list_directory",
    "collect_all",
]
