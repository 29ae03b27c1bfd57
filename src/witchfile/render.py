"""Turn file records into rich tables and plain text."""

from __future__ import annotations

import io
from typing import Any, Dict, Iterable, List, Optional, Tuple

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from witchfile.attributes import Attribute
from witchfile.colors import DEFAULT_STYLES, category_style
from witchfile.formatting import format_size, humanize_elapsed
from witchfile.inspector import FileKind, FileRecord

PLACEHOLDER = "—"
RENDER_WIDTH = 100

ATTRIBUTE_ROWS = (
    ("Hidden", Attribute.HIDDEN),
    ("System", Attribute.SYSTEM),
    ("Temporary", Attribute.TEMPORARY),
    ("Readonly", Attribute.READONLY),
)

LISTING_HEADERS = ("Name", "Type", "Extension", "Category", "Encoding", "Size", "Modified")


def _yes_no(value: Optional[bool]) -> str:
    if value is None:
        return PLACEHOLDER
    return "yes" if value else "no"


def _or_placeholder(value: str) -> str:
    return value if value else PLACEHOLDER


def display_kind(record: FileRecord) -> str:
    if record.kind is FileKind.UNKNOWN:
        return PLACEHOLDER
    return record.kind.value


def display_size(record: FileRecord) -> str:
    if record.size_bytes is None:
        return PLACEHOLDER
    return format_size(record.size_bytes)


def display_time(record: FileRecord, field: str) -> str:
    timestamp = getattr(record, field)
    if timestamp is None:
        return PLACEHOLDER
    return humanize_elapsed(timestamp, record.queried_at)


def display_encoding(record: FileRecord) -> str:
    if record.encoding is None:
        return PLACEHOLDER
    return "unicode" if record.encoding.is_unicode else "binary"


def record_rows(record: FileRecord) -> List[Tuple[str, str]]:
    """Label/value pairs for the detail view of a single record."""
    encoding = record.encoding
    rows = [
        ("Type", display_kind(record)),
        ("Extension", _or_placeholder(record.extension)),
        ("Category", _or_placeholder(record.category.label)),
        ("Unicode", _yes_no(encoding.is_unicode if encoding else None)),
        ("ASCII", _yes_no(encoding.is_ascii if encoding else None)),
        ("Size", display_size(record)),
        ("Created", display_time(record, "created_at")),
        ("Accessed", display_time(record, "accessed_at")),
        ("Modified", display_time(record, "modified_at")),
    ]
    for label, attribute in ATTRIBUTE_ROWS:
        rows.append((label, _yes_no(record.has_attribute(attribute))))
    return rows


def listing_row(record: FileRecord) -> Tuple[str, ...]:
    """One row of the directory listing."""
    return (
        _or_placeholder(record.name),
        display_kind(record),
        _or_placeholder(record.extension),
        _or_placeholder(record.category.label),
        display_encoding(record),
        display_size(record),
        display_time(record, "modified_at"),
    )


def _value_style(label: str, value: str, record: FileRecord, styles: Dict[str, Any]) -> str:
    if value == PLACEHOLDER:
        return styles["placeholder"]
    if label == "Type":
        return styles["kind"]
    if label == "Extension":
        return styles["extension"]
    if label == "Category":
        return category_style(record.category, styles)
    if label in ("Created", "Accessed", "Modified"):
        return styles["time"]
    if value == "yes":
        return styles["readonly"] if label == "Readonly" else styles["yes"]
    if value == "no":
        return styles["no"]
    return ""


def _size_text(value: str, styles: Dict[str, Any]) -> Text:
    if value == PLACEHOLDER:
        return Text(value, style=styles["placeholder"])
    text = Text(value[:-1], style=styles["size_value"])
    text.append(value[-1], style=styles["size_unit"])
    return text


def build_record_table(record: FileRecord, styles: Optional[Dict[str, Any]] = None) -> Table:
    """Two-column table: field labels on the left, values on the right."""
    styles = styles or DEFAULT_STYLES
    table = Table(box=box.SIMPLE_HEAD, show_edge=False, pad_edge=False)
    table.add_column(Text("Name", style=styles["label"]))
    table.add_column(
        Text(_or_placeholder(record.name), style=styles["name"]),
        justify="right",
    )
    for label, value in record_rows(record):
        if label == "Size":
            cell = _size_text(value, styles)
        else:
            cell = Text(value, style=_value_style(label, value, record, styles))
        table.add_row(Text(label, style=styles["label"]), cell)
    return table


def build_listing_table(records: Iterable[FileRecord], styles: Optional[Dict[str, Any]] = None) -> Table:
    """One row per record, without borders."""
    styles = styles or DEFAULT_STYLES
    table = Table(box=None, pad_edge=False, header_style=styles["label"])
    for header in LISTING_HEADERS:
        table.add_column(header, justify="right" if header == "Size" else "left")
    for record in records:
        name, kind, extension, category, encoding, size, modified = listing_row(record)
        table.add_row(
            Text(name, style=styles["name"]),
            Text(kind, style=styles["kind"] if kind != PLACEHOLDER else styles["placeholder"]),
            Text(extension, style=styles["extension"] if extension != PLACEHOLDER else styles["placeholder"]),
            Text(category, style=_value_style("Category", category, record, styles)),
            Text(encoding, style=styles["placeholder"] if encoding == PLACEHOLDER else ""),
            _size_text(size, styles),
            Text(modified, style=_value_style("Modified", modified, record, styles)),
        )
    return table


def render_table(table: Table, width: int = RENDER_WIDTH) -> str:
    """Render a table to plain text without colours."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=width, color_system=None, force_terminal=False)
    console.print(table)
    return buffer.getvalue()


def render(record: FileRecord) -> str:
    return render_table(build_record_table(record))


def render_many(records: Iterable[FileRecord]) -> str:
    return render_table(build_listing_table(records))


__all__ = [
    "PLACEHOLDER",
    "record_rows",
    "listing_row",
    "build_record_table",
    "build_listing_table",
    "render_table",
    "render",
    "render_many",
]
