"""Tests for record collection from the filesystem."""

import os
import sys
import time
from datetime import datetime
from pathlib import Path

import pytest

from witchfile import inspector
from witchfile.attributes import Attribute, NullAttributeProvider, PosixAttributeProvider
from witchfile.categories import Category
from witchfile.inspector import (
    DirectoryUnreadableError,
    EntryError,
    EntryUnreadableError,
    FileKind,
    FileRecord,
    PathNotFoundError,
    TextEncoding,
    collect,
    collect_all,
    list_directory,
    probe_text,
)


def _now():
    # Whole seconds keep timestamp arithmetic exact
    return datetime.fromtimestamp(int(time.time()))


def test_collect_utf8_file_scenario(tmp_path):
    """A 2048 byte UTF-8 file modified 90 seconds ago."""
    now = _now()
    path = tmp_path / "notes.md"
    path.write_bytes(("é" * 1024).encode("utf-8"))
    stamp = now.timestamp() - 90
    os.utime(path, (stamp, stamp))

    record = collect(path, now=now)

    assert record.name == "notes"
    assert record.kind is FileKind.FILE
    assert record.extension == "md"
    assert record.category is Category.SPECIAL
    assert record.size_bytes == 2048
    assert record.size_display == (2.0, "K")
    assert record.encoding is TextEncoding.UNICODE
    assert record.modified_at == datetime.fromtimestamp(stamp)


def test_collect_ascii_and_binary(tmp_path):
    text = tmp_path / "plain.txt"
    text.write_text("hello world\n")
    blob = tmp_path / "image.png"
    blob.write_bytes(b"\x89PNG\r\n\x1a\n\xff\xfe")

    assert collect(text).encoding is TextEncoding.ASCII
    assert collect(text).encoding.is_unicode
    assert collect(blob).encoding is TextEncoding.BINARY
    assert collect(blob).category is Category.MEDIA


def test_empty_file_is_ascii(tmp_path):
    path = tmp_path / "empty"
    path.write_bytes(b"")
    record = collect(path)
    assert record.encoding is TextEncoding.ASCII
    assert record.size_bytes == 0
    assert record.extension == ""
    assert record.category is Category.UNCLASSIFIED


def test_directory_skips_text_probe(tmp_path):
    sub = tmp_path / "folder.d"
    sub.mkdir()
    record = collect(sub)
    assert record.kind is FileKind.DIRECTORY
    assert record.encoding is None
    assert record.size_bytes is not None
    assert record.modified_at is not None


def test_collect_dot_uses_directory_name(tmp_path, monkeypatch):
    sub = tmp_path / "project"
    sub.mkdir()
    monkeypatch.chdir(sub)
    assert collect(".").name == "project"


def test_missing_path_raises_not_found(tmp_path):
    with pytest.raises(PathNotFoundError) as excinfo:
        collect(tmp_path / "nope.txt")
    assert "not found" in str(excinfo.value)
    assert excinfo.value.path == tmp_path / "nope.txt"


@pytest.mark.skipif(sys.platform.startswith("win"), reason="symlinks need privileges on Windows")
def test_symlinks_are_reported_as_symlinks(tmp_path):
    target = tmp_path / "target.py"
    target.write_text("print('hi')\n")
    link = tmp_path / "link.py"
    link.symlink_to(target)
    broken = tmp_path / "broken.py"
    broken.symlink_to(tmp_path / "gone.py")

    record = collect(link)
    assert record.kind is FileKind.SYMLINK
    assert record.encoding is None
    assert record.size_bytes == target.stat().st_size

    assert collect(broken).kind is FileKind.SYMLINK


def test_unreadable_entry_raises(tmp_path, monkeypatch):
    path = tmp_path / "secret"
    path.write_text("x")

    def deny(self):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(Path, "lstat", deny)
    with pytest.raises(EntryUnreadableError):
        collect(path)


def test_probe_failure_only_drops_encoding(tmp_path, monkeypatch):
    path = tmp_path / "data.csv"
    path.write_text("a,b\n")

    def fail(*args, **kwargs):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(inspector, "probe_text", fail)
    record = collect(path)
    assert record.encoding is None
    assert record.size_bytes == 4


def test_missing_creation_time_degrades_to_none(tmp_path, monkeypatch):
    path = tmp_path / "file.txt"
    path.write_text("x")
    monkeypatch.setattr(inspector, "_creation_timestamp", lambda stat_info: None)
    record = collect(path)
    assert record.created_at is None
    assert record.modified_at is not None


def test_attributes_come_from_provider(tmp_path):
    path = tmp_path / ".hidden"
    path.write_text("x")
    path.chmod(0o444)
    try:
        record = collect(path, provider=PosixAttributeProvider())
    finally:
        path.chmod(0o644)
    assert record.has_attribute(Attribute.HIDDEN) is True
    assert record.has_attribute(Attribute.READONLY) is True
    assert record.has_attribute(Attribute.SYSTEM) is None

    plain = collect(path, provider=NullAttributeProvider())
    assert plain.attributes == frozenset()
    assert plain.has_attribute(Attribute.HIDDEN) is None


def test_record_is_immutable(tmp_path):
    path = tmp_path / "a.txt"
    path.write_text("x")
    record = collect(path)
    with pytest.raises(AttributeError):
        record.name = "b"


def test_probe_text_limit_tolerates_cut_multibyte(tmp_path):
    path = tmp_path / "cut.txt"
    path.write_bytes("aé".encode("utf-8"))
    # Limit falls inside the two byte "é"
    assert probe_text(path, limit=2) is TextEncoding.UNICODE


def test_probe_text_limit_misses_late_invalid_bytes(tmp_path):
    path = tmp_path / "late.bin"
    path.write_bytes(b"a" * 100 + b"\xff")
    assert probe_text(path, limit=50) is TextEncoding.ASCII
    assert probe_text(path) is TextEncoding.BINARY


def test_probe_text_detects_truncated_sequence_at_end(tmp_path):
    path = tmp_path / "trunc.txt"
    path.write_bytes(b"abc\xc3")
    assert probe_text(path) is TextEncoding.BINARY
    assert probe_text(path, limit=4) is TextEncoding.BINARY


def test_probe_text_reads_in_chunks(tmp_path):
    path = tmp_path / "big.txt"
    path.write_bytes(("ü" * 100).encode("utf-8"))
    # Chunks of 3 bytes split every character
    assert probe_text(path, chunk_size=3) is TextEncoding.UNICODE


def _make_entries(root, count):
    for index in range(count):
        (root / f"file{index}.txt").write_text(f"entry {index}\n")


def test_collect_all_lists_immediate_children(tmp_path):
    _make_entries(tmp_path, 3)
    nested = tmp_path / "sub"
    nested.mkdir()
    (nested / "deep.txt").write_text("deep")

    results = list(collect_all(tmp_path))
    names = [result.name for result in results]
    assert names == ["sub", "file0", "file1", "file2"]
    assert all(isinstance(result, FileRecord) for result in results)


def test_collect_all_skips_unreadable_entry(tmp_path, monkeypatch):
    """One unreadable entry among ten is reported and the rest still arrive."""
    _make_entries(tmp_path, 10)
    original = inspector.collect

    def flaky(path, **kwargs):
        if Path(path).name == "file3.txt":
            raise EntryUnreadableError(Path(path), PermissionError(13, "Permission denied"))
        return original(path, **kwargs)

    monkeypatch.setattr(inspector, "collect", flaky)
    results = list(collect_all(tmp_path))

    errors = [result for result in results if isinstance(result, EntryError)]
    records = [result for result in results if isinstance(result, FileRecord)]
    assert len(records) == 9
    assert len(errors) == 1
    assert errors[0].path.name == "file3.txt"


def test_collect_all_vanished_entry_is_an_error(tmp_path, monkeypatch):
    _make_entries(tmp_path, 2)
    entries = list_directory(tmp_path)
    (tmp_path / "file0.txt").unlink()
    monkeypatch.setattr(inspector, "list_directory", lambda directory, sort_entries: entries)

    results = list(collect_all(tmp_path))
    assert isinstance(results[0], EntryError)
    assert isinstance(results[0].error, PathNotFoundError)
    assert isinstance(results[1], FileRecord)


def test_collect_all_parallel_keeps_order(tmp_path):
    _make_entries(tmp_path, 12)
    sequential = [result.name for result in collect_all(tmp_path)]
    parallel = [result.name for result in collect_all(tmp_path, workers=4)]
    assert parallel == sequential


def test_collect_all_shares_query_time(tmp_path):
    _make_entries(tmp_path, 2)
    now = _now()
    results = list(collect_all(tmp_path, now=now))
    assert {result.queried_at for result in results} == {now}


def test_collect_all_unsorted_returns_everything(tmp_path):
    _make_entries(tmp_path, 5)
    names = {result.name for result in collect_all(tmp_path, sort_entries=False)}
    assert names == {f"file{index}" for index in range(5)}


def test_collect_all_missing_directory_fails_immediately(tmp_path):
    with pytest.raises(DirectoryUnreadableError):
        collect_all(tmp_path / "missing")
