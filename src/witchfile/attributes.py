"""Platform specific file attribute flags.

Windows reports hidden/system/temporary/readonly bits directly in
``st_file_attributes``. POSIX systems have no such bits, so a dotfile counts as
hidden and a missing owner write bit counts as readonly. macOS additionally
honours the ``UF_HIDDEN`` flag set by Finder. Platforms without any of these
concepts use :class:`NullAttributeProvider`, which reports nothing.
"""

from __future__ import annotations

import os
import stat
import sys
from enum import Enum
from pathlib import Path
from typing import FrozenSet, Optional


class Attribute(Enum):
    HIDDEN = "hidden"
    SYSTEM = "system"
    TEMPORARY = "temporary"
    READONLY = "readonly"


class AttributeProvider:
    """Reports which :class:`Attribute` flags apply to a path."""

    supported: FrozenSet[Attribute] = frozenset()

    def attributes(self, path: Path, stat_info: os.stat_result) -> FrozenSet[Attribute]:
        raise NotImplementedError


class NullAttributeProvider(AttributeProvider):
    supported: FrozenSet[Attribute] = frozenset()

    def attributes(self, path: Path, stat_info: os.stat_result) -> FrozenSet[Attribute]:
        return frozenset()


class WindowsAttributeProvider(AttributeProvider):
    supported = frozenset(Attribute)

    _BITS = (
        (stat.FILE_ATTRIBUTE_HIDDEN, Attribute.HIDDEN),
        (stat.FILE_ATTRIBUTE_SYSTEM, Attribute.SYSTEM),
        (stat.FILE_ATTRIBUTE_TEMPORARY, Attribute.TEMPORARY),
        (stat.FILE_ATTRIBUTE_READONLY, Attribute.READONLY),
    )

    def attributes(self, path: Path, stat_info: os.stat_result) -> FrozenSet[Attribute]:
        bits = getattr(stat_info, "st_file_attributes", 0)
        return frozenset(flag for mask, flag in self._BITS if bits & mask)


class PosixAttributeProvider(AttributeProvider):
    supported = frozenset({Attribute.HIDDEN, Attribute.READONLY})

    def attributes(self, path: Path, stat_info: os.stat_result) -> FrozenSet[Attribute]:
        flags = set()
        if self._is_hidden(path, stat_info):
            flags.add(Attribute.HIDDEN)
        # Readonly means not writable by the owner
        if not stat_info.st_mode & stat.S_IWUSR:
            flags.add(Attribute.READONLY)
        return frozenset(flags)

    def _is_hidden(self, path: Path, stat_info: os.stat_result) -> bool:
        name = path.name
        return name.startswith(".") and name not in (".", "..")


class DarwinAttributeProvider(PosixAttributeProvider):
    def _is_hidden(self, path: Path, stat_info: os.stat_result) -> bool:
        if getattr(stat_info, "st_flags", 0) & stat.UF_HIDDEN:
            return True
        return super()._is_hidden(path, stat_info)


def get_attribute_provider(platform: Optional[str] = None) -> AttributeProvider:
    """Pick the attribute provider for `platform` (defaults to ``sys.platform``)."""
    platform = platform or sys.platform
    if platform.startswith("win"):
        return WindowsAttributeProvider()
    if platform == "darwin":
        return DarwinAttributeProvider()
    if platform.startswith(("linux", "freebsd", "openbsd", "netbsd", "sunos", "aix", "cygwin")):
        return PosixAttributeProvider()
    return NullAttributeProvider()


__all__ = [
    "Attribute",
    "AttributeProvider",
    "NullAttributeProvider",
    "WindowsAttributeProvider",
    "PosixAttributeProvider",
    "DarwinAttributeProvider",
    "get_attribute_provider",
]
