from __future__ import annotations

import os
import stat as stat_module
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class EntryStat:
    """What a provider knows about one entry of the hierarchy."""

    name: str
    is_container: bool
    metadata: Mapping[str, datetime] = field(default_factory=dict)


class HierarchyProvider(ABC):
    """Abstract source of a nested structure (a file system, a list of paths...).

    Locators are opaque strings understood by the provider.
    """

    @abstractmethod
    def stat(self, locator: str) -> EntryStat:
        """Describe the entry at *locator*.

        Raises:
            OSError: when the entry cannot be read.
        """
        ...

    @abstractmethod
    def list_children(self, locator: str) -> list[str]:
        """Return locators of the immediate members of a container, in enumeration order."""
        ...


class FileSystemProvider(HierarchyProvider):
    """Local file system; members are enumerated in sorted name order."""

    def stat(self, locator: str) -> EntryStat:
        st = os.stat(locator)
        return EntryStat(
            name=os.path.basename(os.path.normpath(locator)),
            is_container=stat_module.S_ISDIR(st.st_mode),
            metadata={
                "modified": datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
                "accessed": datetime.fromtimestamp(st.st_atime, tz=timezone.utc),
                "changed": datetime.fromtimestamp(st.st_ctime, tz=timezone.utc),
            },
        )

    def list_children(self, locator: str) -> list[str]:
        return [os.path.join(locator, entry) for entry in sorted(os.listdir(locator))]


class MemoryProvider(HierarchyProvider):
    """In-memory hierarchy built from ``/``-separated paths.

    Every path prefix becomes a container; a trailing ``/`` declares an
    empty container. Members keep the order in which paths were given.

    Example::

        provider = MemoryProvider([
            "calendar/2024/Feb/2024-02-01.txt",
            "calendar/2024/Mar/2024-03-05.txt",
        ])
        provider.list_children("calendar/2024")
        # ['calendar/2024/Feb', 'calendar/2024/Mar']
    """

    def __init__(
        self,
        paths: Iterable[str],
        metadata: Mapping[str, Mapping[str, datetime]] | None = None,
    ) -> None:
        self._children: dict[str, list[str]] = {}
        self._entries: set[str] = set()
        self._metadata = {k.strip("/"): dict(v) for k, v in (metadata or {}).items()}

        for path in paths:
            is_container = path.endswith("/")
            parts = [p for p in path.split("/") if p]
            for depth in range(1, len(parts) + 1):
                locator = "/".join(parts[:depth])
                if locator not in self._entries:
                    self._entries.add(locator)
                    if depth > 1:
                        self._children.setdefault("/".join(parts[:depth - 1]), []).append(locator)
                if depth < len(parts) or is_container:
                    self._children.setdefault(locator, [])

    def stat(self, locator: str) -> EntryStat:
        locator = locator.strip("/")
        if locator not in self._entries:
            raise FileNotFoundError(locator)
        return EntryStat(
            name=locator.rsplit("/", 1)[-1],
            is_container=locator in self._children,
            metadata=self._metadata.get(locator, {}),
        )

    def list_children(self, locator: str) -> list[str]:
        locator = locator.strip("/")
        if locator not in self._children:
            raise NotADirectoryError(locator)
        return list(self._children[locator])
