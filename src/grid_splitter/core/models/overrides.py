"""
Module: overrides

Purpose:
    Per-image split configuration overrides and the resolver that picks
    the effective configuration for an image index.

Key Classes:
    - Inherited: Image follows the shared (global) configuration
    - Overridden: Image has its own SplitConfig
    - ConfigOverrides: Index -> Overridden mapping with lazy creation
    - OverridesSnapshot: Read-only copy taken before a parallel export

Key Functions:
    - resolve(index, overrides, global_config): Effective config for an image

Dependencies:
    - types.MappingProxyType (std)
    - .split_config: SplitConfig

Used By:
    - splitter.exporter: Resolves each image at export time
    - core.utils.serialization: Project files

Design Notes:
    Absence of an entry means the image tracks the global config live, so
    resolution must happen each time it is needed and never be cached.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Iterator, Mapping, Union

from .split_config import SplitConfig


@dataclass(frozen=True, slots=True)
class Inherited:
    """Image uses whatever the global config is at resolution time."""


@dataclass(frozen=True, slots=True)
class Overridden:
    """Image uses its own config, independent of later global edits."""
    config: SplitConfig


OverrideEntry = Union[Inherited, Overridden]

INHERITED = Inherited()


def resolve_entry(entry: OverrideEntry, global_config: SplitConfig) -> SplitConfig:
    """Effective config for one override entry."""
    if isinstance(entry, Overridden):
        return entry.config
    return global_config


class _OverrideLookup:
    """Shared read API of ConfigOverrides and OverridesSnapshot."""

    _entries: Mapping[int, Overridden]

    def entry(self, index: int) -> OverrideEntry:
        """Inherited() or Overridden(config) for an image index."""
        return self._entries.get(index, INHERITED)

    def has_override(self, index: int) -> bool:
        return index in self._entries

    def get(self, index: int) -> SplitConfig | None:
        found = self._entries.get(index)
        return found.config if found is not None else None

    def indices(self) -> list[int]:
        """Overridden image indices, ascending."""
        return sorted(self._entries)

    def items(self) -> Iterator[tuple[int, SplitConfig]]:
        for index in self.indices():
            yield index, self._entries[index].config

    def __contains__(self, index: object) -> bool:
        return index in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class OverridesSnapshot(_OverrideLookup):
    """Immutable copy of overrides, safe to read from worker threads."""

    def __init__(self, entries: Mapping[int, Overridden]):
        self._entries = MappingProxyType(dict(entries))

    def __repr__(self) -> str:
        return f"OverridesSnapshot(indices={self.indices()})"


class ConfigOverrides(_OverrideLookup):
    """
    Mutable mapping of image index -> own SplitConfig.

    Entries are created lazily on the first per-image edit and are never
    removed automatically.

    Example:
        >>> overrides = ConfigOverrides()
        >>> overrides.set(2, SplitConfig.new(3, 3))
        >>> overrides.entry(0)
        Inherited()
    """

    def __init__(self, entries: Mapping[int, SplitConfig] | None = None):
        self._entries: Dict[int, Overridden] = {}
        for index, config in (entries or {}).items():
            self.set(index, config)

    def set(self, index: int, config: SplitConfig) -> None:
        """Give image `index` its own config."""
        if index < 0:
            raise ValueError(f"Image index must be >= 0: {index}")
        self._entries[index] = Overridden(config)

    def edit(
        self,
        index: int,
        global_config: SplitConfig,
        change: Callable[[SplitConfig], SplitConfig],
    ) -> SplitConfig:
        """
        Apply an edit to one image's lines.

        The first edit of an image copies the current global config into a
        new override, later edits modify that override.

        Returns:
            The image's config after the edit
        """
        current = resolve_entry(self.entry(index), global_config)
        updated = change(current)
        self.set(index, updated)
        return updated

    def clear_override(self, index: int) -> bool:
        """Make image `index` inherit again. Returns True if an entry existed."""
        return self._entries.pop(index, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def snapshot(self) -> OverridesSnapshot:
        """Read-only copy for a batch run."""
        return OverridesSnapshot(self._entries)

    def __repr__(self) -> str:
        return f"ConfigOverrides(indices={self.indices()})"


OverrideSource = Union[ConfigOverrides, OverridesSnapshot, Mapping[int, SplitConfig], None]


def resolve(
    index: int,
    overrides: OverrideSource,
    global_config: SplitConfig,
) -> SplitConfig:
    """
    Effective config for image `index`.

    Args:
        index: Image index in the ImageSet
        overrides: Overrides (or a plain index -> config mapping)
        global_config: Shared configuration

    Returns:
        The image's override if present, else global_config
    """
    if overrides is None:
        return global_config
    if isinstance(overrides, _OverrideLookup):
        return resolve_entry(overrides.entry(index), global_config)
    return overrides.get(index, global_config)
