"""Local view of the torrents known to the server.

This module provides:
- TagList: Ordered tag sequence parsed from the server's comma-joined text
- Torrent: A fully known torrent
- PartialTorrent: A sparse update for a torrent, every field optional
- DiffPayload: One response of the incremental sync endpoint
- materialize: The single completeness check turning a PartialTorrent into a Torrent
- TorrentStore: Applies full and incremental diffs to the known torrents

Architecture:
    The server answers each sync request with either a full snapshot or a
    delta relative to the cursor the client sent. Snapshots replace the
    store; deltas remove torrents first, then merge each entry field by
    field. A torrent is only admitted once every field is known, so the
    rest of the program never sees a half-built Torrent.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from seedwarden.core.types import ShareLimit

logger = logging.getLogger(__name__)

_V = TypeVar("_V")


class MissingFieldError(Exception):
    """A new torrent cannot be built because a field is absent."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"missing {field_name}")
        self.field_name = field_name


class InvalidFieldError(ValueError):
    """A torrent field in a sync payload has the wrong type."""

    def __init__(self, field_name: str, value: object) -> None:
        super().__init__(f"invalid value for {field_name}: {value!r}")
        self.field_name = field_name
        self.value = value


class TagList(tuple[str, ...]):
    """Ordered sequence of tags.

    Equality is sequence equality: the same tags in another order, or with
    a duplicate, are a different TagList.
    """

    __slots__ = ()

    @classmethod
    def from_text(cls, text: str) -> TagList:
        """Split the server's comma-joined tag string.

        Tokens are not trimmed, and a single trailing empty token is dropped
        so that "" yields no tags and "a,b," yields ("a", "b").
        """
        parts = text.split(",")
        if parts[-1] == "":
            parts.pop()
        return cls(parts)

    def __str__(self) -> str:
        return f"[{', '.join(self)}]"


@dataclass
class PartialTorrent:
    """Sparse torrent data from a sync payload. Absent fields are None."""

    category: str | None = None
    max_ratio: float | None = None
    max_seeding_time: int | None = None
    name: str | None = None
    seeding_time: int | None = None
    tags: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PartialTorrent:
        """Create from a torrent entry of the sync response.

        Unknown keys are ignored.

        Raises:
            InvalidFieldError: If a known key holds a value of the wrong type.
        """
        partial = cls(
            category=data.get("category"),
            max_ratio=data.get("max_ratio"),
            max_seeding_time=data.get("max_seeding_time"),
            name=data.get("name"),
            seeding_time=data.get("seeding_time"),
            tags=data.get("tags"),
        )
        partial._validate()
        return partial

    def _validate(self) -> None:
        for name in ("category", "name", "tags"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise InvalidFieldError(name, value)
        if self.max_ratio is not None and (
            isinstance(self.max_ratio, bool) or not isinstance(self.max_ratio, int | float)
        ):
            raise InvalidFieldError("max_ratio", self.max_ratio)
        if self.max_seeding_time is not None and (
            isinstance(self.max_seeding_time, bool) or not isinstance(self.max_seeding_time, int)
        ):
            raise InvalidFieldError("max_seeding_time", self.max_seeding_time)
        if self.seeding_time is not None and (
            isinstance(self.seeding_time, bool)
            or not isinstance(self.seeding_time, int)
            or self.seeding_time < 0
        ):
            raise InvalidFieldError("seeding_time", self.seeding_time)


@dataclass
class Torrent:
    """A torrent whose every field is known.

    Attributes:
        category: Category name ("" when uncategorized).
        max_ratio: Current ratio limit.
        max_seeding_time: Current seeding time limit, in minutes.
        name: Display name.
        seeding_time: Total seeding time, in seconds.
        tags: Tags in the order the server reported them.
    """

    category: str
    max_ratio: ShareLimit
    max_seeding_time: ShareLimit
    name: str
    seeding_time: int
    tags: TagList = field(default_factory=TagList)

    @property
    def seeding_minutes(self) -> int:
        """Seeding time truncated to whole minutes."""
        return self.seeding_time // 60

    @property
    def is_limited(self) -> bool:
        """True if either limit is a real value rather than unlimited/global."""
        return self.max_seeding_time.is_limited or self.max_ratio.is_limited

    def update(self, partial: PartialTorrent) -> None:
        """Overwrite every field present in partial, leave the others."""
        if partial.category is not None:
            self.category = partial.category
        if partial.max_ratio is not None:
            self.max_ratio = ShareLimit.from_wire(partial.max_ratio)
        if partial.max_seeding_time is not None:
            self.max_seeding_time = ShareLimit.from_wire(partial.max_seeding_time)
        if partial.name is not None:
            self.name = partial.name
        if partial.seeding_time is not None:
            self.seeding_time = partial.seeding_time
        if partial.tags is not None:
            self.tags = TagList.from_text(partial.tags)


def _require(value: _V | None, field_name: str) -> _V:
    if value is None:
        raise MissingFieldError(field_name)
    return value


def materialize(partial: PartialTorrent) -> Torrent:
    """Build a Torrent from a PartialTorrent that carries every field.

    Fields are checked in declaration order.

    Raises:
        MissingFieldError: Naming the first absent field.
    """
    category = _require(partial.category, "category")
    max_ratio = _require(partial.max_ratio, "max_ratio")
    max_seeding_time = _require(partial.max_seeding_time, "max_seeding_time")
    name = _require(partial.name, "name")
    seeding_time = _require(partial.seeding_time, "seeding_time")
    tags = _require(partial.tags, "tags")
    return Torrent(
        category=category,
        max_ratio=ShareLimit.from_wire(max_ratio),
        max_seeding_time=ShareLimit.from_wire(max_seeding_time),
        name=name,
        seeding_time=seeding_time,
        tags=TagList.from_text(tags),
    )


@dataclass
class DiffPayload:
    """One response of the incremental sync endpoint.

    Attributes:
        rid: Cursor to send with the next request.
        full_update: True if torrents is a complete snapshot.
        torrents: Changed torrents by hash.
        torrents_removed: Hashes removed since the previous cursor
            (only meaningful for incremental updates).
    """

    rid: int
    full_update: bool = False
    torrents: dict[str, PartialTorrent] = field(default_factory=dict)
    torrents_removed: list[str] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DiffPayload:
        """Create from a sync/maindata response.

        Only the torrent related keys are read; categories, tags and server
        state are ignored.

        Raises:
            InvalidFieldError: If the response does not have the expected shape.
        """
        rid = data.get("rid")
        if isinstance(rid, bool) or not isinstance(rid, int):
            raise InvalidFieldError("rid", rid)

        raw_torrents = data.get("torrents")
        if raw_torrents is None:
            raw_torrents = {}
        if not isinstance(raw_torrents, Mapping):
            raise InvalidFieldError("torrents", raw_torrents)
        torrents = {}
        for torrent_hash, entry in raw_torrents.items():
            if not isinstance(entry, Mapping):
                raise InvalidFieldError(f"torrents.{torrent_hash}", entry)
            torrents[torrent_hash] = PartialTorrent.from_dict(entry)

        removed = data.get("torrents_removed")
        if removed is not None and (
            not isinstance(removed, list) or not all(isinstance(h, str) for h in removed)
        ):
            raise InvalidFieldError("torrents_removed", removed)

        return cls(
            rid=rid,
            full_update=bool(data.get("full_update", False)),
            torrents=torrents,
            torrents_removed=removed,
        )


class TorrentStore:
    """Torrents known to the client, keyed by hash."""

    def __init__(self, torrents: Mapping[str, Torrent] | None = None) -> None:
        self._torrents: dict[str, Torrent] = dict(torrents or {})

    def __len__(self) -> int:
        return len(self._torrents)

    def __contains__(self, torrent_hash: object) -> bool:
        return torrent_hash in self._torrents

    def __iter__(self) -> Iterator[str]:
        return iter(self._torrents)

    def get(self, torrent_hash: str) -> Torrent | None:
        return self._torrents.get(torrent_hash)

    def items(self) -> list[tuple[str, Torrent]]:
        """Snapshot of (hash, torrent) pairs."""
        return list(self._torrents.items())

    def apply(self, diff: DiffPayload) -> None:
        """Apply a sync payload, full or incremental."""
        if diff.full_update:
            logger.debug("Received a full update from server")
            self.apply_full(diff.torrents)
        else:
            self.apply_incremental(diff.torrents_removed or [], diff.torrents)

    def apply_full(self, torrents: Mapping[str, PartialTorrent]) -> None:
        """Replace every known torrent with the complete ones in torrents."""
        self._torrents = {}
        for torrent_hash, partial in torrents.items():
            self._insert(torrent_hash, partial)

    def apply_incremental(
        self,
        removed: Iterable[str],
        torrents: Mapping[str, PartialTorrent],
    ) -> None:
        """Remove torrents, then merge or insert changed ones.

        Unknown hashes in removed are ignored. Entries are processed one by
        one; an incomplete new torrent is dropped without affecting the rest.
        """
        for torrent_hash in removed:
            if self._torrents.pop(torrent_hash, None) is not None:
                logger.debug(f"Removed torrent {torrent_hash}")

        for torrent_hash, partial in torrents.items():
            existing = self._torrents.get(torrent_hash)
            if existing is not None:
                logger.debug(f"Updating {torrent_hash}")
                existing.update(partial)
            else:
                logger.debug(f"Inserting {torrent_hash}")
                self._insert(torrent_hash, partial)

    def _insert(self, torrent_hash: str, partial: PartialTorrent) -> None:
        try:
            self._torrents[torrent_hash] = materialize(partial)
        except MissingFieldError as e:
            logger.warning(f"Could not load torrent {torrent_hash}: no {e.field_name} field")


