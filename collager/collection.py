"""Immutable photo arrangement shared by the editor and its history.

A :class:`PhotoCollection` maps cell identifiers to :class:`PhotoRecord`
values.  Collections are never mutated: every edit goes through one of the
copy-on-write helpers and returns a new collection, which is what lets the
history store keep earlier arrangements as-is.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, ClassVar, Dict, Iterator, Optional, Tuple

from . import transform as engine
from .transform import PhotoTransform

LOGGER = logging.getLogger(__name__)

CellId = str


def cell_id(row: int, col: int) -> CellId:
    """Return the identifier of the cell at ``(row, col)``."""

    if row < 0 or col < 0:
        raise ValueError(f"Cell position must be non-negative, got ({row}, {col})")
    return f"{row}-{col}"


def parse_cell_id(value: CellId) -> Tuple[int, int]:
    """Return ``(row, col)`` for a cell identifier."""

    parts = value.split("-")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Malformed cell id: {value!r}")
    return int(parts[0]), int(parts[1])


@dataclass(frozen=True)
class PhotoRecord:
    """A photo placed in one cell."""

    id: CellId
    image_ref: Any
    native_width: int
    native_height: int
    transform: PhotoTransform = PhotoTransform.PENDING

    @classmethod
    def create(
        cls,
        cell: CellId,
        image_ref: Any,
        native_width: int,
        native_height: int,
        transform: PhotoTransform = PhotoTransform.PENDING,
    ) -> "PhotoRecord":
        if native_width < 0 or native_height < 0:
            raise engine.InvalidGeometryError(
                f"Image dimensions must be non-negative, got {native_width}x{native_height}"
            )
        return cls(cell, image_ref, int(native_width), int(native_height), transform)

    @property
    def is_fitted(self) -> bool:
        return not self.transform.is_pending

    @property
    def native_size(self) -> Tuple[int, int]:
        return self.native_width, self.native_height

    def with_transform(self, transform: PhotoTransform) -> "PhotoRecord":
        return replace(self, transform=transform)


class PhotoCollection(Mapping):
    """Read-only mapping of cell id to :class:`PhotoRecord`."""

    EMPTY: ClassVar["PhotoCollection"]

    __slots__ = ("_records",)

    def __init__(self, records: Optional[Mapping] = None) -> None:
        self._records: Dict[CellId, PhotoRecord] = dict(records or {})
        for key, record in self._records.items():
            if record.id != key:
                raise ValueError(f"Record for {record.id!r} stored under {key!r}")

    def __getitem__(self, key: CellId) -> PhotoRecord:
        return self._records[key]

    def __iter__(self) -> Iterator[CellId]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PhotoCollection):
            return self._records == other._records
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f"PhotoCollection({self._records!r})"

    @property
    def photo_count(self) -> int:
        return sum(1 for r in self._records.values() if r.image_ref is not None)

    # ------------------------------------------------------------------
    # Copy-on-write helpers
    # ------------------------------------------------------------------
    def with_record(self, record: PhotoRecord) -> "PhotoCollection":
        """Return a copy with ``record`` inserted or replaced."""

        records = dict(self._records)
        records[record.id] = record
        return PhotoCollection(records)

    def without(self, cell: CellId) -> "PhotoCollection":
        """Return a copy with ``cell`` emptied (``self`` if already empty)."""

        if cell not in self._records:
            return self
        records = dict(self._records)
        del records[cell]
        return PhotoCollection(records)

    def with_transform(self, cell: CellId, new_transform: PhotoTransform) -> "PhotoCollection":
        """Return a copy where only ``cell``'s transform changed."""

        return self.with_record(self._records[cell].with_transform(new_transform))

    @classmethod
    def cleared(cls) -> "PhotoCollection":
        return cls.EMPTY


PhotoCollection.EMPTY = PhotoCollection()


def assign_image(
    collection: PhotoCollection,
    cell: CellId,
    image_ref: Any,
    native_width: int,
    native_height: int,
    cell_size: Tuple[float, float],
) -> PhotoCollection:
    """Place an image in ``cell`` (load, paste or replace).

    The new record is cover-fitted when ``cell_size`` is known.  Otherwise it
    keeps the pending transform until :func:`resolve_pending` runs.
    """

    record = PhotoRecord.create(cell, image_ref, native_width, native_height)
    fitted = engine.cover_fit(cell_size[0], cell_size[1], native_width, native_height)
    if fitted is engine.UNDETERMINED:
        LOGGER.debug("Cell %s: geometry undetermined, cover-fit deferred", cell)
    else:
        record = record.with_transform(fitted)
    return collection.with_record(record)


def resolve_pending(collection: PhotoCollection, cell_size: Tuple[float, float]) -> PhotoCollection:
    """Cover-fit every record still waiting for geometry.

    Returns ``collection`` itself when nothing could be resolved.
    """

    resolved = {}
    for key, record in collection.items():
        if record.is_fitted:
            continue
        fitted = engine.cover_fit(cell_size[0], cell_size[1], record.native_width, record.native_height)
        if fitted is not engine.UNDETERMINED:
            resolved[key] = record.with_transform(fitted)
    if not resolved:
        return collection
    records = dict(collection)
    records.update(resolved)
    LOGGER.debug("Resolved cover-fit for %d pending cell(s)", len(resolved))
    return PhotoCollection(records)
