"""Session controller for collage editing.

This module introduces :class:`CollageSessionController`, the service layer
between the Qt widgets and the photo model.  Each edit gesture asks the layout
provider for the current cell size, runs the transform engine, and pushes a
copy-on-write :class:`~collager.collection.PhotoCollection` onto the
:class:`~collager.controllers.history.HistoryStore`.  The controller has no Qt
dependency so it can be driven from plain unit tests.

Continuous gestures (pointer drags and wheel bursts) are buffered outside the
history by default: the renderer sees the live transform through
:meth:`CollageSessionController.display_collection`, and a single snapshot is
pushed when the gesture ends.

Image decoding is asynchronous.  :meth:`CollageSessionController.request_load`
hands out a :class:`LoadTicket` that must still be current when the decode
finishes, otherwise the result is dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from .. import config
from .. import transform as engine
from ..collection import CellId, PhotoCollection, PhotoRecord, assign_image, resolve_pending
from ..presets import DEFAULT_PRESET, PresetConfig
from ..transform import PhotoTransform
from .history import HistoryStore

LOGGER = logging.getLogger(__name__)

Listener = Callable[[], None]


class LayoutProvider(Protocol):
    """Supplies the pixel size of a preset's cells (``(0, 0)`` if unmeasured)."""

    def cell_pixel_size(self, preset_id: str) -> Tuple[float, float]:
        ...


@dataclass(frozen=True)
class LoadTicket:
    """Identifies one image load request.

    ``generation`` changes whenever the whole arrangement is reset and
    ``serial`` distinguishes repeated requests for the same cell.
    """

    cell: CellId
    generation: int
    serial: int


@dataclass
class _Gesture:
    kind: str
    cell: CellId
    anchor: PhotoTransform
    live: PhotoTransform

    @property
    def changed(self) -> bool:
        return self.live != self.anchor


class CollageSessionController:
    """Manage the photo arrangement, its history and in-flight gestures."""

    def __init__(
        self,
        layout: LayoutProvider,
        preset: PresetConfig = DEFAULT_PRESET,
        *,
        coalesce_gestures: bool = config.COALESCE_GESTURES,
        history_limit: Optional[int] = config.HISTORY_LIMIT,
    ) -> None:
        self._layout = layout
        self._preset = preset
        self._coalesce = coalesce_gestures
        self._history = HistoryStore(limit=history_limit)
        self._selected: Optional[CellId] = None
        self._gesture: Optional[_Gesture] = None
        self._generation = 0
        self._serial = 0
        self._latest_request: Dict[CellId, int] = {}
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------
    @property
    def preset(self) -> PresetConfig:
        return self._preset

    @property
    def history(self) -> HistoryStore:
        return self._history

    @property
    def selected(self) -> Optional[CellId]:
        return self._selected

    @property
    def coalesce_gestures(self) -> bool:
        return self._coalesce

    @property
    def gesture_active(self) -> bool:
        return self._gesture is not None

    @property
    def dragging(self) -> bool:
        return self._gesture is not None and self._gesture.kind == "drag"

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo or self._has_uncommitted_change()

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo and not self._has_uncommitted_change()

    def current(self) -> PhotoCollection:
        """Return the committed arrangement."""

        return self._history.current()

    def display_collection(self) -> PhotoCollection:
        """Return the arrangement to paint, including any live gesture."""

        committed = self._history.current()
        gesture = self._gesture
        if gesture is None or not gesture.changed or gesture.cell not in committed:
            return committed
        return committed.with_transform(gesture.cell, gesture.live)

    def record(self, cell: CellId) -> Optional[PhotoRecord]:
        return self.display_collection().get(cell)

    def selected_record(self) -> Optional[PhotoRecord]:
        if self._selected is None:
            return None
        return self.record(self._selected)

    def cell_size(self) -> Tuple[float, float]:
        return self._layout.cell_pixel_size(self._preset.id)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _check_cell(self, cell: CellId) -> None:
        if cell not in self._preset.cell_ids():
            raise ValueError(f"Cell {cell!r} does not exist in preset {self._preset.id}")

    def _geometry(self, record: PhotoRecord) -> Tuple[float, float, int, int]:
        cell_w, cell_h = self.cell_size()
        return cell_w, cell_h, record.native_width, record.native_height

    def _fitted_record(self, cell: Optional[CellId]) -> Optional[PhotoRecord]:
        if cell is None:
            return None
        record = self._history.current().get(cell)
        if record is None or not record.is_fitted:
            return None
        return record

    def _has_uncommitted_change(self) -> bool:
        return self._coalesce and self._gesture is not None and self._gesture.changed

    def _push(self, snapshot: PhotoCollection) -> None:
        self._history.push(snapshot)

    def _commit_gesture(self) -> bool:
        """End the active gesture, pushing its outcome when buffered."""

        gesture, self._gesture = self._gesture, None
        if gesture is None:
            return False
        if not (self._coalesce and gesture.changed):
            return False
        current = self._history.current()
        if gesture.cell not in current:
            return False
        self._push(current.with_transform(gesture.cell, gesture.live))
        LOGGER.debug("Cell %s: %s gesture committed", gesture.cell, gesture.kind)
        return True

    def _apply_transform(self, cell: CellId, new_transform: PhotoTransform) -> bool:
        current = self._history.current()
        if current[cell].transform == new_transform:
            return False
        self._push(current.with_transform(cell, new_transform))
        return True

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def select(self, cell: Optional[CellId]) -> None:
        """Change the selected cell (``None`` deselects)."""

        if cell is not None:
            self._check_cell(cell)
        if cell == self._selected:
            return
        self._commit_gesture()
        self._selected = cell
        self._notify()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def request_load(self, cell: Optional[CellId] = None) -> Optional[LoadTicket]:
        """Start loading an image into ``cell`` (defaults to the selection)."""

        if cell is not None:
            self.select(cell)
        target = self._selected
        if target is None:
            LOGGER.debug("Load requested with no target cell")
            return None
        self._serial += 1
        self._latest_request[target] = self._serial
        return LoadTicket(target, self._generation, self._serial)

    def is_current(self, ticket: LoadTicket) -> bool:
        """Return whether a decode result for ``ticket`` may still be applied."""

        return (
            ticket.generation == self._generation
            and ticket.cell == self._selected
            and self._latest_request.get(ticket.cell) == ticket.serial
        )

    def complete_load(self, ticket: LoadTicket, image_ref: Any, width: int, height: int) -> bool:
        """Place a decoded image in the ticket's cell if the ticket is current."""

        if not self.is_current(ticket):
            LOGGER.debug("Cell %s: stale load completion discarded", ticket.cell)
            return False
        del self._latest_request[ticket.cell]
        if width <= 0 or height <= 0:
            LOGGER.warning("Cell %s: decoded image has no size (%sx%s)", ticket.cell, width, height)
            return False
        if self._gesture is not None and self._gesture.cell == ticket.cell:
            self._gesture = None
        else:
            self._commit_gesture()
        snapshot = assign_image(self._history.current(), ticket.cell, image_ref, width, height, self.cell_size())
        self._push(snapshot)
        LOGGER.info("Cell %s: image set (%dx%d)", ticket.cell, width, height)
        self._notify()
        return True

    def fail_load(self, ticket: LoadTicket, reason: str = "") -> None:
        """Record a failed decode; the arrangement is left unchanged."""

        if self._latest_request.get(ticket.cell) == ticket.serial:
            del self._latest_request[ticket.cell]
        if ticket.generation != self._generation:
            LOGGER.debug("Cell %s: stale load failure ignored", ticket.cell)
            return
        LOGGER.warning("Cell %s: image load failed: %s", ticket.cell, reason or "unknown error")

    def resolve_layout(self) -> bool:
        """Cover-fit photos that were loaded before the layout was measured."""

        current = self._history.current()
        resolved = resolve_pending(current, self.cell_size())
        if resolved is current:
            return False
        self._history.replace_current(resolved)
        self._notify()
        return True

    # ------------------------------------------------------------------
    # Drag
    # ------------------------------------------------------------------
    def begin_drag(self, cell: CellId) -> bool:
        """Select ``cell`` and start panning its photo."""

        self.select(cell)
        self._commit_gesture()
        record = self._fitted_record(cell)
        if record is None:
            return False
        self._gesture = _Gesture("drag", cell, record.transform, record.transform)
        return True

    def drag_to(self, dx: float, dy: float) -> bool:
        """Move the drag to an offset ``(dx, dy)`` from where it started."""

        gesture = self._gesture
        if gesture is None or gesture.kind != "drag":
            return False
        record = self._history.current().get(gesture.cell)
        if record is None:
            self._gesture = None
            return False
        moved = engine.apply_pan_delta(gesture.anchor, dx, dy, *self._geometry(record))
        if moved is engine.UNDETERMINED or moved == gesture.live:
            return False
        gesture.live = moved
        if not self._coalesce:
            self._apply_transform(gesture.cell, moved)
        self._notify()
        return True

    def end_drag(self) -> bool:
        """Finish the drag (pointer released anywhere)."""

        if self._gesture is None or self._gesture.kind != "drag":
            return False
        committed = self._commit_gesture()
        self._notify()
        return committed

    def cancel_gesture(self) -> None:
        """Drop any uncommitted gesture and restore the committed transform."""

        if self._gesture is None:
            return
        self._gesture = None
        self._notify()

    # ------------------------------------------------------------------
    # Zoom
    # ------------------------------------------------------------------
    def wheel(self, cell: CellId, scroll_y: float) -> bool:
        """Zoom the selected cell's photo by a wheel movement."""

        if self.dragging or cell != self._selected:
            return False
        record = self._fitted_record(cell)
        if record is None:
            return False
        gesture = self._gesture
        if gesture is not None and (gesture.kind != "wheel" or gesture.cell != cell):
            self._commit_gesture()
            gesture = None
        base = gesture.live if gesture is not None else record.transform
        geometry = self._geometry(record)
        cover = engine.min_scale(*geometry)
        if cover is engine.UNDETERMINED:
            return False
        zoomed = engine.apply_zoom_delta(base, engine.wheel_zoom_delta(scroll_y, cover), *geometry)
        if self._coalesce:
            if gesture is None:
                gesture = self._gesture = _Gesture("wheel", cell, record.transform, record.transform)
            gesture.live = zoomed
        else:
            self._apply_transform(cell, zoomed)
        self._notify()
        return True

    def commit_pending_zoom(self) -> bool:
        """Commit a buffered wheel burst; called once the wheel goes idle."""

        if self._gesture is None or self._gesture.kind != "wheel":
            return False
        committed = self._commit_gesture()
        self._notify()
        return committed

    def zoom_step(self, direction: str) -> bool:
        """Zoom the selected photo one toolbar step ``"in"`` or ``"out"``."""

        self._commit_gesture()
        record = self._fitted_record(self._selected)
        if record is None:
            return False
        geometry = self._geometry(record)
        cover = engine.min_scale(*geometry)
        if cover is engine.UNDETERMINED:
            return False
        zoomed = engine.apply_zoom_delta(record.transform, engine.step_zoom_delta(direction, cover), *geometry)
        changed = self._apply_transform(record.id, zoomed)
        self._notify()
        return changed

    def reset_selected(self) -> bool:
        """Restore cover-fit, centred, for the selected photo."""

        self._commit_gesture()
        record = self._fitted_record(self._selected)
        if record is None:
            return False
        fitted = engine.reset_transform(*self._geometry(record))
        if fitted is engine.UNDETERMINED:
            return False
        changed = self._apply_transform(record.id, fitted)
        self._notify()
        return changed

    def zoom_percentage(self) -> Optional[int]:
        """Return the selected photo's zoom relative to cover-fit."""

        record = self.selected_record()
        if record is None or not record.is_fitted:
            return None
        return engine.zoom_percentage(record.transform, *self._geometry(record))

    # ------------------------------------------------------------------
    # Clearing and presets
    # ------------------------------------------------------------------
    def clear_cell(self, cell: Optional[CellId] = None) -> bool:
        """Empty one cell as an undoable edit."""

        target = cell if cell is not None else self._selected
        if target is None:
            return False
        self._commit_gesture()
        current = self._history.current()
        if target not in current:
            return False
        self._push(current.without(target))
        LOGGER.info("Cell %s: image cleared", target)
        self._notify()
        return True

    def _start_over(self) -> None:
        self._gesture = None
        self._selected = None
        self._generation += 1
        self._latest_request.clear()
        self._history.reset(PhotoCollection.EMPTY)

    def clear_all(self) -> None:
        """Remove every photo and start a fresh history."""

        self._start_over()
        LOGGER.info("Collage cleared")
        self._notify()

    def change_preset(self, preset: PresetConfig) -> None:
        """Switch the grid preset; the arrangement and history start over."""

        if preset == self._preset:
            return
        self._preset = preset
        self._start_over()
        LOGGER.info("Preset changed to %s", preset.id)
        self._notify()

    # ------------------------------------------------------------------
    # Undo / redo
    # ------------------------------------------------------------------
    def undo(self) -> bool:
        self._commit_gesture()
        moved = self._history.undo()
        if moved:
            self._notify()
        return moved

    def redo(self) -> bool:
        self._commit_gesture()
        moved = self._history.redo()
        if moved:
            self._notify()
        return moved
