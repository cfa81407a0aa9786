"""Page geometry for presets, on screen and on paper.

:class:`PresetLayout` is the layout provider used by the edit session.  It
answers ``(0, 0)`` until the canvas has been measured, which the transform
engine treats as undetermined geometry.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Tuple

from . import config
from .collection import CellId, parse_cell_id
from .presets import PresetConfig

LOGGER = logging.getLogger(__name__)

MM_PER_INCH = 25.4

Rect = Tuple[float, float, float, float]


def mm_to_px(mm: float, dpi: float) -> float:
    return mm * dpi / MM_PER_INCH


def _cells_per_line(preset: PresetConfig) -> int:
    # Cells wrap the way a centred flex row does inside the padded page.
    usable = preset.paper_width_mm - 2 * preset.gap_mm
    fits = int(math.floor((usable + preset.gap_mm) / (preset.cell_width_mm + preset.gap_mm)))
    return max(1, fits)


def cell_rect(preset: PresetConfig, cell: CellId, px_per_mm: float = 1.0) -> Rect:
    """Return ``(x, y, w, h)`` of ``cell`` on the page, in ``px_per_mm`` units."""

    row, col = parse_cell_id(cell)
    if row >= preset.rows or col >= preset.cols:
        raise ValueError(f"Cell {cell!r} is outside preset {preset.id}")

    index = row * preset.cols + col
    per_line = _cells_per_line(preset)
    line, slot = divmod(index, per_line)
    in_line = min(per_line, preset.total_cells - line * per_line)

    gap = preset.gap_mm
    usable = preset.paper_width_mm - 2 * gap
    line_width = in_line * preset.cell_width_mm + (in_line - 1) * gap
    left = gap + (usable - line_width) / 2 + slot * (preset.cell_width_mm + gap)
    top = gap + line * (preset.cell_height_mm + gap)
    return (
        left * px_per_mm,
        top * px_per_mm,
        preset.cell_width_mm * px_per_mm,
        preset.cell_height_mm * px_per_mm,
    )


def page_size_px(preset: PresetConfig, px_per_mm: float) -> Tuple[float, float]:
    return preset.paper_width_mm * px_per_mm, preset.paper_height_mm * px_per_mm


def fit_scale(viewport_w: float, viewport_h: float, preset: PresetConfig) -> float:
    """Return the display scale that fits the page into the viewport."""

    avail_w = viewport_w - config.VIEWPORT_PADDING
    avail_h = viewport_h - config.VIEWPORT_PADDING
    paper_w, paper_h = page_size_px(preset, config.MM_TO_PX)
    if avail_w <= 0 or avail_h <= 0:
        return 0.0
    return min(avail_w / paper_w, avail_h / paper_h, config.MAX_VIEWPORT_SCALE)


class PresetLayout:
    """Layout provider reporting cell pixel sizes per preset.

    Cell sizes are in unscaled page pixels (``mm * MM_TO_PX``), the space the
    committed transforms live in.  The display scale only affects painting.
    """

    def __init__(self) -> None:
        self._measured: Dict[str, bool] = {}
        self._presets: Dict[str, PresetConfig] = {}
        self.display_scale = 0.0

    def register(self, preset: PresetConfig) -> None:
        self._presets[preset.id] = preset

    def measure(self, preset: PresetConfig, display_scale: float) -> None:
        """Record that ``preset`` has been laid out on screen."""

        self.register(preset)
        self.display_scale = display_scale
        measured = display_scale > 0
        if measured and not self._measured.get(preset.id):
            LOGGER.debug("Layout measured for preset %s at scale %.3f", preset.id, display_scale)
        self._measured[preset.id] = measured

    def is_measured(self, preset_id: str) -> bool:
        return self._measured.get(preset_id, False)

    def cell_pixel_size(self, preset_id: str) -> Tuple[float, float]:
        preset = self._presets.get(preset_id)
        if preset is None or not self.is_measured(preset_id):
            return (0.0, 0.0)
        return (
            preset.cell_width_mm * config.MM_TO_PX,
            preset.cell_height_mm * config.MM_TO_PX,
        )
