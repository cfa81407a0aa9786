"""Printable grid presets.

Measurements are in millimetres.  Cells are laid out left to right, top to
bottom, and a cell keeps its identifier (``"row-col"``) for as long as its
preset is active.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from .collection import CellId, cell_id


class PaperSize(str, Enum):
    A4 = "A4"
    A5 = "A5"
    A6 = "A6"


@dataclass(frozen=True)
class PresetConfig:
    """Paper and grid geometry for one printable layout."""

    id: str
    name: str
    paper_size: PaperSize
    paper_width_mm: float
    paper_height_mm: float
    cell_width_mm: float
    cell_height_mm: float
    gap_mm: float
    rows: int
    cols: int

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError("Grid must have positive dimensions")
        if self.cell_width_mm <= 0 or self.cell_height_mm <= 0:
            raise ValueError("Cells must have positive dimensions")

    @property
    def total_cells(self) -> int:
        return self.rows * self.cols

    def cell_ids(self) -> List[CellId]:
        return [cell_id(r, c) for r in range(self.rows) for c in range(self.cols)]


PRESETS: Dict[str, PresetConfig] = {
    "POLAROID_A4": PresetConfig(
        id="POLAROID_A4",
        name="A4 Polaroid style (3x3)",
        paper_size=PaperSize.A4,
        paper_width_mm=210,
        paper_height_mm=297,
        cell_width_mm=62.2,
        cell_height_mm=90.6,
        gap_mm=3,
        rows=3,
        cols=3,
    ),
    "MINI_A4": PresetConfig(
        id="MINI_A4",
        name="A4 mini cards (6x6)",
        paper_size=PaperSize.A4,
        paper_width_mm=210,
        paper_height_mm=297,
        cell_width_mm=30,
        cell_height_mm=40,
        gap_mm=3,
        rows=6,
        cols=6,
    ),
    "MINI_A5": PresetConfig(
        id="MINI_A5",
        name="A5 landscape collage (3x6)",
        paper_size=PaperSize.A5,
        paper_width_mm=148,
        paper_height_mm=210,
        cell_width_mm=40,  # landscape cells
        cell_height_mm=30,
        gap_mm=3,
        rows=6,
        cols=3,
    ),
    "MINI_A6": PresetConfig(
        id="MINI_A6",
        name="A6 pocket collage (3x3)",
        paper_size=PaperSize.A6,
        paper_width_mm=105,
        paper_height_mm=148,
        cell_width_mm=30,
        cell_height_mm=40,
        gap_mm=3,
        rows=3,
        cols=3,
    ),
}

DEFAULT_PRESET = PRESETS["POLAROID_A4"]


def get_preset(preset_id: str) -> PresetConfig:
    """Return the preset named ``preset_id``."""

    try:
        return PRESETS[preset_id]
    except KeyError:
        known = ", ".join(sorted(PRESETS))
        raise KeyError(f"Unknown preset {preset_id!r}; expected one of: {known}") from None
