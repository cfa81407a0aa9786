"""Tests for preset definitions and page geometry."""

from __future__ import annotations

import pytest

from collager import config
from collager.layout import PresetLayout, cell_rect, fit_scale, mm_to_px
from collager.presets import DEFAULT_PRESET, PRESETS, get_preset


def test_presets_cell_counts():
    assert {p.id: p.total_cells for p in PRESETS.values()} == {
        "POLAROID_A4": 9,
        "MINI_A4": 36,
        "MINI_A5": 18,
        "MINI_A6": 9,
    }
    assert DEFAULT_PRESET.id == "POLAROID_A4"


def test_cell_ids_are_row_major():
    ids = PRESETS["MINI_A5"].cell_ids()
    assert ids[:4] == ["0-0", "0-1", "0-2", "1-0"]
    assert len(ids) == 18


def test_get_preset_unknown_raises():
    with pytest.raises(KeyError, match="Unknown preset"):
        get_preset("LETTER")


def test_cell_rect_centres_rows_inside_padding():
    preset = PRESETS["POLAROID_A4"]
    x, y, w, h = cell_rect(preset, "0-0")
    assert (w, h) == (62.2, 90.6)
    assert x == pytest.approx(3 + (204 - (3 * 62.2 + 2 * 3)) / 2)
    assert y == 3

    x2, y2, _, _ = cell_rect(preset, "1-2")
    assert x2 == pytest.approx(x + 2 * (62.2 + 3))
    assert y2 == pytest.approx(3 + 90.6 + 3)


def test_cell_rect_scales_with_resolution():
    preset = PRESETS["MINI_A6"]
    base = cell_rect(preset, "2-1")
    scaled = cell_rect(preset, "2-1", px_per_mm=4)
    assert scaled == pytest.approx(tuple(v * 4 for v in base))


def test_cell_rect_rejects_out_of_grid_cell():
    with pytest.raises(ValueError):
        cell_rect(PRESETS["MINI_A6"], "3-0")


def test_mm_to_px():
    assert mm_to_px(25.4, 300) == pytest.approx(300)


def test_fit_scale_is_capped_and_padded():
    preset = PRESETS["POLAROID_A4"]
    assert fit_scale(10_000, 10_000, preset) == config.MAX_VIEWPORT_SCALE
    paper_h = preset.paper_height_mm * config.MM_TO_PX
    assert fit_scale(10_000, paper_h / 2 + config.VIEWPORT_PADDING, preset) == pytest.approx(0.5)
    assert fit_scale(50, 50, preset) == 0.0


def test_layout_reports_zero_until_measured():
    preset = PRESETS["MINI_A4"]
    layout = PresetLayout()
    layout.register(preset)
    assert layout.cell_pixel_size(preset.id) == (0.0, 0.0)

    layout.measure(preset, 0.8)
    assert layout.cell_pixel_size(preset.id) == pytest.approx((30 * config.MM_TO_PX, 40 * config.MM_TO_PX))

    layout.measure(preset, 0.0)
    assert layout.cell_pixel_size(preset.id) == (0.0, 0.0)


def test_layout_unknown_preset_is_undetermined():
    assert PresetLayout().cell_pixel_size("POLAROID_A4") == (0.0, 0.0)
