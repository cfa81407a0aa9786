"""Cover-fit and clamping math for photos placed inside grid cells.

Every function here is pure: geometry goes in as explicit arguments and a new
:class:`PhotoTransform` comes out.  Nothing in this module touches Qt, so the
engine can be exercised from plain unit tests.

A transform positions an image of native size ``(img_w, img_h)`` inside a
cell of size ``(cell_w, cell_h)``: the image is drawn at ``img * scale`` and
translated by ``(x, y)`` from the cell's top-left corner.  Two invariants hold
for every clamped transform:

* cover: ``scale >= max(cell_w / img_w, cell_h / img_h)``
* no whitespace: ``cell_w - img_w * scale <= x <= 0`` (and the same for ``y``)

When a dimension is still zero (layout not measured yet, image not decoded)
the geometry is *undetermined* and the engine returns :data:`UNDETERMINED`
instead of a transform.  Callers defer and retry; they never apply it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import ClassVar, Optional, Tuple

from . import config

#: Returned in place of a transform while cell or image geometry is unknown.
UNDETERMINED = None


class InvalidGeometryError(ValueError):
    """Raised when the engine is handed negative or non-finite geometry."""


@dataclass(frozen=True)
class PhotoTransform:
    """Uniform scale plus pan offset in cell pixels."""

    scale: float
    x: float
    y: float

    PENDING: ClassVar["PhotoTransform"]

    @property
    def is_pending(self) -> bool:
        """Return whether cover-fit has not been computed yet."""

        return self.scale == 0

    def translated(self, dx: float, dy: float) -> "PhotoTransform":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def rescaled(self, factor: float) -> "PhotoTransform":
        """Return the transform for a cell resized uniformly by ``factor``."""

        return PhotoTransform(self.scale * factor, self.x * factor, self.y * factor)


PhotoTransform.PENDING = PhotoTransform(0.0, 0.0, 0.0)


def _check_dimensions(**dims: float) -> None:
    for name, value in dims.items():
        if not math.isfinite(value) or value < 0:
            raise InvalidGeometryError(f"{name} must be a finite, non-negative number, got {value!r}")


def _check_transform(transform: PhotoTransform) -> None:
    if not all(math.isfinite(v) for v in (transform.scale, transform.x, transform.y)):
        raise InvalidGeometryError(f"transform fields must be finite, got {transform!r}")


def _is_undetermined(cell_w: float, cell_h: float, img_w: float, img_h: float) -> bool:
    _check_dimensions(cell_w=cell_w, cell_h=cell_h, img_w=img_w, img_h=img_h)
    return cell_w == 0 or cell_h == 0 or img_w == 0 or img_h == 0


def min_scale(cell_w: float, cell_h: float, img_w: float, img_h: float) -> Optional[float]:
    """Return the smallest scale at which the image covers the cell."""

    if _is_undetermined(cell_w, cell_h, img_w, img_h):
        return UNDETERMINED
    return max(cell_w / img_w, cell_h / img_h)


def cover_fit(cell_w: float, cell_h: float, img_w: float, img_h: float) -> Optional[PhotoTransform]:
    """Scale the image to exactly cover the cell and centre it."""

    scale = min_scale(cell_w, cell_h, img_w, img_h)
    if scale is UNDETERMINED:
        return UNDETERMINED
    return PhotoTransform(
        scale=scale,
        x=(cell_w - img_w * scale) / 2,
        y=(cell_h - img_h * scale) / 2,
    )


# The toolbar "Reset" action is a plain cover-fit.
reset_transform = cover_fit


def _clamp_axis(offset: float, cell: float, extent: float) -> float:
    # Floating error can push ``cell - extent`` a hair above zero at min scale.
    lower = min(cell - extent, 0.0)
    return min(max(offset, lower), 0.0)


def clamp(
    proposed: PhotoTransform,
    cell_w: float,
    cell_h: float,
    img_w: float,
    img_h: float,
) -> Optional[PhotoTransform]:
    """Constrain ``proposed`` to the legal scale range and pan window.

    Scale is limited to ``[min_scale, MAX_SCALE]``.  If the cover-fit minimum
    itself exceeds the cap, the minimum wins and the cap is exceeded.  The pan
    window is computed from the clamped scale.
    """

    _check_transform(proposed)
    lowest = min_scale(cell_w, cell_h, img_w, img_h)
    if lowest is UNDETERMINED:
        return UNDETERMINED
    scale = max(min(proposed.scale, config.MAX_SCALE), lowest)
    return PhotoTransform(
        scale=scale,
        x=_clamp_axis(proposed.x, cell_w, img_w * scale),
        y=_clamp_axis(proposed.y, cell_h, img_h * scale),
    )


def apply_zoom_delta(
    current: PhotoTransform,
    delta_scale: float,
    cell_w: float,
    cell_h: float,
    img_w: float,
    img_h: float,
) -> Optional[PhotoTransform]:
    """Add ``delta_scale`` to the scale, keep the offsets, then clamp."""

    if not math.isfinite(delta_scale):
        raise InvalidGeometryError(f"delta_scale must be finite, got {delta_scale!r}")
    proposed = replace(current, scale=current.scale + delta_scale)
    return clamp(proposed, cell_w, cell_h, img_w, img_h)


def apply_pan_delta(
    anchor: PhotoTransform,
    dx: float,
    dy: float,
    cell_w: float,
    cell_h: float,
    img_w: float,
    img_h: float,
) -> Optional[PhotoTransform]:
    """Offset the gesture-start transform ``anchor`` by ``(dx, dy)`` and clamp.

    ``dx``/``dy`` are measured from where the gesture began, not from the
    previous pointer event.
    """

    if not (math.isfinite(dx) and math.isfinite(dy)):
        raise InvalidGeometryError(f"pan delta must be finite, got ({dx!r}, {dy!r})")
    return clamp(anchor.translated(dx, dy), cell_w, cell_h, img_w, img_h)


def wheel_zoom_delta(scroll_y: float, cover_scale: float) -> float:
    """Convert a vertical scroll amount into a scale delta.

    ``scroll_y`` is positive when scrolling down, which zooms out.  The step
    is proportional to the cover scale so zoom speed feels the same for small
    and large images.
    """

    return -scroll_y * config.WHEEL_ZOOM_FACTOR * cover_scale


def step_zoom_delta(direction: str, cover_scale: float) -> float:
    """Return the toolbar zoom step for ``direction`` (``"in"`` or ``"out"``)."""

    step = config.ZOOM_STEP_RATIO * cover_scale
    if direction == "in":
        return step
    if direction == "out":
        return -step
    raise ValueError(f"Unknown zoom direction: {direction!r}")


def zoom_percentage(
    transform: PhotoTransform,
    cell_w: float,
    cell_h: float,
    img_w: float,
    img_h: float,
) -> Optional[int]:
    """Return the zoom level relative to cover-fit, as a whole percentage."""

    lowest = min_scale(cell_w, cell_h, img_w, img_h)
    if lowest is UNDETERMINED:
        return UNDETERMINED
    return int(math.floor(transform.scale / lowest * 100 + 0.5))


def image_rect(transform: PhotoTransform, img_w: float, img_h: float) -> Tuple[float, float, float, float]:
    """Return ``(x, y, width, height)`` of the drawn image in cell coordinates."""

    return (
        transform.x,
        transform.y,
        img_w * transform.scale,
        img_h * transform.scale,
    )
