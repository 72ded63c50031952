"""Presentation remapping of reconstruction outputs.

Outputs are turned into 8-bit images with a straight-line calibration
``value = offset + slope * byte`` so that the host can still show
physical values. The source arrays are never modified.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .pipeline import ReconstructionMode, ReconstructionOutput

__all__ = ["DisplayImage", "log_scale", "to_display"]


@dataclass(frozen=True)
class DisplayImage:
    """8-bit rendering of a reconstruction output.

    Attributes:
        data: uint8 array, shape (ny, nx).
        offset: Value represented by byte 0.
        slope: Value increment per byte level.
        unit: Value unit of the calibration.
        title: Display title.
        spacing: Pixel calibration as (dy, dx) in μm, or None.
    """

    data: np.ndarray = field(repr=False)
    offset: float
    slope: float
    unit: str
    title: str
    spacing: Optional[tuple] = None

    def to_values(self) -> np.ndarray:
        """Map bytes back to (possibly log-scaled) values."""
        return self.offset + self.slope * self.data.astype(np.float64)


def log_scale(values: np.ndarray) -> np.ndarray:
    """Logarithmic remap ``log(1 + v)`` of non-negative magnitudes."""
    return np.log1p(np.maximum(values, 0.0))


def to_display(
    output: ReconstructionOutput,
    log: bool = False,
    title: Optional[str] = None,
) -> DisplayImage:
    """Render an output as an 8-bit image.

    Args:
        output: Reconstruction output. Not modified.
        log: Apply :func:`log_scale` first. Ignored for phase.
        title: Display title. Defaults to the output kind.

    Returns:
        DisplayImage with min/max linear scaling to [0, 255].
    """
    values = output.data.astype(np.float64)
    if log and output.kind is not ReconstructionMode.PHASE:
        values = log_scale(values)

    vmin = float(values.min())
    vmax = float(values.max())
    slope = (vmax - vmin) / 255

    if slope > 0:
        data = np.round((values - vmin) / slope).astype(np.uint8)
    else:
        data = np.zeros(values.shape, dtype=np.uint8)

    return DisplayImage(
        data=data,
        offset=vmin,
        slope=slope,
        unit=output.unit,
        title=title if title is not None else output.kind.value.capitalize(),
        spacing=output.spacing,
    )
