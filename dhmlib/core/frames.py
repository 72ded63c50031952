"""Calibrated real-valued images exchanged with the host."""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

__all__ = ["HologramFrame"]


@dataclass(frozen=True)
class HologramFrame:
    """Real 2D image with a square pixel-pitch calibration.

    Produced by hologram synthesis (the hologram itself and the optional
    amplitude/phase/... views), consumed by reconstruction.

    Attributes:
        data: Real array, shape (ny, nx).
        pitch: Pixel pitch in ``unit`` per pixel.
        unit: Length unit of the calibration. Default "um".
        title: Display title, e.g. "Hologram" or "Phase".
    """

    data: np.ndarray = field(repr=False)
    pitch: float
    unit: str = "um"
    title: str = "Hologram"

    @property
    def shape(self) -> Tuple[int, int]:
        """Return (ny, nx) shape."""
        return self.data.shape

    @property
    def spacing(self) -> Tuple[float, float]:
        """Pitch as (dy, dx)."""
        return (self.pitch, self.pitch)
