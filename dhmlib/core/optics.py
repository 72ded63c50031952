"""Optical system and tuning parameter data structures."""

from dataclasses import dataclass
from typing import Tuple

__all__ = ["OpticalParameters", "TuningParameters"]


@dataclass(frozen=True)
class OpticalParameters:
    """Immutable parameters of a DHM recording system.

    All physical dimensions are in microns.

    Attributes:
        wavelength: Illumination wavelength (μm).
        dx: Sample pitch of the recorded frame along x (μm/px).
        dy: Sample pitch of the recorded frame along y (μm/px).
        magnification: Lateral magnification of the microscope objective.
        na: Numerical aperture of the objective, in (0, 1].
        tube_focal: Focal length of the tube lens (μm).

    Example:
        ```python
        optics = OpticalParameters(
            wavelength=0.633, dx=3.45, dy=3.45,
            magnification=40.0, na=0.65, tube_focal=200e3,
        )
        print(optics.objective_focal)  # 5000.0
        ```
    """

    wavelength: float
    dx: float
    dy: float
    magnification: float = 1.0
    na: float = 1.0
    tube_focal: float = 200e3

    def __post_init__(self) -> None:
        """Validate optical parameters."""
        if self.wavelength <= 0:
            raise ValueError(f"Wavelength must be positive, got {self.wavelength}")
        if self.dx <= 0 or self.dy <= 0:
            raise ValueError(
                f"Pixel sizes must be positive, got dx={self.dx}, dy={self.dy}"
            )
        if self.magnification <= 0:
            raise ValueError(
                f"Magnification must be positive, got {self.magnification}"
            )
        if not 0 < self.na <= 1:
            raise ValueError(f"NA must lie in (0, 1], got {self.na}")
        if self.tube_focal <= 0:
            raise ValueError(
                f"Tube lens focal length must be positive, got {self.tube_focal}"
            )

    @property
    def spacing(self) -> Tuple[float, float]:
        """Frame pitch as (dy, dx) in μm."""
        return (self.dy, self.dx)

    @property
    def objective_focal(self) -> float:
        """Focal length of the microscope objective (μm)."""
        return self.tube_focal / self.magnification

    @property
    def image_spacing(self) -> Tuple[float, float]:
        """Pitch referred to the sample plane as (dy, dx) in μm."""
        return (self.dy / self.magnification, self.dx / self.magnification)


@dataclass(frozen=True)
class TuningParameters:
    """Fine-tuning applied during reconstruction.

    Tilt angles derived from ``fx`` and ``fy`` depend on the wavelength,
    the pitch and the frame size, so they are not stored here. Use
    :func:`dhmlib.optics.tuning.tilt_angles` to compute them against the
    current optics.

    Attributes:
        z: Refocus distance (μm). Positive values propagate forward.
        fx: Residual spectral shift along x (pixels).
        fy: Residual spectral shift along y (pixels).
        linear_phase: Constant phase offset (rad).
    """

    z: float = 0.0
    fx: float = 0.0
    fy: float = 0.0
    linear_phase: float = 0.0

    @property
    def is_tilted(self) -> bool:
        """True when a phase compensation field is required."""
        return self.fx != 0.0 or self.fy != 0.0 or self.linear_phase != 0.0

    def refocused(self, dz: float) -> "TuningParameters":
        """Return a copy with ``z`` shifted by ``dz``."""
        return TuningParameters(
            z=self.z + dz, fx=self.fx, fy=self.fy, linear_phase=self.linear_phase
        )
