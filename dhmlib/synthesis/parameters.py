"""Parameter structs and readiness validation for hologram synthesis.

Synthesis needs five pieces: input geometry, illumination, imaging
optics, reference angles and the input field itself. They are gathered
in a :class:`SynthesisRequest` and checked by :func:`validate`, which
returns either :class:`Ready` or :class:`NotReady` naming what is
missing.
"""

import enum
import math
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple, Union

import numpy as np

__all__ = [
    "InputKind",
    "SynthesisOutput",
    "InputParameters",
    "IlluminationParameters",
    "ImagingParameters",
    "InterferenceParameters",
    "SynthesisParameters",
    "SynthesisRequest",
    "Ready",
    "NotReady",
    "validate",
]

MAX_ANGLE = 2 * math.pi


class InputKind(enum.Enum):
    """Representation of the two input planes."""

    REAL_IMAGINARY = 1
    AMPLITUDE_PHASE = 2


class SynthesisOutput(enum.Enum):
    """Views that synthesis can produce, keyed by their one-letter code."""

    AMPLITUDE = "A"
    HOLOGRAM = "H"
    IMAGINARY = "J"
    INTENSITY = "I"
    PHASE = "P"
    REAL = "R"

    @property
    def title(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_codes(cls, codes: str) -> Tuple["SynthesisOutput", ...]:
        """Parse a string of codes such as ``"HAP"``; unknown codes are skipped."""
        known = {o.value: o for o in cls}
        return tuple(known[c] for c in codes if c in known)


@dataclass(frozen=True)
class InputParameters:
    """Geometry and rescaling ranges of the input object.

    Attributes:
        width: Sample width (μm).
        height: Sample height (μm).
        amp_range: (min, max) amplitude after rescaling.
        phase_range: (min, max) phase in radians after rescaling.
    """

    width: float
    height: float
    amp_range: Tuple[float, float] = (1.0, 2.0)
    phase_range: Tuple[float, float] = (-math.pi / 4, math.pi / 4)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Sample size must be positive, got {self.width}x{self.height}"
            )


@dataclass(frozen=True)
class IlluminationParameters:
    """Illumination source.

    Attributes:
        wavelength: Wavelength (μm).
        roughness: Surface roughness as a fraction of the wavelength.
            Peak-to-valley (3σ) height error is ``roughness / 2 * λ``.
    """

    wavelength: float
    roughness: float = 0.0

    def __post_init__(self) -> None:
        if self.wavelength <= 0:
            raise ValueError(f"Wavelength must be positive, got {self.wavelength}")
        if self.roughness < 0:
            raise ValueError(f"Roughness must be non-negative, got {self.roughness}")

    @property
    def roughness_sigma(self) -> float:
        """Standard deviation of the surface height error (μm)."""
        return (self.roughness / 2) * self.wavelength / 3


@dataclass(frozen=True)
class ImagingParameters:
    """Microscope objective and tube lens.

    Attributes:
        magnification: Objective magnification.
        na: Objective numerical aperture, in (0, 1].
        tube_focal: Tube lens focal length (μm).
    """

    magnification: float
    na: float
    tube_focal: float

    def __post_init__(self) -> None:
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
    def objective_focal(self) -> float:
        """Objective focal length (μm)."""
        return self.tube_focal / self.magnification


@dataclass(frozen=True)
class InterferenceParameters:
    """Direction of the tilted plane-wave reference.

    Attributes:
        diffraction_limited: If True, the angles are chosen at the
            maximum resolvable fringe frequency and the values below are
            ignored.
        azimuth: Azimuthal angle (rad), in [-2π, 2π].
        polar: Polar angle (rad), in [-2π, 2π].
    """

    diffraction_limited: bool = False
    azimuth: float = math.pi / 4
    polar: float = 0.01

    def __post_init__(self) -> None:
        for name in ("azimuth", "polar"):
            value = getattr(self, name)
            if not -MAX_ANGLE <= value <= MAX_ANGLE:
                raise ValueError(f"{name} must lie in [-2π, 2π], got {value}")


@dataclass(frozen=True)
class SynthesisParameters:
    """Complete, validated parameter set for one synthesis run."""

    input: InputParameters
    illumination: IlluminationParameters
    imaging: ImagingParameters
    angles: InterferenceParameters


@dataclass(frozen=True)
class SynthesisRequest:
    """Possibly incomplete collection of synthesis inputs."""

    input: Optional[InputParameters] = None
    illumination: Optional[IlluminationParameters] = None
    imaging: Optional[ImagingParameters] = None
    angles: Optional[InterferenceParameters] = None
    field: Optional[np.ndarray] = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class Ready:
    """All prerequisites are present."""

    params: SynthesisParameters
    field: np.ndarray = field(repr=False, compare=False)


@dataclass(frozen=True)
class NotReady:
    """Some prerequisites are missing.

    Attributes:
        missing: Subset of {"input", "illumination", "imaging", "angle", "field"}.
    """

    missing: FrozenSet[str]


def validate(request: SynthesisRequest) -> Union[Ready, NotReady]:
    """Check a request for completeness.

    Example:
        >>> validate(SynthesisRequest()).missing == {
        ...     "input", "illumination", "imaging", "angle", "field"}
        True
    """
    missing = set()
    if request.input is None:
        missing.add("input")
    if request.illumination is None:
        missing.add("illumination")
    if request.imaging is None:
        missing.add("imaging")
    if request.angles is None:
        missing.add("angle")
    if request.field is None:
        missing.add("field")

    if missing:
        return NotReady(frozenset(missing))

    params = SynthesisParameters(
        input=request.input,
        illumination=request.illumination,
        imaging=request.imaging,
        angles=request.angles,
    )
    return Ready(params, request.field)
