"""Persisted user settings for synthesis and reconstruction.

Settings are stored in user units in a flat key/value preference store
(any mutable mapping; values may be strings, as read back from an INI
file or a Qt settings object, or native numbers and booleans). The
settings objects convert them to the μm-based parameter structs used by
the rest of the library.

Example:
    ```python
    prefs = {"IMG_LAMBDA": "532", "IMG_MO_MAGNIFICATION": "20"}
    settings = SimulationSettings.from_preferences(prefs)
    params = settings.to_parameters()
    params.illumination.wavelength  # 0.532

    settings = settings.update(na=1.7)  # rejected, NA kept at 0.65
    prefs.update(settings.to_preferences())
    ```
"""

import logging
import math
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Tuple

from .core.optics import OpticalParameters
from .synthesis.parameters import (
    IlluminationParameters,
    ImagingParameters,
    InputParameters,
    InterferenceParameters,
    SynthesisOutput,
    SynthesisParameters,
)
from .utils.units import from_um, to_um

__all__ = [
    "SimulationSettings",
    "ReconstructionSettings",
    "OUTPUT_KEYS",
]

logger = logging.getLogger(__name__)

# =============================================================================
# Preference keys
# =============================================================================
IMG_LAMBDA = "IMG_LAMBDA"
IMG_ROUGHNESS = "IMG_ROUGHNESS"
IMG_MO_MAGNIFICATION = "IMG_MO_MAGNIFICATION"
IMG_MO_NA = "IMG_MO_NA"
IMG_TL_FOCAL = "IMG_TL_FOCAL"
IMG_INPUT_WIDTH = "IMG_INPUT_WIDTH"
IMG_INPUT_HEIGHT = "IMG_INPUT_HEIGHT"
IMG_LAMBDA_UNITS = "IMG_LAMBDA_UNITS"
IMG_TL_FOCAL_UNITS = "IMG_TL_FOCAL_UNITS"
IMG_INPUT_UNITS = "IMG_INPUT_UNITS"

INTF_DIFFLIMITED = "INTF_DIFFLIMITED"
INTF_AZIMUTH = "INTF_AZIMUTH"
INTF_POLAR = "INTF_POLAR"

IN_AMPLI_MIN = "IN_AMPLI_MIN"
IN_AMPLI_MAX = "IN_AMPLI_MAX"
IN_PHASE_MIN = "IN_PHASE_MIN"
IN_PHASE_MAX = "IN_PHASE_MAX"

OUTPUT_KEYS = {
    SynthesisOutput.AMPLITUDE: "OUT_AMPLITUDE_CHECKED",
    SynthesisOutput.HOLOGRAM: "OUT_HOLOGRAM_CHECKED",
    SynthesisOutput.IMAGINARY: "OUT_IMAGINARY_CHECKED",
    SynthesisOutput.INTENSITY: "OUT_INTENSITY_CHECKED",
    SynthesisOutput.PHASE: "OUT_PHASE_CHECKED",
    SynthesisOutput.REAL: "OUT_REAL_CHECKED",
}

REC_LAMBDA = "REC_LAMBDA"
REC_MO_MAGNIFICATION = "REC_MO_MAGNIFICATION"
REC_MO_NA = "REC_MO_NA"
REC_TL_FOCAL = "REC_TL_FOCAL"
REC_INPUT_WIDTH = "REC_INPUT_WIDTH"
REC_INPUT_HEIGHT = "REC_INPUT_HEIGHT"

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def _as_float(value: Any) -> float:
    return float(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ValueError(f"Not a boolean: {value!r}")
    return bool(value)


def _read(prefs: Mapping[str, Any], key: str, default, convert):
    """Read one preference, falling back to ``default`` when absent or bad."""
    if key not in prefs:
        return default
    try:
        value = convert(prefs[key])
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid preference %s=%r", key, prefs[key])
        return default
    if isinstance(value, float) and math.isnan(value):
        return default
    return value


class _Settings:
    """Shared ``update`` behaviour for the frozen settings dataclasses."""

    def update(self, **changes):
        """Return a copy with ``changes`` applied field by field.

        A value that fails validation is logged and the previous value
        is kept; the remaining changes are still applied.

        Raises:
            TypeError: Unknown field name.
        """
        names = {f.name for f in fields(self)}
        unknown = set(changes) - names
        if unknown:
            raise TypeError(f"Unknown settings: {', '.join(sorted(unknown))}")

        current = self
        for name, value in changes.items():
            try:
                current = replace(current, **{name: value})
            except (TypeError, ValueError) as exc:
                logger.warning(
                    "Rejected %s=%r (keeping %r): %s",
                    name, value, getattr(current, name), exc,
                )
        return current

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SimulationSettings(_Settings):
    """Hologram synthesis settings in user units.

    Attributes:
        wavelength: Illumination wavelength in ``wavelength_unit``.
        roughness: Surface roughness as a fraction of the wavelength.
        magnification: Objective magnification.
        na: Objective numerical aperture.
        tube_focal: Tube lens focal length in ``tube_focal_unit``.
        input_width: Sample width in ``input_unit``.
        input_height: Sample height in ``input_unit``.
        diffraction_limited: Choose the reference angles automatically.
        azimuth: Azimuthal reference angle (rad).
        polar: Polar reference angle (rad).
        amp_range: (min, max) amplitude of the input object.
        phase_range: (min, max) phase of the input object (rad).
        outputs: Requested views as one-letter codes, e.g. "HP".
    """

    wavelength: float = 633.0
    wavelength_unit: str = "nm"
    roughness: float = 0.5
    magnification: float = 40.0
    na: float = 0.65
    tube_focal: float = 200.0
    tube_focal_unit: str = "mm"
    input_width: float = 200.0
    input_height: float = 200.0
    input_unit: str = "um"
    diffraction_limited: bool = False
    azimuth: float = math.pi / 4
    polar: float = 0.01
    amp_range: Tuple[float, float] = (1.0, 2.0)
    phase_range: Tuple[float, float] = (-math.pi / 4, math.pi / 4)
    outputs: str = "H"

    def __post_init__(self) -> None:
        # Building the parameter structs runs their validation
        self.to_parameters()
        for lo, hi, name in (
            (*self.amp_range, "amplitude"),
            (*self.phase_range, "phase"),
        ):
            if lo > hi:
                raise ValueError(f"Empty {name} range: [{lo}, {hi}]")

    def to_parameters(self) -> SynthesisParameters:
        """Convert to μm-based synthesis parameters."""
        return SynthesisParameters(
            input=InputParameters(
                width=to_um(self.input_width, self.input_unit),
                height=to_um(self.input_height, self.input_unit),
                amp_range=tuple(self.amp_range),
                phase_range=tuple(self.phase_range),
            ),
            illumination=IlluminationParameters(
                wavelength=to_um(self.wavelength, self.wavelength_unit),
                roughness=self.roughness,
            ),
            imaging=ImagingParameters(
                magnification=self.magnification,
                na=self.na,
                tube_focal=to_um(self.tube_focal, self.tube_focal_unit),
            ),
            angles=InterferenceParameters(
                diffraction_limited=self.diffraction_limited,
                azimuth=self.azimuth,
                polar=self.polar,
            ),
        )

    @property
    def output_kinds(self) -> Tuple[SynthesisOutput, ...]:
        return SynthesisOutput.from_codes(self.outputs)

    @classmethod
    def from_preferences(cls, prefs: Mapping[str, Any]) -> "SimulationSettings":
        """Load settings; absent or invalid entries take the defaults."""
        d = cls()
        outputs = "".join(
            kind.value
            for kind, key in OUTPUT_KEYS.items()
            if _read(prefs, key, kind is SynthesisOutput.HOLOGRAM, _as_bool)
        )
        values = dict(
            wavelength=_read(prefs, IMG_LAMBDA, d.wavelength, _as_float),
            wavelength_unit=_read(prefs, IMG_LAMBDA_UNITS, d.wavelength_unit, str),
            roughness=_read(prefs, IMG_ROUGHNESS, d.roughness, _as_float),
            magnification=_read(prefs, IMG_MO_MAGNIFICATION, d.magnification, _as_float),
            na=_read(prefs, IMG_MO_NA, d.na, _as_float),
            tube_focal=_read(prefs, IMG_TL_FOCAL, d.tube_focal, _as_float),
            tube_focal_unit=_read(prefs, IMG_TL_FOCAL_UNITS, d.tube_focal_unit, str),
            input_width=_read(prefs, IMG_INPUT_WIDTH, d.input_width, _as_float),
            input_height=_read(prefs, IMG_INPUT_HEIGHT, d.input_height, _as_float),
            input_unit=_read(prefs, IMG_INPUT_UNITS, d.input_unit, str),
            diffraction_limited=_read(
                prefs, INTF_DIFFLIMITED, d.diffraction_limited, _as_bool
            ),
            azimuth=_read(prefs, INTF_AZIMUTH, d.azimuth, _as_float),
            polar=_read(prefs, INTF_POLAR, d.polar, _as_float),
            amp_range=(
                _read(prefs, IN_AMPLI_MIN, d.amp_range[0], _as_float),
                _read(prefs, IN_AMPLI_MAX, d.amp_range[1], _as_float),
            ),
            phase_range=(
                _read(prefs, IN_PHASE_MIN, d.phase_range[0], _as_float),
                _read(prefs, IN_PHASE_MAX, d.phase_range[1], _as_float),
            ),
            outputs=outputs,
        )
        return d.update(**values)

    def to_preferences(self) -> Dict[str, Any]:
        prefs = {
            IMG_LAMBDA: self.wavelength,
            IMG_LAMBDA_UNITS: self.wavelength_unit,
            IMG_ROUGHNESS: self.roughness,
            IMG_MO_MAGNIFICATION: self.magnification,
            IMG_MO_NA: self.na,
            IMG_TL_FOCAL: self.tube_focal,
            IMG_TL_FOCAL_UNITS: self.tube_focal_unit,
            IMG_INPUT_WIDTH: self.input_width,
            IMG_INPUT_HEIGHT: self.input_height,
            IMG_INPUT_UNITS: self.input_unit,
            INTF_DIFFLIMITED: self.diffraction_limited,
            INTF_AZIMUTH: self.azimuth,
            INTF_POLAR: self.polar,
            IN_AMPLI_MIN: self.amp_range[0],
            IN_AMPLI_MAX: self.amp_range[1],
            IN_PHASE_MIN: self.phase_range[0],
            IN_PHASE_MAX: self.phase_range[1],
        }
        kinds = self.output_kinds
        for kind, key in OUTPUT_KEYS.items():
            prefs[key] = kind in kinds
        return prefs


@dataclass(frozen=True)
class ReconstructionSettings(_Settings):
    """Live reconstruction settings in user units.

    The camera sensor size is stored rather than the pixel pitch; the
    pitch follows from the frame shape.

    Attributes:
        wavelength: Wavelength in ``wavelength_unit``.
        magnification: Objective magnification.
        na: Objective numerical aperture.
        tube_focal: Tube lens focal length in ``tube_focal_unit``.
        input_width: Sensor width in ``input_unit``.
        input_height: Sensor height in ``input_unit``.
    """

    wavelength: float = 633.0
    wavelength_unit: str = "nm"
    magnification: float = 40.0
    na: float = 0.65
    tube_focal: float = 200.0
    tube_focal_unit: str = "mm"
    input_width: float = 5.0
    input_height: float = 5.0
    input_unit: str = "mm"

    def __post_init__(self) -> None:
        self.to_optics((1, 1))

    def to_optics(self, shape: Tuple[int, int]) -> OpticalParameters:
        """Convert to μm-based optics for frames of the given (ny, nx) shape."""
        ny, nx = shape
        return OpticalParameters(
            wavelength=to_um(self.wavelength, self.wavelength_unit),
            dx=to_um(self.input_width, self.input_unit) / nx,
            dy=to_um(self.input_height, self.input_unit) / ny,
            magnification=self.magnification,
            na=self.na,
            tube_focal=to_um(self.tube_focal, self.tube_focal_unit),
        )

    @classmethod
    def from_preferences(cls, prefs: Mapping[str, Any]) -> "ReconstructionSettings":
        """Load settings; absent or invalid entries take the defaults."""
        d = cls()
        return d.update(
            wavelength=_read(prefs, REC_LAMBDA, d.wavelength, _as_float),
            magnification=_read(prefs, REC_MO_MAGNIFICATION, d.magnification, _as_float),
            na=_read(prefs, REC_MO_NA, d.na, _as_float),
            tube_focal=_read(prefs, REC_TL_FOCAL, d.tube_focal, _as_float),
            input_width=_read(prefs, REC_INPUT_WIDTH, d.input_width, _as_float),
            input_height=_read(prefs, REC_INPUT_HEIGHT, d.input_height, _as_float),
        )

    def to_preferences(self) -> Dict[str, Any]:
        # Stored in the fixed units of the reconstruction dialog
        return {
            REC_LAMBDA: from_um(to_um(self.wavelength, self.wavelength_unit), "nm"),
            REC_MO_MAGNIFICATION: self.magnification,
            REC_MO_NA: self.na,
            REC_TL_FOCAL: from_um(to_um(self.tube_focal, self.tube_focal_unit), "mm"),
            REC_INPUT_WIDTH: from_um(to_um(self.input_width, self.input_unit), "mm"),
            REC_INPUT_HEIGHT: from_um(to_um(self.input_height, self.input_unit), "mm"),
        }
