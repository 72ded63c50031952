"""Hologram synthesis entry points.

:func:`synthesize` is a pure function of validated parameters.
:class:`HologramSynthesizer` is the stateful front end used by
interactive hosts: parameters are set piecemeal and ``create_image``
runs only once every prerequisite is present.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple, Union

import numpy as np

from ..core.field import amplitude, intensity, phase
from ..core.frames import HologramFrame
from ..utils.fourier import SpectralTransform
from .inputs import build_input_field
from .optical_train import (
    admissible_na,
    diffraction_limited_angles,
    first_lens,
    form_hologram,
    pupil_plane,
    second_lens,
)
from .parameters import (
    IlluminationParameters,
    ImagingParameters,
    InputKind,
    InputParameters,
    InterferenceParameters,
    NotReady,
    SynthesisOutput,
    SynthesisParameters,
    SynthesisRequest,
    validate,
)

__all__ = ["SynthesisResult", "synthesize", "HologramSynthesizer"]

logger = logging.getLogger(__name__)


@dataclass
class SynthesisResult:
    """Result of a synthesis run.

    Attributes:
        hologram: Recorded hologram with the camera-plane calibration.
        object_field: Complex object field at the camera plane.
        input_pitch: Pitch of the input field (μm).
        focal_pitch: Pitch in the objective's back focal plane (μm).
        output_pitch: Pitch at the camera plane (μm).
        polar: Polar reference angle actually used (rad).
        azimuth: Azimuthal reference angle actually used (rad).
        diffraction_limited: Whether the angles were chosen automatically.
        max_na: None if the objective NA is admissible, otherwise the
            maximum admissible NA.
        images: Requested views keyed by output kind.
    """

    hologram: HologramFrame
    object_field: np.ndarray = field(repr=False)
    input_pitch: float
    focal_pitch: float
    output_pitch: float
    polar: float
    azimuth: float
    diffraction_limited: bool
    max_na: Optional[float] = None
    images: Dict[SynthesisOutput, HologramFrame] = field(default_factory=dict, repr=False)

    @property
    def is_admissible(self) -> bool:
        """True when the NA fits the camera sampling."""
        return self.max_na is None


def _view(kind: SynthesisOutput, object_field: np.ndarray, hologram: np.ndarray) -> np.ndarray:
    if kind is SynthesisOutput.AMPLITUDE:
        return amplitude(object_field)
    if kind is SynthesisOutput.HOLOGRAM:
        return hologram
    if kind is SynthesisOutput.IMAGINARY:
        return object_field.imag.copy()
    if kind is SynthesisOutput.INTENSITY:
        return intensity(object_field)
    if kind is SynthesisOutput.PHASE:
        return phase(object_field)
    return object_field.real.copy()


def synthesize(
    params: SynthesisParameters,
    field: np.ndarray,
    outputs: Iterable[SynthesisOutput] = (SynthesisOutput.HOLOGRAM,),
    transform: Optional[SpectralTransform] = None,
) -> SynthesisResult:
    """Simulate the recording of an off-axis hologram.

    Args:
        params: Validated synthesis parameters.
        field: Complex input object field, shape (ny, nx).
        outputs: Views to produce in ``SynthesisResult.images``.
        transform: Spectral transform. Defaults to NumPy FFT.

    Returns:
        SynthesisResult with the hologram, calibration and diagnostics.

    Example:
        >>> params = SynthesisParameters(
        ...     input=InputParameters(width=200.0, height=200.0),
        ...     illumination=IlluminationParameters(wavelength=0.633),
        ...     imaging=ImagingParameters(magnification=40, na=0.65, tube_focal=200e3),
        ...     angles=InterferenceParameters(diffraction_limited=True),
        ... )
        >>> result = synthesize(params, np.ones((256, 256), dtype=complex))
    """
    wavelength = params.illumination.wavelength
    imaging = params.imaging

    input_pitch = params.input.width / field.shape[-1]

    focal_field, focal_pitch = first_lens(field, input_pitch, wavelength, imaging, transform)
    pupil_field = pupil_plane(focal_field, focal_pitch, imaging)
    object_field, output_pitch = second_lens(
        pupil_field, focal_pitch, wavelength, imaging, transform
    )

    if params.angles.diffraction_limited:
        polar, azimuth = diffraction_limited_angles(wavelength, output_pitch)
    else:
        polar, azimuth = params.angles.polar, params.angles.azimuth

    hologram = form_hologram(object_field, output_pitch, wavelength, polar, azimuth)
    logger.debug(
        "Diffraction limited: %s; polar: %f, azimuth: %f",
        params.angles.diffraction_limited,
        polar,
        azimuth,
    )

    max_na = admissible_na(wavelength, output_pitch, imaging)
    if max_na is not None:
        logger.warning(
            "The objective is inadequate for the system; maximum admissible NA is %s",
            max_na,
        )

    images = {
        kind: HologramFrame(_view(kind, object_field, hologram), output_pitch, title=kind.title)
        for kind in outputs
    }

    return SynthesisResult(
        hologram=HologramFrame(hologram, output_pitch, title="Hologram"),
        object_field=object_field,
        input_pitch=input_pitch,
        focal_pitch=focal_pitch,
        output_pitch=output_pitch,
        polar=polar,
        azimuth=azimuth,
        diffraction_limited=params.angles.diffraction_limited,
        max_na=max_na,
        images=images,
    )


class HologramSynthesizer:
    """Stateful synthesis front end.

    Parameters are set one group at a time. ``create_image`` validates
    the collected request and does nothing (returns None) until every
    prerequisite is present. Invalid values raise ``ValueError`` from
    the setter and leave the previous value in place.

    Not safe for concurrent mutation; use from a single caller.

    Args:
        outputs: Views to produce, as SynthesisOutput members or a
            string of one-letter codes such as "HAP".
        seed: Seed or generator for the roughness noise.

    Example:
        ```python
        synth = HologramSynthesizer(outputs="HP")
        synth.set_input_parameters(200.0, 200.0)
        synth.set_illumination(0.633, 0.5)
        synth.set_imaging(40.0, 0.65, 200e3)
        synth.set_angles(diffraction_limited=True)
        synth.set_input_images(InputKind.AMPLITUDE_PHASE, amp_img, phase_img)
        result = synth.create_image()
        ```
    """

    def __init__(
        self,
        outputs: Union[str, Iterable[SynthesisOutput]] = (SynthesisOutput.HOLOGRAM,),
        seed: Union[np.random.Generator, int, None] = None,
        transform: Optional[SpectralTransform] = None,
    ):
        self._request = SynthesisRequest()
        self._rng = np.random.default_rng(seed)
        self.transform = transform
        self.set_outputs(outputs)

    @property
    def request(self) -> SynthesisRequest:
        """Current (possibly incomplete) request."""
        return self._request

    def _update(self, **changes) -> None:
        current = {
            "input": self._request.input,
            "illumination": self._request.illumination,
            "imaging": self._request.imaging,
            "angles": self._request.angles,
            "field": self._request.field,
        }
        current.update(changes)
        self._request = SynthesisRequest(**current)

    def set_outputs(self, outputs: Union[str, Iterable[SynthesisOutput]]) -> None:
        if isinstance(outputs, str):
            outputs = SynthesisOutput.from_codes(outputs)
        self.outputs: Tuple[SynthesisOutput, ...] = tuple(outputs)

    def set_input_parameters(
        self,
        width: float,
        height: float,
        amp_range: Optional[Tuple[float, float]] = None,
        phase_range: Optional[Tuple[float, float]] = None,
    ) -> None:
        kwargs = {}
        if amp_range is not None:
            kwargs["amp_range"] = tuple(amp_range)
        if phase_range is not None:
            kwargs["phase_range"] = tuple(phase_range)
        self._update(input=InputParameters(width, height, **kwargs))

    def set_illumination(self, wavelength: float, roughness: float = 0.0) -> None:
        self._update(illumination=IlluminationParameters(wavelength, roughness))

    def set_imaging(self, magnification: float, na: float, tube_focal: float) -> None:
        self._update(imaging=ImagingParameters(magnification, na, tube_focal))

    def set_angles(
        self, diffraction_limited: bool, azimuth: float = math.pi / 4, polar: float = 0.01
    ) -> None:
        self._update(
            angles=InterferenceParameters(diffraction_limited, azimuth=azimuth, polar=polar)
        )

    def set_input_images(
        self,
        kind: InputKind,
        first: Optional[np.ndarray],
        second: Optional[np.ndarray] = None,
    ) -> bool:
        """Build and store the input field.

        Input parameters (and, for amplitude/phase input, illumination)
        must be set first; otherwise a warning is logged and False is
        returned.
        """
        if self._request.input is None:
            logger.warning("The input parameters must be set before loading the images")
            return False
        if kind is InputKind.AMPLITUDE_PHASE and self._request.illumination is None:
            logger.warning("The illumination must be set before loading amplitude/phase images")
            return False

        illumination = self._request.illumination or IlluminationParameters(1.0)
        field = build_input_field(
            kind, first, second, self._request.input, illumination, self._rng
        )
        self._update(field=field)
        return True

    def create_image(self) -> Optional[SynthesisResult]:
        """Run synthesis if ready, else log what is missing and return None."""
        status = validate(self._request)
        if isinstance(status, NotReady):
            logger.warning("Synthesis skipped, missing: %s", ", ".join(sorted(status.missing)))
            return None
        return synthesize(status.params, status.field, self.outputs, self.transform)
