"""Stages of the simulated telecentric DHM optical train.

The object field passes through:

1. the microscope objective, modelled as a Fourier transform onto its
   back focal plane;
2. the pupil, a circular low-pass filter set by the NA;
3. the tube lens, a second Fourier transform onto the camera plane;
4. the camera, which records the intensity of the object field added
   to a tilted plane-wave reference.

Sample pitches are tracked through each stage:
    focal_pitch  = λ * f_MO / (M * input_pitch)
    output_pitch = λ * f_TL / (M * focal_pitch)
"""

import math
from typing import Optional, Tuple

import numpy as np

from ..core.field import amplitude, intensity
from ..optics.aperture import circular_pupil
from ..utils.fourier import SpectralTransform
from .parameters import ImagingParameters

__all__ = [
    "first_lens",
    "pupil_plane",
    "second_lens",
    "diffraction_limited_angles",
    "reference_wave",
    "form_hologram",
    "admissible_na",
]

# Axial offset of the reference arm (μm) entering the reference phase
REFERENCE_OFFSET = 100.0

# Empirical fringe-separation factor of the validity check
SEPARATION_FACTOR = 2 + 3 * math.sqrt(2)


def first_lens(
    field: np.ndarray,
    input_pitch: float,
    wavelength: float,
    imaging: ImagingParameters,
    transform: Optional[SpectralTransform] = None,
) -> Tuple[np.ndarray, float]:
    """Transform the object field onto the objective's back focal plane.

    Returns:
        Tuple (focal_field, focal_pitch) with the field centred (DC at the
        middle) and its pitch in μm.
    """
    st = transform if transform is not None else SpectralTransform()
    focal_field = st.center_shift(st.forward(field))

    nx = field.shape[-1]
    focal_pitch = wavelength * imaging.objective_focal / (nx * input_pitch)
    return focal_field, focal_pitch


def pupil_plane(
    focal_field: np.ndarray, focal_pitch: float, imaging: ImagingParameters
) -> np.ndarray:
    """Apply the objective pupil in the back focal plane.

    The pupil radius is ``NA * f_TL / magnification`` (μm), i.e.
    ``NA * f_MO``, expressed in focal-plane pixels.
    """
    radius = (imaging.na * imaging.tube_focal / imaging.magnification) / focal_pitch
    pupil = circular_pupil(focal_field.shape, radius)
    return focal_field * pupil


def second_lens(
    pupil_field: np.ndarray,
    focal_pitch: float,
    wavelength: float,
    imaging: ImagingParameters,
    transform: Optional[SpectralTransform] = None,
) -> Tuple[np.ndarray, float]:
    """Transform the filtered field onto the camera plane.

    The second forward transform (rather than an inverse) reproduces the
    image inversion of a real two-lens system.

    Returns:
        Tuple (image_field, output_pitch).
    """
    st = transform if transform is not None else SpectralTransform()
    image_field = st.forward(st.center_shift(pupil_field))

    nx = pupil_field.shape[-1]
    output_pitch = wavelength * imaging.tube_focal / (focal_pitch * nx)
    return image_field, output_pitch


def diffraction_limited_angles(wavelength: float, output_pitch: float) -> Tuple[float, float]:
    """Reference angles at the maximum resolvable fringe frequency.

    Returns:
        Tuple (polar, azimuth) = (λ / (2 * output_pitch), π/4).
    """
    return wavelength / (2 * output_pitch), math.pi / 4


def reference_wave(
    shape: Tuple[int, int],
    pitch: float,
    wavelength: float,
    polar: float,
    azimuth: float,
    amp: float,
) -> np.ndarray:
    """Uniform tilted plane wave sampled on the camera grid.

    Physics:
        (kx, ky, kz) = (sin θ cos φ, sin θ sin φ, cos θ)
        phase = (2π/λ) * (kx * x + ky * y + kz * REFERENCE_OFFSET)

    with x, y measured from the array centre ``(n - 1) / 2``.
    """
    ny, nx = shape
    kx = math.sin(polar) * math.cos(azimuth)
    ky = math.sin(polar) * math.sin(azimuth)
    kz = math.cos(polar)
    k = 2 * math.pi / wavelength

    xx = (np.arange(nx) - (nx - 1) / 2.0) * pitch
    yy = (np.arange(ny) - (ny - 1) / 2.0) * pitch
    pha = k * (
        kx * xx[np.newaxis, :] + ky * yy[:, np.newaxis] + kz * REFERENCE_OFFSET
    )
    return amp * np.exp(1j * pha)


def form_hologram(
    object_field: np.ndarray,
    pitch: float,
    wavelength: float,
    polar: float,
    azimuth: float,
) -> np.ndarray:
    """Record the intensity of object plus reference.

    The reference amplitude is a quarter of the mean object amplitude.
    """
    amp = float(np.mean(amplitude(object_field))) / 4
    reference = reference_wave(object_field.shape, pitch, wavelength, polar, azimuth, amp)
    return intensity(object_field + reference)


def admissible_na(
    wavelength: float, output_pitch: float, imaging: ImagingParameters
) -> Optional[float]:
    """Check that the objective NA fits the camera sampling.

    The configuration is admissible when
    ``NA / magnification <= λ / (output_pitch * (2 + 3√2))``.

    Returns:
        None if admissible, otherwise the maximum admissible NA rounded
        to three decimals.
    """
    limit = wavelength / SEPARATION_FACTOR / output_pitch
    if imaging.na / imaging.magnification <= limit:
        return None
    return round(limit * imaging.magnification, 3)
