"""Synthetic hologram generation.

Simulates a telecentric off-axis DHM: objective, pupil, tube lens and
interference with a tilted plane-wave reference.

Example:
    >>> from dhmlib.synthesis import HologramSynthesizer, InputKind
    >>> synth = HologramSynthesizer(outputs="HP", seed=0)
    >>> synth.set_input_parameters(200.0, 200.0)
    >>> synth.set_illumination(0.633, roughness=0.5)
    >>> synth.set_imaging(40.0, 0.65, 200e3)
    >>> synth.set_angles(diffraction_limited=True)
    >>> synth.set_input_images(InputKind.AMPLITUDE_PHASE, amp_img, phase_img)
    >>> result = synth.create_image()
    >>> result.hologram.pitch, result.polar, result.max_na
"""

from .parameters import (
    InputKind,
    SynthesisOutput,
    InputParameters,
    IlluminationParameters,
    ImagingParameters,
    InterferenceParameters,
    SynthesisParameters,
    SynthesisRequest,
    Ready,
    NotReady,
    validate,
)
from .inputs import rescale, build_input_field
from .optical_train import (
    first_lens,
    pupil_plane,
    second_lens,
    diffraction_limited_angles,
    reference_wave,
    form_hologram,
    admissible_na,
)
from .synthesizer import SynthesisResult, synthesize, HologramSynthesizer

__all__ = [
    # Parameters
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
    # Input field
    "rescale",
    "build_input_field",
    # Optical train
    "first_lens",
    "pupil_plane",
    "second_lens",
    "diffraction_limited_angles",
    "reference_wave",
    "form_hologram",
    "admissible_na",
    # Entry points
    "SynthesisResult",
    "synthesize",
    "HologramSynthesizer",
]
