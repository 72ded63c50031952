"""Tests for hologram synthesis."""

import logging
import math

import numpy as np
import pytest

from dhmlib.core import OpticalParameters
from dhmlib.optics import ApertureMask, find_sideband
from dhmlib.reconstruction import (
    ReconstructionMode,
    ReconstructionState,
    centered_spectrum,
    reconstruct,
)
from dhmlib.synthesis import (
    HologramSynthesizer,
    IlluminationParameters,
    ImagingParameters,
    InputKind,
    InputParameters,
    InterferenceParameters,
    NotReady,
    Ready,
    SynthesisOutput,
    SynthesisParameters,
    SynthesisRequest,
    admissible_na,
    build_input_field,
    diffraction_limited_angles,
    form_hologram,
    reference_wave,
    rescale,
    synthesize,
    validate,
)


def reflected(x):
    """x[(-n) mod N] along both axes: the image inversion of two lenses."""
    return np.roll(np.flip(x, axis=(0, 1)), 1, axis=(0, 1))


def phase_difference(a, b):
    return np.angle(np.exp(1j * (a - b)))


@pytest.fixture
def ramp_synthesizer():
    """4x4 synthesizer whose pupil passes every spatial frequency.

    Input pitch 1 um, wavelength 0.5 um, unit magnification: the pupil
    radius is 8 * NA focal-plane pixels and the output pitch is 1 um.
    """
    synth = HologramSynthesizer(outputs="HP", seed=0)
    synth.set_input_parameters(4.0, 4.0)
    synth.set_illumination(0.5, roughness=0.0)
    synth.set_imaging(1.0, 0.5, 200e3)
    synth.set_angles(diffraction_limited=True)
    return synth


class TestParameters:
    """Tests for parameter validation."""

    def test_invalid_input_size(self):
        with pytest.raises(ValueError):
            InputParameters(0.0, 10.0)

    def test_invalid_illumination(self):
        with pytest.raises(ValueError):
            IlluminationParameters(-0.5)
        with pytest.raises(ValueError):
            IlluminationParameters(0.5, roughness=-1.0)

    @pytest.mark.parametrize(
        "args", [(0.0, 0.5, 200e3), (10.0, 1.5, 200e3), (10.0, 0.5, 0.0)]
    )
    def test_invalid_imaging(self, args):
        with pytest.raises(ValueError):
            ImagingParameters(*args)

    def test_angle_limits(self):
        InterferenceParameters(azimuth=2 * math.pi, polar=-2 * math.pi)
        with pytest.raises(ValueError, match="polar"):
            InterferenceParameters(polar=7.0)
        with pytest.raises(ValueError, match="azimuth"):
            InterferenceParameters(azimuth=-6.5)

    def test_roughness_sigma(self):
        illumination = IlluminationParameters(0.6, roughness=0.5)
        assert illumination.roughness_sigma == pytest.approx(0.05)

    def test_output_codes(self):
        assert SynthesisOutput.from_codes("HXP") == (
            SynthesisOutput.HOLOGRAM,
            SynthesisOutput.PHASE,
        )
        assert SynthesisOutput.IMAGINARY.title == "Imaginary"


class TestValidate:
    """Tests for readiness validation."""

    def test_empty_request(self):
        status = validate(SynthesisRequest())
        assert isinstance(status, NotReady)
        assert status.missing == {"input", "illumination", "imaging", "angle", "field"}

    def test_partial_request(self):
        status = validate(
            SynthesisRequest(
                input=InputParameters(10.0, 10.0),
                angles=InterferenceParameters(),
            )
        )
        assert status.missing == {"illumination", "imaging", "field"}

    def test_ready(self):
        field = np.ones((4, 4), dtype=complex)
        status = validate(
            SynthesisRequest(
                input=InputParameters(10.0, 10.0),
                illumination=IlluminationParameters(0.5),
                imaging=ImagingParameters(10.0, 0.3, 200e3),
                angles=InterferenceParameters(),
                field=field,
            )
        )
        assert isinstance(status, Ready)
        assert status.field is field


class TestInputField:
    """Tests for rescaling and input field construction."""

    def test_rescale(self):
        np.testing.assert_allclose(rescale(np.array([0.0, 1.0, 2.0]), (1.0, 2.0)), [1.0, 1.5, 2.0])

    def test_rescale_constant_maps_to_lower_bound(self):
        np.testing.assert_array_equal(rescale(np.full((3, 3), 7.0), (-1.0, 1.0)), -1.0)

    def test_real_imaginary(self):
        re = np.full((2, 3), 1.5)
        field = build_input_field(
            InputKind.REAL_IMAGINARY, re, None,
            InputParameters(1.0, 1.0), IlluminationParameters(0.5),
        )
        np.testing.assert_array_equal(field, re + 0j)

    def test_amplitude_phase_ranges(self):
        amp_img = np.arange(16, dtype=np.uint8).reshape(4, 4)
        pha_img = np.arange(16, dtype=np.uint16).reshape(4, 4)
        params = InputParameters(1.0, 1.0, amp_range=(1.0, 3.0), phase_range=(-0.5, 0.5))
        field = build_input_field(
            InputKind.AMPLITUDE_PHASE, amp_img, pha_img, params, IlluminationParameters(0.5)
        )
        assert np.abs(field).min() == pytest.approx(1.0)
        assert np.abs(field).max() == pytest.approx(3.0)
        assert np.angle(field).min() == pytest.approx(-0.5)
        assert np.angle(field).max() == pytest.approx(0.5)

    def test_missing_planes(self):
        params = InputParameters(1.0, 1.0, amp_range=(1.0, 2.0))
        only_phase = build_input_field(
            InputKind.AMPLITUDE_PHASE, None, np.eye(3), params, IlluminationParameters(0.5)
        )
        np.testing.assert_allclose(np.abs(only_phase), 2.0)

        only_amp = build_input_field(
            InputKind.AMPLITUDE_PHASE, np.eye(3), None, params, IlluminationParameters(0.5)
        )
        np.testing.assert_allclose(np.angle(only_amp), 0.0)

    def test_requires_a_plane(self):
        with pytest.raises(ValueError):
            build_input_field(
                InputKind.AMPLITUDE_PHASE, None, None,
                InputParameters(1.0, 1.0), IlluminationParameters(0.5),
            )

    def test_roughness_noise(self):
        """Phase noise has standard deviation 2π/λ · (roughness/2)·λ/3."""
        illumination = IlluminationParameters(0.633, roughness=0.5)
        field = build_input_field(
            InputKind.AMPLITUDE_PHASE, np.ones((128, 128)), None,
            InputParameters(1.0, 1.0), illumination, rng=0,
        )
        expected = 2 * np.pi * illumination.roughness_sigma / illumination.wavelength
        assert np.std(np.angle(field)) == pytest.approx(expected, rel=0.05)
        # A constant amplitude plane maps to the lower bound
        np.testing.assert_allclose(np.abs(field), 1.0)

    def test_roughness_reproducible(self):
        illumination = IlluminationParameters(0.633, roughness=0.3)
        args = (InputKind.AMPLITUDE_PHASE, np.ones((8, 8)), None, InputParameters(1.0, 1.0))
        a = build_input_field(*args, illumination, rng=5)
        b = build_input_field(*args, illumination, rng=5)
        np.testing.assert_array_equal(a, b)


class TestOpticalTrain:
    """Tests for individual optical train stages."""

    def test_diffraction_limited_angles(self):
        polar, azimuth = diffraction_limited_angles(0.5, 2.0)
        assert polar == pytest.approx(0.125)
        assert azimuth == pytest.approx(math.pi / 4)

    def test_reference_wave_amplitude(self):
        ref = reference_wave((8, 8), 1.0, 0.5, 0.1, 0.3, amp=0.25)
        np.testing.assert_allclose(np.abs(ref), 0.25)

    def test_hologram_real_non_negative(self):
        rng = np.random.default_rng(42)
        field = rng.standard_normal((16, 16)) + 1j * rng.standard_normal((16, 16))
        hologram = form_hologram(field, 1.0, 0.5, 0.2, 0.7)
        assert hologram.dtype == np.float64
        assert hologram.min() >= 0

    def test_admissible_na(self):
        imaging = ImagingParameters(1.0, 0.05, 200e3)
        assert admissible_na(0.5, 1.0, imaging) is None

    def test_inadmissible_na(self):
        imaging = ImagingParameters(1.0, 0.5, 200e3)
        # 0.5 / (2 + 3√2) = 0.0801
        assert admissible_na(0.5, 1.0, imaging) == pytest.approx(0.08)


class TestSynthesize:
    """End-to-end synthesis."""

    def test_phase_ramp_is_reflected(self, ramp_synthesizer):
        """With every frequency inside the pupil, the camera-plane phase is
        the input phase inverted through the origin."""
        pha_img = np.arange(16, dtype=np.float64).reshape(4, 4)
        assert ramp_synthesizer.set_input_images(InputKind.AMPLITUDE_PHASE, None, pha_img)

        result = ramp_synthesizer.create_image()
        assert result is not None

        expected = reflected(rescale(pha_img, (-math.pi / 4, math.pi / 4)))
        recovered = result.images[SynthesisOutput.PHASE].data
        np.testing.assert_allclose(phase_difference(recovered, expected), 0.0, atol=1e-9)

    def test_calibration_and_angles(self, ramp_synthesizer):
        ramp_synthesizer.set_input_images(InputKind.AMPLITUDE_PHASE, None, np.eye(4))
        result = ramp_synthesizer.create_image()

        assert result.input_pitch == pytest.approx(1.0)
        assert result.focal_pitch == pytest.approx(200e3 / 8)
        assert result.output_pitch == pytest.approx(1.0)
        assert result.hologram.pitch == pytest.approx(1.0)
        assert result.hologram.shape == (4, 4)
        assert result.diffraction_limited
        assert result.polar == pytest.approx(0.25)
        assert result.azimuth == pytest.approx(math.pi / 4)

    def test_na_advisory(self, ramp_synthesizer, caplog):
        ramp_synthesizer.set_input_images(InputKind.AMPLITUDE_PHASE, None, np.eye(4))
        with caplog.at_level(logging.WARNING):
            result = ramp_synthesizer.create_image()
        assert result.max_na == pytest.approx(0.08)
        assert not result.is_admissible
        assert "maximum admissible NA" in caplog.text

    def test_diffraction_limited_overrides_angles(self, ramp_synthesizer):
        ramp_synthesizer.set_angles(True, azimuth=1.0, polar=0.5)
        ramp_synthesizer.set_input_images(InputKind.AMPLITUDE_PHASE, None, np.eye(4))
        result = ramp_synthesizer.create_image()
        assert result.polar == pytest.approx(0.25)
        assert result.azimuth == pytest.approx(math.pi / 4)

    def test_explicit_angles(self, ramp_synthesizer):
        ramp_synthesizer.set_angles(False, azimuth=1.0, polar=0.5)
        ramp_synthesizer.set_input_images(InputKind.AMPLITUDE_PHASE, None, np.eye(4))
        result = ramp_synthesizer.create_image()
        assert (result.polar, result.azimuth) == (0.5, 1.0)
        assert not result.diffraction_limited

    def test_default_angles_keep_carrier(self, ramp_synthesizer):
        ramp_synthesizer.set_angles(False)
        defaults = InterferenceParameters()
        assert ramp_synthesizer.request.angles == defaults
        ramp_synthesizer.set_input_images(InputKind.AMPLITUDE_PHASE, None, np.eye(4))
        result = ramp_synthesizer.create_image()
        assert (result.polar, result.azimuth) == (defaults.polar, defaults.azimuth)
        assert result.polar == 0.01
        assert result.azimuth == pytest.approx(math.pi / 4)

    def test_requested_views(self):
        params = SynthesisParameters(
            input=InputParameters(8.0, 8.0),
            illumination=IlluminationParameters(0.5),
            imaging=ImagingParameters(1.0, 0.5, 200e3),
            angles=InterferenceParameters(),
        )
        rng = np.random.default_rng(42)
        field = np.exp(1j * rng.uniform(-1, 1, (8, 8)))
        outputs = tuple(SynthesisOutput)
        result = synthesize(params, field, outputs)

        assert set(result.images) == set(outputs)
        images = {kind: frame.data for kind, frame in result.images.items()}
        obj = result.object_field
        np.testing.assert_allclose(images[SynthesisOutput.REAL], obj.real)
        np.testing.assert_allclose(images[SynthesisOutput.IMAGINARY], obj.imag)
        np.testing.assert_allclose(
            images[SynthesisOutput.INTENSITY], images[SynthesisOutput.AMPLITUDE] ** 2
        )
        np.testing.assert_array_equal(images[SynthesisOutput.HOLOGRAM], result.hologram.data)
        assert result.images[SynthesisOutput.PHASE].title == "Phase"


class TestHologramSynthesizer:
    """Tests for the stateful front end."""

    def test_not_ready_returns_none(self, caplog):
        synth = HologramSynthesizer()
        synth.set_input_parameters(10.0, 10.0)
        with caplog.at_level(logging.WARNING):
            assert synth.create_image() is None
        assert "angle" in caplog.text
        assert "field" in caplog.text

    def test_images_require_input_parameters(self, caplog):
        synth = HologramSynthesizer()
        with caplog.at_level(logging.WARNING):
            ok = synth.set_input_images(InputKind.REAL_IMAGINARY, np.ones((4, 4)))
        assert not ok
        assert synth.request.field is None

    def test_amplitude_phase_requires_illumination(self):
        synth = HologramSynthesizer()
        synth.set_input_parameters(10.0, 10.0)
        assert not synth.set_input_images(InputKind.AMPLITUDE_PHASE, np.ones((4, 4)))
        assert synth.set_input_images(InputKind.REAL_IMAGINARY, np.ones((4, 4)))

    def test_invalid_setter_keeps_previous(self):
        synth = HologramSynthesizer()
        synth.set_imaging(20.0, 0.4, 200e3)
        with pytest.raises(ValueError):
            synth.set_imaging(20.0, 1.4, 200e3)
        assert synth.request.imaging.na == 0.4

    def test_outputs_from_codes(self):
        synth = HologramSynthesizer(outputs="AIR")
        assert synth.outputs == (
            SynthesisOutput.AMPLITUDE,
            SynthesisOutput.INTENSITY,
            SynthesisOutput.REAL,
        )


LOOP_N = 64


@pytest.fixture
def loop_phase_image():
    yy, xx = np.mgrid[0:LOOP_N, 0:LOOP_N]
    return np.cos(2 * np.pi * xx / LOOP_N) + np.sin(4 * np.pi * yy / LOOP_N)


@pytest.fixture
def loop_result(loop_phase_image):
    """Phase object recorded with 16 fringes across the frame along x.

    Input pitch 1 um, wavelength 0.5 um, unit magnification and an NA
    wide enough that the pupil passes every frequency; the camera pitch
    is then 1 um and sin(polar) = 0.5 * 16 / 64.
    """
    synth = HologramSynthesizer(outputs="HP", seed=0)
    synth.set_input_parameters(float(LOOP_N), float(LOOP_N), phase_range=(-0.5, 0.5))
    synth.set_illumination(0.5, roughness=0.0)
    synth.set_imaging(1.0, 0.5, 200e3)
    synth.set_angles(False, azimuth=0.0, polar=math.asin(0.5 * 16 / LOOP_N))
    assert synth.set_input_images(InputKind.AMPLITUDE_PHASE, None, loop_phase_image)
    return synth.create_image()


def object_order(hologram):
    magnitude = np.abs(centered_spectrum(hologram))
    # Twin orders of a real hologram have equal modulus; rounding lets the
    # tie resolve in raster order
    return find_sideband(np.round(magnitude / magnitude.max(), 9), exclude_radius=8)


def phase_state(peak):
    return ReconstructionState(
        optics=OpticalParameters(wavelength=0.5, dx=1.0, dy=1.0),
        mode=ReconstructionMode.PHASE,
        aperture=ApertureMask.centered_on(peak, 12, (LOOP_N, LOOP_N)),
    )


class TestSynthesisToReconstruction:
    """A synthesized hologram fed back through the reconstruction pipeline."""

    def test_object_order_position(self, loop_result):
        assert loop_result.output_pitch == pytest.approx(1.0)
        # Object times conjugate reference sits 16 columns before the centre
        assert object_order(loop_result.hologram) == (LOOP_N // 2, LOOP_N // 2 - 16)

    def test_recovers_camera_plane_phase(self, loop_result, loop_phase_image):
        """The object order reconstructs the reflected input phase, which is
        also the phase view produced by synthesis."""
        state = phase_state(object_order(loop_result.hologram))
        recovered = reconstruct(loop_result.hologram, state).data

        expected = reflected(rescale(loop_phase_image, (-0.5, 0.5)))
        residual = phase_difference(recovered, expected)
        # Equal up to the constant phase of the reference
        np.testing.assert_allclose(phase_difference(residual, residual[0, 0]), 0.0, atol=1e-6)

        camera = loop_result.images[SynthesisOutput.PHASE].data
        residual = phase_difference(recovered, camera)
        np.testing.assert_allclose(phase_difference(residual, residual[0, 0]), 0.0, atol=1e-6)

    def test_input_orientation_not_recovered(self, loop_result, loop_phase_image):
        state = phase_state((LOOP_N // 2, LOOP_N // 2 - 16))
        recovered = reconstruct(loop_result.hologram, state).data
        residual = phase_difference(recovered, rescale(loop_phase_image, (-0.5, 0.5)))
        # Reflection flips the sign of the sin(y) term
        assert np.abs(phase_difference(residual, residual[0, 0])).max() > 0.1
