"""Tests for core parameters, frames and complex-field helpers."""

import numpy as np
import pytest

from dhmlib.core import (
    HologramFrame,
    OpticalParameters,
    TuningParameters,
    amplitude,
    as_frame,
    complex_field,
    intensity,
    phase,
    polar_field,
)
from dhmlib.errors import DHMError, ShapeMismatchError


class TestOpticalParameters:
    """Tests for OpticalParameters."""

    def test_basic_creation(self):
        optics = OpticalParameters(
            wavelength=0.633, dx=3.45, dy=3.45, magnification=40.0, na=0.65
        )
        assert optics.spacing == (3.45, 3.45)
        assert optics.objective_focal == pytest.approx(5000.0)

    def test_image_spacing(self):
        optics = OpticalParameters(wavelength=0.5, dx=4.0, dy=2.0, magnification=2.0)
        assert optics.image_spacing == (1.0, 2.0)

    @pytest.mark.parametrize(
        "kwargs",
        [
            dict(wavelength=0.0),
            dict(dx=-1.0),
            dict(dy=0.0),
            dict(magnification=0.0),
            dict(na=1.2),
            dict(na=0.0),
            dict(tube_focal=-5.0),
        ],
    )
    def test_invalid(self, kwargs):
        values = dict(wavelength=0.5, dx=1.0, dy=1.0)
        values.update(kwargs)
        with pytest.raises(ValueError):
            OpticalParameters(**values)

    def test_frozen(self):
        optics = OpticalParameters(wavelength=0.5, dx=1.0, dy=1.0)
        with pytest.raises(AttributeError):
            optics.wavelength = 0.6


class TestTuningParameters:
    """Tests for TuningParameters."""

    def test_defaults_not_tilted(self):
        assert not TuningParameters().is_tilted
        assert not TuningParameters(z=5.0).is_tilted

    @pytest.mark.parametrize("kwargs", [dict(fx=1.0), dict(fy=-2.0), dict(linear_phase=0.1)])
    def test_tilted(self, kwargs):
        assert TuningParameters(**kwargs).is_tilted

    def test_refocused(self):
        tuning = TuningParameters(z=5.0, fx=1.0, fy=2.0, linear_phase=0.3)
        moved = tuning.refocused(-10.0)
        assert moved.z == -5.0
        assert (moved.fx, moved.fy, moved.linear_phase) == (1.0, 2.0, 0.3)
        assert tuning.z == 5.0


class TestFieldHelpers:
    """Tests for complex field construction and views."""

    def test_complex_field_missing_plane_is_zero(self):
        re = np.ones((3, 4))
        field = complex_field(re)
        assert field.dtype == np.complex128
        np.testing.assert_array_equal(field.imag, 0.0)
        field = complex_field(None, re)
        np.testing.assert_array_equal(field.real, 0.0)
        np.testing.assert_array_equal(field.imag, 1.0)

    def test_complex_field_requires_a_plane(self):
        with pytest.raises(ValueError):
            complex_field(None, None)

    def test_shape_mismatch(self):
        with pytest.raises(ShapeMismatchError):
            complex_field(np.ones((3, 4)), np.ones((4, 3)))
        with pytest.raises(ShapeMismatchError):
            polar_field(np.ones((2, 2)), np.ones((2, 3)))

    def test_shape_mismatch_hierarchy(self):
        assert issubclass(ShapeMismatchError, DHMError)
        assert issubclass(ShapeMismatchError, ValueError)

    def test_polar_field_views(self):
        amp = np.full((4, 4), 2.0)
        pha = np.full((4, 4), 0.5)
        field = polar_field(amp, pha)
        np.testing.assert_allclose(amplitude(field), 2.0)
        np.testing.assert_allclose(intensity(field), 4.0)
        np.testing.assert_allclose(phase(field), 0.5)

    def test_intensity_is_amplitude_squared(self):
        rng = np.random.default_rng(42)
        field = rng.standard_normal((5, 5)) + 1j * rng.standard_normal((5, 5))
        np.testing.assert_allclose(intensity(field), amplitude(field) ** 2)

    def test_phase_range(self):
        field = np.array([[-1 + 0j, 1j, -1j]])
        pha = phase(field)
        assert pha[0, 0] == pytest.approx(np.pi)
        assert np.all(pha > -np.pi) and np.all(pha <= np.pi)


class TestAsFrame:
    """Tests for frame elevation."""

    @pytest.mark.parametrize("dtype", [np.uint8, np.uint16, np.float32, np.float64])
    def test_elevates_to_float64(self, dtype):
        raw = np.arange(12, dtype=dtype).reshape(3, 4)
        frame = as_frame(raw)
        assert frame.dtype == np.float64
        np.testing.assert_array_equal(frame, raw.astype(np.float64))

    def test_copy(self):
        raw = np.zeros((2, 2))
        frame = as_frame(raw)
        frame[0, 0] = 1.0
        assert raw[0, 0] == 0.0

    def test_rejects_non_2d(self):
        with pytest.raises(ValueError):
            as_frame(np.zeros((2, 2, 3)))

    def test_rejects_complex(self):
        with pytest.raises(ValueError):
            as_frame(np.zeros((2, 2), dtype=complex))


class TestHologramFrame:
    def test_calibration(self):
        frame = HologramFrame(np.zeros((3, 5)), pitch=0.25, title="Phase")
        assert frame.shape == (3, 5)
        assert frame.spacing == (0.25, 0.25)
        assert frame.unit == "um"
