"""Tests for angular spectrum propagation."""

import numpy as np
import pytest

from dhmlib.optics.propagation import AngularSpectrumPropagator, angular_spectrum


@pytest.fixture
def field():
    rng = np.random.default_rng(42)
    return rng.standard_normal((32, 32)) + 1j * rng.standard_normal((32, 32))


@pytest.fixture
def propagator():
    # fx, fy <= 0.5 cycles/um everywhere, well inside 1/λ = 2
    return AngularSpectrumPropagator((32, 32), wavelength=0.5, dx=1.0, dy=1.0)


class TestAngularSpectrum:
    """Tests for AngularSpectrumPropagator and angular_spectrum."""

    def test_zero_distance_is_identity(self, field, propagator):
        out = propagator(field, 0.0)
        np.testing.assert_array_equal(out, field)
        assert out is not field

    def test_function_zero_distance(self, field):
        np.testing.assert_array_equal(angular_spectrum(field, 0.5, 0.0, 1.0, 1.0), field)

    def test_forward_then_back(self, field, propagator):
        """Propagating by z then -z recovers the field when nothing is evanescent."""
        out = propagator(propagator(field, 25.0), -25.0)
        np.testing.assert_allclose(out, field, atol=1e-10)

    def test_energy_conserved(self, field, propagator):
        out = propagator(field, 40.0)
        assert np.sum(np.abs(out) ** 2) == pytest.approx(np.sum(np.abs(field) ** 2))

    def test_plane_wave_phase(self, propagator):
        """A uniform field only picks up exp(2πi z / λ)."""
        field = np.ones((32, 32), dtype=complex)
        z = 0.3
        out = propagator(field, z)
        np.testing.assert_allclose(out, np.exp(2j * np.pi * z / 0.5), atol=1e-12)

    def test_evanescent_removed(self):
        prop = AngularSpectrumPropagator((32, 32), wavelength=0.5, dx=0.1, dy=0.1)
        h = prop.transfer_function(1.0)
        assert abs(h[0, 0]) == pytest.approx(1.0)
        # fx = -5 cycles/um > 1/λ
        assert h[0, 16] == 0
        assert h[16, 0] == 0

    def test_transfer_function_unit_modulus_when_propagating(self, propagator):
        np.testing.assert_allclose(np.abs(propagator.transfer_function(7.0)), 1.0)

    def test_function_matches_operator(self, field, propagator):
        np.testing.assert_allclose(
            angular_spectrum(field, 0.5, 12.0, 1.0, 1.0), propagator(field, 12.0)
        )

    def test_anisotropic_pitch(self, field):
        prop = AngularSpectrumPropagator((32, 32), 0.5, dx=1.0, dy=2.0)
        out = prop(prop(field, 5.0), -5.0)
        np.testing.assert_allclose(out, field, atol=1e-10)

    def test_shape_mismatch(self, propagator):
        with pytest.raises(ValueError, match="does not match"):
            propagator(np.ones((16, 16)), 1.0)

    def test_matches(self, propagator):
        assert propagator.matches((32, 32), 0.5, 1.0, 1.0)
        assert not propagator.matches((32, 32), 0.6, 1.0, 1.0)
        assert not propagator.matches((16, 32), 0.5, 1.0, 1.0)

    @pytest.mark.parametrize("kwargs", [dict(wavelength=0.0), dict(dx=0.0), dict(dy=-1.0)])
    def test_invalid(self, kwargs):
        values = dict(wavelength=0.5, dx=1.0, dy=1.0)
        values.update(kwargs)
        with pytest.raises(ValueError):
            AngularSpectrumPropagator((8, 8), **values)
