"""
Tests for the ProximityStage and ThresholdStage building blocks.
"""

import numpy as np
import pytest

from paradilate import ImageStage, ProximityStage, StageError, ThresholdStage, scale_from_radius


def _brute_force_field(mask: np.ndarray, weights, cap: float, mode: str) -> np.ndarray:
    """Weighted squared Euclidean (circular) or Chebyshev (rectangular) distance, capped."""
    fg = np.argwhere(mask != 0)
    out = np.full(mask.shape, np.inf)
    if len(fg) == 0:
        return out
    weights = np.asarray(weights, dtype=np.float64)
    for p in np.ndindex(mask.shape):
        d = np.asarray(p) - fg
        terms = weights * d * d
        val = terms.sum(axis=1).min() if mode == "circular" else terms.max(axis=1).min()
        out[p] = val if val <= cap else np.inf
    return out


@pytest.fixture
def random_mask_2d():
    rng = np.random.default_rng(7)
    return (rng.random((17, 23)) < 0.04).astype(np.uint8)


# ============================================================================
# scale_from_radius Tests
# ============================================================================


class TestScaleFromRadius:
    """Test derivation of per-axis scale factors and the cap."""

    def test_uniform(self):
        scale, cap = scale_from_radius((3.0, 3.0))
        assert scale == (1.0, 1.0)
        assert cap == pytest.approx(9.0)
        assert cap >= 9.0

    def test_broadcast(self):
        scale, cap = scale_from_radius((2.0,))
        assert scale == (1.0,)
        assert cap == pytest.approx(4.0)
        assert cap >= 4.0

    def test_unequal_uses_largest(self):
        scale, cap = scale_from_radius((2.0, 4.0))
        assert scale == (2.0, 1.0)
        assert cap == pytest.approx(16.0)
        assert cap >= 16.0

    def test_non_positive_component_disables_axis(self):
        scale, cap = scale_from_radius((0.0, 2.0))
        assert np.isinf(scale[0])
        assert scale[1] == 1.0
        assert cap == pytest.approx(4.0)
        assert cap >= 4.0

    def test_all_non_positive(self):
        scale, cap = scale_from_radius((0.0, -1.0))
        assert all(np.isinf(s) for s in scale)
        assert cap == 0.0


# ============================================================================
# ProximityStage Tests
# ============================================================================


class TestProximityStage:
    """Test ProximityStage configuration and output."""

    def test_implements_protocol(self):
        assert isinstance(ProximityStage("circular"), ImageStage)
        assert isinstance(ProximityStage("rectangular"), ImageStage)

    def test_invalid_mode(self):
        with pytest.raises(ValueError, match="Invalid mode"):
            ProximityStage("hexagonal")

    def test_name(self):
        assert ProximityStage("circular").name == "proximity[circular]"
        assert ProximityStage("rectangular").name == "proximity[rectangular]"

    def test_default_is_identity(self):
        """Default (zero radius) keeps foreground at 0 and everything else far."""
        stage = ProximityStage("circular")
        field = stage(np.array([0, 1, 0, 0, 1]))

        np.testing.assert_array_equal(field, [np.inf, 0.0, np.inf, np.inf, 0.0])

    def test_1d_field(self):
        stage = ProximityStage("circular")
        stage.set_scale((1.0,), cap=4.0)

        field = stage(np.array([0, 0, 1, 0, 0, 0]))

        np.testing.assert_array_equal(field, [4.0, 1.0, 0.0, 1.0, 4.0, np.inf])
        assert field.dtype == np.float64

    @pytest.mark.parametrize("mode", ["circular", "rectangular"])
    @pytest.mark.parametrize(
        "radius", [(2.0, 2.0), (1.0, 3.0), (2.5, 1.5), (3.0, 7.0), (5.0, 9.0), (10.0, 9.0)]
    )
    def test_matches_brute_force(self, random_mask_2d, within_radius, mode, radius):
        scale, cap = scale_from_radius(radius)
        stage = ProximityStage(mode)
        stage.set_scale(scale, cap)

        field = stage(random_mask_2d)
        expected = _brute_force_field(random_mask_2d, np.square(scale), cap, mode)

        np.testing.assert_allclose(field, expected, rtol=1e-12)
        # Finite exactly where some foreground voxel is within radius
        np.testing.assert_array_equal(
            np.isfinite(field), within_radius(random_mask_2d, radius, mode)
        )

    def test_3d_circular_is_squared_distance(self):
        mask = np.zeros((7, 7, 7), dtype=np.uint8)
        mask[3, 3, 3] = 1
        stage = ProximityStage("circular")
        stage.set_scale((1.0,), cap=12.0)

        field = stage(mask)

        assert field[3, 3, 3] == 0.0
        assert field[4, 4, 4] == 3.0
        assert field[5, 5, 5] == 12.0
        assert field[6, 3, 3] == 9.0
        assert np.isinf(field[6, 6, 3])  # 18 > cap

    def test_all_background(self):
        stage = ProximityStage("rectangular")
        stage.set_scale((1.0,), cap=9.0)

        field = stage(np.zeros((4, 4), dtype=np.uint8))

        assert np.all(np.isinf(field))

    def test_empty_grid(self):
        stage = ProximityStage("circular")
        stage.set_scale((1.0,), cap=9.0)

        field = stage(np.zeros((0, 5), dtype=np.uint8))

        assert field.shape == (0, 5)

    def test_disabled_axis_does_not_propagate(self):
        mask = np.zeros((5, 5), dtype=np.uint8)
        mask[2, 2] = 1
        stage = ProximityStage("circular")
        stage.set_scale(*scale_from_radius((0.0, 2.0)))

        field = stage(mask)

        assert np.all(np.isinf(field[[0, 1, 3, 4], :]))
        np.testing.assert_array_equal(field[2], [4.0, 1.0, 0.0, 1.0, 4.0])

    def test_spacing_ignored_unless_enabled(self):
        stage = ProximityStage("circular")
        stage.set_scale((1.0,), cap=16.0)

        np.testing.assert_array_equal(stage.weights_for(2, (2.0, 1.0)), [1.0, 1.0])

        stage.set_use_spacing(True)
        np.testing.assert_array_equal(stage.weights_for(2, (2.0, 1.0)), [4.0, 1.0])

    def test_spacing_changes_field(self):
        mask = np.zeros((1, 7), dtype=np.uint8)
        mask[0, 3] = 1
        stage = ProximityStage("circular")
        stage.set_scale((1.0,), cap=16.0)
        stage.set_use_spacing(True)

        field = stage(mask, spacing=(1.0, 2.0))

        np.testing.assert_array_equal(field[0], [np.inf, 16.0, 4.0, 0.0, 4.0, 16.0, np.inf])

    def test_radius_dimension_mismatch(self):
        stage = ProximityStage("circular")
        stage.set_scale((1.0, 1.0, 1.0), cap=4.0)

        with pytest.raises(ValueError, match="3 components"):
            stage(np.zeros((4, 4)))

    def test_spacing_dimension_mismatch(self):
        stage = ProximityStage("circular")
        stage.set_use_spacing(True)

        with pytest.raises(ValueError, match="one value per axis"):
            stage.weights_for(2, (1.0, 1.0, 1.0))

    def test_scalar_input_rejected(self):
        with pytest.raises(ValueError, match="at least one axis"):
            ProximityStage("circular")(np.array(1))

    def test_set_scale_reports_change(self):
        stage = ProximityStage("circular")
        mtime = stage.mtime

        assert stage.set_scale((1.0,), 4.0) is True
        assert stage.mtime == mtime + 1
        assert stage.set_scale((1.0,), 4.0) is False
        assert stage.mtime == mtime + 1

    def test_set_use_spacing_reports_change(self):
        stage = ProximityStage("rectangular")

        assert stage.set_use_spacing(False) is False
        assert stage.set_use_spacing(True) is True
        assert stage.use_spacing is True

    def test_negative_cap_rejected(self):
        with pytest.raises(ValueError, match="cap"):
            ProximityStage("circular").set_scale((1.0,), -1.0)

    def test_failure_wrapped_in_stage_error(self, monkeypatch):
        def explode(*args, **kwargs):
            raise MemoryError("out of memory")

        monkeypatch.setattr("paradilate.proximity.stage.separable_pass", explode)
        stage = ProximityStage("rectangular")
        stage.set_scale((1.0,), 4.0)

        with pytest.raises(StageError, match="proximity\\[rectangular\\]") as excinfo:
            stage(np.ones((3, 3)))

        assert excinfo.value.stage == "proximity[rectangular]"
        assert isinstance(excinfo.value.__cause__, MemoryError)


# ============================================================================
# ThresholdStage Tests
# ============================================================================


class TestThresholdStage:
    """Test ThresholdStage windowing and output values."""

    def test_implements_protocol(self):
        assert isinstance(ThresholdStage(), ImageStage)

    def test_window_is_inclusive(self):
        stage = ThresholdStage(lower=0.0, upper=4.0)

        out = stage(np.array([0.0, 1.0, 4.0, 4.5, np.inf]), dtype=np.uint8)

        np.testing.assert_array_equal(out, [1, 1, 1, 0, 0])
        assert out.dtype == np.uint8

    def test_default_dtype(self):
        out = ThresholdStage(upper=1.0)(np.array([0.0, 2.0]))
        assert out.dtype == np.uint8

    def test_preserves_shape(self):
        field = np.full((3, 4, 5), np.inf)
        field[1, 2, 3] = 0.0

        out = ThresholdStage(upper=1.0)(field, dtype=np.int16)

        assert out.shape == (3, 4, 5)
        assert out.dtype == np.int16
        assert out.sum() == 1

    def test_inside_value(self):
        stage = ThresholdStage(upper=1.0, inside_value=255)

        out = stage(np.array([0.0, 9.0]), dtype=np.uint8)

        np.testing.assert_array_equal(out, [255, 0])

    def test_bool_output(self):
        out = ThresholdStage(upper=1.0)(np.array([0.0, 9.0]), dtype=bool)

        assert out.dtype == np.bool_
        np.testing.assert_array_equal(out, [True, False])

    def test_fixed_output_dtype_wins(self):
        stage = ThresholdStage(upper=1.0, output_dtype=np.float32)

        out = stage(np.array([0.0, 9.0]), dtype=np.uint8)

        assert out.dtype == np.float32

    def test_invalid_window(self):
        with pytest.raises(ValueError, match="Invalid threshold window"):
            ThresholdStage(lower=2.0, upper=1.0)

        with pytest.raises(ValueError, match="Invalid threshold window"):
            ThresholdStage().set_window(0.0, np.nan)

    def test_setters_report_change(self):
        stage = ThresholdStage(upper=4.0)
        mtime = stage.mtime

        assert stage.set_window(0.0, 4.0) is False
        assert stage.set_window(0.0, 9.0) is True
        assert stage.window == (0.0, 9.0)
        assert stage.set_inside_value(1) is False
        assert stage.set_inside_value(7) is True
        assert stage.set_output_dtype(None) is False
        assert stage.set_output_dtype(np.uint16) is True
        assert stage.mtime == mtime + 3

    def test_empty_field(self):
        out = ThresholdStage(upper=1.0)(np.zeros((0, 3)), dtype=np.uint8)
        assert out.shape == (0, 3)

    def test_failure_wrapped_in_stage_error(self, monkeypatch):
        def explode(*args, **kwargs):
            raise MemoryError("out of memory")

        monkeypatch.setattr("paradilate.threshold.stage.binary_threshold_numba", explode)
        stage = ThresholdStage(name="threshold[circular]", upper=1.0)

        with pytest.raises(StageError) as excinfo:
            stage(np.zeros(4))

        assert excinfo.value.stage == "threshold[circular]"
        assert isinstance(excinfo.value.__cause__, MemoryError)
