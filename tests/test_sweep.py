"""
Two-Parameter Sweep Tests

- Grid shapes and axis layout
- Physical trends of the outlet temperature map
- Failed points recorded as NaN without aborting the sweep
- Axis validation and default ranges
"""

from types import SimpleNamespace

import numpy as np
import pytest

from pipe_freeze_risk.errors import ExcessivePressureLoss, InvalidInput
from pipe_freeze_risk.freeze_solver.sweep import default_range, sensitivity_matrix


def length_solver(config, models=None, iterations=2):
    """T_final = 12 - 0.01 L, failing beyond 110 m."""
    if config.total_length > 110.0:
        raise ExcessivePressureLoss("pressure exhausted")
    T = 12.0 - 0.01*config.total_length
    return SimpleNamespace(T_final=T, T_min=T, frozen=False)


# ==================== FIXTURES ====================

@pytest.fixture(scope="module")
def sweep(base_config):
    """T_amb x V_wind map of the base pipe at resolution 3."""
    return sensitivity_matrix(base_config, "T_amb", "V_wind", resolution=3)


# ==================== NETWORK SWEEP ====================

class TestNetworkSweep:

    def test_shapes(self, sweep):
        assert sweep["x_values"].shape == (3,)
        assert sweep["y_values"].shape == (3,)
        for name in ("x_grid", "y_grid", "T_final", "T_min", "frozen", "success"):
            assert sweep[name].shape == (3, 3)
        assert np.allclose(sweep["x_grid"][:, 0], sweep["x_values"])
        assert np.allclose(sweep["y_grid"][0, :], sweep["y_values"])

    def test_default_axes(self, sweep):
        assert sweep["x_values"][0] == pytest.approx(-12.0)
        assert sweep["x_values"][-1] == pytest.approx(-8.0)
        assert sweep["y_values"][0] == pytest.approx(4.0)
        assert sweep["y_values"][-1] == pytest.approx(6.0)

    def test_all_points_succeed(self, sweep):
        assert sweep["success"].all()
        assert not sweep["errors"]
        assert np.isfinite(sweep["T_final"]).all()
        assert (sweep["T_min"] <= sweep["T_final"] + 1e-12).all()

    def test_trends(self, sweep):
        # Warmer air keeps the water warmer; more wind cools it
        assert (np.diff(sweep["T_final"], axis=0) > 0.0).all()
        assert (np.diff(sweep["T_final"], axis=1) < 0.0).all()


# ==================== FAILURES AND CANCELLATION ====================

class TestSweepFailures:

    def test_failed_points_are_nan(self, base_config):
        sweep = sensitivity_matrix(base_config, "L", "T_amb", range_x=(90.0, 130.0),
                                   resolution=5, solver=length_solver)
        # L = 90, 100, 110 succeed; 120 and 130 fail
        assert sweep["success"][:3].all()
        assert not sweep["success"][3:].any()
        assert np.isnan(sweep["T_final"][3:]).all()
        assert len(sweep["errors"]) == 10
        i, j, message = sweep["errors"][0]
        assert (i, j) == (3, 0)
        assert message.startswith("ExcessivePressureLoss")

    def test_cancelled_sweep(self, base_config):
        sweep = sensitivity_matrix(base_config, "L", "T_amb", resolution=3, solver=length_solver,
                                   should_cancel=lambda: True)
        assert not sweep["success"].any()
        assert np.isnan(sweep["T_final"]).all()


# ==================== VALIDATION ====================

class TestSweepValidation:

    @pytest.mark.parametrize("key_x, key_y", [("L", "L"), ("L", "D_inner"), ("t_insul", "L")])
    def test_invalid_axes(self, base_config, key_x, key_y):
        with pytest.raises(InvalidInput):
            sensitivity_matrix(base_config, key_x, key_y, resolution=2, solver=length_solver)

    def test_resolution(self, base_config):
        with pytest.raises(InvalidInput):
            sensitivity_matrix(base_config, "L", "T_amb", resolution=1, solver=length_solver)

    def test_insulated_thickness_axis(self, insulated_config):
        sweep = sensitivity_matrix(insulated_config, "t_insul", "L", resolution=2, solver=length_solver)
        assert sweep["x_values"][0] == pytest.approx(20.0)
        assert sweep["x_values"][-1] == pytest.approx(30.0)


class TestDefaultRange:

    def test_window(self, base_config):
        assert default_range(base_config, "L") == (pytest.approx(80.0), pytest.approx(120.0))

    def test_negative_value_is_ordered(self, base_config):
        lo, hi = default_range(base_config, "T_amb")
        assert lo == pytest.approx(-12.0)
        assert hi == pytest.approx(-8.0)

    def test_clamped_to_theoretical_range(self, base_config):
        lo, hi = default_range(base_config, "T_in", percent=0.9)
        assert lo == pytest.approx(6.0)
        assert hi == 100.0

    def test_not_applicable(self, base_config):
        with pytest.raises(InvalidInput):
            default_range(base_config, "t_insul")
