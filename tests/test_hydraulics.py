"""
Hydraulics Tests

- Velocity, Reynolds number and regime labels
- Friction factor correlations and the laminar/turbulent switch at Re = 2300
- Darcy-Weisbach pressure drop
"""

import math

import pytest

from pipe_freeze_risk.errors import CorrelationDomainError, InvalidInput
from pipe_freeze_risk.freeze_solver import hydraulics


class TestFlow:

    def test_velocity(self):
        D = 0.0525
        V = hydraulics.velocity(2.0, 1000.0, D)
        assert V == pytest.approx(0.002/(math.pi*D**2/4.0))

    def test_reynolds(self):
        assert hydraulics.reynolds(1000.0, 1.0, 0.05, 1.0e-3) == pytest.approx(50000.0)

    @pytest.mark.parametrize("args", [(0.0, 1.0, 0.05, 1e-3), (1000.0, 1.0, -0.05, 1e-3),
                                      (1000.0, 1.0, 0.05, 0.0)])
    def test_reynolds_rejects_non_physical(self, args):
        with pytest.raises(InvalidInput):
            hydraulics.reynolds(*args)

    @pytest.mark.parametrize("Re, regime", [(1000.0, "laminar"), (2299.9, "laminar"),
                                            (2300.0, "transitional"), (4000.0, "transitional"),
                                            (4000.1, "turbulent")])
    def test_flow_regime(self, Re, regime):
        assert hydraulics.flow_regime(Re) == regime


class TestFrictionFactor:

    def test_laminar(self):
        assert hydraulics.friction_factor(1000.0, 0.001) == pytest.approx(0.064)

    def test_churchill_close_to_colebrook_in_turbulent_flow(self):
        for Re in (1e4, 1e5, 1e6):
            f_ch = hydraulics.friction_factor_churchill(Re, 1e-3)
            f_cb = hydraulics.friction_factor_colebrook(Re, 1e-3)
            assert f_ch == pytest.approx(f_cb, rel=0.03)

    def test_smooth_pipe_blasius_range(self):
        # Blasius: f = 0.316 Re^-0.25 for smooth pipes near Re = 1e4
        f = hydraulics.friction_factor_churchill(1.0e4, 0.0)
        assert f == pytest.approx(0.316*1.0e4**-0.25, rel=0.05)

    def test_documented_jump_at_laminar_limit(self):
        # Churchill already blends towards transition at Re = 2300, so it sits
        # about 11% above 64/Re there; the switch is not continuous.
        eps_over_D = 0.045e-3/0.0525
        f_lam = hydraulics.friction_factor(2300.0 - 1e-9, eps_over_D)
        f_turb = hydraulics.friction_factor(2300.0, eps_over_D)
        assert f_lam == pytest.approx(64.0/2300.0)
        assert 1.0 < f_turb/f_lam < 1.2

    def test_colebrook_method(self):
        f = hydraulics.friction_factor(1e5, 1e-3, method="colebrook")
        assert f == pytest.approx(hydraulics.friction_factor_colebrook(1e5, 1e-3))

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            hydraulics.friction_factor(1e5, 1e-3, method="haaland")

    def test_domain(self):
        with pytest.raises(CorrelationDomainError):
            hydraulics.friction_factor_churchill(-10.0, 1e-3)
        with pytest.raises(CorrelationDomainError):
            hydraulics.friction_factor_churchill(1e5, -1e-3)

    def test_roughness_increases_friction(self):
        assert hydraulics.friction_factor(1e5, 1e-2) > hydraulics.friction_factor(1e5, 1e-5)


class TestPressureDrop:

    def test_darcy_weisbach(self):
        dP = hydraulics.pressure_drop_darcy(0.02, 100.0, 0.05, 1000.0, 2.0)
        assert dP == pytest.approx(0.02*(100.0/0.05)*0.5*1000.0*4.0)

    def test_scales_with_length(self):
        dP1 = hydraulics.pressure_drop_darcy(0.02, 10.0, 0.05, 1000.0, 2.0)
        dP2 = hydraulics.pressure_drop_darcy(0.02, 20.0, 0.05, 1000.0, 2.0)
        assert dP2 == pytest.approx(2.0*dP1)
