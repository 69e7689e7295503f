"""
Segment Solver Tests

- NTU closed form and energy balance on one segment
- Heating/cooling direction
- Insulation in the resistance network
- Input validation and model injection
"""

import math

import pytest

from pipe_freeze_risk.errors import InvalidInput, OutOfRange, ReferenceDataMissing
from pipe_freeze_risk.freeze_solver.config import AmbientConditions, Insulation, PipeGeometry
from pipe_freeze_risk.freeze_solver.segment import (SolverModels, solve_segment,
                                                    temperature_profile)

GEOMETRY = PipeGeometry(D_inner=0.0525, D_outer=0.0603, roughness=0.045e-3, material="steel")
COLD = AmbientConditions(T_amb=-27.0, V_wind=20.0/3.6)


class TestSolveSegment:

    def test_cooling_segment(self):
        state = solve_segment(GEOMETRY, 5.0, 10.0, 3.0, 2.0, COLD)
        assert COLD.T_amb < state.T_out < 10.0
        assert state.Q_loss > 0.0
        assert state.dP > 0.0
        assert state.regime == "turbulent"
        assert state.convection_regime == "forced"
        assert state.length == pytest.approx(5.0)

    def test_ntu_closed_form(self):
        state = solve_segment(GEOMETRY, 5.0, 10.0, 3.0, 2.0, COLD)
        assert state.NTU == pytest.approx(state.UA/(2.0*state.water.cp))
        assert state.T_out == pytest.approx(COLD.T_amb + (10.0 - COLD.T_amb)*math.exp(-state.NTU))
        assert state.Q_loss == pytest.approx(2.0*state.water.cp*(10.0 - state.T_out))
        assert state.UA == pytest.approx(1.0/state.R_total)

    def test_external_coefficient_is_convection_plus_radiation(self):
        state = solve_segment(GEOMETRY, 5.0, 10.0, 3.0, 2.0, COLD)
        assert state.h_ext == pytest.approx(state.h_conv_ext + state.h_rad)
        assert state.h_rad > 0.0

    def test_heating_in_warm_air(self):
        warm = AmbientConditions(T_amb=30.0, V_wind=1.0)
        state = solve_segment(GEOMETRY, 5.0, 10.0, 3.0, 2.0, warm)
        assert 10.0 < state.T_out < 30.0
        assert state.Q_loss < 0.0

    def test_still_air_is_natural_convection(self):
        still = AmbientConditions(T_amb=-10.0, V_wind=0.0)
        state = solve_segment(GEOMETRY, 5.0, 40.0, 3.0, 0.5, still)
        assert state.convection_regime == "natural"
        assert math.isinf(state.Ri)

    def test_insulation_reduces_heat_loss(self):
        bare = solve_segment(GEOMETRY, 5.0, 10.0, 3.0, 2.0, COLD)
        insulated = solve_segment(GEOMETRY, 5.0, 10.0, 3.0, 2.0, COLD,
                                  insulation=Insulation("polyurethane_foam", 0.025))
        assert insulated.Q_loss < 0.2*bare.Q_loss
        assert [name for name, _ in insulated.R_layers] == [
            "internal convection", "pipe wall", "insulation", "external convection + radiation"]

    def test_single_iteration_uses_inlet_temperature(self):
        state = solve_segment(GEOMETRY, 5.0, 10.0, 3.0, 2.0, COLD, iterations=1)
        assert state.T_avg == 10.0

    def test_property_iteration_uses_average_temperature(self):
        state = solve_segment(GEOMETRY, 50.0, 60.0, 3.0, 0.2, COLD, iterations=3)
        assert state.T_avg < 60.0

    def test_temperature_profile_ends_at_ambient(self):
        state = solve_segment(GEOMETRY, 5.0, 10.0, 3.0, 2.0, COLD)
        profile = temperature_profile(state, COLD.T_amb)
        assert profile[-1][1] == pytest.approx(COLD.T_amb)
        temps = [T for _, T in profile]
        assert temps == sorted(temps, reverse=True)

    @pytest.mark.parametrize("kwargs", [
        dict(length=0.0), dict(P=0.0), dict(m_dot=-1.0), dict(T_in=float("nan")),
        dict(iterations=0), dict(iterations=11),
    ])
    def test_invalid_inputs(self, kwargs):
        args = dict(geometry=GEOMETRY, length=5.0, T_in=10.0, P=3.0, m_dot=2.0, ambient=COLD)
        args.update(kwargs)
        with pytest.raises(InvalidInput):
            solve_segment(**args)

    def test_out_of_table_temperature(self):
        with pytest.raises(OutOfRange):
            solve_segment(GEOMETRY, 5.0, 120.0, 3.0, 2.0, COLD, iterations=1)

    def test_unknown_material(self):
        geometry = PipeGeometry(0.0525, 0.0603, 0.045e-3, "unobtainium")
        with pytest.raises(ReferenceDataMissing):
            solve_segment(geometry, 5.0, 10.0, 3.0, 2.0, COLD)

    def test_injected_models(self, constant_models):
        state = solve_segment(GEOMETRY, 5.0, 10.0, 3.0, 2.0, COLD, models=constant_models)
        assert state.water.rho == 1000.0
        assert state.h_rad == 5.0
        assert state.h_conv_ext == pytest.approx(100.0*0.024/0.0603)

    def test_injected_friction(self):
        models = SolverModels(friction=lambda Re, eps_over_D: 0.05)
        state = solve_segment(GEOMETRY, 5.0, 10.0, 3.0, 2.0, COLD, models=models)
        assert state.f == 0.05
