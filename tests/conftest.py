"""Pytest configuration and shared fixtures."""

from types import SimpleNamespace

import pytest

from pipe_freeze_risk.freeze_solver.config import SolverSettings, build_configuration
from pipe_freeze_risk.freeze_solver.properties import FluidProperties
from pipe_freeze_risk.freeze_solver.segment import SolverModels


# NPS 2" schedule 40 carbon steel
PIPE = dict(D_inner=0.0525, D_outer=0.0603, roughness=0.045e-3, material="steel")


@pytest.fixture(scope="session")
def scenario_config():
    """300 m bare steel pipe, 10 °C water at 7.2 m³/h, -27 °C air with 20 km/h wind."""
    return build_configuration(
        **PIPE,
        total_length=300.0,
        T_in=10.0,
        P=3.0,
        flow_m3_per_hr=7.2,
        T_amb=-27.0,
        V_wind_kmh=20.0,
    )


@pytest.fixture(scope="session")
def base_config():
    """100 m bare steel pipe, 60 °C water at 2 m³/h, -10 °C air with 5 km/h wind."""
    return build_configuration(
        **PIPE,
        total_length=100.0,
        T_in=60.0,
        P=3.0,
        flow_m3_per_hr=2.0,
        T_amb=-10.0,
        V_wind_kmh=5.0,
    )


@pytest.fixture(scope="session")
def insulated_config():
    """The base pipe wrapped in 25 mm of polyurethane foam."""
    return build_configuration(
        **PIPE,
        total_length=100.0,
        T_in=60.0,
        P=3.0,
        flow_m3_per_hr=2.0,
        T_amb=-10.0,
        V_wind_kmh=5.0,
        insulation_material="polyurethane_foam",
        insulation_thickness_mm=25.0,
    )


@pytest.fixture
def constant_models():
    """Temperature-independent properties and outer heat transfer."""
    water = FluidProperties(rho=1000.0, mu=1.0e-3, k=0.6, cp=4186.0, Pr=1.0e-3*4186.0/0.6)
    air = FluidProperties(rho=1.3, mu=1.7e-5, k=0.024, cp=1006.0, Pr=0.71)
    return SolverModels(
        water=lambda T, P: water,
        air=lambda T: air,
        radiation=lambda T_surface, T_amb, emissivity: 5.0,
        nusselt_external=lambda Re, Pr, Gr: 100.0,
    )


@pytest.fixture
def fast_settings():
    """Coarse sampling for sweeps that only check structure."""
    return SolverSettings(sampling_points=20, bound_max_iterations=8)


def fake_result(T_final):
    """Stand-in for a NetworkResult when only T_final matters."""
    return SimpleNamespace(T_final=T_final)
