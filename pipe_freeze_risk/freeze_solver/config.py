"""Pipe configuration value objects and the single-field rebuild function.

Units used by the solver: lengths in m, temperatures in °C, pressure in bar
(absolute), mass flow in kg/s and wind speed in m/s. Display units (m³/h,
km/h, mm) only appear in ``build_configuration``, ``rebuild_configuration``
and ``display_value``.

Module Summary:
- Classes:
    - ``PipeGeometry``, ``FluidInlet``, ``AmbientConditions``, ``Insulation``:
      frozen parts of a configuration.
    - ``PipeConfiguration``: Complete, validated, immutable configuration.
    - ``ParameterDefinition``: One sensitivity axis (display unit and range).
    - ``SolverSettings``: Numerical settings of the segment solver and sensitivity engine.
- Constants:
    - ``PARAMETER_DEFINITIONS``: L, m_dot, T_in, T_amb, V_wind, t_insul.
- Functions:
    - ``segment_count(total_length)``: Segment count rule.
    - ``build_configuration(...)``: Configuration from display-unit inputs.
    - ``rebuild_configuration(base, key, value)``: New configuration with one
      parameter changed and every derived field recomputed.
    - ``display_value(config, key)``: Current value of a parameter in display units.
    - ``settings_from_dict(data)``: SolverSettings from a mapping (YAML section).
"""

import dataclasses
import math
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional

from ..errors import InvalidInput
from ..units import kmh2ms, ms2kmh, mm2m, m2mm, m3h_to_kgs
from .properties import FluidProperties, water_properties


def _positive(name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0.0:
        raise InvalidInput(f"{name} must be a positive number, got {value!r}")


def _finite(name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidInput(f"{name} must be a finite number, got {value!r}")


@dataclass(frozen=True)
class PipeGeometry:
    D_inner: float    # Inner diameter (m)
    D_outer: float    # Outer diameter of the bare pipe (m)
    roughness: float  # Absolute wall roughness (m)
    material: str     # Key in tables.MATERIALS

    def __post_init__(self):
        _positive("Inner diameter", self.D_inner)
        _positive("Outer diameter", self.D_outer)
        if self.D_outer <= self.D_inner:
            raise InvalidInput(
                f"Outer diameter {self.D_outer} must exceed inner diameter {self.D_inner}")
        _finite("Roughness", self.roughness)
        if self.roughness < 0.0:
            raise InvalidInput(f"Roughness must be non-negative, got {self.roughness}")
        if not isinstance(self.material, str) or not self.material:
            raise InvalidInput(f"Pipe material must be a non-empty string, got {self.material!r}")


@dataclass(frozen=True)
class FluidInlet:
    T_in: float   # Inlet temperature (°C)
    P: float      # Inlet absolute pressure (bar)
    m_dot: float  # Mass flow rate (kg/s)

    def __post_init__(self):
        _finite("Inlet temperature", self.T_in)
        _positive("Inlet pressure", self.P)
        _positive("Mass flow rate", self.m_dot)


@dataclass(frozen=True)
class AmbientConditions:
    T_amb: float   # Air temperature (°C)
    V_wind: float  # Wind speed (m/s)

    def __post_init__(self):
        _finite("Ambient temperature", self.T_amb)
        _finite("Wind speed", self.V_wind)
        if self.V_wind < 0.0:
            raise InvalidInput(f"Wind speed must be non-negative, got {self.V_wind}")


@dataclass(frozen=True)
class Insulation:
    material: str     # Key in tables.MATERIALS
    thickness: float  # Radial thickness (m)

    def __post_init__(self):
        if not isinstance(self.material, str) or not self.material:
            raise InvalidInput(f"Insulation material must be a non-empty string, got {self.material!r}")
        _positive("Insulation thickness", self.thickness)


@dataclass(frozen=True)
class PipeConfiguration:
    """Complete description of one pipe run.

    ``num_segments`` and ``fluid.m_dot`` are derived fields: use
    ``build_configuration`` / ``rebuild_configuration`` so they stay in sync
    with ``total_length`` and ``flow_m3_per_hr``.
    """
    geometry: PipeGeometry
    total_length: float  # m
    num_segments: int
    fluid: FluidInlet
    ambient: AmbientConditions
    insulation: Optional[Insulation] = None
    flow_m3_per_hr: Optional[float] = None  # Display metadata for the mass flow

    def __post_init__(self):
        _positive("Total length", self.total_length)
        if isinstance(self.num_segments, bool) or not isinstance(self.num_segments, int) \
                or self.num_segments < 1:
            raise InvalidInput(f"Segment count must be a positive integer, got {self.num_segments!r}")

    @property
    def has_insulation(self) -> bool:
        return self.insulation is not None

    @property
    def D_outer_final(self) -> float:
        """Outer diameter including insulation (m)."""
        if self.insulation is None:
            return self.geometry.D_outer
        return self.geometry.D_outer + 2.0*self.insulation.thickness

    @property
    def segment_length(self) -> float:
        return self.total_length/self.num_segments


def segment_count(total_length: float) -> int:
    """One segment per 5 m, at least 10 and at most 100."""
    return min(max(math.ceil(total_length/5.0), 10), 100)


def build_configuration(
        D_inner: float,
        D_outer: float,
        roughness: float,
        material: str,
        total_length: float,
        T_in: float,
        P: float,
        flow_m3_per_hr: float,
        T_amb: float,
        V_wind_kmh: float,
        insulation_material: Optional[str] = None,
        insulation_thickness_mm: Optional[float] = None,
        water_props: Callable[[float, float], FluidProperties] = water_properties,
) -> PipeConfiguration:
    """Build a configuration from display-unit inputs.

    Args:
        D_inner: Inner diameter (m)
        D_outer: Outer diameter (m)
        roughness: Absolute roughness (m)
        material: Pipe material key
        total_length: Pipe length (m)
        T_in: Water inlet temperature (°C)
        P: Inlet absolute pressure (bar)
        flow_m3_per_hr: Volumetric flow at inlet conditions (m³/h)
        T_amb: Air temperature (°C)
        V_wind_kmh: Wind speed (km/h)
        insulation_material: Insulation material key, or None for a bare pipe
        insulation_thickness_mm: Insulation thickness (mm), required with a material
        water_props: Water property provider used for the inlet density

    Returns:
        PipeConfiguration with num_segments and m_dot derived

    Raises:
        InvalidInput: If any field is non-physical
        OutOfRange: If the inlet state is outside the water property domain
    """
    _positive("Volumetric flow", flow_m3_per_hr)
    _positive("Total length", total_length)

    insulation = None
    if insulation_material is not None:
        if insulation_thickness_mm is None:
            raise InvalidInput("Insulation thickness is required with an insulation material")
        insulation = Insulation(insulation_material, mm2m(insulation_thickness_mm))

    rho = water_props(T_in, P).rho
    return PipeConfiguration(
        geometry=PipeGeometry(D_inner, D_outer, roughness, material),
        total_length=total_length,
        num_segments=segment_count(total_length),
        fluid=FluidInlet(T_in, P, m3h_to_kgs(flow_m3_per_hr, rho)),
        ambient=AmbientConditions(T_amb, kmh2ms(V_wind_kmh)),
        insulation=insulation,
        flow_m3_per_hr=flow_m3_per_hr,
    )


# ==================== Sensitivity parameters ====================

@dataclass(frozen=True)
class ParameterDefinition:
    key: str
    label: str
    unit: str   # Display unit
    min: float  # Theoretical range, display units
    max: float
    requires_insulation: bool = False


PARAMETER_DEFINITIONS: Dict[str, ParameterDefinition] = {
    "L": ParameterDefinition("L", "Pipe length", "m", 1.0, 2500.0),
    "m_dot": ParameterDefinition("m_dot", "Water flow rate", "m³/h", 0.06, 30.0),
    "T_in": ParameterDefinition("T_in", "Water inlet temperature", "°C", 1.0, 100.0),
    "T_amb": ParameterDefinition("T_amb", "Air temperature", "°C", -40.0, 50.0),
    "V_wind": ParameterDefinition("V_wind", "Wind speed", "km/h", 0.0, 108.0),
    "t_insul": ParameterDefinition("t_insul", "Insulation thickness", "mm", 5.0, 100.0,
                                   requires_insulation=True),
}


def _flow_m3_per_hr(config: PipeConfiguration, water_props) -> float:
    if config.flow_m3_per_hr is not None:
        return config.flow_m3_per_hr
    rho = water_props(config.fluid.T_in, config.fluid.P).rho
    return config.fluid.m_dot/rho*3600.0


def display_value(config: PipeConfiguration, key: str,
                  water_props: Callable[[float, float], FluidProperties] = water_properties
                  ) -> Optional[float]:
    """Current value of a sensitivity parameter in its display unit.

    Returns None for the insulation thickness of a bare pipe.
    """
    if key == "L":
        return config.total_length
    elif key == "m_dot":
        return _flow_m3_per_hr(config, water_props)
    elif key == "T_in":
        return config.fluid.T_in
    elif key == "T_amb":
        return config.ambient.T_amb
    elif key == "V_wind":
        return ms2kmh(config.ambient.V_wind)
    elif key == "t_insul":
        return m2mm(config.insulation.thickness) if config.insulation is not None else None
    raise InvalidInput(f"Unknown parameter '{key}' (known: {', '.join(PARAMETER_DEFINITIONS)})")


def rebuild_configuration(base: PipeConfiguration, key: str, value: float,
                          water_props: Callable[[float, float], FluidProperties] = water_properties
                          ) -> PipeConfiguration:
    """Return a new configuration with one parameter changed.

    Args:
        base: Configuration to start from (never modified)
        key: Parameter key in ``PARAMETER_DEFINITIONS``
        value: New value in the parameter's display unit
        water_props: Water property provider for the inlet density

    Returns:
        New PipeConfiguration. Only the fields that depend on ``key`` are
        recomputed: the segment count for 'L', the mass flow for 'm_dot' and
        'T_in' (volumetric flow held constant). A value equal to the current
        display value returns an exact copy of ``base``.

    Raises:
        InvalidInput: For an unknown key, a non-physical value or a thickness
            change on a bare pipe
        OutOfRange: If the new inlet state is outside the water property domain
    """
    _finite(f"Value of {key}", value)
    value = float(value)
    if value == display_value(base, key, water_props):
        return dataclasses.replace(base)

    if key == "L":
        _positive("Total length", value)
        return dataclasses.replace(base, total_length=value, num_segments=segment_count(value))
    elif key in ("m_dot", "T_in"):
        flow = value if key == "m_dot" else _flow_m3_per_hr(base, water_props)
        _positive("Volumetric flow", flow)
        fluid = base.fluid if key == "m_dot" else dataclasses.replace(base.fluid, T_in=value)
        rho = water_props(fluid.T_in, fluid.P).rho
        return dataclasses.replace(
            base, fluid=dataclasses.replace(fluid, m_dot=m3h_to_kgs(flow, rho)), flow_m3_per_hr=flow)
    elif key == "T_amb":
        return dataclasses.replace(base, ambient=dataclasses.replace(base.ambient, T_amb=value))
    elif key == "V_wind":
        return dataclasses.replace(base, ambient=dataclasses.replace(base.ambient, V_wind=kmh2ms(value)))
    elif key == "t_insul":
        if base.insulation is None:
            raise InvalidInput("Cannot change the insulation thickness of a bare pipe")
        return dataclasses.replace(base, insulation=dataclasses.replace(base.insulation, thickness=mm2m(value)))
    raise InvalidInput(f"Unknown parameter '{key}' (known: {', '.join(PARAMETER_DEFINITIONS)})")


# ==================== Numerical settings ====================

@dataclass(frozen=True)
class SolverSettings:
    """Numerical settings shared by the network solve and the sensitivity engine.

    Note:
        The freeze target is ``freeze_epsilon`` above 0 °C because the network
        clamps frozen water to exactly 0 °C.
    """
    iterations: int = 2                   # Property iterations per segment (1-10)
    freeze_epsilon: float = 0.01          # °C above 0 used as the freeze target
    safety_threshold: float = 5.0         # °C
    sampling_points: int = 250            # Intervals sampled between safe and opposite bound
    bound_max_iterations: int = 15        # Bisection budget for effective bounds
    fallback_range_percent: float = 0.2   # ±20% window when both bounds fail
    verify_tolerance: float = 1.0         # °C, looser check on a located critical point
    refine: Optional[str] = "brentq"      # Bracket refinement, None keeps the interpolated value

    def __post_init__(self):
        if isinstance(self.iterations, bool) or not isinstance(self.iterations, int) \
                or not 1 <= self.iterations <= 10:
            raise InvalidInput(f"Property iterations must be an integer in [1, 10], got {self.iterations!r}")
        if self.sampling_points < 2:
            raise InvalidInput(f"At least 2 sampling intervals are required, got {self.sampling_points}")
        if self.bound_max_iterations < 1:
            raise InvalidInput("Bisection needs at least one iteration")
        if not 0.0 < self.fallback_range_percent < 1.0:
            raise InvalidInput(f"Fallback range must be in (0, 1), got {self.fallback_range_percent}")
        if self.refine not in (None, "brentq"):
            raise InvalidInput(f"Unknown refinement '{self.refine}' (use None or 'brentq')")

    @property
    def freeze_target(self) -> float:
        return 0.0 + self.freeze_epsilon


def settings_from_dict(data: Optional[Mapping]) -> SolverSettings:
    """Build SolverSettings from a mapping, rejecting unknown keys."""
    if not data:
        return SolverSettings()
    known = {f.name for f in dataclasses.fields(SolverSettings)}
    unknown = set(data) - known
    if unknown:
        raise InvalidInput(f"Unknown solver settings: {', '.join(sorted(unknown))}")
    return SolverSettings(**dict(data))
