"""Thermal-hydraulic solution of a single pipe segment (NTU method).

The ambient air is an infinite-capacity reservoir, so the segment outlet
temperature has the closed form

    T_out = T_amb + (T_in - T_amb) * exp(-NTU),    NTU = UA / (m_dot * cp)

and no wall-temperature iteration is needed. Water properties are evaluated
at the segment-average temperature, refined over a small fixed number of
passes.

Module Summary:
- Classes:
    - ``SolverModels``: Injectable property providers and correlations.
    - ``SegmentState``: Immutable result of one segment solve.
- Constants:
    - ``DEFAULT_MODELS``: Tabulated properties with the default correlations.
- Functions:
    - ``solve_segment(...)``: Solve one segment given its inlet state.
    - ``temperature_profile(state, T_amb)``: Interface temperatures across the layers.
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .. import tables
from ..errors import InvalidInput
from . import correlations, hydraulics, resistance
from .config import AmbientConditions, Insulation, PipeGeometry
from .properties import FluidProperties, air_properties, water_properties


@dataclass(frozen=True)
class SolverModels:
    """Property providers and correlations used by the segment solver.

    Attributes:
        water: (T °C, P bar) -> FluidProperties
        air: (T °C) -> FluidProperties
        material: material id -> dict with 'k' and 'emissivity'
        friction: (Re, eps_over_D) -> Darcy friction factor
        nusselt_internal: (Re, Pr, D, L, eps_over_D, mode) -> Nu
        nusselt_external: (Re, Pr, Gr) -> Nu
        radiation: (T_surface °C, T_amb °C, emissivity) -> h_rad
    """
    water: Callable[[float, float], FluidProperties] = water_properties
    air: Callable[[float], FluidProperties] = air_properties
    material: Callable[[str], Dict] = tables.material_properties
    friction: Callable[[float, float], float] = hydraulics.friction_factor
    nusselt_internal: Callable[..., float] = correlations.nusselt_internal
    nusselt_external: Callable[[float, float, float], float] = correlations.nusselt_external
    radiation: Callable[[float, float, float], float] = correlations.radiation_coefficient


DEFAULT_MODELS = SolverModels()


@dataclass(frozen=True)
class SegmentState:
    # Position
    index: int
    x_start: float        # m
    x_end: float          # m
    # Inlet state
    T_in: float           # °C
    P_in: float           # bar
    T_avg: float          # °C, property evaluation temperature
    water: FluidProperties
    air: FluidProperties
    # Hydraulics
    V: float              # m/s
    Re: float
    f: float              # Darcy friction factor
    dP: float             # Pa
    regime: str
    # Heat transfer
    h_int: float          # W/m²/K
    h_conv_ext: float     # W/m²/K
    h_rad: float          # W/m²/K
    h_ext: float          # W/m²/K, convection + radiation
    Ri: float             # Richardson number of the outer flow (inf for still air)
    convection_regime: str
    R_layers: Tuple[Tuple[str, float], ...]  # (name, K/W), innermost first
    R_total: float        # K/W
    UA: float             # W/K
    U: float              # W/m²/K on the final outer surface
    NTU: float
    effectiveness: float
    # Outlet
    T_out: float          # °C
    Q_loss: float         # W, positive when the water loses heat
    frozen: bool = False

    @property
    def length(self) -> float:
        return self.x_end - self.x_start


def solve_segment(
        geometry: PipeGeometry,
        length: float,
        T_in: float,
        P: float,
        m_dot: float,
        ambient: AmbientConditions,
        insulation: Optional[Insulation] = None,
        iterations: int = 2,
        models: SolverModels = DEFAULT_MODELS,
        index: int = 0,
        x_start: float = 0.0,
) -> SegmentState:
    """Solve heat loss and pressure drop over one pipe segment.

    Heat path from the water to the air:
    - Internal convection (regime-selected Nusselt)
    - Pipe wall conduction
    - Insulation conduction (optional)
    - External convection (Richardson-selected) in parallel with radiation

    Args:
        geometry: Pipe geometry
        length: Segment length (m)
        T_in: Water inlet temperature (°C)
        P: Inlet absolute pressure (bar)
        m_dot: Mass flow rate (kg/s)
        ambient: Air temperature and wind speed
        insulation: Insulation layer, or None for a bare pipe
        iterations: Property passes (1 uses the inlet temperature only)
        models: Property providers and correlations
        index: Segment index along the pipe (bookkeeping only)
        x_start: Segment start position (m, bookkeeping only)

    Returns:
        SegmentState with every intermediate quantity of the solve

    Raises:
        InvalidInput: Non-physical inputs
        OutOfRange: Property lookup outside the tabulated domain
        CorrelationDomainError: Dimensionless group outside a correlation's domain
        ReferenceDataMissing: Unknown pipe or insulation material

    Note:
        - Water properties use T_avg = (T_in + T_out_guess)/2, floored at 0 °C;
          the first guess is max(0, (T_in + T_amb)/2)
        - Buoyancy uses the surface estimate (T_in + T_amb)/2 and the ideal-gas
          beta = 1/T_film; radiation uses T_in as the surface estimate
    """
    # ==================== Input Validation ====================
    if not math.isfinite(length) or length <= 0.0:
        raise InvalidInput(f"Segment length must be positive, got {length}")
    if not math.isfinite(T_in):
        raise InvalidInput(f"Inlet temperature must be finite, got {T_in}")
    if not math.isfinite(P) or P <= 0.0:
        raise InvalidInput(f"Pressure must be positive, got {P}")
    if not math.isfinite(m_dot) or m_dot <= 0.0:
        raise InvalidInput(f"Mass flow rate must be positive, got {m_dot}")
    if isinstance(iterations, bool) or not isinstance(iterations, int) or not 1 <= iterations <= 10:
        raise InvalidInput(f"Property iterations must be an integer in [1, 10], got {iterations!r}")

    D_i = geometry.D_inner
    D_o = geometry.D_outer
    D_final = D_o + 2.0*insulation.thickness if insulation is not None else D_o
    T_amb = ambient.T_amb
    mode = "cooling" if T_in >= T_amb else "heating"

    # ==================== Temperature-Independent Terms ====================
    air = models.air(T_amb)
    pipe_mat = models.material(geometry.material)
    insul_mat = models.material(insulation.material) if insulation is not None else None

    # External convection on the final outer diameter
    nu_air = air.mu/air.rho
    T_surf_est = 0.5*(T_in + T_amb)
    T_film_K = 0.5*(T_surf_est + T_amb) + 273.15
    Gr = correlations.grashof(1.0/T_film_K, T_surf_est - T_amb, D_final, nu_air)
    if ambient.V_wind > 0.0:
        Re_air = hydraulics.reynolds(air.rho, ambient.V_wind, D_final, air.mu)
        Ri = correlations.richardson(Gr, Re_air)
    else:
        Re_air = 0.0
        Ri = math.inf
    conv_regime = correlations.external_convection_regime(Gr, Re_air)
    Nu_ext = models.nusselt_external(Re_air, air.Pr, Gr)
    h_conv_ext = correlations.convection_coefficient(Nu_ext, air.k, D_final)
    h_rad = models.radiation(T_in, T_amb, pipe_mat["emissivity"])
    h_ext = h_conv_ext + h_rad

    # ==================== Property Iteration ====================
    T_out_guess = T_in if iterations == 1 else max(0.0, T_surf_est)
    eps_over_D = geometry.roughness/D_i

    for _ in range(iterations):
        T_avg = T_in if iterations == 1 else 0.5*(T_in + T_out_guess)
        T_avg = max(0.0, T_avg)
        water = models.water(T_avg, P)

        # Hydraulics
        V = hydraulics.velocity(m_dot, water.rho, D_i)
        Re = hydraulics.reynolds(water.rho, V, D_i, water.mu)
        f = models.friction(Re, eps_over_D)
        dP = hydraulics.pressure_drop_darcy(f, length, D_i, water.rho, V)

        # Internal convection
        Nu_int = models.nusselt_internal(Re, water.Pr, D_i, length, eps_over_D, mode)
        h_int = correlations.convection_coefficient(Nu_int, water.k, D_i)

        # Series resistance network
        layers = [
            dict(type="convection", h=h_int, D=D_i, name="internal convection"),
            dict(type="conduction", r_inner=D_i/2.0, r_outer=D_o/2.0, k=pipe_mat["k"], name="pipe wall"),
        ]
        if insulation is not None:
            layers.append(dict(type="conduction", r_inner=D_o/2.0, r_outer=D_final/2.0,
                               k=insul_mat["k"], name="insulation"))
        layers.append(dict(type="convection", h=h_ext, D=D_final, name="external convection + radiation"))
        network = resistance.pipe_resistance(layers, length)
        UA = resistance.overall_conductance(network["R_total"])

        # NTU method
        NTU = UA/(m_dot*water.cp)
        effectiveness = 1.0 - math.exp(-NTU)
        T_out = T_amb + (T_in - T_amb)*(1.0 - effectiveness)
        Q_loss = m_dot*water.cp*(T_in - T_out)

        T_out_guess = max(0.0, T_out)

    if not (math.isfinite(T_out) and math.isfinite(dP)):
        raise InvalidInput(f"Non-finite segment result (T_out={T_out}, dP={dP})")

    return SegmentState(
        index=index,
        x_start=x_start,
        x_end=x_start + length,
        T_in=T_in,
        P_in=P,
        T_avg=T_avg,
        water=water,
        air=air,
        V=V,
        Re=Re,
        f=f,
        dP=dP,
        regime=hydraulics.flow_regime(Re),
        h_int=h_int,
        h_conv_ext=h_conv_ext,
        h_rad=h_rad,
        h_ext=h_ext,
        Ri=Ri,
        convection_regime=conv_regime,
        R_layers=tuple(network["layers"]),
        R_total=network["R_total"],
        UA=UA,
        U=UA/(math.pi*D_final*length),
        NTU=NTU,
        effectiveness=effectiveness,
        T_out=T_out,
        Q_loss=Q_loss,
    )


def temperature_profile(state: SegmentState, T_amb: float) -> List[Tuple[str, float]]:
    """Temperatures on the outer side of each layer at the segment-average water temperature.

    Args:
        state: Solved segment
        T_amb: Ambient temperature (°C)

    Returns:
        List of (layer name, T °C); the first entry is the inner wall surface
    """
    T_bulk = 0.5*(state.T_in + state.T_out)
    return resistance.interface_temperatures(T_bulk, T_amb, state.R_layers)
