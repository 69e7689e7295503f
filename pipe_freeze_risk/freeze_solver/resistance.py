"""Series thermal resistance network of a pipe segment.

Layers are plain dicts, innermost first:

    {"type": "convection", "h": ..., "D": ..., "name": ...}
    {"type": "conduction", "r_inner": ..., "r_outer": ..., "k": ..., "name": ...}

Module Summary:
- Functions:
    - ``convection_resistance(h, D, L)``: 1/(h π D L) (K/W).
    - ``conduction_resistance(r_inner, r_outer, k, L)``: ln(ro/ri)/(2π k L) (K/W).
    - ``pipe_resistance(layers, L)``: Total and per-layer resistances.
    - ``overall_conductance(R_total)``: UA = 1/R_total (W/K).
    - ``interface_temperatures(T_fluid, T_amb, resistances)``: Temperatures between layers.
"""

import math
from typing import Dict, List, Sequence, Tuple

from ..errors import InvalidInput


def convection_resistance(h: float, D: float, L: float) -> float:
    """Convective resistance of a cylindrical surface, 1/(h π D L) in K/W."""
    if h <= 0.0 or D <= 0.0 or L <= 0.0:
        raise InvalidInput(f"Convection layer needs positive h, D and L, got h={h}, D={D}, L={L}")
    return 1.0/(h*math.pi*D*L)


def conduction_resistance(r_inner: float, r_outer: float, k: float, L: float) -> float:
    """Radial conduction through a cylindrical shell, ln(ro/ri)/(2π k L) in K/W."""
    if r_inner <= 0.0 or r_outer <= r_inner:
        raise InvalidInput(f"Conduction layer needs 0 < r_inner < r_outer, got {r_inner}, {r_outer}")
    if k <= 0.0 or L <= 0.0:
        raise InvalidInput(f"Conduction layer needs positive k and L, got k={k}, L={L}")
    return math.log(r_outer/r_inner)/(2.0*math.pi*k*L)


def pipe_resistance(layers: Sequence[Dict], L: float) -> Dict:
    """Sum the series resistances of a layered pipe wall.

    Args:
        layers: Layer dicts, innermost first (see module docstring)
        L: Segment length (m)

    Returns:
        Dictionary containing:
            - R_total: Total series resistance (K/W)
            - layers: List of (name, R) tuples in layer order
    """
    if not layers:
        raise InvalidInput("At least one resistance layer is required")

    breakdown: List[Tuple[str, float]] = []
    for layer in layers:
        if layer["type"] == "convection":
            R = convection_resistance(layer["h"], layer["D"], L)
        elif layer["type"] == "conduction":
            R = conduction_resistance(layer["r_inner"], layer["r_outer"], layer["k"], L)
        else:
            raise InvalidInput(f"Unknown layer type '{layer['type']}'")
        breakdown.append((layer.get("name", layer["type"]), R))

    return dict(
        R_total=sum(R for _, R in breakdown),
        layers=breakdown,
    )


def overall_conductance(R_total: float) -> float:
    """Overall conductance UA (W/K) from the total series resistance."""
    if not math.isfinite(R_total) or R_total <= 0.0:
        raise InvalidInput(f"Total resistance must be positive, got {R_total}")
    return 1.0/R_total


def interface_temperatures(T_fluid: float, T_amb: float,
                           resistances: Sequence[Tuple[str, float]]) -> List[Tuple[str, float]]:
    """Temperature after each layer for a steady radial heat flow.

    Args:
        T_fluid: Bulk fluid temperature (°C)
        T_amb: Ambient temperature (°C)
        resistances: (name, R) tuples, innermost first, as returned by ``pipe_resistance``

    Returns:
        List of (name, T) where T is the temperature on the outer side of the
        named layer; the last entry equals T_amb
    """
    R_total = sum(R for _, R in resistances)
    q = (T_fluid - T_amb)/R_total  # W, positive when losing heat

    profile = []
    T = T_fluid
    for name, R in resistances:
        T = T - q*R
        profile.append((name, T))
    return profile
