"""Fluid property providers for water and air.

Each provider is a plain callable returning a ``FluidProperties`` tuple, so
the segment solver can be handed any implementation (tabulated, CoolProp or a
constant stub in tests).

Module Summary:
- Classes:
    - ``FluidProperties``: (rho, mu, k, cp, Pr) named tuple.
- Functions:
    - ``water_properties(T, P)``: Bilinear interpolation in the water table (T °C, P bar).
    - ``air_properties(T)``: Linear interpolation in the dry-air table (T °C).
    - ``make_coolprop_water(fluid_name)``: CoolProp-backed provider with the water signature.
"""

import math
from typing import Callable, NamedTuple, Tuple

import numpy as np
from CoolProp.CoolProp import PropsSI

from .. import tables
from ..errors import InvalidInput, OutOfRange
from ..units import C2K, bar2Pa


class FluidProperties(NamedTuple):
    rho: float  # Density (kg/m³)
    mu: float   # Dynamic viscosity (Pa·s)
    k: float    # Thermal conductivity (W/m/K)
    cp: float   # Specific heat (J/kg/K)
    Pr: float   # Prandtl number (dimensionless)


WATER_T_MIN, WATER_T_MAX = float(tables.WATER_T_GRID_C[0]), float(tables.WATER_T_GRID_C[-1])
WATER_P_MIN, WATER_P_MAX = float(tables.WATER_P_GRID_BAR[0]), float(tables.WATER_P_GRID_BAR[-1])
AIR_T_MIN, AIR_T_MAX = float(tables.AIR_T_GRID_C[0]), float(tables.AIR_T_GRID_C[-1])


def _check_finite(name: str, value: float) -> None:
    if not isinstance(value, (int, float, np.floating, np.integer)) or not math.isfinite(value):
        raise InvalidInput(f"{name} must be a finite number, got {value!r}")


def _bracket(value: float, grid: np.ndarray) -> Tuple[int, float]:
    """Lower grid index and weight t in [0, 1] such that value = (1-t)*g[i] + t*g[i+1]."""
    i = int(np.searchsorted(grid, value, side="right")) - 1
    i = min(max(i, 0), len(grid) - 2)
    t = (value - grid[i])/(grid[i+1] - grid[i])
    return i, t


def water_properties(T: float, P: float) -> FluidProperties:
    """Thermophysical properties of liquid water from the reference table.

    Args:
        T: Temperature (°C), tabulated 0 to 100 °C
        P: Absolute pressure (bar), tabulated 1 to 10 bar

    Returns:
        FluidProperties interpolated bilinearly in (T, P)

    Raises:
        InvalidInput: If T or P is not a finite number
        OutOfRange: If T or P is outside the tabulated domain

    Note:
        Weights are applied as (1-t)*a + t*b so that evaluating exactly on a
        grid node returns the tabulated value bit for bit.
    """
    _check_finite("Water temperature", T)
    _check_finite("Water pressure", P)
    if T < WATER_T_MIN or T > WATER_T_MAX:
        raise OutOfRange(
            f"Water temperature {T} °C outside table range [{WATER_T_MIN}, {WATER_T_MAX}] °C")
    if P < WATER_P_MIN or P > WATER_P_MAX:
        raise OutOfRange(
            f"Water pressure {P} bar outside table range [{WATER_P_MIN}, {WATER_P_MAX}] bar")

    i, t = _bracket(T, tables.WATER_T_GRID_C)
    j, s = _bracket(P, tables.WATER_P_GRID_BAR)

    def bilinear(table: np.ndarray) -> float:
        # Interpolate along T at both pressure columns, then along P
        lo = (1.0 - t)*table[i, j] + t*table[i+1, j]
        hi = (1.0 - t)*table[i, j+1] + t*table[i+1, j+1]
        return float((1.0 - s)*lo + s*hi)

    rho = bilinear(tables.WATER_DENSITY)
    mu = bilinear(tables.WATER_VISCOSITY)
    k = bilinear(tables.WATER_CONDUCTIVITY)
    cp = bilinear(tables.WATER_SPECIFIC_HEAT)
    return FluidProperties(rho, mu, k, cp, mu*cp/k)


def air_properties(T: float) -> FluidProperties:
    """Thermophysical properties of dry air at atmospheric pressure.

    Args:
        T: Air temperature (°C), tabulated -40 to 50 °C

    Returns:
        FluidProperties linearly interpolated in T (Pr is tabulated, not derived)

    Raises:
        InvalidInput: If T is not a finite number
        OutOfRange: If T is outside the tabulated domain
    """
    _check_finite("Air temperature", T)
    if T < AIR_T_MIN or T > AIR_T_MAX:
        raise OutOfRange(
            f"Air temperature {T} °C outside table range [{AIR_T_MIN}, {AIR_T_MAX}] °C")

    grid = tables.AIR_T_GRID_C
    return FluidProperties(
        rho=float(np.interp(T, grid, tables.AIR_DENSITY)),
        mu=float(np.interp(T, grid, tables.AIR_VISCOSITY)),
        k=float(np.interp(T, grid, tables.AIR_CONDUCTIVITY)),
        cp=float(np.interp(T, grid, tables.AIR_SPECIFIC_HEAT)),
        Pr=float(np.interp(T, grid, tables.AIR_PRANDTL)),
    )


def make_coolprop_water(fluid_name: str = "Water") -> Callable[[float, float], FluidProperties]:
    """Create a CoolProp-based provider with the same signature as ``water_properties``.

    Args:
        fluid_name: Name of the fluid as recognized by CoolProp (default 'Water')

    Returns:
        A callable taking temperature (°C) and pressure (bar) and returning
        FluidProperties

    Example:
        >>> props = make_coolprop_water()
        >>> props(10.0, 3.0).rho
    """
    def props(T: float, P: float) -> FluidProperties:
        _check_finite("Water temperature", T)
        _check_finite("Water pressure", P)
        if T < 0.0:
            raise OutOfRange(f"Water temperature {T} °C is below the freezing point")
        T_K, p_Pa = C2K(T), bar2Pa(P)
        try:
            rho = PropsSI("D", "T", T_K, "P", p_Pa, fluid_name)  # Density
            cp = PropsSI("C", "T", T_K, "P", p_Pa, fluid_name)   # Specific heat at constant pressure
            k = PropsSI("L", "T", T_K, "P", p_Pa, fluid_name)    # Thermal conductivity
            mu = PropsSI("V", "T", T_K, "P", p_Pa, fluid_name)   # Dynamic viscosity
        except ValueError as exc:
            raise OutOfRange(f"CoolProp could not evaluate {fluid_name} at {T} °C, {P} bar: {exc}") from exc
        return FluidProperties(rho, mu, k, cp, mu*cp/k)
    return props
