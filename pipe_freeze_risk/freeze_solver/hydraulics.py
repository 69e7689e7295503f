"""Hydraulic formulas for full-bore circular pipe flow.

Module Summary:
- Constants:
    - ``RE_LAMINAR_MAX`` (2300): laminar / turbulent switch shared by the
      friction factor, the internal Nusselt selection and regime labels.
    - ``RE_TURBULENT_MIN`` (4000): upper edge of the transitional band.
- Functions:
    - ``cross_section_area(D)``: Flow area (m²).
    - ``velocity(m_dot, rho, D)``: Mean velocity from mass flow (m/s).
    - ``reynolds(rho, V, D, mu)``: Reynolds number.
    - ``flow_regime(Re)``: 'laminar', 'transitional' or 'turbulent'.
    - ``friction_factor_laminar(Re)``: Hagen-Poiseuille 64/Re.
    - ``friction_factor_churchill(Re, eps_over_D)``: Explicit Churchill (1977).
    - ``friction_factor_colebrook(Re, eps_over_D)``: Iterative Colebrook-White.
    - ``friction_factor(Re, eps_over_D, method)``: Regime-selected Darcy friction factor.
    - ``pressure_drop_darcy(f, L, D, rho, V)``: Darcy-Weisbach pressure drop (Pa).
"""

import logging
import math

from ..errors import CorrelationDomainError, InvalidInput

logger = logging.getLogger(__name__)

RE_LAMINAR_MAX = 2300.0
RE_TURBULENT_MIN = 4000.0


def _require_positive(name: str, value: float) -> None:
    if not math.isfinite(value) or value <= 0.0:
        raise InvalidInput(f"{name} must be positive and finite, got {value}")


def _check_reynolds(Re: float) -> None:
    if not math.isfinite(Re) or Re <= 0.0:
        raise CorrelationDomainError(f"Reynolds number must be positive, got {Re}")


def cross_section_area(D: float) -> float:
    """Flow area of a circular pipe (m²) from its inner diameter D (m)."""
    _require_positive("Diameter", D)
    return math.pi*D**2/4.0


def velocity(m_dot: float, rho: float, D: float) -> float:
    """Mean flow velocity.

    Args:
        m_dot: Mass flow rate (kg/s)
        rho: Fluid density (kg/m³)
        D: Inner diameter (m)

    Returns:
        Velocity (m/s) = (m_dot/rho) / (πD²/4)
    """
    _require_positive("Mass flow rate", m_dot)
    _require_positive("Density", rho)
    return (m_dot/rho)/cross_section_area(D)


def reynolds(rho: float, V: float, D: float, mu: float) -> float:
    """Reynolds number Re = rho*V*D/mu."""
    _require_positive("Density", rho)
    _require_positive("Velocity", V)
    _require_positive("Diameter", D)
    _require_positive("Viscosity", mu)
    return rho*V*D/mu


def flow_regime(Re: float) -> str:
    """Label the internal flow regime using the shared thresholds."""
    if Re < RE_LAMINAR_MAX:
        return "laminar"
    elif Re <= RE_TURBULENT_MIN:
        return "transitional"
    return "turbulent"


def friction_factor_laminar(Re: float) -> float:
    """Darcy friction factor for fully developed laminar flow, f = 64/Re."""
    _check_reynolds(Re)
    return 64.0/Re


def friction_factor_churchill(Re: float, eps_over_D: float) -> float:
    """Compute Darcy friction factor using the Churchill correlation.

    Explicit, single-expression fit covering laminar, transitional and fully
    rough turbulent flow; no iteration.

    Args:
        Re: Reynolds number (dimensionless)
        eps_over_D: Relative roughness ε/D (dimensionless)

    Returns:
        Darcy friction factor (dimensionless)

    Reference:
        Churchill, S. W. (1977). "Friction-factor equation spans all
        fluid-flow regimes." Chemical Engineering, 84(24), 91-92.
    """
    _check_reynolds(Re)
    if not math.isfinite(eps_over_D) or eps_over_D < 0.0:
        raise CorrelationDomainError(f"Relative roughness must be non-negative, got {eps_over_D}")

    # f = 8 [ (8/Re)^12 + (A + B)^-1.5 ]^(1/12)
    A = (-2.457*math.log((7.0/Re)**0.9 + 0.27*eps_over_D))**16
    B = (37530.0/Re)**16
    return 8.0*((8.0/Re)**12 + (A + B)**-1.5)**(1.0/12.0)


def friction_factor_colebrook(Re: float, eps_over_D: float,
                              max_iter: int = 50, tol: float = 1e-6) -> float:
    """Solve the Colebrook-White equation by fixed-point iteration.

    Args:
        Re: Reynolds number (dimensionless)
        eps_over_D: Relative roughness ε/D (dimensionless)
        max_iter: Maximum number of iterations
        tol: Absolute tolerance on f

    Returns:
        Darcy friction factor (dimensionless)

    Note:
        Starts from the Swamee-Jain explicit estimate. If the tolerance is not
        reached the last iterate is returned and a warning is logged.
    """
    _check_reynolds(Re)
    if not math.isfinite(eps_over_D) or eps_over_D < 0.0:
        raise CorrelationDomainError(f"Relative roughness must be non-negative, got {eps_over_D}")

    f = 0.25/math.log10(eps_over_D/3.7 + 5.74/Re**0.9)**2
    for _ in range(max_iter):
        # 1/sqrt(f) = -2 log10(ε/3.7D + 2.51/(Re sqrt(f)))
        f_new = 1.0/(-2.0*math.log10(eps_over_D/3.7 + 2.51/(Re*math.sqrt(f))))**2
        if abs(f_new - f) < tol:
            return f_new
        f = f_new

    logger.warning("Colebrook did not converge after %d iterations (Re=%.0f, eps/D=%.2e)",
                   max_iter, Re, eps_over_D)
    return f


def friction_factor(Re: float, eps_over_D: float, method: str = "churchill") -> float:
    """Darcy friction factor with a single laminar/turbulent switch at Re = 2300.

    Args:
        Re: Reynolds number (dimensionless)
        eps_over_D: Relative roughness ε/D (dimensionless)
        method: Turbulent correlation, 'churchill' (default) or 'colebrook'

    Returns:
        Darcy friction factor (dimensionless)

    Note:
        64/Re and Churchill disagree by roughly 11% at Re = 2300 because
        Churchill already blends towards its transitional branch there.
    """
    if Re < RE_LAMINAR_MAX:
        return friction_factor_laminar(Re)
    if method == "churchill":
        return friction_factor_churchill(Re, eps_over_D)
    elif method == "colebrook":
        return friction_factor_colebrook(Re, eps_over_D)
    raise ValueError(f"Unknown friction method '{method}' (use 'churchill' or 'colebrook')")


def pressure_drop_darcy(f: float, L: float, D: float, rho: float, V: float) -> float:
    """Darcy-Weisbach pressure drop, dP = f (L/D) rho V²/2.

    Args:
        f: Darcy friction factor (dimensionless)
        L: Pipe length (m)
        D: Inner diameter (m)
        rho: Fluid density (kg/m³)
        V: Mean velocity (m/s)

    Returns:
        Pressure drop (Pa)
    """
    _require_positive("Friction factor", f)
    _require_positive("Length", L)
    _require_positive("Diameter", D)
    _require_positive("Density", rho)
    _require_positive("Velocity", V)
    return f*(L/D)*0.5*rho*V**2
