"""Heat-transfer correlations for the inside and outside of a pipe.

Internal Nusselt selection (Re from the water flow):

    ==================  =====================================================
    Re < 2300           Hausen (laminar, thermal entrance), 3.66 without L
    2300 <= Re <= 4000  linear blend Hausen(2300) -> Gnielinski(4000)
    4000 < Re <= 5e6    Gnielinski with the pipe's Darcy friction factor
    Re > 5e6            Dittus-Boelter (n = 0.3 cooling, 0.4 heating)
    ==================  =====================================================

External convection uses the Richardson number Ri = Gr/Re²: forced
(Churchill-Bernstein) below 0.1, natural (Churchill-Chu) above 10 and the
Churchill n = 3 combination in between.

Module Summary:
- Functions (internal):
    - ``nusselt_laminar_fully_developed(bc)``: 3.66 (constant T) or 4.36 (constant q).
    - ``nusselt_hausen(Re, Pr, D, L)``: Laminar Nu with entrance correction.
    - ``nusselt_dittus_boelter(Re, Pr, mode)``: Fully turbulent Nu.
    - ``nusselt_gnielinski(Re, Pr, f=None)``: Transitional/turbulent Nu.
    - ``nusselt_internal(Re, Pr, D, L, eps_over_D, mode)``: Regime-selected internal Nu.
    - ``convection_coefficient(Nu, k, D)``: h = Nu k / D.
- Functions (external):
    - ``nusselt_churchill_bernstein(Re, Pr)``: Cylinder in cross-flow.
    - ``nusselt_hilpert(Re, Pr)``: Tabulated C Re^m Pr^(1/3) alternative.
    - ``nusselt_natural_cylinder(Ra, Pr)``: Horizontal cylinder, free convection.
    - ``grashof(beta, dT, D, nu, g)``, ``rayleigh(...)``, ``richardson(Gr, Re)``.
    - ``external_convection_regime(Gr, Re)``: 'forced', 'natural' or 'mixed'.
    - ``nusselt_external(Re, Pr, Gr=0)``: Richardson-selected external Nu.
- Functions (radiation):
    - ``radiation_coefficient(T_surface, T_amb, emissivity)``: Linearized h_rad.
"""

import logging
import math
from typing import Optional

from ..errors import CorrelationDomainError, InvalidInput
from ..units import C2K
from .hydraulics import RE_LAMINAR_MAX, RE_TURBULENT_MIN, friction_factor_churchill

logger = logging.getLogger(__name__)

STEFAN_BOLTZMANN = 5.670374419e-8  # W/(m²·K⁴)
GRAVITY = 9.81  # m/s²

RE_GNIELINSKI_MAX = 5.0e6
RI_FORCED_MAX = 0.1
RI_NATURAL_MIN = 10.0


def _check_group(name: str, value: float, allow_zero: bool = False) -> None:
    if not math.isfinite(value) or value < 0.0 or (value == 0.0 and not allow_zero):
        raise CorrelationDomainError(f"{name} outside correlation domain: {value}")


# ==================== Internal convection ====================

def nusselt_laminar_fully_developed(bc: str = "constant_T") -> float:
    """Fully developed laminar Nu for a constant wall temperature or heat flux."""
    if bc == "constant_T":
        return 3.66
    elif bc == "constant_q":
        return 4.36
    raise ValueError(f"Unknown boundary condition '{bc}' (use 'constant_T' or 'constant_q')")


def nusselt_hausen(Re: float, Pr: float, D: float, L: float) -> float:
    """Laminar Nusselt number with the Hausen thermal entrance correction.

    Args:
        Re: Reynolds number (dimensionless)
        Pr: Prandtl number (dimensionless)
        D: Inner diameter (m)
        L: Heated length (m)

    Returns:
        Mean Nusselt number over the length L

    Note:
        Nu = 3.66 + 0.0668 Gz / (1 + 0.04 Gz^(2/3)), Gz = (D/L) Re Pr.
        Tends to 3.66 for long pipes.

    Reference:
        Hausen, H. (1943). Z. VDI Beiheft Verfahrenstechnik, 4, 91-98.
    """
    _check_group("Reynolds number", Re)
    _check_group("Prandtl number", Pr)
    if D <= 0.0 or L <= 0.0:
        raise InvalidInput(f"Hausen needs positive D and L, got D={D}, L={L}")

    Gz = (D/L)*Re*Pr
    return 3.66 + 0.0668*Gz/(1.0 + 0.04*Gz**(2.0/3.0))


def nusselt_dittus_boelter(Re: float, Pr: float, mode: str = "heating") -> float:
    """Dittus-Boelter Nu = 0.023 Re^0.8 Pr^n, n = 0.4 heating / 0.3 cooling of the fluid."""
    _check_group("Reynolds number", Re)
    _check_group("Prandtl number", Pr)
    if mode == "heating":
        n = 0.4
    elif mode == "cooling":
        n = 0.3
    else:
        raise ValueError(f"Unknown mode '{mode}' (use 'heating' or 'cooling')")
    if Re < 1.0e4 or Pr < 0.7 or Pr > 160.0:
        logger.debug("Dittus-Boelter used outside Re > 1e4, 0.7 < Pr < 160 (Re=%.0f, Pr=%.2f)", Re, Pr)
    return 0.023*Re**0.8*Pr**n


def nusselt_gnielinski(Re: float, Pr: float, f: Optional[float] = None) -> float:
    """Compute Nusselt number for turbulent internal flow using Gnielinski correlation.

    Args:
        Re: Reynolds number (dimensionless)
        Pr: Prandtl number (dimensionless)
        f: Darcy friction factor. If None, the smooth-pipe Petukhov value
           f = (0.79 ln Re - 1.64)^-2 is used

    Returns:
        Nusselt number (dimensionless)

    Note:
        Valid for 3000 < Re < 5×10⁶ and 0.5 < Pr < 2000.

    Reference:
        Gnielinski, V. (1976). "New Equations for Heat and Mass Transfer in
        Turbulent Pipe and Channel Flow." International Chemical Engineering, 16(2).
    """
    _check_group("Reynolds number", Re)
    _check_group("Prandtl number", Pr)
    if Re <= 1000.0:
        raise CorrelationDomainError(f"Gnielinski requires Re > 1000, got {Re}")
    if f is None:
        f = (0.79*math.log(Re) - 1.64)**-2
    elif not math.isfinite(f) or f <= 0.0:
        raise CorrelationDomainError(f"Friction factor must be positive, got {f}")
    if Re < 3000.0 or Re > RE_GNIELINSKI_MAX or Pr < 0.5 or Pr > 2000.0:
        logger.debug("Gnielinski used outside its validity band (Re=%.0f, Pr=%.2f)", Re, Pr)

    # Nu = [(f/8) * (Re - 1000) * Pr] / [1 + 12.7 * sqrt(f/8) * (Pr^(2/3) - 1)]
    return ((f/8.0)*(Re-1000.0)*Pr)/(1.0 + 12.7*math.sqrt(f/8.0)*(Pr**(2.0/3.0)-1.0))


def nusselt_internal(Re: float, Pr: float, D: Optional[float] = None, L: Optional[float] = None,
                     eps_over_D: Optional[float] = None, mode: str = "cooling") -> float:
    """Regime-selected Nusselt number for flow inside the pipe.

    Args:
        Re: Reynolds number (dimensionless)
        Pr: Prandtl number (dimensionless)
        D: Inner diameter (m); with L enables the laminar entrance correction
        L: Segment length (m)
        eps_over_D: Relative roughness; when given, Gnielinski uses the Churchill
            friction factor instead of the smooth-pipe Petukhov value
        mode: 'cooling' or 'heating' of the fluid (Dittus-Boelter exponent)

    Returns:
        Nusselt number (dimensionless)
    """
    _check_group("Reynolds number", Re)
    _check_group("Prandtl number", Pr)
    entrance = D is not None and L is not None

    def laminar(Re_lam: float) -> float:
        return nusselt_hausen(Re_lam, Pr, D, L) if entrance else nusselt_laminar_fully_developed()

    def gnielinski(Re_turb: float) -> float:
        f = friction_factor_churchill(Re_turb, eps_over_D) if eps_over_D is not None else None
        return nusselt_gnielinski(Re_turb, Pr, f)

    if Re < RE_LAMINAR_MAX:
        return laminar(Re)
    elif Re <= RE_TURBULENT_MIN:
        # Transitional: interpolate between the two regime edges
        weight = (Re - RE_LAMINAR_MAX)/(RE_TURBULENT_MIN - RE_LAMINAR_MAX)
        Nu_lam = laminar(RE_LAMINAR_MAX)
        Nu_turb = gnielinski(RE_TURBULENT_MIN)
        return Nu_lam + weight*(Nu_turb - Nu_lam)
    elif Re <= RE_GNIELINSKI_MAX:
        return gnielinski(Re)
    return nusselt_dittus_boelter(Re, Pr, mode)


def convection_coefficient(Nu: float, k: float, D: float) -> float:
    """Heat transfer coefficient h = Nu k / D (W/m²/K)."""
    if not math.isfinite(Nu) or Nu <= 0.0:
        raise CorrelationDomainError(f"Nusselt number must be positive, got {Nu}")
    if k <= 0.0 or D <= 0.0:
        raise InvalidInput(f"Conductivity and diameter must be positive, got k={k}, D={D}")
    return Nu*k/D


# ==================== External convection ====================

def nusselt_churchill_bernstein(Re: float, Pr: float) -> float:
    """Average Nusselt number for a cylinder in cross-flow.

    Args:
        Re: Reynolds number on the outer diameter (dimensionless)
        Pr: Prandtl number of the air (dimensionless)

    Returns:
        Nusselt number (dimensionless)

    Note:
        Recommended for Re·Pr > 0.2.

    Reference:
        Churchill, S. W. and Bernstein, M. (1977). J. Heat Transfer, 99(2), 300-306.
    """
    _check_group("Reynolds number", Re)
    _check_group("Prandtl number", Pr)
    if Re*Pr < 0.2:
        logger.debug("Churchill-Bernstein used with Re*Pr = %.3g < 0.2", Re*Pr)

    term2 = 0.62*math.sqrt(Re)*Pr**(1.0/3.0)/(1.0 + (0.4/Pr)**(2.0/3.0))**0.25
    return 0.3 + term2*(1.0 + (Re/282000.0)**(5.0/8.0))**(4.0/5.0)


# Hilpert constants: (Re upper bound, C, m)
_HILPERT = (
    (4.0, 0.989, 0.330),
    (40.0, 0.911, 0.385),
    (4000.0, 0.683, 0.466),
    (40000.0, 0.193, 0.618),
    (400000.0, 0.027, 0.805),
)


def nusselt_hilpert(Re: float, Pr: float) -> float:
    """Hilpert cross-flow correlation Nu = C Re^m Pr^(1/3), constants from Re bands."""
    _check_group("Reynolds number", Re)
    _check_group("Prandtl number", Pr)
    C, m = _HILPERT[-1][1:]
    for Re_max, C_band, m_band in _HILPERT:
        if Re < Re_max:
            C, m = C_band, m_band
            break
    else:
        logger.debug("Hilpert extrapolated beyond Re = 4e5 (Re=%.0f)", Re)
    return C*Re**m*Pr**(1.0/3.0)


def nusselt_natural_cylinder(Ra: float, Pr: float) -> float:
    """Churchill-Chu free convection from a horizontal cylinder.

    Nu = 0.36 + 0.518 Ra^(1/4) / [1 + (0.559/Pr)^(9/16)]^(4/9), for Ra < 1e9.
    Ra = 0 (no temperature difference) returns the conduction limit 0.36.
    """
    _check_group("Rayleigh number", Ra, allow_zero=True)
    _check_group("Prandtl number", Pr)
    return 0.36 + 0.518*Ra**0.25/(1.0 + (0.559/Pr)**(9.0/16.0))**(4.0/9.0)


def grashof(beta: float, delta_T: float, D: float, nu: float, g: float = GRAVITY) -> float:
    """Grashof number Gr = g beta |dT| D³ / nu²."""
    if beta < 0.0 or D <= 0.0 or nu <= 0.0:
        raise InvalidInput(f"Invalid Grashof inputs: beta={beta}, D={D}, nu={nu}")
    return g*beta*abs(delta_T)*D**3/nu**2


def rayleigh(beta: float, delta_T: float, D: float, nu: float, Pr: float,
             g: float = GRAVITY) -> float:
    """Rayleigh number Ra = Gr Pr."""
    return grashof(beta, delta_T, D, nu, g)*Pr


def richardson(Gr: float, Re: float) -> float:
    """Richardson number Ri = Gr / Re² (buoyancy over inertia)."""
    _check_group("Grashof number", Gr, allow_zero=True)
    _check_group("Reynolds number", Re)
    return Gr/(Re*Re)


def external_convection_regime(Gr: float, Re: float) -> str:
    """'forced' for Ri < 0.1, 'natural' for Ri > 10, otherwise 'mixed'.

    Still air (Re = 0) is natural convection.
    """
    if Re == 0.0:
        return "natural"
    if Gr == 0.0:
        return "forced"
    Ri = richardson(Gr, Re)
    if Ri < RI_FORCED_MAX:
        return "forced"
    elif Ri > RI_NATURAL_MIN:
        return "natural"
    return "mixed"


def nusselt_external(Re: float, Pr: float, Gr: float = 0.0) -> float:
    """External Nusselt number selected by the Richardson number.

    Args:
        Re: Reynolds number of the wind on the outer diameter (0 for still air)
        Pr: Prandtl number of the air (dimensionless)
        Gr: Grashof number on the outer diameter (0 disables buoyancy)

    Returns:
        Nusselt number (dimensionless)

    Note:
        Mixed convection uses Nu = (Nu_forced³ + Nu_natural³)^(1/3) and logs a
        notice, since it is less accurate than either pure regime.

    Reference:
        Churchill, S. W. (1977). "A comprehensive correlating equation for
        laminar, assisting, forced and free convection." AIChE J., 23(1), 10-16.
    """
    regime = external_convection_regime(Gr, Re)
    if regime == "forced":
        return nusselt_churchill_bernstein(Re, Pr)
    elif regime == "natural":
        return nusselt_natural_cylinder(Gr*Pr, Pr)

    Nu_forced = nusselt_churchill_bernstein(Re, Pr)
    Nu_natural = nusselt_natural_cylinder(Gr*Pr, Pr)
    logger.info("Mixed convection (Ri=%.3f between %.1f and %.0f): combining Nu_forced=%.2f "
                "and Nu_natural=%.2f", richardson(Gr, Re), RI_FORCED_MAX, RI_NATURAL_MIN,
                Nu_forced, Nu_natural)
    return (Nu_forced**3 + Nu_natural**3)**(1.0/3.0)


# ==================== Radiation ====================

def radiation_coefficient(T_surface: float, T_amb: float, emissivity: float) -> float:
    """Linearized radiation heat transfer coefficient.

    Args:
        T_surface: Estimated outer surface temperature (°C)
        T_amb: Ambient / surroundings temperature (°C)
        emissivity: Surface emissivity (0 to 1)

    Returns:
        h_rad = ε σ (Ts + Ta)(Ts² + Ta²) in W/m²/K, temperatures in K
    """
    if not 0.0 <= emissivity <= 1.0:
        raise InvalidInput(f"Emissivity must be between 0 and 1, got {emissivity}")
    Ts, Ta = C2K(T_surface), C2K(T_amb)
    if Ts <= 0.0 or Ta <= 0.0:
        raise InvalidInput(f"Absolute temperatures must be positive, got {Ts} K and {Ta} K")
    return emissivity*STEFAN_BOLTZMANN*(Ts + Ta)*(Ts**2 + Ta**2)
