"""Segment-by-segment solution of a complete pipe run.

Module Summary:
- Classes:
    - ``NetworkResult``: Immutable result of a network solve.
- Functions:
    - ``solve_network(config, models, iterations, verbose)``: Chain segment solves along the pipe.
    - ``find_segment_at_position(x_profile, x)``: Index of the segment containing x.
    - ``interpolate_temperature(result, x)``: Water temperature at any position.
    - ``results_to_dataframe(result)``: Per-segment table as a pandas DataFrame.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import pandas as pd

from ..errors import ExcessivePressureLoss, InvalidInput, OutOfRange
from .config import PipeConfiguration
from .segment import DEFAULT_MODELS, SegmentState, SolverModels, solve_segment

logger = logging.getLogger(__name__)

T_FREEZE = 0.0  # °C


@dataclass(frozen=True, eq=False)
class NetworkResult:
    config: PipeConfiguration
    segments: Tuple[SegmentState, ...]  # Position ordered
    x_profile: np.ndarray    # m, N+1 nodes
    T_profile: np.ndarray    # °C, N+1 nodes
    P_profile: np.ndarray    # bar, N+1 nodes
    T_final: float           # °C
    T_min: float             # °C
    T_min_position: float    # m
    Q_total: float           # W
    dP_total: float          # Pa
    frozen: bool
    frozen_at_position: Optional[float]  # m, end of the first frozen segment

    def to_dataframe(self) -> pd.DataFrame:
        return results_to_dataframe(self)


def solve_network(
        config: PipeConfiguration,
        models: SolverModels = DEFAULT_MODELS,
        iterations: int = 2,
        verbose: bool = False,
) -> NetworkResult:
    """Solve the pipe as an ordered chain of equal segments.

    Segment i's outlet temperature and pressure are segment i+1's inlet, so
    the segments are solved strictly in order. The first failing segment
    aborts the whole solve.

    Args:
        config: Pipe configuration
        models: Property providers and correlations
        iterations: Property passes per segment
        verbose: Print a one-line summary when done

    Returns:
        NetworkResult with profiles, per-segment states and totals

    Raises:
        ExcessivePressureLoss: If the pressure reaches zero along the pipe
        InvalidInput, OutOfRange, CorrelationDomainError, ReferenceDataMissing:
            Propagated from the first failing segment

    Note:
        Water reaching 0 °C is clamped there (latent heat is not modelled);
        the segment is flagged frozen and its heat loss is recomputed from
        the clamped outlet temperature.
    """
    # ==================== Initialization ====================
    N = config.num_segments
    dx = config.segment_length
    geometry = config.geometry
    m_dot = config.fluid.m_dot

    x_profile = np.zeros(N + 1)
    T_profile = np.zeros(N + 1)
    P_profile = np.zeros(N + 1)
    T_profile[0] = config.fluid.T_in
    P_profile[0] = config.fluid.P

    segments = []
    dP_total = 0.0
    Q_total = 0.0
    T_min = config.fluid.T_in
    T_min_position = 0.0
    frozen_at = None

    T = config.fluid.T_in
    P = config.fluid.P

    # ==================== March Along the Pipe ====================
    for i in range(N):
        x_start = i*dx
        state = solve_segment(
            geometry, dx, T, P, m_dot, config.ambient, config.insulation,
            iterations=iterations, models=models, index=i, x_start=x_start,
        )

        if state.T_out <= T_FREEZE:
            state = dataclasses.replace(
                state, T_out=T_FREEZE, Q_loss=m_dot*state.water.cp*(state.T_in - T_FREEZE), frozen=True)
            if frozen_at is None:
                frozen_at = state.x_end
                logger.debug("Water reaches 0 °C in segment %d at x = %.1f m", i, frozen_at)

        # Pressure from Darcy-Weisbach drop (Pa -> bar)
        P_new = P - state.dP/1e5
        if P_new <= 0.0:
            raise ExcessivePressureLoss(
                f"Excessive pressure loss: pressure fell to {P_new*100:.1f} kPa in segment "
                f"{i + 1}/{N} (cumulative loss {(dP_total + state.dP)/1000:.1f} kPa for an inlet "
                f"pressure of {config.fluid.P*100:.0f} kPa)")

        segments.append(state)
        x_profile[i+1] = state.x_end
        T_profile[i+1] = state.T_out
        P_profile[i+1] = P_new
        dP_total += state.dP
        Q_total += state.Q_loss

        if state.T_out < T_min:
            T_min = state.T_out
            T_min_position = state.x_end

        T = state.T_out
        P = P_new

    result = NetworkResult(
        config=config,
        segments=tuple(segments),
        x_profile=x_profile,
        T_profile=T_profile,
        P_profile=P_profile,
        T_final=float(T_profile[-1]),
        T_min=float(T_min),
        T_min_position=float(T_min_position),
        Q_total=Q_total,
        dP_total=dP_total,
        frozen=frozen_at is not None,
        frozen_at_position=frozen_at,
    )

    if verbose:
        print(f"Pipe {config.total_length:.0f} m in {N} segments: T_final = {result.T_final:.2f} °C, "
              f"T_min = {result.T_min:.2f} °C at {result.T_min_position:.1f} m, "
              f"Q = {result.Q_total/1000:.2f} kW, dP = {result.dP_total/1000:.1f} kPa")
    return result


def find_segment_at_position(x_profile: np.ndarray, x: float) -> int:
    """Index of the segment whose [x_start, x_end] contains x (last segment past the end)."""
    for i in range(len(x_profile) - 1):
        if x_profile[i] <= x <= x_profile[i+1]:
            return i
    return len(x_profile) - 2


def interpolate_temperature(result: NetworkResult, x: float) -> float:
    """Water temperature at position x (m), linear between segment nodes.

    Raises:
        OutOfRange: If x lies outside [0, total length]
    """
    x_profile = result.x_profile
    if x < x_profile[0] or x > x_profile[-1]:
        raise OutOfRange(f"Position {x} m outside the pipe [{x_profile[0]}, {x_profile[-1]}] m")
    return float(np.interp(x, x_profile, result.T_profile))


def results_to_dataframe(result: NetworkResult) -> pd.DataFrame:
    """One row per segment with the main hydraulic and thermal quantities."""
    if not result.segments:
        raise InvalidInput("Network result has no segments")
    rows = [
        dict(
            index=s.index, x_start=s.x_start, x_end=s.x_end,
            T_in=s.T_in, T_out=s.T_out, P_in=s.P_in, dP=s.dP,
            V=s.V, Re=s.Re, f=s.f, regime=s.regime,
            h_int=s.h_int, h_ext=s.h_ext, h_rad=s.h_rad, convection_regime=s.convection_regime,
            UA=s.UA, NTU=s.NTU, Q_loss=s.Q_loss, frozen=s.frozen,
        )
        for s in result.segments
    ]
    return pd.DataFrame(rows).set_index("index")
