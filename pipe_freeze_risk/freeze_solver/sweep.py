"""Two-parameter sweeps of the outlet temperature.

Module Summary:
- Functions:
    - ``default_range(base_config, key, percent)``: ±percent window around the current value.
    - ``sensitivity_matrix(base_config, key_x, key_y, ...)``: 2D map of T_final
      over two parameters, failed points as NaN.
"""

import logging
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from ..errors import InvalidInput, is_critical
from .config import (PARAMETER_DEFINITIONS, PipeConfiguration, SolverSettings,
                     display_value, rebuild_configuration)
from .network import NetworkResult, solve_network
from .properties import water_properties
from .segment import DEFAULT_MODELS, SolverModels

logger = logging.getLogger(__name__)

MATRIX_RESOLUTION = 15


def default_range(base_config: PipeConfiguration, key: str, percent: float = 0.2,
                  water_props=water_properties) -> Tuple[float, float]:
    """Window of ±percent around the current value, clamped to the theoretical range."""
    definition = PARAMETER_DEFINITIONS[key]
    value = display_value(base_config, key, water_props)
    if value is None:
        raise InvalidInput(f"Parameter '{key}' does not apply to this configuration")
    lo = max(value*(1.0 - percent), definition.min)
    hi = min(value*(1.0 + percent), definition.max)
    if value == 0.0:
        # A relative window collapses at zero (still air)
        lo, hi = definition.min, definition.min + percent*(definition.max - definition.min)
    return min(lo, hi), max(lo, hi)


def sensitivity_matrix(
        base_config: PipeConfiguration,
        key_x: str,
        key_y: str,
        range_x: Optional[Tuple[float, float]] = None,
        range_y: Optional[Tuple[float, float]] = None,
        resolution: int = MATRIX_RESOLUTION,
        settings: SolverSettings = SolverSettings(),
        models: SolverModels = DEFAULT_MODELS,
        solver: Callable[..., NetworkResult] = solve_network,
        should_cancel: Optional[Callable[[], bool]] = None,
) -> Dict[str, np.ndarray]:
    """Map the outlet temperature over a grid of two parameters.

    Each grid point rebuilds the base configuration with both parameters
    changed and solves the full network.

    Args:
        base_config: Configuration to start from
        key_x: Parameter on the first axis
        key_y: Parameter on the second axis (must differ from key_x)
        range_x: (min, max) in display units, default ±20% around the current value
        range_y: (min, max) in display units, default ±20% around the current value
        resolution: Points per axis
        settings: Numerical settings (property iterations)
        models: Property providers and correlations
        solver: Network solver
        should_cancel: Polled before each row; True stops the sweep early and
            leaves the remaining points as NaN

    Returns:
        Dictionary containing 2D gridded results, shape (resolution, resolution):
            - x_values, y_values: 1D axis values (display units)
            - x_grid, y_grid: Meshgrids (indexing="ij")
            - T_final: Outlet temperature (°C), NaN where the solve failed
            - T_min: Minimum temperature along the pipe (°C), NaN where failed
            - frozen: Water reached 0 °C somewhere along the pipe
            - success: Solve succeeded
            - errors: List of (i, j, message) for the failed points

    Note:
        - Failed points never abort the sweep; they are recorded and left as NaN
        - Cost is resolution² full network solves
    """
    # ==================== Validate Axes ====================
    for key in (key_x, key_y):
        if key not in PARAMETER_DEFINITIONS:
            raise InvalidInput(f"Unknown parameter '{key}' (known: {', '.join(PARAMETER_DEFINITIONS)})")
        if PARAMETER_DEFINITIONS[key].requires_insulation and not base_config.has_insulation:
            raise InvalidInput(f"Parameter '{key}' requires an insulated pipe")
    if key_x == key_y:
        raise InvalidInput("The two sweep parameters must differ")
    if resolution < 2:
        raise InvalidInput(f"Resolution must be at least 2, got {resolution}")

    if range_x is None:
        range_x = default_range(base_config, key_x, water_props=models.water)
    if range_y is None:
        range_y = default_range(base_config, key_y, water_props=models.water)

    x_values = np.linspace(range_x[0], range_x[1], resolution)
    y_values = np.linspace(range_y[0], range_y[1], resolution)
    X, Y = np.meshgrid(x_values, y_values, indexing="ij")

    # ==================== Allocate Result Arrays ====================
    T_final = np.full_like(X, np.nan, dtype=float)
    T_min = np.full_like(X, np.nan, dtype=float)
    frozen = np.zeros_like(X, dtype=bool)
    success = np.zeros_like(X, dtype=bool)
    errors = []

    # ==================== Loop Over Grid Points ====================
    for i, vx in enumerate(x_values):
        if should_cancel is not None and should_cancel():
            logger.info("Sweep %s x %s cancelled after %d rows", key_x, key_y, i)
            break
        for j, vy in enumerate(y_values):
            try:
                config = rebuild_configuration(base_config, key_x, float(vx), models.water)
                config = rebuild_configuration(config, key_y, float(vy), models.water)
                result = solver(config, models=models, iterations=settings.iterations)
            except Exception as e:
                result = getattr(e, "result", None)
                if is_critical(e) or result is None:
                    errors.append((i, j, f"{type(e).__name__}: {e}"))
                    continue

            T_final[i, j] = result.T_final
            T_min[i, j] = result.T_min
            frozen[i, j] = result.frozen
            success[i, j] = True

    if errors:
        logger.info("Sweep %s x %s: %d of %d points failed", key_x, key_y, len(errors), X.size)

    return dict(
        x_values=x_values,
        y_values=y_values,
        x_grid=X,
        y_grid=Y,
        T_final=T_final,
        T_min=T_min,
        frozen=frozen,
        success=success,
        errors=errors,
    )
