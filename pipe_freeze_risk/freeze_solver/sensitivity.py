"""One-parameter sensitivity analysis and critical-point search.

For each parameter the network is solved at the ends of its range; the end
giving the warmer outlet is the "safe" bound. The outlet temperature is then
sampled between the safe and the opposite bound and the crossings of the
freeze target (0 °C + epsilon) and of the safety threshold (5 °C) are located
by piecewise-linear interpolation and then refined with Brent's method
inside the bracketing sample pair (``SolverSettings.refine``).

Module Summary:
- Classes:
    - ``SensitivityResult``: Immutable outcome for one parameter.
    - ``TrialRunner``: Rebuilds and solves trial configurations for one parameter.
- Functions:
    - ``analyze_sensitivity(base_config, ...)``: All applicable parameters.
    - ``evaluate_parameter(runner, base_value)``: Bounds, safe side and critical points.
    - ``find_valid_bound(runner, target, reference)``: Bisection toward a failing bound.
    - ``calculate_at_bounds(runner, base_value)``: Effective range of a parameter.
    - ``identify_safe_bound(bounds)``: Warmer end of the effective range.
    - ``find_critical_by_interpolation(runner, safe, opposite, target)``: Critical value.
    - ``interpolate_linear(samples, target)``: First bracketing crossing of a sampled curve.
    - ``summary_table(results)``: Results as a pandas DataFrame.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd
from scipy.optimize import brentq

from ..errors import AnalysisCancelled, InvalidInput, NonConvergence, is_critical
from .config import (PARAMETER_DEFINITIONS, ParameterDefinition, PipeConfiguration,
                     SolverSettings, display_value, rebuild_configuration)
from .network import NetworkResult, solve_network
from .segment import DEFAULT_MODELS, SolverModels

logger = logging.getLogger(__name__)

BISECTION_ABS_EPS = 0.001
BISECTION_REL_EPS = 1e-6
FLAT_SEGMENT_EPS = 1e-6  # °C


@dataclass(frozen=True)
class SensitivityResult:
    key: str
    definition: ParameterDefinition
    base_value: float                        # Display units
    T_base: float                            # °C
    effective_min: Optional[float]
    effective_max: Optional[float]
    T_at_min: Optional[float]                # °C
    T_at_max: Optional[float]                # °C
    error_at_min: Optional[str]
    error_at_max: Optional[str]
    safe_bound: Optional[str]                # 'min' or 'max'
    critical_value_freeze: Optional[float]   # None: not reachable in range
    critical_value_safety: Optional[float]   # None: not reachable in range
    amplitude: float                         # |T_at_max - T_at_min| (°C)
    range_source: str = "theoretical"        # 'theoretical', 'bisection' or 'fallback'
    n_trials: int = 0
    notes: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return self.T_at_min is not None and self.T_at_max is not None


class TrialRunner:
    """Solve configurations derived from a base by changing one parameter.

    Every trial rebuilds a fresh configuration from the (never modified) base.
    Failures are classified with ``is_critical``: critical ones drop the trial,
    non-critical ones keep it when the failure carries a usable result.

    Args:
        base_config: Configuration every trial derives from
        key: Parameter key in ``PARAMETER_DEFINITIONS``
        settings: Numerical settings
        models: Property providers and correlations passed to the solver
        solver: Network solver, ``solver(config, models=..., iterations=...)``
        should_cancel: Polled before each trial; True abandons the sweep
    """

    def __init__(self, base_config: PipeConfiguration, key: str,
                 settings: SolverSettings = SolverSettings(),
                 models: SolverModels = DEFAULT_MODELS,
                 solver: Callable[..., NetworkResult] = solve_network,
                 should_cancel: Optional[Callable[[], bool]] = None):
        self.base_config = base_config
        self.key = key
        self.definition = PARAMETER_DEFINITIONS[key]
        self.settings = settings
        self.models = models
        self.solver = solver
        self.should_cancel = should_cancel
        self.n_trials = 0
        self.failures: List[str] = []

    def solve(self, value: float) -> NetworkResult:
        """Rebuild at ``value`` and solve; failures propagate."""
        if self.should_cancel is not None and self.should_cancel():
            raise AnalysisCancelled(f"Sensitivity sweep of '{self.key}' cancelled")
        self.n_trials += 1
        config = rebuild_configuration(self.base_config, self.key, value, self.models.water)
        return self.solver(config, models=self.models, iterations=self.settings.iterations)

    def try_solve(self, value: float) -> Optional[float]:
        """T_final at ``value``, or None if the trial fails critically."""
        try:
            return self.solve(value).T_final
        except AnalysisCancelled:
            raise
        except Exception as e:
            result = getattr(e, "result", None)
            if not is_critical(e) and result is not None:
                logger.debug("%s = %g: non-critical %s kept", self.key, value, type(e).__name__)
                return result.T_final
            logger.debug("%s = %g: %s: %s", self.key, value, type(e).__name__, e)
            self.failures.append(f"{self.key} = {value:g}: {type(e).__name__}: {e}")
            return None


# ==================== Effective Range ====================

def _converged(low: float, high: float) -> bool:
    return abs(high - low) < max(BISECTION_ABS_EPS, abs(high + low)*BISECTION_REL_EPS)


def find_valid_bound(runner: TrialRunner, target: float, reference: float,
                     max_iterations: Optional[int] = None) -> Optional[Tuple[float, float]]:
    """Closest value to ``target`` whose network solve succeeds.

    The target itself is tried first. Otherwise the interval between the
    known-valid reference and the target is bisected, moving toward the
    target after a success and toward the reference after a failure.

    Args:
        runner: Trial runner of the parameter
        target: Bound to reach (display units)
        reference: Known-valid value, usually the base value
        max_iterations: Bisection budget (defaults to the settings)

    Returns:
        (value, T_final) of the best valid trial, or None if none succeeded
    """
    if max_iterations is None:
        max_iterations = runner.settings.bound_max_iterations

    T = runner.try_solve(target)
    if T is not None:
        return target, T

    low, high = sorted((reference, target))
    toward_high = target > reference
    best = None

    for _ in range(max_iterations):
        mid = 0.5*(low + high)
        T = runner.try_solve(mid)
        if T is not None:
            best = (mid, T)
            if toward_high:
                low = mid
            else:
                high = mid
        else:
            if toward_high:
                high = mid
            else:
                low = mid
        if _converged(low, high):
            break

    return best


def calculate_at_bounds(runner: TrialRunner, base_value: float) -> Dict:
    """Outlet temperatures at the ends of the parameter's effective range.

    A bound failing critically is narrowed by bisection toward the base value.
    If neither end can be reached, a window of ±``fallback_range_percent``
    around the base value (clamped to the theoretical range) is tried.

    Returns:
        Dictionary containing:
            - T_at_min, T_at_max: Outlet temperatures (°C) or None
            - effective_min, effective_max: Values actually used (display units)
            - error_at_min, error_at_max: Reason a bound is missing, or None
            - source: 'theoretical', 'bisection' or 'fallback'
    """
    definition = runner.definition
    bounds = dict(T_at_min=None, T_at_max=None, effective_min=definition.min,
                  effective_max=definition.max, error_at_min=None, error_at_max=None,
                  source="theoretical")

    for side, limit in (("min", definition.min), ("max", definition.max)):
        found = find_valid_bound(runner, limit, base_value)
        if found is None:
            bounds[f"error_at_{side}"] = f"No valid value between {base_value:g} and {limit:g}"
            continue
        value, T = found
        bounds[f"effective_{side}"] = value
        bounds[f"T_at_{side}"] = T
        if value != limit:
            bounds["source"] = "bisection"
            logger.info("%s: %s bound narrowed from %g to %g", runner.key, side, limit, value)

    if bounds["T_at_min"] is None and bounds["T_at_max"] is None:
        pct = runner.settings.fallback_range_percent
        lo = max(base_value*(1.0 - pct), definition.min)
        hi = min(base_value*(1.0 + pct), definition.max)
        lo, hi = min(lo, hi), max(lo, hi)
        logger.warning("%s: both bounds unreachable, falling back to [%g, %g]", runner.key, lo, hi)
        bounds["source"] = "fallback"
        for side, value in (("min", lo), ("max", hi)):
            T = runner.try_solve(value)
            if T is not None:
                bounds[f"effective_{side}"] = value
                bounds[f"T_at_{side}"] = T
                bounds[f"error_at_{side}"] = None
            else:
                bounds[f"error_at_{side}"] = f"Fallback value {value:g} failed"

    return bounds


def identify_safe_bound(bounds: Dict) -> Dict:
    """Split the effective range into its warmer ('safe') and colder ('opposite') end.

    Ties go to the max bound.
    """
    safe_max = bounds["T_at_max"] >= bounds["T_at_min"]
    maxi = dict(bound="max", value=bounds["effective_max"], T_final=bounds["T_at_max"])
    mini = dict(bound="min", value=bounds["effective_min"], T_final=bounds["T_at_min"])
    return dict(safe=maxi if safe_max else mini, opposite=mini if safe_max else maxi)


# ==================== Critical Points ====================

def interpolate_linear(samples: Sequence[Tuple[float, float]], target: float) -> Optional[float]:
    """Parameter value where a sampled (value, T) curve first crosses ``target``.

    Args:
        samples: (parameter value, T_final) pairs in sampling order
        target: Temperature to cross (°C)

    Returns:
        Interpolated value on the first bracketing pair, the midpoint of that
        pair when it is flat, or None when no pair brackets the target
    """
    for (v1, T1), (v2, T2) in zip(samples[:-1], samples[1:]):
        if min(T1, T2) <= target <= max(T1, T2):
            dT = T2 - T1
            if abs(dT) < FLAT_SEGMENT_EPS:
                return 0.5*(v1 + v2)
            return v1 + (target - T1)/dT*(v2 - v1)
    return None


def _bracket(samples: Sequence[Tuple[float, float]], target: float) -> Optional[Tuple[float, float]]:
    for (v1, T1), (v2, T2) in zip(samples[:-1], samples[1:]):
        if min(T1, T2) <= target <= max(T1, T2):
            return v1, v2
    return None


def _refine_brentq(runner: TrialRunner, samples, target: float) -> Optional[float]:
    bracket = _bracket(samples, target)
    if bracket is None:
        return None

    def residual(value):
        return runner.solve(value).T_final - target

    v1, v2 = bracket
    try:
        f1, f2 = residual(v1), residual(v2)
        if f1 == 0.0:
            return v1
        if f2 == 0.0:
            return v2
        if f1*f2 > 0.0:
            return None
        return brentq(residual, v1, v2, xtol=1e-6, maxiter=50)
    except AnalysisCancelled:
        raise
    except Exception as e:
        logger.warning("%s: Brent refinement failed (%s), keeping the interpolated value",
                       runner.key, e)
        return None


def find_critical_by_interpolation(runner: TrialRunner, safe: Dict, opposite: Dict,
                                   target: float) -> Optional[float]:
    """Parameter value at which the outlet temperature reaches ``target``.

    The range from the safe to the opposite bound is sampled at
    ``settings.sampling_points`` equal intervals; failed trials are dropped.
    The first bracketing pair gives a linear estimate, which Brent's method
    refines inside that pair unless ``settings.refine`` is None.
    The located value is re-solved and rejected when its outlet temperature
    misses the target by more than ``settings.verify_tolerance``.

    Returns:
        Critical value in display units, or None if the target is outside
        the sampled temperature range or could not be located reliably
    """
    T_lo = min(safe["T_final"], opposite["T_final"])
    T_hi = max(safe["T_final"], opposite["T_final"])
    if not T_lo <= target <= T_hi:
        return None

    n = runner.settings.sampling_points
    v_start, v_end = safe["value"], opposite["value"]
    samples = []
    for i in range(n + 1):
        value = v_start + i/n*(v_end - v_start)
        T = runner.try_solve(value)
        if T is not None:
            samples.append((value, T))

    if len(samples) < 2:
        runner.failures.append(f"{runner.key}: fewer than 2 valid samples for {target:g} °C")
        return None

    critical = interpolate_linear(samples, target)
    if critical is None:
        return None
    if runner.settings.refine == "brentq":
        refined = _refine_brentq(runner, samples, target)
        if refined is not None:
            critical = refined

    # Verify by re-solving at the located value
    T_check = runner.try_solve(critical)
    if T_check is None or abs(T_check - target) > runner.settings.verify_tolerance:
        error = NonConvergence(
            f"{runner.key}: critical value {critical:g} for {target:g} °C not confirmed "
            f"(re-solve gives {T_check})")
        logger.warning("%s", error)
        runner.failures.append(f"{type(error).__name__}: {error}")
        return None
    return critical


# ==================== Driver ====================

def evaluate_parameter(runner: TrialRunner, base_value: float, T_base: float) -> SensitivityResult:
    """Effective range, safe bound and both critical values of one parameter."""
    settings = runner.settings
    bounds = calculate_at_bounds(runner, base_value)
    notes: List[str] = []

    def result(safe_bound=None, freeze=None, safety=None, amplitude=0.0):
        return SensitivityResult(
            key=runner.key,
            definition=runner.definition,
            base_value=base_value,
            T_base=T_base,
            effective_min=bounds["effective_min"] if bounds["T_at_min"] is not None else None,
            effective_max=bounds["effective_max"] if bounds["T_at_max"] is not None else None,
            T_at_min=bounds["T_at_min"],
            T_at_max=bounds["T_at_max"],
            error_at_min=bounds["error_at_min"],
            error_at_max=bounds["error_at_max"],
            safe_bound=safe_bound,
            critical_value_freeze=freeze,
            critical_value_safety=safety,
            amplitude=amplitude,
            range_source=bounds["source"],
            n_trials=runner.n_trials,
            notes=tuple(notes),
            errors=tuple(runner.failures),
        )

    if bounds["T_at_min"] is None or bounds["T_at_max"] is None:
        notes.append("Effective range could not be established")
        return result()

    split = identify_safe_bound(bounds)
    safe, opposite = split["safe"], split["opposite"]
    amplitude = abs(bounds["T_at_max"] - bounds["T_at_min"])

    if safe["T_final"] < settings.freeze_target:
        notes.append("Freezes over the whole range: critical values out of range")
        return result(safe["bound"], amplitude=amplitude)

    safety = None
    if safe["T_final"] < settings.safety_threshold:
        notes.append(f"Below {settings.safety_threshold:g} °C over the whole range")
    else:
        safety = find_critical_by_interpolation(runner, safe, opposite, settings.safety_threshold)
    freeze = find_critical_by_interpolation(runner, safe, opposite, settings.freeze_target)

    return result(safe["bound"], freeze, safety, amplitude)


def analyze_sensitivity(
        base_config: PipeConfiguration,
        settings: SolverSettings = SolverSettings(),
        models: SolverModels = DEFAULT_MODELS,
        solver: Callable[..., NetworkResult] = solve_network,
        parameters: Optional[Iterable[str]] = None,
        should_cancel: Optional[Callable[[], bool]] = None,
) -> List[SensitivityResult]:
    """Run the one-parameter analysis for every applicable parameter.

    Args:
        base_config: Configuration to analyse
        settings: Numerical settings
        models: Property providers and correlations
        solver: Network solver
        parameters: Keys to analyse (default: all of ``PARAMETER_DEFINITIONS``);
            the insulation thickness is skipped on a bare pipe
        should_cancel: Polled before every trial; True abandons the sweep

    Returns:
        One SensitivityResult per analysed parameter, in key order

    Raises:
        Any failure of the base configuration solve
        AnalysisCancelled: If ``should_cancel`` returned True
        InvalidInput: For an unknown parameter key
    """
    T_base = solver(base_config, models=models, iterations=settings.iterations).T_final

    keys = list(PARAMETER_DEFINITIONS) if parameters is None else list(parameters)
    results = []
    for key in keys:
        if key not in PARAMETER_DEFINITIONS:
            raise InvalidInput(f"Unknown parameter '{key}' (known: {', '.join(PARAMETER_DEFINITIONS)})")
        definition = PARAMETER_DEFINITIONS[key]
        if definition.requires_insulation and not base_config.has_insulation:
            logger.debug("Skipping %s: pipe has no insulation", key)
            continue

        runner = TrialRunner(base_config, key, settings, models, solver, should_cancel)
        base_value = display_value(base_config, key, models.water)
        result = evaluate_parameter(runner, base_value, T_base)
        logger.info("%s: T in [%s, %s], freeze at %s, safety at %s (%d trials)",
                    key, result.T_at_min, result.T_at_max, result.critical_value_freeze,
                    result.critical_value_safety, result.n_trials)
        results.append(result)
    return results


def summary_table(results: Sequence[SensitivityResult]) -> pd.DataFrame:
    """One row per parameter, ordered by decreasing amplitude."""
    rows = [
        dict(
            key=r.key, label=r.definition.label, unit=r.definition.unit,
            base_value=r.base_value, effective_min=r.effective_min, effective_max=r.effective_max,
            T_at_min=r.T_at_min, T_at_max=r.T_at_max, safe_bound=r.safe_bound,
            critical_value_freeze=r.critical_value_freeze,
            critical_value_safety=r.critical_value_safety,
            amplitude=r.amplitude,
        )
        for r in results
    ]
    df = pd.DataFrame(rows, columns=[
        "key", "label", "unit", "base_value", "effective_min", "effective_max", "T_at_min",
        "T_at_max", "safe_bound", "critical_value_freeze", "critical_value_safety", "amplitude"])
    return df.sort_values("amplitude", ascending=False, kind="stable").set_index("key")
