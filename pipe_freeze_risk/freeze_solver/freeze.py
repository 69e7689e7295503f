"""Freeze-risk assessment of a solved pipe.

Module Summary:
- Constants:
    - ``SAFETY_MARGIN`` (5 °C): recommended margin above the freezing point.
- Functions:
    - ``detect_freeze(T_profile, x_profile, T_freeze)``: Minimum temperature and
      interpolated position of the first freeze crossing.
    - ``analyze_freeze_risk(result, T_freeze, safety_margin)``: Severity, margins and verdict.
    - ``requires_insulation(result, T_freeze, safety_margin)``: Safety-margin check.
    - ``freeze_message(analysis)``: One-line human-readable summary.
"""

import math
from typing import Dict, Sequence, Union

import numpy as np

from ..errors import InvalidInput
from .network import NetworkResult

SAFETY_MARGIN = 5.0  # °C

RECOMMENDATIONS = {
    "critical": (
        "Increase the water flow rate to shorten the residence time",
        "Add or thicken the thermal insulation",
        "Reduce the length exposed to cold air",
        "Consider heat tracing",
    ),
    "warning": (
        "Increase the water flow rate",
        "Add thermal insulation",
        "Monitor weather conditions and plan a response if the air gets colder",
    ),
    "ok": (
        "Current conditions are safe",
        "Re-evaluate if operating or weather conditions change",
    ),
}


def detect_freeze(T_profile: Sequence[float], x_profile: Sequence[float],
                  T_freeze: float = 0.0) -> Dict:
    """Locate the minimum temperature and the first freeze crossing.

    Args:
        T_profile: Water temperature at the nodes (°C)
        x_profile: Node positions (m), same length as T_profile
        T_freeze: Freezing point (°C)

    Returns:
        Dictionary containing:
            - freeze_detected: True if the minimum is at or below T_freeze
            - freeze_position: Linearly interpolated position of the first
              crossing (m), or None
            - T_min: Minimum temperature (°C)
            - T_min_position: Position of the minimum (m)
    """
    T = np.asarray(T_profile, dtype=float)
    x = np.asarray(x_profile, dtype=float)
    if T.size == 0 or T.shape != x.shape:
        raise InvalidInput(f"Profiles must be non-empty and of equal length ({T.size} vs {x.size})")
    if not (np.all(np.isfinite(T)) and np.all(np.isfinite(x))):
        raise InvalidInput("Profiles contain non-finite values")
    if not math.isfinite(T_freeze):
        raise InvalidInput(f"Freezing point must be finite, got {T_freeze}")

    i_min = int(np.argmin(T))
    T_min = float(T[i_min])
    freeze_detected = T_min <= T_freeze
    freeze_position = None

    if freeze_detected:
        for i in range(T.size - 1):
            T1, T2 = T[i], T[i+1]
            if min(T1, T2) <= T_freeze <= max(T1, T2):
                if abs(T2 - T1) < 1e-10:
                    freeze_position = float(x[i])
                else:
                    freeze_position = float(x[i] + (T_freeze - T1)/(T2 - T1)*(x[i+1] - x[i]))
                break
        if freeze_position is None:
            freeze_position = float(x[i_min])

    return dict(
        freeze_detected=freeze_detected,
        freeze_position=freeze_position,
        T_min=T_min,
        T_min_position=float(x[i_min]),
    )


def analyze_freeze_risk(result: NetworkResult, T_freeze: float = 0.0,
                        safety_margin: float = SAFETY_MARGIN) -> Dict:
    """Classify the freeze risk of a solved pipe.

    Severity is 'critical' when the water reaches T_freeze, 'warning' when
    the minimum is below T_freeze + safety_margin and 'ok' otherwise.

    Args:
        result: Network solve to assess
        T_freeze: Freezing point (°C)
        safety_margin: Margin above T_freeze considered safe (°C)

    Returns:
        Dictionary with the ``detect_freeze`` fields plus margin_to_freeze,
        margin_to_safety, severity, verdict ('FREEZE_DETECTED' / 'NO_FREEZE')
        and recommendations
    """
    if not math.isfinite(safety_margin) or safety_margin < 0.0:
        raise InvalidInput(f"Safety margin must be non-negative, got {safety_margin}")

    analysis = detect_freeze(result.T_profile, result.x_profile, T_freeze)
    T_min = analysis["T_min"]
    if analysis["freeze_detected"]:
        severity = "critical"
    elif T_min < T_freeze + safety_margin:
        severity = "warning"
    else:
        severity = "ok"

    analysis.update(
        T_freeze=T_freeze,
        margin_to_freeze=T_min - T_freeze,
        margin_to_safety=T_min - (T_freeze + safety_margin),
        severity=severity,
        verdict="FREEZE_DETECTED" if analysis["freeze_detected"] else "NO_FREEZE",
        recommendations=list(RECOMMENDATIONS[severity]),
    )
    return analysis


def requires_insulation(result: Union[NetworkResult, float], T_freeze: float = 0.0,
                        safety_margin: float = SAFETY_MARGIN) -> bool:
    """True when the outlet temperature (a NetworkResult or T_final in °C) is below T_freeze + safety_margin."""
    T_final = result.T_final if isinstance(result, NetworkResult) else float(result)
    if not math.isfinite(T_final) or not math.isfinite(T_freeze):
        raise InvalidInput(f"Temperatures must be finite, got {T_final} and {T_freeze}")
    if not math.isfinite(safety_margin) or safety_margin < 0.0:
        raise InvalidInput(f"Safety margin must be non-negative, got {safety_margin}")
    return T_final < T_freeze + safety_margin


def freeze_message(analysis: Dict) -> str:
    if analysis["freeze_detected"]:
        return (f"FREEZE RISK at {analysis['freeze_position']:.1f} m. "
                f"Minimum temperature: {analysis['T_min']:.1f} °C")
    return (f"No freeze risk. Minimum temperature: {analysis['T_min']:.1f} °C "
            f"(margin {analysis['T_min'] - analysis.get('T_freeze', 0.0):.1f} °C)")
