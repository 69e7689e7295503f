"""Typed failures raised by the freeze-risk solver.

Every failure carries a ``critical`` flag set where it is raised. The
sensitivity engine uses that flag (never the message text) to decide whether
a trial must be dropped.

Module Summary:
- Classes:
    - ``PipeFreezeError``: Base class, ``critical = True``.
    - ``InvalidInput``: Non-physical input (non-positive diameter, flow, ...).
    - ``OutOfRange``: Property table domain exceeded.
    - ``CorrelationDomainError``: Re, Pr or Ra outside what a correlation accepts.
    - ``ReferenceDataMissing``: Unknown material, schedule or NPS key.
    - ``NonConvergence``: Iterative search failed to meet its tolerance.
    - ``ExcessivePressureLoss``: Line pressure dropped to zero or below.
    - ``ApproximationWarning``: Non-critical, an approximation is in use.
    - ``AnalysisCancelled``: A sweep was abandoned through its cancellation callback.
- Functions:
    - ``is_critical(exc)``: Criticality of any exception (unknown -> critical).
"""

from typing import Any, Optional


class PipeFreezeError(Exception):
    """Base class for all solver failures."""

    critical: bool = True

    def __init__(self, message: str = "", *, critical: Optional[bool] = None, result: Any = None):
        super().__init__(message)
        if critical is not None:
            self.critical = critical
        # Usable solve attached to a non-critical failure
        self.result = result


class InvalidInput(PipeFreezeError, ValueError):
    """Non-physical input value."""


class OutOfRange(PipeFreezeError, ValueError):
    """Value outside a reference table's domain."""


class CorrelationDomainError(PipeFreezeError, ValueError):
    """Dimensionless group outside the domain accepted by a correlation."""


class ReferenceDataMissing(PipeFreezeError, KeyError):
    """Unknown key in a reference table."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""


class NonConvergence(PipeFreezeError, RuntimeError):
    """Search did not reach its tolerance within the iteration budget."""


class ExcessivePressureLoss(PipeFreezeError):
    """Pressure fell to zero or below along the pipe."""


class ApproximationWarning(PipeFreezeError):
    """Slow convergence, reduced precision or an approximation in use.

    The built-in correlations only log their approximations (see
    ``friction_factor_colebrook``). This class is for injected solvers and
    property providers: raised with ``result=`` set to the completed network
    result, the sensitivity engine keeps the trial instead of dropping it.
    """

    critical = False


def is_critical(exc: Optional[BaseException]) -> bool:
    """Classify an exception for the sensitivity engine.

    Args:
        exc: Exception raised by a trial, or None when the trial succeeded

    Returns:
        False for None, the exception's own flag for solver failures and
        True for anything unrecognised
    """
    if exc is None:
        return False
    if isinstance(exc, PipeFreezeError):
        return exc.critical
    return True


class AnalysisCancelled(PipeFreezeError):
    """A running sweep was abandoned by its caller."""
