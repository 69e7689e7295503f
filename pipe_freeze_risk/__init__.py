"""
pipe_freeze_risk: freeze risk of water pipes exposed to cold air.
"""

from . import errors
from . import units
from . import tables
from . import freeze_solver
from . import scenario
