"""
freeze_solver: segment-by-segment heat loss of water pipes in cold air, freeze detection and sensitivity analysis.
"""

from . import properties
from . import hydraulics
from . import correlations
from . import resistance
from . import config
from . import segment
from . import network
from . import freeze
from . import sensitivity
from . import sweep
