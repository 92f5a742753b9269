"""Job scheduling: single-flight execution, connection health and keyed call collapsing."""

from .health import ConnectionHealth
from .models import JobRunState
from .service import SingleFlightScheduler
from .singleflight import SingleFlightGroup

__all__ = [
    "SingleFlightScheduler",
    "JobRunState",
    "ConnectionHealth",
    "SingleFlightGroup",
]
