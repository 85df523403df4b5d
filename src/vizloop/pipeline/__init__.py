"""Pipeline modules.

- driver: Animation driver (offline and live)
- session: Visualization session owning cells, bindings and recorders
"""

from vizloop.pipeline.driver import AnimationDriver, DriverMode, DriverReport, DriverState
from vizloop.pipeline.session import VisualizationSession, setup_logging

__all__ = [
    "AnimationDriver",
    "DriverMode",
    "DriverReport",
    "DriverState",
    "VisualizationSession",
    "setup_logging",
]
