"""`vizloop` - reactive cells driving animated plots of simulation output.

Subpackages:
- reactive: Observable, derived and frame-index cells
- data: Time-series stores and diagnostics
- simulation: Steppers and snapshot writers for live runs
- visualization: Rendering surface, plot bindings, frame recorders
- pipeline: Animation driver and session
"""

__version__ = "0.1.0"
