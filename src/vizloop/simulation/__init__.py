"""Simulation collaborators for the live animation mode."""

from vizloop.simulation.stepper import SimulationStepper, DiffusionStepper
from vizloop.simulation.writer import SnapshotWriter

__all__ = ["SimulationStepper", "DiffusionStepper", "SnapshotWriter"]
