"""Simulation steppers driven by the live animation mode.

The animation driver only needs ``advance(n_steps)`` and ``current_time()``.
``DiffusionStepper`` is a deliberately small numpy model (periodic 2D
diffusion of a random tracer) that gives the live mode something to drive
in tutorials and tests; it is not a fluid-dynamics engine.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

import numpy as np

__all__ = ['SimulationStepper', 'DiffusionStepper']

logger = logging.getLogger(__name__)


class SimulationStepper(ABC):
    """What the animation driver needs from a simulation."""

    iteration: int = 0

    @abstractmethod
    def advance(self, n_steps: int = 1) -> None:
        """Advance the model state by ``n_steps`` time steps."""
        ...

    @abstractmethod
    def current_time(self) -> float:
        ...

    @abstractmethod
    def fields(self) -> Dict[str, np.ndarray]:
        """Current model fields by name."""
        ...


class DiffusionStepper(SimulationStepper):
    """Explicit periodic diffusion of a random tracer on a 2D grid.

    Parameters
    ----------
    shape : tuple of int
        Grid size ``(nx, ny)``.
    extent : tuple of float
        Domain size ``(Lx, Ly)``.
    dt : float
        Time step. Must satisfy the explicit stability limit
        ``dt <= min(dx, dy)**2 / (4 * diffusivity)``.
    diffusivity : float
        Diffusion coefficient.
    seed : int, optional
        Seed for the random initial condition.

    Examples
    --------
    >>> stepper = DiffusionStepper(shape=(32, 32), dt=0.01, seed=0)
    >>> stepper.advance(10)
    >>> stepper.iteration
    10
    """

    def __init__(
        self,
        shape: Tuple[int, int] = (128, 128),
        extent: Tuple[float, float] = (2 * np.pi, 2 * np.pi),
        dt: float = 0.02,
        diffusivity: float = 1e-2,
        seed: Optional[int] = None,
    ):
        self.shape = tuple(shape)
        self.extent = tuple(extent)
        self.dt = dt
        self.diffusivity = diffusivity
        self.seed = seed

        self.dx = self.extent[0] / self.shape[0]
        self.dy = self.extent[1] / self.shape[1]
        dt_max = min(self.dx, self.dy) ** 2 / (4 * diffusivity)
        if dt > dt_max:
            raise ValueError(
                f"dt={dt} exceeds the explicit stability limit {dt_max:.4g} "
                f"for diffusivity={diffusivity} on grid {self.shape}"
            )

        self.x = (np.arange(self.shape[0]) + 0.5) * self.dx
        self.y = (np.arange(self.shape[1]) + 0.5) * self.dy
        self.reset()

    def reset(self) -> None:
        """Back to iteration 0 with a fresh random initial condition."""
        rng = np.random.default_rng(self.seed)
        self.tracer = 2 * rng.random(self.shape) - 1
        self.iteration = 0
        self.time = 0.0
        logger.debug("DiffusionStepper reset (seed=%s)", self.seed)

    def _laplacian(self, c: np.ndarray) -> np.ndarray:
        d2x = (np.roll(c, -1, axis=0) - 2 * c + np.roll(c, 1, axis=0)) / self.dx ** 2
        d2y = (np.roll(c, -1, axis=1) - 2 * c + np.roll(c, 1, axis=1)) / self.dy ** 2
        return d2x + d2y

    def advance(self, n_steps: int = 1) -> None:
        if n_steps < 0:
            raise ValueError(f"n_steps must be >= 0, got {n_steps}")
        for _ in range(n_steps):
            self.tracer = self.tracer + self.dt * self.diffusivity * self._laplacian(self.tracer)
            self.iteration += 1
            self.time += self.dt

    def current_time(self) -> float:
        return self.time

    def gradient_magnitude(self) -> np.ndarray:
        """Centered-difference magnitude of the tracer gradient."""
        dcdx = (np.roll(self.tracer, -1, axis=0) - np.roll(self.tracer, 1, axis=0)) / (2 * self.dx)
        dcdy = (np.roll(self.tracer, -1, axis=1) - np.roll(self.tracer, 1, axis=1)) / (2 * self.dy)
        return np.sqrt(dcdx ** 2 + dcdy ** 2)

    def fields(self) -> Dict[str, np.ndarray]:
        return {
            "tracer": self.tracer.copy(),
            "gradient": self.gradient_magnitude(),
            "variance": np.mean(self.tracer ** 2, axis=0),
        }
