"""Plot bindings: rendering primitives wired to observable cells.

A binding draws its primitive once from the current cell values and then
subscribes to every cell it reads. There is no public ``redraw()``: a
redraw happens whenever one of the bound cells cascades a new value.
"""

import logging
from typing import Any, Dict, Optional

from vizloop.contracts.failure import RenderingError
from vizloop.contracts.frames import assert_same_shape
from vizloop.reactive.observable import Observable, Subscriber

__all__ = ['PlotBinding']

logger = logging.getLogger(__name__)


def _current(value):
    return value.get() if isinstance(value, Observable) else value


class _CellListener(Subscriber):
    """Routes one cell's changes to the binding that reads it."""

    def __init__(self, binding: "PlotBinding", key: str, cell: Observable):
        self.binding = binding
        self.key = key
        self.cell = cell
        self.name = f"{binding.name}.{key}"

    def on_change(self, new_value: Any) -> None:
        self.binding._on_cell_change(self.key, self.cell, new_value)


class PlotBinding:
    """A rendering primitive whose data and style follow observable cells.

    Parameters
    ----------
    surface : RenderingSurface
        Where the primitive is drawn.
    kind : str
        Primitive kind understood by the surface (``heatmap``, ``line``,
        ``label``, ``surface``).
    data : Observable or value
        Cell supplying the primitive's data. Plain values are drawn once.
    style : dict, optional
        Style options; values may be cells (e.g. a dynamic ``colorrange``)
        or constants (coordinates, colormap).
    name : str, optional
        Binding name used in error reports.

    Notes
    -----
    A failed redraw never takes the session down. A data cell whose new
    value has a different shape raises ``ShapeMismatchError``; any other
    drawing failure raises ``RenderingError``. Both name this binding and
    the cell, leave the last-good drawing on screen, are recorded in
    ``last_error``, and propagate through the cell's ``SubscriptionError``
    so the animation driver can report them. The next good update clears
    ``last_error``.

    Example usage::

        n = FrameIndex.for_store(store)
        field = lift(n, store.snapshot_at, name="vorticity")
        limits = lift(n, lambda i: windowed_color_limits(store, i))
        hm = PlotBinding(surface, "heatmap", field,
                         {"colorrange": limits, "cmap": "RdBu_r"}, name="vorticity-map")
        n.set(5)   # hm redraws with snapshot 5 and its color range
    """

    def __init__(
        self,
        surface,
        kind: str,
        data,
        style: Optional[Dict[str, Any]] = None,
        name: Optional[str] = None,
    ):
        self.surface = surface
        self.kind = kind
        self.name = name or f"{kind}-{id(self):x}"
        self.data_cell = data
        self.style = dict(style or {})

        self.redraw_count = 0
        self.last_error: Optional[RenderingError] = None

        initial_style = {key: _current(value) for key, value in self.style.items()}
        self.handle = surface.draw(kind, _current(data), initial_style)

        self._subscriptions = []
        if isinstance(data, Observable):
            self._subscriptions.append(data.subscribe(_CellListener(self, "data", data)))
        for key, value in self.style.items():
            if isinstance(value, Observable):
                self._subscriptions.append(value.subscribe(_CellListener(self, key, value)))

        logger.debug("Bound %s '%s' to %d cell(s)", kind, self.name, len(self._subscriptions))

    @property
    def cells(self) -> list:
        """Cells this binding listens to."""
        return [sub.subscriber.cell for sub in self._subscriptions if sub.active]

    def _on_cell_change(self, key: str, cell: Observable, new_value: Any) -> None:
        try:
            if key == "data":
                assert_same_shape(self.handle.shape, new_value, binding=self.name, cell=cell.name)
                self.surface.update(self.handle, new_value)
            else:
                self.surface.restyle(self.handle, {key: new_value})
        except RenderingError as exc:
            self._record(exc)
            raise
        except Exception as exc:
            error = RenderingError(
                f"Binding '{self.name}' failed to redraw from cell '{cell.name}': "
                f"{type(exc).__name__}: {exc}",
                binding=self.name,
                cell=cell.name,
            )
            self._record(error)
            raise error from exc

        self.redraw_count += 1
        self.last_error = None

    def _record(self, error: RenderingError) -> None:
        self.last_error = error
        logger.warning("Rendering error: %s", error)

    def dispose(self) -> None:
        """Stop following the bound cells; the drawing stays as it is."""
        for subscription in self._subscriptions:
            subscription.cancel()
