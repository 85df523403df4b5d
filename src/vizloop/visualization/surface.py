"""Rendering surfaces: draw plot primitives and update them in place.

A surface hands out a ``PlotHandle`` for every primitive it draws. Handles
remember the shape of the data they were drawn with; ``update`` only
accepts new data of that shape, so a redraw never silently changes a
plot's geometry.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.colors import Normalize

from vizloop.contracts.frames import assert_same_shape

__all__ = ['PlotHandle', 'RenderingSurface', 'MatplotlibSurface']

logger = logging.getLogger(__name__)

# Style options that configure the axes rather than the artist.
AXES_OPTIONS = ("title", "xlabel", "ylabel", "zlabel", "xlim", "ylim", "aspect")


class PlotHandle:
    """A drawn primitive: its kind, artist, axes and original data shape."""

    def __init__(self, kind: str, artist, axes, shape: Tuple[int, ...], style: Dict[str, Any], data=None):
        self.kind = kind
        self.artist = artist
        self.axes = axes
        self.shape = tuple(shape)
        self.style = dict(style)
        self.data = data

    def __repr__(self):
        return f"PlotHandle(kind={self.kind!r}, shape={self.shape})"


class RenderingSurface(ABC):
    """Draw primitives and update them with new data of the same shape."""

    KINDS: Tuple[str, ...] = ()

    @abstractmethod
    def draw(self, kind: str, data, style: Optional[Dict[str, Any]] = None) -> PlotHandle:
        ...

    @abstractmethod
    def update(self, handle: PlotHandle, new_data) -> None:
        ...

    @abstractmethod
    def restyle(self, handle: PlotHandle, style: Dict[str, Any]) -> None:
        ...

    @property
    @abstractmethod
    def figure(self):
        ...

    def close(self) -> None:
        pass


class MatplotlibSurface(RenderingSurface):
    """Matplotlib figure (Agg backend) laid out as an ``nrows x ncols`` grid.

    Supported primitive kinds:

    - ``heatmap``: 2D array indexed ``[x, y]``. Style: ``x``, ``y``
      coordinates, ``cmap``, ``colorrange``.
    - ``line``: 1D values against ``coords``. With
      ``orientation="vertical"`` values run along x (profiles).
    - ``label``: text, as figure title (``target="figure"``, default) or
      axes title (``target="axes"``).
    - ``surface``: 3D surface with ``x``, ``y``, ``z`` coordinate grids,
      coloured by the 2D data. Style: ``cmap``, ``colorrange``.

    Every axes-based kind also accepts ``axes=(row, col)``, ``title``,
    ``xlabel``, ``ylabel``, ``zlabel``, ``xlim``, ``ylim`` and ``aspect``.

    Example usage::

        surface = MatplotlibSurface(nrows=1, ncols=2, figsize=(12, 5))
        hm = surface.draw("heatmap", field, {"axes": (0, 0), "colorrange": (-1, 1)})
        surface.update(hm, next_field)
        surface.restyle(hm, {"colorrange": (-0.5, 0.5)})
    """

    KINDS = ("heatmap", "line", "label", "surface")

    def __init__(
        self,
        nrows: int = 1,
        ncols: int = 1,
        figsize: Tuple[float, float] = (8.0, 6.0),
        dpi: int = 100,
        cmap: str = "viridis",
    ):
        self.nrows = nrows
        self.ncols = ncols
        self.cmap = cmap
        self.dpi = dpi
        self._fig = plt.figure(figsize=tuple(figsize), dpi=dpi)
        self._axes: Dict[Tuple[int, int], Any] = {}
        logger.debug("MatplotlibSurface created (%dx%d, dpi=%d)", nrows, ncols, dpi)

    @property
    def figure(self):
        return self._fig

    def axes_at(self, position=(0, 0), projection: Optional[str] = None):
        """Axes at grid ``position``, created on first use."""
        row, col = position
        if not (0 <= row < self.nrows and 0 <= col < self.ncols):
            raise ValueError(
                f"Axes position {position} outside {self.nrows}x{self.ncols} layout"
            )
        key = (row, col)
        if key not in self._axes:
            index = row * self.ncols + col + 1
            self._axes[key] = self._fig.add_subplot(
                self.nrows, self.ncols, index, projection=projection
            )
        return self._axes[key]

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def draw(self, kind: str, data, style: Optional[Dict[str, Any]] = None) -> PlotHandle:
        """Draw a primitive and return its handle.

        Raises
        ------
        ValueError
            If ``kind`` is not supported or the data has the wrong rank.
        """
        style = dict(style or {})
        if kind not in self.KINDS:
            raise ValueError(f"Unknown primitive kind '{kind}'; expected one of {self.KINDS}")

        draw_method = getattr(self, f"_draw_{kind}")
        handle = draw_method(data, style)
        if handle.axes is not None:
            self._apply_axes_style(handle.axes, style)
        return handle

    def _draw_heatmap(self, data, style) -> PlotHandle:
        values = np.asarray(data, dtype=float)
        if values.ndim != 2:
            raise ValueError(f"heatmap expects 2D data, got {values.ndim} dims")
        ax = self.axes_at(style.get("axes", (0, 0)))
        nx, ny = values.shape
        x = np.asarray(style.get("x", np.arange(nx)), dtype=float)
        y = np.asarray(style.get("y", np.arange(ny)), dtype=float)

        colorrange = style.get("colorrange")
        vmin, vmax = colorrange if colorrange is not None else (None, None)
        image = ax.imshow(
            values.T,
            origin="lower",
            extent=(x.min(), x.max(), y.min(), y.max()),
            cmap=style.get("cmap", self.cmap),
            vmin=vmin,
            vmax=vmax,
            aspect="auto",
            interpolation="nearest",
        )
        return PlotHandle("heatmap", image, ax, values.shape, style, data=values)

    def _draw_line(self, data, style) -> PlotHandle:
        values = np.asarray(data, dtype=float)
        if values.ndim != 1:
            raise ValueError(f"line expects 1D data, got {values.ndim} dims")
        ax = self.axes_at(style.get("axes", (0, 0)))
        coords = np.asarray(style.get("coords", np.arange(values.size)), dtype=float)
        if style.get("orientation", "horizontal") == "vertical":
            (line,) = ax.plot(values, coords, color=style.get("color"))
        else:
            (line,) = ax.plot(coords, values, color=style.get("color"))
        return PlotHandle("line", line, ax, values.shape, style, data=values)

    def _draw_label(self, data, style) -> PlotHandle:
        text = str(data)
        if style.get("target", "figure") == "axes":
            ax = self.axes_at(style.get("axes", (0, 0)))
            artist = ax.set_title(text)
        else:
            ax = None
            artist = self._fig.suptitle(text)
        return PlotHandle("label", artist, ax, np.shape(text), style, data=text)

    def _draw_surface(self, data, style) -> PlotHandle:
        values = np.asarray(data, dtype=float)
        if values.ndim != 2:
            raise ValueError(f"surface expects 2D color data, got {values.ndim} dims")
        for coord in ("x", "y", "z"):
            if coord not in style:
                raise ValueError(f"surface requires '{coord}' coordinate grid in style")
            assert_same_shape(values.shape, style[coord], binding="surface", cell=coord)
        ax = self.axes_at(style.get("axes", (0, 0)), projection="3d")
        artist = self._plot_surface(ax, values, style)
        return PlotHandle("surface", artist, ax, values.shape, style, data=values)

    def _plot_surface(self, ax, values, style):
        colorrange = style.get("colorrange")
        if colorrange is None:
            colorrange = (np.nanmin(values), np.nanmax(values))
        norm = Normalize(vmin=colorrange[0], vmax=colorrange[1])
        cmap = matplotlib.colormaps.get_cmap(style.get("cmap", self.cmap))
        return ax.plot_surface(
            np.asarray(style["x"]), np.asarray(style["y"]), np.asarray(style["z"]),
            facecolors=cmap(norm(values)),
            rstride=1, cstride=1, shade=False, linewidth=0,
        )

    # ------------------------------------------------------------------
    # Updating
    # ------------------------------------------------------------------

    def update(self, handle: PlotHandle, new_data) -> None:
        """Replace a primitive's data.

        Raises
        ------
        ShapeMismatchError
            If ``new_data`` does not have the shape the primitive was drawn with.
        """
        if handle.kind == "label":
            handle.artist.set_text(str(new_data))
            handle.data = str(new_data)
            return

        assert_same_shape(handle.shape, new_data, binding=handle.kind, cell="data")
        values = np.asarray(new_data, dtype=float)

        if handle.kind == "heatmap":
            handle.artist.set_data(values.T)
            if handle.style.get("colorrange") is None:
                handle.artist.autoscale()
        elif handle.kind == "line":
            if handle.style.get("orientation", "horizontal") == "vertical":
                handle.artist.set_xdata(values)
            else:
                handle.artist.set_ydata(values)
            if handle.style.get("autoscale", False):
                handle.axes.relim()
                handle.axes.autoscale_view()
        elif handle.kind == "surface":
            handle.artist.remove()
            handle.artist = self._plot_surface(handle.axes, values, handle.style)
        handle.data = values

    def restyle(self, handle: PlotHandle, style: Dict[str, Any]) -> None:
        """Apply new style options (color range, limits, titles) to a primitive."""
        handle.style.update(style)
        if "colorrange" in style and style["colorrange"] is not None:
            vmin, vmax = style["colorrange"]
            if handle.kind == "heatmap":
                handle.artist.set_clim(vmin, vmax)
            elif handle.kind == "surface":
                handle.artist.remove()
                handle.artist = self._plot_surface(handle.axes, handle.data, handle.style)
        if "cmap" in style and handle.kind == "heatmap":
            handle.artist.set_cmap(style["cmap"])
        if handle.axes is not None:
            self._apply_axes_style(handle.axes, style)

    def _apply_axes_style(self, ax, style: Dict[str, Any]) -> None:
        for option in AXES_OPTIONS:
            if option not in style or style[option] is None:
                continue
            value = style[option]
            if option == "title":
                ax.set_title(str(value))
            elif option == "xlabel":
                ax.set_xlabel(value)
            elif option == "ylabel":
                ax.set_ylabel(value)
            elif option == "zlabel" and hasattr(ax, "set_zlabel"):
                ax.set_zlabel(value)
            elif option == "xlim":
                ax.set_xlim(*value)
            elif option == "ylim":
                ax.set_ylim(*value)
            elif option == "aspect":
                ax.set_aspect(value)

    def render(self) -> None:
        """Draw the canvas now (recorders call this implicitly)."""
        self._fig.canvas.draw()

    def savefig(self, path, **kwargs):
        self._fig.savefig(path, dpi=kwargs.pop("dpi", self.dpi), **kwargs)

    def close(self) -> None:
        plt.close(self._fig)
