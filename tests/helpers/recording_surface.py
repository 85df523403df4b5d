import numpy as np

from vizloop.contracts.frames import assert_same_shape
from vizloop.visualization.surface import PlotHandle, RenderingSurface


class RecordingSurface(RenderingSurface):
    """Surface that only records calls; ``fail_on`` makes updates of a kind raise."""

    KINDS = ("heatmap", "line", "label", "surface")

    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.calls = []

    @property
    def figure(self):
        return None

    def draw(self, kind, data, style=None):
        if kind not in self.KINDS:
            raise ValueError(f"Unknown primitive kind '{kind}'")
        self.calls.append(("draw", kind, data))
        return PlotHandle(kind, artist=None, axes=None, shape=np.shape(data), style=style or {}, data=data)

    def update(self, handle, new_data):
        if self.fail_on == handle.kind:
            raise RuntimeError(f"{handle.kind} backend failure")
        assert_same_shape(handle.shape, new_data, binding=handle.kind, cell="data")
        handle.data = new_data
        self.calls.append(("update", handle.kind, new_data))

    def restyle(self, handle, style):
        handle.style.update(style)
        self.calls.append(("restyle", handle.kind, dict(style)))

    def updates(self, kind=None):
        return [data for call, k, data in self.calls if call == "update" and (kind is None or k == kind)]
