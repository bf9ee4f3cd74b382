"""Interactive layer-by-layer viewer for a rank volume.

Left/Up steps back one layer, Escape closes the window, and every other key
steps forward. Stepping past the last layer closes the window.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import matplotlib.pyplot as plt

from .export import to_uint8

BACK_KEYS = frozenset({"left", "up"})
ABORT_KEY = "escape"


class LayerViewer:
    """Step through ``ranks[z]`` for z = 0 .. d2-1 in a matplotlib window."""

    def __init__(self, ranks: np.ndarray, *, title: str = "Layer") -> None:
        self.ranks = np.asarray(ranks)
        if self.ranks.ndim != 3:
            raise ValueError(f"expected a 3D rank volume, got shape {self.ranks.shape}")
        self.title = title
        self.layer = 0
        self.closed = False

        self._fig = None
        self._ax = None
        self._image = None

    @property
    def num_layers(self) -> int:
        return int(self.ranks.shape[0])

    def handle_key(self, key: Optional[str]) -> bool:
        """Apply one key press; returns False once the viewer should close."""
        if self.closed:
            return False
        if key == ABORT_KEY:
            self.closed = True
            return False
        if key in BACK_KEYS:
            return self.previous_layer()
        return self.next_layer()

    def next_layer(self) -> bool:
        """Step forward; stepping past the last layer closes the viewer."""
        if self.closed:
            return False
        if self.layer + 1 >= self.num_layers:
            self.closed = True
        else:
            self.layer += 1
        return not self.closed

    def previous_layer(self) -> bool:
        """Step back, staying on layer 0 at the start."""
        if self.closed:
            return False
        self.layer = max(0, self.layer - 1)
        return True

    def frame(self) -> np.ndarray:
        """Pixels of the current layer as exported (uint8)."""
        return to_uint8(self.ranks[self.layer])

    def _redraw(self) -> None:
        self._image.set_data(self.frame())
        self._ax.set_title(f"{self.title} {self.layer + 1}/{self.num_layers}")
        self._fig.canvas.draw_idle()

    def _on_key(self, event) -> None:
        if self.handle_key(event.key):
            self._redraw()
        else:
            plt.close(self._fig)

    def show(self) -> None:
        """Open the window and block until it is closed."""
        self._fig, self._ax = plt.subplots(figsize=(6, 6))
        self._image = self._ax.imshow(
            self.frame(), cmap="gray", vmin=0, vmax=255, interpolation="nearest"
        )
        self._ax.set_axis_off()
        self._ax.set_title(f"{self.title} 1/{self.num_layers}")
        self._fig.canvas.mpl_connect("key_press_event", self._on_key)
        plt.show()
