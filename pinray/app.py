import numpy as np

from pinray.common import Color, Scene


class App:
    """Owns the pixel grid a backend fills in for one scene.

    ``image`` is indexed ``[row, column, channel]`` with row 0 at the top
    and RGBA channel order, ready for the pixel sink.
    """

    def __init__(self, scene: Scene):
        self.scene = scene
        self.settings = scene.settings

        self.image = np.zeros(
            (self.settings.height, self.settings.width, 4),
            dtype=np.uint8,
        )

    def run(self):
        raise NotImplementedError

    def pixel(self, x: int, y: int) -> Color:
        """Read back the pixel at (x, y), with y measured from the bottom."""
        r, g, b, a = (int(c) for c in self.image[self.settings.height - y - 1, x])
        return Color(a, r, g, b)
