from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, List, Tuple

import numpy as np
from numpy.typing import NDArray

from pinray.errors import ConfigurationError

if TYPE_CHECKING:
    from pinray.camera import Camera
    from pinray.shapes import Shape


BACKENDS = ("cpu", "numba")


@dataclass
class Settings:
    width: int = 640
    height: int = 480
    backend: str = "cpu"
    workers: int = 1
    band_rows: int = 16
    shadow_bias: float = 0.0
    clamp_intensity: bool = False

    def __post_init__(self):
        for name in ("width", "height", "workers", "band_rows"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ConfigurationError(f"{name} must be an int, got {value!r}")
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.backend not in BACKENDS:
            raise ConfigurationError(f"Unknown backend {self.backend!r}, expected one of {BACKENDS}")
        if self.workers < 1:
            raise ConfigurationError(f"workers must be at least 1, got {self.workers}")
        if self.band_rows < 1:
            raise ConfigurationError(f"band_rows must be at least 1, got {self.band_rows}")
        if self.shadow_bias < 0:
            raise ConfigurationError(f"shadow_bias can't be negative, got {self.shadow_bias}")


@dataclass(frozen=True)
class Color:
    """ARGB colour with 8-bit integer channels.

    An alpha of 0 marks the transparent background; every colour produced
    by shading keeps the alpha of the shape it came from.
    """

    alpha: int
    red: int
    green: int
    blue: int

    TRANSPARENT: ClassVar["Color"]
    BLACK: ClassVar["Color"]

    def __post_init__(self):
        for name in ("alpha", "red", "green", "blue"):
            value = getattr(self, name)
            if not isinstance(value, (int, np.integer)) or not 0 <= value <= 255:
                raise ConfigurationError(f"Color channel {name} must be an int in [0, 255], got {value!r}")

    @classmethod
    def opaque(cls, red: int, green: int, blue: int) -> "Color":
        return cls(255, red, green, blue)

    def scaled(self, factor: float) -> "Color":
        """Multiply the RGB channels by *factor*, leaving alpha untouched."""
        return Color(
            self.alpha,
            _scale_channel(self.red, factor),
            _scale_channel(self.green, factor),
            _scale_channel(self.blue, factor),
        )

    def argb(self) -> Tuple[int, int, int, int]:
        return self.alpha, self.red, self.green, self.blue

    def rgba(self) -> Tuple[int, int, int, int]:
        return self.red, self.green, self.blue, self.alpha


Color.TRANSPARENT = Color(0, 0, 0, 0)
Color.BLACK = Color(255, 0, 0, 0)


def _scale_channel(value: int, factor: float) -> int:
    # round() is round-half-even, same as np.rint in the compiled kernels
    return min(max(round(value * factor), 0), 255)


@dataclass(frozen=True, eq=False)
class Light:
    position: NDArray[np.float64]
    intensity: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "position", np.asarray(self.position, dtype=np.float64))
        if self.intensity < 0:
            raise ConfigurationError(f"Light intensity can't be negative, got {self.intensity}")


@dataclass(eq=False)
class Scene:
    shapes: List["Shape"]
    light: Light
    camera: "Camera"
    background: Color = Color.TRANSPARENT
    settings: Settings = field(default_factory=Settings)

    @property
    def width(self) -> int:
        return self.settings.width

    @property
    def height(self) -> int:
        return self.settings.height
