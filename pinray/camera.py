from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from pinray.errors import ConfigurationError, DegenerateVectorError
from pinray.vectors import add, cross, normalize, scale, sub, vec

# Pixel row 0 is the top of the image, so the world "up" used to build the
# camera basis points down the y axis.
WORLD_UP = vec(0.0, -1.0, 0.0)


@dataclass(frozen=True, eq=False)
class Ray:
    origin: NDArray[np.float64]
    direction: NDArray[np.float64]

    def at(self, distance: float) -> NDArray[np.float64]:
        return add(self.origin, scale(self.direction, distance))


@dataclass(frozen=True, eq=False)
class Camera:
    position: NDArray[np.float64]
    forward: NDArray[np.float64]
    right: NDArray[np.float64]
    up: NDArray[np.float64]

    @classmethod
    def look_at(cls, position, target) -> "Camera":
        """Build an orthonormal camera basis looking from *position* at *target*.

        Raises ConfigurationError if the two points coincide or if the view
        direction is parallel to the world up axis.
        """
        position = np.asarray(position, dtype=np.float64)
        target = np.asarray(target, dtype=np.float64)

        try:
            forward = normalize(sub(target, position))
        except DegenerateVectorError as e:
            raise ConfigurationError(f"Camera target {tuple(target)} equals its position") from e

        try:
            right = normalize(cross(WORLD_UP, forward))
        except DegenerateVectorError as e:
            raise ConfigurationError(f"Camera direction {tuple(forward)} is parallel to the world up axis") from e

        up = normalize(cross(right, forward))
        return cls(position, forward, right, up)


def make_camera(position, target) -> Camera:
    return Camera.look_at(position, target)


def screen_scale(width: int, height: int):
    # Keeps the field of view square whatever the aspect ratio
    if width > height:
        return 1.0, height / width
    return width / height, 1.0


def generate_ray(camera: Camera, pixel_x: int, pixel_y: int, width: int, height: int) -> Ray:
    width_scale, height_scale = screen_scale(width, height)

    u = (pixel_x / width - 0.5) * width_scale
    v = (pixel_y / height - 0.5) * height_scale

    direction = add(add(camera.forward, scale(camera.right, u)), scale(camera.up, v))
    return Ray(camera.position, normalize(direction))
