import math
from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np
from numpy.typing import NDArray

from pinray.camera import Ray
from pinray.common import Color
from pinray.errors import ConfigurationError, DegenerateVectorError
from pinray.vectors import dot, normalize, sub

# Shape kind codes shared with the compiled kernels in numba_rt
SPHERE = 0
PLANE = 1

PACKED_SIZE = 6


@dataclass(eq=False)
class Sphere:
    center: NDArray[np.float64]
    radius: float
    color: Color

    kind = SPHERE

    def __post_init__(self):
        self.center = np.asarray(self.center, dtype=np.float64)
        if not self.radius > 0:
            raise ConfigurationError(f"Sphere radius must be positive, got {self.radius}")

    def intersect(self, ray: Ray) -> float:
        """Distance along *ray* to the near side of the sphere, or inf on a miss."""
        to_center = sub(self.center, ray.origin)
        proj = dot(to_center, ray.direction)

        # center lies behind the ray origin
        if proj < 0:
            return float("inf")

        discriminant = self.radius * self.radius + proj * proj - dot(to_center, to_center)
        if discriminant < 0:
            return float("inf")

        return proj - math.sqrt(discriminant)

    def normal_at(self, point: NDArray[np.float64]) -> NDArray[np.float64]:
        return normalize(sub(point, self.center))

    def packed(self) -> Tuple[float, ...]:
        return (*self.center, self.radius, 0.0, 0.0)


@dataclass(eq=False)
class Plane:
    point: NDArray[np.float64]
    normal: NDArray[np.float64]
    color: Color

    kind = PLANE

    def __post_init__(self):
        self.point = np.asarray(self.point, dtype=np.float64)
        try:
            self.normal = normalize(np.asarray(self.normal, dtype=np.float64))
        except DegenerateVectorError as e:
            raise ConfigurationError("Plane normal can't be a zero vector") from e

    def intersect(self, ray: Ray) -> float:
        denom = dot(ray.direction, self.normal)

        # Parallel rays never hit, not even one lying inside the plane
        if denom == 0:
            return float("inf")

        distance = (dot(self.point, self.normal) - dot(ray.origin, self.normal)) / denom
        if distance < 0:
            return float("inf")

        return distance

    def normal_at(self, point: NDArray[np.float64]) -> NDArray[np.float64]:
        return self.normal

    def packed(self) -> Tuple[float, ...]:
        return (*self.point, *self.normal)


Shape = Union[Sphere, Plane]
