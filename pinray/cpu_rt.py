import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Iterator, List, Tuple

import numpy as np
from numpy.typing import NDArray

from pinray.app import App
from pinray.camera import Ray, generate_ray
from pinray.common import Color, Light, Scene
from pinray.shapes import Shape
from pinray.vectors import add, dot, magnitude, normalize, scale, sub

logger = logging.getLogger(__name__)


def nearest_shape(shapes: List[Shape], ray: Ray) -> Tuple[int, float]:
    """Index of the closest shape hit by *ray* and its distance.

    Returns (-1, inf) when nothing is hit. On ties the shape that comes
    first in *shapes* wins.
    """
    dist_to_nearest = float("inf")
    nearest = -1
    for i, obj in enumerate(shapes):
        dist = obj.intersect(ray)
        if dist < dist_to_nearest:
            dist_to_nearest = dist
            nearest = i

    return nearest, dist_to_nearest


def is_blocked(
    hit_point: NDArray[np.float64],
    hit_index: int,
    shapes: List[Shape],
    light: Light,
    bias: float = 0.0,
) -> bool:
    to_light = sub(light.position, hit_point)
    dir_to_light = normalize(to_light)
    dist_to_light = magnitude(to_light)

    origin = hit_point
    if bias > 0:
        origin = add(hit_point, scale(dir_to_light, bias))
        dist_to_light -= bias

    shadow_ray = Ray(origin, dir_to_light)
    for i, obj in enumerate(shapes):
        if i != hit_index and obj.intersect(shadow_ray) < dist_to_light:
            return True

    return False


def reflect_intensity(light: Light, point: NDArray[np.float64], normal: NDArray[np.float64]) -> float:
    dir_to_light = normalize(sub(light.position, point))
    return abs(dot(dir_to_light, normal))


def get_pixel_color(scene: Scene, x: int, y: int) -> Color:
    settings = scene.settings
    ray = generate_ray(scene.camera, x, y, settings.width, settings.height)

    nearest, dist_to_nearest = nearest_shape(scene.shapes, ray)
    if nearest == -1:
        return scene.background

    obj = scene.shapes[nearest]
    point_of_intersection = ray.at(dist_to_nearest)
    normal = obj.normal_at(point_of_intersection)

    reflect = reflect_intensity(scene.light, point_of_intersection, normal)
    if reflect > 1:
        if not settings.clamp_intensity:
            return scene.background
        reflect = 1.0

    if is_blocked(point_of_intersection, nearest, scene.shapes, scene.light, settings.shadow_bias):
        return Color.BLACK

    return obj.color.scaled(scene.light.intensity * reflect)


def row_bands(height: int, band_rows: int) -> Iterator[Tuple[int, int]]:
    for start in range(0, height, band_rows):
        yield start, min(start + band_rows, height)


def render_band(scene: Scene, start: int, stop: int) -> Tuple[int, int, NDArray[np.uint8]]:
    """Compute pixel rows ``start <= y < stop`` (y measured from the bottom)."""
    band = np.zeros((stop - start, scene.width, 4), dtype=np.uint8)
    for y in range(start, stop):
        for x in range(scene.width):
            band[y - start, x] = get_pixel_color(scene, x, y).rgba()

    return start, stop, band


class CpuApp(App):
    def run(self):
        height = self.settings.height
        bands = list(row_bands(height, self.settings.band_rows))

        if self.settings.workers > 1:
            logger.info("Dispatching %d row bands to %d worker processes", len(bands), self.settings.workers)
            with ProcessPoolExecutor(max_workers=self.settings.workers) as executor:
                futures = [executor.submit(render_band, self.scene, start, stop) for start, stop in bands]
                for future in as_completed(futures):
                    self.write_band(*future.result())
        else:
            for start, stop in bands:
                self.write_band(*render_band(self.scene, start, stop))
                logger.debug("Rendered rows %d-%d of %d", start, stop, height)

    def write_band(self, start: int, stop: int, band: NDArray[np.uint8]):
        height = self.settings.height
        # flip vertically, band row 0 is the lowest pixel row
        self.image[height - stop:height - start] = band[::-1]
