import logging
import math

import numba
import numpy as np

from pinray.app import App
from pinray.common import Color
from pinray.errors import DegenerateVectorError
from pinray.shapes import PACKED_SIZE, SPHERE

logger = logging.getLogger(__name__)

# Scene arrays handed to the kernels:
#   camera  float64[4, 3]  position, forward, right, up
#   light   float64[4]     x, y, z, intensity
#   kinds   int64[n]       SPHERE or PLANE
#   params  float64[n, 6]  sphere: cx, cy, cz, radius; plane: px, py, pz, nx, ny, nz
#   colors  int64[n, 4]    alpha, red, green, blue

BLACK = np.array(Color.BLACK.argb(), dtype=np.int64)
NO_COLOR = np.zeros(4, dtype=np.int64)


@numba.njit
def normalize(x, y, z):
    # the trailing flag is False for a zero or non-finite length
    length = math.sqrt(x * x + y * y + z * z)
    if length == 0 or not math.isfinite(length):
        return 0.0, 0.0, 0.0, False
    return x / length, y / length, z / length, True


@numba.njit
def intersect(kind, params, ox, oy, oz, dx, dy, dz):
    if kind == SPHERE:
        tx = params[0] - ox
        ty = params[1] - oy
        tz = params[2] - oz
        proj = tx * dx + ty * dy + tz * dz
        if proj < 0:
            return math.inf

        discriminant = params[3] * params[3] + proj * proj - (tx * tx + ty * ty + tz * tz)
        if discriminant < 0:
            return math.inf

        return proj - math.sqrt(discriminant)

    denom = dx * params[3] + dy * params[4] + dz * params[5]
    if denom == 0:
        return math.inf

    plane_d = params[0] * params[3] + params[1] * params[4] + params[2] * params[5]
    origin_d = ox * params[3] + oy * params[4] + oz * params[5]
    distance = (plane_d - origin_d) / denom
    if distance < 0:
        return math.inf

    return distance


@numba.njit
def normal_at(kind, params, px, py, pz):
    if kind == SPHERE:
        return normalize(px - params[0], py - params[1], pz - params[2])
    return params[3], params[4], params[5], True


@numba.njit
def is_blocked(px, py, pz, dx, dy, dz, dist_to_light, hit_index, kinds, params, bias):
    if bias > 0:
        px = px + dx * bias
        py = py + dy * bias
        pz = pz + dz * bias
        dist_to_light -= bias

    for i in range(kinds.shape[0]):
        if i != hit_index and intersect(kinds[i], params[i], px, py, pz, dx, dy, dz) < dist_to_light:
            return True

    return False


@numba.njit
def scale_channel(value, factor):
    return min(max(int(np.rint(value * factor)), 0), 255)


@numba.njit
def get_pixel_color(x, y, width, height, camera, light, kinds, params, colors, background, bias, clamp_intensity):
    """Shade one pixel, returning (alpha, red, green, blue, ok).

    ok is False when a zero-length direction came up on the way.
    """
    if width > height:
        width_scale = 1.0
        height_scale = height / width
    else:
        width_scale = width / height
        height_scale = 1.0

    u = (x / width - 0.5) * width_scale
    v = (y / height - 0.5) * height_scale

    ox, oy, oz = camera[0, 0], camera[0, 1], camera[0, 2]
    dx, dy, dz, ok = normalize(
        camera[1, 0] + camera[2, 0] * u + camera[3, 0] * v,
        camera[1, 1] + camera[2, 1] * u + camera[3, 1] * v,
        camera[1, 2] + camera[2, 2] * u + camera[3, 2] * v,
    )
    if not ok:
        return NO_COLOR[0], NO_COLOR[1], NO_COLOR[2], NO_COLOR[3], False

    dist_to_nearest = math.inf
    nearest = -1
    for i in range(kinds.shape[0]):
        dist = intersect(kinds[i], params[i], ox, oy, oz, dx, dy, dz)
        if dist < dist_to_nearest:
            dist_to_nearest = dist
            nearest = i

    if nearest == -1:
        return background[0], background[1], background[2], background[3], True

    px = ox + dx * dist_to_nearest
    py = oy + dy * dist_to_nearest
    pz = oz + dz * dist_to_nearest
    nx, ny, nz, ok = normal_at(kinds[nearest], params[nearest], px, py, pz)
    if not ok:
        return NO_COLOR[0], NO_COLOR[1], NO_COLOR[2], NO_COLOR[3], False

    tx = light[0] - px
    ty = light[1] - py
    tz = light[2] - pz
    lx, ly, lz, ok = normalize(tx, ty, tz)
    if not ok:
        return NO_COLOR[0], NO_COLOR[1], NO_COLOR[2], NO_COLOR[3], False

    reflect = abs(lx * nx + ly * ny + lz * nz)
    if reflect > 1:
        if not clamp_intensity:
            return background[0], background[1], background[2], background[3], True
        reflect = 1.0

    dist_to_light = math.sqrt(tx * tx + ty * ty + tz * tz)
    if is_blocked(px, py, pz, lx, ly, lz, dist_to_light, nearest, kinds, params, bias):
        return BLACK[0], BLACK[1], BLACK[2], BLACK[3], True

    factor = light[3] * reflect
    return (
        colors[nearest, 0],
        scale_channel(colors[nearest, 1], factor),
        scale_channel(colors[nearest, 2], factor),
        scale_channel(colors[nearest, 3], factor),
        True,
    )


@numba.njit(parallel=True)
def generate_image(image, degenerate_rows, camera, light, kinds, params, colors, background, bias, clamp_intensity):
    height, width, _ = image.shape

    for y in numba.prange(height):
        row = height - y - 1
        for x in range(width):
            a, r, g, b, ok = get_pixel_color(
                x, y, width, height, camera, light, kinds, params, colors, background, bias, clamp_intensity,
            )
            if not ok:
                degenerate_rows[y] = True
            image[row, x, 0] = r
            image[row, x, 1] = g
            image[row, x, 2] = b
            image[row, x, 3] = a


class NumbaApp(App):
    def run(self):
        camera, light, kinds, params, colors, background = self.scene_to_numba()
        degenerate_rows = np.zeros(self.settings.height, dtype=np.bool_)

        threads = min(self.settings.workers, numba.config.NUMBA_NUM_THREADS)
        previous_threads = numba.get_num_threads()
        numba.set_num_threads(threads)
        logger.info("Running compiled kernel on %d threads", threads)
        try:
            generate_image(
                self.image,
                degenerate_rows,
                camera,
                light,
                kinds,
                params,
                colors,
                background,
                float(self.settings.shadow_bias),
                bool(self.settings.clamp_intensity),
            )
        finally:
            numba.set_num_threads(previous_threads)

        if degenerate_rows.any():
            rows = np.flatnonzero(degenerate_rows)
            raise DegenerateVectorError(
                f"Zero-length direction while shading pixel rows {rows.tolist()} (y measured from the bottom)"
            )

    def scene_to_numba(self):
        scene = self.scene
        cam = scene.camera

        camera = np.array([cam.position, cam.forward, cam.right, cam.up], dtype=np.float64)
        light = np.array((*scene.light.position, scene.light.intensity), dtype=np.float64)

        n = len(scene.shapes)
        kinds = np.zeros(n, dtype=np.int64)
        params = np.zeros((n, PACKED_SIZE), dtype=np.float64)
        colors = np.zeros((n, 4), dtype=np.int64)
        for i, s in enumerate(scene.shapes):
            kinds[i] = s.kind
            params[i] = s.packed()
            colors[i] = s.color.argb()

        background = np.array(scene.background.argb(), dtype=np.int64)
        return camera, light, kinds, params, colors, background
