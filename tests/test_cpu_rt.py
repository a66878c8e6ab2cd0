import math
import unittest
from unittest import mock

import numpy as np

from pinray.camera import Ray, make_camera
from pinray.common import Color, Light, Scene, Settings
from pinray.cpu_rt import (
    CpuApp,
    get_pixel_color,
    is_blocked,
    nearest_shape,
    reflect_intensity,
    row_bands,
)
from pinray.scenes import create_scene
from pinray.shapes import Plane, Sphere
from pinray.vectors import vec

RED = Color.opaque(255, 0, 0)
GREEN = Color.opaque(0, 255, 0)
GRAY = Color.opaque(200, 200, 200)


def one_sphere_scene(settings):
    return Scene(
        shapes=[Sphere(vec(2, 2, -10), 1.0, RED)],
        light=Light(vec(0, 10, -2), 1.0),
        camera=make_camera(vec(0, 0, 0), vec(0, 0, -1)),
        background=Color.TRANSPARENT,
        settings=settings,
    )


def shadow_scene(with_occluder):
    shapes = [Plane(vec(0, -2, 0), vec(0, 1, 0), GRAY)]
    if with_occluder:
        shapes.append(Sphere(vec(0.25, 4, -5), 1.0, RED))

    return Scene(
        shapes=shapes,
        light=Light(vec(0.5, 10, -5), 1.0),
        camera=make_camera(vec(0, 0, 0), vec(0, 0, -1)),
        background=Color.TRANSPARENT,
        settings=Settings(width=100, height=100),
    )


class TestNearestShape(unittest.TestCase):

    def test_nearest_wins(self):
        shapes = [
            Sphere(vec(0, 0, -20), 1.0, RED),
            Sphere(vec(0, 0, -10), 1.0, GREEN),
        ]
        index, distance = nearest_shape(shapes, Ray(vec(0, 0, 0), vec(0, 0, -1)))
        self.assertEqual(index, 1)
        self.assertAlmostEqual(distance, 9.0)

    def test_ties_go_to_first_shape(self):
        shapes = [
            Sphere(vec(0, 0, -10), 1.0, RED),
            Sphere(vec(0, 0, -10), 1.0, GREEN),
        ]
        index, _ = nearest_shape(shapes, Ray(vec(0, 0, 0), vec(0, 0, -1)))
        self.assertEqual(index, 0)

    def test_miss(self):
        shapes = [Sphere(vec(0, 0, 10), 1.0, RED)]
        self.assertEqual(nearest_shape(shapes, Ray(vec(0, 0, 0), vec(0, 0, -1))), (-1, math.inf))
        self.assertEqual(nearest_shape([], Ray(vec(0, 0, 0), vec(0, 0, -1))), (-1, math.inf))


class TestShadow(unittest.TestCase):

    def setUp(self):
        self.light = Light(vec(0, 0, 5), 1.0)
        self.hit_point = vec(0, 0, 0)
        self.ground = Sphere(vec(0, 0, -1), 1.0, GRAY)

    def test_single_shape_is_never_blocked(self):
        self.assertFalse(is_blocked(self.hit_point, 0, [self.ground], self.light))

    def test_interposed_shape_blocks(self):
        shapes = [self.ground, Sphere(vec(0, 0, 2.5), 0.5, RED)]
        self.assertTrue(is_blocked(self.hit_point, 0, shapes, self.light))

    def test_shape_beyond_light_does_not_block(self):
        shapes = [self.ground, Sphere(vec(0, 0, 8), 0.5, RED)]
        self.assertFalse(is_blocked(self.hit_point, 0, shapes, self.light))

    def test_hit_shape_is_skipped_by_index(self):
        occluder = Sphere(vec(0, 0, 2.5), 0.5, RED)
        self.assertFalse(is_blocked(self.hit_point, 1, [self.ground, occluder], self.light))

    def test_occluder_exactly_at_light_distance_does_not_block(self):
        # the plane passes through the light, so its distance equals the light's
        wall = Plane(vec(0, 0, 5), vec(0, 0, 1), RED)
        self.assertEqual(wall.intersect(Ray(self.hit_point, vec(0, 0, 1))), 5.0)
        self.assertFalse(is_blocked(self.hit_point, 0, [self.ground, wall], self.light))

    def test_bias_skips_surface_touching_the_hit_point(self):
        touching = Plane(vec(0, 0, 0), vec(0, 0, 1), RED)
        shapes = [self.ground, touching]
        self.assertTrue(is_blocked(self.hit_point, 0, shapes, self.light))
        self.assertFalse(is_blocked(self.hit_point, 0, shapes, self.light, bias=1e-4))


class TestShading(unittest.TestCase):

    def test_reflect_intensity_ignores_facing(self):
        light = Light(vec(0, 4, 0), 1.0)
        point = vec(0, 0, 0)
        self.assertAlmostEqual(reflect_intensity(light, point, vec(0, 1, 0)), 1.0)
        self.assertAlmostEqual(reflect_intensity(light, point, vec(0, -1, 0)), 1.0)
        self.assertAlmostEqual(reflect_intensity(light, point, vec(1, 0, 0)), 0.0)

    def test_empty_scene_is_background(self):
        scene = one_sphere_scene(Settings(width=8, height=6))
        scene.shapes = []
        scene.background = Color(10, 20, 30, 40)
        self.assertEqual(get_pixel_color(scene, 3, 2), Color(10, 20, 30, 40))

    def test_image_center_misses_the_offset_sphere(self):
        scene = one_sphere_scene(Settings(width=640, height=480))
        self.assertEqual(get_pixel_color(scene, 320, 240), Color.TRANSPARENT)

    def test_lit_sphere(self):
        scene = one_sphere_scene(Settings(width=640, height=480))
        # (448, 368) is where the sphere's center projects
        color = get_pixel_color(scene, 448, 368)
        self.assertEqual(color.alpha, 255)
        self.assertGreater(color.red, 0)
        self.assertLess(color.red, 255)
        self.assertEqual((color.green, color.blue), (0, 0))

    def test_shadowed_point_is_black(self):
        # (50, 10) looks down at the floor point (0, -2, -5)
        self.assertEqual(get_pixel_color(shadow_scene(with_occluder=True), 50, 10), Color.BLACK)

        lit = get_pixel_color(shadow_scene(with_occluder=False), 50, 10)
        self.assertNotEqual(lit, Color.BLACK)
        self.assertEqual(lit.alpha, 255)
        self.assertGreater(lit.red, 0)

    def test_shading_scales_with_light_intensity(self):
        scene = one_sphere_scene(Settings(width=640, height=480))
        dim = get_pixel_color(scene, 448, 368)
        scene.light = Light(vec(0, 10, -2), 0.5)
        dimmer = get_pixel_color(scene, 448, 368)
        self.assertLessEqual(abs(dimmer.red - dim.red / 2), 1)

    def test_overflowing_reflect_intensity(self):
        scene = one_sphere_scene(Settings(width=640, height=480))
        with mock.patch("pinray.cpu_rt.reflect_intensity", return_value=1.0 + 1e-12):
            self.assertEqual(get_pixel_color(scene, 448, 368), Color.TRANSPARENT)

            scene.settings = Settings(width=640, height=480, clamp_intensity=True)
            self.assertEqual(get_pixel_color(scene, 448, 368), RED)


class TestCpuApp(unittest.TestCase):

    def test_row_bands(self):
        self.assertEqual(list(row_bands(10, 4)), [(0, 4), (4, 8), (8, 10)])
        self.assertEqual(list(row_bands(3, 16)), [(0, 3)])

    def test_empty_scene_fills_grid_with_background(self):
        scene = one_sphere_scene(Settings(width=64, height=48))
        scene.shapes = []
        app = CpuApp(scene)
        app.image[:] = 7
        app.run()
        np.testing.assert_array_equal(app.image, np.zeros((48, 64, 4), dtype=np.uint8))

    def test_grid_is_flipped_vertically(self):
        scene = create_scene(Settings(width=24, height=18, band_rows=5))
        app = CpuApp(scene)
        app.run()
        for x, y in [(0, 0), (5, 2), (12, 9), (23, 17), (3, 16)]:
            self.assertEqual(app.pixel(x, y), get_pixel_color(scene, x, y))
            np.testing.assert_array_equal(app.image[18 - y - 1, x], get_pixel_color(scene, x, y).rgba())

    def test_render_is_deterministic(self):
        first = CpuApp(create_scene(Settings(width=32, height=24)))
        first.run()
        second = CpuApp(create_scene(Settings(width=32, height=24)))
        second.run()
        np.testing.assert_array_equal(first.image, second.image)
        # the demo scene shows more than just background
        self.assertTrue(np.any(first.image[..., 3] == 255))

    def test_worker_processes_match_serial_render(self):
        serial = CpuApp(create_scene(Settings(width=32, height=24, band_rows=24)))
        serial.run()
        parallel = CpuApp(create_scene(Settings(width=32, height=24, band_rows=5, workers=2)))
        parallel.run()
        np.testing.assert_array_equal(serial.image, parallel.image)


if __name__ == '__main__':
    unittest.main()
