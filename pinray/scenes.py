from pinray.camera import make_camera
from pinray.common import Color, Light, Scene, Settings
from pinray.shapes import Plane, Sphere
from pinray.vectors import vec


def create_shapes():
    sphere_orange = Sphere(
        center=vec(2.0, 2.0, -10.0),
        radius=1.0,
        color=Color.opaque(255, 146, 47),
    )
    sphere_pink = Sphere(
        center=vec(-1.5, 0.0, -8.0),
        radius=1.2,
        color=Color.opaque(128, 57, 128),
    )
    sphere_blue = Sphere(
        center=vec(0.5, -1.0, -6.0),
        radius=0.6,
        color=Color.opaque(0, 0, 255),
    )
    floor = Plane(
        point=vec(0.0, -2.0, 0.0),
        normal=vec(0.0, 1.0, 0.0),
        color=Color.opaque(200, 200, 200),
    )
    back_wall = Plane(
        point=vec(0.0, 0.0, -20.0),
        normal=vec(0.0, 0.0, 1.0),
        color=Color.opaque(56, 255, 18),
    )

    return [sphere_orange, sphere_pink, sphere_blue, floor, back_wall]


def create_scene(settings: Settings) -> Scene:
    return Scene(
        shapes=create_shapes(),
        light=Light(position=vec(0.0, 10.0, -2.0), intensity=1.0),
        camera=make_camera(vec(0.0, 0.0, 0.0), vec(0.0, 0.0, -1.0)),
        background=Color.TRANSPARENT,
        settings=settings,
    )
