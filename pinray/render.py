import logging
import time
from dataclasses import replace
from typing import List, Optional

from pinray.app import App
from pinray.camera import Camera
from pinray.common import Color, Light, Scene, Settings
from pinray.cpu_rt import CpuApp
from pinray.shapes import Shape
from pinray.sink import save_image

logger = logging.getLogger(__name__)


def create_app(scene: Scene) -> App:
    if scene.settings.backend == "numba":
        # numba is slow to import, only pay for it when asked
        from pinray.numba_rt import NumbaApp

        return NumbaApp(scene)

    return CpuApp(scene)


def render_scene(scene: Scene) -> App:
    """Render *scene* and return the app holding the finished pixel grid."""
    app = create_app(scene)

    logger.info(
        "Rendering %dx%d image with %d shapes on the %s backend",
        scene.width, scene.height, len(scene.shapes), scene.settings.backend,
    )
    start = time.perf_counter()
    app.run()
    logger.info("Rendered in %.2f s", time.perf_counter() - start)

    return app


def render(
    width: int,
    height: int,
    background_color: Color,
    camera: Camera,
    light: Light,
    shapes: List[Shape],
    output_path,
    settings: Optional[Settings] = None,
) -> None:
    if settings is None:
        settings = Settings(width=width, height=height)
    else:
        settings = replace(settings, width=width, height=height)

    scene = Scene(
        shapes=list(shapes),
        light=light,
        camera=camera,
        background=background_color,
        settings=settings,
    )

    app = render_scene(scene)
    save_image(app.image, output_path)
