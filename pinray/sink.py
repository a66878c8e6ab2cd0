import logging

import matplotlib.pyplot as plt
import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)


def save_image(image: NDArray[np.uint8], path) -> None:
    """Write an RGBA pixel grid to *path* as a PNG file."""
    plt.imsave(path, image, format="png")
    logger.info("Saved %s", path)


def show_image(image: NDArray[np.uint8]) -> None:
    plt.imshow(image)
    plt.show(block=True)
