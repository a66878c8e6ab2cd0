import math

import numpy as np
from numpy.typing import NDArray

from pinray.errors import DegenerateVectorError


def vec(x: float, y: float, z: float) -> NDArray[np.float64]:
    return np.array([x, y, z], dtype=np.float64)


def add(u: NDArray[np.float64], v: NDArray[np.float64]) -> NDArray[np.float64]:
    return u + v


def sub(u: NDArray[np.float64], v: NDArray[np.float64]) -> NDArray[np.float64]:
    return u - v


def scale(v: NDArray[np.float64], s: float) -> NDArray[np.float64]:
    return v * s


# Components are summed in x, y, z order so the compiled kernels in
# numba_rt produce the same bits.
def dot(u: NDArray[np.float64], v: NDArray[np.float64]) -> float:
    return float(u[0] * v[0] + u[1] * v[1] + u[2] * v[2])


def cross(u: NDArray[np.float64], v: NDArray[np.float64]) -> NDArray[np.float64]:
    return vec(
        u[1] * v[2] - u[2] * v[1],
        u[2] * v[0] - u[0] * v[2],
        u[0] * v[1] - u[1] * v[0],
    )


def magnitude(v: NDArray[np.float64]) -> float:
    return math.sqrt(dot(v, v))


def normalize(v: NDArray[np.float64]) -> NDArray[np.float64]:
    length = magnitude(v)
    if length == 0.0 or not math.isfinite(length):
        raise DegenerateVectorError(f"Cannot normalize vector {tuple(v)}")

    return v / length
