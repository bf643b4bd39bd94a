import numpy as np
import pytest

from galois_field import get_gf


@pytest.fixture
def gf4():
    return get_gf(4)


@pytest.fixture
def gf8():
    return get_gf(8)


@pytest.fixture
def gf16():
    return get_gf(16)


@pytest.fixture
def unit_square():
    return np.array([[0, 0], [1, 0], [0, 1], [1, 1]], dtype=np.int64)


@pytest.fixture
def psk8_grid():
    """Eight integer points on a 3x3 grid without the center."""
    return np.array([[0, 0], [1, 0], [2, 0], [2, 1], [2, 2], [1, 2], [0, 2], [0, 1]],
                    dtype=np.int64)


@pytest.fixture
def qam16():
    return np.array([[x, y] for y in (-3, -1, 1, 3) for x in (-3, -1, 1, 3)], dtype=np.int64)


@pytest.fixture
def identity():
    def make(q):
        return np.arange(q, dtype=np.int64)
    return make

