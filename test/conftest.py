import numpy as np
import pytest
from tracer.constants import UNIT_X, UNIT_Y, UNIT_Z, ZERO_VECTOR, RED
from tracer.primitives import Ray, Triangle, Sphere, Material, point

ONES = np.ones(3)


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "unittest: mark test as an Unit Test"
    )


@pytest.fixture
def x_axis():
    return UNIT_X


@pytest.fixture
def y_axis():
    return UNIT_Y


@pytest.fixture
def z_axis():
    return UNIT_Z


@pytest.fixture
def gray():
    return Material.diffuse((0.5, 0.5, 0.5))


@pytest.fixture
def unit_box():
    return ZERO_VECTOR, ONES


@pytest.fixture
def basic_triangle(gray):
    return Triangle(ZERO_VECTOR, UNIT_X, UNIT_Y, gray)


@pytest.fixture
def wrong_handed_triangle(gray):
    return Triangle(ZERO_VECTOR, UNIT_Y, UNIT_X, gray)


@pytest.fixture
def big_triangle(gray):
    return Triangle(ZERO_VECTOR, UNIT_X * 5, UNIT_Y * 5, gray)


@pytest.fixture
def unit_sphere():
    return Sphere(ZERO_VECTOR, 1., Material.diffuse(RED))


@pytest.fixture
def ray_that_barely_hits():
    # hits object at origin
    return Ray(UNIT_Z * 5, -1 * UNIT_Z)


@pytest.fixture
def ray_that_hits():
    # hits object in center
    return Ray(point(0.2, 0.2, 5), -1 * UNIT_Z)


@pytest.fixture
def ray_inside_box():
    return Ray(point(0.5, 0.5, 0.5), UNIT_Z)


@pytest.fixture
def ray_that_misses():
    return Ray(ONES * 5, UNIT_Y)


def random_primitives(count, seed=0, spread=10.):
    # mix of small spheres and triangles scattered through a cube
    rng = np.random.default_rng(seed)
    material = Material.diffuse((0.5, 0.5, 0.5))
    primitives = []
    for i in range(count):
        center = rng.uniform(-spread, spread, 3)
        if i % 2:
            primitives.append(Sphere(center, rng.uniform(0.1, 1.), material))
        else:
            primitives.append(Triangle(center, center + rng.uniform(-1., 1., 3), center + rng.uniform(-1., 1., 3),
                                       material))
    return primitives


def random_rays(count, seed=1, spread=12.):
    rng = np.random.default_rng(seed)
    rays = []
    for _ in range(count):
        origin = rng.uniform(-spread, spread, 3)
        target = rng.uniform(-spread / 2, spread / 2, 3)
        direction = target - origin
        rays.append(Ray(origin, direction / np.linalg.norm(direction)))
    return rays


@pytest.fixture
def primitive_soup():
    return random_primitives(200)


@pytest.fixture
def rays():
    return random_rays(200)


@pytest.fixture
def make_primitives():
    return random_primitives
