import numpy as np
import pytest
from tracer.camera import Camera, sample_seed
from tracer.constants import UNIT_Y
from tracer.errors import InvalidArgument
from tracer.primitives import point


@pytest.mark.unittest
def test_center_ray_looks_at_target():
    camera = Camera(point(0, 0, -5), point(0, 0, 0))
    origin, upper_left, horizontal, vertical, u, v, lens_radius = camera.kernel_args(2, 2)
    center = upper_left + horizontal / 2 - vertical / 2
    assert np.allclose(center, point(0, 0, 0))
    assert np.allclose(origin, point(0, 0, -5))
    assert lens_radius == 0


@pytest.mark.unittest
def test_rays_stay_inside_their_pixel():
    camera = Camera(point(0, 0, -5), point(0, 0, 0), vfov=90)
    for sample in range(10):
        ray = camera.get_ray(0, 0, 2, 2, sample=sample)
        # upper-left pixel: up, and toward -x which is screen left when looking along +z with y up
        assert ray.direction[1] > 0
        assert ray.direction[0] < 0
        assert np.isclose(np.linalg.norm(ray.direction), 1.)
        assert (ray.origin == point(0, 0, -5)).all()


@pytest.mark.unittest
def test_same_seed_same_ray():
    camera = Camera(aperture=0.5)
    a = camera.get_ray(3, 4, 10, 10, sample=2, seed=7)
    b = camera.get_ray(3, 4, 10, 10, sample=2, seed=7)
    c = camera.get_ray(3, 4, 10, 10, sample=3, seed=7)
    assert (a.origin == b.origin).all() and (a.direction == b.direction).all()
    assert not (a.direction == c.direction).all()


@pytest.mark.unittest
def test_aperture_moves_origin():
    camera = Camera(point(0, 0, -5), point(0, 0, 0), aperture=1.)
    ray = camera.get_ray(1, 1, 3, 3, seed=3)
    assert np.linalg.norm(ray.origin - point(0, 0, -5)) <= 0.5
    assert np.isclose(ray.origin[2], -5)


@pytest.mark.unittest
def test_sample_seed_is_32_bit():
    seeds = {sample_seed(0, pixel, sample) for pixel in range(20) for sample in range(20)}
    assert len(seeds) == 400
    assert all(0 <= s < 2 ** 32 for s in seeds)


@pytest.mark.unittest
def test_bad_cameras():
    with pytest.raises(InvalidArgument):
        Camera(point(0, 0, 0), point(0, 0, 0))
    with pytest.raises(InvalidArgument):
        Camera(point(0, 0, 0), point(0, 1, 0), up=UNIT_Y)
    with pytest.raises(InvalidArgument):
        Camera(vfov=180)
    with pytest.raises(InvalidArgument):
        Camera(aperture=-1)


@pytest.mark.unittest
def test_image_right_is_plus_x_looking_along_z():
    camera = Camera(point(0, 0, -5), point(0, 0, 0))
    assert np.allclose(camera.u, point(1, 0, 0))
    assert np.allclose(camera.v, point(0, 1, 0))
    _, _, horizontal, vertical, _, _, _ = camera.kernel_args(4, 3)
    assert horizontal[0] > 0 and vertical[1] > 0
