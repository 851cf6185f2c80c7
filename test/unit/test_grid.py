import numpy as np
import pytest
from tracer.constants import MAX_GRID_RESOLUTION
from tracer.errors import InvalidArgument
from tracer.grid import UniformGrid, grid_resolution
from tracer.primitives import Ray, Sphere, point


@pytest.mark.unittest
def test_density_resolution_follows_extent():
    res = grid_resolution(np.array([8., 4., 2.]), 64, density=2.)
    # 2 * cbrt(64) = 8 cells along the longest axis, same pitch elsewhere
    assert list(res) == [8, 4, 2]


@pytest.mark.unittest
def test_resolution_is_clamped():
    res = grid_resolution(np.array([1., 1e-9, 1.]), 10 ** 9)
    assert list(res) == [MAX_GRID_RESOLUTION, 1, MAX_GRID_RESOLUTION]


@pytest.mark.unittest
def test_fixed_resolution():
    assert list(grid_resolution(np.ones(3), 5, resolution=3)) == [3, 3, 3]
    assert list(grid_resolution(np.ones(3), 5, resolution=(1, 2, 3))) == [1, 2, 3]
    with pytest.raises(InvalidArgument):
        grid_resolution(np.ones(3), 5, resolution=(1, 2))
    with pytest.raises(InvalidArgument):
        grid_resolution(np.ones(3), 5, resolution=0)


@pytest.mark.unittest
def test_primitives_bucketed_into_overlapping_cells(gray):
    spheres = [Sphere(point(0.5, 0.5, 0.5), 0.4, gray), Sphere(point(3.5, 0.5, 0.5), 0.4, gray),
               Sphere(point(2., 0.5, 0.5), 0.8, gray)]
    grid = UniformGrid.build(spheres, resolution=(4, 1, 1))
    assert list(grid.cell(0, 0, 0)) == [0]
    assert list(grid.cell(1, 0, 0)) == [2]
    assert list(grid.cell(2, 0, 0)) == [2]
    assert list(grid.cell(3, 0, 0)) == [1]
    assert grid.cell_starts[-1] == len(grid.indices) == 4


@pytest.mark.unittest
def test_cells_list_primitives_in_ascending_order(make_primitives):
    grid = UniformGrid.build(make_primitives(300), resolution=4)
    for c in range(len(grid.cell_starts) - 1):
        members = grid.indices[grid.cell_starts[c]:grid.cell_starts[c + 1]]
        assert (np.diff(members) > 0).all()


@pytest.mark.unittest
def test_every_primitive_is_referenced(make_primitives):
    primitives = make_primitives(300)
    grid = UniformGrid.build(primitives)
    assert set(grid.indices) == set(range(len(primitives)))


@pytest.mark.unittest
def test_walk_finds_nearest_across_cells(gray):
    spheres = [Sphere(point(x, 0, 0), 0.3, gray) for x in range(-4, 5)]
    grid = UniformGrid.build(spheres, resolution=(9, 1, 1))

    hit = grid.nearest_hit(Ray(point(-10, 0, 0), point(1, 0, 0)))
    assert hit.primitive == 0
    assert np.isclose(hit.t, 5.7)

    hit = grid.nearest_hit(Ray(point(10, 0, 0), point(-1, 0, 0)))
    assert hit.primitive == 8
    assert np.isclose(hit.t, 5.7)

    # starting inside the grid, between spheres 4 and 5
    hit = grid.nearest_hit(Ray(point(0.5, 0, 0), point(1, 0, 0)))
    assert hit.primitive == 5
    assert np.isclose(hit.t, 0.2)


@pytest.mark.unittest
def test_large_primitive_in_many_cells(gray):
    # the big sphere overlaps cells the ray visits before the one holding its hit point
    spheres = [Sphere(point(0, 0, 0), 3., gray), Sphere(point(0, 0, 2.5), 0.2, gray)]
    grid = UniformGrid.build(spheres, resolution=8)
    hit = grid.nearest_hit(Ray(point(0, 0, -10), point(0, 0, 1)))
    assert hit.primitive == 0
    assert np.isclose(hit.t, 7.)


@pytest.mark.unittest
def test_ray_missing_grid(gray):
    grid = UniformGrid.build([Sphere(point(0, 0, 0), 1., gray)])
    ray = Ray(point(5, 5, -10), point(0, 0, 1))
    assert grid.nearest_hit(ray) is None
    assert not grid.any_hit(ray)


@pytest.mark.unittest
def test_empty_grid_never_hits(ray_that_hits):
    grid = UniformGrid.build([])
    assert grid.nearest_hit(ray_that_hits) is None
    assert not grid.any_hit(ray_that_hits)


@pytest.mark.unittest
def test_flat_scene(basic_triangle, ray_that_hits):
    # all primitives in one plane, the padding keeps the grid three dimensional
    grid = UniformGrid.build([basic_triangle])
    hit = grid.nearest_hit(ray_that_hits)
    assert np.isclose(hit.t, 5.)
