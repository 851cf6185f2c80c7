import numba
import numpy as np
from tracer.camera import sample_ray
from tracer.collision import find_hit, outward_normal
from tracer.constants import (
    RAY_MIN,
    RAY_MAX,
    SKY_BOTTOM,
    SKY_TOP,
    MAX_BOUNCES,
    EMISSION_OFFSET,
    COLOR_OFFSET,
    MaterialKind,
)
from tracer.routines import scatter


@numba.njit(nogil=True, error_model='numpy')
def sky_color(direction):
    t = 0.5 * (direction[1] / np.linalg.norm(direction) + 1.)
    return (1. - t) * SKY_BOTTOM + t * SKY_TOP


@numba.njit(nogil=True, error_model='numpy')
def trace(accel, scene, origin, direction, t_min, t_max, depth, max_depth):
    # iterative form of color(ray, depth) = attenuation * color(scattered, depth + 1).
    # t_min, t_max bound the first segment only, bounces use [RAY_MIN, RAY_MAX]
    kinds, geometry, material_ids, material_types, material_params = scene
    throughput = np.ones(3)
    while True:
        if depth > max_depth:
            return np.zeros(3)
        if not (np.isfinite(origin).all() and np.isfinite(direction).all()):
            return np.zeros(3)

        i, t = find_hit(accel, kinds, geometry, origin, direction, t_min, t_max, False)
        if i < 0:
            return throughput * sky_color(direction)

        point = origin + t * direction
        normal = outward_normal(kinds[i], geometry[i], point)
        front_face = np.dot(direction, normal) < 0.
        if not front_face:
            normal = -normal

        m = material_ids[i]
        params = material_params[m]
        if material_types[m] == MaterialKind.EMISSIVE.value:
            return throughput * params[EMISSION_OFFSET:EMISSION_OFFSET + 3]

        scattered, new_direction = scatter(material_types[m], params, direction, normal, front_face)
        if not scattered:
            return np.zeros(3)
        throughput = throughput * params[COLOR_OFFSET:COLOR_OFFSET + 3]

        origin = point
        direction = new_direction
        t_min = RAY_MIN
        t_max = RAY_MAX
        depth += 1


@numba.njit(nogil=True, error_model='numpy')
def render_block(accel, scene, camera, x0, y0, x1, y1, width, height, spp, seed, max_depth):
    block = np.zeros((y1 - y0, x1 - x0, 3))
    for y in range(y0, y1):
        for x in range(x0, x1):
            total = np.zeros(3)
            for sample in range(spp):
                origin, direction = sample_ray(camera, x, y, width, height, seed, sample)
                color = trace(accel, scene, origin, direction, RAY_MIN, RAY_MAX, 0, max_depth)
                # a non-finite sample contributes black
                if np.isfinite(color).all():
                    total += color
            for c in range(3):
                value = total[c] / spp
                if not value > 0.:
                    value = 0.
                # gamma 2, then clamp
                value = np.sqrt(value)
                if value > 1.:
                    value = 1.
                block[y - y0, x - x0, c] = value
    return block


@numba.njit(nogil=True)
def seed_generator(seed):
    np.random.seed(seed)


def shade(ray, structure, depth=0, max_depth=MAX_BOUNCES, seed=None):
    """Linear radiance arriving along ``ray``, before gamma and clamping."""
    if seed is not None:
        seed_generator(seed)
    return trace(structure.kernel_args, structure.group.kernel_args, ray.origin, ray.direction,
                 ray.t_min, ray.t_max, depth, max_depth)
