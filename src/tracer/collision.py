import numpy as np
import numba
from tracer.constants import DET_TOLERANCE, Shape, Accelerator

# every kernel in the renderer uses error_model='numpy' so that 1 / 0. gives inf
# (needed by the slab tests) instead of raising ZeroDivisionError


@numba.njit(nogil=True, error_model='numpy')
def cross(a, b):
    return np.array([a[1] * b[2] - a[2] * b[1],
                     a[2] * b[0] - a[0] * b[2],
                     a[0] * b[1] - a[1] * b[0]])


@numba.njit(nogil=True, error_model='numpy')
def ray_box_intersect(box_min, box_max, origin, inv_direction, t_min, t_max):
    # slab test clipped to [t_min, t_max]. NaNs from 0 * inf fail every comparison and are ignored
    near = t_min
    far = t_max
    for axis in range(3):
        t_a = (box_min[axis] - origin[axis]) * inv_direction[axis]
        t_b = (box_max[axis] - origin[axis]) * inv_direction[axis]
        if t_a > t_b:
            t_a, t_b = t_b, t_a
        if t_a > near:
            near = t_a
        if t_b < far:
            far = t_b
        if near > far:
            return False, near, far
    return True, near, far


@numba.njit(nogil=True, error_model='numpy')
def ray_sphere_intersect(center, radius, origin, direction, t_min, t_max):
    ocx = origin[0] - center[0]
    ocy = origin[1] - center[1]
    ocz = origin[2] - center[2]
    a = direction[0] * direction[0] + direction[1] * direction[1] + direction[2] * direction[2]
    half_b = direction[0] * ocx + direction[1] * ocy + direction[2] * ocz
    c = ocx * ocx + ocy * ocy + ocz * ocz - radius * radius

    discriminant = half_b * half_b - a * c
    if not (discriminant >= 0. and a > 0.):
        return -1.

    sqrt_d = np.sqrt(discriminant)
    root = (-half_b - sqrt_d) / a
    if not (t_min <= root <= t_max):
        root = (-half_b + sqrt_d) / a
        if not (t_min <= root <= t_max):
            return -1.
    return root


@numba.njit(nogil=True, error_model='numpy')
def ray_triangle_intersect(v0, v1, v2, origin, direction, t_min, t_max):
    # two-sided Moller-Trumbore; zero-area triangles have a zero determinant and never hit
    e1 = v1 - v0
    e2 = v2 - v0
    h = cross(direction, e2)
    a = np.dot(h, e1)
    if not (abs(a) > DET_TOLERANCE):
        return -1.

    f = 1. / a
    s = origin - v0
    u = f * np.dot(s, h)
    if not (0. <= u <= 1.):
        return -1.
    q = cross(s, e1)
    v = f * np.dot(direction, q)
    if not (v >= 0. and u + v <= 1.):
        return -1.

    t = f * np.dot(e2, q)
    if not (t_min <= t <= t_max):
        return -1.
    return t


@numba.njit(nogil=True, error_model='numpy')
def intersect_primitive(kind, row, origin, direction, t_min, t_max):
    if kind == Shape.SPHERE.value:
        return ray_sphere_intersect(row[0:3], row[3], origin, direction, t_min, t_max)
    elif kind == Shape.TRIANGLE.value:
        return ray_triangle_intersect(row[0:3], row[3:6], row[6:9], origin, direction, t_min, t_max)
    return -1.


@numba.njit(nogil=True, error_model='numpy')
def outward_normal(kind, row, point):
    if kind == Shape.SPHERE.value:
        return (point - row[0:3]) / row[3]
    n = cross(row[3:6] - row[0:3], row[6:9] - row[0:3])
    return n / np.linalg.norm(n)


@numba.njit(nogil=True, error_model='numpy')
def traverse_bvh(box_mins, box_maxes, box_lefts, box_rights, box_axes, indices, kinds, geometry,
                 origin, direction, t_min, t_max, first_hit):
    least_t = t_max
    least_hit = -1
    box_count = box_mins.shape[0]
    if box_count == 0:
        return least_hit, least_t

    inv_direction = 1. / direction
    stack = np.empty(box_count, dtype=np.int64)
    stack[0] = 0
    top = 1
    while top > 0:
        top -= 1
        box = stack[top]
        hit, near, far = ray_box_intersect(box_mins[box], box_maxes[box], origin, inv_direction, t_min, least_t)
        if not hit:
            continue
        if box_rights[box] == 0:
            # inner node, children at left and left + 1. push the far child first so the near one pops next
            left = box_lefts[box]
            if direction[box_axes[box]] < 0:
                stack[top] = left
                stack[top + 1] = left + 1
            else:
                stack[top] = left + 1
                stack[top + 1] = left
            top += 2
        else:
            for k in range(box_lefts[box], box_rights[box]):
                i = indices[k]
                t = intersect_primitive(kinds[i], geometry[i], origin, direction, t_min, least_t)
                if t >= 0. and t <= least_t and (least_hit < 0 or t < least_t):
                    least_t = t
                    least_hit = i
                    if first_hit:
                        return least_hit, least_t
    return least_hit, least_t


@numba.njit(nogil=True, error_model='numpy')
def traverse_grid(grid_bounds, grid_resolution, cell_starts, indices, kinds, geometry,
                  origin, direction, t_min, t_max, first_hit):
    least_t = t_max
    least_hit = -1
    if indices.shape[0] == 0:
        return least_hit, least_t

    inv_direction = 1. / direction
    grid_min = grid_bounds[0]
    grid_max = grid_bounds[1]
    hit, t_enter, t_exit = ray_box_intersect(grid_min, grid_max, origin, inv_direction, t_min, t_max)
    if not hit:
        return least_hit, least_t

    cell = np.zeros(3, dtype=np.int64)
    step = np.zeros(3, dtype=np.int64)
    t_next = np.empty(3)
    t_delta = np.empty(3)
    for axis in range(3):
        size = (grid_max[axis] - grid_min[axis]) / grid_resolution[axis]
        p = origin[axis] + direction[axis] * t_enter
        c = int(np.floor((p - grid_min[axis]) / size)) if size > 0. else 0
        c = min(max(c, 0), grid_resolution[axis] - 1)
        cell[axis] = c
        if direction[axis] > 0.:
            step[axis] = 1
            t_next[axis] = (grid_min[axis] + (c + 1) * size - origin[axis]) * inv_direction[axis]
            t_delta[axis] = size * inv_direction[axis]
        elif direction[axis] < 0.:
            step[axis] = -1
            t_next[axis] = (grid_min[axis] + c * size - origin[axis]) * inv_direction[axis]
            t_delta[axis] = -size * inv_direction[axis]
        else:
            step[axis] = 0
            t_next[axis] = np.inf
            t_delta[axis] = np.inf

    nx = grid_resolution[0]
    ny = grid_resolution[1]
    while True:
        axis = 0
        if t_next[1] < t_next[axis]:
            axis = 1
        if t_next[2] < t_next[axis]:
            axis = 2
        cell_exit = min(t_next[axis], t_exit)

        c = cell[0] + nx * (cell[1] + ny * cell[2])
        for k in range(cell_starts[c], cell_starts[c + 1]):
            i = indices[k]
            t = intersect_primitive(kinds[i], geometry[i], origin, direction, t_min, least_t)
            if t >= 0. and t <= least_t and (least_hit < 0 or t < least_t):
                least_t = t
                least_hit = i
                if first_hit:
                    return least_hit, least_t

        # nothing in a later cell can be closer than a hit inside this one
        if least_hit >= 0 and least_t <= cell_exit:
            break
        if t_next[axis] > t_exit:
            break
        cell[axis] += step[axis]
        if cell[axis] < 0 or cell[axis] >= grid_resolution[axis]:
            break
        t_next[axis] += t_delta[axis]

    return least_hit, least_t


@numba.njit(nogil=True, error_model='numpy')
def scan_primitives(indices, kinds, geometry, origin, direction, t_min, t_max, first_hit):
    least_t = t_max
    least_hit = -1
    for k in range(indices.shape[0]):
        i = indices[k]
        t = intersect_primitive(kinds[i], geometry[i], origin, direction, t_min, least_t)
        if t >= 0. and t <= least_t and (least_hit < 0 or t < least_t):
            least_t = t
            least_hit = i
            if first_hit:
                return least_hit, least_t
    return least_hit, least_t


@numba.njit(nogil=True, error_model='numpy')
def find_hit(accel, kinds, geometry, origin, direction, t_min, t_max, first_hit):
    # accel is the tagged tuple built by AccelerationStructure.kernel_args
    if accel[0] == Accelerator.BVH.value:
        return traverse_bvh(accel[1], accel[2], accel[3], accel[4], accel[5], accel[9], kinds, geometry,
                            origin, direction, t_min, t_max, first_hit)
    if accel[0] == Accelerator.LINEAR.value:
        return scan_primitives(accel[9], kinds, geometry, origin, direction, t_min, t_max, first_hit)
    return traverse_grid(accel[6], accel[7], accel[8], accel[9], kinds, geometry,
                         origin, direction, t_min, t_max, first_hit)

