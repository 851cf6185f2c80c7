import numba
import numpy as np
from tracer.constants import V_FOV, DEFAULT_LOOK_FROM, DEFAULT_LOOK_AT, UNIT_Y, DEFAULT_SEED
from tracer.errors import InvalidArgument
from tracer.primitives import Ray, unit
from tracer.routines import random_in_unit_disk


class Camera:
    """Pinhole or thin-lens camera.

    Image x grows to the right and image y grows downward, so pixel (0, 0) is
    the upper-left corner of the viewport.
    """

    def __init__(self, look_from=DEFAULT_LOOK_FROM, look_at=DEFAULT_LOOK_AT, up=UNIT_Y, vfov=V_FOV,
                 aperture=0.0, focus_dist=None):
        self.look_from = np.asarray(look_from, dtype=np.float64)
        self.look_at = np.asarray(look_at, dtype=np.float64)
        self.up = np.asarray(up, dtype=np.float64)
        self.vfov = float(vfov)
        self.aperture = float(aperture)

        if not 0 < self.vfov < 180:
            raise InvalidArgument("vertical field of view must be in (0, 180) degrees, got %r" % vfov)
        if self.aperture < 0:
            raise InvalidArgument("aperture must be non-negative, got %r" % aperture)
        if not np.linalg.norm(self.look_at - self.look_from) > 0:
            raise InvalidArgument("camera look_from and look_at coincide")
        if not np.linalg.norm(np.cross(self.up, self.w)) > 0:
            raise InvalidArgument("camera up vector is parallel to the view direction")

        self.focus_dist = float(focus_dist) if focus_dist is not None else \
            float(np.linalg.norm(self.look_at - self.look_from))

    @property
    def w(self):
        # points backward, away from the scene
        return unit(self.look_from - self.look_at)

    @property
    def u(self):
        # image right: +x for a camera looking along +z with y up
        return unit(np.cross(self.w, self.up))

    @property
    def v(self):
        return np.cross(self.u, self.w)

    def kernel_args(self, width, height):
        aspect_ratio = width / height
        viewport_height = 2.0 * np.tan(np.radians(self.vfov) / 2)
        viewport_width = aspect_ratio * viewport_height

        horizontal = self.focus_dist * viewport_width * self.u
        vertical = self.focus_dist * viewport_height * self.v
        upper_left = self.look_from - horizontal / 2 + vertical / 2 - self.focus_dist * self.w
        return (self.look_from.copy(), upper_left, horizontal, vertical, self.u, self.v, self.aperture / 2)

    def get_ray(self, x, y, width, height, sample=0, seed=DEFAULT_SEED):
        origin, direction = sample_ray(self.kernel_args(width, height), x, y, width, height, seed, sample)
        return Ray(origin, direction)


@numba.njit(nogil=True, error_model='numpy')
def sample_seed(seed, pixel, sample):
    # 32-bit integer hash of (seed, pixel index, sample index)
    h = (seed * 0x9E3779B1 + pixel * 0x85EBCA77 + sample * 0xC2B2AE3D) & 0xFFFFFFFF
    h ^= h >> 16
    h = (h * 0x7FEB352D) & 0xFFFFFFFF
    h ^= h >> 15
    h = (h * 0x846CA68B) & 0xFFFFFFFF
    h ^= h >> 16
    return h


@numba.njit(nogil=True, error_model='numpy')
def camera_ray(camera, x, y, width, height):
    # draws from the current thread's generator: jitter first, then the lens
    origin, upper_left, horizontal, vertical, u, v, lens_radius = camera
    s = (x + np.random.random()) / width
    t = (y + np.random.random()) / height
    if lens_radius > 0.:
        dx, dy = random_in_unit_disk()
        origin = origin + lens_radius * (dx * u + dy * v)
    direction = upper_left + s * horizontal - t * vertical - origin
    return origin, direction / np.linalg.norm(direction)


@numba.njit(nogil=True, error_model='numpy')
def sample_ray(camera, x, y, width, height, seed, sample):
    np.random.seed(sample_seed(seed, y * width + x, sample))
    return camera_ray(camera, x, y, width, height)
