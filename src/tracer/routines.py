import numba
import numpy as np
from tracer.constants import UNIT_X, UNIT_Y, FUZZ_INDEX, IOR_INDEX, MaterialKind

# in all scatter routines, directions point away from the point being shaded unless noted


@numba.njit(nogil=True, error_model='numpy')
def local_orthonormal_system(z):
    if np.abs(z[0]) > np.abs(z[1]):
        axis = UNIT_Y
    else:
        axis = UNIT_X
    x = np.cross(axis, z)
    x = x / np.linalg.norm(x)
    y = np.cross(z, x)
    return x, y, z


@numba.njit(nogil=True, error_model='numpy')
def random_hemisphere_cosine_weighted(x_axis, y_axis, z_axis):
    u1 = np.random.random()
    u2 = np.random.random()
    r = np.sqrt(u1)
    theta = 2 * np.pi * u2
    x = r * np.cos(theta)
    y = r * np.sin(theta)
    return x * x_axis + y * y_axis + z_axis * np.sqrt(np.maximum(0., 1. - u1))


@numba.njit(nogil=True, error_model='numpy')
def random_in_unit_sphere():
    while True:
        p = 2. * np.array([np.random.random(), np.random.random(), np.random.random()]) - 1.
        if np.dot(p, p) < 1.:
            return p


@numba.njit(nogil=True, error_model='numpy')
def random_in_unit_disk():
    while True:
        x = 2. * np.random.random() - 1.
        y = 2. * np.random.random() - 1.
        if x * x + y * y < 1.:
            return x, y


@numba.njit(nogil=True, error_model='numpy')
def specular_reflection(direction, normal):
    return 2 * np.dot(direction, normal) * normal - direction


@numba.njit(nogil=True, error_model='numpy')
def refract(incident, normal, eta):
    """Snell's law for a unit incident direction travelling toward the surface.

    Returns the refracted direction and False on total internal reflection,
    in which case the returned direction is meaningless.
    """
    cos_theta = min(-np.dot(incident, normal), 1.)
    sin2_theta = 1. - cos_theta * cos_theta
    if eta * eta * sin2_theta > 1.:
        return incident, False
    perpendicular = eta * (incident + cos_theta * normal)
    parallel = -np.sqrt(abs(1. - np.dot(perpendicular, perpendicular))) * normal
    return perpendicular + parallel, True


@numba.njit(nogil=True, error_model='numpy')
def schlick(cosine, eta):
    """Schlick's approximation of Fresnel reflectance."""
    r0 = (1. - eta) / (1. + eta)
    r0 = r0 * r0
    return r0 + (1. - r0) * (1. - cosine) ** 5


@numba.njit(nogil=True, error_model='numpy')
def fuzzed(direction, fuzz):
    if fuzz > 0.:
        direction = direction + fuzz * random_in_unit_sphere()
    return direction


@numba.njit(nogil=True, error_model='numpy')
def scatter(material_type, params, incident, normal, front_face):
    # incident is the ray direction (toward the surface), normal faces against it.
    # returns whether the path continues and the new unit direction
    if material_type == MaterialKind.DIFFUSE.value:
        x, y, z = local_orthonormal_system(normal)
        return True, random_hemisphere_cosine_weighted(x, y, z)

    elif material_type == MaterialKind.SPECULAR.value:
        reflected = specular_reflection(-incident, normal)
        reflected = fuzzed(reflected, params[FUZZ_INDEX])
        if np.dot(reflected, normal) <= 0.:
            return False, reflected
        return True, reflected / np.linalg.norm(reflected)

    elif material_type == MaterialKind.DIELECTRIC.value:
        ior = params[IOR_INDEX]
        eta = 1. / ior if front_face else ior
        cos_theta = min(-np.dot(incident, normal), 1.)
        refracted, ok = refract(incident, normal, eta)
        if ok and np.random.random() >= schlick(cos_theta, eta):
            new_direction = refracted
        else:
            new_direction = specular_reflection(-incident, normal)
        new_direction = fuzzed(new_direction, params[FUZZ_INDEX])
        norm = np.linalg.norm(new_direction)
        if not norm > 0.:
            return False, new_direction
        return True, new_direction / norm

    # emissive surfaces end the path
    return False, incident
