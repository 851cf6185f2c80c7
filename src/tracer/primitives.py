from collections import namedtuple
import numpy as np
from tracer.constants import (
    RAY_MIN,
    RAY_MAX,
    GEOMETRY_WIDTH,
    MATERIAL_WIDTH,
    COLOR_OFFSET,
    EMISSION_OFFSET,
    FUZZ_INDEX,
    IOR_INDEX,
    Shape,
    MaterialKind,
)

# sugar


def point(x, y, z):
    return np.array([x, y, z], dtype=np.float64)


def unit(v):
    return v / np.linalg.norm(v)


def _rgb(color):
    return tuple(float(c) for c in color)


class Material(namedtuple('Material', ['kind', 'color', 'emission', 'fuzz', 'ior'])):
    """Shading parameters, shared by value between primitives.

    Colors are stored as plain float tuples so materials stay hashable and
    immutable; the scene packs each distinct material into its table once.
    """
    __slots__ = ()

    def __new__(cls, kind, color=(0.0, 0.0, 0.0), emission=(0.0, 0.0, 0.0), fuzz=0.0, ior=1.0):
        return super().__new__(cls, MaterialKind(kind), _rgb(color), _rgb(emission), float(fuzz), float(ior))

    @classmethod
    def diffuse(cls, color):
        return cls(MaterialKind.DIFFUSE, color=color)

    @classmethod
    def specular(cls, color, fuzz=0.0):
        return cls(MaterialKind.SPECULAR, color=color, fuzz=fuzz)

    @classmethod
    def dielectric(cls, color, ior, fuzz=0.0):
        return cls(MaterialKind.DIELECTRIC, color=color, ior=ior, fuzz=fuzz)

    @classmethod
    def emissive(cls, emission):
        return cls(MaterialKind.EMISSIVE, emission=emission)

    @property
    def params(self):
        row = np.zeros(MATERIAL_WIDTH, dtype=np.float64)
        row[COLOR_OFFSET:COLOR_OFFSET + 3] = self.color
        row[EMISSION_OFFSET:EMISSION_OFFSET + 3] = self.emission
        row[FUZZ_INDEX] = self.fuzz
        row[IOR_INDEX] = self.ior
        return row


class Sphere(namedtuple('Sphere', ['center', 'radius', 'material'])):
    __slots__ = ()
    shape = Shape.SPHERE

    def __new__(cls, center, radius, material):
        return super().__new__(cls, np.asarray(center, dtype=np.float64), float(radius), material)

    @property
    def min(self):
        return self.center - abs(self.radius)

    @property
    def max(self):
        return self.center + abs(self.radius)

    @property
    def centroid(self):
        return self.center

    @property
    def geometry(self):
        row = np.zeros(GEOMETRY_WIDTH, dtype=np.float64)
        row[:3] = self.center
        row[3] = self.radius
        return row


class Triangle(namedtuple('Triangle', ['v0', 'v1', 'v2', 'material'])):
    __slots__ = ()
    shape = Shape.TRIANGLE

    def __new__(cls, v0, v1, v2, material):
        return super().__new__(cls,
                               np.asarray(v0, dtype=np.float64),
                               np.asarray(v1, dtype=np.float64),
                               np.asarray(v2, dtype=np.float64),
                               material)

    @property
    def min(self):
        return np.minimum(self.v0, np.minimum(self.v1, self.v2))

    @property
    def max(self):
        return np.maximum(self.v0, np.maximum(self.v1, self.v2))

    @property
    def centroid(self):
        return (self.v0 + self.v1 + self.v2) / 3

    @property
    def n(self):
        return unit(np.cross(self.v1 - self.v0, self.v2 - self.v0))

    @property
    def surface_area(self):
        return np.linalg.norm(np.cross(self.v1 - self.v0, self.v2 - self.v0)) / 2

    @property
    def geometry(self):
        return np.concatenate((self.v0, self.v1, self.v2))


class Ray(namedtuple('Ray', ['origin', 'direction', 't_min', 't_max'])):
    __slots__ = ()

    def __new__(cls, origin, direction, t_min=RAY_MIN, t_max=RAY_MAX):
        if not 0 <= t_min < t_max:
            raise ValueError("ray interval must satisfy 0 <= t_min < t_max, got [%r, %r]" % (t_min, t_max))
        return super().__new__(cls,
                               np.ascontiguousarray(origin, dtype=np.float64),
                               np.ascontiguousarray(direction, dtype=np.float64),
                               float(t_min),
                               float(t_max))

    @property
    def inv_direction(self):
        with np.errstate(divide='ignore'):
            return 1 / self.direction

    def at(self, t):
        return self.origin + self.direction * t


HitRecord = namedtuple('HitRecord', ['t', 'point', 'normal', 'front_face', 'material', 'primitive'])


class PrimitiveGroup:
    """Packed struct-of-arrays view of a primitive set.

    This is what every compiled kernel reads. Row ``i`` of each array
    describes primitive ``i`` of the input sequence. Primitives whose
    geometry is not finite are tagged ``Shape.DEGENERATE``; they keep their
    slot but are excluded from ``valid`` and never report a hit.
    """

    def __init__(self, primitives, kinds, geometry, mins, maxes, material_ids, materials):
        self.primitives = primitives
        self.kinds = kinds
        self.geometry = geometry
        self.mins = mins
        self.maxes = maxes
        self.material_ids = material_ids
        self.materials = materials
        self.material_types = np.array([m.kind for m in materials], dtype=np.int64)
        self.material_params = np.zeros((len(materials), MATERIAL_WIDTH), dtype=np.float64)
        for i, material in enumerate(materials):
            self.material_params[i] = material.params

    @classmethod
    def from_primitives(cls, primitives):
        primitives = list(primitives)
        n = len(primitives)
        kinds = np.zeros(n, dtype=np.int64)
        geometry = np.zeros((n, GEOMETRY_WIDTH), dtype=np.float64)
        mins = np.zeros((n, 3), dtype=np.float64)
        maxes = np.zeros((n, 3), dtype=np.float64)
        material_ids = np.zeros(n, dtype=np.int64)

        table = {}
        materials = []
        for i, primitive in enumerate(primitives):
            row = primitive.geometry
            if np.isfinite(row).all():
                kinds[i] = primitive.shape
                geometry[i] = row
                mins[i] = primitive.min
                maxes[i] = primitive.max
            else:
                kinds[i] = Shape.DEGENERATE
            if primitive.material not in table:
                table[primitive.material] = len(materials)
                materials.append(primitive.material)
            material_ids[i] = table[primitive.material]

        return cls(primitives, kinds, geometry, mins, maxes, material_ids, materials)

    @classmethod
    def empty(cls):
        return cls.from_primitives([])

    @property
    def valid(self):
        return np.flatnonzero(self.kinds != Shape.DEGENERATE)

    @property
    def centroids(self):
        return (self.mins + self.maxes) / 2

    @property
    def bounds(self):
        valid = self.valid
        if not len(valid):
            return np.zeros(3), np.zeros(3)
        return np.min(self.mins[valid], axis=0), np.max(self.maxes[valid], axis=0)

    @property
    def kernel_args(self):
        return self.kinds, self.geometry, self.material_ids, self.material_types, self.material_params

    def __len__(self):
        return len(self.kinds)
