import numpy as np
from tracer.collision import find_hit, outward_normal
from tracer.constants import Accelerator
from tracer.errors import InvalidArgument
from tracer.primitives import PrimitiveGroup, HitRecord

# placeholders for the parts of the kernel tuple a variant does not use.
# dtypes and dimensions must match the real arrays so every variant shares one compiled signature
EMPTY_VECTORS = np.zeros((0, 3), dtype=np.float64)
EMPTY_INDICES = np.zeros(0, dtype=np.int64)
EMPTY_BOUNDS = np.zeros((2, 3), dtype=np.float64)
EMPTY_RESOLUTION = np.ones(3, dtype=np.int64)


class AccelerationStructure:
    """Spatial index over a PrimitiveGroup answering nearest-hit and any-hit queries.

    Subclasses implement ``from_group`` and ``kernel_args``. Once built a
    structure is never mutated, so one instance may be queried from any
    number of threads at once.
    """
    kind = None

    def __init__(self, group: PrimitiveGroup):
        self.group = group

    @classmethod
    def build(cls, primitives, **options):
        if isinstance(primitives, PrimitiveGroup):
            group = primitives
        else:
            group = PrimitiveGroup.from_primitives(primitives)
        return cls.from_group(group, **options)

    @classmethod
    def from_group(cls, group, **options):
        raise NotImplementedError

    @property
    def kernel_args(self):
        # (kind, box_mins, box_maxes, box_lefts, box_rights, box_axes, grid_bounds, grid_resolution, cell_starts, indices)
        raise NotImplementedError

    def _query(self, ray, first_hit):
        return find_hit(self.kernel_args, self.group.kinds, self.group.geometry,
                        ray.origin, ray.direction, ray.t_min, ray.t_max, first_hit)

    def nearest_hit(self, ray):
        i, t = self._query(ray, False)
        if i < 0:
            return None
        i = int(i)
        group = self.group
        point = ray.at(t)
        normal = outward_normal(group.kinds[i], group.geometry[i], point)
        front_face = bool(np.dot(ray.direction, normal) < 0)
        if not front_face:
            normal = -normal
        material = group.materials[group.material_ids[i]]
        return HitRecord(float(t), point, normal, front_face, material, i)

    def any_hit(self, ray):
        i, _ = self._query(ray, True)
        return bool(i >= 0)

    def __len__(self):
        return len(self.group.valid)


class LinearScan(AccelerationStructure):
    """Tests every valid primitive for every ray. The reference the other structures must agree with."""
    kind = Accelerator.LINEAR

    def __init__(self, group, indices):
        super().__init__(group)
        self.indices = indices

    @classmethod
    def from_group(cls, group, **options):
        if options:
            raise InvalidArgument("linear scan takes no options, got %s" % ', '.join(sorted(options)))
        return cls(group, np.ascontiguousarray(group.valid, dtype=np.int64))

    @property
    def kernel_args(self):
        return (int(self.kind), EMPTY_VECTORS, EMPTY_VECTORS, EMPTY_INDICES, EMPTY_INDICES, EMPTY_INDICES,
                EMPTY_BOUNDS, EMPTY_RESOLUTION, EMPTY_INDICES, self.indices)
