import numpy as np
from tracer.accelerator import AccelerationStructure, EMPTY_VECTORS, EMPTY_INDICES, EMPTY_BOUNDS, EMPTY_RESOLUTION
from tracer.constants import GRID_DENSITY, GRID_PADDING, MAX_GRID_RESOLUTION, Accelerator
from tracer.errors import InvalidArgument
from tracer.utils import timed, get_logger

logger = get_logger('grid')


def grid_resolution(extent, count, density=GRID_DENSITY, resolution=None):
    """Cells per axis for a grid over ``extent`` holding ``count`` primitives.

    A fixed ``resolution`` (an int, or one int per axis) wins. Otherwise about
    ``density * cbrt(count)`` cells go along the longest axis and the other
    axes get the same cell pitch, each clamped to [1, MAX_GRID_RESOLUTION].
    """
    if resolution is not None:
        try:
            fixed = np.broadcast_to(np.asarray(resolution, dtype=np.int64), (3,)).copy()
        except (TypeError, ValueError) as e:
            raise InvalidArgument("grid resolution must be an int or three ints, got %r" % (resolution,)) from e
        if (fixed < 1).any():
            raise InvalidArgument("grid resolution must be positive on every axis, got %r" % (resolution,))
        return fixed
    if not density > 0:
        raise InvalidArgument("grid density must be positive, got %r" % density)
    cells_per_unit = density * np.cbrt(count) / np.max(extent)
    return np.clip(np.round(extent * cells_per_unit), 1, MAX_GRID_RESOLUTION).astype(np.int64)


def bucket_primitives(members, mins, maxes, lo, cell_size, resolution):
    # every (cell, primitive) pair whose bounds overlap, flattened as x + nx * (y + ny * z)
    first = np.clip(np.floor((mins[members] - lo) / cell_size), 0, resolution - 1).astype(np.int64)
    last = np.clip(np.floor((maxes[members] - lo) / cell_size), 0, resolution - 1).astype(np.int64)

    cells = []
    owners = []
    for member, a, b in zip(members, first, last):
        xs, ys, zs = np.meshgrid(np.arange(a[0], b[0] + 1),
                                 np.arange(a[1], b[1] + 1),
                                 np.arange(a[2], b[2] + 1), indexing='ij')
        flat = (xs + resolution[0] * (ys + resolution[1] * zs)).ravel()
        cells.append(flat)
        owners.append(np.full(flat.size, member, dtype=np.int64))
    return np.concatenate(cells), np.concatenate(owners)


class UniformGrid(AccelerationStructure):
    kind = Accelerator.GRID

    def __init__(self, group, bounds, resolution, cell_starts, indices):
        super().__init__(group)
        self.bounds = bounds
        self.resolution = resolution
        self.cell_starts = cell_starts
        self.indices = indices

    @classmethod
    @timed
    def from_group(cls, group, density=GRID_DENSITY, resolution=None):
        valid = group.valid
        if not len(valid):
            logger.info("empty scene, grid has no cells")
            # still validate the options
            grid_resolution(np.ones(3), 0, density, resolution)
            return cls(group, EMPTY_BOUNDS, EMPTY_RESOLUTION, np.zeros(2, dtype=np.int64), EMPTY_INDICES)

        lo, hi = group.bounds
        pad = GRID_PADDING * max(float(np.max(hi - lo)), 1.)
        lo = lo - pad
        hi = hi + pad
        extent = hi - lo

        res = grid_resolution(extent, len(valid), density, resolution)
        cell_size = extent / res
        cells, owners = bucket_primitives(valid, group.mins - pad, group.maxes + pad, lo, cell_size, res)

        # ascending primitive order inside each cell
        order = np.lexsort((owners, cells))
        indices = np.ascontiguousarray(owners[order])
        cell_count = int(np.prod(res))
        cell_starts = np.zeros(cell_count + 1, dtype=np.int64)
        cell_starts[1:] = np.cumsum(np.bincount(cells, minlength=cell_count))

        bounds = np.ascontiguousarray(np.stack((lo, hi)), dtype=np.float64)
        logger.info("built %s grid over %d primitives: %d references", tuple(int(r) for r in res),
                    len(valid), len(indices))
        return cls(group, bounds, res, cell_starts, indices)

    def cell(self, x, y, z):
        nx, ny, _ = self.resolution
        c = x + nx * (y + ny * z)
        return self.indices[self.cell_starts[c]:self.cell_starts[c + 1]]

    @property
    def kernel_args(self):
        return (int(self.kind), EMPTY_VECTORS, EMPTY_VECTORS, EMPTY_INDICES, EMPTY_INDICES, EMPTY_INDICES,
                self.bounds, self.resolution, self.cell_starts, self.indices)
