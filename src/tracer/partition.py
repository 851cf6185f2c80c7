from collections import namedtuple
import numbers
from tracer.constants import DEFAULT_BAND_COUNT, DEFAULT_TILE_SIZE
from tracer.errors import InvalidArgument, UnsupportedResolution

PARTITION_MODES = ('rows', 'grid')


class WorkUnit(namedtuple('WorkUnit', ['index', 'x0', 'y0', 'x1', 'y1', 'spp'])):
    """A half-open pixel rectangle [x0, x1) x [y0, y1) rendered at ``spp`` samples per pixel."""
    __slots__ = ()

    @property
    def width(self):
        return self.x1 - self.x0

    @property
    def height(self):
        return self.y1 - self.y0


def check_resolution(width, height):
    integral = isinstance(width, numbers.Integral) and isinstance(height, numbers.Integral)
    if not integral or width <= 0 or height <= 0:
        raise UnsupportedResolution("resolution must be positive integers, got %rx%r" % (width, height))


def row_bands(width, height, spp, band_count=DEFAULT_BAND_COUNT):
    # min(height, band_count) bands, the first height % count of them one row taller
    count = min(height, band_count)
    base, extra = divmod(height, count)
    units = []
    y = 0
    for i in range(count):
        rows = base + (1 if i < extra else 0)
        units.append(WorkUnit(i, 0, y, width, y + rows, spp))
        y += rows
    return units


def grid_tiles(width, height, spp, tile_size=DEFAULT_TILE_SIZE):
    units = []
    for y in range(0, height, tile_size):
        for x in range(0, width, tile_size):
            units.append(WorkUnit(len(units), x, y, min(x + tile_size, width), min(y + tile_size, height), spp))
    return units


def partition(width, height, mode='rows', spp=1, band_count=DEFAULT_BAND_COUNT, tile_size=DEFAULT_TILE_SIZE):
    """Split a width x height image into disjoint work units that cover it exactly."""
    check_resolution(width, height)
    if mode == 'rows':
        if band_count < 1:
            raise InvalidArgument("band count must be at least 1, got %r" % band_count)
        return row_bands(width, height, spp, band_count)
    elif mode == 'grid':
        if tile_size < 1:
            raise InvalidArgument("tile size must be at least 1, got %r" % tile_size)
        return grid_tiles(width, height, spp, tile_size)
    raise InvalidArgument("unknown partition mode %r, expected one of %s" % (mode, PARTITION_MODES))
