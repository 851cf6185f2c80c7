from collections import ChainMap
import numbers
from tracer.constants import (
    DEFAULT_SPP,
    DEFAULT_SEED,
    MAX_BOUNCES,
    MAX_MEMBERS,
    GRID_DENSITY,
    DEFAULT_BAND_COUNT,
    DEFAULT_TILE_SIZE,
)
from tracer.bvh import SPLIT_METHODS
from tracer.errors import InvalidArgument, UnsupportedResolution
from tracer.partition import PARTITION_MODES

ACCELERATOR_NAMES = ('bvh', 'grid', 'naive')

default_config = {
    'width': 128,
    'height': 128,
    'spp': DEFAULT_SPP,
    'accelerator': 'bvh',
    'partition': 'rows',
    'parallel': True,
    'workers': None,
    'seed': DEFAULT_SEED,
    'max_depth': MAX_BOUNCES,
    'leaf_size': MAX_MEMBERS,
    'split_method': 'sah',
    'grid_density': GRID_DENSITY,
    'grid_resolution': None,
    'band_count': DEFAULT_BAND_COUNT,
    'tile_size': DEFAULT_TILE_SIZE,
}

preview_config = {
    'width': 64,
    'height': 64,
    'spp': 4,
    'max_depth': 8,
}


# integers handed to the compiled kernels must fit in int64
INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


def _positive_int(cfg, key):
    value = cfg[key]
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or not 1 <= value <= INT64_MAX:
        raise InvalidArgument("%s must be a positive integer, got %r" % (key, value))


def _choice(cfg, key, choices):
    if cfg[key] not in choices:
        raise InvalidArgument("%s must be one of %s, got %r" % (key, choices, cfg[key]))


def validate_config(cfg):
    for key in ('width', 'height'):
        value = cfg[key]
        if isinstance(value, bool) or not isinstance(value, numbers.Integral) or not 1 <= value <= INT64_MAX:
            raise UnsupportedResolution("%s must be a positive integer, got %r" % (key, value))
    for key in ('spp', 'leaf_size', 'band_count', 'tile_size'):
        _positive_int(cfg, key)
    if cfg['workers'] is not None:
        _positive_int(cfg, 'workers')
    _choice(cfg, 'accelerator', ACCELERATOR_NAMES)
    _choice(cfg, 'partition', PARTITION_MODES)
    _choice(cfg, 'split_method', SPLIT_METHODS)
    if not isinstance(cfg['parallel'], bool):
        raise InvalidArgument("parallel must be a bool, got %r" % (cfg['parallel'],))
    seed = cfg['seed']
    if isinstance(seed, bool) or not isinstance(seed, numbers.Integral) or not INT64_MIN <= seed <= INT64_MAX:
        raise InvalidArgument("seed must be a 64-bit signed integer, got %r" % (seed,))
    max_depth = cfg['max_depth']
    if not isinstance(max_depth, numbers.Integral) or not 0 <= max_depth <= INT64_MAX:
        raise InvalidArgument("max_depth must be a non-negative integer, got %r" % (max_depth,))
    if not cfg['grid_density'] > 0:
        raise InvalidArgument("grid_density must be positive, got %r" % (cfg['grid_density'],))
    return cfg


def make_config(*layers, **overrides):
    """Layer config dicts over the defaults, leftmost wins, keyword overrides win over everything."""
    cfg = ChainMap(dict(overrides), *layers, default_config)
    unknown = set(cfg) - set(default_config)
    if unknown:
        raise InvalidArgument("unknown config keys: %s" % ', '.join(sorted(unknown)))
    return validate_config(cfg)


def parse_resolution(text):
    try:
        width, height = (int(part) for part in text.lower().split('x'))
    except ValueError as e:
        raise UnsupportedResolution("resolution must look like WIDTHxHEIGHT, got %r" % text) from e
    if width < 1 or height < 1:
        raise UnsupportedResolution("resolution must be positive, got %r" % text)
    return width, height


def parse_flag(text):
    flags = {'yes': True, 'no': False}
    try:
        return flags[text.lower()]
    except KeyError:
        raise InvalidArgument("expected yes or no, got %r" % text) from None
