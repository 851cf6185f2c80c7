from tracer.accelerator import LinearScan
from tracer.bvh import BoundingVolumeHierarchy
from tracer.config import make_config
from tracer.dispatch import PixelBlock, SequentialDispatcher, ParallelDispatcher
from tracer.framebuffer import Framebuffer
from tracer.grid import UniformGrid
from tracer.integrator import render_block
from tracer.partition import partition
from tracer.utils import timed, get_logger

logger = get_logger('renderer')

ACCELERATORS = {
    'bvh': BoundingVolumeHierarchy,
    'grid': UniformGrid,
    'naive': LinearScan,
}


def structure_options(cfg):
    if cfg['accelerator'] == 'bvh':
        return {'leaf_size': cfg['leaf_size'], 'split_method': cfg['split_method']}
    if cfg['accelerator'] == 'naive':
        return {}
    return {'density': cfg['grid_density'], 'resolution': cfg['grid_resolution']}


def build_structure(scene, cfg):
    return ACCELERATORS[cfg['accelerator']].build(scene.group, **structure_options(cfg))


class RenderJob:
    """Everything a worker needs to render one work unit, packed once and shared read-only."""

    def __init__(self, scene, structure, width, height, seed, max_depth):
        self.structure = structure
        self.width = width
        self.height = height
        self.seed = seed
        self.max_depth = max_depth
        self.accel = structure.kernel_args
        self.scene = scene.group.kernel_args
        self.camera = scene.camera.kernel_args(width, height)

    def render_unit(self, unit):
        colors = render_block(self.accel, self.scene, self.camera, unit.x0, unit.y0, unit.x1, unit.y1,
                              self.width, self.height, unit.spp, self.seed, self.max_depth)
        return PixelBlock(unit, colors)


def make_dispatcher(cfg):
    if cfg['parallel']:
        return ParallelDispatcher(cfg['workers'])
    return SequentialDispatcher()


@timed
def render(scene, cfg=None, **overrides):
    cfg = make_config(cfg or {}, **overrides)
    width, height = cfg['width'], cfg['height']

    units = partition(width, height, cfg['partition'], cfg['spp'],
                      band_count=cfg['band_count'], tile_size=cfg['tile_size'])
    dispatcher = make_dispatcher(cfg)
    structure = build_structure(scene, cfg)
    logger.info("rendering %dx%d at %d spp: %s structure, %s partition (%d units)",
                width, height, cfg['spp'], cfg['accelerator'], cfg['partition'], len(units))

    job = RenderJob(scene, structure, width, height, cfg['seed'], cfg['max_depth'])
    framebuffer = Framebuffer(width, height)
    dispatcher.dispatch(units, job.render_unit, framebuffer)
    return framebuffer.finalize()
