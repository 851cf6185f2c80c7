import numpy as np
from tracer.errors import RenderError


class Framebuffer:
    """Float RGB image assembled from rendered pixel blocks.

    Every pixel must be written exactly once before ``finalize``. Only the
    coordinating thread calls ``integrate``.
    """

    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width, 3), dtype=np.float64)
        self.written = np.zeros((height, width), dtype=np.bool_)
        self.finalized = False

    def integrate(self, block):
        if self.finalized:
            raise RenderError("framebuffer is already finalized")
        unit = block.unit
        if not (0 <= unit.x0 < unit.x1 <= self.width and 0 <= unit.y0 < unit.y1 <= self.height):
            raise RenderError("work unit %d lies outside the %dx%d image" % (unit.index, self.width, self.height))
        colors = np.asarray(block.colors)
        if colors.shape != (unit.y1 - unit.y0, unit.x1 - unit.x0, 3):
            raise RenderError("work unit %d returned a block of shape %s" % (unit.index, colors.shape))
        if self.written[unit.y0:unit.y1, unit.x0:unit.x1].any():
            raise RenderError("work unit %d overlaps pixels that were already written" % unit.index)

        self.pixels[unit.y0:unit.y1, unit.x0:unit.x1] = colors
        self.written[unit.y0:unit.y1, unit.x0:unit.x1] = True

    @property
    def complete(self):
        return bool(self.written.all())

    def finalize(self):
        if not self.complete:
            missing = int(self.written.size - np.count_nonzero(self.written))
            raise RenderError("framebuffer is missing %d of %d pixels" % (missing, self.written.size))
        self.finalized = True
        return self

    def to_bgr8(self):
        # cv2 expects BGR channel order
        return np.ascontiguousarray((np.clip(self.pixels, 0., 1.) * 255.999).astype(np.uint8)[:, :, ::-1])
