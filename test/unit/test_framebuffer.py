import numpy as np
import pytest
from tracer.dispatch import PixelBlock
from tracer.errors import RenderError
from tracer.framebuffer import Framebuffer
from tracer.partition import WorkUnit, partition


def block(unit, value=0.5):
    return PixelBlock(unit, np.full((unit.height, unit.width, 3), value))


@pytest.mark.unittest
def test_assemble_and_finalize():
    fb = Framebuffer(5, 3)
    for unit in partition(5, 3, 'grid', tile_size=2):
        assert not fb.complete
        fb.integrate(block(unit, unit.index / 10))
    assert fb.complete
    assert fb.finalize() is fb
    assert fb.pixels[0, 0, 0] == 0.
    assert fb.pixels[2, 4, 1] == 0.5


@pytest.mark.unittest
def test_pixel_written_twice():
    fb = Framebuffer(4, 4)
    fb.integrate(block(WorkUnit(0, 0, 0, 4, 2, 1)))
    with pytest.raises(RenderError):
        fb.integrate(block(WorkUnit(1, 0, 1, 4, 4, 1)))


@pytest.mark.unittest
def test_incomplete_finalize():
    fb = Framebuffer(4, 4)
    fb.integrate(block(WorkUnit(0, 0, 0, 4, 2, 1)))
    with pytest.raises(RenderError):
        fb.finalize()


@pytest.mark.unittest
def test_wrong_block_shape():
    fb = Framebuffer(4, 4)
    unit = WorkUnit(0, 0, 0, 4, 2, 1)
    with pytest.raises(RenderError):
        fb.integrate(PixelBlock(unit, np.zeros((4, 2, 3))))


@pytest.mark.unittest
def test_unit_outside_image():
    fb = Framebuffer(4, 4)
    with pytest.raises(RenderError):
        fb.integrate(block(WorkUnit(0, 2, 2, 6, 4, 1)))


@pytest.mark.unittest
def test_no_writes_after_finalize():
    fb = Framebuffer(1, 1)
    fb.integrate(block(WorkUnit(0, 0, 0, 1, 1, 1)))
    fb.finalize()
    with pytest.raises(RenderError):
        fb.integrate(block(WorkUnit(1, 0, 0, 1, 1, 1)))


@pytest.mark.unittest
def test_bgr8():
    fb = Framebuffer(1, 1)
    fb.integrate(PixelBlock(WorkUnit(0, 0, 0, 1, 1, 1), np.array([[[1., 0.5, 0.]]])))
    image = fb.finalize().to_bgr8()
    assert image.dtype == np.uint8
    assert image.shape == (1, 1, 3)
    assert list(image[0, 0]) == [0, 127, 255]
