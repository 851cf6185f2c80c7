from collections import namedtuple
import os
from queue import Queue, Empty
from threading import Thread
from tracer.errors import InvalidArgument, WorkerFailure
from tracer.utils import timed, get_logger

logger = get_logger('dispatch')

# result messages on the gather channel
PixelBlock = namedtuple('PixelBlock', ['unit', 'colors'])
FailedUnit = namedtuple('FailedUnit', ['unit', 'error'])

# stop sentinel on the request channel
STOP = None


class SequentialDispatcher:
    """Renders every unit in order on the calling thread."""

    @timed
    def dispatch(self, units, render_unit, framebuffer):
        logger.info("rendering %d units sequentially", len(units))
        for unit in units:
            try:
                block = render_unit(unit)
            except Exception as e:
                logger.error("unit %d failed: %r", unit.index, e)
                raise WorkerFailure(unit, e) from e
            framebuffer.integrate(block)
        return framebuffer


def worker_loop(requests: Queue, results: Queue, render_unit):
    while True:
        unit = requests.get()
        if unit is STOP:
            return
        try:
            block = render_unit(unit)
        except BaseException as e:
            # the coordinator waits for one message per unit, so report before dying
            logger.error("unit %d failed: %r", unit.index, e)
            results.put(FailedUnit(unit, e))
            if not isinstance(e, Exception):
                raise
            return
        results.put(block)


class ParallelDispatcher:
    """Scatter/gather over a fixed pool of worker threads.

    The coordinator scatters every unit onto a request queue, each worker
    renders units until it reads a stop sentinel, and the coordinator gathers
    exactly one message per unit from the result queue. Only the coordinator
    touches the framebuffer. Workers spend their time in compiled kernels that
    release the GIL, so they run in parallel.
    """

    def __init__(self, workers=None):
        self.workers = workers if workers is not None else (os.cpu_count() or 1)
        if self.workers < 1:
            raise InvalidArgument("need at least one worker, got %r" % workers)

    @timed
    def dispatch(self, units, render_unit, framebuffer):
        requests = Queue()
        results = Queue()
        threads = [Thread(target=worker_loop, args=(requests, results, render_unit), name='tracer-worker-%d' % i)
                   for i in range(min(self.workers, max(len(units), 1)))]
        logger.info("rendering %d units on %d worker threads", len(units), len(threads))

        for thread in threads:
            thread.start()
        try:
            for unit in units:
                requests.put(unit)
            for _ in range(len(units)):
                message = results.get()
                if isinstance(message, FailedUnit):
                    raise WorkerFailure(message.unit, message.error) from message.error
                framebuffer.integrate(message)
        finally:
            # drop whatever was not picked up, then stop and join every worker
            while True:
                try:
                    requests.get_nowait()
                except Empty:
                    break
            for _ in threads:
                requests.put(STOP)
            for thread in threads:
                thread.join()
        return framebuffer
