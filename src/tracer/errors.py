class TracerError(Exception):
    pass


class InvalidArgument(TracerError, ValueError):
    # malformed or missing input, raised before any rendering work is scheduled
    pass


class UnsupportedResolution(InvalidArgument):
    pass


class RenderError(TracerError):
    pass


class WorkerFailure(RenderError):
    def __init__(self, unit, error):
        super().__init__("worker failed on work unit {index} ({x0},{y0})-({x1},{y1}): {error!r}".format(
            index=unit.index, x0=unit.x0, y0=unit.y0, x1=unit.x1, y1=unit.y1, error=error))
        self.unit = unit
        self.error = error


class OutputError(TracerError, OSError):
    pass
