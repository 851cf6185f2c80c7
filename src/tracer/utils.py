from datetime import datetime
import logging

logger = logging.getLogger('tracer')
logger.addHandler(logging.StreamHandler())
logger.setLevel(logging.INFO)


def get_logger(name):
    return logger.getChild(name)


def timed(func):
    def decorated(*args, **kwargs):
        s = datetime.now()
        ret = func(*args, **kwargs)
        logger.info("%s - %.4f", func.__name__, (datetime.now() - s).total_seconds())
        return ret
    decorated.__name__ = func.__name__
    decorated.__doc__ = func.__doc__
    return decorated
