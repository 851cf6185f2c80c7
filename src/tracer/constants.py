from enum import IntEnum
import numpy as np

# camera constants
V_FOV = 70.0
DEFAULT_LOOK_FROM = np.array([0, 0, -5], dtype=np.float64)
DEFAULT_LOOK_AT = np.array([0, 0, 0], dtype=np.float64)

FLOAT_TOLERANCE = 0.00001
# triangle determinants below this are treated as parallel / zero-area
DET_TOLERANCE = 1e-12

# rays
RAY_MIN = 0.0001
RAY_MAX = 100000.0

# directions
UNIT_X = np.array([1, 0, 0], dtype=np.float64)
UNIT_Y = np.array([0, 1, 0], dtype=np.float64)
UNIT_Z = np.array([0, 0, 1], dtype=np.float64)
ZERO_VECTOR = np.array([0, 0, 0], dtype=np.float64)
INF = np.array([np.inf, np.inf, np.inf])
NEG_INF = np.array([-np.inf, -np.inf, -np.inf])

# colors defined [0, 1], RGB order. framebuffer converts to cv2 order on the way out
WHITE = np.array([0.7, 0.7, 0.7], dtype=np.float64)
RED = np.array([0.8, 0.3, 0.3], dtype=np.float64)
GREEN = np.array([0.0, 0.807, 0.541], dtype=np.float64)
BLUE = np.array([0.3, 0.3, 0.8], dtype=np.float64)
CYAN = np.array([0.3, 0.8, 0.8], dtype=np.float64)

# sky gradient, bottom is the horizon
SKY_BOTTOM = np.array([1.0, 1.0, 1.0], dtype=np.float64)
SKY_TOP = np.array([120 / 255, 200 / 255, 1.0], dtype=np.float64)

# integrator
MAX_BOUNCES = 32
DEFAULT_SPP = 16
DEFAULT_SEED = 0

# BVH constants
MAX_MEMBERS = 4
MAX_DEPTH = 32

# grid constants
GRID_DENSITY = 3.0
MAX_GRID_RESOLUTION = 64
GRID_PADDING = 1e-6

# partition constants
DEFAULT_BAND_COUNT = 16
DEFAULT_TILE_SIZE = 16


class Shape(IntEnum):
    DEGENERATE = 0
    SPHERE = 1
    TRIANGLE = 2


class MaterialKind(IntEnum):
    DIFFUSE = 0
    SPECULAR = 1
    DIELECTRIC = 2
    EMISSIVE = 3


class Accelerator(IntEnum):
    BVH = 0
    GRID = 1
    LINEAR = 2


# layout of one row of PrimitiveGroup.geometry
GEOMETRY_WIDTH = 9

# layout of one row of PrimitiveGroup.material_params
COLOR_OFFSET = 0
EMISSION_OFFSET = 3
FUZZ_INDEX = 6
IOR_INDEX = 7
MATERIAL_WIDTH = 8
