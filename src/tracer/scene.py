import numpy as np
from tracer.camera import Camera
from tracer.constants import UNIT_X, UNIT_Y, UNIT_Z, RED, GREEN, BLUE, CYAN, WHITE, MaterialKind
from tracer.primitives import PrimitiveGroup, Material, Sphere, Triangle, point


class Scene:
    """Primitives plus the camera that looks at them. Read-only once built."""

    def __init__(self, primitives, camera=None):
        self.primitives = tuple(primitives)
        self.camera = camera if camera is not None else Camera()
        self.group = PrimitiveGroup.from_primitives(self.primitives)

    @property
    def lights(self):
        return [p for p in self.primitives if p.material.kind == MaterialKind.EMISSIVE]

    def __len__(self):
        return len(self.primitives)


def rgb8(r, g, b):
    return (r / 255, g / 255, b / 255)


def sample_scene():
    diffuse_orange = Material.diffuse(rgb8(200, 120, 30))
    diffuse_dark_blue = Material.diffuse((0.08, 0.1, 0.4))
    specular_gold = Material.specular((1., 0.8, 0.4), fuzz=0.2)
    specular_red = Material.specular((0.8, 0.2, 0.3))
    specular_mirror = Material.specular((0.9, 0.8, 1.), fuzz=0.05)
    dielectric_teal = Material.dielectric((0.5, 0.8, 1.), ior=1.16)

    return Scene([
        Sphere(point(0., 0., 0.), 0.9, specular_gold),
        Sphere(point(2.1, 0., 0.), 1.1, diffuse_orange),
        Sphere(point(-1.9, 0.3, 0.), 0.9, diffuse_dark_blue),
        Sphere(point(0.3, 0.3, -2.), 0.6, dielectric_teal),
        # floor
        Sphere(point(0., -100.8, 0.), 100., specular_mirror),
        Sphere(point(-2.3, 3.2, 3.3), 2.2, specular_red),
    ])


def sphere_grid_scene(columns=14, rows=14, lower=(-6., -6.), upper=(6., 6.), z=5., seed=0):
    rng = np.random.default_rng(seed)
    spheres = []
    for row in range(rows):
        for column in range(columns):
            x_t = column / columns
            y_t = row / rows
            color = rng.random(3)
            if rng.random() < 0.5:
                material = Material.diffuse(color)
            else:
                material = Material.specular(color, fuzz=0.1)
            center = point(lower[0] + (upper[0] - lower[0]) * x_t - 0.5,
                           lower[1] + (upper[1] - lower[1]) * y_t - 0.5,
                           z + rng.random())
            spheres.append(Sphere(center, 0.5, material))
    return Scene(spheres)


def random_spheres_scene(count=256, seed=0, lower=(-10., -10., 8.), upper=(10., 10., 20.)):
    rng = np.random.default_rng(seed)
    spheres = []
    for _ in range(count):
        center = rng.uniform(lower, upper)
        color = rng.random(3)
        param = rng.random()
        radius = rng.random() + 0.5
        pick = rng.integers(3)
        if pick == 0:
            material = Material.diffuse(color)
        elif pick == 1:
            material = Material.specular(color, fuzz=param)
        else:
            material = Material.dielectric(color, ior=1. + param * param, fuzz=0.005)
        spheres.append(Sphere(center, radius, material))
    return Scene(spheres)


def triangles_for_box(box_min, box_max, material=None, light=None):
    """Inward room made of two triangles per wall, with an optional light panel under the ceiling."""
    box_min = np.asarray(box_min, dtype=np.float64)
    box_max = np.asarray(box_max, dtype=np.float64)
    span = box_max - box_min
    left_bottom_back = box_min
    right_bottom_back = box_min + span * UNIT_X
    left_top_back = box_min + span * UNIT_Y
    left_bottom_front = box_min + span * UNIT_Z

    right_top_front = box_max
    left_top_front = box_max - span * UNIT_X
    right_bottom_front = box_max - span * UNIT_Y
    right_top_back = box_max - span * UNIT_Z

    def wall(color):
        return material if material is not None else Material.diffuse(color)

    tris = [
        # back wall
        Triangle(left_bottom_back, right_bottom_back, right_top_back, wall(RED)),
        Triangle(left_bottom_back, right_top_back, left_top_back, wall(RED)),
        # left wall
        Triangle(left_bottom_back, left_top_front, left_bottom_front, wall(BLUE)),
        Triangle(left_bottom_back, left_top_back, left_top_front, wall(BLUE)),
        # right wall
        Triangle(right_bottom_back, right_bottom_front, right_top_front, wall(GREEN)),
        Triangle(right_bottom_back, right_top_front, right_top_back, wall(GREEN)),
        # front wall
        Triangle(left_bottom_front, right_top_front, right_bottom_front, wall(CYAN)),
        Triangle(left_bottom_front, left_top_front, right_top_front, wall(CYAN)),
        # floor
        Triangle(left_bottom_back, right_bottom_front, right_bottom_back, wall(WHITE)),
        Triangle(left_bottom_back, left_bottom_front, right_bottom_front, wall(WHITE)),
        # ceiling
        Triangle(left_top_back, right_top_back, right_top_front, wall(WHITE)),
        Triangle(left_top_back, right_top_front, left_top_front, wall(WHITE)),
    ]
    if light is not None:
        # NB the panel is shrunk toward the origin, so the box should be centered on it in x and z
        shrink = np.array([.5, .95, .5])
        tris.append(Triangle(left_top_back * shrink, right_top_back * shrink, right_top_front * shrink, light))
        tris.append(Triangle(left_top_back * shrink, right_top_front * shrink, left_top_front * shrink, light))
    return tris


def box_scene():
    primitives = triangles_for_box(point(-4., -3., -6.), point(4., 5., 6.), light=Material.emissive((4., 4., 4.)))
    primitives.append(Sphere(point(-1.5, -1.8, 1.5), 1.2, Material.diffuse((0.8, 0.8, 0.8))))
    primitives.append(Sphere(point(1.6, -2., 0.), 1., Material.dielectric((1., 1., 1.), ior=1.5)))
    return Scene(primitives)


SCENES = {
    'sample': sample_scene,
    'grid': sphere_grid_scene,
    'random': random_spheres_scene,
    'box': box_scene,
}
