from tracer.primitives import Material, Sphere, Triangle, Ray, HitRecord, PrimitiveGroup
from tracer.camera import Camera
from tracer.accelerator import LinearScan
from tracer.bvh import BoundingVolumeHierarchy
from tracer.grid import UniformGrid
from tracer.scene import Scene
from tracer.renderer import render
