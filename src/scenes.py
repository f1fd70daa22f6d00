# scenes.py
"""
Preset scenes. Each builder is a pure function of the calling thread's
random stream and returns the geometry, the light-sampling target and the
camera defaults.
"""
import logging
from enum import Enum
from typing import Optional
from core.vector import Vector3
from core.utils import random_double, random_vector
from camera.camera import CameraParams
from geometry.box import Box
from geometry.bvh import BVHNode
from geometry.constant_medium import ConstantMedium
from geometry.hittable import Hittable
from geometry.rect import XYRect, XZRect, YZRect
from geometry.sphere import MovingSphere, Sphere
from geometry.transform import RotateY, Translate
from geometry.world import HittableList
from materials.dielectric import Dielectric
from materials.diffuse_light import DiffuseLight
from materials.lambertian import Lambertian
from materials.metal import Metal
from materials.textures import CheckerTexture, ImageTexture, NoiseTexture
from renderer.integrator import Background, sky_gradient, solid_background

logger = logging.getLogger(__name__)

BLACK = Vector3(0, 0, 0)

class SceneSelector(Enum):
    TWO_SPHERES = "two_spheres"
    PERLIN_SPHERES = "perlin_spheres"
    EARTH = "earth"
    SIMPLE_LIGHT = "simple_light"
    CORNELL_BOX = "cornell_box"
    CORNELL_SMOKE = "cornell_smoke"
    RANDOM_SPHERES = "random_spheres"
    FINAL_SCENE = "final_scene"

class Scene:
    """
    `lights` is the single shape the integrator samples toward (None when
    the scene is lit only by its background). It may have no material.
    """
    def __init__(self, world: HittableList, camera: CameraParams,
                 background: Background = sky_gradient, lights: Optional[Hittable] = None):
        self.world = world
        self.camera = camera
        self.background = background
        self.lights = lights

def two_spheres() -> Scene:
    world = HittableList()
    world.add(Sphere(Vector3(0, -100.5, 0), 100, Lambertian(Vector3(0.5, 0.5, 0.5))))
    world.add(Sphere(Vector3(0, 0, 0), 0.5, Lambertian(Vector3(0.5, 0.5, 0.5))))
    camera = CameraParams(lookfrom=Vector3(0, 0, 1), lookat=Vector3(0, 0, 0), vfov=90.0,
                          focus_dist=1.0)
    return Scene(world, camera, sky_gradient)

def perlin_spheres() -> Scene:
    pertext = NoiseTexture(4)
    world = HittableList()
    world.add(Sphere(Vector3(0, -1000, 0), 1000, Lambertian(pertext)))
    world.add(Sphere(Vector3(0, 2, 0), 2, Lambertian(pertext)))
    camera = CameraParams(lookfrom=Vector3(13, 2, 3), lookat=Vector3(0, 0, 0), vfov=20.0)
    return Scene(world, camera, solid_background(Vector3(0.70, 0.80, 1.00)))

def earth(earth_image=None) -> Scene:
    texture = ImageTexture.from_image(earth_image) if earth_image is not None else ImageTexture()
    world = HittableList()
    world.add(Sphere(Vector3(0, 0, 0), 2, Lambertian(texture)))
    camera = CameraParams(lookfrom=Vector3(13, 2, 3), lookat=Vector3(0, 0, 0), vfov=20.0)
    return Scene(world, camera, solid_background(Vector3(0.70, 0.80, 1.00)))

def simple_light() -> Scene:
    pertext = NoiseTexture(4)
    world = HittableList()
    world.add(Sphere(Vector3(0, -1000, 0), 1000, Lambertian(pertext)))
    world.add(Sphere(Vector3(0, 2, 0), 2, Lambertian(pertext)))
    light = XYRect(3, 5, 1, 3, -2, DiffuseLight(Vector3(4, 4, 4)))
    world.add(light)
    camera = CameraParams(lookfrom=Vector3(26, 3, 6), lookat=Vector3(0, 2, 0), vfov=20.0)
    return Scene(world, camera, solid_background(BLACK), lights=XYRect(3, 5, 1, 3, -2))

def _cornell_walls(world: HittableList, light_intensity: float, light_bounds):
    red = Lambertian(Vector3(.65, .05, .05))
    white = Lambertian(Vector3(.73, .73, .73))
    green = Lambertian(Vector3(.12, .45, .15))
    light = DiffuseLight(Vector3(light_intensity, light_intensity, light_intensity))

    world.add(YZRect(0, 555, 0, 555, 555, green))
    world.add(YZRect(0, 555, 0, 555, 0, red))
    x0, x1, z0, z1 = light_bounds
    world.add(XZRect(x0, x1, z0, z1, 554, light, flip=True))
    world.add(XZRect(0, 555, 0, 555, 555, white))
    world.add(XZRect(0, 555, 0, 555, 0, white))
    world.add(XYRect(0, 555, 0, 555, 555, white))
    return white

def _cornell_camera() -> CameraParams:
    return CameraParams(lookfrom=Vector3(278, 278, -800), lookat=Vector3(278, 278, 0), vfov=40.0)

def cornell_box() -> Scene:
    world = HittableList()
    bounds = (213, 343, 227, 332)
    white = _cornell_walls(world, 15, bounds)

    box1 = Box(Vector3(0, 0, 0), Vector3(165, 330, 165), white)
    world.add(Translate(RotateY(box1, 15), Vector3(265, 0, 295)))
    box2 = Box(Vector3(0, 0, 0), Vector3(165, 165, 165), white)
    world.add(Translate(RotateY(box2, -18), Vector3(130, 0, 65)))

    lights = XZRect(*bounds, 554, flip=True)
    return Scene(world, _cornell_camera(), solid_background(BLACK), lights=lights)

def cornell_smoke() -> Scene:
    world = HittableList()
    bounds = (113, 443, 127, 432)
    white = _cornell_walls(world, 7, bounds)

    box1 = Translate(RotateY(Box(Vector3(0, 0, 0), Vector3(165, 330, 165), white), 15),
                     Vector3(265, 0, 295))
    box2 = Translate(RotateY(Box(Vector3(0, 0, 0), Vector3(165, 165, 165), white), -18),
                     Vector3(130, 0, 65))
    world.add(ConstantMedium(box1, 0.01, Vector3(0, 0, 0)))
    world.add(ConstantMedium(box2, 0.01, Vector3(1, 1, 1)))

    lights = XZRect(*bounds, 554, flip=True)
    return Scene(world, _cornell_camera(), solid_background(BLACK), lights=lights)

def random_spheres() -> Scene:
    world = HittableList()
    checker = CheckerTexture(Vector3(0.2, 0.3, 0.1), Vector3(0.9, 0.9, 0.9), 0.32)
    world.add(Sphere(Vector3(0, -1000, 0), 1000, Lambertian(checker)))

    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = random_double()
            center = Vector3(a + 0.9 * random_double(), 0.2, b + 0.9 * random_double())
            if (center - Vector3(4, 0.2, 0)).length() <= 0.9:
                continue
            if choose_mat < 0.8:
                albedo = random_vector() * random_vector()
                center2 = center + Vector3(0, random_double(0, .5), 0)
                world.add(MovingSphere(center, center2, 0.0, 1.0, 0.2, Lambertian(albedo)))
            elif choose_mat < 0.95:
                albedo = random_vector(0.5, 1)
                fuzz = random_double(0, 0.5)
                world.add(Sphere(center, 0.2, Metal(albedo, fuzz)))
            else:
                world.add(Sphere(center, 0.2, Dielectric(1.5)))

    world.add(Sphere(Vector3(0, 1, 0), 1.0, Dielectric(1.5)))
    world.add(Sphere(Vector3(-4, 1, 0), 1.0, Lambertian(Vector3(0.4, 0.2, 0.1))))
    world.add(Sphere(Vector3(4, 1, 0), 1.0, Metal(Vector3(0.7, 0.6, 0.5), 0.0)))

    camera = CameraParams(lookfrom=Vector3(13, 2, 3), lookat=Vector3(0, 0, 0), vfov=20.0,
                          aperture=0.1, focus_dist=10.0)
    return Scene(world, camera, sky_gradient)

def final_scene(earth_image=None) -> Scene:
    ground = Lambertian(Vector3(0.48, 0.83, 0.53))
    boxes_per_side = 20
    ground_boxes = HittableList()
    for i in range(boxes_per_side):
        for j in range(boxes_per_side):
            w = 100.0
            x0 = -1000.0 + i * w
            z0 = -1000.0 + j * w
            y1 = random_double(1, 101)
            ground_boxes.add(Box(Vector3(x0, 0, z0), Vector3(x0 + w, y1, z0 + w), ground))

    world = HittableList()
    world.add(BVHNode(ground_boxes.objects, 0, len(ground_boxes.objects)))

    light = DiffuseLight(Vector3(7, 7, 7))
    world.add(XZRect(123, 423, 147, 412, 554, light, flip=True))

    center1 = Vector3(400, 400, 200)
    center2 = center1 + Vector3(30, 0, 0)
    world.add(MovingSphere(center1, center2, 0, 1, 50, Lambertian(Vector3(0.7, 0.3, 0.1))))

    world.add(Sphere(Vector3(260, 150, 45), 50, Dielectric(1.5)))
    world.add(Sphere(Vector3(0, 150, 145), 50, Metal(Vector3(0.8, 0.8, 0.9), 1.0)))

    boundary = Sphere(Vector3(360, 150, 145), 70, Dielectric(1.5))
    world.add(boundary)
    world.add(ConstantMedium(boundary, 0.2, Vector3(0.2, 0.4, 0.9)))
    mist = Sphere(Vector3(0, 0, 0), 5000, Dielectric(1.5))
    world.add(ConstantMedium(mist, .0001, Vector3(1, 1, 1)))

    globe = ImageTexture.from_image(earth_image) if earth_image is not None else ImageTexture()
    world.add(Sphere(Vector3(400, 200, 400), 100, Lambertian(globe)))
    world.add(Sphere(Vector3(220, 280, 300), 80, Lambertian(NoiseTexture(0.1))))

    white = Lambertian(Vector3(.73, .73, .73))
    cluster = [Sphere(random_vector(0, 165), 10, white) for _ in range(1000)]
    world.add(Translate(RotateY(BVHNode(cluster, 0, len(cluster)), 15), Vector3(-100, 270, 395)))

    lights = XZRect(123, 423, 147, 412, 554, flip=True)
    camera = CameraParams(lookfrom=Vector3(478, 278, -600), lookat=Vector3(278, 278, 0), vfov=40.0)
    return Scene(world, camera, solid_background(BLACK), lights=lights)

_BUILDERS = {
    SceneSelector.TWO_SPHERES: two_spheres,
    SceneSelector.PERLIN_SPHERES: perlin_spheres,
    SceneSelector.SIMPLE_LIGHT: simple_light,
    SceneSelector.CORNELL_BOX: cornell_box,
    SceneSelector.CORNELL_SMOKE: cornell_smoke,
    SceneSelector.RANDOM_SPHERES: random_spheres,
}

def build_scene(selector: SceneSelector, earth_image=None) -> Scene:
    """
    Build a preset scene. `earth_image` is an optional decoded
    (width, height, channels, data) tuple for the textured globes.
    """
    selector = SceneSelector(selector)
    if selector is SceneSelector.EARTH:
        scene = earth(earth_image)
    elif selector is SceneSelector.FINAL_SCENE:
        scene = final_scene(earth_image)
    else:
        scene = _BUILDERS[selector]()
    logger.debug("Built scene %s with %d objects", selector.value, len(scene.world))
    return scene
