# main.py
import argparse
import logging
from typing import Optional
import pygame
from PIL import Image
from materials.texture_loader import decode_image
from renderer.raytracer import Renderer, RenderJob
from renderer.settings import QUALITY_LEVELS, RenderConfigError
from scenes import SceneSelector

SCENE_KEYS = {
    pygame.K_1: SceneSelector.TWO_SPHERES,
    pygame.K_2: SceneSelector.PERLIN_SPHERES,
    pygame.K_3: SceneSelector.EARTH,
    pygame.K_4: SceneSelector.SIMPLE_LIGHT,
    pygame.K_5: SceneSelector.CORNELL_BOX,
    pygame.K_6: SceneSelector.CORNELL_SMOKE,
    pygame.K_7: SceneSelector.RANDOM_SPHERES,
    pygame.K_8: SceneSelector.FINAL_SCENE,
}

class Application:
    """
    Preview window: R renders in the background, S renders on this thread,
    1-8 pick the scene, Q cycles quality, P saves a PNG.
    """
    def __init__(self, width: int, height: int, quality: str, earth_path: Optional[str] = None):
        pygame.init()
        self.width = width
        self.height = height
        self.quality_names = list(QUALITY_LEVELS)
        self.current_quality = quality
        self.scene = SceneSelector.TWO_SPHERES
        self.earth_image = decode_image(earth_path) if earth_path else None

        self.screen = pygame.display.set_mode((width, height))
        pygame.display.set_caption("Path Tracer")
        self.clock = pygame.time.Clock()

        self.renderer = Renderer(reserve_ui_thread=True)
        self.pixels: Optional[bytearray] = None
        self.job: Optional[RenderJob] = None
        self.seed = 0

    def start_render(self, sync: bool):
        # A job in flight still writes into the old buffer; leave it alone.
        if self.job is not None and not self.job.done():
            print("Render still in progress, ignoring request")
            return
        quality = QUALITY_LEVELS[self.current_quality]
        self.pixels = bytearray(self.width * self.height * 4)
        render = self.renderer.render_sync if sync else self.renderer.render
        try:
            self.job = render(self.pixels, self.width, self.height, quality["samples"],
                              quality["max_depth"], scene=self.scene, seed=self.seed,
                              earth_image=self.earth_image)
        except RenderConfigError as e:
            print(f"Render rejected: {e}")
            self.job = None
            return
        except Exception as e:
            print(f"Render failed: {e}")
            self.job = None
            return
        print(f"Rendering {self.scene.value} at {self.current_quality} quality "
              f"({self.job.total_tiles} tiles, {self.renderer.workers} workers)")

    def save_snapshot(self):
        if self.pixels is None:
            return
        path = f"{self.scene.value}.png"
        Image.frombuffer("RGBA", (self.width, self.height), bytes(self.pixels), "raw", "RGBA", 0, 1).save(path)
        print(f"Saved {path}")

    def handle_events(self) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type != pygame.KEYDOWN:
                continue
            if event.key == pygame.K_ESCAPE:
                return False
            if event.key == pygame.K_r:
                self.start_render(sync=False)
            elif event.key == pygame.K_s:
                self.start_render(sync=True)
            elif event.key == pygame.K_p:
                self.save_snapshot()
            elif event.key == pygame.K_q:
                index = self.quality_names.index(self.current_quality)
                self.current_quality = self.quality_names[(index + 1) % len(self.quality_names)]
                print(f"Quality changed to: {self.current_quality}")
            elif event.key in SCENE_KEYS:
                self.scene = SCENE_KEYS[event.key]
                print(f"Scene changed to: {self.scene.value}")
        return True

    def draw(self):
        self.screen.fill((0, 0, 0))
        if self.pixels is not None:
            surface = pygame.image.frombuffer(bytes(self.pixels), (self.width, self.height), "RGBA")
            self.screen.blit(surface, (0, 0))
        if self.job is not None:
            status = "failed" if self.job.error is not None else f"{self.job.elapsed:.1f}s"
            pygame.display.set_caption(
                f"Path Tracer - {self.job.completed_tiles}/{self.job.total_tiles} tiles, {status}")
        pygame.display.flip()

    def run(self):
        running = True
        while running:
            running = self.handle_events()
            self.draw()
            self.clock.tick(30)
        self.cleanup()

    def cleanup(self):
        if self.job is not None:
            try:
                self.job.wait()
            except Exception as e:
                print(f"Last render failed: {e}")
        self.renderer.shutdown()
        pygame.quit()

def main():
    parser = argparse.ArgumentParser(description="Interactive preview for the tile path tracer")
    parser.add_argument("--width", type=int, default=400)
    parser.add_argument("--height", type=int, default=225)
    parser.add_argument("--quality", choices=list(QUALITY_LEVELS), default="draft")
    parser.add_argument("--earth", help="image file used by the textured globe scenes")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(threadName)s %(name)s: %(message)s")
    Application(args.width, args.height, args.quality, args.earth).run()

if __name__ == "__main__":
    main()
