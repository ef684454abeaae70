import numpy as np
import taichi as ti


class Framebuffer:
    """Pixel target for the color mapper, one pixel per grid cell.

    - rgba: (width, height, 4) u8, alpha always 255
    - image: (width, height) float RGB in [0, 1], for ti.ui canvas.set_image
    """

    def __init__(self, width: int, height: int):
        self.width = int(width)
        self.height = int(height)
        self.shape = (self.width, self.height)
        self.image = ti.Vector.field(3, dtype=ti.f32, shape=self.shape)
        self.rgba = ti.field(dtype=ti.u8, shape=(self.width, self.height, 4))

    def to_numpy(self) -> np.ndarray:
        return self.rgba.to_numpy()
