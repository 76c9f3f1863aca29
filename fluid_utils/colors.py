import colorsys

import numpy as np

DEFAULT_POINTER_COLOR = (0.15, 0.15, 0.15)


def random_color(rng: np.random.Generator):
    """Fully saturated color with a uniformly random hue, as an RGB tuple."""
    return colorsys.hsv_to_rgb(float(rng.random()), 1.0, 1.0)


class PointerColor:
    """
    Slowly cycling color used as the payload of pointer-driven splats.

    Args:
        rng: numpy random generator used to pick new hues
        update_speed: timer advance per second; a new color is picked every time the timer passes 1
        colorful: when False the color never changes
    """

    def __init__(self, rng: np.random.Generator, update_speed: float = 10.0, colorful: bool = True):
        self.rng = rng
        self.update_speed = update_speed
        self.colorful = colorful
        self.timer = 0.0
        self.color = DEFAULT_POINTER_COLOR

    def update(self, dt: float) -> bool:
        """Advance the timer by dt. Returns True if a new color was picked."""
        if not self.colorful:
            return False
        self.timer += dt * self.update_speed
        if self.timer < 1.0:
            return False
        self.timer -= float(np.floor(self.timer))
        self.color = tuple(0.15 * c for c in random_color(self.rng))
        return True
