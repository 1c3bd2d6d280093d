#!/usr/bin/env python3
"""
Camera utilities for 2D world-to-screen transforms.

World coordinates are meters with y pointing up; screen coordinates are pixels
with y pointing down.
"""
from typing import Iterable, Optional, Tuple

from .constants import (
    DEFAULT_METERS_PER_PIXEL,
    MAX_METERS_PER_PIXEL,
    MIN_METERS_PER_PIXEL,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from .vector_utils import Vector2, clamp


class Camera2D:
    """
    Maps world coordinates (meters) to screen pixels.

    Attributes:
        center: world-space point shown at the middle of the viewport.
        mpp: meters-per-pixel zoom level (smaller means zoomed-in).
        viewport_size: (width, height) in pixels.
    """

    def __init__(self, center: Vector2 = (300.0, 300.0), meters_per_pixel: float = DEFAULT_METERS_PER_PIXEL):
        self.center = [center[0], center[1]]
        self.mpp = meters_per_pixel
        self.viewport_size = (VIEW_WIDTH, VIEW_HEIGHT)

    def set_viewport_size(self, w: int, h: int) -> None:
        self.viewport_size = (max(w, 1), max(h, 1))

    def world_to_screen(self, pos: Vector2) -> Tuple[int, int]:
        px = (pos[0] - self.center[0]) / self.mpp + self.viewport_size[0] / 2
        py = self.viewport_size[1] / 2 - (pos[1] - self.center[1]) / self.mpp
        return (int(px), int(py))

    def screen_to_world(self, screen: Tuple[int, int]) -> Vector2:
        wx = (screen[0] - self.viewport_size[0] / 2) * self.mpp + self.center[0]
        wy = (self.viewport_size[1] / 2 - screen[1]) * self.mpp + self.center[1]
        return (wx, wy)

    def length_to_pixels(self, meters: float) -> int:
        return int(meters / self.mpp)

    def zoom(self, factor: float, pivot_screen: Optional[Tuple[int, int]] = None) -> None:
        """Zoom by factor; the world point under pivot_screen stays put."""
        factor = clamp(factor, 0.05, 20.0)
        before = self.screen_to_world(pivot_screen) if pivot_screen is not None else None
        self.mpp = clamp(self.mpp / factor, MIN_METERS_PER_PIXEL, MAX_METERS_PER_PIXEL)
        if before is not None:
            after = self.screen_to_world(pivot_screen)
            self.center[0] += before[0] - after[0]
            self.center[1] += before[1] - after[1]

    def pan_pixels(self, dx_pixels: float, dy_pixels: float) -> None:
        self.center[0] -= dx_pixels * self.mpp
        self.center[1] += dy_pixels * self.mpp

    def frame(self, points: Iterable[Vector2], margin: float = 1.5, min_extent: float = 100.0) -> None:
        """Center on the given points and zoom so they all fit with a margin."""
        pts = list(points)
        if not pts:
            return
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        self.center = [(min(xs) + max(xs)) / 2, (min(ys) + max(ys)) / 2]
        width_m = max((max(xs) - min(xs)) * margin, min_extent)
        height_m = max((max(ys) - min(ys)) * margin, min_extent)
        self.mpp = clamp(
            max(width_m / self.viewport_size[0], height_m / self.viewport_size[1]),
            MIN_METERS_PER_PIXEL,
            MAX_METERS_PER_PIXEL,
        )
