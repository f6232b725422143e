from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw

from neuroflag.utils.image_ops import hex_to_rgb

from .dither import apply_dithering
from .waves import WaveParams, apply_flag_wave


@dataclass
class FlagParams:
    width: int = 400
    height: int = 267
    background: str = "#E30A17"
    emblem: str = "#FFFFFF"
    supersample: int = 1


@dataclass
class FlagGeometry:
    center: Tuple[float, float]
    moon_radius: float
    cutout_center: Tuple[float, float]
    cutout_radius: float
    star_center: Tuple[float, float]
    star_outer: float
    star_inner: float


def flag_geometry(width: float, height: float) -> FlagGeometry:
    cx = width * 0.425
    cy = height / 2
    r = height * 0.28
    outer = height * 0.14
    return FlagGeometry(
        center=(cx, cy),
        moon_radius=r,
        cutout_center=(cx + r * 0.35, cy),
        cutout_radius=r * 0.75,
        star_center=(cx + r * 1.05, cy),
        star_outer=outer,
        star_inner=outer * 0.382,
    )


def star_points(cx: float, cy: float, outer: float, inner: float) -> List[Tuple[float, float]]:
    """Ten vertices alternating outer/inner, starting straight up."""
    pts = []
    for i in range(10):
        radius = outer if i % 2 == 0 else inner
        angle = (i * math.pi) / 5 - math.pi / 2
        pts.append((cx + math.cos(angle) * radius, cy + math.sin(angle) * radius))
    return pts


def _circle_box(cx: float, cy: float, r: float):
    return [cx - r, cy - r, cx + r, cy + r]


def draw_flag(params: Optional[FlagParams] = None) -> np.ndarray:
    params = params or FlagParams()
    s = max(1, int(params.supersample))
    w, h = params.width * s, params.height * s
    bg = hex_to_rgb(params.background)
    fg = hex_to_rgb(params.emblem)

    img = Image.new("RGBA", (w, h), color=bg + (255,))
    d = ImageDraw.Draw(img)
    g = flag_geometry(w, h)

    d.ellipse(_circle_box(*g.center, g.moon_radius), fill=fg)
    d.ellipse(_circle_box(*g.cutout_center, g.cutout_radius), fill=bg)
    d.polygon(star_points(*g.star_center, g.star_outer, g.star_inner), fill=fg)

    if s > 1:
        img = img.resize((params.width, params.height), Image.LANCZOS)
    return np.array(img, dtype=np.uint8)


class FlagRenderer:
    def __init__(self, params: Optional[FlagParams] = None, wave: Optional[WaveParams] = None):
        self.params = params or FlagParams()
        self.wave = wave or WaveParams()
        self.width = self.params.width
        self.height = self.params.height
        self.time = 0.0
        original = draw_flag(self.params)
        original.setflags(write=False)
        self.original = original
        self.frame = original.copy()

    def restore(self) -> None:
        self.frame = self.original.copy()

    def tick(self) -> np.ndarray:
        self.time += self.wave.speed
        self.restore()
        self.frame = apply_flag_wave(self.frame, self.time, self.wave)
        return self.frame

    def dither(self, threshold: float = 140.0) -> np.ndarray:
        self.frame = apply_dithering(self.frame, threshold)
        return self.frame
