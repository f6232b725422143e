from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np


@dataclass
class WaveParams:
    frequency: float = 0.02
    amplitude: float = 12.0
    speed: float = 0.03


def wave_offsets(width: int, t: float, params: WaveParams) -> np.ndarray:
    """Vertical displacement per column, pinned to zero at the left edge."""
    x = np.arange(width, dtype=np.float64)
    amplitude_factor = np.sin((x / width) * math.pi)
    return np.sin(x * params.frequency + t) * params.amplitude * amplitude_factor


def apply_flag_wave(src: np.ndarray, t: float, params: WaveParams) -> np.ndarray:
    rows, cols = src.shape[:2]
    offsets = wave_offsets(cols, t, params)
    yy = np.arange(rows, dtype=np.float64)[:, np.newaxis]
    source_y = np.floor(yy + offsets[np.newaxis, :]).astype(np.intp)
    valid = (source_y >= 0) & (source_y < rows)
    xx = np.broadcast_to(np.arange(cols), (rows, cols))

    out = np.zeros_like(src)
    out[..., 3] = 255  # rows sampled off the image stay opaque black
    out[valid] = src[source_y[valid], xx[valid]]
    return out
