from __future__ import annotations

import base64
import io
from typing import Tuple

import numpy as np
from PIL import Image, ImageColor


def clamp01(x: np.ndarray | float) -> np.ndarray | float:
    return np.clip(x, 0.0, 1.0)


def hex_to_rgb(color: str) -> Tuple[int, int, int]:
    r, g, b = ImageColor.getrgb(color)[:3]
    return r, g, b


def luminance(arr: np.ndarray) -> np.ndarray:
    """Rec. 709 luma of an RGB(A) uint8 buffer on the 0..255 scale.

    Summed in double, stored as float32.
    """
    rgb = arr[..., :3].astype(np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    y = 0.2126 * r + 0.7152 * g + 0.0722 * b
    return y.astype(np.float32)


def compose(base_rgb: np.ndarray | Tuple[int, int, int], overlay_rgba: np.ndarray, alpha: float = 1.0) -> np.ndarray:
    """Blend a float RGBA overlay (0..1) over a uint8 RGB image or a flat colour."""
    ov = overlay_rgba.astype(np.float32)
    h, w = ov.shape[:2]
    if isinstance(base_rgb, np.ndarray):
        base = base_rgb[..., :3].astype(np.float32) / 255.0
    else:
        base = np.empty((h, w, 3), dtype=np.float32)
        base[...] = np.asarray(base_rgb, dtype=np.float32) / 255.0
    a = clamp01(ov[..., 3:4] * float(alpha))
    rgb = ov[..., 0:3]
    out = base * (1 - a) + rgb * a
    out = np.clip(out * 255.0 + 0.5, 0, 255).astype(np.uint8)
    return out


def to_pil(arr: np.ndarray) -> Image.Image:
    if arr.ndim == 3 and arr.shape[2] == 4:
        return Image.fromarray(arr, "RGBA")
    return Image.fromarray(arr, "RGB")


def encode_png_base64(arr: np.ndarray) -> str:
    buf = io.BytesIO()
    to_pil(arr).save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode()
