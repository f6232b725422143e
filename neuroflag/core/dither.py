from __future__ import annotations

import numpy as np

from neuroflag.utils.image_ops import luminance


def _f32(v: float) -> float:
    return float(np.float32(v))


def error_diffusion(gray: np.ndarray, threshold: float = 140.0) -> np.ndarray:
    """Floyd-Steinberg in raster order. Returns the quantised 0/255 plane.

    The plane is float32 storage: each update is summed in double and
    rounded back to float32 on write.
    """
    h, w = gray.shape
    buf = np.array(gray, dtype=np.float32, copy=True)
    for y in range(h):
        row = buf[y].tolist()
        below = buf[y + 1].tolist() if y + 1 < h else None
        for x in range(w):
            old = row[x]
            new = 0.0 if old < threshold else 255.0
            row[x] = new
            err = old - new
            if x + 1 < w:
                row[x + 1] = _f32(row[x + 1] + err * 7 / 16)
            if below is not None:
                if x > 0:
                    below[x - 1] = _f32(below[x - 1] + err * 3 / 16)
                below[x] = _f32(below[x] + err * 5 / 16)
                if x + 1 < w:
                    below[x + 1] = _f32(below[x + 1] + err * 1 / 16)
        buf[y] = row
        if below is not None:
            buf[y + 1] = below
    return buf


def apply_dithering(rgba: np.ndarray, threshold: float = 140.0) -> np.ndarray:
    gray = error_diffusion(luminance(rgba), threshold)
    value = np.where(gray > 127, 255, 0).astype(np.uint8)
    h, w = value.shape
    out = np.empty((h, w, 4), dtype=np.uint8)
    out[..., 0] = value
    out[..., 1] = value
    out[..., 2] = value
    out[..., 3] = 255
    return out
