from __future__ import annotations

import math

import numpy as np

# Every primitive here is white, so source-over compositing reduces to the
# alpha plane: a_out = a + a_dst * (1 - a).


def new_overlay(width: int, height: int) -> np.ndarray:
    return np.zeros((height, width), dtype=np.float32)


def _window(plane: np.ndarray, x0: float, y0: float, x1: float, y1: float):
    h, w = plane.shape
    ix0 = max(0, int(math.floor(x0)))
    iy0 = max(0, int(math.floor(y0)))
    ix1 = min(w, int(math.ceil(x1)) + 1)
    iy1 = min(h, int(math.ceil(y1)) + 1)
    if ix0 >= ix1 or iy0 >= iy1:
        return None
    # pixel centres, like canvas sampling
    ys = np.arange(iy0, iy1, dtype=np.float32)[:, np.newaxis] + 0.5
    xs = np.arange(ix0, ix1, dtype=np.float32)[np.newaxis, :] + 0.5
    return (slice(iy0, iy1), slice(ix0, ix1)), xs, ys


def _blend(plane: np.ndarray, region, coverage: np.ndarray) -> None:
    dst = plane[region]
    plane[region] = coverage + dst * (1.0 - coverage)


def stroke_segment(plane: np.ndarray, p0, p1, width: float, alpha: float) -> None:
    (x0, y0), (x1, y1) = p0, p1
    half = width / 2.0
    win = _window(plane, min(x0, x1) - half - 1, min(y0, y1) - half - 1,
                  max(x0, x1) + half + 1, max(y0, y1) + half + 1)
    if win is None or alpha <= 0:
        return
    region, xs, ys = win
    dx, dy = x1 - x0, y1 - y0
    seg_len2 = dx * dx + dy * dy
    if seg_len2 == 0:
        t = np.zeros_like(xs + ys)
    else:
        t = np.clip(((xs - x0) * dx + (ys - y0) * dy) / seg_len2, 0.0, 1.0)
    px = x0 + t * dx
    py = y0 + t * dy
    dist = np.hypot(xs - px, ys - py)
    cov = np.clip(half + 0.5 - dist, 0.0, 1.0) * alpha
    _blend(plane, region, cov)


def fill_disc(plane: np.ndarray, cx: float, cy: float, radius: float, alpha: float) -> None:
    win = _window(plane, cx - radius - 1, cy - radius - 1, cx + radius + 1, cy + radius + 1)
    if win is None or alpha <= 0:
        return
    region, xs, ys = win
    dist = np.hypot(xs - cx, ys - cy)
    cov = np.clip(radius + 0.5 - dist, 0.0, 1.0) * alpha
    _blend(plane, region, cov)


def stroke_circle(plane: np.ndarray, cx: float, cy: float, radius: float, width: float, alpha: float) -> None:
    outer = radius + width / 2.0
    win = _window(plane, cx - outer - 1, cy - outer - 1, cx + outer + 1, cy + outer + 1)
    if win is None or alpha <= 0:
        return
    region, xs, ys = win
    dist = np.hypot(xs - cx, ys - cy)
    cov = np.clip(width / 2.0 + 0.5 - np.abs(dist - radius), 0.0, 1.0) * alpha
    _blend(plane, region, cov)


def fill_glow(plane: np.ndarray, cx: float, cy: float, radius: float, alpha: float) -> None:
    """Radial gradient from `alpha` at the centre to transparent at `radius`."""
    win = _window(plane, cx - radius - 1, cy - radius - 1, cx + radius + 1, cy + radius + 1)
    if win is None or alpha <= 0 or radius <= 0:
        return
    region, xs, ys = win
    dist = np.hypot(xs - cx, ys - cy)
    cov = np.clip(1.0 - dist / radius, 0.0, 1.0) * alpha
    _blend(plane, region, cov)


def to_rgba(plane: np.ndarray) -> np.ndarray:
    h, w = plane.shape
    out = np.zeros((h, w, 4), dtype=np.float32)
    out[..., 0:3] = 1.0  # white
    out[..., 3] = np.clip(plane, 0.0, 1.0)
    return out
