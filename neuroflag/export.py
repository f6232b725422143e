"""Offline frame export: GIF / MP4 through imageio, PNG sequences through Pillow."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterator, List, Optional

import numpy as np

from neuroflag.config import SceneConfig
from neuroflag.core.flag import FlagRenderer
from neuroflag.core.network import NetworkBackground
from neuroflag.utils.image_ops import compose, hex_to_rgb, to_pil

logger = logging.getLogger(__name__)

KINDS = ("network", "flag", "dither")
FORMATS = ("gif", "mp4", "png")


class ExportError(RuntimeError):
    pass


def iter_frames(kind: str, frames: int, config: SceneConfig, width: int = 960, height: int = 540) -> Iterator[np.ndarray]:
    """Yield `frames` RGB uint8 frames of the requested animation."""
    if kind not in KINDS:
        raise ExportError(f"unknown animation '{kind}', expected one of {', '.join(KINDS)}")
    if kind == "network":
        net = NetworkBackground(width, height, config.network, seed=config.seed)
        bg = hex_to_rgb(config.background)
        for _ in range(frames):
            yield compose(bg, net.render(net.tick()))
    else:
        flag = FlagRenderer(config.flag, config.wave)
        for _ in range(frames):
            pixels = flag.tick()
            if kind == "dither":
                pixels = flag.dither(config.dither_threshold)
            yield np.ascontiguousarray(pixels[..., :3])


def detect_format(path: str | Path, fmt: Optional[str] = None) -> str:
    if fmt:
        fmt = fmt.lower()
    else:
        ext = Path(path).suffix.lower().lstrip(".")
        fmt = ext or "png"
    if fmt not in FORMATS:
        raise ExportError(f"unsupported format '{fmt}', expected one of {', '.join(FORMATS)}")
    return fmt


def write_frames(path: str | Path, frames: List[np.ndarray], fps: int = 30, fmt: Optional[str] = None, loop: bool = True) -> List[Path]:
    """Write frames and return the files produced."""
    if not frames:
        raise ExportError("nothing to export: no frames rendered")
    fmt = detect_format(path, fmt)
    path = Path(path)
    if path.parent and not path.parent.exists():
        os.makedirs(path.parent, exist_ok=True)

    if fmt == "png":
        stem = path.with_suffix("")
        written = []
        for i, fr in enumerate(frames):
            fn = Path(f"{stem}_{i:04d}.png")
            to_pil(fr).save(fn)
            written.append(fn)
        logger.info("wrote %d PNG frames next to %s", len(written), stem)
        return written

    if fmt == "gif":
        import imageio.v3 as iio

        dur = max(10, int(1000 / max(1, fps)))
        extra = {"loop": 0} if loop else {}
        iio.imwrite(path, np.stack(frames), extension=".gif", duration=dur, **extra)
        logger.info("wrote GIF %s (%d frames, %d ms/frame)", path, len(frames), dur)
        return [path]

    try:
        import imageio
        import imageio_ffmpeg  # noqa: F401
    except ImportError as e:
        raise ExportError("MP4 export needs ffmpeg. Install: pip install imageio-ffmpeg") from e
    writer = imageio.get_writer(
        str(path),
        fps=fps,
        codec="libx264",
        quality=10,
        ffmpeg_log_level="error",
        pixelformat="yuv420p",
        macro_block_size=1,
    )
    try:
        for fr in frames:
            writer.append_data(fr)
    finally:
        writer.close()
    logger.info("wrote MP4 %s (%d frames @ %d fps)", path, len(frames), fps)
    return [path]


def export_animation(
    kind: str,
    path: str | Path,
    frames: int = 120,
    fps: int = 30,
    config: Optional[SceneConfig] = None,
    width: int = 960,
    height: int = 540,
    fmt: Optional[str] = None,
    progress: Optional[Callable[[Iterator[np.ndarray], int], Iterator[np.ndarray]]] = None,
) -> List[Path]:
    config = config or SceneConfig()
    if frames <= 0:
        raise ExportError("frames must be positive")
    if width <= 0 or height <= 0:
        raise ExportError(f"viewport must be positive, got {width}x{height}")
    detect_format(path, fmt)
    it = iter_frames(kind, frames, config, width, height)
    if progress is not None:
        it = progress(it, frames)
    return write_frames(path, list(it), fps=fps, fmt=fmt)
