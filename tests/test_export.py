"""
Tests for offline frame export.
"""

import numpy as np
import pytest
from PIL import Image

from neuroflag.config import SceneConfig
from neuroflag.export import ExportError, detect_format, export_animation, iter_frames


class TestIterFrames:

    def test_network_frames_are_rgb_over_background(self):
        frames = list(iter_frames("network", 2, SceneConfig(seed=1), width=120, height=80))
        assert len(frames) == 2
        assert frames[0].shape == (80, 120, 3)
        assert frames[0].dtype == np.uint8
        assert tuple(frames[0][0, 0]) == (0, 0, 0)
        assert frames[0].max() > 0

    def test_flag_frames(self):
        frames = list(iter_frames("flag", 2, SceneConfig()))
        assert frames[0].shape == (267, 400, 3)

    def test_dither_frames_are_binary(self):
        (frame,) = list(iter_frames("dither", 1, SceneConfig()))
        assert set(np.unique(frame)) <= {0, 255}

    def test_unknown_kind(self):
        with pytest.raises(ExportError):
            list(iter_frames("stars", 1, SceneConfig()))


class TestExport:

    def test_png_sequence(self, tmp_path):
        written = export_animation("flag", tmp_path / "flag.png", frames=2)
        assert [p.name for p in written] == ["flag_0000.png", "flag_0001.png"]
        with Image.open(written[0]) as im:
            assert im.size == (400, 267)

    def test_gif(self, tmp_path):
        out = tmp_path / "media" / "net.gif"
        written = export_animation("network", out, frames=3, fps=20, config=SceneConfig(seed=2), width=96, height=64)
        assert written == [out]
        with Image.open(out) as im:
            assert im.format == "GIF"
            assert im.size == (96, 64)

    def test_progress_wrapper_is_used(self, tmp_path):
        seen = []

        def progress(it, total):
            seen.append(total)
            return it

        export_animation("flag", tmp_path / "f.png", frames=1, progress=progress)
        assert seen == [1]

    def test_format_detection(self):
        assert detect_format("a/b.GIF") == "gif"
        assert detect_format("clip.mp4") == "mp4"
        assert detect_format("frames") == "png"
        assert detect_format("x.gif", "png") == "png"

    @pytest.mark.parametrize("kwargs", [
        {"frames": 0},
        {"width": 0},
        {"fmt": "bmp"},
    ])
    def test_rejects_bad_requests(self, tmp_path, kwargs):
        with pytest.raises(ExportError):
            export_animation("flag", tmp_path / "out.png", **kwargs)

    def test_unsupported_extension(self, tmp_path):
        with pytest.raises(ExportError):
            export_animation("flag", tmp_path / "out.bmp", frames=1)
