from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class TiltParams:
    degrees_per_pixel: float = 0.01
    perspective: int = 1000


def _js_number(v: float) -> str:
    # browsers print 3 not 3.0, and 0 for -0
    v = float(v)
    if v == 0:
        return "0"
    if v.is_integer():
        return str(int(v))
    return repr(v)


@dataclass(frozen=True)
class Tilt:
    rotate_x: float = 0.0
    rotate_y: float = 0.0
    perspective: int = 1000

    def css(self) -> str:
        return (
            f"perspective({_js_number(self.perspective)}px) "
            f"rotateY({_js_number(self.rotate_y)}deg) "
            f"rotateX({_js_number(self.rotate_x)}deg)"
        )


def tilt_for_pointer(x: float, y: float, width: float, height: float, params: Optional[TiltParams] = None) -> Tilt:
    params = params or TiltParams()
    move_x = (x - width / 2) * params.degrees_per_pixel
    move_y = (y - height / 2) * params.degrees_per_pixel
    return Tilt(rotate_x=-move_y, rotate_y=move_x, perspective=params.perspective)


def neutral_tilt(params: Optional[TiltParams] = None) -> Tilt:
    params = params or TiltParams()
    return Tilt(perspective=params.perspective)


class TiltTarget:
    """The element that follows the pointer; owns only its live transform."""

    def __init__(self, params: Optional[TiltParams] = None):
        self.params = params or TiltParams()
        self.transform = neutral_tilt(self.params)

    def pointer_move(self, x: float, y: float, width: float, height: float) -> str:
        self.transform = tilt_for_pointer(x, y, width, height, self.params)
        return self.transform.css()

    def pointer_leave(self) -> str:
        self.transform = neutral_tilt(self.params)
        return self.transform.css()
