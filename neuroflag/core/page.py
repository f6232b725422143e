from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Set, Tuple

import numpy as np

from .flag import FlagRenderer
from .network import NetworkBackground, NetworkFrame
from .parallax import TiltTarget

if TYPE_CHECKING:
    from neuroflag.config import SceneConfig


@dataclass
class Page:
    """What the host page offers: viewport size plus the ids and classes present."""

    width: int
    height: int
    element_ids: Set[str] = field(default_factory=set)
    class_names: Set[str] = field(default_factory=set)


@dataclass
class Scene:
    page: Page
    network: NetworkBackground
    flag: Optional[FlagRenderer] = None
    tilt: Optional[TiltTarget] = None

    def tick(self) -> Tuple[NetworkFrame, Optional[np.ndarray]]:
        frame = self.network.tick()
        pixels = self.flag.tick() if self.flag is not None else None
        return frame, pixels

    def resize(self, width: int, height: int) -> None:
        self.page.width = int(width)
        self.page.height = int(height)
        self.network.resize(width, height)

    def pointer_move(self, x: float, y: float) -> Optional[str]:
        if self.tilt is None:
            return None
        return self.tilt.pointer_move(x, y, self.page.width, self.page.height)

    def pointer_leave(self) -> Optional[str]:
        if self.tilt is None:
            return None
        return self.tilt.pointer_leave()


def mount(page: Page, config: Optional["SceneConfig"] = None) -> Scene:
    if config is None:
        from neuroflag.config import SceneConfig

        config = SceneConfig()
    network = NetworkBackground(page.width, page.height, config.network, seed=config.seed)
    flag = None
    if config.flag_element_id in page.element_ids:
        flag = FlagRenderer(config.flag, config.wave)
    tilt = TiltTarget(config.tilt) if config.tilt_class in page.class_names else None
    return Scene(page=page, network=network, flag=flag, tilt=tilt)
