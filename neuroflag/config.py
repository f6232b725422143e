"""Scene configuration: dataclass defaults, optionally overridden from JSON."""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

from neuroflag.core.flag import FlagParams
from neuroflag.core.network import NetworkParams
from neuroflag.core.parallax import TiltParams
from neuroflag.core.waves import WaveParams
from neuroflag.utils.image_ops import hex_to_rgb


class ConfigError(ValueError):
    pass


@dataclass
class SceneConfig:
    network: NetworkParams = field(default_factory=NetworkParams)
    flag: FlagParams = field(default_factory=FlagParams)
    wave: WaveParams = field(default_factory=WaveParams)
    tilt: TiltParams = field(default_factory=TiltParams)
    background: str = "#000000"
    seed: Optional[int] = None
    dither_threshold: float = 140.0
    flag_element_id: str = "flag-canvas"
    tilt_class: str = "terminal"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SceneConfig":
        sections = {"network": NetworkParams, "flag": FlagParams, "wave": WaveParams, "tilt": TiltParams}
        _reject_unknown(cls, data, "config")
        kwargs = {}
        for key, value in data.items():
            if key in sections:
                if not isinstance(value, dict):
                    raise ConfigError(f"'{key}' must be an object")
                section = sections[key]
                _reject_unknown(section, value, key)
                if "architecture" in value:
                    arch = value["architecture"]
                    if not isinstance(arch, (list, tuple)):
                        raise ConfigError(f"architecture must be a list of layer sizes, got {arch!r}")
                    value = dict(value, architecture=tuple(arch))
                kwargs[key] = section(**value)
            else:
                kwargs[key] = value
        cfg = cls(**kwargs)
        cfg.validate()
        return cfg

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def validate(self) -> None:
        net = self.network
        arch = net.architecture
        if not isinstance(arch, (list, tuple)) or len(arch) < 1 or not all(_is_int(n) and n > 0 for n in arch):
            raise ConfigError(f"architecture needs positive integer layer sizes, got {arch!r}")
        for section in (net, self.wave, self.tilt):
            for f in fields(section):
                if f.name != "architecture":
                    _require_number(section, f.name)
        if not 0.0 <= net.spawn_probability <= 1.0:
            raise ConfigError(f"spawn_probability must be in [0, 1], got {net.spawn_probability}")
        if net.speed_min < 0 or net.speed_min > net.speed_max:
            raise ConfigError(f"speed range is invalid: [{net.speed_min}, {net.speed_max}]")

        flag = self.flag
        for name in ("width", "height", "supersample"):
            if not _is_int(getattr(flag, name)):
                raise ConfigError(f"flag.{name} must be an integer, got {getattr(flag, name)!r}")
        if flag.width <= 0 or flag.height <= 0:
            raise ConfigError(f"flag size must be positive, got {flag.width}x{flag.height}")
        if flag.supersample < 1:
            raise ConfigError("supersample must be >= 1")
        _require_colour("flag.background", flag.background)
        _require_colour("flag.emblem", flag.emblem)
        _require_colour("background", self.background)

        if not _is_number(self.dither_threshold) or not 0 <= self.dither_threshold <= 255:
            raise ConfigError(f"dither_threshold must be a number in [0, 255], got {self.dither_threshold!r}")
        if self.seed is not None and not _is_int(self.seed):
            raise ConfigError(f"seed must be an integer or null, got {self.seed!r}")
        for name in ("flag_element_id", "tilt_class"):
            if not isinstance(getattr(self, name), str):
                raise ConfigError(f"{name} must be a string, got {getattr(self, name)!r}")


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _require_number(section: Any, name: str) -> None:
    v = getattr(section, name)
    if not _is_number(v):
        raise ConfigError(f"{type(section).__name__}.{name} must be a number, got {v!r}")


def _require_colour(name: str, value: Any) -> None:
    if not isinstance(value, str):
        raise ConfigError(f"{name} must be a colour string, got {value!r}")
    try:
        hex_to_rgb(value)
    except ValueError as e:
        raise ConfigError(f"{name}: {e}") from e


def _reject_unknown(cls, data: Dict[str, Any], where: str) -> None:
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown key(s) in {where}: {', '.join(unknown)}")


def load_config(path: Optional[str | Path] = None) -> SceneConfig:
    if path is None:
        return SceneConfig()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path}: invalid JSON ({e})") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be an object")
    return SceneConfig.from_dict(data)
