"""Viewer and scene settings, loaded from YAML."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from math import isfinite
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from quadvox.geom import isgoodnum

CONFIG_FILENAME = "quadvox.yaml"

_NUMBERS = ("width", "height", "fov", "near", "far", "side_length", "step_x", "step_y", "interval")


@dataclass
class ViewerConfig:
    # window
    width: int = 800
    height: int = 600
    caption: str = "quadvox"
    clear_color: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0, 1.0])
    # projection
    fov: float = 45.0
    near: float = 0.1
    far: float = 100.0
    # scene
    side_length: float = 1.0
    position: List[float] = field(default_factory=lambda: [0.0, 0.0, -5.0])
    step_x: float = 2.0
    step_y: float = 3.0
    interval: float = 0.1
    normal_visualization: bool = False

    @property
    def aspect(self) -> float:
        return self.width / self.height

    def validate(self) -> "ViewerConfig":
        for name in _NUMBERS:
            value = getattr(self, name)
            if not (isgoodnum(value) and isfinite(value)):
                raise ValueError(f"{name} must be a finite number, not {value!r}")
        if not isinstance(self.caption, str):
            raise ValueError(f"caption must be a string, not {self.caption!r}")
        if not isinstance(self.normal_visualization, bool):
            raise ValueError(f"normal_visualization must be true or false, not {self.normal_visualization!r}")
        if not isinstance(self.position, (list, tuple)):
            raise ValueError(f"bad position: {self.position!r}")
        if not isinstance(self.clear_color, (list, tuple)):
            raise ValueError(f"bad clear color: {self.clear_color!r}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"bad window size: {self.width}x{self.height}")
        if not 0 < self.fov < 180:
            raise ValueError(f"bad field of view: {self.fov}")
        if not 0 < self.near < self.far:
            raise ValueError(f"bad clip planes: near={self.near}, far={self.far}")
        if self.side_length <= 0:
            raise ValueError(f"bad side length: {self.side_length}")
        if self.interval <= 0:
            raise ValueError(f"bad tick interval: {self.interval}")
        if len(self.position) != 3 or not all(isgoodnum(c) for c in self.position):
            raise ValueError(f"bad position: {self.position}")
        if len(self.clear_color) != 4 or not all(isgoodnum(c) and 0.0 <= c <= 1.0 for c in self.clear_color):
            raise ValueError(f"bad clear color: {self.clear_color}")
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ViewerConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(str(k) for k in set(data) - known)
        if unknown:
            raise ValueError(f"unknown configuration keys: {', '.join(unknown)}")
        return cls(**data).validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def merged(self, **overrides: Any) -> "ViewerConfig":
        """Copy with every non-``None`` override applied."""
        data = self.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return ViewerConfig.from_dict(data)


def load_config(path: Optional[Path | str] = None) -> ViewerConfig:
    """Read a YAML config file.  No path, or an empty file, means defaults."""

    if path is None:
        return ViewerConfig()
    path = Path(path)
    with path.open("r", encoding="utf-8") as fp:
        try:
            data = yaml.safe_load(fp) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"{path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return ViewerConfig.from_dict(data)


def save_config(config: ViewerConfig, path: Path | str) -> None:
    path = Path(path)
    with path.open("w", encoding="utf-8") as fp:
        yaml.safe_dump(config.to_dict(), fp, sort_keys=False)


__all__ = ["CONFIG_FILENAME", "ViewerConfig", "load_config", "save_config"]
