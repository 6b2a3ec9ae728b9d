"""Run configuration: defaults, JSON config files and their validation."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Tuple, Union

from .errors import ConfigError
from .imaging import IMAGE_EXTENSIONS
from .saturation import ClampPolicy

DEFAULT_INPUT_DIR = Path("./")
DEFAULT_OUTPUT = Path("blended.png")
DEFAULT_SATURATION = 1.0


@dataclass
class HeatMapConfig:
    """Everything a pipeline run needs."""

    input_dir: Path = DEFAULT_INPUT_DIR
    saturation: float = DEFAULT_SATURATION   # 0 = grey, 1 = unchanged, >1 = boosted
    output: Path = DEFAULT_OUTPUT
    recursive: bool = True
    extensions: Tuple[str, ...] = field(default_factory=lambda: tuple(IMAGE_EXTENSIONS))
    clamp: ClampPolicy = ClampPolicy.CLIP

    def to_dict(self) -> dict:
        d = {}
        for k, v in self.__dict__.items():
            if isinstance(v, Enum):
                d[k] = v.value
            elif isinstance(v, Path):
                d[k] = str(v)
            elif isinstance(v, tuple):
                d[k] = list(v)
            else:
                d[k] = v
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "HeatMapConfig":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in d.items() if k in known}

        if "input_dir" in values:
            values["input_dir"] = Path(values["input_dir"])
        if "output" in values:
            values["output"] = Path(values["output"])
        if "saturation" in values:
            values["saturation"] = _parse_saturation(values["saturation"])
        if "recursive" in values:
            values["recursive"] = bool(values["recursive"])
        if "extensions" in values:
            values["extensions"] = _parse_extensions(values["extensions"])
        if "clamp" in values:
            try:
                values["clamp"] = ClampPolicy(values["clamp"])
            except ValueError as exc:
                choices = ", ".join(p.value for p in ClampPolicy)
                raise ConfigError(
                    f"Unknown clamp policy {values['clamp']!r} (expected one of: {choices})"
                ) from exc
        return cls(**values)


def _parse_saturation(value) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"Saturation must be a number, got {value!r}")
    try:
        s = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Saturation must be a number, got {value!r}") from exc
    if not math.isfinite(s):
        raise ConfigError(f"Saturation must be finite, got {value!r}")
    return s


def _parse_extensions(value) -> Tuple[str, ...]:
    if isinstance(value, str):
        value = value.split(",")
    exts = []
    for ext in value:
        ext = str(ext).strip().lower()
        if not ext:
            continue
        exts.append(ext if ext.startswith(".") else f".{ext}")
    if not exts:
        raise ConfigError("At least one image extension is required")
    return tuple(exts)


def load_config(path: Union[str, Path]) -> HeatMapConfig:
    """Read a JSON config file; missing keys keep their defaults."""
    path = Path(path)
    try:
        with path.open() as f:
            data = json.load(f)
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return HeatMapConfig.from_dict(data)


def save_config(cfg: HeatMapConfig, path: Union[str, Path]) -> Path:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w") as f:
            json.dump(cfg.to_dict(), f, indent=2)
    except OSError as exc:
        raise ConfigError(f"Cannot write config file {path}: {exc}") from exc
    return path
