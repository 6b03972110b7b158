"""Editor configuration.

Defaults mirror the editor's built-in behaviour; each field can be
overridden through a ``CUTLINE_*`` environment variable. Bad values fall
back to the default instead of failing start-up.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields
from typing import Mapping, Optional

ENV_PREFIX = "CUTLINE_"

_ENV_NAMES = {
    "min_clip_length": "MIN_CLIP_LENGTH",
    "tick_interval_ms": "TICK_INTERVAL_MS",
    "zoom_min": "ZOOM_MIN",
    "zoom_max": "ZOOM_MAX",
    "jump_step": "JUMP_STEP",
    "default_overlay_duration": "OVERLAY_DURATION",
    "default_audio_duration": "AUDIO_DURATION",
    "default_audio_volume": "AUDIO_VOLUME",
    "image_duration": "IMAGE_DURATION",
}


@dataclass
class EditorConfig:
    min_clip_length: float = 0.1  # seconds; shortest clip an edit may leave
    tick_interval_ms: int = 16  # playback scheduling interval (~60 Hz)
    zoom_min: float = 0.5
    zoom_max: float = 2.0
    jump_step: float = 5.0  # seconds for jump forward/backward
    default_overlay_duration: float = 10.0
    default_audio_duration: float = 30.0
    default_audio_volume: float = 80.0  # 0..100
    image_duration: float = 5.0  # length given to imported stills

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EditorConfig":
        env = os.environ if environ is None else environ
        cfg = cls()
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + _ENV_NAMES[f.name])
            if raw is None:
                continue
            default = getattr(cfg, f.name)
            try:
                value = type(default)(raw)
            except (TypeError, ValueError):
                continue
            if value < 0:
                continue
            setattr(cfg, f.name, value)
        if cfg.zoom_min > cfg.zoom_max:
            cfg.zoom_min, cfg.zoom_max = cls.zoom_min, cls.zoom_max
        if cfg.min_clip_length <= 0:
            cfg.min_clip_length = cls.min_clip_length
        if cfg.tick_interval_ms <= 0:
            cfg.tick_interval_ms = cls.tick_interval_ms
        return cfg


__all__ = ["EditorConfig", "ENV_PREFIX"]
