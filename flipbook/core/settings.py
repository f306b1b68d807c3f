from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from flipbook.core.decoder import DecoderConfig
from flipbook.core.layout import ASPECT_RATIO, SizeBounds


@dataclass(frozen=True)
class FlipSettings:
    duration_ms: int = 600
    swipe_distance: int = 30


@dataclass(frozen=True)
class ViewerSettings:
    aspect_ratio: float = ASPECT_RATIO
    bounds: SizeBounds = field(default_factory=SizeBounds)
    decoder: DecoderConfig = field(default_factory=DecoderConfig)
    flip: FlipSettings = field(default_factory=FlipSettings)
    catalog: Optional[str] = None
    library_dir: Optional[str] = None

    @classmethod
    def from_config(cls, config: Optional[dict]) -> "ViewerSettings":
        """Build settings from the merged YAML config dictionary."""
        config = dict(config or {})
        layout = dict(config.get("layout") or {})
        bounds = SizeBounds.from_config(layout)
        flip = dict(config.get("flip") or {})
        return cls(
            aspect_ratio=float(layout.get("aspect_ratio") or ASPECT_RATIO),
            bounds=bounds,
            decoder=DecoderConfig.from_config(
                config.get("decoder"), target_width=bounds.max_width
            ),
            flip=FlipSettings(
                duration_ms=int(flip.get("duration_ms", 600)),
                swipe_distance=int(flip.get("swipe_distance", 30)),
            ),
            catalog=config.get("catalog") or None,
            library_dir=config.get("library_dir") or None,
        )
