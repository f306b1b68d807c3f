"""Page sizing for the two-page flipbook spread.

The page size is derived from the space available to the book: two pages
side by side plus margins must fit the container width, the page height
must fit the container height, and the result must respect the configured
min/max bounds while keeping the target aspect ratio.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

# Roughly 8.5:11 letter proportion.
ASPECT_RATIO = 0.77

_EPS = 1e-6


@dataclass(frozen=True)
class LayoutBounds:
    """Pixel size of the area the book is laid out in."""

    container_width: float
    container_height: float

    @property
    def is_empty(self) -> bool:
        return not (self.container_width and self.container_height) or (
            self.container_width <= 0 or self.container_height <= 0
        )


@dataclass(frozen=True)
class PageDimensions:
    width: int
    height: int

    @property
    def aspect(self) -> float:
        if self.height <= 0:
            return 0.0
        return self.width / self.height

    @property
    def spread_width(self) -> int:
        return self.width * 2


@dataclass(frozen=True)
class SizeBounds:
    min_width: int = 300
    max_width: int = 600
    min_height: int = 400
    max_height: int = 800
    margin: int = 40
    default_width: int = 400
    default_height: int = 550
    aspect_tolerance: float = 0.02

    @property
    def default(self) -> PageDimensions:
        return PageDimensions(self.default_width, self.default_height)

    def width_range(self, aspect_ratio: float) -> tuple[float, float]:
        """Widths whose height at ``aspect_ratio`` also stays in bounds."""
        low = max(float(self.min_width), self.min_height * aspect_ratio)
        high = min(float(self.max_width), self.max_height * aspect_ratio)
        return low, max(low, high)

    @classmethod
    def from_config(cls, section: Optional[dict]) -> "SizeBounds":
        section = dict(section or {})
        kwargs = {}
        for name in cls.__dataclass_fields__:
            if section.get(name) is not None:
                kwargs[name] = type(getattr(cls, name))(section[name])
        return cls(**kwargs)


def compute_page_dimensions(
    container_width: float,
    container_height: float,
    aspect_ratio: float = ASPECT_RATIO,
    bounds: Optional[SizeBounds] = None,
    last_known: Optional[PageDimensions] = None,
) -> PageDimensions:
    """Return the page size for a container of the given size.

    Never fails: an absent or zero-sized container yields ``last_known``
    when given, otherwise the configured default size.
    """
    bounds = bounds or SizeBounds()
    if LayoutBounds(container_width, container_height).is_empty:
        return last_known if last_known is not None else bounds.default
    if aspect_ratio <= 0:
        aspect_ratio = ASPECT_RATIO

    width = min(container_width / 2.0 - bounds.margin, float(bounds.max_width))
    height = width / aspect_ratio
    if height > container_height - bounds.margin:
        height = container_height - bounds.margin
        width = height * aspect_ratio

    low, high = bounds.width_range(aspect_ratio)
    width = min(max(width, low), high)

    page_width = math.floor(width + _EPS)
    page_height = math.floor(width / aspect_ratio + _EPS)
    page_width = min(max(page_width, bounds.min_width), bounds.max_width)
    page_height = min(max(page_height, bounds.min_height), bounds.max_height)
    return PageDimensions(int(page_width), int(page_height))


def within_tolerance(
    dimensions: PageDimensions,
    aspect_ratio: float = ASPECT_RATIO,
    tolerance: float = SizeBounds.aspect_tolerance,
) -> bool:
    return abs(dimensions.aspect - aspect_ratio) <= tolerance


class PageLayout:
    """Remembers the last computed size so empty containers keep it."""

    def __init__(
        self,
        aspect_ratio: float = ASPECT_RATIO,
        bounds: Optional[SizeBounds] = None,
    ) -> None:
        self.aspect_ratio = float(aspect_ratio)
        self.bounds = bounds or SizeBounds()
        self.layout_bounds: Optional[LayoutBounds] = None
        self._dimensions: Optional[PageDimensions] = None

    @property
    def dimensions(self) -> PageDimensions:
        if self._dimensions is None:
            return self.bounds.default
        return self._dimensions

    def update(self, layout_bounds: LayoutBounds) -> PageDimensions:
        self.layout_bounds = layout_bounds
        self._dimensions = compute_page_dimensions(
            layout_bounds.container_width,
            layout_bounds.container_height,
            self.aspect_ratio,
            self.bounds,
            last_known=self._dimensions,
        )
        return self._dimensions

