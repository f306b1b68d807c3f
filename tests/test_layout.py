from __future__ import annotations

import pytest

from flipbook.core.layout import (
    ASPECT_RATIO,
    LayoutBounds,
    PageDimensions,
    PageLayout,
    SizeBounds,
    compute_page_dimensions,
    within_tolerance,
)


def test_two_page_spread_in_wide_container_is_width_limited() -> None:
    dims = compute_page_dimensions(1000, 800)
    # 1000 / 2 - 40 = 460 wide, 460 / 0.77 tall.
    assert dims == PageDimensions(460, 597)
    assert within_tolerance(dims)


def test_short_container_limits_height_first() -> None:
    dims = compute_page_dimensions(2000, 500)
    assert dims == PageDimensions(354, 460)
    assert within_tolerance(dims)


def test_max_bounds_cap_very_large_containers() -> None:
    dims = compute_page_dimensions(5000, 5000)
    assert dims.width == 600
    assert dims.height == 779


def test_tiny_container_is_clamped_to_minimum_size() -> None:
    dims = compute_page_dimensions(100, 100)
    assert dims == PageDimensions(308, 400)
    assert within_tolerance(dims)


@pytest.mark.parametrize("width,height", [(0, 800), (1000, 0), (None, None), (-5, 600)])
def test_empty_container_returns_default(width, height) -> None:
    assert compute_page_dimensions(width, height) == PageDimensions(400, 550)


def test_empty_container_keeps_last_known_size() -> None:
    last = PageDimensions(460, 597)
    assert compute_page_dimensions(0, 0, last_known=last) == last


def test_dimensions_stay_in_bounds_and_aspect_for_all_containers() -> None:
    bounds = SizeBounds()
    for width in range(1, 3001, 37):
        for height in range(1, 2001, 41):
            dims = compute_page_dimensions(width, height)
            assert bounds.min_width <= dims.width <= bounds.max_width
            assert bounds.min_height <= dims.height <= bounds.max_height
            assert abs(dims.width / dims.height - ASPECT_RATIO) <= bounds.aspect_tolerance


def test_compute_is_idempotent() -> None:
    first = compute_page_dimensions(1234, 987, 0.7, SizeBounds(margin=20))
    for _ in range(5):
        assert compute_page_dimensions(1234, 987, 0.7, SizeBounds(margin=20)) == first


def test_custom_aspect_ratio_and_margin() -> None:
    dims = compute_page_dimensions(1000, 800, 0.77, SizeBounds(margin=20))
    assert dims == PageDimensions(480, 623)


def test_page_layout_remembers_last_size() -> None:
    layout = PageLayout()
    assert layout.dimensions == PageDimensions(400, 550)
    layout.update(LayoutBounds(1000, 800))
    assert layout.dimensions == PageDimensions(460, 597)
    assert layout.update(LayoutBounds(0, 0)) == PageDimensions(460, 597)

    narrow = PageLayout(0.5)
    assert abs(narrow.update(LayoutBounds(1000, 800)).aspect - 0.5) <= 0.02


def test_size_bounds_from_config_ignores_unknown_and_null_keys() -> None:
    bounds = SizeBounds.from_config({"max_width": "500", "margin": None, "other": 1})
    assert bounds.max_width == 500
    assert bounds.margin == 40
