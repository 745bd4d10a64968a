"""
Obstacle layout for a single routing call.

Each bound endpoint contributes its element bounds padded on every side, with
extra room on the side the arrow leaves from. Overlapping obstacles are split
between the two elements so the grid always keeps a channel between them, and
an obstacle whose padding swallows the other endpoint gives up that side of
the padding. The element itself always blocks.
"""

from typing import Tuple

from .config import RoutingConfig
from .models import (
    EndpointSide,
    Heading,
    Obstacle,
    ObstacleLayout,
    Point,
    Rect,
    ResolvedEndpoint,
)


def padded_rect(base: Rect, heading: Heading, side: float, head: float) -> Rect:
    """Inflate `base` by `side` everywhere and by `head` on the heading side."""
    left = head if heading is Heading.LEFT else side
    right = head if heading is Heading.RIGHT else side
    top = head if heading is Heading.UP else side
    bottom = head if heading is Heading.DOWN else side
    return base.inflate(left, top, right, bottom)


def _base_rect(endpoint: ResolvedEndpoint, overlapping: bool, config: RoutingConfig) -> Rect:
    if endpoint.bound_rect is None:
        return Rect.around(endpoint.position)
    if overlapping:
        return Rect.around(endpoint.position, config.exit_point_padding)
    return endpoint.bound_rect


def _obstacle_rect(endpoint: ResolvedEndpoint, base: Rect, overlapping: bool, config: RoutingConfig) -> Rect:
    if endpoint.bound_rect is None:
        return base
    if overlapping:
        return padded_rect(base, endpoint.heading, 0.0, config.base_padding)
    return padded_rect(
        base,
        endpoint.heading,
        config.base_padding,
        config.base_padding + endpoint.arrowhead_gap,
    )


def _separation(a: Rect, b: Rect) -> Tuple[float, float]:
    gap_x = max(b.min_x - a.max_x, a.min_x - b.max_x)
    gap_y = max(b.min_y - a.max_y, a.min_y - b.max_y)
    return gap_x, gap_y


def split_overlapping(
    a_rect: Rect, b_rect: Rect, a_base: Rect, b_base: Rect
) -> Tuple[Rect, Rect, bool]:
    """
    Split two overlapping obstacles along their better separated axis.

    The cut sits midway between the unpadded bases, clamped into the overlap
    so each obstacle keeps a non-empty extent.

    Returns:
        Tuple of (a_rect, b_rect, was_split).
    """
    if not (a_rect.has_area and b_rect.has_area and a_rect.intersects(b_rect)):
        return a_rect, b_rect, False

    gap_x, gap_y = _separation(a_base, b_base)
    if gap_x >= gap_y:
        a_first = a_base.center.x <= b_base.center.x
        left, right = (a_rect, b_rect) if a_first else (b_rect, a_rect)
        left_base, right_base = (a_base, b_base) if a_first else (b_base, a_base)
        cut = (left_base.max_x + right_base.min_x) / 2
        cut = min(max(cut, right.min_x), left.max_x)
        left = Rect(left.min_x, left.min_y, max(cut, left.min_x), left.max_y)
        right = Rect(min(cut, right.max_x), right.min_y, right.max_x, right.max_y)
        return (left, right, True) if a_first else (right, left, True)

    a_first = a_base.center.y <= b_base.center.y
    top, bottom = (a_rect, b_rect) if a_first else (b_rect, a_rect)
    top_base, bottom_base = (a_base, b_base) if a_first else (b_base, a_base)
    cut = (top_base.max_y + bottom_base.min_y) / 2
    cut = min(max(cut, bottom.min_y), top.max_y)
    top = Rect(top.min_x, top.min_y, top.max_x, max(cut, top.min_y))
    bottom = Rect(bottom.min_x, min(cut, bottom.max_y), bottom.max_x, bottom.max_y)
    return (top, bottom, True) if a_first else (bottom, top, True)


def exit_point(rect: Rect, endpoint: ResolvedEndpoint) -> Point:
    """Dongle point: where the route leaves `rect` along the heading."""
    if endpoint.bound_rect is None:
        return endpoint.position
    p = endpoint.position
    heading = endpoint.heading
    if heading is Heading.RIGHT:
        return Point(max(rect.max_x, p.x), p.y)
    if heading is Heading.LEFT:
        return Point(min(rect.min_x, p.x), p.y)
    if heading is Heading.DOWN:
        return Point(p.x, max(rect.max_y, p.y))
    return Point(p.x, min(rect.min_y, p.y))


def pull_edge_toward(rect: Rect, base: Rect, point: Point) -> Rect:
    """
    Pull the edge of `rect` facing `point` in, so the point ends up outside.

    The edge moves to the midpoint between `base` and the point, on the axis
    where the point is furthest outside `base`. Points inside `base` leave
    the rect unchanged.
    """
    if not base.has_area or not rect.contains(point, strict=True):
        return rect
    gap_x = max(base.min_x - point.x, point.x - base.max_x)
    gap_y = max(base.min_y - point.y, point.y - base.max_y)
    if max(gap_x, gap_y) <= 0:
        return rect
    if gap_x >= gap_y:
        if point.x < base.min_x:
            return Rect((base.min_x + point.x) / 2, rect.min_y, rect.max_x, rect.max_y)
        return Rect(rect.min_x, rect.min_y, (base.max_x + point.x) / 2, rect.max_y)
    if point.y < base.min_y:
        return Rect(rect.min_x, (base.min_y + point.y) / 2, rect.max_x, rect.max_y)
    return Rect(rect.min_x, rect.min_y, rect.max_x, (base.max_y + point.y) / 2)


def _blocks(base: Rect, other: Point) -> bool:
    # other endpoint inside the element itself
    return not (base.has_area and base.contains(other))


def build_obstacle_layout(
    start: ResolvedEndpoint, end: ResolvedEndpoint, config: RoutingConfig
) -> ObstacleLayout:
    """
    Build padded obstacles, exits and search bounds for two endpoints.

    Args:
        start: Resolved start endpoint.
        end: Resolved end endpoint.
        config: Routing configuration.

    Returns:
        The obstacle layout.
    """
    overlapping = (
        start.bound_rect is not None
        and end.bound_rect is not None
        and (
            start.bound_rect.intersects(end.bound_rect)
            or start.bound_rect.contains(end.position, strict=True)
            or end.bound_rect.contains(start.position, strict=True)
        )
    )
    start_base = _base_rect(start, overlapping, config)
    end_base = _base_rect(end, overlapping, config)
    start_rect = _obstacle_rect(start, start_base, overlapping, config)
    end_rect = _obstacle_rect(end, end_base, overlapping, config)

    start_rect, end_rect, split = split_overlapping(
        start_rect, end_rect, start_base, end_base
    )
    start_rect = pull_edge_toward(start_rect, start_base, end.position)
    end_rect = pull_edge_toward(end_rect, end_base, start.position)

    start_obstacle = Obstacle(
        start_rect, EndpointSide.START, blocking=_blocks(start_base, end.position)
    )
    end_obstacle = Obstacle(
        end_rect, EndpointSide.END, blocking=_blocks(end_base, start.position)
    )

    common = (
        start_rect.union(end_rect)
        .union(Rect.around(start.position))
        .union(Rect.around(end.position))
        .inflate_uniform(config.base_padding)
        .clamp(config.max_position)
    )

    return ObstacleLayout(
        start_obstacle=start_obstacle,
        end_obstacle=end_obstacle,
        common_bounds=common,
        start_exit=exit_point(start_rect, start),
        end_exit=exit_point(end_rect, end),
        split=split,
    )
