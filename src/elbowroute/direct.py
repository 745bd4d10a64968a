"""
Direct (straight) route check.

A two-point route is used when the endpoints share an axis, the single
segment satisfies both endpoint headings, and nothing blocks it.
"""

from typing import List, Optional

from .config import RoutingConfig
from .geometry import heading_between, segment_intersects_rect
from .models import ObstacleLayout, Point, ResolvedEndpoint


def try_direct_route(
    start: ResolvedEndpoint,
    end: ResolvedEndpoint,
    layout: ObstacleLayout,
    config: RoutingConfig,
) -> Optional[List[Point]]:
    """
    Return [start, end] if a straight segment is valid, else None.

    Args:
        start: Resolved start endpoint.
        end: Resolved end endpoint.
        layout: Obstacle layout of the call.
        config: Routing configuration.
    """
    a, b = start.position, end.position
    tol = config.dedup_threshold
    aligned_x = abs(a.x - b.x) <= tol
    aligned_y = abs(a.y - b.y) <= tol
    if aligned_x == aligned_y:
        # coincident or diagonal
        return None

    heading = heading_between(a, b)
    if start.constrained and start.heading is not heading:
        return None
    if end.constrained and end.heading.opposite is not heading:
        return None
    if not start.constrained and start.heading is heading.opposite:
        return None
    if not end.constrained and end.heading is heading:
        return None

    # Snap the sub-tolerance offset onto the endpoint that is free to move.
    if aligned_y and a.y != b.y:
        if end.is_bound and not start.is_bound:
            a = Point(a.x, b.y)
        else:
            b = Point(b.x, a.y)
    elif aligned_x and a.x != b.x:
        if end.is_bound and not start.is_bound:
            a = Point(b.x, a.y)
        else:
            b = Point(a.x, b.y)

    eps = config.intersection_epsilon
    start_obstacle = layout.start_obstacle
    end_obstacle = layout.end_obstacle
    # Each obstacle is tested only on the part of the segment outside it.
    if start_obstacle.blocking and segment_intersects_rect(
        layout.start_exit if start.is_bound else a, b, start_obstacle.rect, eps
    ):
        return None
    if end_obstacle.blocking and segment_intersects_rect(
        a, layout.end_exit if end.is_bound else b, end_obstacle.rect, eps
    ):
        return None
    return [a, b]
