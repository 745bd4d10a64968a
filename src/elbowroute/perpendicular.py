"""
Perpendicular binding enforcement.

A bound endpoint must leave (or enter) its element at a right angle to the
element edge it is attached to. After an edit or a fallback route this may
no longer hold; enforce_perpendicular() repairs the ends of the path without
touching fixed segment axes.
"""

from typing import List, Optional, Sequence, Tuple

from .config import RoutingConfig
from .endpoints import bound_heading, binding_is_usable
from .fixed_segments import (
    normalize_fixed_path,
    reverse_fixed_segments,
    shift_fixed_segments,
)
from .geometry import nearest_point_on_bounds, point_on_edge, ray_cast_to_bounds
from .models import BindingRef, FixedSegment, Heading, Point, Rect


def snap_to_boundary(bounds: Rect, point: Point, heading: Heading, gap: float) -> Point:
    """
    Place `point` on the `heading` edge of `bounds`, pushed out by `gap`.

    A ray is cast from the point towards the edge; if it misses, the nearest
    boundary point, projected onto that edge, is used instead.
    """
    rect = bounds.normalized()
    direction = heading if rect.contains(point) else heading.opposite
    hit = ray_cast_to_bounds(rect, point, direction)
    edge = point_on_edge(rect, heading, nearest_point_on_bounds(rect, point))
    if hit is None or (hit.x != edge.x if heading.is_horizontal else hit.y != edge.y):
        hit = edge
    return heading.step(hit, gap)


def _ahead(origin: Point, target: Point, heading: Heading) -> float:
    """Signed distance of `target` in front of `origin` along `heading`."""
    return (target.x - origin.x) * heading.dx + (target.y - origin.y) * heading.dy


def _aligned(origin: Point, target: Point, heading: Heading) -> bool:
    if heading.is_horizontal:
        return origin.y == target.y
    return origin.x == target.x


def _side_heading(heading: Heading, neighbor: Point, following: Optional[Point]) -> Heading:
    """Perpendicular heading pointing towards the path's continuation."""
    if heading.is_horizontal:
        if following is not None and following.y < neighbor.y:
            return Heading.UP
        return Heading.DOWN
    if following is not None and following.x < neighbor.x:
        return Heading.LEFT
    return Heading.RIGHT


def _fix_start(
    points: List[Point],
    fixed: List[FixedSegment],
    heading: Heading,
    padding: float,
) -> Tuple[List[Point], List[FixedSegment], bool]:
    endpoint = points[0]
    neighbor = points[1]
    if _aligned(endpoint, neighbor, heading) and _ahead(endpoint, neighbor, heading) > 0:
        return points, fixed, False

    if len(points) >= 3:
        following = points[2]
        # neighbour sits on a segment perpendicular to the heading: slide it
        runs_across = (
            neighbor.x == following.x if heading.is_horizontal else neighbor.y == following.y
        )
        if runs_across and _ahead(endpoint, neighbor, heading) > 0:
            if heading.is_horizontal:
                points[1] = Point(neighbor.x, endpoint.y)
            else:
                points[1] = Point(endpoint.x, neighbor.y)
            return points, fixed, True

    stub = heading.step(endpoint, padding)
    if _aligned(endpoint, neighbor, heading):
        # neighbour straight behind the endpoint: loop around beside it
        side = _side_heading(heading, neighbor, points[2] if len(points) >= 3 else None)
        points[1:1] = [
            stub,
            side.step(stub, padding),
            side.step(neighbor, padding),
        ]
        return points, shift_fixed_segments(fixed, 0, 3), True

    # dogleg: a stub along the heading, then across to the neighbour's line
    if heading.is_horizontal:
        corner = Point(stub.x, neighbor.y)
    else:
        corner = Point(neighbor.x, stub.y)
    points[1:1] = [stub, corner]
    return points, shift_fixed_segments(fixed, 0, 2), True


def enforce_endpoint(
    points: Sequence[Point],
    fixed: Sequence[FixedSegment],
    binding: BindingRef,
    gap: float,
    config: RoutingConfig,
    is_end: bool = False,
) -> Tuple[List[Point], List[FixedSegment], bool]:
    """
    Enforce perpendicular departure for one bound endpoint.

    Args:
        points: Path points (world space).
        fixed: Fixed segments of the path.
        binding: Binding of the endpoint.
        gap: Binding gap for the endpoint.
        config: Routing configuration.
        is_end: Work on the last point instead of the first.

    Returns:
        Tuple of (points, fixed_segments, changed).
    """
    pts = list(points)
    segs = list(fixed)
    if is_end:
        pts.reverse()
        segs = reverse_fixed_segments(segs, len(pts))

    heading = bound_heading(binding)
    snapped = snap_to_boundary(binding.bounds, pts[0], heading, gap)
    changed = snapped != pts[0]
    pts[0] = snapped

    pts, segs, fixed_neighbor = _fix_start(pts, segs, heading, config.head_padding(gap))
    changed = changed or fixed_neighbor

    if is_end:
        pts.reverse()
        segs = reverse_fixed_segments(segs, len(pts))
    return pts, segs, changed


def enforce_perpendicular(
    points: Sequence[Point],
    fixed: Sequence[FixedSegment],
    start_binding: Optional[BindingRef],
    end_binding: Optional[BindingRef],
    start_gap: float,
    end_gap: float,
    config: RoutingConfig,
) -> Tuple[List[Point], List[FixedSegment], bool]:
    """
    Enforce perpendicular approach at both bound endpoints.

    Returns:
        Tuple of (points, fixed_segments, changed). The result is normalized
        (no duplicate or collinear points) whenever something changed.
    """
    pts = list(points)
    segs = list(fixed)
    changed = False
    if len(pts) < 2:
        return pts, segs, False

    if binding_is_usable(start_binding):
        pts, segs, did = enforce_endpoint(pts, segs, start_binding, start_gap, config)
        changed = changed or did
    if binding_is_usable(end_binding):
        pts, segs, did = enforce_endpoint(
            pts, segs, end_binding, end_gap, config, is_end=True
        )
        changed = changed or did

    if changed:
        pts, segs = normalize_fixed_path(pts, segs)
    return pts, segs, changed
