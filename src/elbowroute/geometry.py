"""
Geometry utilities for orthogonal routing.

Axis and heading math, rectangle tests, and the polyline clean-up helpers
shared by the router, the post-processor and the edit pipeline.
"""

from typing import Iterable, List, Optional, Sequence, Set

from .models import Heading, Point, Rect


def manhattan(a: Point, b: Point) -> float:
    return abs(a.x - b.x) + abs(a.y - b.y)


def points_close(a: Point, b: Point, tolerance: float = 0.0) -> bool:
    return abs(a.x - b.x) <= tolerance and abs(a.y - b.y) <= tolerance


def heading_between(a: Point, b: Point) -> Heading:
    """Dominant-axis heading of the vector a -> b."""
    return Heading.from_vector(b.x - a.x, b.y - a.y)


def is_axis_aligned(a: Point, b: Point, tolerance: float = 0.0) -> bool:
    return abs(a.x - b.x) <= tolerance or abs(a.y - b.y) <= tolerance


def is_horizontal_segment(a: Point, b: Point) -> bool:
    """True when the segment runs along x (ties count as horizontal)."""
    return abs(a.y - b.y) <= abs(a.x - b.x)


def segment_intersects_rect(
    a: Point, b: Point, rect: Rect, epsilon: float = 1e-6
) -> bool:
    """
    Check whether segment a-b crosses the interior of `rect`.

    The rectangle is shrunk by `epsilon`, so running along an edge does not
    count. Orthogonal segments are tested exactly; a diagonal segment is
    tested by its bounding box, which errs on the side of blocking.
    """
    inner = Rect(
        rect.min_x + epsilon,
        rect.min_y + epsilon,
        rect.max_x - epsilon,
        rect.max_y - epsilon,
    )
    if inner.min_x >= inner.max_x or inner.min_y >= inner.max_y:
        return False

    lo_x, hi_x = min(a.x, b.x), max(a.x, b.x)
    lo_y, hi_y = min(a.y, b.y), max(a.y, b.y)

    if a.y == b.y:
        if not inner.min_y < a.y < inner.max_y:
            return False
        overlap = min(hi_x, inner.max_x) - max(lo_x, inner.min_x)
        return overlap > epsilon or (
            lo_x == hi_x and inner.min_x < lo_x < inner.max_x
        )
    if a.x == b.x:
        if not inner.min_x < a.x < inner.max_x:
            return False
        overlap = min(hi_y, inner.max_y) - max(lo_y, inner.min_y)
        return overlap > epsilon

    return Rect(lo_x, lo_y, hi_x, hi_y).intersects(inner)


def segment_hits_any(
    a: Point, b: Point, rects: Iterable[Rect], epsilon: float = 1e-6
) -> bool:
    return any(segment_intersects_rect(a, b, r, epsilon) for r in rects)


def path_intersects_rects(
    points: Sequence[Point], rects: Sequence[Rect], epsilon: float = 1e-6
) -> bool:
    for i in range(1, len(points)):
        if segment_hits_any(points[i - 1], points[i], rects, epsilon):
            return True
    return False


def has_diagonal_segments(points: Sequence[Point], tolerance: float = 0.0) -> bool:
    for i in range(1, len(points)):
        if not is_axis_aligned(points[i - 1], points[i], tolerance):
            return True
    return False


def segments_collinear(a: Point, b: Point, c: Point, tolerance: float = 0.0) -> bool:
    """True if a-b and b-c lie on one axis line (direction is ignored)."""
    same_x = abs(a.x - b.x) <= tolerance and abs(b.x - c.x) <= tolerance
    same_y = abs(a.y - b.y) <= tolerance and abs(b.y - c.y) <= tolerance
    return same_x or same_y


def dedupe_points(points: Sequence[Point], tolerance: float = 0.0) -> List[Point]:
    """Drop consecutive points closer than `tolerance`. Endpoints survive."""
    if not points:
        return []
    result = [points[0]]
    for point in points[1:]:
        if not points_close(point, result[-1], tolerance):
            result.append(point)
    if len(points) > 1 and result[-1] != points[-1]:
        if len(result) > 1:
            result[-1] = points[-1]
        else:
            result.append(points[-1])
    return result


def corner_points(points: Sequence[Point], tolerance: float = 0.0) -> List[Point]:
    """Keep only the first, last and true corner points."""
    return simplify_path(points, set(), tolerance)


def simplify_path(
    points: Sequence[Point],
    pinned: Set[Point],
    tolerance: float = 0.0,
) -> List[Point]:
    """
    Remove duplicate and collinear interior points.

    Points in `pinned` are never removed, so fixed segment endpoints keep
    their positions in the list.
    """
    cleaned = dedupe_points(points, tolerance)
    if len(cleaned) < 3:
        return cleaned

    result = [cleaned[0]]
    for i in range(1, len(cleaned) - 1):
        point = cleaned[i]
        if point not in pinned and segments_collinear(
            result[-1], point, cleaned[i + 1], tolerance
        ):
            continue
        result.append(point)
    result.append(cleaned[-1])
    return result


def remove_short_segments(
    points: Sequence[Point], tolerance: float
) -> List[Point]:
    """
    Collapse interior segments shorter than `tolerance`.

    A short jog is removed by sliding the neighbouring segment onto the jog's
    start, so the path stays orthogonal. Segments touching the first or last
    point are left alone.
    """
    result = list(points)
    if len(result) < 4:
        return result

    i = 1
    while i < len(result) - 2:
        a, b = result[i], result[i + 1]
        length = manhattan(a, b)
        if length >= tolerance or length == 0:
            i += 1
            continue

        horizontal = is_horizontal_segment(a, b)
        if i + 2 < len(result) - 1:
            # slide the following segment back onto a
            nxt = result[i + 2]
            if horizontal:
                result[i + 2] = Point(a.x, nxt.y)
            else:
                result[i + 2] = Point(nxt.x, a.y)
            del result[i + 1]
        elif i - 1 > 0:
            prev = result[i - 1]
            if horizontal:
                result[i - 1] = Point(b.x, prev.y)
            else:
                result[i - 1] = Point(prev.x, b.y)
            del result[i]
        else:
            i += 1
            continue
        if len(result) < 4:
            break
    return result


def ensure_orthogonal(points: Sequence[Point], prefer_horizontal: bool = True) -> List[Point]:
    """Insert an elbow wherever two consecutive points are not aligned."""
    if not points:
        return []
    result = [points[0]]
    for point in points[1:]:
        prev = result[-1]
        if not is_axis_aligned(prev, point):
            if prefer_horizontal:
                result.append(Point(point.x, prev.y))
            else:
                result.append(Point(prev.x, point.y))
        result.append(point)
    return result


def direct_elbow_path(
    start: Point, end: Point, prefer_horizontal: bool
) -> List[Point]:
    """Single-bend path; the first leg runs horizontally if requested."""
    if is_axis_aligned(start, end):
        return dedupe_points([start, end])
    if prefer_horizontal:
        corner = Point(end.x, start.y)
    else:
        corner = Point(start.x, end.y)
    return [start, corner, end]


def clamp_point(point: Point, limit: float) -> Point:
    return Point(max(-limit, min(limit, point.x)), max(-limit, min(limit, point.y)))


# =============================================================================
# Bounds helpers used for bindings
# =============================================================================


def heading_for_point_on_bounds(bounds: Rect, point: Point) -> Heading:
    """
    Classify which side of `bounds` a point faces.

    The plane is split into four triangular zones by the lines running from
    the centre through the corners. Diagonals resolve in the order up,
    right, down, left.
    """
    rect = bounds.normalized()
    center = rect.center
    half_w = max(rect.width / 2, 1e-9)
    half_h = max(rect.height / 2, 1e-9)
    u = (point.x - center.x) / half_w
    v = (point.y - center.y) / half_h

    if v <= -abs(u):
        return Heading.UP
    if u >= abs(v):
        return Heading.RIGHT
    if v >= abs(u):
        return Heading.DOWN
    return Heading.LEFT


def point_on_edge(bounds: Rect, heading: Heading, point: Point) -> Point:
    """Project `point` onto the edge of `bounds` facing `heading`."""
    rect = bounds.normalized()
    if heading is Heading.RIGHT:
        return Point(rect.max_x, min(max(point.y, rect.min_y), rect.max_y))
    if heading is Heading.LEFT:
        return Point(rect.min_x, min(max(point.y, rect.min_y), rect.max_y))
    if heading is Heading.DOWN:
        return Point(min(max(point.x, rect.min_x), rect.max_x), rect.max_y)
    return Point(min(max(point.x, rect.min_x), rect.max_x), rect.min_y)


def nearest_point_on_bounds(bounds: Rect, point: Point) -> Point:
    """Closest point on the boundary of `bounds`."""
    rect = bounds.normalized()
    if not rect.contains(point, strict=True):
        return Point(
            min(max(point.x, rect.min_x), rect.max_x),
            min(max(point.y, rect.min_y), rect.max_y),
        )
    distances = {
        Heading.LEFT: point.x - rect.min_x,
        Heading.RIGHT: rect.max_x - point.x,
        Heading.UP: point.y - rect.min_y,
        Heading.DOWN: rect.max_y - point.y,
    }
    side = min(distances, key=lambda h: distances[h])
    return point_on_edge(rect, side, point)


def ray_cast_to_bounds(
    bounds: Rect, origin: Point, direction: Heading
) -> Optional[Point]:
    """
    First boundary point hit by a ray from `origin` along `direction`.

    Returns None when the ray misses the rectangle.
    """
    rect = bounds.normalized()
    if direction.is_horizontal:
        if not rect.min_y <= origin.y <= rect.max_y:
            return None
        edges = sorted((rect.min_x, rect.max_x), key=lambda x: x * direction.dx)
        for x in edges:
            if (x - origin.x) * direction.dx >= 0:
                return Point(x, origin.y)
        return None

    if not rect.min_x <= origin.x <= rect.max_x:
        return None
    edges = sorted((rect.min_y, rect.max_y), key=lambda y: y * direction.dy)
    for y in edges:
        if (y - origin.y) * direction.dy >= 0:
            return Point(origin.x, y)
    return None
