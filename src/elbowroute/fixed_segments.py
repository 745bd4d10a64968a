"""
Fixed segment bookkeeping.

A fixed segment pins segment `index` (points[index - 1] -> points[index]) to
its axis. Only interior segments can be pinned: the first and last segments
belong to the endpoints, so valid indices run from 2 to len(points) - 2.
"""

from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .geometry import is_axis_aligned, is_horizontal_segment, manhattan, segments_collinear
from .models import FixedSegment, Point

FIRST_PINNABLE_INDEX = 2


def pinnable_indices(point_count: int) -> range:
    """Segment indices that may carry a fixed segment."""
    return range(FIRST_PINNABLE_INDEX, point_count - 1)


def segment_at(points: Sequence[Point], index: int) -> Tuple[Point, Point]:
    return points[index - 1], points[index]


def sanitize_fixed_segments(
    fixed: Optional[Iterable[FixedSegment]],
    point_count: int,
    tolerance: float,
) -> List[FixedSegment]:
    """
    Drop invalid fixed segments and sort the rest by index.

    A segment is dropped when its index is not pinnable for `point_count`
    points, when it is not axis aligned, when it is shorter than
    `tolerance`, or when an earlier entry already uses its index.
    """
    if not fixed:
        return []
    valid = pinnable_indices(point_count)
    seen: Set[int] = set()
    result = []
    for segment in fixed:
        if segment.index not in valid or segment.index in seen:
            continue
        if not is_axis_aligned(segment.start, segment.end):
            continue
        if segment.length < tolerance:
            continue
        seen.add(segment.index)
        result.append(segment)
    return sorted(result, key=lambda s: s.index)


def sync_fixed_segments(
    fixed: Sequence[FixedSegment], points: Sequence[Point]
) -> List[FixedSegment]:
    """Re-read start/end of each segment at its current index."""
    valid = pinnable_indices(len(points))
    result = []
    for segment in fixed:
        if segment.index not in valid:
            continue
        start, end = segment_at(points, segment.index)
        result.append(FixedSegment(segment.index, start, end))
    return result


def _matches(segment: FixedSegment, a: Point, b: Point, tolerance: float) -> bool:
    if a == b or not is_axis_aligned(a, b):
        return False
    if is_horizontal_segment(a, b) != segment.is_horizontal:
        return False
    axis = a.y if segment.is_horizontal else a.x
    return abs(axis - segment.axis_value) <= tolerance


def reindex_fixed_segments(
    fixed: Sequence[FixedSegment],
    points: Sequence[Point],
    tolerance: float,
) -> List[FixedSegment]:
    """
    Find each fixed segment again after the point list changed shape.

    A segment matches a path segment with the same orientation whose axis
    coordinate is within `tolerance`. The original index wins if it still
    matches; otherwise the closest matching index is used. Segments without
    a match are dropped.
    """
    used: Set[int] = set()
    result = []
    candidates = list(pinnable_indices(len(points)))
    for segment in sorted(fixed, key=lambda s: s.index):
        matching = [
            i
            for i in candidates
            if i not in used and _matches(segment, *segment_at(points, i), tolerance)
        ]
        if not matching:
            continue
        index = min(matching, key=lambda i: (abs(i - segment.index), i))
        used.add(index)
        start, end = segment_at(points, index)
        result.append(FixedSegment(index, start, end))
    return sorted(result, key=lambda s: s.index)


def apply_fixed_segments(
    points: Sequence[Point], fixed: Sequence[FixedSegment]
) -> List[Point]:
    """Move both points of every fixed segment onto its axis value."""
    result = list(points)
    for segment in fixed:
        if segment.index not in pinnable_indices(len(result)):
            continue
        a, b = segment_at(result, segment.index)
        axis = segment.axis_value
        if segment.is_horizontal:
            result[segment.index - 1] = Point(a.x, axis)
            result[segment.index] = Point(b.x, axis)
        else:
            result[segment.index - 1] = Point(axis, a.y)
            result[segment.index] = Point(axis, b.y)
    return result


def pinned_points(
    points: Sequence[Point], fixed: Sequence[FixedSegment]
) -> Set[Point]:
    """Points that belong to a fixed segment and must survive simplification."""
    pinned: Set[Point] = set()
    for segment in fixed:
        if 1 <= segment.index < len(points):
            pinned.update(segment_at(points, segment.index))
    return pinned


def shift_fixed_segments(
    fixed: Sequence[FixedSegment], after: int, count: int
) -> List[FixedSegment]:
    """Shift indices of segments after point `after` when `count` points are inserted there."""
    return [
        FixedSegment(s.index + count, s.start, s.end) if s.index > after else s
        for s in fixed
    ]


def reverse_fixed_segments(
    fixed: Sequence[FixedSegment], point_count: int
) -> List[FixedSegment]:
    """Fixed segments of the reversed path."""
    return sorted(
        (FixedSegment(point_count - s.index, s.end, s.start) for s in fixed),
        key=lambda s: s.index,
    )


def normalize_fixed_path(
    points: Sequence[Point],
    fixed: Sequence[FixedSegment],
) -> Tuple[List[Point], List[FixedSegment]]:
    """
    Remove duplicate points and merge collinear segments.

    Fixed flags travel with the segments: merging a fixed segment with a
    collinear neighbour yields one fixed segment. Fixed segments that end up
    on the first or last segment are released.
    """
    if len(points) < 2:
        return list(points), []

    flagged = {s.index for s in fixed}
    result = [points[0]]
    seg_fixed: List[bool] = []
    last = len(points) - 1

    for k in range(1, len(points)):
        point = points[k]
        flag = k in flagged
        if point == result[-1]:
            if k == last and len(result) > 1:
                result[-1] = point
            continue
        if len(result) >= 2 and segments_collinear(result[-2], result[-1], point):
            result[-1] = point
            seg_fixed[-1] = seg_fixed[-1] or flag
            continue
        result.append(point)
        seg_fixed.append(flag)

    if len(result) == 1:
        result.append(points[-1])
        seg_fixed.append(False)

    valid = pinnable_indices(len(result))
    new_fixed = [
        FixedSegment(k + 1, result[k], result[k + 1])
        for k, flag in enumerate(seg_fixed)
        if flag and (k + 1) in valid
    ]
    return result, new_fixed


def map_fixed_segments_to_baseline(
    fixed: Sequence[FixedSegment], baseline: Sequence[Point]
) -> Tuple[List[Point], List[FixedSegment]]:
    """
    Transfer fixed segments onto a freshly routed path.

    Each fixed segment claims the unused baseline segment with the same
    orientation closest to its old index, and the baseline is moved onto the
    segment's axis value. Segments without a same-orientation slot are
    dropped.
    """
    points = list(baseline)
    used: Set[int] = set()
    mapped: List[FixedSegment] = []
    candidates = list(pinnable_indices(len(points)))
    for segment in sorted(fixed, key=lambda s: s.index):
        options = [
            i
            for i in candidates
            if i not in used
            and is_horizontal_segment(*segment_at(points, i)) == segment.is_horizontal
        ]
        if not options:
            continue
        index = min(options, key=lambda i: (abs(i - segment.index), i))
        used.add(index)
        mapped.append(FixedSegment(index, *segment_at(points, index)))
        points = apply_fixed_segments(points, [_with_axis(index, points, segment)])
    return normalize_fixed_path(points, sync_fixed_segments(mapped, points))


def _with_axis(index: int, points: Sequence[Point], segment: FixedSegment) -> FixedSegment:
    a, b = segment_at(points, index)
    if segment.is_horizontal:
        return FixedSegment(index, Point(a.x, segment.axis_value), Point(b.x, segment.axis_value))
    return FixedSegment(index, Point(segment.axis_value, a.y), Point(segment.axis_value, b.y))


def fixed_segments_equal(
    a: Optional[Sequence[FixedSegment]],
    b: Optional[Sequence[FixedSegment]],
    tolerance: float = 0.0,
) -> bool:
    """Compare two fixed segment lists by index and geometry."""
    a = list(a or [])
    b = list(b or [])
    if len(a) != len(b):
        return False
    for x, y in zip(a, b):
        if x.index != y.index:
            return False
        if manhattan(x.start, y.start) > tolerance or manhattan(x.end, y.end) > tolerance:
            return False
    return True


def axes_preserved(
    before: Sequence[FixedSegment],
    after: Sequence[FixedSegment],
    tolerance: float,
) -> bool:
    """True if `after` keeps every segment of `before` on the same axis."""
    if len(before) != len(after):
        return False
    for old, new in zip(before, after):
        if old.is_horizontal != new.is_horizontal:
            return False
        if abs(old.axis_value - new.axis_value) > tolerance:
            return False
    return True
