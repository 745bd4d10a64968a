"""
Path post-processing.

Every raw route (A*, direct or fallback) passes through finalize_path()
before it is returned, so callers always see a clean orthogonal polyline.
"""

from typing import List, Sequence, Tuple

from .config import RoutingConfig
from .geometry import (
    clamp_point,
    corner_points,
    dedupe_points,
    ensure_orthogonal,
    has_diagonal_segments,
    is_horizontal_segment,
    remove_short_segments,
)
from .models import Point


def finalize_path(
    points: Sequence[Point], config: RoutingConfig
) -> Tuple[List[Point], bool]:
    """
    Clean a raw route.

    Steps: insert elbows for diagonal steps, drop collinear points (this also
    collapses backtracks), remove interior segments shorter than the dedup
    threshold and clamp coordinates into the configured range.

    Returns:
        Tuple of (points, repaired). `repaired` is set when a diagonal had to
        be fixed or a coordinate was clamped.
    """
    result = dedupe_points(points)
    repaired = False

    if has_diagonal_segments(result):
        prefer_horizontal = len(result) < 2 or is_horizontal_segment(result[0], result[1])
        result = ensure_orthogonal(result, prefer_horizontal)
        repaired = True

    result = corner_points(result)
    result = remove_short_segments(result, config.dedup_threshold)
    result = corner_points(result)

    clamped = [clamp_point(p, config.max_position) for p in result]
    if clamped != result:
        repaired = True
        clamped = corner_points(clamped)
    return clamped, repaired
