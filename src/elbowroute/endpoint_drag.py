"""
Endpoint drag handling for paths with fixed segments.

When only one endpoint moves, the path is rerouted between that endpoint and
the nearest fixed segment on its side; everything beyond that segment is
kept exactly as it was.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .config import RoutingConfig
from .fixed_segments import (
    apply_fixed_segments,
    axes_preserved,
    normalize_fixed_path,
    pinnable_indices,
    segment_at,
    shift_fixed_segments,
    sync_fixed_segments,
)
from .geometry import corner_points, has_diagonal_segments, is_horizontal_segment
from .models import BindingRef, FixedSegment, Heading, Point, RouteRequest
from .router import route
from .tracer import RouteTrace


@dataclass
class DragContext:
    """Everything the drag handler needs about the current edit (world space)."""

    points: List[Point]
    previous_points: List[Point]
    fixed: List[FixedSegment]
    start_binding: Optional[BindingRef]
    end_binding: Optional[BindingRef]
    start_arrowhead: bool
    end_arrowhead: bool


def anchor_fallback_path(
    anchor: Point, target: Point, away: Heading, padding: float
) -> List[Point]:
    """
    Path from `anchor` to `target` whose first leg continues along `away`.

    The first leg runs at least `padding` along the fixed segment's axis,
    then the path turns across and meets the target.
    """
    if away.is_horizontal:
        along = (anchor.x + target.x) / 2
        limit = anchor.x + away.dx * padding
        along = max(along, limit) if away.dx > 0 else min(along, limit)
        travel = Point(along, anchor.y)
        turn = Point(along, target.y)
    else:
        along = (anchor.y + target.y) / 2
        limit = anchor.y + away.dy * padding
        along = max(along, limit) if away.dy > 0 else min(along, limit)
        travel = Point(anchor.x, along)
        turn = Point(target.x, along)
    return corner_points([anchor, travel, turn, target])


def _segment_valid(points: Sequence[Point], segment: FixedSegment, original: FixedSegment) -> bool:
    if segment.index not in pinnable_indices(len(points)):
        return False
    a, b = segment_at(points, segment.index)
    if a == b or is_horizontal_segment(a, b) != original.is_horizontal:
        return False
    return segment.direction is original.direction


def _validate(
    points: Sequence[Point],
    before: Sequence[FixedSegment],
    after: Sequence[FixedSegment],
    active: FixedSegment,
    active_after: FixedSegment,
    tolerance: float,
) -> bool:
    if len(points) < 2 or has_diagonal_segments(points):
        return False
    if not axes_preserved(before, after, tolerance):
        return False
    return _segment_valid(points, active_after, active)


def _drag_end(
    ctx: DragContext,
    config: RoutingConfig,
    trace: Optional[RouteTrace],
) -> Optional[Tuple[List[Point], List[FixedSegment]]]:
    active = ctx.fixed[-1]
    anchor_index = active.index - 1
    prefix = ctx.previous_points[: anchor_index + 1]
    anchor = prefix[-1]
    new_end = ctx.points[-1]

    routed = route(
        RouteRequest(
            start=anchor,
            end=new_end,
            end_binding=ctx.end_binding,
            start_arrowhead=False,
            end_arrowhead=ctx.end_arrowhead,
            start_heading=active.direction,
            fixed_segments=(active,),
        ),
        config,
    ).points
    candidates = [routed, anchor_fallback_path(anchor, new_end, active.direction, config.direction_fix_padding)]

    for label, span in zip(("reroute", "anchor_fallback"), candidates):
        if not span or span[0] != anchor:
            continue
        stitched = prefix[:-1] + list(span)
        after = sync_fixed_segments(ctx.fixed, stitched)
        if len(after) == len(ctx.fixed) and _validate(
            stitched, ctx.fixed, after, active, after[-1], config.dedup_threshold
        ):
            if trace is not None:
                trace.add_stage("drag_end", {"strategy": label, "anchor_index": anchor_index}, stitched)
            return stitched, after
    return None


def _drag_start(
    ctx: DragContext,
    config: RoutingConfig,
    trace: Optional[RouteTrace],
) -> Optional[Tuple[List[Point], List[FixedSegment]]]:
    active = ctx.fixed[0]
    anchor_index = active.index
    suffix = ctx.previous_points[anchor_index:]
    anchor = suffix[0]
    new_start = ctx.points[0]

    routed = route(
        RouteRequest(
            start=new_start,
            end=anchor,
            start_binding=ctx.start_binding,
            start_arrowhead=ctx.start_arrowhead,
            end_arrowhead=False,
            end_heading=active.direction.opposite,
            fixed_segments=(active,),
        ),
        config,
    ).points
    backwards = anchor_fallback_path(
        anchor, new_start, active.direction.opposite, config.direction_fix_padding
    )
    candidates = [routed, list(reversed(backwards))]

    for label, span in zip(("reroute", "anchor_fallback"), candidates):
        if not span or span[-1] != anchor:
            continue
        stitched = list(span[:-1]) + suffix
        delta = len(span) - 1 - anchor_index
        after = sync_fixed_segments(shift_fixed_segments(ctx.fixed, -1, delta), stitched)
        if len(after) == len(ctx.fixed) and _validate(
            stitched, ctx.fixed, after, active, after[0], config.dedup_threshold
        ):
            if trace is not None:
                trace.add_stage("drag_start", {"strategy": label, "anchor_index": anchor_index}, stitched)
            return stitched, after
    return None


def snap_terminal_neighbors(
    points: Sequence[Point], previous: Sequence[Point]
) -> List[Point]:
    """
    Keep the first and last segments orthogonal after endpoints moved.

    The neighbour of a moved endpoint follows it along the axis the terminal
    segment had before, which leaves the next segment's axis untouched.
    """
    result = list(points)
    if len(result) < 3 or len(previous) < 2:
        return result
    if is_horizontal_segment(previous[0], previous[1]):
        result[1] = Point(result[1].x, result[0].y)
    else:
        result[1] = Point(result[0].x, result[1].y)
    if is_horizontal_segment(previous[-2], previous[-1]):
        result[-2] = Point(result[-2].x, result[-1].y)
    else:
        result[-2] = Point(result[-1].x, result[-2].y)
    return result


def drag_endpoints(
    ctx: DragContext,
    start_active: bool,
    end_active: bool,
    config: RoutingConfig,
    trace: Optional[RouteTrace] = None,
) -> Optional[Tuple[List[Point], List[FixedSegment]]]:
    """
    Reroute the span next to a dragged endpoint.

    Args:
        ctx: Current points, previous points, fixed segments and bindings.
        start_active: The start endpoint moved or was rebound.
        end_active: The end endpoint moved or was rebound.
        config: Routing configuration.
        trace: Optional trace.

    Returns:
        Tuple of (points, fixed_segments), or None when the local reroute
        could not keep every fixed segment; the caller then reroutes fully.
    """
    if not ctx.fixed or len(ctx.previous_points) != len(ctx.points):
        return None

    if start_active and end_active:
        snapped = snap_terminal_neighbors(ctx.points, ctx.previous_points)
        applied = apply_fixed_segments(snapped, ctx.fixed)
        points, fixed = normalize_fixed_path(applied, sync_fixed_segments(ctx.fixed, applied))
        if has_diagonal_segments(points) or not axes_preserved(ctx.fixed, fixed, config.dedup_threshold):
            return None
        if trace is not None:
            trace.add_stage("drag_both", {"fixed": len(fixed)}, points)
        return points, fixed

    if end_active:
        return _drag_end(ctx, config, trace)
    if start_active:
        return _drag_start(ctx, config, trace)
    return None
