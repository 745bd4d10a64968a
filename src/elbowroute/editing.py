"""
Edit pipeline for elbow connectors.

compute_edit() takes the points and fixed segments the host stored after the
previous edit, plus whatever changed (an endpoint, a binding, the fixed
segment list), and returns the updated points and fixed segments. Each call
picks exactly one mode:

    ROUTE_FRESH     no fixed segments; route from scratch
    RELEASE         fixed segments were removed; reroute the freed span
    DRAG_ENDPOINTS  an endpoint moved or was rebound
    APPLY_FIXED     fixed segments moved; re-impose their axes

Anything that fails validation falls back to ROUTE_FRESH, with the fixed
segments carried over onto the fresh route where they still fit.
"""

from typing import List, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, RoutingConfig
from .endpoint_drag import DragContext, drag_endpoints, snap_terminal_neighbors
from .endpoints import binding_is_usable, bound_heading, bound_position
from .fixed_segments import (
    apply_fixed_segments,
    axes_preserved,
    fixed_segments_equal,
    map_fixed_segments_to_baseline,
    normalize_fixed_path,
    pinned_points,
    reindex_fixed_segments,
    sanitize_fixed_segments,
    shift_fixed_segments,
    sync_fixed_segments,
)
from .geometry import direct_elbow_path, has_diagonal_segments, simplify_path
from .models import (
    BindingChange,
    BindingRef,
    ContractViolation,
    EditMode,
    EditRequest,
    EditResult,
    EndpointOverride,
    FixedSegment,
    Point,
    RouteRequest,
    require_finite,
)
from .perpendicular import enforce_perpendicular
from .router import route
from .tracer import RouteTrace


class _EditState:
    """World-space working copy of one edit call."""

    def __init__(
        self,
        request: EditRequest,
        config: RoutingConfig,
        trace: Optional[RouteTrace],
    ):
        self.config = config
        self.trace = trace
        self.origin = request.origin
        self.start_arrowhead = request.start_arrowhead
        self.end_arrowhead = request.end_arrowhead

        self.previous_points = [p + self.origin for p in request.previous_points]
        incoming = request.points if request.points is not None else request.previous_points
        points = [p + self.origin for p in incoming]

        self.start_binding, start_point, self.start_rebound = _apply_override(
            request.start_override, request.start_binding, points[0], self.origin
        )
        self.end_binding, end_point, self.end_rebound = _apply_override(
            request.end_override, request.end_binding, points[-1], self.origin
        )
        points[0] = self._bound_or(self.start_binding, start_point, request.start_arrowhead)
        points[-1] = self._bound_or(self.end_binding, end_point, request.end_arrowhead)
        self.points = points

        tolerance = config.dedup_threshold
        self.previous_fixed = sanitize_fixed_segments(
            _to_world(request.previous_fixed_segments, self.origin),
            len(self.previous_points),
            tolerance,
        )
        incoming_fixed = (
            request.fixed_segments
            if request.fixed_segments is not None
            else request.previous_fixed_segments
        )
        self.fixed = sanitize_fixed_segments(
            _to_world(incoming_fixed, self.origin), len(self.points), tolerance
        )
        self.release_requested = (
            request.fixed_segments is not None
            and len(self.fixed) < len(self.previous_fixed)
        )

    def _bound_or(
        self, binding: Optional[BindingRef], point: Point, has_arrowhead: bool
    ) -> Point:
        if not binding_is_usable(binding):
            return point
        gap = self.config.binding_gap(has_arrowhead)
        return bound_position(binding, bound_heading(binding), gap)

    def record(self, name: str, data: dict, points=None) -> None:
        if self.trace is not None:
            self.trace.add_stage(name, data, points)

    def route_request(
        self,
        start: Point,
        end: Point,
        bound_start: bool = True,
        bound_end: bool = True,
        fixed: Sequence[FixedSegment] = (),
    ) -> RouteRequest:
        return RouteRequest(
            start=start,
            end=end,
            start_binding=self.start_binding if bound_start else None,
            end_binding=self.end_binding if bound_end else None,
            start_arrowhead=self.start_arrowhead,
            end_arrowhead=self.end_arrowhead,
            fixed_segments=tuple(fixed),
        )

    @property
    def start_gap(self) -> float:
        return self.config.binding_gap(self.start_arrowhead)

    @property
    def end_gap(self) -> float:
        return self.config.binding_gap(self.end_arrowhead)


def _apply_override(
    override: Optional[EndpointOverride],
    binding: Optional[BindingRef],
    point: Point,
    origin: Point,
) -> Tuple[Optional[BindingRef], Point, bool]:
    """Return (binding, world point, rebound) after an endpoint override."""
    if override is None:
        return binding, point, False
    if isinstance(override, BindingChange):
        new_point = override.point + origin if override.point is not None else point
        return override.binding, new_point, override.binding != binding
    return binding, override + origin, False


def _to_world(
    fixed: Optional[Sequence[FixedSegment]], origin: Point
) -> List[FixedSegment]:
    return [FixedSegment(s.index, s.start + origin, s.end + origin) for s in fixed or []]


def _to_local(
    fixed: Sequence[FixedSegment], origin: Point
) -> Optional[List[FixedSegment]]:
    if not fixed:
        return None
    return [FixedSegment(s.index, s.start - origin, s.end - origin) for s in fixed]


def validate_edit_request(request: EditRequest) -> None:
    """Fail fast on malformed edit requests."""
    if len(request.previous_points) < 2:
        raise ContractViolation("at least two points are required", "previous_points")
    if request.points is not None and len(request.points) < 2:
        raise ContractViolation("at least two points are required", "points")
    require_finite("origin", request.origin)
    for name in ("previous_points", "points"):
        for i, point in enumerate(getattr(request, name) or []):
            require_finite(f"{name}[{i}]", point)
    for name in ("previous_fixed_segments", "fixed_segments"):
        for i, segment in enumerate(getattr(request, name) or []):
            require_finite(f"{name}[{i}]", segment)
    for name in ("start_binding", "end_binding"):
        binding = getattr(request, name)
        if binding is not None:
            require_finite(name, binding)
    for name in ("start_override", "end_override"):
        override = getattr(request, name)
        if isinstance(override, Point):
            require_finite(name, override)
        elif isinstance(override, BindingChange):
            if override.point is not None:
                require_finite(f"{name}.point", override.point)
            if override.binding is not None:
                require_finite(f"{name}.binding", override.binding)


def select_edit_mode(
    has_fixed: bool,
    release_requested: bool,
    binding_changed: bool,
    points_changed: bool,
    fixed_changed: bool,
) -> EditMode:
    """Pick the edit mode for one call."""
    if not has_fixed:
        return EditMode.ROUTE_FRESH
    if release_requested:
        return EditMode.RELEASE
    if binding_changed or (points_changed and not fixed_changed):
        return EditMode.DRAG_ENDPOINTS
    return EditMode.APPLY_FIXED


# =============================================================================
# Modes
# =============================================================================


def _route_fresh(state: _EditState) -> Tuple[List[Point], List[FixedSegment]]:
    routed = route(state.route_request(state.points[0], state.points[-1]), state.config)
    state.record("route_fresh", {"status": routed.status.value}, routed.points)
    return list(routed.points), []


def _route_fresh_keeping_fixed(
    state: _EditState, fixed: Sequence[FixedSegment]
) -> Tuple[List[Point], List[FixedSegment]]:
    """Fresh route with the fixed segments mapped onto it where possible."""
    points, _ = _route_fresh(state)
    if not fixed:
        return points, []
    mapped_points, mapped = map_fixed_segments_to_baseline(fixed, points)
    if has_diagonal_segments(mapped_points):
        return points, []
    state.record("baseline_mapping", {"kept": len(mapped), "requested": len(fixed)}, mapped_points)
    return mapped_points, mapped


def _apply_fixed(state: _EditState) -> Tuple[List[Point], List[FixedSegment]]:
    reference = (
        state.previous_points
        if len(state.previous_points) == len(state.points)
        else state.points
    )
    points = snap_terminal_neighbors(state.points, reference)
    points = apply_fixed_segments(points, state.fixed)
    synced = sync_fixed_segments(state.fixed, points)
    simplified = simplify_path(points, pinned_points(points, synced))
    fixed = reindex_fixed_segments(synced, simplified, state.config.dedup_threshold)
    points, fixed = normalize_fixed_path(simplified, fixed)
    state.record("apply_fixed", {"fixed": len(fixed)}, points)
    return points, fixed


def _route_released_span(
    state: _EditState,
    start: Point,
    end: Point,
    bound_start: bool,
    bound_end: bool,
    before: Optional[FixedSegment],
    after: Optional[FixedSegment],
    remaining: Sequence[FixedSegment],
) -> List[Point]:
    start_bound = bound_start and binding_is_usable(state.start_binding)
    end_bound = bound_end and binding_is_usable(state.end_binding)
    if not start_bound and not end_bound and (before is None) != (after is None):
        # turn off the neighbour's axis; running along it would move its fixed points
        prefer_horizontal = (
            not before.is_horizontal if before is not None else after.is_horizontal
        )
        return direct_elbow_path(start, end, prefer_horizontal)

    request = state.route_request(start, end, start_bound, end_bound, remaining)
    return list(route(request, state.config).points)


def _release(state: _EditState) -> Optional[Tuple[List[Point], List[FixedSegment]]]:
    remaining_indices = {s.index for s in state.fixed}
    removed = [s.index for s in state.previous_fixed if s.index not in remaining_indices]
    if not removed:
        return None

    points = state.points
    last = len(points) - 1
    before = [s for s in state.fixed if s.index < min(removed)]
    after = [s for s in state.fixed if s.index > max(removed)]
    previous_fixed = before[-1] if before else None
    next_fixed = after[0] if after else None

    start_index = previous_fixed.index if previous_fixed else 0
    end_index = next_fixed.index - 1 if next_fixed else last
    if end_index <= start_index:
        return None

    span = _route_released_span(
        state,
        points[start_index],
        points[end_index],
        start_index == 0,
        end_index == last,
        previous_fixed,
        next_fixed,
        state.fixed,
    )
    if len(span) < 2 or (span[0] != points[start_index] and start_index != 0):
        return None
    if span[-1] != points[end_index] and end_index != last:
        return None

    stitched = points[:start_index] + span + points[end_index + 1 :]
    delta = len(span) - (end_index - start_index + 1)
    shifted = shift_fixed_segments(state.fixed, end_index, delta)
    synced = sync_fixed_segments(shifted, stitched)
    result_points, result_fixed = normalize_fixed_path(stitched, synced)
    state.record(
        "release",
        {"removed": removed, "span": (start_index, end_index)},
        result_points,
    )
    if not axes_preserved(state.fixed, result_fixed, state.config.dedup_threshold):
        return None
    return result_points, result_fixed


def _drag(state: _EditState) -> Optional[Tuple[List[Point], List[FixedSegment]]]:
    start_active = state.start_rebound or state.points[0] != state.previous_points[0]
    end_active = state.end_rebound or state.points[-1] != state.previous_points[-1]
    if not start_active and not end_active:
        return _apply_fixed(state)
    ctx = DragContext(
        points=state.points,
        previous_points=state.previous_points,
        fixed=state.fixed,
        start_binding=state.start_binding,
        end_binding=state.end_binding,
        start_arrowhead=state.start_arrowhead,
        end_arrowhead=state.end_arrowhead,
    )
    return drag_endpoints(ctx, start_active, end_active, state.config, state.trace)


def _is_valid(points: Sequence[Point]) -> bool:
    return len(points) >= 2 and not has_diagonal_segments(points)


def compute_edit(
    request: EditRequest,
    config: Optional[RoutingConfig] = None,
    trace: Optional[RouteTrace] = None,
) -> EditResult:
    """
    Recompute an elbow path after an edit.

    Args:
        request: Previous state plus overrides. Points are local to
            `request.origin`; bindings are in world space.
        config: Tuning values; defaults to DEFAULT_CONFIG.
        trace: Optional trace that receives the mode and its stages.

    Returns:
        EditResult with local points and the surviving fixed segments
        (None when there are none).

    Raises:
        ContractViolation: If the request is malformed.
    """
    config = config or DEFAULT_CONFIG
    validate_edit_request(request)
    state = _EditState(request, config, trace)
    state.record(
        "sanitize",
        {"previous_fixed": len(state.previous_fixed), "fixed": len(state.fixed)},
    )

    mode = select_edit_mode(
        has_fixed=bool(state.fixed),
        release_requested=state.release_requested,
        binding_changed=state.start_rebound or state.end_rebound,
        points_changed=state.points != state.previous_points,
        fixed_changed=not fixed_segments_equal(
            state.fixed, state.previous_fixed, config.dedup_threshold
        ),
    )
    state.record("edit_mode", {"mode": mode.value})

    notes: List[str] = []
    outcome: Optional[Tuple[List[Point], List[FixedSegment]]]
    if mode is EditMode.ROUTE_FRESH:
        outcome = _route_fresh(state)
    elif mode is EditMode.RELEASE:
        outcome = _release(state)
    elif mode is EditMode.DRAG_ENDPOINTS:
        outcome = _drag(state)
    else:
        outcome = _apply_fixed(state)

    if outcome is None or not _is_valid(outcome[0]):
        notes.append(f"{mode.value} failed validation; rerouted from scratch")
        mode = EditMode.ROUTE_FRESH
        outcome = _route_fresh_keeping_fixed(state, state.fixed)

    points, fixed = outcome
    points, fixed, changed = enforce_perpendicular(
        points,
        fixed,
        state.start_binding,
        state.end_binding,
        state.start_gap,
        state.end_gap,
        config,
    )
    state.record("perpendicular", {"changed": changed}, points)

    if not _is_valid(points):
        notes.append("perpendicular repair failed; rerouted from scratch")
        mode = EditMode.ROUTE_FRESH
        points, fixed = _route_fresh(state)

    fixed = sanitize_fixed_segments(sync_fixed_segments(fixed, points), len(points), 0.0)
    local = [p - state.origin for p in points]
    state.record("edit_result", {"mode": mode.value, "fixed": len(fixed)}, local)
    return EditResult(
        points=local,
        fixed_segments=_to_local(fixed, state.origin),
        mode=mode,
        notes=notes,
    )
