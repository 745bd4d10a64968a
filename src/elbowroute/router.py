"""
Routing pipeline.

route() resolves the endpoints, builds the obstacle layout, tries a straight
segment, falls back to sparse-grid A* and finally to a deterministic elbow,
and post-processes whatever came out. The status of the returned path tells
the caller which of these produced it.
"""

from typing import List, Optional

from .config import DEFAULT_CONFIG, RoutingConfig
from .direct import try_direct_route
from .endpoints import resolve_endpoints
from .geometry import manhattan
from .grid import astar, build_grid, fallback_path, respects_headings
from .models import (
    Point,
    ResolvedEndpoint,
    RoutedPath,
    RouteRequest,
    RouteStatus,
    require_finite,
)
from .obstacles import build_obstacle_layout
from .perpendicular import enforce_perpendicular
from .postprocess import finalize_path
from .tracer import RouteTrace


def validate_request(request: RouteRequest) -> None:
    """Fail fast on NaN or infinite input."""
    require_finite("start", request.start)
    require_finite("end", request.end)
    if request.start_binding is not None:
        require_finite("start_binding", request.start_binding)
    if request.end_binding is not None:
        require_finite("end_binding", request.end_binding)
    for i, segment in enumerate(request.fixed_segments):
        require_finite(f"fixed_segments[{i}]", segment)


def _record(trace: Optional[RouteTrace], name: str, data: dict, points=None) -> None:
    if trace is not None:
        trace.add_stage(name, data, points)


def route(
    request: RouteRequest,
    config: Optional[RoutingConfig] = None,
    trace: Optional[RouteTrace] = None,
) -> RoutedPath:
    """
    Route an elbow connector.

    Args:
        request: Endpoints and bindings (world space).
        config: Tuning values; defaults to DEFAULT_CONFIG.
        trace: Optional trace that receives one stage per pipeline step.

    Returns:
        RoutedPath with an orthogonal point list.

    Raises:
        ContractViolation: If the request contains non-finite coordinates.
    """
    config = config or DEFAULT_CONFIG
    validate_request(request)

    start, end = resolve_endpoints(request, config)
    _record(
        trace,
        "endpoints",
        {
            "start": start.position,
            "start_heading": start.heading.name,
            "start_bound": start.is_bound,
            "end": end.position,
            "end_heading": end.heading.name,
            "end_bound": end.is_bound,
        },
    )
    status = RouteStatus.DEGRADED if start.degraded or end.degraded else RouteStatus.OK

    if (
        not start.constrained
        and not end.constrained
        and manhattan(start.position, end.position) < config.min_arrow_length
    ):
        points, repaired = finalize_path(fallback_path(start, end, config), config)
        _record(trace, "short_route", {"repaired": repaired}, points)
        return _package(points, start, end, status, repaired, trace)

    layout = build_obstacle_layout(start, end, config)
    _record(
        trace,
        "layout",
        {
            "start_obstacle": layout.start_obstacle.rect,
            "end_obstacle": layout.end_obstacle.rect,
            "common_bounds": layout.common_bounds,
            "start_exit": layout.start_exit,
            "end_exit": layout.end_exit,
            "split": layout.split,
        },
    )

    raw: List[Point]
    direct = try_direct_route(start, end, layout, config)
    _record(trace, "direct", {"found": direct is not None}, direct)
    if direct is not None:
        raw = direct
    else:
        grid = build_grid(layout, start, end, config, request.fixed_segments)
        _record(
            trace,
            "grid",
            {
                "columns": len(grid.xs),
                "rows": len(grid.ys),
                "edges": grid.graph.number_of_edges(),
            },
        )
        result = astar(
            grid,
            layout.start_exit,
            layout.end_exit,
            start.heading,
            start.constrained,
            end.heading,
            end.constrained,
            config,
            start_leg=layout.start_exit != start.position,
            end_leg=layout.end_exit != end.position,
        )
        _record(
            trace,
            "astar",
            {
                "found": result.points is not None,
                "expansions": result.expansions,
                "exhausted": result.exhausted,
            },
            result.points,
        )
        if result.points is None:
            raw = fallback_path(start, end, config, layout.blocking_rects)
            status = RouteStatus.FALLBACK
            _record(trace, "fallback", {}, raw)
        else:
            raw = [start.position] + result.points + [end.position]

    points, repaired = finalize_path(raw, config)
    _record(trace, "postprocess", {"repaired": repaired}, points)

    if (start.is_bound or end.is_bound) and not respects_headings(points, start, end):
        points, _, changed = enforce_perpendicular(
            points,
            [],
            request.start_binding if start.is_bound else None,
            request.end_binding if end.is_bound else None,
            start.arrowhead_gap,
            end.arrowhead_gap,
            config,
        )
        repaired = repaired or changed
        _record(trace, "perpendicular", {"changed": changed}, points)

    return _package(points, start, end, status, repaired, trace)


def _package(
    points: List[Point],
    start: ResolvedEndpoint,
    end: ResolvedEndpoint,
    status: RouteStatus,
    repaired: bool,
    trace: Optional[RouteTrace],
) -> RoutedPath:
    if repaired and status is RouteStatus.OK:
        status = RouteStatus.DEGRADED
    _record(trace, "result", {"status": status.value, "points": len(points)}, points)
    return RoutedPath(
        points=points,
        resolved_start=start,
        resolved_end=end,
        status=status,
    )
