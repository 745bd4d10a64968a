"""
Sparse-grid A* routing.

Only "interesting" coordinates become grid lines: obstacle edges, exit
points, endpoints, the channel between separated obstacles, fixed segment
axes and the search bounds. The grid is a networkx lattice over those lines
with every edge that crosses a blocking obstacle removed. A* then searches
(node, heading) states so that bends can be priced exactly.
"""

import heapq
import itertools
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import networkx as nx

from .config import RoutingConfig
from .geometry import (
    corner_points,
    direct_elbow_path,
    has_diagonal_segments,
    heading_between,
    is_axis_aligned,
    manhattan,
    path_intersects_rects,
    segment_hits_any,
)
from .models import (
    FixedSegment,
    Heading,
    ObstacleLayout,
    Point,
    Rect,
    ResolvedEndpoint,
)

GridNode = Tuple[int, int]
SearchState = Tuple[GridNode, Optional[Heading]]

# Coordinates closer than this collapse into one grid line
COORDINATE_MERGE_EPSILON = 1e-9


@dataclass
class SparseGrid:
    """
    Grid of candidate coordinates.

    Attributes:
        xs: Sorted candidate x coordinates.
        ys: Sorted candidate y coordinates.
        graph: Lattice of (column, row) nodes; edges are valid moves.
        bounds: Search bounds the grid is clipped to.
    """

    xs: List[float]
    ys: List[float]
    graph: nx.Graph
    bounds: Rect

    def position(self, node: GridNode) -> Point:
        return Point(self.xs[node[0]], self.ys[node[1]])

    def node_at(self, point: Point) -> Optional[GridNode]:
        col = _index_of(self.xs, point.x)
        row = _index_of(self.ys, point.y)
        if col is None or row is None:
            return None
        return (col, row)


def _index_of(values: Sequence[float], value: float) -> Optional[int]:
    for i, v in enumerate(values):
        if abs(v - value) <= COORDINATE_MERGE_EPSILON:
            return i
    return None


def _unique_sorted(values: Iterable[float], low: float, high: float) -> List[float]:
    result: List[float] = []
    for v in sorted(values):
        if v < low - COORDINATE_MERGE_EPSILON or v > high + COORDINATE_MERGE_EPSILON:
            continue
        if result and abs(v - result[-1]) <= COORDINATE_MERGE_EPSILON:
            continue
        result.append(v)
    return result


def candidate_coordinates(
    layout: ObstacleLayout,
    start: ResolvedEndpoint,
    end: ResolvedEndpoint,
    fixed_segments: Sequence[FixedSegment] = (),
) -> Tuple[List[float], List[float]]:
    """Collect the candidate grid lines for a routing call."""
    xs = [
        layout.start_exit.x,
        layout.end_exit.x,
        start.position.x,
        end.position.x,
        layout.common_bounds.min_x,
        layout.common_bounds.max_x,
    ]
    ys = [
        layout.start_exit.y,
        layout.end_exit.y,
        start.position.y,
        end.position.y,
        layout.common_bounds.min_y,
        layout.common_bounds.max_y,
    ]

    rects = [o.rect for o in layout.obstacles if o.rect.has_area]
    for rect in rects:
        xs.extend((rect.min_x, rect.max_x))
        ys.extend((rect.min_y, rect.max_y))

    # Channel midlines between obstacles that do not touch
    a, b = (o.rect for o in layout.obstacles)
    if a.max_x < b.min_x:
        xs.append((a.max_x + b.min_x) / 2)
    elif b.max_x < a.min_x:
        xs.append((b.max_x + a.min_x) / 2)
    if a.max_y < b.min_y:
        ys.append((a.max_y + b.min_y) / 2)
    elif b.max_y < a.min_y:
        ys.append((b.max_y + a.min_y) / 2)

    for segment in fixed_segments:
        if segment.is_horizontal:
            ys.append(segment.axis_value)
        else:
            xs.append(segment.axis_value)

    bounds = layout.common_bounds
    return (
        _unique_sorted(xs, bounds.min_x, bounds.max_x),
        _unique_sorted(ys, bounds.min_y, bounds.max_y),
    )


def build_grid(
    layout: ObstacleLayout,
    start: ResolvedEndpoint,
    end: ResolvedEndpoint,
    config: RoutingConfig,
    fixed_segments: Sequence[FixedSegment] = (),
) -> SparseGrid:
    """Build the lattice and drop edges that cross blocking obstacles."""
    xs, ys = candidate_coordinates(layout, start, end, fixed_segments)
    graph = nx.grid_2d_graph(len(xs), len(ys))
    blocking = layout.blocking_rects
    eps = config.intersection_epsilon

    blocked = [
        (u, v)
        for u, v in graph.edges()
        if segment_hits_any(
            Point(xs[u[0]], ys[u[1]]), Point(xs[v[0]], ys[v[1]]), blocking, eps
        )
    ]
    graph.remove_edges_from(blocked)
    return SparseGrid(xs, ys, graph, layout.common_bounds)


def default_bend_penalty(bounds: Rect) -> float:
    """One bend costs more than any straight detour inside `bounds`."""
    return 2 * (bounds.width + bounds.height) + 1


def _estimated_bends(
    pos: Point,
    goal: Point,
    heading: Optional[Heading],
    arrival: Optional[Heading],
) -> int:
    """Lower bound on the bends still needed (0 or 1)."""
    if heading is None or pos == goal:
        return 0
    dx = goal.x - pos.x
    dy = goal.y - pos.y
    if heading.is_horizontal:
        straight_ahead = dy == 0 and dx * heading.dx > 0
    else:
        straight_ahead = dx == 0 and dy * heading.dy > 0
    if arrival is not None:
        return 0 if straight_ahead and heading is arrival else 1
    return 0 if straight_ahead else 1


@dataclass
class SearchResult:
    """Outcome of an A* run."""

    points: Optional[List[Point]]
    expansions: int
    exhausted: bool


def astar(
    grid: SparseGrid,
    start: Point,
    goal: Point,
    start_heading: Heading,
    start_constrained: bool,
    end_heading: Heading,
    end_constrained: bool,
    config: RoutingConfig,
    start_leg: bool = False,
    end_leg: bool = False,
) -> SearchResult:
    """
    Find a minimal-bend orthogonal path between two grid points.

    Args:
        grid: Sparse grid to search.
        start: Start exit point (must be a grid node).
        goal: End exit point (must be a grid node).
        start_heading: Heading of the start endpoint.
        start_constrained: The route must leave the start along
            `start_heading`.
        end_heading: Heading of the end endpoint; the route must arrive
            travelling opposite to it when `end_constrained` is set.
        end_constrained: Whether the arrival direction is enforced.
        config: Routing configuration (bend penalty, budget).
        start_leg: A leg from the endpoint to `start` already travels along
            the heading, so the first grid move may turn (at bend cost).
        end_leg: Same for the leg from `goal` to the end endpoint.

    Returns:
        SearchResult with the node positions, or points=None on failure.
    """
    start_node = grid.node_at(start)
    goal_node = grid.node_at(goal)
    if start_node is None or goal_node is None:
        return SearchResult(None, 0, False)
    if start_node == goal_node:
        return SearchResult([grid.position(start_node)], 0, False)

    penalty = config.bend_penalty
    if penalty is None:
        penalty = default_bend_penalty(grid.bounds)
    arrival = end_heading.opposite if end_constrained else None
    strict_start = start_constrained and not start_leg
    strict_end = end_constrained and not end_leg
    goal_pos = grid.position(goal_node)

    initial: SearchState = (start_node, start_heading if start_constrained else None)
    counter = itertools.count()
    open_heap: List[Tuple[float, int, SearchState]] = []
    heapq.heappush(open_heap, (0.0, next(counter), initial))
    g_score: Dict[SearchState, float] = {initial: 0.0}
    came_from: Dict[SearchState, SearchState] = {}
    closed = set()
    expansions = 0

    while open_heap:
        _, _, state = heapq.heappop(open_heap)
        if state in closed:
            continue
        node, heading = state
        if node == goal_node and (not strict_end or heading is arrival):
            return SearchResult(
                _reconstruct(grid, came_from, state), expansions, False
            )
        closed.add(state)
        expansions += 1
        if expansions > config.max_expansions:
            return SearchResult(None, expansions, True)

        pos = grid.position(node)
        for neighbor in grid.graph.neighbors(node):
            npos = grid.position(neighbor)
            move = heading_between(pos, npos)
            if heading is not None and move is heading.opposite:
                continue
            if state == initial:
                if strict_start and move is not start_heading:
                    continue
                if not start_constrained and move is start_heading.opposite:
                    continue

            cost = g_score[state] + manhattan(pos, npos)
            if heading is not None and move.is_horizontal != heading.is_horizontal:
                cost += penalty
            if neighbor == goal_node and arrival is not None and not strict_end:
                if move is arrival.opposite:
                    continue
                if move.is_horizontal != arrival.is_horizontal:
                    cost += penalty
            next_state: SearchState = (neighbor, move)
            if next_state in closed or cost >= g_score.get(next_state, float("inf")):
                continue
            g_score[next_state] = cost
            came_from[next_state] = state
            estimate = manhattan(npos, goal_pos) + penalty * _estimated_bends(
                npos, goal_pos, move, arrival
            )
            heapq.heappush(open_heap, (cost + estimate, next(counter), next_state))

    return SearchResult(None, expansions, False)


def _reconstruct(
    grid: SparseGrid,
    came_from: Dict[SearchState, SearchState],
    state: SearchState,
) -> List[Point]:
    path = [grid.position(state[0])]
    while state in came_from:
        state = came_from[state]
        path.append(grid.position(state[0]))
    path.reverse()
    return path


# =============================================================================
# Fallback elbows
# =============================================================================


def respects_headings(
    points: Sequence[Point], start: ResolvedEndpoint, end: ResolvedEndpoint
) -> bool:
    """Whether a path honours the constrained endpoint headings."""
    if len(points) < 2 or has_diagonal_segments(points):
        return False
    if start.constrained and heading_between(points[0], points[1]) is not start.heading:
        return False
    if end.constrained:
        if heading_between(points[-2], points[-1]) is not end.heading.opposite:
            return False
    return True


def _clamped_mid(
    a: float,
    b: float,
    start: ResolvedEndpoint,
    end: ResolvedEndpoint,
    horizontal: bool,
    padding: float,
) -> float:
    mid = (a + b) / 2
    if start.constrained and start.heading.is_horizontal == horizontal:
        sign = start.heading.dx if horizontal else start.heading.dy
        limit = a + sign * padding
        mid = max(mid, limit) if sign > 0 else min(mid, limit)
    if end.constrained and end.heading.is_horizontal == horizontal:
        sign = end.heading.dx if horizontal else end.heading.dy
        limit = b + sign * padding
        mid = max(mid, limit) if sign > 0 else min(mid, limit)
    return mid


def mid_elbow(a: Point, b: Point, horizontal: bool, mid: float) -> List[Point]:
    """Two-bend path through a midline; first leg horizontal if requested."""
    if horizontal:
        return [a, Point(mid, a.y), Point(mid, b.y), b]
    return [a, Point(a.x, mid), Point(b.x, mid), b]


def _stub_routes(
    start: ResolvedEndpoint, end: ResolvedEndpoint, padding: float
) -> List[List[Point]]:
    a, b = start.position, end.position
    s = start.heading.step(a, padding) if start.constrained else a
    e = end.heading.step(b, padding) if end.constrained else b
    my = (s.y + e.y) / 2
    mx = (s.x + e.x) / 2
    return [
        [a, s, Point(e.x, s.y), e, b],
        [a, s, Point(s.x, e.y), e, b],
        [a, s, Point(s.x, my), Point(e.x, my), e, b],
        [a, s, Point(mx, s.y), Point(mx, e.y), e, b],
    ]


def fallback_path(
    start: ResolvedEndpoint,
    end: ResolvedEndpoint,
    config: RoutingConfig,
    blocking: Sequence[Rect] = (),
) -> List[Point]:
    """
    Deterministic midpoint elbow used when grid routing fails.

    With constrained endpoints, the shortest candidate that honours the
    headings wins (clear of obstacles first, then fewest points). Without
    constraints, a short route bends through a horizontal midline, an
    aligned one is straight, and otherwise the first leg follows the
    start heading's axis up to the midline.
    """
    a, b = start.position, end.position
    padding = config.direction_fix_padding

    if start.constrained or end.constrained:
        mx = _clamped_mid(a.x, b.x, start, end, True, padding)
        my = _clamped_mid(a.y, b.y, start, end, False, padding)
        candidates = [
            [a, b],
            direct_elbow_path(a, b, True),
            direct_elbow_path(a, b, False),
            mid_elbow(a, b, True, mx),
            mid_elbow(a, b, False, my),
        ] + _stub_routes(start, end, config.head_padding(0.0))

        best: Optional[Tuple[Tuple[bool, int, float], List[Point]]] = None
        for candidate in candidates:
            points = corner_points(candidate)
            if not respects_headings(points, start, end):
                continue
            key = (
                path_intersects_rects(points, blocking, config.intersection_epsilon),
                len(points),
                _path_length(points),
            )
            if best is None or key < best[0]:
                best = (key, points)
        if best is not None:
            return best[1]

    if manhattan(a, b) < config.min_arrow_length:
        my = (a.y + b.y) / 2
        return corner_points(mid_elbow(a, b, False, my))
    if is_axis_aligned(a, b):
        return corner_points([a, b])
    if start.heading.is_horizontal:
        return corner_points(mid_elbow(a, b, True, (a.x + b.x) / 2))
    return corner_points(mid_elbow(a, b, False, (a.y + b.y) / 2))


def _path_length(points: Sequence[Point]) -> float:
    return sum(manhattan(points[i - 1], points[i]) for i in range(1, len(points)))
