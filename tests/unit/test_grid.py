"""Unit tests for the sparse grid and A* search."""

from elbowroute.config import RoutingConfig
from elbowroute.endpoints import resolve_endpoint
from elbowroute.geometry import corner_points, heading_between, segment_hits_any
from elbowroute.grid import (
    astar,
    build_grid,
    candidate_coordinates,
    default_bend_penalty,
    fallback_path,
    respects_headings,
)
from elbowroute.models import FixedSegment, Heading, Point, Rect, ResolvedEndpoint
from elbowroute.obstacles import build_obstacle_layout


def _unbound(start, end, config):
    a = resolve_endpoint(start, end, None, False, config)
    b = resolve_endpoint(end, start, None, True, config, is_end=True)
    return a, b


def _search(a, b, config):
    layout = build_obstacle_layout(a, b, config)
    grid = build_grid(layout, a, b, config)
    return astar(
        grid,
        a.position,
        b.position,
        a.heading,
        a.constrained,
        b.heading,
        b.constrained,
        config,
    )


class TestCandidateCoordinates:
    """Tests for grid line collection."""

    def test_channel_midlines(self, config):
        """The gap between endpoints gets a midline."""
        a, b = _unbound(Point(0, 0), Point(10, 10), config)
        layout = build_obstacle_layout(a, b, config)
        xs, ys = candidate_coordinates(layout, a, b)
        assert xs == [-42, 0, 5, 10, 52]
        assert ys == [-42, 0, 5, 10, 52]

    def test_fixed_segment_axes(self, config):
        """Fixed segment axes become grid lines."""
        a, b = _unbound(Point(0, 0), Point(10, 10), config)
        layout = build_obstacle_layout(a, b, config)
        fixed = [FixedSegment(2, Point(7, 0), Point(7, 10))]
        xs, _ = candidate_coordinates(layout, a, b, fixed)
        assert 7 in xs


class TestBuildGrid:
    """Tests for build_grid()."""

    def test_no_edge_crosses_obstacles(self, east_binding, west_offset_binding, config):
        """Edges through blocking obstacles are removed."""
        a = resolve_endpoint(Point(0, 0), Point(0, 0), east_binding, False, config)
        b = resolve_endpoint(
            Point(0, 0), Point(0, 0), west_offset_binding, True, config, is_end=True
        )
        layout = build_obstacle_layout(a, b, config)
        grid = build_grid(layout, a, b, config)
        assert grid.graph.number_of_edges() > 0
        for u, v in grid.graph.edges():
            assert not segment_hits_any(
                grid.position(u), grid.position(v), layout.blocking_rects
            )


class TestAStar:
    """Tests for astar()."""

    def test_default_bend_penalty(self):
        """A bend outweighs any detour inside the bounds."""
        assert default_bend_penalty(Rect(0, 0, 10, 20)) == 61

    def test_single_bend(self, config):
        """Unconstrained endpoints connect with one bend."""
        a, b = _unbound(Point(0, 0), Point(10, 10), config)
        result = _search(a, b, config)
        points = corner_points(result.points)
        assert len(points) == 3
        assert points[0] == Point(0, 0)
        assert points[-1] == Point(10, 10)
        assert not result.exhausted

    def test_constrained_start(self, config):
        """A constrained start leaves along its heading."""
        a = ResolvedEndpoint(Point(0, 0), Heading.DOWN, constrained=True)
        b = ResolvedEndpoint(Point(100, 100), Heading.LEFT, constrained=True)
        points = corner_points(_search(a, b, config).points)
        assert heading_between(points[0], points[1]) is Heading.DOWN
        assert heading_between(points[-2], points[-1]) is Heading.RIGHT
        assert len(points) == 3

    def test_budget_exhausted(self):
        """Running out of expansions is reported."""
        config = RoutingConfig(max_expansions=1)
        a, b = _unbound(Point(0, 0), Point(10, 10), config)
        result = _search(a, b, config)
        assert result.points is None
        assert result.exhausted

    def test_off_grid_start(self, config):
        """A start that is not a grid node fails without searching."""
        a, b = _unbound(Point(0, 0), Point(10, 10), config)
        layout = build_obstacle_layout(a, b, config)
        grid = build_grid(layout, a, b, config)
        result = astar(
            grid, Point(1, 1), b.position, a.heading, False, b.heading, False, config
        )
        assert result.points is None
        assert result.expansions == 0


class TestFallbackPath:
    """Tests for fallback_path()."""

    def test_short_unbound(self, config):
        """Very short routes bend through the horizontal midline."""
        a, b = _unbound(Point(0, 0), Point(3, 4), config)
        assert fallback_path(a, b, config) == [
            Point(0, 0),
            Point(0, 2),
            Point(3, 2),
            Point(3, 4),
        ]

    def test_aligned_unbound(self, config):
        """Aligned endpoints get a straight line."""
        a, b = _unbound(Point(0, 0), Point(100, 0), config)
        assert fallback_path(a, b, config) == [Point(0, 0), Point(100, 0)]

    def test_unbound_elbow_follows_start_axis(self, config):
        """The first leg runs along the start heading's axis."""
        a, b = _unbound(Point(0, 0), Point(100, 50), config)
        assert fallback_path(a, b, config) == [
            Point(0, 0),
            Point(50, 0),
            Point(50, 50),
            Point(100, 50),
        ]

    def test_constrained_mid_elbow(self, config):
        """Constrained endpoints get the shortest heading-respecting elbow."""
        a = ResolvedEndpoint(Point(112, 50), Heading.RIGHT, constrained=True)
        b = ResolvedEndpoint(Point(294, 250), Heading.LEFT, constrained=True)
        points = fallback_path(a, b, config)
        assert points == [
            Point(112, 50),
            Point(203, 50),
            Point(203, 250),
            Point(294, 250),
        ]
        assert respects_headings(points, a, b)


class TestRespectsHeadings:
    """Tests for respects_headings()."""

    def test_wrong_arrival(self):
        """Arriving along the end heading instead of against it fails."""
        a = ResolvedEndpoint(Point(0, 0), Heading.RIGHT, constrained=True)
        b = ResolvedEndpoint(Point(100, 0), Heading.RIGHT, constrained=True)
        assert not respects_headings([Point(0, 0), Point(100, 0)], a, b)

    def test_diagonal(self):
        """Diagonal paths never respect headings."""
        a = ResolvedEndpoint(Point(0, 0), Heading.RIGHT)
        b = ResolvedEndpoint(Point(10, 10), Heading.LEFT)
        assert not respects_headings([Point(0, 0), Point(10, 10)], a, b)
