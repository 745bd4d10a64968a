"""Unit tests for endpoint drags on paths with fixed segments."""

from elbowroute.endpoint_drag import (
    DragContext,
    anchor_fallback_path,
    drag_endpoints,
    snap_terminal_neighbors,
)
from elbowroute.models import FixedSegment, Heading, Point
from elbowroute.tracer import RouteTrace


def _context(previous, points, fixed):
    return DragContext(
        points=points,
        previous_points=previous,
        fixed=fixed,
        start_binding=None,
        end_binding=None,
        start_arrowhead=False,
        end_arrowhead=True,
    )


class TestAnchorFallbackPath:
    """Tests for anchor_fallback_path()."""

    def test_turns_at_midline(self):
        """The path continues along the fixed axis up to the midline."""
        path = anchor_fallback_path(Point(50, 0), Point(300, 260), Heading.DOWN, 12)
        assert path == [Point(50, 0), Point(50, 130), Point(300, 130), Point(300, 260)]

    def test_minimum_leg(self):
        """The first leg is never shorter than the padding."""
        path = anchor_fallback_path(Point(50, 100), Point(300, 90), Heading.DOWN, 12)
        assert path[1] == Point(50, 112)


class TestSnapTerminalNeighbors:
    """Tests for snap_terminal_neighbors()."""

    def test_neighbors_follow(self, staircase):
        """Terminal neighbours keep their segment orientation."""
        moved = list(staircase)
        moved[0] = Point(0, -20)
        moved[-1] = Point(250, 230)
        result = snap_terminal_neighbors(moved, staircase)
        assert result[1] == Point(50, -20)
        assert result[-2] == Point(150, 230)


class TestDragEndpoints:
    """Tests for drag_endpoints()."""

    def test_drag_end_keeps_prefix(self, staircase, first_riser, config):
        """Only the span after the nearest fixed segment is rerouted."""
        moved = staircase[:-1] + [Point(300, 260)]
        trace = RouteTrace()
        points, fixed = drag_endpoints(
            _context(staircase, moved, [first_riser]), False, True, config, trace
        )
        assert points == [Point(0, 0), Point(50, 0), Point(50, 260), Point(300, 260)]
        assert fixed == [FixedSegment(2, Point(50, 0), Point(50, 260))]
        assert trace.get_stage("drag_end").data["strategy"] == "reroute"

    def test_drag_end_two_fixed(self, staircase, first_riser, second_riser, config):
        """Everything up to the last fixed segment's start is untouched."""
        moved = staircase[:-1] + [Point(300, 260)]
        points, fixed = drag_endpoints(
            _context(staircase, moved, [first_riser, second_riser]), False, True, config
        )
        assert points[:4] == staircase[:4]
        assert points == [
            Point(0, 0),
            Point(50, 0),
            Point(50, 100),
            Point(150, 100),
            Point(150, 260),
            Point(300, 260),
        ]
        assert [s.index for s in fixed] == [2, 4]

    def test_drag_start(self, staircase, second_riser, config):
        """Dragging the start reroutes up to the first fixed segment."""
        moved = [Point(-40, -60)] + staircase[1:]
        points, fixed = drag_endpoints(
            _context(staircase, moved, [second_riser]), True, False, config
        )
        assert points == [
            Point(-40, -60),
            Point(150, -60),
            Point(150, 200),
            Point(250, 200),
        ]
        assert fixed == [FixedSegment(2, Point(150, -60), Point(150, 200))]

    def test_both_ends(self, staircase, second_riser, config):
        """Moving both ends slides the terminal neighbours only."""
        moved = [Point(0, -20)] + staircase[1:-1] + [Point(250, 230)]
        points, fixed = drag_endpoints(
            _context(staircase, moved, [second_riser]), True, True, config
        )
        assert points == [
            Point(0, -20),
            Point(50, -20),
            Point(50, 100),
            Point(150, 100),
            Point(150, 230),
            Point(250, 230),
        ]
        assert fixed == [FixedSegment(4, Point(150, 100), Point(150, 230))]

    def test_no_fixed_segments(self, staircase, config):
        """Without fixed segments the caller has to route fresh."""
        assert drag_endpoints(_context(staircase, staircase, []), False, True, config) is None
