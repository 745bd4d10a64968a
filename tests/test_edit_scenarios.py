"""
End-to-end editing scenarios.

These follow a host application through a sequence of edits: the points and
fixed segments returned by one compute_edit() call are what the host stores
and passes back on the next one.
"""

import pytest

from elbowroute import (
    BindingChange,
    BindingRef,
    ContractViolation,
    EditMode,
    EditRequest,
    FixedSegment,
    Heading,
    Point,
    Rect,
    compute_edit,
)
from elbowroute.geometry import has_diagonal_segments, heading_between


class TestReleaseFixedSegment:
    """Removing a fixed segment reroutes only the freed span."""

    def test_release_first_of_two(self, staircase, first_riser, second_riser):
        """The remaining fixed segment keeps its axis."""
        result = compute_edit(
            EditRequest(
                previous_points=staircase,
                previous_fixed_segments=[first_riser, second_riser],
                fixed_segments=[second_riser],
            )
        )
        assert result.mode is EditMode.RELEASE
        assert result.points == [
            Point(0, 0),
            Point(0, 100),
            Point(150, 100),
            Point(150, 200),
            Point(250, 200),
        ]
        assert result.fixed_segments == [
            FixedSegment(3, Point(150, 100), Point(150, 200))
        ]

    def test_release_all(self, staircase, first_riser):
        """Dropping every fixed segment routes fresh."""
        result = compute_edit(
            EditRequest(
                previous_points=staircase,
                previous_fixed_segments=[first_riser],
                fixed_segments=[],
            )
        )
        assert result.mode is EditMode.ROUTE_FRESH
        assert result.fixed_segments is None
        assert result.points[0] == Point(0, 0)
        assert result.points[-1] == Point(250, 200)
        assert not has_diagonal_segments(result.points)


class TestApplyFixedSegments:
    """Moving a fixed segment re-imposes its axis."""

    def test_move_riser(self, staircase, first_riser):
        """The moved riser drags its neighbours along."""
        moved = FixedSegment(2, Point(80, 0), Point(80, 100))
        result = compute_edit(
            EditRequest(
                previous_points=staircase,
                previous_fixed_segments=[first_riser],
                fixed_segments=[moved],
            )
        )
        assert result.mode is EditMode.APPLY_FIXED
        assert result.points == [
            Point(0, 0),
            Point(80, 0),
            Point(80, 100),
            Point(150, 100),
            Point(150, 200),
            Point(250, 200),
        ]
        assert result.fixed_segments == [moved]


class TestEndpointDrag:
    """Dragging an endpoint keeps the path before the fixed segment intact."""

    def test_drag_end(self, staircase, first_riser):
        """The end span is rerouted from the fixed riser."""
        result = compute_edit(
            EditRequest(
                previous_points=staircase,
                previous_fixed_segments=[first_riser],
                end_override=Point(300, 260),
            )
        )
        assert result.mode is EditMode.DRAG_ENDPOINTS
        assert result.points == [Point(0, 0), Point(50, 0), Point(50, 260), Point(300, 260)]
        assert result.fixed_segments == [FixedSegment(2, Point(50, 0), Point(50, 260))]

    def test_drag_end_locality(self, staircase, first_riser, second_riser):
        """Points up to the last fixed segment's start are untouched."""
        result = compute_edit(
            EditRequest(
                previous_points=staircase,
                previous_fixed_segments=[first_riser, second_riser],
                end_override=Point(300, 260),
            )
        )
        assert result.points[:4] == staircase[:4]
        assert result.points[-1] == Point(300, 260)
        assert [s.index for s in result.fixed_segments] == [2, 4]

    def test_drag_start(self, staircase, second_riser):
        """The start span is rerouted up to the first fixed segment."""
        result = compute_edit(
            EditRequest(
                previous_points=staircase,
                previous_fixed_segments=[second_riser],
                start_override=Point(-40, -60),
            )
        )
        assert result.points == [
            Point(-40, -60),
            Point(150, -60),
            Point(150, 200),
            Point(250, 200),
        ]
        assert result.points[-2:] == staircase[-2:]
        assert result.fixed_segments == [
            FixedSegment(2, Point(150, -60), Point(150, 200))
        ]

    def test_drag_both(self, staircase, second_riser):
        """Moving both ends only slides the terminal neighbours."""
        result = compute_edit(
            EditRequest(
                previous_points=staircase,
                previous_fixed_segments=[second_riser],
                start_override=Point(0, -20),
                end_override=Point(250, 230),
            )
        )
        assert result.mode is EditMode.DRAG_ENDPOINTS
        assert result.points == [
            Point(0, -20),
            Point(50, -20),
            Point(50, 100),
            Point(150, 100),
            Point(150, 230),
            Point(250, 230),
        ]

    def test_rebind_end(self, staircase, first_riser):
        """Binding the end to an element routes into its edge."""
        box = BindingRef("box", Rect(300, 150, 400, 250), Point(0, 0.5))
        result = compute_edit(
            EditRequest(
                previous_points=staircase,
                previous_fixed_segments=[first_riser],
                end_override=BindingChange(box),
            )
        )
        assert result.mode is EditMode.DRAG_ENDPOINTS
        assert result.points == [Point(0, 0), Point(50, 0), Point(50, 200), Point(294, 200)]
        assert heading_between(result.points[-2], result.points[-1]) is Heading.RIGHT

    def test_origin_translation(self, staircase, first_riser):
        """Local coordinates behave exactly like world coordinates."""
        origin = Point(1000, 500)
        world = compute_edit(
            EditRequest(
                previous_points=staircase,
                previous_fixed_segments=[first_riser],
                end_override=Point(300, 260),
            )
        )
        local = compute_edit(
            EditRequest(
                previous_points=staircase,
                previous_fixed_segments=[first_riser],
                end_override=Point(300, 260),
                origin=origin,
            )
        )
        assert local.points == world.points
        assert local.fixed_segments == world.fixed_segments


class TestFreshEdits:
    """Edits without fixed segments."""

    def test_moved_elements(self, east_binding, west_offset_binding):
        """Bound endpoints follow their elements."""
        result = compute_edit(
            EditRequest(
                previous_points=[Point(112, 50), Point(294, 50)],
                start_binding=east_binding,
                end_binding=west_offset_binding,
            )
        )
        assert result.mode is EditMode.ROUTE_FRESH
        assert result.points[0] == Point(112, 50)
        assert result.points[-1] == Point(294, 250)
        assert heading_between(result.points[0], result.points[1]) is Heading.RIGHT
        assert result.fixed_segments is None

    def test_single_point_rejected(self):
        """A stored path needs at least two points."""
        with pytest.raises(ContractViolation):
            compute_edit(EditRequest(previous_points=[Point(0, 0)]))
