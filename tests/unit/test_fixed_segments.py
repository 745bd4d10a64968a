"""Unit tests for fixed segment bookkeeping."""

from elbowroute.fixed_segments import (
    apply_fixed_segments,
    axes_preserved,
    fixed_segments_equal,
    map_fixed_segments_to_baseline,
    normalize_fixed_path,
    pinnable_indices,
    pinned_points,
    reindex_fixed_segments,
    reverse_fixed_segments,
    sanitize_fixed_segments,
    shift_fixed_segments,
    sync_fixed_segments,
)
from elbowroute.models import FixedSegment, Point


class TestSanitize:
    """Tests for sanitize_fixed_segments()."""

    def test_pinnable_range(self):
        """First and last segments cannot be pinned."""
        assert list(pinnable_indices(6)) == [2, 3, 4]
        assert list(pinnable_indices(3)) == []

    def test_drops_invalid(self, first_riser, second_riser):
        """Terminal, duplicate and diagonal segments are dropped."""
        fixed = [
            second_riser,
            FixedSegment(1, Point(0, 0), Point(50, 0)),
            first_riser,
            FixedSegment(5, Point(150, 200), Point(250, 200)),
            FixedSegment(4, Point(0, 0), Point(10, 0)),
            FixedSegment(3, Point(50, 100), Point(150, 110)),
        ]
        assert sanitize_fixed_segments(fixed, 6, 1.0) == [first_riser, second_riser]

    def test_short_segment(self):
        """Segments under the tolerance are dropped."""
        fixed = [FixedSegment(2, Point(0, 0), Point(0, 0.5))]
        assert sanitize_fixed_segments(fixed, 6, 1.0) == []

    def test_none(self):
        """A missing list sanitizes to empty."""
        assert sanitize_fixed_segments(None, 6, 1.0) == []


class TestSyncAndReindex:
    """Tests for sync_fixed_segments() and reindex_fixed_segments()."""

    def test_sync_reads_current_points(self, staircase):
        """Stored endpoints are refreshed from the point list."""
        stale = FixedSegment(2, Point(0, 0), Point(0, 0))
        assert sync_fixed_segments([stale], staircase) == [
            FixedSegment(2, Point(50, 0), Point(50, 100))
        ]

    def test_reindex_after_shrink(self, second_riser):
        """A segment is found again at its new index by axis value."""
        points = [Point(0, 0), Point(150, 0), Point(150, 200), Point(250, 200)]
        assert reindex_fixed_segments([second_riser], points, 1.0) == [
            FixedSegment(2, Point(150, 0), Point(150, 200))
        ]

    def test_reindex_drops_lost_segment(self, first_riser):
        """Segments whose axis disappeared are dropped."""
        points = [Point(0, 0), Point(150, 0), Point(150, 200), Point(250, 200)]
        assert reindex_fixed_segments([first_riser], points, 1.0) == []


class TestApplyFixedSegments:
    """Tests for apply_fixed_segments() and pinned_points()."""

    def test_moves_both_points(self, staircase):
        """Both points of the pinned segment move onto the axis."""
        moved = FixedSegment(2, Point(80, 0), Point(80, 100))
        result = apply_fixed_segments(staircase, [moved])
        assert result[1] == Point(80, 0)
        assert result[2] == Point(80, 100)
        assert result[3:] == staircase[3:]

    def test_pinned_points(self, staircase, first_riser):
        """Fixed segment points are pinned."""
        assert pinned_points(staircase, [first_riser]) == {Point(50, 0), Point(50, 100)}


class TestIndexShifts:
    """Tests for shifting and reversing indices."""

    def test_shift(self, first_riser, second_riser):
        """Only segments after the insertion point move."""
        shifted = shift_fixed_segments([first_riser, second_riser], 2, 2)
        assert [s.index for s in shifted] == [2, 6]

    def test_reverse(self, staircase, first_riser):
        """Reversal mirrors the index and swaps the points."""
        reversed_fixed = reverse_fixed_segments([first_riser], len(staircase))
        assert reversed_fixed == [FixedSegment(4, Point(50, 100), Point(50, 0))]
        path = list(reversed(staircase))
        assert (path[3], path[4]) == (Point(50, 100), Point(50, 0))


class TestNormalizeFixedPath:
    """Tests for normalize_fixed_path()."""

    def test_merge_keeps_flag(self):
        """A fixed segment merged with a collinear neighbour stays fixed."""
        points = [Point(0, 0), Point(50, 0), Point(50, 50), Point(50, 100), Point(150, 100)]
        fixed = [FixedSegment(3, Point(50, 50), Point(50, 100))]
        result, new_fixed = normalize_fixed_path(points, fixed)
        assert result == [Point(0, 0), Point(50, 0), Point(50, 100), Point(150, 100)]
        assert new_fixed == [FixedSegment(2, Point(50, 0), Point(50, 100))]

    def test_merge_into_terminal_releases(self):
        """A fixed segment absorbed by the first segment is released."""
        points = [Point(0, 0), Point(50, 0), Point(100, 0), Point(100, 50)]
        fixed = [FixedSegment(2, Point(50, 0), Point(100, 0))]
        result, new_fixed = normalize_fixed_path(points, fixed)
        assert result == [Point(0, 0), Point(100, 0), Point(100, 50)]
        assert new_fixed == []


class TestMapToBaseline:
    """Tests for map_fixed_segments_to_baseline()."""

    def test_moves_baseline_onto_axis(self, first_riser):
        """The closest same-orientation segment takes the fixed axis."""
        baseline = [Point(0, 0), Point(100, 0), Point(100, 200), Point(250, 200)]
        points, fixed = map_fixed_segments_to_baseline([first_riser], baseline)
        assert points == [Point(0, 0), Point(50, 0), Point(50, 200), Point(250, 200)]
        assert fixed == [FixedSegment(2, Point(50, 0), Point(50, 200))]

    def test_no_slot(self, first_riser):
        """Without a pinnable segment the fixed segment is dropped."""
        baseline = [Point(0, 0), Point(100, 0), Point(100, 200)]
        points, fixed = map_fixed_segments_to_baseline([first_riser], baseline)
        assert points == baseline
        assert fixed == []


class TestComparisons:
    """Tests for fixed segment comparisons."""

    def test_equal(self, first_riser, second_riser):
        """Lists compare by index and geometry."""
        assert fixed_segments_equal([first_riser], [first_riser])
        assert fixed_segments_equal(None, [])
        assert not fixed_segments_equal([first_riser], [second_riser])

    def test_axes_preserved(self, first_riser):
        """Sliding along the axis keeps the axis."""
        longer = FixedSegment(3, Point(50, -40), Point(50, 300))
        moved = FixedSegment(2, Point(60, 0), Point(60, 100))
        assert axes_preserved([first_riser], [longer], 1.0)
        assert not axes_preserved([first_riser], [moved], 1.0)
