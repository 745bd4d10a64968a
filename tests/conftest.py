"""Pytest configuration and shared fixtures for elbowroute tests."""

import pytest

from elbowroute import BindingRef, FixedSegment, Point, Rect, RoutingConfig


@pytest.fixture
def config():
    """Default routing configuration."""
    return RoutingConfig()


@pytest.fixture
def left_box():
    """Element on the left of the canvas."""
    return Rect(0, 0, 100, 100)


@pytest.fixture
def right_box():
    """Element to the right of left_box, same row."""
    return Rect(300, 0, 400, 100)


@pytest.fixture
def offset_box():
    """Element to the right of left_box and further down."""
    return Rect(300, 200, 400, 300)


@pytest.fixture
def east_binding(left_box):
    """Binding on the middle of left_box's right edge."""
    return BindingRef("left", left_box, Point(1, 0.5))


@pytest.fixture
def west_binding(right_box):
    """Binding on the middle of right_box's left edge."""
    return BindingRef("right", right_box, Point(0, 0.5))


@pytest.fixture
def west_offset_binding(offset_box):
    """Binding on the middle of offset_box's left edge."""
    return BindingRef("offset", offset_box, Point(0, 0.5))


@pytest.fixture
def staircase():
    """Unbound orthogonal path with two vertical risers."""
    return [
        Point(0, 0),
        Point(50, 0),
        Point(50, 100),
        Point(150, 100),
        Point(150, 200),
        Point(250, 200),
    ]


@pytest.fixture
def first_riser():
    """Fixed segment on the first riser of the staircase."""
    return FixedSegment(2, Point(50, 0), Point(50, 100))


@pytest.fixture
def second_riser():
    """Fixed segment on the second riser of the staircase."""
    return FixedSegment(4, Point(150, 100), Point(150, 200))
