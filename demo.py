#!/usr/bin/env python3
"""
Demo script for elbowroute.

Walks through a few routing and editing scenarios and prints the resulting
paths. Pass --png to also write a debug image per routing demo.
"""

import sys

from elbowroute import (
    BindingChange,
    BindingRef,
    EditRequest,
    FixedSegment,
    Point,
    Rect,
    RouteRequest,
    RouteTrace,
    compute_edit,
    render_to_png,
    route,
)

LEFT_BOX = Rect(0, 0, 100, 100)
RIGHT_BOX = Rect(300, 0, 400, 100)
OFFSET_BOX = Rect(300, 200, 400, 300)


def print_header(title):
    """Print a formatted header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70 + "\n")


def print_points(points):
    print("  " + " -> ".join(f"({p.x:g}, {p.y:g})" for p in points))


def demo_1(write_png=False):
    """Demo 1: Facing elements"""
    print_header("Demo 1: Two Elements Facing Each Other")
    path = route(
        RouteRequest(
            start=Point(0, 0),
            end=Point(0, 0),
            start_binding=BindingRef("left", LEFT_BOX, Point(1, 0.5)),
            end_binding=BindingRef("right", RIGHT_BOX, Point(0, 0.5)),
        )
    )
    print_points(path.points)
    print(f"  status: {path.status.value}")
    if write_png:
        print(f"  wrote {render_to_png(path, 'demo_1.png')}")


def demo_2(write_png=False):
    """Demo 2: Offset elements with trace"""
    print_header("Demo 2: Offset Elements (with trace)")
    trace = RouteTrace(label="offset elements")
    path = route(
        RouteRequest(
            start=Point(0, 0),
            end=Point(0, 0),
            start_binding=BindingRef("left", LEFT_BOX, Point(1, 0.5)),
            end_binding=BindingRef("offset", OFFSET_BOX, Point(0, 0.5)),
        ),
        trace=trace,
    )
    print_points(path.points)
    print()
    print(trace.dump_path_evolution())
    if write_png:
        print(f"  wrote {render_to_png(path, 'demo_2.png')}")


def demo_3():
    """Demo 3: Editing with a fixed segment"""
    print_header("Demo 3: Dragging the End of a Pinned Path")
    points = [
        Point(0, 0),
        Point(50, 0),
        Point(50, 100),
        Point(150, 100),
        Point(150, 200),
        Point(250, 200),
    ]
    fixed = [FixedSegment(2, Point(50, 0), Point(50, 100))]
    print("Before:")
    print_points(points)

    result = compute_edit(
        EditRequest(
            previous_points=points,
            previous_fixed_segments=fixed,
            end_override=Point(300, 260),
        )
    )
    print(f"\nAfter dragging the end ({result.mode.value}):")
    print_points(result.points)
    print(f"  fixed: {[s.to_dict() for s in result.fixed_segments or []]}")

    result = compute_edit(
        EditRequest(
            previous_points=result.points,
            previous_fixed_segments=result.fixed_segments,
            end_override=BindingChange(BindingRef("box", OFFSET_BOX, Point(0, 0.5))),
        )
    )
    print(f"\nAfter binding the end to a box ({result.mode.value}):")
    print_points(result.points)


def demo_4():
    """Demo 4: Releasing a fixed segment"""
    print_header("Demo 4: Releasing a Fixed Segment")
    points = [
        Point(0, 0),
        Point(50, 0),
        Point(50, 100),
        Point(150, 100),
        Point(150, 200),
        Point(250, 200),
    ]
    first = FixedSegment(2, Point(50, 0), Point(50, 100))
    second = FixedSegment(4, Point(150, 100), Point(150, 200))
    result = compute_edit(
        EditRequest(
            previous_points=points,
            previous_fixed_segments=[first, second],
            fixed_segments=[second],
        )
    )
    print(f"Mode: {result.mode.value}")
    print_points(result.points)
    for note in result.notes:
        print(f"  note: {note}")


def main():
    write_png = "--png" in sys.argv[1:]
    demo_1(write_png)
    demo_2(write_png)
    demo_3()
    demo_4()
    print()


if __name__ == "__main__":
    main()
