"""
Data models for elbow connector routing and editing.

This module contains the value types shared by the routing pipeline and the
edit pipeline. Everything here is immutable or copied on the way in; the host
application owns persistence of points and fixed segments between calls.

Classes:
    Point: World or local coordinate.
    Rect: Axis-aligned rectangle.
    Heading: Cardinal travel direction.
    BindingRef: Snapshot of the element an endpoint is bound to.
    BindingChange: Edit override replacing an endpoint's binding.
    ResolvedEndpoint: Endpoint after binding resolution.
    Obstacle / ObstacleLayout: Padded element boxes and search bounds.
    RouteRequest / RoutedPath: Input and output of route().
    FixedSegment: A pinned path segment.
    EditRequest / EditResult: Input and output of compute_edit().
    ContractViolation: Raised for malformed requests.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union


class ContractViolation(ValueError):
    """Raised when a request breaks the caller contract (e.g. NaN input)."""

    def __init__(self, message: str, field_name: Optional[str] = None):
        self.field_name = field_name
        if field_name:
            super().__init__(f"Contract violation in '{field_name}': {message}")
        else:
            super().__init__(f"Contract violation: {message}")


@dataclass(frozen=True)
class Point:
    """A 2D coordinate. y grows downwards."""

    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def scale(self, factor: float) -> "Point":
        return Point(self.x * factor, self.y * factor)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @classmethod
    def from_tuple(cls, value: Iterable[float]) -> "Point":
        x, y = value
        return cls(float(x), float(y))


class Heading(Enum):
    """Cardinal direction as a unit vector (dx, dy)."""

    UP = (0, -1)
    RIGHT = (1, 0)
    DOWN = (0, 1)
    LEFT = (-1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def is_horizontal(self) -> bool:
        return self.dx != 0

    @property
    def opposite(self) -> "Heading":
        return _OPPOSITES[self]

    def step(self, point: Point, distance: float) -> Point:
        """Move `point` by `distance` along this heading."""
        return Point(point.x + self.dx * distance, point.y + self.dy * distance)

    @classmethod
    def from_vector(cls, dx: float, dy: float) -> "Heading":
        """Dominant-axis heading of a vector. Ties and zero vectors prefer x."""
        if abs(dx) >= abs(dy):
            return cls.RIGHT if dx >= 0 else cls.LEFT
        return cls.DOWN if dy > 0 else cls.UP


_OPPOSITES = {
    Heading.UP: Heading.DOWN,
    Heading.DOWN: Heading.UP,
    Heading.LEFT: Heading.RIGHT,
    Heading.RIGHT: Heading.LEFT,
}


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle given by its min and max corners."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_points(cls, a: Point, b: Point) -> "Rect":
        return cls(min(a.x, b.x), min(a.y, b.y), max(a.x, b.x), max(a.y, b.y))

    @classmethod
    def around(cls, point: Point, padding: float = 0.0) -> "Rect":
        return cls(
            point.x - padding,
            point.y - padding,
            point.x + padding,
            point.y + padding,
        )

    def normalized(self) -> "Rect":
        """Return a copy with swapped edges fixed."""
        return Rect(
            min(self.min_x, self.max_x),
            min(self.min_y, self.max_y),
            max(self.min_x, self.max_x),
            max(self.min_y, self.max_y),
        )

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return Point((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    @property
    def has_area(self) -> bool:
        return self.width > 0 and self.height > 0

    def contains(self, point: Point, strict: bool = False, epsilon: float = 0.0) -> bool:
        """Containment test. `strict` excludes the boundary (shrunk by epsilon)."""
        if strict:
            return (
                self.min_x + epsilon < point.x < self.max_x - epsilon
                and self.min_y + epsilon < point.y < self.max_y - epsilon
            )
        return (
            self.min_x <= point.x <= self.max_x
            and self.min_y <= point.y <= self.max_y
        )

    def inflate(
        self,
        left: float,
        top: float,
        right: float,
        bottom: float,
    ) -> "Rect":
        return Rect(
            self.min_x - left,
            self.min_y - top,
            self.max_x + right,
            self.max_y + bottom,
        )

    def inflate_uniform(self, amount: float) -> "Rect":
        return self.inflate(amount, amount, amount, amount)

    def union(self, other: "Rect") -> "Rect":
        return Rect(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def intersects(self, other: "Rect") -> bool:
        """True if the interiors overlap (touching edges do not count)."""
        return (
            self.min_x < other.max_x
            and other.min_x < self.max_x
            and self.min_y < other.max_y
            and other.min_y < self.max_y
        )

    def clamp(self, limit: float) -> "Rect":
        return Rect(
            max(-limit, min(limit, self.min_x)),
            max(-limit, min(limit, self.min_y)),
            max(-limit, min(limit, self.max_x)),
            max(-limit, min(limit, self.max_y)),
        )


class EndpointSide(Enum):
    START = "start"
    END = "end"


@dataclass(frozen=True)
class BindingRef:
    """
    Snapshot of the element an endpoint is bound to.

    The host supplies this per call; the router never looks elements up.

    Attributes:
        element_id: Host identifier of the bound element.
        bounds: Current axis-aligned bounds of the element (world space).
        anchor: Normalized anchor inside the bounds, (0, 0) top-left to
            (1, 1) bottom-right.
        heading: Optional pre-resolved heading. When None the heading is
            classified from the anchor's position relative to the bounds.
    """

    element_id: str
    bounds: Rect
    anchor: Point = Point(0.5, 0.5)
    heading: Optional[Heading] = None

    def anchor_point(self) -> Point:
        rect = self.bounds.normalized()
        return Point(
            rect.min_x + rect.width * self.anchor.x,
            rect.min_y + rect.height * self.anchor.y,
        )


@dataclass(frozen=True)
class BindingChange:
    """
    Edit override that rebinds (or unbinds) an endpoint.

    Attributes:
        binding: New binding, or None to unbind.
        point: New local endpoint position, if the host has one.
    """

    binding: Optional[BindingRef]
    point: Optional[Point] = None


EndpointOverride = Union[Point, BindingChange]


@dataclass(frozen=True)
class ResolvedEndpoint:
    """
    An endpoint after binding resolution.

    Attributes:
        position: Final endpoint position (gap applied for bound endpoints).
        heading: Required travel heading when leaving this endpoint.
        bound_rect: Bounds of the bound element, None if unbound.
        arrowhead_gap: Gap between the element edge and `position`.
        constrained: Whether the heading must be honored by the route.
        degraded: Set when the binding was malformed and was ignored.
    """

    position: Point
    heading: Heading
    bound_rect: Optional[Rect] = None
    arrowhead_gap: float = 0.0
    constrained: bool = False
    degraded: bool = False

    @property
    def is_bound(self) -> bool:
        return self.bound_rect is not None


@dataclass(frozen=True)
class Obstacle:
    """A padded element box owned by one endpoint."""

    rect: Rect
    owner: EndpointSide
    blocking: bool = True


@dataclass(frozen=True)
class ObstacleLayout:
    """
    Result of the obstacle layout builder.

    Attributes:
        start_obstacle: Obstacle owned by the start endpoint.
        end_obstacle: Obstacle owned by the end endpoint.
        common_bounds: Search bounds shared by both obstacles.
        start_exit: Dongle point where the route leaves the start obstacle.
        end_exit: Dongle point where the route enters the end obstacle.
        split: Whether overlapping obstacles were split.
    """

    start_obstacle: Obstacle
    end_obstacle: Obstacle
    common_bounds: Rect
    start_exit: Point
    end_exit: Point
    split: bool = False

    @property
    def obstacles(self) -> List[Obstacle]:
        return [self.start_obstacle, self.end_obstacle]

    @property
    def blocking_rects(self) -> List[Rect]:
        return [
            o.rect for o in self.obstacles if o.blocking and o.rect.has_area
        ]


@dataclass(frozen=True)
class FixedSegment:
    """
    A pinned path segment.

    Segment `index` connects points[index - 1] and points[index]. The axis
    (horizontal or vertical) is preserved across edits.
    """

    index: int
    start: Point
    end: Point

    @property
    def is_horizontal(self) -> bool:
        return abs(self.start.y - self.end.y) <= abs(self.start.x - self.end.x)

    @property
    def axis_value(self) -> float:
        """The shared coordinate: y for horizontal segments, x for vertical."""
        if self.is_horizontal:
            return (self.start.y + self.end.y) / 2
        return (self.start.x + self.end.x) / 2

    @property
    def length(self) -> float:
        return abs(self.end.x - self.start.x) + abs(self.end.y - self.start.y)

    @property
    def direction(self) -> Heading:
        if self.is_horizontal:
            return Heading.RIGHT if self.end.x >= self.start.x else Heading.LEFT
        return Heading.DOWN if self.end.y >= self.start.y else Heading.UP

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "start": list(self.start.to_tuple()),
            "end": list(self.end.to_tuple()),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FixedSegment":
        return cls(
            int(data["index"]),
            Point.from_tuple(data["start"]),
            Point.from_tuple(data["end"]),
        )


class RouteStatus(Enum):
    """How a route was produced."""

    OK = "ok"
    FALLBACK = "fallback"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class RouteRequest:
    """
    Input of route(). World-space coordinates.

    Attributes:
        start / end: Raw endpoint positions.
        start_binding / end_binding: Optional element bindings.
        start_arrowhead / end_arrowhead: Whether an arrowhead is drawn;
            controls the binding gap.
        start_heading / end_heading: Heading required of an unbound
            endpoint (bound endpoints derive theirs from the binding).
        fixed_segments: Segments whose axis values seed grid coordinates.
    """

    start: Point
    end: Point
    start_binding: Optional[BindingRef] = None
    end_binding: Optional[BindingRef] = None
    start_arrowhead: bool = False
    end_arrowhead: bool = True
    start_heading: Optional[Heading] = None
    end_heading: Optional[Heading] = None
    fixed_segments: Tuple[FixedSegment, ...] = ()


@dataclass(frozen=True)
class RoutedPath:
    """Output of route(): an orthogonal, deduplicated polyline."""

    points: List[Point]
    resolved_start: ResolvedEndpoint
    resolved_end: ResolvedEndpoint
    status: RouteStatus = RouteStatus.OK


class EditMode(Enum):
    """Mode chosen by the edit pipeline for one call."""

    ROUTE_FRESH = "route_fresh"
    RELEASE = "release"
    DRAG_ENDPOINTS = "drag_endpoints"
    APPLY_FIXED = "apply_fixed"


@dataclass
class EditRequest:
    """
    Input of compute_edit(). Points are local (relative to `origin`).

    Attributes:
        previous_points: Points stored by the host after the last edit.
        previous_fixed_segments: Fixed segments stored after the last edit.
        start_override / end_override: New endpoint position or binding.
        points: Incoming point list (e.g. after a segment was dragged).
        fixed_segments: Incoming fixed segments (e.g. after a release).
        start_binding / end_binding: Current bindings (world space).
        start_arrowhead / end_arrowhead: Arrowhead presence per side.
        origin: World position of the local origin.
    """

    previous_points: List[Point]
    previous_fixed_segments: Optional[List[FixedSegment]] = None
    start_override: Optional[EndpointOverride] = None
    end_override: Optional[EndpointOverride] = None
    points: Optional[List[Point]] = None
    fixed_segments: Optional[List[FixedSegment]] = None
    start_binding: Optional[BindingRef] = None
    end_binding: Optional[BindingRef] = None
    start_arrowhead: bool = False
    end_arrowhead: bool = True
    origin: Point = Point(0.0, 0.0)


@dataclass
class EditResult:
    """Output of compute_edit(). Local points plus surviving fixed segments."""

    points: List[Point]
    fixed_segments: Optional[List[FixedSegment]] = None
    mode: EditMode = EditMode.ROUTE_FRESH
    notes: List[str] = field(default_factory=list)


def require_finite(name: str, value: Any) -> None:
    """Raise ContractViolation if `value` holds NaN or infinite coordinates."""
    if isinstance(value, Point):
        if not value.is_finite():
            raise ContractViolation(f"non-finite point {value}", name)
    elif isinstance(value, Rect):
        for coord in (value.min_x, value.min_y, value.max_x, value.max_y):
            if not math.isfinite(coord):
                raise ContractViolation(f"non-finite bounds {value}", name)
    elif isinstance(value, BindingRef):
        require_finite(f"{name}.bounds", value.bounds)
        require_finite(f"{name}.anchor", value.anchor)
    elif isinstance(value, FixedSegment):
        require_finite(f"{name}.start", value.start)
        require_finite(f"{name}.end", value.end)
