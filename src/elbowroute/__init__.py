"""
elbowroute - Orthogonal connector routing and editing

Routes elbow arrows between two endpoints, optionally bound to rectangular
elements, and keeps the route stable while the user edits it.

Example:
    >>> from elbowroute import Point, RouteRequest, route
    >>> path = route(RouteRequest(start=Point(0, 0), end=Point(100, 40)))
    >>> [p.to_tuple() for p in path.points]

Editing Example:
    >>> from elbowroute import EditRequest, compute_edit
    >>> result = compute_edit(EditRequest(
    ...     previous_points=path.points,
    ...     end_override=Point(120, 80),
    ... ))

Debug Mode Example:
    >>> trace = RouteTrace()
    >>> path = route(request, trace=trace)
    >>> print(trace.summary())
"""

from .config import DEFAULT_CONFIG, RoutingConfig
from .editing import compute_edit, select_edit_mode
from .fixed_segments import (
    reindex_fixed_segments,
    sanitize_fixed_segments,
    sync_fixed_segments,
)
from .models import (
    BindingChange,
    BindingRef,
    ContractViolation,
    EditMode,
    EditRequest,
    EditResult,
    FixedSegment,
    Heading,
    Point,
    Rect,
    ResolvedEndpoint,
    RoutedPath,
    RouteRequest,
    RouteStatus,
)
from .png_renderer import PNGRenderer, render_to_png
from .router import route
from .tracer import PipelineStage, RouteTrace

__version__ = "0.1.0"

__all__ = [
    # Main API
    "route",
    "compute_edit",
    "select_edit_mode",
    # Configuration
    "RoutingConfig",
    "DEFAULT_CONFIG",
    # Models
    "Point",
    "Rect",
    "Heading",
    "BindingRef",
    "BindingChange",
    "ResolvedEndpoint",
    "RouteRequest",
    "RoutedPath",
    "RouteStatus",
    "FixedSegment",
    "EditRequest",
    "EditResult",
    "EditMode",
    "ContractViolation",
    # Fixed segments
    "sanitize_fixed_segments",
    "reindex_fixed_segments",
    "sync_fixed_segments",
    # Debug/Tracing (for development and debugging)
    "RouteTrace",
    "PipelineStage",
    "PNGRenderer",
    "render_to_png",
]
