"""
Endpoint resolution.

Turns a raw endpoint plus an optional binding into a ResolvedEndpoint: the
final position (snapped to the bound element with the arrowhead gap applied)
and the heading the route has to respect there.
"""

from typing import Optional, Tuple

from .config import RoutingConfig
from .geometry import heading_between, heading_for_point_on_bounds, point_on_edge
from .models import BindingRef, Heading, Point, ResolvedEndpoint, RouteRequest


def binding_is_usable(binding: Optional[BindingRef]) -> bool:
    return binding is not None and binding.bounds.normalized().has_area


def bound_heading(binding: BindingRef) -> Heading:
    """Heading of a binding: the host's value, else the triangle zone."""
    if binding.heading is not None:
        return binding.heading
    return heading_for_point_on_bounds(binding.bounds, binding.anchor_point())


def bound_position(binding: BindingRef, heading: Heading, gap: float) -> Point:
    """Anchor snapped onto the heading edge and pushed out by `gap`."""
    on_edge = point_on_edge(binding.bounds, heading, binding.anchor_point())
    return heading.step(on_edge, gap)


def resolve_endpoint(
    point: Point,
    other: Point,
    binding: Optional[BindingRef],
    has_arrowhead: bool,
    config: RoutingConfig,
    is_end: bool = False,
    heading: Optional[Heading] = None,
) -> ResolvedEndpoint:
    """
    Resolve one endpoint.

    Args:
        point: Raw endpoint position.
        other: Raw position of the opposite endpoint.
        binding: Binding of this endpoint, if any.
        has_arrowhead: Whether this endpoint draws an arrowhead.
        config: Routing configuration.
        is_end: True for the end endpoint; its heading points back along
            the route, away from the start.
        heading: Required heading of an unbound endpoint.

    Returns:
        The resolved endpoint. Malformed bindings degrade to unbound.
    """
    if binding_is_usable(binding):
        required = bound_heading(binding)
        gap = config.binding_gap(has_arrowhead)
        return ResolvedEndpoint(
            position=bound_position(binding, required, gap),
            heading=required,
            bound_rect=binding.bounds.normalized(),
            arrowhead_gap=gap,
            constrained=True,
        )

    degraded = binding is not None
    if heading is not None:
        return ResolvedEndpoint(
            position=point, heading=heading, constrained=True, degraded=degraded
        )

    if is_end:
        guess = heading_between(other, point).opposite
    else:
        guess = heading_between(point, other)
    return ResolvedEndpoint(position=point, heading=guess, degraded=degraded)


def resolve_endpoints(
    request: RouteRequest, config: RoutingConfig
) -> Tuple[ResolvedEndpoint, ResolvedEndpoint]:
    """Resolve both endpoints of a request."""
    # Unbound headings are guessed against the other side's final position.
    start_ref = request.start
    end_ref = request.end
    if binding_is_usable(request.start_binding):
        start_ref = bound_position(
            request.start_binding,
            bound_heading(request.start_binding),
            config.binding_gap(request.start_arrowhead),
        )
    if binding_is_usable(request.end_binding):
        end_ref = bound_position(
            request.end_binding,
            bound_heading(request.end_binding),
            config.binding_gap(request.end_arrowhead),
        )

    start = resolve_endpoint(
        request.start,
        end_ref,
        request.start_binding,
        request.start_arrowhead,
        config,
        heading=request.start_heading,
    )
    end = resolve_endpoint(
        request.end,
        start_ref,
        request.end_binding,
        request.end_arrowhead,
        config,
        is_end=True,
        heading=request.end_heading,
    )
    return start, end
