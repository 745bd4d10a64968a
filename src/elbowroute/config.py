"""
Routing configuration for elbow connectors.

All distances are in canvas units (pixels at zoom 1). The module-level
constants are the defaults; callers tune them per call by passing a
RoutingConfig to route() or compute_edit().
"""

from dataclasses import dataclass
from typing import Optional

# =============================================================================
# ROUTING CONFIGURATION - Adjust these values to tune routing behavior
# =============================================================================

# --- Padding around bound elements ---

# Clearance kept between a routed path and a bound element
BASE_PADDING = 42.0

# Padding of the small point boxes used when two bound elements overlap
EXIT_POINT_PADDING = 2.0

# Length of the stub inserted when an endpoint heading has to be repaired
DIRECTION_FIX_PADDING = 12.0

# --- Binding gap (space between element edge and arrow endpoint) ---

BINDING_GAP_BASE = 6.0

# Gap multiplier for an endpoint that draws an arrowhead
ARROWHEAD_GAP_MULTIPLIER = 1.0

# Gap multiplier for a bound endpoint without an arrowhead
NO_ARROWHEAD_GAP_MULTIPLIER = 2.0

# --- Tolerances ---

# Points closer than this are considered the same coordinate
DEDUP_THRESHOLD = 1.0

# Shrink applied to obstacles before interior intersection tests
INTERSECTION_EPSILON = 1e-6

# Unbound endpoints closer than this (Manhattan) skip grid routing
MIN_ARROW_LENGTH = 8.0

# Coordinates are clamped into [-MAX_POSITION, MAX_POSITION]
MAX_POSITION = 1e6

# --- Search ---

# A* expansions before giving up and using the fallback elbow
MAX_EXPANSIONS = 20000

# Cost added per change of axis. None derives it from the search bounds so
# that one bend always outweighs any detour inside the bounds.
BEND_PENALTY: Optional[float] = None


@dataclass(frozen=True)
class RoutingConfig:
    """
    Tuning values for a routing or editing call.

    Attributes:
        base_padding: Clearance around bound elements.
        binding_gap_base: Base gap between an element edge and the endpoint.
        arrowhead_gap_multiplier: Gap multiplier when an arrowhead is drawn.
        no_arrowhead_gap_multiplier: Gap multiplier without an arrowhead.
        exit_point_padding: Point box padding used for overlapping elements.
        direction_fix_padding: Minimum stub length for heading repairs.
        dedup_threshold: Distance under which coordinates are merged.
        intersection_epsilon: Obstacle shrink for interior tests.
        min_arrow_length: Short-route threshold for unbound endpoints.
        max_position: Absolute coordinate clamp.
        max_expansions: A* expansion budget.
        bend_penalty: Fixed bend cost, or None to derive from bounds.
    """

    base_padding: float = BASE_PADDING
    binding_gap_base: float = BINDING_GAP_BASE
    arrowhead_gap_multiplier: float = ARROWHEAD_GAP_MULTIPLIER
    no_arrowhead_gap_multiplier: float = NO_ARROWHEAD_GAP_MULTIPLIER
    exit_point_padding: float = EXIT_POINT_PADDING
    direction_fix_padding: float = DIRECTION_FIX_PADDING
    dedup_threshold: float = DEDUP_THRESHOLD
    intersection_epsilon: float = INTERSECTION_EPSILON
    min_arrow_length: float = MIN_ARROW_LENGTH
    max_position: float = MAX_POSITION
    max_expansions: int = MAX_EXPANSIONS
    bend_penalty: Optional[float] = BEND_PENALTY

    def __post_init__(self):
        for name in (
            "base_padding",
            "binding_gap_base",
            "exit_point_padding",
            "direction_fix_padding",
            "dedup_threshold",
            "intersection_epsilon",
            "min_arrow_length",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        if self.max_position <= 0:
            raise ValueError("max_position must be positive")
        if self.max_expansions < 1:
            raise ValueError("max_expansions must be at least 1")
        if self.bend_penalty is not None and self.bend_penalty < 0:
            raise ValueError("bend_penalty must be non-negative")

    def binding_gap(self, has_arrowhead: bool) -> float:
        """Gap between a bound element's edge and the endpoint."""
        if has_arrowhead:
            return self.binding_gap_base * self.arrowhead_gap_multiplier
        return self.binding_gap_base * self.no_arrowhead_gap_multiplier

    def head_padding(self, gap: float) -> float:
        """Length of the first leg leaving a bound endpoint."""
        padding = max(0.0, self.base_padding - gap)
        return max(padding, self.direction_fix_padding)


DEFAULT_CONFIG = RoutingConfig()
