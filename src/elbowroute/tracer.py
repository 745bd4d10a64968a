"""
Debug tracing infrastructure for elbowroute.

A RouteTrace records what each stage of a routing or editing call decided.
Pass one to route() or compute_edit() to capture it; nothing is recorded
otherwise.

This is primarily useful for:
1. Debugging odd routes (which stage produced which points)
2. Understanding mode selection in the edit pipeline
3. Writing targeted tests (verifying specific stage decisions)

Usage:
    >>> trace = RouteTrace(label="drag end")
    >>> result = compute_edit(request, trace=trace)
    >>> print(trace.summary())
    >>> trace.dump_to_file("route_trace.txt")

Stages recorded by route():
- endpoints, short_route, layout, direct, grid, astar, fallback,
  postprocess, perpendicular, result

Stages recorded by compute_edit():
- sanitize, edit_mode, the mode's own stages, perpendicular, edit_result
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .models import Point


def format_points(points: Sequence[Point]) -> str:
    return " -> ".join(f"({p.x:g},{p.y:g})" for p in points)


@dataclass
class PipelineStage:
    """
    Snapshot of state at a pipeline stage.

    Attributes:
        name: Name of this pipeline stage
        data: Dictionary of relevant data at this stage
        points: Optional copy of the path at this point
    """

    name: str
    data: Dict[str, Any]
    points: Optional[List[Point]] = None

    def __str__(self) -> str:
        lines = [f"=== Stage: {self.name} ==="]
        for key, value in self.data.items():
            # Truncate long values
            str_val = str(value)
            if len(str_val) > 100:
                str_val = str_val[:100] + "..."
            lines.append(f"  {key}: {str_val}")
        if self.points:
            lines.append(f"  points: {format_points(self.points)}")
        return "\n".join(lines)


@dataclass
class RouteTrace:
    """
    Complete trace of one routing or editing call.

    Attributes:
        stages: List of pipeline stages with their data
        label: Free-form label shown in the summary
    """

    stages: List[PipelineStage] = field(default_factory=list)
    label: str = ""

    def add_stage(
        self,
        name: str,
        data: Dict[str, Any],
        points: Optional[Sequence[Point]] = None,
    ) -> None:
        """
        Add a pipeline stage snapshot.

        Args:
            name: Name of the stage (e.g., "astar")
            data: Dictionary of relevant data at this stage
            points: Optional path to snapshot
        """
        snapshot = list(points) if points is not None else None
        self.stages.append(PipelineStage(name, dict(data), snapshot))

    def get_stage(self, name: str) -> Optional[PipelineStage]:
        """Get the first pipeline stage with the given name."""
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None

    def get_points_at_stage(self, name: str) -> Optional[List[Point]]:
        """Get the path snapshot at a specific stage."""
        stage = self.get_stage(name)
        if stage and stage.points:
            return stage.points
        return None

    def stage_names(self) -> List[str]:
        return [stage.name for stage in self.stages]

    def summary(self) -> str:
        """Short human-readable overview of the recorded stages."""
        lines = [
            "=" * 60,
            "ROUTE TRACE SUMMARY",
            "=" * 60,
            "",
            f"Label: {self.label or '-'}",
            f"Pipeline stages: {len(self.stages)}",
        ]
        for stage in self.stages:
            has_points = "+" if stage.points else "-"
            lines.append(f"  [{has_points}] {stage.name}")
        return "\n".join(lines)

    def dump(self) -> str:
        """Complete dump of all stages with their data."""
        lines = [self.summary(), "", "=" * 60, "DETAILED TRACE", "=" * 60, ""]
        for stage in self.stages:
            lines.append(str(stage))
            lines.append("")
        return "\n".join(lines)

    def dump_to_file(self, filename: str) -> None:
        """Write the complete trace dump to a file."""
        with open(filename, "w", encoding="utf-8") as f:
            f.write(self.dump())

    def dump_path_evolution(self) -> str:
        """Show how the path evolved through the stages that captured one."""
        lines = [
            "=" * 60,
            "PATH EVOLUTION",
            "=" * 60,
        ]
        for stage in self.stages:
            if stage.points:
                lines.append(f"{stage.name}: {format_points(stage.points)}")
        return "\n".join(lines)
