"""
PNG renderer for routed elbow paths.

Draws the bound elements, their padded obstacles, the search bounds and the
route itself. Meant for eyeballing routing decisions, not for production
rendering.
"""

import math
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from .config import DEFAULT_CONFIG, RoutingConfig
from .models import FixedSegment, ObstacleLayout, Point, Rect, RoutedPath
from .obstacles import build_obstacle_layout


class PNGRenderer:
    """Renders a routed path and its obstacles as a PNG image."""

    def __init__(
        self,
        scale: int = 2,  # For high-resolution output
        margin: int = 20,
        line_width: int = 1,
        arrow_size: int = 8,
        show_obstacles: bool = True,
    ):
        self.scale = scale
        self.margin = margin
        self.line_width = line_width
        self.arrow_size = arrow_size
        self.show_obstacles = show_obstacles

        # Colors
        self.bg_color = (255, 255, 255)
        self.element_fill = (235, 240, 250)
        self.element_outline = (40, 60, 120)
        self.obstacle_outline = (200, 120, 120)
        self.bounds_outline = (190, 190, 190)
        self.line_color = (0, 0, 0)
        self.fixed_color = (210, 40, 40)
        self.point_color = (30, 120, 30)

    def _extent(self, points: Sequence[Point], rects: Sequence[Rect]) -> Rect:
        extent = Rect.from_points(points[0], points[0])
        for p in points:
            extent = extent.union(Rect.around(p))
        for rect in rects:
            extent = extent.union(rect)
        return extent

    def _to_canvas(self, point: Point, origin: Point) -> Tuple[float, float]:
        return (
            (point.x - origin.x + self.margin) * self.scale,
            (point.y - origin.y + self.margin) * self.scale,
        )

    def _rect_to_canvas(self, rect: Rect, origin: Point) -> List[float]:
        x1, y1 = self._to_canvas(Point(rect.min_x, rect.min_y), origin)
        x2, y2 = self._to_canvas(Point(rect.max_x, rect.max_y), origin)
        return [x1, y1, x2, y2]

    def render(
        self,
        path: RoutedPath,
        output_path: str = "route.png",
        fixed_segments: Optional[Sequence[FixedSegment]] = None,
        config: Optional[RoutingConfig] = None,
    ) -> str:
        """
        Render a routed path as a PNG image.

        Args:
            path: Result of route()
            output_path: Path to save the PNG file
            fixed_segments: Segments to highlight as fixed
            config: Configuration used to rebuild the obstacle layout

        Returns:
            Path to the saved PNG file
        """
        config = config or DEFAULT_CONFIG
        elements = [
            e.bound_rect
            for e in (path.resolved_start, path.resolved_end)
            if e.bound_rect is not None
        ]
        layout: Optional[ObstacleLayout] = None
        rects = list(elements)
        if self.show_obstacles:
            layout = build_obstacle_layout(path.resolved_start, path.resolved_end, config)
            rects.extend(o.rect for o in layout.obstacles if o.rect.has_area)
            rects.append(layout.common_bounds)

        points = path.points or [path.resolved_start.position]
        extent = self._extent(points, rects)
        origin = Point(extent.min_x, extent.min_y)
        width = int(math.ceil((extent.width + 2 * self.margin) * self.scale)) + 1
        height = int(math.ceil((extent.height + 2 * self.margin) * self.scale)) + 1

        img = Image.new("RGB", (width, height), self.bg_color)
        draw = ImageDraw.Draw(img)
        line_width = max(1, self.line_width * self.scale)

        if layout is not None:
            draw.rectangle(
                self._rect_to_canvas(layout.common_bounds, origin),
                outline=self.bounds_outline,
                width=1,
            )
            for obstacle in layout.obstacles:
                if obstacle.rect.has_area:
                    draw.rectangle(
                        self._rect_to_canvas(obstacle.rect, origin),
                        outline=self.obstacle_outline,
                        width=1,
                    )

        for rect in elements:
            draw.rectangle(
                self._rect_to_canvas(rect, origin),
                fill=self.element_fill,
                outline=self.element_outline,
                width=line_width,
            )

        canvas_points = [self._to_canvas(p, origin) for p in points]
        for i in range(len(canvas_points) - 1):
            draw.line(
                [canvas_points[i], canvas_points[i + 1]],
                fill=self.line_color,
                width=line_width,
            )

        for segment in fixed_segments or []:
            draw.line(
                [
                    self._to_canvas(segment.start, origin),
                    self._to_canvas(segment.end, origin),
                ],
                fill=self.fixed_color,
                width=line_width * 2,
            )

        r = 2 * self.scale
        for x, y in canvas_points[1:-1]:
            draw.ellipse([x - r, y - r, x + r, y + r], fill=self.point_color)

        if len(canvas_points) >= 2:
            self._draw_arrowhead(draw, canvas_points[-2], canvas_points[-1])

        img.save(output_path, "PNG")
        return output_path

    def _draw_arrowhead(
        self,
        draw: ImageDraw.Draw,
        from_point: Tuple[float, float],
        to_point: Tuple[float, float],
    ):
        """Draw an arrowhead at the end of a line."""
        x1, y1 = from_point
        x2, y2 = to_point

        arrow_size = self.arrow_size * self.scale

        # Calculate angle
        angle = math.atan2(y2 - y1, x2 - x1)

        # Calculate arrowhead points
        angle1 = angle + math.pi * 0.8
        angle2 = angle - math.pi * 0.8

        ax1 = x2 + arrow_size * math.cos(angle1)
        ay1 = y2 + arrow_size * math.sin(angle1)
        ax2 = x2 + arrow_size * math.cos(angle2)
        ay2 = y2 + arrow_size * math.sin(angle2)

        # Draw filled arrowhead
        draw.polygon([(x2, y2), (ax1, ay1), (ax2, ay2)], fill=self.line_color)


def render_to_png(path: RoutedPath, output_path: str = "route.png", **kwargs) -> str:
    """
    Convenience function to render a routed path to PNG.

    Args:
        path: Result of route()
        output_path: Path to save the PNG file
        **kwargs: Additional parameters for PNGRenderer

    Returns:
        Path to the saved PNG file
    """
    renderer = PNGRenderer(**kwargs)
    return renderer.render(path, output_path)
