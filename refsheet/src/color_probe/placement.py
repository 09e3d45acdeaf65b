from __future__ import annotations

from dataclasses import dataclass

from .models import (
    ColorSegment,
    PanelPlacement,
    PanelSide,
    PanelSize,
    PreferredSide,
    Rect,
)


@dataclass(frozen=True)
class PanelLayout:
    panel_width: float = 192.0
    panel_height: float = 140.0
    clearance: float = 12.0
    edge_padding: float = 16.0
    compact_breakpoint: float = 640.0
    compact_panel_width: float = 160.0
    compact_panel_height: float = 120.0

    @property
    def panel_size(self) -> PanelSize:
        return PanelSize(self.panel_width, self.panel_height)

    def is_compact(self, container_width: float) -> bool:
        return container_width < self.compact_breakpoint

    def compact_size(self, size: PanelSize, container_width: float) -> PanelSize:
        width = min(
            size.width,
            self.compact_panel_width,
            container_width - 2 * self.edge_padding,
        )
        return PanelSize(
            width=max(0.0, width),
            height=min(size.height, self.compact_panel_height),
        )


DEFAULT_LAYOUT = PanelLayout()


class PanelPlacer:
    def __init__(self, layout: PanelLayout = DEFAULT_LAYOUT) -> None:
        self.layout = layout

    def place(
        self,
        region: Rect,
        container: Rect,
        preferred_side: PreferredSide = "auto",
        panel_size: PanelSize | None = None,
        is_compact: bool | None = None,
    ) -> PanelPlacement:
        layout = self.layout
        if is_compact is None:
            is_compact = layout.is_compact(container.width)
        panel = panel_size or layout.panel_size
        if is_compact:
            panel = layout.compact_size(panel, container.width)

        side = self._choose_side(region, container, preferred_side, panel, is_compact)
        x, y = self._position(side, region, container, panel)
        return PanelPlacement(x=x, y=y, side=side)

    def _choose_side(
        self,
        region: Rect,
        container: Rect,
        preferred_side: PreferredSide,
        panel: PanelSize,
        is_compact: bool,
    ) -> PanelSide:
        gap = self.layout.clearance + self.layout.edge_padding
        needed_horizontal = panel.width + gap
        needed_vertical = panel.height + gap

        space: dict[PanelSide, float] = {
            "left": region.x,
            "right": container.width - region.right,
            "top": region.y,
            "bottom": container.height - region.bottom,
        }

        if preferred_side in ("left", "right") and space[preferred_side] >= needed_horizontal:
            return preferred_side

        # sorted() is stable, so ties keep right before left and bottom before top
        horizontal = sorted(("right", "left"), key=lambda side: -space[side])
        vertical = sorted(("bottom", "top"), key=lambda side: -space[side])

        candidates = [
            (horizontal[0], needed_horizontal),
            (vertical[0], needed_vertical),
        ]
        if is_compact:
            candidates.reverse()
        for side, needed in candidates:
            if space[side] >= needed:
                return side

        ordered = vertical + horizontal if is_compact else horizontal + vertical
        return max(ordered, key=lambda side: space[side])

    def _position(
        self, side: PanelSide, region: Rect, container: Rect, panel: PanelSize
    ) -> tuple[float, float]:
        gap = self.layout.clearance
        pad = self.layout.edge_padding
        max_x = container.width - panel.width - pad
        max_y = container.height - panel.height - pad

        if side in ("left", "right"):
            y = _clamp(region.center_y - panel.height / 2, pad, max_y)
            if side == "left":
                x = _clamp(region.x - panel.width - gap, pad, max_x)
            else:
                x = _clamp(region.right + gap, pad, max_x)
        else:
            x = _clamp(region.center_x - panel.width / 2, pad, max_x)
            if side == "top":
                y = _clamp(region.y - panel.height - gap, pad, max_y)
            else:
                y = _clamp(region.bottom + gap, pad, max_y)
        return x, y


def responsive_panel_size(
    container_width: float, layout: PanelLayout = DEFAULT_LAYOUT
) -> PanelSize:
    if layout.is_compact(container_width):
        return layout.compact_size(layout.panel_size, container_width)
    return layout.panel_size


def is_position_within_bounds(
    x: float, y: float, size: PanelSize, container: Rect
) -> bool:
    return (
        x >= 0
        and y >= 0
        and x + size.width <= container.width
        and y + size.height <= container.height
    )


def segment_to_rect(segment: ColorSegment, display: Rect) -> Rect:
    return Rect(
        x=segment.x / 100 * display.width,
        y=segment.y / 100 * display.height,
        width=segment.width / 100 * display.width,
        height=segment.height / 100 * display.height,
    )


def _clamp(value: float, low: float, high: float) -> float:
    # low wins when the container is too small for the panel
    return max(low, min(value, high))
