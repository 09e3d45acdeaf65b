from __future__ import annotations

import pytest

from refsheet.src.color_probe.models import ColorSegment, PanelSize, Rect
from refsheet.src.color_probe.conversion import color_from_hex
from refsheet.src.color_probe.placement import (
    PanelLayout,
    PanelPlacer,
    is_position_within_bounds,
    responsive_panel_size,
    segment_to_rect,
)

DESKTOP = Rect.from_size(800, 600)


def test_places_right_when_region_is_near_left_edge():
    placement = PanelPlacer().place(Rect(100, 100, 50, 50), DESKTOP)

    assert placement.side == "right"
    assert (placement.x, placement.y) == (162, 55)


def test_places_left_when_region_is_near_right_edge():
    placement = PanelPlacer().place(Rect(600, 100, 50, 50), DESKTOP)

    assert placement.side == "left"
    assert (placement.x, placement.y) == (396, 55)


def test_preferred_side_wins_when_it_has_room():
    placement = PanelPlacer().place(
        Rect(300, 200, 50, 50), DESKTOP, preferred_side="left"
    )

    assert placement.side == "left"
    assert (placement.x, placement.y) == (96, 155)


def test_preferred_right_is_honored_when_it_has_room():
    placement = PanelPlacer().place(
        Rect(300, 200, 50, 50), DESKTOP, preferred_side="right"
    )

    assert placement.side == "right"
    assert (placement.x, placement.y) == (362, 155)


def test_preferred_right_wins_over_roomier_left():
    region = Rect(500, 200, 50, 50)

    assert PanelPlacer().place(region, DESKTOP).side == "left"
    placement = PanelPlacer().place(region, DESKTOP, preferred_side="right")
    assert placement.side == "right"
    assert (placement.x, placement.y) == (562, 155)


def test_preferred_left_wins_over_roomier_right():
    region = Rect(300, 200, 50, 50)

    assert PanelPlacer().place(region, DESKTOP).side == "right"
    assert PanelPlacer().place(region, DESKTOP, preferred_side="left").side == "left"


def test_preferred_side_without_room_falls_back():
    placement = PanelPlacer().place(
        Rect(650, 100, 50, 50), DESKTOP, preferred_side="right"
    )

    assert placement.side == "left"


def test_goes_below_when_neither_horizontal_side_fits():
    placement = PanelPlacer().place(Rect(200, 100, 400, 50), DESKTOP)

    assert placement.side == "bottom"
    assert (placement.x, placement.y) == (304, 162)


def test_horizontal_tie_prefers_right():
    placement = PanelPlacer().place(Rect(300, 250, 200, 100), DESKTOP)

    assert placement.side == "right"


def test_vertical_tie_prefers_bottom():
    placement = PanelPlacer().place(
        Rect(0, 150, 320, 100), Rect.from_size(320, 400)
    )

    assert placement.side == "bottom"


def test_compact_layout_prefers_vertical_placement():
    region = Rect(50, 50, 100, 100)
    container = Rect.from_size(600, 800)

    assert PanelPlacer().place(region, container).side == "bottom"
    assert PanelPlacer().place(region, container, is_compact=False).side == "right"


def test_compact_fallback_picks_side_with_most_space():
    placement = PanelPlacer().place(
        Rect(80, 100, 160, 40), Rect.from_size(320, 250), is_compact=True
    )

    assert placement.side == "bottom"
    assert (placement.x, placement.y) == (80, 114)


def test_forced_desktop_layout_in_narrow_container():
    placement = PanelPlacer().place(
        Rect(100, 150, 50, 40), Rect.from_size(400, 600), is_compact=False
    )

    assert placement.side in ("left", "right")
    assert (placement.x, placement.y) == (162, 100)


@pytest.mark.parametrize("container", [Rect.from_size(800, 600), Rect.from_size(320, 250)])
def test_panel_stays_inside_padded_container(container):
    placer = PanelPlacer()
    panel = responsive_panel_size(container.width)
    pad = placer.layout.edge_padding

    for x in range(0, int(container.width), 37):
        for y in range(0, int(container.height), 29):
            placement = placer.place(Rect(x, y, 40, 30), container)
            assert pad <= placement.x <= container.width - panel.width - pad
            assert pad <= placement.y <= container.height - panel.height - pad


@pytest.mark.parametrize(
    "region, container",
    [
        (Rect(0, 0, 200, 200), Rect.from_size(100, 100)),
        (Rect(50, 50, -10, -10), Rect.from_size(800, 600)),
        (Rect(-40, -40, 10, 10), Rect.from_size(800, 600)),
        (Rect(10, 10, 5, 5), Rect.from_size(0, 0)),
    ],
)
def test_degraded_inputs_still_produce_a_placement(region, container):
    placement = PanelPlacer().place(region, container)

    assert placement.side in ("left", "right", "top", "bottom")
    assert placement.x >= 16
    assert placement.y >= 16


def test_custom_layout_changes_panel_geometry():
    layout = PanelLayout(panel_width=100, panel_height=50, clearance=10, edge_padding=0)
    placement = PanelPlacer(layout).place(Rect(100, 100, 20, 20), DESKTOP)

    assert placement.side == "right"
    assert (placement.x, placement.y) == (130, 85)


def test_responsive_panel_size():
    assert responsive_panel_size(800) == PanelSize(192, 140)
    assert responsive_panel_size(640) == PanelSize(192, 140)
    assert responsive_panel_size(320) == PanelSize(160, 120)
    assert responsive_panel_size(100) == PanelSize(68, 120)
    assert responsive_panel_size(20) == PanelSize(0, 120)


def test_is_position_within_bounds():
    panel = PanelSize(192, 140)

    assert is_position_within_bounds(16, 16, panel, DESKTOP)
    assert is_position_within_bounds(608, 460, panel, DESKTOP)
    assert not is_position_within_bounds(700, 16, panel, DESKTOP)
    assert not is_position_within_bounds(-1, 0, panel, DESKTOP)


def test_segment_to_rect_scales_percentages():
    segment = ColorSegment(
        id="hair",
        name="Hair",
        x=10,
        y=20,
        width=30,
        height=40,
        shape="rectangle",
        color=color_from_hex("#FF5733"),
    )

    assert segment_to_rect(segment, DESKTOP).to_dict() == pytest.approx(
        {"x": 80, "y": 120, "width": 240, "height": 240}
    )
