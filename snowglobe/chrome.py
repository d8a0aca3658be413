from __future__ import annotations

from .colors import BGR, GOLD, WHITE, WOOD, lighten
from .geometry import GLOBE_RADIUS
from .surface import LinearGradient, Surface

PEDESTAL_HEIGHT = 60.0
PEDESTAL_WIDTH = GLOBE_RADIUS * 1.4
ENGRAVING_SIZE_PX = 20.0


def pedestal_top() -> float:
    return GLOBE_RADIUS - 10.0


def draw_glass(surface: Surface) -> None:
    R = GLOBE_RADIUS
    shine = LinearGradient(0, -R, 0, 0, [(0.0, WHITE, 0.2), (1.0, WHITE, 0.0)])
    surface.fill_circle(0, 0, R, shine)

    surface.fill_ellipse(-R * 0.4, -R * 0.4, 60, 30, WHITE, 0.15, angle_deg=45.0)

    rim = LinearGradient(-R, -R, R, R, [(0.0, WHITE, 0.6), (0.5, WHITE, 0.1), (1.0, WHITE, 0.4)])
    surface.stroke_circle(0, 0, R, rim, thickness=4)


def draw_pedestal(surface: Surface, base_color: BGR = WOOD) -> None:
    base_y = pedestal_top()
    w = PEDESTAL_WIDTH
    mid = lighten(base_color, 0.3)
    grad = LinearGradient(-w / 2, base_y, w / 2, base_y, [(0.0, base_color, 1.0), (0.5, mid, 1.0), (1.0, base_color, 1.0)])
    pts = [
        (-w * 0.4, base_y),
        (w * 0.4, base_y),
        (w * 0.5, base_y + PEDESTAL_HEIGHT),
        (-w * 0.5, base_y + PEDESTAL_HEIGHT),
    ]
    surface.fill_poly(pts, grad)
    surface.stroke_poly(pts, WHITE, thickness=2, alpha=0.2, closed=True)


def draw_engraving(surface: Surface, text: str, color: BGR = GOLD) -> None:
    surface.text(text, 0, pedestal_top() + 35, color, size_px=ENGRAVING_SIZE_PX, shadow_blur=2)


def draw_chrome(surface: Surface, text: str, base_color: BGR = WOOD, text_color: BGR = GOLD) -> None:
    """Glass shine, specular highlight, rim, pedestal and engraving; drawn over every scene."""
    draw_glass(surface)
    draw_pedestal(surface, base_color)
    draw_engraving(surface, text, text_color)
