from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..colors import hex_to_bgr, lighten
from ..entities import Jellyfish, Plankton
from ..geometry import GLOBE_RADIUS, random_pos_in_disc
from ..surface import Pose, RadialGradient, Surface
from .base import SceneState, draw_sky, new_rng, signed, uniform

JELLY_COUNT = 8
PLANKTON_COUNT = 40

SOFT_EDGE = GLOBE_RADIUS - 40
PUSH_BACK = 0.0008
IMPULSE_P = 0.015
MAX_SPEED = 0.9
MIN_SPEED = 0.15
PULSE_GAIN = 0.02
SINK = 0.007
GLOW_TICKS = (90.0, 300.0)

JELLY_COLORS = [hex_to_bgr(c) for c in ("#f0abfc", "#a5b4fc", "#67e8f9", "#fda4af")]


@dataclass
class JellyfishState(SceneState):
    jellies: List[Jellyfish] = field(default_factory=list)
    plankton: List[Plankton] = field(default_factory=list)

    def ambient(self):
        return {"plankton": self.plankton}


def make_plankton(rng, count: int = PLANKTON_COUNT) -> List[Plankton]:
    R = GLOBE_RADIUS
    return [
        Plankton(
            x=(rng.random() - 0.5) * R * 1.8,
            y=(rng.random() - 0.5) * R * 2,
            size=uniform(rng, 0.6, 1.8),
            speed=uniform(rng, 0.1, 0.4),
            opacity=uniform(rng, 0.2, 0.7),
        )
        for _ in range(count)
    ]


def init(seed: Optional[int] = None, config=None, previous=None) -> JellyfishState:
    state = JellyfishState(rng=new_rng(seed))
    rng = state.rng
    state.jellies = []
    for i in range(JELLY_COUNT):
        pos = random_pos_in_disc(rng, GLOBE_RADIUS - 70)
        state.jellies.append(
            Jellyfish(
                x=pos.x,
                y=pos.y,
                vx=signed(rng, 0.3),
                vy=-uniform(rng, 0.1, 0.4),
                size=uniform(rng, 16, 30),
                color=JELLY_COLORS[i % len(JELLY_COLORS)],
                tentacle_phase=rng.random() * math.tau,
                is_glowing=rng.random() < 0.5,
                glow_timer=uniform(rng, *GLOW_TICKS),
            )
        )
    state.plankton = make_plankton(rng)
    return state


def steer(rng, j: Jellyfish, dt: float = 1.0) -> None:
    j.tentacle_phase = (j.tentacle_phase + 0.08 * dt) % math.tau
    # bell contraction pushes upward on the down-stroke
    pulse = max(0.0, math.sin(j.tentacle_phase))
    j.vy -= pulse * PULSE_GAIN * dt
    j.vy += SINK * dt
    j.x += j.vx * dt
    j.y += j.vy * dt

    if math.hypot(j.x, j.y) > SOFT_EDGE:
        j.vx -= j.x * PUSH_BACK * dt
        j.vy -= j.y * PUSH_BACK * dt
    if rng.random() < IMPULSE_P:
        j.vx += signed(rng, 0.2)
        j.vy += signed(rng, 0.2)

    speed = math.hypot(j.vx, j.vy)
    if speed > MAX_SPEED:
        j.vx *= 0.9
        j.vy *= 0.9
    elif speed < MIN_SPEED:
        if speed == 0:
            j.vy = -MIN_SPEED
        j.vx *= 1.1
        j.vy *= 1.1

    j.glow_timer -= dt
    if j.glow_timer <= 0:
        j.is_glowing = not j.is_glowing
        j.glow_timer = uniform(rng, *GLOW_TICKS)


def update(state: JellyfishState, dt: float = 1.0) -> None:
    R = GLOBE_RADIUS
    for j in state.jellies:
        steer(state.rng, j, dt)
    for p in state.plankton:
        p.y -= p.speed * dt
        p.x += math.sin(p.y * 0.03) * 0.1 * dt
        if p.y < -R:
            p.y = R
            p.x = (state.rng.random() - 0.5) * R * 1.8
    state.advance(dt)


def draw_jelly(surface: Surface, j: Jellyfish) -> None:
    pulse = 1.0 + 0.12 * math.sin(j.tentacle_phase)
    w = j.size * pulse
    h = j.size * 0.8 / pulse
    tilt = math.atan2(j.vx, -j.vy) * 0.5 if (j.vx or j.vy) else 0.0
    pose = Pose(j.x, j.y, tilt)
    if j.is_glowing:
        surface.glow(j.x, j.y, j.size * 2.6, j.color, 0.35)
    for k in range(5):
        lx = (k - 2) * w * 0.35
        pts = []
        for s in range(8):
            ly = s * j.size * 0.25
            wave = math.sin(j.tentacle_phase * 1.5 + s * 0.7 + k) * 3
            pts.append(pose.point(lx + wave, ly))
        surface.stroke_poly(pts, lighten(j.color, 0.2), 1, 0.6)
    cx, cy, rx, ry, deg = pose.ellipse(0, 0, w, h)
    bell = RadialGradient(cx, cy - h * 0.3, 0, max(rx, ry), [(0.0, lighten(j.color, 0.5), 0.9), (1.0, j.color, 0.55)])
    surface.fill_ellipse(cx, cy, rx, ry, bell, angle_deg=deg, start_deg=180, end_deg=360)
    surface.fill_ellipse(cx, cy, rx, ry * 0.2, j.color, 0.6, angle_deg=deg)


def draw_background(surface: Surface, state: JellyfishState) -> None:
    draw_sky(surface, hex_to_bgr("#0c4a6e"), hex_to_bgr("#020617"))
    R = GLOBE_RADIUS
    for k in range(4):
        x = -R * 0.6 + k * R * 0.4
        surface.fill_poly([(x - 10, -R), (x + 30, -R), (x + 90, R), (x + 40, R)], (255, 255, 255), 0.04)


def draw_terrain(surface: Surface, state: JellyfishState) -> None:
    R = GLOBE_RADIUS
    surface.fill_ellipse(0, R - 30, R - 30, 45, hex_to_bgr("#1e293b"))


def draw_entities(surface: Surface, state: JellyfishState) -> None:
    for j in sorted(state.jellies, key=lambda j: j.y):
        draw_jelly(surface, j)


def draw_weather(surface: Surface, state: JellyfishState) -> None:
    for p in state.plankton:
        surface.fill_circle(p.x, p.y, p.size, (230, 255, 220), p.opacity)


def render(surface: Surface, state: JellyfishState) -> None:
    draw_background(surface, state)
    draw_terrain(surface, state)
    draw_entities(surface, state)
    draw_weather(surface, state)
