"""
Raster surface the globe is painted on.

A BGR numpy frame plus a small canvas-like API: every fill or stroke is
rasterized by OpenCV (anti-aliased) into a uint8 coverage mask over the
shape's region of interest, then composited with a flat color or a gradient
paint and an opacity. A translation origin and a stack of circular clips
give scenes the same drawing model regardless of output size.
"""

from __future__ import annotations

import math
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple, Union

import cv2
import numpy as np

from .colors import BGR
from .util import clamp01

SHIFT = 4
FIX = 1 << SHIFT

Stop = Tuple[float, BGR, float]


# ============================================================
# Paints
# ============================================================


class Gradient:
    """Color stops `(offset, bgr, alpha)` evaluated per pixel."""

    def __init__(self, stops: Sequence[Stop]):
        if not stops:
            raise ValueError("Gradient needs at least one stop")
        ordered = sorted(stops, key=lambda s: s[0])
        self.offsets = np.array([s[0] for s in ordered], dtype=np.float32)
        self.colors = np.array([s[1] for s in ordered], dtype=np.float32)
        self.alphas = np.array([s[2] for s in ordered], dtype=np.float32)

    def param(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def sample(self, xs: np.ndarray, ys: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        t = np.clip(self.param(xs, ys), 0.0, 1.0)
        out = np.empty(t.shape + (3,), dtype=np.float32)
        for c in range(3):
            out[..., c] = np.interp(t, self.offsets, self.colors[:, c])
        alpha = np.interp(t, self.offsets, self.alphas).astype(np.float32)
        return out, alpha


class LinearGradient(Gradient):
    def __init__(self, x0: float, y0: float, x1: float, y1: float, stops: Sequence[Stop]):
        super().__init__(stops)
        self.x0, self.y0 = x0, y0
        self.dx, self.dy = x1 - x0, y1 - y0
        self.len2 = max(1e-9, self.dx * self.dx + self.dy * self.dy)

    def param(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        return ((xs - self.x0) * self.dx + (ys - self.y0) * self.dy) / self.len2


class RadialGradient(Gradient):
    def __init__(self, cx: float, cy: float, r0: float, r1: float, stops: Sequence[Stop]):
        super().__init__(stops)
        self.cx, self.cy = cx, cy
        self.r0 = r0
        self.span = max(1e-9, r1 - r0)

    def param(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        d = np.sqrt((xs - self.cx) ** 2 + (ys - self.cy) ** 2)
        return (d - self.r0) / self.span


Paint = Union[BGR, Gradient]


# ============================================================
# Local transforms
# ============================================================


@dataclass
class Pose:
    """Local shape space -> surface space: scale (negative mirrors), rotate, translate."""

    x: float = 0.0
    y: float = 0.0
    angle: float = 0.0
    sx: float = 1.0
    sy: float = 1.0

    def point(self, lx: float, ly: float) -> Tuple[float, float]:
        px, py = lx * self.sx, ly * self.sy
        c, s = math.cos(self.angle), math.sin(self.angle)
        return self.x + px * c - py * s, self.y + px * s + py * c

    def points(self, pts: Sequence[Tuple[float, float]]) -> List[Tuple[float, float]]:
        return [self.point(px, py) for px, py in pts]

    def ellipse(self, lx: float, ly: float, rx: float, ry: float, rot_deg: float = 0.0) -> tuple:
        cx, cy = self.point(lx, ly)
        if self.sx * self.sy < 0:
            rot_deg = -rot_deg
        return cx, cy, rx * abs(self.sx), ry * abs(self.sy), math.degrees(self.angle) + rot_deg


# ============================================================
# Surface
# ============================================================


class Surface:
    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError("Surface size must be positive")
        self.width = int(width)
        self.height = int(height)
        self.frame = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        self.ox = 0.0
        self.oy = 0.0
        self._clips: List[tuple[np.ndarray, np.ndarray]] = []

    @property
    def center(self) -> Tuple[float, float]:
        return self.width / 2.0, self.height / 2.0

    def snapshot(self) -> np.ndarray:
        return self.frame.copy()

    def clear(self, color: BGR = (0, 0, 0)) -> None:
        self.frame[:] = color

    @contextmanager
    def translated(self, dx: float, dy: float) -> Iterator["Surface"]:
        self.ox += dx
        self.oy += dy
        try:
            yield self
        finally:
            self.ox -= dx
            self.oy -= dy

    # ---------------- clipping ----------------

    def push_clip_circle(self, x: float, y: float, r: float) -> None:
        mask = np.zeros((self.height, self.width), dtype=np.uint8)
        cv2.circle(mask, self._fx(x, y), int(round(r * FIX)), 255, -1, cv2.LINE_AA, SHIFT)
        self._clips.append((self.frame.copy(), mask))

    def pop_clip(self) -> None:
        if not self._clips:
            raise RuntimeError("pop_clip without matching push_clip_circle")
        saved, mask = self._clips.pop()
        a = (mask.astype(np.float32) / 255.0)[:, :, None]
        out = saved.astype(np.float32) * (1.0 - a) + self.frame.astype(np.float32) * a
        self.frame[:] = np.clip(out, 0, 255).astype(np.uint8)

    @property
    def clip_depth(self) -> int:
        return len(self._clips)

    # ---------------- compositing ----------------

    def _fx(self, x: float, y: float) -> Tuple[int, int]:
        return int(round((x + self.ox) * FIX)), int(round((y + self.oy) * FIX))

    def _roi(self, x0: float, y0: float, x1: float, y1: float, pad: int = 2):
        ax0 = max(0, int(math.floor(x0 + self.ox)) - pad)
        ay0 = max(0, int(math.floor(y0 + self.oy)) - pad)
        ax1 = min(self.width, int(math.ceil(x1 + self.ox)) + pad)
        ay1 = min(self.height, int(math.ceil(y1 + self.oy)) + pad)
        if ax0 >= ax1 or ay0 >= ay1:
            return None
        return ax0, ay0, ax1, ay1

    def _local(self, roi, x: float, y: float) -> Tuple[int, int]:
        return (
            int(round((x + self.ox - roi[0]) * FIX)),
            int(round((y + self.oy - roi[1]) * FIX)),
        )

    def _composite(self, roi, mask: np.ndarray, paint: Paint, alpha: float) -> None:
        ax0, ay0, ax1, ay1 = roi
        a = mask.astype(np.float32) * (clamp01(alpha) / 255.0)
        if isinstance(paint, Gradient):
            ys, xs = np.mgrid[ay0:ay1, ax0:ax1].astype(np.float32)
            src, ga = paint.sample(xs - self.ox, ys - self.oy)
            a *= ga
        else:
            src = np.array(paint, dtype=np.float32)
        dst = self.frame[ay0:ay1, ax0:ax1]
        out = dst.astype(np.float32) * (1.0 - a[:, :, None]) + src * a[:, :, None]
        dst[:] = np.clip(out, 0, 255).astype(np.uint8)

    def _mask(self, roi) -> np.ndarray:
        return np.zeros((roi[3] - roi[1], roi[2] - roi[0]), dtype=np.uint8)

    # ---------------- shapes ----------------

    def fill_circle(self, x: float, y: float, r: float, paint: Paint, alpha: float = 1.0) -> None:
        if r <= 0 or alpha <= 0:
            return
        roi = self._roi(x - r, y - r, x + r, y + r)
        if roi is None:
            return
        mask = self._mask(roi)
        cv2.circle(mask, self._local(roi, x, y), max(1, int(round(r * FIX))), 255, -1, cv2.LINE_AA, SHIFT)
        self._composite(roi, mask, paint, alpha)

    def stroke_circle(self, x: float, y: float, r: float, paint: Paint, thickness: int = 1, alpha: float = 1.0) -> None:
        if r <= 0 or alpha <= 0:
            return
        t = max(1, int(thickness))
        roi = self._roi(x - r - t, y - r - t, x + r + t, y + r + t)
        if roi is None:
            return
        mask = self._mask(roi)
        cv2.circle(mask, self._local(roi, x, y), int(round(r * FIX)), 255, t, cv2.LINE_AA, SHIFT)
        self._composite(roi, mask, paint, alpha)

    def fill_ellipse(
        self,
        x: float,
        y: float,
        rx: float,
        ry: float,
        paint: Paint,
        alpha: float = 1.0,
        angle_deg: float = 0.0,
        start_deg: float = 0.0,
        end_deg: float = 360.0,
    ) -> None:
        self._ellipse(x, y, rx, ry, paint, alpha, angle_deg, start_deg, end_deg, -1)

    def stroke_ellipse(
        self,
        x: float,
        y: float,
        rx: float,
        ry: float,
        paint: Paint,
        thickness: int = 1,
        alpha: float = 1.0,
        angle_deg: float = 0.0,
        start_deg: float = 0.0,
        end_deg: float = 360.0,
    ) -> None:
        self._ellipse(x, y, rx, ry, paint, alpha, angle_deg, start_deg, end_deg, max(1, int(thickness)))

    def _ellipse(self, x, y, rx, ry, paint, alpha, angle_deg, start_deg, end_deg, thickness) -> None:
        if rx <= 0 or ry <= 0 or alpha <= 0:
            return
        ext = max(rx, ry) + max(0, thickness)
        roi = self._roi(x - ext, y - ext, x + ext, y + ext)
        if roi is None:
            return
        mask = self._mask(roi)
        axes = (max(1, int(round(rx * FIX))), max(1, int(round(ry * FIX))))
        cv2.ellipse(
            mask, self._local(roi, x, y), axes, angle_deg, start_deg, end_deg, 255, thickness, cv2.LINE_AA, SHIFT
        )
        self._composite(roi, mask, paint, alpha)

    def fill_poly(self, pts: Sequence[Tuple[float, float]], paint: Paint, alpha: float = 1.0) -> None:
        if len(pts) < 3 or alpha <= 0:
            return
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        roi = self._roi(min(xs), min(ys), max(xs), max(ys))
        if roi is None:
            return
        mask = self._mask(roi)
        arr = np.array([self._local(roi, px, py) for px, py in pts], dtype=np.int32)
        cv2.fillPoly(mask, [arr], 255, cv2.LINE_AA, SHIFT)
        self._composite(roi, mask, paint, alpha)

    def stroke_poly(
        self,
        pts: Sequence[Tuple[float, float]],
        paint: Paint,
        thickness: int = 1,
        alpha: float = 1.0,
        closed: bool = False,
    ) -> None:
        if len(pts) < 2 or alpha <= 0:
            return
        t = max(1, int(thickness))
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        roi = self._roi(min(xs) - t, min(ys) - t, max(xs) + t, max(ys) + t)
        if roi is None:
            return
        mask = self._mask(roi)
        arr = np.array([self._local(roi, px, py) for px, py in pts], dtype=np.int32)
        cv2.polylines(mask, [arr], closed, 255, t, cv2.LINE_AA, SHIFT)
        self._composite(roi, mask, paint, alpha)

    def line(
        self, x1: float, y1: float, x2: float, y2: float, paint: Paint, thickness: int = 1, alpha: float = 1.0
    ) -> None:
        self.stroke_poly([(x1, y1), (x2, y2)], paint, thickness, alpha)

    def fill_rect(self, x: float, y: float, w: float, h: float, paint: Paint, alpha: float = 1.0) -> None:
        self.fill_poly([(x, y), (x + w, y), (x + w, y + h), (x, y + h)], paint, alpha)

    def fill_screen(self, paint: Paint, alpha: float = 1.0) -> None:
        roi = (0, 0, self.width, self.height)
        mask = np.full((self.height, self.width), 255, dtype=np.uint8)
        self._composite(roi, mask, paint, alpha)

    def glow(self, x: float, y: float, r: float, color: BGR, alpha: float = 1.0) -> None:
        grad = RadialGradient(x, y, 0.0, r, [(0.0, color, 1.0), (1.0, color, 0.0)])
        self.fill_circle(x, y, r, grad, alpha)

    # ---------------- text ----------------

    def text(
        self,
        text: str,
        x: float,
        y: float,
        color: BGR,
        size_px: float = 20.0,
        thickness: int = 1,
        alpha: float = 1.0,
        font: int = cv2.FONT_HERSHEY_TRIPLEX,
        shadow: bool = True,
        shadow_blur: int = 4,
    ) -> None:
        """Draw `text` centered on (x, y)."""
        if not text:
            return
        scale = size_px / 30.0
        (tw, th), base = cv2.getTextSize(text, font, scale, thickness)
        pad = shadow_blur * 2 + thickness + 2
        roi = self._roi(x - tw / 2.0 - pad, y - th / 2.0 - pad, x + tw / 2.0 + pad, y + th / 2.0 + base + pad)
        if roi is None:
            return
        mask = self._mask(roi)
        org = (
            int(round(x + self.ox - roi[0] - tw / 2.0)),
            int(round(y + self.oy - roi[1] + th / 2.0)),
        )
        cv2.putText(mask, text, org, font, scale, 255, thickness, cv2.LINE_AA)
        if shadow:
            k = shadow_blur * 2 + 1
            shade = cv2.GaussianBlur(mask, (k, k), 0)
            self._composite(roi, shade, (0, 0, 0), 0.5 * alpha)
        self._composite(roi, mask, color, alpha)
