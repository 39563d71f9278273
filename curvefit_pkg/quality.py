"""Goodness-of-fit measures."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .types import DataPoint

ELLIPSE_DISTANCE_SAMPLES = 100
ELLIPSE_DISTANCE_NEWTON_STEPS = 5


def r_squared(y: Sequence[float] | np.ndarray, predicted: Sequence[float] | np.ndarray) -> float:
    """Coefficient of determination, 1 - SS_res / SS_tot.

    Returns NaN when any prediction is non-finite. When the observations
    have no variance the fit scores 1 if it reproduces them, else 0.
    """
    y = np.asarray(y, dtype=float)
    predicted = np.asarray(predicted, dtype=float)
    if not np.all(np.isfinite(predicted)):
        return math.nan

    ss_res = float(np.sum((y - predicted) ** 2))
    ss_tot = float(np.sum((y - np.mean(y)) ** 2))
    if ss_tot == 0.0:
        return 1.0 if ss_res < 1e-10 else 0.0
    return 1.0 - ss_res / ss_tot


def clamp_unit(value: float) -> float:
    """Clamp an R² value into [0, 1]; NaN becomes 0."""
    if not math.isfinite(value):
        return 0.0
    return min(1.0, max(0.0, value))


def distance_to_ellipse(px: float, py: float, h: float, k: float, a: float, b: float) -> float:
    """Shortest distance from (px, py) to the axis-aligned ellipse boundary.

    Samples the boundary parametrically, then refines the best angle with a
    few Newton steps on the squared distance.
    """
    dx = px - h
    dy = py - k
    if dx == 0.0 and dy == 0.0:
        return min(a, b)

    angles = np.linspace(0.0, 2.0 * math.pi, ELLIPSE_DISTANCE_SAMPLES, endpoint=False)
    dists = np.hypot(dx - a * np.cos(angles), dy - b * np.sin(angles))
    best = int(np.argmin(dists))
    coarse = float(dists[best])

    t = float(angles[best])
    for _ in range(ELLIPSE_DISTANCE_NEWTON_STEPS):
        cos_t, sin_t = math.cos(t), math.sin(t)
        ex = dx - a * cos_t
        ey = dy - b * sin_t
        # derivatives of 0.5 * |p - e(t)|^2
        first = a * sin_t * ex - b * cos_t * ey
        second = (
            a * cos_t * ex + b * sin_t * ey + a * a * sin_t * sin_t + b * b * cos_t * cos_t
        )
        if abs(second) < 1e-12:
            break
        t -= first / second

    refined = math.hypot(dx - a * math.cos(t), dy - b * math.sin(t))
    if not math.isfinite(refined):
        return coarse
    return min(coarse, refined)


def ellipse_r_squared(points: Sequence[DataPoint], h: float, k: float, a: float, b: float) -> float:
    """Geometric R² of an ellipse: boundary distances against centroid spread."""
    if not points:
        return 0.0
    cx = sum(p.x for p in points) / len(points)
    cy = sum(p.y for p in points) / len(points)

    ss_tot = sum((p.x - cx) ** 2 + (p.y - cy) ** 2 for p in points)
    ss_res = sum(distance_to_ellipse(p.x, p.y, h, k, a, b) ** 2 for p in points)

    if ss_tot == 0.0:
        return 1.0 if ss_res == 0.0 else 0.0
    return clamp_unit(1.0 - ss_res / ss_tot)
