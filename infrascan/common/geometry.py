"""Planar geometry helpers for small geographic polygons."""

from __future__ import annotations

import math
from typing import Sequence

from infrascan.common.constants import METERS_PER_DEGREE
from infrascan.common.models import LatLon


def project_equirectangular(vertices: Sequence[LatLon], reference_latitude: float) -> list[tuple[float, float]]:
    """Project ``(lat, lon)`` vertices onto a local metric plane.

    ``x = lon * K * cos(reference_latitude)`` and ``y = lat * K`` with ``K``
    metres per degree. Only meaningful for polygons spanning a small
    latitude range away from the poles and the antimeridian.
    """
    cos_ref = math.cos(math.radians(reference_latitude))
    return [(pt.lon * METERS_PER_DEGREE * cos_ref, pt.lat * METERS_PER_DEGREE) for pt in vertices]


def shoelace_area(points: Sequence[tuple[float, float]]) -> float:
    total = 0.0
    count = len(points)
    for i in range(count):
        x_i, y_i = points[i]
        x_j, y_j = points[(i + 1) % count]
        total += x_i * y_j - x_j * y_i
    return abs(total) / 2


def polygon_area(vertices: Sequence[LatLon], reference_latitude: float) -> float:
    """Area in square metres of a polygon given as an open or closed vertex ring.

    Callers guarantee at least three vertices.
    """
    return shoelace_area(project_equirectangular(vertices, reference_latitude))
