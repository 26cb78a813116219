"""Merge raw outcomes and summaries into one snapshot."""

from __future__ import annotations

from typing import Mapping

from infrascan.common.models import CategoryOutcome, InfrastructureSnapshot, Location, validate_radius
from infrascan.overpass.summarize import SearchArea, summarize


def assemble(location: Location, radius: float, outcomes: Mapping[str, CategoryOutcome]) -> InfrastructureSnapshot:
    radius = validate_radius(radius)
    area = SearchArea(location=location, radius=radius)
    return InfrastructureSnapshot(
        latitude=location.latitude,
        longitude=location.longitude,
        radius=radius,
        raw=outcomes,
        summary={category: summarize(category, outcome, area) for category, outcome in outcomes.items()},
    )
