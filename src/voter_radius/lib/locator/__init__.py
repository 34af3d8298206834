"""Locator library — radius search over geocoded addresses."""

from voter_radius.lib.locator.geometry import (
    METERS_PER_MILE,
    BoundingBox,
    bounding_box,
    haversine_miles,
)
from voter_radius.lib.locator.spatial import CandidateLocator, prefilter_statement

__all__ = [
    "METERS_PER_MILE",
    "BoundingBox",
    "CandidateLocator",
    "bounding_box",
    "haversine_miles",
    "prefilter_statement",
]
