"""Geocoding provider abstraction, implementations and the booking adapter."""

from .adapter import leading_street_number, resolve_address
from .base import GeocodeCandidate, Geocoder

__all__ = ["GeocodeCandidate", "Geocoder", "leading_street_number", "resolve_address"]
