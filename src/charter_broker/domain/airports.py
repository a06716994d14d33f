"""Airport reference data."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Airport:
    """An active airport identified by its IATA code."""

    code: str
    name: str
    city: str
    country: str
    region: str
    is_popular: bool = False
