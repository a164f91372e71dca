"""
Property registry.

Properties are configured as numbered environment triples
(PROPERTY_1_ID, PROPERTY_1_NAME, PROPERTY_1_API_KEY, ...). Room capacity is
not configurable per deployment; it comes from the static table below.
"""

from __future__ import annotations

import os
from typing import Mapping

import structlog

from hotel_dashboard.models.properties import Property

logger = structlog.get_logger(__name__)

MAX_PROPERTY_SLOTS = 20

# Bed capacity per Cloudbeds property ID
PROPERTY_CAPACITY: dict[str, int] = {
    "311271": 176,  # Azzurro Pod Hotel Darling Harbour
    "311267": 48,  # Azzurro Pod Hotel Central Sydney
    "311134": 69,  # Azzurro Boutique Hotel Surry Hills
    "311272": 107,  # Azzurro Pod Hotel Potts Point
    "311268": 14,  # The Pyrmont Budget Hotel
}


def load_properties(environ: Mapping[str, str] | None = None) -> list[Property]:
    """
    Build the property list from numbered environment variables.

    Slots with a missing ID, name or API key are skipped.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        list[Property]: Configured properties in slot order
    """
    env = os.environ if environ is None else environ
    properties: list[Property] = []

    for slot in range(1, MAX_PROPERTY_SLOTS + 1):
        property_id = env.get(f"PROPERTY_{slot}_ID")
        name = env.get(f"PROPERTY_{slot}_NAME")
        api_key = env.get(f"PROPERTY_{slot}_API_KEY")
        if not (property_id and name and api_key):
            continue

        capacity = PROPERTY_CAPACITY.get(property_id, 0)
        if capacity == 0:
            logger.warning("property_capacity_unknown", property_id=property_id, name=name)

        properties.append(Property(id=property_id, name=name, api_key=api_key, capacity=capacity))

    logger.info("properties_loaded", count=len(properties))
    return properties
