"""Trip quote calculation. Pure, no I/O."""

import logging

from src.schemas.session_schema import Quote
from src.tools.locations import PricingCatalog

logger = logging.getLogger(__name__)


def calculate_quote(destination: str, passengers: int, catalog: PricingCatalog) -> Quote:
    """Price a trip to ``destination`` for ``passengers`` people.

    Unknown destinations fall back to the flat fare and time; passenger
    counts missing from the multiplier table use the default multiplier.
    Nothing here raises for unmatched input.
    """
    entry = catalog.find(destination)
    if entry is None:
        logger.debug("Destination %r not in catalog, using fallback fare", destination)
        base_fare = catalog.fallback_price
        estimated_time = catalog.fallback_time
    else:
        base_fare = entry.price
        estimated_time = entry.time

    total = base_fare * catalog.multiplier_for(passengers)
    return Quote(
        base_fare=base_fare,
        surcharge=total - base_fare,
        total=total,
        estimated_time=estimated_time,
    )
