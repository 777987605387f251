"""Location catalog with base fares and travel times, plus passenger multipliers."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


class LocationCategory(str, Enum):
    URBAN = "urban"
    RURAL = "rural"
    NEIGHBORING_CITY = "neighboring_city"


@dataclass(frozen=True)
class LocationEntry:
    """Base fare (BRL) and estimated travel time (minutes) for a destination."""
    price: float
    time: int


LOCATION_CATALOG: dict[LocationCategory, dict[str, LocationEntry]] = {
    LocationCategory.URBAN: {
        "Centro": LocationEntry(price=15, time=10),
        "Rodoviária": LocationEntry(price=18, time=12),
        "Hospital": LocationEntry(price=20, time=15),
        "Shopping": LocationEntry(price=22, time=18),
        "Prefeitura": LocationEntry(price=16, time=11),
        "Escola Municipal": LocationEntry(price=17, time=13),
        "Posto de Saúde": LocationEntry(price=19, time=14),
        "Banco do Brasil": LocationEntry(price=16, time=12),
    },
    LocationCategory.RURAL: {
        "Zona Rural Norte": LocationEntry(price=35, time=25),
        "Zona Rural Sul": LocationEntry(price=38, time=28),
        "Sítio São João": LocationEntry(price=40, time=30),
        "Fazenda Esperança": LocationEntry(price=45, time=35),
        "Chácara Boa Vista": LocationEntry(price=42, time=32),
        "Assentamento Primavera": LocationEntry(price=48, time=38),
    },
    LocationCategory.NEIGHBORING_CITY: {
        "Cuiabá Centro": LocationEntry(price=80, time=60),
        "Várzea Grande": LocationEntry(price=75, time=55),
        "Aeroporto Cuiabá": LocationEntry(price=85, time=65),
        "Shopping Cuiabá": LocationEntry(price=82, time=62),
        "Terminal Rodoviário CBA": LocationEntry(price=78, time=58),
        "UFMT": LocationEntry(price=88, time=68),
    },
}

PASSENGER_MULTIPLIERS: dict[int, float] = {1: 1.0, 2: 1.0, 3: 1.2, 4: 1.4}

DEFAULT_MULTIPLIER = 1.4
FALLBACK_PRICE = 30.0
FALLBACK_TIME = 20


def _freeze(catalog: dict) -> Mapping:
    return MappingProxyType({k: MappingProxyType(dict(v)) for k, v in catalog.items()})


@dataclass(frozen=True)
class PricingCatalog:
    """Immutable view of the location table and multipliers, built once at startup."""

    locations: Mapping[LocationCategory, Mapping[str, LocationEntry]] = field(
        default_factory=lambda: _freeze(LOCATION_CATALOG)
    )
    multipliers: Mapping[int, float] = field(
        default_factory=lambda: MappingProxyType(dict(PASSENGER_MULTIPLIERS))
    )
    default_multiplier: float = DEFAULT_MULTIPLIER
    fallback_price: float = FALLBACK_PRICE
    fallback_time: int = FALLBACK_TIME

    def names(self, category: LocationCategory) -> list[str]:
        """Location names of one category, in catalog order."""
        return list(self.locations.get(category, {}))

    def find(self, name: str) -> Optional[LocationEntry]:
        """Look a location up across all categories. Exact name match."""
        for entries in self.locations.values():
            if name in entries:
                return entries[name]
        return None

    def multiplier_for(self, passengers: int) -> float:
        return self.multipliers.get(passengers, self.default_multiplier)

    def cheapest(self, category: LocationCategory) -> Optional[float]:
        """Lowest base fare in a category, used by the price table."""
        prices = [entry.price for entry in self.locations.get(category, {}).values()]
        return min(prices) if prices else None
