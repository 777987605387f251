"""Tests for the quote calculator and the pricing catalog."""

import pytest

from src.tools.locations import (
    DEFAULT_MULTIPLIER,
    LOCATION_CATALOG,
    PASSENGER_MULTIPLIERS,
    LocationCategory,
    PricingCatalog,
)
from src.tools.quote import calculate_quote


class TestUnknownDestination:
    @pytest.mark.parametrize("destination", ["Rua das Flores, 120", "", "centro", "Lua"])
    def test_fallback_fare_and_time(self, catalog, destination):
        quote = calculate_quote(destination, 1, catalog)
        assert quote.base_fare == 30
        assert quote.estimated_time == 20


class TestMultipliers:
    @pytest.mark.parametrize("count", sorted(PASSENGER_MULTIPLIERS))
    def test_table_multiplier_applied(self, catalog, count):
        quote = calculate_quote("Várzea Grande", count, catalog)
        assert quote.total == pytest.approx(75 * PASSENGER_MULTIPLIERS[count])

    @pytest.mark.parametrize("count", [5, 6, 12])
    def test_missing_count_uses_default(self, catalog, count):
        quote = calculate_quote("Centro", count, catalog)
        assert quote.total == pytest.approx(15 * DEFAULT_MULTIPLIER)
        assert DEFAULT_MULTIPLIER == 1.4

    def test_surcharge_is_total_minus_base(self, catalog):
        quote = calculate_quote("Hospital", 3, catalog)
        assert quote.base_fare == 20
        assert quote.total == pytest.approx(24.0)
        assert quote.surcharge == pytest.approx(quote.total - quote.base_fare)

    def test_surcharge_never_negative(self, catalog):
        for category in LOCATION_CATALOG.values():
            for name in category:
                for count in range(1, 7):
                    assert calculate_quote(name, count, catalog).surcharge >= 0


class TestCatalogQuote:
    def test_neighboring_city_two_passengers(self, catalog):
        quote = calculate_quote("Cuiabá Centro", 2, catalog)
        assert quote.base_fare == 80
        assert quote.total == pytest.approx(80.0)
        assert quote.surcharge == pytest.approx(0.0)
        assert quote.estimated_time == 60

    def test_rural_destination(self, catalog):
        quote = calculate_quote("Fazenda Esperança", 1, catalog)
        assert quote.base_fare == 45
        assert quote.estimated_time == 35

    def test_full_precision_kept(self):
        catalog = PricingCatalog(multipliers={1: 1.15})
        quote = calculate_quote("Prefeitura", 1, catalog)
        assert quote.total == 16 * 1.15
        assert quote.surcharge == quote.total - quote.base_fare


class TestPricingCatalog:
    def test_names_in_catalog_order(self, catalog):
        assert catalog.names(LocationCategory.URBAN)[0] == "Centro"
        assert len(catalog.names(LocationCategory.NEIGHBORING_CITY)) == 6

    def test_find_across_categories(self, catalog):
        assert catalog.find("UFMT").price == 88
        assert catalog.find("Zona Rural Sul").time == 28
        assert catalog.find("Nowhere") is None

    def test_cheapest_per_category(self, catalog):
        assert catalog.cheapest(LocationCategory.URBAN) == 15
        assert catalog.cheapest(LocationCategory.RURAL) == 35
        assert catalog.cheapest(LocationCategory.NEIGHBORING_CITY) == 75

    def test_catalog_is_read_only(self, catalog):
        with pytest.raises(TypeError):
            catalog.locations[LocationCategory.URBAN]["Novo"] = None  # type: ignore[index]
