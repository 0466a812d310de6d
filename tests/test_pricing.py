"""Tests for the pricing calculator, field parsing and the catalog cache."""

import pytest
from fastapi import HTTPException

from softwash.cache import MemoryCache, PricingCache
from softwash.domain.pricing.catalog import default_discounts, default_services, seed_catalog
from softwash.domain.pricing.schemas import DiscountUpdate, QuoteRequest, ServiceUpdate
from softwash.domain.pricing.service import (
    PricingService,
    calculate_total,
    discount_to_dict,
    parse_field_value,
    service_to_dict,
)
from softwash.models import Service

SERVICES = [service_to_dict(s) for s in default_services()]
DISCOUNTS = [discount_to_dict(d) for d in default_discounts()]


def quote(selection, manual=None):
    return calculate_total(selection, SERVICES, DISCOUNTS, manual)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestCalculator:
    def test_single_service_no_discount(self):
        result = quote(["deck-large"])
        assert result.subtotal == 350
        assert result.auto_discount is None
        assert result.total == 350
        assert result.total_duration == 2

    def test_two_base_services_get_first_tier(self):
        result = quote(["house-single", "deck-medium"])
        assert result.subtotal == 825
        assert result.auto_discount == "multi-2"
        assert result.savings == 82.5
        assert result.total == 742.5

    def test_only_highest_tier_applies(self):
        result = quote(["house-single", "house-single-roof", "deck-little", "fence-standard"])
        assert result.base_count == 3
        assert result.auto_discount == "multi-3"
        assert result.auto_percent == 15
        assert result.subtotal == 1175
        assert result.savings == 176.25
        assert result.total == 998.75

    def test_addons_do_not_count_toward_tiers(self):
        result = quote(["house-plus", "house-plus-roof", "house-plus-uv"])
        assert result.base_count == 1
        assert result.auto_discount is None

    def test_manual_discounts_add_to_auto_tier(self):
        result = quote(["house-single", "deck-medium"], manual=["cash"])
        assert result.total_percent == 20
        assert result.total == 660

    def test_total_percent_capped(self):
        discounts = DISCOUNTS + [
            {"key": "friends", "label": "Friends", "percent": 95.0, "auto_apply": False, "min_services": None}
        ]
        result = calculate_total(["deck-little", "fence-large"], SERVICES, discounts, ["friends", "cash"])
        assert result.total_percent == 100
        assert result.total == 0

    def test_duration_rounds_up_fractional_hours(self):
        result = quote(["house-rancher", "house-rancher-windows", "house-rancher-driveway"])
        assert not hasattr(result, "raw_hours")
        assert result.total_duration == 5

    def test_empty_selection(self):
        result = quote([])
        assert result.total == 0
        assert result.total_duration == 0

    def test_duplicate_keys_counted_once(self):
        assert quote(["boat-small", "boat-small"]).subtotal == 150

    def test_unknown_service(self):
        with pytest.raises(ValueError, match="Unknown service"):
            quote(["pressure-wash-moon"])

    def test_addon_requires_its_variant(self):
        with pytest.raises(ValueError, match="requires Single Family House Wash"):
            quote(["house-rancher", "house-single-roof"])

    def test_one_variant_per_group(self):
        with pytest.raises(ValueError, match="Only one house service"):
            quote(["house-rancher", "house-plus"])

    def test_auto_discount_cannot_be_picked(self):
        with pytest.raises(ValueError, match="applied automatically"):
            quote(["deck-little"], manual=["multi-2"])

    def test_unknown_discount(self):
        with pytest.raises(ValueError, match="Unknown discount"):
            quote(["deck-little"], manual=["coupon"])


class TestParseFieldValue:
    def test_service_fields(self):
        assert parse_field_value("service", "price", "600") == 600
        assert parse_field_value("service", "price", "600.0") == 600
        assert parse_field_value("service", "duration", "2.5") == 2.5
        assert parse_field_value("service", "active", "No") is False
        assert parse_field_value("service", "label", "  Big Deck ") == "Big Deck"

    def test_discount_percent(self):
        assert parse_field_value("discount", "percent", "12.5") == 12.5

    def test_rejects_bad_values(self):
        with pytest.raises(ValueError, match="price must be a whole number"):
            parse_field_value("service", "price", "19.99")
        with pytest.raises(ValueError, match="price must be zero or more"):
            parse_field_value("service", "price", "-5")
        with pytest.raises(ValueError, match="duration must be greater than zero"):
            parse_field_value("service", "duration", "0")
        with pytest.raises(ValueError, match="percent must be between 0 and 100"):
            parse_field_value("discount", "percent", "150")
        with pytest.raises(ValueError, match="price is not a valid value"):
            parse_field_value("service", "price", "cheap")

    def test_rejects_unknown_field(self):
        with pytest.raises(ValueError, match="cannot be changed"):
            parse_field_value("discount", "min_services", "4")


class TestSeedCatalog:
    def test_seeds_once(self, db):
        assert seed_catalog(db) is True
        assert seed_catalog(db) is False
        assert db.query(Service).filter(Service.key == "house-plus-roof").one().parent_key == "house-plus"


class TestMemoryCache:
    def test_entries_expire(self):
        clock = FakeClock()
        store = MemoryCache(clock=clock)
        store.set("k", {"a": 1}, ttl=60)
        assert store.get("k") == {"a": 1}
        clock.now += 61
        assert store.get("k") is None

    def test_delete(self):
        store = MemoryCache()
        store.set("k", 1)
        assert store.delete("k") is True
        assert store.delete("k") is False


class TestPricingService:
    @pytest.fixture
    def service(self, seeded_db):
        return PricingService(seeded_db, PricingCache(60))

    def test_catalog_lists_active_rows(self, service):
        catalog = service.get_catalog()
        keys = {s["key"] for s in catalog["services"]}
        assert "house-plus" in keys
        assert {d["key"] for d in catalog["discounts"]} == {"multi-2", "multi-3", "cash", "returning"}

    def test_catalog_served_from_cache_until_invalidated(self, service, seeded_db):
        service.get_catalog()
        row = seeded_db.query(Service).filter(Service.key == "deck-little").one()
        row.price = 999
        seeded_db.commit()

        cached = {s["key"]: s["price"] for s in service.get_catalog()["services"]}
        assert cached["deck-little"] == 175

        service.cache.invalidate()
        fresh = {s["key"]: s["price"] for s in service.get_catalog()["services"]}
        assert fresh["deck-little"] == 999

    def test_update_service_invalidates(self, service):
        service.get_catalog()
        service.update_service("deck-little", ServiceUpdate(price=190, active=True))
        prices = {s["key"]: s["price"] for s in service.get_catalog()["services"]}
        assert prices["deck-little"] == 190

    def test_deactivated_service_leaves_catalog(self, service):
        service.update_service("boat-large", ServiceUpdate(active=False))
        assert "boat-large" not in {s["key"] for s in service.get_catalog()["services"]}

    def test_update_errors(self, service):
        with pytest.raises(HTTPException) as exc:
            service.update_service("nope", ServiceUpdate(price=1))
        assert exc.value.status_code == 404
        with pytest.raises(HTTPException) as exc:
            service.update_service("deck-little", ServiceUpdate())
        assert exc.value.status_code == 400
        with pytest.raises(HTTPException) as exc:
            service.update_discount("cash", DiscountUpdate(percent=120))
        assert exc.value.status_code == 400

    def test_quote_maps_errors_to_400(self, service):
        assert service.quote(QuoteRequest(services=["deck-little"])).total == 175
        with pytest.raises(HTTPException) as exc:
            service.quote(QuoteRequest(services=["house-single-uv"]))
        assert exc.value.status_code == 400
