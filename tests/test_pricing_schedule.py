"""Tests for scheduled price changes and the sweep that applies them."""

from datetime import date, datetime

import pytest
from fastapi import HTTPException

from softwash.cache import PricingCache
from softwash.domain.pricing.repository import PricingRepository
from softwash.domain.pricing.schemas import ScheduleCreate
from softwash.domain.pricing.service import PricingService, apply_due_changes
from softwash.models import PricingSchedule

SWEEP_DAY = date(2026, 11, 1)


@pytest.fixture
def cache():
    return PricingCache(60)


@pytest.fixture
def service(seeded_db, cache):
    return PricingService(seeded_db, cache)


def schedule(service, key="house-single", field="price", new_value="600", effective=SWEEP_DAY, target="service"):
    return service.create_schedule_entry(
        ScheduleCreate(target=target, key=key, field=field, new_value=new_value, effective_date=effective)
    )


class TestScheduleEntries:
    def test_create_validates_value_up_front(self, service):
        with pytest.raises(HTTPException) as exc:
            schedule(service, new_value="six hundred")
        assert exc.value.status_code == 400

    def test_create_unknown_target(self, service):
        with pytest.raises(HTTPException) as exc:
            schedule(service, key="house-mansion")
        assert exc.value.status_code == 404

    def test_list_hides_applied(self, service, seeded_db):
        schedule(service)
        schedule(service, effective=date(2027, 1, 1))
        apply_due_changes(seeded_db, SWEEP_DAY, service.cache)
        assert len(service.list_schedule()) == 1
        assert len(service.list_schedule(include_applied=True)) == 2

    def test_delete_pending_only(self, service, seeded_db):
        entry = schedule(service)
        apply_due_changes(seeded_db, SWEEP_DAY, service.cache)
        with pytest.raises(HTTPException) as exc:
            service.delete_schedule_entry(entry.id)
        assert exc.value.status_code == 400

        pending = schedule(service, effective=date(2027, 1, 1))
        service.delete_schedule_entry(pending.id)
        assert service.list_schedule() == []


class TestSweep:
    def test_applies_due_change_once(self, service, seeded_db):
        entry = schedule(service)
        service.get_catalog()

        assert apply_due_changes(seeded_db, SWEEP_DAY, service.cache) == {"applied": 1, "skipped": 0}
        assert PricingRepository.get_service_by_key(seeded_db, "house-single").price == 600
        seeded_db.refresh(entry)
        assert entry.applied is True
        assert entry.applied_at is not None

        prices = {s["key"]: s["price"] for s in service.get_catalog()["services"]}
        assert prices["house-single"] == 600

        # A later manual edit is not reverted by a second run
        PricingRepository.get_service_by_key(seeded_db, "house-single").price = 650
        seeded_db.commit()
        assert apply_due_changes(seeded_db, SWEEP_DAY, service.cache) == {"applied": 0, "skipped": 0}
        assert PricingRepository.get_service_by_key(seeded_db, "house-single").price == 650

    def test_overlapping_sweep_does_not_reapply(self, service, seeded_db, monkeypatch):
        schedule(service, key="deck-large", new_value="450")
        # Rows read by a second sweep before the first one committed
        stale = PricingRepository.due_schedule_entries(seeded_db, SWEEP_DAY)

        assert apply_due_changes(seeded_db, SWEEP_DAY, service.cache) == {"applied": 1, "skipped": 0}
        PricingRepository.get_service_by_key(seeded_db, "deck-large").price = 500
        seeded_db.commit()

        monkeypatch.setattr(PricingRepository, "due_schedule_entries", staticmethod(lambda db, today: stale))
        assert apply_due_changes(seeded_db, SWEEP_DAY, service.cache) == {"applied": 0, "skipped": 0}
        assert PricingRepository.get_service_by_key(seeded_db, "deck-large").price == 500

    def test_claim_succeeds_once(self, service, seeded_db):
        entry = schedule(service)
        now = datetime(2026, 11, 1, 9, 0)
        assert PricingRepository.claim_schedule_entry(seeded_db, entry.id, now) is True
        assert PricingRepository.claim_schedule_entry(seeded_db, entry.id, now) is False
        seeded_db.commit()
        seeded_db.refresh(entry)
        assert entry.applied is True
        assert entry.applied_at == now

    def test_future_change_untouched(self, service, seeded_db):
        entry = schedule(service, effective=date(2026, 11, 2))
        assert apply_due_changes(seeded_db, SWEEP_DAY, service.cache)["applied"] == 0
        seeded_db.refresh(entry)
        assert entry.applied is False
        assert PricingRepository.get_service_by_key(seeded_db, "house-single").price == 575

    def test_overdue_changes_apply_in_date_order(self, service, seeded_db):
        schedule(service, new_value="590", effective=date(2026, 10, 1))
        schedule(service, new_value="610", effective=date(2026, 10, 15))
        assert apply_due_changes(seeded_db, SWEEP_DAY, service.cache)["applied"] == 2
        assert PricingRepository.get_service_by_key(seeded_db, "house-single").price == 610

    def test_discount_percent_change(self, service, seeded_db):
        schedule(service, target="discount", key="multi-2", field="percent", new_value="12")
        apply_due_changes(seeded_db, SWEEP_DAY, service.cache)
        assert PricingRepository.get_discount_by_key(seeded_db, "multi-2").percent == 12

    def test_vanished_target_is_skipped(self, seeded_db, cache):
        entry = PricingSchedule(
            service_id=99999, field="price", new_value="100", effective_date=SWEEP_DAY, applied=False
        )
        seeded_db.add(entry)
        seeded_db.commit()

        assert apply_due_changes(seeded_db, SWEEP_DAY, cache) == {"applied": 0, "skipped": 1}
        seeded_db.refresh(entry)
        assert entry.applied is True

    def test_invalid_stored_value_is_skipped(self, seeded_db, cache):
        target = PricingRepository.get_service_by_key(seeded_db, "deck-large")
        entry = PricingSchedule(
            service_id=target.id, field="price", new_value="lots", effective_date=SWEEP_DAY, applied=False
        )
        seeded_db.add(entry)
        seeded_db.commit()

        assert apply_due_changes(seeded_db, SWEEP_DAY, cache) == {"applied": 0, "skipped": 1}
        assert target.price == 350
