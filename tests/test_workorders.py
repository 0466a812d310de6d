"""Tests for work order milestones, billing emails and cancellation."""

from datetime import date, datetime

import pytest
from conftest import RecordingNotifier, count, make_booking, upcoming

from softwash.domain.scheduling.schemas import BlockAction
from softwash.domain.scheduling.service import SchedulingService
from softwash.domain.workorders.lifecycle import (
    apply_status_update,
    business_days_after,
    has_progress,
    invoice_number,
)
from softwash.domain.workorders.schemas import WorkOrderUpdate
from softwash.domain.workorders.service import WorkOrderService
from softwash.main import app
from softwash.models import Booking, WorkOrder
from softwash.services.notification_service import get_notifier

NOW = datetime(2026, 10, 19, 14, 30)


def blank_work_order(**flags) -> WorkOrder:
    values = {"job_complete": False, "invoiced": False, "invoice_paid": False, "paid": False}
    values.update(flags)
    return WorkOrder(id=7, **values)


class TestApplyStatusUpdate:
    def test_invoiced_sends_invoice(self):
        outcome = apply_status_update(blank_work_order(), {"invoiced": True}, NOW)
        assert outcome.notification == "invoice"
        assert outcome.changed == ["invoiced"]

    def test_invoice_paid_sends_receipt(self):
        outcome = apply_status_update(blank_work_order(invoiced=True), {"invoice_paid": True}, NOW)
        assert outcome.notification == "receipt"

    def test_invoice_wins_when_both_rise(self):
        outcome = apply_status_update(blank_work_order(), {"invoiced": True, "invoice_paid": True}, NOW)
        assert outcome.notification == "invoice"
        assert set(outcome.changed) == {"invoiced", "invoice_paid"}

    def test_unchanged_flag_sends_nothing(self):
        outcome = apply_status_update(blank_work_order(invoiced=True), {"invoiced": True}, NOW)
        assert outcome.notification is None
        assert outcome.changed == []

    def test_falling_flag_sends_nothing(self):
        work_order = blank_work_order(invoiced=True)
        outcome = apply_status_update(work_order, {"invoiced": False}, NOW)
        assert outcome.notification is None
        assert work_order.invoiced is False

    def test_job_complete_is_silent(self):
        assert apply_status_update(blank_work_order(), {"job_complete": True}, NOW).notification is None

    def test_paid_stamps_and_clears(self):
        work_order = blank_work_order()
        outcome = apply_status_update(work_order, {"paid": True}, NOW)
        assert outcome.paid_stamped
        assert work_order.paid_at == NOW
        assert outcome.notification is None

        outcome = apply_status_update(work_order, {"paid": False}, NOW)
        assert outcome.paid_cleared
        assert work_order.paid_at is None

    def test_none_values_ignored(self):
        work_order = blank_work_order(job_complete=True)
        apply_status_update(work_order, {"job_complete": None, "mileage": 12}, NOW)
        assert work_order.job_complete is True

    def test_has_progress(self):
        assert not has_progress(blank_work_order())
        assert has_progress(blank_work_order(paid=True))


class TestBusinessDays:
    def test_monday_to_next_monday(self):
        assert business_days_after(date(2026, 10, 19), 5) == date(2026, 10, 26)

    def test_friday_to_next_friday(self):
        assert business_days_after(date(2026, 10, 23), 5) == date(2026, 10, 30)

    def test_weekend_start(self):
        assert business_days_after(date(2026, 10, 24), 1) == date(2026, 10, 26)


class TestInvoiceNumber:
    def test_padded_with_created_year(self):
        work_order = WorkOrder(id=42, created_at=datetime(2025, 3, 1))
        assert invoice_number(work_order) == "INV-2025-0042"

    def test_explicit_year(self):
        assert invoice_number(WorkOrder(id=12345), year=2026) == "INV-2026-12345"


class TestWorkOrderApi:
    @pytest.fixture
    def work_order(self, db):
        booking = make_booking(
            db, upcoming(1), "09:00", name="Robin Lee", email="robin@example.com",
            phone="555-222-3333", price="$350.00",
        )
        return db.query(WorkOrder).filter(WorkOrder.booking_id == booking.id).one()

    def test_list_and_get(self, client, admin_headers, work_order):
        response = client.get("/api/admin/work-orders", headers=admin_headers)
        assert response.status_code == 200
        assert [w["id"] for w in response.json()] == [work_order.id]

        detail = client.get(f"/api/admin/work-orders/{work_order.id}", headers=admin_headers).json()
        assert detail["customer_email"] == "robin@example.com"
        assert detail["invoice_number"].endswith(f"-{work_order.id:04d}")

    def test_missing_work_order(self, client, admin_headers):
        assert client.get("/api/admin/work-orders/999", headers=admin_headers).status_code == 404

    def test_billing_flow(self, client, admin_headers, work_order, notifier, db):
        url = f"/api/admin/work-orders/{work_order.id}"

        body = client.patch(url, json={"job_complete": True}, headers=admin_headers).json()
        assert body["email_sent"] is None
        assert notifier.calls == []

        body = client.patch(url, json={"invoiced": True}, headers=admin_headers).json()
        assert body["success"] is True
        assert body["email_sent"] == "invoice"
        assert body["work_order"]["invoiced"] is True
        name, sent = notifier.calls[-1]
        assert name == "invoice"
        assert sent["to"] == "robin@example.com"
        assert sent["amount"] == 350.0
        assert sent["due_date"] == f"{business_days_after(date.today()):%B %d, %Y}"

        body = client.patch(url, json={"invoice_paid": True}, headers=admin_headers).json()
        assert body["email_sent"] == "receipt"
        assert notifier.names() == ["invoice", "receipt"]

        body = client.patch(
            url, json={"paid": True, "payment_method": "Venmo", "mileage": 18.5}, headers=admin_headers
        ).json()
        assert body["email_sent"] is None
        assert body["work_order"]["paid_at"] is not None
        assert body["work_order"]["payment_method"] == "venmo"
        assert len(notifier.calls) == 2

        body = client.patch(url, json={"invoiced": True}, headers=admin_headers).json()
        assert body["email_sent"] is None
        assert len(notifier.calls) == 2

    def test_failed_email_keeps_update(self, client, admin_headers, work_order, db):
        app.dependency_overrides[get_notifier] = lambda: RecordingNotifier(succeed=False)
        body = client.patch(
            f"/api/admin/work-orders/{work_order.id}", json={"invoiced": True}, headers=admin_headers
        ).json()
        assert body["success"] is True
        assert body["email_sent"] is None
        assert body["email_error"] == "delivery failed"
        db.refresh(work_order)
        assert work_order.invoiced is True

    def test_no_email_on_file(self, client, admin_headers, db, notifier):
        booking = make_booking(db, upcoming(2), "10:00", phone="555-222-3333")
        work_order = db.query(WorkOrder).filter(WorkOrder.booking_id == booking.id).one()
        body = client.patch(
            f"/api/admin/work-orders/{work_order.id}", json={"invoiced": True}, headers=admin_headers
        ).json()
        assert body["email_sent"] is None
        assert body["email_error"] is None
        assert notifier.calls == []

    def test_invalid_payment_method(self, client, admin_headers, work_order):
        response = client.patch(
            f"/api/admin/work-orders/{work_order.id}", json={"payment_method": "bitcoin"}, headers=admin_headers
        )
        assert response.status_code == 422

    def test_standalone_work_order(self, client, admin_headers, db):
        response = client.post(
            "/api/admin/work-orders",
            json={"name": "Sam", "email": "sam@example.com", "service": "Gutter flush", "price": "$90"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["booking_id"] is None
        assert response.json()["customer_email"] == "sam@example.com"

        response = client.post("/api/admin/work-orders", json={"service": "Gutter flush"}, headers=admin_headers)
        assert response.status_code == 400
        response = client.post(
            "/api/admin/work-orders", json={"customer_id": 999, "service": "x"}, headers=admin_headers
        )
        assert response.status_code == 404


class TestCustomerActions:
    def test_review_request(self, client, admin_headers, db, notifier):
        booking = make_booking(db, upcoming(3), "09:00", email="kim@example.com")
        work_order = db.query(WorkOrder).filter(WorkOrder.booking_id == booking.id).one()
        response = client.post(f"/api/admin/work-orders/{work_order.id}/review-request", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert notifier.names() == ["review_request"]

    def test_review_request_without_email(self, client, admin_headers, db):
        booking = make_booking(db, upcoming(3), "09:00")
        work_order = db.query(WorkOrder).filter(WorkOrder.booking_id == booking.id).one()
        response = client.post(f"/api/admin/work-orders/{work_order.id}/review-request", headers=admin_headers)
        assert response.status_code == 400

    def test_sms_reminder(self, client, admin_headers, db, notifier):
        day = upcoming(3)
        booking = make_booking(db, day, "11:00", phone="(555) 987-6543")
        work_order = db.query(WorkOrder).filter(WorkOrder.booking_id == booking.id).one()
        response = client.post(f"/api/admin/work-orders/{work_order.id}/sms-reminder", headers=admin_headers)
        assert response.status_code == 200
        _, sent = notifier.calls[-1]
        assert sent["time"] == "11:00"
        assert sent["date_label"] == f"{day:%A, %B %d}"

    def test_sms_failure_is_502(self, client, admin_headers, db):
        booking = make_booking(db, upcoming(3), "11:00", phone="(555) 987-6543")
        work_order = db.query(WorkOrder).filter(WorkOrder.booking_id == booking.id).one()
        app.dependency_overrides[get_notifier] = lambda: RecordingNotifier(succeed=False)
        response = client.post(f"/api/admin/work-orders/{work_order.id}/sms-reminder", headers=admin_headers)
        assert response.status_code == 502
        assert response.json()["success"] is False

    def test_sms_without_phone_or_booking(self, client, admin_headers, db):
        booking = make_booking(db, upcoming(3), "11:00")
        work_order = db.query(WorkOrder).filter(WorkOrder.booking_id == booking.id).one()
        response = client.post(f"/api/admin/work-orders/{work_order.id}/sms-reminder", headers=admin_headers)
        assert response.status_code == 400


class TestCancellation:
    def test_untouched_work_order_is_deleted(self, db):
        booking = make_booking(db, upcoming(1), "09:00")
        SchedulingService(db, RecordingNotifier()).cancel_booking(booking.id)
        assert count(db, Booking) == 0
        assert count(db, WorkOrder) == 0

    def test_work_order_with_progress_is_kept(self, db):
        booking = make_booking(db, upcoming(1), "09:00")
        work_order = db.query(WorkOrder).one()
        work_order.job_complete = True
        db.commit()

        SchedulingService(db, RecordingNotifier()).cancel_booking(booking.id)
        assert count(db, Booking) == 0
        kept = db.query(WorkOrder).one()
        assert kept.booking_id is None
        assert kept.job_complete is True

    def test_cancel_whole_day(self, db):
        day = upcoming(2)
        make_booking(db, day, "09:00")
        make_booking(db, day, "13:00", duration=2)
        make_booking(db, upcoming(3), "09:00")
        SchedulingService(db, RecordingNotifier()).apply_block_action(
            BlockAction(action="cancel", date=day, time="all")
        )
        assert count(db, Booking) == 1


class TestWorkOrderService:
    @pytest.mark.asyncio
    async def test_receipt_uses_today(self, db):
        booking = make_booking(db, upcoming(1), "09:00", email="lee@example.com", price="$1,050.00")
        work_order = db.query(WorkOrder).filter(WorkOrder.booking_id == booking.id).one()
        notifier = RecordingNotifier()
        service = WorkOrderService(db, notifier, today=date(2026, 10, 19))

        result = await service.update_work_order(work_order.id, WorkOrderUpdate(invoiced=True))
        assert result["email_sent"] == "invoice"
        assert notifier.calls[-1][1]["due_date"] == "October 26, 2026"
        assert notifier.calls[-1][1]["amount"] == 1050.0
