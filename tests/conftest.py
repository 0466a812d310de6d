"""Shared test fixtures and helpers."""

import os

# Settings are read at import time, so the environment must be in place first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_PASSWORD"] = "test-password"
os.environ["TOKEN_STORE"] = "memory"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["PRICING_SWEEP_ENABLED"] = "false"
os.environ["SEED_CATALOG"] = "false"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
for name in ("REDIS_URL", "REDIS_HOST", "RESEND_API_KEY", "TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN"):
    os.environ.pop(name, None)

from datetime import date, timedelta  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from softwash.auth import token_store  # noqa: E402
from softwash.database import Base, SessionLocal, engine, get_db  # noqa: E402
from softwash.domain.pricing.catalog import seed_catalog  # noqa: E402
from softwash.domain.pricing.service import pricing_cache  # noqa: E402
from softwash.main import app  # noqa: E402
from softwash.models import Booking, WorkOrder  # noqa: E402
from softwash.services.notification_service import Notifier, get_notifier  # noqa: E402

ADMIN_PASSWORD = "test-password"


class RecordingNotifier(Notifier):
    """Notifier that records every call instead of sending anything."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.calls: list[tuple[str, dict]] = []

    def _record(self, name: str, /, **kwargs) -> dict:
        self.calls.append((name, kwargs))
        if self.succeed:
            return {"sent": True, "error": None}
        return {"sent": False, "error": "delivery failed"}

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def send_booking_confirmation(self, to, customer_name, service, appointments, price=None, day2_notice=None):
        return self._record(
            "booking_confirmation",
            to=to,
            service=service,
            appointments=appointments,
            day2_notice=day2_notice,
        )

    async def notify_new_booking(self, customer_name, email, phone, address, service, appointments, price=None, notes=None):
        return self._record("new_booking", service=service, appointments=appointments)

    async def notify_contact_message(self, name, email, phone, service, message):
        return self._record("contact_message", name=name, message=message)

    async def send_invoice(self, to, customer_name, invoice_number, service, amount, due_date):
        return self._record(
            "invoice", to=to, invoice_number=invoice_number, amount=amount, due_date=due_date
        )

    async def send_payment_receipt(self, to, customer_name, invoice_number, service, amount, payment_date, payment_method=None):
        return self._record("receipt", to=to, invoice_number=invoice_number, amount=amount)

    async def send_review_request(self, to, customer_name, service):
        return self._record("review_request", to=to)

    async def send_sms_reminder(self, to_phone, customer_name, service, date_label, time):
        return self._record("sms_reminder", to_phone=to_phone, date_label=date_label, time=time)


def upcoming(weekday: int, weeks_ahead: int = 1) -> date:
    """A future date falling on `weekday` (Monday=0), at least a week out."""
    today = date.today()
    return today + timedelta(days=(weekday - today.weekday()) % 7 + 7 * weeks_ahead)


def make_booking(db, day: date, time: str, duration: int = 1, **fields) -> Booking:
    """Insert a booking (and its work order) directly, bypassing the allocator."""
    booking = Booking(
        date=day,
        time=time,
        duration=duration,
        name=fields.get("name", "Test Customer"),
        email=fields.get("email", ""),
        phone=fields.get("phone", ""),
        address=fields.get("address", ""),
        service=fields.get("service", "deck"),
        price=fields.get("price"),
        customer_id=fields.get("customer_id"),
    )
    db.add(booking)
    db.flush()
    db.add(WorkOrder(booking_id=booking.id, customer_id=booking.customer_id, service=booking.service, price=booking.price))
    db.commit()
    return booking


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    pricing_cache.invalidate()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def seeded_db(db):
    seed_catalog(db)
    return db


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(db, notifier):
    token_store.clear()
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        token_store.clear()


@pytest.fixture
def admin_headers(client) -> dict:
    response = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
    assert response.json()["success"] is True
    return {"X-Admin-Token": response.json()["token"]}


def count(db, model, **filters: Optional[object]) -> int:
    query = db.query(model)
    for key, value in filters.items():
        query = query.filter(getattr(model, key) == value)
    return query.count()
