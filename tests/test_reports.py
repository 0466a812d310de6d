"""Tests for price parsing, the revenue report and the payments ledger."""

from datetime import date, datetime

import pytest
from conftest import make_booking

from softwash.domain.reports.service import parse_price, payments_ledger, revenue_report
from softwash.models import Customer, Expense, WorkOrder


@pytest.mark.parametrize(
    "value, expected",
    [
        ("$575.00", 575.0),
        ("$1,200.50", 1200.5),
        ("575", 575.0),
        ("about 400 dollars", 400.0),
        ("$300 - $350", 300.0),
        ("TBD", 0.0),
        ("", 0.0),
        (None, 0.0),
        (125, 125.0),
        (99.5, 99.5),
        (float("nan"), 0.0),
    ],
)
def test_parse_price(value, expected):
    assert parse_price(value) == expected


def paid_order(db, price, paid_at=None, service="House Wash", method=None, customer=None, mileage=None, **extra):
    work_order = WorkOrder(
        service=service,
        price=price,
        paid=True,
        paid_at=paid_at,
        payment_method=method,
        customer_id=customer.id if customer else None,
        mileage=mileage,
        **extra,
    )
    db.add(work_order)
    db.commit()
    return work_order


@pytest.fixture
def ledger(db):
    ann = Customer(name="Ann", email="ann@example.com")
    bo = Customer(name="Bo", email="bo@example.com")
    db.add_all([ann, bo])
    db.commit()

    paid_order(db, "$575.00", datetime(2026, 3, 10, 12), method="Cash", customer=ann, mileage=20)
    paid_order(db, "$350", datetime(2026, 3, 22, 9), service="Deck", method="venmo", customer=bo, mileage=10.5)
    paid_order(db, "about 200", datetime(2026, 7, 1, 15), service="Deck", method="cash", customer=ann)
    paid_order(db, "$900.00", datetime(2025, 12, 30, 10), customer=bo)
    db.add(WorkOrder(service="House Wash", price="$1,000", paid=False))

    booking = make_booking(db, date(2026, 5, 5), "09:00", name="Cal", price="$125.00", service="Boat")
    booking.work_order.paid = True
    db.add(Expense(date=date(2026, 3, 1), category="Chemicals", amount=120.25))
    db.add(Expense(date=date(2026, 3, 15), category="Fuel", amount=60))
    db.add(Expense(date=date(2026, 9, 9), category="Fuel", amount=40))
    db.add(Expense(date=date(2025, 3, 1), category="Fuel", amount=999))
    db.commit()
    return db


class TestRevenueReport:
    def test_year_totals(self, ledger):
        report = revenue_report(ledger, 2026)
        assert report["total_revenue"] == 1250.0
        assert report["total_expenses"] == 220.25
        assert report["net"] == 1029.75
        assert len(report["months"]) == 12

        march = report["months"][2]
        assert march == {"month": 3, "revenue": 925.0, "expenses": 180.25, "net": 744.75}
        # no paid_at: falls back to the booking date
        assert report["months"][4]["revenue"] == 125.0

    def test_breakdowns(self, ledger):
        report = revenue_report(ledger, 2026)
        services = {row["service"]: row for row in report["by_service"]}
        assert services["House Wash"] == {"service": "House Wash", "revenue": 575.0, "jobs": 1}
        assert services["Deck"]["jobs"] == 2
        assert report["by_service"][0]["service"] == "House Wash"

        top = report["top_customers"]
        assert top[0]["name"] == "Ann"
        assert top[0]["revenue"] == 775.0
        assert {c["name"] for c in top} == {"Ann", "Bo", "Cal"}

        assert report["expenses_by_category"] == {"Chemicals": 120.25, "Fuel": 100.0}

    def test_mileage_deduction(self, ledger):
        report = revenue_report(ledger, 2026)
        assert report["total_mileage"] == 30.5
        assert report["mileage_deduction"] == round(30.5 * report["mileage_rate"], 2)

    def test_single_month(self, ledger):
        report = revenue_report(ledger, 2026, 3)
        assert report["total_revenue"] == 925.0
        assert report["total_expenses"] == 180.25

    def test_empty_year(self, db):
        report = revenue_report(db, 2030)
        assert report["total_revenue"] == 0
        assert report["top_customers"] == []


class TestPaymentsLedger:
    def test_all_payments_newest_first(self, ledger):
        result = payments_ledger(ledger, 2026)
        assert [p["date"] for p in result["payments"]] == [
            "2026-07-01", "2026-05-05", "2026-03-22", "2026-03-10",
        ]
        assert result["total"] == 1250.0
        assert result["by_method"] == {"cash": 775.0, "unspecified": 125.0, "venmo": 350.0}

    def test_filter_by_method(self, ledger):
        result = payments_ledger(ledger, 2026, method=" CASH ")
        assert result["method"] == "cash"
        assert len(result["payments"]) == 2
        assert result["total"] == 775.0

    def test_filter_by_month(self, ledger):
        result = payments_ledger(ledger, 2026, 3)
        assert {p["customer"] for p in result["payments"]} == {"Ann", "Bo"}


class TestReportsApi:
    def test_revenue_endpoint(self, client, admin_headers, ledger):
        response = client.get("/api/admin/reports/revenue?year=2026", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["total_revenue"] == 1250.0

    def test_invalid_month(self, client, admin_headers):
        response = client.get("/api/admin/reports/payments?year=2026&month=13", headers=admin_headers)
        assert response.status_code == 422

    def test_requires_admin(self, client):
        assert client.get("/api/admin/reports/revenue").status_code == 401
