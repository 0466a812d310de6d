"""
Pricing service - catalog reads, calculator totals and scheduled price changes

The public catalog is read through a short-TTL PricingCache; every write in
this module (admin edits and the scheduled-change sweep) invalidates it.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...cache import PricingCache, cache
from ...config import PRICING_CACHE_TTL
from ...database import SessionLocal
from ...models import Discount, PricingSchedule, Service
from ..scheduling.slots import slot_units
from .repository import PricingRepository
from .schemas import DiscountUpdate, QuoteRequest, ScheduleCreate, ServiceUpdate

logger = logging.getLogger(__name__)

pricing_cache = PricingCache(PRICING_CACHE_TTL, shared=cache)


def get_pricing_cache() -> PricingCache:
    return pricing_cache


# ============================================================================
# FIELD PARSING
# ============================================================================

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}


def _parse_int(value) -> int:
    if isinstance(value, bool):
        raise ValueError("must be a whole number")
    if isinstance(value, int):
        return value
    number = float(str(value).strip())
    if not number.is_integer():
        raise ValueError("must be a whole number")
    return int(number)


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError("must be true or false")


def _parse_label(value) -> str:
    text = str(value).strip()
    if not text:
        raise ValueError("must not be empty")
    return text


def _parse_price(value) -> int:
    price = _parse_int(value)
    if price < 0:
        raise ValueError("must be zero or more")
    return price


def _parse_duration(value) -> float:
    duration = float(str(value).strip())
    if not duration > 0:
        raise ValueError("must be greater than zero")
    return duration


def _parse_percent(value) -> float:
    percent = float(str(value).strip())
    if not 0 <= percent <= 100:
        raise ValueError("must be between 0 and 100")
    return percent


SERVICE_FIELDS = {
    "price": _parse_price,
    "duration": _parse_duration,
    "label": _parse_label,
    "active": _parse_bool,
    "sort_order": _parse_int,
}

DISCOUNT_FIELDS = {
    "percent": _parse_percent,
    "label": _parse_label,
    "active": _parse_bool,
}


def parse_field_value(target: str, field_name: str, value):
    """Typed value for a Service or Discount field, raising ValueError with a readable message"""
    parsers = SERVICE_FIELDS if target == "service" else DISCOUNT_FIELDS
    parser = parsers.get(field_name)
    if parser is None:
        raise ValueError(f"{field_name} cannot be changed on a {target}")
    try:
        return parser(value)
    except (TypeError, ValueError) as e:
        message = str(e) if str(e).startswith("must") else "is not a valid value"
        raise ValueError(f"{field_name} {message}") from e


# ============================================================================
# CALCULATOR
# ============================================================================


@dataclass
class Quote:
    items: list[dict]
    subtotal: float
    base_count: int
    auto_discount: Optional[str]
    auto_percent: float
    manual_percent: float
    total_percent: float
    savings: float
    total: float
    total_duration: int


def calculate_total(
    selection: list[str],
    services: list[dict],
    discounts: list[dict],
    manual: Optional[list[str]] = None,
) -> Quote:
    """
    Calculator total for a selection of service keys.

    Only base services count toward auto-apply tiers, and only the highest
    qualifying tier applies. Manually chosen discounts add on top.
    Raises ValueError for unknown keys, orphaned add-ons and clashing choices.
    """
    by_key = {s["key"]: s for s in services}
    discounts_by_key = {d["key"]: d for d in discounts}
    manual = manual or []

    chosen = []
    for key in dict.fromkeys(selection):
        service = by_key.get(key)
        if service is None:
            raise ValueError(f"Unknown service: {key}")
        chosen.append(service)

    chosen_keys = {s["key"] for s in chosen}
    groups: dict[str, str] = {}
    for service in chosen:
        parent = service.get("parent_key")
        if parent and parent not in chosen_keys:
            raise ValueError(f"{service['label']} requires {by_key.get(parent, {}).get('label', parent)}")
        group = service.get("bookable_group")
        if group and not parent:
            if group in groups:
                raise ValueError(f"Only one {group} service can be selected")
            groups[group] = service["key"]

    subtotal = float(sum(s["price"] for s in chosen))
    base_count = sum(1 for s in chosen if not s.get("parent_key"))
    raw_hours = float(sum(s["duration"] for s in chosen))

    tiers = [
        d for d in discounts
        if d.get("auto_apply") and d.get("min_services") and base_count >= d["min_services"]
    ]
    best_tier = max(tiers, key=lambda d: (d["min_services"], d["percent"]), default=None)
    auto_percent = float(best_tier["percent"]) if best_tier else 0.0

    manual_percent = 0.0
    for key in dict.fromkeys(manual):
        discount = discounts_by_key.get(key)
        if discount is None:
            raise ValueError(f"Unknown discount: {key}")
        if discount.get("auto_apply"):
            raise ValueError(f"{discount['label']} is applied automatically")
        manual_percent += float(discount["percent"])

    total_percent = min(auto_percent + manual_percent, 100.0)
    savings = subtotal * (total_percent / 100)
    total = subtotal - savings

    return Quote(
        items=[
            {"key": s["key"], "label": s["label"], "price": s["price"], "addon": bool(s.get("parent_key"))}
            for s in chosen
        ],
        subtotal=round(subtotal, 2),
        base_count=base_count,
        auto_discount=best_tier["key"] if best_tier else None,
        auto_percent=auto_percent,
        manual_percent=manual_percent,
        total_percent=total_percent,
        savings=round(savings, 2),
        total=round(total, 2),
        total_duration=slot_units(raw_hours) if chosen else 0,
    )


def service_to_dict(service: Service) -> dict:
    return {
        "key": service.key,
        "label": service.label,
        "category": service.category,
        "parent_key": service.parent_key,
        "price": service.price,
        "duration": service.duration,
        "sort_order": service.sort_order,
        "bookable_group": service.bookable_group,
    }


def discount_to_dict(discount: Discount) -> dict:
    return {
        "key": discount.key,
        "label": discount.label,
        "percent": discount.percent,
        "auto_apply": discount.auto_apply,
        "min_services": discount.min_services,
    }


def schedule_to_dict(entry: PricingSchedule) -> dict:
    if entry.service_id is not None:
        target, key = "service", entry.service.key if entry.service else None
    else:
        target, key = "discount", entry.discount.key if entry.discount else None
    return {
        "id": entry.id,
        "target": target,
        "key": key,
        "field": entry.field,
        "new_value": entry.new_value,
        "effective_date": entry.effective_date,
        "applied": entry.applied,
        "applied_at": entry.applied_at,
        "created_at": entry.created_at,
    }


# ============================================================================
# SERVICE
# ============================================================================


class PricingService:
    """Service layer for the pricing catalog"""

    def __init__(self, db: Session, pricing_cache: PricingCache):
        self.db = db
        self.cache = pricing_cache
        self.repo = PricingRepository()

    def get_catalog(self) -> dict:
        catalog = self.cache.get()
        if catalog is not None:
            return catalog
        catalog = {
            "services": [service_to_dict(s) for s in self.repo.active_services(self.db)],
            "discounts": [discount_to_dict(d) for d in self.repo.active_discounts(self.db)],
        }
        self.cache.set(catalog)
        return catalog

    def quote(self, data: QuoteRequest) -> Quote:
        catalog = self.get_catalog()
        try:
            return calculate_total(data.services, catalog["services"], catalog["discounts"], data.discounts)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    def _apply_fields(self, target: str, row, updates: dict) -> list[str]:
        changed = []
        for field_name, value in updates.items():
            try:
                setattr(row, field_name, parse_field_value(target, field_name, value))
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            changed.append(field_name)
        return changed

    def update_service(self, key: str, data: ServiceUpdate) -> Service:
        service = self.repo.get_service_by_key(self.db, key)
        if not service:
            raise HTTPException(status_code=404, detail="Service not found")

        updates = data.model_dump(exclude_none=True)
        if not updates:
            raise HTTPException(status_code=400, detail="No changes supplied")
        changed = self._apply_fields("service", service, updates)
        self.db.commit()
        self.db.refresh(service)
        self.cache.invalidate()
        logger.info(f"💲 Updated service {key}: {', '.join(changed)}")
        return service

    def update_discount(self, key: str, data: DiscountUpdate) -> Discount:
        discount = self.repo.get_discount_by_key(self.db, key)
        if not discount:
            raise HTTPException(status_code=404, detail="Discount not found")

        updates = data.model_dump(exclude_none=True)
        if not updates:
            raise HTTPException(status_code=400, detail="No changes supplied")
        changed = self._apply_fields("discount", discount, updates)
        self.db.commit()
        self.db.refresh(discount)
        self.cache.invalidate()
        logger.info(f"💲 Updated discount {key}: {', '.join(changed)}")
        return discount

    def list_schedule(self, include_applied: bool = False) -> list[PricingSchedule]:
        return self.repo.list_schedule(self.db, include_applied=include_applied)

    def create_schedule_entry(self, data: ScheduleCreate) -> PricingSchedule:
        if data.target == "service":
            row = self.repo.get_service_by_key(self.db, data.key)
        else:
            row = self.repo.get_discount_by_key(self.db, data.key)
        if not row:
            raise HTTPException(status_code=404, detail=f"{data.target.capitalize()} not found")

        try:
            parse_field_value(data.target, data.field, data.new_value)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        entry = PricingSchedule(
            service_id=row.id if data.target == "service" else None,
            discount_id=row.id if data.target == "discount" else None,
            field=data.field,
            new_value=data.new_value.strip(),
            effective_date=data.effective_date,
            applied=False,
        )
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        logger.info(
            f"🗓️ Scheduled {data.target} {data.key} {data.field} -> {entry.new_value} "
            f"on {data.effective_date}"
        )
        return entry

    def delete_schedule_entry(self, entry_id: int) -> None:
        entry = self.repo.get_schedule_entry(self.db, entry_id)
        if not entry:
            raise HTTPException(status_code=404, detail="Scheduled change not found")
        if entry.applied:
            raise HTTPException(status_code=400, detail="Applied changes cannot be deleted")
        self.db.delete(entry)
        self.db.commit()


# ============================================================================
# SCHEDULED CHANGE SWEEP
# ============================================================================


def apply_due_changes(db: Session, today: date, pricing_cache: Optional[PricingCache] = None) -> dict:
    """
    Apply every unapplied change whose effective date has arrived.

    Each row is applied at most once, even with several sweeps running: a row
    is claimed with a conditional UPDATE before its target is touched, and rows
    another sweep already claimed are left alone. The claim and the target
    change share one commit. Rows that can never apply (target gone, value no
    longer valid) are claimed too, with a warning, so they are not retried
    forever. Returns {"applied": n, "skipped": m}.
    """
    pricing_cache = pricing_cache or get_pricing_cache()
    due = PricingRepository.due_schedule_entries(db, today)
    if not due:
        return {"applied": 0, "skipped": 0}

    now = datetime.now()
    applied = skipped = 0
    for entry in due:
        if not PricingRepository.claim_schedule_entry(db, entry.id, now):
            logger.info(f"⏭️ Scheduled change {entry.id} was already applied by another sweep")
            continue
        target_name = "service" if entry.service_id is not None else "discount"
        target = entry.service if target_name == "service" else entry.discount
        if target is None:
            logger.warning(f"⚠️ Scheduled change {entry.id} targets a {target_name} that no longer exists")
            skipped += 1
        else:
            try:
                value = parse_field_value(target_name, entry.field, entry.new_value)
            except ValueError as e:
                logger.warning(f"⚠️ Scheduled change {entry.id} cannot be applied: {e}")
                skipped += 1
            else:
                setattr(target, entry.field, value)
                applied += 1
                logger.info(
                    f"💲 Applied scheduled change {entry.id}: {target_name} {target.key} "
                    f"{entry.field} = {value}"
                )

    db.commit()
    pricing_cache.invalidate()
    return {"applied": applied, "skipped": skipped}


def run_pricing_sweep(today: Optional[date] = None) -> dict:
    """One sweep cycle in its own session; failures are logged and rolled back"""
    db = SessionLocal()
    try:
        summary = apply_due_changes(db, today or date.today())
        if summary["applied"] or summary["skipped"]:
            logger.info(f"✅ Pricing sweep: {summary['applied']} applied, {summary['skipped']} skipped")
        return summary
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Pricing sweep failed: {e}")
        return {"applied": 0, "skipped": 0, "error": str(e)}
    finally:
        db.close()
