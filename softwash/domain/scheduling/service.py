"""Scheduling service - Business logic for bookings, blocks and the contact form"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Booking
from ...services.notification_service import Notifier
from ...shared.validators import parse_iso_date
from ..workorders.lifecycle import has_progress
from .allocator import AllocationResult, BookingAllocator, BookingRejected, BookingRequest
from .repository import BookingRepository
from .schemas import BlockAction, ContactSubmission, ManualBookingCreate
from .slots import WHOLE_DAY

logger = logging.getLogger(__name__)

MSG_CONTACT_RECEIVED = "Thank you for your message! We will get back to you soon."
MSG_BOOKING_CONFIRMED = "Thank you! Your appointment has been booked. We will be in touch to confirm."
MSG_INVALID_DATE = "Invalid date selected."


def appointment_rows(result: AllocationResult) -> list[dict]:
    return [
        {"date": f"{b.date:%A, %B %d, %Y}", "time": b.time, "duration": b.duration}
        for b in result.bookings
    ]


class SchedulingService:
    """Service layer for booking placement and the admin calendar"""

    def __init__(self, db: Session, notifier: Notifier, today: Optional[date] = None):
        self.db = db
        self.notifier = notifier
        self.today = today
        self.repo = BookingRepository()

    def _allocator(self) -> BookingAllocator:
        return BookingAllocator(self.db, today=self.today)

    # ------------------------------------------------------------------
    # Public contact / booking form
    # ------------------------------------------------------------------

    async def submit_contact(self, data: ContactSubmission) -> dict:
        """Book an appointment when date and time are given, otherwise pass the message on"""
        if not data.wants_appointment:
            logger.info(f"📨 Contact message from {data.email or data.phone or 'unknown'}")
            await self.notifier.notify_contact_message(
                data.name, data.email, data.phone, data.service, data.message
            )
            return {"success": True, "message": MSG_CONTACT_RECEIVED}

        try:
            day = parse_iso_date(data.appointmentDate)
        except ValueError:
            return {"success": False, "message": MSG_INVALID_DATE}

        request = BookingRequest(
            day=day,
            time=data.appointmentTime,
            service=data.service or "",
            total_duration=data.totalDuration,
            name=data.name,
            email=data.email,
            phone=data.phone,
            address=data.address,
            price=data.bookingPrice,
            notes="\n".join(filter(None, [data.bookingNotes, data.message])) or None,
        )

        try:
            result = self._allocator().allocate(request, customer_facing=True)
        except BookingRejected as e:
            logger.info(f"🚫 Booking rejected ({e.reason}) for {data.service} on {data.appointmentDate}")
            return {"success": False, "message": e.message}

        await self._notify_booked(data, result)

        response = {"success": True, "message": MSG_BOOKING_CONFIRMED}
        if result.multi_day:
            response["day2Notice"] = result.day2_notice
        return response

    async def _notify_booked(self, data: ContactSubmission, result: AllocationResult) -> None:
        appointments = appointment_rows(result)
        await self.notifier.send_booking_confirmation(
            data.email,
            data.name,
            data.service,
            appointments,
            price=data.bookingPrice,
            day2_notice=result.day2_notice,
        )
        await self.notifier.notify_new_booking(
            data.name,
            data.email,
            data.phone,
            data.address,
            data.service,
            appointments,
            price=data.bookingPrice,
            notes=result.bookings[0].notes,
        )

    # ------------------------------------------------------------------
    # Admin calendar
    # ------------------------------------------------------------------

    def get_schedule(self) -> dict:
        return {
            "bookings": self.repo.list_bookings(self.db),
            "blocked": self.repo.list_blocks(self.db),
        }

    def create_manual_booking(self, data: ManualBookingCreate) -> dict:
        """
        Admin entry goes through the allocator so it can never double-book,
        but it may use any service name and any date.
        """
        request = BookingRequest(
            day=data.date,
            time=data.time,
            service=data.service,
            total_duration=data.duration,
            name=data.name,
            email=data.email,
            phone=data.phone,
            address=data.address,
            price=data.price,
            notes=data.notes,
        )
        try:
            result = self._allocator().allocate(request, customer_facing=False)
        except BookingRejected as e:
            return {"success": False, "message": e.message}

        logger.info(f"✅ Admin booked {data.service} on {data.date} at {result.bookings[0].time}")
        response = {"success": True, "bookings": result.bookings}
        if result.multi_day:
            response["day2Notice"] = result.day2_notice
        return response

    def _release(self, booking: Booking) -> None:
        """
        Delete a booking. Its work order goes with it unless work has started,
        in which case the work order stays for billing and loses its booking link.
        """
        work_order = self.repo.work_order_for(self.db, booking.id)
        if work_order is not None:
            if has_progress(work_order):
                work_order.booking_id = None
                logger.info(f"📋 Kept work order {work_order.id} after cancelling booking {booking.id}")
            else:
                self.db.delete(work_order)
        self.db.delete(booking)

    def cancel_booking(self, booking_id: int) -> None:
        booking = self.repo.get_booking(self.db, booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        self._release(booking)
        self.db.commit()
        logger.info(f"🗑️ Cancelled booking {booking_id}")

    def apply_block_action(self, data: BlockAction) -> None:
        if data.action == "block":
            if self.repo.get_block(self.db, data.date, data.time) is None:
                self.repo.add_block(self.db, data.date, data.time, data.reason or "Admin blocked")
                logger.info(f"⛔ Blocked {data.date} {data.time}")
        elif data.action == "unblock":
            block = self.repo.get_block(self.db, data.date, data.time)
            if block is not None:
                self.db.delete(block)
                logger.info(f"✅ Unblocked {data.date} {data.time}")
        elif data.action == "cancel":
            if data.time == WHOLE_DAY:
                bookings = self.repo.bookings_on(self.db, data.date)
            else:
                bookings = self.repo.find_bookings_at(self.db, data.date, data.time)
            for booking in bookings:
                self._release(booking)
            logger.info(f"🗑️ Cancelled {len(bookings)} booking(s) on {data.date} {data.time}")
        self.db.commit()
