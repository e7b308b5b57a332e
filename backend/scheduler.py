# backend/scheduler.py
import logging
from datetime import date
from typing import Dict, List

from sqlalchemy.orm import Session, joinedload

from coercion import format_time_of_day, next_timestamp, parse_time_of_day
from database import get_or_raise, transaction
from models import Appointment, AppointmentStatus, Customer, Service
from schemas import AppointmentCreate, AppointmentUpdate

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = (AppointmentStatus.completed, AppointmentStatus.cancelled)

# Forward step offered to operators for each status
NEXT_STATUS = {
    AppointmentStatus.scheduled: AppointmentStatus.confirmed,
    AppointmentStatus.confirmed: AppointmentStatus.in_progress,
    AppointmentStatus.in_progress: AppointmentStatus.completed,
}


def derive_end_time(start_time: str, duration_minutes: int) -> str:
    """
    Advisory end time for an appointment form.

    Wraps around midnight without tracking the day change, so "23:50" plus
    30 minutes gives "00:20".
    """
    return format_time_of_day(parse_time_of_day(start_time) + duration_minutes)


def available_actions(status: AppointmentStatus) -> Dict[str, AppointmentStatus]:
    """
    Status changes an operator may pick from ``status``.

    The backend accepts any status on update; this is the lifecycle the
    dashboard offers: one step forward, or cancel while not terminal.
    """
    status = AppointmentStatus(status)
    actions = {}
    if status in NEXT_STATUS:
        actions["advance"] = NEXT_STATUS[status]
    if status not in TERMINAL_STATUSES:
        actions["cancel"] = AppointmentStatus.cancelled
    return actions


class AppointmentScheduler:
    """
    Appointment bookkeeping on top of one database session:
    - Book appointments for existing customers and services
    - Apply partial updates and cancellations
    - List appointments joined with their customer and service
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, data: AppointmentCreate) -> Appointment:
        """Book an appointment; it always starts out as scheduled"""
        with transaction(self.db, "Appointment creation"):
            # Reference checks share the insert's transaction
            get_or_raise(self.db, Customer, data.customer_id)
            get_or_raise(self.db, Service, data.service_id)

            appointment = Appointment(
                customer_id=data.customer_id,
                service_id=data.service_id,
                appointment_date=data.appointment_date,
                start_time=data.start_time,
                end_time=data.end_time,
                status=AppointmentStatus.scheduled,
                notes=data.notes,
            )
            self.db.add(appointment)

        self.db.refresh(appointment)
        logger.info(
            f"Booked appointment {appointment.id} for customer {appointment.customer_id} "
            f"on {appointment.appointment_date} {appointment.start_time}-{appointment.end_time}"
        )
        return appointment

    def update(self, patch: AppointmentUpdate) -> Appointment:
        """
        Apply the fields present in ``patch``.

        No cross-field checks: changing the service leaves end_time as stored,
        and any status may be written.
        """
        changes = patch.changes()
        with transaction(self.db, "Appointment update"):
            appointment = get_or_raise(self.db, Appointment, patch.id)
            if "customer_id" in changes:
                get_or_raise(self.db, Customer, changes["customer_id"])
            if "service_id" in changes:
                get_or_raise(self.db, Service, changes["service_id"])

            for field, value in changes.items():
                setattr(appointment, field, value)
            appointment.updated_at = next_timestamp(appointment.updated_at)

        self.db.refresh(appointment)
        return appointment

    def cancel(self, appointment_id: int) -> Appointment:
        """Mark an appointment cancelled whatever its current status"""
        with transaction(self.db, "Appointment cancellation"):
            appointment = get_or_raise(self.db, Appointment, appointment_id)
            appointment.status = AppointmentStatus.cancelled
            appointment.updated_at = next_timestamp(appointment.updated_at)

        self.db.refresh(appointment)
        logger.info(f"Cancelled appointment {appointment_id}")
        return appointment

    def _detailed_query(self):
        return (
            self.db.query(Appointment)
            .options(
                joinedload(Appointment.customer, innerjoin=True),
                joinedload(Appointment.service, innerjoin=True),
            )
            .order_by(Appointment.appointment_date, Appointment.start_time, Appointment.id)
        )

    def list_all(self) -> List[Appointment]:
        with transaction(self.db, "Get appointments", commit=False):
            return self._detailed_query().all()

    def list_by_date(self, day: date) -> List[Appointment]:
        with transaction(self.db, "Get appointments by date", commit=False):
            return self._detailed_query().filter(Appointment.appointment_date == day).all()

    def list_by_customer(self, customer_id: int) -> List[Appointment]:
        with transaction(self.db, "Get appointments by customer", commit=False):
            return self._detailed_query().filter(Appointment.customer_id == customer_id).all()
