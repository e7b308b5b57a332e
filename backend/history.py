# backend/history.py
import logging
from typing import List

from sqlalchemy.orm import Session, joinedload

from coercion import to_money
from database import get_or_raise, transaction
from models import Appointment, Customer, Service, ServiceHistory
from schemas import ServiceHistoryCreate

logger = logging.getLogger(__name__)


def create_service_history(db: Session, data: ServiceHistoryCreate) -> ServiceHistory:
    """Record a billable visit; it need not come from an appointment"""
    with transaction(db, "Service history creation"):
        get_or_raise(db, Customer, data.customer_id)
        get_or_raise(db, Service, data.service_id)
        if data.appointment_id is not None:
            get_or_raise(db, Appointment, data.appointment_id)

        record = ServiceHistory(
            customer_id=data.customer_id,
            service_id=data.service_id,
            appointment_id=data.appointment_id,
            service_date=data.service_date,
            price_paid=to_money(data.price_paid),
            notes=data.notes,
        )
        db.add(record)

    db.refresh(record)
    logger.info(f"Recorded service history {record.id} for customer {record.customer_id}")
    return record


def get_service_history_by_customer(db: Session, customer_id: int) -> List[ServiceHistory]:
    with transaction(db, "Get service history by customer", commit=False):
        return (
            db.query(ServiceHistory)
            .options(
                joinedload(ServiceHistory.customer, innerjoin=True),
                joinedload(ServiceHistory.service, innerjoin=True),
            )
            .filter(ServiceHistory.customer_id == customer_id)
            .order_by(ServiceHistory.service_date.desc(), ServiceHistory.id.desc())
            .all()
        )
