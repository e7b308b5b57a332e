# backend/catalog.py
import logging
from typing import List

from sqlalchemy.orm import Session

from coercion import to_money
from database import transaction
from models import Service
from schemas import ServiceCreate

logger = logging.getLogger(__name__)


def create_service(db: Session, data: ServiceCreate) -> Service:
    with transaction(db, "Service creation"):
        service = Service(
            name=data.name,
            description=data.description,
            duration_minutes=data.duration_minutes,
            price=to_money(data.price),
        )
        db.add(service)

    db.refresh(service)
    logger.info(f"Created service {service.id} ({service.name}, {service.duration_minutes} min)")
    return service


def get_services(db: Session) -> List[Service]:
    with transaction(db, "Get services", commit=False):
        return db.query(Service).order_by(Service.id).all()
