# backend/customers.py
import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coercion import next_timestamp
from database import get_or_raise, transaction
from errors import CustomerInUseError, UniqueConstraintViolation
from models import Customer
from schemas import CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 20


def _flush_unique_email(db: Session, email: str):
    try:
        db.flush()
    except IntegrityError as e:
        raise UniqueConstraintViolation(f"A customer with email {email} already exists") from e


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def create_customer(db: Session, data: CustomerCreate) -> Customer:
    with transaction(db, "Customer creation"):
        customer = Customer(**data.model_dump())
        db.add(customer)
        _flush_unique_email(db, data.email)

    db.refresh(customer)
    logger.info(f"Created customer {customer.id} ({customer.email})")
    return customer


def get_customers(db: Session) -> List[Customer]:
    with transaction(db, "Get customers", commit=False):
        return db.query(Customer).order_by(Customer.id).all()


def get_customer_by_id(db: Session, customer_id: int) -> Optional[Customer]:
    with transaction(db, "Get customer by ID", commit=False):
        return db.get(Customer, customer_id)


def update_customer(db: Session, patch: CustomerUpdate) -> Customer:
    """Apply the fields present in ``patch``; everything else keeps its stored value"""
    with transaction(db, "Customer update"):
        customer = get_or_raise(db, Customer, patch.id)
        for field, value in patch.changes().items():
            setattr(customer, field, value)
        customer.updated_at = next_timestamp(customer.updated_at)
        _flush_unique_email(db, customer.email)

    db.refresh(customer)
    return customer


def delete_customer(db: Session, customer_id: int) -> None:
    """Delete a customer; an unknown id is a no-op"""
    with transaction(db, "Customer deletion"):
        try:
            deleted = db.query(Customer).filter(Customer.id == customer_id).delete(synchronize_session=False)
        except IntegrityError as e:
            raise CustomerInUseError(
                f"Customer {customer_id} still has appointments or service history"
            ) from e

    if deleted:
        logger.info(f"Deleted customer {customer_id}")


def search_customers(db: Session, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> List[Customer]:
    """Case-insensitive substring match on first name, last name or email"""
    pattern = _like_pattern(query)
    with transaction(db, "Customer search", commit=False):
        return (
            db.query(Customer)
            .filter(
                or_(
                    Customer.first_name.ilike(pattern, escape="\\"),
                    Customer.last_name.ilike(pattern, escape="\\"),
                    Customer.email.ilike(pattern, escape="\\"),
                )
            )
            .order_by(Customer.id)
            .limit(limit)
            .all()
        )
