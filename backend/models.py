# backend/models.py
import enum

from sqlalchemy import Column, Integer, String, Date, DateTime, Text, ForeignKey, Numeric, Enum
from sqlalchemy.orm import relationship

from coercion import MONEY_DIGITS, MONEY_PLACES, utcnow
from database import Base


class AppointmentStatus(str, enum.Enum):
    scheduled = "scheduled"
    confirmed = "confirmed"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    phone = Column(String, nullable=False)
    date_of_birth = Column(Date)
    notes = Column(Text)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    appointments = relationship("Appointment", back_populates="customer")
    service_history = relationship("ServiceHistory", back_populates="customer")


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Numeric(MONEY_DIGITS, MONEY_PLACES), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    appointments = relationship("Appointment", back_populates="service")
    service_history = relationship("ServiceHistory", back_populates="service")


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    appointment_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)  # "HH:MM"
    end_time = Column(String(5), nullable=False)  # "HH:MM"
    status = Column(
        Enum(AppointmentStatus, name="appointment_status"),
        default=AppointmentStatus.scheduled,
        nullable=False,
    )
    notes = Column(Text)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    customer = relationship("Customer", back_populates="appointments")
    service = relationship("Service", back_populates="appointments")
    service_history = relationship("ServiceHistory", back_populates="appointment")


class ServiceHistory(Base):
    __tablename__ = "service_history"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    appointment_id = Column(Integer, ForeignKey("appointments.id"))
    service_date = Column(Date, nullable=False)
    price_paid = Column(Numeric(MONEY_DIGITS, MONEY_PLACES), nullable=False)
    notes = Column(Text)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    customer = relationship("Customer", back_populates="service_history")
    service = relationship("Service", back_populates="service_history")
    appointment = relationship("Appointment", back_populates="service_history")
