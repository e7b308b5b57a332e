# backend/schemas.py
from pydantic import BaseModel, BeforeValidator, AfterValidator, EmailStr, Field, model_validator
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, ClassVar, Dict, List, Optional, Tuple

from coercion import MONEY_DIGITS, MONEY_PLACES, money_to_float, parse_time_of_day, to_calendar_date
from models import AppointmentStatus


def _check_time_of_day(value: str) -> str:
    parse_time_of_day(value)
    return value


CalendarDate = Annotated[date, BeforeValidator(to_calendar_date)]
TimeOfDay = Annotated[str, AfterValidator(_check_time_of_day)]
Money = Annotated[float, BeforeValidator(money_to_float)]


class PatchModel(BaseModel):
    """
    Partial update of one record.

    A field the caller left out stays unchanged; a field the caller sent is
    written, including an explicit null for nullable columns. Fields listed in
    ``non_nullable`` may be omitted but never set to null.
    """

    non_nullable: ClassVar[Tuple[str, ...]] = ()

    id: int

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        for name in self.non_nullable:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> Dict[str, Any]:
        """Fields explicitly set by the caller, keyed by column name"""
        return {name: getattr(self, name) for name in self.model_fields_set if name != "id"}


class RecordId(BaseModel):
    id: int


# Customer schemas
class CustomerCreate(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=1)
    date_of_birth: Optional[CalendarDate] = None
    notes: Optional[str] = None


class CustomerUpdate(PatchModel):
    non_nullable: ClassVar[Tuple[str, ...]] = ("first_name", "last_name", "email", "phone")

    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, min_length=1)
    date_of_birth: Optional[CalendarDate] = None
    notes: Optional[str] = None


class CustomerResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: str
    date_of_birth: Optional[date] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Service schemas
class ServiceCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    duration_minutes: int = Field(gt=0)
    price: Decimal = Field(gt=0, max_digits=MONEY_DIGITS, decimal_places=MONEY_PLACES)


class ServiceResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    duration_minutes: int
    price: Money
    created_at: datetime

    class Config:
        from_attributes = True


# Appointment schemas
class AppointmentCreate(BaseModel):
    customer_id: int
    service_id: int
    appointment_date: CalendarDate
    start_time: TimeOfDay
    end_time: TimeOfDay
    notes: Optional[str] = None


class AppointmentUpdate(PatchModel):
    non_nullable: ClassVar[Tuple[str, ...]] = (
        "customer_id", "service_id", "appointment_date", "start_time", "end_time", "status",
    )

    customer_id: Optional[int] = None
    service_id: Optional[int] = None
    appointment_date: Optional[CalendarDate] = None
    start_time: Optional[TimeOfDay] = None
    end_time: Optional[TimeOfDay] = None
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = None


class AppointmentResponse(BaseModel):
    id: int
    customer_id: int
    service_id: int
    appointment_date: date
    start_time: str
    end_time: str
    status: AppointmentStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AppointmentWithDetails(AppointmentResponse):
    customer: CustomerResponse
    service: ServiceResponse


# Service history schemas
class ServiceHistoryCreate(BaseModel):
    customer_id: int
    service_id: int
    appointment_id: Optional[int] = None
    service_date: CalendarDate
    price_paid: Decimal = Field(gt=0, max_digits=MONEY_DIGITS, decimal_places=MONEY_PLACES)
    notes: Optional[str] = None


class ServiceHistoryResponse(BaseModel):
    id: int
    customer_id: int
    service_id: int
    appointment_id: Optional[int] = None
    service_date: date
    price_paid: Money
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ServiceHistoryWithDetails(ServiceHistoryResponse):
    customer: CustomerResponse
    service: ServiceResponse


# Dashboard schemas
class DashboardStats(BaseModel):
    today_appointments: int
    new_customers_this_month: int
    total_revenue_this_month: float
    upcoming_appointments: List[AppointmentResponse]
    recent_customers: List[CustomerResponse]


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    error: str
    detail: str
