# backend/rpc.py
"""
Named remote procedures: queries are GET with query parameters, mutations are POST with a JSON body.

Handlers are plain functions so their blocking session work runs in the threadpool.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import catalog
import customers
import history
from coercion import utcnow
from dashboard import get_dashboard_stats
from database import get_db
from scheduler import AppointmentScheduler
from schemas import (
    AppointmentCreate, AppointmentResponse, AppointmentUpdate, AppointmentWithDetails, CalendarDate,
    CustomerCreate, CustomerResponse, CustomerUpdate, DashboardStats, HealthResponse,
    RecordId, ServiceCreate, ServiceHistoryCreate, ServiceHistoryResponse,
    ServiceHistoryWithDetails, ServiceResponse,
)

router = APIRouter(prefix="/rpc", tags=["RPC"])


def get_scheduler(db: Session = Depends(get_db)) -> AppointmentScheduler:
    return AppointmentScheduler(db)


@router.get("/healthcheck", response_model=HealthResponse)
def healthcheck():
    return {"status": "ok", "timestamp": utcnow()}


# Customer management
@router.post("/createCustomer", response_model=CustomerResponse)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    return customers.create_customer(db, payload)


@router.get("/getCustomers", response_model=List[CustomerResponse])
def get_customers(db: Session = Depends(get_db)):
    return customers.get_customers(db)


@router.get("/getCustomerById", response_model=Optional[CustomerResponse])
def get_customer_by_id(id: int, db: Session = Depends(get_db)):
    return customers.get_customer_by_id(db, id)


@router.post("/updateCustomer", response_model=CustomerResponse)
def update_customer(payload: CustomerUpdate, db: Session = Depends(get_db)):
    return customers.update_customer(db, payload)


@router.post("/deleteCustomer", response_model=None)
def delete_customer(payload: RecordId, db: Session = Depends(get_db)):
    customers.delete_customer(db, payload.id)


@router.get("/searchCustomers", response_model=List[CustomerResponse])
def search_customers(
    query: str = Query(min_length=1),
    limit: int = Query(customers.DEFAULT_SEARCH_LIMIT, gt=0),
    db: Session = Depends(get_db),
):
    return customers.search_customers(db, query, limit)


# Service management
@router.post("/createService", response_model=ServiceResponse)
def create_service(payload: ServiceCreate, db: Session = Depends(get_db)):
    return catalog.create_service(db, payload)


@router.get("/getServices", response_model=List[ServiceResponse])
def get_services(db: Session = Depends(get_db)):
    return catalog.get_services(db)


# Appointment management
@router.post("/createAppointment", response_model=AppointmentResponse)
def create_appointment(
    payload: AppointmentCreate, scheduler: AppointmentScheduler = Depends(get_scheduler)
):
    return scheduler.create(payload)


@router.get("/getAppointments", response_model=List[AppointmentWithDetails])
def get_appointments(scheduler: AppointmentScheduler = Depends(get_scheduler)):
    return scheduler.list_all()


@router.get("/getAppointmentsByDate", response_model=List[AppointmentWithDetails])
def get_appointments_by_date(
    day: CalendarDate = Query(alias="date"),
    scheduler: AppointmentScheduler = Depends(get_scheduler),
):
    return scheduler.list_by_date(day)


@router.get("/getAppointmentsByCustomer", response_model=List[AppointmentWithDetails])
def get_appointments_by_customer(
    id: int, scheduler: AppointmentScheduler = Depends(get_scheduler)
):
    return scheduler.list_by_customer(id)


@router.post("/updateAppointment", response_model=AppointmentResponse)
def update_appointment(
    payload: AppointmentUpdate, scheduler: AppointmentScheduler = Depends(get_scheduler)
):
    return scheduler.update(payload)


@router.post("/cancelAppointment", response_model=AppointmentResponse)
def cancel_appointment(
    payload: RecordId, scheduler: AppointmentScheduler = Depends(get_scheduler)
):
    return scheduler.cancel(payload.id)


# Service history
@router.post("/createServiceHistory", response_model=ServiceHistoryResponse)
def create_service_history(payload: ServiceHistoryCreate, db: Session = Depends(get_db)):
    return history.create_service_history(db, payload)


@router.get("/getServiceHistoryByCustomer", response_model=List[ServiceHistoryWithDetails])
def get_service_history_by_customer(id: int, db: Session = Depends(get_db)):
    return history.get_service_history_by_customer(db, id)


# Dashboard
@router.get("/getDashboardStats", response_model=DashboardStats)
def dashboard_stats(db: Session = Depends(get_db)):
    return get_dashboard_stats(db)
