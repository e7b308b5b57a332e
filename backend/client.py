# backend/client.py
import logging
from datetime import date
from typing import Any, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter

from scheduler import available_actions, derive_end_time
from schemas import (
    AppointmentResponse, AppointmentWithDetails, CustomerResponse, DashboardStats,
    HealthResponse, ServiceHistoryResponse, ServiceHistoryWithDetails, ServiceResponse,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RpcError(Exception):
    """A procedure call the server answered with a failure status"""

    def __init__(self, status_code: int, error: str, detail: Any):
        super().__init__(f"{status_code} {error}: {detail}")
        self.status_code = status_code
        self.error = error
        self.detail = detail


class SalonClient:
    """
    Typed caller for the /rpc procedures, as used by the dashboard forms.

    Takes any ``httpx.Client`` pointed at the API, including FastAPI's
    ``TestClient``. Responses are parsed back into the API schemas so dates
    come back as ``date``/``datetime`` values.
    """

    def __init__(self, http: httpx.Client, prefix: str = "/rpc"):
        self.http = http
        self.prefix = prefix

    @classmethod
    def connect(cls, base_url: str, timeout: float = 10.0) -> "SalonClient":
        return cls(httpx.Client(base_url=base_url, timeout=timeout))

    def _handle(self, response: httpx.Response, result_type: Type[T]) -> T:
        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            error = body.get("error", "validation_failed" if response.status_code == 422 else "error")
            detail = body.get("detail", response.text)
            logger.error(f"RPC {response.request.url.path} failed: {response.status_code} {detail}")
            raise RpcError(response.status_code, error, detail)
        return TypeAdapter(result_type).validate_python(response.json())

    def _query(self, name: str, result_type: Type[T], **params) -> T:
        params = {key: value for key, value in params.items() if value is not None}
        return self._handle(self.http.get(f"{self.prefix}/{name}", params=params), result_type)

    def _mutate(self, name: str, result_type: Type[T], payload: Any) -> T:
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(mode="json", exclude_unset=True)
        return self._handle(self.http.post(f"{self.prefix}/{name}", json=payload), result_type)

    def healthcheck(self) -> HealthResponse:
        return self._query("healthcheck", HealthResponse)

    # Customers
    def get_customers(self) -> List[CustomerResponse]:
        return self._query("getCustomers", List[CustomerResponse])

    def get_customer_by_id(self, customer_id: int) -> Optional[CustomerResponse]:
        return self._query("getCustomerById", Optional[CustomerResponse], id=customer_id)

    def create_customer(self, payload) -> CustomerResponse:
        return self._mutate("createCustomer", CustomerResponse, payload)

    def update_customer(self, payload) -> CustomerResponse:
        return self._mutate("updateCustomer", CustomerResponse, payload)

    def delete_customer(self, customer_id: int) -> None:
        self._mutate("deleteCustomer", type(None), {"id": customer_id})

    def search_customers(self, query: str, limit: Optional[int] = None) -> List[CustomerResponse]:
        return self._query("searchCustomers", List[CustomerResponse], query=query, limit=limit)

    # Services
    def get_services(self) -> List[ServiceResponse]:
        return self._query("getServices", List[ServiceResponse])

    def create_service(self, payload) -> ServiceResponse:
        return self._mutate("createService", ServiceResponse, payload)

    # Appointments
    def get_appointments(self) -> List[AppointmentWithDetails]:
        return self._query("getAppointments", List[AppointmentWithDetails])

    def get_appointments_by_date(self, day: date) -> List[AppointmentWithDetails]:
        return self._query("getAppointmentsByDate", List[AppointmentWithDetails], date=day.isoformat())

    def get_appointments_by_customer(self, customer_id: int) -> List[AppointmentWithDetails]:
        return self._query("getAppointmentsByCustomer", List[AppointmentWithDetails], id=customer_id)

    def create_appointment(self, payload) -> AppointmentResponse:
        return self._mutate("createAppointment", AppointmentResponse, payload)

    def update_appointment(self, payload) -> AppointmentResponse:
        return self._mutate("updateAppointment", AppointmentResponse, payload)

    def cancel_appointment(self, appointment_id: int) -> AppointmentResponse:
        return self._mutate("cancelAppointment", AppointmentResponse, {"id": appointment_id})

    def set_status(self, appointment: AppointmentResponse, action: str) -> AppointmentResponse:
        """Apply one of the operator actions offered for the appointment's status"""
        actions = available_actions(appointment.status)
        if action not in actions:
            raise ValueError(f"Cannot {action} an appointment that is {appointment.status.value}")
        if action == "cancel":
            return self.cancel_appointment(appointment.id)
        return self.update_appointment({"id": appointment.id, "status": actions[action].value})

    # Service history
    def create_service_history(self, payload) -> ServiceHistoryResponse:
        return self._mutate("createServiceHistory", ServiceHistoryResponse, payload)

    def get_service_history_by_customer(self, customer_id: int) -> List[ServiceHistoryWithDetails]:
        return self._query("getServiceHistoryByCustomer", List[ServiceHistoryWithDetails], id=customer_id)

    # Dashboard
    def get_dashboard_stats(self) -> DashboardStats:
        return self._query("getDashboardStats", DashboardStats)


def suggest_end_time(start_time: str, service: ServiceResponse) -> str:
    """End time the appointment form pre-fills once a start time and service are picked"""
    return derive_end_time(start_time, service.duration_minutes)