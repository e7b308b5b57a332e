# backend/dashboard.py
import logging
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from coercion import first_day_of_month, local_to_utc, localnow, money_to_float, to_money
from database import transaction
from models import Appointment, Customer, ServiceHistory
from schemas import AppointmentResponse, CustomerResponse, DashboardStats

logger = logging.getLogger(__name__)

UPCOMING_WINDOW_DAYS = 7
UPCOMING_LIMIT = 10
RECENT_CUSTOMERS_LIMIT = 5


def get_dashboard_stats(db: Session, now: Optional[datetime] = None) -> DashboardStats:
    """
    Summary figures for the dashboard, all windows taken from one clock reading.

    ``now`` is server-local wall-clock time, so "today" is the local date.
    Month windows start on the first day of the current month and are open
    ended; for created_at, which is stored in UTC, the local midnight of the
    1st is converted to UTC first. The upcoming window covers today through
    today + 7 days inclusive.
    """
    now = now or localnow()
    today = now.date()
    month_start = first_day_of_month(today)
    window_end = today + timedelta(days=UPCOMING_WINDOW_DAYS)

    with transaction(db, "Dashboard stats retrieval", commit=False):
        today_appointments = db.query(Appointment).filter(
            Appointment.appointment_date == today
        ).count()

        new_customers = db.query(Customer).filter(
            Customer.created_at >= local_to_utc(datetime.combine(month_start, time.min))
        ).count()

        monthly_payments = db.query(ServiceHistory.price_paid).filter(
            ServiceHistory.service_date >= month_start
        ).all()
        total_revenue = sum((to_money(price) for (price,) in monthly_payments), Decimal("0"))

        upcoming = db.query(Appointment).filter(
            Appointment.appointment_date >= today,
            Appointment.appointment_date <= window_end,
        ).order_by(
            Appointment.appointment_date, Appointment.start_time, Appointment.id
        ).limit(UPCOMING_LIMIT).all()

        recent_customers = db.query(Customer).order_by(
            Customer.created_at.desc(), Customer.id.desc()
        ).limit(RECENT_CUSTOMERS_LIMIT).all()

        logger.debug(
            f"Dashboard: {today_appointments} today, {new_customers} new customers, revenue {total_revenue}"
        )
        return DashboardStats(
            today_appointments=today_appointments,
            new_customers_this_month=new_customers,
            total_revenue_this_month=money_to_float(total_revenue),
            upcoming_appointments=[AppointmentResponse.model_validate(a) for a in upcoming],
            recent_customers=[CustomerResponse.model_validate(c) for c in recent_customers],
        )
