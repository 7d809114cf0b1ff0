"""
Vista de planning (timeline) para un rango de fechas
"""
from datetime import date

from sqlalchemy.orm import Session

from models import Booking, BookingStatus, Room
from services.errors import InvalidDateRange
from utils.tenant import TenantContext, scoped


class PlanningService:

    @staticmethod
    def get_planning(db: Session, ctx: TenantContext, date_from: date, date_to: date) -> dict:
        """Habitaciones del hotel y reservas no canceladas que tocan [from, to)"""
        if date_from is None or date_to is None or date_to <= date_from:
            raise InvalidDateRange("El rango del planning es inválido", details={"from": str(date_from), "to": str(date_to)})

        rooms = scoped(db, Room, ctx).order_by(Room.floor, Room.number).all()
        bookings = (
            scoped(db, Booking, ctx)
            .filter(
                Booking.status != BookingStatus.CANCELLED,
                Booking.check_in < date_to,
                Booking.check_out > date_from,
            )
            .order_by(Booking.room_id, Booking.check_in)
            .all()
        )
        return {"from_date": date_from, "to_date": date_to, "rooms": rooms, "bookings": bookings}
