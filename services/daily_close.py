"""
Cierre diario de caja.

El día operativo es el día calendario local del hotel (medianoche en su
zona horaria). Preview y creación usan la misma agregación; el cierre
queda guardado como snapshot y no se edita ni se borra.
"""
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import DailyClose, Payment, PaymentMethod, PaymentStatus
from services.audit import record_event
from services.errors import DailyCloseExists, DailyCloseNotFound
from services.ledger import ZERO, to_money
from utils.logging_utils import log_event
from utils.tenant import TenantContext, scoped
from utils.timezone import get_operational_date, local_day_bounds_utc

RECENT_CLOSES_LIMIT = 30


class DailyCloseService:

    @staticmethod
    def _completed_payments(db: Session, ctx: TenantContext, day: date) -> List[Payment]:
        start_utc, end_utc = local_day_bounds_utc(day, ctx.timezone)
        return (
            scoped(db, Payment, ctx)
            .filter(
                Payment.status == PaymentStatus.COMPLETED,
                Payment.paid_at >= start_utc,
                Payment.paid_at < end_utc,
            )
            .order_by(Payment.paid_at, Payment.id)
            .all()
        )

    @staticmethod
    def aggregate(db: Session, ctx: TenantContext, day: Optional[date] = None) -> dict:
        """Agregación del día; no persiste nada"""
        day = day or get_operational_date(ctx.timezone)
        start_utc, end_utc = local_day_bounds_utc(day, ctx.timezone)
        payments = DailyCloseService._completed_payments(db, ctx, day)

        by_method = {method.value: ZERO for method in PaymentMethod}
        total = ZERO
        for payment in payments:
            amount = to_money(payment.amount)
            by_method[payment.method.value] += amount
            total += amount

        return {
            "date_key": day,
            "timezone": ctx.timezone,
            "range_start": start_utc,
            "range_end": end_utc,
            "total_completed": total,
            "count_completed": len(payments),
            "by_method": by_method,
            "payments": payments,
        }

    @staticmethod
    def preview(db: Session, ctx: TenantContext, day: Optional[date] = None) -> dict:
        return DailyCloseService.aggregate(db, ctx, day)

    @staticmethod
    def create(
        db: Session,
        ctx: TenantContext,
        day: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> DailyClose:
        day = day or get_operational_date(ctx.timezone)

        existing = scoped(db, DailyClose, ctx).filter(DailyClose.date_key == day).first()
        if existing:
            raise DailyCloseExists(details={"dateKey": day.isoformat(), "id": existing.id})

        # Se recalcula siempre en el servidor, nunca se confía en la preview del cliente
        summary = DailyCloseService.aggregate(db, ctx, day)
        record = DailyClose(
            hotel_id=ctx.hotel_id,
            date_key=day,
            total_completed=summary["total_completed"],
            count_completed=summary["count_completed"],
            by_method={method: str(amount) for method, amount in summary["by_method"].items()},
            notes=notes,
            created_by_id=ctx.user_id,
            created_by=ctx.username,
        )
        db.add(record)
        try:
            db.flush()
        except IntegrityError:
            # Otro cierre concurrente ganó la restricción única (hotel_id, date_key)
            db.rollback()
            raise DailyCloseExists(details={"dateKey": day.isoformat()})

        record_event(
            db, ctx, "daily_close", record.id, "DAILY_CLOSE_CREATED",
            {
                "dateKey": day,
                "totalCompleted": record.total_completed,
                "countCompleted": record.count_completed,
                "byMethod": record.by_method,
            },
        )
        db.commit()
        db.refresh(record)
        log_event(
            "caja", ctx.username, "Cierre diario",
            f"fecha={day.isoformat()}, total={summary['total_completed']}, pagos={summary['count_completed']}",
        )
        return record

    @staticmethod
    def list_closes(
        db: Session,
        ctx: TenantContext,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[DailyClose]:
        query = scoped(db, DailyClose, ctx)
        if date_from is None and date_to is None:
            return query.order_by(DailyClose.date_key.desc()).limit(RECENT_CLOSES_LIMIT).all()
        if date_from is not None:
            query = query.filter(DailyClose.date_key >= date_from)
        if date_to is not None:
            query = query.filter(DailyClose.date_key <= date_to)
        return query.order_by(DailyClose.date_key.desc()).all()

    @staticmethod
    def get_close(db: Session, ctx: TenantContext, close_id: int) -> DailyClose:
        record = scoped(db, DailyClose, ctx).filter(DailyClose.id == close_id).first()
        if not record:
            raise DailyCloseNotFound()
        return record
