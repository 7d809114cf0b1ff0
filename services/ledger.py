"""
Ledger de reservas: total + cargos - pagos completados.

Todo cálculo de saldo pasa por ``LedgerService.summarize``; listados,
detalle, checkout y validación de pagos usan la misma agregación y
siempre se recalcula desde las filas de cargos y pagos.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models import Booking, Charge, Payment, PaymentStatus
from services.errors import AmountExceedsBalance
from utils.tenant import TenantContext, scoped

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(str(value)).quantize(CENT)


@dataclass(frozen=True)
class LedgerSummary:
    booking_id: int
    total_price: Decimal
    charges_total: Decimal
    paid_completed: Decimal

    @property
    def billed(self) -> Decimal:
        return self.total_price + self.charges_total

    @property
    def due(self) -> Decimal:
        return self.billed - self.paid_completed


class LedgerService:

    @staticmethod
    def _charges_by_booking(db: Session, ctx: TenantContext, booking_ids) -> Dict[int, Decimal]:
        rows = (
            scoped(db, Charge, ctx)
            .with_entities(Charge.booking_id, func.sum(Charge.total))
            .filter(Charge.booking_id.in_(booking_ids))
            .group_by(Charge.booking_id)
            .all()
        )
        return {booking_id: to_money(total) for booking_id, total in rows}

    @staticmethod
    def _paid_by_booking(
        db: Session,
        ctx: TenantContext,
        booking_ids,
        exclude_payment_id: Optional[int] = None,
    ) -> Dict[int, Decimal]:
        query = (
            scoped(db, Payment, ctx)
            .with_entities(Payment.booking_id, func.sum(Payment.amount))
            .filter(
                Payment.booking_id.in_(booking_ids),
                Payment.status == PaymentStatus.COMPLETED,
            )
        )
        if exclude_payment_id is not None:
            query = query.filter(Payment.id != exclude_payment_id)
        rows = query.group_by(Payment.booking_id).all()
        return {booking_id: to_money(total) for booking_id, total in rows}

    @staticmethod
    def summarize(
        db: Session,
        ctx: TenantContext,
        bookings: Iterable[Booking],
        exclude_payment_id: Optional[int] = None,
    ) -> Dict[int, LedgerSummary]:
        """Saldo de varias reservas con dos queries agregadas"""
        bookings = list(bookings)
        if not bookings:
            return {}
        ids = [booking.id for booking in bookings]
        charges = LedgerService._charges_by_booking(db, ctx, ids)
        paid = LedgerService._paid_by_booking(db, ctx, ids, exclude_payment_id)
        return {
            booking.id: LedgerSummary(
                booking_id=booking.id,
                total_price=to_money(booking.total_price),
                charges_total=charges.get(booking.id, ZERO),
                paid_completed=paid.get(booking.id, ZERO),
            )
            for booking in bookings
        }

    @staticmethod
    def compute_due(
        db: Session,
        ctx: TenantContext,
        booking: Booking,
        exclude_payment_id: Optional[int] = None,
    ) -> LedgerSummary:
        return LedgerService.summarize(db, ctx, [booking], exclude_payment_id)[booking.id]

    @staticmethod
    def ensure_payment_fits(
        db: Session,
        ctx: TenantContext,
        booking: Booking,
        amount: Decimal,
        status: PaymentStatus,
        exclude_payment_id: Optional[int] = None,
    ) -> None:
        """
        Un pago completado no puede superar el saldo de la reserva.

        ``exclude_payment_id`` saca del cálculo al pago que se está editando.
        """
        if PaymentStatus(status) != PaymentStatus.COMPLETED:
            return
        summary = LedgerService.compute_due(db, ctx, booking, exclude_payment_id)
        amount = to_money(amount)
        if amount > summary.due:
            raise AmountExceedsBalance(
                details={"due": str(max(summary.due, ZERO)), "attempted": str(amount)}
            )

    @staticmethod
    def ensure_not_overpaid(db: Session, ctx: TenantContext, booking: Booking) -> LedgerSummary:
        """
        Revalida el ledger después de bajar lo facturado (cargo editado o
        borrado, cambio de fechas o de habitación). Requiere flush previo.
        """
        summary = LedgerService.compute_due(db, ctx, booking)
        if summary.due < ZERO:
            raise AmountExceedsBalance(
                "Lo ya pagado superaría el total de la reserva",
                details={"due": str(summary.due), "paidCompleted": str(summary.paid_completed)},
            )
        return summary
