"""
Cargos y pagos de una reserva.

Toda escritura bloquea la fila de la reserva y revalida el ledger en la
misma transacción antes del commit.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from models import (
    Booking,
    BookingStatus,
    Charge,
    ChargeCategory,
    Payment,
    PaymentMethod,
    PaymentStatus,
)
from services.audit import record_event
from services.booking_service import BookingService
from services.errors import BookingCancelled, BookingLocked, ChargeNotFound, PaymentNotFound
from services.ledger import LedgerService, to_money
from utils.logging_utils import log_event
from utils.tenant import TenantContext, scoped
from utils.timezone import to_utc_naive


def _charge_payload(charge: Charge) -> dict:
    return {
        "bookingId": charge.booking_id,
        "category": charge.category,
        "description": charge.description,
        "quantity": charge.quantity,
        "unitPrice": charge.unit_price,
        "total": charge.total,
    }


def _payment_payload(payment: Payment) -> dict:
    return {
        "bookingId": payment.booking_id,
        "amount": payment.amount,
        "method": payment.method,
        "status": payment.status,
        "paidAt": payment.paid_at,
    }


class ChargeService:
    """Consumos (minibar, lavandería, servicios) cargados a la reserva"""

    @staticmethod
    def _ensure_booking_accepts_charges(booking: Booking) -> None:
        if booking.status == BookingStatus.CANCELLED:
            raise BookingCancelled("No se pueden cargar consumos a una reserva cancelada")
        if booking.status == BookingStatus.CHECKED_OUT:
            raise BookingLocked(
                "La reserva ya hizo checkout",
                details={"status": booking.status.value},
            )

    @staticmethod
    def get_charge(db: Session, ctx: TenantContext, charge_id: int) -> Charge:
        charge = scoped(db, Charge, ctx).filter(Charge.id == charge_id).first()
        if not charge:
            raise ChargeNotFound()
        return charge

    @staticmethod
    def list_charges(
        db: Session,
        ctx: TenantContext,
        booking_id: Optional[int] = None,
        room_id: Optional[int] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> List[Charge]:
        query = scoped(db, Charge, ctx)
        if booking_id is not None:
            query = query.filter(Charge.booking_id == booking_id)
        if room_id is not None:
            query = query.filter(Charge.room_id == room_id)
        if date_from is not None:
            query = query.filter(Charge.created_at >= date_from)
        if date_to is not None:
            query = query.filter(Charge.created_at < date_to)
        return query.order_by(Charge.created_at.desc(), Charge.id.desc()).all()

    @staticmethod
    def create_charge(
        db: Session,
        ctx: TenantContext,
        booking_id: int,
        description: str,
        unit_price: Decimal,
        quantity: int = 1,
        category: ChargeCategory = ChargeCategory.OTHER,
    ) -> Charge:
        booking = BookingService.get_booking(db, ctx, booking_id, lock=True)
        ChargeService._ensure_booking_accepts_charges(booking)

        unit_price = to_money(unit_price)
        charge = Charge(
            hotel_id=ctx.hotel_id,
            booking_id=booking.id,
            room_id=booking.room_id,
            category=category,
            description=description,
            quantity=quantity,
            unit_price=unit_price,
            total=to_money(unit_price * quantity),
            created_by=ctx.username,
        )
        db.add(charge)
        db.flush()

        record_event(db, ctx, "charge", charge.id, "CHARGE_CREATED", _charge_payload(charge))
        db.commit()
        db.refresh(charge)
        log_event("cargos", ctx.username, "Crear cargo", f"id={charge.id}, booking_id={booking.id}, total={charge.total}")
        return charge

    @staticmethod
    def update_charge(
        db: Session,
        ctx: TenantContext,
        charge_id: int,
        description: Optional[str] = None,
        unit_price: Optional[Decimal] = None,
        quantity: Optional[int] = None,
        category: Optional[ChargeCategory] = None,
    ) -> Charge:
        charge = ChargeService.get_charge(db, ctx, charge_id)
        booking = BookingService.get_booking(db, ctx, charge.booking_id, lock=True)
        ChargeService._ensure_booking_accepts_charges(booking)

        before = _charge_payload(charge)
        if description is not None:
            charge.description = description
        if category is not None:
            charge.category = category
        if quantity is not None:
            charge.quantity = quantity
        if unit_price is not None:
            charge.unit_price = to_money(unit_price)
        charge.total = to_money(Decimal(charge.unit_price) * charge.quantity)
        db.flush()

        # Bajar un cargo no puede dejar pagos por encima de lo facturado
        LedgerService.ensure_not_overpaid(db, ctx, booking)
        record_event(
            db, ctx, "charge", charge.id, "CHARGE_UPDATED",
            {"before": before, "after": _charge_payload(charge)},
        )
        db.commit()
        db.refresh(charge)
        log_event("cargos", ctx.username, "Editar cargo", f"id={charge.id}, total={charge.total}")
        return charge

    @staticmethod
    def delete_charge(db: Session, ctx: TenantContext, charge_id: int) -> None:
        charge = ChargeService.get_charge(db, ctx, charge_id)
        booking = BookingService.get_booking(db, ctx, charge.booking_id, lock=True)
        if booking.status == BookingStatus.CHECKED_OUT:
            raise BookingLocked("La reserva ya hizo checkout", details={"status": booking.status.value})

        record_event(db, ctx, "charge", charge.id, "CHARGE_DELETED", _charge_payload(charge))
        db.delete(charge)
        db.flush()

        LedgerService.ensure_not_overpaid(db, ctx, booking)
        db.commit()
        log_event("cargos", ctx.username, "Eliminar cargo", f"id={charge_id}, booking_id={booking.id}")


class PaymentService:
    """Pagos registrados manualmente (sin pasarela)"""

    @staticmethod
    def get_payment(db: Session, ctx: TenantContext, payment_id: int) -> Payment:
        payment = scoped(db, Payment, ctx).filter(Payment.id == payment_id).first()
        if not payment:
            raise PaymentNotFound()
        return payment

    @staticmethod
    def list_payments(
        db: Session,
        ctx: TenantContext,
        booking_id: Optional[int] = None,
        status: Optional[PaymentStatus] = None,
    ) -> List[Payment]:
        query = scoped(db, Payment, ctx)
        if booking_id is not None:
            query = query.filter(Payment.booking_id == booking_id)
        if status is not None:
            query = query.filter(Payment.status == status)
        return query.order_by(Payment.paid_at.desc(), Payment.id.desc()).all()

    @staticmethod
    def create_payment(
        db: Session,
        ctx: TenantContext,
        booking_id: int,
        amount: Decimal,
        method: PaymentMethod,
        status: PaymentStatus = PaymentStatus.COMPLETED,
        paid_at: Optional[datetime] = None,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Payment:
        booking = BookingService.get_booking(db, ctx, booking_id, lock=True)
        amount = to_money(amount)
        LedgerService.ensure_payment_fits(db, ctx, booking, amount, status)

        payment = Payment(
            hotel_id=ctx.hotel_id,
            booking_id=booking.id,
            amount=amount,
            method=method,
            status=status,
            reference=reference,
            notes=notes,
            paid_at=to_utc_naive(paid_at, ctx.timezone) if paid_at else datetime.utcnow(),
            created_by=ctx.username,
        )
        db.add(payment)
        db.flush()

        record_event(db, ctx, "payment", payment.id, "PAYMENT_CREATED", _payment_payload(payment))
        db.commit()
        db.refresh(payment)
        log_event(
            "pagos", ctx.username, "Registrar pago",
            f"id={payment.id}, booking_id={booking.id}, monto={payment.amount}, metodo={payment.method.value}",
        )
        return payment

    @staticmethod
    def update_payment(
        db: Session,
        ctx: TenantContext,
        payment_id: int,
        amount: Optional[Decimal] = None,
        method: Optional[PaymentMethod] = None,
        status: Optional[PaymentStatus] = None,
        paid_at: Optional[datetime] = None,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Payment:
        payment = PaymentService.get_payment(db, ctx, payment_id)
        booking = BookingService.get_booking(db, ctx, payment.booking_id, lock=True)

        new_amount = to_money(amount) if amount is not None else to_money(payment.amount)
        new_status = status if status is not None else payment.status
        # Se valida el pago editado contra el saldo sin contarse a sí mismo
        LedgerService.ensure_payment_fits(
            db, ctx, booking, new_amount, new_status, exclude_payment_id=payment.id
        )

        before = _payment_payload(payment)
        payment.amount = new_amount
        payment.status = new_status
        if method is not None:
            payment.method = method
        if paid_at is not None:
            payment.paid_at = to_utc_naive(paid_at, ctx.timezone)
        if reference is not None:
            payment.reference = reference
        if notes is not None:
            payment.notes = notes
        db.flush()

        record_event(
            db, ctx, "payment", payment.id, "PAYMENT_UPDATED",
            {"before": before, "after": _payment_payload(payment)},
        )
        db.commit()
        db.refresh(payment)
        log_event("pagos", ctx.username, "Editar pago", f"id={payment.id}, monto={payment.amount}, estado={payment.status.value}")
        return payment

    @staticmethod
    def delete_payment(db: Session, ctx: TenantContext, payment_id: int) -> None:
        """Siempre permitido: el saldo se recalcula desde las filas restantes"""
        payment = PaymentService.get_payment(db, ctx, payment_id)
        BookingService.get_booking(db, ctx, payment.booking_id, lock=True)

        record_event(db, ctx, "payment", payment.id, "PAYMENT_DELETED", _payment_payload(payment))
        db.delete(payment)
        db.commit()
        log_event("pagos", ctx.username, "Eliminar pago", f"id={payment_id}")
