from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import conexion
from models import Booking, BookingStatus
from schemas.bookings import (
    AvailabilityRead,
    BookingCreate,
    BookingMoveRoom,
    BookingRead,
    BookingStatusUpdate,
    BookingUpdate,
    BookingWithLedger,
    LedgerRead,
)
from services import AvailabilityService, BookingService, LedgerService, LedgerSummary
from services.errors import DomainError
from utils.dependencies import get_tenant_context
from utils.logging_utils import log_error
from utils.tenant import TenantContext
from utils.timezone import parse_date_param

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def _with_ledger(booking: Booking, summary: LedgerSummary) -> BookingWithLedger:
    data = BookingRead.model_validate(booking).model_dump()
    return BookingWithLedger(
        **data,
        charges_total=summary.charges_total,
        paid_completed=summary.paid_completed,
        due_amount=summary.due,
    )


def _storage_error(db: Session, ctx: TenantContext, accion: str, exc: SQLAlchemyError):
    db.rollback()
    log_error("reservas", ctx.username, accion, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Error al procesar la reserva en la base de datos",
    )


@router.get("/availability", response_model=AvailabilityRead)
def verificar_disponibilidad(
    room_id: int = Query(..., gt=0, alias="roomId"),
    check_in: str = Query(..., alias="checkIn", description="ISO date: YYYY-MM-DD"),
    check_out: str = Query(..., alias="checkOut", description="ISO date: YYYY-MM-DD"),
    exclude_booking_id: Optional[int] = Query(None, gt=0, alias="excludeBookingId"),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    checkin = parse_date_param(check_in, "checkIn", required=True)
    checkout = parse_date_param(check_out, "checkOut", required=True)
    disponible = AvailabilityService.is_available(db, ctx, room_id, checkin, checkout, exclude_booking_id)
    return AvailabilityRead(room_id=room_id, check_in=checkin, check_out=checkout, available=disponible)


@router.get("", response_model=List[BookingWithLedger])
def listar_reservas(
    estado: Optional[BookingStatus] = Query(None, alias="status"),
    room_id: Optional[int] = Query(None, gt=0, alias="roomId"),
    guest_id: Optional[int] = Query(None, gt=0, alias="guestId"),
    desde: Optional[str] = Query(None, alias="from"),
    hasta: Optional[str] = Query(None, alias="to"),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    rows = BookingService.list_with_ledger(
        db,
        ctx,
        status=estado,
        room_id=room_id,
        guest_id=guest_id,
        date_from=parse_date_param(desde, "from"),
        date_to=parse_date_param(hasta, "to"),
    )
    return [_with_ledger(booking, summary) for booking, summary in rows]


@router.get("/{booking_id}", response_model=BookingWithLedger)
def obtener_reserva(
    booking_id: int = Path(..., gt=0),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    booking, summary = BookingService.get_with_ledger(db, ctx, booking_id)
    return _with_ledger(booking, summary)


@router.get("/{booking_id}/due", response_model=LedgerRead)
def saldo_reserva(
    booking_id: int = Path(..., gt=0),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    booking = BookingService.get_booking(db, ctx, booking_id)
    summary = LedgerService.compute_due(db, ctx, booking)
    return LedgerRead(
        booking_id=summary.booking_id,
        total_price=summary.total_price,
        charges_total=summary.charges_total,
        paid_completed=summary.paid_completed,
        due=summary.due,
    )


@router.post("", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def crear_reserva(
    reserva: BookingCreate,
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    try:
        return BookingService.create_booking(
            db,
            ctx,
            room_id=reserva.room_id,
            guest_id=reserva.guest_id,
            check_in=reserva.check_in,
            check_out=reserva.check_out,
            notes=reserva.notes,
        )
    except DomainError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        raise _storage_error(db, ctx, "Error al crear reserva", e)


@router.put("/{booking_id}", response_model=BookingRead)
def actualizar_reserva(
    cambios: BookingUpdate,
    booking_id: int = Path(..., gt=0),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    try:
        return BookingService.update_booking(
            db,
            ctx,
            booking_id,
            room_id=cambios.room_id,
            guest_id=cambios.guest_id,
            check_in=cambios.check_in,
            check_out=cambios.check_out,
            notes=cambios.notes,
        )
    except DomainError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        raise _storage_error(db, ctx, "Error al editar reserva", e)


@router.patch("/{booking_id}/status", response_model=BookingRead)
def cambiar_estado_reserva(
    payload: BookingStatusUpdate,
    booking_id: int = Path(..., gt=0),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    try:
        return BookingService.change_status(db, ctx, booking_id, payload.status)
    except DomainError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        raise _storage_error(db, ctx, "Error al cambiar estado", e)


@router.patch("/{booking_id}/move-room", response_model=BookingRead)
def mover_reserva(
    payload: BookingMoveRoom,
    booking_id: int = Path(..., gt=0),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    try:
        return BookingService.move_booking(db, ctx, booking_id, payload.room_id)
    except DomainError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        raise _storage_error(db, ctx, "Error al mover reserva", e)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def eliminar_reserva(
    booking_id: int = Path(..., gt=0),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    try:
        BookingService.delete_booking(db, ctx, booking_id)
    except DomainError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        raise _storage_error(db, ctx, "Error al eliminar reserva", e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
