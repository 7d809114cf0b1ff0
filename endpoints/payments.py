from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import conexion
from models import PaymentStatus
from schemas.billing import PaymentCreate, PaymentRead, PaymentUpdate
from services import PaymentService
from services.errors import DomainError
from utils.dependencies import get_tenant_context
from utils.logging_utils import log_error
from utils.tenant import TenantContext

router = APIRouter(prefix="/payments", tags=["Payments"])


def _storage_error(db: Session, ctx: TenantContext, accion: str, exc: SQLAlchemyError):
    db.rollback()
    log_error("pagos", ctx.username, accion, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Error al procesar el pago en la base de datos",
    )


@router.get("", response_model=List[PaymentRead])
def listar_pagos(
    booking_id: Optional[int] = Query(None, gt=0, alias="bookingId"),
    estado: Optional[PaymentStatus] = Query(None, alias="status"),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    return PaymentService.list_payments(db, ctx, booking_id=booking_id, status=estado)


@router.get("/{payment_id}", response_model=PaymentRead)
def obtener_pago(
    payment_id: int = Path(..., gt=0),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    return PaymentService.get_payment(db, ctx, payment_id)


@router.post("", response_model=PaymentRead, status_code=status.HTTP_201_CREATED)
def registrar_pago(
    pago: PaymentCreate,
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    try:
        return PaymentService.create_payment(
            db,
            ctx,
            booking_id=pago.booking_id,
            amount=pago.amount,
            method=pago.method,
            status=pago.status,
            paid_at=pago.paid_at,
            reference=pago.reference,
            notes=pago.notes,
        )
    except DomainError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        raise _storage_error(db, ctx, "Error al registrar pago", e)


@router.put("/{payment_id}", response_model=PaymentRead)
def actualizar_pago(
    cambios: PaymentUpdate,
    payment_id: int = Path(..., gt=0),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    try:
        return PaymentService.update_payment(
            db,
            ctx,
            payment_id,
            amount=cambios.amount,
            method=cambios.method,
            status=cambios.status,
            paid_at=cambios.paid_at,
            reference=cambios.reference,
            notes=cambios.notes,
        )
    except DomainError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        raise _storage_error(db, ctx, "Error al editar pago", e)


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
def eliminar_pago(
    payment_id: int = Path(..., gt=0),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    try:
        PaymentService.delete_payment(db, ctx, payment_id)
    except DomainError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        raise _storage_error(db, ctx, "Error al eliminar pago", e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
