from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import conexion
from schemas.billing import ChargeCreate, ChargeRead, ChargeUpdate
from services import ChargeService
from services.errors import DomainError
from utils.dependencies import get_tenant_context
from utils.logging_utils import log_error
from utils.tenant import TenantContext
from utils.timezone import local_day_bounds_utc, parse_date_param

router = APIRouter(prefix="/charges", tags=["Charges"])


def _storage_error(db: Session, ctx: TenantContext, accion: str, exc: SQLAlchemyError):
    db.rollback()
    log_error("cargos", ctx.username, accion, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Error al procesar el cargo en la base de datos",
    )


@router.get("", response_model=List[ChargeRead])
def listar_cargos(
    booking_id: Optional[int] = Query(None, gt=0, alias="bookingId"),
    room_id: Optional[int] = Query(None, gt=0, alias="roomId"),
    desde: Optional[str] = Query(None, alias="from", description="YYYY-MM-DD, día local del hotel"),
    hasta: Optional[str] = Query(None, alias="to", description="YYYY-MM-DD inclusive"),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    fecha_desde = parse_date_param(desde, "from")
    fecha_hasta = parse_date_param(hasta, "to")
    return ChargeService.list_charges(
        db,
        ctx,
        booking_id=booking_id,
        room_id=room_id,
        date_from=local_day_bounds_utc(fecha_desde, ctx.timezone)[0] if fecha_desde else None,
        date_to=local_day_bounds_utc(fecha_hasta, ctx.timezone)[1] if fecha_hasta else None,
    )


@router.get("/{charge_id}", response_model=ChargeRead)
def obtener_cargo(
    charge_id: int = Path(..., gt=0),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    return ChargeService.get_charge(db, ctx, charge_id)


@router.post("", response_model=ChargeRead, status_code=status.HTTP_201_CREATED)
def crear_cargo(
    cargo: ChargeCreate,
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    try:
        return ChargeService.create_charge(
            db,
            ctx,
            booking_id=cargo.booking_id,
            description=cargo.description,
            unit_price=cargo.unit_price,
            quantity=cargo.quantity,
            category=cargo.category,
        )
    except DomainError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        raise _storage_error(db, ctx, "Error al crear cargo", e)


@router.put("/{charge_id}", response_model=ChargeRead)
def actualizar_cargo(
    cambios: ChargeUpdate,
    charge_id: int = Path(..., gt=0),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    try:
        return ChargeService.update_charge(
            db,
            ctx,
            charge_id,
            description=cambios.description,
            unit_price=cambios.unit_price,
            quantity=cambios.quantity,
            category=cambios.category,
        )
    except DomainError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        raise _storage_error(db, ctx, "Error al editar cargo", e)


@router.delete("/{charge_id}", status_code=status.HTTP_204_NO_CONTENT)
def eliminar_cargo(
    charge_id: int = Path(..., gt=0),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    try:
        ChargeService.delete_charge(db, ctx, charge_id)
    except DomainError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        raise _storage_error(db, ctx, "Error al eliminar cargo", e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
