from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import conexion
from schemas.daily_close import DailyCloseCreate, DailyClosePreview, DailyCloseRead
from services import DailyCloseService
from services.errors import DomainError
from utils.dependencies import get_tenant_context
from utils.logging_utils import log_error
from utils.tenant import TenantContext
from utils.timezone import parse_date_param

router = APIRouter(prefix="/daily-close", tags=["Daily close"])


@router.get("/preview", response_model=DailyClosePreview)
def preview_cierre(
    fecha: Optional[str] = Query(None, alias="date", description="YYYY-MM-DD; default hoy (hora del hotel)"),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    return DailyCloseService.preview(db, ctx, parse_date_param(fecha, "date"))


@router.get("", response_model=List[DailyCloseRead])
def listar_cierres(
    desde: Optional[str] = Query(None, alias="from"),
    hasta: Optional[str] = Query(None, alias="to"),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    return DailyCloseService.list_closes(
        db, ctx, parse_date_param(desde, "from"), parse_date_param(hasta, "to")
    )


@router.get("/{close_id}", response_model=DailyCloseRead)
def obtener_cierre(
    close_id: int = Path(..., gt=0),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    return DailyCloseService.get_close(db, ctx, close_id)


@router.post("", response_model=DailyCloseRead, status_code=status.HTTP_201_CREATED)
def crear_cierre(
    cierre: DailyCloseCreate,
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    try:
        return DailyCloseService.create(db, ctx, cierre.date_key, cierre.notes)
    except DomainError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        log_error("caja", ctx.username, "Error al crear cierre diario", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error al guardar el cierre diario",
        )
