from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import conexion
from schemas.planning import PlanningRead
from services import PlanningService
from utils.dependencies import get_tenant_context
from utils.tenant import TenantContext
from utils.timezone import parse_date_param

router = APIRouter(prefix="/planning", tags=["Planning"])


@router.get("", response_model=PlanningRead)
def obtener_planning(
    desde: Optional[str] = Query(None, alias="from", description="YYYY-MM-DD"),
    hasta: Optional[str] = Query(None, alias="to", description="YYYY-MM-DD exclusivo"),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(conexion.get_db),
):
    return PlanningService.get_planning(
        db,
        ctx,
        parse_date_param(desde, "from", required=True),
        parse_date_param(hasta, "to", required=True),
    )
