"""
Contexto de tenant explícito.

Cada request construye un ``TenantContext`` a partir del token y lo pasa
como argumento a los servicios; no hay estado global por request.
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session


@dataclass(frozen=True)
class TenantContext:
    hotel_id: int
    user_id: Optional[int] = None
    username: str = "system"
    timezone: Optional[str] = None


def scoped(db: Session, model, ctx: TenantContext):
    """Query sobre una tabla del tenant, siempre filtrada por hotel_id"""
    return db.query(model).filter(model.hotel_id == ctx.hotel_id)
