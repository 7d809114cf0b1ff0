"""
Auditoría de escrituras del core.

El evento se agrega en la misma sesión que la escritura, así que se
confirma o se descarta junto con ella.
"""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy.orm import Session

from models import AuditEvent
from utils.tenant import TenantContext


def _jsonable(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


def record_event(
    db: Session,
    ctx: TenantContext,
    entity_type: str,
    entity_id: int,
    action: str,
    payload: Optional[dict] = None,
    descripcion: Optional[str] = None,
) -> AuditEvent:
    evento = AuditEvent(
        hotel_id=ctx.hotel_id,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        usuario=ctx.username,
        timestamp=datetime.utcnow(),
        descripcion=descripcion,
        payload=_jsonable(payload) if payload is not None else None,
    )
    db.add(evento)
    return evento
