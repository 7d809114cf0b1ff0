"""
Dependencias de autenticación y tenant
"""
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from database import conexion
from models import Hotel
from services.errors import MissingToken, NotAuthenticated
from utils.auth import verify_token
from utils.tenant import TenantContext


# auto_error=False: el 401 se arma con el mismo formato de error que el resto
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_tenant_context(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(conexion.get_db),
) -> TenantContext:
    """
    Resuelve el hotel del usuario desde el token JWT

    Raises:
        MissingToken: no se envió Authorization Bearer
        NotAuthenticated: token inválido o hotel inexistente
    """
    if not token:
        raise MissingToken()

    payload = verify_token(token, token_type="access")
    hotel_id = payload.get("hotel_id")
    username = payload.get("sub")
    if hotel_id is None or username is None:
        raise NotAuthenticated()

    hotel = db.query(Hotel).filter(Hotel.id == hotel_id).first()
    if not hotel:
        raise NotAuthenticated("El hotel del token no existe")

    return TenantContext(
        hotel_id=hotel.id,
        user_id=payload.get("user_id"),
        username=username,
        timezone=hotel.timezone,
    )
