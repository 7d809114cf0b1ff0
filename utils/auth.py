"""
Utilidades para tokens JWT.

El login vive en el servicio de usuarios; este backend sólo emite tokens
para herramientas internas/tests y valida los que recibe.
"""
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from config import JWT_SECRET_KEY, JWT_ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from services.errors import NotAuthenticated


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Crea un token de acceso JWT

    ``data`` debe incluir ``sub`` (username), ``user_id`` y ``hotel_id``.
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({
        "exp": expire,
        "iat": datetime.utcnow(),
        "type": "access"
    })

    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_token(token: str, token_type: str = "access") -> dict:
    """
    Verifica y decodifica un token JWT

    Raises:
        NotAuthenticated: token inválido, expirado o de otro tipo
    """
    try:
        # jose valida "exp" y rechaza tokens vencidos
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise NotAuthenticated()

    if payload.get("type") != token_type:
        raise NotAuthenticated(f"Tipo de token inválido. Se esperaba '{token_type}'")

    return payload
