"""
Configuración central del backend (variables de entorno vía .env)
"""
import os

from dotenv import load_dotenv

load_dotenv()


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    # Compatibilidad con el esquema DB_USER / DB_PASSWORD / ... del deploy clásico
    if os.getenv("DB_HOST"):
        return (
            f"postgresql://{os.getenv('DB_USER')}:{os.getenv('DB_PASSWORD')}"
            f"@{os.getenv('DB_HOST')}:{os.getenv('DB_PORT', '5432')}/{os.getenv('DB_NAME')}"
        )
    return "sqlite:///./hotel_core.db"


# Base de datos
DATABASE_URL = _database_url()
# Segundos que una conexión SQLite espera el lock de escritura
SQLITE_BUSY_TIMEOUT = float(os.getenv("SQLITE_BUSY_TIMEOUT", "30"))

# JWT
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "tu-clave-secreta-super-segura-cambiala-en-produccion-123456789")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# Zona horaria por defecto para hoteles sin configurar
DEFAULT_HOTEL_TIMEZONE = os.getenv("DEFAULT_HOTEL_TIMEZONE", "America/Argentina/Buenos_Aires")

# Logging
LOG_FILE = os.getenv("LOG_FILE", "hotel_logs.txt")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# CORS
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin.strip()
]
