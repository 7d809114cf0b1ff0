from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import CORS_ORIGINS
from database.conexion import Base, engine
import models  # registra todos los modelos en Base.metadata
from services.errors import DomainError
from utils.logging_utils import log_error, log_event

try:
    Base.metadata.create_all(bind=engine)
    log_event("sistema", "system", "Tablas creadas (o ya existian)")
except SQLAlchemyError as e:
    log_error("sistema", "system", "Error creando tablas", e)

app = FastAPI(title="Hotel Core API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ========== MANEJO DE ERRORES ==========
# Todas las respuestas de error: {success: false, error, code, details?}

@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errores = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "error": "Datos inválidos",
            "code": "VALIDATION_ERROR",
            "details": {"errors": errores},
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail), "code": f"HTTP_{exc.status_code}"},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log_error("sistema", "system", f"Error inesperado en {request.method} {request.url.path}", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Error interno del servidor", "code": "INTERNAL_ERROR"},
    )


from endpoints import bookings, charges, daily_close, payments, planning
app.include_router(bookings.router)
app.include_router(planning.router)
app.include_router(charges.router)
app.include_router(payments.router)
app.include_router(daily_close.router)


@app.get("/")
def read_root():
    return {"message": "Hotel Core API"}
