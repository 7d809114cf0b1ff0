"""
Errores de negocio del core de reservas y caja.

Cada error lleva un ``code`` estable que el frontend usa para mostrar
el mensaje correcto, el status HTTP y un ``details`` opcional.
"""
from typing import Optional


class DomainError(Exception):
    status_code = 400
    code = "DOMAIN_ERROR"
    message = "Operación inválida"

    def __init__(self, message: Optional[str] = None, details: Optional[dict] = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"success": False, "error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


# ========== 400 ==========

class InvalidDateRange(DomainError):
    code = "INVALID_DATES"
    message = "La fecha de check-out debe ser posterior al check-in"


class SameRoom(DomainError):
    code = "SAME_ROOM"
    message = "La reserva ya está asignada a esa habitación"


# ========== 401 ==========

class NotAuthenticated(DomainError):
    status_code = 401
    code = "AUTH_TOKEN_INVALID"
    message = "No se pudo validar las credenciales"


class MissingToken(NotAuthenticated):
    code = "AUTH_TOKEN_MISSING"
    message = "Falta el token de acceso"


# ========== 404 ==========

class NotFound(DomainError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Recurso no encontrado"


class RoomNotFound(NotFound):
    code = "ROOM_NOT_FOUND"
    message = "Habitación no encontrada"


class GuestNotFound(NotFound):
    code = "GUEST_NOT_FOUND"
    message = "Huésped no encontrado"


class BookingNotFound(NotFound):
    code = "BOOKING_NOT_FOUND"
    message = "Reserva no encontrada"


class ChargeNotFound(NotFound):
    code = "CHARGE_NOT_FOUND"
    message = "Cargo no encontrado"


class PaymentNotFound(NotFound):
    code = "PAYMENT_NOT_FOUND"
    message = "Pago no encontrado"


class DailyCloseNotFound(NotFound):
    code = "DAILY_CLOSE_NOT_FOUND"
    message = "Cierre diario no encontrado"


# ========== 409 ==========

class Conflict(DomainError):
    status_code = 409
    code = "CONFLICT"


class RoomNotAvailable(Conflict):
    code = "ROOM_NOT_AVAILABLE"
    message = "La habitación no está disponible en esas fechas"


class RoomInMaintenance(Conflict):
    code = "ROOM_IN_MAINTENANCE"
    message = "La habitación se encuentra en mantenimiento"


class RoomTypeMissingPrice(Conflict):
    code = "ROOM_TYPE_MISSING_PRICE"
    message = "La habitación no tiene un tipo con tarifa base configurada"


class BookingLocked(Conflict):
    code = "BOOKING_LOCKED"
    message = "La reserva no admite cambios en su estado actual"


class BookingCancelled(Conflict):
    code = "BOOKING_CANCELLED"
    message = "La reserva está cancelada"


class InvalidTransition(Conflict):
    code = "INVALID_TRANSITION"
    message = "Transición de estado no permitida"


class BookingHasDue(Conflict):
    code = "BOOKING_HAS_DUE"
    message = "La reserva tiene saldo pendiente"


class AmountExceedsBalance(Conflict):
    code = "AMOUNT_EXCEEDS_BALANCE"
    message = "El monto supera el saldo de la reserva"


class DailyCloseExists(Conflict):
    code = "DAILY_CLOSE_EXISTS"
    message = "Ya existe un cierre para esa fecha"
