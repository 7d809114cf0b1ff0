from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

import pytz
from dateutil import parser as date_parser

from config import DEFAULT_HOTEL_TIMEZONE


def get_tz(tz_name: Optional[str]):
    """Zona horaria del hotel; cae a la default si el nombre no es válido"""
    try:
        return pytz.timezone(tz_name or DEFAULT_HOTEL_TIMEZONE)
    except pytz.UnknownTimeZoneError:
        return pytz.timezone(DEFAULT_HOTEL_TIMEZONE)


def get_hotel_now(tz_name: Optional[str] = None) -> datetime:
    """Hora actual en la zona del hotel"""
    return datetime.now(get_tz(tz_name))


def get_operational_date(tz_name: Optional[str] = None) -> date:
    """Día calendario actual del hotel"""
    return get_hotel_now(tz_name).date()


def local_day_bounds_utc(day: date, tz_name: Optional[str] = None) -> Tuple[datetime, datetime]:
    """
    Rango [inicio, fin) en UTC naive del día calendario local del hotel.

    Se localiza cada medianoche por separado para respetar cambios de horario.
    """
    tz = get_tz(tz_name)
    start_local = tz.localize(datetime.combine(day, time.min))
    end_local = tz.localize(datetime.combine(day + timedelta(days=1), time.min))
    start_utc = start_local.astimezone(pytz.utc).replace(tzinfo=None)
    end_utc = end_local.astimezone(pytz.utc).replace(tzinfo=None)
    return start_utc, end_utc


def to_utc_naive(dt: datetime, tz_name: Optional[str] = None) -> datetime:
    """Normaliza a UTC naive para persistir (naive se interpreta en hora local del hotel)"""
    if dt.tzinfo is None:
        dt = get_tz(tz_name).localize(dt)
    return dt.astimezone(pytz.utc).replace(tzinfo=None)


def parse_date_key(value: str) -> date:
    """Parsea 'YYYY-MM-DD' de query string; ValueError si no corresponde"""
    if len(value) != 10:
        raise ValueError(f"Fecha inválida: {value}")
    return date_parser.isoparse(value).date()


def parse_date_param(value: Optional[str], field_name: str, required: bool = False) -> Optional[date]:
    """Fecha de query string -> date; INVALID_DATES si falta (required) o no parsea"""
    from services.errors import InvalidDateRange

    if value is None or value == "":
        if required:
            raise InvalidDateRange(f"El parámetro '{field_name}' es obligatorio", details={"field": field_name})
        return None
    try:
        return parse_date_key(value)
    except ValueError:
        raise InvalidDateRange(f"Fecha inválida en '{field_name}': {value}", details={"field": field_name})
