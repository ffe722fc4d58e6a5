from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def zona(nombre):
    return ZoneInfo(nombre or 'UTC')


def ahora(nombre_zona=None) -> datetime:
    return datetime.now(zona(nombre_zona))


def hoy(nombre_zona=None) -> date:
    return ahora(nombre_zona).date()


def parsear_fecha(valor, nombre_zona=None) -> datetime:
    """Convierte un timestamp de Supabase a datetime en la zona indicada.

    Los timestamps sin zona se toman como UTC.
    """
    if isinstance(valor, datetime):
        fecha = valor
    else:
        texto = str(valor).strip().replace('Z', '+00:00')
        fecha = datetime.fromisoformat(texto)
    if fecha.tzinfo is None:
        fecha = fecha.replace(tzinfo=timezone.utc)
    return fecha.astimezone(zona(nombre_zona))


def parsear_dia(valor, nombre_zona=None):
    """Fecha de calendario de una columna date o timestamp; None si viene vacía."""
    if valor is None or valor == '':
        return None
    if isinstance(valor, datetime):
        return parsear_fecha(valor, nombre_zona).date()
    if isinstance(valor, date):
        return valor
    texto = str(valor).strip()
    if len(texto) == 10:
        return date.fromisoformat(texto)
    return parsear_fecha(texto, nombre_zona).date()
