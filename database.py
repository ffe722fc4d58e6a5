import logging

import httpx
from flask import current_app
from postgrest.exceptions import APIError
from supabase import Client, create_client

from errores import ErrorServicio

logger = logging.getLogger(__name__)


def init_app(app, cliente=None, fabrica_auth=None):
    """Registra el cliente de Supabase (o uno inyectado) en la aplicación."""
    app.extensions['supabase'] = cliente
    app.extensions['supabase_auth'] = fabrica_auth or _nuevo_cliente


def _nuevo_cliente() -> Client:
    url = current_app.config.get('DATABASE_URL')
    key = current_app.config.get('DATABASE_KEY')
    if not url or not key:
        raise ErrorServicio('DATABASE_URL y DATABASE_KEY son requeridos')
    return create_client(url, key)


def get_supabase() -> Client:
    cliente = current_app.extensions.get('supabase')
    if cliente is None:
        cliente = _nuevo_cliente()
        current_app.extensions['supabase'] = cliente
    return cliente


def cliente_auth() -> Client:
    # Cada inicio de sesión usa su propio cliente para no cambiar la
    # sesión del cliente compartido de datos
    return current_app.extensions['supabase_auth']()


def ejecutar(consulta, mensaje='Error al comunicarse con la base de datos'):
    """Ejecuta una consulta de PostgREST y devuelve ``resultado.data``."""
    try:
        resultado = consulta.execute()
    except (APIError, httpx.HTTPError) as e:
        raise ErrorServicio(mensaje) from e
    return resultado.data or []
