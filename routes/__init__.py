from flask import current_app, request

from errores import ErrorValidacion
from servicios.fechas import ahora, hoy


def zona_local():
    return current_app.config['ZONA_HORARIA']


def hoy_local():
    return hoy(zona_local())


def ahora_local():
    return ahora(zona_local())


def datos_json():
    datos = request.get_json(silent=True)
    if datos is None:
        return {}
    if not isinstance(datos, dict):
        raise ErrorValidacion('El cuerpo debe ser un objeto JSON')
    return datos


def parametro_entero(nombre, minimo, maximo):
    valor = request.args.get(nombre)
    if valor in (None, '', 'todos', 'all'):
        return None
    try:
        numero = int(valor)
    except ValueError:
        raise ErrorValidacion(f'El parámetro {nombre} debe ser numérico')
    if not minimo <= numero <= maximo:
        raise ErrorValidacion(f'El parámetro {nombre} debe estar entre {minimo} y {maximo}')
    return numero
