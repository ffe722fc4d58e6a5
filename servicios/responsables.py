import re

from database import ejecutar
from errores import ErrorValidacion


# Función para validar email
def validar_email(email):
    patron = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return re.match(patron, email) is not None


def listar_responsables(cliente):
    return ejecutar(
        cliente.table('responsables').select('*').order('nombre'),
        'Error al cargar los responsables'
    )


def crear_responsable(cliente, datos):
    if not datos or not datos.get('nombre') or not datos.get('email'):
        raise ErrorValidacion('Nombre y email son requeridos')

    if not isinstance(datos['nombre'], str) or not isinstance(datos['email'], str):
        raise ErrorValidacion('Nombre y email deben ser texto')

    nombre = datos['nombre'].strip()
    email = datos['email'].strip().lower()

    if len(nombre) < 2:
        raise ErrorValidacion('El nombre debe tener al menos 2 caracteres')

    if not validar_email(email):
        raise ErrorValidacion('Email inválido')

    existente = ejecutar(
        cliente.table('responsables').select('id').eq('email', email),
        'Error al verificar el email'
    )
    if existente:
        raise ErrorValidacion('Ya existe un responsable con ese email')

    creado = ejecutar(
        cliente.table('responsables').insert({'nombre': nombre, 'email': email}),
        'Error al crear el responsable'
    )
    return creado[0] if creado else {'nombre': nombre, 'email': email}
