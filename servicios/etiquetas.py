"""
Vocabulario global de etiquetas.

Las encuestas guardan los *nombres* de las etiquetas, no sus ids, por lo que
borrar una etiqueta exige quitarla antes de cada comentario que la use.
"""
import logging

from database import ejecutar
from errores import ErrorConfirmacion, ErrorNoEncontrado, ErrorServicio, ErrorValidacion

logger = logging.getLogger(__name__)


def listar_etiquetas(cliente, buscar=None):
    etiquetas = ejecutar(
        cliente.table('etiquetas').select('*').order('nombre'),
        'Error al cargar las etiquetas'
    )
    if buscar:
        buscar = buscar.strip().lower()
        etiquetas = [e for e in etiquetas if buscar in e['nombre'].lower()]
    return etiquetas


def contar_usos(cliente):
    """Número de comentarios que usa cada etiqueta."""
    encuestas = ejecutar(
        cliente.table('encuestas').select('id, etiquetas').not_.is_('comentario', 'null'),
        'Error al cargar las etiquetas de los comentarios'
    )
    usos = {}
    for encuesta in encuestas:
        for nombre in encuesta.get('etiquetas') or []:
            usos[nombre] = usos.get(nombre, 0) + 1
    return usos


def existe_etiqueta(etiquetas, nombre):
    nombre = nombre.lower()
    return any(e['nombre'].lower() == nombre for e in etiquetas)


def crear_etiqueta(cliente, nombre):
    if nombre is not None and not isinstance(nombre, str):
        raise ErrorValidacion('El nombre de la etiqueta debe ser texto')
    nombre = (nombre or '').strip()

    if not nombre:
        raise ErrorValidacion('El nombre de la etiqueta no puede estar vacío')

    if existe_etiqueta(listar_etiquetas(cliente), nombre):
        raise ErrorValidacion('Ya existe una etiqueta con ese nombre')

    creada = ejecutar(
        cliente.table('etiquetas').insert({'nombre': nombre}),
        'Error al crear la etiqueta'
    )
    logger.info('Etiqueta creada: %s', nombre)
    return creada[0] if creada else {'nombre': nombre}


def _obtener_etiqueta(cliente, etiqueta_id):
    datos = ejecutar(
        cliente.table('etiquetas').select('*').eq('id', etiqueta_id),
        'Error al cargar la etiqueta'
    )
    if not datos:
        raise ErrorNoEncontrado('Etiqueta no encontrada')
    return datos[0]


def encuestas_con_etiqueta(cliente, nombre):
    return ejecutar(
        cliente.table('encuestas').select('id, etiquetas').contains('etiquetas', [nombre]),
        'Error al buscar los comentarios con la etiqueta'
    )


def _restaurar(cliente, originales):
    fallidas = []
    for encuesta_id, etiquetas in originales:
        try:
            ejecutar(cliente.table('encuestas').update({'etiquetas': etiquetas}).eq('id', encuesta_id))
        except ErrorServicio:
            fallidas.append(encuesta_id)
    if fallidas:
        logger.error('No se pudieron restaurar las etiquetas de las encuestas %s', fallidas)
    return fallidas


def eliminar_etiqueta(cliente, etiqueta_id, confirmar=False):
    """Quita la etiqueta de todos los comentarios y luego elimina la etiqueta.

    Si algún paso falla se restauran las etiquetas originales de los
    comentarios ya modificados antes de propagar el error.
    """
    etiqueta = _obtener_etiqueta(cliente, etiqueta_id)
    nombre = etiqueta['nombre']
    encuestas = encuestas_con_etiqueta(cliente, nombre)

    if not confirmar:
        raise ErrorConfirmacion(
            f'Confirme la eliminación de la etiqueta "{nombre}"',
            etiqueta=nombre,
            comentarios_afectados=len(encuestas)
        )

    modificadas = []
    try:
        for encuesta in encuestas:
            originales = list(encuesta.get('etiquetas') or [])
            ejecutar(
                cliente.table('encuestas')
                .update({'etiquetas': [e for e in originales if e != nombre]})
                .eq('id', encuesta['id']),
                'Error al quitar la etiqueta de los comentarios'
            )
            modificadas.append((encuesta['id'], originales))

        ejecutar(
            cliente.table('etiquetas').delete().eq('id', etiqueta_id),
            'Error al eliminar la etiqueta'
        )
    except ErrorServicio as e:
        logger.warning('Eliminación de "%s" fallida; restaurando %d comentarios', nombre, len(modificadas))
        fallidas = _restaurar(cliente, modificadas)
        if fallidas:
            e.detalles['encuestas_sin_restaurar'] = fallidas
        raise

    logger.info('Etiqueta "%s" eliminada de %d comentarios', nombre, len(modificadas))
    return {'etiqueta': nombre, 'comentarios_actualizados': len(modificadas)}
