from database import ejecutar
from errores import ErrorNoEncontrado, ErrorValidacion
from servicios import tareas
from servicios.etiquetas import listar_etiquetas
from servicios.responsables import listar_responsables


def obtener_encuesta(cliente, encuesta_id):
    datos = ejecutar(
        cliente.table('encuestas').select('*').eq('id', encuesta_id),
        'Error al cargar el comentario'
    )
    if not datos:
        raise ErrorNoEncontrado('Comentario no encontrado')
    return datos[0]


def obtener_detalle(cliente, encuesta_id, hoy):
    """Todo lo que necesita la vista de detalle de un comentario."""
    encuesta = obtener_encuesta(cliente, encuesta_id)
    return {
        'encuesta': encuesta,
        'etiquetas_disponibles': [e['nombre'] for e in listar_etiquetas(cliente)],
        'tareas': tareas.listar_tareas(cliente, encuesta_id, hoy),
        'responsables': listar_responsables(cliente),
    }


def _normalizar_etiquetas(cliente, etiquetas):
    """Lleva cada nombre a la ortografía guardada en el vocabulario de etiquetas."""
    if not isinstance(etiquetas, list) or not all(isinstance(e, str) for e in etiquetas):
        raise ErrorValidacion('Las etiquetas deben ser una lista de nombres')

    vocabulario = {e['nombre'].lower(): e['nombre'] for e in listar_etiquetas(cliente)}
    normalizadas = []
    desconocidas = []
    for etiqueta in etiquetas:
        etiqueta = etiqueta.strip()
        if not etiqueta:
            continue
        nombre = vocabulario.get(etiqueta.lower())
        if nombre is None:
            if etiqueta not in desconocidas:
                desconocidas.append(etiqueta)
        elif nombre not in normalizadas:
            normalizadas.append(nombre)

    if desconocidas:
        raise ErrorValidacion('Etiquetas no registradas', etiquetas_desconocidas=desconocidas)
    return normalizadas


def guardar_cambios(cliente, encuesta_id, datos):
    """Guarda en una sola actualización el conjunto de etiquetas y las notas internas.

    El conjunto enviado reemplaza al guardado: si dos personas editan a la
    vez, prevalece la última escritura.
    """
    if not datos or ('etiquetas' not in datos and 'notas_internas' not in datos):
        raise ErrorValidacion('No se enviaron datos')

    datos_actualizacion = {}
    if 'etiquetas' in datos:
        datos_actualizacion['etiquetas'] = _normalizar_etiquetas(cliente, datos['etiquetas'])
    if 'notas_internas' in datos:
        notas = datos['notas_internas'] or ''
        if not isinstance(notas, str):
            raise ErrorValidacion('Las notas internas deben ser texto')
        datos_actualizacion['notas_internas'] = notas

    actualizada = ejecutar(
        cliente.table('encuestas').update(datos_actualizacion).eq('id', encuesta_id),
        'Error al guardar cambios'
    )
    if not actualizada:
        raise ErrorNoEncontrado('Comentario no encontrado')
    return actualizada[0]
