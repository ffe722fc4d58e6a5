import logging
from datetime import date

from database import ejecutar
from errores import ErrorNoEncontrado, ErrorValidacion
from servicios.fechas import parsear_dia

logger = logging.getLogger(__name__)

PENDIENTE = 'Pendiente'
VENCIDA = 'Vencida'
DESCARTADA = 'Descartada'
RESUELTA = 'Resuelta'
ESTADOS_TAREA = [PENDIENTE, VENCIDA, DESCARTADA, RESUELTA]

SELECT_TAREA = '*, responsables(nombre)'

# 100 uuids ocupan unos 3.7 KB de URL
TAMANO_LOTE = 100


def esta_vencida(fecha_vencimiento, hoy):
    return fecha_vencimiento is not None and fecha_vencimiento < hoy


def estado_calculado(tarea, hoy):
    """Estado que debe mostrarse: una tarea pendiente con fecha pasada está vencida."""
    if tarea.get('estado') == PENDIENTE and esta_vencida(parsear_dia(tarea.get('fecha_vencimiento')), hoy):
        return VENCIDA
    return tarea.get('estado')


def corregir_vencidas(cliente, tareas, hoy):
    """Marca como vencidas las tareas pendientes cuya fecha ya pasó y guarda el cambio."""
    for tarea in tareas:
        if estado_calculado(tarea, hoy) == VENCIDA and tarea.get('estado') == PENDIENTE:
            # Sólo se actualiza si sigue pendiente en la base
            actualizada = ejecutar(
                cliente.table('tareas').update({'estado': VENCIDA}).eq('id', tarea['id']).eq('estado', PENDIENTE),
                'Error al actualizar el estado de la tarea'
            )
            if actualizada:
                logger.info('Tarea %s marcada como vencida', tarea['id'])
                tarea['estado'] = VENCIDA
            else:
                # Otra persona la cambió entre la lectura y la actualización
                vigente = ejecutar(
                    cliente.table('tareas').select('estado').eq('id', tarea['id']),
                    'Error al cargar el estado de la tarea'
                )
                if vigente:
                    tarea['estado'] = vigente[0]['estado']
    return tareas


def formatear_tarea(tarea):
    responsable = tarea.get('responsables') or {}
    return {
        'id': tarea['id'],
        'encuesta_id': tarea.get('encuesta_id'),
        'nombre': tarea.get('nombre'),
        'descripcion': tarea.get('descripcion'),
        'responsable_id': tarea.get('responsable_id'),
        'responsable_nombre': responsable.get('nombre') or 'Sin responsable',
        'fecha_vencimiento': tarea.get('fecha_vencimiento'),
        'estado': tarea.get('estado'),
        'created_at': tarea.get('created_at'),
    }


def resumen(tarea):
    if tarea is None:
        return None
    formateada = formatear_tarea(tarea)
    return {
        'responsable_nombre': formateada['responsable_nombre'],
        'fecha_vencimiento': formateada['fecha_vencimiento'],
        'estado': formateada['estado'],
    }


def listar_tareas(cliente, encuesta_id, hoy):
    tareas = ejecutar(
        cliente.table('tareas').select(SELECT_TAREA).eq('encuesta_id', encuesta_id).order('created_at'),
        'Error al cargar las tareas'
    )
    corregir_vencidas(cliente, tareas, hoy)
    return [formatear_tarea(t) for t in tareas]


def primeras_tareas(cliente, encuesta_ids, hoy):
    """Primera tarea creada de cada encuesta, ya corregida, indexada por encuesta."""
    encuesta_ids = list(encuesta_ids)
    primeras = {}
    # Los ids viajan en la URL de PostgREST; se consultan por lotes
    for inicio in range(0, len(encuesta_ids), TAMANO_LOTE):
        lote = encuesta_ids[inicio:inicio + TAMANO_LOTE]
        tareas = ejecutar(
            cliente.table('tareas').select(SELECT_TAREA).in_('encuesta_id', lote).order('created_at'),
            'Error al cargar las tareas'
        )
        for tarea in tareas:
            primeras.setdefault(tarea['encuesta_id'], tarea)
    corregir_vencidas(cliente, list(primeras.values()), hoy)
    return primeras


def resumen_tarea(cliente, encuesta_id, hoy):
    return resumen(primeras_tareas(cliente, [encuesta_id], hoy).get(encuesta_id))


def _obtener_tarea(cliente, tarea_id):
    datos = ejecutar(
        cliente.table('tareas').select(SELECT_TAREA).eq('id', tarea_id),
        'Error al cargar la tarea'
    )
    if not datos:
        raise ErrorNoEncontrado('Tarea no encontrada')
    return datos[0]


def _validar_fecha(valor):
    if valor in (None, ''):
        return None
    try:
        return date.fromisoformat(str(valor)[:10])
    except ValueError:
        raise ErrorValidacion('Fecha de vencimiento inválida, use AAAA-MM-DD')


def _texto(datos, campo):
    valor = datos.get(campo) or ''
    if not isinstance(valor, str):
        raise ErrorValidacion(f'El campo {campo} debe ser texto')
    return valor.strip()


def _validar_datos(cliente, datos, actual=None):
    if not datos:
        raise ErrorValidacion('No se enviaron datos')

    nombre = _texto(datos, 'nombre')
    responsable_id = datos.get('responsable_id')
    if not nombre or not responsable_id:
        raise ErrorValidacion('Nombre y responsable son requeridos')

    # Al editar, una descripción no enviada conserva la guardada
    if actual is not None and 'descripcion' not in datos:
        descripcion = actual.get('descripcion') or ''
    else:
        descripcion = _texto(datos, 'descripcion')

    responsable = ejecutar(
        cliente.table('responsables').select('id').eq('id', responsable_id),
        'Error al verificar el responsable'
    )
    if not responsable:
        raise ErrorValidacion('Responsable no encontrado')

    estado = datos.get('estado')
    if estado is not None and estado not in ESTADOS_TAREA:
        raise ErrorValidacion(f'Estado inválido: {estado}')

    return {
        'nombre': nombre,
        'descripcion': descripcion,
        'responsable_id': responsable_id,
        'fecha_vencimiento': _validar_fecha(datos.get('fecha_vencimiento')),
        'estado': estado,
    }


def crear_tarea(cliente, encuesta_id, datos):
    validados = _validar_datos(cliente, datos)

    encuesta = ejecutar(
        cliente.table('encuestas').select('id').eq('id', encuesta_id),
        'Error al verificar el comentario'
    )
    if not encuesta:
        raise ErrorNoEncontrado('Comentario no encontrado')

    fecha = validados['fecha_vencimiento']
    nueva_tarea = {
        'encuesta_id': encuesta_id,
        'nombre': validados['nombre'],
        'descripcion': validados['descripcion'],
        'responsable_id': validados['responsable_id'],
        'fecha_vencimiento': fecha.isoformat() if fecha else None,
        'estado': validados['estado'] or PENDIENTE,
    }
    creada = ejecutar(cliente.table('tareas').insert(nueva_tarea), 'Error al crear la tarea')
    logger.info('Tarea creada para la encuesta %s', encuesta_id)
    return creada[0] if creada else nueva_tarea


def actualizar_tarea(cliente, tarea_id, datos, hoy):
    actual = _obtener_tarea(cliente, tarea_id)
    validados = _validar_datos(cliente, datos, actual)

    fecha = validados['fecha_vencimiento'] if 'fecha_vencimiento' in datos else parsear_dia(actual.get('fecha_vencimiento'))
    estado = validados['estado'] or actual.get('estado')

    # Una tarea vencida cuya nueva fecha ya no está en el pasado vuelve a pendiente;
    # con fecha pasada conserva su estado hasta la próxima lectura
    if actual.get('estado') == VENCIDA and estado == VENCIDA and fecha is not None and not esta_vencida(fecha, hoy):
        estado = PENDIENTE

    datos_actualizacion = {
        'nombre': validados['nombre'],
        'descripcion': validados['descripcion'],
        'responsable_id': validados['responsable_id'],
        'fecha_vencimiento': fecha.isoformat() if fecha else None,
        'estado': estado,
    }
    actualizada = ejecutar(
        cliente.table('tareas').update(datos_actualizacion).eq('id', tarea_id),
        'Error al actualizar la tarea'
    )
    if not actualizada:
        raise ErrorNoEncontrado('Tarea no encontrada')
    return actualizada[0]


def eliminar_tarea(cliente, tarea_id):
    """Elimina la tarea y devuelve el id de su encuesta."""
    tarea = _obtener_tarea(cliente, tarea_id)
    ejecutar(cliente.table('tareas').delete().eq('id', tarea_id), 'Error al eliminar la tarea')
    logger.info('Tarea %s eliminada', tarea_id)
    return tarea['encuesta_id']


def barrer_vencidas(cliente, hoy):
    """Marca de una vez todas las tareas pendientes con fecha pasada."""
    actualizadas = ejecutar(
        cliente.table('tareas')
        .update({'estado': VENCIDA})
        .eq('estado', PENDIENTE)
        .lt('fecha_vencimiento', hoy.isoformat()),
        'Error al actualizar las tareas vencidas'
    )
    logger.info('%d tareas marcadas como vencidas', len(actualizadas))
    return len(actualizadas)
