import calendar
import logging

from database import ejecutar
from errores import ErrorNoEncontrado, ErrorValidacion
from servicios import tareas
from servicios.encuesta import BANDEJA_DE_ENTRADA
from servicios.etiquetas import listar_etiquetas
from servicios.fechas import parsear_fecha

logger = logging.getLogger(__name__)

ESTADOS_KANBAN = [
    BANDEJA_DE_ENTRADA,
    'Felicitaciones y Reconocimientos 👍',
    'Sugerencias de Mejora 💡',
    'Áreas de Oportunidad (Quejas) ⚠️',
    'Archivado / Resuelto ✅',
]

TODAS = 'todas'
SIN_ETIQUETA = 'sin-etiqueta'

ORIGENES_MOVIMIENTO = ('arrastre', 'menu')


def obtener_encuestas(cliente, hoy):
    """Comentarios del tablero, del más reciente al más antiguo, con su primera tarea."""
    encuestas = ejecutar(
        cliente.table('encuestas')
        .select('*')
        .not_.is_('comentario', 'null')
        .order('fecha_creacion', desc=True),
        'Error al cargar los comentarios'
    )
    primeras = tareas.primeras_tareas(cliente, [e['id'] for e in encuestas], hoy)
    for encuesta in encuestas:
        encuesta['tarea'] = tareas.resumen(primeras.get(encuesta['id']))
    return encuestas


def filtrar_por_etiqueta(encuestas, etiqueta=TODAS):
    if not etiqueta or etiqueta == TODAS:
        return list(encuestas)
    if etiqueta == SIN_ETIQUETA:
        return [e for e in encuestas if not e.get('etiquetas')]
    return [e for e in encuestas if etiqueta in (e.get('etiquetas') or [])]


def filtrar_por_fecha(encuestas, anio=None, mes=None, dia=None, zona=None):
    """Filtra por año, mes y día de creación; cada nivel requiere el anterior."""
    if anio is None:
        return list(encuestas)

    filtradas = []
    for encuesta in encuestas:
        fecha = parsear_fecha(encuesta['fecha_creacion'], zona)
        if fecha.year != anio:
            continue
        if mes is not None:
            if fecha.month != mes:
                continue
            if dia is not None and fecha.day != dia:
                continue
        filtradas.append(encuesta)
    return filtradas


def filtrar(encuestas, etiqueta=TODAS, anio=None, mes=None, dia=None, zona=None):
    return filtrar_por_fecha(filtrar_por_etiqueta(encuestas, etiqueta), anio, mes, dia, zona)


def agrupar_por_estado(encuestas):
    columnas = {estado: [] for estado in ESTADOS_KANBAN}
    for encuesta in encuestas:
        estado = encuesta.get('estado_kanban')
        # Si el estado no es uno de las columnas, va a la Bandeja de Entrada
        if estado not in columnas:
            estado = BANDEJA_DE_ENTRADA
        columnas[estado].append(encuesta)
    return [{'estado': estado, 'total': len(items), 'encuestas': items} for estado, items in columnas.items()]


def anios_disponibles(encuestas, zona=None):
    return sorted({parsear_fecha(e['fecha_creacion'], zona).year for e in encuestas}, reverse=True)


def dias_del_mes(anio, mes):
    if anio is None or mes is None:
        return []
    return list(range(1, calendar.monthrange(anio, mes)[1] + 1))


def obtener_tablero(cliente, hoy, etiqueta=TODAS, anio=None, mes=None, dia=None, buscar_etiqueta=None, zona=None):
    # El mes sólo aplica con año y el día sólo con mes
    if anio is None:
        mes = None
    if mes is None:
        dia = None

    encuestas = obtener_encuestas(cliente, hoy)
    filtradas = filtrar(encuestas, etiqueta, anio, mes, dia, zona)

    return {
        'columnas': agrupar_por_estado(filtradas),
        'total': len(filtradas),
        'filtros': {'etiqueta': etiqueta or TODAS, 'anio': anio, 'mes': mes, 'dia': dia},
        'anios_disponibles': anios_disponibles(encuestas, zona),
        'dias_del_mes': dias_del_mes(anio, mes),
        'etiquetas': listar_etiquetas(cliente, buscar_etiqueta),
    }


def mover_encuesta(cliente, encuesta_id, nuevo_estado, origen='menu'):
    """Cambia la columna de un comentario y devuelve la fila confirmada por la base."""
    if nuevo_estado not in ESTADOS_KANBAN:
        raise ErrorValidacion(f'Estado inválido: {nuevo_estado}')
    if origen not in ORIGENES_MOVIMIENTO:
        raise ErrorValidacion(f'Origen inválido: {origen}')

    actualizada = ejecutar(
        cliente.table('encuestas').update({'estado_kanban': nuevo_estado}).eq('id', encuesta_id),
        'Error al mover el comentario'
    )
    if not actualizada:
        raise ErrorNoEncontrado('Comentario no encontrado')

    logger.info('Comentario %s movido a "%s" (%s)', encuesta_id, nuevo_estado, origen)
    return actualizada[0]
