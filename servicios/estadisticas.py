import calendar
from datetime import timedelta

from database import ejecutar
from errores import ErrorValidacion
from servicios.encuesta import CLAVES_PREGUNTAS, PREGUNTAS

PERIODOS = ('dia', 'semana', 'mes', 'anio')

TITULOS = {
    'pregunta1_amabilidad': 'Amabilidad y respeto',
    'pregunta2_tiempo_espera': 'Tiempo de espera',
    'pregunta3_resolucion_dudas': 'Resolución de dudas',
    'pregunta4_limpieza': 'Organización y limpieza',
    'pregunta5_calificacion_general': 'Calificación general',
}


def _restar_meses(fecha, meses):
    mes = fecha.month - 1 - meses
    anio = fecha.year + mes // 12
    mes = mes % 12 + 1
    dia = min(fecha.day, calendar.monthrange(anio, mes)[1])
    return fecha.replace(year=anio, month=mes, day=dia)


def inicio_periodo(periodo, ahora):
    if periodo == 'dia':
        return ahora.replace(hour=0, minute=0, second=0, microsecond=0)
    if periodo == 'semana':
        return ahora - timedelta(days=7)
    if periodo == 'mes':
        return _restar_meses(ahora, 1)
    if periodo == 'anio':
        return _restar_meses(ahora, 12)
    raise ErrorValidacion(f"Periodo inválido: {periodo}. Use uno de {', '.join(PERIODOS)}")


def contar_respuestas(respuestas, clave):
    conteos = {}
    for respuesta in respuestas:
        valor = respuesta.get(clave)
        conteos[valor] = conteos.get(valor, 0) + 1
    return conteos


def datos_grafica(respuestas, clave):
    total = len(respuestas)
    return [
        {'nombre': nombre, 'valor': valor, 'porcentaje': round(valor * 100 / total) if total else 0}
        for nombre, valor in contar_respuestas(respuestas, clave).items()
    ]


def obtener_estadisticas(cliente, periodo, ahora):
    inicio = inicio_periodo(periodo, ahora)
    respuestas = ejecutar(
        cliente.table('encuestas')
        .select(', '.join(CLAVES_PREGUNTAS + ['fecha_creacion']))
        .gte('fecha_creacion', inicio.isoformat()),
        'Error al cargar las estadísticas'
    )
    return {
        'periodo': periodo,
        'desde': inicio.isoformat(),
        'total_respuestas': len(respuestas),
        'preguntas': [
            {
                'clave': pregunta['clave'],
                'titulo': TITULOS[pregunta['clave']],
                'texto': pregunta['texto'],
                'datos': datos_grafica(respuestas, pregunta['clave']),
            }
            for pregunta in PREGUNTAS
        ],
    }
