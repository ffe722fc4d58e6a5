"""
Encuesta de satisfacción de recepción.

El flujo es lineal: introducción, cinco preguntas de opción fija, un
comentario libre y la pantalla de agradecimiento. El estado del flujo vive
sólo en la sesión del visitante; si abandona la encuesta no se guarda nada.
"""
import logging

from database import ejecutar
from errores import ErrorValidacion

logger = logging.getLogger(__name__)

BANDEJA_DE_ENTRADA = 'Bandeja de Entrada'

INTRODUCCION = (
    'Hola, le saludamos del equipo de gestión de calidad del IMV Health Digestive, '
    'agradecemos que nos dedique unos minutos de su tiempo para responder la siguiente encuesta:'
)

PREGUNTAS = [
    {
        'clave': 'pregunta1_amabilidad',
        'texto': '¿Fue atendido(a) con amabilidad y respeto a su llegada?',
        'opciones': ['Sí', 'No'],
    },
    {
        'clave': 'pregunta2_tiempo_espera',
        'texto': '¿Cuánto tiempo esperó desde que llegó hasta que fue atendido en recepción?',
        'opciones': ['Menos de 5 minutos', 'Entre 5 y 10 minutos', 'Más de 10 minutos'],
    },
    {
        'clave': 'pregunta3_resolucion_dudas',
        'texto': '¿El personal de recepción logró resolver sus dudas de manera clara y certera?',
        'opciones': ['Sí', 'No', 'No tenía'],
    },
    {
        'clave': 'pregunta4_limpieza',
        'texto': '¿Cómo evaluaría la organización y limpieza del área de recepción?',
        'opciones': ['Excelente', 'Buena', 'Regular', 'Mala'],
    },
    {
        'clave': 'pregunta5_calificacion_general',
        'texto': '¿Cómo calificaría la atención del personal de recepción?',
        'opciones': ['Excelente', 'Buena', 'Regular', 'Mala'],
    },
]

TEXTO_COMENTARIO = 'Déjanos un comentario, sugerencia o felicitación para el personal de recepción 😊'

CLAVES_PREGUNTAS = [p['clave'] for p in PREGUNTAS]

# Pasos: 0 intro, 1..5 preguntas, 6 comentario, 7 agradecimiento
PASO_INTRO = 0
PASO_COMENTARIO = len(PREGUNTAS) + 1
PASO_GRACIAS = PASO_COMENTARIO + 1
TOTAL_PASOS = PASO_GRACIAS


def validar_respuestas(respuestas):
    for pregunta in PREGUNTAS:
        valor = str(respuestas.get(pregunta['clave']) or '').strip()
        if not valor:
            raise ErrorValidacion(f"La respuesta '{pregunta['clave']}' es requerida")
        if valor not in pregunta['opciones']:
            raise ErrorValidacion(f"Opción inválida para '{pregunta['clave']}': {valor}")


def registrar_encuesta(cliente, respuestas):
    """Inserta una encuesta completa y devuelve la fila creada.

    Sólo las encuestas con comentario entran al tablero, en la Bandeja de Entrada.
    """
    validar_respuestas(respuestas)
    comentario = str(respuestas.get('comentario') or '').strip()

    nueva_encuesta = {clave: str(respuestas[clave]).strip() for clave in CLAVES_PREGUNTAS}
    nueva_encuesta['comentario'] = comentario or None
    nueva_encuesta['estado_kanban'] = BANDEJA_DE_ENTRADA if comentario else None

    datos = ejecutar(
        cliente.table('encuestas').insert(nueva_encuesta),
        'Hubo un error al enviar la encuesta. Por favor, intente nuevamente.'
    )
    logger.info('Encuesta registrada (con comentario: %s)', bool(comentario))
    return datos[0] if datos else nueva_encuesta


class FlujoEncuesta:

    def __init__(self, paso=PASO_INTRO, respuestas=None):
        self.paso = paso
        self.respuestas = {clave: '' for clave in CLAVES_PREGUNTAS + ['comentario']}
        for clave, valor in (respuestas or {}).items():
            if clave in self.respuestas and isinstance(valor, str):
                self.respuestas[clave] = valor

    @classmethod
    def desde_sesion(cls, datos):
        if not datos:
            return cls()
        paso = datos.get('paso', PASO_INTRO)
        if not isinstance(paso, int) or not PASO_INTRO <= paso <= PASO_GRACIAS:
            return cls()
        return cls(paso, datos.get('respuestas'))

    def a_sesion(self):
        return {'paso': self.paso, 'respuestas': dict(self.respuestas)}

    def _pregunta(self):
        if 1 <= self.paso <= len(PREGUNTAS):
            return PREGUNTAS[self.paso - 1]
        return None

    def progreso(self):
        return round(min(self.paso + 1, TOTAL_PASOS) / TOTAL_PASOS * 100)

    def puede_avanzar(self):
        if self.paso in (PASO_INTRO, PASO_COMENTARIO):
            return True
        pregunta = self._pregunta()
        if pregunta is None:
            return False
        return self.respuestas[pregunta['clave']] != ''

    def puede_retroceder(self):
        # Desde la primera pregunta no se regresa a la introducción
        return 1 < self.paso <= PASO_COMENTARIO

    def comenzar(self):
        if self.paso != PASO_INTRO:
            raise ErrorValidacion('La encuesta ya fue iniciada')
        self.paso = 1

    def responder(self, valor):
        valor = '' if valor is None else str(valor)
        if self.paso == PASO_COMENTARIO:
            self.respuestas['comentario'] = valor
            return
        pregunta = self._pregunta()
        if pregunta is None:
            raise ErrorValidacion('Este paso no admite respuesta')
        if valor not in pregunta['opciones']:
            raise ErrorValidacion(f'Opción inválida: {valor}')
        self.respuestas[pregunta['clave']] = valor

    def siguiente(self):
        if self.paso >= PASO_COMENTARIO:
            raise ErrorValidacion('No hay más preguntas; envíe la encuesta')
        if not self.puede_avanzar():
            raise ErrorValidacion('Seleccione una opción para continuar')
        self.paso += 1

    def anterior(self):
        if not self.puede_retroceder():
            raise ErrorValidacion('No es posible regresar desde este paso')
        self.paso -= 1

    def enviar(self, cliente):
        if self.paso != PASO_COMENTARIO:
            raise ErrorValidacion('La encuesta sólo puede enviarse desde el último paso')
        fila = registrar_encuesta(cliente, self.respuestas)
        self.paso = PASO_GRACIAS
        return fila

    def reiniciar(self):
        self.paso = PASO_INTRO
        self.respuestas = {clave: '' for clave in self.respuestas}

    def paso_actual(self):
        vista = {
            'paso': self.paso,
            'total_pasos': TOTAL_PASOS,
            'progreso': self.progreso(),
            'puede_avanzar': self.puede_avanzar(),
            'puede_retroceder': self.puede_retroceder(),
        }
        if self.paso == PASO_INTRO:
            vista.update(tipo='intro', texto=INTRODUCCION)
        elif self.paso == PASO_COMENTARIO:
            vista.update(tipo='comentario', texto=TEXTO_COMENTARIO, respuesta=self.respuestas['comentario'])
        elif self.paso == PASO_GRACIAS:
            vista.update(
                tipo='gracias',
                texto='¡Gracias! Su opinión es muy importante para nosotros y nos ayuda a mejorar continuamente nuestros servicios.'
            )
        else:
            pregunta = self._pregunta()
            vista.update(
                tipo='opcion',
                clave=pregunta['clave'],
                texto=pregunta['texto'],
                opciones=pregunta['opciones'],
                respuesta=self.respuestas[pregunta['clave']],
            )
        return vista
