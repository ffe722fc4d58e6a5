from flask import Blueprint, jsonify, session

from database import get_supabase
from routes import datos_json
from servicios.encuesta import PREGUNTAS, TOTAL_PASOS, FlujoEncuesta, registrar_encuesta

encuesta_bp = Blueprint('encuesta', __name__)

CLAVE_SESION = 'encuesta'


def _flujo():
    return FlujoEncuesta.desde_sesion(session.get(CLAVE_SESION))


def _guardar(flujo):
    session[CLAVE_SESION] = flujo.a_sesion()
    return jsonify(flujo.paso_actual()), 200


@encuesta_bp.route('/encuesta/preguntas', methods=['GET'])
def preguntas():
    return jsonify({'preguntas': PREGUNTAS, 'total_pasos': TOTAL_PASOS}), 200


@encuesta_bp.route('/encuesta', methods=['GET'])
def paso_actual():
    return jsonify(_flujo().paso_actual()), 200


@encuesta_bp.route('/encuesta/comenzar', methods=['POST'])
def comenzar():
    flujo = _flujo()
    flujo.comenzar()
    return _guardar(flujo)


@encuesta_bp.route('/encuesta/respuesta', methods=['POST'])
def responder():
    flujo = _flujo()
    flujo.responder(datos_json().get('valor'))
    return _guardar(flujo)


@encuesta_bp.route('/encuesta/siguiente', methods=['POST'])
def siguiente():
    flujo = _flujo()
    flujo.siguiente()
    return _guardar(flujo)


@encuesta_bp.route('/encuesta/anterior', methods=['POST'])
def anterior():
    flujo = _flujo()
    flujo.anterior()
    return _guardar(flujo)


@encuesta_bp.route('/encuesta/enviar', methods=['POST'])
def enviar():
    flujo = _flujo()
    flujo.enviar(get_supabase())
    return _guardar(flujo)


@encuesta_bp.route('/encuesta/reiniciar', methods=['POST'])
def reiniciar():
    session.pop(CLAVE_SESION, None)
    return jsonify(FlujoEncuesta().paso_actual()), 200


# Envío en una sola petición
@encuesta_bp.route('/encuestas', methods=['POST'])
def crear_encuesta():
    encuesta = registrar_encuesta(get_supabase(), datos_json())
    return jsonify({
        'mensaje': 'Encuesta enviada exitosamente',
        'encuesta': encuesta
    }), 201
