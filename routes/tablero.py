from flask import Blueprint, jsonify, request

from autenticacion import token_required
from database import get_supabase
from routes import datos_json, hoy_local, parametro_entero, zona_local
from servicios.tablero import ESTADOS_KANBAN, TODAS, mover_encuesta, obtener_tablero

tablero_bp = Blueprint('tablero', __name__, url_prefix='/admin')


@tablero_bp.route('/tablero', methods=['GET'])
@token_required
def tablero(admin):
    anio = parametro_entero('anio', 1900, 9999)
    mes = parametro_entero('mes', 1, 12)
    dia = parametro_entero('dia', 1, 31)

    resultado = obtener_tablero(
        get_supabase(),
        hoy_local(),
        etiqueta=request.args.get('etiqueta', TODAS),
        anio=anio,
        mes=mes,
        dia=dia,
        buscar_etiqueta=request.args.get('buscar_etiqueta'),
        zona=zona_local()
    )
    return jsonify(resultado), 200


@tablero_bp.route('/tablero/estados', methods=['GET'])
@token_required
def estados(admin):
    return jsonify({'estados': ESTADOS_KANBAN}), 200


# Arrastrar una tarjeta y el menú "Mover a" usan la misma ruta
@tablero_bp.route('/encuestas/<encuesta_id>/estado', methods=['PUT'])
@token_required
def mover(admin, encuesta_id):
    datos = datos_json()

    if not datos.get('estado_kanban'):
        return jsonify({'error': 'estado_kanban es requerido'}), 400

    encuesta = mover_encuesta(
        get_supabase(),
        encuesta_id,
        datos['estado_kanban'],
        datos.get('origen', 'menu')
    )
    return jsonify({
        'mensaje': 'Comentario movido exitosamente',
        'encuesta': encuesta
    }), 200
