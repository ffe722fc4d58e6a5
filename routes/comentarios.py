from flask import Blueprint, jsonify

from autenticacion import token_required
from database import get_supabase
from routes import datos_json, hoy_local
from servicios.comentarios import guardar_cambios, obtener_detalle

comentarios_bp = Blueprint('comentarios', __name__, url_prefix='/admin')


@comentarios_bp.route('/encuestas/<encuesta_id>', methods=['GET'])
@token_required
def detalle(admin, encuesta_id):
    return jsonify(obtener_detalle(get_supabase(), encuesta_id, hoy_local())), 200


@comentarios_bp.route('/encuestas/<encuesta_id>', methods=['PUT'])
@token_required
def guardar(admin, encuesta_id):
    encuesta = guardar_cambios(get_supabase(), encuesta_id, datos_json())
    return jsonify({
        'mensaje': 'Cambios guardados exitosamente',
        'encuesta': encuesta
    }), 200
