from flask import Blueprint, jsonify, request

from autenticacion import token_required
from database import get_supabase
from routes import ahora_local
from servicios.estadisticas import obtener_estadisticas

estadisticas_bp = Blueprint('estadisticas', __name__, url_prefix='/admin')


@estadisticas_bp.route('/estadisticas', methods=['GET'])
@token_required
def estadisticas(admin):
    periodo = request.args.get('periodo', 'mes')
    return jsonify(obtener_estadisticas(get_supabase(), periodo, ahora_local())), 200
