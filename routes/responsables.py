from flask import Blueprint, jsonify

from autenticacion import token_required
from database import get_supabase
from routes import datos_json
from servicios.responsables import crear_responsable, listar_responsables

responsables_bp = Blueprint('responsables', __name__, url_prefix='/admin')


@responsables_bp.route('/responsables', methods=['GET'])
@token_required
def listar(admin):
    return jsonify({'responsables': listar_responsables(get_supabase())}), 200


@responsables_bp.route('/responsables', methods=['POST'])
@token_required
def crear(admin):
    responsable = crear_responsable(get_supabase(), datos_json())
    return jsonify({
        'mensaje': 'Responsable creado exitosamente',
        'responsable': responsable
    }), 201
