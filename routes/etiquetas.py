from flask import Blueprint, jsonify, request

from autenticacion import token_required
from database import get_supabase
from routes import datos_json
from servicios.etiquetas import contar_usos, crear_etiqueta, eliminar_etiqueta, listar_etiquetas

etiquetas_bp = Blueprint('etiquetas', __name__, url_prefix='/admin')


@etiquetas_bp.route('/etiquetas', methods=['GET'])
@token_required
def listar(admin):
    cliente = get_supabase()
    etiquetas = listar_etiquetas(cliente, request.args.get('buscar'))
    usos = contar_usos(cliente)
    return jsonify({
        'etiquetas': [dict(e, usos=usos.get(e['nombre'], 0)) for e in etiquetas]
    }), 200


@etiquetas_bp.route('/etiquetas', methods=['POST'])
@token_required
def crear(admin):
    etiqueta = crear_etiqueta(get_supabase(), datos_json().get('nombre'))
    return jsonify({
        'mensaje': 'Etiqueta creada exitosamente',
        'etiqueta': etiqueta
    }), 201


@etiquetas_bp.route('/etiquetas/<etiqueta_id>', methods=['DELETE'])
@token_required
def eliminar(admin, etiqueta_id):
    confirmar = request.args.get('confirmar', '').lower() in ('1', 'true', 'si', 'sí')
    resultado = eliminar_etiqueta(get_supabase(), etiqueta_id, confirmar=confirmar)
    resultado['mensaje'] = f'Etiqueta "{resultado["etiqueta"]}" eliminada exitosamente'
    return jsonify(resultado), 200
