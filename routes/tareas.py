from flask import Blueprint, jsonify

from autenticacion import token_required
from database import get_supabase
from routes import datos_json, hoy_local
from servicios.tareas import actualizar_tarea, crear_tarea, eliminar_tarea, listar_tareas, resumen_tarea

tareas_bp = Blueprint('tareas', __name__, url_prefix='/admin')


def _respuesta(mensaje, encuesta_id, codigo=200, **extra):
    # La vista de detalle recarga sus tareas y el tablero refresca el resumen de la tarjeta
    cliente = get_supabase()
    hoy = hoy_local()
    cuerpo = {
        'mensaje': mensaje,
        'tareas': listar_tareas(cliente, encuesta_id, hoy),
        'resumen_tarea': resumen_tarea(cliente, encuesta_id, hoy)
    }
    cuerpo.update(extra)
    return jsonify(cuerpo), codigo


@tareas_bp.route('/encuestas/<encuesta_id>/tareas', methods=['GET'])
@token_required
def listar(admin, encuesta_id):
    return jsonify({'tareas': listar_tareas(get_supabase(), encuesta_id, hoy_local())}), 200


@tareas_bp.route('/encuestas/<encuesta_id>/tareas', methods=['POST'])
@token_required
def crear(admin, encuesta_id):
    tarea = crear_tarea(get_supabase(), encuesta_id, datos_json())
    return _respuesta('Tarea creada exitosamente', encuesta_id, 201, tarea=tarea)


@tareas_bp.route('/tareas/<tarea_id>', methods=['PUT'])
@token_required
def actualizar(admin, tarea_id):
    tarea = actualizar_tarea(get_supabase(), tarea_id, datos_json(), hoy_local())
    return _respuesta('Tarea actualizada', tarea['encuesta_id'], tarea=tarea)


@tareas_bp.route('/tareas/<tarea_id>', methods=['DELETE'])
@token_required
def eliminar(admin, tarea_id):
    encuesta_id = eliminar_tarea(get_supabase(), tarea_id)
    return _respuesta('Tarea eliminada', encuesta_id)
