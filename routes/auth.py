import logging

import httpx
from flask import Blueprint, jsonify
from supabase import AuthApiError, AuthError

from autenticacion import crear_token, token_required
from database import cliente_auth
from errores import ErrorServicio
from routes import datos_json

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/admin')


@auth_bp.route('/login', methods=['POST'])
def login():
    datos = datos_json()
    email = datos.get('email')
    contrasena = datos.get('contrasena')

    # Validar datos requeridos
    if not email or not contrasena:
        return jsonify({'error': 'Email y contraseña son requeridos'}), 400
    if not isinstance(email, str) or not isinstance(contrasena, str):
        return jsonify({'error': 'Email y contraseña deben ser texto'}), 400

    email = email.strip().lower()

    try:
        respuesta = cliente_auth().auth.sign_in_with_password({
            'email': email,
            'password': contrasena
        })
    except AuthApiError as e:
        if e.status and e.status >= 500:
            raise ErrorServicio('El servicio de autenticación no está disponible') from e
        logger.warning('Inicio de sesión rechazado para %s: %s', email, e)
        return jsonify({'error': 'Credenciales incorrectas'}), 401
    except (AuthError, httpx.HTTPError) as e:
        # Fallas de red y errores reintentables de Supabase Auth
        raise ErrorServicio('El servicio de autenticación no está disponible') from e

    if not respuesta.session or not respuesta.user:
        return jsonify({'error': 'Credenciales incorrectas'}), 401

    usuario = respuesta.user
    token = crear_token(usuario.id, usuario.email)
    logger.info('Sesión iniciada: %s', usuario.email)

    return jsonify({
        'mensaje': 'Bienvenido al panel de administración',
        'token': token,
        'usuario': {
            'id': usuario.id,
            'email': usuario.email
        }
    }), 200


@auth_bp.route('/sesion', methods=['GET'])
@token_required
def sesion(admin):
    return jsonify({
        'usuario': {
            'id': admin['usuario_id'],
            'email': admin['email']
        },
        'expira': admin['exp']
    }), 200


@auth_bp.route('/logout', methods=['POST'])
@token_required
def logout(admin):
    # El token no se guarda en el servidor; el cliente debe descartarlo
    logger.info('Sesión cerrada: %s', admin['email'])
    return jsonify({'mensaje': 'Sesión cerrada'}), 200
