import logging
from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from flask import current_app, jsonify, request

logger = logging.getLogger(__name__)


def crear_token(usuario_id, email):
    token_payload = {
        'usuario_id': usuario_id,
        'email': email,
        'exp': datetime.now(timezone.utc) + timedelta(hours=current_app.config['JWT_EXPIRACION_HORAS'])
    }
    return jwt.encode(token_payload, current_app.config['SECRET_KEY'], algorithm='HS256')


# Decorator para rutas protegidas
def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        token = request.headers.get('Authorization')

        if not token:
            return jsonify({'error': 'Token es requerido'}), 401

        # Remover 'Bearer ' del token si existe
        if token.startswith('Bearer '):
            token = token[7:]

        try:
            data = jwt.decode(token, current_app.config['SECRET_KEY'], algorithms=['HS256'])
        except jwt.ExpiredSignatureError:
            return jsonify({'error': 'Token ha expirado'}), 401
        except jwt.InvalidTokenError:
            return jsonify({'error': 'Token inválido'}), 401

        if not data.get('email'):
            return jsonify({'error': 'Token inválido'}), 401

        # Pasar el administrador actual a la función
        return f(data, *args, **kwargs)

    return decorated
