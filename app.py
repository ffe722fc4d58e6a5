import logging
from datetime import datetime, timezone

import click
from flask import Flask, jsonify, request
from flask_cors import CORS

import database
from config import Config
from errores import registrar_manejadores
from routes.auth import auth_bp
from routes.comentarios import comentarios_bp
from routes.encuesta import encuesta_bp
from routes.estadisticas import estadisticas_bp
from routes.etiquetas import etiquetas_bp
from routes.responsables import responsables_bp
from routes.tablero import tablero_bp
from routes.tareas import tareas_bp
from servicios.fechas import hoy
from servicios.tareas import barrer_vencidas

logger = logging.getLogger(__name__)


def create_app(config=None, cliente=None, fabrica_auth=None):
    # Configuración de la aplicación
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)
    if not app.config.get('SECRET_KEY'):
        raise RuntimeError('JWT_SECRET_KEY es requerido para firmar tokens y sesiones')
    app.json.ensure_ascii = False

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    # Configuración de CORS; credenciales para la cookie de la encuesta
    CORS(app, resources={
        r"/*": {
            "origins": app.config['CORS_ORIGINS'],
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
            "supports_credentials": True
        }
    })

    # Configuración de Supabase
    database.init_app(app, cliente, fabrica_auth)

    # Encuesta pública
    app.register_blueprint(encuesta_bp)

    # Panel de administración
    app.register_blueprint(auth_bp)
    app.register_blueprint(tablero_bp)
    app.register_blueprint(comentarios_bp)
    app.register_blueprint(tareas_bp)
    app.register_blueprint(responsables_bp)
    app.register_blueprint(etiquetas_bp)
    app.register_blueprint(estadisticas_bp)

    registrar_manejadores(app)

    @app.before_request
    def registrar_peticion():
        logger.debug('%s %s', request.method, request.path)

    # Ruta de salud del servidor
    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({
            'status': 'ok',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'message': 'Servidor Flask funcionando correctamente'
        }), 200

    @app.cli.group()
    def tareas():
        """Mantenimiento de tareas de seguimiento."""

    @tareas.command('barrer-vencidas')
    def barrer_vencidas_command():
        """Marca como vencidas las tareas pendientes con fecha pasada."""
        total = barrer_vencidas(database.get_supabase(), hoy(app.config['ZONA_HORARIA']))
        click.echo(f'{total} tareas marcadas como vencidas')

    return app


if __name__ == '__main__':
    create_app().run(debug=True, host='0.0.0.0', port=5000)
