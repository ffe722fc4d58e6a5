import logging

from flask import jsonify

logger = logging.getLogger(__name__)


class ErrorAplicacion(Exception):
    """Error con mensaje para el cliente y código HTTP asociado."""
    codigo = 500

    def __init__(self, mensaje, **detalles):
        super().__init__(mensaje)
        self.mensaje = mensaje
        self.detalles = detalles


class ErrorValidacion(ErrorAplicacion):
    codigo = 400


class ErrorSesion(ErrorAplicacion):
    codigo = 401


class ErrorNoEncontrado(ErrorAplicacion):
    codigo = 404


class ErrorConfirmacion(ErrorAplicacion):
    codigo = 409


class ErrorServicio(ErrorAplicacion):
    """Falla de Supabase (red, PostgREST o Auth)."""
    codigo = 502


def registrar_manejadores(app):

    @app.errorhandler(ErrorAplicacion)
    def error_aplicacion(error):
        if isinstance(error, ErrorServicio):
            logger.error('Error del servicio de datos: %s', error.__cause__ or error.mensaje)
        cuerpo = {'error': error.mensaje}
        cuerpo.update(error.detalles)
        return jsonify(cuerpo), error.codigo

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Ruta no encontrada'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Método no permitido'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error('Error interno del servidor: %s', getattr(error, 'original_exception', error))
        return jsonify({'error': 'Error interno del servidor'}), 500
