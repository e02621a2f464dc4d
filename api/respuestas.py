import logging

from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from domain.errors import (
    ConflictError, DomainError, ForbiddenError, InvalidTransitionError, NotFoundError, ValidationError,
)

logger = logging.getLogger(__name__)


def respuesta_exitosa(datos=None, mensaje='Operación exitosa', codigo=200):
    return jsonify({'exito': True, 'mensaje': mensaje, 'datos': datos}), codigo


def respuesta_error(mensaje='Error en la operación', codigo=500, detalles=None):
    cuerpo = {'exito': False, 'mensaje': mensaje}
    if detalles and current_app.config.get('DEBUG'):
        cuerpo['detalles'] = detalles
    return jsonify(cuerpo), codigo


def datos_json() -> dict:
    """Cuerpo JSON de la petición; un cuerpo ausente o inválido se trata como vacío."""
    return request.get_json(silent=True) or {}


def entero(valor, campo: str, requerido: bool = True):
    if valor is None or valor == '':
        if requerido:
            raise ValidationError(f"El campo {campo} es requerido")
        return None
    try:
        return int(valor)
    except (TypeError, ValueError):
        raise ValidationError(f"El campo {campo} debe ser un número entero")


def paginacion_args(por_defecto: int = None):
    """(pagina, limite, offset) a partir de ?pagina=&limite= (o ?offset=)."""
    por_defecto = por_defecto or current_app.config.get('PER_PAGE', 20)
    pagina = max(request.args.get('pagina', 1, type=int) or 1, 1)
    limite = min(max(request.args.get('limite', por_defecto, type=int) or por_defecto, 1), 100)
    offset = request.args.get('offset', type=int)
    if offset is None:
        offset = (pagina - 1) * limite
    return pagina, limite, max(offset, 0)


def registrar_manejadores(app):
    """Un manejador por variante de error de dominio; el resto es 500."""

    def _manejar(error: DomainError):
        logger.warning("action=request_rejected path=%s status=%s error=%s",
                       request.path, error.status_code, error.mensaje)
        return respuesta_error(error.mensaje, error.status_code)

    for clase in (ValidationError, ForbiddenError, NotFoundError, ConflictError,
                  InvalidTransitionError, DomainError):
        app.register_error_handler(clase, _manejar)

    @app.errorhandler(404)
    def no_encontrado(error):
        return respuesta_error('Recurso no encontrado', 404)

    @app.errorhandler(405)
    def metodo_no_permitido(error):
        return respuesta_error('Método no permitido', 405)

    @app.errorhandler(Exception)
    def error_interno(error):
        if isinstance(error, HTTPException):
            return respuesta_error(error.description, error.code)
        logger.exception("action=unhandled_error path=%s", request.path)
        return respuesta_error('Error interno del servidor', 500, detalles=str(error))
