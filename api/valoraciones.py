from flask import Blueprint, current_app, session

from api.auth import rol_requerido, socio_actual
from api.contexto import servicio
from api.respuestas import datos_json, entero, respuesta_exitosa
from application.services.rating_service import RatingService

valoraciones_bp = Blueprint('valoraciones', __name__, url_prefix='/api/valoraciones')


@valoraciones_bp.route('', methods=['POST'])
@rol_requerido('CLIENTE')
def crear():
    datos = datos_json()
    valoracion = servicio(RatingService).create(
        entero(datos.get('reclamo_id'), 'reclamo_id'),
        socio_actual(),
        datos.get('calificacion'),
        datos.get('comentario')
    )
    return respuesta_exitosa(valoracion, 'Valoración registrada exitosamente', 201)


@valoraciones_bp.route('/reclamo/<int:reclamo_id>', methods=['GET'])
@rol_requerido('CLIENTE', 'ADMIN')
def por_reclamo(reclamo_id):
    socio_id = socio_actual() if session.get('rol') == 'CLIENTE' else None
    valoracion = servicio(RatingService).get_by_claim(reclamo_id, socio_id=socio_id)
    mensaje = 'Valoración obtenida' if valoracion else 'El reclamo aún no tiene valoración'
    return respuesta_exitosa(valoracion, mensaje)


@valoraciones_bp.route('/mis-valoraciones', methods=['GET'])
@rol_requerido('CLIENTE')
def mis_valoraciones():
    return respuesta_exitosa(servicio(RatingService).list_by_member(socio_actual()), 'Valoraciones obtenidas')


@valoraciones_bp.route('/<int:valoracion_id>', methods=['PUT'])
@rol_requerido('CLIENTE')
def actualizar(valoracion_id):
    datos = datos_json()
    valoracion = servicio(RatingService).update(
        valoracion_id, socio_actual(), datos.get('calificacion'), datos.get('comentario'))
    return respuesta_exitosa(valoracion, 'Valoración actualizada')


@valoraciones_bp.route('/<int:valoracion_id>', methods=['DELETE'])
@rol_requerido('CLIENTE')
def eliminar(valoracion_id):
    servicio(RatingService).delete(valoracion_id, socio_actual())
    return respuesta_exitosa(None, 'Valoración eliminada')


@valoraciones_bp.route('/estadisticas', methods=['GET'])
@rol_requerido('ADMIN')
def estadisticas():
    return respuesta_exitosa(servicio(RatingService).statistics(), 'Estadísticas obtenidas')


@valoraciones_bp.route('/recientes', methods=['GET'])
@rol_requerido('ADMIN')
def recientes():
    limite = current_app.config.get('LIMITE_VALORACIONES_RECIENTES', 10)
    return respuesta_exitosa(servicio(RatingService).recent(limite), 'Valoraciones recientes obtenidas')
