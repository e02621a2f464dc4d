from flask import Blueprint

from api.auth import rol_requerido
from api.contexto import servicio
from api.respuestas import respuesta_exitosa
from application.services.crew_service import CrewService

cuadrillas_bp = Blueprint('cuadrillas', __name__, url_prefix='/api/cuadrillas')


@cuadrillas_bp.route('', methods=['GET'])
@rol_requerido('ADMIN', 'OPERARIO')
def listar():
    return respuesta_exitosa(servicio(CrewService).list_active(), 'Cuadrillas obtenidas')


@cuadrillas_bp.route('/operarios/disponibles', methods=['GET'])
@rol_requerido('ADMIN', 'OPERARIO')
def operarios_disponibles():
    return respuesta_exitosa(servicio(CrewService).list_available_operators(), 'Operarios disponibles obtenidos')


@cuadrillas_bp.route('/operario/<int:empleado_id>/cuadrilla', methods=['GET'])
@rol_requerido('ADMIN', 'OPERARIO')
def cuadrilla_de_operario(empleado_id):
    return respuesta_exitosa(servicio(CrewService).crew_of_operator(empleado_id), 'Cuadrilla obtenida')


@cuadrillas_bp.route('/<int:cuadrilla_id>', methods=['GET'])
@rol_requerido('ADMIN', 'OPERARIO')
def detalle(cuadrilla_id):
    return respuesta_exitosa(servicio(CrewService).get_crew(cuadrilla_id), 'Cuadrilla obtenida')


@cuadrillas_bp.route('/<int:cuadrilla_id>/operarios', methods=['GET'])
@rol_requerido('ADMIN', 'OPERARIO')
def operarios(cuadrilla_id):
    return respuesta_exitosa(servicio(CrewService).list_operators(cuadrilla_id), 'Operarios de la cuadrilla obtenidos')


@cuadrillas_bp.route('/<int:cuadrilla_id>/estadisticas', methods=['GET'])
@rol_requerido('ADMIN')
def estadisticas(cuadrilla_id):
    return respuesta_exitosa(servicio(CrewService).statistics(cuadrilla_id), 'Estadísticas obtenidas')
