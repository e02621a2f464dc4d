from flask import Blueprint, request

from api.auth import empleado_actual, rol_requerido
from api.contexto import servicio
from api.respuestas import datos_json, paginacion_args, respuesta_exitosa
from application.services.claim_service import ClaimService
from domain.errors import ValidationError

operarios_bp = Blueprint('operarios', __name__, url_prefix='/api/operarios')


@operarios_bp.route('/reclamos', methods=['GET'])
@rol_requerido('OPERARIO')
def listar_reclamos():
    pagina, limite, _ = paginacion_args()
    resultado = servicio(ClaimService).list_by_operator(
        empleado_actual(), request.args.get('estado'), pagina, limite)
    return respuesta_exitosa(resultado, 'Reclamos obtenidos')


@operarios_bp.route('/dashboard', methods=['GET'])
@rol_requerido('OPERARIO')
def dashboard():
    resumen = servicio(ClaimService).summary_by_operator(empleado_actual())
    return respuesta_exitosa(resumen, 'Dashboard obtenido')


@operarios_bp.route('/reclamos/<int:reclamo_id>', methods=['GET'])
@rol_requerido('OPERARIO')
def detalle_reclamo(reclamo_id):
    reclamo = servicio(ClaimService).get_for_operator(reclamo_id, empleado_actual())
    return respuesta_exitosa(reclamo, 'Reclamo obtenido')


@operarios_bp.route('/reclamos/<int:reclamo_id>/estado', methods=['PATCH'])
@rol_requerido('OPERARIO')
def actualizar_estado(reclamo_id):
    datos = datos_json()
    if not datos.get('estado'):
        raise ValidationError("El estado es requerido")
    reclamo = servicio(ClaimService).transition(
        reclamo_id, datos['estado'], datos.get('observaciones'), empleado_id=empleado_actual())
    return respuesta_exitosa(reclamo, 'Estado del reclamo actualizado')
