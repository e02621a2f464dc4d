from flask import Blueprint, request, session

from api.auth import empleado_actual, rol_requerido
from api.contexto import servicio
from api.respuestas import datos_json, entero, paginacion_args, respuesta_exitosa
from application.services.work_order_service import WorkOrderService

ot_tecnicas_bp = Blueprint('ot_tecnicas', __name__, url_prefix='/api/ot-tecnicas')


@ot_tecnicas_bp.route('', methods=['GET'])
@rol_requerido('ADMIN', 'OPERARIO')
def listar():
    _, limite, offset = paginacion_args(50)
    if session.get('rol') == 'OPERARIO':
        # Un operario solo ve las OTs asignadas a él
        empleado_id = empleado_actual()
    else:
        empleado_id = entero(request.args.get('empleado_id'), 'empleado_id', requerido=False)
    cuadrilla_id = entero(request.args.get('cuadrilla_id'), 'cuadrilla_id', requerido=False)
    ots = servicio(WorkOrderService).list_technical(
        request.args.get('estado'), empleado_id, cuadrilla_id, limite, offset)
    return respuesta_exitosa(ots, 'OTs técnicas obtenidas')


@ot_tecnicas_bp.route('/<int:ot_id>', methods=['GET'])
@rol_requerido('ADMIN', 'OPERARIO')
def detalle(ot_id):
    empleado_id = empleado_actual() if session.get('rol') == 'OPERARIO' else None
    ot = servicio(WorkOrderService).get_technical_detail(ot_id, empleado_id)
    return respuesta_exitosa(ot, 'OT técnica obtenida')


@ot_tecnicas_bp.route('/<int:ot_id>/asignar', methods=['PUT'])
@rol_requerido('ADMIN')
def asignar(ot_id):
    datos = datos_json()
    ot = servicio(WorkOrderService).assign_operator(ot_id, entero(datos.get('empleado_id'), 'empleado_id'))
    return respuesta_exitosa(ot, 'Operario asignado a la OT')


@ot_tecnicas_bp.route('/<int:ot_id>/iniciar', methods=['PUT'])
@rol_requerido('OPERARIO')
def iniciar(ot_id):
    ot = servicio(WorkOrderService).start_work(ot_id, empleado_actual())
    return respuesta_exitosa(ot, 'Trabajo iniciado')


@ot_tecnicas_bp.route('/<int:ot_id>/completar', methods=['PUT'])
@rol_requerido('OPERARIO')
def completar(ot_id):
    datos = datos_json()
    ot = servicio(WorkOrderService).complete_work(ot_id, empleado_actual(), datos.get('observaciones'))
    return respuesta_exitosa(ot, 'Trabajo completado')


@ot_tecnicas_bp.route('/<int:ot_id>/cancelar', methods=['PUT'])
@rol_requerido('ADMIN')
def cancelar(ot_id):
    datos = datos_json()
    ot = servicio(WorkOrderService).cancel(ot_id, datos.get('motivo'))
    return respuesta_exitosa(ot, 'OT cancelada')
