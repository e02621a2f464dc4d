from datetime import datetime

from flask import Blueprint, Response, request

from api.auth import rol_requerido
from api.contexto import servicio
from api.respuestas import datos_json, entero, paginacion_args, respuesta_exitosa
from application.services.claim_service import ClaimService
from application.services.metrics_service import MetricsService
from application.services.work_order_service import WorkOrderService

administradores_bp = Blueprint('administradores', __name__, url_prefix='/api/administradores')


# --- Dashboard y reclamos ---
@administradores_bp.route('/dashboard', methods=['GET'])
@rol_requerido('ADMIN')
def dashboard():
    return respuesta_exitosa({
        'reclamos': servicio(ClaimService).summary_global(),
        'ots_administrativas': servicio(WorkOrderService).count_administrative()
    }, 'Dashboard obtenido')


@administradores_bp.route('/reclamos', methods=['GET'])
@rol_requerido('ADMIN')
def listar_reclamos():
    pagina, limite, _ = paginacion_args()
    resultado = servicio(ClaimService).list_all(
        estado=request.args.get('estado'),
        prioridad_id=entero(request.args.get('prioridad_id'), 'prioridad_id', requerido=False),
        tipo=request.args.get('tipo'),
        busqueda=request.args.get('busqueda'),
        pagina=pagina,
        limite=limite
    )
    return respuesta_exitosa(resultado, 'Reclamos obtenidos')


@administradores_bp.route('/reclamos/<int:reclamo_id>', methods=['GET'])
@rol_requerido('ADMIN')
def detalle_reclamo(reclamo_id):
    return respuesta_exitosa(servicio(ClaimService).get_claim(reclamo_id), 'Reclamo obtenido')


@administradores_bp.route('/reclamos/<int:reclamo_id>/asignar', methods=['PATCH'])
@rol_requerido('ADMIN')
def asignar_operario(reclamo_id):
    datos = datos_json()
    reclamo = servicio(ClaimService).assign_operator(reclamo_id, entero(datos.get('operario_id'), 'operario_id'))
    return respuesta_exitosa(reclamo, 'Operario asignado al reclamo')


# --- OTs administrativas ---
@administradores_bp.route('/ots/administrativas', methods=['GET'])
@rol_requerido('ADMIN')
def listar_ots_administrativas():
    _, limite, offset = paginacion_args(50)
    ots = servicio(WorkOrderService).list_administrative(request.args.get('estado'), limite, offset)
    return respuesta_exitosa(ots, 'OTs administrativas obtenidas')


@administradores_bp.route('/ots/administrativas/resumen', methods=['GET'])
@rol_requerido('ADMIN')
def resumen_ots_administrativas():
    return respuesta_exitosa(servicio(WorkOrderService).count_administrative(), 'Resumen obtenido')


@administradores_bp.route('/ots/administrativas/<int:ot_id>', methods=['GET'])
@rol_requerido('ADMIN')
def detalle_ot_administrativa(ot_id):
    return respuesta_exitosa(servicio(WorkOrderService).get_administrative(ot_id), 'OT administrativa obtenida')


@administradores_bp.route('/ots/administrativas/<int:ot_id>/en-proceso', methods=['PATCH'])
@rol_requerido('ADMIN')
def ot_administrativa_en_proceso(ot_id):
    datos = datos_json()
    ot = servicio(WorkOrderService).mark_in_progress(ot_id, datos.get('observaciones'))
    return respuesta_exitosa(ot, 'OT marcada en proceso')


@administradores_bp.route('/ots/administrativas/<int:ot_id>/cerrar', methods=['PATCH'])
@rol_requerido('ADMIN')
def cerrar_ot_administrativa(ot_id):
    datos = datos_json()
    ot = servicio(WorkOrderService).close_administrative(ot_id, datos.get('observaciones'))
    return respuesta_exitosa(ot, 'OT cerrada y reclamo resuelto')


# --- Métricas y reportes ---
@administradores_bp.route('/metricas', methods=['GET'])
@rol_requerido('ADMIN')
def metricas():
    periodo = request.args.get('periodo', 'mes_actual')
    return respuesta_exitosa(servicio(MetricsService).advanced_metrics(periodo), 'Métricas calculadas')


@administradores_bp.route('/operarios/estado', methods=['GET'])
@rol_requerido('ADMIN')
def estado_operarios():
    return respuesta_exitosa(servicio(MetricsService).operators_status(), 'Estado de operarios obtenido')


@administradores_bp.route('/reportes/reclamos.csv', methods=['GET'])
@rol_requerido('ADMIN')
def reporte_reclamos():
    csv = servicio(MetricsService).export_claims_csv(request.args.get('estado'))
    nombre = f"reporte_reclamos_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
    return Response(
        csv,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={nombre}'}
    )
