from flask import Blueprint, request

from api.auth import rol_requerido, socio_actual
from api.contexto import servicio
from api.respuestas import datos_json, entero, paginacion_args, respuesta_exitosa
from application.services.claim_service import ClaimService
from application.services.invoice_service import InvoiceService

clientes_bp = Blueprint('clientes', __name__, url_prefix='/api/clientes')


# --- Reclamos ---
@clientes_bp.route('/reclamos', methods=['GET'])
@rol_requerido('CLIENTE')
def listar_reclamos():
    socio_id = socio_actual()
    cuenta_id = entero(request.args.get('cuenta_id'), 'cuenta_id', requerido=False)
    if cuenta_id is not None:
        reclamos = servicio(ClaimService).list_by_account(cuenta_id, socio_id=socio_id)
    else:
        _, limite, offset = paginacion_args()
        reclamos = servicio(ClaimService).list_by_member(socio_id, request.args.get('estado'), limite, offset)
    return respuesta_exitosa(reclamos, 'Reclamos obtenidos')


@clientes_bp.route('/reclamos/<int:reclamo_id>', methods=['GET'])
@rol_requerido('CLIENTE')
def detalle_reclamo(reclamo_id):
    reclamo = servicio(ClaimService).get_claim(reclamo_id, socio_id=socio_actual())
    return respuesta_exitosa(reclamo, 'Reclamo obtenido')


@clientes_bp.route('/reclamos', methods=['POST'])
@rol_requerido('CLIENTE')
def crear_reclamo():
    socio_id = socio_actual()
    datos = datos_json()
    resultado = servicio(ClaimService).create_claim(
        socio_id,
        entero(datos.get('cuenta_id'), 'cuenta_id'),
        entero(datos.get('detalle_id'), 'detalle_id'),
        datos.get('descripcion'),
        prioridad_id=entero(datos.get('prioridad_id'), 'prioridad_id', requerido=False),
        canal=datos.get('canal') or 'WEB'
    )
    return respuesta_exitosa(resultado, 'Reclamo creado exitosamente', 201)


@clientes_bp.route('/resumen', methods=['GET'])
@rol_requerido('CLIENTE')
def resumen():
    socio_id = socio_actual()
    return respuesta_exitosa({
        'reclamos': servicio(ClaimService).summary_by_member(socio_id),
        'facturas': servicio(InvoiceService).summary_by_member(socio_id)
    }, 'Resumen obtenido')


# --- Facturas ---
@clientes_bp.route('/facturas', methods=['GET'])
@rol_requerido('CLIENTE')
def listar_facturas():
    _, limite, offset = paginacion_args(10)
    facturas = servicio(InvoiceService).list_by_member(socio_actual(), request.args.get('estado'), limite, offset)
    return respuesta_exitosa(facturas, 'Facturas obtenidas')


@clientes_bp.route('/facturas/<int:factura_id>', methods=['GET'])
@rol_requerido('CLIENTE')
def detalle_factura(factura_id):
    factura = servicio(InvoiceService).get_for_member(factura_id, socio_actual())
    return respuesta_exitosa(factura, 'Factura obtenida')


@clientes_bp.route('/facturas/<int:factura_id>/pagar', methods=['POST'])
@rol_requerido('CLIENTE')
def pagar_factura(factura_id):
    datos = datos_json()
    factura = servicio(InvoiceService).register_payment(
        factura_id,
        socio_actual(),
        datos.get('monto'),
        metodo_pago=datos.get('metodo_pago') or 'TARJETA',
        comprobante=datos.get('comprobante')
    )
    return respuesta_exitosa(factura, 'Pago registrado exitosamente')
