from flask import Blueprint, current_app, request

from api.auth import empleado_actual, rol_requerido
from api.contexto import servicio
from api.respuestas import datos_json, entero, respuesta_exitosa
from application.services.itinerary_service import ItineraryService
from domain.errors import ValidationError

itinerario_bp = Blueprint('itinerario', __name__, url_prefix='/api/itinerario')


@itinerario_bp.route('/asignar-cuadrilla', methods=['POST'])
@rol_requerido('ADMIN')
def asignar_cuadrilla():
    datos = datos_json()
    if not datos.get('fecha_programada'):
        raise ValidationError("ot_id, cuadrilla_id y fecha_programada son requeridos")
    resultado = servicio(ItineraryService).assign_to_crew(
        entero(datos.get('ot_id'), 'ot_id'),
        entero(datos.get('cuadrilla_id'), 'cuadrilla_id'),
        datos['fecha_programada']
    )
    return respuesta_exitosa(resultado, f"OT asignada a cuadrilla {resultado['cuadrilla']}")


@itinerario_bp.route('/cuadrilla/<int:cuadrilla_id>', methods=['GET'])
@rol_requerido('ADMIN', 'OPERARIO')
def itinerario_cuadrilla(cuadrilla_id):
    ots = servicio(ItineraryService).list_crew_itinerary(cuadrilla_id, request.args.get('fecha'))
    return respuesta_exitosa(ots, 'Itinerario obtenido')


@itinerario_bp.route('/mi-itinerario', methods=['GET'])
@rol_requerido('OPERARIO')
def mi_itinerario():
    resultado = servicio(ItineraryService).my_itinerary(empleado_actual(), request.args.get('fecha'))
    return respuesta_exitosa(resultado, 'Itinerario obtenido')


@itinerario_bp.route('/fechas-disponibles', methods=['GET'])
@rol_requerido('OPERARIO')
def fechas_disponibles():
    return respuesta_exitosa(servicio(ItineraryService).available_dates(empleado_actual()),
                             'Fechas disponibles obtenidas')


@itinerario_bp.route('/tomar/<int:ot_id>', methods=['PUT'])
@rol_requerido('OPERARIO')
def tomar(ot_id):
    datos = datos_json()
    cuadrilla_id = entero(datos.get('cuadrilla_id'), 'cuadrilla_id', requerido=False)
    ot = servicio(ItineraryService).claim_from_itinerary(ot_id, empleado_actual(), cuadrilla_id)
    return respuesta_exitosa(ot, 'OT tomada exitosamente')


@itinerario_bp.route('/ots-pendientes', methods=['GET'])
@rol_requerido('ADMIN')
def ots_pendientes():
    ots = servicio(ItineraryService).list_unassigned(
        request.args.get('tipo_reclamo', 'TECNICO'),
        current_app.config.get('LIMITE_OTS_PENDIENTES', 100))
    return respuesta_exitosa(ots, 'OTs pendientes obtenidas')


@itinerario_bp.route('/quitar/<int:ot_id>', methods=['DELETE'])
@rol_requerido('ADMIN')
def quitar(ot_id):
    return respuesta_exitosa(servicio(ItineraryService).remove_from_itinerary(ot_id),
                             'OT quitada del itinerario')
