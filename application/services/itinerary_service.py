import logging
from datetime import datetime
from typing import List, Optional

from application.services.claim_service import sync_claim_status
from domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from domain.models import ClaimStatus, ClaimType, WorkOrderStatus
from infrastructure.persistence.catalog_repository import StaffRepository
from infrastructure.persistence.claim_repository import ClaimRepository
from infrastructure.persistence.database import Database, now_str, today_str
from infrastructure.persistence.itinerary_repository import ItineraryRepository
from infrastructure.persistence.work_order_repository import WorkOrderRepository

logger = logging.getLogger(__name__)


def _parse_fecha(fecha) -> str:
    try:
        return datetime.strptime(str(fecha), "%Y-%m-%d").strftime("%Y-%m-%d")
    except (TypeError, ValueError):
        raise ValidationError("Fecha inválida, se espera el formato AAAA-MM-DD")


class ItineraryService:
    """Itinerarios de cuadrilla: OTs técnicas pendientes agendadas para una cuadrilla y fecha,
    que luego toma un operario de esa cuadrilla."""

    def __init__(self, db: Database):
        self.db = db

    def assign_to_crew(self, ot_id: int, cuadrilla_id: int, fecha) -> dict:
        fecha = _parse_fecha(fecha)
        with self.db.transaction() as conn:
            staff = StaffRepository(conn)
            cuadrilla = staff.get_crew(cuadrilla_id)
            if cuadrilla is None or not cuadrilla.activa:
                raise NotFoundError("Cuadrilla no encontrada")
            if staff.count_active_operators(cuadrilla_id) == 0:
                raise ValidationError("La cuadrilla no tiene operarios activos asignados")

            work_orders = WorkOrderRepository(conn)
            tipo = work_orders.get_claim_type(ot_id)
            if tipo is None:
                raise NotFoundError("OT no encontrada")
            if tipo != ClaimType.TECNICO.value:
                raise ValidationError("Solo las OTs técnicas pueden agregarse a un itinerario")

            itinerarios = ItineraryRepository(conn)
            anterior = itinerarios.find_entry(ot_id)
            if anterior:
                itinerarios.remove_order(ot_id)

            ok = work_orders.guarded_update(
                ot_id, {'fecha_programada': fecha},
                estados=[WorkOrderStatus.PENDIENTE], sin_empleado=True,
                nota=f"[ITINERARIO] Asignada a cuadrilla: {cuadrilla.nombre} - Fecha: {fecha}")
            if not ok:
                logger.warning("action=itinerary_assign rejected ot_id=%s cuadrilla_id=%s", ot_id, cuadrilla_id)
                raise ConflictError("Solo se pueden agregar al itinerario OTs pendientes sin operario asignado")

            itinerario_id = itinerarios.get_or_create(cuadrilla_id, fecha)
            orden = itinerarios.add_order(itinerario_id, ot_id)

        logger.info("action=itinerary_assign ot_id=%s cuadrilla_id=%s fecha=%s orden=%s",
                    ot_id, cuadrilla_id, fecha, orden)
        return {
            'ot_id': ot_id,
            'itinerario_id': itinerario_id,
            'cuadrilla_id': cuadrilla_id,
            'cuadrilla': cuadrilla.nombre,
            'fecha': fecha,
            'orden': orden
        }

    def list_crew_itinerary(self, cuadrilla_id: int, fecha=None) -> List[dict]:
        if fecha:
            fecha = _parse_fecha(fecha)
        with self.db.connection() as conn:
            if StaffRepository(conn).get_crew(cuadrilla_id) is None:
                raise NotFoundError("Cuadrilla no encontrada")
            return ItineraryRepository(conn).list_for_crew(cuadrilla_id, fecha)

    def claim_from_itinerary(self, ot_id: int, empleado_id: int, cuadrilla_id: Optional[int] = None) -> dict:
        """El operario toma una OT libre del itinerario de su cuadrilla (PENDIENTE → ASIGNADA)."""
        with self.db.transaction() as conn:
            staff = StaffRepository(conn)
            empleado = staff.get_employee(empleado_id)
            if empleado is None or not empleado.activo:
                raise NotFoundError("Empleado no encontrado o inactivo")
            if cuadrilla_id is None:
                cuadrilla = staff.get_active_crew_of(empleado_id)
                if cuadrilla is None:
                    raise ForbiddenError("No perteneces a ninguna cuadrilla activa")
                cuadrilla_id = cuadrilla['cuadrilla_id']
            elif not staff.is_active_member(empleado_id, cuadrilla_id):
                raise ForbiddenError("No perteneces a esta cuadrilla")

            nota = f"Tomada por: {empleado.nombre_completo} - {now_str()}"
            if not ItineraryRepository(conn).take_order(ot_id, empleado_id, cuadrilla_id, nota):
                logger.warning("action=itinerary_take rejected ot_id=%s empleado_id=%s", ot_id, empleado_id)
                raise ConflictError("OT no disponible, ya fue tomada por otro operario o no pertenece a tu cuadrilla")

            ot = WorkOrderRepository(conn).get_by_id(ot_id)
            sync_claim_status(ClaimRepository(conn), ot.reclamo_id, ClaimStatus.EN_PROCESO)
            detalle = WorkOrderRepository(conn).get_technical_detail(ot_id)

        logger.info("action=itinerary_take ot_id=%s empleado_id=%s cuadrilla_id=%s", ot_id, empleado_id, cuadrilla_id)
        return detalle

    def list_unassigned(self, tipo: str = 'TECNICO', limite: int = 100) -> List[dict]:
        tipo = (tipo or 'TECNICO').strip().upper()
        if tipo not in {t.value for t in ClaimType}:
            raise ValidationError(f"Tipo de reclamo inválido: {tipo}")
        with self.db.connection() as conn:
            return ItineraryRepository(conn).list_unassigned(tipo, limite)

    def remove_from_itinerary(self, ot_id: int) -> dict:
        with self.db.transaction() as conn:
            itinerarios = ItineraryRepository(conn)
            entrada = itinerarios.find_entry(ot_id)
            if entrada is None:
                raise NotFoundError("La OT no está en ningún itinerario")
            ok = WorkOrderRepository(conn).guarded_update(
                ot_id, {'fecha_programada': None},
                estados=[WorkOrderStatus.PENDIENTE], sin_empleado=True)
            if not ok:
                logger.warning("action=itinerary_remove rejected ot_id=%s", ot_id)
                raise ConflictError("No se puede quitar del itinerario. OT ya fue tomada por un operario.")
            itinerarios.remove_order(ot_id)

        logger.info("action=itinerary_remove ot_id=%s cuadrilla_id=%s fecha=%s",
                    ot_id, entrada['cuadrilla_id'], entrada['fecha'])
        return {'ot_id': ot_id, 'cuadrilla_id': entrada['cuadrilla_id'], 'fecha': entrada['fecha']}

    def my_itinerary(self, empleado_id: int, fecha=None) -> dict:
        fecha = _parse_fecha(fecha) if fecha else today_str()
        with self.db.connection() as conn:
            cuadrilla = StaffRepository(conn).get_active_crew_of(empleado_id)
            if cuadrilla is None:
                raise ForbiddenError("No perteneces a ninguna cuadrilla activa")
            ots = ItineraryRepository(conn).list_for_crew(cuadrilla['cuadrilla_id'], fecha)
        return {'cuadrilla': cuadrilla, 'fecha': fecha, 'ots': ots}

    def available_dates(self, empleado_id: int) -> dict:
        with self.db.connection() as conn:
            cuadrilla = StaffRepository(conn).get_active_crew_of(empleado_id)
            if cuadrilla is None:
                raise ForbiddenError("No perteneces a ninguna cuadrilla activa")
            fechas = ItineraryRepository(conn).available_dates(
                cuadrilla['cuadrilla_id'], empleado_id, today_str())
        return {'cuadrilla': cuadrilla, 'fechas': fechas, 'total': len(fechas)}
