import logging
from typing import List, Optional

from application.services.claim_service import sync_claim_status
from domain.errors import ForbiddenError, InvalidTransitionError, NotFoundError, ValidationError
from domain.models import (
    ADMIN_WORK_ORDER_TRANSITIONS, TECH_WORK_ORDER_TRANSITIONS,
    ClaimStatus, ClaimType, WorkOrderStatus, allowed_sources, as_dict, parse_status,
)
from infrastructure.persistence.catalog_repository import StaffRepository
from infrastructure.persistence.claim_repository import ClaimRepository
from infrastructure.persistence.database import Database, now_str, today_str
from infrastructure.persistence.itinerary_repository import ItineraryRepository
from infrastructure.persistence.work_order_repository import WorkOrderRepository

logger = logging.getLogger(__name__)


def rediagnose(work_orders: WorkOrderRepository, ot_id: int, destino: WorkOrderStatus,
               empleado_id: Optional[int] = None, mensaje: Optional[str] = None):
    """Explica por qué un UPDATE condicionado no afectó filas y lanza el error tipado."""
    ot = work_orders.get_by_id(ot_id)
    if ot is None:
        raise NotFoundError("OT no encontrada")
    if empleado_id is not None and ot.empleado_id != empleado_id:
        logger.warning("action=work_order_guard rejected ot_id=%s empleado_id=%s asignado=%s",
                       ot_id, empleado_id, ot.empleado_id)
        raise ForbiddenError("La OT no está asignada a este operario")
    logger.warning("action=work_order_guard rejected ot_id=%s estado=%s destino=%s",
                   ot_id, ot.estado.value, destino.value)
    raise InvalidTransitionError("OT", ot.estado, destino, mensaje)


class WorkOrderService:
    def __init__(self, db: Database):
        self.db = db

    def _require_type(self, work_orders: WorkOrderRepository, ot_id: int, tipo: ClaimType) -> None:
        encontrado = work_orders.get_claim_type(ot_id)
        if encontrado != tipo.value:
            etiqueta = "técnica" if tipo == ClaimType.TECNICO else "administrativa"
            raise NotFoundError(f"OT {etiqueta} no encontrada")

    # --- OTs administrativas ---
    def mark_in_progress(self, ot_id: int, observaciones: Optional[str] = None) -> dict:
        observaciones = (observaciones or '').strip() or None
        with self.db.transaction() as conn:
            work_orders = WorkOrderRepository(conn)
            self._require_type(work_orders, ot_id, ClaimType.ADMINISTRATIVO)
            cambios = {'estado': WorkOrderStatus.EN_PROCESO}
            if observaciones:
                cambios['observaciones'] = observaciones
            ok = work_orders.guarded_update(
                ot_id, cambios,
                estados=allowed_sources(ADMIN_WORK_ORDER_TRANSITIONS, WorkOrderStatus.EN_PROCESO),
                sin_empleado=True)
            if not ok:
                rediagnose(work_orders, ot_id, WorkOrderStatus.EN_PROCESO,
                           mensaje="OT administrativa no encontrada o ya no está pendiente")
            ot = work_orders.get_by_id(ot_id)
            sync_claim_status(ClaimRepository(conn), ot.reclamo_id, ClaimStatus.EN_PROCESO)

        logger.info("action=admin_in_progress ot_id=%s reclamo_id=%s", ot_id, ot.reclamo_id)
        return as_dict(ot)

    def close_administrative(self, ot_id: int, observaciones: str) -> dict:
        if not observaciones or not observaciones.strip():
            raise ValidationError("Las observaciones son obligatorias para cerrar la OT")
        observaciones = observaciones.strip()

        with self.db.transaction() as conn:
            work_orders = WorkOrderRepository(conn)
            self._require_type(work_orders, ot_id, ClaimType.ADMINISTRATIVO)
            ok = work_orders.guarded_update(
                ot_id,
                {'estado': WorkOrderStatus.CERRADO, 'fecha_cierre': now_str(), 'observaciones': observaciones},
                estados=allowed_sources(ADMIN_WORK_ORDER_TRANSITIONS, WorkOrderStatus.CERRADO),
                sin_empleado=True)
            if not ok:
                rediagnose(work_orders, ot_id, WorkOrderStatus.CERRADO)
            ot = work_orders.get_by_id(ot_id)
            sync_claim_status(ClaimRepository(conn), ot.reclamo_id, ClaimStatus.RESUELTO, observaciones)

        logger.info("action=admin_close ot_id=%s reclamo_id=%s", ot_id, ot.reclamo_id)
        return as_dict(ot)

    def list_administrative(self, estado: Optional[str] = None, limite: int = 50, offset: int = 0) -> List[dict]:
        if estado:
            estado = parse_status(WorkOrderStatus, estado).value
        with self.db.connection() as conn:
            return WorkOrderRepository(conn).list_administrative(estado, limite, offset)

    def get_administrative(self, ot_id: int) -> dict:
        with self.db.connection() as conn:
            ot = WorkOrderRepository(conn).get_administrative(ot_id)
        if ot is None:
            raise NotFoundError("OT administrativa no encontrada")
        return ot

    def count_administrative(self) -> dict:
        with self.db.connection() as conn:
            return WorkOrderRepository(conn).count_administrative(today_str())

    # --- OTs técnicas ---
    def assign_operator(self, ot_id: int, empleado_id: int) -> dict:
        with self.db.transaction() as conn:
            empleado = StaffRepository(conn).get_employee(empleado_id)
            if empleado is None or not empleado.activo:
                raise NotFoundError("Empleado no encontrado o inactivo")
            work_orders = WorkOrderRepository(conn)
            self._require_type(work_orders, ot_id, ClaimType.TECNICO)
            actual = work_orders.get_by_id(ot_id)
            cambios = {'empleado_id': empleado_id, 'estado': WorkOrderStatus.ASIGNADA}
            if actual.fecha_programada is None:
                cambios['fecha_programada'] = now_str()
            ok = work_orders.guarded_update(
                ot_id, cambios,
                estados=allowed_sources(TECH_WORK_ORDER_TRANSITIONS, WorkOrderStatus.ASIGNADA))
            if not ok:
                rediagnose(work_orders, ot_id, WorkOrderStatus.ASIGNADA)
            sync_claim_status(ClaimRepository(conn), actual.reclamo_id, ClaimStatus.EN_PROCESO)
            ot = work_orders.get_by_id(ot_id)

        logger.info("action=tech_assign ot_id=%s empleado_id=%s", ot_id, empleado_id)
        return as_dict(ot)

    def start_work(self, ot_id: int, empleado_id: int) -> dict:
        with self.db.transaction() as conn:
            work_orders = WorkOrderRepository(conn)
            self._require_type(work_orders, ot_id, ClaimType.TECNICO)
            ok = work_orders.guarded_update(
                ot_id, {'estado': WorkOrderStatus.EN_PROCESO},
                estados=allowed_sources(TECH_WORK_ORDER_TRANSITIONS, WorkOrderStatus.EN_PROCESO),
                empleado_id=empleado_id)
            if not ok:
                rediagnose(work_orders, ot_id, WorkOrderStatus.EN_PROCESO, empleado_id=empleado_id)
            ot = work_orders.get_by_id(ot_id)
            sync_claim_status(ClaimRepository(conn), ot.reclamo_id, ClaimStatus.EN_PROCESO)

        logger.info("action=tech_start ot_id=%s empleado_id=%s", ot_id, empleado_id)
        return as_dict(ot)

    def complete_work(self, ot_id: int, empleado_id: int, observaciones: str) -> dict:
        """
        Cierra una OT técnica en EN_PROCESO y resuelve su reclamo.
        - Las observaciones se validan antes de tocar la base.
        - OT de itinerario: la puede cerrar cualquier miembro activo de la cuadrilla.
        - Resto: sólo el operario asignado.
        """
        if not observaciones or not observaciones.strip():
            raise ValidationError("Las observaciones son requeridas para completar el trabajo")
        observaciones = observaciones.strip()

        with self.db.transaction() as conn:
            work_orders = WorkOrderRepository(conn)
            staff = StaffRepository(conn)
            self._require_type(work_orders, ot_id, ClaimType.TECNICO)
            ot = work_orders.get_by_id(ot_id)
            if ot.estado != WorkOrderStatus.EN_PROCESO:
                rediagnose(work_orders, ot_id, WorkOrderStatus.COMPLETADA)

            entrada = ItineraryRepository(conn).find_entry(ot_id)
            if entrada:
                if not staff.is_active_member(empleado_id, entrada['cuadrilla_id']):
                    raise ForbiddenError("Esta OT pertenece a otra cuadrilla. Solo los miembros "
                                         "de la cuadrilla asignada pueden cerrarla.")
            elif ot.empleado_id != empleado_id:
                raise ForbiddenError("Solo el operario asignado puede cerrar esta OT")

            cierre = staff.get_employee(empleado_id)
            nombre_cierre = cierre.nombre_completo if cierre else f"empleado {empleado_id}"
            if ot.empleado_id == empleado_id:
                firma = f"[COMPLETADA POR: {nombre_cierre} - {now_str()}]"
            else:
                asignado = staff.get_employee(ot.empleado_id)
                nombre_asignado = asignado.nombre_completo if asignado else "sin asignar"
                firma = f"[TOMADA POR: {nombre_asignado} | COMPLETADA POR: {nombre_cierre} - {now_str()}]"

            ok = work_orders.guarded_update(
                ot_id, {'estado': WorkOrderStatus.COMPLETADA, 'fecha_cierre': now_str()},
                estados=[WorkOrderStatus.EN_PROCESO], empleado_id=ot.empleado_id,
                nota=f"{observaciones}\n{firma}")
            if not ok:
                rediagnose(work_orders, ot_id, WorkOrderStatus.COMPLETADA)
            sync_claim_status(ClaimRepository(conn), ot.reclamo_id, ClaimStatus.RESUELTO, observaciones)
            ot = work_orders.get_by_id(ot_id)

        logger.info("action=tech_complete ot_id=%s empleado_id=%s", ot_id, empleado_id)
        return as_dict(ot)

    def cancel(self, ot_id: int, motivo: str) -> dict:
        if not motivo or not motivo.strip():
            raise ValidationError("El motivo de cancelación es requerido")

        with self.db.transaction() as conn:
            work_orders = WorkOrderRepository(conn)
            self._require_type(work_orders, ot_id, ClaimType.TECNICO)
            ok = work_orders.guarded_update(
                ot_id, {'estado': WorkOrderStatus.CANCELADA},
                estados=allowed_sources(TECH_WORK_ORDER_TRANSITIONS, WorkOrderStatus.CANCELADA),
                nota=f"CANCELADA: {motivo.strip()}")
            if not ok:
                rediagnose(work_orders, ot_id, WorkOrderStatus.CANCELADA,
                           mensaje="La OT no puede ser cancelada (solo PENDIENTE o ASIGNADA)")
            ot = work_orders.get_by_id(ot_id)
            sync_claim_status(ClaimRepository(conn), ot.reclamo_id, ClaimStatus.PENDIENTE)

        logger.info("action=tech_cancel ot_id=%s reclamo_id=%s", ot_id, ot.reclamo_id)
        return as_dict(ot)

    def list_technical(self, estado: Optional[str] = None, empleado_id: Optional[int] = None,
                       cuadrilla_id: Optional[int] = None, limite: int = 50, offset: int = 0) -> List[dict]:
        if estado:
            estado = parse_status(WorkOrderStatus, estado).value
        with self.db.connection() as conn:
            return WorkOrderRepository(conn).list_technical(estado, empleado_id, cuadrilla_id, limite, offset)

    def get_technical_detail(self, ot_id: int, empleado_id: Optional[int] = None) -> dict:
        """Con `empleado_id`, sólo si la OT es suya o está en el itinerario de su cuadrilla."""
        with self.db.connection() as conn:
            detalle = WorkOrderRepository(conn).get_technical_detail(ot_id)
            if detalle is None:
                raise NotFoundError("OT técnica no encontrada")
            if empleado_id is not None and not ClaimRepository(conn).operator_has_access(
                    empleado_id, detalle['reclamo_id']):
                raise ForbiddenError("No tienes permiso para ver esta OT")
        return detalle

