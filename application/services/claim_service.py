import logging
import math
from typing import Optional

from domain.errors import ConflictError, ForbiddenError, InvalidTransitionError, NotFoundError, ValidationError
from domain.models import (
    ADMIN_WORK_ORDER_TRANSITIONS, CLAIM_TERMINAL, CLAIM_TRANSITIONS, TECH_WORK_ORDER_TRANSITIONS,
    Claim, ClaimStatus, ClaimType, WorkOrder, WorkOrderStatus, as_dict, check_transition, parse_status,
)
from infrastructure.persistence.catalog_repository import CatalogRepository, StaffRepository
from infrastructure.persistence.claim_repository import ClaimRepository
from infrastructure.persistence.database import Database, now_str, today_str
from infrastructure.persistence.work_order_repository import WorkOrderRepository

logger = logging.getLogger(__name__)


def sync_claim_status(claims: ClaimRepository, reclamo_id: int, destino: ClaimStatus,
                      observaciones: Optional[str] = None) -> None:
    """Refleja en el reclamo el cambio de su OT, dentro de la transacción del llamador."""
    claim = claims.get_by_id(reclamo_id)
    if claim is None:
        raise NotFoundError("Reclamo no encontrado")
    if claim.estado == destino:
        return
    # Un reclamo ya cerrado no se reabre por el cierre de su OT
    if claim.estado in CLAIM_TERMINAL and destino in CLAIM_TERMINAL:
        return
    check_transition("Reclamo", CLAIM_TRANSITIONS, claim.estado, destino)
    if not claims.update_status(reclamo_id, destino, [claim.estado], observaciones):
        raise ConflictError("El reclamo cambió de estado mientras se procesaba la solicitud")
    logger.info("action=claim_sync reclamo_id=%s estado=%s->%s", reclamo_id, claim.estado.value, destino.value)


class ClaimService:
    def __init__(self, db: Database):
        self.db = db

    def create_claim(self, socio_id: int, cuenta_id: int, detalle_id: int, descripcion: str,
                     prioridad_id: int = 2, canal: str = "WEB") -> dict:
        """
        Alta de reclamo y de su orden de trabajo en una sola transacción.
        - La cuenta debe pertenecer al socio.
        - Reclamos técnicos: la OT toma la dirección de la cuenta como lugar de intervención.
        - Reclamos administrativos: la OT queda sin dirección y nunca lleva empleado.
        """
        if not cuenta_id or not detalle_id or not (descripcion or '').strip():
            raise ValidationError("Cuenta, tipo de reclamo y descripción son requeridos")
        prioridad_id = prioridad_id or 2

        with self.db.transaction() as conn:
            catalog = CatalogRepository(conn)
            if not catalog.priority_exists(prioridad_id):
                raise ValidationError("Prioridad inválida")
            cuenta = catalog.get_account(cuenta_id)
            if cuenta is None:
                raise NotFoundError("Cuenta no encontrada")
            if cuenta['socio_id'] != socio_id:
                raise ForbiddenError("La cuenta no pertenece al socio")
            categoria = catalog.get_category(detalle_id)
            if categoria is None:
                raise NotFoundError("Tipo de reclamo no encontrado")

            claim = ClaimRepository(conn).create(Claim(
                cuenta_id=cuenta_id,
                detalle_id=detalle_id,
                descripcion=descripcion.strip(),
                prioridad_id=prioridad_id,
                canal=canal or "WEB"
            ))
            es_tecnico = categoria['tipo'] == ClaimType.TECNICO.value
            ot = WorkOrderRepository(conn).create(WorkOrder(
                reclamo_id=claim.reclamo_id,
                direccion_intervencion=cuenta['direccion'] if es_tecnico else None,
                observaciones=f"OT creada automáticamente para: {categoria['detalle']}"
            ))

        logger.info("action=create_claim reclamo_id=%s ot_id=%s tipo=%s socio_id=%s",
                    claim.reclamo_id, ot.ot_id, categoria['tipo'], socio_id)
        return {'reclamo': as_dict(claim), 'orden_trabajo': as_dict(ot)}

    def transition(self, reclamo_id: int, nuevo_estado, observaciones: Optional[str] = None,
                   empleado_id: Optional[int] = None) -> dict:
        """Cambia el estado del reclamo según la tabla de transiciones.

        Con `empleado_id` se exige además que el operario pueda gestionar el reclamo.
        """
        destino = parse_status(ClaimStatus, nuevo_estado)
        observaciones = (observaciones or '').strip() or None

        with self.db.transaction() as conn:
            claims = ClaimRepository(conn)
            claim = claims.get_by_id(reclamo_id)
            if claim is None:
                raise NotFoundError("Reclamo no encontrado")
            if empleado_id is not None and not claims.operator_has_access(empleado_id, reclamo_id):
                raise ForbiddenError("No tienes permiso para modificar este reclamo")
            try:
                check_transition("Reclamo", CLAIM_TRANSITIONS, claim.estado, destino)
            except ConflictError:
                logger.warning("action=claim_transition rejected reclamo_id=%s estado=%s->%s",
                               reclamo_id, claim.estado.value, destino.value)
                raise
            if destino in CLAIM_TERMINAL:
                self._settle_work_order(conn, reclamo_id, destino)
            if not claims.update_status(reclamo_id, destino, [claim.estado], observaciones):
                raise ConflictError("El reclamo cambió de estado mientras se procesaba la solicitud")

            if destino == ClaimStatus.EN_PROCESO:
                self._push_work_order_in_progress(conn, reclamo_id)
            detalle = claims.get_detail(reclamo_id)

        logger.info("action=claim_transition reclamo_id=%s estado=%s->%s",
                    reclamo_id, claim.estado.value, destino.value)
        return detalle

    def _settle_work_order(self, conn, reclamo_id: int, destino: ClaimStatus) -> None:
        """
        Lleva la OT del reclamo a un estado final junto con el cierre del reclamo.
        - OT técnica tomada (ASIGNADA o EN_PROCESO): se rechaza, primero hay que completarla o cancelarla.
        - OT técnica PENDIENTE: se cancela.
        - OT administrativa abierta: se cierra.
        """
        work_orders = WorkOrderRepository(conn)
        ot = work_orders.get_by_claim(reclamo_id)
        if ot is None:
            return
        tecnica = work_orders.get_claim_type(ot.ot_id) == ClaimType.TECNICO.value
        if tecnica and ot.estado in (WorkOrderStatus.ASIGNADA, WorkOrderStatus.EN_PROCESO):
            logger.warning("action=claim_transition rejected reclamo_id=%s ot_id=%s estado_ot=%s destino=%s",
                           reclamo_id, ot.ot_id, ot.estado.value, destino.value)
            raise InvalidTransitionError(
                "OT", ot.estado, destino,
                f"La OT {ot.ot_id} está {ot.estado.value}: debe completarse o cancelarse "
                f"antes de pasar el reclamo a {destino.value}")

        if tecnica:
            final, cambios = WorkOrderStatus.CANCELADA, {'estado': WorkOrderStatus.CANCELADA}
            table = TECH_WORK_ORDER_TRANSITIONS
        else:
            final = WorkOrderStatus.CERRADO
            cambios = {'estado': WorkOrderStatus.CERRADO, 'fecha_cierre': now_str()}
            table = ADMIN_WORK_ORDER_TRANSITIONS
        if final not in table.get(ot.estado, frozenset()):
            return

        if not work_orders.guarded_update(ot.ot_id, cambios, estados=[ot.estado],
                                          nota=f"{final.value}: reclamo {destino.value}"):
            raise ConflictError("La OT cambió de estado mientras se procesaba la solicitud")
        logger.info("action=work_order_sync ot_id=%s estado=%s->%s", ot.ot_id, ot.estado.value, final.value)

    def _push_work_order_in_progress(self, conn, reclamo_id: int) -> None:
        work_orders = WorkOrderRepository(conn)
        ot = work_orders.get_by_claim(reclamo_id)
        if ot is None:
            return
        tipo = work_orders.get_claim_type(ot.ot_id)
        table = TECH_WORK_ORDER_TRANSITIONS if tipo == ClaimType.TECNICO.value else ADMIN_WORK_ORDER_TRANSITIONS
        if WorkOrderStatus.EN_PROCESO in table.get(ot.estado, frozenset()):
            work_orders.guarded_update(ot.ot_id, {'estado': WorkOrderStatus.EN_PROCESO}, estados=[ot.estado])
            logger.info("action=work_order_sync ot_id=%s estado=%s->EN_PROCESO", ot.ot_id, ot.estado.value)

    def assign_operator(self, reclamo_id: int, operario_id: int) -> dict:
        with self.db.transaction() as conn:
            claims = ClaimRepository(conn)
            claim = claims.get_by_id(reclamo_id)
            if claim is None:
                raise NotFoundError("Reclamo no encontrado")
            empleado = StaffRepository(conn).get_employee(operario_id)
            if empleado is None or not empleado.activo:
                raise NotFoundError("Empleado no encontrado o inactivo")
            claims.set_operator(reclamo_id, operario_id)
            if claim.estado == ClaimStatus.PENDIENTE:
                claims.update_status(reclamo_id, ClaimStatus.EN_PROCESO, [ClaimStatus.PENDIENTE])
            detalle = claims.get_detail(reclamo_id)

        logger.info("action=claim_assign reclamo_id=%s operario_id=%s", reclamo_id, operario_id)
        return detalle

    # --- Consultas ---
    def get_claim(self, reclamo_id: int, socio_id: Optional[int] = None) -> dict:
        with self.db.connection() as conn:
            detalle = ClaimRepository(conn).get_detail(reclamo_id)
        if detalle is None:
            raise NotFoundError("Reclamo no encontrado")
        if socio_id is not None and detalle['socio_id'] != socio_id:
            raise ForbiddenError("No tienes permiso para ver este reclamo")
        return detalle

    def list_by_member(self, socio_id: int, estado: Optional[str] = None, limite: int = 20, offset: int = 0):
        if estado:
            estado = parse_status(ClaimStatus, estado).value
        with self.db.connection() as conn:
            return ClaimRepository(conn).list_by_member(socio_id, estado, limite, offset)

    def list_by_account(self, cuenta_id: int, socio_id: Optional[int] = None):
        with self.db.connection() as conn:
            cuenta = CatalogRepository(conn).get_account(cuenta_id)
            if cuenta is None:
                raise NotFoundError("Cuenta no encontrada")
            if socio_id is not None and cuenta['socio_id'] != socio_id:
                raise ForbiddenError("La cuenta no pertenece al socio")
            return ClaimRepository(conn).list_by_account(cuenta_id)

    def list_all(self, estado: Optional[str] = None, prioridad_id: Optional[int] = None,
                 tipo: Optional[str] = None, busqueda: Optional[str] = None,
                 pagina: int = 1, limite: int = 20) -> dict:
        if estado:
            estado = parse_status(ClaimStatus, estado).value
        pagina = max(int(pagina or 1), 1)
        with self.db.connection() as conn:
            claims = ClaimRepository(conn)
            rows = claims.list_all(estado, prioridad_id, tipo, busqueda, limite, (pagina - 1) * limite)
            total = claims.count_all(estado, prioridad_id, tipo, busqueda)
        return {'reclamos': rows, 'paginacion': _paginacion(total, pagina, limite)}

    def list_by_operator(self, operario_id: int, estado: Optional[str] = None,
                         pagina: int = 1, limite: int = 20) -> dict:
        if estado:
            estado = parse_status(ClaimStatus, estado).value
        pagina = max(int(pagina or 1), 1)
        with self.db.connection() as conn:
            cuadrilla = StaffRepository(conn).get_active_crew_of(operario_id)
            rows, total = ClaimRepository(conn).list_by_operator(
                operario_id, cuadrilla['cuadrilla_id'] if cuadrilla else None,
                estado, limite, (pagina - 1) * limite)
        return {'reclamos': rows, 'paginacion': _paginacion(total, pagina, limite)}

    def summary_by_member(self, socio_id: int) -> dict:
        with self.db.connection() as conn:
            return ClaimRepository(conn).summary_by_member(socio_id)

    def summary_by_operator(self, operario_id: int) -> dict:
        with self.db.connection() as conn:
            cuadrilla = StaffRepository(conn).get_active_crew_of(operario_id)
            resumen = ClaimRepository(conn).summary_by_operator(
                operario_id, today_str(), cuadrilla['cuadrilla_id'] if cuadrilla else None)
        resumen['cuadrilla'] = cuadrilla
        return resumen

    def summary_global(self) -> dict:
        with self.db.connection() as conn:
            return ClaimRepository(conn).summary_global(today_str())

    def get_for_operator(self, reclamo_id: int, empleado_id: int) -> dict:
        """Detalle del reclamo para un operario con la OT asignada o en el itinerario de su cuadrilla."""
        with self.db.connection() as conn:
            claims = ClaimRepository(conn)
            detalle = claims.get_detail(reclamo_id)
            if detalle is None:
                raise NotFoundError("Reclamo no encontrado")
            if not claims.operator_has_access(empleado_id, reclamo_id):
                raise ForbiddenError("No tienes permiso para ver este reclamo")
        return detalle


def _paginacion(total: int, pagina: int, limite: int) -> dict:
    return {
        'total': total,
        'pagina': pagina,
        'limite': limite,
        'total_paginas': math.ceil(total / limite) if limite else 0
    }
