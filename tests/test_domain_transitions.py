# Pruebas de las tablas de transición de estados

import pytest

from domain.errors import ConflictError, InvalidTransitionError, ValidationError
from domain.models import (
    ADMIN_WORK_ORDER_TRANSITIONS, CLAIM_TERMINAL, CLAIM_TRANSITIONS, TECH_WORK_ORDER_TRANSITIONS,
    ClaimStatus, Rating, WorkOrder, WorkOrderStatus, allowed_sources, as_dict, check_transition,
    parse_status,
)


def test_claim_transitions_cover_every_status():
    assert set(CLAIM_TRANSITIONS) == set(ClaimStatus)
    assert CLAIM_TRANSITIONS[ClaimStatus.CERRADO] == frozenset()


def test_claim_may_skip_to_closed_from_pending():
    check_transition("Reclamo", CLAIM_TRANSITIONS, ClaimStatus.PENDIENTE, ClaimStatus.CERRADO)
    check_transition("Reclamo", CLAIM_TRANSITIONS, ClaimStatus.PENDIENTE, ClaimStatus.RESUELTO)


def test_resolved_claim_can_only_be_closed():
    check_transition("Reclamo", CLAIM_TRANSITIONS, ClaimStatus.RESUELTO, ClaimStatus.CERRADO)
    with pytest.raises(InvalidTransitionError) as exc:
        check_transition("Reclamo", CLAIM_TRANSITIONS, ClaimStatus.RESUELTO, ClaimStatus.EN_PROCESO)
    assert exc.value.estado_actual == 'RESUELTO'
    assert exc.value.estado_destino == 'EN_PROCESO'
    assert exc.value.status_code == 409
    assert isinstance(exc.value, ConflictError)


def test_terminal_statuses():
    assert CLAIM_TERMINAL == {ClaimStatus.RESUELTO, ClaimStatus.CERRADO}


def test_technical_sources():
    assert allowed_sources(TECH_WORK_ORDER_TRANSITIONS, WorkOrderStatus.ASIGNADA) == [WorkOrderStatus.PENDIENTE]
    assert allowed_sources(TECH_WORK_ORDER_TRANSITIONS, WorkOrderStatus.CANCELADA) == [
        WorkOrderStatus.PENDIENTE, WorkOrderStatus.ASIGNADA]
    assert allowed_sources(TECH_WORK_ORDER_TRANSITIONS, WorkOrderStatus.COMPLETADA) == [WorkOrderStatus.EN_PROCESO]


def test_administrative_orders_never_get_assigned():
    assert allowed_sources(ADMIN_WORK_ORDER_TRANSITIONS, WorkOrderStatus.ASIGNADA) == []
    assert allowed_sources(ADMIN_WORK_ORDER_TRANSITIONS, WorkOrderStatus.CERRADO) == [
        WorkOrderStatus.PENDIENTE, WorkOrderStatus.EN_PROCESO]


def test_parse_status_normalizes_input():
    assert parse_status(ClaimStatus, ' en_proceso ') is ClaimStatus.EN_PROCESO
    assert parse_status(ClaimStatus, ClaimStatus.CERRADO) is ClaimStatus.CERRADO


def test_parse_status_rejects_unknown():
    with pytest.raises(ValidationError) as exc:
        parse_status(ClaimStatus, 'ABIERTO')
    assert 'PENDIENTE' in exc.value.mensaje


def test_as_dict_uses_enum_values():
    data = as_dict(WorkOrder(reclamo_id=7, estado=WorkOrderStatus.ASIGNADA, empleado_id=5))
    assert data['estado'] == 'ASIGNADA'
    assert data['empleado_id'] == 5
    assert as_dict(Rating(reclamo_id=1, socio_id=2, calificacion=4))['calificacion'] == 4
