# Pruebas del ciclo de vida de reclamos

import pytest

from domain.errors import ForbiddenError, InvalidTransitionError, NotFoundError, ValidationError

DETALLE_CORTE = 1


def test_create_technical_claim_creates_pending_work_order(reclamo_tecnico):
    reclamo = reclamo_tecnico['reclamo']
    ot = reclamo_tecnico['orden_trabajo']
    assert reclamo['estado'] == 'PENDIENTE'
    assert reclamo['fecha_cierre'] is None
    assert ot['reclamo_id'] == reclamo['reclamo_id']
    assert ot['estado'] == 'PENDIENTE'
    assert ot['empleado_id'] is None
    assert ot['direccion_intervencion'] == 'Av. San Martín 123'
    assert ot['observaciones'] == 'OT creada automáticamente para: Corte de suministro'


def test_create_administrative_claim_has_no_address(reclamo_administrativo):
    ot = reclamo_administrativo['orden_trabajo']
    assert ot['direccion_intervencion'] is None
    assert ot['empleado_id'] is None


def test_create_claim_defaults_priority(claims):
    resultado = claims.create_claim(1, 1, DETALLE_CORTE, 'Baja tensión', prioridad_id=None)
    assert resultado['reclamo']['prioridad_id'] == 2


@pytest.mark.parametrize('cuenta_id, detalle_id, descripcion', [
    (None, DETALLE_CORTE, 'algo'),
    (1, None, 'algo'),
    (1, DETALLE_CORTE, '   '),
])
def test_create_claim_requires_fields(claims, cuenta_id, detalle_id, descripcion):
    with pytest.raises(ValidationError):
        claims.create_claim(1, cuenta_id, detalle_id, descripcion)


def test_create_claim_rejects_foreign_account(claims):
    with pytest.raises(ForbiddenError):
        claims.create_claim(1, 2, DETALLE_CORTE, 'Cuenta de otro socio')
    assert claims.summary_global()['total'] == 0


def test_create_claim_unknown_references(claims):
    with pytest.raises(NotFoundError):
        claims.create_claim(1, 99, DETALLE_CORTE, 'Cuenta inexistente')
    with pytest.raises(NotFoundError):
        claims.create_claim(1, 1, 99, 'Tipo inexistente')
    with pytest.raises(ValidationError):
        claims.create_claim(1, 1, DETALLE_CORTE, 'Prioridad inexistente', prioridad_id=9)
    assert claims.summary_global()['total'] == 0


def test_transition_to_resolved_sets_closing_date(claims, reclamo_tecnico):
    reclamo_id = reclamo_tecnico['reclamo']['reclamo_id']
    detalle = claims.transition(reclamo_id, 'EN_PROCESO')
    assert detalle['estado'] == 'EN_PROCESO'
    assert detalle['fecha_cierre'] is None

    detalle = claims.transition(reclamo_id, 'resuelto', 'Se repuso el suministro')
    assert detalle['estado'] == 'RESUELTO'
    assert detalle['fecha_cierre'] is not None
    assert detalle['observaciones_cierre'] == 'Se repuso el suministro'


def test_transition_from_terminal_is_rejected(claims, reclamo_tecnico):
    reclamo_id = reclamo_tecnico['reclamo']['reclamo_id']
    claims.transition(reclamo_id, 'CERRADO')
    with pytest.raises(InvalidTransitionError):
        claims.transition(reclamo_id, 'PENDIENTE')
    assert claims.get_claim(reclamo_id)['estado'] == 'CERRADO'


def test_transition_rejects_unknown_status(claims, reclamo_tecnico):
    with pytest.raises(ValidationError):
        claims.transition(reclamo_tecnico['reclamo']['reclamo_id'], 'ABIERTO')


def test_in_progress_pushes_administrative_order(claims, reclamo_administrativo):
    reclamo_id = reclamo_administrativo['reclamo']['reclamo_id']
    detalle = claims.transition(reclamo_id, 'EN_PROCESO')
    assert detalle['estado_orden'] == 'EN_PROCESO'


def test_in_progress_leaves_unassigned_technical_order(claims, reclamo_tecnico):
    reclamo_id = reclamo_tecnico['reclamo']['reclamo_id']
    detalle = claims.transition(reclamo_id, 'EN_PROCESO')
    assert detalle['estado_orden'] == 'PENDIENTE'


def test_operator_needs_access_to_transition(claims, itineraries, reclamo_tecnico):
    reclamo_id = reclamo_tecnico['reclamo']['reclamo_id']
    with pytest.raises(ForbiddenError):
        claims.transition(reclamo_id, 'RESUELTO', empleado_id=2)
    with pytest.raises(ForbiddenError):
        claims.get_for_operator(reclamo_id, 2)

    # En el itinerario de la Cuadrilla Norte, Diego ya puede gestionarlo
    itineraries.assign_to_crew(reclamo_tecnico['orden_trabajo']['ot_id'], 1, '2099-03-15')
    assert claims.get_for_operator(reclamo_id, 2)['reclamo_id'] == reclamo_id
    detalle = claims.transition(reclamo_id, 'RESUELTO', 'Listo', empleado_id=2)
    assert detalle['estado'] == 'RESUELTO'
    assert detalle['estado_orden'] == 'CANCELADA'
    assert itineraries.list_crew_itinerary(1) == []


def test_closing_claim_with_taken_order_is_rejected(claims, work_orders, reclamo_tecnico):
    reclamo_id = reclamo_tecnico['reclamo']['reclamo_id']
    ot_id = reclamo_tecnico['orden_trabajo']['ot_id']
    work_orders.assign_operator(ot_id, 1)

    with pytest.raises(InvalidTransitionError) as exc:
        claims.transition(reclamo_id, 'CERRADO', empleado_id=1)
    assert exc.value.entidad == 'OT'
    assert exc.value.estado_actual == 'ASIGNADA'
    assert claims.get_claim(reclamo_id)['estado'] == 'EN_PROCESO'

    # La OT sigue su ciclo normal
    assert work_orders.start_work(ot_id, 1)['estado'] == 'EN_PROCESO'
    with pytest.raises(InvalidTransitionError):
        claims.transition(reclamo_id, 'RESUELTO')
    work_orders.complete_work(ot_id, 1, 'Se cambió el transformador')
    assert claims.get_claim(reclamo_id)['estado'] == 'RESUELTO'

    detalle = claims.transition(reclamo_id, 'CERRADO')
    assert detalle['estado'] == 'CERRADO'
    assert detalle['estado_orden'] == 'COMPLETADA'


def test_closing_claim_cancels_pending_technical_order(claims, work_orders, reclamo_tecnico):
    reclamo_id = reclamo_tecnico['reclamo']['reclamo_id']
    ot_id = reclamo_tecnico['orden_trabajo']['ot_id']
    claims.transition(reclamo_id, 'CERRADO')

    ot = work_orders.get_technical_detail(ot_id)
    assert ot['estado'] == 'CANCELADA'
    assert ot['observaciones'].endswith('CANCELADA: reclamo CERRADO')
    with pytest.raises(InvalidTransitionError):
        work_orders.assign_operator(ot_id, 1)


def test_resolving_claim_closes_administrative_order(claims, work_orders, reclamo_administrativo):
    reclamo_id = reclamo_administrativo['reclamo']['reclamo_id']
    ot_id = reclamo_administrativo['orden_trabajo']['ot_id']
    claims.transition(reclamo_id, 'EN_PROCESO')
    claims.transition(reclamo_id, 'RESUELTO', 'Se refacturó')

    ot = work_orders.get_administrative(ot_id)
    assert ot['estado'] == 'CERRADO'
    assert ot['fecha_cierre'] is not None

    assert claims.transition(reclamo_id, 'CERRADO')['estado'] == 'CERRADO'


def test_assign_operator_to_claim(claims, reclamo_tecnico):
    reclamo_id = reclamo_tecnico['reclamo']['reclamo_id']
    detalle = claims.assign_operator(reclamo_id, 1)
    assert detalle['operario_asignado_id'] == 1
    assert detalle['estado'] == 'EN_PROCESO'

    with pytest.raises(NotFoundError):
        claims.assign_operator(reclamo_id, 4)


def test_member_cannot_read_foreign_claim(claims, reclamo_tecnico):
    reclamo_id = reclamo_tecnico['reclamo']['reclamo_id']
    assert claims.get_claim(reclamo_id, socio_id=1)['numero_cuenta'] == 'CTA-0001'
    with pytest.raises(ForbiddenError):
        claims.get_claim(reclamo_id, socio_id=2)
    with pytest.raises(NotFoundError):
        claims.get_claim(999)


def test_listings_and_summaries(claims, reclamo_tecnico, reclamo_administrativo):
    claims.transition(reclamo_administrativo['reclamo']['reclamo_id'], 'RESUELTO')

    assert len(claims.list_by_member(1)) == 2
    assert len(claims.list_by_member(1, estado='pendiente')) == 1
    assert claims.list_by_member(2) == []
    assert len(claims.list_by_account(1, socio_id=1)) == 2
    with pytest.raises(ForbiddenError):
        claims.list_by_account(1, socio_id=2)

    resultado = claims.list_all(tipo='TECNICO', limite=10)
    assert [r['reclamo_id'] for r in resultado['reclamos']] == [reclamo_tecnico['reclamo']['reclamo_id']]
    assert resultado['paginacion'] == {'total': 1, 'pagina': 1, 'limite': 10, 'total_paginas': 1}
    assert claims.list_all(busqueda='CTA-0001')['paginacion']['total'] == 2

    resumen = claims.summary_by_member(1)
    assert resumen['total'] == 2
    assert resumen['pendientes'] == 1
    assert resumen['resueltos'] == 1
    assert claims.summary_global()['resueltos_hoy'] == 1


def test_operator_listing_scoped_to_own_orders(claims, work_orders, reclamo_tecnico, reclamo_administrativo):
    assert claims.list_by_operator(1)['paginacion']['total'] == 0
    work_orders.assign_operator(reclamo_tecnico['orden_trabajo']['ot_id'], 1)

    resultado = claims.list_by_operator(1)
    assert resultado['paginacion']['total'] == 1
    assert resultado['reclamos'][0]['estado_orden'] == 'ASIGNADA'

    resumen = claims.summary_by_operator(1)
    assert resumen['en_proceso'] == 1
    assert resumen['cuadrilla']['nombre'] == 'Cuadrilla Norte'
