# Pruebas del itinerario de cuadrillas

import pytest

from domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError

FECHA = '2099-03-15'


@pytest.fixture
def ot_tecnica(reclamo_tecnico):
    return reclamo_tecnico['orden_trabajo']['ot_id']


@pytest.fixture
def ot_en_itinerario(itineraries, ot_tecnica):
    itineraries.assign_to_crew(ot_tecnica, 1, FECHA)
    return ot_tecnica


def test_assign_to_crew(itineraries, work_orders, ot_tecnica):
    resultado = itineraries.assign_to_crew(ot_tecnica, 1, FECHA)
    assert resultado['cuadrilla'] == 'Cuadrilla Norte'
    assert resultado['fecha'] == FECHA
    assert resultado['orden'] == 1

    ot = work_orders.get_technical_detail(ot_tecnica)
    assert ot['estado'] == 'PENDIENTE'
    assert ot['empleado_id'] is None
    assert ot['fecha_programada'] == FECHA
    assert ot['fecha_itinerario'] == FECHA
    assert '[ITINERARIO] Asignada a cuadrilla: Cuadrilla Norte - Fecha: 2099-03-15' in ot['observaciones']


def test_assign_to_crew_validations(itineraries, ot_tecnica, reclamo_administrativo):
    with pytest.raises(ValidationError):
        itineraries.assign_to_crew(ot_tecnica, 1, '15/03/2099')
    with pytest.raises(NotFoundError):
        itineraries.assign_to_crew(ot_tecnica, 99, FECHA)
    with pytest.raises(ValidationError):
        itineraries.assign_to_crew(ot_tecnica, 3, FECHA)
    with pytest.raises(NotFoundError):
        itineraries.assign_to_crew(999, 1, FECHA)
    with pytest.raises(ValidationError):
        itineraries.assign_to_crew(reclamo_administrativo['orden_trabajo']['ot_id'], 1, FECHA)


def test_assign_to_crew_rejects_assigned_order(itineraries, work_orders, ot_tecnica):
    work_orders.assign_operator(ot_tecnica, 1)
    with pytest.raises(ConflictError):
        itineraries.assign_to_crew(ot_tecnica, 1, FECHA)
    assert itineraries.list_crew_itinerary(1) == []


def test_reassigning_moves_the_order(itineraries, ot_en_itinerario):
    itineraries.assign_to_crew(ot_en_itinerario, 2, '2099-03-16')
    assert itineraries.list_crew_itinerary(1) == []
    ots = itineraries.list_crew_itinerary(2, '2099-03-16')
    assert [o['ot_id'] for o in ots] == [ot_en_itinerario]


def test_orders_are_numbered_per_crew_and_date(claims, itineraries, ot_en_itinerario):
    otra = claims.create_claim(1, 1, 2, 'Baja tensión en el barrio')['orden_trabajo']['ot_id']
    assert itineraries.assign_to_crew(otra, 1, FECHA)['orden'] == 2


def test_take_order_from_itinerary(itineraries, claims, reclamo_tecnico, ot_en_itinerario):
    ots = itineraries.list_crew_itinerary(1, FECHA)
    assert ots[0]['estado_itinerario'] == 'disponible'

    detalle = itineraries.claim_from_itinerary(ot_en_itinerario, 1)
    assert detalle['estado'] == 'ASIGNADA'
    assert detalle['empleado_id'] == 1
    assert 'Tomada por: Carlos Gómez - ' in detalle['observaciones']
    assert claims.get_claim(reclamo_tecnico['reclamo']['reclamo_id'])['estado'] == 'EN_PROCESO'

    ots = itineraries.list_crew_itinerary(1, FECHA)
    assert ots[0]['estado_itinerario'] == 'tomada'
    assert ots[0]['operario_nombre'] == 'Carlos'


def test_second_take_fails(itineraries, work_orders, ot_en_itinerario):
    itineraries.claim_from_itinerary(ot_en_itinerario, 1)
    antes = work_orders.get_technical_detail(ot_en_itinerario)

    with pytest.raises(ConflictError):
        itineraries.claim_from_itinerary(ot_en_itinerario, 2)

    # La toma perdida no deja rastro en la OT
    despues = work_orders.get_technical_detail(ot_en_itinerario)
    assert despues['empleado_id'] == 1
    assert despues['observaciones'] == antes['observaciones']
    assert 'Diego Ruiz' not in despues['observaciones']


def test_take_requires_crew_membership(itineraries, ot_en_itinerario):
    # Federico pertenece a la Cuadrilla Sur
    with pytest.raises(ConflictError):
        itineraries.claim_from_itinerary(ot_en_itinerario, 5)
    with pytest.raises(ForbiddenError):
        itineraries.claim_from_itinerary(ot_en_itinerario, 5, cuadrilla_id=1)
    # Elena no pertenece a ninguna cuadrilla
    with pytest.raises(ForbiddenError):
        itineraries.claim_from_itinerary(ot_en_itinerario, 3)


def test_remove_from_itinerary(itineraries, work_orders, ot_en_itinerario):
    resultado = itineraries.remove_from_itinerary(ot_en_itinerario)
    assert resultado == {'ot_id': ot_en_itinerario, 'cuadrilla_id': 1, 'fecha': FECHA}
    assert itineraries.list_crew_itinerary(1) == []
    assert work_orders.get_technical_detail(ot_en_itinerario)['fecha_programada'] is None

    with pytest.raises(NotFoundError):
        itineraries.remove_from_itinerary(ot_en_itinerario)


def test_remove_after_taken_fails(itineraries, ot_en_itinerario):
    itineraries.claim_from_itinerary(ot_en_itinerario, 2)
    with pytest.raises(ConflictError):
        itineraries.remove_from_itinerary(ot_en_itinerario)
    assert len(itineraries.list_crew_itinerary(1)) == 1


def test_crew_mate_can_complete_itinerary_order(itineraries, work_orders, ot_en_itinerario):
    itineraries.claim_from_itinerary(ot_en_itinerario, 1)
    work_orders.start_work(ot_en_itinerario, 1)

    with pytest.raises(ForbiddenError):
        work_orders.complete_work(ot_en_itinerario, 5, 'Terminado')

    ot = work_orders.complete_work(ot_en_itinerario, 2, 'Se cambió el fusible')
    assert ot['estado'] == 'COMPLETADA'
    assert '[TOMADA POR: Carlos Gómez | COMPLETADA POR: Diego Ruiz - ' in ot['observaciones']


def test_unassigned_orders(itineraries, ot_tecnica, reclamo_administrativo):
    assert [o['ot_id'] for o in itineraries.list_unassigned()] == [ot_tecnica]
    administrativas = itineraries.list_unassigned('administrativo')
    assert [o['ot_id'] for o in administrativas] == [reclamo_administrativo['orden_trabajo']['ot_id']]

    itineraries.assign_to_crew(ot_tecnica, 1, FECHA)
    assert itineraries.list_unassigned() == []

    with pytest.raises(ValidationError):
        itineraries.list_unassigned('COMERCIAL')


def test_my_itinerary_and_available_dates(itineraries, ot_en_itinerario):
    mio = itineraries.my_itinerary(2, FECHA)
    assert mio['cuadrilla']['nombre'] == 'Cuadrilla Norte'
    assert [o['ot_id'] for o in mio['ots']] == [ot_en_itinerario]
    assert itineraries.my_itinerary(2)['ots'] == []

    fechas = itineraries.available_dates(2)
    assert fechas['total'] == 1
    assert fechas['fechas'][0]['fecha'] == FECHA
    assert fechas['fechas'][0]['ots_disponibles'] == 1

    with pytest.raises(ForbiddenError):
        itineraries.my_itinerary(3)
