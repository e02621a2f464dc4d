# Pruebas de valoraciones de reclamos

import pytest

from domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError


@pytest.fixture
def reclamo_resuelto(claims, reclamo_tecnico):
    reclamo_id = reclamo_tecnico['reclamo']['reclamo_id']
    claims.transition(reclamo_id, 'RESUELTO', 'Se repuso el servicio')
    return reclamo_id


def test_rate_resolved_claim(ratings, reclamo_resuelto):
    valoracion = ratings.create(reclamo_resuelto, 1, 5, 'great')
    assert valoracion['calificacion'] == 5
    assert valoracion['comentario'] == 'great'
    assert valoracion['fecha_valoracion'] is not None


def test_duplicate_rating_is_rejected(ratings, reclamo_resuelto):
    ratings.create(reclamo_resuelto, 1, 4)
    with pytest.raises(ConflictError) as exc:
        ratings.create(reclamo_resuelto, 1, 2, 'cambié de opinión')
    assert exc.value.mensaje == 'Ya has valorado este reclamo'

    valoraciones = ratings.list_by_member(1)
    assert len(valoraciones) == 1
    assert valoraciones[0]['calificacion'] == 4


def test_rating_pending_claim_is_rejected(ratings, reclamo_tecnico):
    with pytest.raises(ConflictError) as exc:
        ratings.create(reclamo_tecnico['reclamo']['reclamo_id'], 1, 5)
    assert exc.value.mensaje == 'Solo se pueden valorar reclamos resueltos o cerrados'


def test_rating_check_order(ratings, reclamo_tecnico, reclamo_resuelto):
    with pytest.raises(NotFoundError):
        ratings.create(999, 1, 5)
    with pytest.raises(ForbiddenError):
        ratings.create(reclamo_resuelto, 2, 9)
    with pytest.raises(ValidationError):
        ratings.create(reclamo_resuelto, 1, 6)
    with pytest.raises(ValidationError):
        ratings.create(reclamo_resuelto, 1, 'cinco')


def test_rate_update_and_ownership(ratings, reclamo_resuelto):
    valoracion = ratings.create(reclamo_resuelto, 1, 5, 'great')
    assert ratings.get_by_claim(reclamo_resuelto)['calificacion'] == 5

    ratings.update(valoracion['valoracion_id'], 1, 3, 'meh')
    actual = ratings.get_by_claim(reclamo_resuelto, socio_id=1)
    assert actual['calificacion'] == 3
    assert actual['comentario'] == 'meh'

    with pytest.raises(ForbiddenError) as exc:
        ratings.update(valoracion['valoracion_id'], 2, 1, 'no es mío')
    assert exc.value.mensaje == 'No tienes permiso para modificar esta valoración'
    with pytest.raises(ForbiddenError):
        ratings.get_by_claim(reclamo_resuelto, socio_id=2)


def test_delete_rating(ratings, reclamo_resuelto):
    valoracion = ratings.create(reclamo_resuelto, 1, 2)
    with pytest.raises(ForbiddenError):
        ratings.delete(valoracion['valoracion_id'], 2)
    ratings.delete(valoracion['valoracion_id'], 1)
    assert ratings.get_by_claim(reclamo_resuelto) is None
    with pytest.raises(NotFoundError):
        ratings.delete(valoracion['valoracion_id'], 1)


def test_rating_listings_and_statistics(ratings, claims, reclamo_resuelto):
    otro = claims.create_claim(1, 1, 4, 'Cambio de titular')['reclamo']['reclamo_id']
    claims.transition(otro, 'CERRADO')
    ratings.create(reclamo_resuelto, 1, 5, 'Excelente atención')
    ratings.create(otro, 1, 3)

    assert len(ratings.list_by_member(1)) == 2
    assert ratings.list_by_member(2) == []

    estadisticas = ratings.statistics()
    assert estadisticas['total_valoraciones'] == 2
    assert estadisticas['promedio_calificacion'] == 4.0
    assert estadisticas['cinco_estrellas'] == 1
    assert estadisticas['tres_estrellas'] == 1
    assert estadisticas['con_comentario'] == 1

    assert len(ratings.recent(1)) == 1
