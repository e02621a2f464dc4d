import logging
import sqlite3
from typing import List, Optional

from domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from domain.models import CLAIM_TERMINAL, ClaimStatus, Rating, as_dict
from infrastructure.persistence.claim_repository import ClaimRepository
from infrastructure.persistence.database import Database
from infrastructure.persistence.rating_repository import RatingRepository

logger = logging.getLogger(__name__)


def _parse_calificacion(calificacion) -> int:
    try:
        valor = int(calificacion)
    except (TypeError, ValueError):
        raise ValidationError("La calificación debe estar entre 1 y 5")
    if valor < 1 or valor > 5:
        raise ValidationError("La calificación debe estar entre 1 y 5")
    return valor


class RatingService:
    def __init__(self, db: Database):
        self.db = db

    def create(self, reclamo_id: int, socio_id: int, calificacion, comentario: Optional[str] = None) -> dict:
        """
        Valoración de un reclamo resuelto o cerrado por parte de su dueño.
        Orden de verificación: existe → estado terminal → dueño → rango → duplicado.
        """
        with self.db.transaction() as conn:
            reclamo = ClaimRepository(conn).get_owner_and_status(reclamo_id)
            if reclamo is None:
                raise NotFoundError("Reclamo no encontrado")
            if ClaimStatus(reclamo['estado']) not in CLAIM_TERMINAL:
                raise ConflictError("Solo se pueden valorar reclamos resueltos o cerrados")
            if reclamo['socio_id'] != socio_id:
                raise ForbiddenError("No tienes permiso para valorar este reclamo")
            valor = _parse_calificacion(calificacion)

            ratings = RatingRepository(conn)
            if ratings.exists(reclamo_id, socio_id):
                raise ConflictError("Ya has valorado este reclamo")
            try:
                rating = ratings.create(Rating(
                    reclamo_id=reclamo_id,
                    socio_id=socio_id,
                    calificacion=valor,
                    comentario=(comentario or '').strip() or None
                ))
            except sqlite3.IntegrityError:
                raise ConflictError("Ya has valorado este reclamo")

        logger.info("action=rating_create valoracion_id=%s reclamo_id=%s calificacion=%s",
                    rating.valoracion_id, reclamo_id, valor)
        return as_dict(rating)

    def update(self, valoracion_id: int, socio_id: int, calificacion, comentario: Optional[str] = None) -> dict:
        with self.db.transaction() as conn:
            ratings = RatingRepository(conn)
            rating = ratings.get_by_id(valoracion_id)
            if rating is None:
                raise NotFoundError("Valoración no encontrada")
            if rating.socio_id != socio_id:
                raise ForbiddenError("No tienes permiso para modificar esta valoración")
            valor = _parse_calificacion(calificacion)
            ratings.update(valoracion_id, valor, (comentario or '').strip() or None)
            rating = ratings.get_by_id(valoracion_id)

        logger.info("action=rating_update valoracion_id=%s calificacion=%s", valoracion_id, valor)
        return as_dict(rating)

    def delete(self, valoracion_id: int, socio_id: int) -> None:
        with self.db.transaction() as conn:
            ratings = RatingRepository(conn)
            rating = ratings.get_by_id(valoracion_id)
            if rating is None:
                raise NotFoundError("Valoración no encontrada")
            if rating.socio_id != socio_id:
                raise ForbiddenError("No tienes permiso para eliminar esta valoración")
            ratings.delete(valoracion_id)
        logger.info("action=rating_delete valoracion_id=%s", valoracion_id)

    def get_by_claim(self, reclamo_id: int, socio_id: Optional[int] = None) -> Optional[dict]:
        with self.db.connection() as conn:
            if socio_id is not None:
                reclamo = ClaimRepository(conn).get_owner_and_status(reclamo_id)
                if reclamo is None:
                    raise NotFoundError("Reclamo no encontrado")
                if reclamo['socio_id'] != socio_id:
                    raise ForbiddenError("No tienes permiso para ver este reclamo")
            return RatingRepository(conn).get_by_claim(reclamo_id)

    def list_by_member(self, socio_id: int) -> List[dict]:
        with self.db.connection() as conn:
            return RatingRepository(conn).list_by_member(socio_id)

    def statistics(self) -> dict:
        with self.db.connection() as conn:
            return RatingRepository(conn).statistics()

    def recent(self, limite: int = 10) -> List[dict]:
        with self.db.connection() as conn:
            return RatingRepository(conn).recent(limite)
