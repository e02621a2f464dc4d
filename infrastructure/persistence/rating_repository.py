from typing import List, Optional

from domain.models import Rating
from infrastructure.persistence.database import BaseRepository, now_str


class RatingRepository(BaseRepository):

    def _row_to_rating(self, row) -> Rating:
        return Rating(
            valoracion_id=row['valoracion_id'],
            reclamo_id=row['reclamo_id'],
            socio_id=row['socio_id'],
            calificacion=row['calificacion'],
            comentario=row['comentario'],
            fecha_valoracion=row['fecha_valoracion']
        )

    def create(self, rating: Rating) -> Rating:
        rating.fecha_valoracion = now_str()
        cursor = self.conn.execute("""
            INSERT INTO valoracion (reclamo_id, socio_id, calificacion, comentario, fecha_valoracion)
            VALUES (?, ?, ?, ?, ?)
        """, (rating.reclamo_id, rating.socio_id, rating.calificacion, rating.comentario,
              rating.fecha_valoracion))
        rating.valoracion_id = cursor.lastrowid
        return rating

    def get_by_id(self, valoracion_id: int) -> Optional[Rating]:
        row = self.conn.execute("SELECT * FROM valoracion WHERE valoracion_id = ?", (valoracion_id,)).fetchone()
        if row:
            return self._row_to_rating(row)
        return None

    def exists(self, reclamo_id: int, socio_id: int) -> bool:
        return self._scalar(
            "SELECT COUNT(*) FROM valoracion WHERE reclamo_id = ? AND socio_id = ?",
            (reclamo_id, socio_id)) > 0

    def update(self, valoracion_id: int, calificacion: int, comentario: Optional[str]) -> bool:
        cursor = self.conn.execute("""
            UPDATE valoracion
            SET calificacion = ?, comentario = ?, fecha_valoracion = ?
            WHERE valoracion_id = ?
        """, (calificacion, comentario, now_str(), valoracion_id))
        return cursor.rowcount > 0

    def delete(self, valoracion_id: int) -> bool:
        cursor = self.conn.execute("DELETE FROM valoracion WHERE valoracion_id = ?", (valoracion_id,))
        return cursor.rowcount > 0

    def get_by_claim(self, reclamo_id: int) -> Optional[dict]:
        return self._one("""
            SELECT v.*, s.nombre AS socio_nombre, s.apellido AS socio_apellido
            FROM valoracion v
            JOIN socio s ON v.socio_id = s.socio_id
            WHERE v.reclamo_id = ?
        """, (reclamo_id,))

    def list_by_member(self, socio_id: int) -> List[dict]:
        return self._all("""
            SELECT v.*, r.descripcion AS reclamo_descripcion, d.nombre AS detalle_reclamo
            FROM valoracion v
            JOIN reclamo r ON v.reclamo_id = r.reclamo_id
            JOIN detalle_tipo_reclamo d ON r.detalle_id = d.detalle_id
            WHERE v.socio_id = ?
            ORDER BY v.fecha_valoracion DESC, v.valoracion_id DESC
        """, (socio_id,))

    def statistics(self) -> dict:
        return self._one("""
            SELECT COUNT(*) AS total_valoraciones,
                   ROUND(AVG(calificacion), 2) AS promedio_calificacion,
                   COUNT(CASE WHEN calificacion = 5 THEN 1 END) AS cinco_estrellas,
                   COUNT(CASE WHEN calificacion = 4 THEN 1 END) AS cuatro_estrellas,
                   COUNT(CASE WHEN calificacion = 3 THEN 1 END) AS tres_estrellas,
                   COUNT(CASE WHEN calificacion = 2 THEN 1 END) AS dos_estrellas,
                   COUNT(CASE WHEN calificacion = 1 THEN 1 END) AS una_estrella,
                   COUNT(CASE WHEN comentario IS NOT NULL AND comentario != '' THEN 1 END) AS con_comentario
            FROM valoracion
        """)

    def recent(self, limite: int = 10) -> List[dict]:
        return self._all("""
            SELECT v.*, r.descripcion AS reclamo_descripcion, d.nombre AS detalle_reclamo,
                   s.nombre AS socio_nombre, s.apellido AS socio_apellido
            FROM valoracion v
            JOIN reclamo r ON v.reclamo_id = r.reclamo_id
            JOIN detalle_tipo_reclamo d ON r.detalle_id = d.detalle_id
            JOIN socio s ON v.socio_id = s.socio_id
            ORDER BY v.fecha_valoracion DESC, v.valoracion_id DESC
            LIMIT ?
        """, (limite,))
