from typing import List, Optional

from infrastructure.persistence.database import BaseRepository, now_str

_ITINERARY_SELECT = """
    SELECT ot.ot_id, ot.estado, ot.empleado_id, ot.fecha_programada, ot.observaciones,
           ot.direccion_intervencion, ot.created_at,
           r.reclamo_id, r.descripcion, r.estado AS estado_reclamo,
           s.socio_id, s.nombre AS socio_nombre, s.apellido AS socio_apellido,
           s.telefono AS socio_telefono, c.direccion AS domicilio, c.numero_cuenta,
           t.nombre AS tipo_reclamo, p.nombre AS prioridad, d.nombre AS detalle_reclamo,
           e.nombre AS operario_nombre, e.apellido AS operario_apellido,
           i.fecha AS fecha_itinerario, idet.orden AS orden_itinerario,
           CASE WHEN ot.empleado_id IS NULL THEN 'disponible' ELSE 'tomada' END AS estado_itinerario
    FROM itinerario i
    JOIN itinerario_det idet ON i.itinerario_id = idet.itinerario_id
    JOIN orden_trabajo ot ON idet.ot_id = ot.ot_id
    JOIN reclamo r ON ot.reclamo_id = r.reclamo_id
    JOIN cuenta c ON r.cuenta_id = c.cuenta_id
    JOIN socio s ON c.socio_id = s.socio_id
    JOIN detalle_tipo_reclamo d ON r.detalle_id = d.detalle_id
    JOIN tipo_reclamo t ON d.tipo_id = t.tipo_id
    JOIN prioridad p ON r.prioridad_id = p.prioridad_id
    LEFT JOIN empleado e ON ot.empleado_id = e.empleado_id
    WHERE i.cuadrilla_id = ?
      AND ot.estado IN ('PENDIENTE', 'ASIGNADA', 'EN_PROCESO')
"""

_ITINERARY_ORDER = """
    ORDER BY i.fecha ASC,
             CASE WHEN ot.empleado_id IS NULL THEN 0 ELSE 1 END,
             r.prioridad_id ASC,
             ot.created_at ASC
"""


class ItineraryRepository(BaseRepository):
    """Relación estructurada OT ↔ cuadrilla ↔ fecha (tablas itinerario / itinerario_det)."""

    def get_or_create(self, cuadrilla_id: int, fecha: str) -> int:
        self.conn.execute(
            "INSERT OR IGNORE INTO itinerario (cuadrilla_id, fecha) VALUES (?, ?)",
            (cuadrilla_id, fecha))
        return self._scalar(
            "SELECT itinerario_id FROM itinerario WHERE cuadrilla_id = ? AND fecha = ?",
            (cuadrilla_id, fecha), default=None)

    def add_order(self, itinerario_id: int, ot_id: int) -> int:
        orden = self._scalar(
            "SELECT COALESCE(MAX(orden), 0) + 1 FROM itinerario_det WHERE itinerario_id = ?",
            (itinerario_id,), default=1)
        self.conn.execute(
            "INSERT INTO itinerario_det (itinerario_id, ot_id, orden) VALUES (?, ?, ?)",
            (itinerario_id, ot_id, orden))
        return orden

    def find_entry(self, ot_id: int) -> Optional[dict]:
        return self._one("""
            SELECT idet.itdet_id, idet.itinerario_id, idet.orden, i.cuadrilla_id, i.fecha
            FROM itinerario_det idet
            JOIN itinerario i ON idet.itinerario_id = i.itinerario_id
            WHERE idet.ot_id = ?
        """, (ot_id,))

    def remove_order(self, ot_id: int) -> bool:
        cursor = self.conn.execute("DELETE FROM itinerario_det WHERE ot_id = ?", (ot_id,))
        return cursor.rowcount > 0

    def take_order(self, ot_id: int, empleado_id: int, cuadrilla_id: int, nota: str) -> bool:
        """Asigna la OT al operario sólo si sigue libre, PENDIENTE y en el itinerario de su cuadrilla."""
        cursor = self.conn.execute("""
            UPDATE orden_trabajo
            SET empleado_id = ?,
                estado = 'ASIGNADA',
                observaciones = COALESCE(observaciones || char(10), '') || ?,
                updated_at = ?
            WHERE ot_id = ?
              AND empleado_id IS NULL
              AND estado = 'PENDIENTE'
              AND ot_id IN (SELECT idet.ot_id
                            FROM itinerario_det idet
                            JOIN itinerario i ON idet.itinerario_id = i.itinerario_id
                            WHERE i.cuadrilla_id = ?)
        """, (empleado_id, nota, now_str(), ot_id, cuadrilla_id))
        return cursor.rowcount > 0

    def list_for_crew(self, cuadrilla_id: int, fecha: Optional[str] = None) -> List[dict]:
        query = _ITINERARY_SELECT
        params = [cuadrilla_id]
        if fecha:
            query += " AND i.fecha = ?"
            params.append(fecha)
        return self._all(query + _ITINERARY_ORDER, params)

    def list_unassigned(self, tipo: str = 'TECNICO', limite: int = 100) -> List[dict]:
        return self._all("""
            SELECT ot.ot_id, ot.estado, ot.created_at AS fecha_creacion,
                   COALESCE(ot.direccion_intervencion, c.direccion) AS domicilio,
                   r.reclamo_id, r.descripcion,
                   s.socio_id, s.nombre AS socio_nombre, s.apellido AS socio_apellido,
                   s.telefono AS socio_telefono, c.numero_cuenta,
                   t.nombre AS tipo_reclamo, p.nombre AS prioridad, d.nombre AS detalle_reclamo
            FROM orden_trabajo ot
            JOIN reclamo r ON ot.reclamo_id = r.reclamo_id
            JOIN cuenta c ON r.cuenta_id = c.cuenta_id
            JOIN socio s ON c.socio_id = s.socio_id
            JOIN detalle_tipo_reclamo d ON r.detalle_id = d.detalle_id
            JOIN tipo_reclamo t ON d.tipo_id = t.tipo_id
            JOIN prioridad p ON r.prioridad_id = p.prioridad_id
            LEFT JOIN itinerario_det idet ON ot.ot_id = idet.ot_id
            WHERE ot.empleado_id IS NULL
              AND ot.estado = 'PENDIENTE'
              AND t.nombre = ?
              AND idet.itdet_id IS NULL
            ORDER BY r.prioridad_id ASC, ot.created_at DESC, ot.ot_id DESC
            LIMIT ?
        """, (tipo.upper(), limite))

    def available_dates(self, cuadrilla_id: int, empleado_id: Optional[int], desde: str,
                        limite: int = 30) -> List[dict]:
        return self._all("""
            SELECT i.fecha,
                   COUNT(DISTINCT idet.ot_id) AS total_ots,
                   COUNT(DISTINCT CASE WHEN ot.empleado_id IS NULL THEN idet.ot_id END) AS ots_disponibles,
                   COUNT(DISTINCT CASE WHEN ot.empleado_id = ? THEN idet.ot_id END) AS ots_tomadas
            FROM itinerario i
            JOIN itinerario_det idet ON i.itinerario_id = idet.itinerario_id
            JOIN orden_trabajo ot ON idet.ot_id = ot.ot_id
            WHERE i.cuadrilla_id = ?
              AND i.fecha >= ?
              AND ot.estado IN ('PENDIENTE', 'ASIGNADA', 'EN_PROCESO')
            GROUP BY i.fecha
            ORDER BY i.fecha ASC
            LIMIT ?
        """, (empleado_id, cuadrilla_id, desde, limite))
