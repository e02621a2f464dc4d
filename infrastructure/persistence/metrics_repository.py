from typing import List, Optional, Tuple

from infrastructure.persistence.database import BaseRepository

_OPERARIOS_ACTIVOS = """
    FROM empleado e
    JOIN usuario u ON e.empleado_id = u.empleado_id
    WHERE u.rol = 'OPERARIO' AND e.activo = 1
"""


def _window(columna: str, desde: str, hasta: Optional[str]) -> Tuple[str, list]:
    clause = f"{columna} >= ?"
    params = [desde]
    if hasta:
        clause += f" AND {columna} < ?"
        params.append(hasta)
    return clause, params


class MetricsRepository(BaseRepository):
    """Agregados para el tablero de administración. Las ventanas llegan como texto 'YYYY-MM-DD HH:MM:SS'."""

    def resolution_time(self, desde: str, hasta: Optional[str] = None) -> dict:
        clause, params = _window("fecha_alta", desde, hasta)
        return self._one(f"""
            SELECT COUNT(*) AS total_resueltos,
                   AVG(julianday(fecha_cierre) - julianday(fecha_alta)) AS promedio_dias
            FROM reclamo
            WHERE estado IN ('RESUELTO', 'CERRADO') AND {clause}
        """, params)

    def claim_counts(self, desde: str, hasta: Optional[str] = None) -> dict:
        clause, params = _window("fecha_alta", desde, hasta)
        return self._one(f"""
            SELECT COUNT(CASE WHEN estado = 'PENDIENTE' THEN 1 END) AS pendientes,
                   COUNT(CASE WHEN estado = 'EN_PROCESO' THEN 1 END) AS en_proceso,
                   COUNT(CASE WHEN estado IN ('RESUELTO', 'CERRADO') THEN 1 END) AS resueltos,
                   COUNT(*) AS total
            FROM reclamo
            WHERE {clause}
        """, params)

    def satisfaction(self, desde: str, hasta: Optional[str] = None) -> dict:
        clause, params = _window("fecha_valoracion", desde, hasta)
        return self._one(f"""
            SELECT AVG(calificacion) AS promedio_calificacion,
                   COUNT(*) AS total_valoraciones
            FROM valoracion
            WHERE {clause}
        """, params)

    def billing(self, desde: str) -> dict:
        return self._one("""
            SELECT COUNT(*) AS total_facturas,
                   COUNT(CASE WHEN estado IN ('PENDIENTE', 'VENCIDA') THEN 1 END) AS facturas_pendientes,
                   COUNT(CASE WHEN estado = 'PAGADA' THEN 1 END) AS facturas_pagadas,
                   COALESCE(SUM(CASE WHEN estado = 'PAGADA' AND fecha_pago >= ?
                                     THEN COALESCE(monto_pagado, importe) END), 0) AS recaudado,
                   COALESCE(SUM(CASE WHEN estado IN ('PENDIENTE', 'VENCIDA') THEN importe END), 0) AS pendiente_cobro
            FROM factura
        """, (desde,))

    def operators_load(self) -> dict:
        total = self._scalar(f"SELECT COUNT(DISTINCT e.empleado_id) {_OPERARIOS_ACTIVOS}")
        activos = self._one(f"""
            SELECT COUNT(DISTINCT ot.empleado_id) AS operarios_con_ot,
                   COUNT(ot.ot_id) AS total_ots_activas
            FROM orden_trabajo ot
            WHERE ot.estado IN ('ASIGNADA', 'EN_PROCESO')
              AND ot.empleado_id IN (SELECT e.empleado_id {_OPERARIOS_ACTIVOS})
        """)
        return {'total_operarios': total, **activos}

    def operators_status(self, desde_completadas: str) -> List[dict]:
        return self._all(f"""
            SELECT e.empleado_id, e.nombre, e.apellido, e.legajo, e.rol_interno, u.email,
                   COUNT(CASE WHEN ot.estado IN ('ASIGNADA', 'EN_PROCESO') THEN 1 END) AS ots_activas,
                   COUNT(CASE WHEN ot.estado = 'ASIGNADA' THEN 1 END) AS ots_pendientes,
                   COUNT(CASE WHEN ot.estado = 'EN_PROCESO' THEN 1 END) AS ots_en_proceso,
                   COUNT(CASE WHEN ot.estado = 'COMPLETADA' AND ot.fecha_cierre >= ? THEN 1 END) AS ots_completadas_mes
            FROM empleado e
            JOIN usuario u ON e.empleado_id = u.empleado_id
            LEFT JOIN orden_trabajo ot ON e.empleado_id = ot.empleado_id
            WHERE u.rol = 'OPERARIO' AND e.activo = 1
            GROUP BY e.empleado_id, e.nombre, e.apellido, e.legajo, e.rol_interno, u.email
            ORDER BY CASE WHEN COUNT(CASE WHEN ot.estado IN ('ASIGNADA', 'EN_PROCESO') THEN 1 END) > 0
                          THEN 0 ELSE 1 END,
                     e.apellido, e.nombre
        """, (desde_completadas,))

    def claims_export_query(self, estado: Optional[str] = None) -> Tuple[str, list]:
        """Consulta y parámetros del listado de reclamos para exportar (se ejecuta con pandas)."""
        query = """
            SELECT r.reclamo_id, r.fecha_alta, r.fecha_cierre, r.estado,
                   t.nombre AS tipo_reclamo, d.nombre AS detalle_reclamo, p.nombre AS prioridad,
                   s.nombre || ' ' || s.apellido AS socio, c.numero_cuenta, c.direccion,
                   r.descripcion, r.observaciones_cierre,
                   ot.ot_id, ot.estado AS estado_ot,
                   e.nombre || ' ' || e.apellido AS operario
            FROM reclamo r
            JOIN detalle_tipo_reclamo d ON r.detalle_id = d.detalle_id
            JOIN tipo_reclamo t ON d.tipo_id = t.tipo_id
            JOIN prioridad p ON r.prioridad_id = p.prioridad_id
            JOIN cuenta c ON r.cuenta_id = c.cuenta_id
            JOIN socio s ON c.socio_id = s.socio_id
            LEFT JOIN orden_trabajo ot ON r.reclamo_id = ot.reclamo_id
            LEFT JOIN empleado e ON ot.empleado_id = e.empleado_id
        """
        params = []
        if estado:
            query += " WHERE r.estado = ?"
            params.append(estado)
        query += " ORDER BY r.fecha_alta DESC, r.reclamo_id DESC"
        return query, params
