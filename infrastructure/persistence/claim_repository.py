from typing import List, Optional, Tuple

from domain.models import Claim, ClaimStatus, CLAIM_TERMINAL
from infrastructure.persistence.database import BaseRepository, now_str, placeholders

_CLAIM_JOINS = """
    FROM reclamo r
    JOIN detalle_tipo_reclamo d ON r.detalle_id = d.detalle_id
    JOIN tipo_reclamo t ON d.tipo_id = t.tipo_id
    JOIN prioridad p ON r.prioridad_id = p.prioridad_id
    JOIN cuenta c ON r.cuenta_id = c.cuenta_id
"""


class ClaimRepository(BaseRepository):

    def _row_to_claim(self, row) -> Claim:
        return Claim(
            reclamo_id=row['reclamo_id'],
            cuenta_id=row['cuenta_id'],
            detalle_id=row['detalle_id'],
            descripcion=row['descripcion'],
            prioridad_id=row['prioridad_id'],
            canal=row['canal'],
            estado=ClaimStatus(row['estado']),
            operario_asignado_id=row['operario_asignado_id'],
            observaciones_cierre=row['observaciones_cierre'],
            fecha_alta=row['fecha_alta'],
            fecha_cierre=row['fecha_cierre']
        )

    def create(self, claim: Claim) -> Claim:
        claim.fecha_alta = claim.fecha_alta or now_str()
        cursor = self.conn.execute("""
            INSERT INTO reclamo (cuenta_id, detalle_id, descripcion, prioridad_id, canal, estado, fecha_alta, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, (claim.cuenta_id, claim.detalle_id, claim.descripcion, claim.prioridad_id,
              claim.canal, claim.estado.value, claim.fecha_alta, claim.fecha_alta))
        claim.reclamo_id = cursor.lastrowid
        return claim

    def get_by_id(self, reclamo_id: int) -> Optional[Claim]:
        row = self.conn.execute("SELECT * FROM reclamo WHERE reclamo_id = ?", (reclamo_id,)).fetchone()
        if row:
            return self._row_to_claim(row)
        return None

    def get_owner_and_status(self, reclamo_id: int) -> Optional[dict]:
        return self._one("""
            SELECT r.reclamo_id, r.estado, c.socio_id
            FROM reclamo r
            JOIN cuenta c ON r.cuenta_id = c.cuenta_id
            WHERE r.reclamo_id = ?
        """, (reclamo_id,))

    def get_detail(self, reclamo_id: int) -> Optional[dict]:
        return self._one(f"""
            SELECT r.*,
                   d.nombre AS detalle_reclamo,
                   t.nombre AS tipo_reclamo,
                   t.descripcion AS tipo_descripcion,
                   p.nombre AS prioridad,
                   c.numero_cuenta, c.direccion, c.localidad, c.socio_id,
                   s.nombre AS socio_nombre, s.apellido AS socio_apellido, s.telefono AS socio_telefono,
                   ot.ot_id, ot.estado AS estado_orden, ot.empleado_id AS ot_empleado_id,
                   ot.fecha_programada
            {_CLAIM_JOINS}
            LEFT JOIN socio s ON c.socio_id = s.socio_id
            LEFT JOIN orden_trabajo ot ON r.reclamo_id = ot.reclamo_id
            WHERE r.reclamo_id = ?
        """, (reclamo_id,))

    def update_status(self, reclamo_id: int, estado: ClaimStatus, estados_origen: List[ClaimStatus],
                      observaciones: Optional[str] = None) -> bool:
        """Cambia el estado sólo si el actual está en `estados_origen`.

        Los estados terminales sellan `fecha_cierre` y, si vienen, las observaciones de cierre.
        """
        ahora = now_str()
        sets = ["estado = ?", "updated_at = ?"]
        params = [estado.value, ahora]
        if estado in CLAIM_TERMINAL:
            sets.append("fecha_cierre = ?")
            params.append(ahora)
            if observaciones:
                sets.append("observaciones_cierre = ?")
                params.append(observaciones)
        else:
            sets.append("fecha_cierre = NULL")
        origen = [e.value for e in estados_origen]
        query = (f"UPDATE reclamo SET {', '.join(sets)} "
                 f"WHERE reclamo_id = ? AND estado IN ({placeholders(origen)})")
        cursor = self.conn.execute(query, params + [reclamo_id] + origen)
        return cursor.rowcount > 0

    def set_operator(self, reclamo_id: int, operario_id: int) -> bool:
        cursor = self.conn.execute(
            "UPDATE reclamo SET operario_asignado_id = ?, updated_at = ? WHERE reclamo_id = ?",
            (operario_id, now_str(), reclamo_id))
        return cursor.rowcount > 0

    # --- Listados ---
    def list_by_member(self, socio_id: int, estado: Optional[str] = None,
                       limite: int = 20, offset: int = 0) -> List[dict]:
        query = f"""
            SELECT r.reclamo_id, r.cuenta_id, r.detalle_id, r.descripcion, r.estado, r.prioridad_id,
                   r.fecha_alta, r.fecha_cierre, r.canal, r.observaciones_cierre,
                   d.nombre AS detalle_reclamo, t.nombre AS tipo_reclamo, p.nombre AS prioridad,
                   c.numero_cuenta, c.direccion
            {_CLAIM_JOINS}
            WHERE c.socio_id = ?
        """
        params = [socio_id]
        if estado:
            query += " AND r.estado = ?"
            params.append(estado)
        query += " ORDER BY r.fecha_alta DESC, r.reclamo_id DESC LIMIT ? OFFSET ?"
        params.extend([limite, offset])
        return self._all(query, params)

    def list_by_account(self, cuenta_id: int) -> List[dict]:
        return self._all(f"""
            SELECT r.reclamo_id, r.descripcion, r.estado, r.fecha_alta, r.fecha_cierre,
                   d.nombre AS detalle_reclamo, t.nombre AS tipo_reclamo, p.nombre AS prioridad
            {_CLAIM_JOINS}
            WHERE r.cuenta_id = ?
            ORDER BY r.fecha_alta DESC, r.reclamo_id DESC
        """, (cuenta_id,))

    def _filters_all(self, estado, prioridad_id, tipo, busqueda) -> Tuple[str, list]:
        where = " WHERE 1=1"
        params = []
        if estado:
            where += " AND r.estado = ?"
            params.append(estado)
        if prioridad_id:
            where += " AND r.prioridad_id = ?"
            params.append(prioridad_id)
        if tipo and tipo.lower() != 'todos':
            where += " AND UPPER(t.nombre) = ?"
            params.append(tipo.upper())
        if busqueda:
            where += (" AND (r.descripcion LIKE ? OR s.nombre LIKE ? OR s.apellido LIKE ?"
                      " OR c.numero_cuenta LIKE ? OR CAST(r.reclamo_id AS TEXT) = ?)")
            like = f"%{busqueda}%"
            params.extend([like, like, like, like, busqueda])
        return where, params

    def list_all(self, estado: Optional[str] = None, prioridad_id: Optional[int] = None,
                 tipo: Optional[str] = None, busqueda: Optional[str] = None,
                 limite: int = 50, offset: int = 0) -> List[dict]:
        where, params = self._filters_all(estado, prioridad_id, tipo, busqueda)
        query = f"""
            SELECT r.reclamo_id, r.descripcion, r.estado, r.fecha_alta, r.fecha_cierre,
                   r.operario_asignado_id,
                   d.nombre AS detalle_reclamo, t.nombre AS tipo_reclamo, p.nombre AS prioridad,
                   c.numero_cuenta, c.direccion,
                   s.nombre AS socio_nombre, s.apellido AS socio_apellido
            {_CLAIM_JOINS}
            JOIN socio s ON c.socio_id = s.socio_id
            {where}
            ORDER BY r.prioridad_id ASC, r.fecha_alta DESC
            LIMIT ? OFFSET ?
        """
        return self._all(query, params + [limite, offset])

    def count_all(self, estado: Optional[str] = None, prioridad_id: Optional[int] = None,
                  tipo: Optional[str] = None, busqueda: Optional[str] = None) -> int:
        where, params = self._filters_all(estado, prioridad_id, tipo, busqueda)
        return self._scalar(f"""
            SELECT COUNT(*)
            {_CLAIM_JOINS}
            JOIN socio s ON c.socio_id = s.socio_id
            {where}
        """, params)

    def _operator_scope(self, cuadrilla_id: Optional[int]) -> Tuple[str, list]:
        # Reclamos técnicos cuya OT es del operario o está en el itinerario de su cuadrilla
        if cuadrilla_id:
            return "(ot.empleado_id = ? OR i.cuadrilla_id = ?)", [cuadrilla_id]
        return "ot.empleado_id = ?", []

    def list_by_operator(self, operario_id: int, cuadrilla_id: Optional[int] = None,
                         estado: Optional[str] = None, limite: int = 20,
                         offset: int = 0) -> Tuple[List[dict], int]:
        scope, extra = self._operator_scope(cuadrilla_id)
        base = f"""
            {_CLAIM_JOINS}
            JOIN orden_trabajo ot ON r.reclamo_id = ot.reclamo_id
            JOIN socio s ON c.socio_id = s.socio_id
            LEFT JOIN itinerario_det idet ON ot.ot_id = idet.ot_id
            LEFT JOIN itinerario i ON idet.itinerario_id = i.itinerario_id
            WHERE t.nombre = 'TECNICO' AND {scope}
        """
        params = [operario_id] + extra
        if estado:
            base += " AND r.estado = ?"
            params.append(estado)
        total = self._scalar(f"SELECT COUNT(*) {base}", params)
        rows = self._all(f"""
            SELECT r.reclamo_id, r.descripcion, r.estado, r.fecha_alta, r.fecha_cierre,
                   d.nombre AS detalle_reclamo, t.nombre AS tipo_reclamo, p.nombre AS prioridad,
                   c.numero_cuenta, c.direccion,
                   s.nombre AS socio_nombre, s.apellido AS socio_apellido, s.telefono AS socio_telefono,
                   ot.ot_id, ot.estado AS estado_orden, ot.fecha_programada,
                   CASE WHEN idet.itdet_id IS NOT NULL THEN 1 ELSE 0 END AS es_itinerario
            {base}
            ORDER BY r.prioridad_id ASC, r.fecha_alta DESC
            LIMIT ? OFFSET ?
        """, params + [limite, offset])
        return rows, total

    # --- Resúmenes ---
    def summary_by_member(self, socio_id: int) -> dict:
        return self._one("""
            SELECT COUNT(*) AS total,
                   COUNT(CASE WHEN r.estado = 'PENDIENTE' THEN 1 END) AS pendientes,
                   COUNT(CASE WHEN r.estado = 'EN_PROCESO' THEN 1 END) AS en_proceso,
                   COUNT(CASE WHEN r.estado = 'RESUELTO' THEN 1 END) AS resueltos,
                   COUNT(CASE WHEN r.estado = 'CERRADO' THEN 1 END) AS cerrados
            FROM reclamo r
            JOIN cuenta c ON r.cuenta_id = c.cuenta_id
            WHERE c.socio_id = ?
        """, (socio_id,))

    def summary_by_operator(self, operario_id: int, hoy: str,
                            cuadrilla_id: Optional[int] = None) -> dict:
        scope, extra = self._operator_scope(cuadrilla_id)
        return self._one(f"""
            SELECT COUNT(*) AS total,
                   COUNT(CASE WHEN r.estado = 'PENDIENTE' THEN 1 END) AS pendientes,
                   COUNT(CASE WHEN r.estado = 'EN_PROCESO' THEN 1 END) AS en_proceso,
                   COUNT(CASE WHEN r.estado = 'RESUELTO' AND date(r.fecha_cierre) = ? THEN 1 END) AS resueltos_hoy
            FROM reclamo r
            JOIN detalle_tipo_reclamo d ON r.detalle_id = d.detalle_id
            JOIN tipo_reclamo t ON d.tipo_id = t.tipo_id
            JOIN orden_trabajo ot ON r.reclamo_id = ot.reclamo_id
            LEFT JOIN itinerario_det idet ON ot.ot_id = idet.ot_id
            LEFT JOIN itinerario i ON idet.itinerario_id = i.itinerario_id
            WHERE t.nombre = 'TECNICO' AND {scope}
        """, [hoy, operario_id] + extra)

    def summary_global(self, hoy: str) -> dict:
        return self._one("""
            SELECT COUNT(*) AS total,
                   COUNT(CASE WHEN estado = 'PENDIENTE' THEN 1 END) AS pendientes,
                   COUNT(CASE WHEN estado = 'EN_PROCESO' THEN 1 END) AS en_proceso,
                   COUNT(CASE WHEN estado = 'RESUELTO' THEN 1 END) AS resueltos,
                   COUNT(CASE WHEN estado = 'CERRADO' THEN 1 END) AS cerrados,
                   COUNT(CASE WHEN date(fecha_alta) = ? THEN 1 END) AS nuevos_hoy,
                   COUNT(CASE WHEN estado IN ('RESUELTO', 'CERRADO') AND date(fecha_cierre) = ? THEN 1 END) AS resueltos_hoy
            FROM reclamo
        """, (hoy, hoy))

    def operator_has_access(self, empleado_id: int, reclamo_id: int) -> bool:
        return self._scalar("""
            SELECT COUNT(*)
            FROM orden_trabajo ot
            LEFT JOIN itinerario_det idet ON ot.ot_id = idet.ot_id
            LEFT JOIN itinerario i ON idet.itinerario_id = i.itinerario_id
            WHERE ot.reclamo_id = ?
              AND (ot.empleado_id = ?
                   OR i.cuadrilla_id IN (SELECT cuadrilla_id FROM empleado_cuadrilla
                                         WHERE empleado_id = ? AND activa = 1))
        """, (reclamo_id, empleado_id, empleado_id)) > 0
