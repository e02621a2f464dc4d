from typing import List, Optional

from domain.models import WorkOrder, WorkOrderStatus
from infrastructure.persistence.database import BaseRepository, now_str, placeholders

_ESTADO_ORDEN_SQL = """
    CASE ot.estado
        WHEN 'PENDIENTE' THEN 1
        WHEN 'ASIGNADA' THEN 2
        WHEN 'EN_PROCESO' THEN 3
        WHEN 'COMPLETADA' THEN 4
        ELSE 5
    END
"""


class WorkOrderRepository(BaseRepository):

    def _row_to_work_order(self, row) -> WorkOrder:
        return WorkOrder(
            ot_id=row['ot_id'],
            reclamo_id=row['reclamo_id'],
            estado=WorkOrderStatus(row['estado']),
            empleado_id=row['empleado_id'],
            direccion_intervencion=row['direccion_intervencion'],
            observaciones=row['observaciones'],
            fecha_programada=row['fecha_programada'],
            fecha_cierre=row['fecha_cierre'],
            created_at=row['created_at'],
            updated_at=row['updated_at']
        )

    def create(self, ot: WorkOrder) -> WorkOrder:
        ot.created_at = ot.created_at or now_str()
        ot.updated_at = ot.created_at
        cursor = self.conn.execute("""
            INSERT INTO orden_trabajo (reclamo_id, empleado_id, estado, direccion_intervencion,
                                       observaciones, fecha_programada, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, (ot.reclamo_id, ot.empleado_id, ot.estado.value, ot.direccion_intervencion,
              ot.observaciones, ot.fecha_programada, ot.created_at, ot.updated_at))
        ot.ot_id = cursor.lastrowid
        return ot

    def get_by_id(self, ot_id: int) -> Optional[WorkOrder]:
        row = self.conn.execute("SELECT * FROM orden_trabajo WHERE ot_id = ?", (ot_id,)).fetchone()
        if row:
            return self._row_to_work_order(row)
        return None

    def get_by_claim(self, reclamo_id: int) -> Optional[WorkOrder]:
        row = self.conn.execute("SELECT * FROM orden_trabajo WHERE reclamo_id = ?", (reclamo_id,)).fetchone()
        if row:
            return self._row_to_work_order(row)
        return None

    def get_claim_type(self, ot_id: int) -> Optional[str]:
        """Tipo (TECNICO/ADMINISTRATIVO) del reclamo de la OT, o None si la OT no existe."""
        return self._scalar("""
            SELECT t.nombre
            FROM orden_trabajo ot
            JOIN reclamo r ON ot.reclamo_id = r.reclamo_id
            JOIN detalle_tipo_reclamo d ON r.detalle_id = d.detalle_id
            JOIN tipo_reclamo t ON d.tipo_id = t.tipo_id
            WHERE ot.ot_id = ?
        """, (ot_id,), default=None)

    def guarded_update(self, ot_id: int, cambios: dict, estados: Optional[List[WorkOrderStatus]] = None,
                       empleado_id: Optional[int] = None, sin_empleado: bool = False,
                       nota: Optional[str] = None) -> bool:
        """UPDATE condicionado al estado y al empleado actuales.

        `cambios` son columnas a fijar; `nota` se agrega al final de las observaciones.
        Devuelve False si ninguna fila cumplió las condiciones.
        """
        sets, params = [], []
        for columna, valor in cambios.items():
            sets.append(f"{columna} = ?")
            params.append(valor.value if isinstance(valor, WorkOrderStatus) else valor)
        if nota:
            sets.append("observaciones = COALESCE(observaciones || char(10), '') || ?")
            params.append(nota)
        sets.append("updated_at = ?")
        params.append(now_str())

        query = f"UPDATE orden_trabajo SET {', '.join(sets)} WHERE ot_id = ?"
        params.append(ot_id)
        if estados:
            valores = [e.value for e in estados]
            query += f" AND estado IN ({placeholders(valores)})"
            params.extend(valores)
        if sin_empleado:
            query += " AND empleado_id IS NULL"
        elif empleado_id is not None:
            query += " AND empleado_id = ?"
            params.append(empleado_id)
        cursor = self.conn.execute(query, params)
        return cursor.rowcount > 0

    # --- Administrativas ---
    def list_administrative(self, estado: Optional[str] = None, limite: int = 50, offset: int = 0) -> List[dict]:
        query = """
            SELECT ot.ot_id, ot.estado AS estado_ot, ot.fecha_programada, ot.fecha_cierre,
                   ot.observaciones AS observaciones_ot, ot.created_at AS fecha_creacion_ot,
                   r.reclamo_id, r.descripcion, r.estado AS estado_reclamo, r.fecha_alta, r.prioridad_id,
                   d.detalle_id, d.nombre AS detalle_reclamo, t.nombre AS tipo_reclamo, p.nombre AS prioridad,
                   c.cuenta_id, c.numero_cuenta, c.direccion,
                   s.socio_id, s.nombre AS socio_nombre, s.apellido AS socio_apellido,
                   s.telefono AS socio_telefono, s.email AS socio_email
            FROM orden_trabajo ot
            JOIN reclamo r ON ot.reclamo_id = r.reclamo_id
            JOIN detalle_tipo_reclamo d ON r.detalle_id = d.detalle_id
            JOIN tipo_reclamo t ON d.tipo_id = t.tipo_id
            JOIN prioridad p ON r.prioridad_id = p.prioridad_id
            JOIN cuenta c ON r.cuenta_id = c.cuenta_id
            JOIN socio s ON c.socio_id = s.socio_id
            WHERE ot.empleado_id IS NULL AND t.nombre = 'ADMINISTRATIVO'
        """
        params = []
        if estado:
            query += " AND ot.estado = ?"
            params.append(estado)
        query += " ORDER BY r.prioridad_id ASC, r.fecha_alta DESC LIMIT ? OFFSET ?"
        params.extend([limite, offset])
        return self._all(query, params)

    def get_administrative(self, ot_id: int) -> Optional[dict]:
        return self._one("""
            SELECT ot.*,
                   r.descripcion, r.estado AS estado_reclamo, r.fecha_alta,
                   r.fecha_cierre AS fecha_cierre_reclamo, r.observaciones_cierre,
                   d.nombre AS detalle_reclamo, t.nombre AS tipo_reclamo, p.nombre AS prioridad,
                   c.cuenta_id, c.numero_cuenta, c.direccion, c.localidad,
                   s.socio_id, s.nombre AS socio_nombre, s.apellido AS socio_apellido,
                   s.dni AS socio_dni, s.telefono AS socio_telefono, s.email AS socio_email
            FROM orden_trabajo ot
            JOIN reclamo r ON ot.reclamo_id = r.reclamo_id
            JOIN detalle_tipo_reclamo d ON r.detalle_id = d.detalle_id
            JOIN tipo_reclamo t ON d.tipo_id = t.tipo_id
            JOIN prioridad p ON r.prioridad_id = p.prioridad_id
            JOIN cuenta c ON r.cuenta_id = c.cuenta_id
            JOIN socio s ON c.socio_id = s.socio_id
            WHERE ot.ot_id = ? AND ot.empleado_id IS NULL AND t.nombre = 'ADMINISTRATIVO'
        """, (ot_id,))

    def count_administrative(self, hoy: str) -> dict:
        return self._one("""
            SELECT COUNT(CASE WHEN ot.estado = 'PENDIENTE' THEN 1 END) AS pendientes,
                   COUNT(CASE WHEN ot.estado = 'EN_PROCESO' THEN 1 END) AS en_proceso,
                   COUNT(CASE WHEN ot.estado = 'CERRADO' THEN 1 END) AS cerradas,
                   COUNT(*) AS total,
                   COUNT(CASE WHEN date(r.fecha_alta) = ? THEN 1 END) AS nuevas_hoy
            FROM orden_trabajo ot
            JOIN reclamo r ON ot.reclamo_id = r.reclamo_id
            JOIN detalle_tipo_reclamo d ON r.detalle_id = d.detalle_id
            JOIN tipo_reclamo t ON d.tipo_id = t.tipo_id
            WHERE ot.empleado_id IS NULL AND t.nombre = 'ADMINISTRATIVO'
        """, (hoy,))

    # --- Técnicas ---
    def list_technical(self, estado: Optional[str] = None, empleado_id: Optional[int] = None,
                       cuadrilla_id: Optional[int] = None, limite: int = 50, offset: int = 0) -> List[dict]:
        query = f"""
            SELECT ot.ot_id, ot.estado, ot.empleado_id, ot.fecha_programada, ot.fecha_cierre,
                   ot.observaciones, ot.direccion_intervencion, ot.created_at, ot.updated_at,
                   e.nombre || ' ' || e.apellido AS operario, e.rol_interno,
                   COALESCE(i.cuadrilla_id, ec.cuadrilla_id) AS cuadrilla_id,
                   cu.nombre AS cuadrilla, cu.zona,
                   r.reclamo_id, r.descripcion, r.estado AS estado_reclamo,
                   s.nombre AS socio_nombre, s.apellido AS socio_apellido, s.telefono AS socio_telefono,
                   c.numero_cuenta, t.nombre AS tipo_reclamo, p.nombre AS prioridad,
                   CASE WHEN idet.itdet_id IS NOT NULL THEN 1 ELSE 0 END AS es_itinerario
            FROM orden_trabajo ot
            JOIN reclamo r ON ot.reclamo_id = r.reclamo_id
            JOIN detalle_tipo_reclamo d ON r.detalle_id = d.detalle_id
            JOIN tipo_reclamo t ON d.tipo_id = t.tipo_id
            JOIN prioridad p ON r.prioridad_id = p.prioridad_id
            JOIN cuenta c ON r.cuenta_id = c.cuenta_id
            JOIN socio s ON c.socio_id = s.socio_id
            LEFT JOIN empleado e ON ot.empleado_id = e.empleado_id
            LEFT JOIN empleado_cuadrilla ec ON e.empleado_id = ec.empleado_id AND ec.activa = 1
            LEFT JOIN itinerario_det idet ON ot.ot_id = idet.ot_id
            LEFT JOIN itinerario i ON idet.itinerario_id = i.itinerario_id
            LEFT JOIN cuadrilla cu ON cu.cuadrilla_id = COALESCE(i.cuadrilla_id, ec.cuadrilla_id)
            WHERE t.nombre = 'TECNICO'
        """
        params = []
        if estado:
            query += " AND ot.estado = ?"
            params.append(estado)
        if empleado_id:
            query += " AND ot.empleado_id = ?"
            params.append(empleado_id)
        if cuadrilla_id:
            query += " AND COALESCE(i.cuadrilla_id, ec.cuadrilla_id) = ?"
            params.append(cuadrilla_id)
        query += f" ORDER BY {_ESTADO_ORDEN_SQL}, ot.created_at DESC LIMIT ? OFFSET ?"
        params.extend([limite, offset])
        return self._all(query, params)

    def get_technical_detail(self, ot_id: int) -> Optional[dict]:
        return self._one("""
            SELECT ot.ot_id, ot.estado, ot.empleado_id, ot.fecha_programada, ot.fecha_cierre,
                   ot.observaciones, ot.direccion_intervencion, ot.created_at, ot.updated_at,
                   e.nombre || ' ' || e.apellido AS operario, e.legajo AS operario_legajo,
                   e.rol_interno AS operario_rol,
                   COALESCE(i.cuadrilla_id, ec.cuadrilla_id) AS cuadrilla_id,
                   cu.nombre AS cuadrilla, cu.zona AS cuadrilla_zona,
                   i.fecha AS fecha_itinerario,
                   r.reclamo_id, r.descripcion AS reclamo_descripcion, r.estado AS estado_reclamo,
                   r.fecha_alta AS reclamo_fecha,
                   s.socio_id, s.nombre AS socio_nombre, s.apellido AS socio_apellido,
                   s.telefono AS socio_telefono, s.email AS socio_email,
                   c.cuenta_id, c.numero_cuenta, c.direccion AS cuenta_direccion,
                   t.nombre AS tipo_reclamo, d.nombre AS detalle_tipo, p.nombre AS prioridad
            FROM orden_trabajo ot
            JOIN reclamo r ON ot.reclamo_id = r.reclamo_id
            JOIN detalle_tipo_reclamo d ON r.detalle_id = d.detalle_id
            JOIN tipo_reclamo t ON d.tipo_id = t.tipo_id
            JOIN prioridad p ON r.prioridad_id = p.prioridad_id
            JOIN cuenta c ON r.cuenta_id = c.cuenta_id
            JOIN socio s ON c.socio_id = s.socio_id
            LEFT JOIN empleado e ON ot.empleado_id = e.empleado_id
            LEFT JOIN empleado_cuadrilla ec ON e.empleado_id = ec.empleado_id AND ec.activa = 1
            LEFT JOIN itinerario_det idet ON ot.ot_id = idet.ot_id
            LEFT JOIN itinerario i ON idet.itinerario_id = i.itinerario_id
            LEFT JOIN cuadrilla cu ON cu.cuadrilla_id = COALESCE(i.cuadrilla_id, ec.cuadrilla_id)
            WHERE ot.ot_id = ? AND t.nombre = 'TECNICO'
        """, (ot_id,))
