from typing import List, Optional

from domain.models import Crew, Employee
from infrastructure.persistence.database import BaseRepository


class CatalogRepository(BaseRepository):
    """Consultas sobre socios, cuentas y el catálogo de tipos de reclamo."""

    def get_account(self, cuenta_id: int) -> Optional[dict]:
        return self._one("SELECT * FROM cuenta WHERE cuenta_id = ?", (cuenta_id,))

    def list_accounts_by_member(self, socio_id: int) -> List[dict]:
        return self._all("SELECT * FROM cuenta WHERE socio_id = ? ORDER BY numero_cuenta", (socio_id,))

    def get_member(self, socio_id: int) -> Optional[dict]:
        return self._one("SELECT * FROM socio WHERE socio_id = ?", (socio_id,))

    def get_category(self, detalle_id: int) -> Optional[dict]:
        return self._one("""
            SELECT d.detalle_id, d.nombre AS detalle, d.activo, t.tipo_id, t.nombre AS tipo
            FROM detalle_tipo_reclamo d
            JOIN tipo_reclamo t ON d.tipo_id = t.tipo_id
            WHERE d.detalle_id = ?
        """, (detalle_id,))

    def priority_exists(self, prioridad_id: int) -> bool:
        return self._scalar("SELECT COUNT(*) FROM prioridad WHERE prioridad_id = ?", (prioridad_id,)) > 0


class StaffRepository(BaseRepository):
    """Empleados, cuadrillas y su pertenencia."""

    def _row_to_employee(self, row) -> Employee:
        return Employee(
            empleado_id=row['empleado_id'],
            nombre=row['nombre'],
            apellido=row['apellido'],
            legajo=row['legajo'],
            rol_interno=row['rol_interno'],
            activo=bool(row['activo'])
        )

    def get_employee(self, empleado_id: int) -> Optional[Employee]:
        row = self.conn.execute("SELECT * FROM empleado WHERE empleado_id = ?", (empleado_id,)).fetchone()
        if row:
            return self._row_to_employee(row)
        return None

    def get_crew(self, cuadrilla_id: int) -> Optional[Crew]:
        row = self.conn.execute("SELECT * FROM cuadrilla WHERE cuadrilla_id = ?", (cuadrilla_id,)).fetchone()
        if row:
            return Crew(
                cuadrilla_id=row['cuadrilla_id'],
                nombre=row['nombre'],
                zona=row['zona'],
                activa=bool(row['activa'])
            )
        return None

    def count_active_operators(self, cuadrilla_id: int) -> int:
        return self._scalar("""
            SELECT COUNT(*)
            FROM empleado_cuadrilla ec
            JOIN empleado e ON ec.empleado_id = e.empleado_id
            WHERE ec.cuadrilla_id = ? AND ec.activa = 1 AND e.activo = 1
        """, (cuadrilla_id,))

    def get_active_crew_of(self, empleado_id: int) -> Optional[dict]:
        return self._one("""
            SELECT c.cuadrilla_id, c.nombre, c.zona
            FROM empleado_cuadrilla ec
            JOIN cuadrilla c ON ec.cuadrilla_id = c.cuadrilla_id
            WHERE ec.empleado_id = ? AND ec.activa = 1 AND c.activa = 1
            ORDER BY ec.fecha_asignacion DESC
            LIMIT 1
        """, (empleado_id,))

    def is_active_member(self, empleado_id: int, cuadrilla_id: int) -> bool:
        return self._scalar("""
            SELECT COUNT(*)
            FROM empleado_cuadrilla ec
            JOIN empleado e ON ec.empleado_id = e.empleado_id
            WHERE ec.empleado_id = ? AND ec.cuadrilla_id = ? AND ec.activa = 1 AND e.activo = 1
        """, (empleado_id, cuadrilla_id)) > 0

    # --- Consultas de cuadrillas ---
    def list_active_crews(self) -> List[dict]:
        return self._all("""
            SELECT c.cuadrilla_id, c.nombre, c.zona, c.activa, c.created_at,
                   COUNT(ec.empleado_id) AS miembros_count
            FROM cuadrilla c
            LEFT JOIN empleado_cuadrilla ec ON c.cuadrilla_id = ec.cuadrilla_id AND ec.activa = 1
            WHERE c.activa = 1
            GROUP BY c.cuadrilla_id, c.nombre, c.zona, c.activa, c.created_at
            ORDER BY c.nombre
        """)

    def list_crew_operators(self, cuadrilla_id: int) -> List[dict]:
        return self._all("""
            SELECT e.empleado_id, e.nombre, e.apellido,
                   e.nombre || ' ' || e.apellido AS nombre_completo,
                   e.legajo, e.rol_interno, ec.fecha_asignacion
            FROM empleado_cuadrilla ec
            JOIN empleado e ON ec.empleado_id = e.empleado_id
            WHERE ec.cuadrilla_id = ? AND ec.activa = 1 AND e.activo = 1
            ORDER BY e.apellido, e.nombre
        """, (cuadrilla_id,))

    def list_available_operators(self) -> List[dict]:
        """Empleados activos con cuadrilla activa, sin personal administrativo."""
        return self._all("""
            SELECT DISTINCT e.empleado_id, e.nombre, e.apellido,
                   e.nombre || ' ' || e.apellido AS nombre_completo,
                   e.legajo, e.rol_interno,
                   c.cuadrilla_id, c.nombre AS cuadrilla, c.zona
            FROM empleado e
            JOIN empleado_cuadrilla ec ON e.empleado_id = ec.empleado_id
            JOIN cuadrilla c ON ec.cuadrilla_id = c.cuadrilla_id
            WHERE e.activo = 1 AND ec.activa = 1 AND c.activa = 1
              AND UPPER(COALESCE(e.rol_interno, '')) NOT LIKE '%ADMINISTRA%'
            ORDER BY e.apellido, e.nombre
        """)

    def crew_statistics(self, cuadrilla_id: int) -> Optional[dict]:
        return self._one("""
            SELECT c.cuadrilla_id, c.nombre AS cuadrilla, c.zona,
                   COUNT(DISTINCT ec.empleado_id) AS total_operarios,
                   COUNT(DISTINCT CASE WHEN ot.estado = 'ASIGNADA' THEN ot.ot_id END) AS ots_asignadas,
                   COUNT(DISTINCT CASE WHEN ot.estado = 'EN_PROCESO' THEN ot.ot_id END) AS ots_en_proceso,
                   COUNT(DISTINCT CASE WHEN ot.estado = 'COMPLETADA' THEN ot.ot_id END) AS ots_completadas
            FROM cuadrilla c
            LEFT JOIN empleado_cuadrilla ec ON c.cuadrilla_id = ec.cuadrilla_id AND ec.activa = 1
            LEFT JOIN orden_trabajo ot ON ec.empleado_id = ot.empleado_id
            WHERE c.cuadrilla_id = ?
            GROUP BY c.cuadrilla_id, c.nombre, c.zona
        """, (cuadrilla_id,))
