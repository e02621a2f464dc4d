from typing import List

from domain.errors import NotFoundError
from domain.models import as_dict
from infrastructure.persistence.catalog_repository import StaffRepository
from infrastructure.persistence.database import Database


class CrewService:
    """Consultas de cuadrillas y sus operarios, para armar los itinerarios."""

    def __init__(self, db: Database):
        self.db = db

    def list_active(self) -> List[dict]:
        with self.db.connection() as conn:
            return StaffRepository(conn).list_active_crews()

    def get_crew(self, cuadrilla_id: int) -> dict:
        with self.db.connection() as conn:
            cuadrilla = StaffRepository(conn).get_crew(cuadrilla_id)
        if cuadrilla is None:
            raise NotFoundError("Cuadrilla no encontrada")
        return as_dict(cuadrilla)

    def list_operators(self, cuadrilla_id: int) -> List[dict]:
        with self.db.connection() as conn:
            staff = StaffRepository(conn)
            if staff.get_crew(cuadrilla_id) is None:
                raise NotFoundError("Cuadrilla no encontrada")
            return staff.list_crew_operators(cuadrilla_id)

    def list_available_operators(self) -> List[dict]:
        with self.db.connection() as conn:
            return StaffRepository(conn).list_available_operators()

    def crew_of_operator(self, empleado_id: int) -> dict:
        with self.db.connection() as conn:
            cuadrilla = StaffRepository(conn).get_active_crew_of(empleado_id)
        if cuadrilla is None:
            raise NotFoundError("El operario no tiene cuadrilla asignada")
        return cuadrilla

    def statistics(self, cuadrilla_id: int) -> dict:
        with self.db.connection() as conn:
            estadisticas = StaffRepository(conn).crew_statistics(cuadrilla_id)
        if estadisticas is None:
            raise NotFoundError("Cuadrilla no encontrada")
        return estadisticas
