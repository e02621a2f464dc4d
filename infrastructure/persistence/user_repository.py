from typing import Optional

from domain.models import User, UserRole
from infrastructure.persistence.database import BaseRepository


class UserRepository(BaseRepository):

    def _row_to_user(self, row) -> User:
        return User(
            usuario_id=row['usuario_id'],
            email=row['email'],
            password_hash=row['password_hash'],
            rol=UserRole(row['rol']),
            socio_id=row['socio_id'],
            empleado_id=row['empleado_id'],
            activo=bool(row['activo'])
        )

    def get_by_email(self, email: str) -> Optional[User]:
        row = self.conn.execute("SELECT * FROM usuario WHERE email = ?", (email.strip().lower(),)).fetchone()
        if row:
            return self._row_to_user(row)
        return None

    def get_by_id(self, usuario_id: int) -> Optional[User]:
        row = self.conn.execute("SELECT * FROM usuario WHERE usuario_id = ?", (usuario_id,)).fetchone()
        if row:
            return self._row_to_user(row)
        return None

    def create(self, user: User) -> User:
        cursor = self.conn.execute("""
            INSERT INTO usuario (email, password_hash, rol, socio_id, empleado_id, activo)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (user.email.strip().lower(), user.password_hash,
              user.rol.value if isinstance(user.rol, UserRole) else user.rol,
              user.socio_id, user.empleado_id, int(user.activo)))
        user.usuario_id = cursor.lastrowid
        return user
