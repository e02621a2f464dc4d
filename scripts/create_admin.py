# create_admin.py

import os
import sqlite3
import sys

# Raíz del proyecto en el path para las importaciones
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from werkzeug.security import generate_password_hash

from domain.models import User, UserRole
from infrastructure.log import setup_logging
from infrastructure.persistence.user_repository import UserRepository
from scripts.init_db import crear_tablas

# --- Administrador a Crear ---
# Se toman del entorno; los valores por defecto deben cambiarse tras el primer ingreso.
ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL', 'admin@cooperativa.local')
ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'password')


def crear_admin_inicial(db):
    """
    Crea el usuario administrador inicial si no existe.
    Este script debe ejecutarse una vez durante la configuración inicial del sistema.
    """
    print("--- Asistente de Creación de Administrador ---")

    try:
        with db.transaction() as conn:
            UserRepository(conn).create(User(
                email=ADMIN_EMAIL,
                password_hash=generate_password_hash(ADMIN_PASSWORD),
                rol=UserRole.ADMIN
            ))
        print(f"✅ Usuario administrador '{ADMIN_EMAIL}' creado con éxito.")
        print("¡No olvides cambiar la contraseña por defecto!")
    except sqlite3.IntegrityError:
        print(f"⚠️  El usuario administrador '{ADMIN_EMAIL}' ya existe. No se realizaron cambios.")


if __name__ == '__main__':
    setup_logging("scripts", enable_file=False)
    # 1. Asegurarse de que la estructura de la base de datos exista
    database = crear_tablas(os.environ.get('FLASK_CONFIG', 'default'))
    # 2. Intentar crear el usuario administrador
    crear_admin_inicial(database)
