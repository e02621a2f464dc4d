# init_db.py

import os
import sys

# Raíz del proyecto en el path para las importaciones
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config import config_dict
from infrastructure.log import setup_logging
from infrastructure.persistence.database import Database


def crear_tablas(config_name='default'):
    """
    Crea las tablas del proyecto (si no existen) y carga los catálogos base:
    tipos de reclamo, detalles y prioridades.
    """
    config = config_dict[config_name]
    db = Database(config.DB_FILE)
    db.init_schema(seed_catalogs=True)
    print(f"✅ Base de datos lista: {config.DB_FILE}")
    return db


if __name__ == '__main__':
    setup_logging("scripts", enable_file=False)
    crear_tablas(os.environ.get('FLASK_CONFIG', 'default'))
