from flask import current_app, g

from infrastructure.persistence.database import Database


def get_db() -> Database:
    return current_app.extensions['database']


def servicio(clase):
    """Instancia del servicio para la petición en curso (se reutiliza dentro de la misma petición)."""
    cache = g.setdefault('servicios', {})
    if clase not in cache:
        cache[clase] = clase(get_db())
    return cache[clase]
