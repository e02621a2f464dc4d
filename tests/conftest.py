# Configuración común de pytest: aplicación de pruebas sobre una base SQLite temporal

import pytest
from werkzeug.security import generate_password_hash

from app import create_app
from application.services.claim_service import ClaimService
from application.services.crew_service import CrewService
from application.services.invoice_service import InvoiceService
from application.services.itinerary_service import ItineraryService
from application.services.metrics_service import MetricsService
from application.services.rating_service import RatingService
from application.services.work_order_service import WorkOrderService
from config import TestingConfig

PASSWORD = 'secreto123'
_PASSWORD_HASH = generate_password_hash(PASSWORD)

# Detalles del catálogo base
DETALLE_CORTE = 1           # TECNICO
DETALLE_FACTURACION = 4     # ADMINISTRATIVO

SEED_SQL = """
INSERT INTO socio (socio_id, nombre, apellido, dni, email, telefono) VALUES
    (1, 'Ana', 'Pérez', '20111222', 'ana@example.com', '3794-111111'),
    (2, 'Bruno', 'Díaz', '20333444', 'bruno@example.com', '3794-222222');

INSERT INTO cuenta (cuenta_id, socio_id, numero_cuenta, direccion, localidad) VALUES
    (1, 1, 'CTA-0001', 'Av. San Martín 123', 'Corrientes'),
    (2, 2, 'CTA-0002', 'Belgrano 456', 'Corrientes');

INSERT INTO empleado (empleado_id, nombre, apellido, legajo, rol_interno, activo) VALUES
    (1, 'Carlos', 'Gómez', 'OP-001', 'Electricista', 1),
    (2, 'Diego', 'Ruiz', 'OP-002', 'Electricista', 1),
    (3, 'Elena', 'Sosa', 'AD-003', 'Administrativa', 1),
    (4, 'Hugo', 'Vera', 'OP-004', 'Electricista', 0),
    (5, 'Federico', 'Luna', 'OP-005', 'Electricista', 1);

INSERT INTO cuadrilla (cuadrilla_id, nombre, zona) VALUES
    (1, 'Cuadrilla Norte', 'Norte'),
    (2, 'Cuadrilla Sur', 'Sur'),
    (3, 'Cuadrilla Reserva', 'Centro');

INSERT INTO empleado_cuadrilla (empleado_id, cuadrilla_id) VALUES
    (1, 1),
    (2, 1),
    (5, 2);

INSERT INTO factura (factura_id, cuenta_id, periodo, importe, vencimiento, estado) VALUES
    (1, 1, '2026-09', 1500.0, '2026-10-10', 'PENDIENTE'),
    (2, 1, '2026-08', 1200.0, '2026-09-10', 'PAGADA'),
    (3, 2, '2026-09', 980.5, '2026-10-10', 'VENCIDA');
"""

USUARIOS = [
    # (usuario_id, email, rol, socio_id, empleado_id)
    (1, 'ana@example.com', 'CLIENTE', 1, None),
    (2, 'bruno@example.com', 'CLIENTE', 2, None),
    (3, 'carlos@cooperativa.local', 'OPERARIO', None, 1),
    (4, 'diego@cooperativa.local', 'OPERARIO', None, 2),
    (5, 'federico@cooperativa.local', 'OPERARIO', None, 5),
    (6, 'admin@cooperativa.local', 'ADMIN', None, None),
]


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setattr(TestingConfig, 'DB_FILE', str(tmp_path / 'cooperativa_test.db'))
    app = create_app('testing')

    with app.extensions['database'].connection() as conn:
        conn.executescript(SEED_SQL)
        conn.executemany(
            "INSERT INTO usuario (usuario_id, email, password_hash, rol, socio_id, empleado_id) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            [(uid, email, _PASSWORD_HASH, rol, socio, empleado)
             for uid, email, rol, socio, empleado in USUARIOS])
    return app


@pytest.fixture
def db(app):
    return app.extensions['database']


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login_as(client):
    """Escribe la identidad directamente en la sesión del cliente de pruebas."""
    def _login(rol, usuario_id=1, socio_id=None, empleado_id=None):
        with client.session_transaction() as sess:
            sess['usuario_id'] = usuario_id
            sess['rol'] = rol
            sess['socio_id'] = socio_id
            sess['empleado_id'] = empleado_id
        return client
    return _login


@pytest.fixture
def claims(db):
    return ClaimService(db)


@pytest.fixture
def work_orders(db):
    return WorkOrderService(db)


@pytest.fixture
def crews(db):
    return CrewService(db)


@pytest.fixture
def itineraries(db):
    return ItineraryService(db)


@pytest.fixture
def ratings(db):
    return RatingService(db)


@pytest.fixture
def invoices(db):
    return InvoiceService(db)


@pytest.fixture
def metrics(db):
    return MetricsService(db)


@pytest.fixture
def reclamo_tecnico(claims):
    """Reclamo técnico del socio 1 con su OT pendiente."""
    return claims.create_claim(1, 1, DETALLE_CORTE, 'Sin luz en toda la cuadra', prioridad_id=1)


@pytest.fixture
def reclamo_administrativo(claims):
    """Reclamo administrativo del socio 1 con su OT pendiente."""
    return claims.create_claim(1, 1, DETALLE_FACTURACION, 'Me facturaron dos veces el mismo período')
