
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS socio (
    socio_id INTEGER PRIMARY KEY AUTOINCREMENT,
    nombre TEXT NOT NULL,
    apellido TEXT NOT NULL,
    dni TEXT UNIQUE,
    email TEXT,
    telefono TEXT,
    activo INTEGER NOT NULL DEFAULT 1,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS cuenta (
    cuenta_id INTEGER PRIMARY KEY AUTOINCREMENT,
    socio_id INTEGER NOT NULL,
    numero_cuenta TEXT UNIQUE NOT NULL,
    direccion TEXT,
    localidad TEXT,
    activa INTEGER NOT NULL DEFAULT 1,
    FOREIGN KEY (socio_id) REFERENCES socio (socio_id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS tipo_reclamo (
    tipo_id INTEGER PRIMARY KEY AUTOINCREMENT,
    nombre TEXT UNIQUE NOT NULL,
    descripcion TEXT
);

CREATE TABLE IF NOT EXISTS detalle_tipo_reclamo (
    detalle_id INTEGER PRIMARY KEY AUTOINCREMENT,
    tipo_id INTEGER NOT NULL,
    nombre TEXT NOT NULL,
    activo INTEGER NOT NULL DEFAULT 1,
    FOREIGN KEY (tipo_id) REFERENCES tipo_reclamo (tipo_id)
);

CREATE TABLE IF NOT EXISTS prioridad (
    prioridad_id INTEGER PRIMARY KEY AUTOINCREMENT,
    nombre TEXT UNIQUE NOT NULL
);

CREATE TABLE IF NOT EXISTS empleado (
    empleado_id INTEGER PRIMARY KEY AUTOINCREMENT,
    nombre TEXT NOT NULL,
    apellido TEXT NOT NULL,
    legajo TEXT UNIQUE,
    rol_interno TEXT,
    activo INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS cuadrilla (
    cuadrilla_id INTEGER PRIMARY KEY AUTOINCREMENT,
    nombre TEXT UNIQUE NOT NULL,
    zona TEXT,
    activa INTEGER NOT NULL DEFAULT 1,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS empleado_cuadrilla (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    empleado_id INTEGER NOT NULL,
    cuadrilla_id INTEGER NOT NULL,
    fecha_asignacion TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    activa INTEGER NOT NULL DEFAULT 1,
    FOREIGN KEY (empleado_id) REFERENCES empleado (empleado_id) ON DELETE CASCADE,
    FOREIGN KEY (cuadrilla_id) REFERENCES cuadrilla (cuadrilla_id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS usuario (
    usuario_id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT UNIQUE NOT NULL,
    password_hash TEXT NOT NULL,
    rol TEXT NOT NULL CHECK (rol IN ('CLIENTE', 'OPERARIO', 'ADMIN')),
    socio_id INTEGER,
    empleado_id INTEGER,
    activo INTEGER NOT NULL DEFAULT 1,
    FOREIGN KEY (socio_id) REFERENCES socio (socio_id) ON DELETE SET NULL,
    FOREIGN KEY (empleado_id) REFERENCES empleado (empleado_id) ON DELETE SET NULL
);

CREATE TABLE IF NOT EXISTS reclamo (
    reclamo_id INTEGER PRIMARY KEY AUTOINCREMENT,
    cuenta_id INTEGER NOT NULL,
    detalle_id INTEGER NOT NULL,
    descripcion TEXT NOT NULL,
    prioridad_id INTEGER NOT NULL DEFAULT 2,
    canal TEXT NOT NULL DEFAULT 'WEB',
    estado TEXT NOT NULL DEFAULT 'PENDIENTE'
        CHECK (estado IN ('PENDIENTE', 'EN_PROCESO', 'RESUELTO', 'CERRADO')),
    operario_asignado_id INTEGER,
    observaciones_cierre TEXT,
    fecha_alta TIMESTAMP NOT NULL,
    fecha_cierre TIMESTAMP,
    updated_at TIMESTAMP,
    CHECK ((estado IN ('RESUELTO', 'CERRADO')) = (fecha_cierre IS NOT NULL)),
    FOREIGN KEY (cuenta_id) REFERENCES cuenta (cuenta_id),
    FOREIGN KEY (detalle_id) REFERENCES detalle_tipo_reclamo (detalle_id),
    FOREIGN KEY (prioridad_id) REFERENCES prioridad (prioridad_id),
    FOREIGN KEY (operario_asignado_id) REFERENCES empleado (empleado_id) ON DELETE SET NULL
);

CREATE TABLE IF NOT EXISTS orden_trabajo (
    ot_id INTEGER PRIMARY KEY AUTOINCREMENT,
    reclamo_id INTEGER UNIQUE NOT NULL,
    empleado_id INTEGER,
    estado TEXT NOT NULL DEFAULT 'PENDIENTE'
        CHECK (estado IN ('PENDIENTE', 'ASIGNADA', 'EN_PROCESO', 'COMPLETADA', 'CANCELADA', 'CERRADO')),
    fecha_programada TEXT,
    fecha_cierre TIMESTAMP,
    direccion_intervencion TEXT,
    observaciones TEXT,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP,
    FOREIGN KEY (reclamo_id) REFERENCES reclamo (reclamo_id) ON DELETE CASCADE,
    FOREIGN KEY (empleado_id) REFERENCES empleado (empleado_id) ON DELETE SET NULL
);

CREATE TABLE IF NOT EXISTS itinerario (
    itinerario_id INTEGER PRIMARY KEY AUTOINCREMENT,
    cuadrilla_id INTEGER NOT NULL,
    fecha DATE NOT NULL,
    estado TEXT NOT NULL DEFAULT 'PLANIFICADO',
    UNIQUE (cuadrilla_id, fecha),
    FOREIGN KEY (cuadrilla_id) REFERENCES cuadrilla (cuadrilla_id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS itinerario_det (
    itdet_id INTEGER PRIMARY KEY AUTOINCREMENT,
    itinerario_id INTEGER NOT NULL,
    ot_id INTEGER UNIQUE NOT NULL,
    orden INTEGER NOT NULL,
    FOREIGN KEY (itinerario_id) REFERENCES itinerario (itinerario_id) ON DELETE CASCADE,
    FOREIGN KEY (ot_id) REFERENCES orden_trabajo (ot_id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS valoracion (
    valoracion_id INTEGER PRIMARY KEY AUTOINCREMENT,
    reclamo_id INTEGER NOT NULL,
    socio_id INTEGER NOT NULL,
    calificacion INTEGER NOT NULL CHECK (calificacion BETWEEN 1 AND 5),
    comentario TEXT,
    fecha_valoracion TIMESTAMP NOT NULL,
    UNIQUE (reclamo_id, socio_id),
    FOREIGN KEY (reclamo_id) REFERENCES reclamo (reclamo_id) ON DELETE CASCADE,
    FOREIGN KEY (socio_id) REFERENCES socio (socio_id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS factura (
    factura_id INTEGER PRIMARY KEY AUTOINCREMENT,
    cuenta_id INTEGER NOT NULL,
    periodo TEXT NOT NULL,
    importe REAL NOT NULL,
    vencimiento DATE NOT NULL,
    estado TEXT NOT NULL DEFAULT 'PENDIENTE' CHECK (estado IN ('PENDIENTE', 'PAGADA', 'VENCIDA')),
    monto_pagado REAL,
    metodo_pago TEXT,
    comprobante TEXT,
    fecha_pago TIMESTAMP,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (cuenta_id) REFERENCES cuenta (cuenta_id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_reclamo_cuenta ON reclamo (cuenta_id, fecha_alta);
CREATE INDEX IF NOT EXISTS idx_reclamo_estado ON reclamo (estado, prioridad_id);
CREATE INDEX IF NOT EXISTS idx_ot_estado ON orden_trabajo (estado, empleado_id);
CREATE INDEX IF NOT EXISTS idx_valoracion_fecha ON valoracion (fecha_valoracion);
CREATE INDEX IF NOT EXISTS idx_factura_cuenta ON factura (cuenta_id, estado);
"""

# Catálogos mínimos: los ids de tipo y prioridad se usan como constantes en consultas y tests
CATALOG_SEED_SQL = """
INSERT OR IGNORE INTO tipo_reclamo (tipo_id, nombre, descripcion) VALUES
    (1, 'TECNICO', 'Reclamos que requieren intervención en campo'),
    (2, 'ADMINISTRATIVO', 'Reclamos resueltos por personal de oficina');

INSERT OR IGNORE INTO prioridad (prioridad_id, nombre) VALUES
    (1, 'Alta'),
    (2, 'Media'),
    (3, 'Baja');

INSERT OR IGNORE INTO detalle_tipo_reclamo (detalle_id, tipo_id, nombre) VALUES
    (1, 1, 'Corte de suministro'),
    (2, 1, 'Baja tensión'),
    (3, 1, 'Poste o cable caído'),
    (4, 2, 'Error de facturación'),
    (5, 2, 'Cambio de titularidad');
"""
