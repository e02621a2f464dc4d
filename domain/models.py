from dataclasses import dataclass, fields
from enum import Enum
from typing import Dict, FrozenSet, Optional

from domain.errors import InvalidTransitionError, ValidationError

class UserRole(Enum):
    CLIENTE = "CLIENTE"
    OPERARIO = "OPERARIO"
    ADMIN = "ADMIN"

class ClaimType(Enum):
    ADMINISTRATIVO = "ADMINISTRATIVO"
    TECNICO = "TECNICO"

class ClaimStatus(Enum):
    PENDIENTE = "PENDIENTE"
    EN_PROCESO = "EN_PROCESO"
    RESUELTO = "RESUELTO"
    CERRADO = "CERRADO"

class WorkOrderStatus(Enum):
    PENDIENTE = "PENDIENTE"
    ASIGNADA = "ASIGNADA"
    EN_PROCESO = "EN_PROCESO"
    COMPLETADA = "COMPLETADA"
    CANCELADA = "CANCELADA"
    CERRADO = "CERRADO"  # solo OTs administrativas

class InvoiceStatus(Enum):
    PENDIENTE = "PENDIENTE"
    PAGADA = "PAGADA"
    VENCIDA = "VENCIDA"

CLAIM_TERMINAL = frozenset({ClaimStatus.RESUELTO, ClaimStatus.CERRADO})

# Transiciones permitidas: estado actual -> estados destino
CLAIM_TRANSITIONS: Dict[ClaimStatus, FrozenSet[ClaimStatus]] = {
    ClaimStatus.PENDIENTE: frozenset({ClaimStatus.EN_PROCESO, ClaimStatus.RESUELTO, ClaimStatus.CERRADO}),
    ClaimStatus.EN_PROCESO: frozenset({ClaimStatus.PENDIENTE, ClaimStatus.RESUELTO, ClaimStatus.CERRADO}),
    ClaimStatus.RESUELTO: frozenset({ClaimStatus.CERRADO}),
    ClaimStatus.CERRADO: frozenset(),
}

ADMIN_WORK_ORDER_TRANSITIONS: Dict[WorkOrderStatus, FrozenSet[WorkOrderStatus]] = {
    WorkOrderStatus.PENDIENTE: frozenset({WorkOrderStatus.EN_PROCESO, WorkOrderStatus.CERRADO}),
    WorkOrderStatus.EN_PROCESO: frozenset({WorkOrderStatus.CERRADO}),
    WorkOrderStatus.CERRADO: frozenset(),
}

TECH_WORK_ORDER_TRANSITIONS: Dict[WorkOrderStatus, FrozenSet[WorkOrderStatus]] = {
    WorkOrderStatus.PENDIENTE: frozenset({WorkOrderStatus.ASIGNADA, WorkOrderStatus.CANCELADA}),
    WorkOrderStatus.ASIGNADA: frozenset({WorkOrderStatus.EN_PROCESO, WorkOrderStatus.CANCELADA}),
    WorkOrderStatus.EN_PROCESO: frozenset({WorkOrderStatus.COMPLETADA}),
    WorkOrderStatus.COMPLETADA: frozenset(),
    WorkOrderStatus.CANCELADA: frozenset(),
}


def allowed_sources(table: Dict[Enum, FrozenSet[Enum]], destino: Enum) -> list:
    """Estados desde los que se puede llegar a `destino`, en orden de declaración."""
    return [origen for origen, destinos in table.items() if destino in destinos]


def check_transition(entidad: str, table: Dict[Enum, FrozenSet[Enum]], actual: Enum, destino: Enum) -> None:
    if destino not in table.get(actual, frozenset()):
        raise InvalidTransitionError(entidad, actual, destino)


def parse_status(enum_cls, value):
    """Convierte texto de entrada a un Enum de estado; ValidationError si no existe."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value or '').strip().upper())
    except ValueError:
        validos = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"Estado inválido: {value}. Valores permitidos: {validos}")


def as_dict(obj) -> dict:
    """Convierte una entidad a dict serializable (los Enum pasan a su valor)."""
    data = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        data[f.name] = value.value if isinstance(value, Enum) else value
    return data

@dataclass
class User:
    email: str
    password_hash: str
    rol: UserRole = UserRole.CLIENTE
    socio_id: Optional[int] = None
    empleado_id: Optional[int] = None
    activo: bool = True
    usuario_id: Optional[int] = None

@dataclass
class Claim:
    cuenta_id: int
    detalle_id: int
    descripcion: str
    prioridad_id: int = 2
    canal: str = "WEB"
    estado: ClaimStatus = ClaimStatus.PENDIENTE
    operario_asignado_id: Optional[int] = None
    observaciones_cierre: Optional[str] = None
    fecha_alta: Optional[str] = None
    fecha_cierre: Optional[str] = None
    reclamo_id: Optional[int] = None

@dataclass
class WorkOrder:
    reclamo_id: int
    estado: WorkOrderStatus = WorkOrderStatus.PENDIENTE
    empleado_id: Optional[int] = None
    direccion_intervencion: Optional[str] = None
    observaciones: Optional[str] = None
    fecha_programada: Optional[str] = None
    fecha_cierre: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    ot_id: Optional[int] = None

@dataclass
class Employee:
    nombre: str
    apellido: str
    legajo: Optional[str] = None
    rol_interno: Optional[str] = None
    activo: bool = True
    empleado_id: Optional[int] = None

    @property
    def nombre_completo(self) -> str:
        return f"{self.nombre} {self.apellido}"

@dataclass
class Crew:
    nombre: str
    zona: Optional[str] = None
    activa: bool = True
    cuadrilla_id: Optional[int] = None

@dataclass
class Rating:
    reclamo_id: int
    socio_id: int
    calificacion: int
    comentario: Optional[str] = None
    fecha_valoracion: Optional[str] = None
    valoracion_id: Optional[int] = None

@dataclass
class Invoice:
    cuenta_id: int
    periodo: str
    importe: float
    vencimiento: str
    estado: InvoiceStatus = InvoiceStatus.PENDIENTE
    monto_pagado: Optional[float] = None
    metodo_pago: Optional[str] = None
    comprobante: Optional[str] = None
    fecha_pago: Optional[str] = None
    factura_id: Optional[int] = None
