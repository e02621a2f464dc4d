from typing import Optional


class DomainError(Exception):
    """Error de negocio con el código HTTP que le corresponde en la API."""
    status_code = 500

    def __init__(self, mensaje: str):
        super().__init__(mensaje)
        self.mensaje = mensaje


class ValidationError(DomainError):
    status_code = 400


class ForbiddenError(DomainError):
    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    status_code = 409


class InvalidTransitionError(ConflictError):
    """El recurso no está en un estado desde el que se permita el cambio pedido."""

    def __init__(self, entidad: str, estado_actual, estado_destino, mensaje: Optional[str] = None):
        actual = getattr(estado_actual, 'value', estado_actual)
        destino = getattr(estado_destino, 'value', estado_destino)
        super().__init__(mensaje or f"{entidad}: no se puede pasar de {actual} a {destino}")
        self.entidad = entidad
        self.estado_actual = actual
        self.estado_destino = destino
