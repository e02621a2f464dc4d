import logging
from typing import List, Optional

from domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from domain.models import InvoiceStatus, as_dict, parse_status
from infrastructure.persistence.database import Database
from infrastructure.persistence.invoice_repository import InvoiceRepository

logger = logging.getLogger(__name__)

METODOS_PAGO = ("TARJETA", "TRANSFERENCIA", "EFECTIVO", "DEBITO_AUTOMATICO")


class InvoiceService:
    def __init__(self, db: Database):
        self.db = db

    def list_by_member(self, socio_id: int, estado: Optional[str] = None,
                       limite: int = 10, offset: int = 0) -> List[dict]:
        if estado:
            estado = parse_status(InvoiceStatus, estado).value
        with self.db.connection() as conn:
            return InvoiceRepository(conn).list_by_member(socio_id, estado, limite, offset)

    def get_for_member(self, factura_id: int, socio_id: int) -> dict:
        with self.db.connection() as conn:
            factura = InvoiceRepository(conn).get_detail(factura_id)
        if factura is None:
            raise NotFoundError("Factura no encontrada")
        if factura['socio_id'] != socio_id:
            raise ForbiddenError("La factura no pertenece al socio")
        return factura

    def summary_by_member(self, socio_id: int) -> dict:
        with self.db.connection() as conn:
            return InvoiceRepository(conn).summary_by_member(socio_id)

    def register_payment(self, factura_id: int, socio_id: int, monto, metodo_pago: str = "TARJETA",
                         comprobante: Optional[str] = None) -> dict:
        try:
            monto = float(monto)
        except (TypeError, ValueError):
            raise ValidationError("El monto debe ser un número positivo")
        if monto <= 0:
            raise ValidationError("El monto debe ser un número positivo")
        metodo_pago = (metodo_pago or "TARJETA").strip().upper()
        if metodo_pago not in METODOS_PAGO:
            raise ValidationError(f"Método de pago inválido. Valores permitidos: {', '.join(METODOS_PAGO)}")

        with self.db.transaction() as conn:
            facturas = InvoiceRepository(conn)
            detalle = facturas.get_detail(factura_id)
            if detalle is None:
                raise NotFoundError("Factura no encontrada")
            if detalle['socio_id'] != socio_id:
                raise ForbiddenError("La factura no pertenece al socio")
            if not facturas.register_payment(factura_id, monto, metodo_pago, comprobante):
                logger.warning("action=invoice_payment rejected factura_id=%s estado=%s",
                               factura_id, detalle['estado'])
                raise ConflictError("La factura ya está pagada")
            factura = facturas.get_by_id(factura_id)

        logger.info("action=invoice_payment factura_id=%s monto=%s metodo=%s", factura_id, monto, metodo_pago)
        return as_dict(factura)
