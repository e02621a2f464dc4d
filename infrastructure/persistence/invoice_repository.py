from typing import List, Optional

from domain.models import Invoice, InvoiceStatus
from infrastructure.persistence.database import BaseRepository, now_str


class InvoiceRepository(BaseRepository):

    def _row_to_invoice(self, row) -> Invoice:
        return Invoice(
            factura_id=row['factura_id'],
            cuenta_id=row['cuenta_id'],
            periodo=row['periodo'],
            importe=row['importe'],
            vencimiento=row['vencimiento'],
            estado=InvoiceStatus(row['estado']),
            monto_pagado=row['monto_pagado'],
            metodo_pago=row['metodo_pago'],
            comprobante=row['comprobante'],
            fecha_pago=row['fecha_pago']
        )

    def create(self, invoice: Invoice) -> Invoice:
        cursor = self.conn.execute("""
            INSERT INTO factura (cuenta_id, periodo, importe, vencimiento, estado)
            VALUES (?, ?, ?, ?, ?)
        """, (invoice.cuenta_id, invoice.periodo, invoice.importe, invoice.vencimiento,
              invoice.estado.value))
        invoice.factura_id = cursor.lastrowid
        return invoice

    def get_by_id(self, factura_id: int) -> Optional[Invoice]:
        row = self.conn.execute("SELECT * FROM factura WHERE factura_id = ?", (factura_id,)).fetchone()
        if row:
            return self._row_to_invoice(row)
        return None

    def get_detail(self, factura_id: int) -> Optional[dict]:
        return self._one("""
            SELECT f.*, c.numero_cuenta, c.direccion, c.socio_id
            FROM factura f
            JOIN cuenta c ON f.cuenta_id = c.cuenta_id
            WHERE f.factura_id = ?
        """, (factura_id,))

    def list_by_member(self, socio_id: int, estado: Optional[str] = None,
                       limite: int = 10, offset: int = 0) -> List[dict]:
        query = """
            SELECT f.factura_id, f.cuenta_id, f.periodo, f.importe, f.vencimiento, f.estado,
                   f.monto_pagado, f.fecha_pago, c.numero_cuenta, c.direccion
            FROM factura f
            JOIN cuenta c ON f.cuenta_id = c.cuenta_id
            WHERE c.socio_id = ?
        """
        params = [socio_id]
        if estado:
            query += " AND f.estado = ?"
            params.append(estado)
        query += " ORDER BY f.periodo DESC, f.factura_id DESC LIMIT ? OFFSET ?"
        params.extend([limite, offset])
        return self._all(query, params)

    def summary_by_member(self, socio_id: int) -> dict:
        return self._one("""
            SELECT COUNT(CASE WHEN f.estado = 'PENDIENTE' THEN 1 END) AS pendientes,
                   COUNT(CASE WHEN f.estado = 'PAGADA' THEN 1 END) AS pagadas,
                   COUNT(CASE WHEN f.estado = 'VENCIDA' THEN 1 END) AS vencidas,
                   COALESCE(SUM(CASE WHEN f.estado IN ('PENDIENTE', 'VENCIDA') THEN f.importe END), 0) AS monto_pendiente,
                   COALESCE(SUM(CASE WHEN f.estado = 'PAGADA' THEN f.importe END), 0) AS monto_pagado
            FROM factura f
            JOIN cuenta c ON f.cuenta_id = c.cuenta_id
            WHERE c.socio_id = ?
        """, (socio_id,))

    def register_payment(self, factura_id: int, monto: float, metodo_pago: str,
                         comprobante: Optional[str]) -> bool:
        cursor = self.conn.execute("""
            UPDATE factura
            SET estado = 'PAGADA', monto_pagado = ?, metodo_pago = ?, comprobante = ?, fecha_pago = ?
            WHERE factura_id = ? AND estado IN ('PENDIENTE', 'VENCIDA')
        """, (monto, metodo_pago, comprobante, now_str(), factura_id))
        return cursor.rowcount > 0
