# Pruebas de facturas y registro de pagos

import pytest

from domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError


def test_list_and_summary(invoices):
    facturas = invoices.list_by_member(1)
    assert [f['factura_id'] for f in facturas] == [1, 2]
    assert [f['factura_id'] for f in invoices.list_by_member(1, estado='pagada')] == [2]

    resumen = invoices.summary_by_member(1)
    assert resumen['pendientes'] == 1
    assert resumen['pagadas'] == 1
    assert resumen['monto_pendiente'] == 1500.0


def test_member_only_sees_own_invoices(invoices):
    assert invoices.get_for_member(1, 1)['numero_cuenta'] == 'CTA-0001'
    with pytest.raises(ForbiddenError):
        invoices.get_for_member(3, 1)
    with pytest.raises(NotFoundError):
        invoices.get_for_member(99, 1)


def test_register_payment(invoices):
    factura = invoices.register_payment(1, 1, '1500', 'transferencia', 'TRX-9981')
    assert factura['estado'] == 'PAGADA'
    assert factura['monto_pagado'] == 1500.0
    assert factura['metodo_pago'] == 'TRANSFERENCIA'
    assert factura['comprobante'] == 'TRX-9981'
    assert factura['fecha_pago'] is not None

    with pytest.raises(ConflictError) as exc:
        invoices.register_payment(1, 1, 1500)
    assert exc.value.mensaje == 'La factura ya está pagada'


def test_overdue_invoice_can_be_paid(invoices):
    assert invoices.register_payment(3, 2, 980.5, 'EFECTIVO')['estado'] == 'PAGADA'


def test_payment_validations(invoices):
    with pytest.raises(ValidationError):
        invoices.register_payment(1, 1, -10)
    with pytest.raises(ValidationError):
        invoices.register_payment(1, 1, 'mucho')
    with pytest.raises(ValidationError):
        invoices.register_payment(1, 1, 100, 'CHEQUE')
    with pytest.raises(ForbiddenError):
        invoices.register_payment(3, 1, 100)
    assert invoices.get_for_member(1, 1)['estado'] == 'PENDIENTE'
