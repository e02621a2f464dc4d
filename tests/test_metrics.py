# Pruebas de métricas y exportación

import io
from datetime import datetime

import pandas as pd

from application.services.metrics_service import period_window

AHORA = datetime(2026, 10, 19, 12, 30, 0)


def test_period_window_rolling_days():
    desde, desde_ant, hasta_ant, periodo = period_window('7dias', AHORA)
    assert periodo == '7dias'
    assert desde == '2026-10-12 12:30:00'
    assert desde_ant == '2026-10-05 12:30:00'
    assert hasta_ant == desde


def test_period_window_calendar_periods():
    desde, desde_ant, _, _ = period_window('mes_actual', AHORA)
    assert (desde, desde_ant) == ('2026-10-01 00:00:00', '2026-09-01 00:00:00')

    desde, desde_ant, _, _ = period_window('año', AHORA)
    assert (desde, desde_ant) == ('2026-01-01 00:00:00', '2025-01-01 00:00:00')


def test_period_window_unknown_falls_back_to_30_days():
    desde, _, _, periodo = period_window('semestre', AHORA)
    assert periodo == '30dias'
    assert desde == '2026-09-19 12:30:00'


def test_advanced_metrics(metrics, claims, ratings, invoices, reclamo_tecnico, reclamo_administrativo):
    reclamo_id = reclamo_administrativo['reclamo']['reclamo_id']
    claims.transition(reclamo_id, 'RESUELTO')
    ratings.create(reclamo_id, 1, 4)
    invoices.register_payment(1, 1, 1500)

    resultado = metrics.advanced_metrics('7dias')
    assert resultado['periodo'] == '7dias'
    assert resultado['periodo_evaluado'] == 'últimos 7 días'
    assert resultado['estados_reclamos']['total'] == 2
    assert resultado['eficiencia_operativa']['porcentaje'] == 50
    assert resultado['tiempo_resolucion']['total_resueltos'] == 1
    assert resultado['satisfaccion_socio']['calificacion'] == 4.0
    assert resultado['facturacion']['facturas_pagadas'] == 2
    assert resultado['facturacion']['recaudado'] == 1500.0
    assert resultado['facturacion']['tasa_cobro'] == 67
    assert resultado['operarios_activos']['total_operarios'] == 3


def test_advanced_metrics_without_data(metrics):
    resultado = metrics.advanced_metrics()
    assert resultado['periodo'] == 'mes_actual'
    assert resultado['tiempo_resolucion']['promedio_dias'] == 0
    assert resultado['eficiencia_operativa']['porcentaje'] == 0
    assert resultado['satisfaccion_socio']['cambio_porcentual'] == 0.0


def test_operators_status(metrics, work_orders, reclamo_tecnico):
    work_orders.assign_operator(reclamo_tecnico['orden_trabajo']['ot_id'], 2)

    resultado = metrics.operators_status()
    assert resultado['resumen'] == {
        'total_operarios': 3,
        'operarios_libres': 2,
        'operarios_ocupados': 1,
        'total_ots_activas': 1
    }
    ocupado = resultado['operarios'][0]
    assert ocupado['nombre_completo'] == 'Diego Ruiz'
    assert ocupado['estado'] == 'OCUPADO'


def test_export_claims_csv(metrics, claims, reclamo_tecnico, reclamo_administrativo):
    claims.transition(reclamo_administrativo['reclamo']['reclamo_id'], 'CERRADO')

    df = pd.read_csv(io.StringIO(metrics.export_claims_csv()))
    assert len(df) == 2
    assert {'reclamo_id', 'estado', 'tipo_reclamo', 'socio', 'estado_ot'} <= set(df.columns)

    df = pd.read_csv(io.StringIO(metrics.export_claims_csv('cerrado')))
    assert df['estado'].tolist() == ['CERRADO']
    assert df['tipo_reclamo'].tolist() == ['ADMINISTRATIVO']
