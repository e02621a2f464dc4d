import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple

import pandas as pd

from domain.models import ClaimStatus, parse_status
from infrastructure.persistence.database import Database
from infrastructure.persistence.metrics_repository import MetricsRepository

logger = logging.getLogger(__name__)

_FMT = "%Y-%m-%d %H:%M:%S"

PERIODOS = {
    'mes_actual': 'mes actual',
    '7dias': 'últimos 7 días',
    '30dias': 'últimos 30 días',
    '90dias': 'últimos 90 días',
    'año': 'este año',
}


def period_window(periodo: str, ahora: Optional[datetime] = None) -> Tuple[str, str, str, str]:
    """Devuelve (desde, desde_anterior, hasta_anterior, periodo) para el período pedido.

    Un período desconocido se trata como '30dias'.
    """
    ahora = ahora or datetime.now()
    if periodo not in PERIODOS:
        periodo = '30dias'
    if periodo == 'mes_actual':
        desde = ahora.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        desde_anterior = (desde - timedelta(days=1)).replace(day=1)
    elif periodo == 'año':
        desde = ahora.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
        desde_anterior = desde.replace(year=desde.year - 1)
    else:
        dias = int(periodo.replace('dias', ''))
        desde = ahora - timedelta(days=dias)
        desde_anterior = ahora - timedelta(days=dias * 2)
    return desde.strftime(_FMT), desde_anterior.strftime(_FMT), desde.strftime(_FMT), periodo


def _pct_change(actual: float, anterior: float) -> float:
    if not anterior:
        return 0.0
    return round((actual - anterior) / anterior * 100, 1)


class MetricsService:
    def __init__(self, db: Database):
        self.db = db

    def advanced_metrics(self, periodo: str = 'mes_actual') -> dict:
        desde, desde_ant, hasta_ant, periodo = period_window(periodo)
        with self.db.connection() as conn:
            metrics = MetricsRepository(conn)
            resolucion = metrics.resolution_time(desde)
            resolucion_ant = metrics.resolution_time(desde_ant, hasta_ant)
            estados = metrics.claim_counts(desde)
            estados_ant = metrics.claim_counts(desde_ant, hasta_ant)
            satisfaccion = metrics.satisfaction(desde)
            satisfaccion_ant = metrics.satisfaction(desde_ant, hasta_ant)
            facturacion = metrics.billing(desde)
            operarios = metrics.operators_load()

        promedio = resolucion['promedio_dias'] or 0
        promedio_ant = resolucion_ant['promedio_dias'] or promedio
        # Menos días de resolución es mejora: el cambio se expresa a favor
        cambio_tiempo = -_pct_change(promedio, promedio_ant)

        eficiencia = estados['resueltos'] / estados['total'] * 100 if estados['total'] else 0
        eficiencia_ant = estados_ant['resueltos'] / estados_ant['total'] * 100 if estados_ant['total'] else 0

        calificacion = satisfaccion['promedio_calificacion'] or 0
        calificacion_ant = satisfaccion_ant['promedio_calificacion'] or calificacion

        total_facturas = facturacion['total_facturas']
        tasa_cobro = round(facturacion['facturas_pagadas'] / total_facturas * 100) if total_facturas else 0

        logger.debug("action=advanced_metrics periodo=%s desde=%s", periodo, desde)
        return {
            'tiempo_resolucion': {
                'promedio_dias': round(promedio, 1),
                'total_resueltos': resolucion['total_resueltos'],
                'cambio_porcentual': cambio_tiempo,
                'mejor': cambio_tiempo > 0
            },
            'eficiencia_operativa': {
                'porcentaje': round(eficiencia),
                'reclamos_resueltos': estados['resueltos'],
                'total_reclamos': estados['total'],
                'cambio_porcentual': round(eficiencia - eficiencia_ant, 1)
            },
            'satisfaccion_socio': {
                'calificacion': round(calificacion, 1),
                'total_valoraciones': satisfaccion['total_valoraciones'],
                'cambio_porcentual': _pct_change(calificacion, calificacion_ant)
            },
            'estados_reclamos': estados,
            'facturacion': {
                'total_facturas': total_facturas,
                'facturas_pendientes': facturacion['facturas_pendientes'],
                'facturas_pagadas': facturacion['facturas_pagadas'],
                'recaudado': facturacion['recaudado'],
                'pendiente_cobro': facturacion['pendiente_cobro'],
                'tasa_cobro': tasa_cobro
            },
            'operarios_activos': {
                'total_operarios': operarios['total_operarios'],
                'con_ordenes': operarios['operarios_con_ot'],
                'inactivos': operarios['total_operarios'] - operarios['operarios_con_ot'],
                'total_ots_activas': operarios['total_ots_activas']
            },
            'fecha_calculo': datetime.now().strftime(_FMT),
            'periodo': periodo,
            'periodo_evaluado': PERIODOS[periodo]
        }

    def operators_status(self) -> dict:
        desde = (datetime.now() - timedelta(days=30)).strftime(_FMT)
        with self.db.connection() as conn:
            filas = MetricsRepository(conn).operators_status(desde)

        operarios = []
        for op in filas:
            op['nombre_completo'] = f"{op['nombre']} {op['apellido']}"
            op['estado'] = 'OCUPADO' if op['ots_activas'] > 0 else 'LIBRE'
            operarios.append(op)

        resumen = {
            'total_operarios': len(operarios),
            'operarios_libres': sum(1 for op in operarios if op['estado'] == 'LIBRE'),
            'operarios_ocupados': sum(1 for op in operarios if op['estado'] == 'OCUPADO'),
            'total_ots_activas': sum(op['ots_activas'] for op in operarios)
        }
        return {'operarios': operarios, 'resumen': resumen}

    def export_claims_csv(self, estado: Optional[str] = None) -> str:
        """Listado de reclamos en CSV (una fila por reclamo, con su OT y operario)."""
        if estado:
            estado = parse_status(ClaimStatus, estado).value
        with self.db.connection() as conn:
            query, params = MetricsRepository(conn).claims_export_query(estado)
            df = pd.read_sql_query(query, conn, params=params)
        logger.info("action=export_claims filas=%s estado=%s", len(df), estado or 'todos')
        return df.to_csv(index=False)
