"""
Event Handlers - Procesadores de Eventos de Dominio.

Corren en los workers de Celery después del commit. Ninguno modifica
tickets ni stock: el estado ya quedó confirmado y auditado por la
unidad de trabajo.

Patrón:
    @shared_task(bind=True, ...)
    def handle_<evento>(self, event_data: dict) -> None:
        ...
"""

import logging
from typing import Any, Dict

from celery import shared_task

logger = logging.getLogger(__name__)


# =============================================================================
# Event Handlers - Tickets
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_cerrado(self, event_data: Dict[str, Any]) -> None:
    """
    Handler de TicketCerradoEvent.

    Registra el ingreso del cobro por método de pago.

    Args:
        event_data: Evento serializado (DomainEvent.to_dict)
    """
    data = event_data.get('data', {})

    logger.info(
        f"[HANDLER] TicketCerrado: {data.get('codigo')} | "
        f"total={data.get('monto_total')} | pago={data.get('metodo_pago')}"
    )

    record_metric.delay(
        metric_name='ingresos_cobrados',
        value=float(data.get('monto_total', 0)),
        tags={'metodo_pago': data.get('metodo_pago', '')},
    )


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_cancelado(self, event_data: Dict[str, Any]) -> None:
    """Handler de TicketCanceladoEvent."""
    data = event_data.get('data', {})

    logger.info(
        f"[HANDLER] TicketCancelado: {data.get('codigo')} | "
        f"motivo={data.get('motivo')} | por={event_data.get('actor_id')}"
    )

    record_metric.delay(metric_name='tickets_cancelados', value=1, tags={})


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_servicio_agregado(self, event_data: Dict[str, Any]) -> None:
    """
    Handler de ServicioAgregadoEvent.

    Avisa al personal cuando un servicio con inventario se agota.
    """
    data = event_data.get('data', {})
    servicio_id = data.get('servicio_id')

    logger.info(
        f"[HANDLER] ServicioAgregado: {data.get('codigo')} | "
        f"servicio={servicio_id} x{data.get('cantidad')}"
    )

    if data.get('stock_resultante') == 0:
        logger.warning(f"[HANDLER] Servicio agotado: {servicio_id}")
        notify_staff.delay(
            message=f"Servicio {servicio_id} sin stock",
            priority='high',
        )


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

EVENT_HANDLERS = {
    'TicketCerradoEvent': handle_ticket_cerrado,
    'TicketCanceladoEvent': handle_ticket_cancelado,
    'ServicioAgregadoEvent': handle_servicio_agregado,
}


@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> None:
    """
    Punto de entrada de todos los Domain Events publicados vía Celery.

    Args:
        event_type: Tipo del evento (ej: 'TicketCerradoEvent')
        event_data: Evento serializado
    """
    handler = EVENT_HANDLERS.get(event_type)

    if handler:
        logger.info(f"[DISPATCHER] Enrutando {event_type}")
        handler.delay(event_data)
    else:
        logger.debug(f"[DISPATCHER] Sin handler para {event_type}")


# =============================================================================
# Notification / Metric Tasks
# =============================================================================

@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def notify_staff(self, message: str, priority: str = 'normal') -> None:
    """
    Notifica al personal de pista.

    Args:
        message: Mensaje
        priority: Prioridad de la notificación
    """
    logger.info(f"[NOTIFICATION] Personal [{priority}]: {message}")


@shared_task(bind=True, ignore_result=True)
def record_metric(
    self,
    metric_name: str,
    value: float,
    tags: Dict[str, str] = None
) -> None:
    """Registra una métrica para monitoreo."""
    logger.info(f"[METRIC] {metric_name}={value} | tags={tags or {}}")
