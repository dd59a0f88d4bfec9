"""
Event Publishers - Publicadores de Eventos de Dominio.

Reciben los eventos después del commit de la unidad de trabajo.
Implementaciones:
- LoggingEventPublisher: Sólo registra en el log (desarrollo)
- CeleryEventPublisher: Despacha vía Celery (producción)
- InMemoryEventPublisher: Para tests

Un fallo al publicar nunca revierte la transición: el registro de
auditoría ya quedó escrito dentro de la transacción.
"""

from typing import Callable, Dict, List
import json
import logging

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher

logger = logging.getLogger(__name__)


class _HandlerRegistry:
    """Handlers síncronos locales por tipo de evento."""

    def __init__(self):
        self._handlers: Dict[str, List[Callable[[DomainEvent], None]]] = {}

    def register_handler(
        self,
        event_type: str,
        handler: Callable[[DomainEvent], None]
    ) -> None:
        """Registra un handler para un tipo de evento."""
        self._handlers.setdefault(event_type, []).append(handler)

    def _dispatch_to_handlers(self, event: DomainEvent) -> None:
        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error en handler para {event.event_type}: {e}")


class LoggingEventPublisher(_HandlerRegistry, EventPublisher):
    """
    Publisher que sólo registra los eventos en el log.

    Usado en desarrollo para ver los eventos sin broker.
    """

    def __init__(self, log_level: int = logging.INFO):
        super().__init__()
        self._log_level = log_level

    def publish(self, event: DomainEvent) -> None:
        logger.log(
            self._log_level,
            f"[EVENT] {event.event_type} | "
            f"aggregate={event.aggregate_id} | "
            f"data={json.dumps(event.to_dict(), default=str)}"
        )
        self._dispatch_to_handlers(event)


class CeleryEventPublisher(EventPublisher):
    """
    Publisher que envía los eventos a Celery.

    Usado en producción; los handlers corren en los workers.
    """

    def __init__(self, also_log: bool = True):
        self._also_log = also_log

    def publish(self, event: DomainEvent) -> None:
        if self._also_log:
            logger.info(
                f"[EVENT->CELERY] {event.event_type} | "
                f"aggregate={event.aggregate_id}"
            )

        from src.adapters.django_app.events.handlers import dispatch_domain_event

        try:
            dispatch_domain_event.delay(event.event_type, event.to_dict())
        except Exception as e:
            logger.error(f"Fallo al publicar evento en Celery: {e}", exc_info=True)


class InMemoryEventPublisher(_HandlerRegistry, EventPublisher):
    """
    Publisher en memoria para tests.

    Guarda los eventos publicados para verificarlos.
    """

    def __init__(self):
        super().__init__()
        self._published_events: List[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self._published_events.append(event)
        self._dispatch_to_handlers(event)

    @property
    def published_events(self) -> List[DomainEvent]:
        return self._published_events.copy()

    def clear(self) -> None:
        self._published_events.clear()

    def get_events_by_type(self, event_type: str) -> List[DomainEvent]:
        return [e for e in self._published_events if e.event_type == event_type]


def get_event_publisher(mode: str = 'logging') -> EventPublisher:
    """
    Factory del publisher según EVENT_PUBLISHER_MODE.

    Args:
        mode: 'celery', 'logging' o 'memory'

    Returns:
        Publisher configurado
    """
    if mode == 'celery':
        return CeleryEventPublisher()
    if mode == 'memory':
        return InMemoryEventPublisher()
    return LoggingEventPublisher()
