"""
Unit of Work - Implementaciones Django y en memoria.

Gestiona la transacción de cada operación del motor: transición del
ticket, registro de auditoría y movimientos de stock.

Responsabilidades:
- Iniciar/finalizar transacciones
- Commit/Rollback coordinado
- Publicar eventos después de un commit exitoso

Garantías:
- Django: la transacción de base de datos cubre ticket, auditoría y
  stock; las compensaciones registradas no hacen falta y se descartan
- Memoria: cada efecto previo al compare-and-set del ticket registra
  su compensación, que se ejecuta en orden inverso si hay rollback
"""

from typing import List, Optional
import logging

from django.db import transaction

from src.core.shared.audit import AuditSink
from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher, UnitOfWork

logger = logging.getLogger(__name__)


class DjangoUnitOfWork(UnitOfWork):
    """
    Implementación Django del Unit of Work.

    Usa django.db.transaction con autocommit desactivado. Los eventos
    se publican sólo después del commit.

    Example:
        with DjangoUnitOfWork(event_publisher=publisher, audit_sink=sink) as uow:
            uow.publish_event(event)   # audita en la misma transacción
            repo.save(ticket)
        # Commit automático + eventos publicados

    Example con rollback:
        with DjangoUnitOfWork() as uow:
            repo.save(ticket)
            raise Exception("¡Error!")
        # Rollback automático, eventos descartados
    """

    def __init__(
        self,
        event_publisher: Optional[EventPublisher] = None,
        audit_sink: Optional[AuditSink] = None,
    ):
        """
        Args:
            event_publisher: Publicador de eventos (Celery, logging)
            audit_sink: Sink de auditoría transaccional
        """
        super().__init__(audit_sink=audit_sink)
        self._event_publisher = event_publisher
        self._transaction_started = False
        self._committed = False
        self._rolled_back = False

    def _begin_transaction(self) -> None:
        """Desactiva autocommit para controlar la transacción."""
        self._committed = False
        self._rolled_back = False
        if not self._transaction_started:
            transaction.set_autocommit(False)
            self._transaction_started = True
            logger.debug("Transaction started")

    def commit(self) -> None:
        """
        Persiste los cambios y publica los eventos.

        Orden de ejecución:
        1. Commit de la transacción
        2. Publicación de eventos a handlers asíncronos
        3. Restaurar autocommit

        Raises:
            Exception: Si el commit falla, hace rollback y relanza
        """
        if self._committed or self._rolled_back:
            logger.warning("Transaction already finalized")
            return

        try:
            if self._transaction_started:
                transaction.commit()
                logger.debug("Transaction committed")

            self._committed = True
            self._compensaciones.clear()

            if self._events:
                self._publish_events()

        except Exception as e:
            logger.error(f"Commit failed: {e}")
            self.rollback()
            raise
        finally:
            self._finalize()

    def rollback(self) -> None:
        """
        Deshace los cambios y descarta los eventos.

        La base de datos revierte también auditoría y stock.
        """
        if self._committed or self._rolled_back:
            return

        try:
            if self._transaction_started:
                transaction.rollback()
                logger.debug("Transaction rolled back")
        except Exception as e:
            logger.error(f"Rollback failed: {e}")
        finally:
            self._rolled_back = True
            self._compensaciones.clear()
            self.clear_events()
            self._finalize()

    def _finalize(self) -> None:
        """Restaura el estado de la conexión."""
        if self._transaction_started:
            try:
                transaction.set_autocommit(True)
            except Exception:
                logger.exception("No se pudo restaurar autocommit")
            self._transaction_started = False

    def _publish_events(self) -> None:
        """
        Publica eventos a los handlers.

        Un fallo de publicación se registra pero no falla la operación:
        el estado y la auditoría ya están confirmados.
        """
        for event in self._events:
            logger.info(
                f"Publishing event: {event.event_type} "
                f"for aggregate {event.aggregate_id}"
            )

            if self._event_publisher:
                try:
                    self._event_publisher.publish(event)
                except Exception as e:
                    logger.error(f"Failed to publish event: {e}")

        self.clear_events()

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of Work en memoria para tests y entornos sin base de datos.

    Los repositorios en memoria escriben de inmediato; la atomicidad
    se obtiene con compensaciones y con el compare-and-set del ticket
    como último paso.

    Example:
        uow = InMemoryUnitOfWork(audit_sink=InMemoryAuditSink())
        with uow:
            uow.publish_event(event)

        assert uow.committed
        assert len(uow.published_events) == 1
    """

    def __init__(
        self,
        audit_sink: Optional[AuditSink] = None,
        event_publisher: Optional[EventPublisher] = None,
    ):
        super().__init__(audit_sink=audit_sink)
        self._event_publisher = event_publisher
        self._committed = False
        self._rolled_back = False
        self._published_events: List[DomainEvent] = []

    def _begin_transaction(self) -> None:
        self._committed = False
        self._rolled_back = False

    def commit(self) -> None:
        self._committed = True
        self._compensaciones.clear()
        eventos = list(self._events)
        self.clear_events()
        self._published_events.extend(eventos)
        if self._event_publisher:
            for event in eventos:
                try:
                    self._event_publisher.publish(event)
                except Exception as e:
                    logger.error(f"Failed to publish event: {e}")

    def rollback(self) -> None:
        """Ejecuta las compensaciones y descarta los eventos."""
        self._rolled_back = True
        self._run_compensations()
        self.clear_events()

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def rolled_back(self) -> bool:
        return self._rolled_back

    @property
    def published_events(self) -> List[DomainEvent]:
        """Eventos publicados en todos los commits de esta instancia."""
        return self._published_events

    def reset(self) -> None:
        """Reset para el próximo test."""
        self._committed = False
        self._rolled_back = False
        self._published_events.clear()
        self.clear_events()
