"""
Interfaces (Ports) - Contratos entre Core y Adapters.

Este módulo define las interfaces que los Adapters deben implementar.
Son los "Ports" de la Arquitectura Hexagonal.

Tipos de Ports:
- Driven Ports (lado derecho): UnitOfWork, EventPublisher, AuditSink, Clock
- Driving Ports (lado izquierdo): definidos en los Use Cases

Principio: el Core define interfaces; los Adapters las implementan.
El flujo de dependencias siempre apunta hacia el Core.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, List, Optional, Protocol
import logging

from .audit import AuditSink
from .events import DomainEvent
from .exceptions import AuditUnavailableError


logger = logging.getLogger(__name__)

Compensacion = Callable[[], None]


class UnitOfWork(ABC):
    """
    Unit of Work - Coordina transacciones atómicas.

    Garantiza que la transición de un ticket, su registro de auditoría
    y los efectos de inventario se apliquen como una sola unidad:
    o todo se confirma o nada se observa.

    Pattern: Context Manager
        with uow:
            ledger.reservar(servicio_id, 1)
            uow.publish_event(event)      # audita dentro de la unidad
            repo.save(ticket)             # compare-and-set: punto de commit
        # Commit automático al salir sin error
        # Rollback automático si hay excepción

    Responsabilidades:
    - Gestionar inicio/fin de la transacción
    - Escribir el registro de auditoría de cada evento en la unidad
    - Ejecutar compensaciones registradas si hay rollback
    - Publicar eventos sólo después de un commit exitoso

    Una misma instancia puede reutilizarse en varias operaciones
    secuenciales, pero no compartirse entre hilos.
    """

    def __init__(self, audit_sink: Optional[AuditSink] = None):
        self._events: List[DomainEvent] = []
        self._compensaciones: List[Compensacion] = []
        self.audit_sink = audit_sink

    def __enter__(self) -> "UnitOfWork":
        """
        Inicia el contexto de la transacción.

        Returns:
            Self para permitir uso como context manager
        """
        self._events.clear()
        self._compensaciones.clear()
        self._begin_transaction()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """
        Finaliza el contexto de la transacción.

        Returns:
            False para propagar excepciones
        """
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()
        return False  # No suprime excepciones

    @abstractmethod
    def _begin_transaction(self) -> None:
        """
        Inicia una nueva transacción.

        Implementado por el adapter específico
        (Django: transaction.set_autocommit(False)).
        """
        raise NotImplementedError

    @abstractmethod
    def commit(self) -> None:
        """
        Persiste los cambios y publica los eventos.

        Orden de ejecución:
        1. Commit de la transacción
        2. Publicación de los eventos encolados
        3. Limpieza del estado interno
        """
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        """
        Deshace los cambios y descarta los eventos.

        Llamado automáticamente si ocurre una excepción dentro del
        bloque `with`.
        """
        raise NotImplementedError

    def on_rollback(self, compensacion: Compensacion) -> None:
        """
        Registra una acción que deshace un efecto ya aplicado.

        Las compensaciones se ejecutan en orden inverso sólo si la
        unidad se revierte. Adapters transaccionales pueden ignorarlas.

        Args:
            compensacion: Callable sin argumentos
        """
        self._compensaciones.append(compensacion)

    def _run_compensations(self) -> None:
        for compensacion in reversed(self._compensaciones):
            try:
                compensacion()
            except Exception:
                logger.exception("Compensación fallida durante rollback")
        self._compensaciones.clear()

    def publish_event(self, event: DomainEvent) -> None:
        """
        Audita el evento y lo encola para publicación post-commit.

        El registro de auditoría se escribe inmediatamente, dentro de la
        unidad de trabajo; la publicación a consumidores ocurre sólo
        después del commit.

        Args:
            event: Evento de dominio de la transición

        Raises:
            AuditUnavailableError: Si el sink de auditoría falla
        """
        if self.audit_sink is not None:
            registro = event.to_audit_record()
            try:
                self.audit_sink.registrar(registro)
            except AuditUnavailableError:
                raise
            except Exception as e:
                raise AuditUnavailableError(
                    f"No se pudo registrar '{registro.accion}': {e}"
                ) from e
            self.on_rollback(lambda: self.audit_sink.descartar(registro.id))
        self._events.append(event)

    def collect_events(self) -> List[DomainEvent]:
        """
        Retorna los eventos encolados (para testing/debugging).
        """
        return list(self._events)

    def clear_events(self) -> None:
        """Limpia la cola de eventos."""
        self._events.clear()


class EventPublisher(ABC):
    """
    Interface para publicación de eventos.

    Adapters la implementan para integrarse con distintos sistemas
    de mensajería (Celery, logging, memoria).

    Example:
        class CeleryEventPublisher(EventPublisher):
            def publish(self, event):
                dispatch_domain_event.delay(event.to_dict())
    """

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """
        Publica el evento a los consumidores.

        Args:
            event: Evento de dominio a publicar
        """
        raise NotImplementedError

    def publish_batch(self, events: List[DomainEvent]) -> None:
        """
        Publica varios eventos en orden.

        Args:
            events: Lista de eventos a publicar
        """
        for event in events:
            self.publish(event)


class Clock(Protocol):
    """
    Fuente de tiempo del motor.

    Todas las marcas de tiempo de tickets y pausas se toman de aquí;
    ninguna entidad consulta el reloj del sistema por su cuenta.
    """

    def now(self) -> datetime:
        """Momento actual, con zona horaria."""
        ...
