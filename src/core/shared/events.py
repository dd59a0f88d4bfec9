"""
Domain Events - Comunicación desacoplada entre dominios.

Este módulo define la infraestructura base de los Domain Events del
motor. Cada evento representa una transición confirmada y es, a la vez,
la fuente del registro de auditoría correspondiente.

Características:
- Auto-generación de ID
- Timestamp explícito, tomado del reloj del motor
- Serializables para transporte (Celery) y auditoría
- Rastreables vía aggregate_id

Pattern:
    - El registro de auditoría se escribe dentro de la unidad de trabajo
    - El evento se publica sólo después del commit
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, ClassVar
import uuid

from .audit import RegistroAuditoria


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=False)  # frozen=False para permitir inicialización en subclases
class DomainEvent(ABC):
    """
    Clase base abstracta para Domain Events.

    Características:
    - Nombrados en pasado (TicketCerrado, no CerrarTicket)
    - Inmutables en la práctica (representan hechos históricos)
    - Contienen los datos necesarios para auditar lo ocurrido

    Attributes:
        event_id: Identificador único del evento
        aggregate_id: ID del agregado que generó el evento
        actor_id: Usuario que ejecutó la operación
        occurred_at: Momento en que ocurrió (reloj del motor)
        version: Versión del schema del evento

    Example:
        @dataclass
        class TicketPausadoEvent(DomainEvent):
            accion: ClassVar[str] = "pausar_ticket"

            @property
            def aggregate_type(self) -> str:
                return "Ticket"
    """

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    aggregate_id: str = ""
    actor_id: str = ""
    occurred_at: datetime = field(default_factory=_utcnow)
    version: int = 1

    # Nombre de la acción en el registro de auditoría
    accion: ClassVar[str] = ""

    def __post_init__(self):
        if not self.aggregate_id:
            raise ValueError("aggregate_id es obligatorio")

    @property
    @abstractmethod
    def aggregate_type(self) -> str:
        """
        Tipo del agregado que generó el evento (ej: "Ticket", "Servicio").
        """
        ...

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializa el evento a diccionario.

        Usado por:
        - Publicación vía message broker (Celery)
        - Logging estructurado

        Returns:
            Diccionario con los datos del evento
        """
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
            "aggregate_type": self.aggregate_type,
            "actor_id": self.actor_id,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "data": self._get_event_data(),
        }

    def _get_event_data(self) -> Dict[str, Any]:
        """
        Datos específicos del evento (para override en subclases).

        Por defecto toma todos los campos que no pertenecen a la base.
        """
        base_fields = {"event_id", "aggregate_id", "actor_id", "occurred_at", "version"}
        return {
            key: value
            for key, value in self.__dict__.items()
            if key not in base_fields and not key.startswith("_")
        }

    def to_audit_record(self) -> RegistroAuditoria:
        """
        Construye el registro de auditoría de este evento.

        Returns:
            RegistroAuditoria con actor, acción, entidad y detalle
        """
        return RegistroAuditoria(
            actor_id=self.actor_id,
            accion=self.accion or self.event_type,
            entidad=self.aggregate_type,
            entidad_id=self.aggregate_id,
            detalle=self._get_event_data(),
            registrado_en=self.occurred_at,
        )

    def __repr__(self) -> str:
        return (
            f"{self.event_type}("
            f"event_id={self.event_id[:8]}..., "
            f"aggregate_id={self.aggregate_id}, "
            f"occurred_at={self.occurred_at.isoformat()}"
            f")"
        )
