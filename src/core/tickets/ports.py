"""
Ports (Interfaces) del Dominio de Tickets.

Define los contratos que los Adapters de infraestructura deben
implementar para persistir y consultar tickets.

save es un compare-and-set sobre TicketEntity.version: sólo escribe si
la versión almacenada sigue siendo la que se leyó. Es el punto de
commit de cada operación de escritura.

Example:
    # En el Adapter (Django)
    class DjangoTicketRepository:
        def save(self, ticket: TicketEntity) -> None:
            updated = TicketModel.objects.filter(
                id=ticket.id, version=ticket.version
            ).update(...)
"""

import copy
import threading
from typing import Dict, List, Optional, Protocol, runtime_checkable

from src.core.shared.exceptions import ConcurrencyError

from .entities import TicketEntity, TicketStatus


@runtime_checkable
class TicketRepository(Protocol):
    """
    Interface de persistencia de Tickets.

    Implementaciones:
    - DjangoTicketRepository (ORM, UPDATE condicional por versión)
    - InMemoryTicketRepository (tests)
    """

    def save(self, ticket: TicketEntity) -> None:
        """
        Persiste el ticket con compare-and-set de versión.

        Un ticket nuevo se espera con version 0. Tras escribir, la
        versión de la entidad se incrementa.

        Raises:
            ConcurrencyError: Si otro proceso escribió una versión posterior
        """
        ...

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        """
        Busca ticket por ID.

        Returns:
            Una copia independiente o None si no existe
        """
        ...

    def get_by_codigo(self, codigo: str) -> Optional[TicketEntity]:
        ...

    def list_by_estado(self, estado: TicketStatus) -> List[TicketEntity]:
        ...

    def list_all(self) -> List[TicketEntity]:
        """
        Lista todos los tickets.

        Atención: en producción con muchos datos, filtre por estado.
        """
        ...


class InMemoryTicketRepository:
    """
    Implementación en memoria del TicketRepository.

    Guarda y devuelve copias, de modo que cada lectura es una instantánea
    independiente y el compare-and-set se comporta como en la base de datos.

    ¡No usar en producción!

    Example:
        repo = InMemoryTicketRepository()
        repo.save(ticket)
        found = repo.get_by_id(ticket.id)
    """

    def __init__(self):
        self._tickets: Dict[str, TicketEntity] = {}
        self._lock = threading.Lock()

    def save(self, ticket: TicketEntity) -> None:
        with self._lock:
            actual = self._tickets.get(ticket.id)
            version_almacenada = actual.version if actual else 0
            if version_almacenada != ticket.version:
                raise ConcurrencyError(
                    f"Ticket {ticket.id} modificado por otro proceso "
                    f"(versión {ticket.version}, almacenada {version_almacenada})"
                )
            nuevo = copy.deepcopy(ticket)
            nuevo.version = ticket.version + 1
            self._tickets[ticket.id] = nuevo
        ticket.version += 1

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        with self._lock:
            ticket = self._tickets.get(ticket_id)
            return copy.deepcopy(ticket) if ticket else None

    def get_by_codigo(self, codigo: str) -> Optional[TicketEntity]:
        with self._lock:
            for ticket in self._tickets.values():
                if ticket.codigo == codigo:
                    return copy.deepcopy(ticket)
        return None

    def list_by_estado(self, estado: TicketStatus) -> List[TicketEntity]:
        with self._lock:
            return [copy.deepcopy(t) for t in self._tickets.values() if t.estado == estado]

    def list_all(self) -> List[TicketEntity]:
        with self._lock:
            return [copy.deepcopy(t) for t in self._tickets.values()]

    def count(self) -> int:
        with self._lock:
            return len(self._tickets)

    def clear(self) -> None:
        """Limpia todos los datos (útil para tests)."""
        with self._lock:
            self._tickets.clear()
