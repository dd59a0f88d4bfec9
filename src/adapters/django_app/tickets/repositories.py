"""
Repositorio Django de Tickets.

Implementa el port TicketRepository definido en el Core.
Es un DRIVEN ADAPTER: el Core lo invoca en cada operación.

Responsabilidades:
- Compare-and-set por versión con UPDATE condicional
- Sincronizar pausas y líneas de servicio (sólo altas y cierres)
- Cargar tickets con sus colecciones en pocas consultas

Principios:
- El repositorio no contiene lógica de negocio
- Usa Mappers para las conversiones
"""

from typing import List, Optional
import logging

from django.db import IntegrityError, transaction
from django.db.models import F

from src.core.shared.exceptions import ConcurrencyError
from src.core.tickets.entities import TicketEntity, TicketStatus

from .mappers import LineaServicioMapper, PausaMapper, TicketMapper
from .models import PausaModel, TicketModel, TicketServicioModel

logger = logging.getLogger(__name__)


class DjangoTicketRepository:
    """
    Implementación Django del TicketRepository.

    Example:
        repo = DjangoTicketRepository()
        repo.save(ticket)                       # version 0 -> 1
        ticket = repo.get_by_id(ticket.id)
        tickets = repo.list_by_estado(TicketStatus.ACTIVO)
    """

    def __init__(self):
        self._mapper = TicketMapper()

    def _queryset(self):
        return TicketModel.objects.prefetch_related('pausas', 'servicios')

    def save(self, ticket: TicketEntity) -> None:
        """
        Persiste el ticket con compare-and-set de versión.

        Raises:
            ConcurrencyError: Si la versión almacenada no es la leída
        """
        logger.debug(f"Saving ticket: {ticket.id} (version {ticket.version})")
        campos = self._mapper.to_fields(ticket)

        if ticket.version == 0:
            try:
                with transaction.atomic():
                    TicketModel.objects.create(id=ticket.id, version=1, **campos)
            except IntegrityError as e:
                raise ConcurrencyError(f"Ticket {ticket.id} ya existe") from e
        else:
            actualizados = TicketModel.objects.filter(
                id=ticket.id,
                version=ticket.version,
            ).update(version=F('version') + 1, **campos)
            if actualizados == 0:
                raise ConcurrencyError(
                    f"Ticket {ticket.id} modificado por otro proceso "
                    f"(versión leída {ticket.version})"
                )

        self._guardar_colecciones(ticket)
        ticket.version += 1

    def _guardar_colecciones(self, ticket: TicketEntity) -> None:
        for pausa in ticket.pausas:
            PausaModel.objects.update_or_create(
                id=pausa.id,
                defaults={'ticket_id': ticket.id, **PausaMapper.to_fields(pausa)},
            )
        for linea in ticket.servicios:
            TicketServicioModel.objects.update_or_create(
                id=linea.id,
                defaults={'ticket_id': ticket.id, **LineaServicioMapper.to_fields(linea)},
            )

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        try:
            model = self._queryset().get(id=ticket_id)
        except TicketModel.DoesNotExist:
            logger.debug(f"Ticket not found: {ticket_id}")
            return None
        return self._mapper.to_entity(model)

    def get_by_codigo(self, codigo: str) -> Optional[TicketEntity]:
        model = self._queryset().filter(codigo=codigo).first()
        return self._mapper.to_entity(model) if model else None

    def list_by_estado(self, estado: TicketStatus) -> List[TicketEntity]:
        return self._mapper.to_entity_list(self._queryset().filter(estado=estado.value))

    def list_all(self) -> List[TicketEntity]:
        """
        Warning:
            Sin paginación; en producción filtre por estado.
        """
        return self._mapper.to_entity_list(self._queryset().all())
