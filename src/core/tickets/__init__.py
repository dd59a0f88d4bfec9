"""
Dominio de Tickets - Ciclo de vida del ticket de pista.

Este módulo contiene la lógica de negocio del ticket:
- Entidades (TicketEntity, TicketStatus, MetodoPago, TicketServicioLinea)
- PauseTracker (intervalos de pausa)
- Use Cases (Abrir, Pausar, Reanudar, AgregarServicio, Cerrar, Cancelar,
  PrevisualizarCobro, Obtener, Listar)
- Domain Events (uno por transición, origen de la auditoría)
- DTOs (Input/Output)
- Ports (TicketRepository con compare-and-set)

Características del Dominio:
- Tiempo facturable con pausas, mínimos y redondeo por tarifa
- Descuento de membresía aplicado al cierre
- Stock reservado al agregar y devuelto al cancelar
- Transiciones concurrentes resueltas por versión, sin locks largos
"""

from .entities import MetodoPago, TicketEntity, TicketServicioLinea, TicketStatus
from .pauses import PausaIntervalo, PauseTracker
from .events import (
    ServicioAgregadoEvent,
    TicketAbiertoEvent,
    TicketCanceladoEvent,
    TicketCerradoEvent,
    TicketPausadoEvent,
    TicketReanudadoEvent,
)
from .dtos import (
    AbrirTicketInputDTO,
    AgregarServicioInputDTO,
    CancelarTicketInputDTO,
    CerrarTicketInputDTO,
    CobroOutputDTO,
    ListarTicketsQueryDTO,
    PausarTicketInputDTO,
    ReanudarTicketInputDTO,
    TicketListItemDTO,
    TicketOutputDTO,
)
from .ports import InMemoryTicketRepository, TicketRepository
from .cobro import CalculadoraCobro
from .use_cases import (
    AbrirTicketService,
    AgregarServicioService,
    CancelarTicketService,
    CerrarTicketService,
    ListarTicketsService,
    ObtenerTicketService,
    PausarTicketService,
    PrevisualizarCobroService,
    ReanudarTicketService,
)

__all__ = [
    # Entities
    "MetodoPago",
    "TicketEntity",
    "TicketServicioLinea",
    "TicketStatus",
    "PausaIntervalo",
    "PauseTracker",
    # Events
    "ServicioAgregadoEvent",
    "TicketAbiertoEvent",
    "TicketCanceladoEvent",
    "TicketCerradoEvent",
    "TicketPausadoEvent",
    "TicketReanudadoEvent",
    # DTOs
    "AbrirTicketInputDTO",
    "AgregarServicioInputDTO",
    "CancelarTicketInputDTO",
    "CerrarTicketInputDTO",
    "CobroOutputDTO",
    "ListarTicketsQueryDTO",
    "PausarTicketInputDTO",
    "ReanudarTicketInputDTO",
    "TicketListItemDTO",
    "TicketOutputDTO",
    # Ports
    "InMemoryTicketRepository",
    "TicketRepository",
    # Use Cases
    "CalculadoraCobro",
    "AbrirTicketService",
    "AgregarServicioService",
    "CancelarTicketService",
    "CerrarTicketService",
    "ListarTicketsService",
    "ObtenerTicketService",
    "PausarTicketService",
    "PrevisualizarCobroService",
    "ReanudarTicketService",
]
