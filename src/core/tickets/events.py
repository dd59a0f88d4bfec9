"""
Domain Events del Dominio de Tickets.

Cada transición confirmada de un ticket genera exactamente un evento.
El evento da origen al registro de auditoría (dentro de la unidad de
trabajo) y se publica a los handlers después del commit.

Eventos (acción de auditoría):
- TicketAbiertoEvent (crear_ticket)
- TicketPausadoEvent (pausar_ticket)
- TicketReanudadoEvent (reanudar_ticket)
- ServicioAgregadoEvent (agregar_servicio)
- TicketCerradoEvent (cerrar_ticket)
- TicketCanceladoEvent (cancelar_ticket)

Uso:
    with uow:
        ticket.pausar(ahora)
        uow.publish_event(TicketPausadoEvent(aggregate_id=ticket.id, ...))
        repo.save(ticket)
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional

from src.core.shared.events import DomainEvent


@dataclass
class TicketEvent(DomainEvent):
    """Base de los eventos cuyo agregado es un Ticket."""

    codigo: str = ""

    @property
    def aggregate_type(self) -> str:
        return "Ticket"


@dataclass
class TicketAbiertoEvent(TicketEvent):
    """
    Evento: Ticket abierto.

    Handlers típicos:
    - Mostrar el ticket en el tablero de pista
    - Imprimir el comprobante de entrada

    Attributes:
        cliente_id: Cliente del ticket
        personas: Número de personas
        tarifa_id: Tarifa fijada al abrir
        hora_entrada: ISO 8601
    """

    accion: ClassVar[str] = "crear_ticket"

    cliente_id: str = ""
    personas: int = 1
    tarifa_id: str = ""
    hora_entrada: str = ""


@dataclass
class TicketPausadoEvent(TicketEvent):
    """Evento: Ticket pausado."""

    accion: ClassVar[str] = "pausar_ticket"

    pausa_id: str = ""
    inicio: str = ""


@dataclass
class TicketReanudadoEvent(TicketEvent):
    """
    Evento: Ticket reanudado.

    Attributes:
        pausa_id: Pausa que se cerró
        inicio: Inicio de la pausa (ISO 8601)
        fin: Fin de la pausa (ISO 8601)
    """

    accion: ClassVar[str] = "reanudar_ticket"

    pausa_id: str = ""
    inicio: str = ""
    fin: str = ""


@dataclass
class ServicioAgregadoEvent(TicketEvent):
    """
    Evento: Servicio agregado al ticket.

    Handlers típicos:
    - Avisar al encargado cuando el stock llega a cero

    Attributes:
        servicio_id: Servicio del catálogo
        linea_id: Línea creada en el ticket
        cantidad: Unidades agregadas
        precio_unitario: Precio copiado (string decimal)
        monto_total: Importe de la línea (string decimal)
        stock_resultante: Stock tras la reserva (None si no se controla)
    """

    accion: ClassVar[str] = "agregar_servicio"

    servicio_id: str = ""
    linea_id: str = ""
    cantidad: int = 0
    precio_unitario: str = "0.00"
    monto_total: str = "0.00"
    stock_resultante: Optional[int] = None


@dataclass
class TicketCerradoEvent(TicketEvent):
    """
    Evento: Ticket cerrado y cobrado.

    Lleva el desglose monetario completo. Los importes viajan como
    strings decimales para no perder precisión en la serialización.

    Handlers típicos:
    - Imprimir el comprobante de cobro
    - Alimentar el cierre de caja del día
    """

    accion: ClassVar[str] = "cerrar_ticket"

    hora_salida: str = ""
    minutos_reales: int = 0
    minutos_cobrados: int = 0
    monto_tiempo: str = "0.00"
    descuento_porcentaje: str = "0"
    monto_descuento: str = "0.00"
    monto_servicios: str = "0.00"
    monto_total: str = "0.00"
    metodo_pago: str = ""


@dataclass
class TicketCanceladoEvent(TicketEvent):
    """
    Evento: Ticket cancelado.

    Attributes:
        motivo: Motivo de la cancelación
        lineas_liberadas: [{"servicio_id": ..., "cantidad": ...}] devueltas al stock
    """

    accion: ClassVar[str] = "cancelar_ticket"

    motivo: str = ""
    lineas_liberadas: Optional[List[Dict[str, Any]]] = None

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "codigo": self.codigo,
            "motivo": self.motivo,
            "lineas_liberadas": list(self.lineas_liberadas or []),
        }
