"""
Data Transfer Objects (DTOs) del Dominio de Tickets.

Los DTOs transportan datos entre capas sin exponer las entidades.

Tipos de DTOs:
- Input DTOs: datos de entrada de cada operación
- Output DTOs: representación de un ticket y de su cobro
- Query DTOs: filtros de listado

Los importes se exponen como Decimal; to_dict los convierte a string
para no perder precisión.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from src.core.billing.discounts import Liquidacion
from src.core.billing.rate_policy import CalculoTiempo

from .entities import TicketEntity, TicketServicioLinea
from .pauses import PausaIntervalo


def _iso(momento: Optional[datetime]) -> Optional[str]:
    return momento.isoformat() if momento else None


def _str(monto: Optional[Decimal]) -> Optional[str]:
    return str(monto) if monto is not None else None


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class AbrirTicketInputDTO:
    """
    DTO de entrada para abrir un ticket.

    Inmutable (frozen=True) para que los datos validados no cambien.

    Attributes:
        cliente_id: Cliente del ticket
        personas: Número de personas (>= 1)
        tarifa_id: Tarifa elegida por el front de caja
        notas: Observaciones opcionales
    """

    cliente_id: str
    personas: int
    tarifa_id: str
    notas: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "cliente_id": self.cliente_id,
            "personas": self.personas,
            "tarifa_id": self.tarifa_id,
            "notas": self.notas,
        }


@dataclass(frozen=True)
class PausarTicketInputDTO:
    ticket_id: str


@dataclass(frozen=True)
class ReanudarTicketInputDTO:
    ticket_id: str


@dataclass(frozen=True)
class AgregarServicioInputDTO:
    """
    DTO de entrada para agregar un servicio.

    Attributes:
        ticket_id: Ticket destino
        servicio_id: Servicio del catálogo
        cantidad: Unidades (>= 1)
    """

    ticket_id: str
    servicio_id: str
    cantidad: int = 1

    def to_dict(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "servicio_id": self.servicio_id,
            "cantidad": self.cantidad,
        }


@dataclass(frozen=True)
class CerrarTicketInputDTO:
    """
    DTO de entrada para cerrar un ticket.

    Attributes:
        ticket_id: Ticket a cerrar
        metodo_pago: Nombre o valor de MetodoPago
        as_of: Instante de corte (por defecto, el reloj del motor)
    """

    ticket_id: str
    metodo_pago: str = "efectivo"
    as_of: Optional[datetime] = None


@dataclass(frozen=True)
class CancelarTicketInputDTO:
    """
    DTO de entrada para cancelar un ticket.

    Attributes:
        ticket_id: Ticket a cancelar
        motivo: Motivo obligatorio
    """

    ticket_id: str
    motivo: str


@dataclass(frozen=True)
class ListarTicketsQueryDTO:
    """
    Filtros de listado.

    Attributes:
        estado: Nombre o valor de TicketStatus (None = todos)
        cliente_id: Filtrar por cliente
    """

    estado: Optional[str] = None
    cliente_id: Optional[str] = None


# =============================================================================
# OUTPUT DTOs (Salida)
# =============================================================================

@dataclass
class PausaOutputDTO:
    id: str
    inicio: datetime
    fin: Optional[datetime]

    @classmethod
    def from_entity(cls, pausa: PausaIntervalo) -> "PausaOutputDTO":
        return cls(id=pausa.id, inicio=pausa.inicio, fin=pausa.fin)

    def to_dict(self) -> dict:
        return {"id": self.id, "inicio": _iso(self.inicio), "fin": _iso(self.fin)}


@dataclass
class LineaServicioOutputDTO:
    id: str
    servicio_id: str
    servicio_nombre: str
    cantidad: int
    precio_unitario: Decimal
    monto_total: Decimal
    agregado_en: Optional[datetime]

    @classmethod
    def from_entity(cls, linea: TicketServicioLinea) -> "LineaServicioOutputDTO":
        return cls(
            id=linea.id,
            servicio_id=linea.servicio_id,
            servicio_nombre=linea.servicio_nombre,
            cantidad=linea.cantidad,
            precio_unitario=linea.precio_unitario,
            monto_total=linea.monto_total,
            agregado_en=linea.agregado_en,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "servicio_id": self.servicio_id,
            "servicio_nombre": self.servicio_nombre,
            "cantidad": self.cantidad,
            "precio_unitario": _str(self.precio_unitario),
            "monto_total": _str(self.monto_total),
            "agregado_en": _iso(self.agregado_en),
        }


@dataclass
class TicketOutputDTO:
    """
    DTO de salida con el estado completo de un ticket.

    Example:
        output = TicketOutputDTO.from_entity(ticket)
        return JsonResponse(output.to_dict())
    """

    id: str
    codigo: str
    cliente_id: str
    personas: int
    tarifa_id: str
    estado: str
    version: int
    hora_entrada: datetime
    operador_entrada_id: str
    hora_salida: Optional[datetime] = None
    operador_salida_id: Optional[str] = None
    minutos_cobrados: Optional[int] = None
    monto_tiempo: Optional[Decimal] = None
    descuento_porcentaje: Optional[Decimal] = None
    monto_descuento: Optional[Decimal] = None
    monto_servicios: Optional[Decimal] = None
    monto_total: Optional[Decimal] = None
    metodo_pago: Optional[str] = None
    motivo_cancelacion: Optional[str] = None
    notas: Optional[str] = None
    pausas: List[PausaOutputDTO] = field(default_factory=list)
    servicios: List[LineaServicioOutputDTO] = field(default_factory=list)

    @classmethod
    def from_entity(cls, entity: TicketEntity) -> "TicketOutputDTO":
        return cls(
            id=entity.id,
            codigo=entity.codigo,
            cliente_id=entity.cliente_id,
            personas=entity.personas,
            tarifa_id=entity.tarifa_id,
            estado=entity.estado.value,
            version=entity.version,
            hora_entrada=entity.hora_entrada,
            operador_entrada_id=entity.operador_entrada_id,
            hora_salida=entity.hora_salida,
            operador_salida_id=entity.operador_salida_id,
            minutos_cobrados=entity.minutos_cobrados,
            monto_tiempo=entity.monto_tiempo,
            descuento_porcentaje=entity.descuento_porcentaje,
            monto_descuento=entity.monto_descuento,
            monto_servicios=entity.monto_servicios,
            monto_total=entity.monto_total,
            metodo_pago=entity.metodo_pago.value if entity.metodo_pago else None,
            motivo_cancelacion=entity.motivo_cancelacion,
            notas=entity.notas,
            pausas=[PausaOutputDTO.from_entity(p) for p in entity.pausas],
            servicios=[LineaServicioOutputDTO.from_entity(l) for l in entity.servicios],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "codigo": self.codigo,
            "cliente_id": self.cliente_id,
            "personas": self.personas,
            "tarifa_id": self.tarifa_id,
            "estado": self.estado,
            "version": self.version,
            "hora_entrada": _iso(self.hora_entrada),
            "operador_entrada_id": self.operador_entrada_id,
            "hora_salida": _iso(self.hora_salida),
            "operador_salida_id": self.operador_salida_id,
            "minutos_cobrados": self.minutos_cobrados,
            "monto_tiempo": _str(self.monto_tiempo),
            "descuento_porcentaje": _str(self.descuento_porcentaje),
            "monto_descuento": _str(self.monto_descuento),
            "monto_servicios": _str(self.monto_servicios),
            "monto_total": _str(self.monto_total),
            "metodo_pago": self.metodo_pago,
            "motivo_cancelacion": self.motivo_cancelacion,
            "notas": self.notas,
            "pausas": [p.to_dict() for p in self.pausas],
            "servicios": [s.to_dict() for s in self.servicios],
        }


@dataclass
class TicketListItemDTO:
    """DTO reducido para listados."""

    id: str
    codigo: str
    cliente_id: str
    estado: str
    hora_entrada: datetime
    personas: int

    @classmethod
    def from_entity(cls, entity: TicketEntity) -> "TicketListItemDTO":
        return cls(
            id=entity.id,
            codigo=entity.codigo,
            cliente_id=entity.cliente_id,
            estado=entity.estado.value,
            hora_entrada=entity.hora_entrada,
            personas=entity.personas,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "codigo": self.codigo,
            "cliente_id": self.cliente_id,
            "estado": self.estado,
            "hora_entrada": _iso(self.hora_entrada),
            "personas": self.personas,
        }


@dataclass(frozen=True)
class CobroOutputDTO:
    """
    Desglose del cobro de un ticket (previsualización o cierre).

    Attributes:
        ticket_id: Ticket cobrado
        as_of: Instante de corte del cálculo
        minutos_reales: Tiempo efectivo en pista
        minutos_cobrados: Minutos tras mínimo y redondeo
        monto_tiempo: Subtotal de tiempo
        descuento_porcentaje: Descuento del cliente aplicado
        monto_descuento: Importe descontado
        monto_servicios: Subtotal de servicios
        monto_total: Total a pagar
        definitivo: True si proviene de un ticket ya cerrado
    """

    ticket_id: str
    as_of: datetime
    minutos_reales: Optional[int]
    minutos_cobrados: int
    monto_tiempo: Decimal
    descuento_porcentaje: Decimal
    monto_descuento: Decimal
    monto_servicios: Decimal
    monto_total: Decimal
    definitivo: bool = False

    @classmethod
    def from_calculo(
        cls,
        ticket_id: str,
        as_of: datetime,
        calculo: CalculoTiempo,
        liquidacion: Liquidacion,
    ) -> "CobroOutputDTO":
        return cls(
            ticket_id=ticket_id,
            as_of=as_of,
            minutos_reales=calculo.minutos_reales,
            minutos_cobrados=calculo.minutos_cobrables,
            monto_tiempo=liquidacion.monto_tiempo,
            descuento_porcentaje=liquidacion.descuento_porcentaje,
            monto_descuento=liquidacion.monto_descuento,
            monto_servicios=liquidacion.monto_servicios,
            monto_total=liquidacion.monto_total,
        )

    @classmethod
    def from_ticket_cerrado(cls, entity: TicketEntity) -> "CobroOutputDTO":
        """Desglose guardado de un ticket cerrado."""
        return cls(
            ticket_id=entity.id,
            as_of=entity.hora_salida,
            minutos_reales=None,
            minutos_cobrados=entity.minutos_cobrados,
            monto_tiempo=entity.monto_tiempo,
            descuento_porcentaje=entity.descuento_porcentaje,
            monto_descuento=entity.monto_descuento,
            monto_servicios=entity.monto_servicios,
            monto_total=entity.monto_total,
            definitivo=True,
        )

    def to_dict(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "as_of": _iso(self.as_of),
            "minutos_reales": self.minutos_reales,
            "minutos_cobrados": self.minutos_cobrados,
            "monto_tiempo": _str(self.monto_tiempo),
            "descuento_porcentaje": _str(self.descuento_porcentaje),
            "monto_descuento": _str(self.monto_descuento),
            "monto_servicios": _str(self.monto_servicios),
            "monto_total": _str(self.monto_total),
            "definitivo": self.definitivo,
        }
