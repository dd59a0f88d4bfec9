"""
Entidades del Dominio de Tickets.

Este módulo define las entidades que encapsulan las reglas de negocio
del ciclo de vida de un ticket de pista.

Entidades:
- TicketEntity: Agregado principal del dominio
- TicketStatus: Estados posibles de un ticket
- MetodoPago: Formas de pago aceptadas al cerrar
- TicketServicioLinea: Servicio agregado al ticket

Reglas de Negocio Encapsuladas:
- Transiciones de estado controladas (cerrado y cancelado son terminales)
- Como máximo una pausa abierta, y sólo en estado pausado
- Montos y hora de salida sólo existen en tickets cerrados
- Motivo de cancelación sólo en tickets cancelados
- Cantidades por ticket limitadas por el máximo del servicio
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, List, Optional
import uuid

from src.core.billing.discounts import Liquidacion
from src.core.billing.rate_policy import CalculoTiempo, redondear_dinero
from src.core.inventory.entities import ServicioEntity
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    EmptyCancelReasonError,
    InvalidTransitionError,
    MaxQuantityExceededError,
    ValidationError,
)

from .pauses import PausaIntervalo, PauseTracker


class TicketStatus(Enum):
    """
    Estados posibles de un ticket.

    Flujo de Estados:
        ACTIVO ⇄ PAUSADO
           ↓        ↓
        CERRADO / CANCELADO (terminales)
    """

    ACTIVO = "activo"
    PAUSADO = "pausado"
    CERRADO = "cerrado"
    CANCELADO = "cancelado"

    @property
    def es_terminal(self) -> bool:
        return self in (TicketStatus.CERRADO, TicketStatus.CANCELADO)

    def puede_transicionar_a(self, destino: "TicketStatus") -> bool:
        return destino in TRANSICIONES_VALIDAS[self]

    @classmethod
    def from_string(cls, value: str) -> "TicketStatus":
        """
        Convierte string en enum (por nombre o por valor).

        Raises:
            ValueError: Si el valor no es válido
        """
        try:
            return cls[value.upper()]
        except KeyError:
            pass

        for status in cls:
            if status.value == value.lower():
                return status

        raise ValueError(f"Estado inválido: {value}")


TRANSICIONES_VALIDAS: Dict[TicketStatus, FrozenSet[TicketStatus]] = {
    TicketStatus.ACTIVO: frozenset({
        TicketStatus.PAUSADO,
        TicketStatus.CERRADO,
        TicketStatus.CANCELADO,
    }),
    TicketStatus.PAUSADO: frozenset({
        TicketStatus.ACTIVO,
        TicketStatus.CERRADO,
        TicketStatus.CANCELADO,
    }),
    TicketStatus.CERRADO: frozenset(),
    TicketStatus.CANCELADO: frozenset(),
}


class MetodoPago(Enum):
    """Formas de pago aceptadas."""

    EFECTIVO = "efectivo"
    TARJETA = "tarjeta"
    TRANSFERENCIA = "transferencia"
    OTRO = "otro"

    @classmethod
    def from_string(cls, value: str) -> "MetodoPago":
        try:
            return cls[value.upper()]
        except KeyError:
            pass

        for metodo in cls:
            if metodo.value == value.lower():
                return metodo

        raise ValueError(f"Método de pago inválido: {value}")


def generar_codigo_ticket(momento: datetime) -> str:
    """
    Código legible del ticket: TK-YYYYMMDD-XXXXXX.

    Example:
        generar_codigo_ticket(datetime(2024, 5, 1, tzinfo=timezone.utc))
        # 'TK-20240501-3F9A1C'
    """
    return f"TK-{momento:%Y%m%d}-{uuid.uuid4().hex[:6].upper()}"


@dataclass
class TicketServicioLinea:
    """
    Servicio agregado a un ticket.

    El precio unitario se copia del catálogo al agregar: cambios
    posteriores de precio no afectan al ticket.

    Attributes:
        servicio_id: Servicio del catálogo
        servicio_nombre: Nombre en el momento de agregarlo
        cantidad: Unidades (>= 1)
        precio_unitario: Precio copiado del catálogo
        monto_total: cantidad x precio_unitario
        controla_inventario: Si la línea reservó stock
        agregado_en: Momento en que se agregó
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    servicio_id: str = ""
    servicio_nombre: str = ""
    cantidad: int = 1
    precio_unitario: Decimal = Decimal("0")
    monto_total: Decimal = Decimal("0")
    controla_inventario: bool = False
    agregado_en: Optional[datetime] = None


@dataclass
class TicketEntity:
    """
    Entidad de Dominio: Ticket de pista.

    Agregado principal del dominio. Toda mutación pasa por sus métodos,
    que verifican primero la transición y sólo después modifican estado:
    una operación rechazada no deja rastro.

    Invariantes:
    - cerrado y cancelado son terminales e inmutables
    - hora_salida, minutos_cobrados, montos, descuento y método de pago
      son None hasta cerrar y no None después
    - motivo_cancelacion existe sólo si el ticket está cancelado
    - hay una pausa abierta si y sólo si el estado es pausado
    - version aumenta en cada escritura (compare-and-set)

    Example:
        ticket = TicketEntity.abrir(
            cliente_id="c-1",
            personas=2,
            tarifa_id="t-1",
            operador_id="u-1",
            ahora=clock.now(),
        )
        ticket.pausar(clock.now())
        ticket.reanudar(clock.now())
    """

    # Identificación
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    codigo: str = ""

    # Datos principales
    cliente_id: str = ""
    personas: int = 1
    tarifa_id: str = ""
    notas: Optional[str] = None

    # Estado
    estado: TicketStatus = field(default=TicketStatus.ACTIVO)
    version: int = 0

    # Tiempos
    hora_entrada: Optional[datetime] = None
    hora_salida: Optional[datetime] = None

    # Operadores
    operador_entrada_id: str = ""
    operador_salida_id: Optional[str] = None

    # Cobro (sólo en cerrado)
    minutos_cobrados: Optional[int] = None
    monto_tiempo: Optional[Decimal] = None
    descuento_porcentaje: Optional[Decimal] = None
    monto_descuento: Optional[Decimal] = None
    monto_servicios: Optional[Decimal] = None
    monto_total: Optional[Decimal] = None
    metodo_pago: Optional[MetodoPago] = None

    # Cancelación
    motivo_cancelacion: Optional[str] = None

    # Colecciones
    pausas: List[PausaIntervalo] = field(default_factory=list)
    servicios: List[TicketServicioLinea] = field(default_factory=list)

    @classmethod
    def abrir(
        cls,
        cliente_id: str,
        personas: int,
        tarifa_id: str,
        operador_id: str,
        ahora: datetime,
        notas: Optional[str] = None,
        codigo: Optional[str] = None,
    ) -> "TicketEntity":
        """
        Factory method: abre un ticket activo.

        Args:
            cliente_id: Cliente del ticket
            personas: Número de personas (>= 1)
            tarifa_id: Tarifa fijada para todo el ticket
            operador_id: Operador que registra la entrada
            ahora: Hora de entrada (reloj del motor)
            notas: Observaciones opcionales
            codigo: Código legible (se genera si no se indica)

        Raises:
            ValidationError: Si los datos de entrada son inválidos
        """
        if not cliente_id:
            raise ValidationError("El cliente es obligatorio", field="cliente_id")
        if personas is None or personas < 1:
            raise ValidationError("Debe haber al menos una persona", field="personas")
        if not tarifa_id:
            raise ValidationError("La tarifa es obligatoria", field="tarifa_id")
        if not operador_id:
            raise ValidationError("El operador es obligatorio", field="operador_id")

        return cls(
            codigo=codigo or generar_codigo_ticket(ahora),
            cliente_id=cliente_id,
            personas=personas,
            tarifa_id=tarifa_id,
            notas=notas.strip() if notas and notas.strip() else None,
            estado=TicketStatus.ACTIVO,
            hora_entrada=ahora,
            operador_entrada_id=operador_id,
        )

    # -------------------------------------------------------------------------
    # Transiciones
    # -------------------------------------------------------------------------

    def _verificar_transicion(self, destino: TicketStatus, operacion: str) -> None:
        if not self.estado.puede_transicionar_a(destino):
            raise InvalidTransitionError(self.estado.value, operacion, self.id)

    def _verificar_abierto(self, operacion: str) -> None:
        if self.estado.es_terminal:
            raise InvalidTransitionError(self.estado.value, operacion, self.id)

    @property
    def pause_tracker(self) -> PauseTracker:
        return PauseTracker(self.pausas, self.id)

    def pausar(self, ahora: datetime) -> PausaIntervalo:
        """
        Pausa el ticket (sólo desde activo).

        Raises:
            InvalidTransitionError: Si el estado no es activo
        """
        self._verificar_transicion(TicketStatus.PAUSADO, "pausar")
        pausa = self.pause_tracker.abrir(ahora)
        self.estado = TicketStatus.PAUSADO
        return pausa

    def reanudar(self, ahora: datetime) -> PausaIntervalo:
        """
        Reanuda el ticket (sólo desde pausado).

        Raises:
            InvalidTransitionError: Si el estado no es pausado
            NoOpenPauseError: Si el invariante de pausas está roto
        """
        if self.estado != TicketStatus.PAUSADO:
            raise InvalidTransitionError(self.estado.value, "reanudar", self.id)
        pausa = self.pause_tracker.cerrar(ahora)
        self.estado = TicketStatus.ACTIVO
        return pausa

    def cantidad_acumulada(self, servicio_id: str) -> int:
        """Unidades del servicio ya agregadas al ticket."""
        return sum(l.cantidad for l in self.servicios if l.servicio_id == servicio_id)

    def verificar_servicio(self, servicio: ServicioEntity, cantidad: int) -> None:
        """
        Valida que el servicio pueda agregarse, sin modificar nada.

        Raises:
            InvalidTransitionError: Si el ticket está cerrado o cancelado
            ValidationError: Si la cantidad es menor que 1
            BusinessRuleViolationError: Si el servicio está inactivo
            MaxQuantityExceededError: Si se supera el máximo por ticket
        """
        self._verificar_abierto("agregar servicios a")
        if cantidad is None or cantidad < 1:
            raise ValidationError("La cantidad debe ser al menos 1", field="cantidad")
        if not servicio.activo:
            raise BusinessRuleViolationError(
                f"El servicio {servicio.nombre} no está activo",
                rule="servicio_activo",
            )
        if servicio.maximo_por_ticket is not None:
            acumulado = self.cantidad_acumulada(servicio.id) + cantidad
            if acumulado > servicio.maximo_por_ticket:
                raise MaxQuantityExceededError(
                    servicio.id, servicio.maximo_por_ticket, acumulado
                )

    def agregar_servicio(
        self,
        servicio: ServicioEntity,
        cantidad: int,
        ahora: datetime,
    ) -> TicketServicioLinea:
        """
        Registra una línea de servicio con el precio vigente.

        La reserva de inventario la hace el use case antes de llamar
        a este método.
        """
        self.verificar_servicio(servicio, cantidad)
        precio = redondear_dinero(servicio.precio)
        linea = TicketServicioLinea(
            servicio_id=servicio.id,
            servicio_nombre=servicio.nombre,
            cantidad=cantidad,
            precio_unitario=precio,
            monto_total=redondear_dinero(precio * cantidad),
            controla_inventario=servicio.requiere_inventario,
            agregado_en=ahora,
        )
        self.servicios.append(linea)
        return linea

    def cerrar(
        self,
        calculo: CalculoTiempo,
        liquidacion: Liquidacion,
        metodo_pago: MetodoPago,
        operador_id: str,
        as_of: datetime,
    ) -> None:
        """
        Cierra el ticket con el cobro ya calculado.

        Una pausa abierta se cierra en `as_of`.

        Raises:
            InvalidTransitionError: Si el ticket ya es terminal
        """
        self._verificar_transicion(TicketStatus.CERRADO, "cerrar")
        if self.estado == TicketStatus.PAUSADO:
            self._cerrar_pausa_abierta(as_of)

        self.hora_salida = as_of
        self.operador_salida_id = operador_id
        self.minutos_cobrados = calculo.minutos_cobrables
        self.monto_tiempo = liquidacion.monto_tiempo
        self.descuento_porcentaje = liquidacion.descuento_porcentaje
        self.monto_descuento = liquidacion.monto_descuento
        self.monto_servicios = liquidacion.monto_servicios
        self.monto_total = liquidacion.monto_total
        self.metodo_pago = metodo_pago
        self.estado = TicketStatus.CERRADO

    def cancelar(self, motivo: str, ahora: datetime) -> None:
        """
        Cancela el ticket. No registra montos.

        Raises:
            InvalidTransitionError: Si el ticket ya es terminal
            EmptyCancelReasonError: Si el motivo está vacío
        """
        self._verificar_transicion(TicketStatus.CANCELADO, "cancelar")
        if not motivo or not motivo.strip():
            raise EmptyCancelReasonError()
        if self.estado == TicketStatus.PAUSADO:
            self._cerrar_pausa_abierta(ahora)

        self.motivo_cancelacion = motivo.strip()
        self.estado = TicketStatus.CANCELADO

    def _cerrar_pausa_abierta(self, momento: datetime) -> None:
        tracker = self.pause_tracker
        pausa = tracker.pausa_abierta
        if pausa is not None:
            tracker.cerrar(max(momento, pausa.inicio))

    # -------------------------------------------------------------------------
    # Consultas
    # -------------------------------------------------------------------------

    @property
    def subtotal_servicios(self) -> Decimal:
        return redondear_dinero(sum((l.monto_total for l in self.servicios), Decimal("0")))

    @property
    def lineas_con_inventario(self) -> List[TicketServicioLinea]:
        return [l for l in self.servicios if l.controla_inventario]

    @property
    def esta_abierto(self) -> bool:
        return not self.estado.es_terminal

    def __repr__(self) -> str:
        return (
            f"TicketEntity("
            f"id={self.id[:8]}..., "
            f"codigo={self.codigo}, "
            f"estado={self.estado.value}, "
            f"version={self.version}"
            f")"
        )

    def __eq__(self, other: object) -> bool:
        """Comparación por ID (identidad de entidad)."""
        if not isinstance(other, TicketEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
