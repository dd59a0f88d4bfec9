"""
Use Cases (Application Services) del Dominio de Tickets.

Este módulo contiene los casos de uso que orquestan el ciclo de vida
de un ticket coordinando entidades, repositorios, inventario y eventos.

Use Cases implementados:
- AbrirTicketService: Abre un ticket
- PausarTicketService: Pausa el tiempo de pista
- ReanudarTicketService: Reanuda el tiempo de pista
- AgregarServicioService: Agrega un servicio (reserva stock)
- CerrarTicketService: Cierra y cobra
- CancelarTicketService: Cancela (devuelve stock)
- PrevisualizarCobroService: Calcula el cobro sin efectos
- ObtenerTicketService / ListarTicketsService: Lecturas

Orden dentro de cada escritura:
1. Validar y mutar la entidad (nada se persiste aún)
2. Efectos compensables (reserva de stock, auditoría)
3. Guardar el ticket con compare-and-set: punto de commit

Si el compare-and-set falla porque otro proceso cambió el estado y la
operación ya no es legal, el llamador recibe InvalidTransitionError;
si sigue siendo legal, ConcurrencyError (debe volver a consultar).
Ningún error se reintenta dentro del motor.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from src.core.inventory.ledger import InventoryLedger
from src.core.inventory.ports import ServicioRepository
from src.core.billing.ports import ClienteRepository, TarifaRepository
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    ConcurrencyError,
    EmptyCancelReasonError,
    EntityNotFoundError,
    InvalidTransitionError,
    NoActiveRateError,
    ValidationError,
)
from src.core.shared.identity import Capacidad, Identidad
from src.core.shared.interfaces import Clock, UnitOfWork

from .cobro import CalculadoraCobro
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
from .entities import MetodoPago, TicketEntity, TicketStatus
from .events import (
    ServicioAgregadoEvent,
    TicketAbiertoEvent,
    TicketCanceladoEvent,
    TicketCerradoEvent,
    TicketPausadoEvent,
    TicketReanudadoEvent,
)
from .ports import TicketRepository


logger = logging.getLogger(__name__)


def _cargar_ticket(ticket_repo: TicketRepository, ticket_id: str) -> TicketEntity:
    ticket = ticket_repo.get_by_id(ticket_id)
    if not ticket:
        raise EntityNotFoundError(
            f"Ticket {ticket_id} no encontrado",
            entity_type="Ticket",
            entity_id=ticket_id,
        )
    return ticket


def _guardar_transicion(
    ticket_repo: TicketRepository,
    ticket: TicketEntity,
    operacion: str,
    legal_desde: Callable[[TicketStatus], bool],
) -> None:
    """
    Guarda con compare-and-set y traduce la pérdida de una carrera.

    Args:
        operacion: Verbo de la operación (para el mensaje de error)
        legal_desde: Predicado sobre el estado almacenado actual
    """
    try:
        ticket_repo.save(ticket)
    except ConcurrencyError as e:
        actual = ticket_repo.get_by_id(ticket.id)
        if actual is not None and not legal_desde(actual.estado):
            raise InvalidTransitionError(actual.estado.value, operacion, ticket.id) from e
        raise


def _no_terminal(estado: TicketStatus) -> bool:
    return not estado.es_terminal


class AbrirTicketService:
    """
    Use Case: Abrir un ticket.

    Flujo:
    1. Validar cliente y tarifa (activa y aplicable ahora)
    2. Crear la entidad con hora de entrada del reloj del motor
    3. Auditar crear_ticket
    4. Persistir

    Example:
        service = AbrirTicketService(ticket_repo, tarifa_repo, cliente_repo, uow, clock)
        output = service.execute(
            AbrirTicketInputDTO(cliente_id="c-1", personas=2, tarifa_id="t-1"),
            identidad,
        )
        print(output.codigo)  # TK-20240501-3F9A1C
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        tarifa_repo: TarifaRepository,
        cliente_repo: ClienteRepository,
        uow: UnitOfWork,
        clock: Clock,
    ):
        self.ticket_repo = ticket_repo
        self.tarifa_repo = tarifa_repo
        self.cliente_repo = cliente_repo
        self.uow = uow
        self.clock = clock

    def execute(self, input_dto: AbrirTicketInputDTO, identidad: Identidad) -> TicketOutputDTO:
        """
        Raises:
            ValidationError: Si personas < 1 u otros datos inválidos
            EntityNotFoundError: Si el cliente no existe
            NoActiveRateError: Si la tarifa no existe, está inactiva o fuera de ventana
        """
        with self.uow:
            ahora = self.clock.now()

            if input_dto.personas is None or input_dto.personas < 1:
                raise ValidationError("Debe haber al menos una persona", field="personas")

            cliente = self.cliente_repo.get_by_id(input_dto.cliente_id)
            if not cliente:
                raise EntityNotFoundError(
                    f"Cliente {input_dto.cliente_id} no encontrado",
                    entity_type="Cliente",
                    entity_id=input_dto.cliente_id,
                )

            tarifa = self.tarifa_repo.get_by_id(input_dto.tarifa_id)
            if tarifa is None or not tarifa.es_utilizable_en(ahora):
                raise NoActiveRateError(
                    f"La tarifa {input_dto.tarifa_id} no está activa en este momento",
                    tarifa_id=input_dto.tarifa_id,
                )

            ticket = TicketEntity.abrir(
                cliente_id=cliente.id,
                personas=input_dto.personas,
                tarifa_id=tarifa.id,
                operador_id=identidad.usuario_id,
                ahora=ahora,
                notas=input_dto.notas,
            )

            self.uow.publish_event(
                TicketAbiertoEvent(
                    aggregate_id=ticket.id,
                    actor_id=identidad.usuario_id,
                    occurred_at=ahora,
                    codigo=ticket.codigo,
                    cliente_id=ticket.cliente_id,
                    personas=ticket.personas,
                    tarifa_id=ticket.tarifa_id,
                    hora_entrada=ahora.isoformat(),
                )
            )
            self.ticket_repo.save(ticket)

        logger.info("Ticket %s abierto por %s", ticket.codigo, identidad.usuario_id)
        return TicketOutputDTO.from_entity(ticket)


class PausarTicketService:
    """
    Use Case: Pausar un ticket activo.

    El tiempo pausado no se cobra.
    """

    def __init__(self, ticket_repo: TicketRepository, uow: UnitOfWork, clock: Clock):
        self.ticket_repo = ticket_repo
        self.uow = uow
        self.clock = clock

    def execute(self, input_dto: PausarTicketInputDTO, identidad: Identidad) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Si el ticket no existe
            InvalidTransitionError: Si el ticket no está activo
        """
        with self.uow:
            ahora = self.clock.now()
            ticket = _cargar_ticket(self.ticket_repo, input_dto.ticket_id)

            pausa = ticket.pausar(ahora)

            self.uow.publish_event(
                TicketPausadoEvent(
                    aggregate_id=ticket.id,
                    actor_id=identidad.usuario_id,
                    occurred_at=ahora,
                    codigo=ticket.codigo,
                    pausa_id=pausa.id,
                    inicio=pausa.inicio.isoformat(),
                )
            )
            _guardar_transicion(
                self.ticket_repo, ticket, "pausar",
                lambda estado: estado == TicketStatus.ACTIVO,
            )

        logger.info("Ticket %s pausado", ticket.codigo)
        return TicketOutputDTO.from_entity(ticket)


class ReanudarTicketService:
    """
    Use Case: Reanudar un ticket pausado.
    """

    def __init__(self, ticket_repo: TicketRepository, uow: UnitOfWork, clock: Clock):
        self.ticket_repo = ticket_repo
        self.uow = uow
        self.clock = clock

    def execute(self, input_dto: ReanudarTicketInputDTO, identidad: Identidad) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Si el ticket no existe
            InvalidTransitionError: Si el ticket no está pausado
            NoOpenPauseError: Si el ticket pausado no tiene pausa abierta
        """
        with self.uow:
            ahora = self.clock.now()
            ticket = _cargar_ticket(self.ticket_repo, input_dto.ticket_id)

            pausa = ticket.reanudar(ahora)

            self.uow.publish_event(
                TicketReanudadoEvent(
                    aggregate_id=ticket.id,
                    actor_id=identidad.usuario_id,
                    occurred_at=ahora,
                    codigo=ticket.codigo,
                    pausa_id=pausa.id,
                    inicio=pausa.inicio.isoformat(),
                    fin=pausa.fin.isoformat(),
                )
            )
            _guardar_transicion(
                self.ticket_repo, ticket, "reanudar",
                lambda estado: estado == TicketStatus.PAUSADO,
            )

        logger.info("Ticket %s reanudado", ticket.codigo)
        return TicketOutputDTO.from_entity(ticket)


class AgregarServicioService:
    """
    Use Case: Agregar un servicio a un ticket abierto.

    Flujo:
    1. Validar estado, servicio activo, cantidad y máximo por ticket
    2. Reservar stock si el servicio lo controla (compensable)
    3. Registrar la línea con el precio vigente
    4. Auditar agregar_servicio con cantidad y stock resultante
    5. Persistir con compare-and-set

    Si cualquier paso falla, la reserva se devuelve y el ticket queda
    como estaba.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        servicio_repo: ServicioRepository,
        ledger: InventoryLedger,
        uow: UnitOfWork,
        clock: Clock,
    ):
        self.ticket_repo = ticket_repo
        self.servicio_repo = servicio_repo
        self.ledger = ledger
        self.uow = uow
        self.clock = clock

    def execute(self, input_dto: AgregarServicioInputDTO, identidad: Identidad) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Si el ticket o el servicio no existen
            InvalidTransitionError: Si el ticket está cerrado o cancelado
            ValidationError: Si la cantidad es menor que 1
            BusinessRuleViolationError: Si el servicio está inactivo
            MaxQuantityExceededError: Si se supera el máximo por ticket
            InsufficientStockError: Si no hay stock suficiente
        """
        with self.uow:
            ahora = self.clock.now()
            ticket = _cargar_ticket(self.ticket_repo, input_dto.ticket_id)

            servicio = self.servicio_repo.get_by_id(input_dto.servicio_id)
            if not servicio:
                raise EntityNotFoundError(
                    f"Servicio {input_dto.servicio_id} no encontrado",
                    entity_type="Servicio",
                    entity_id=input_dto.servicio_id,
                )

            ticket.verificar_servicio(servicio, input_dto.cantidad)

            stock_resultante = None
            if servicio.requiere_inventario:
                stock_resultante = self.ledger.reservar(servicio.id, input_dto.cantidad)
                self.uow.on_rollback(
                    lambda: self.ledger.liberar(servicio.id, input_dto.cantidad)
                )

            linea = ticket.agregar_servicio(servicio, input_dto.cantidad, ahora)

            self.uow.publish_event(
                ServicioAgregadoEvent(
                    aggregate_id=ticket.id,
                    actor_id=identidad.usuario_id,
                    occurred_at=ahora,
                    codigo=ticket.codigo,
                    servicio_id=servicio.id,
                    linea_id=linea.id,
                    cantidad=linea.cantidad,
                    precio_unitario=str(linea.precio_unitario),
                    monto_total=str(linea.monto_total),
                    stock_resultante=stock_resultante,
                )
            )
            _guardar_transicion(
                self.ticket_repo, ticket, "agregar servicios a", _no_terminal,
            )

        logger.info(
            "Servicio %s x%s agregado al ticket %s",
            servicio.nombre, linea.cantidad, ticket.codigo,
        )
        return TicketOutputDTO.from_entity(ticket)


class CerrarTicketService:
    """
    Use Case: Cerrar y cobrar un ticket.

    Calcula tiempo (tarifa fijada al abrir, pausas recortadas al corte),
    suma servicios, aplica el descuento actual del cliente y fija la
    hora de salida. No devuelve stock: los servicios se consumieron.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        calculadora: CalculadoraCobro,
        uow: UnitOfWork,
        clock: Clock,
    ):
        self.ticket_repo = ticket_repo
        self.calculadora = calculadora
        self.uow = uow
        self.clock = clock

    def execute(self, input_dto: CerrarTicketInputDTO, identidad: Identidad) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Si el ticket no existe
            InvalidTransitionError: Si el ticket ya está cerrado o cancelado
            ValidationError: Si el método de pago o el corte son inválidos
        """
        try:
            metodo_pago = MetodoPago.from_string(input_dto.metodo_pago)
        except ValueError:
            raise ValidationError(
                f"Método de pago inválido: {input_dto.metodo_pago}",
                field="metodo_pago",
            )

        with self.uow:
            as_of = input_dto.as_of or self.clock.now()
            ticket = _cargar_ticket(self.ticket_repo, input_dto.ticket_id)
            if ticket.estado.es_terminal:
                raise InvalidTransitionError(ticket.estado.value, "cerrar", ticket.id)

            calculo, liquidacion = self.calculadora.calcular(ticket, as_of)
            ticket.cerrar(calculo, liquidacion, metodo_pago, identidad.usuario_id, as_of)

            self.uow.publish_event(
                TicketCerradoEvent(
                    aggregate_id=ticket.id,
                    actor_id=identidad.usuario_id,
                    occurred_at=as_of,
                    codigo=ticket.codigo,
                    hora_salida=as_of.isoformat(),
                    minutos_reales=calculo.minutos_reales,
                    minutos_cobrados=calculo.minutos_cobrables,
                    monto_tiempo=str(liquidacion.monto_tiempo),
                    descuento_porcentaje=str(liquidacion.descuento_porcentaje),
                    monto_descuento=str(liquidacion.monto_descuento),
                    monto_servicios=str(liquidacion.monto_servicios),
                    monto_total=str(liquidacion.monto_total),
                    metodo_pago=metodo_pago.value,
                )
            )
            _guardar_transicion(self.ticket_repo, ticket, "cerrar", _no_terminal)

        logger.info("Ticket %s cerrado: total %s", ticket.codigo, ticket.monto_total)
        return TicketOutputDTO.from_entity(ticket)


class CancelarTicketService:
    """
    Use Case: Cancelar un ticket abierto.

    Requiere la capacidad `cancelar`, y además `modificar_otros` si el
    ticket lo abrió otro operador. El stock de cada línea con inventario
    vuelve al catálogo antes de guardar, según lo que la línea reservó.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        ledger: InventoryLedger,
        uow: UnitOfWork,
        clock: Clock,
    ):
        self.ticket_repo = ticket_repo
        self.ledger = ledger
        self.uow = uow
        self.clock = clock

    def execute(self, input_dto: CancelarTicketInputDTO, identidad: Identidad) -> TicketOutputDTO:
        """
        Raises:
            PermissionDeniedError: Si falta una capacidad
            EmptyCancelReasonError: Si el motivo está vacío
            EntityNotFoundError: Si el ticket no existe
            InvalidTransitionError: Si el ticket ya está cerrado o cancelado
        """
        identidad.exigir(Capacidad.CANCELAR)

        with self.uow:
            ahora = self.clock.now()
            ticket = _cargar_ticket(self.ticket_repo, input_dto.ticket_id)
            if ticket.operador_entrada_id != identidad.usuario_id:
                identidad.exigir(Capacidad.MODIFICAR_OTROS)
            if not input_dto.motivo or not input_dto.motivo.strip():
                raise EmptyCancelReasonError()

            lineas = ticket.lineas_con_inventario
            ticket.cancelar(input_dto.motivo, ahora)

            for linea in lineas:
                self.ledger.liberar_linea(linea.servicio_id, linea.cantidad)
                self.uow.on_rollback(
                    lambda s=linea.servicio_id, c=linea.cantidad: self.ledger.reservar_linea(s, c)
                )

            self.uow.publish_event(
                TicketCanceladoEvent(
                    aggregate_id=ticket.id,
                    actor_id=identidad.usuario_id,
                    occurred_at=ahora,
                    codigo=ticket.codigo,
                    motivo=ticket.motivo_cancelacion,
                    lineas_liberadas=[
                        {"servicio_id": l.servicio_id, "cantidad": l.cantidad}
                        for l in lineas
                    ],
                )
            )
            _guardar_transicion(self.ticket_repo, ticket, "cancelar", _no_terminal)

        logger.info(
            "Ticket %s cancelado por %s (%s líneas devueltas)",
            ticket.codigo, identidad.usuario_id, len(lineas),
        )
        return TicketOutputDTO.from_entity(ticket)


class PrevisualizarCobroService:
    """
    Use Case: Previsualizar el cobro de un ticket.

    Sólo lectura, sin Unit of Work ni auditoría. Con el mismo ticket y
    el mismo instante produce siempre el mismo resultado.
    """

    def __init__(self, ticket_repo: TicketRepository, calculadora: CalculadoraCobro, clock: Clock):
        self.ticket_repo = ticket_repo
        self.calculadora = calculadora
        self.clock = clock

    def execute(self, ticket_id: str, as_of: Optional[datetime] = None) -> CobroOutputDTO:
        """
        Returns:
            Desglose calculado; en un ticket cerrado, el desglose guardado

        Raises:
            EntityNotFoundError: Si el ticket no existe
            BusinessRuleViolationError: Si el ticket está cancelado
        """
        ticket = _cargar_ticket(self.ticket_repo, ticket_id)

        if ticket.estado == TicketStatus.CERRADO:
            return CobroOutputDTO.from_ticket_cerrado(ticket)
        if ticket.estado == TicketStatus.CANCELADO:
            raise BusinessRuleViolationError(
                f"El ticket {ticket.codigo} está cancelado y no tiene cobro",
                rule="ticket_cancelado_sin_cobro",
            )

        as_of = as_of or self.clock.now()
        calculo, liquidacion = self.calculadora.calcular(ticket, as_of)
        return CobroOutputDTO.from_calculo(ticket.id, as_of, calculo, liquidacion)


class ObtenerTicketService:
    """
    Use Case: Obtener un ticket por ID o por código.
    """

    def __init__(self, ticket_repo: TicketRepository):
        self.ticket_repo = ticket_repo

    def execute(self, ticket_id: Optional[str] = None, codigo: Optional[str] = None) -> TicketOutputDTO:
        """
        Raises:
            ValidationError: Si no se indica ID ni código
            EntityNotFoundError: Si el ticket no existe
        """
        if ticket_id:
            return TicketOutputDTO.from_entity(_cargar_ticket(self.ticket_repo, ticket_id))
        if not codigo:
            raise ValidationError("Indique el ID o el código del ticket", field="ticket_id")

        ticket = self.ticket_repo.get_by_codigo(codigo)
        if not ticket:
            raise EntityNotFoundError(
                f"Ticket {codigo} no encontrado",
                entity_type="Ticket",
                entity_id=codigo,
            )
        return TicketOutputDTO.from_entity(ticket)


class ListarTicketsService:
    """
    Use Case: Listar tickets con filtros.

    No usa UoW porque es una lectura.
    """

    def __init__(self, ticket_repo: TicketRepository):
        self.ticket_repo = ticket_repo

    def execute(self, query: Optional[ListarTicketsQueryDTO] = None) -> List[TicketListItemDTO]:
        """
        Returns:
            Tickets ordenados por hora de entrada, más recientes primero

        Raises:
            ValidationError: Si el estado no es válido
        """
        query = query or ListarTicketsQueryDTO()

        if query.estado:
            try:
                estado = TicketStatus.from_string(query.estado)
            except ValueError:
                raise ValidationError(f"Estado inválido: {query.estado}", field="estado")
            tickets = self.ticket_repo.list_by_estado(estado)
        else:
            tickets = self.ticket_repo.list_all()

        if query.cliente_id:
            tickets = [t for t in tickets if t.cliente_id == query.cliente_id]

        tickets.sort(key=lambda t: t.hora_entrada, reverse=True)
        return [TicketListItemDTO.from_entity(t) for t in tickets]
