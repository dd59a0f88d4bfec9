"""
Tests de Integración End-to-End.

Validan el flujo completo del motor cableado por el container:
- Use Case -> Repository -> Unit of Work -> Auditoría
- Domain Events -> Publisher -> Handlers (Celery con .delay simulado)

Usan el TestingContainer: repositorios en memoria y reloj fijo.
"""

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from src.adapters.django_app.events import handlers
from src.adapters.django_app.events.publishers import (
    CeleryEventPublisher,
    InMemoryEventPublisher,
    LoggingEventPublisher,
    get_event_publisher,
)
from src.config.container import INSTANTE_INICIAL_TESTS, TestingContainer
from src.core.billing.entities import ClienteEntity, Membresia, TarifaEntity
from src.core.inventory.entities import ServicioEntity
from src.core.shared.exceptions import InvalidTransitionError, PermissionDeniedError
from src.core.tickets.dtos import (
    AbrirTicketInputDTO,
    AgregarServicioInputDTO,
    CancelarTicketInputDTO,
    CerrarTicketInputDTO,
    PausarTicketInputDTO,
    ReanudarTicketInputDTO,
)
from src.core.tickets.events import ServicioAgregadoEvent, TicketCerradoEvent


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def container():
    """Container con implementaciones en memoria."""
    return TestingContainer()


@pytest.fixture
def catalogo(container):
    """Tarifa, cliente y un servicio con 2 unidades."""
    tarifa = TarifaEntity.crear(nombre="General", precio_por_hora=Decimal("100.00"))
    cliente = ClienteEntity.registrar("C-001", "Ana Pérez", Membresia.PREMIUM)
    casco = ServicioEntity.crear(
        nombre="Casco",
        precio=Decimal("20.00"),
        requiere_inventario=True,
        stock_actual=2,
    )
    container.tarifa_repository().save(tarifa)
    container.cliente_repository().save(cliente)
    container.servicio_repository().save(casco)
    return {"tarifa": tarifa, "cliente": cliente, "casco": casco}


@pytest.fixture
def operador(container):
    return container.politica_roles().identidad("op-1", "operador")


@pytest.fixture
def supervisor(container):
    return container.politica_roles().identidad("sup-1", "supervisor")


def _abrir(container, catalogo, identidad):
    return container.abrir_ticket_service().execute(
        AbrirTicketInputDTO(
            cliente_id=catalogo["cliente"].id,
            personas=3,
            tarifa_id=catalogo["tarifa"].id,
        ),
        identidad,
    )


# =============================================================================
# Tests de Flujo Completo
# =============================================================================

class TestCicloDeVidaIntegration:
    """Ciclo de vida completo de un ticket."""

    def test_abrir_pausar_agregar_cerrar(self, container, catalogo, operador):
        """Debe cobrar tiempo efectivo, servicios y descuento."""
        # Arrange
        clock = container.clock()
        ticket = _abrir(container, catalogo, operador)

        # Act
        clock.advance(minutes=30)
        container.pausar_ticket_service().execute(PausarTicketInputDTO(ticket.id), operador)
        clock.advance(minutes=15)
        container.reanudar_ticket_service().execute(ReanudarTicketInputDTO(ticket.id), operador)
        container.agregar_servicio_service().execute(
            AgregarServicioInputDTO(ticket.id, catalogo["casco"].id, 2), operador
        )
        clock.advance(minutes=30)
        previa = container.previsualizar_cobro_service().execute(ticket.id)
        cerrado = container.cerrar_ticket_service().execute(
            CerrarTicketInputDTO(ticket.id), operador
        )

        # Assert - 60 minutos efectivos: 100 - 10% + 40
        assert cerrado.minutos_cobrados == 60
        assert cerrado.monto_total == Decimal("130.00")
        assert previa.monto_total == cerrado.monto_total
        assert cerrado.hora_entrada == INSTANTE_INICIAL_TESTS

        # Assert - Persistido
        obtenido = container.obtener_ticket_service().execute(codigo=ticket.codigo)
        assert obtenido.estado == "cerrado"
        assert container.servicio_repository().get_by_id(catalogo["casco"].id).stock_actual == 0

        # Assert - Auditoría y eventos
        acciones = [r.accion for r in container.audit_sink().registros(ticket.id)]
        assert acciones == [
            "crear_ticket", "pausar_ticket", "reanudar_ticket",
            "agregar_servicio", "cerrar_ticket",
        ]
        publisher = container.event_publisher()
        assert len(publisher.published_events) == 5
        assert len(publisher.get_events_by_type("TicketCerradoEvent")) == 1

    def test_cancelar_por_supervisor(self, container, catalogo, operador, supervisor):
        ticket = _abrir(container, catalogo, operador)
        container.agregar_servicio_service().execute(
            AgregarServicioInputDTO(ticket.id, catalogo["casco"].id, 1), operador
        )

        with pytest.raises(PermissionDeniedError):
            container.cancelar_ticket_service().execute(
                CancelarTicketInputDTO(ticket.id, "se retiró"), operador
            )
        cancelado = container.cancelar_ticket_service().execute(
            CancelarTicketInputDTO(ticket.id, "se retiró"), supervisor
        )

        assert cancelado.estado == "cancelado"
        assert container.servicio_repository().get_by_id(catalogo["casco"].id).stock_actual == 2
        with pytest.raises(InvalidTransitionError):
            container.cerrar_ticket_service().execute(CerrarTicketInputDTO(ticket.id), supervisor)

    def test_listar(self, container, catalogo, operador):
        primero = _abrir(container, catalogo, operador)
        container.clock().advance(minutes=1)
        segundo = _abrir(container, catalogo, operador)
        container.cerrar_ticket_service().execute(CerrarTicketInputDTO(primero.id), operador)

        todos = container.listar_tickets_service().execute()

        assert [t.id for t in todos] == [segundo.id, primero.id]

    def test_descuento_sobre_servicios_configurable(self, container, catalogo, operador):
        container.config.descuento_aplica_a_servicios.from_value(True)
        ticket = _abrir(container, catalogo, operador)
        container.agregar_servicio_service().execute(
            AgregarServicioInputDTO(ticket.id, catalogo["casco"].id, 1), operador
        )
        container.clock().advance(minutes=60)

        cerrado = container.cerrar_ticket_service().execute(
            CerrarTicketInputDTO(ticket.id), operador
        )

        assert cerrado.monto_descuento == Decimal("12.00")
        assert cerrado.monto_total == Decimal("108.00")

    def test_capacidades_configurables(self, container, catalogo, operador):
        container.config.capacidades_por_rol.from_value({"cajero": ["cancelar", "modificar_otros"]})
        container.politica_roles.reset()
        cajero = container.politica_roles().identidad("caja-1", "cajero")
        ticket = _abrir(container, catalogo, operador)

        cancelado = container.cancelar_ticket_service().execute(
            CancelarTicketInputDTO(ticket.id, "duplicado"), cajero
        )

        assert cancelado.estado == "cancelado"

    def test_resolver_tarifa_vigente(self, container, catalogo):
        tarifa = container.resolver_tarifa_service().execute()

        assert tarifa.id == catalogo["tarifa"].id


# =============================================================================
# Tests de Publishers
# =============================================================================

def _evento_cerrado():
    return TicketCerradoEvent(
        aggregate_id="t-1",
        actor_id="op-1",
        occurred_at=INSTANTE_INICIAL_TESTS,
        codigo="TK-20240501-000001",
        monto_total="130.00",
        metodo_pago="efectivo",
    )


class TestEventPublishers:

    def test_factory(self):
        assert isinstance(get_event_publisher("celery"), CeleryEventPublisher)
        assert isinstance(get_event_publisher("memory"), InMemoryEventPublisher)
        assert isinstance(get_event_publisher("logging"), LoggingEventPublisher)
        assert isinstance(get_event_publisher("otro"), LoggingEventPublisher)

    def test_handlers_locales(self):
        publisher = InMemoryEventPublisher()
        recibidos = []
        publisher.register_handler("TicketCerradoEvent", recibidos.append)

        publisher.publish(_evento_cerrado())

        assert len(recibidos) == 1

    def test_handler_con_error_no_interrumpe(self):
        """Un handler que falla no impide los siguientes."""
        publisher = LoggingEventPublisher()
        recibidos = []
        publisher.register_handler("TicketCerradoEvent", MagicMock(side_effect=RuntimeError("x")))
        publisher.register_handler("TicketCerradoEvent", recibidos.append)

        publisher.publish(_evento_cerrado())

        assert len(recibidos) == 1

    def test_celery_publisher_despacha(self):
        with patch.object(handlers, "dispatch_domain_event") as dispatch:
            CeleryEventPublisher(also_log=False).publish(_evento_cerrado())

        event_type, event_data = dispatch.delay.call_args[0]
        assert event_type == "TicketCerradoEvent"
        assert event_data["data"]["monto_total"] == "130.00"

    def test_celery_caido_no_propaga(self):
        with patch.object(handlers, "dispatch_domain_event") as dispatch:
            dispatch.delay.side_effect = ConnectionError("broker caído")

            CeleryEventPublisher().publish(_evento_cerrado())

        dispatch.delay.assert_called_once()


# =============================================================================
# Tests de Handlers
# =============================================================================

class TestEventHandlers:

    def test_dispatch_enruta(self):
        handler = MagicMock()
        with patch.dict(handlers.EVENT_HANDLERS, {"TicketCerradoEvent": handler}):
            handlers.dispatch_domain_event("TicketCerradoEvent", {"data": {}})

        handler.delay.assert_called_once_with({"data": {}})

    def test_dispatch_sin_handler(self):
        with patch.dict(handlers.EVENT_HANDLERS, {}, clear=True):
            handlers.dispatch_domain_event("TicketPausadoEvent", {"data": {}})

    def test_ticket_cerrado_registra_ingreso(self):
        with patch.object(handlers, "record_metric") as record_metric:
            handlers.handle_ticket_cerrado(_evento_cerrado().to_dict())

        record_metric.delay.assert_called_once_with(
            metric_name="ingresos_cobrados",
            value=130.0,
            tags={"metodo_pago": "efectivo"},
        )

    @pytest.mark.parametrize("stock, avisos", [(0, 1), (3, 0), (None, 0)])
    def test_servicio_agotado_avisa(self, stock, avisos):
        evento = ServicioAgregadoEvent(
            aggregate_id="t-1",
            actor_id="op-1",
            occurred_at=INSTANTE_INICIAL_TESTS,
            servicio_id="s-1",
            cantidad=1,
            stock_resultante=stock,
        )

        with patch.object(handlers, "notify_staff") as notify_staff:
            handlers.handle_servicio_agregado(evento.to_dict())

        assert notify_staff.delay.call_count == avisos
