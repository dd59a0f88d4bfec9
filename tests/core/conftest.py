"""
Fixtures del Core: repositorios en memoria, reloj fijo e identidades.

Cada test recibe su propio juego de repositorios; los servicios se
construyen con `motor`, que replica el cableado del container.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from src.adapters.django_app.events.publishers import InMemoryEventPublisher
from src.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
from src.core.billing.discounts import DescuentoCalculator
from src.core.billing.entities import ClienteEntity, Membresia, TarifaEntity, TipoRedondeo
from src.core.billing.ports import InMemoryClienteRepository, InMemoryTarifaRepository
from src.core.inventory.entities import ServicioEntity
from src.core.inventory.ledger import InventoryLedger
from src.core.inventory.ports import InMemoryServicioRepository
from src.core.shared.audit import InMemoryAuditSink
from src.core.shared.clock import FixedClock
from src.core.shared.identity import PoliticaRoles
from src.core.tickets.cobro import CalculadoraCobro
from src.core.tickets import use_cases
from src.core.tickets.ports import InMemoryTicketRepository


INSTANTE = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FixedClock(INSTANTE)


@pytest.fixture
def politica():
    return PoliticaRoles()


@pytest.fixture
def operador(politica):
    return politica.identidad("op-1", "operador")


@pytest.fixture
def otro_operador(politica):
    return politica.identidad("op-2", "operador")


@pytest.fixture
def supervisor(politica):
    return politica.identidad("sup-1", "supervisor")


@pytest.fixture
def ticket_repo():
    return InMemoryTicketRepository()


@pytest.fixture
def tarifa_repo():
    return InMemoryTarifaRepository()


@pytest.fixture
def cliente_repo():
    return InMemoryClienteRepository()


@pytest.fixture
def servicio_repo():
    return InMemoryServicioRepository()


@pytest.fixture
def audit_sink():
    return InMemoryAuditSink()


@pytest.fixture
def publisher():
    return InMemoryEventPublisher()


@pytest.fixture
def ledger(servicio_repo):
    return InventoryLedger(servicio_repo)


@pytest.fixture
def tarifa(tarifa_repo):
    """100/h, mínimo 60 minutos, redondeo hacia arriba."""
    tarifa = TarifaEntity.crear(
        nombre="General",
        precio_por_hora=Decimal("100.00"),
        minutos_minimos=60,
        tipo_redondeo=TipoRedondeo.ARRIBA,
    )
    tarifa_repo.save(tarifa)
    return tarifa


@pytest.fixture
def cliente(cliente_repo):
    """Cliente premium con 10% de descuento."""
    cliente = ClienteEntity.registrar("C-001", "Ana Pérez", Membresia.PREMIUM)
    cliente_repo.save(cliente)
    return cliente


@pytest.fixture
def casco(servicio_repo):
    """Servicio con inventario: 5 unidades, máximo 3 por ticket."""
    servicio = ServicioEntity.crear(
        nombre="Casco",
        precio=Decimal("20.00"),
        requiere_inventario=True,
        stock_actual=5,
        maximo_por_ticket=3,
    )
    servicio_repo.save(servicio)
    return servicio


@pytest.fixture
def agua(servicio_repo):
    """Servicio sin control de inventario."""
    servicio = ServicioEntity.crear(nombre="Agua", precio=Decimal("15.50"))
    servicio_repo.save(servicio)
    return servicio


class Motor:
    """
    Construye servicios con los fakes del test.

    Cada llamada crea un servicio con su propia Unit of Work, igual que
    los providers Factory del container.
    """

    def __init__(self, ticket_repo, tarifa_repo, cliente_repo, servicio_repo,
                 ledger, audit_sink, publisher, clock, descuentos=None):
        self.ticket_repo = ticket_repo
        self.tarifa_repo = tarifa_repo
        self.cliente_repo = cliente_repo
        self.servicio_repo = servicio_repo
        self.ledger = ledger
        self.audit_sink = audit_sink
        self.publisher = publisher
        self.clock = clock
        self.calculadora = CalculadoraCobro(
            tarifa_repo, cliente_repo, descuentos or DescuentoCalculator()
        )

    def uow(self):
        return InMemoryUnitOfWork(audit_sink=self.audit_sink, event_publisher=self.publisher)

    def abrir(self):
        return use_cases.AbrirTicketService(
            self.ticket_repo, self.tarifa_repo, self.cliente_repo, self.uow(), self.clock
        )

    def pausar(self):
        return use_cases.PausarTicketService(self.ticket_repo, self.uow(), self.clock)

    def reanudar(self):
        return use_cases.ReanudarTicketService(self.ticket_repo, self.uow(), self.clock)

    def agregar_servicio(self):
        return use_cases.AgregarServicioService(
            self.ticket_repo, self.servicio_repo, self.ledger, self.uow(), self.clock
        )

    def cerrar(self):
        return use_cases.CerrarTicketService(
            self.ticket_repo, self.calculadora, self.uow(), self.clock
        )

    def cancelar(self):
        return use_cases.CancelarTicketService(
            self.ticket_repo, self.ledger, self.uow(), self.clock
        )

    def previsualizar(self):
        return use_cases.PrevisualizarCobroService(self.ticket_repo, self.calculadora, self.clock)

    def obtener(self):
        return use_cases.ObtenerTicketService(self.ticket_repo)

    def listar(self):
        return use_cases.ListarTicketsService(self.ticket_repo)


@pytest.fixture
def motor(ticket_repo, tarifa_repo, cliente_repo, servicio_repo, ledger,
          audit_sink, publisher, clock):
    return Motor(
        ticket_repo, tarifa_repo, cliente_repo, servicio_repo,
        ledger, audit_sink, publisher, clock,
    )
