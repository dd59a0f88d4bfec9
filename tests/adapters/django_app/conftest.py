"""
Configuración pytest para los tests con Django.

Este archivo configura:
- Django settings mínimas para tests
- Base de datos SQLite de prueba (creada por pytest-django con las migraciones)
- Fixtures con los adapters Django del motor
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest


def pytest_configure(config):
    """Configura Django antes de los tests."""
    import django
    from django.conf import settings

    if not settings.configured:
        settings.configure(
            DEBUG=True,
            DATABASES={
                'default': {
                    'ENGINE': 'django.db.backends.sqlite3',
                    'NAME': ':memory:',
                }
            },
            INSTALLED_APPS=[
                'django.contrib.contenttypes',
                'src.adapters.django_app.tickets',
                'src.adapters.django_app.billing',
                'src.adapters.django_app.inventory',
                'src.adapters.django_app.audit',
            ],
            DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
            USE_TZ=True,
            TIME_ZONE='America/Mexico_City',
        )
        django.setup()


INSTANTE = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    from src.core.shared.clock import FixedClock
    return FixedClock(INSTANTE)


@pytest.fixture
def operador():
    from src.core.shared.identity import PoliticaRoles
    return PoliticaRoles().identidad("op-1", "operador")


@pytest.fixture
def supervisor():
    from src.core.shared.identity import PoliticaRoles
    return PoliticaRoles().identidad("sup-1", "supervisor")


@pytest.fixture
def ticket_repo():
    from src.adapters.django_app.tickets.repositories import DjangoTicketRepository
    return DjangoTicketRepository()


@pytest.fixture
def tarifa_repo():
    from src.adapters.django_app.billing.repositories import DjangoTarifaRepository
    return DjangoTarifaRepository()


@pytest.fixture
def cliente_repo():
    from src.adapters.django_app.billing.repositories import DjangoClienteRepository
    return DjangoClienteRepository()


@pytest.fixture
def servicio_repo():
    from src.adapters.django_app.inventory.repositories import DjangoServicioRepository
    return DjangoServicioRepository()


@pytest.fixture
def audit_sink():
    from src.adapters.django_app.audit.sinks import DjangoAuditSink
    return DjangoAuditSink()


@pytest.fixture
def publisher():
    from src.adapters.django_app.events.publishers import InMemoryEventPublisher
    return InMemoryEventPublisher()


@pytest.fixture
def uow_factory(audit_sink, publisher):
    """Crea un DjangoUnitOfWork nuevo por operación."""
    from src.adapters.django_app.shared.unit_of_work import DjangoUnitOfWork

    def crear():
        return DjangoUnitOfWork(event_publisher=publisher, audit_sink=audit_sink)

    return crear


@pytest.fixture
def tarifa(tarifa_repo):
    from src.core.billing.entities import TarifaEntity
    tarifa = TarifaEntity.crear(nombre="General", precio_por_hora=Decimal("100.00"))
    tarifa_repo.save(tarifa)
    return tarifa


@pytest.fixture
def cliente(cliente_repo):
    from src.core.billing.entities import ClienteEntity, Membresia
    cliente = ClienteEntity.registrar("C-001", "Ana Pérez", Membresia.PREMIUM)
    cliente_repo.save(cliente)
    return cliente


@pytest.fixture
def casco(servicio_repo):
    from src.core.inventory.entities import ServicioEntity
    servicio = ServicioEntity.crear(
        nombre="Casco",
        precio=Decimal("20.00"),
        requiere_inventario=True,
        stock_actual=5,
        maximo_por_ticket=3,
    )
    servicio_repo.save(servicio)
    return servicio
