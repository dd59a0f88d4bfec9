"""
Dependency Injection Container.

Configura las dependencias del motor con dependency-injector.

Patrones:
- Singleton: una instancia por app (repositories, ledger, clock)
- Factory: nueva instancia por llamada (services, UoW)

Los adapters Django se importan de forma diferida: sus modelos sólo
pueden cargarse después de django.setup().
"""

import importlib
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from dependency_injector import containers, providers

from src.core.billing.discounts import DescuentoCalculator
from src.core.billing.ports import InMemoryClienteRepository, InMemoryTarifaRepository
from src.core.billing.use_cases import ResolverTarifaVigenteService
from src.core.inventory.ledger import InventoryLedger
from src.core.inventory.ports import InMemoryServicioRepository
from src.core.shared.audit import InMemoryAuditSink
from src.core.shared.clock import FixedClock, SystemClock
from src.core.shared.identity import PoliticaRoles
from src.core.tickets.cobro import CalculadoraCobro
from src.core.tickets.ports import InMemoryTicketRepository
from src.core.tickets.use_cases import (
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


def _lazy(module: str, name: str) -> Callable[..., Any]:
    """Callable que importa `module.name` recién al construir."""

    def factory(*args, **kwargs):
        return getattr(importlib.import_module(module), name)(*args, **kwargs)

    factory.__name__ = name
    return factory


DEFAULT_CONFIG = {
    'tarifa_bloque_minutos': 15,
    'tarifa_gracia_minutos': 5,
    'descuento_aplica_a_servicios': False,
    'inventario_cas_max_tentativas': 10,
    'capacidades_por_rol': None,
    'event_publisher_mode': 'logging',
}


class Container(containers.DeclarativeContainer):
    """
    Container principal con los adapters Django.

    Example:
        container = get_container()
        service = container.cerrar_ticket_service()
        cobro = service.execute(CerrarTicketInputDTO(ticket_id=...), identidad)
    """

    config = providers.Configuration(default=DEFAULT_CONFIG)

    # =========================================================================
    # Infrastructure
    # =========================================================================

    clock = providers.Singleton(SystemClock)

    event_publisher = providers.Singleton(
        _lazy('src.adapters.django_app.events.publishers', 'get_event_publisher'),
        mode=config.event_publisher_mode,
    )

    audit_sink = providers.Singleton(
        _lazy('src.adapters.django_app.audit.sinks', 'DjangoAuditSink'),
    )

    politica_roles = providers.Singleton(
        PoliticaRoles,
        capacidades_por_rol=config.capacidades_por_rol,
    )

    # =========================================================================
    # Repositories
    # =========================================================================

    ticket_repository = providers.Singleton(
        _lazy('src.adapters.django_app.tickets.repositories', 'DjangoTicketRepository'),
    )

    tarifa_repository = providers.Singleton(
        _lazy('src.adapters.django_app.billing.repositories', 'DjangoTarifaRepository'),
        bloque_minutos_default=config.tarifa_bloque_minutos,
        gracia_minutos_default=config.tarifa_gracia_minutos,
    )

    cliente_repository = providers.Singleton(
        _lazy('src.adapters.django_app.billing.repositories', 'DjangoClienteRepository'),
    )

    servicio_repository = providers.Singleton(
        _lazy('src.adapters.django_app.inventory.repositories', 'DjangoServicioRepository'),
    )

    # =========================================================================
    # Unit of Work (Factory - nueva instancia por operación)
    # =========================================================================

    unit_of_work = providers.Factory(
        _lazy('src.adapters.django_app.shared.unit_of_work', 'DjangoUnitOfWork'),
        event_publisher=event_publisher,
        audit_sink=audit_sink,
    )

    # =========================================================================
    # Domain Services
    # =========================================================================

    inventory_ledger = providers.Singleton(
        InventoryLedger,
        servicio_repo=servicio_repository,
        max_tentativas=config.inventario_cas_max_tentativas,
    )

    descuento_calculator = providers.Singleton(
        DescuentoCalculator,
        aplicar_a_servicios=config.descuento_aplica_a_servicios,
    )

    calculadora_cobro = providers.Singleton(
        CalculadoraCobro,
        tarifa_repo=tarifa_repository,
        cliente_repo=cliente_repository,
        descuento_calculator=descuento_calculator,
    )

    # =========================================================================
    # Use Cases (Factory)
    # =========================================================================

    abrir_ticket_service = providers.Factory(
        AbrirTicketService,
        ticket_repo=ticket_repository,
        tarifa_repo=tarifa_repository,
        cliente_repo=cliente_repository,
        uow=unit_of_work,
        clock=clock,
    )

    pausar_ticket_service = providers.Factory(
        PausarTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
        clock=clock,
    )

    reanudar_ticket_service = providers.Factory(
        ReanudarTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
        clock=clock,
    )

    agregar_servicio_service = providers.Factory(
        AgregarServicioService,
        ticket_repo=ticket_repository,
        servicio_repo=servicio_repository,
        ledger=inventory_ledger,
        uow=unit_of_work,
        clock=clock,
    )

    cerrar_ticket_service = providers.Factory(
        CerrarTicketService,
        ticket_repo=ticket_repository,
        calculadora=calculadora_cobro,
        uow=unit_of_work,
        clock=clock,
    )

    cancelar_ticket_service = providers.Factory(
        CancelarTicketService,
        ticket_repo=ticket_repository,
        ledger=inventory_ledger,
        uow=unit_of_work,
        clock=clock,
    )

    previsualizar_cobro_service = providers.Factory(
        PrevisualizarCobroService,
        ticket_repo=ticket_repository,
        calculadora=calculadora_cobro,
        clock=clock,
    )

    obtener_ticket_service = providers.Factory(
        ObtenerTicketService,
        ticket_repo=ticket_repository,
    )

    listar_tickets_service = providers.Factory(
        ListarTicketsService,
        ticket_repo=ticket_repository,
    )

    resolver_tarifa_service = providers.Factory(
        ResolverTarifaVigenteService,
        tarifa_repo=tarifa_repository,
        clock=clock,
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def config_from_settings() -> dict:
    """Lee la configuración de dominio de Django settings."""
    from django.conf import settings

    return {
        key: getattr(settings, key.upper(), default)
        for key, default in DEFAULT_CONFIG.items()
    }


def get_container() -> Container:
    """
    Retorna la instancia global del container.

    La crea al primer uso, configurada desde Django settings.
    """
    global _container

    if _container is None:
        _container = Container()
        _container.config.from_dict(config_from_settings())

    return _container


def reset_container() -> None:
    """Descarta el container global (para tests)."""
    global _container
    _container = None


# =============================================================================
# Testing Container
# =============================================================================

INSTANTE_INICIAL_TESTS = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


@containers.copy(Container)
class TestingContainer(Container):
    """
    Container con implementaciones en memoria y reloj fijo.

    Example:
        container = TestingContainer()
        container.clock().advance(minutes=90)
    """

    __test__ = False

    clock = providers.Singleton(FixedClock, instante=INSTANTE_INICIAL_TESTS)

    event_publisher = providers.Singleton(
        _lazy('src.adapters.django_app.events.publishers', 'InMemoryEventPublisher'),
    )

    audit_sink = providers.Singleton(InMemoryAuditSink)

    ticket_repository = providers.Singleton(InMemoryTicketRepository)

    tarifa_repository = providers.Singleton(InMemoryTarifaRepository)

    cliente_repository = providers.Singleton(InMemoryClienteRepository)

    servicio_repository = providers.Singleton(InMemoryServicioRepository)

    unit_of_work = providers.Factory(
        _lazy('src.adapters.django_app.shared.unit_of_work', 'InMemoryUnitOfWork'),
        audit_sink=audit_sink,
        event_publisher=event_publisher,
    )
