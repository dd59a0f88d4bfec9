"""
Ports (Interfaces) del Dominio de Facturación.

Contratos de persistencia de tarifas y clientes. El motor sólo lee
ambas entidades: la administración de tarifas y clientes vive fuera.

Implementaciones:
- DjangoTarifaRepository / DjangoClienteRepository (adapters)
- InMemoryTarifaRepository / InMemoryClienteRepository (tests)
"""

import copy
import threading
from typing import Dict, List, Optional, Protocol, runtime_checkable

from .entities import ClienteEntity, TarifaEntity


@runtime_checkable
class TarifaRepository(Protocol):
    """Persistencia de definiciones de tarifa."""

    def save(self, tarifa: TarifaEntity) -> None:
        ...

    def get_by_id(self, tarifa_id: str) -> Optional[TarifaEntity]:
        """
        Busca tarifa por ID, activa o no.

        Los tickets cerrados siguen referenciando tarifas desactivadas.
        """
        ...

    def list_activas(self) -> List[TarifaEntity]:
        """Tarifas activas, más recientes primero."""
        ...


@runtime_checkable
class ClienteRepository(Protocol):
    """Persistencia de clientes."""

    def save(self, cliente: ClienteEntity) -> None:
        ...

    def get_by_id(self, cliente_id: str) -> Optional[ClienteEntity]:
        ...

    def get_by_codigo(self, codigo: str) -> Optional[ClienteEntity]:
        ...


class InMemoryTarifaRepository:
    """
    Implementación en memoria del TarifaRepository.

    ¡No usar en producción!
    """

    def __init__(self):
        self._tarifas: Dict[str, TarifaEntity] = {}
        self._lock = threading.Lock()

    def save(self, tarifa: TarifaEntity) -> None:
        with self._lock:
            self._tarifas[tarifa.id] = copy.deepcopy(tarifa)

    def get_by_id(self, tarifa_id: str) -> Optional[TarifaEntity]:
        with self._lock:
            tarifa = self._tarifas.get(tarifa_id)
            return copy.deepcopy(tarifa) if tarifa else None

    def list_activas(self) -> List[TarifaEntity]:
        with self._lock:
            activas = [copy.deepcopy(t) for t in self._tarifas.values() if t.activo]
        return sorted(activas, key=lambda t: t.created_at, reverse=True)

    def clear(self) -> None:
        with self._lock:
            self._tarifas.clear()


class InMemoryClienteRepository:
    """
    Implementación en memoria del ClienteRepository.

    ¡No usar en producción!
    """

    def __init__(self):
        self._clientes: Dict[str, ClienteEntity] = {}
        self._lock = threading.Lock()

    def save(self, cliente: ClienteEntity) -> None:
        with self._lock:
            self._clientes[cliente.id] = copy.deepcopy(cliente)

    def get_by_id(self, cliente_id: str) -> Optional[ClienteEntity]:
        with self._lock:
            cliente = self._clientes.get(cliente_id)
            return copy.deepcopy(cliente) if cliente else None

    def get_by_codigo(self, codigo: str) -> Optional[ClienteEntity]:
        with self._lock:
            for cliente in self._clientes.values():
                if cliente.codigo == codigo:
                    return copy.deepcopy(cliente)
        return None

    def clear(self) -> None:
        with self._lock:
            self._clientes.clear()
