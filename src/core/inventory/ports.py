"""
Ports (Interfaces) del Dominio de Inventario.

El stock se modifica exclusivamente con compare_and_set_stock: una
escritura condicional que sólo se aplica si el valor leído sigue
vigente. El InventoryLedger reintenta sobre este primitivo.
"""

import copy
import threading
from collections import defaultdict
from typing import Dict, List, Optional, Protocol, runtime_checkable

from .entities import ServicioEntity


@runtime_checkable
class ServicioRepository(Protocol):
    """Persistencia del catálogo de servicios."""

    def save(self, servicio: ServicioEntity) -> None:
        ...

    def get_by_id(self, servicio_id: str) -> Optional[ServicioEntity]:
        ...

    def list_activos(self) -> List[ServicioEntity]:
        ...

    def compare_and_set_stock(
        self,
        servicio_id: str,
        esperado: Optional[int],
        nuevo: int,
    ) -> bool:
        """
        Escribe `nuevo` sólo si el stock actual es `esperado`.

        Returns:
            True si se aplicó, False si otro proceso lo cambió antes
        """
        ...


class InMemoryServicioRepository:
    """
    Implementación en memoria del ServicioRepository.

    Cada servicio tiene su propio lock, tomado sólo durante la
    comparación y escritura del stock.
    """

    def __init__(self):
        self._servicios: Dict[str, ServicioEntity] = {}
        self._locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._registry_lock = threading.Lock()

    def _lock_for(self, servicio_id: str) -> threading.Lock:
        with self._registry_lock:
            return self._locks[servicio_id]

    def save(self, servicio: ServicioEntity) -> None:
        with self._lock_for(servicio.id):
            self._servicios[servicio.id] = copy.deepcopy(servicio)

    def get_by_id(self, servicio_id: str) -> Optional[ServicioEntity]:
        with self._lock_for(servicio_id):
            servicio = self._servicios.get(servicio_id)
            return copy.deepcopy(servicio) if servicio else None

    def list_activos(self) -> List[ServicioEntity]:
        return [
            copy.deepcopy(s) for s in list(self._servicios.values()) if s.activo
        ]

    def compare_and_set_stock(
        self,
        servicio_id: str,
        esperado: Optional[int],
        nuevo: int,
    ) -> bool:
        with self._lock_for(servicio_id):
            servicio = self._servicios.get(servicio_id)
            if servicio is None or servicio.stock_actual != esperado:
                return False
            servicio.stock_actual = nuevo
            return True

    def clear(self) -> None:
        with self._registry_lock:
            self._servicios.clear()
            self._locks.clear()
