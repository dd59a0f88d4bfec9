"""
Dominio de Inventario - Catálogo de servicios y stock.

Contiene:
- Entidades (ServicioEntity, TipoCosto)
- Port ServicioRepository con compare-and-set de stock
- InventoryLedger (reservas y liberaciones)
"""

from .entities import ServicioEntity, TipoCosto
from .ports import InMemoryServicioRepository, ServicioRepository
from .ledger import InventoryLedger

__all__ = [
    "ServicioEntity",
    "TipoCosto",
    "InMemoryServicioRepository",
    "ServicioRepository",
    "InventoryLedger",
]
