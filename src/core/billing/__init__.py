"""
Dominio de Facturación - Tarifas, clientes y cálculo del cobro.

Contiene:
- Entidades (TarifaEntity, ClienteEntity, TipoRedondeo, Membresia)
- Política de tarifa pura (calcular_costo_tiempo)
- Descuentos (DescuentoCalculator)
- Ports de persistencia e implementaciones en memoria
- Use Case ResolverTarifaVigenteService
"""

from .entities import ClienteEntity, Membresia, TarifaEntity, TipoRedondeo
from .rate_policy import (
    CalculoTiempo,
    calcular_costo_tiempo,
    calcular_minutos_reales,
    redondear_dinero,
    redondear_minutos,
)
from .discounts import DescuentoCalculator, Liquidacion, aplicar_descuento
from .ports import (
    ClienteRepository,
    InMemoryClienteRepository,
    InMemoryTarifaRepository,
    TarifaRepository,
)
from .use_cases import ResolverTarifaVigenteService, seleccionar_tarifa_vigente

__all__ = [
    "ClienteEntity",
    "Membresia",
    "TarifaEntity",
    "TipoRedondeo",
    "CalculoTiempo",
    "calcular_costo_tiempo",
    "calcular_minutos_reales",
    "redondear_dinero",
    "redondear_minutos",
    "DescuentoCalculator",
    "Liquidacion",
    "aplicar_descuento",
    "ClienteRepository",
    "InMemoryClienteRepository",
    "InMemoryTarifaRepository",
    "TarifaRepository",
    "ResolverTarifaVigenteService",
    "seleccionar_tarifa_vigente",
]
