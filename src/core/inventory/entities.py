"""
Entidades del Dominio de Inventario.

Entidades:
- TipoCosto: Forma de cobro de un servicio
- ServicioEntity: Entrada del catálogo de servicios (alquiler de
  equipo, baterías, consumibles...)

Invariantes:
- El stock controlado nunca es negativo
- El stock sólo baja al agregar el servicio a un ticket y sólo sube al
  revertir esa reserva por cancelación
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional
import uuid

from src.core.shared.exceptions import ValidationError


class TipoCosto(Enum):
    """Forma de cobro del servicio."""

    FIJO = "fijo"
    POR_TIEMPO = "por_tiempo"
    PAQUETE = "paquete"


@dataclass
class ServicioEntity:
    """
    Entidad de Dominio: Servicio del catálogo.

    Attributes:
        id: Identificador único
        nombre: Nombre visible
        precio: Precio unitario vigente (se copia a la línea del ticket)
        tipo_costo: Forma de cobro
        requiere_inventario: Si el stock se controla
        stock_actual: Unidades disponibles (sólo si requiere_inventario)
        maximo_por_ticket: Tope de unidades acumuladas por ticket
        activo: Si puede agregarse a tickets
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    nombre: str = ""
    precio: Decimal = Decimal("0")
    tipo_costo: TipoCosto = TipoCosto.FIJO
    requiere_inventario: bool = False
    stock_actual: Optional[int] = None
    maximo_por_ticket: Optional[int] = None
    activo: bool = True

    @classmethod
    def crear(
        cls,
        nombre: str,
        precio: Decimal,
        tipo_costo: TipoCosto = TipoCosto.FIJO,
        requiere_inventario: bool = False,
        stock_actual: Optional[int] = None,
        maximo_por_ticket: Optional[int] = None,
    ) -> "ServicioEntity":
        """
        Factory method con validaciones.

        Raises:
            ValidationError: Si precio, stock o máximo son inválidos
        """
        if not nombre or not nombre.strip():
            raise ValidationError("El nombre del servicio es obligatorio", field="nombre")
        precio = Decimal(str(precio))
        if precio < 0:
            raise ValidationError("El precio no puede ser negativo", field="precio")
        if stock_actual is not None and stock_actual < 0:
            raise ValidationError("El stock no puede ser negativo", field="stock_actual")
        if maximo_por_ticket is not None and maximo_por_ticket < 1:
            raise ValidationError("El máximo por ticket debe ser al menos 1", field="maximo_por_ticket")

        return cls(
            nombre=nombre.strip(),
            precio=precio,
            tipo_costo=tipo_costo,
            requiere_inventario=requiere_inventario,
            stock_actual=(stock_actual or 0) if requiere_inventario else stock_actual,
            maximo_por_ticket=maximo_por_ticket,
        )

    @property
    def stock_disponible(self) -> int:
        """Stock controlado; un stock sin registrar cuenta como cero."""
        return self.stock_actual or 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ServicioEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
