"""
Entidades del Dominio de Facturación.

Entidades:
- TipoRedondeo: Política de redondeo de minutos cobrables
- TarifaEntity: Definición de tarifa por hora
- Membresia: Niveles de membresía con descuento por defecto
- ClienteEntity: Cliente de la pista

Reglas de Negocio Encapsuladas:
- Una tarifa es inmutable una vez referenciada: un cambio de precio
  crea una nueva definición
- Ventana de aplicabilidad por hora del día (puede cruzar medianoche)
- Descuento del cliente siempre dentro de 0..100
"""

from dataclasses import dataclass, field
from datetime import datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
import uuid

from src.core.shared.exceptions import ValidationError


class TipoRedondeo(Enum):
    """
    Política de redondeo de los minutos facturables.

    ARRIBA: a la siguiente hora completa
    ABAJO: a las horas completas, nunca bajo el mínimo
    ESTANDAR: primera hora completa, luego bloques con tolerancia
    """

    ARRIBA = "arriba"
    ABAJO = "abajo"
    ESTANDAR = "estandar"

    @classmethod
    def from_string(cls, value: str) -> "TipoRedondeo":
        """
        Convierte string en enum (por nombre o por valor).

        Raises:
            ValueError: Si el valor no es válido
        """
        try:
            return cls[value.upper()]
        except KeyError:
            pass

        for tipo in cls:
            if tipo.value == value.lower():
                return tipo

        raise ValueError(f"Tipo de redondeo inválido: {value}")


class Membresia(Enum):
    """Niveles de membresía del cliente."""

    NINGUNA = "ninguna"
    BASICA = "basica"
    PREMIUM = "premium"
    VIP = "vip"

    @property
    def descuento_por_defecto(self) -> Decimal:
        """Descuento sugerido al asignar la membresía."""
        descuentos = {
            Membresia.NINGUNA: Decimal("0"),
            Membresia.BASICA: Decimal("5"),
            Membresia.PREMIUM: Decimal("10"),
            Membresia.VIP: Decimal("15"),
        }
        return descuentos[self]


@dataclass
class TarifaEntity:
    """
    Entidad de Dominio: Tarifa por hora.

    El ticket guarda sólo el id de la tarifa con la que se abrió. Si la
    tarifa cambia, se crea otra definición; la original no se modifica.

    Attributes:
        id: Identificador único
        nombre: Nombre comercial (ej: "Tarifa general")
        precio_por_hora: Precio de una hora de pista
        minutos_minimos: Minutos mínimos que se cobran
        tipo_redondeo: Política de redondeo
        activo: Si puede usarse para abrir tickets
        aplicable_desde: Inicio de la ventana horaria (opcional)
        aplicable_hasta: Fin de la ventana horaria (opcional)
        bloque_minutos: Tamaño de bloque tras la primera hora (ESTANDAR)
        gracia_minutos: Tolerancia por bloque (ESTANDAR)
        created_at: Creación, usada para elegir la tarifa vigente
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    nombre: str = ""
    precio_por_hora: Decimal = Decimal("0")
    minutos_minimos: int = 60
    tipo_redondeo: TipoRedondeo = TipoRedondeo.ARRIBA
    activo: bool = True
    aplicable_desde: Optional[time] = None
    aplicable_hasta: Optional[time] = None
    bloque_minutos: int = 15
    gracia_minutos: int = 5
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def crear(
        cls,
        nombre: str,
        precio_por_hora: Decimal,
        minutos_minimos: int = 60,
        tipo_redondeo: TipoRedondeo = TipoRedondeo.ARRIBA,
        aplicable_desde: Optional[time] = None,
        aplicable_hasta: Optional[time] = None,
        bloque_minutos: int = 15,
        gracia_minutos: int = 5,
    ) -> "TarifaEntity":
        """
        Factory method con validaciones.

        Raises:
            ValidationError: Si algún valor es inválido
        """
        if not nombre or not nombre.strip():
            raise ValidationError("El nombre de la tarifa es obligatorio", field="nombre")
        precio = Decimal(str(precio_por_hora))
        if precio < 0:
            raise ValidationError("El precio por hora no puede ser negativo", field="precio_por_hora")
        if minutos_minimos < 0:
            raise ValidationError("Los minutos mínimos no pueden ser negativos", field="minutos_minimos")
        if bloque_minutos < 1:
            raise ValidationError("El bloque debe ser de al menos 1 minuto", field="bloque_minutos")
        if gracia_minutos < 0 or gracia_minutos >= bloque_minutos:
            raise ValidationError(
                "La tolerancia debe estar entre 0 y el tamaño del bloque",
                field="gracia_minutos",
            )
        if (aplicable_desde is None) != (aplicable_hasta is None):
            raise ValidationError(
                "La ventana horaria requiere inicio y fin",
                field="aplicable_desde",
            )

        return cls(
            nombre=nombre.strip(),
            precio_por_hora=precio,
            minutos_minimos=minutos_minimos,
            tipo_redondeo=tipo_redondeo,
            aplicable_desde=aplicable_desde,
            aplicable_hasta=aplicable_hasta,
            bloque_minutos=bloque_minutos,
            gracia_minutos=gracia_minutos,
        )

    def es_aplicable_en(self, momento: datetime) -> bool:
        """
        Verifica si la ventana horaria contiene el momento dado.

        Una ventana con inicio posterior al fin cruza medianoche
        (ej: 22:00 a 02:00). Sin ventana, aplica siempre.
        """
        if self.aplicable_desde is None or self.aplicable_hasta is None:
            return True

        hora = momento.timetz().replace(tzinfo=None)
        if self.aplicable_desde <= self.aplicable_hasta:
            return self.aplicable_desde <= hora <= self.aplicable_hasta
        return hora >= self.aplicable_desde or hora <= self.aplicable_hasta

    def es_utilizable_en(self, momento: datetime) -> bool:
        """Activa y dentro de su ventana horaria."""
        return self.activo and self.es_aplicable_en(momento)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TarifaEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass
class ClienteEntity:
    """
    Entidad de Dominio: Cliente.

    El descuento se guarda explícitamente; la membresía sólo sugiere
    el valor por defecto al registrar al cliente.

    Attributes:
        id: Identificador único
        codigo: Código legible (ej: tarjeta de socio)
        nombre: Nombre del cliente
        membresia: Nivel de membresía
        descuento_porcentaje: Descuento sobre el tiempo, 0..100
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    codigo: str = ""
    nombre: str = ""
    membresia: Membresia = Membresia.NINGUNA
    descuento_porcentaje: Decimal = Decimal("0")

    @classmethod
    def registrar(
        cls,
        codigo: str,
        nombre: str,
        membresia: Membresia = Membresia.NINGUNA,
        descuento_porcentaje: Optional[Decimal] = None,
    ) -> "ClienteEntity":
        """
        Factory method: usa el descuento de la membresía si no se indica otro.

        Raises:
            ValidationError: Si faltan datos o el descuento está fuera de rango
        """
        if not codigo or not codigo.strip():
            raise ValidationError("El código del cliente es obligatorio", field="codigo")
        if not nombre or not nombre.strip():
            raise ValidationError("El nombre del cliente es obligatorio", field="nombre")

        cliente = cls(
            codigo=codigo.strip(),
            nombre=nombre.strip(),
            membresia=membresia,
            descuento_porcentaje=membresia.descuento_por_defecto,
        )
        if descuento_porcentaje is not None:
            cliente.cambiar_descuento(descuento_porcentaje)
        return cliente

    def cambiar_descuento(self, porcentaje: Decimal) -> None:
        """
        Raises:
            ValidationError: Si el porcentaje está fuera de 0..100
        """
        valor = Decimal(str(porcentaje))
        if valor < 0 or valor > 100:
            raise ValidationError(
                "El descuento debe estar entre 0 y 100",
                field="descuento_porcentaje",
            )
        self.descuento_porcentaje = valor

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ClienteEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
