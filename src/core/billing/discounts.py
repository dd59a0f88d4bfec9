"""
Cálculo de descuentos y liquidación del cobro.

El descuento de membresía se aplica sobre el subtotal de tiempo.
Opcionalmente (DESCUENTO_APLICA_A_SERVICIOS) también sobre servicios.
"""

from dataclasses import dataclass
from decimal import Decimal

from src.core.shared.exceptions import ValidationError

from .rate_policy import redondear_dinero


def _validar_porcentaje(porcentaje: Decimal) -> Decimal:
    valor = Decimal(str(porcentaje))
    if valor < 0 or valor > 100:
        raise ValidationError(
            f"Porcentaje de descuento fuera de rango: {valor}",
            field="descuento_porcentaje",
        )
    return valor


def aplicar_descuento(monto: Decimal, porcentaje: Decimal) -> Decimal:
    """
    Monto con el descuento aplicado.

    Se redondea el resultado, no el descuento: `monto * (1 - p/100)`
    half-up a centavos.

    Args:
        monto: Monto base
        porcentaje: 0..100

    Returns:
        Monto descontado redondeado a centavos (half-up)

    Raises:
        ValidationError: Si el porcentaje está fuera de 0..100
    """
    valor = _validar_porcentaje(porcentaje)
    return redondear_dinero(Decimal(monto) * (1 - valor / Decimal(100)))


@dataclass(frozen=True)
class Liquidacion:
    """Desglose monetario final de un ticket."""

    monto_tiempo: Decimal
    monto_servicios: Decimal
    descuento_porcentaje: Decimal
    monto_descuento: Decimal
    monto_total: Decimal


class DescuentoCalculator:
    """
    Combina subtotales de tiempo y servicios con el descuento del cliente.

    Example:
        calc = DescuentoCalculator()
        liq = calc.liquidar(Decimal("100"), Decimal("20"), Decimal("10"))
        liq.monto_total  # Decimal("110.00")
    """

    def __init__(self, aplicar_a_servicios: bool = False):
        self.aplicar_a_servicios = aplicar_a_servicios

    def liquidar(
        self,
        monto_tiempo: Decimal,
        monto_servicios: Decimal,
        porcentaje: Decimal,
    ) -> Liquidacion:
        tiempo = redondear_dinero(monto_tiempo)
        servicios = redondear_dinero(monto_servicios)
        base = tiempo + servicios if self.aplicar_a_servicios else tiempo
        con_descuento = aplicar_descuento(base, porcentaje)
        sin_descuento = Decimal("0") if self.aplicar_a_servicios else servicios
        return Liquidacion(
            monto_tiempo=tiempo,
            monto_servicios=servicios,
            descuento_porcentaje=_validar_porcentaje(porcentaje),
            monto_descuento=base - con_descuento,
            monto_total=redondear_dinero(con_descuento + sin_descuento),
        )
