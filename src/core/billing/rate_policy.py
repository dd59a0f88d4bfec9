"""
Política de Tarifa - cálculo puro del costo de tiempo.

Funciones deterministas: sin reloj, sin almacenamiento. Las mismas
entradas producen siempre el mismo CalculoTiempo, lo que permite
previsualizar el cobro cuantas veces se quiera.

Pasos:
1. minutos_reales = (as_of - entrada) - pausas recortadas a [entrada, as_of],
   truncado a minutos enteros y nunca negativo
2. minutos_facturables = max(minutos_reales, minutos_minimos)
3. minutos_cobrables según TipoRedondeo
4. costo = minutos_cobrables / 60 x precio_por_hora, 2 decimales half-up
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple

from .entities import TarifaEntity, TipoRedondeo


CENTAVOS = Decimal("0.01")
MINUTOS_HORA = 60

Intervalo = Tuple[datetime, Optional[datetime]]


@dataclass(frozen=True)
class CalculoTiempo:
    """
    Resultado del cálculo de tiempo de un ticket.

    Attributes:
        minutos_reales: Tiempo en pista descontando pausas
        minutos_facturables: Reales elevados al mínimo de la tarifa
        minutos_cobrables: Facturables tras el redondeo
        costo: Importe del tiempo antes de descuentos
    """

    minutos_reales: int
    minutos_facturables: int
    minutos_cobrables: int
    costo: Decimal
    tipo_redondeo: TipoRedondeo


def redondear_dinero(monto: Decimal) -> Decimal:
    """Cuantiza a centavos con redondeo half-up."""
    return Decimal(monto).quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def calcular_minutos_reales(
    entrada: datetime,
    as_of: datetime,
    pausas: Iterable[Intervalo] = (),
) -> int:
    """
    Minutos efectivos en pista.

    Cada pausa se recorta a [entrada, as_of]; una pausa abierta
    (fin None) se cierra en as_of.

    Args:
        entrada: Hora de entrada del ticket
        as_of: Instante de corte del cálculo
        pausas: Pares (inicio, fin)

    Returns:
        Minutos enteros truncados, nunca negativos
    """
    transcurrido = as_of - entrada
    pausado = timedelta(0)
    for inicio, fin in pausas:
        inicio_efectivo = max(inicio, entrada)
        fin_efectivo = min(fin if fin is not None else as_of, as_of)
        if fin_efectivo > inicio_efectivo:
            pausado += fin_efectivo - inicio_efectivo

    segundos = (transcurrido - pausado).total_seconds()
    return max(int(segundos // 60), 0)


def redondear_minutos(
    minutos_facturables: int,
    tipo_redondeo: TipoRedondeo,
    minutos_minimos: int = 0,
    bloque_minutos: int = 15,
    gracia_minutos: int = 5,
) -> int:
    """
    Aplica la política de redondeo.

    - ARRIBA: siguiente hora completa (90 -> 120)
    - ABAJO: horas completas, nunca por debajo del mínimo (90 -> 60)
    - ESTANDAR: la primera hora se cobra completa; después se cobran
      bloques de `bloque_minutos` y un resto <= `gracia_minutos` no se
      cobra (70 -> 75, 64 -> 60)

    Cero minutos facturables se cobran como cero en todas las políticas.
    """
    if minutos_facturables <= 0:
        return 0

    if tipo_redondeo == TipoRedondeo.ARRIBA:
        horas = -(-minutos_facturables // MINUTOS_HORA)
        return horas * MINUTOS_HORA

    if tipo_redondeo == TipoRedondeo.ABAJO:
        horas = minutos_facturables // MINUTOS_HORA
        return max(horas * MINUTOS_HORA, minutos_minimos)

    if minutos_facturables <= MINUTOS_HORA:
        cobrables = MINUTOS_HORA
    else:
        extra = minutos_facturables - MINUTOS_HORA
        bloques, resto = divmod(extra, bloque_minutos)
        if resto > gracia_minutos:
            bloques += 1
        cobrables = MINUTOS_HORA + bloques * bloque_minutos
    return max(cobrables, minutos_minimos)


def calcular_costo_tiempo(
    tarifa: TarifaEntity,
    entrada: datetime,
    as_of: datetime,
    pausas: Iterable[Intervalo] = (),
) -> CalculoTiempo:
    """
    Calcula el costo de tiempo de un ticket con la tarifa dada.

    Example:
        calculo = calcular_costo_tiempo(tarifa, entrada, entrada + timedelta(minutes=90))
        calculo.minutos_cobrables  # 120 con redondeo ARRIBA
    """
    reales = calcular_minutos_reales(entrada, as_of, pausas)
    facturables = max(reales, tarifa.minutos_minimos)
    cobrables = redondear_minutos(
        facturables,
        tarifa.tipo_redondeo,
        minutos_minimos=tarifa.minutos_minimos,
        bloque_minutos=tarifa.bloque_minutos,
        gracia_minutos=tarifa.gracia_minutos,
    )
    costo = redondear_dinero(
        Decimal(cobrables) / Decimal(MINUTOS_HORA) * Decimal(tarifa.precio_por_hora)
    )
    return CalculoTiempo(
        minutos_reales=reales,
        minutos_facturables=facturables,
        minutos_cobrables=cobrables,
        costo=costo,
        tipo_redondeo=tarifa.tipo_redondeo,
    )
