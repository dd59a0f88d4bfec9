"""
Cálculo del cobro de un ticket.

Compartido por el cierre y por la previsualización: ambos producen
exactamente el mismo desglose para el mismo ticket e instante.
"""

from datetime import datetime
from typing import Tuple

from src.core.billing.discounts import DescuentoCalculator, Liquidacion
from src.core.billing.ports import ClienteRepository, TarifaRepository
from src.core.billing.rate_policy import CalculoTiempo, calcular_costo_tiempo
from src.core.shared.exceptions import EntityNotFoundError, ValidationError

from .entities import TicketEntity


class CalculadoraCobro:
    """
    Combina política de tarifa, pausas, servicios y descuento.

    La tarifa es la fijada al abrir el ticket (aunque hoy esté inactiva);
    el descuento es el actual del cliente.
    """

    def __init__(
        self,
        tarifa_repo: TarifaRepository,
        cliente_repo: ClienteRepository,
        descuento_calculator: DescuentoCalculator = None,
    ):
        self.tarifa_repo = tarifa_repo
        self.cliente_repo = cliente_repo
        self.descuento_calculator = descuento_calculator or DescuentoCalculator()

    def calcular(
        self,
        ticket: TicketEntity,
        as_of: datetime,
    ) -> Tuple[CalculoTiempo, Liquidacion]:
        """
        Calcula el cobro del ticket a la fecha `as_of`. No modifica nada.

        Raises:
            ValidationError: Si as_of es anterior a la entrada
            EntityNotFoundError: Si la tarifa o el cliente no existen
        """
        if as_of < ticket.hora_entrada:
            raise ValidationError(
                "El instante de cobro no puede ser anterior a la entrada",
                field="as_of",
            )

        tarifa = self.tarifa_repo.get_by_id(ticket.tarifa_id)
        if tarifa is None:
            raise EntityNotFoundError(
                f"Tarifa {ticket.tarifa_id} no encontrada",
                entity_type="Tarifa",
                entity_id=ticket.tarifa_id,
            )
        cliente = self.cliente_repo.get_by_id(ticket.cliente_id)
        if cliente is None:
            raise EntityNotFoundError(
                f"Cliente {ticket.cliente_id} no encontrado",
                entity_type="Cliente",
                entity_id=ticket.cliente_id,
            )

        calculo = calcular_costo_tiempo(
            tarifa,
            ticket.hora_entrada,
            as_of,
            ticket.pause_tracker.intervalos_hasta(as_of),
        )
        liquidacion = self.descuento_calculator.liquidar(
            calculo.costo,
            ticket.subtotal_servicios,
            cliente.descuento_porcentaje,
        )
        return calculo, liquidacion
