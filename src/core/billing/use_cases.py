"""
Use Cases del Dominio de Facturación.

- ResolverTarifaVigenteService: tarifa que el front de caja ofrece por
  defecto al abrir un ticket
"""

from datetime import datetime
from typing import Iterable, Optional

from src.core.shared.exceptions import NoActiveRateError
from src.core.shared.interfaces import Clock

from .entities import TarifaEntity
from .ports import TarifaRepository


def seleccionar_tarifa_vigente(
    tarifas: Iterable[TarifaEntity],
    momento: datetime,
) -> Optional[TarifaEntity]:
    """
    Elige la tarifa activa más reciente cuya ventana contiene el momento.

    Returns:
        La tarifa elegida o None si ninguna aplica
    """
    candidatas = [t for t in tarifas if t.es_utilizable_en(momento)]
    if not candidatas:
        return None
    return max(candidatas, key=lambda t: t.created_at)


class ResolverTarifaVigenteService:
    """
    Use Case: Resolver la tarifa vigente.

    Sólo lectura; no necesita Unit of Work.

    Example:
        service = ResolverTarifaVigenteService(tarifa_repo, clock)
        tarifa = service.execute()
    """

    def __init__(self, tarifa_repo: TarifaRepository, clock: Clock):
        self.tarifa_repo = tarifa_repo
        self.clock = clock

    def execute(self, momento: Optional[datetime] = None) -> TarifaEntity:
        """
        Raises:
            NoActiveRateError: Si ninguna tarifa activa aplica ahora
        """
        momento = momento or self.clock.now()
        tarifa = seleccionar_tarifa_vigente(self.tarifa_repo.list_activas(), momento)
        if tarifa is None:
            raise NoActiveRateError(
                f"Ninguna tarifa activa aplica a las {momento.strftime('%H:%M')}"
            )
        return tarifa
