"""
InventoryLedger - reservas y liberaciones de stock.

Serializa las modificaciones por servicio con un bucle acotado de
compare-and-set: leer, validar, escribir condicionalmente, y repetir
si otro proceso escribió entre medias. No hay lock global ni locks
de larga duración.
"""

import logging
from typing import Optional

from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    ConcurrencyError,
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)

from .ports import ServicioRepository


logger = logging.getLogger(__name__)


class InventoryLedger:
    """
    Libro de inventario.

    Example:
        ledger = InventoryLedger(servicio_repo)
        restante = ledger.reservar(servicio_id, 2)
        ledger.liberar(servicio_id, 2)
    """

    def __init__(self, servicio_repo: ServicioRepository, max_tentativas: int = 10):
        if max_tentativas < 1:
            raise ValueError("max_tentativas debe ser al menos 1")
        self.servicio_repo = servicio_repo
        self.max_tentativas = max_tentativas

    def reservar(self, servicio_id: str, cantidad: int) -> int:
        """
        Descuenta `cantidad` del stock.

        Returns:
            Stock resultante

        Raises:
            InsufficientStockError: Si no alcanza; el stock no se toca
            ConcurrencyError: Si se agotan los reintentos
        """
        return self._ajustar(servicio_id, cantidad, -cantidad)

    def liberar(self, servicio_id: str, cantidad: int) -> int:
        """
        Devuelve `cantidad` al stock.

        Returns:
            Stock resultante
        """
        return self._ajustar(servicio_id, cantidad, cantidad)

    def liberar_linea(self, servicio_id: str, cantidad: int) -> Optional[int]:
        """
        Devuelve al stock lo que reservó una línea de ticket.

        La línea ya sabe si controla inventario, así que no se consulta
        `requiere_inventario` del catálogo: editarlo después del alquiler
        no impide la devolución. Si el servicio ya no existe no hay stock
        al que volver y se omite con un aviso.

        Returns:
            Stock resultante, o None si el servicio no existe
        """
        return self._ajustar(servicio_id, cantidad, cantidad, segun_catalogo=False)

    def reservar_linea(self, servicio_id: str, cantidad: int) -> Optional[int]:
        """Vuelve a retener lo devuelto con `liberar_linea` (compensación)."""
        return self._ajustar(servicio_id, cantidad, -cantidad, segun_catalogo=False)

    def _ajustar(
        self,
        servicio_id: str,
        cantidad: int,
        delta: int,
        segun_catalogo: bool = True,
    ) -> Optional[int]:
        if cantidad < 1:
            raise ValidationError("La cantidad debe ser al menos 1", field="cantidad")

        for tentativa in range(1, self.max_tentativas + 1):
            servicio = self.servicio_repo.get_by_id(servicio_id)
            if servicio is None:
                if not segun_catalogo:
                    logger.warning(
                        "Servicio %s eliminado del catálogo; se omiten %s unidades",
                        servicio_id, cantidad,
                    )
                    return None
                raise EntityNotFoundError(
                    f"Servicio {servicio_id} no encontrado",
                    entity_type="Servicio",
                    entity_id=servicio_id,
                )
            if segun_catalogo and not servicio.requiere_inventario:
                raise BusinessRuleViolationError(
                    f"El servicio {servicio.nombre} no controla inventario",
                    rule="servicio_sin_inventario",
                )

            disponible = servicio.stock_disponible
            nuevo = disponible + delta
            if nuevo < 0:
                raise InsufficientStockError(servicio_id, cantidad, disponible)

            if self.servicio_repo.compare_and_set_stock(
                servicio_id, servicio.stock_actual, nuevo
            ):
                logger.debug(
                    "Stock de %s: %s -> %s (tentativa %s)",
                    servicio_id, disponible, nuevo, tentativa,
                )
                return nuevo

            logger.debug("Conflicto de stock en %s, reintentando", servicio_id)

        logger.warning(
            "Reintentos agotados ajustando stock de %s (%s tentativas)",
            servicio_id, self.max_tentativas,
        )
        raise ConcurrencyError(
            f"No se pudo actualizar el stock de {servicio_id} tras "
            f"{self.max_tentativas} tentativas"
        )
