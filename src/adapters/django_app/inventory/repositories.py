"""
Repositorio Django de Inventario.

compare_and_set_stock se traduce en un UPDATE condicionado al valor
leído; el número de filas afectadas indica si la escritura ganó.
"""

from typing import List, Optional
import logging

from src.core.inventory.entities import ServicioEntity, TipoCosto

from .models import ServicioModel

logger = logging.getLogger(__name__)


class DjangoServicioRepository:
    """Implementación Django del ServicioRepository."""

    @staticmethod
    def _to_entity(model: ServicioModel) -> ServicioEntity:
        return ServicioEntity(
            id=model.id,
            nombre=model.nombre,
            precio=model.precio,
            tipo_costo=TipoCosto(model.tipo_costo),
            requiere_inventario=model.requiere_inventario,
            stock_actual=model.stock_actual,
            maximo_por_ticket=model.maximo_por_ticket,
            activo=model.activo,
        )

    def save(self, servicio: ServicioEntity) -> None:
        ServicioModel.objects.update_or_create(
            id=servicio.id,
            defaults={
                'nombre': servicio.nombre,
                'precio': servicio.precio,
                'tipo_costo': servicio.tipo_costo.value,
                'requiere_inventario': servicio.requiere_inventario,
                'stock_actual': servicio.stock_actual,
                'maximo_por_ticket': servicio.maximo_por_ticket,
                'activo': servicio.activo,
            },
        )

    def get_by_id(self, servicio_id: str) -> Optional[ServicioEntity]:
        model = ServicioModel.objects.filter(id=servicio_id).first()
        return self._to_entity(model) if model else None

    def list_activos(self) -> List[ServicioEntity]:
        return [
            self._to_entity(m)
            for m in ServicioModel.objects.filter(activo=True)
        ]

    def compare_and_set_stock(
        self,
        servicio_id: str,
        esperado: Optional[int],
        nuevo: int,
    ) -> bool:
        queryset = ServicioModel.objects.filter(id=servicio_id)
        if esperado is None:
            queryset = queryset.filter(stock_actual__isnull=True)
        else:
            queryset = queryset.filter(stock_actual=esperado)

        actualizados = queryset.update(stock_actual=nuevo)
        if not actualizados:
            logger.debug(
                f"Stock CAS perdido: servicio={servicio_id} esperado={esperado}"
            )
        return actualizados == 1
