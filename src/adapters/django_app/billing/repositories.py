"""
Repositorios Django de Facturación.

Implementan TarifaRepository y ClienteRepository del Core.
"""

from decimal import Decimal
from typing import List, Optional
import logging

from src.core.billing.entities import (
    ClienteEntity,
    Membresia,
    TarifaEntity,
    TipoRedondeo,
)

from .models import ClienteModel, TarifaModel

logger = logging.getLogger(__name__)


class DjangoTarifaRepository:
    """
    Implementación Django del TarifaRepository.

    Args:
        bloque_minutos_default: Bloque para tarifas sin valor propio
        gracia_minutos_default: Tolerancia para tarifas sin valor propio
    """

    def __init__(self, bloque_minutos_default: int = 15, gracia_minutos_default: int = 5):
        self.bloque_minutos_default = bloque_minutos_default
        self.gracia_minutos_default = gracia_minutos_default

    def _to_entity(self, model: TarifaModel) -> TarifaEntity:
        return TarifaEntity(
            id=model.id,
            nombre=model.nombre,
            precio_por_hora=model.precio_por_hora,
            minutos_minimos=model.minutos_minimos,
            tipo_redondeo=TipoRedondeo(model.tipo_redondeo),
            activo=model.activo,
            aplicable_desde=model.aplicable_desde,
            aplicable_hasta=model.aplicable_hasta,
            bloque_minutos=(
                model.bloque_minutos if model.bloque_minutos is not None
                else self.bloque_minutos_default
            ),
            gracia_minutos=(
                model.gracia_minutos if model.gracia_minutos is not None
                else self.gracia_minutos_default
            ),
            created_at=model.created_at,
        )

    def save(self, tarifa: TarifaEntity) -> None:
        TarifaModel.objects.update_or_create(
            id=tarifa.id,
            defaults={
                'nombre': tarifa.nombre,
                'precio_por_hora': tarifa.precio_por_hora,
                'minutos_minimos': tarifa.minutos_minimos,
                'tipo_redondeo': tarifa.tipo_redondeo.value,
                'activo': tarifa.activo,
                'aplicable_desde': tarifa.aplicable_desde,
                'aplicable_hasta': tarifa.aplicable_hasta,
                'bloque_minutos': tarifa.bloque_minutos,
                'gracia_minutos': tarifa.gracia_minutos,
                'created_at': tarifa.created_at,
            },
        )
        logger.debug(f"Tarifa saved: {tarifa.id}")

    def get_by_id(self, tarifa_id: str) -> Optional[TarifaEntity]:
        model = TarifaModel.objects.filter(id=tarifa_id).first()
        return self._to_entity(model) if model else None

    def list_activas(self) -> List[TarifaEntity]:
        return [
            self._to_entity(m)
            for m in TarifaModel.objects.filter(activo=True).order_by('-created_at')
        ]


class DjangoClienteRepository:
    """Implementación Django del ClienteRepository."""

    @staticmethod
    def _to_entity(model: ClienteModel) -> ClienteEntity:
        return ClienteEntity(
            id=model.id,
            codigo=model.codigo,
            nombre=model.nombre,
            membresia=Membresia(model.membresia),
            descuento_porcentaje=Decimal(model.descuento_porcentaje),
        )

    def save(self, cliente: ClienteEntity) -> None:
        ClienteModel.objects.update_or_create(
            id=cliente.id,
            defaults={
                'codigo': cliente.codigo,
                'nombre': cliente.nombre,
                'membresia': cliente.membresia.value,
                'descuento_porcentaje': cliente.descuento_porcentaje,
            },
        )

    def get_by_id(self, cliente_id: str) -> Optional[ClienteEntity]:
        model = ClienteModel.objects.filter(id=cliente_id).first()
        return self._to_entity(model) if model else None

    def get_by_codigo(self, codigo: str) -> Optional[ClienteEntity]:
        model = ClienteModel.objects.filter(codigo=codigo).first()
        return self._to_entity(model) if model else None
