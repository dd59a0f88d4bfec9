"""
Mappers de conversión entre Entities (Core) y Models (Django).

Responsabilidades:
- TicketEntity → campos de TicketModel (para UPDATE condicional)
- TicketModel (+ pausas y servicios) → TicketEntity

Principios:
- Los mappers no tienen estado
- No contienen lógica de negocio
- Sólo convierten datos
"""

from typing import Any, Dict, List

from src.core.tickets.entities import (
    MetodoPago,
    TicketEntity,
    TicketServicioLinea,
    TicketStatus,
)
from src.core.tickets.pauses import PausaIntervalo

from .models import PausaModel, TicketModel, TicketServicioModel


class TicketMapper:
    """
    Mapper entre TicketEntity y TicketModel.

    - to_fields(): Entity → dict de columnas (sin id ni version)
    - to_entity(): Model → Entity
    - to_entity_list(): List[Model] → List[Entity]
    """

    @staticmethod
    def to_fields(entity: TicketEntity) -> Dict[str, Any]:
        """
        Columnas del ticket para create/update.

        Note:
            `version` lo gestiona el repositorio (compare-and-set)
        """
        return {
            'codigo': entity.codigo,
            'cliente_id': entity.cliente_id,
            'personas': entity.personas,
            'tarifa_id': entity.tarifa_id,
            'notas': entity.notas,
            'estado': entity.estado.value,
            'hora_entrada': entity.hora_entrada,
            'hora_salida': entity.hora_salida,
            'operador_entrada_id': entity.operador_entrada_id,
            'operador_salida_id': entity.operador_salida_id,
            'minutos_cobrados': entity.minutos_cobrados,
            'monto_tiempo': entity.monto_tiempo,
            'descuento_porcentaje': entity.descuento_porcentaje,
            'monto_descuento': entity.monto_descuento,
            'monto_servicios': entity.monto_servicios,
            'monto_total': entity.monto_total,
            'metodo_pago': entity.metodo_pago.value if entity.metodo_pago else None,
            'motivo_cancelacion': entity.motivo_cancelacion,
        }

    @staticmethod
    def to_entity(model: TicketModel) -> TicketEntity:
        """
        Convierte TicketModel en TicketEntity.

        Note:
            No pasa por TicketEntity.abrir(): los datos ya fueron
            validados al crearse.
        """
        return TicketEntity(
            id=model.id,
            codigo=model.codigo,
            cliente_id=model.cliente_id,
            personas=model.personas,
            tarifa_id=model.tarifa_id,
            notas=model.notas,
            estado=TicketStatus(model.estado),
            version=model.version,
            hora_entrada=model.hora_entrada,
            hora_salida=model.hora_salida,
            operador_entrada_id=model.operador_entrada_id,
            operador_salida_id=model.operador_salida_id,
            minutos_cobrados=model.minutos_cobrados,
            monto_tiempo=model.monto_tiempo,
            descuento_porcentaje=model.descuento_porcentaje,
            monto_descuento=model.monto_descuento,
            monto_servicios=model.monto_servicios,
            monto_total=model.monto_total,
            metodo_pago=MetodoPago(model.metodo_pago) if model.metodo_pago else None,
            motivo_cancelacion=model.motivo_cancelacion,
            pausas=[PausaMapper.to_entity(p) for p in model.pausas.all()],
            servicios=[LineaServicioMapper.to_entity(s) for s in model.servicios.all()],
        )

    @staticmethod
    def to_entity_list(models: List[TicketModel]) -> List[TicketEntity]:
        return [TicketMapper.to_entity(model) for model in models]


class PausaMapper:
    @staticmethod
    def to_entity(model: PausaModel) -> PausaIntervalo:
        return PausaIntervalo(id=model.id, inicio=model.inicio, fin=model.fin)

    @staticmethod
    def to_fields(pausa: PausaIntervalo) -> Dict[str, Any]:
        return {'inicio': pausa.inicio, 'fin': pausa.fin}


class LineaServicioMapper:
    @staticmethod
    def to_entity(model: TicketServicioModel) -> TicketServicioLinea:
        return TicketServicioLinea(
            id=model.id,
            servicio_id=model.servicio_id,
            servicio_nombre=model.servicio_nombre,
            cantidad=model.cantidad,
            precio_unitario=model.precio_unitario,
            monto_total=model.monto_total,
            controla_inventario=model.controla_inventario,
            agregado_en=model.agregado_en,
        )

    @staticmethod
    def to_fields(linea: TicketServicioLinea) -> Dict[str, Any]:
        return {
            'servicio_id': linea.servicio_id,
            'servicio_nombre': linea.servicio_nombre,
            'cantidad': linea.cantidad,
            'precio_unitario': linea.precio_unitario,
            'monto_total': linea.monto_total,
            'controla_inventario': linea.controla_inventario,
            'agregado_en': linea.agregado_en,
        }
