"""
Sink de auditoría sobre la base de datos de Django.

El INSERT ocurre dentro de la transacción abierta por el
DjangoUnitOfWork, de modo que un rollback también descarta el registro.
"""

from typing import List
import logging

from django.db import DatabaseError

from src.core.shared.audit import AuditSink, RegistroAuditoria
from src.core.shared.exceptions import AuditUnavailableError

from .models import RegistroAuditoriaModel

logger = logging.getLogger(__name__)


class DjangoAuditSink(AuditSink):
    """Persiste RegistroAuditoria en la tabla registros_auditoria."""

    def registrar(self, registro: RegistroAuditoria) -> None:
        try:
            RegistroAuditoriaModel.objects.create(
                id=registro.id,
                actor_id=registro.actor_id,
                accion=registro.accion,
                entidad=registro.entidad,
                entidad_id=registro.entidad_id,
                detalle=dict(registro.detalle),
                registrado_en=registro.registrado_en,
            )
        except DatabaseError as e:
            logger.error(f"Audit write failed for {registro.accion}: {e}")
            raise AuditUnavailableError(
                f"No se pudo registrar la auditoría de '{registro.accion}'"
            ) from e

    def registros(self, entidad_id: str = None) -> List[RegistroAuditoria]:
        queryset = RegistroAuditoriaModel.objects.all()
        if entidad_id is not None:
            queryset = queryset.filter(entidad_id=entidad_id)
        return [
            RegistroAuditoria(
                id=m.id,
                actor_id=m.actor_id,
                accion=m.accion,
                entidad=m.entidad,
                entidad_id=m.entidad_id,
                detalle=m.detalle,
                registrado_en=m.registrado_en,
            )
            for m in queryset
        ]
