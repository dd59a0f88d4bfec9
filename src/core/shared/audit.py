"""
Registro de Auditoría.

Cada transición confirmada de un ticket (y cada reserva de inventario
asociada) produce exactamente un RegistroAuditoria. El registro se
escribe dentro de la misma unidad de trabajo que la transición: si el
sink falla, la operación completa se revierte.
"""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .exceptions import AuditUnavailableError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistroAuditoria:
    """
    Registro inmutable de una acción sobre una entidad.

    Attributes:
        actor_id: Usuario que ejecutó la acción
        accion: Nombre de la acción (ej: "cerrar_ticket")
        entidad: Tipo de la entidad afectada (ej: "Ticket")
        entidad_id: ID de la entidad afectada
        detalle: Datos de la acción (montos, cantidades, motivo...)
        registrado_en: Momento de la acción según el reloj del motor
    """

    actor_id: str
    accion: str
    entidad: str
    entidad_id: str
    detalle: Dict[str, Any] = field(default_factory=dict)
    registrado_en: Optional[datetime] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "actor_id": self.actor_id,
            "accion": self.accion,
            "entidad": self.entidad,
            "entidad_id": self.entidad_id,
            "detalle": dict(self.detalle),
            "registrado_en": self.registrado_en.isoformat() if self.registrado_en else None,
        }


class AuditSink(ABC):
    """
    Port del sink de auditoría.

    Los adapters escriben el registro dentro de la transacción activa.
    Cualquier fallo debe traducirse a AuditUnavailableError.
    """

    @abstractmethod
    def registrar(self, registro: RegistroAuditoria) -> None:
        """
        Persiste un registro de auditoría.

        Raises:
            AuditUnavailableError: Si el sink no acepta el registro
        """
        raise NotImplementedError

    def descartar(self, registro_id: str) -> None:
        """
        Elimina un registro de una unidad de trabajo revertida.

        Sinks transaccionales no necesitan implementarlo: el rollback
        de la base de datos ya lo descarta.
        """


class InMemoryAuditSink(AuditSink):
    """
    Sink de auditoría en memoria.

    `disponible = False` simula una caída del sink: cada registro
    lanza AuditUnavailableError.
    """

    def __init__(self):
        self._registros: List[RegistroAuditoria] = []
        self._lock = threading.Lock()
        self.disponible = True

    def registrar(self, registro: RegistroAuditoria) -> None:
        if not self.disponible:
            raise AuditUnavailableError(
                f"Sink de auditoría no disponible para '{registro.accion}'"
            )
        with self._lock:
            self._registros.append(registro)
        logger.debug("Auditoría registrada: %s %s", registro.accion, registro.entidad_id)

    def descartar(self, registro_id: str) -> None:
        """Elimina un registro escrito por una unidad de trabajo revertida."""
        with self._lock:
            self._registros = [r for r in self._registros if r.id != registro_id]

    def registros(self, entidad_id: str = None) -> List[RegistroAuditoria]:
        with self._lock:
            if entidad_id is None:
                return list(self._registros)
            return [r for r in self._registros if r.entidad_id == entidad_id]

    def clear(self) -> None:
        with self._lock:
            self._registros.clear()
