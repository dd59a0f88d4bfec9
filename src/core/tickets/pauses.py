"""
PauseTracker - intervalos de pausa de un ticket.

Mantiene como máximo una pausa abierta. Los intervalos nunca se borran:
el historial completo entra en el cálculo del tiempo.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple
import uuid

from src.core.shared.exceptions import (
    AlreadyPausedError,
    NoOpenPauseError,
    ValidationError,
)


@dataclass
class PausaIntervalo:
    """
    Intervalo de pausa.

    Attributes:
        id: Identificador único
        inicio: Comienzo de la pausa
        fin: Fin de la pausa (None mientras está abierta)
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    inicio: Optional[datetime] = None
    fin: Optional[datetime] = None

    @property
    def abierta(self) -> bool:
        return self.fin is None


class PauseTracker:
    """
    Gestiona la lista de pausas de un ticket.

    Opera sobre la lista del propio ticket, que sigue siendo la dueña
    de los datos.

    Example:
        tracker = PauseTracker(ticket.pausas, ticket.id)
        tracker.abrir(ahora)
        tracker.cerrar(ahora + timedelta(minutes=10))
    """

    def __init__(self, pausas: List[PausaIntervalo], ticket_id: str = ""):
        self._pausas = pausas
        self._ticket_id = ticket_id

    @property
    def pausa_abierta(self) -> Optional[PausaIntervalo]:
        for pausa in self._pausas:
            if pausa.abierta:
                return pausa
        return None

    def abrir(self, ahora: datetime) -> PausaIntervalo:
        """
        Abre una pausa.

        Raises:
            AlreadyPausedError: Si ya hay una pausa abierta
        """
        if self.pausa_abierta is not None:
            raise AlreadyPausedError(self._ticket_id)
        pausa = PausaIntervalo(inicio=ahora)
        self._pausas.append(pausa)
        return pausa

    def cerrar(self, ahora: datetime) -> PausaIntervalo:
        """
        Cierra la pausa abierta.

        Raises:
            NoOpenPauseError: Si no hay pausa abierta
            ValidationError: Si `ahora` es anterior al inicio de la pausa
        """
        pausa = self.pausa_abierta
        if pausa is None:
            raise NoOpenPauseError(self._ticket_id)
        if ahora < pausa.inicio:
            raise ValidationError(
                "El fin de la pausa no puede ser anterior a su inicio",
                field="fin",
            )
        pausa.fin = ahora
        return pausa

    def intervalos_hasta(self, as_of: datetime) -> List[Tuple[datetime, datetime]]:
        """
        Pares (inicio, fin) con la pausa abierta cerrada en `as_of`.

        No modifica ninguna pausa.
        """
        return [
            (pausa.inicio, pausa.fin if pausa.fin is not None else as_of)
            for pausa in self._pausas
        ]
