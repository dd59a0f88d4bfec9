"""
Relojes del motor.

SystemClock se usa en producción; FixedClock permite a los tests y al
cálculo de previsualización fijar el instante de referencia.
"""

import threading
from datetime import datetime, timedelta, timezone


class SystemClock:
    """Reloj del sistema en UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Reloj controlado manualmente.

    Example:
        clock = FixedClock(datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc))
        clock.advance(minutes=90)
    """

    def __init__(self, instante: datetime):
        if instante.tzinfo is None:
            raise ValueError("FixedClock requiere un datetime con zona horaria")
        self._instante = instante
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._instante

    def set(self, instante: datetime) -> None:
        with self._lock:
            self._instante = instante

    def advance(self, **kwargs) -> datetime:
        """Avanza el reloj; acepta los mismos argumentos que timedelta."""
        with self._lock:
            self._instante = self._instante + timedelta(**kwargs)
            return self._instante
