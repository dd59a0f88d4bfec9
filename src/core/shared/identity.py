"""
Identidad del llamador y capacidades.

La autenticación queda fuera del motor: cada operación recibe una
Identidad ya resuelta. Las capacidades se derivan del rol mediante una
PoliticaRoles configurable.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Mapping

from .exceptions import PermissionDeniedError


class Capacidad(str, Enum):
    """Capacidades que el motor verifica."""

    CANCELAR = "cancelar"
    MODIFICAR_OTROS = "modificar_otros"


DEFAULT_CAPACIDADES_POR_ROL: Dict[str, FrozenSet[str]] = {
    "operador": frozenset(),
    "supervisor": frozenset({Capacidad.CANCELAR.value, Capacidad.MODIFICAR_OTROS.value}),
    "admin": frozenset({Capacidad.CANCELAR.value, Capacidad.MODIFICAR_OTROS.value}),
    "root": frozenset({Capacidad.CANCELAR.value, Capacidad.MODIFICAR_OTROS.value}),
}


@dataclass(frozen=True)
class Identidad:
    """
    Identidad del llamador.

    Attributes:
        usuario_id: ID del usuario (queda en auditoría y en el ticket)
        rol: Rol declarado (operador, supervisor, admin, root)
        capacidades: Capacidades efectivas
    """

    usuario_id: str
    rol: str = "operador"
    capacidades: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if not self.usuario_id:
            raise ValueError("usuario_id es obligatorio")
        object.__setattr__(
            self,
            "capacidades",
            frozenset(c.value if isinstance(c, Capacidad) else c for c in self.capacidades),
        )

    def puede(self, capacidad: Capacidad) -> bool:
        return capacidad.value in self.capacidades

    def exigir(self, capacidad: Capacidad) -> None:
        """
        Raises:
            PermissionDeniedError: Si la identidad no tiene la capacidad
        """
        if not self.puede(capacidad):
            raise PermissionDeniedError(self.usuario_id, capacidad.value)


class PoliticaRoles:
    """
    Traduce roles a capacidades según configuración.

    Example:
        politica = PoliticaRoles({"operador": [], "supervisor": ["cancelar"]})
        identidad = politica.identidad("u-1", "supervisor")
    """

    def __init__(self, capacidades_por_rol: Mapping[str, Iterable[str]] = None):
        origen = capacidades_por_rol if capacidades_por_rol is not None else DEFAULT_CAPACIDADES_POR_ROL
        self._capacidades = {
            rol: frozenset(caps) for rol, caps in origen.items()
        }

    def capacidades(self, rol: str) -> FrozenSet[str]:
        return self._capacidades.get(rol, frozenset())

    def identidad(self, usuario_id: str, rol: str) -> Identidad:
        return Identidad(usuario_id=usuario_id, rol=rol, capacidades=self.capacidades(rol))
