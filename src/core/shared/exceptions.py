"""
Excepciones de Dominio del motor de tickets de la pista.

Este módulo define excepciones específicas del dominio que permiten
comunicar errores de forma clara y tipada entre las capas.

Jerarquía:
    DomainException (base)
    ├── ValidationError (validación de entrada)
    │   └── EmptyCancelReasonError
    ├── EntityNotFoundError (entidad no existe)
    ├── BusinessRuleViolationError (regla de negocio violada)
    │   ├── InvalidTransitionError
    │   ├── NoActiveRateError
    │   ├── InsufficientStockError
    │   ├── MaxQuantityExceededError
    │   ├── AlreadyPausedError
    │   └── NoOpenPauseError
    ├── PermissionDeniedError (identidad sin capacidad)
    ├── ConcurrencyError (conflicto de versión)
    └── AuditUnavailableError (sink de auditoría caído)

Ningún error es fatal para el proceso: cada uno está acotado a una
única operación sobre un ticket o servicio.
"""


class DomainException(Exception):
    """
    Excepción base para todos los errores de dominio.

    Todas las excepciones específicas del dominio heredan de esta clase,
    lo que permite capturar cualquier error de dominio de forma genérica.

    Example:
        try:
            ticket.cerrar(...)
        except DomainException as e:
            logger.error(f"Error de dominio: {e}")
    """

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializa la excepción a diccionario (útil para adapters)."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Error de validación de datos de entrada.

    Example:
        if personas < 1:
            raise ValidationError("Debe haber al menos una persona", field="personas")
    """

    def __init__(self, message: str, field: str = None, code: str = None):
        self.field = field
        if code is None:
            code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class EntityNotFoundError(DomainException):
    """
    Entidad no encontrada en el repositorio.

    Example:
        ticket = repo.get_by_id(ticket_id)
        if not ticket:
            raise EntityNotFoundError(f"Ticket {ticket_id} no encontrado")
    """

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class BusinessRuleViolationError(DomainException):
    """
    Violación de una regla de negocio.

    Las subclases fijan su propio `code` para que los adapters puedan
    distinguirlas sin comparar mensajes.
    """

    def __init__(self, message: str, rule: str = None, code: str = None):
        self.rule = rule
        super().__init__(message, code or "BUSINESS_RULE_VIOLATION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class InvalidTransitionError(BusinessRuleViolationError):
    """
    Transición de estado no permitida desde el estado actual del ticket.

    Siempre se informa al llamador; nunca se reintenta.
    """

    def __init__(self, estado_actual: str, operacion: str, ticket_id: str = None):
        self.estado_actual = estado_actual
        self.operacion = operacion
        self.ticket_id = ticket_id
        super().__init__(
            f"No es posible {operacion} un ticket en estado '{estado_actual}'",
            rule="transicion_invalida",
            code="INVALID_TRANSITION",
        )

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["estado_actual"] = self.estado_actual
        result["operacion"] = self.operacion
        if self.ticket_id:
            result["ticket_id"] = self.ticket_id
        return result


class NoActiveRateError(BusinessRuleViolationError):
    """No hay una tarifa utilizable al abrir el ticket (problema de configuración)."""

    def __init__(self, message: str = "No hay una tarifa activa configurada", tarifa_id: str = None):
        self.tarifa_id = tarifa_id
        super().__init__(message, rule="tarifa_activa_obligatoria", code="NO_ACTIVE_RATE")


class InsufficientStockError(BusinessRuleViolationError):
    """
    Stock insuficiente para reservar la cantidad pedida.

    Puede ser agotamiento real o una reserva concurrente que ganó.
    El llamador puede reintentar con otra cantidad; el motor no reintenta.
    """

    def __init__(self, servicio_id: str, solicitado: int, disponible: int):
        self.servicio_id = servicio_id
        self.solicitado = solicitado
        self.disponible = disponible
        super().__init__(
            f"Stock insuficiente: solicitado {solicitado}, disponible {disponible}",
            rule="stock_no_negativo",
            code="INSUFFICIENT_STOCK",
        )

    def to_dict(self) -> dict:
        result = super().to_dict()
        result.update({
            "servicio_id": self.servicio_id,
            "solicitado": self.solicitado,
            "disponible": self.disponible,
        })
        return result


class MaxQuantityExceededError(BusinessRuleViolationError):
    """La cantidad acumulada del servicio supera el máximo por ticket."""

    def __init__(self, servicio_id: str, maximo: int, solicitado: int):
        self.servicio_id = servicio_id
        self.maximo = maximo
        self.solicitado = solicitado
        super().__init__(
            f"Máximo de {maximo} por ticket; se solicitaron {solicitado}",
            rule="maximo_por_ticket",
            code="MAX_QUANTITY_EXCEEDED",
        )


class AlreadyPausedError(BusinessRuleViolationError):
    """Ya existe una pausa abierta. Indica un bug si llega a observarse."""

    def __init__(self, ticket_id: str):
        self.ticket_id = ticket_id
        super().__init__(
            f"El ticket {ticket_id} ya tiene una pausa abierta",
            rule="una_pausa_abierta",
            code="ALREADY_PAUSED",
        )


class NoOpenPauseError(BusinessRuleViolationError):
    """No existe pausa abierta para cerrar. Indica un bug si llega a observarse."""

    def __init__(self, ticket_id: str):
        self.ticket_id = ticket_id
        super().__init__(
            f"El ticket {ticket_id} no tiene una pausa abierta",
            rule="una_pausa_abierta",
            code="NO_OPEN_PAUSE",
        )


class EmptyCancelReasonError(ValidationError):
    """La cancelación exige un motivo no vacío."""

    def __init__(self):
        super().__init__(
            "El motivo de cancelación es obligatorio",
            field="motivo",
            code="EMPTY_CANCEL_REASON",
        )


class PermissionDeniedError(DomainException):
    """La identidad del llamador no tiene la capacidad requerida."""

    def __init__(self, usuario_id: str, capacidad: str):
        self.usuario_id = usuario_id
        self.capacidad = capacidad
        super().__init__(
            f"El usuario {usuario_id} no tiene la capacidad '{capacidad}'",
            "PERMISSION_DENIED",
        )


class ConcurrencyError(DomainException):
    """
    Error de concurrencia / conflicto de versión.

    Lanzada cuando un compare-and-set falla porque otro proceso
    modificó la entidad. El llamador debe volver a consultar el estado.

    Example:
        if stored.version != entity.version:
            raise ConcurrencyError("Entidad modificada por otro proceso")
    """

    def __init__(self, message: str):
        super().__init__(message, "CONCURRENCY_ERROR")


class AuditUnavailableError(DomainException):
    """
    El sink de auditoría no aceptó el registro.

    La operación completa falla: no se pierde el rastro de auditoría.
    """

    def __init__(self, message: str):
        super().__init__(message, "AUDIT_UNAVAILABLE")
