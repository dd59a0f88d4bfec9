"""
Componentes de Dominio Compartidos.

Contiene los componentes comunes a todos los dominios:
- Excepciones de dominio
- Interfaces (Ports): UnitOfWork, EventPublisher, AuditSink, Clock
- Clase base de Domain Events y registro de auditoría
- Identidad del llamador y capacidades
"""

from .exceptions import (
    DomainException,
    ValidationError,
    EntityNotFoundError,
    BusinessRuleViolationError,
    InvalidTransitionError,
    NoActiveRateError,
    InsufficientStockError,
    MaxQuantityExceededError,
    EmptyCancelReasonError,
    NoOpenPauseError,
    AlreadyPausedError,
    PermissionDeniedError,
    ConcurrencyError,
    AuditUnavailableError,
)
from .audit import AuditSink, InMemoryAuditSink, RegistroAuditoria
from .events import DomainEvent
from .interfaces import Clock, EventPublisher, UnitOfWork
from .clock import FixedClock, SystemClock
from .identity import Capacidad, Identidad, PoliticaRoles

__all__ = [
    "DomainException",
    "ValidationError",
    "EntityNotFoundError",
    "BusinessRuleViolationError",
    "InvalidTransitionError",
    "NoActiveRateError",
    "InsufficientStockError",
    "MaxQuantityExceededError",
    "EmptyCancelReasonError",
    "NoOpenPauseError",
    "AlreadyPausedError",
    "PermissionDeniedError",
    "ConcurrencyError",
    "AuditUnavailableError",
    "AuditSink",
    "InMemoryAuditSink",
    "RegistroAuditoria",
    "DomainEvent",
    "Clock",
    "EventPublisher",
    "UnitOfWork",
    "FixedClock",
    "SystemClock",
    "Capacidad",
    "Identidad",
    "PoliticaRoles",
]
