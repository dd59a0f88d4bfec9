"""
Django Models del dominio de Tickets.

Estos models son ADAPTERS: implementan la persistencia de las
entidades definidas en src/core/tickets/entities.py.

IMPORTANTE:
- Los models NO contienen lógica de negocio
- La lógica de negocio vive en las Entities del Core
- Models y Entities se convierten mediante Mappers

Tablas:
- TicketModel: tickets
- PausaModel: intervalos de pausa de cada ticket
- TicketServicioModel: servicios agregados a cada ticket
"""

from django.db import models
from django.utils import timezone


class TicketStatusChoices(models.TextChoices):
    """Choices de estado (espeja TicketStatus del Core)."""
    ACTIVO = 'activo', 'Activo'
    PAUSADO = 'pausado', 'Pausado'
    CERRADO = 'cerrado', 'Cerrado'
    CANCELADO = 'cancelado', 'Cancelado'


class MetodoPagoChoices(models.TextChoices):
    """Choices de método de pago (espeja MetodoPago del Core)."""
    EFECTIVO = 'efectivo', 'Efectivo'
    TARJETA = 'tarjeta', 'Tarjeta'
    TRANSFERENCIA = 'transferencia', 'Transferencia'
    OTRO = 'otro', 'Otro'


class TicketModel(models.Model):
    """
    Model Django de persistencia de Tickets.

    `version` sostiene el compare-and-set: el repositorio actualiza
    con `WHERE version = <leída>` y la incrementa en la misma sentencia.
    """

    # Primary Key - UUID generado por la Entity
    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="UUID único del ticket"
    )

    codigo = models.CharField(
        max_length=32,
        unique=True,
        help_text="Código legible (TK-YYYYMMDD-XXXXXX)"
    )

    # Datos principales
    cliente_id = models.CharField(
        max_length=36,
        db_index=True,
        help_text="ID del cliente"
    )

    personas = models.PositiveIntegerField(
        default=1,
        help_text="Número de personas"
    )

    tarifa_id = models.CharField(
        max_length=36,
        help_text="Tarifa fijada al abrir el ticket"
    )

    notas = models.TextField(
        null=True,
        blank=True,
    )

    # Estado
    estado = models.CharField(
        max_length=20,
        choices=TicketStatusChoices.choices,
        default=TicketStatusChoices.ACTIVO,
        db_index=True,
        help_text="Estado actual del ticket"
    )

    version = models.PositiveIntegerField(
        default=0,
        help_text="Contador de compare-and-set"
    )

    # Tiempos
    hora_entrada = models.DateTimeField(
        default=timezone.now,
        db_index=True,
    )

    hora_salida = models.DateTimeField(
        null=True,
        blank=True,
    )

    # Operadores (strings: la identidad vive fuera del motor)
    operador_entrada_id = models.CharField(max_length=100)
    operador_salida_id = models.CharField(max_length=100, null=True, blank=True)

    # Cobro
    minutos_cobrados = models.PositiveIntegerField(null=True, blank=True)
    monto_tiempo = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    descuento_porcentaje = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    monto_descuento = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    monto_servicios = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    monto_total = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    metodo_pago = models.CharField(
        max_length=20,
        choices=MetodoPagoChoices.choices,
        null=True,
        blank=True,
    )

    # Cancelación
    motivo_cancelacion = models.TextField(null=True, blank=True)

    actualizado_en = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tickets'
        verbose_name = 'Ticket'
        verbose_name_plural = 'Tickets'
        ordering = ['-hora_entrada']
        indexes = [
            models.Index(fields=['estado', 'hora_entrada'], name='idx_ticket_estado_entrada'),
        ]

    def __str__(self) -> str:
        return f"{self.codigo} ({self.estado})"


class PausaModel(models.Model):
    """Intervalo de pausa. Nunca se borra."""

    id = models.CharField(max_length=36, primary_key=True, editable=False)

    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='pausas',
    )

    inicio = models.DateTimeField()
    fin = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'ticket_pausas'
        ordering = ['inicio']


class TicketServicioModel(models.Model):
    """Línea de servicio con precio copiado del catálogo."""

    id = models.CharField(max_length=36, primary_key=True, editable=False)

    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='servicios',
    )

    servicio_id = models.CharField(max_length=36, db_index=True)
    servicio_nombre = models.CharField(max_length=200)
    cantidad = models.PositiveIntegerField()
    precio_unitario = models.DecimalField(max_digits=10, decimal_places=2)
    monto_total = models.DecimalField(max_digits=10, decimal_places=2)
    controla_inventario = models.BooleanField(default=False)
    agregado_en = models.DateTimeField()

    class Meta:
        db_table = 'ticket_servicios'
        ordering = ['agregado_en']
