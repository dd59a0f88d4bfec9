"""
Django Models del dominio de Facturación.

- TarifaModel: definiciones de tarifa por hora
- ClienteModel: clientes con membresía y descuento

`bloque_minutos` y `gracia_minutos` vacíos toman los valores de
TARIFA_BLOQUE_MINUTOS y TARIFA_GRACIA_MINUTOS.
"""

from django.db import models
from django.utils import timezone


class TipoRedondeoChoices(models.TextChoices):
    ARRIBA = 'arriba', 'Arriba'
    ABAJO = 'abajo', 'Abajo'
    ESTANDAR = 'estandar', 'Estándar'


class MembresiaChoices(models.TextChoices):
    NINGUNA = 'ninguna', 'Ninguna'
    BASICA = 'basica', 'Básica'
    PREMIUM = 'premium', 'Premium'
    VIP = 'vip', 'VIP'


class TarifaModel(models.Model):
    """Tarifa por hora. Una vez usada por un ticket no se edita."""

    id = models.CharField(max_length=36, primary_key=True, editable=False)
    nombre = models.CharField(max_length=100)
    precio_por_hora = models.DecimalField(max_digits=10, decimal_places=2)
    minutos_minimos = models.PositiveIntegerField(default=60)
    tipo_redondeo = models.CharField(
        max_length=20,
        choices=TipoRedondeoChoices.choices,
        default=TipoRedondeoChoices.ARRIBA,
    )
    activo = models.BooleanField(default=True, db_index=True)
    aplicable_desde = models.TimeField(null=True, blank=True)
    aplicable_hasta = models.TimeField(null=True, blank=True)
    bloque_minutos = models.PositiveIntegerField(null=True, blank=True)
    gracia_minutos = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'tarifas_hora'
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"{self.nombre} ({self.precio_por_hora}/h)"


class ClienteModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)
    codigo = models.CharField(max_length=50, unique=True)
    nombre = models.CharField(max_length=200)
    membresia = models.CharField(
        max_length=20,
        choices=MembresiaChoices.choices,
        default=MembresiaChoices.NINGUNA,
    )
    descuento_porcentaje = models.DecimalField(max_digits=5, decimal_places=2, default=0)

    class Meta:
        db_table = 'clientes'
        ordering = ['nombre']

    def __str__(self) -> str:
        return f"{self.codigo} - {self.nombre}"
