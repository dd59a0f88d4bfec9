"""
Django Models del dominio de Inventario.

- ServicioModel: catálogo de servicios con stock opcional

El stock sólo se modifica con UPDATE condicional (compare-and-set);
la restricción de base de datos impide valores negativos.
"""

from django.db import models


class TipoCostoChoices(models.TextChoices):
    FIJO = 'fijo', 'Fijo'
    POR_TIEMPO = 'por_tiempo', 'Por tiempo'
    PAQUETE = 'paquete', 'Paquete'


class ServicioModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)
    nombre = models.CharField(max_length=200)
    precio = models.DecimalField(max_digits=10, decimal_places=2)
    tipo_costo = models.CharField(
        max_length=20,
        choices=TipoCostoChoices.choices,
        default=TipoCostoChoices.FIJO,
    )
    requiere_inventario = models.BooleanField(default=False)
    stock_actual = models.IntegerField(null=True, blank=True)
    maximo_por_ticket = models.PositiveIntegerField(null=True, blank=True)
    activo = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = 'servicios'
        ordering = ['nombre']
        constraints = [
            models.CheckConstraint(
                check=models.Q(stock_actual__isnull=True) | models.Q(stock_actual__gte=0),
                name='servicio_stock_no_negativo',
            ),
        ]

    def __str__(self) -> str:
        return self.nombre
