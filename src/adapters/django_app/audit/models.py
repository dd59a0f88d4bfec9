"""
Django Model del registro de auditoría.

Los registros se insertan en la misma transacción que la transición
del ticket; no se actualizan ni se borran.
"""

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class RegistroAuditoriaModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)
    actor_id = models.CharField(max_length=100)
    accion = models.CharField(max_length=50, db_index=True)
    entidad = models.CharField(max_length=50)
    entidad_id = models.CharField(max_length=36, db_index=True)
    detalle = models.JSONField(default=dict, encoder=DjangoJSONEncoder)
    registrado_en = models.DateTimeField()

    class Meta:
        db_table = 'registros_auditoria'
        ordering = ['registrado_en']

    def __str__(self) -> str:
        return f"{self.accion} {self.entidad}:{self.entidad_id} por {self.actor_id}"
